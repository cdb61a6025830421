"""Data models for ledger_client."""

from ledger_client.models.address import Address
from ledger_client.models.config import ClientConfig, EventsConfig, SubmissionConfig
from ledger_client.models.events import EventRecord, EventTopic
from ledger_client.models.transactions import (
    ContractCallSpec,
    EntryFunctionAbi,
    NativeTransfer,
    Payload,
    SignedTransaction,
    SubmissionResult,
    SubmissionStatus,
    SubmitResponse,
    TransactionStatus,
    UnsignedTransaction,
)

__all__ = [
    "Address",
    "ClientConfig", "EventsConfig", "SubmissionConfig",
    "EventRecord", "EventTopic",
    "ContractCallSpec", "EntryFunctionAbi", "NativeTransfer", "Payload",
    "UnsignedTransaction", "SignedTransaction",
    "SubmitResponse", "SubmissionResult", "SubmissionStatus", "TransactionStatus",
]
