"""ledger_client - wallet-controlled transaction submission and on-chain event streaming."""

from ledger_client.client import LedgerClient
from ledger_client.config import load_config
from ledger_client.errors import (
    ChannelClosed,
    CursorGapDetected,
    GapBeyondRetention,
    InvalidSpec,
    LedgerClientError,
    NetworkError,
    RejectionReason,
    SequenceConflict,
    SigningError,
    SubmissionFailed,
)
from ledger_client.events import EventBus, Subscription, SubscriptionState
from ledger_client.models import (
    Address,
    ClientConfig,
    ContractCallSpec,
    EventRecord,
    EventTopic,
    NativeTransfer,
    SubmissionResult,
    SubmissionStatus,
)
from ledger_client.transactions import SubmissionCoordinator
from ledger_client.wallet import KeyMaterial

__version__ = "0.1.0"

__all__ = [
    "LedgerClient", "load_config",
    "KeyMaterial", "Address",
    "ContractCallSpec", "NativeTransfer",
    "SubmissionCoordinator", "SubmissionResult", "SubmissionStatus",
    "EventBus", "EventTopic", "EventRecord", "Subscription", "SubscriptionState",
    "LedgerClientError", "InvalidSpec", "SigningError", "NetworkError",
    "SequenceConflict", "SubmissionFailed", "GapBeyondRetention",
    "CursorGapDetected", "ChannelClosed", "RejectionReason",
    "ClientConfig",
]
