"""Transaction construction, signing and submission."""

from ledger_client.transactions.builder import TransactionBuilder
from ledger_client.transactions.coordinator import AccountSequenceState, SubmissionCoordinator
from ledger_client.transactions.signer import TransactionSigner

__all__ = [
    "TransactionBuilder",
    "TransactionSigner",
    "SubmissionCoordinator",
    "AccountSequenceState",
]
