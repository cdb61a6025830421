"""Exception taxonomy for ledger_client."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ledger_client.models.events import EventTopic


class RejectionReason(str, Enum):
    """Why the node refused a submitted transaction."""

    SEQUENCE_CONFLICT = "sequence_conflict"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SIMULATION_FAILED = "simulation_failed"
    OTHER = "other"


class LedgerClientError(Exception):
    """Base class for all errors raised by ledger_client."""


class InvalidSpec(LedgerClientError):
    """A call or transfer is structurally malformed. Never retried."""


class SigningError(LedgerClientError):
    """The key material is unavailable (closed) or cannot sign this transaction."""


class NetworkError(LedgerClientError):
    """Transport failure or unexpected node response."""


class SequenceConflict(LedgerClientError):
    """The node rejected a transaction because its sequence number is stale."""

    def __init__(self, sequence_number: int, message: str = "") -> None:
        super().__init__(message or f"sequence number {sequence_number} rejected")
        self.sequence_number = sequence_number


class SubmissionFailed(LedgerClientError):
    """Submission gave up after the bounded number of sequence-conflict retries."""

    def __init__(
        self,
        message: str,
        reason: RejectionReason | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.attempts = attempts


class GapBeyondRetention(LedgerClientError):
    """Raised by a network client when events after a cursor have been pruned."""

    def __init__(self, message: str = "", earliest_available: int | None = None) -> None:
        super().__init__(message or "requested events are beyond node retention")
        self.earliest_available = earliest_available


class CursorGapDetected(LedgerClientError):
    """Delivered to subscribers when their topic can no longer resume from its cursor.

    The subscriber decides whether to resubscribe from ``earliest_available``.
    """

    def __init__(
        self,
        topic: "EventTopic",
        cursor: int | None,
        earliest_available: int | None = None,
    ) -> None:
        super().__init__(
            f"event gap on {topic}: cursor={cursor} earliest={earliest_available}"
        )
        self.topic = topic
        self.cursor = cursor
        self.earliest_available = earliest_available


class ChannelClosed(LedgerClientError):
    """The subscription's delivery channel is closed and drained."""
