"""NetworkClient protocol - the node operations consumed by the core."""

from __future__ import annotations

from typing import Any, Protocol

from ledger_client.models.address import Address
from ledger_client.models.events import EventRecord, EventTopic
from ledger_client.models.transactions import (
    ContractCallSpec,
    SignedTransaction,
    SubmitResponse,
    TransactionStatus,
)


class NetworkClient(Protocol):
    """Call/response access to a ledger node.

    Transport failures raise NetworkError. fetch_events raises
    GapBeyondRetention when the node no longer serves the requested range.
    """

    async def fetch_sequence_number(self, address: Address) -> int:
        """Current on-chain sequence number of the account."""
        ...

    async def submit_transaction(self, signed: SignedTransaction) -> SubmitResponse:
        """Send signed bytes. Rejections are returned, not raised."""
        ...

    async def fetch_current_time(self) -> int:
        """Network time in unix seconds, used for expiration checks."""
        ...

    async def fetch_chain_id(self) -> int:
        """Chain id the node signs for, from its ledger info."""
        ...

    async def fetch_events(
        self, topic: EventTopic, after_sequence: int | None, limit: int
    ) -> list[EventRecord]:
        """Events with sequence number > after_sequence, ascending. May be empty."""
        ...

    async def read_resource(self, address: Address, resource_type: str) -> dict[str, Any] | None:
        """Resource data, or None when the account has no such resource."""
        ...

    async def view(self, call: ContractCallSpec) -> list[Any]:
        """Run a read-only view function."""
        ...

    async def fetch_transaction(self, tx_hash: str) -> TransactionStatus:
        """Look up a transaction by hash. committed=False while pending or unknown."""
        ...

    async def close(self) -> None:
        ...
