"""On-chain event models delivered by the event bus."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from ledger_client.models.address import Address


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class EventTopic:
    """One logical event stream: an account plus an event type / handle key."""

    address: Address
    event_type: str  # e.g. "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>/withdraw_events"

    @classmethod
    def of(cls, address: Address | str, event_type: str) -> EventTopic:
        return cls(Address.coerce(address), event_type)

    def __str__(self) -> str:
        return f"{self.address.short()}/{self.event_type}"


@dataclass(frozen=True)
class EventRecord:
    """A single observed event. Sequence numbers increase monotonically per topic."""

    topic: EventTopic
    sequence_number: int
    event_type: str  # Move type of the event struct
    transaction_hash: str = ""
    block_height: int = 0
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Shared by every subscriber, so nested containers are made read-only too
        object.__setattr__(self, "data", _freeze(self.data))

    def data_dict(self) -> dict[str, Any]:
        """Mutable deep copy of ``data`` (lists restored), e.g. for JSON output."""
        return _thaw(self.data)
