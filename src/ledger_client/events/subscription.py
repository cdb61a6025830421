"""Subscription handle returned by the event bus."""

from __future__ import annotations

import itertools
import logging
from enum import Enum
from typing import TYPE_CHECKING

from ledger_client.errors import ChannelClosed
from ledger_client.events.channel import DeliveryChannel
from ledger_client.models.events import EventRecord, EventTopic

if TYPE_CHECKING:
    from ledger_client.events.bus import EventBus

log = logging.getLogger(__name__)

_ids = itertools.count(1)


class SubscriptionState(str, Enum):
    ACTIVE = "active"
    LAGGED = "lagged"  # at least one record was dropped for this subscriber
    CLOSED = "closed"


class Subscription:
    """A caller-owned view onto one topic's event stream.

    Iterate with ``async for record in subscription``. Iteration ends when
    the subscription is closed; a terminal condition such as
    CursorGapDetected is raised from the iterator instead.
    """

    def __init__(self, topic: EventTopic, channel: DeliveryChannel, bus: EventBus) -> None:
        self.id = next(_ids)
        self.topic = topic
        self._channel = channel
        self._bus = bus
        self._lagged = False

    @property
    def state(self) -> SubscriptionState:
        if self._channel.closed:
            return SubscriptionState.CLOSED
        if self._lagged:
            return SubscriptionState.LAGGED
        return SubscriptionState.ACTIVE

    @property
    def lagged(self) -> bool:
        return self._lagged

    @property
    def dropped(self) -> int:
        return self._channel.dropped

    @property
    def pending(self) -> int:
        return len(self._channel)

    def acknowledge_lag(self) -> int:
        """Clear the LAGGED mark. Returns the total number of dropped records."""
        self._lagged = False
        return self._channel.dropped

    # ── Poller side ────────────────────────────────────────

    def deliver(self, record: EventRecord) -> None:
        if not self._channel.push(record):
            if not self._lagged:
                log.warning(
                    "Subscription %d on %s lagging, dropping oldest events",
                    self.id, self.topic,
                )
            self._lagged = True

    def terminate(self, error: BaseException | None = None) -> None:
        self._channel.close(error)

    # ── Consumer side ──────────────────────────────────────

    async def get(self) -> EventRecord:
        """Next record. Raises ChannelClosed, or the terminal error, when done."""
        return await self._channel.get()

    def get_nowait(self) -> EventRecord | None:
        return self._channel.get_nowait()

    async def unsubscribe(self) -> None:
        await self._bus.unsubscribe(self)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> EventRecord:
        try:
            return await self._channel.get()
        except ChannelClosed:
            raise StopAsyncIteration from None

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.unsubscribe()

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, topic={self.topic}, state={self.state.value})"
