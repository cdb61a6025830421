"""Event poller - turns the node's event query API into an ordered push feed."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable

from ledger_client.errors import CursorGapDetected, GapBeyondRetention, NetworkError
from ledger_client.events.cursor import EventCursor
from ledger_client.events.subscription import Subscription
from ledger_client.interfaces.network import NetworkClient
from ledger_client.models.config import EventsConfig
from ledger_client.models.events import EventRecord, EventTopic

log = logging.getLogger(__name__)


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    BACKOFF = "backoff"
    CLOSED = "closed"


class EventPoller:
    """Polls one topic on a timer and fans new events out to its subscriptions.

    Owns the topic's EventCursor. Records that are not strictly newer than
    the cursor are discarded, so every subscriber sees strictly increasing
    sequence numbers. Network errors put the poller into BACKOFF without
    moving the cursor; the next poll re-requests from the same point.
    """

    def __init__(
        self,
        network: NetworkClient,
        topic: EventTopic,
        config: EventsConfig | None = None,
        start_after: int | None = None,
        on_close: Callable[[EventPoller], None] | None = None,
    ) -> None:
        self._network = network
        self._cfg = config or EventsConfig()
        self.topic = topic
        self.cursor = EventCursor(topic, start_after)
        self._subscriptions: list[Subscription] = []
        self._state = PollerState.IDLE
        self._failures = 0
        self._wake = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._on_close = on_close
        self._backlog = False  # last page came back full

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is PollerState.CLOSED

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions)

    # ── Subscribers ────────────────────────────────────────

    def attach(self, subscription: Subscription) -> None:
        if self.closed:
            raise RuntimeError(f"poller for {self.topic} is closed")
        self._subscriptions.append(subscription)

    def detach(self, subscription: Subscription) -> int:
        """Remove a subscription. Returns the number still attached."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        return len(self._subscriptions)

    def has(self, subscription: Subscription) -> bool:
        return subscription in self._subscriptions

    # ── Polling ────────────────────────────────────────────

    def backoff_delay(self) -> float:
        if self._failures == 0:
            return self._cfg.poll_interval
        delay = self._cfg.backoff_base * (2 ** (self._failures - 1))
        return min(delay, self._cfg.backoff_max)

    async def poll_once(self) -> list[EventRecord]:
        """Run one fetch-merge-publish cycle. Returns the records delivered."""
        if self._state in (PollerState.CLOSED, PollerState.POLLING):
            return []

        self._state = PollerState.POLLING
        after = self.cursor.last_delivered
        try:
            events = await self._network.fetch_events(self.topic, after, self._cfg.page_limit)
        except GapBeyondRetention as exc:
            log.error(
                "Event gap on %s at cursor %s (earliest available: %s)",
                self.topic, after, exc.earliest_available,
            )
            self._terminate(CursorGapDetected(self.topic, after, exc.earliest_available))
            return []
        except NetworkError as exc:
            self._failures += 1
            self._backlog = False
            if not self.closed:
                self._state = PollerState.BACKOFF
            log.warning(
                "Event poll failed for %s (%d consecutive): %s; retrying in %.1fs",
                self.topic, self._failures, exc, self.backoff_delay(),
            )
            return []

        delivered: list[EventRecord] = []
        for record in events:
            if not self.cursor.accepts(record.sequence_number):
                log.debug(
                    "Discarding stale event %d on %s (cursor %s)",
                    record.sequence_number, self.topic, self.cursor.last_delivered,
                )
                continue
            self.cursor.advance(record.sequence_number)
            for subscription in list(self._subscriptions):
                subscription.deliver(record)
            delivered.append(record)

        self._failures = 0
        self._backlog = bool(delivered) and len(events) >= self._cfg.page_limit
        if not self.closed:
            self._state = PollerState.IDLE
        if delivered:
            log.info(
                "Delivered %d events on %s to %d subscribers (cursor: %d)",
                len(delivered), self.topic, len(self._subscriptions),
                self.cursor.last_delivered,
            )
        return delivered

    async def _run(self) -> None:
        log.debug("Poller started for %s", self.topic)
        while not self.closed:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                log.error("Poller for %s failed: %s", self.topic, exc, exc_info=True)
                self._terminate(exc)
                break
            if self.closed:
                break
            if self._state is PollerState.IDLE and self._backlog:
                # More events are waiting on the node: fetch the next page now
                await asyncio.sleep(0)
                continue

            delay = self._cfg.poll_interval if self._state is PollerState.IDLE else self.backoff_delay()
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
            if self._state is PollerState.BACKOFF:
                self._state = PollerState.IDLE
        log.debug("Poller stopped for %s", self.topic)

    # ── Lifecycle ──────────────────────────────────────────

    def start(self) -> None:
        if self._task is None and not self.closed:
            self._task = asyncio.create_task(self._run(), name=f"event-poller:{self.topic}")

    def _terminate(self, error: BaseException | None) -> None:
        """Close irreversibly, handing ``error`` to every attached subscriber."""
        if self.closed:
            return
        self._state = PollerState.CLOSED
        self._wake.set()
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.terminate(error)
        if self._on_close is not None:
            self._on_close(self)

    async def close(self) -> None:
        """Stop polling and release the cursor. Remaining subscribers are closed."""
        if not self.closed:
            log.debug("Closing poller for %s at cursor %s", self.topic, self.cursor.last_delivered)
        self._terminate(None)
        task, self._task = self._task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
