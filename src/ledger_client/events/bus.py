"""Event bus - one poller per topic, fanned out to bounded subscriber channels."""

from __future__ import annotations

import logging

from ledger_client.errors import LedgerClientError
from ledger_client.events.channel import DeliveryChannel
from ledger_client.events.poller import EventPoller
from ledger_client.events.subscription import Subscription
from ledger_client.interfaces.network import NetworkClient
from ledger_client.models.config import EventsConfig
from ledger_client.models.events import EventTopic

log = logging.getLogger(__name__)


class EventBus:
    """Multiplexes subscriptions onto shared per-topic pollers.

    All subscriptions to a topic share one EventPoller and one cursor. A
    subscriber whose channel is full loses its oldest buffered record and
    is marked LAGGED; other subscribers and the cursor are unaffected.
    """

    def __init__(self, network: NetworkClient, config: EventsConfig | None = None) -> None:
        self._network = network
        self._cfg = config or EventsConfig()
        self._pollers: dict[EventTopic, EventPoller] = {}
        self._closed = False

    @property
    def topics(self) -> list[EventTopic]:
        return [t for t, p in self._pollers.items() if not p.closed]

    def poller_for(self, topic: EventTopic) -> EventPoller | None:
        poller = self._pollers.get(topic)
        if poller is None or poller.closed:
            return None
        return poller

    async def subscribe(
        self,
        topic: EventTopic,
        *,
        start_after: int | None = None,
        capacity: int | None = None,
    ) -> Subscription:
        """Attach a new subscription to ``topic``, starting its poller if needed.

        ``start_after`` seeds the cursor only when this call creates the
        topic's poller; later subscribers join at the shared cursor.
        """
        if self._closed:
            raise LedgerClientError("event bus is closed")

        poller = self.poller_for(topic)
        created = poller is None
        if poller is None:
            poller = EventPoller(
                self._network, topic, self._cfg,
                start_after=start_after, on_close=self._forget,
            )
            self._pollers[topic] = poller
        elif start_after is not None and start_after != poller.cursor.last_delivered:
            log.debug(
                "Topic %s already polled at cursor %s, ignoring start_after=%d",
                topic, poller.cursor.last_delivered, start_after,
            )

        channel = DeliveryChannel(capacity or self._cfg.channel_capacity)
        subscription = Subscription(topic, channel, self)
        poller.attach(subscription)
        if created:
            poller.start()

        log.info(
            "Subscription %d attached to %s (%d subscribers)",
            subscription.id, topic, len(poller.subscriptions),
        )
        return subscription

    def _forget(self, poller: EventPoller) -> None:
        """Drop a poller that closed itself (retention gap, failure or close)."""
        if self._pollers.get(poller.topic) is poller:
            del self._pollers[poller.topic]

    async def unsubscribe(self, subscription: Subscription) -> None:
        """Detach a subscription; the last one out closes the topic's poller."""
        subscription.terminate()
        poller = self._pollers.get(subscription.topic)
        if poller is None or not poller.has(subscription):
            return

        remaining = poller.detach(subscription)
        log.info(
            "Subscription %d detached from %s (%d remaining)",
            subscription.id, subscription.topic, remaining,
        )
        if remaining == 0:
            await poller.close()

    async def close(self) -> None:
        """Close every poller and subscription."""
        self._closed = True
        pollers, self._pollers = list(self._pollers.values()), {}
        for poller in pollers:
            await poller.close()
