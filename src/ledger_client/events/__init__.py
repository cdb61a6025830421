"""Event streaming: cursors, pollers and the subscription bus."""

from ledger_client.events.bus import EventBus
from ledger_client.events.channel import DeliveryChannel
from ledger_client.events.cursor import EventCursor
from ledger_client.events.filters import filter_events, group_events
from ledger_client.events.poller import EventPoller, PollerState
from ledger_client.events.subscription import Subscription, SubscriptionState

__all__ = [
    "EventBus",
    "EventPoller", "PollerState",
    "EventCursor",
    "DeliveryChannel",
    "Subscription", "SubscriptionState",
    "filter_events", "group_events",
]
