"""Per-topic cursor of the last delivered event sequence number."""

from __future__ import annotations

from dataclasses import dataclass

from ledger_client.models.events import EventTopic


@dataclass
class EventCursor:
    """Tracks the last delivered sequence number for one topic.

    ``last_delivered`` is None until the first event is delivered; polling
    then starts from the beginning of what the node still serves.
    """

    topic: EventTopic
    last_delivered: int | None = None

    def accepts(self, sequence_number: int) -> bool:
        return self.last_delivered is None or sequence_number > self.last_delivered

    def advance(self, sequence_number: int) -> None:
        if not self.accepts(sequence_number):
            raise ValueError(
                f"cursor for {self.topic} cannot move from {self.last_delivered} "
                f"to {sequence_number}"
            )
        self.last_delivered = sequence_number
