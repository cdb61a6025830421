"""Helpers for filtering and grouping delivered events by payload fields."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable

from ledger_client.models.events import EventRecord


def filter_events(events: Iterable[EventRecord], **fields: Any) -> list[EventRecord]:
    """Keep events whose data contains every given field with an equal value."""
    missing = object()
    return [
        e for e in events
        if all(e.data.get(k, missing) == v for k, v in fields.items())
    ]


def group_events(events: Iterable[EventRecord], field: str) -> dict[str, list[EventRecord]]:
    """Group events by a string-valued data field. Events without it are skipped."""
    grouped: dict[str, list[EventRecord]] = defaultdict(list)
    for event in events:
        value = event.data.get(field)
        if isinstance(value, str):
            grouped[value].append(event)
    return dict(grouped)
