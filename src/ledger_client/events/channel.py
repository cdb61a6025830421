"""Bounded per-subscriber delivery channel with drop-oldest overflow."""

from __future__ import annotations

import asyncio
from collections import deque

from ledger_client.errors import ChannelClosed
from ledger_client.models.events import EventRecord


class DeliveryChannel:
    """A bounded FIFO written only by one poller and read by one subscriber.

    push() never blocks. When the buffer is full the oldest record is
    discarded and counted in ``dropped``. close() may carry a terminal
    error that get() raises once the buffer is drained.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("channel capacity must be at least 1")
        self._capacity = capacity
        self._buffer: deque[EventRecord] = deque()
        self._ready = asyncio.Event()
        self._closed = False
        self._error: BaseException | None = None
        self.dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._buffer)

    def push(self, record: EventRecord) -> bool:
        """Buffer a record. Returns False if an older record had to be dropped."""
        if self._closed:
            return True
        overflowed = False
        if len(self._buffer) >= self._capacity:
            self._buffer.popleft()
            self.dropped += 1
            overflowed = True
        self._buffer.append(record)
        self._ready.set()
        return not overflowed

    def close(self, error: BaseException | None = None) -> None:
        if self._closed:
            return
        self._closed = True
        self._error = error
        self._ready.set()

    def get_nowait(self) -> EventRecord | None:
        """Pop a buffered record or return None. Raises once closed and drained."""
        if self._buffer:
            return self._buffer.popleft()
        if self._closed:
            self._raise_terminal()
        return None

    async def get(self) -> EventRecord:
        while True:
            if self._buffer:
                return self._buffer.popleft()
            if self._closed:
                self._raise_terminal()
            self._ready.clear()
            await self._ready.wait()

    def _raise_terminal(self) -> None:
        error, self._error = self._error, None
        if error is not None:
            raise error
        raise ChannelClosed("subscription channel closed")
