"""One-directional conduits between the record source and the orchestrator.

Channels that take part in the same multi-way wait share one condition
variable. A channel with zero capacity is a rendezvous: ``send`` returns
only after the receiver took the item. Closing a channel wakes every
waiter; items already queued stay receivable after close.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from core.constants import DEFAULT_ERROR_BUFFER_SIZE
from core.errors import ChannelClosedError
from core.types import Header, ParseError, SourceRow

T = TypeVar("T")


class Channel(Generic[T]):
    """Thread-safe FIFO conduit with optional buffering."""

    def __init__(self, name: str, condition: threading.Condition, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError(f"Channel {name} capacity must be >= 0, got {capacity}")
        self.name = name
        self.capacity = capacity
        self._condition = condition
        self._items: deque[T] = deque()
        self._closed = False
        self._sent_count = 0
        self._received_count = 0

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    def send(self, item: T) -> None:
        """Deliver one item, blocking while the channel is full.

        Args:
            item: Value to transfer to the receiver.

        Raises:
            ChannelClosedError: If the channel is closed before the item is queued.
        """
        with self._condition:
            while not self._closed and len(self._items) >= max(self.capacity, 1):
                self._condition.wait()
            if self._closed:
                raise ChannelClosedError(f"Cannot send on closed channel '{self.name}'")
            self._items.append(item)
            self._sent_count += 1
            ticket = self._sent_count
            self._condition.notify_all()
            if self.capacity == 0:
                while self._received_count < ticket and not self._closed:
                    self._condition.wait()

    def close(self) -> None:
        """Mark the channel closed and wake all waiters. Idempotent."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def receive(self, timeout: float | None = None) -> "Selection[T] | None":
        """Wait for one item on this channel alone.

        Returns:
            The selection, or None when the timeout expired.
        """
        return select([self], timeout)

    def drain(self) -> list[T]:
        """Remove and return every queued item without blocking."""
        with self._condition:
            items = list(self._items)
            self._items.clear()
            self._received_count += len(items)
            self._condition.notify_all()
            return items

    def _poll(self) -> "Selection[T] | None":
        # Caller holds the shared condition.
        if self._items:
            item = self._items.popleft()
            self._received_count += 1
            self._condition.notify_all()
            return Selection(channel=self, item=item, ok=True)
        if self._closed:
            return Selection(channel=self, item=None, ok=False)
        return None


@dataclass(frozen=True)
class Selection(Generic[T]):
    """Outcome of a multi-way wait.

    Attributes:
        channel: Channel that became ready.
        item: Received value, or None when the channel is closed and empty.
        ok: False when the channel is closed and has nothing left to deliver.
    """

    channel: Channel[T]
    item: T | None
    ok: bool


def select(channels: Sequence[Channel[Any]], timeout: float | None) -> Selection[Any] | None:
    """Wait until one of several channels is ready or the timeout expires.

    Channels are polled in the given order, so earlier channels win when
    several are ready at once.

    Args:
        channels: Channels sharing one condition variable.
        timeout: Seconds to wait, or None to wait forever.

    Returns:
        The first ready selection, or None on timeout.

    Raises:
        ValueError: If channels do not share a condition variable.
    """
    if not channels:
        raise ValueError("select requires at least one channel")
    condition = channels[0]._condition
    if any(channel._condition is not condition for channel in channels):
        raise ValueError("select requires channels created by the same PipelineChannels")
    deadline = None if timeout is None else time.monotonic() + timeout
    with condition:
        while True:
            for channel in channels:
                selection = channel._poll()
                if selection is not None:
                    return selection
            if deadline is None:
                condition.wait()
                continue
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            condition.wait(remaining)


class PipelineChannels:
    """Header, row, and error conduits for one ingest run."""

    def __init__(self, error_buffer_size: int = DEFAULT_ERROR_BUFFER_SIZE) -> None:
        condition = threading.Condition()
        self.header: Channel[Header] = Channel("header", condition)
        self.rows: Channel[SourceRow] = Channel("rows", condition)
        self.errors: Channel[ParseError] = Channel("errors", condition, error_buffer_size)

    def close_stream(self) -> None:
        """Signal end-of-stream on the header and row channels."""
        self.header.close()
        self.rows.close()

    def cancel(self) -> None:
        """Close every channel so a blocked producer stops sending."""
        self.close_stream()
        self.errors.close()
