"""Bounded ring buffer for completed span snapshots."""

from __future__ import annotations

import threading
from collections import deque

from tracecore._types import SpanData


class RingBuffer:
    """Thread-safe ring buffer backed by collections.deque.

    When full, the oldest span is dropped and counted.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._buffer: deque[SpanData] = deque(maxlen=maxsize)
        self._lock = threading.Lock()
        self._drop_count: int = 0
        self._maxsize = maxsize

    def enqueue(self, span: SpanData) -> None:
        """Add a span to the buffer. Oldest item is dropped if full."""
        with self._lock:
            if len(self._buffer) == self._maxsize:
                self._drop_count += 1
            self._buffer.append(span)

    def drain(self, max_items: int) -> list[SpanData]:
        """Remove and return up to max_items spans from the buffer."""
        with self._lock:
            count = min(max_items, len(self._buffer))
            return [self._buffer.popleft() for _ in range(count)]

    @property
    def drop_count(self) -> int:
        """Number of spans dropped due to buffer overflow."""
        with self._lock:
            return self._drop_count

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
