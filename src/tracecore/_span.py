"""Span class: the mutable handle returned by the registry."""

from __future__ import annotations

import threading
from collections.abc import Mapping

from tracecore._errors import SpanAlreadyEndedError
from tracecore._types import SpanData, SpanStatus


class Span:
    """A timed unit of work that becomes immutable once ended.

    Spans are created by :meth:`SpanRegistry.start_span` and ended through
    :meth:`SpanRegistry.end_span`. Reads and writes of the mutable fields
    go through a per-span lock so a span can be shared across threads.
    """

    def __init__(
        self,
        name: str,
        *,
        trace_id: str,
        span_id: str,
        start_time: int,
        parent_span_id: str | None = None,
    ) -> None:
        self.name = name
        self.trace_id = trace_id
        self.span_id = span_id
        self.parent_span_id = parent_span_id
        self.start_time = start_time

        self._lock = threading.Lock()
        self._end_time: int | None = None
        self._status: SpanStatus = SpanStatus.UNSET
        self._attributes: dict[str, str] = {}

    def __repr__(self) -> str:
        return (
            f"Span(name={self.name!r}, trace_id={self.trace_id!r}, "
            f"span_id={self.span_id!r}, status={self.status.value})"
        )

    @property
    def end_time(self) -> int | None:
        with self._lock:
            return self._end_time

    @property
    def status(self) -> SpanStatus:
        with self._lock:
            return self._status

    @property
    def attributes(self) -> dict[str, str]:
        """Copy of the current attributes."""
        with self._lock:
            return dict(self._attributes)

    @property
    def is_ended(self) -> bool:
        with self._lock:
            return self._end_time is not None

    @property
    def duration_ns(self) -> int | None:
        with self._lock:
            if self._end_time is None:
                return None
            return self._end_time - self.start_time

    def set_attribute(self, key: str, value: str) -> None:
        """Attach a key-value attribute while the span is open."""
        with self._lock:
            if self._end_time is not None:
                raise SpanAlreadyEndedError(self.span_id)
            self._attributes[key] = value

    def _end(
        self,
        end_time: int,
        status: SpanStatus,
        attributes: Mapping[str, str] | None,
    ) -> SpanData:
        # Called by the registry; returns the completed snapshot.
        with self._lock:
            if self._end_time is not None:
                raise SpanAlreadyEndedError(self.span_id)
            self._end_time = max(end_time, self.start_time)
            self._status = status
            if attributes:
                self._attributes.update(attributes)
            return self._snapshot()

    def to_span_data(self) -> SpanData:
        """Return a consistent immutable snapshot of this span."""
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> SpanData:
        return SpanData(
            trace_id=self.trace_id,
            span_id=self.span_id,
            name=self.name,
            start_time=self.start_time,
            status=self._status,
            parent_span_id=self.parent_span_id,
            end_time=self._end_time,
            attributes=dict(self._attributes),
        )
