"""Span registry: owns every span and groups them by trace id."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping

from tracecore._context import TraceContext
from tracecore._errors import InvalidStatusError, UnknownParentError
from tracecore._exporter import StreamSink, TraceSink, encode_traces
from tracecore._ids import IdGenerator
from tracecore._span import Span
from tracecore._types import SpanData, SpanStatus

logger = logging.getLogger("tracecore.registry")

Clock = Callable[[], int]
SpanEndHook = Callable[[SpanData], None]


def _coerce_status(status: SpanStatus | str) -> SpanStatus:
    if isinstance(status, SpanStatus):
        resolved = status
    elif isinstance(status, str):
        try:
            resolved = SpanStatus[status.upper()]
        except KeyError:
            raise InvalidStatusError(status) from None
    else:
        raise InvalidStatusError(status)
    if resolved is SpanStatus.UNSET:
        raise InvalidStatusError(status)
    return resolved


class SpanRegistry:
    """Thread-safe store mapping trace ids to spans in creation order.

    Usage::

        registry = SpanRegistry("checkout")
        root = registry.start_span("handle-request")
        child = registry.start_span("query-db", root.span_id)
        registry.end_span(child, SpanStatus.OK, {"rows": "10"})
        registry.end_span(root)
        registry.export_traces()
    """

    def __init__(
        self,
        service_name: str = "",
        *,
        id_generator: Callable[[], str] | None = None,
        clock: Clock = time.time_ns,
        on_end: SpanEndHook | None = None,
    ) -> None:
        self.service_name = service_name
        self._generate_id = id_generator if id_generator is not None else IdGenerator()
        self._clock = clock
        self._on_end = on_end
        self._lock = threading.Lock()
        self._traces: dict[str, list[Span]] = {}
        self._spans: dict[str, Span] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._spans)

    def start_span(self, name: str, parent_span_id: str | None = None) -> Span:
        """Create a span and record it under its trace.

        Root spans get a fresh trace id; children inherit their parent's.
        Raises UnknownParentError if ``parent_span_id`` is not registered.
        """
        span_id = self._generate_id()
        with self._lock:
            if parent_span_id is None:
                trace_id = self._generate_id()
            else:
                parent = self._spans.get(parent_span_id)
                if parent is None:
                    raise UnknownParentError(parent_span_id)
                trace_id = parent.trace_id

            span = Span(
                name,
                trace_id=trace_id,
                span_id=span_id,
                start_time=self._clock(),
                parent_span_id=parent_span_id,
            )
            self._traces.setdefault(trace_id, []).append(span)
            self._spans[span_id] = span

        logger.debug(
            "Started span %s (%s) in trace %s", span_id, name, trace_id
        )
        return span

    def start_span_in(
        self, context: TraceContext | None, name: str
    ) -> tuple[TraceContext, Span]:
        """Start a child of ``context``'s span, or a root span if None."""
        parent_span_id = context.span_id if context is not None else None
        span = self.start_span(name, parent_span_id)
        return TraceContext(span), span

    def end_span(
        self,
        span: Span,
        status: SpanStatus | str = SpanStatus.OK,
        attributes: Mapping[str, str] | None = None,
    ) -> None:
        """End ``span``, setting its status and merging ``attributes``.

        Raises SpanAlreadyEndedError if the span has already ended and
        InvalidStatusError for UNSET or unrecognized statuses.
        """
        resolved = _coerce_status(status)
        completed = span._end(self._clock(), resolved, attributes)
        logger.debug(
            "Ended span %s with status %s", span.span_id, resolved.value
        )
        if self._on_end is not None:
            self._on_end(completed)

    def get_span(self, span_id: str) -> Span | None:
        with self._lock:
            return self._spans.get(span_id)

    def get_trace(self, trace_id: str) -> list[Span]:
        """Return the spans of ``trace_id`` in creation order."""
        with self._lock:
            return list(self._traces.get(trace_id, ()))

    def trace_ids(self) -> list[str]:
        with self._lock:
            return list(self._traces)

    def snapshot(self) -> dict[str, list[SpanData]]:
        """Return an immutable copy of every trace."""
        with self._lock:
            return {
                tid: [span.to_span_data() for span in spans]
                for tid, spans in self._traces.items()
            }

    def export_json(self, indent: int | None = 2) -> str:
        return encode_traces(self.snapshot(), indent=indent)

    def export_traces(self, sink: TraceSink | None = None) -> None:
        """Send a snapshot of all traces to ``sink`` (stdout JSON by default)."""
        if sink is None:
            sink = StreamSink()
        traces = self.snapshot()
        logger.info(
            "Exporting traces... (service=%s, traces=%d)",
            self.service_name or "-",
            len(traces),
        )
        sink.export(traces)
