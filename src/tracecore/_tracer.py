"""Tracer: wires the registry to the completed-span pipeline."""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

from tracecore._buffer import RingBuffer
from tracecore._config import TracerConfig
from tracecore._context import TraceContext
from tracecore._exporter import LoggingSpanHandler, TraceSink
from tracecore._otlp import OTLPFileSink
from tracecore._processor import BackgroundProcessor, SpanHandler
from tracecore._registry import Clock, SpanRegistry
from tracecore._span import Span
from tracecore._types import SpanData, SpanStatus


class Tracer:
    """Owns a SpanRegistry and, optionally, a buffer/processor pair.

    One tracer is constructed per service and passed explicitly to the
    code that starts or ends spans::

        tracer = Tracer(TracerConfig(service_name="checkout"))
        tracer.start()
        with tracer.span("handle-request") as ctx:
            with tracer.span("query-db", parent=ctx) as db:
                db.span.set_attribute("table", "orders")
        tracer.shutdown()
    """

    def __init__(
        self,
        config: TracerConfig,
        *,
        handler: SpanHandler | None = None,
        id_generator: Callable[[], str] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self._buffer: RingBuffer | None = None
        self._processor: BackgroundProcessor | None = None

        on_end = None
        if config.record_completed_spans:
            self._buffer = RingBuffer(config.buffer_size)
            self._processor = BackgroundProcessor(
                self._buffer,
                batch_size=config.batch_size,
                flush_interval_ms=config.flush_interval_ms,
                handler=handler if handler is not None else LoggingSpanHandler(),
            )
            on_end = self._record_completed_span

        self.registry = SpanRegistry(
            config.service_name,
            id_generator=id_generator,
            clock=clock if clock is not None else time.time_ns,
            on_end=on_end,
        )

    def start(self) -> None:
        """Start the background processor."""
        if self._processor is not None:
            self._processor.start()

    def shutdown(self) -> None:
        """Stop the processor, flushing any remaining completed spans."""
        if self._processor is not None:
            self._processor.stop()

    def _record_completed_span(self, span: SpanData) -> None:
        if self._buffer is not None:
            self._buffer.enqueue(span)

    def start_span(self, name: str, parent_span_id: str | None = None) -> Span:
        return self.registry.start_span(name, parent_span_id)

    def end_span(
        self,
        span: Span,
        status: SpanStatus | str = SpanStatus.OK,
        attributes: Mapping[str, str] | None = None,
    ) -> None:
        self.registry.end_span(span, status, attributes)

    def get_trace(self, trace_id: str) -> list[Span]:
        return self.registry.get_trace(trace_id)

    def export_traces(self, sink: TraceSink | None = None) -> None:
        self.registry.export_traces(sink)

    def otlp_sink(self, path: str | os.PathLike[str]) -> OTLPFileSink:
        """Return an OTLP file sink tagged with this tracer's service and environment."""
        return OTLPFileSink(path, self.config.service_name, self.config.environment)

    @contextmanager
    def span(
        self,
        name: str,
        *,
        parent: TraceContext | None = None,
    ) -> Iterator[TraceContext]:
        """Run a block inside a span.

        The span ends OK when the block completes, or ERROR with an
        ``error.message`` attribute when it raises. The exception propagates.
        A span the block ended itself is left as the block ended it.
        """
        ctx, span = self.registry.start_span_in(parent, name)
        try:
            yield ctx
        except BaseException as exc:
            if not span.is_ended:
                message = str(exc) or type(exc).__name__
                self.registry.end_span(
                    span, SpanStatus.ERROR, {"error.message": message}
                )
            raise
        if not span.is_ended:
            self.registry.end_span(span, SpanStatus.OK)
