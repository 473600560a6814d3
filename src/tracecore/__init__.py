"""tracecore: a minimal span/trace correlation core."""

from __future__ import annotations

from tracecore._buffer import RingBuffer
from tracecore._config import TracerConfig
from tracecore._context import TraceContext
from tracecore._errors import (
    EntropyError,
    InvalidStatusError,
    SerializationError,
    SpanAlreadyEndedError,
    TracingError,
    UnknownParentError,
)
from tracecore._exporter import (
    LoggingSink,
    LoggingSpanHandler,
    StreamSink,
    TraceSink,
    decode_traces,
    encode_traces,
)
from tracecore._ids import IdGenerator, generate_id
from tracecore._otlp import OTLPFileSink, build_export_request
from tracecore._processor import BackgroundProcessor
from tracecore._registry import SpanRegistry
from tracecore._span import Span
from tracecore._tracer import Tracer
from tracecore._types import SpanData, SpanStatus

__version__ = "0.1.0"

__all__ = [
    "BackgroundProcessor",
    "EntropyError",
    "IdGenerator",
    "InvalidStatusError",
    "LoggingSink",
    "LoggingSpanHandler",
    "OTLPFileSink",
    "RingBuffer",
    "SerializationError",
    "Span",
    "SpanAlreadyEndedError",
    "SpanData",
    "SpanRegistry",
    "SpanStatus",
    "StreamSink",
    "TraceContext",
    "TraceSink",
    "Tracer",
    "TracerConfig",
    "TracingError",
    "UnknownParentError",
    "__version__",
    "build_export_request",
    "decode_traces",
    "encode_traces",
    "generate_id",
]
