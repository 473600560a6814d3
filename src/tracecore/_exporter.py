"""JSON export codec and the sinks that receive exported traces."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import IO, Any, Protocol, runtime_checkable

from tracecore._errors import SerializationError
from tracecore._types import SpanData

logger = logging.getLogger("tracecore.exporter")

Traces = Mapping[str, Sequence[SpanData]]


@runtime_checkable
class TraceSink(Protocol):
    """Receives a snapshot of every trace held by a registry."""

    def export(self, traces: Traces) -> None: ...


def encode_traces(traces: Traces, *, indent: int | None = 2) -> str:
    """Serialize a trace mapping to JSON text.

    Raises SerializationError if any field cannot be encoded.
    """
    payload = {
        trace_id: [span.to_dict() for span in spans]
        for trace_id, spans in traces.items()
    }
    try:
        return json.dumps(payload, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to encode traces: {exc}") from exc


def decode_traces(text: str | bytes) -> dict[str, list[SpanData]]:
    """Parse JSON produced by :func:`encode_traces`.

    Raises SerializationError on malformed input.
    """
    try:
        payload: Any = json.loads(text)
        if not isinstance(payload, dict):
            raise ValueError("top-level value must be an object")
        return {
            trace_id: [SpanData.from_dict(record) for record in records]
            for trace_id, records in payload.items()
        }
    except (TypeError, ValueError, KeyError) as exc:
        raise SerializationError(f"Failed to decode traces: {exc}") from exc


class StreamSink:
    """Writes exported traces as JSON text to a stream (stdout by default)."""

    def __init__(self, stream: IO[str] | None = None, *, indent: int | None = 2) -> None:
        self._stream = stream
        self._indent = indent

    def export(self, traces: Traces) -> None:
        text = encode_traces(traces, indent=self._indent)
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(text)
        stream.write("\n")
        stream.flush()


class LoggingSink:
    """Emits exported traces as a single JSON log record."""

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        level: int = logging.INFO,
    ) -> None:
        self._logger = logger if logger is not None else logging.getLogger("tracecore.traces")
        self._level = level

    def export(self, traces: Traces) -> None:
        self._logger.log(self._level, "%s", encode_traces(traces, indent=None))


class LoggingSpanHandler:
    """Batch handler that logs each completed span as one JSON record.

    Designed as a SpanHandler for BackgroundProcessor, shipping spans to
    whatever handlers the application attached to the logger. A span that
    cannot be encoded is reported at WARNING with its id and the rest of
    the batch is still shipped.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        level: int = logging.INFO,
    ) -> None:
        self._logger = logger if logger is not None else logging.getLogger("tracecore.spans")
        self._level = level
        self._failed_count = 0

    @property
    def failed_count(self) -> int:
        """Number of spans that could not be encoded."""
        return self._failed_count

    def __call__(self, spans: list[SpanData]) -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        for span in spans:
            try:
                line = json.dumps(span.to_dict(), allow_nan=False)
            except (TypeError, ValueError) as exc:
                self._failed_count += 1
                logger.warning("Failed to encode span %s: %s", span.span_id, exc)
                continue
            self._logger.log(self._level, "%s", line)
