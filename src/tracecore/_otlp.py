"""OTLP encoding: converts exported traces to an ExportTraceServiceRequest.

Only the protobuf encoding is provided; shipping the request is left to
the caller.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.common.v1.common_pb2 import (
    AnyValue,
    InstrumentationScope,
    KeyValue,
)
from opentelemetry.proto.resource.v1.resource_pb2 import Resource
from opentelemetry.proto.trace.v1.trace_pb2 import (
    ResourceSpans,
    ScopeSpans,
)
from opentelemetry.proto.trace.v1.trace_pb2 import (
    Span as OtlpSpan,
)
from opentelemetry.proto.trace.v1.trace_pb2 import (
    Status as OtlpStatus,
)

from tracecore._errors import SerializationError
from tracecore._exporter import Traces
from tracecore._types import SpanData, SpanStatus

logger = logging.getLogger("tracecore.exporter")

SDK_NAME = "tracecore"
SDK_VERSION = "0.1.0"

_STATUS_MAP: dict[SpanStatus, int] = {
    SpanStatus.UNSET: OtlpStatus.STATUS_CODE_UNSET,
    SpanStatus.OK: OtlpStatus.STATUS_CODE_OK,
    SpanStatus.ERROR: OtlpStatus.STATUS_CODE_ERROR,
}


def _make_attribute(key: str, value: str) -> KeyValue:
    return KeyValue(key=key, value=AnyValue(string_value=str(value)))


def _span_data_to_otlp(sd: SpanData) -> OtlpSpan:
    """Convert a single SpanData to an OTLP Span protobuf."""
    try:
        trace_id = bytes.fromhex(sd.trace_id)
        span_id = bytes.fromhex(sd.span_id)
        parent = bytes.fromhex(sd.parent_span_id) if sd.parent_span_id else b""
    except ValueError as exc:
        raise SerializationError(
            f"Span {sd.span_id!r} has a non-hex identifier"
        ) from exc

    try:
        return OtlpSpan(
            trace_id=trace_id,
            span_id=span_id,
            parent_span_id=parent,
            name=sd.name,
            kind=OtlpSpan.SPAN_KIND_INTERNAL,
            start_time_unix_nano=sd.start_time,
            end_time_unix_nano=sd.end_time or 0,
            attributes=[_make_attribute(k, v) for k, v in sd.attributes.items()],
            status=OtlpStatus(code=_STATUS_MAP[sd.status]),  # type: ignore[arg-type]
        )
    except (TypeError, ValueError, UnicodeError) as exc:
        # protobuf rejects strings that are not valid UTF-8
        raise SerializationError(
            f"Span {sd.span_id!r} cannot be encoded as OTLP: {exc}"
        ) from exc


def build_export_request(
    spans: Iterable[SpanData],
    service_name: str,
    environment: str = "development",
) -> ExportTraceServiceRequest:
    """Build an ExportTraceServiceRequest from a batch of SpanData."""
    resource = Resource(
        attributes=[
            _make_attribute("service.name", service_name),
            _make_attribute("deployment.environment", environment),
            _make_attribute("telemetry.sdk.name", SDK_NAME),
            _make_attribute("telemetry.sdk.version", SDK_VERSION),
        ]
    )
    scope = InstrumentationScope(name=SDK_NAME, version=SDK_VERSION)
    scope_spans = ScopeSpans(
        scope=scope, spans=[_span_data_to_otlp(sd) for sd in spans]
    )
    resource_spans = ResourceSpans(resource=resource, scope_spans=[scope_spans])
    return ExportTraceServiceRequest(resource_spans=[resource_spans])


class OTLPFileSink:
    """Writes exported traces to a file as a serialized OTLP request."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        service_name: str,
        environment: str = "development",
    ) -> None:
        self._path = path
        self._service_name = service_name
        self._environment = environment

    def export(self, traces: Traces) -> None:
        spans = [span for trace in traces.values() for span in trace]
        request = build_export_request(spans, self._service_name, self._environment)
        with open(self._path, "wb") as fh:
            fh.write(request.SerializeToString())
        logger.debug("Wrote %d spans to %s", len(spans), self._path)
