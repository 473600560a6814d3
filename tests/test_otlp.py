"""Tests for the OTLP encoding."""

from __future__ import annotations

from pathlib import Path

import pytest
from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.trace.v1.trace_pb2 import Status as OtlpStatus

from tracecore._errors import SerializationError
from tracecore._otlp import (
    OTLPFileSink,
    _make_attribute,
    _span_data_to_otlp,
    build_export_request,
)
from tracecore._registry import SpanRegistry
from tracecore._types import SpanData, SpanStatus


def _make_span_data(**overrides: object) -> SpanData:
    defaults: dict[str, object] = {
        "trace_id": "0123456789abcdef0123456789abcdef",
        "span_id": "abcdef0123456789abcdef0123456789",
        "name": "test-span",
        "start_time": 1_000_000_000,
        "end_time": 2_000_000_000,
        "status": SpanStatus.OK,
        "attributes": {},
        "parent_span_id": None,
    }
    defaults.update(overrides)
    return SpanData(**defaults)  # type: ignore[arg-type]


def test_make_attribute() -> None:
    kv = _make_attribute("key", "value")
    assert kv.key == "key"
    assert kv.value.string_value == "value"


class TestSpanDataToOtlp:
    def test_basic_fields(self) -> None:
        otlp = _span_data_to_otlp(_make_span_data())
        assert otlp.name == "test-span"
        assert otlp.start_time_unix_nano == 1_000_000_000
        assert otlp.end_time_unix_nano == 2_000_000_000

    def test_ids_as_bytes(self) -> None:
        sd = _make_span_data()
        otlp = _span_data_to_otlp(sd)
        assert otlp.trace_id == bytes.fromhex(sd.trace_id)
        assert otlp.span_id == bytes.fromhex(sd.span_id)
        assert len(otlp.span_id) == 16

    def test_parent_span_id(self) -> None:
        parent = "1234567890abcdef1234567890abcdef"
        assert _span_data_to_otlp(
            _make_span_data(parent_span_id=parent)
        ).parent_span_id == bytes.fromhex(parent)
        assert _span_data_to_otlp(_make_span_data()).parent_span_id == b""

    def test_open_span_has_zero_end(self) -> None:
        sd = _make_span_data(end_time=None, status=SpanStatus.UNSET)
        otlp = _span_data_to_otlp(sd)
        assert otlp.end_time_unix_nano == 0
        assert otlp.status.code == OtlpStatus.STATUS_CODE_UNSET

    @pytest.mark.parametrize(
        ("status", "code"),
        [
            (SpanStatus.OK, OtlpStatus.STATUS_CODE_OK),
            (SpanStatus.ERROR, OtlpStatus.STATUS_CODE_ERROR),
        ],
    )
    def test_status(self, status: SpanStatus, code: int) -> None:
        assert _span_data_to_otlp(_make_span_data(status=status)).status.code == code

    def test_attributes(self) -> None:
        otlp = _span_data_to_otlp(_make_span_data(attributes={"rows": "10"}))
        attr_dict = {a.key: a.value.string_value for a in otlp.attributes}
        assert attr_dict == {"rows": "10"}

    def test_non_hex_id_raises(self) -> None:
        with pytest.raises(SerializationError):
            _span_data_to_otlp(_make_span_data(span_id="not-hex"))

    def test_invalid_utf8_attribute_raises(self) -> None:
        sd = _make_span_data(attributes={"k": "\ud800"})
        with pytest.raises(SerializationError):
            _span_data_to_otlp(sd)

    def test_invalid_utf8_name_raises(self) -> None:
        with pytest.raises(SerializationError):
            build_export_request([_make_span_data(name="\udfff")], "svc")


class TestBuildExportRequest:
    def test_resource_attributes(self) -> None:
        req = build_export_request([_make_span_data()], "my-svc", "prod")
        resource = req.resource_spans[0].resource
        attr_dict = {a.key: a.value.string_value for a in resource.attributes}
        assert attr_dict["service.name"] == "my-svc"
        assert attr_dict["deployment.environment"] == "prod"
        assert attr_dict["telemetry.sdk.name"] == "tracecore"

    def test_scope_info(self) -> None:
        req = build_export_request([_make_span_data()], "svc")
        scope = req.resource_spans[0].scope_spans[0].scope
        assert scope.name == "tracecore"
        assert scope.version == "0.1.0"

    def test_all_spans_in_order(self) -> None:
        spans = [_make_span_data(name=f"span-{i}") for i in range(5)]
        req = build_export_request(spans, "svc")
        otlp_spans = req.resource_spans[0].scope_spans[0].spans
        assert [s.name for s in otlp_spans] == [f"span-{i}" for i in range(5)]


def test_file_sink_writes_request(tmp_path: Path) -> None:
    reg = SpanRegistry("file-svc")
    root = reg.start_span("root")
    child = reg.start_span("child", root.span_id)
    reg.end_span(child)
    reg.end_span(root)

    path = tmp_path / "traces.pb"
    reg.export_traces(OTLPFileSink(path, "file-svc", "staging"))

    req = ExportTraceServiceRequest()
    req.ParseFromString(path.read_bytes())
    otlp_spans = req.resource_spans[0].scope_spans[0].spans
    assert [s.name for s in otlp_spans] == ["root", "child"]
    assert otlp_spans[1].parent_span_id == bytes.fromhex(root.span_id)
    assert otlp_spans[0].trace_id == otlp_spans[1].trace_id


def test_file_sink_unencodable_attribute(tmp_path: Path) -> None:
    reg = SpanRegistry("file-svc")
    s = reg.start_span("op")
    reg.end_span(s, SpanStatus.OK, {"k": "\ud800"})

    # JSON export escapes the surrogate; OTLP cannot carry it
    assert reg.export_json()
    with pytest.raises(SerializationError):
        reg.export_traces(OTLPFileSink(tmp_path / "traces.pb", "file-svc"))
