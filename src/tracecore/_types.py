"""Core types: span status and the immutable span snapshot."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class SpanStatus(enum.Enum):
    """Status of a span. UNSET until the span ends."""

    UNSET = "UNSET"
    OK = "OK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SpanData:
    """Immutable snapshot of a span for export and buffering.

    Timestamps are nanoseconds since the Unix epoch.
    """

    trace_id: str
    span_id: str
    name: str
    start_time: int
    status: SpanStatus = SpanStatus.UNSET
    parent_span_id: str | None = None
    end_time: int | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def duration_ns(self) -> int | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def to_dict(self) -> dict[str, Any]:
        """Return the export record, omitting absent optional fields."""
        record: dict[str, Any] = {
            "traceId": self.trace_id,
            "spanId": self.span_id,
        }
        if self.parent_span_id is not None:
            record["parentSpanId"] = self.parent_span_id
        record["name"] = self.name
        record["startTime"] = self.start_time
        if self.end_time is not None:
            record["endTime"] = self.end_time
        record["attributes"] = dict(self.attributes)
        record["status"] = self.status.value
        return record

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> SpanData:
        """Build a snapshot from an export record.

        Raises KeyError or ValueError on malformed records.
        """
        return cls(
            trace_id=record["traceId"],
            span_id=record["spanId"],
            name=record["name"],
            start_time=int(record["startTime"]),
            status=SpanStatus(record["status"]),
            parent_span_id=record.get("parentSpanId"),
            end_time=(
                int(record["endTime"]) if record.get("endTime") is not None else None
            ),
            attributes=dict(record.get("attributes") or {}),
        )
