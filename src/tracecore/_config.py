"""Tracer configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TracerConfig:
    """Immutable tracer configuration."""

    service_name: str
    environment: str = "development"
    buffer_size: int = 8192
    batch_size: int = 512
    flush_interval_ms: int = 5000
    record_completed_spans: bool = True
