"""Explicit trace context carried along a call chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tracecore._span import Span


@dataclass(frozen=True)
class TraceContext:
    """Carries the current span to the code that starts its children.

    Contexts are values: starting a child returns a new context and leaves
    the parent's untouched.
    """

    span: Span

    @property
    def trace_id(self) -> str:
        return self.span.trace_id

    @property
    def span_id(self) -> str:
        return self.span.span_id
