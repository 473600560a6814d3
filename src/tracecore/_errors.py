"""Exceptions raised by the tracing core."""

from __future__ import annotations


class TracingError(Exception):
    """Base class for all tracecore errors."""


class EntropyError(TracingError):
    """The secure random source could not supply bytes.

    Fatal: identifiers cannot be issued safely once this is raised, so
    callers should not retry or fall back to a weaker source.
    """


class UnknownParentError(TracingError):
    """A span was started with a parent id the registry has never seen."""

    def __init__(self, parent_span_id: str) -> None:
        self.parent_span_id = parent_span_id
        super().__init__(f"Unknown parent span '{parent_span_id}'")


class SpanAlreadyEndedError(TracingError):
    """A span was ended (or mutated) after it had already ended."""

    def __init__(self, span_id: str) -> None:
        self.span_id = span_id
        super().__init__(f"Span '{span_id}' has already ended")


class InvalidStatusError(TracingError, ValueError):
    """A span was ended with a status that is not a terminal status."""

    def __init__(self, status: object) -> None:
        self.status = status
        super().__init__(
            f"Invalid span status {status!r}: expected one of 'OK', 'ERROR'"
        )


class SerializationError(TracingError):
    """Exported trace data could not be encoded or decoded."""
