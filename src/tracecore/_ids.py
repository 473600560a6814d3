"""Cryptographically random trace and span identifiers."""

from __future__ import annotations

import os
from collections.abc import Callable

from tracecore._errors import EntropyError

ID_BYTES = 16

RandomSource = Callable[[int], bytes]


class IdGenerator:
    """Produces lowercase hex identifiers from a secure byte source.

    The default source is :func:`os.urandom`. Any failure of the source is
    fatal and surfaces as :class:`EntropyError`.
    """

    def __init__(
        self,
        random_bytes: RandomSource = os.urandom,
        *,
        num_bytes: int = ID_BYTES,
    ) -> None:
        if num_bytes <= 0:
            raise ValueError("num_bytes must be positive")
        self._random_bytes = random_bytes
        self._num_bytes = num_bytes

    def __call__(self) -> str:
        try:
            raw = self._random_bytes(self._num_bytes)
        except (OSError, NotImplementedError) as exc:
            raise EntropyError("secure random source is unavailable") from exc
        if len(raw) != self._num_bytes:
            raise EntropyError(
                f"secure random source returned {len(raw)} bytes, "
                f"expected {self._num_bytes}"
            )
        return raw.hex()


_default_generator = IdGenerator()


def generate_id() -> str:
    """Return a new 32-character hex identifier."""
    return _default_generator()
