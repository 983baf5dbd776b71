"""Structured error types for shape resolution and value access."""

from __future__ import annotations

from dataclasses import dataclass


class TuplewareError(Exception):
    """Base class for structured tupleware errors."""


class TuplewareShapeError(TuplewareError):
    """Sequence length/arity compatibility failure."""


class TuplewareTypeError(TuplewareError):
    """A value or type of the wrong kind was supplied."""


class TuplewareAccessError(TuplewareError):
    """Write attempted through a read-only view or reference."""


# Not frozen: jax attaches notes/causes to exceptions raised while tracing.
@dataclass(eq=False)
class TuplewareIndexError(TuplewareShapeError):
    """Index list entry outside the source sequence."""

    index: int
    length: int
    position: int | None = None
    source: str | None = None

    def __str__(self) -> str:
        where = ""
        if self.position is not None:
            where = f" at index-list position {self.position}"
        source = ""
        if self.source is not None:
            source = f" of {self.source}"
        return f"index {self.index}{where} is out of range for length {self.length}{source}"


def require_index(index: object, length: int, *, position: int | None = None, source: str | None = None) -> int:
    """Validate one IndexList entry against a source length."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise TuplewareTypeError(f"index must be a non-negative int, got {type(index).__name__}")
    if index < 0 or index >= length:
        raise TuplewareIndexError(index=index, length=length, position=position, source=source)
    return index
