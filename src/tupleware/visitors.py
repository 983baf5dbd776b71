"""Visitor strategies: per-slot production rules for the dispatcher.

A strategy computes the value of result slot ``index`` from the dispatcher's
arguments. Strategies are stateless; any object with a matching ``visit``
method, or a plain callable with the same signature, can be used.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from .errors import TuplewareTypeError
from .shapes import Sequence, cast


@runtime_checkable
class Visitor(Protocol):
    def visit(self, index: int, result_type: type[Sequence], *args: object) -> object: ...


@dataclass(frozen=True)
class GetVisitor:
    """Slot ``index`` of the source, converted to the result slot type."""

    def visit(self, index: int, result_type: type[Sequence], source) -> object:
        return cast(source[index], result_type.slots[index])


@dataclass(frozen=True)
class RepeatVisitor:
    """The same scalar in every slot, converted per slot."""

    def visit(self, index: int, result_type: type[Sequence], value: object) -> object:
        return cast(value, result_type.slots[index])


@dataclass(frozen=True)
class MergerVisitor:
    """A unary function applied to each source slot."""

    def visit(self, index: int, result_type: type[Sequence], source, combine: Callable[[object], object]) -> object:
        return combine(source[index])


get = GetVisitor()
repeat = RepeatVisitor()
merger = MergerVisitor()


def visit_function(visitor: object) -> Callable[..., object]:
    """Normalise a strategy object or plain callable to ``fn(index, result_type, *args)``."""
    if isinstance(visitor, Visitor):
        return visitor.visit
    if callable(visitor):
        return visitor
    raise TuplewareTypeError(f"visitor must define visit() or be callable, got {type(visitor).__name__}")
