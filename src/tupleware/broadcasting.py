"""Scalar broadcast into homogeneous sequences."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import visitors
from .caching import resolver
from .dispatcher import Dispatcher
from .shapes import Sequence, repeat_type


@dataclass(frozen=True)
class RepeatBuilder:
    """Builds ``rank`` copies of one scalar, each converted to ``scalar_type``."""

    scalar_type: object
    rank: int
    sequence_type: type[Sequence] = field(init=False, compare=False)
    _dispatcher: Dispatcher = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        shape = repeat_type(self.scalar_type, self.rank)
        object.__setattr__(self, "sequence_type", shape)
        object.__setattr__(self, "_dispatcher", Dispatcher(shape, visitors.repeat))

    def with_value(self, value: object) -> Sequence:
        return self._dispatcher.visit_const(value)

    __call__ = with_value


@resolver
def repeat_v(scalar_type: object, rank: int) -> RepeatBuilder:
    """Resolve (and memoise) a `RepeatBuilder`."""
    return RepeatBuilder(scalar_type, rank)


def broadcast(value: object, scalar_type: object, rank: int) -> Sequence:
    return repeat_v(scalar_type, rank).with_value(value)
