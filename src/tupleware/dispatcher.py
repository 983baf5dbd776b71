"""Dispatcher: drive a visitor strategy over [0, N) and assemble the result."""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from typing import Callable

from .errors import TuplewareShapeError
from .extraction import readonly_view
from .shapes import Sequence, is_sequence, require_sequence_type
from .visitors import visit_function

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dispatcher:
    """Elementwise builder resolved for one (transform shape, visitor, result shape).

    ``transform_type`` is what the visitor sees as the declared type of each
    slot; ``result_type`` (default ``transform_type``) is the class the N
    produced values are assembled into.
    """

    transform_type: type[Sequence]
    visitor: object
    result_type: type[Sequence] | None = None
    length: int | None = None
    _visit: Callable[..., object] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        transform = require_sequence_type(self.transform_type, where="dispatch transform type")
        result = transform if self.result_type is None else require_sequence_type(self.result_type, where="dispatch result type")
        if self.length is None:
            length = result.length
        else:
            try:
                length = operator.index(self.length)
            except TypeError:
                raise TuplewareShapeError(f"dispatch length must be an integer, got {type(self.length).__name__}") from None
        if length < 0:
            raise TuplewareShapeError(f"dispatch length must be non-negative, got {length}")
        if length != result.length:
            raise TuplewareShapeError(f"dispatch over {length} slots cannot build {result.__name__}")
        if length > transform.length:
            raise TuplewareShapeError(f"dispatch over {length} slots exceeds transform type {transform.__name__}")

        object.__setattr__(self, "result_type", result)
        object.__setattr__(self, "length", length)
        object.__setattr__(self, "_visit", visit_function(self.visitor))
        logger.debug("resolved dispatcher %s -> %s over %d slots", transform.__name__, result.__name__, length)

    def _run(self, args: tuple[object, ...]) -> Sequence:
        visit = self._visit
        transform = self.transform_type
        values = [visit(index, transform, *args) for index in range(self.length)]  # type: ignore[arg-type]
        return self.result_type(*values)  # type: ignore[misc]

    def visit(self, *args: object) -> Sequence:
        """Mutable access: arguments reach the visitor as given."""
        return self._run(args)

    def visit_const(self, *args: object) -> Sequence:
        """Read-only access: sequence arguments reach the visitor as read-only views."""
        guarded = tuple(readonly_view(arg) if is_sequence(getattr(arg, "shape_type", None)) else arg for arg in args)
        return self._run(guarded)

    __call__ = visit_const


def dispatch(
    transform_type: type[Sequence],
    visitor: object,
    *args: object,
    result_type: type[Sequence] | None = None,
    mutable: bool = False,
) -> Sequence:
    """One-shot form of `Dispatcher`."""
    dispatcher = Dispatcher(transform_type, visitor, result_type=result_type)
    if mutable:
        return dispatcher.visit(*args)
    return dispatcher.visit_const(*args)
