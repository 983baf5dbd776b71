"""Left-to-right folds over sequences."""

from __future__ import annotations

import math
import operator
import os
from dataclasses import dataclass
from typing import Callable, Final, Protocol

import jax
import jax.numpy as jnp

from .errors import TuplewareShapeError, TuplewareTypeError
from .shapes import Sequence, cast, conforms, require_sequence_type, shape_of, slot_dtype, slot_name

_CHECK_RESULT_TYPE: Final[bool] = os.environ.get("TUPLEWARE_DISABLE_FOLD_RESULT_CHECK", "0") != "1"


class AggregateFunctor(Protocol):
    value_type: object
    initial_value: object

    def combine(self, accumulator: object, element: object) -> object: ...


@dataclass(frozen=True)
class Fold:
    """Plain-data aggregate functor."""

    value_type: object
    initial_value: object
    combine: Callable[[object, object], object]


class Aggregator:
    """Folds ``combine(...combine(initial, s[0])..., s[n-1])``.

    Zero-length sequences are rejected: there is no fold without a first
    element, and the initial value is never returned on its own.
    """

    def __init__(self, functor: AggregateFunctor) -> None:
        for attr in ("value_type", "initial_value", "combine"):
            if not hasattr(functor, attr):
                raise TuplewareTypeError(f"aggregate functor is missing '{attr}'")
        if not callable(functor.combine):
            raise TuplewareTypeError("aggregate functor 'combine' must be callable")
        self.functor = functor
        self._jitted = None

    def resolve(self, sequence_type: type[Sequence]) -> "Aggregator":
        """Check ahead of time that ``sequence_type`` can be folded."""
        shape = require_sequence_type(sequence_type, where="fold input")
        if shape.length == 0:
            raise TuplewareShapeError(f"cannot fold zero-length {shape.__name__}")
        return self

    def from_sequence(self, values) -> object:
        self.resolve(shape_of(values, where="fold input"))
        combine = self.functor.combine
        result = self.functor.initial_value
        for element in values:
            result = combine(result, element)
        if _CHECK_RESULT_TYPE and not conforms(result, self.functor.value_type):
            raise TuplewareTypeError(
                f"fold produced {type(result).__name__}, declared {slot_name(self.functor.value_type)}"
            )
        return result

    __call__ = from_sequence

    def jit(self):
        """Return a memoised `jax.jit` of `from_sequence`."""
        if self._jitted is None:
            self._jitted = jax.jit(self.from_sequence)
        return self._jitted


def _order_dtype(value_type: object) -> jnp.dtype | None:
    """Dtype used to fold ``value_type`` with jnp.maximum/jnp.minimum, if any."""
    dtype = slot_dtype(value_type)
    if dtype is None and value_type in (bool, int, float):
        # Default JAX dtype for the Python scalar type (respects jax_enable_x64).
        dtype = jnp.asarray(value_type(0)).dtype  # type: ignore[operator]
    return dtype


def _lowest(value_type: object) -> object:
    dtype = _order_dtype(value_type)
    if dtype is None:
        return -math.inf
    if dtype.kind == "b":
        return jnp.asarray(False)
    if dtype.kind in "iu":
        return jnp.asarray(jnp.iinfo(dtype).min, dtype=dtype)
    return jnp.asarray(-jnp.inf, dtype=dtype)


def _highest(value_type: object) -> object:
    dtype = _order_dtype(value_type)
    if dtype is None:
        return math.inf
    if dtype.kind == "b":
        return jnp.asarray(True)
    if dtype.kind in "iu":
        return jnp.asarray(jnp.iinfo(dtype).max, dtype=dtype)
    return jnp.asarray(jnp.inf, dtype=dtype)


def sum_of(value_type: object = float) -> Fold:
    return Fold(value_type, cast(0, value_type), operator.add)


def product_of(value_type: object = float) -> Fold:
    return Fold(value_type, cast(1, value_type), operator.mul)


def maximum_of(value_type: object = float) -> Fold:
    # Other class value types start from an infinity and fold eagerly only.
    combine = jnp.maximum if _order_dtype(value_type) is not None else max
    return Fold(value_type, _lowest(value_type), combine)


def minimum_of(value_type: object = float) -> Fold:
    combine = jnp.minimum if _order_dtype(value_type) is not None else min
    return Fold(value_type, _highest(value_type), combine)


def aggregate(functor: AggregateFunctor, values) -> object:
    return Aggregator(functor).from_sequence(values)
