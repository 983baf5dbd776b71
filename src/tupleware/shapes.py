"""Sequence shapes: interned per-arity sequence classes and shape algebra."""

from __future__ import annotations

import logging
import operator
import typing
from typing import ClassVar

import jax
import jax.numpy as jnp

from .errors import TuplewareShapeError, TuplewareTypeError

logger = logging.getLogger(__name__)

# Shapes are interned for the life of the process so `type(value) is shape`
# stays valid for every value ever constructed.
_SEQUENCE_TYPES: dict[tuple[object, ...], type["Sequence"]] = {}

_PY_SCALAR_KINDS: dict[type, str] = {
    bool: "b",
    int: "iu",
    float: "f",
    complex: "c",
}


class Sequence:
    """Fixed-length heterogeneous sequence.

    Parameterise with ``Sequence[T0, T1, ...]`` to obtain the concrete class
    for a shape; the bare base class cannot be instantiated. Slot values may
    be reassigned, the number of slots never changes.
    """

    __slots__ = ("_values",)

    slots: ClassVar[tuple[object, ...]] = ()
    length: ClassVar[int] = 0

    def __init__(self, *values: object) -> None:
        cls = type(self)
        if cls is Sequence:
            raise TuplewareTypeError("Sequence must be parameterised before construction, e.g. Sequence[int, float]")
        if len(values) != cls.length:
            raise TuplewareShapeError(f"{cls.__name__} takes {cls.length} values, got {len(values)}")
        self._values = list(values)

    def __class_getitem__(cls, params):
        if cls is not Sequence:
            raise TuplewareTypeError(f"{cls.__name__} is already parameterised")
        if not isinstance(params, tuple):
            params = (params,)
        return sequence_type(*params)

    @property
    def shape_type(self) -> type["Sequence"]:
        return type(self)

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> object:
        if isinstance(index, slice):
            raise TuplewareTypeError("sequences do not support slicing; use an Extractor with an explicit index list")
        return self._values[index]

    def __setitem__(self, index: int, value: object) -> None:
        if isinstance(index, slice):
            raise TuplewareTypeError("sequences do not support slice assignment")
        self._values[index] = value

    def __iter__(self):
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not is_sequence(getattr(other, "shape_type", None)):
            return NotImplemented
        return sequence_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(repr(v) for v in self._values)
        return f"{type(self).__name__}({body})"

    def as_tuple(self) -> tuple[object, ...]:
        return tuple(self._values)

    def tree_flatten(self):
        return tuple(self._values), None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(*children)


def _slot_equal(a: object, b: object) -> bool:
    if isinstance(a, jax.Array) or isinstance(b, jax.Array):
        return bool(jnp.array_equal(a, b))
    return bool(a == b)


def sequence_equal(left, right) -> bool:
    """Slotwise equality of two sequences or views."""
    if len(left) != len(right):
        return False
    return all(_slot_equal(a, b) for a, b in zip(left, right))


def slot_name(slot: object) -> str:
    name = getattr(slot, "__name__", None)
    if isinstance(name, str):
        return name
    return str(slot)


def slot_dtype(slot: object) -> jnp.dtype | None:
    """Return the JAX dtype a slot converts to, or None for class slots."""
    if isinstance(slot, jnp.dtype):
        return slot
    dtype = getattr(slot, "dtype", None)
    if isinstance(dtype, jnp.dtype):
        return dtype
    return None


def _check_slot(slot: object, position: int) -> None:
    if slot is typing.Any or isinstance(slot, (type, jnp.dtype)):
        return
    raise TuplewareTypeError(
        f"slot {position} must be a type, dtype or typing.Any, got {type(slot).__name__}"
    )


def sequence_type(*slots: object) -> type[Sequence]:
    """Return the interned sequence class whose slot types are ``slots``."""
    for position, slot in enumerate(slots):
        _check_slot(slot, position)
    cls = _SEQUENCE_TYPES.get(slots)
    if cls is not None:
        return cls

    name = f"Sequence[{', '.join(slot_name(s) for s in slots)}]"
    cls = type(name, (Sequence,), {"__slots__": (), "__module__": __name__, "slots": slots, "length": len(slots)})
    cls.__qualname__ = name
    jax.tree_util.register_pytree_node_class(cls)
    _SEQUENCE_TYPES[slots] = cls
    logger.debug("interned sequence shape %s", name)
    return cls


def is_sequence(candidate: object) -> bool:
    """True iff ``candidate`` is a parameterised sequence class."""
    # Generic aliases such as tuple[int] proxy __mro__ to their origin.
    return isinstance(candidate, type) and candidate is not Sequence and Sequence in getattr(candidate, "__mro__", ())


def require_sequence_type(candidate: object, *, where: str = "argument") -> type[Sequence]:
    if not is_sequence(candidate):
        raise TuplewareTypeError(f"{where} must be a sequence type, got {candidate!r}")
    return candidate  # type: ignore[return-value]


def shape_of(value: object, *, where: str = "value") -> type[Sequence]:
    """Shape of a sequence value or view."""
    shape = getattr(value, "shape_type", None)
    if not is_sequence(shape):
        raise TuplewareTypeError(f"{where} must be a sequence value, got {type(value).__name__}")
    return shape


def repeat_type(element: object, n: int) -> type[Sequence]:
    """Homogeneous sequence type: ``n`` slots of ``element``."""
    try:
        count = operator.index(n)
    except TypeError:
        raise TuplewareShapeError(f"repeat count must be an integer, got {type(n).__name__}") from None
    if isinstance(n, bool) or count < 0:
        raise TuplewareShapeError(f"repeat count must be a non-negative integer, got {n!r}")
    return sequence_type(*((element,) * count))


def append(new_part: object, target: object) -> type[Sequence]:
    """Append one slot type, or concatenate a whole sequence type, onto ``target``."""
    base = require_sequence_type(target, where="append target")
    if is_sequence(new_part):
        return sequence_type(*base.slots, *new_part.slots)  # type: ignore[union-attr]
    return sequence_type(*base.slots, new_part)


def append_value(new: object, target: object) -> Sequence:
    """Value-level counterpart of `append`.

    A sequence value (or view) is concatenated after ``target``; anything
    else becomes a new last slot typed ``type(new)``.
    """
    base = shape_of(target, where="append target")
    if is_sequence(getattr(new, "shape_type", None)):
        result = append(new.shape_type, base)  # type: ignore[union-attr]
        return result(*target, *new)  # type: ignore[misc]
    result = append(type(new), base)
    return result(*target, new)  # type: ignore[misc]


def copy_value(value: object) -> object:
    """Copy nested sequences (and views) slot by slot; other values are returned as is."""
    shape = getattr(value, "shape_type", None)
    if not is_sequence(shape):
        return value
    return shape(*(copy_value(v) for v in value))  # type: ignore[union-attr]


def cast(value: object, slot: object) -> object:
    """Convert ``value`` to a slot's declared type.

    Sequence values are always rebuilt, so the result never shares a nested
    sequence with ``value``.
    """
    if slot is object or slot is typing.Any:
        return copy_value(value)
    if is_sequence(slot):
        return _cast_sequence(value, slot)  # type: ignore[arg-type]
    dtype = slot_dtype(slot)
    if dtype is not None:
        return jnp.asarray(value, dtype=dtype)
    if isinstance(value, slot):  # type: ignore[arg-type]
        return copy_value(value)
    return slot(value)  # type: ignore[operator]


def _cast_sequence(value: object, target: type[Sequence]) -> Sequence:
    try:
        length = len(value)  # type: ignore[arg-type]
    except TypeError:
        raise TuplewareTypeError(f"cannot convert {type(value).__name__} to {target.__name__}") from None
    if length != target.length:
        raise TuplewareShapeError(f"cannot convert length-{length} value to {target.__name__}")
    return target(*(cast(value[i], slot) for i, slot in enumerate(target.slots)))  # type: ignore[index]


def conforms(value: object, slot: object) -> bool:
    """Whether ``value`` already has the slot's declared type."""
    if slot is object or slot is typing.Any:
        return True
    if is_sequence(slot):
        if not isinstance(value, Sequence) or len(value) != slot.length:  # type: ignore[union-attr]
            return False
        return all(conforms(v, s) for v, s in zip(value, slot.slots))  # type: ignore[union-attr]
    dtype = slot_dtype(slot)
    if dtype is not None:
        value_dtype = getattr(value, "dtype", None)
        if value_dtype is None:
            if not isinstance(value, (bool, int, float, complex)):
                return False
            value_dtype = jnp.result_type(value)
        return value_dtype == dtype
    if isinstance(value, slot):  # type: ignore[arg-type]
        return True
    kinds = _PY_SCALAR_KINDS.get(slot)  # type: ignore[arg-type]
    value_dtype = getattr(value, "dtype", None)
    if kinds is not None and isinstance(value_dtype, jnp.dtype) and getattr(value, "ndim", 0) == 0:
        return value_dtype.kind in kinds
    return False
