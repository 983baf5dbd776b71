"""Index-list extraction with copying and aliasing access modes.

An `Extractor` is resolved once per (source shape, index list): every index
is checked against the source length at construction, so applying it to a
value never bounds-checks, clamps or defaults. Selecting exactly one index
yields the bare element (and its bare slot type), never a singleton sequence.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterable
from dataclasses import dataclass, field

from .caching import resolver
from .errors import TuplewareAccessError, TuplewareShapeError, TuplewareTypeError, require_index
from .shapes import Sequence, copy_value, is_sequence, require_sequence_type, sequence_equal, sequence_type, shape_of

logger = logging.getLogger(__name__)


def _guarded(value: object, readonly: bool) -> object:
    # Read-only access extends into nested sequences.
    if readonly and is_sequence(getattr(value, "shape_type", None)):
        return readonly_view(value)
    return value


class SlotRef:
    """Live reference to one slot of a source sequence."""

    __slots__ = ("_source", "_index", "_readonly")

    def __init__(self, source, index: int, *, readonly: bool = False) -> None:
        self._source = source
        self._index = index
        self._readonly = readonly

    @property
    def index(self) -> int:
        return self._index

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def value(self) -> object:
        return self.get()

    @value.setter
    def value(self, new_value: object) -> None:
        self.set(new_value)

    def get(self) -> object:
        return _guarded(self._source[self._index], self._readonly)

    def set(self, new_value: object) -> None:
        if self._readonly:
            raise TuplewareAccessError(f"slot {self._index} is referenced read-only")
        self._source[self._index] = new_value

    def __repr__(self) -> str:
        mode = "readonly" if self._readonly else "mutable"
        return f"SlotRef({self._index}, {mode}, value={self.value!r})"


class SequenceView:
    """Live view of selected source slots.

    Reads and writes go straight to the source; the view owns no values.
    Using a view after its source has been discarded or replaced is the
    caller's problem.
    """

    __slots__ = ("_source", "_indices", "_shape", "_readonly")

    def __init__(self, source, indices: tuple[int, ...], shape: type[Sequence], *, readonly: bool = False) -> None:
        self._source = source
        self._indices = indices
        self._shape = shape
        self._readonly = readonly

    @property
    def shape_type(self) -> type[Sequence]:
        return self._shape

    @property
    def indices(self) -> tuple[int, ...]:
        return self._indices

    @property
    def readonly(self) -> bool:
        return self._readonly

    def __len__(self) -> int:
        return len(self._indices)

    def __getitem__(self, index: int) -> object:
        if isinstance(index, slice):
            raise TuplewareTypeError("views do not support slicing")
        return _guarded(self._source[self._indices[index]], self._readonly)

    def __setitem__(self, index: int, value: object) -> None:
        if self._readonly:
            raise TuplewareAccessError(f"cannot assign slot {index} through a read-only view")
        if isinstance(index, slice):
            raise TuplewareTypeError("views do not support slice assignment")
        self._source[self._indices[index]] = value

    def __iter__(self):
        for index in self._indices:
            yield _guarded(self._source[index], self._readonly)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Sequence, SequenceView)):
            return NotImplemented
        return sequence_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def materialize(self) -> Sequence:
        """Copy the viewed slots, nested sequences included, into a fresh sequence."""
        return self._shape(*(copy_value(v) for v in self))

    def __repr__(self) -> str:
        mode = "readonly" if self._readonly else "mutable"
        body = ", ".join(repr(v) for v in self)
        return f"SequenceView[{mode}]({body})"


def readonly_view(value) -> SequenceView:
    """Read-only view over every slot of a sequence (or view)."""
    shape = shape_of(value)
    return SequenceView(value, tuple(range(shape.length)), shape, readonly=True)


@dataclass(frozen=True)
class Extractor:
    """Projection of ``source_type`` onto an explicit index list."""

    source_type: type[Sequence]
    indices: tuple[int, ...]
    result_type: object = field(init=False, compare=False)

    def __post_init__(self) -> None:
        source = require_sequence_type(self.source_type, where="extraction source")
        indices = _index_list(self.indices)
        if not indices:
            raise TuplewareShapeError("index list must select at least one slot")
        for position, index in enumerate(indices):
            require_index(index, source.length, position=position, source=source.__name__)

        if len(indices) == 1:
            result_type = source.slots[indices[0]]
        else:
            result_type = sequence_type(*(source.slots[i] for i in indices))
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "result_type", result_type)
        logger.debug("resolved extractor %s%s -> %s", source.__name__, list(indices), getattr(result_type, "__name__", result_type))

    @property
    def is_scalar(self) -> bool:
        return len(self.indices) == 1

    def _check_input(self, value) -> None:
        shape = shape_of(value, where="extraction input")
        if shape is not self.source_type:
            raise TuplewareTypeError(f"extractor resolved for {self.source_type.__name__} applied to {shape.__name__}")

    def __call__(self, value):
        """Read-only access: copies selected slots (or returns the bare element)."""
        self._check_input(value)
        if self.is_scalar:
            return copy_value(value[self.indices[0]])
        return self.result_type(*(copy_value(value[i]) for i in self.indices))  # type: ignore[operator]

    def ref(self, value):
        """Mutable access: aliases into ``value`` rather than copies."""
        self._check_input(value)
        if self.is_scalar:
            return SlotRef(value, self.indices[0])
        return SequenceView(value, self.indices, self.result_type)  # type: ignore[arg-type]


def _as_index(index: object) -> int:
    if isinstance(index, bool):
        raise TuplewareTypeError("index must be a non-negative int, got bool")
    try:
        return operator.index(index)
    except TypeError:
        raise TuplewareTypeError(f"index must be a non-negative int, got {type(index).__name__}") from None


def _index_list(indices) -> tuple[int, ...]:
    """Normalise one index or an iterable of indices (NumPy/JAX integers included) to plain ints."""
    if not isinstance(indices, Iterable) or getattr(indices, "ndim", None) == 0:
        return (_as_index(indices),)
    return tuple(_as_index(index) for index in indices)


@resolver
def _extractor_cached(source_type: type[Sequence], indices: tuple[int, ...]) -> Extractor:
    return Extractor(source_type, indices)


def extractor(source_type: type[Sequence], indices) -> Extractor:
    """Resolve (and memoise) an extractor for a source shape."""
    source = require_sequence_type(source_type, where="extraction source")
    return _extractor_cached(source, _index_list(indices))


def extract(value, indices):
    return extractor(shape_of(value), indices)(value)


def extract_ref(value, indices):
    return extractor(shape_of(value), indices).ref(value)


def extract_one(value, index: int) -> object:
    """Bare element at ``index``."""
    return extractor(shape_of(value), (index,))(value)


def extract_many(value, indices) -> Sequence:
    """Sub-sequence at ``indices``; needs two or more indices (see `extract_one`)."""
    resolved = extractor(shape_of(value), indices)
    if resolved.is_scalar:
        raise TuplewareShapeError("extract_many needs at least two indices; use extract_one for a single slot")
    return resolved(value)
