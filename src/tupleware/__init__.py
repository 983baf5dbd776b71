"""tupleware public API."""

from . import visitors
from .aggregation import AggregateFunctor, Aggregator, Fold, aggregate, maximum_of, minimum_of, product_of, sum_of
from .broadcasting import RepeatBuilder, broadcast, repeat_v
from .caching import resolve_cache_stats
from .dispatcher import Dispatcher, dispatch
from .errors import (
    TuplewareAccessError,
    TuplewareError,
    TuplewareIndexError,
    TuplewareShapeError,
    TuplewareTypeError,
)
from .extraction import (
    Extractor,
    SequenceView,
    SlotRef,
    extract,
    extract_many,
    extract_one,
    extract_ref,
    extractor,
    readonly_view,
)
from .shapes import Sequence, append, append_value, cast, conforms, is_sequence, repeat_type, sequence_type
from .visitors import Visitor

__all__ = [
    "Sequence",
    "sequence_type",
    "is_sequence",
    "repeat_type",
    "append",
    "append_value",
    "cast",
    "conforms",
    "Extractor",
    "extractor",
    "extract",
    "extract_ref",
    "extract_one",
    "extract_many",
    "SequenceView",
    "SlotRef",
    "readonly_view",
    "Visitor",
    "visitors",
    "Dispatcher",
    "dispatch",
    "RepeatBuilder",
    "repeat_v",
    "broadcast",
    "AggregateFunctor",
    "Aggregator",
    "Fold",
    "aggregate",
    "sum_of",
    "product_of",
    "maximum_of",
    "minimum_of",
    "resolve_cache_stats",
    "TuplewareError",
    "TuplewareShapeError",
    "TuplewareIndexError",
    "TuplewareTypeError",
    "TuplewareAccessError",
]
