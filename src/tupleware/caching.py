"""Memoisation for resolved operations, sized from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Callable, Final, TypeVar

_F = TypeVar("_F", bound=Callable[..., object])

RESOLVE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("TUPLEWARE_RESOLVE_CACHE_MAX", "512")))

_RESOLVERS: list = []


def resolver(fn: _F) -> _F:
    """Memoise a shape-resolution function and track it for `resolve_cache_stats`."""
    cached = lru_cache(maxsize=RESOLVE_CACHE_MAX)(fn)
    _RESOLVERS.append(cached)
    return cached  # type: ignore[return-value]


def resolve_cache_stats(*, reset: bool = False) -> dict[str, float | int]:
    hits = 0
    misses = 0
    size = 0
    for fn in _RESOLVERS:
        info = fn.cache_info()
        hits += info.hits
        misses += info.misses
        size += info.currsize
    total = hits + misses
    stats: dict[str, float | int] = {
        "hits": hits,
        "misses": misses,
        "size": size,
        "max_size": RESOLVE_CACHE_MAX,
        "resolvers": len(_RESOLVERS),
        "hit_rate": float(hits / total) if total else 0.0,
    }
    if reset:
        for fn in _RESOLVERS:
            fn.cache_clear()
    return stats
