"""Shared benchmark runtime helpers."""

from __future__ import annotations

import math
import os
import platform
import time
from typing import Any

import jax

THREAD_ENV_VARS = (
    "OMP_NUM_THREADS",
    "XLA_FLAGS",
    "JAX_NUM_THREADS",
    "JAX_ENABLE_X64",
    "TUPLEWARE_RESOLVE_CACHE_MAX",
)


def host_metadata() -> dict[str, Any]:
    return {
        "platform": platform.platform(),
        "python": platform.python_version(),
        "jax": getattr(jax, "__version__", "unknown"),
        "backend": jax.default_backend(),
        "cpu_count": os.cpu_count(),
        "thread_env": {name: os.environ[name] for name in THREAD_ENV_VARS if name in os.environ},
    }


def block_until_ready(value: object) -> None:
    # Sequences are pytrees; wait on every array leaf.
    for leaf in jax.tree_util.tree_leaves(value):
        if hasattr(leaf, "block_until_ready"):
            leaf.block_until_ready()


def percentile(values: list[float], q: float) -> float:
    ordered = sorted(values)
    pos = (len(ordered) - 1) * q
    lo = math.floor(pos)
    hi = math.ceil(pos)
    return ordered[lo] + (ordered[hi] - ordered[lo]) * (pos - lo)


def mean(values: list[float]) -> float:
    return sum(values) / len(values)


def stddev(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    m = mean(values)
    return math.sqrt(sum((v - m) ** 2 for v in values) / (len(values) - 1))


def _per_call_ms(fn, args: tuple[object, ...], repeats: int) -> float:
    start_ns = time.perf_counter_ns()
    for _ in range(repeats):
        block_until_ready(fn(*args))
    return (time.perf_counter_ns() - start_ns) / repeats / 1e6


def calibrate_repeats(
    fn,
    args: tuple[object, ...],
    *,
    baseline_repeats: int,
    target_sample_ms: float,
    min_repeats: int,
    max_repeats: int = 200_000,
) -> int:
    """Pick a repeat count so one sample takes roughly ``target_sample_ms``."""
    per_call_ms = max(_per_call_ms(fn, args, max(4, min_repeats // 4)), 1e-3)
    wanted = math.ceil(max(target_sample_ms, 1.0) / per_call_ms)
    return int(max(baseline_repeats, min_repeats, min(wanted, max_repeats)))


def sample_adaptive_ms(
    fn,
    args: tuple[object, ...],
    *,
    repeats: int,
    warmup: int,
    samples: int,
    cv_target_pct: float,
    max_samples: int,
) -> list[float]:
    """Take ``samples`` timings, then keep sampling until the CV drops under target."""
    for _ in range(max(0, warmup)):
        block_until_ready(fn(*args))

    rows = [_per_call_ms(fn, args, repeats) for _ in range(samples)]
    while len(rows) < max_samples:
        m = mean(rows)
        if m <= 0 or stddev(rows) / m * 100.0 <= cv_target_pct:
            break
        rows.append(_per_call_ms(fn, args, repeats))
    return rows
