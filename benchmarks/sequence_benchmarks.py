"""Benchmark extraction, dispatch, broadcast and fold across sequence ranks, eager and jitted."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable

import jax
import jax.numpy as jnp

from tupleware import Aggregator, Dispatcher, extractor, repeat_type, repeat_v, sum_of, visitors
from _bench_utils import (
    calibrate_repeats,
    host_metadata,
    mean as _mean,
    percentile as _percentile,
    sample_adaptive_ms,
    stddev as _stddev,
)


RANKS_DEFAULT = (2, 4, 8, 16)
PROFILE_CONFIG: dict[str, dict[str, float | int]] = {
    "quick": {"samples": 3, "warmup": 1, "target_sample_ms": 10.0, "min_repeats": 8, "cv_target_pct": 25.0, "max_samples": 7},
    "full": {"samples": 7, "warmup": 2, "target_sample_ms": 20.0, "min_repeats": 12, "cv_target_pct": 18.0, "max_samples": 11},
}


@dataclass(frozen=True)
class BenchCase:
    name: str
    build: Callable[[int], Callable[[object], object]]


@dataclass(frozen=True)
class BenchRow:
    name: str
    rank: int
    mode: str
    first_call_ms: float
    mean_ms: float
    stdev_ms: float
    p50_ms: float
    p95_ms: float
    samples: int
    repeats: int


def _ranks_from_arg(raw: str) -> tuple[int, ...]:
    out: list[int] = []
    for part in raw.split(","):
        token = part.strip()
        if not token:
            continue
        rank = int(token)
        if rank <= 0:
            raise SystemExit(f"rank must be positive, got {rank}")
        out.append(rank)
    if not out:
        raise SystemExit("at least one rank is required")
    return tuple(out)


def _reverse(rank: int):
    shape = repeat_type(jnp.float32, rank)
    return extractor(shape, tuple(reversed(range(rank))))


def _cast(rank: int):
    dispatcher = Dispatcher(repeat_type(jnp.float32, rank), visitors.get)
    return dispatcher.visit_const


def _sin(rank: int):
    dispatcher = Dispatcher(repeat_type(jnp.float32, rank), visitors.merger)
    return lambda seq: dispatcher.visit_const(seq, jnp.sin)


def _broadcast_sum(rank: int):
    builder = repeat_v(jnp.float32, rank)
    fold = Aggregator(sum_of(jnp.float32))
    return lambda seq: fold(builder.with_value(seq[0]))


def _sum(rank: int):
    return Aggregator(sum_of(jnp.float32)).from_sequence


def _all_cases() -> list[BenchCase]:
    return [
        BenchCase("extract_reverse", _reverse),
        BenchCase("dispatch_get", _cast),
        BenchCase("dispatch_merger_sin", _sin),
        BenchCase("broadcast_then_sum", _broadcast_sum),
        BenchCase("fold_sum", _sum),
    ]


def _input(rank: int):
    shape = repeat_type(jnp.float32, rank)
    return shape(*(jnp.float32(i + 1) for i in range(rank)))


def _run_case(case: BenchCase, rank: int, mode: str, profile: dict[str, float | int]) -> BenchRow:
    fn = case.build(rank)
    if mode == "jit":
        fn = jax.jit(fn)
    args = (_input(rank),)

    t0 = time.perf_counter()
    jax.block_until_ready(fn(*args))
    first_ms = (time.perf_counter() - t0) * 1e3

    repeats = calibrate_repeats(
        fn,
        args,
        baseline_repeats=int(profile["min_repeats"]),
        target_sample_ms=float(profile["target_sample_ms"]),
        min_repeats=int(profile["min_repeats"]),
    )
    rows = sample_adaptive_ms(
        fn,
        args,
        repeats=repeats,
        warmup=int(profile["warmup"]),
        samples=int(profile["samples"]),
        cv_target_pct=float(profile["cv_target_pct"]),
        max_samples=int(profile["max_samples"]),
    )
    return BenchRow(
        name=case.name,
        rank=rank,
        mode=mode,
        first_call_ms=first_ms,
        mean_ms=_mean(rows),
        stdev_ms=_stddev(rows),
        p50_ms=_percentile(rows, 0.5),
        p95_ms=_percentile(rows, 0.95),
        samples=len(rows),
        repeats=repeats,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--profile", choices=sorted(PROFILE_CONFIG), default="quick", help="fixed benchmark profile presets")
    parser.add_argument("--ranks", default=",".join(str(r) for r in RANKS_DEFAULT), help="comma-separated sequence ranks")
    parser.add_argument("--modes", default="eager,jit", help="comma-separated subset of eager,jit")
    parser.add_argument("--json-out", default="", help="optional path for machine-readable output")
    args = parser.parse_args()

    profile = PROFILE_CONFIG[args.profile]
    ranks = _ranks_from_arg(args.ranks)
    modes = [part.strip() for part in args.modes.split(",") if part.strip()]
    unknown = set(modes) - {"eager", "jit"}
    if unknown:
        raise SystemExit(f"Unknown modes: {sorted(unknown)}")

    print(f"ranks: {ranks}")
    print(f"profile: {args.profile} {profile}")
    print(f"host: backend={jax.default_backend()}")
    print()

    rows: list[BenchRow] = []
    for rank in ranks:
        print(f"rank={rank}")
        for case in _all_cases():
            for mode in modes:
                row = _run_case(case, rank, mode, profile)
                rows.append(row)
                print(
                    f"  {case.name:<22} {mode:<5} first={row.first_call_ms:8.3f}ms "
                    f"mean={row.mean_ms:8.4f}ms p95={row.p95_ms:8.4f}ms"
                )
        print()

    if args.json_out:
        out = Path(args.json_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "generated_at": datetime.now(UTC).isoformat(),
            "host": host_metadata(),
            "profile": args.profile,
            "rows": [asdict(row) for row in rows],
        }
        out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"wrote {out}")


if __name__ == "__main__":
    main()
