"""Per-component suite runner and pass-rate reporting helpers.

Each component of the package has its own unittest module; this module runs
them one component at a time so a report can show which component regressed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Final
import io
import json
import unittest


@dataclass(frozen=True)
class SuiteStats:
    name: str
    tests_run: int
    passed: int
    failed: int
    errors: int
    skipped: int

    @classmethod
    def from_result(cls, name: str, result: unittest.TestResult) -> "SuiteStats":
        failed = len(result.failures)
        errors = len(result.errors)
        skipped = len(result.skipped)
        return cls(
            name=name,
            tests_run=result.testsRun,
            passed=result.testsRun - failed - errors - skipped,
            failed=failed,
            errors=errors,
            skipped=skipped,
        )

    @property
    def executable(self) -> int:
        return self.tests_run - self.skipped

    @property
    def pass_rate(self) -> float | None:
        if self.executable == 0:
            return None
        return (self.passed / self.executable) * 100.0

    @property
    def status(self) -> str:
        if self.failed or self.errors:
            return "fail"
        return "skipped" if self.executable == 0 else "pass"

    @property
    def ok(self) -> bool:
        return self.status in {"pass", "skipped"}

    def to_payload(self) -> dict[str, object]:
        payload = asdict(self)
        payload.update(executable=self.executable, pass_rate=self.pass_rate, status=self.status)
        return payload


@dataclass(frozen=True)
class ComponentSection:
    name: str
    title: str
    patterns: tuple[str, ...]


_COMPONENT_SECTIONS: Final[tuple[ComponentSection, ...]] = (
    ComponentSection(name="shapes", title="Predicate, Repeater, Appender", patterns=("test_shapes.py",)),
    ComponentSection(name="extract", title="Extractor", patterns=("test_extract.py",)),
    ComponentSection(name="dispatch", title="Visitors and Dispatcher", patterns=("test_dispatch.py",)),
    ComponentSection(name="broadcast", title="Repeat-builder", patterns=("test_broadcast.py",)),
    ComponentSection(name="aggregate", title="Aggregator", patterns=("test_aggregate.py",)),
    ComponentSection(name="jax", title="JAX pytree and jit integration", patterns=("test_jax_integration.py",)),
)


def default_component_sections() -> tuple[ComponentSection, ...]:
    return _COMPONENT_SECTIONS


def run_patterns(name: str, patterns: tuple[str, ...], *, tests_dir: Path = Path("tests")) -> SuiteStats:
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    for pattern in patterns:
        suite.addTests(loader.discover(start_dir=str(tests_dir), pattern=pattern, top_level_dir=str(tests_dir)))
    result = unittest.TextTestRunner(stream=io.StringIO(), verbosity=0).run(suite)
    return SuiteStats.from_result(name, result)


def run_component_sections(*, tests_dir: Path = Path("tests")) -> list[tuple[ComponentSection, SuiteStats]]:
    return [
        (section, run_patterns(section.name, section.patterns, tests_dir=tests_dir))
        for section in default_component_sections()
    ]


def combine_stats(name: str, stats: list[SuiteStats]) -> SuiteStats:
    return SuiteStats(
        name=name,
        tests_run=sum(s.tests_run for s in stats),
        passed=sum(s.passed for s in stats),
        failed=sum(s.failed for s in stats),
        errors=sum(s.errors for s in stats),
        skipped=sum(s.skipped for s in stats),
    )


def format_rate(stats: SuiteStats) -> str:
    rate = stats.pass_rate
    return "n/a" if rate is None else f"{rate:.2f}%"


def stats_to_markdown_table(rows: list[SuiteStats]) -> str:
    lines = [
        "| Suite | Run | Passed | Skipped | Failed | Errors | Pass Rate | Status |",
        "|---|---:|---:|---:|---:|---:|---:|---|",
    ]
    for row in rows:
        lines.append(
            f"| `{row.name}` | {row.tests_run} | {row.passed} | {row.skipped} | {row.failed} | {row.errors} | {format_rate(row)} | {row.status} |"
        )
    return "\n".join(lines)


def write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
