"""Run per-component unittest suites and write a pass-rate report."""

from __future__ import annotations

import argparse
from pathlib import Path

from tupleware.conformance import combine_stats, format_rate, run_component_sections, stats_to_markdown_table, write_json


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--tests-dir", default="tests", help="directory containing unittest test files")
    parser.add_argument(
        "--json-out",
        default="benchmarks/output/conformance/components.json",
        help="where to write machine-readable results",
    )
    parser.add_argument(
        "--markdown-out",
        default="benchmarks/output/conformance/components.md",
        help="where to write markdown summary",
    )
    args = parser.parse_args()

    rows = run_component_sections(tests_dir=Path(args.tests_dir))
    components = [stats for _, stats in rows]
    overall = combine_stats("tupleware", components)

    report = "\n".join(
        [
            "# Component Conformance Report",
            "",
            stats_to_markdown_table(components + [overall]),
            "",
            f"Executable pass rate: {format_rate(overall)} (`{overall.status}`)",
        ]
    )
    print(report)

    write_json(
        Path(args.json_out),
        {
            "components": [dict(stats.to_payload(), title=section.title) for section, stats in rows],
            "summary": overall.to_payload(),
        },
    )
    out = Path(args.markdown_out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(report + "\n", encoding="utf-8")

    return 1 if overall.status == "fail" else 0


if __name__ == "__main__":
    raise SystemExit(main())
