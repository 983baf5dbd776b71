from __future__ import annotations

import importlib.util
import tempfile
import unittest
from pathlib import Path


_PASSING_SUITE = '''
import unittest


class Passing(unittest.TestCase):
    def test_ok(self):
        self.assertTrue(True)

    @unittest.skip("not today")
    def test_skipped(self):
        pass
'''


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required to import tupleware")
class ConformanceHelpersTests(unittest.TestCase):
    def _stats(self, name: str, *, run: int, passed: int, failed: int = 0, errors: int = 0, skipped: int = 0):
        from tupleware.conformance import SuiteStats

        return SuiteStats(name=name, tests_run=run, passed=passed, failed=failed, errors=errors, skipped=skipped)

    def test_component_sections_point_at_existing_suites(self) -> None:
        from tupleware.conformance import default_component_sections

        tests_dir = Path(__file__).resolve().parent
        for section in default_component_sections():
            for pattern in section.patterns:
                with self.subTest(section=section.name, pattern=pattern):
                    self.assertTrue((tests_dir / pattern).is_file())

    def test_combine_stats(self) -> None:
        from tupleware.conformance import combine_stats

        overall = combine_stats(
            "all",
            [
                self._stats("a", run=4, passed=4),
                self._stats("b", run=2, passed=1, failed=1),
                self._stats("c", run=1, passed=0, skipped=1),
            ],
        )
        self.assertEqual(overall.tests_run, 7)
        self.assertEqual(overall.passed, 5)
        self.assertEqual(overall.executable, 6)
        self.assertEqual(overall.status, "fail")
        self.assertFalse(overall.ok)

    def test_all_skipped_is_ok(self) -> None:
        from tupleware.conformance import combine_stats

        overall = combine_stats("skips", [self._stats("s", run=3, passed=0, skipped=3)])
        self.assertEqual(overall.status, "skipped")
        self.assertIsNone(overall.pass_rate)
        self.assertTrue(overall.ok)

    def test_markdown_table(self) -> None:
        from tupleware.conformance import stats_to_markdown_table

        table = stats_to_markdown_table([self._stats("shapes", run=2, passed=2)])
        lines = table.splitlines()
        self.assertEqual(len(lines), 3)
        self.assertIn("| `shapes` | 2 | 2 | 0 | 0 | 0 | 100.00% | pass |", lines[2])

    def test_run_patterns_and_json_payload(self) -> None:
        import json

        from tupleware.conformance import run_patterns, write_json

        with tempfile.TemporaryDirectory() as tmp:
            tests_dir = Path(tmp)
            (tests_dir / "test_tupleware_tmp_suite.py").write_text(_PASSING_SUITE, encoding="utf-8")
            stats = run_patterns("tmp", ("test_tupleware_tmp_suite.py",), tests_dir=tests_dir)
            self.assertEqual(stats.tests_run, 2)
            self.assertEqual(stats.passed, 1)
            self.assertEqual(stats.skipped, 1)
            self.assertEqual(stats.status, "pass")

            out = tests_dir / "report" / "stats.json"
            write_json(out, [stats.to_payload()])
            payload = json.loads(out.read_text(encoding="utf-8"))
            self.assertEqual(payload[0]["name"], "tmp")
            self.assertEqual(payload[0]["pass_rate"], 100.0)


if __name__ == "__main__":
    unittest.main()
