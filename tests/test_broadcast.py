from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for broadcast tests")
class RepeatBuilderTests(unittest.TestCase):
    def test_int_rank_four(self) -> None:
        from tupleware import repeat_type, repeat_v

        out = repeat_v(int, 4).with_value(3)
        self.assertEqual(len(out), 4)
        self.assertIs(type(out), repeat_type(int, 4))
        for slot in out:
            self.assertEqual(slot, 3)

    def test_value_is_converted_to_scalar_type(self) -> None:
        from tupleware import repeat_v

        out = repeat_v(float, 3)(2)
        self.assertEqual(out.as_tuple(), (2.0, 2.0, 2.0))
        self.assertTrue(all(isinstance(slot, float) for slot in out))

    def test_dtype_scalar_type(self) -> None:
        import jax.numpy as jnp

        from tupleware import repeat_v

        out = repeat_v(jnp.float32, 2).with_value(1)
        for slot in out:
            self.assertEqual(slot.dtype, jnp.float32)
            self.assertEqual(float(slot), 1.0)

    def test_rank_zero_ignores_value(self) -> None:
        from tupleware import Sequence, repeat_v

        out = repeat_v(int, 0).with_value("never converted")
        self.assertIs(type(out), Sequence[()])
        self.assertEqual(len(out), 0)

    def test_builders_are_memoised(self) -> None:
        from tupleware import RepeatBuilder, repeat_v

        self.assertIs(repeat_v(int, 4), repeat_v(int, 4))
        self.assertEqual(RepeatBuilder(int, 4), repeat_v(int, 4))

    def test_negative_rank_fails_at_resolution(self) -> None:
        from tupleware import TuplewareShapeError, repeat_v

        with self.assertRaises(TuplewareShapeError):
            repeat_v(int, -2)

    def test_broadcast_helper(self) -> None:
        from tupleware import Sequence, broadcast

        self.assertEqual(broadcast(5, int, 2), Sequence[int, int](5, 5))

    def test_nested_value_is_copied_into_every_slot(self) -> None:
        from tupleware import Sequence, broadcast

        inner = Sequence[int, float]
        value = inner(1, 2)
        out = broadcast(value, inner, 3)
        self.assertIs(type(out), Sequence[inner, inner, inner])
        for slot in out:
            self.assertEqual(slot, inner(1, 2.0))
            self.assertIsInstance(slot[1], float)
            self.assertIsNot(slot, value)
        self.assertIsNot(out[0], out[1])
        out[0][0] = 9
        self.assertEqual(value[0], 1)
        self.assertEqual(out[1][0], 1)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for broadcast tests")
class ResolveCacheStatsTests(unittest.TestCase):
    def test_stats_track_hits_and_reset(self) -> None:
        from tupleware import Sequence, extractor, repeat_v, resolve_cache_stats

        resolve_cache_stats(reset=True)
        repeat_v(str, 3)
        repeat_v(str, 3)
        extractor(Sequence[int, str], [1, 0])
        stats = resolve_cache_stats()
        self.assertEqual(stats["hits"], 1)
        self.assertEqual(stats["misses"], 2)
        self.assertEqual(stats["size"], 2)
        self.assertGreater(stats["hit_rate"], 0.0)

        cleared = resolve_cache_stats(reset=True)
        self.assertEqual(cleared["size"], 2)
        self.assertEqual(resolve_cache_stats()["size"], 0)


if __name__ == "__main__":
    unittest.main()
