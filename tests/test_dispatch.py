from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for dispatcher tests")
class VisitorStrategyTests(unittest.TestCase):
    def test_get_with_identical_types_is_identity_copy(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        shape = Sequence[int, float, str]
        source = shape(1, 2.5, "x")
        out = Dispatcher(shape, visitors.get).visit_const(source)
        self.assertEqual(out, source)
        self.assertIsNot(out, source)
        self.assertIs(type(out), shape)

    def test_get_copies_nested_sequences(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        inner = Sequence[int, int]
        outer = Sequence[inner, int]
        source = outer(inner(1, 2), 3)
        for entry in ("visit", "visit_const"):
            with self.subTest(entry=entry):
                out = getattr(Dispatcher(outer, visitors.get), entry)(source)
                self.assertEqual(out, source)
                self.assertIs(type(out[0]), inner)
                self.assertIsNot(out[0], source[0])
                out[0][0] = 99
                self.assertEqual(source[0][0], 1)

    def test_get_converts_per_slot(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        out = Dispatcher(Sequence[float, str], visitors.get).visit(Sequence[int, int](1, 2))
        self.assertEqual(out.as_tuple(), (1.0, "2"))
        self.assertIsInstance(out[0], float)

    def test_repeat_broadcasts_with_per_slot_conversion(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        out = Dispatcher(Sequence[int, float, str], visitors.repeat).visit(7)
        self.assertEqual(out.as_tuple(), (7, 7.0, "7"))
        self.assertIsInstance(out[1], float)

    def test_merger_applies_one_function_to_every_slot(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        shape = Sequence[int, int, int]
        out = Dispatcher(shape, visitors.merger).visit_const(shape(1, 2, 3), lambda v: v * 10)
        self.assertEqual(out.as_tuple(), (10, 20, 30))

    def test_strategies_satisfy_visitor_protocol(self) -> None:
        from tupleware import Visitor, visitors

        for strategy in (visitors.get, visitors.repeat, visitors.merger):
            with self.subTest(strategy=strategy):
                self.assertIsInstance(strategy, Visitor)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for dispatcher tests")
class DispatcherTests(unittest.TestCase):
    def test_visits_indices_in_ascending_order(self) -> None:
        from tupleware import Dispatcher, Sequence

        calls: list[int] = []

        def record(index, result_type, source):
            calls.append(index)
            return source[index]

        shape = Sequence[int, int, int]
        out = Dispatcher(shape, record).visit(shape(4, 5, 6))
        self.assertEqual(calls, [0, 1, 2])
        self.assertEqual(out.as_tuple(), (4, 5, 6))

    def test_const_entry_point_hands_out_read_only_views(self) -> None:
        from tupleware import Dispatcher, Sequence, TuplewareAccessError

        def clobber(index, result_type, source):
            source[index] = 0
            return source[index]

        shape = Sequence[int, int]
        source = shape(1, 2)
        dispatcher = Dispatcher(shape, clobber)
        with self.assertRaises(TuplewareAccessError):
            dispatcher.visit_const(source)
        self.assertEqual(source.as_tuple(), (1, 2))

        out = dispatcher.visit(source)
        self.assertEqual(out.as_tuple(), (0, 0))
        self.assertEqual(source.as_tuple(), (0, 0))

    def test_const_entry_point_guards_nested_sequences(self) -> None:
        from tupleware import Dispatcher, Sequence, TuplewareAccessError

        def clobber(index, result_type, source):
            source[index][0] = 0
            return source[index]

        inner = Sequence[int, int]
        shape = Sequence[inner, inner]
        source = shape(inner(1, 2), inner(3, 4))
        with self.assertRaises(TuplewareAccessError):
            Dispatcher(shape, clobber).visit_const(source)
        self.assertEqual(source[0].as_tuple(), (1, 2))
        self.assertEqual(source[1].as_tuple(), (3, 4))

    def test_result_type_may_differ_from_transform_type(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        result = Sequence[object, object]
        out = Dispatcher(Sequence[float, float, float], visitors.get, result_type=result).visit(Sequence[int, int, int](1, 2, 3))
        self.assertIs(type(out), result)
        self.assertEqual(out.as_tuple(), (1.0, 2.0))
        self.assertIsInstance(out[0], float)

    def test_lengths_are_checked_at_resolution(self) -> None:
        from tupleware import Dispatcher, Sequence, TuplewareShapeError, visitors

        with self.assertRaises(TuplewareShapeError):
            Dispatcher(Sequence[int, int], visitors.get, result_type=Sequence[int, int, int])
        with self.assertRaises(TuplewareShapeError):
            Dispatcher(Sequence[int, int, int], visitors.get, length=2)
        with self.assertRaises(TuplewareShapeError):
            Dispatcher(Sequence[int, int], visitors.get, length=-1)

    def test_bad_arguments_fail_at_resolution(self) -> None:
        from tupleware import Dispatcher, Sequence, TuplewareTypeError, visitors

        with self.assertRaises(TuplewareTypeError):
            Dispatcher(Sequence[int], 42)
        with self.assertRaises(TuplewareTypeError):
            Dispatcher(tuple, visitors.get)

    def test_zero_length_dispatch_never_visits(self) -> None:
        from tupleware import Dispatcher, Sequence, visitors

        out = Dispatcher(Sequence[()], visitors.get).visit()
        self.assertEqual(len(out), 0)

    def test_one_shot_dispatch(self) -> None:
        from tupleware import Sequence, dispatch, visitors

        shape = Sequence[int, str]
        source = shape(3, "q")
        self.assertEqual(dispatch(shape, visitors.get, source), source)
        self.assertEqual(dispatch(shape, visitors.merger, source, str, mutable=True).as_tuple(), ("3", "q"))


if __name__ == "__main__":
    unittest.main()
