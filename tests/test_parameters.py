from __future__ import annotations

import pickle
import threading
import unittest
from collections import OrderedDict, namedtuple
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Optional

from mini_dac import DB_NULL, DacParameters, FieldCache, Parameter, ParameterDirection, to_parameters


@dataclass
class UserParams:
    user_id: int
    email: Optional[str] = None
    _secret: str = "hidden"

    @property
    def domain(self) -> Optional[str]:
        return self.email.split("@")[1] if self.email else None


Point = namedtuple("Point", ["x", "y"])


class SlottedParams:
    __slots__ = ("code", "label")

    def __init__(self, code: int, label: Optional[str]):
        self.code = code
        self.label = label


class PlainParams:
    def __init__(self) -> None:
        self.first = 1
        self.second = None
        self._private = "x"


class ParameterModelTests(unittest.TestCase):
    def test_none_value_is_coalesced_to_db_null(self) -> None:
        param = Parameter("name", None)

        self.assertIs(param.value, DB_NULL)
        self.assertTrue(param.is_null)
        self.assertIsNot(param.value, None)

    def test_db_null_is_singleton_and_falsy(self) -> None:
        self.assertFalse(DB_NULL)
        self.assertEqual(repr(DB_NULL), "DB_NULL")
        self.assertIs(pickle.loads(pickle.dumps(DB_NULL)), DB_NULL)
        self.assertIs(type(DB_NULL)(), DB_NULL)

    def test_empty_name_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Parameter("", 1)
        with self.assertRaises(ValueError):
            Parameter(None, 1)  # type: ignore[arg-type]

    def test_bind_name_strips_driver_prefixes(self) -> None:
        self.assertEqual(Parameter("@user_id", 1).bind_name, "user_id")
        self.assertEqual(Parameter(":user_id", 1).bind_name, "user_id")
        self.assertEqual(Parameter("user_id", 1).bind_name, "user_id")

    def test_direction_accepts_string_value(self) -> None:
        param = Parameter("rv", direction="return_value")  # type: ignore[arg-type]
        self.assertIs(param.direction, ParameterDirection.RETURN_VALUE)


class DacParametersTests(unittest.TestCase):
    def test_chainable_builders_preserve_order_and_duplicates(self) -> None:
        params = (
            DacParameters()
            .add_item("a", 1)
            .add(Parameter("b", None))
            .add_range([("a", 3), Parameter("c", "x")])
            .add_range({"d": None})
        )

        self.assertEqual(params.names(), ["a", "b", "a", "c", "d"])
        self.assertEqual([p.value for p in params], [1, DB_NULL, 3, "x", DB_NULL])
        self.assertEqual(len(params), 5)
        self.assertEqual(params[2].value, 3)

    def test_add_range_rejects_bad_items(self) -> None:
        with self.assertRaises(TypeError):
            DacParameters().add_range(["ab"])
        with self.assertRaises(TypeError):
            DacParameters().add_range([("a", 1, 2)])
        with self.assertRaises(TypeError):
            DacParameters().add(("a", 1))  # type: ignore[arg-type]

    def test_add_object_none_is_noop(self) -> None:
        self.assertEqual(len(DacParameters().add_object(None)), 0)


class ToParametersTests(unittest.TestCase):
    def test_none_and_empty_inputs_give_empty_set(self) -> None:
        self.assertEqual(len(to_parameters(None)), 0)
        self.assertEqual(len(to_parameters({})), 0)
        self.assertEqual(len(to_parameters([])), 0)
        self.assertEqual(len(to_parameters(())), 0)

    def test_pairs_keep_order_count_and_null_coalescing(self) -> None:
        pairs = [("z", 1), ("a", None), ("m", 0), ("b", "")]

        params = to_parameters(pairs)

        self.assertEqual(params.names(), ["z", "a", "m", "b"])
        self.assertEqual([p.value for p in params], [1, DB_NULL, 0, ""])
        self.assertTrue(all(p.value is not None for p in params))

    def test_mapping_keeps_insertion_order(self) -> None:
        params = to_parameters(OrderedDict([("second", 2), ("first", None)]))

        self.assertEqual(params.names(), ["second", "first"])
        self.assertIs(params[1].value, DB_NULL)

    def test_generator_of_pairs_is_accepted(self) -> None:
        params = to_parameters((f"p{i}", i) for i in range(3))
        self.assertEqual(params.names(), ["p0", "p1", "p2"])

    def test_existing_collection_is_returned_unchanged(self) -> None:
        params = DacParameters().add_item("a", 1)
        self.assertIs(to_parameters(params), params)

    def test_single_parameter_is_wrapped(self) -> None:
        params = to_parameters(Parameter("a", None))
        self.assertEqual(params.names(), ["a"])

    def test_dataclass_fields_and_properties_become_parameters(self) -> None:
        params = to_parameters(UserParams(user_id=7, email=None))

        self.assertEqual(params.names(), ["user_id", "email", "domain"])
        self.assertEqual(params[0].value, 7)
        self.assertIs(params[1].value, DB_NULL)
        self.assertIs(params[2].value, DB_NULL)

    def test_namedtuple_is_treated_as_record(self) -> None:
        params = to_parameters(Point(x=1, y=None))

        self.assertEqual(params.names(), ["x", "y"])
        self.assertIs(params[1].value, DB_NULL)

    def test_slotted_object(self) -> None:
        params = to_parameters(SlottedParams(3, None))

        self.assertEqual(params.names(), ["code", "label"])
        self.assertIs(params[1].value, DB_NULL)

    def test_plain_object_and_namespace_use_public_instance_attributes(self) -> None:
        self.assertEqual(to_parameters(PlainParams()).names(), ["first", "second"])
        ns = to_parameters(SimpleNamespace(a=1, b=None))
        self.assertEqual(ns.names(), ["a", "b"])
        self.assertIs(ns[1].value, DB_NULL)

    def test_unsupported_shapes_raise(self) -> None:
        with self.assertRaises(TypeError):
            to_parameters("a=1")
        with self.assertRaises(TypeError):
            to_parameters({("a", 1)})

    def test_empty_text_and_sets_give_empty_parameters(self) -> None:
        for empty in ("", b"", set(), frozenset()):
            with self.subTest(empty=empty):
                self.assertEqual(len(to_parameters(empty)), 0)


class FieldCacheTests(unittest.TestCase):
    def test_type_stable_shapes_are_cached_once(self) -> None:
        cache = FieldCache()

        first = cache.fields_for(UserParams(1))
        second = cache.fields_for(UserParams(2, "a@b.c"))

        self.assertIs(first, second)
        self.assertIn(UserParams, cache)
        self.assertEqual(len(cache), 1)

    def test_per_instance_shapes_are_not_cached(self) -> None:
        cache = FieldCache()

        self.assertEqual(cache.fields_for(SimpleNamespace(a=1)), ("a",))
        self.assertEqual(cache.fields_for(SimpleNamespace(b=2, c=3)), ("b", "c"))
        self.assertEqual(len(cache), 0)

    def test_injected_cache_is_used_by_normalizer(self) -> None:
        cache = FieldCache()

        to_parameters(Point(1, 2), cache=cache)

        self.assertIn(Point, cache)

    def test_concurrent_population_is_consistent(self) -> None:
        cache = FieldCache()
        results: list[tuple[str, ...]] = []
        lock = threading.Lock()

        def worker() -> None:
            names = cache.fields_for(UserParams(1))
            with lock:
                results.append(names)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(set(results)), 1)
        self.assertEqual(len(cache), 1)


if __name__ == "__main__":
    unittest.main()
