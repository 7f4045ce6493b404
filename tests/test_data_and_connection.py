from __future__ import annotations

import sqlite3
import unittest
from functools import partial

from mini_dac import ConnectionFactory, DataSet, DataTable, ExecutionOptions


class DataTableTests(unittest.TestCase):
    def test_load_sets_columns_once_and_appends(self) -> None:
        table = DataTable()

        self.assertEqual(table.load(["a", "b"], [(1, 2)]), 1)
        self.assertEqual(table.load(["a", "b"], [[3, 4], (5, 6)]), 2)

        self.assertEqual(table.name, "Table0")
        self.assertEqual(table.rows, [(1, 2), (3, 4), (5, 6)])
        self.assertEqual(table.row(1), {"a": 3, "b": 4})
        self.assertEqual(list(table)[2], {"a": 5, "b": 6})

    def test_mismatched_columns_are_rejected(self) -> None:
        table = DataTable("t")
        table.load(["a"], [])

        with self.assertRaises(ValueError):
            table.load(["b"], [(1,)])

    def test_clear_keeps_columns(self) -> None:
        table = DataTable()
        table.load(["a"], [(1,)])
        table.clear()

        self.assertEqual((table.columns, len(table)), (["a"], 0))


class DataSetTests(unittest.TestCase):
    def test_auto_naming_and_lookup(self) -> None:
        ds = DataSet()
        ds.add_table()
        ds.add_table(DataTable("users"))
        third = ds.table_for_result(2)

        self.assertEqual([t.name for t in ds], ["Table0", "users", "Table2"])
        self.assertIs(ds["Table2"], third)
        self.assertIn("users", ds)
        with self.assertRaises(KeyError):
            ds["missing"]

    def test_first_result_table_matches_standalone_default_name(self) -> None:
        self.assertEqual(DataSet().table_for_result(0).name, DataTable().name)

    def test_duplicate_names_are_rejected(self) -> None:
        ds = DataSet()
        ds.add_table(DataTable("x"))

        with self.assertRaises(ValueError):
            ds.add_table(DataTable("x"))


class ConnectionFactoryTests(unittest.TestCase):
    def test_partial_is_unpacked_for_driver_lookup(self) -> None:
        factory = ConnectionFactory(partial(sqlite3.connect, ":memory:"))

        self.assertEqual(factory.driver_errors(), (sqlite3.Error,))

        conn = factory.open()
        try:
            self.assertEqual(conn.execute("SELECT 1").fetchone(), (1,))
        finally:
            factory.close(conn)

    def test_partial_arguments_merge_with_factory_arguments(self) -> None:
        def connect(*args, **kwargs):  # noqa: ANN002,ANN003,ANN202
            return args, kwargs

        factory = ConnectionFactory(partial(connect, "main.db", timeout=1), "extra", timeout=5)

        self.assertEqual(factory.open(), (("main.db", "extra"), {"timeout": 5}))
        self.assertEqual(factory.module_name, __name__)

    def test_unknown_driver_has_no_error_types(self) -> None:
        factory = ConnectionFactory(lambda: object())

        self.assertEqual(factory.driver_errors(), ())

    def test_non_callable_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            ConnectionFactory("sqlite://")  # type: ignore[arg-type]


class ExecutionOptionsTests(unittest.TestCase):
    def test_merge_applies_only_explicit_flags(self) -> None:
        options = ExecutionOptions(throw_db_exception=False)

        self.assertIs(options.merge(), options)
        merged = options.merge(throw_db_exception=True)
        self.assertEqual((merged.throw_db_exception, merged.throw_system_exception), (True, True))

    def test_empty_status_parameter_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ExecutionOptions(status_parameter="")


if __name__ == "__main__":
    unittest.main()
