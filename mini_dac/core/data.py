"""In-memory table and data-set structures filled by the fill helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .types import RowMapping


class DataTable:
    """Named result table holding column names and value tuples."""

    def __init__(self, name: str = "Table0"):
        self.name = name
        self.columns: List[str] = []
        self.rows: List[Tuple[Any, ...]] = []

    def load(self, columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> int:
        """Append rows to the table and return how many were added.

        Columns are taken from the first load; later loads must match.
        """

        columns = list(columns)
        if not self.columns:
            self.columns = columns
        elif columns and columns != self.columns:
            raise ValueError(
                f"Table {self.name!r} has columns {self.columns!r}, got {columns!r}."
            )
        before = len(self.rows)
        self.rows.extend(tuple(row) for row in rows)
        return len(self.rows) - before

    def clear(self) -> None:
        self.rows.clear()

    def row(self, index: int) -> RowMapping:
        return dict(zip(self.columns, self.rows[index]))

    def column(self, name: str) -> List[Any]:
        idx = self.columns.index(name)
        return [row[idx] for row in self.rows]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]

    def __iter__(self) -> Iterator[RowMapping]:
        for row in self.rows:
            yield dict(zip(self.columns, row))

    def __len__(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"DataTable(name={self.name!r}, columns={self.columns!r}, rows={len(self.rows)})"


class DataSet:
    """Ordered collection of `DataTable` objects, one per result set."""

    def __init__(self, name: str = "NewDataSet"):
        self.name = name
        self.tables: List[DataTable] = []

    def add_table(self, table: Optional[DataTable] = None) -> DataTable:
        """Append a table; unnamed tables are named `Table0`, `Table1`, ... by position."""

        if table is None:
            index = len(self.tables)
            table = DataTable(f"Table{index}")
        if any(existing.name == table.name for existing in self.tables):
            raise ValueError(f"DataSet already contains a table named {table.name!r}.")
        self.tables.append(table)
        return table

    def table_for_result(self, index: int) -> DataTable:
        """Return the table that receives result set `index`, creating it when absent."""

        while len(self.tables) <= index:
            self.add_table()
        return self.tables[index]

    def __getitem__(self, key: Union[int, str]) -> DataTable:
        if isinstance(key, int):
            return self.tables[key]
        for table in self.tables:
            if table.name == key:
                return table
        raise KeyError(key)

    def __contains__(self, name: object) -> bool:
        return any(table.name == name for table in self.tables)

    def __iter__(self) -> Iterator[DataTable]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def __repr__(self) -> str:
        return f"DataSet(name={self.name!r}, tables={[t.name for t in self.tables]!r})"
