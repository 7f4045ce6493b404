"""Forward-only readers over an executed cursor and row normalization helpers."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Mapping, Tuple

from ...core._async_utils import _maybe_await
from ...core.types import MaybeRow, RowMapping, Rows


def column_names(cursor: Any) -> List[str]:
    desc = getattr(cursor, "description", None)
    if not desc:
        return []
    return [d[0] for d in desc]


def row_to_mapping(cursor: Any, row: Any) -> RowMapping:
    """Normalize row object to mapping.

    Supports mapping rows directly and tuple/list rows via
    `cursor.description`.
    """

    if isinstance(row, Mapping):
        return row

    if isinstance(row, (tuple, list)):
        cols = column_names(cursor)
        if not cols:
            raise TypeError(
                "Cursor has no description; cannot map tuple rows to dict."
            )
        return dict(zip(cols, row, strict=True))

    try:
        return dict(row)
    except (TypeError, ValueError):
        pass

    raise TypeError(f"Unsupported row type: {type(row)}")


def row_values(row: Any) -> Tuple[Any, ...]:
    """Return row values as a tuple, for mapping and sequence rows alike."""

    if isinstance(row, Mapping):
        return tuple(row.values())
    return tuple(row)


def first_value(row: Any) -> Any:
    if row is None:
        return None
    values = row_values(row)
    return values[0] if values else None


def _close_cursor(cursor: Any) -> None:
    close = getattr(cursor, "close", None)
    if callable(close):
        close()


class DataReader:
    """Forward-only reader that owns its cursor and connection.

    Closing the reader closes the cursor, then releases the connection through
    `on_close`, exactly once.
    """

    owns_connection = True

    def __init__(self, cursor: Any, connection: Any, on_close: Callable[[Any], None]):
        self._cursor = cursor
        self._connection = connection
        self._on_close = on_close
        self._current: MaybeRow = None
        self._closed = False

    @property
    def columns(self) -> List[str]:
        return column_names(self._cursor)

    @property
    def current(self) -> MaybeRow:
        """Row loaded by the last successful `read()`."""

        return self._current

    @property
    def closed(self) -> bool:
        return self._closed

    def _require_open(self) -> Any:
        if self._closed:
            raise RuntimeError("reader is closed")
        return self._cursor

    def read(self) -> bool:
        """Advance to the next row; `False` once rows are exhausted."""

        self._current = self.fetchone()
        return self._current is not None

    def fetchone(self) -> MaybeRow:
        cur = self._require_open()
        row = cur.fetchone()
        if row is None:
            return None
        return row_to_mapping(cur, row)

    def fetchmany(self, size: int) -> Rows:
        cur = self._require_open()
        return [row_to_mapping(cur, r) for r in cur.fetchmany(size)]

    def fetchall(self) -> Rows:
        cur = self._require_open()
        return [row_to_mapping(cur, r) for r in cur.fetchall()]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            _close_cursor(self._cursor)
        finally:
            self._on_close(self._connection)

    def __iter__(self) -> DataReader:
        return self

    def __next__(self) -> RowMapping:
        row = self.fetchone()
        if row is None:
            raise StopIteration
        return row

    def __enter__(self) -> DataReader:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


class AsyncDataReader:
    """Async forward-only reader; cursor methods may return awaitables."""

    owns_connection = True

    def __init__(
        self,
        cursor: Any,
        connection: Any,
        on_close: Callable[[Any], Awaitable[None]],
    ):
        self._cursor = cursor
        self._connection = connection
        self._on_close = on_close
        self._current: MaybeRow = None
        self._closed = False

    @property
    def columns(self) -> List[str]:
        return column_names(self._cursor)

    @property
    def current(self) -> MaybeRow:
        return self._current

    @property
    def closed(self) -> bool:
        return self._closed

    def _require_open(self) -> Any:
        if self._closed:
            raise RuntimeError("reader is closed")
        return self._cursor

    async def read(self) -> bool:
        self._current = await self.fetchone()
        return self._current is not None

    async def fetchone(self) -> MaybeRow:
        cur = self._require_open()
        row = await _maybe_await(cur.fetchone())
        if row is None:
            return None
        return row_to_mapping(cur, row)

    async def fetchmany(self, size: int) -> Rows:
        cur = self._require_open()
        rows = await _maybe_await(cur.fetchmany(size))
        return [row_to_mapping(cur, r) for r in rows]

    async def fetchall(self) -> Rows:
        cur = self._require_open()
        rows = await _maybe_await(cur.fetchall())
        return [row_to_mapping(cur, r) for r in rows]

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            close = getattr(self._cursor, "close", None)
            if callable(close):
                await _maybe_await(close())
        finally:
            await self._on_close(self._connection)

    def __aiter__(self) -> AsyncDataReader:
        return self

    async def __anext__(self) -> RowMapping:
        row = await self.fetchone()
        if row is None:
            raise StopAsyncIteration
        return row

    async def __aenter__(self) -> AsyncDataReader:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.aclose()
