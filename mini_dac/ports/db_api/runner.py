"""Typed command execution on an open connection, with status-code checks."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Union

from ...core._async_utils import _maybe_await
from ...core.commands import Command
from ...core.data import DataSet, DataTable
from ...core.exceptions import DacGenericError, DacReturnCodeError, Messages
from .dialects import Dialect
from .reader import (
    AsyncDataReader,
    DataReader,
    _close_cursor,
    column_names,
    first_value,
    row_values,
)

FillTarget = Union[DataTable, DataSet]


def validate_paging(start_record: int, max_records: int) -> None:
    if start_record < 0:
        raise ValueError("start_record must be >= 0.")
    if max_records < 0:
        raise ValueError("max_records must be >= 0.")


def page_rows(rows: list[Any], start_record: int, max_records: int) -> list[Any]:
    if max_records == 0:
        return rows[start_record:] if start_record else rows
    return rows[start_record:start_record + max_records]


def require_fill_target(data_out: Any) -> FillTarget:
    if isinstance(data_out, (DataTable, DataSet)):
        return data_out
    raise DacGenericError(Messages.FILL_DATA_INVALID_TYPE_PASSED + type(data_out).__name__)


class CommandRunner:
    """Run one `Command` on an open DB-API connection.

    Every method reads the status code after execution and raises
    `DacReturnCodeError` with the partial result when it is non-zero. A reader
    skips the check when the status only follows its unread rows.
    Connection lifecycle belongs to the caller.
    """

    def __init__(self, dialect: Dialect, *, check_cancelled: Callable[[], None]):
        self.dialect = dialect
        self._check_cancelled = check_cancelled

    def _execute(self, conn: Any, command: Command) -> Any:
        self._check_cancelled()
        cur = conn.cursor()
        try:
            self.dialect.execute(cur, command)
        except BaseException:
            _close_cursor(cur)
            raise
        return cur

    def _raise_for_status(self, cursor: Any, command: Command, result: Any) -> None:
        code = self.dialect.read_status_code(cursor, command)
        if code != 0:
            raise DacReturnCodeError(code, result)

    def non_query(self, conn: Any, command: Command) -> int:
        cur = self._execute(conn, command)
        try:
            rows = getattr(cur, "rowcount", -1)
            rows = -1 if rows is None else int(rows)
            self._raise_for_status(cur, command, rows)
            return rows
        finally:
            _close_cursor(cur)

    def scalar(self, conn: Any, command: Command) -> Any:
        cur = self._execute(conn, command)
        try:
            value = None
            if column_names(cur) and not self.dialect.is_status_result(cur, command):
                value = first_value(cur.fetchone())
            self._raise_for_status(cur, command, value)
            return value
        finally:
            _close_cursor(cur)

    def reader(self, conn: Any, command: Command, on_close: Callable[[Any], None]) -> DataReader:
        cur = self._execute(conn, command)
        reader = DataReader(cur, conn, on_close)
        try:
            # A status selected after the rows is only readable once they are consumed.
            if self.dialect.status_ready(cur, command):
                self._raise_for_status(cur, command, reader)
        except DacReturnCodeError:
            raise
        except BaseException:
            _close_cursor(cur)
            raise
        return reader

    def fill(
        self,
        conn: Any,
        command: Command,
        data_out: FillTarget,
        *,
        start_record: int = 0,
        max_records: int = 0,
    ) -> FillTarget:
        cur = self._execute(conn, command)
        try:
            paged = bool(start_record or max_records)
            index = 0
            while not self.dialect.is_status_result(cur, command):
                columns = column_names(cur)
                if columns:
                    rows = page_rows(list(cur.fetchall()), start_record, max_records)
                    table = data_out if isinstance(data_out, DataTable) else data_out.table_for_result(index)
                    table.load(columns, [row_values(r) for r in rows])
                    index += 1
                    if isinstance(data_out, DataTable) or paged:
                        break
                nextset = getattr(cur, "nextset", None)
                if not callable(nextset) or not nextset():
                    break
            self._raise_for_status(cur, command, data_out)
            return data_out
        finally:
            _close_cursor(cur)


class AsyncCommandRunner:
    """Async counterpart of `CommandRunner`; driver calls may be coroutines."""

    def __init__(self, dialect: Dialect, *, check_cancelled: Callable[[], None]):
        self.dialect = dialect
        self._check_cancelled = check_cancelled

    async def _execute(self, conn: Any, command: Command) -> Any:
        self._check_cancelled()
        cur = await _maybe_await(conn.cursor())
        try:
            await self.dialect.execute_async(cur, command)
        except BaseException:
            await _close_cursor_async(cur)
            raise
        return cur

    async def _raise_for_status(self, cursor: Any, command: Command, result: Any) -> None:
        code = await self.dialect.read_status_code_async(cursor, command)
        if code != 0:
            raise DacReturnCodeError(code, result)

    async def non_query(self, conn: Any, command: Command) -> int:
        cur = await self._execute(conn, command)
        try:
            rows = getattr(cur, "rowcount", -1)
            rows = -1 if rows is None else int(rows)
            await self._raise_for_status(cur, command, rows)
            return rows
        finally:
            await _close_cursor_async(cur)

    async def scalar(self, conn: Any, command: Command) -> Any:
        cur = await self._execute(conn, command)
        try:
            value = None
            if column_names(cur) and not self.dialect.is_status_result(cur, command):
                value = first_value(await _maybe_await(cur.fetchone()))
            await self._raise_for_status(cur, command, value)
            return value
        finally:
            await _close_cursor_async(cur)

    async def reader(
        self,
        conn: Any,
        command: Command,
        on_close: Callable[[Any], Awaitable[None]],
    ) -> AsyncDataReader:
        cur = await self._execute(conn, command)
        reader = AsyncDataReader(cur, conn, on_close)
        try:
            if self.dialect.status_ready(cur, command):
                await self._raise_for_status(cur, command, reader)
        except DacReturnCodeError:
            raise
        except BaseException:
            await _close_cursor_async(cur)
            raise
        return reader

    async def fill(
        self,
        conn: Any,
        command: Command,
        data_out: FillTarget,
        *,
        start_record: int = 0,
        max_records: int = 0,
    ) -> FillTarget:
        cur = await self._execute(conn, command)
        try:
            paged = bool(start_record or max_records)
            index = 0
            while not self.dialect.is_status_result(cur, command):
                columns = column_names(cur)
                if columns:
                    fetched = await _maybe_await(cur.fetchall())
                    rows = page_rows(list(fetched), start_record, max_records)
                    table = data_out if isinstance(data_out, DataTable) else data_out.table_for_result(index)
                    table.load(columns, [row_values(r) for r in rows])
                    index += 1
                    if isinstance(data_out, DataTable) or paged:
                        break
                nextset = getattr(cur, "nextset", None)
                if not callable(nextset) or not await _maybe_await(nextset()):
                    break
            await self._raise_for_status(cur, command, data_out)
            return data_out
        finally:
            await _close_cursor_async(cur)


async def _close_cursor_async(cursor: Any) -> None:
    close = getattr(cursor, "close", None)
    if callable(close):
        await _maybe_await(close())
