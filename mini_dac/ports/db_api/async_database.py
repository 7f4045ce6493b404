"""Async batch executor for async (or sync) DB-API style drivers."""

from __future__ import annotations

from functools import partial
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from ...core.commands import Command, CommandType, CommandTypeInput
from ...core.contracts import CancellationToken
from ...core.data import DataSet, DataTable
from ...core.exceptions import Messages
from ...core.executor import (
    check_cancelled,
    classify_failure,
    cleanup_failure,
    keeps_connection,
)
from ...core.field_cache import FieldCache
from ...core.options import ExecutionOptions
from ...core.parameters import ParameterSource
from .connection import ConnectionFactory
from .dialects import Dialect
from .reader import AsyncDataReader
from .runner import AsyncCommandRunner, FillTarget, require_fill_target, validate_paging
from .transaction import AsyncDacTransaction

R = TypeVar("R")


class AsyncDataBase:
    """Async data-access executor.

    Each call performs one open, execute, close sequence and awaits every
    driver call that returns an awaitable, so plain sync DB-API drivers work
    as well.
    """

    def __init__(
        self,
        connect: Callable[..., Any] | ConnectionFactory,
        dialect: Dialect,
        *,
        options: Optional[ExecutionOptions] = None,
        cancellation: Optional[CancellationToken] = None,
        driver_errors: Optional[Tuple[Type[BaseException], ...]] = None,
        field_cache: Optional[FieldCache] = None,
    ):
        self.factory = connect if isinstance(connect, ConnectionFactory) else ConnectionFactory(connect)
        self.dialect = dialect
        self.options = options or ExecutionOptions()
        self.cancellation = cancellation
        self.driver_errors = (
            tuple(driver_errors) if driver_errors is not None else self.factory.driver_errors()
        )
        self.field_cache = field_cache
        self._runner = AsyncCommandRunner(dialect, check_cancelled=self._check_cancelled)

    def _check_cancelled(self) -> None:
        check_cancelled(self.cancellation)

    def build_command(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
    ) -> Command:
        return Command.build(
            sql,
            parameters,
            command_type,
            status_parameter=self.options.status_parameter,
            cache=self.field_cache,
        )

    async def _close(
        self,
        conn: Any,
        *,
        pending: Optional[BaseException],
        options: ExecutionOptions,
    ) -> Optional[BaseException]:
        try:
            await self.factory.close_async(conn)
        except Exception as exc:
            return cleanup_failure(
                exc,
                Messages.SQL_CONNECTION_CLOSE_EXCEPTION,
                pending=pending,
                options=options,
            )
        return None

    async def _close_reader_connection(self, conn: Any, options: ExecutionOptions) -> None:
        error = await self._close(conn, pending=None, options=options)
        if error is not None:
            raise error

    async def execute_sql_batch(
        self,
        batch: Callable[[Any], Awaitable[R]],
        *,
        close_connection: bool = True,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
        default: Any = None,
    ) -> R:
        """Run `await batch(connection)` on a freshly opened connection.

        See `DataBase.execute_sql_batch` for flags, defaults and raised errors.
        Task cancellation propagates unchanged after the connection is closed.
        """

        options = self.options.merge(
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )
        conn = None
        failed = False
        pending: Optional[BaseException] = None
        result: Any = default

        try:
            self._check_cancelled()
            conn = await self.factory.open_async()
            result = await batch(conn)
            if close_connection:
                await self.factory.commit_async(conn)
        except BaseException as exc:
            failed = True
            result = default
            pending = classify_failure(exc, driver_errors=self.driver_errors, options=options)

        close_error = None
        if conn is not None and (close_connection or (failed and not keeps_connection(pending))):
            close_error = await self._close(conn, pending=pending, options=options)

        if pending is not None:
            raise pending
        if close_error is not None:
            raise close_error
        return result

    async def execute_transactional_sql_batch(
        self,
        batch: Callable[[AsyncDacTransaction], Awaitable[R]],
        *,
        close_connection: bool = True,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
        default: Any = None,
    ) -> R:
        """Run `await batch(transaction)` inside one commit/rollback scope."""

        options = self.options.merge(
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )
        conn = None
        tx: Optional[AsyncDacTransaction] = None
        failed = False
        pending: Optional[BaseException] = None
        rollback_exc: Optional[Exception] = None
        result: Any = default

        try:
            self._check_cancelled()
            conn = await self.factory.open_async()
            tx = AsyncDacTransaction(conn, self.dialect, self._runner, self.build_command)
            await tx.begin()
            result = await batch(tx)
            self._check_cancelled()
            await tx.commit()
        except BaseException as exc:
            failed = True
            result = default
            if tx is not None and tx.is_active:
                try:
                    await tx.rollback()
                except Exception as rb_exc:
                    rollback_exc = rb_exc
            pending = classify_failure(exc, driver_errors=self.driver_errors, options=options)

        cleanup_error = None
        if rollback_exc is not None:
            cleanup_error = cleanup_failure(
                rollback_exc,
                Messages.SQL_TRANSACTION_ROLLBACK_EXCEPTION,
                pending=pending,
                options=options,
            )
        if conn is not None and (close_connection or failed):
            close_error = await self._close(conn, pending=pending or cleanup_error, options=options)
            cleanup_error = cleanup_error or close_error

        if pending is not None:
            raise pending
        if cleanup_error is not None:
            raise cleanup_error
        return result

    async def execute_non_query(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
    ) -> int:
        command = self.build_command(sql, parameters, command_type)
        return await self.execute_sql_batch(
            lambda conn: self._runner.non_query(conn, command),
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
            default=0,
        )

    async def execute_scalar(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
    ) -> Any:
        command = self.build_command(sql, parameters, command_type)
        return await self.execute_sql_batch(
            lambda conn: self._runner.scalar(conn, command),
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )

    async def execute_reader(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
    ) -> Optional[AsyncDataReader]:
        """Execute a command and return an async reader that owns the connection."""

        command = self.build_command(sql, parameters, command_type)
        options = self.options.merge(
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )
        on_close = partial(self._close_reader_connection, options=options)
        return await self.execute_sql_batch(
            lambda conn: self._runner.reader(conn, command, on_close),
            close_connection=False,
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )

    async def fill_data(
        self,
        data_out: FillTarget,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
        start_record: int = 0,
        max_records: int = 0,
    ) -> FillTarget:
        target = require_fill_target(data_out)
        validate_paging(start_record, max_records)
        command = self.build_command(sql, parameters, command_type)
        return await self.execute_sql_batch(
            lambda conn: self._runner.fill(
                conn,
                command,
                target,
                start_record=start_record,
                max_records=max_records,
            ),
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
            default=target,
        )

    async def fill_data_table(
        self,
        table: DataTable,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataTable:
        return await self.fill_data(table, sql, parameters, command_type, **kwargs)

    async def fill_data_set(
        self,
        data_set: DataSet,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataSet:
        return await self.fill_data(data_set, sql, parameters, command_type, **kwargs)

    async def get_data_table(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataTable:
        return await self.fill_data(DataTable(), sql, parameters, command_type, **kwargs)

    async def get_data_set(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataSet:
        return await self.fill_data(DataSet(), sql, parameters, command_type, **kwargs)
