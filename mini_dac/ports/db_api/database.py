"""DB-API batch executor and typed helpers built on top of it."""

from __future__ import annotations

from functools import partial
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

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
from .reader import DataReader
from .runner import CommandRunner, FillTarget, require_fill_target, validate_paging
from .transaction import DacTransaction

R = TypeVar("R")


class DataBase:
    """Synchronous data-access executor over a DB-API driver.

    Every call opens its own connection, runs one unit of work, classifies
    failures and closes the connection.
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
        """Create executor.

        Args:
            connect: DB-API `connect` callable (or `ConnectionFactory`). Bind
                connection arguments with `functools.partial` or pass a factory.
            dialect: Concrete SQL dialect instance.
            options: Default failure-surfacing flags and status slot name.
            cancellation: Token checked before open, execution and commit.
            driver_errors: Exception types treated as driver errors. Resolved
                from the driver module's DB-API `Error` when omitted.
            field_cache: Cache used to reflect record parameters.
        """

        self.factory = connect if isinstance(connect, ConnectionFactory) else ConnectionFactory(connect)
        self.dialect = dialect
        self.options = options or ExecutionOptions()
        self.cancellation = cancellation
        self.driver_errors = (
            tuple(driver_errors) if driver_errors is not None else self.factory.driver_errors()
        )
        self.field_cache = field_cache
        self._runner = CommandRunner(dialect, check_cancelled=self._check_cancelled)

    def _check_cancelled(self) -> None:
        check_cancelled(self.cancellation)

    def build_command(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
    ) -> Command:
        """Build a command carrying this executor's status slot."""

        return Command.build(
            sql,
            parameters,
            command_type,
            status_parameter=self.options.status_parameter,
            cache=self.field_cache,
        )

    def _close(
        self,
        conn: Any,
        *,
        pending: Optional[BaseException],
        options: ExecutionOptions,
    ) -> Optional[BaseException]:
        try:
            self.factory.close(conn)
        except Exception as exc:
            return cleanup_failure(
                exc,
                Messages.SQL_CONNECTION_CLOSE_EXCEPTION,
                pending=pending,
                options=options,
            )
        return None

    def _close_reader_connection(self, conn: Any, options: ExecutionOptions) -> None:
        error = self._close(conn, pending=None, options=options)
        if error is not None:
            raise error

    def execute_sql_batch(
        self,
        batch: Callable[[Any], R],
        *,
        close_connection: bool = True,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
        default: Any = None,
    ) -> R:
        """Run `batch(connection)` on a freshly opened connection.

        Args:
            batch: Unit of work receiving the open connection.
            close_connection: Commit and close the connection once the batch
                is done. A connection is always closed when the batch fails,
                unless the failure hands it to the caller (reader with
                non-zero status).
            throw_db_exception: Raise driver errors as `DacSqlExecutionError`
                (defaults to `options.throw_db_exception`).
            throw_system_exception: Raise unexpected errors as
                `DacGenericError` (defaults to `options.throw_system_exception`).
            default: Result returned when a failure is suppressed.

        Returns:
            The batch result, or `default` when a failure was suppressed.

        Raises:
            DacReturnCodeError: The command returned a non-zero status code.
            DacSqlExecutionError: Driver error and `throw_db_exception`.
            DacGenericError: Unexpected error and `throw_system_exception`.
            DacCancelledError: The cancellation token was set.
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
            conn = self.factory.open()
            result = batch(conn)
            if close_connection:
                self.factory.commit(conn)
        except BaseException as exc:
            failed = True
            result = default
            pending = classify_failure(exc, driver_errors=self.driver_errors, options=options)

        close_error = None
        if conn is not None and (close_connection or (failed and not keeps_connection(pending))):
            close_error = self._close(conn, pending=pending, options=options)

        if pending is not None:
            raise pending
        if close_error is not None:
            raise close_error
        return result

    def execute_transactional_sql_batch(
        self,
        batch: Callable[[DacTransaction], R],
        *,
        close_connection: bool = True,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
        default: Any = None,
    ) -> R:
        """Run `batch(transaction)` inside one commit/rollback scope.

        Any failure, cancellation included, rolls the transaction back before
        it is classified. Flags and return value follow `execute_sql_batch`.
        """

        options = self.options.merge(
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )
        conn = None
        tx: Optional[DacTransaction] = None
        failed = False
        pending: Optional[BaseException] = None
        rollback_exc: Optional[Exception] = None
        result: Any = default

        try:
            self._check_cancelled()
            conn = self.factory.open()
            tx = DacTransaction(conn, self.dialect, self._runner, self.build_command).begin()
            result = batch(tx)
            self._check_cancelled()
            tx.commit()
        except BaseException as exc:
            failed = True
            result = default
            if tx is not None and tx.is_active:
                try:
                    tx.rollback()
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
            close_error = self._close(conn, pending=pending or cleanup_error, options=options)
            cleanup_error = cleanup_error or close_error

        if pending is not None:
            raise pending
        if cleanup_error is not None:
            raise cleanup_error
        return result

    def execute_non_query(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
    ) -> int:
        """Execute a command and return the number of affected rows."""

        command = self.build_command(sql, parameters, command_type)
        return self.execute_sql_batch(
            lambda conn: self._runner.non_query(conn, command),
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
            default=0,
        )

    def execute_scalar(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
    ) -> Any:
        """Execute a command and return the first column of the first row."""

        command = self.build_command(sql, parameters, command_type)
        return self.execute_sql_batch(
            lambda conn: self._runner.scalar(conn, command),
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )

    def execute_reader(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
    ) -> Optional[DataReader]:
        """Execute a command and return a forward-only reader.

        The reader owns the connection; close it (or use it as a context
        manager) to release the connection.
        """

        command = self.build_command(sql, parameters, command_type)
        options = self.options.merge(
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )
        on_close = partial(self._close_reader_connection, options=options)
        return self.execute_sql_batch(
            lambda conn: self._runner.reader(conn, command, on_close),
            close_connection=False,
            throw_db_exception=throw_db_exception,
            throw_system_exception=throw_system_exception,
        )

    def fill_data(
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
        """Fill a `DataTable` or `DataSet` with the command's result sets.

        Args:
            data_out: Table or data set to fill.
            start_record: Zero-based index of the first row to load.
            max_records: Maximum rows to load; `0` loads all rows. With paging,
                only the first result set is loaded.

        Returns:
            `data_out`, also when a failure was suppressed.
        """

        target = require_fill_target(data_out)
        validate_paging(start_record, max_records)
        command = self.build_command(sql, parameters, command_type)
        return self.execute_sql_batch(
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

    def fill_data_table(
        self,
        table: DataTable,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataTable:
        return self.fill_data(table, sql, parameters, command_type, **kwargs)

    def fill_data_set(
        self,
        data_set: DataSet,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataSet:
        return self.fill_data(data_set, sql, parameters, command_type, **kwargs)

    def get_data_table(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataTable:
        """Return a new `DataTable` named `Table0` filled by the command."""

        return self.fill_data(DataTable(), sql, parameters, command_type, **kwargs)

    def get_data_set(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        **kwargs: Any,
    ) -> DataSet:
        """Return a new `DataSet` with one table per result set."""

        return self.fill_data(DataSet(), sql, parameters, command_type, **kwargs)
