"""Transaction handles passed to transactional SQL batches."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ...core._async_utils import _maybe_await
from ...core.commands import Command, CommandType, CommandTypeInput
from ...core.data import DataTable
from ...core.parameters import ParameterSource
from .dialects import Dialect
from .runner import AsyncCommandRunner, CommandRunner, validate_paging

logger = logging.getLogger(__name__)

CommandBuilder = Callable[[str, ParameterSource, CommandTypeInput], Command]


class DacTransaction:
    """Open transaction on one connection.

    Helpers run on the transaction's connection and never open or close it;
    the executor that created the transaction commits, rolls back and closes.
    """

    def __init__(
        self,
        connection: Any,
        dialect: Dialect,
        runner: CommandRunner,
        build_command: CommandBuilder,
    ):
        self.connection = connection
        self.dialect = dialect
        self._runner = runner
        self._build_command = build_command
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def begin(self) -> DacTransaction:
        if self._active:
            raise RuntimeError("transaction is already active")
        self.dialect.begin(self.connection)
        self._active = True
        logger.debug("Began transaction on %r", self.connection)
        return self

    def commit(self) -> None:
        if not self._active:
            return
        self.connection.commit()
        self._active = False
        logger.debug("Committed transaction on %r", self.connection)

    def rollback(self) -> None:
        if not self._active:
            return
        self._active = False
        self.connection.rollback()
        logger.debug("Rolled back transaction on %r", self.connection)

    def cursor(self) -> Any:
        return self.connection.cursor()

    def execute_non_query(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
    ) -> int:
        return self._runner.non_query(
            self.connection, self._build_command(sql, parameters, command_type)
        )

    def execute_scalar(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
    ) -> Any:
        return self._runner.scalar(
            self.connection, self._build_command(sql, parameters, command_type)
        )

    def get_data_table(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        start_record: int = 0,
        max_records: int = 0,
        table: Optional[DataTable] = None,
    ) -> DataTable:
        validate_paging(start_record, max_records)
        target = table if table is not None else DataTable()
        self._runner.fill(
            self.connection,
            self._build_command(sql, parameters, command_type),
            target,
            start_record=start_record,
            max_records=max_records,
        )
        return target


class AsyncDacTransaction:
    """Async counterpart of `DacTransaction`."""

    def __init__(
        self,
        connection: Any,
        dialect: Dialect,
        runner: AsyncCommandRunner,
        build_command: CommandBuilder,
    ):
        self.connection = connection
        self.dialect = dialect
        self._runner = runner
        self._build_command = build_command
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    async def begin(self) -> AsyncDacTransaction:
        if self._active:
            raise RuntimeError("transaction is already active")
        await self.dialect.begin_async(self.connection)
        self._active = True
        logger.debug("Began transaction on %r", self.connection)
        return self

    async def commit(self) -> None:
        if not self._active:
            return
        await _maybe_await(self.connection.commit())
        self._active = False
        logger.debug("Committed transaction on %r", self.connection)

    async def rollback(self) -> None:
        if not self._active:
            return
        self._active = False
        await _maybe_await(self.connection.rollback())
        logger.debug("Rolled back transaction on %r", self.connection)

    async def cursor(self) -> Any:
        return await _maybe_await(self.connection.cursor())

    async def execute_non_query(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
    ) -> int:
        return await self._runner.non_query(
            self.connection, self._build_command(sql, parameters, command_type)
        )

    async def execute_scalar(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
    ) -> Any:
        return await self._runner.scalar(
            self.connection, self._build_command(sql, parameters, command_type)
        )

    async def get_data_table(
        self,
        sql: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        start_record: int = 0,
        max_records: int = 0,
        table: Optional[DataTable] = None,
    ) -> DataTable:
        validate_paging(start_record, max_records)
        target = table if table is not None else DataTable()
        await self._runner.fill(
            self.connection,
            self._build_command(sql, parameters, command_type),
            target,
            start_record=start_record,
            max_records=max_records,
        )
        return target
