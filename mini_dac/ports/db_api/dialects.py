"""Concrete SQL dialect implementations for DB-API adapters."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from ...core._async_utils import _maybe_await
from ...core.commands import Command, CommandType
from ...core.parameters import DB_NULL, Parameter
from ...core.types import BoundParams
from .reader import first_value

StatusReader = Callable[[Any, Command], Any]


class Dialect:
    """Base dialect that defines quoting, binding and status-code behavior."""

    name: str = "generic"
    paramstyle: str = "named"
    quote_char: str = '"'
    use_callproc: bool = True

    def __init__(self, *, status_reader: Optional[StatusReader] = None):
        """Create dialect.

        Args:
            status_reader: Callable `(cursor, command) -> int | None` that reads
                the status code after execution. Defaults to the cursor
                attribute named after the command's status slot, which only
                wrapping cursors set. Plain DB-API drivers have no standard
                way to return a procedure's RETURN value, so pass a reader
                for them unless the dialect captures it itself (see
                `MSSQLDialect`).
        """

        self.status_reader = status_reader

    def q(self, ident: str) -> str:
        """Quote SQL identifier, part by part for dotted names."""

        parts = ident.split(".")
        return ".".join(f"{self.quote_char}{part}{self.quote_char}" for part in parts)

    def placeholder(self, key: str, index: int = 0) -> str:
        """Return parameter placeholder for current param style."""

        if self.paramstyle == "named":
            return f":{key}"
        if self.paramstyle == "pyformat":
            return f"%({key})s"
        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        if self.paramstyle == "numeric":
            return f":{index + 1}"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def bind_value(self, value: Any) -> Any:
        return None if value is DB_NULL else value

    def bind_parameters(self, parameters: Tuple[Parameter, ...]) -> BoundParams:
        """Convert parameters to the driver's mapping or sequence form."""

        if self.paramstyle in ("named", "pyformat"):
            return {p.bind_name: self.bind_value(p.value) for p in parameters}
        return [self.bind_value(p.value) for p in parameters]

    def bind(self, command: Command) -> Tuple[str, BoundParams]:
        """Render command text and bound parameters for `cursor.execute`."""

        params = command.input_parameters
        if command.command_type is CommandType.TABLE_DIRECT:
            return f"SELECT * FROM {self.q(command.text)}", self.bind_parameters(())
        if command.command_type is CommandType.STORED_PROCEDURE:
            return self.procedure_sql(command.text, params), self.bind_parameters(params)
        return command.text, self.bind_parameters(params)

    def procedure_sql(self, name: str, parameters: Tuple[Parameter, ...]) -> str:
        """Return SQL that invokes stored procedure `name` with `parameters`."""

        marks = ", ".join(
            self.placeholder(p.bind_name, i) for i, p in enumerate(parameters)
        )
        return f"CALL {self.q(name)}({marks})"

    def _callproc(self, cursor: Any, command: Command) -> Optional[Callable[..., Any]]:
        if command.command_type is not CommandType.STORED_PROCEDURE or not self.use_callproc:
            return None
        callproc = getattr(cursor, "callproc", None)
        return callproc if callable(callproc) else None

    def execute(self, cursor: Any, command: Command) -> Any:
        """Execute `command` on a DB-API cursor."""

        callproc = self._callproc(cursor, command)
        if callproc is not None:
            values = [self.bind_value(p.value) for p in command.input_parameters]
            return callproc(command.text, values)

        sql, params = self.bind(command)
        if not params:
            return cursor.execute(sql)
        return cursor.execute(sql, params)

    async def execute_async(self, cursor: Any, command: Command) -> Any:
        """Execute `command` on a cursor whose methods may be coroutines."""

        callproc = self._callproc(cursor, command)
        if callproc is not None:
            values = [self.bind_value(p.value) for p in command.input_parameters]
            return await _maybe_await(callproc(command.text, values))

        sql, params = self.bind(command)
        if not params:
            return await _maybe_await(cursor.execute(sql))
        return await _maybe_await(cursor.execute(sql, params))

    def status_in_result_set(self, command: Command) -> bool:
        """Whether the status code arrives as a trailing one-row result set."""

        return False

    def is_status_result(self, cursor: Any, command: Command) -> bool:
        """Whether the cursor's current result set is the status result set."""

        if not self.status_in_result_set(command):
            return False
        desc = getattr(cursor, "description", None)
        return bool(desc) and len(desc) == 1 and desc[0][0] == command.status.bind_name

    def status_ready(self, cursor: Any, command: Command) -> bool:
        """Whether the status can be read without consuming pending result rows."""

        return not self.status_in_result_set(command) or self.is_status_result(cursor, command)

    def read_status_code(self, cursor: Any, command: Command) -> int:
        """Read the status code left by the executed command (missing = 0)."""

        if self.status_reader is not None:
            value = self.status_reader(cursor, command)
        else:
            value = getattr(cursor, command.status.bind_name, None)
        return self.coerce_status_code(value)

    async def read_status_code_async(self, cursor: Any, command: Command) -> int:
        if self.status_reader is not None:
            value = await _maybe_await(self.status_reader(cursor, command))
        else:
            value = getattr(cursor, command.status.bind_name, None)
        return self.coerce_status_code(value)

    def coerce_status_code(self, value: Any) -> int:
        if value is None or value is DB_NULL:
            return 0
        if isinstance(value, bool):
            raise TypeError("Status code must be an integer, got bool.")
        return int(value)

    def begin_statements(self, conn: Any) -> List[str]:
        """Statements that open an explicit transaction on `conn`.

        DB-API connections open transactions implicitly, so most dialects
        need none.
        """

        return []

    def begin(self, conn: Any) -> None:
        for sql in self.begin_statements(conn):
            if hasattr(conn, "execute"):
                conn.execute(sql)
            else:
                conn.cursor().execute(sql)

    async def begin_async(self, conn: Any) -> None:
        for sql in self.begin_statements(conn):
            if hasattr(conn, "execute"):
                await _maybe_await(conn.execute(sql))
            else:
                cur = await _maybe_await(conn.cursor())
                await _maybe_await(cur.execute(sql))


class SQLiteDialect(Dialect):
    """SQLite dialect (`:name` parameters, no stored procedures)."""

    name = "sqlite"
    paramstyle = "named"
    quote_char = '"'
    use_callproc = False

    def procedure_sql(self, name: str, parameters: Tuple[Parameter, ...]) -> str:
        raise NotImplementedError("SQLite does not support stored procedures.")

    def begin_statements(self, conn: Any) -> List[str]:
        # Autocommit connections (`isolation_level=None`) need an explicit BEGIN.
        if getattr(conn, "isolation_level", "") is not None:
            return []
        if bool(getattr(conn, "in_transaction", False)):
            return []
        return ["BEGIN"]


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`%s` positional parameters, `CALL` procedures)."""

    name = "postgres"
    paramstyle = "format"
    quote_char = '"'
    use_callproc = False


class MySQLDialect(Dialect):
    """MySQL dialect (`%s` positional parameters, `callproc` procedures)."""

    name = "mysql"
    paramstyle = "format"
    quote_char = "`"
    use_callproc = True


class MSSQLDialect(Dialect):
    """SQL Server dialect (`?` parameters, `EXEC` procedures, bracket quoting)."""

    name = "mssql"
    paramstyle = "qmark"
    quote_char = "["
    use_callproc = False

    def q(self, ident: str) -> str:
        return ".".join(f"[{part}]" for part in ident.split("."))

    def procedure_sql(self, name: str, parameters: Tuple[Parameter, ...]) -> str:
        args = ", ".join(f"@{p.bind_name} = ?" for p in parameters)
        return f"EXEC {self.q(name)} {args}".rstrip()

    def status_in_result_set(self, command: Command) -> bool:
        # Procedures capture RETURN into a variable selected as the last result.
        return self.status_reader is None and command.command_type is CommandType.STORED_PROCEDURE

    def bind(self, command: Command) -> Tuple[str, BoundParams]:
        sql, params = super().bind(command)
        if not self.status_in_result_set(command):
            return sql, params
        status = command.status.bind_name
        exec_with_status = sql.replace("EXEC ", f"EXEC @{status} = ", 1)
        sql = f"DECLARE @{status} INT; {exec_with_status}; SELECT @{status} AS {status}"
        return sql, params

    def read_status_code(self, cursor: Any, command: Command) -> int:
        """Read the trailing `SELECT @return_value` set (missing = 0)."""

        if not self.status_in_result_set(command):
            return super().read_status_code(cursor, command)
        nextset = getattr(cursor, "nextset", None)
        while not self.is_status_result(cursor, command):
            if nextset is None or not nextset():
                return 0
        return self.coerce_status_code(first_value(cursor.fetchone()))

    async def read_status_code_async(self, cursor: Any, command: Command) -> int:
        if not self.status_in_result_set(command):
            return await super().read_status_code_async(cursor, command)
        nextset = getattr(cursor, "nextset", None)
        while not self.is_status_result(cursor, command):
            if nextset is None or not await _maybe_await(nextset()):
                return 0
        return self.coerce_status_code(first_value(await _maybe_await(cursor.fetchone())))
