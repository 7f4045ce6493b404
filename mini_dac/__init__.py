"""mini_dac: data-access convenience layer over DB-API drivers."""

from .core import (
    DB_NULL,
    BusinessFailure,
    Command,
    CommandType,
    DacCancelledError,
    DacError,
    DacGenericError,
    DacParameters,
    DacReturnCodeError,
    DacSqlExecutionError,
    DataSet,
    DataTable,
    ExecutionOptions,
    ExecutionOutcome,
    FieldCache,
    InfrastructureFailure,
    Messages,
    Parameter,
    ParameterDirection,
    Success,
    UnexpectedFailure,
    capture,
    capture_async,
    default_field_cache,
    to_parameters,
)
from .ports import (
    AsyncDacTransaction,
    AsyncDataBase,
    AsyncDataReader,
    ConnectionFactory,
    DacTransaction,
    DataBase,
    DataReader,
    Dialect,
    MSSQLDialect,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
)

__all__ = [
    "DataBase",
    "AsyncDataBase",
    "ConnectionFactory",
    "DacTransaction",
    "AsyncDacTransaction",
    "DataReader",
    "AsyncDataReader",
    "Dialect",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
    "MSSQLDialect",
    "Command",
    "CommandType",
    "Parameter",
    "ParameterDirection",
    "DacParameters",
    "DB_NULL",
    "to_parameters",
    "FieldCache",
    "default_field_cache",
    "ExecutionOptions",
    "DataTable",
    "DataSet",
    "DacError",
    "DacSqlExecutionError",
    "DacReturnCodeError",
    "DacGenericError",
    "DacCancelledError",
    "Messages",
    "ExecutionOutcome",
    "Success",
    "BusinessFailure",
    "InfrastructureFailure",
    "UnexpectedFailure",
    "capture",
    "capture_async",
]
