"""Public port exports for concrete adapter implementations."""

from .db_api import (
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
]
