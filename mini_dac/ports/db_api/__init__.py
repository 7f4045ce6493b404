"""DB-API executor, connection factory and dialect exports."""

from .async_database import AsyncDataBase
from .connection import ConnectionFactory
from .database import DataBase
from .dialects import Dialect, MSSQLDialect, MySQLDialect, PostgresDialect, SQLiteDialect
from .reader import AsyncDataReader, DataReader
from .transaction import AsyncDacTransaction, DacTransaction

__all__ = [
    "AsyncDacTransaction",
    "AsyncDataBase",
    "AsyncDataReader",
    "ConnectionFactory",
    "DacTransaction",
    "DataBase",
    "DataReader",
    "Dialect",
    "MSSQLDialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
]
