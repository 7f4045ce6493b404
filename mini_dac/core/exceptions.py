"""Classified exceptions raised by the batch executors and typed helpers."""

from __future__ import annotations

from typing import Any, List, Optional


class Messages:
    """Message texts used by classified exceptions."""

    SYSTEM_EXCEPTION_ON_EXECUTE_SQL_BATCH_LEVEL = (
        "System exception occurred while executing SQL batch."
    )
    SQL_CONNECTION_CLOSE_EXCEPTION = "Exception occurred while closing SQL connection."
    SQL_TRANSACTION_ROLLBACK_EXCEPTION = (
        "Exception occurred while rolling back SQL transaction."
    )
    SQL_EXECUTION_EXCEPTION = "SQL execution failed."
    SQL_RETURNED_ERROR_CODE = "SQL query or stored procedure returned non zero code"
    FILL_DATA_INVALID_TYPE_PASSED = "Invalid type passed to fill data: "
    OPERATION_CANCELLED = "Operation was cancelled."


class DacError(Exception):
    """Base class for every error classified by the data-access layer."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        str_args = [str(arg) for arg in args if arg]
        if not detail and str_args:
            detail, *str_args = str_args
        self.detail = detail
        self.cleanup_errors: List[DacGenericError] = []
        super().__init__(detail, *str_args)

    def __str__(self) -> str:
        return self.detail

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.detail!r})"


class DacSqlExecutionError(DacError):
    """Driver-level failure (connectivity, constraint violation, bad SQL)."""

    def __init__(self, cause: BaseException, message: Optional[str] = None) -> None:
        self.cause = cause
        super().__init__(message or f"{Messages.SQL_EXECUTION_EXCEPTION} {cause}".strip())


class DacReturnCodeError(DacError):
    """Non-zero status code returned by the executed query or procedure.

    Attributes:
        return_code: Status code read from the reserved status slot.
        result: Whatever the command produced before the code was read
            (rows affected, scalar, reader, filled table or data set).
    """

    def __init__(self, return_code: int, result: Any = None) -> None:
        self.return_code = return_code
        self.result = result
        super().__init__(f"{Messages.SQL_RETURNED_ERROR_CODE}: {return_code}")


class DacGenericError(DacError):
    """Unexpected failure, including connection cleanup failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class DacCancelledError(DacError):
    """Cancellation token was set while an executor call was in flight."""

    def __init__(self, message: str = Messages.OPERATION_CANCELLED) -> None:
        super().__init__(message)
