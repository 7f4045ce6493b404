"""Failure classification shared by the sync and async batch executors.

Priority order:

1. `DacReturnCodeError` (non-zero status code) always propagates.
2. Driver errors become `DacSqlExecutionError` when `throw_db_exception` is
   set, otherwise the call returns its default result.
3. Other `DacError` instances are already classified and propagate unchanged.
4. Any other `Exception` becomes `DacGenericError` when
   `throw_system_exception` is set, otherwise the call returns its default.

`BaseException` subclasses that are not `Exception` (task cancellation,
`KeyboardInterrupt`) always propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Type

from .contracts import CancellationToken
from .exceptions import (
    DacCancelledError,
    DacError,
    DacGenericError,
    DacReturnCodeError,
    DacSqlExecutionError,
    Messages,
)
from .options import ExecutionOptions

logger = logging.getLogger(__name__)

DriverErrors = Tuple[Type[BaseException], ...]


def classify_failure(
    exc: BaseException,
    *,
    driver_errors: DriverErrors,
    options: ExecutionOptions,
) -> Optional[BaseException]:
    """Map one failure to the exception to raise, or `None` when suppressed."""

    if isinstance(exc, DacReturnCodeError):
        return exc

    if driver_errors and isinstance(exc, driver_errors):
        if options.throw_db_exception:
            error = DacSqlExecutionError(exc)
            error.__cause__ = exc
            return error
        logger.warning("Suppressed database error: %r", exc)
        return None

    if isinstance(exc, DacError):
        return exc

    if not isinstance(exc, Exception):
        return exc

    if options.throw_system_exception:
        error = DacGenericError(Messages.SYSTEM_EXCEPTION_ON_EXECUTE_SQL_BATCH_LEVEL, exc)
        error.__cause__ = exc
        return error
    logger.warning("Suppressed unexpected error: %r", exc)
    return None


def cleanup_failure(
    exc: BaseException,
    message: str,
    *,
    pending: Optional[BaseException],
    options: ExecutionOptions,
) -> Optional[DacGenericError]:
    """Classify a close/rollback failure.

    When a classified error is already propagating, the cleanup error is
    attached to its `cleanup_errors` and `None` is returned so the first error
    stays authoritative. Otherwise the cleanup error is returned for raising
    when `throw_system_exception` is set.
    """

    error = DacGenericError(message, exc)
    error.__cause__ = exc
    logger.error(message, exc_info=(type(exc), exc, exc.__traceback__))

    if pending is not None:
        if isinstance(pending, DacError):
            pending.cleanup_errors.append(error)
        return None
    if options.throw_system_exception:
        return error
    return None


def keeps_connection(failure: Optional[BaseException]) -> bool:
    """Whether a failure hands an open connection to the caller.

    A non-zero status on a reader call returns the reader inside the error; the
    reader owns its connection and closes it on `close()`.
    """

    if not isinstance(failure, DacReturnCodeError):
        return False
    return bool(getattr(failure.result, "owns_connection", False))


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise `DacCancelledError` when the cancellation token is set."""

    if token is not None and token.is_set():
        raise DacCancelledError()
