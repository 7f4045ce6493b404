"""Execution outcome values for callers that prefer results over exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from .exceptions import (
    DacError,
    DacGenericError,
    DacReturnCodeError,
    DacSqlExecutionError,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    result: T
    ok = True

    def unwrap(self) -> T:
        return self.result


@dataclass(frozen=True)
class BusinessFailure:
    """Non-zero status code returned by the callee."""

    code: int
    partial_result: Any
    error: DacReturnCodeError
    ok = False

    def unwrap(self) -> Any:
        raise self.error


@dataclass(frozen=True)
class InfrastructureFailure:
    """Driver-level failure surfaced as `DacSqlExecutionError`."""

    cause: Optional[BaseException]
    error: DacSqlExecutionError
    ok = False

    def unwrap(self) -> Any:
        raise self.error


@dataclass(frozen=True)
class UnexpectedFailure:
    """Any other classified failure (`DacGenericError`, cancellation)."""

    cause: Optional[BaseException]
    error: DacError
    ok = False

    def unwrap(self) -> Any:
        raise self.error


ExecutionOutcome = Union[Success[Any], BusinessFailure, InfrastructureFailure, UnexpectedFailure]


def outcome_from_error(error: DacError) -> ExecutionOutcome:
    """Wrap one classified error in the matching outcome variant."""

    if isinstance(error, DacReturnCodeError):
        return BusinessFailure(code=error.return_code, partial_result=error.result, error=error)
    if isinstance(error, DacSqlExecutionError):
        return InfrastructureFailure(cause=error.cause, error=error)
    cause = error.cause if isinstance(error, DacGenericError) else error.__cause__
    return UnexpectedFailure(cause=cause, error=error)


def capture(call: Callable[..., T], *args: Any, **kwargs: Any) -> ExecutionOutcome:
    """Run one executor call and return its outcome instead of raising.

    Only classified `DacError` failures are captured; anything else propagates.
    """

    try:
        return Success(call(*args, **kwargs))
    except DacError as exc:
        return outcome_from_error(exc)


async def capture_async(
    call: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> ExecutionOutcome:
    """Async variant of `capture`."""

    try:
        return Success(await call(*args, **kwargs))
    except DacError as exc:
        return outcome_from_error(exc)
