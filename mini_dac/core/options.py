"""Per-instance execution defaults for the batch executors."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from .commands import DEFAULT_STATUS_PARAMETER


@dataclass(frozen=True)
class ExecutionOptions:
    """Failure-surfacing defaults applied when a call passes no explicit flag.

    Attributes:
        throw_db_exception: Raise `DacSqlExecutionError` on driver errors
            instead of returning the helper's default result.
        throw_system_exception: Raise `DacGenericError` on unexpected errors
            (including connection close failures) instead of suppressing them.
        status_parameter: Name of the reserved status-code slot.
    """

    throw_db_exception: bool = True
    throw_system_exception: bool = True
    status_parameter: str = DEFAULT_STATUS_PARAMETER

    def __post_init__(self) -> None:
        if not isinstance(self.status_parameter, str) or not self.status_parameter:
            raise ValueError("status_parameter must be a non-empty string.")

    def merge(
        self,
        *,
        throw_db_exception: Optional[bool] = None,
        throw_system_exception: Optional[bool] = None,
        **overrides: Any,
    ) -> ExecutionOptions:
        """Return options with non-`None` overrides applied."""

        if throw_db_exception is not None:
            overrides["throw_db_exception"] = bool(throw_db_exception)
        if throw_system_exception is not None:
            overrides["throw_system_exception"] = bool(throw_system_exception)
        if not overrides:
            return self
        return replace(self, **overrides)
