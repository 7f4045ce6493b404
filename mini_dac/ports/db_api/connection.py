"""Connection factory wrapping a DB-API `connect` callable."""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
from collections.abc import Callable
from typing import Any, Optional, Tuple, Type

from ...core._async_utils import _maybe_await

logger = logging.getLogger(__name__)


class ConnectionFactory:
    """Open and close driver connections for one connection configuration.

    `connect` is any DB-API `connect` callable (or a `functools.partial` of
    one); async drivers may return an awaitable from it.
    """

    def __init__(self, connect: Callable[..., Any], *connect_args: Any, **connect_kwargs: Any):
        if not callable(connect):
            raise TypeError("connect must be callable.")
        # A partial is unwrapped so the driver module is visible for error lookup.
        self._connect, self._connect_args, self._connect_kwargs = self._normalize_connect_input(
            connect,
            connect_args,
            connect_kwargs,
        )

    def _normalize_connect_input(
        self,
        connect: Callable[..., Any],
        connect_args: tuple[Any, ...],
        connect_kwargs: dict[str, Any],
    ) -> tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any]]:
        base_connect = getattr(connect, "func", None)
        base_args = getattr(connect, "args", None)
        base_kwargs = getattr(connect, "keywords", None)
        if base_connect is None or not isinstance(base_args, tuple):
            return connect, connect_args, connect_kwargs

        merged_args = base_args + connect_args
        merged_kwargs = dict(base_kwargs or {})
        merged_kwargs.update(connect_kwargs)
        return base_connect, merged_args, merged_kwargs

    @property
    def module_name(self) -> str:
        return getattr(self._connect, "__module__", "") or ""

    def open(self) -> Any:
        """Open one connection; may return an awaitable for async drivers."""

        conn = self._connect(*self._connect_args, **self._connect_kwargs)
        logger.debug("Opened connection via %s", self.module_name or self._connect)
        return conn

    async def open_async(self) -> Any:
        return await _maybe_await(self.open())

    def commit(self, conn: Any) -> None:
        commit = getattr(conn, "commit", None)
        if callable(commit):
            commit()

    async def commit_async(self, conn: Any) -> None:
        commit = getattr(conn, "commit", None)
        if callable(commit):
            await _maybe_await(commit())

    def close(self, conn: Any) -> None:
        close = getattr(conn, "close", None)
        if callable(close):
            close()
        logger.debug("Closed connection %r", conn)

    async def close_async(self, conn: Any) -> None:
        close = getattr(conn, "close", None)
        if callable(close):
            await _maybe_await(close())
        logger.debug("Closed connection %r", conn)

    def driver_errors(self) -> Tuple[Type[BaseException], ...]:
        """Resolve the driver's DB-API `Error` base class from its module.

        DB-API 2.0 requires driver modules to export `Error`; the lookup walks
        from the connect callable's module up to its top-level package.
        """

        error = _find_module_error(self.module_name)
        if error is None:
            owner = getattr(self._connect, "__self__", None)
            if inspect.isclass(owner):
                error = _find_module_error(owner.__module__)
        return (error,) if error is not None else ()


def _find_module_error(module_name: str) -> Optional[Type[BaseException]]:
    parts = [part for part in module_name.split(".") if part]
    while parts:
        name = ".".join(parts)
        module = sys.modules.get(name)
        if module is None:
            try:
                module = importlib.import_module(name)
            except ImportError:
                module = None
        error = getattr(module, "Error", None) if module is not None else None
        if inspect.isclass(error) and issubclass(error, BaseException):
            return error
        parts.pop()
    return None
