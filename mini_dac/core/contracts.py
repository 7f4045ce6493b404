"""Core port contracts used by the executors."""

from __future__ import annotations

from typing import Protocol


class CancellationToken(Protocol):
    """Cancellation signal; `threading.Event` and `asyncio.Event` both qualify."""

    def is_set(self) -> bool: ...
