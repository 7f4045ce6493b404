"""Shared core type aliases used across dialects, readers and data tables."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

NamedParams = Dict[str, Any]
PositionalParams = List[Any]
BoundParams = Union[NamedParams, PositionalParams]

RowMapping = Mapping[str, Any]
Rows = List[RowMapping]
MaybeRow = Optional[RowMapping]
