"""Parameter model and normalization of caller parameter shapes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union, overload

from .field_cache import FieldCache, default_field_cache


class _DBNullType:
    """Explicit SQL NULL marker, distinct from `None` ("no value provided")."""

    _instance: Optional[_DBNullType] = None

    def __new__(cls) -> _DBNullType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DB_NULL"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "DB_NULL"


DB_NULL = _DBNullType()


class ParameterDirection(str, Enum):
    """Binding direction of one command parameter."""

    INPUT = "input"
    RETURN_VALUE = "return_value"


@dataclass(frozen=True)
class Parameter:
    """One named command parameter.

    `None` values are coalesced to `DB_NULL` so a parameter never holds a
    native null.
    """

    name: str
    value: Any = DB_NULL
    direction: ParameterDirection = ParameterDirection.INPUT

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Parameter name must be a non-empty string.")
        if self.value is None:
            object.__setattr__(self, "value", DB_NULL)
        object.__setattr__(self, "direction", ParameterDirection(self.direction))

    @property
    def is_null(self) -> bool:
        return self.value is DB_NULL

    @property
    def bind_name(self) -> str:
        """Parameter name without driver prefixes (`@name`, `:name`)."""

        return self.name.lstrip("@:$")


# None, DacParameters, mapping, iterable of Parameter or (name, value) pairs,
# or any record object.
ParameterSource = Any


class DacParameters:
    """Ordered parameter collection with chainable builders.

    Insertion order is preserved because positional binding depends on it.
    Duplicate names are kept; the driver decides what they mean.
    """

    def __init__(
        self,
        parameters: Optional[Iterable[Parameter]] = None,
        *,
        cache: Optional[FieldCache] = None,
    ):
        self._items: list[Parameter] = []
        self._cache = cache if cache is not None else default_field_cache
        if parameters is not None:
            for item in parameters:
                self.add(item)

    def add(self, parameter: Parameter) -> DacParameters:
        if not isinstance(parameter, Parameter):
            raise TypeError(
                f"Expected Parameter, got {type(parameter).__name__}."
            )
        self._items.append(parameter)
        return self

    def add_item(self, name: str, value: Any = None) -> DacParameters:
        self._items.append(Parameter(name, value))
        return self

    def add_range(
        self,
        items: Union[DacParameters, Mapping[str, Any], Iterable[Any]],
    ) -> DacParameters:
        """Append parameters, mapping items, or `(name, value)` pairs in order."""

        if isinstance(items, Mapping):
            for name, value in items.items():
                self.add_item(name, value)
            return self

        for item in items:
            if isinstance(item, Parameter):
                self.add(item)
                continue
            if isinstance(item, (str, bytes)) or not isinstance(item, Iterable):
                raise TypeError(
                    "Parameter items must be Parameter objects or (name, value) pairs, "
                    f"got {type(item).__name__}."
                )
            pair = tuple(item)
            if len(pair) != 2:
                raise TypeError(
                    f"Parameter pair must have exactly 2 items, got {len(pair)}."
                )
            self.add_item(pair[0], pair[1])
        return self

    def add_object(self, obj: Any) -> DacParameters:
        """Append one parameter per public readable field of `obj`."""

        if obj is None:
            return self
        for name, value in self._cache.values_for(obj):
            self.add_item(name, value)
        return self

    def to_tuple(self) -> Tuple[Parameter, ...]:
        return tuple(self._items)

    def names(self) -> list[str]:
        return [p.name for p in self._items]

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    @overload
    def __getitem__(self, index: int) -> Parameter: ...

    @overload
    def __getitem__(self, index: slice) -> list[Parameter]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Parameter, list[Parameter]]:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DacParameters):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"DacParameters({self._items!r})"


def to_parameters(
    source: ParameterSource = None,
    *,
    cache: Optional[FieldCache] = None,
) -> DacParameters:
    """Normalize any supported parameter shape into `DacParameters`.

    Args:
        source: `None`, `DacParameters`, a mapping, an iterable of
            `Parameter` objects or `(name, value)` pairs, or any record whose
            public fields become parameters.
        cache: Field cache used for record reflection; defaults to the
            process-wide cache.

    Returns:
        Parameter collection in source order. Empty input gives an empty
        collection.
    """

    if source is None:
        return DacParameters(cache=cache)
    if isinstance(source, DacParameters):
        return source
    if isinstance(source, Parameter):
        return DacParameters([source], cache=cache)

    params = DacParameters(cache=cache)
    if isinstance(source, Mapping):
        return params.add_range(source)
    if _is_record_tuple(source):
        return params.add_object(source)
    if isinstance(source, (str, bytes, set, frozenset)) and not source:
        return params
    if isinstance(source, (str, bytes)):
        raise TypeError("SQL parameters cannot be a bare string.")
    if isinstance(source, (set, frozenset)):
        raise TypeError("Unordered collections cannot be used as parameters.")
    if isinstance(source, Iterable):
        return params.add_range(source)
    return params.add_object(source)


def _is_record_tuple(value: Any) -> bool:
    return isinstance(value, tuple) and isinstance(getattr(type(value), "_fields", None), tuple)
