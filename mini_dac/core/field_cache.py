"""Shape-to-fields cache used to turn arbitrary records into parameters."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Any, Dict, Optional, Tuple, Type


class FieldCache:
    """Append-only cache of public readable field names keyed by type.

    Types are treated as immutable for the life of the process, so entries are
    never invalidated. Concurrent first lookups of the same type may both
    reflect it; the second write stores an identical tuple.
    """

    def __init__(self) -> None:
        self._fields: Dict[Type[Any], Tuple[str, ...]] = {}

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, cls: object) -> bool:
        return cls in self._fields

    def fields_for(self, obj: Any) -> Tuple[str, ...]:
        """Return public field names readable from `obj`, in declaration order."""

        cls = type(obj)
        cached = self._fields.get(cls)
        if cached is not None:
            return cached

        names = _reflect_type(cls)
        if names is None:
            return _instance_fields(obj)
        return self._fields.setdefault(cls, names)

    def values_for(self, obj: Any) -> list[tuple[str, Any]]:
        """Return `(name, value)` pairs for the public fields of `obj`."""

        return [(name, getattr(obj, name)) for name in self.fields_for(obj)]


def _reflect_type(cls: Type[Any]) -> Optional[Tuple[str, ...]]:
    """Resolve type-stable field names, or `None` when the shape is per-instance."""

    names: list[str] = []
    if is_dataclass(cls):
        names.extend(f.name for f in fields(cls))
    elif issubclass(cls, tuple) and isinstance(getattr(cls, "_fields", None), tuple):
        names.extend(cls._fields)
    else:
        slots = _slot_names(cls)
        if slots is None:
            return None
        names.extend(slots)

    for name in _property_names(cls):
        if name not in names:
            names.append(name)
    return tuple(name for name in names if not name.startswith("_"))


def _slot_names(cls: Type[Any]) -> Optional[list[str]]:
    """Return slot names, or `None` when instances also carry a `__dict__`."""

    names: list[str] = []
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        slots = klass.__dict__.get("__slots__")
        if slots is None:
            return None
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name == "__dict__":
                return None
            if name == "__weakref__" or name in names:
                continue
            names.append(name)
    return names


def _property_names(cls: Type[Any]) -> list[str]:
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, property) and value.fget is not None and name not in names:
                names.append(name)
    return [name for name in names if not name.startswith("_")]


def _instance_fields(obj: Any) -> Tuple[str, ...]:
    try:
        attrs = vars(obj)
    except TypeError:
        return ()
    names = [name for name in attrs if not name.startswith("_")]
    for name in _property_names(type(obj)):
        if name not in names:
            names.append(name)
    return tuple(names)


default_field_cache = FieldCache()
