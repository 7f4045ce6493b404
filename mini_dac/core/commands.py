"""Command descriptors built per call by the typed helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .field_cache import FieldCache
from .parameters import (
    Parameter,
    ParameterDirection,
    ParameterSource,
    to_parameters,
)

DEFAULT_STATUS_PARAMETER = "return_value"


class CommandType(str, Enum):
    """How command text is interpreted by the driver."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"
    TABLE_DIRECT = "table_direct"


CommandTypeInput = Union[CommandType, str]


def normalize_command_type(value: CommandTypeInput) -> CommandType:
    """Return a `CommandType` from an enum member or its string value."""

    if isinstance(value, CommandType):
        return value
    if isinstance(value, str):
        try:
            return CommandType(value.lower())
        except ValueError:
            pass
    allowed = ", ".join(repr(item.value) for item in CommandType)
    raise ValueError(f"Unsupported command type {value!r}. Use one of: {allowed}.")


@dataclass(frozen=True)
class Command:
    """Immutable description of one command execution.

    `status` is the reserved status-code slot every command carries; it is
    never bound as an input parameter.
    """

    text: str
    command_type: CommandType = CommandType.TEXT
    parameters: Tuple[Parameter, ...] = ()
    status: Parameter = field(
        default_factory=lambda: Parameter(
            DEFAULT_STATUS_PARAMETER,
            direction=ParameterDirection.RETURN_VALUE,
        )
    )

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("Command text must be a non-empty string.")
        object.__setattr__(self, "command_type", normalize_command_type(self.command_type))
        object.__setattr__(self, "parameters", tuple(self.parameters))

    @classmethod
    def build(
        cls,
        text: str,
        parameters: ParameterSource = None,
        command_type: CommandTypeInput = CommandType.TEXT,
        *,
        status_parameter: str = DEFAULT_STATUS_PARAMETER,
        cache: Optional[FieldCache] = None,
    ) -> Command:
        """Build a command from SQL text, any parameter shape and a command type."""

        return cls(
            text=text,
            command_type=normalize_command_type(command_type),
            parameters=to_parameters(parameters, cache=cache).to_tuple(),
            status=Parameter(status_parameter, direction=ParameterDirection.RETURN_VALUE),
        )

    @property
    def input_parameters(self) -> Tuple[Parameter, ...]:
        return tuple(
            p for p in self.parameters if p.direction is ParameterDirection.INPUT
        )
