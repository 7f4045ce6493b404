"""Public core API for parameters, commands, results and failure handling."""

from .commands import Command, CommandType, CommandTypeInput, normalize_command_type
from .data import DataSet, DataTable
from .exceptions import (
    DacCancelledError,
    DacError,
    DacGenericError,
    DacReturnCodeError,
    DacSqlExecutionError,
    Messages,
)
from .executor import classify_failure
from .field_cache import FieldCache, default_field_cache
from .options import ExecutionOptions
from .outcomes import (
    BusinessFailure,
    ExecutionOutcome,
    InfrastructureFailure,
    Success,
    UnexpectedFailure,
    capture,
    capture_async,
)
from .parameters import DB_NULL, DacParameters, Parameter, ParameterDirection, to_parameters

__all__ = [
    "Command",
    "CommandType",
    "CommandTypeInput",
    "normalize_command_type",
    "DataSet",
    "DataTable",
    "DacError",
    "DacSqlExecutionError",
    "DacReturnCodeError",
    "DacGenericError",
    "DacCancelledError",
    "Messages",
    "classify_failure",
    "FieldCache",
    "default_field_cache",
    "ExecutionOptions",
    "ExecutionOutcome",
    "Success",
    "BusinessFailure",
    "InfrastructureFailure",
    "UnexpectedFailure",
    "capture",
    "capture_async",
    "DB_NULL",
    "DacParameters",
    "Parameter",
    "ParameterDirection",
    "to_parameters",
]
