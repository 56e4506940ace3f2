"""Structured diagnostics and compiler error types."""

from .codes import Code, Codes, Severity, codes
from .diagnostics import Diagnostics, DiagnosticsConfig, FORMATTERS, console_sink
from .errors import (
    CompilerError,
    InvalidProjectError,
    MissingRequiredValue,
    UnsupportedOperation,
)

__all__ = [
    "Code",
    "Codes",
    "Severity",
    "codes",
    "Diagnostics",
    "DiagnosticsConfig",
    "FORMATTERS",
    "console_sink",
    "CompilerError",
    "InvalidProjectError",
    "MissingRequiredValue",
    "UnsupportedOperation",
]
