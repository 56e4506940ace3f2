"""
Exception types raised by the compiler.

Every error carries the diagnostic ``Code`` that describes it plus the
keyword context used to format the code's template, so the CLI can report
it through the same diagnostics sink as warnings.
"""

from typing import Any, Dict, Optional

from .codes import Code, codes


class CompilerError(Exception):
    """Base class for fatal compiler errors."""

    default_code: Code = codes.MALFORMED_PROJECT

    def __init__(self, code: Optional[Code] = None, **context: Any):
        self.code = code or self.default_code
        self.context: Dict[str, Any] = context
        try:
            message = self.code.template.format(**context)
        except KeyError:
            message = self.code.template
        super().__init__(message)


class UnsupportedOperation(CompilerError):
    """Raised at emission time for an opcode, expression or operator with no renderer."""

    default_code = codes.UNSUPPORTED_OPCODE


class MissingRequiredValue(CompilerError):
    """Raised when a field or input needed for rendering is absent."""

    default_code = codes.MISSING_VALUE


class InvalidProjectError(CompilerError):
    """Raised when a project reference or document cannot be used."""

    default_code = codes.MALFORMED_PROJECT
