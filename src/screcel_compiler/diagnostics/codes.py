"""
Stable diagnostic codes.

Prefixes: GB graph building, UR script reconstruction, EX expressions,
CG code generation, PRJ project loading.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto

class Severity(Enum):
    INFO = auto()
    WARN = auto()
    ERROR = auto()

@dataclass(frozen=True)      # immutable
class Code:
    id: str                  # e.g., "GB001" (prefix + 3 digits)
    severity: Severity       # default severity
    template: str            # default message template (format kwargs allowed)

class Codes:
    # Graph / Builder
    DANGLING_POINTER   = Code("GB001", Severity.WARN,
                              "Block '{node}' has {attr} pointer to missing block '{symbol}'.")

    # Unraveler
    SKIPPED_ENTRY      = Code("UR001", Severity.INFO,
                              "Top-level block '{node}' was consumed by another script; no script emitted.")
    MALFORMED_BODY     = Code("UR002", Severity.WARN,
                              "Malformed body reference in input '{name}' of block '{node}'; using empty body.")

    # Expressions
    REPORTER_CYCLE     = Code("EX001", Severity.WARN,
                              "Reporter block '{node}' references itself; substituted a literal.")

    # Codegen
    UNSUPPORTED_OPCODE = Code("CG001", Severity.ERROR,
                              "Unsupported opcode '{op}'.")
    UNSUPPORTED_EXPR   = Code("CG002", Severity.ERROR,
                              "Unsupported expression type '{op}'.")
    UNSUPPORTED_OPERATOR = Code("CG003", Severity.ERROR,
                              "Unsupported operator '{op}'.")
    MISSING_VALUE      = Code("CG004", Severity.ERROR,
                              "Missing required {attr} on block '{node}'.")
    ORPHAN_TRIGGER     = Code("CG005", Severity.WARN,
                              "Trigger block '{node}' is not part of any script; skipped.")

    # Project loading
    INVALID_URL        = Code("PRJ001", Severity.ERROR,
                              "Invalid Scratch project URL: {reason}.")
    PROJECT_NOT_FOUND  = Code("PRJ002", Severity.ERROR,
                              "Project not found: {reason}.")
    MALFORMED_PROJECT  = Code("PRJ003", Severity.ERROR,
                              "Malformed project document: {reason}.")

codes = Codes()
