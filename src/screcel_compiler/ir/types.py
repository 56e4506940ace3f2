"""
Enumerations shared by the screcel IR.

Operators are closed sets: anything outside them cannot be represented
and is rejected at code-generation time.
"""

from enum import Enum


class LiteralType(Enum):
    """Runtime kind of a literal value."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    def __str__(self):
        return self.value


class BinaryOperator(Enum):
    """Arithmetic and string operators."""
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    MOD = "mod"
    JOIN = "join"

    def __str__(self):
        return self.value


class ComparisonOperator(Enum):
    """Comparison operators."""
    EQUALS = "equals"
    GT = "gt"
    LT = "lt"

    def __str__(self):
        return self.value


class LogicalOperator(Enum):
    """Boolean connectives."""
    AND = "and"
    OR = "or"

    def __str__(self):
        return self.value
