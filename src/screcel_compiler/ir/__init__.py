"""Intermediate representation of reconstructed Scratch scripts."""

from .core import (
    ForeverInstruction,
    IfInstruction,
    Instruction,
    PlainInstruction,
    RepeatInstruction,
    RepeatUntilInstruction,
    StopInstruction,
    Unit,
    WaitUntilInstruction,
    child_bodies,
    walk_instructions,
)
from .expressions import (
    BinaryOperation,
    BlockExpression,
    Comparison,
    Expression,
    ListItem,
    ListLength,
    Literal,
    LogicalNot,
    LogicalOperation,
    VariableRef,
    empty_literal,
)
from .serializer import IRSerializer
from .types import BinaryOperator, ComparisonOperator, LiteralType, LogicalOperator

__all__ = [
    # Types
    "LiteralType",
    "BinaryOperator",
    "ComparisonOperator",
    "LogicalOperator",
    # Expressions
    "Expression",
    "Literal",
    "VariableRef",
    "BinaryOperation",
    "Comparison",
    "LogicalOperation",
    "LogicalNot",
    "ListItem",
    "ListLength",
    "BlockExpression",
    "empty_literal",
    # Instructions
    "Instruction",
    "PlainInstruction",
    "RepeatInstruction",
    "RepeatUntilInstruction",
    "IfInstruction",
    "ForeverInstruction",
    "WaitUntilInstruction",
    "StopInstruction",
    "Unit",
    "child_bodies",
    "walk_instructions",
    # Serialization
    "IRSerializer",
]
