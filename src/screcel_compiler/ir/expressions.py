"""
Expression trees produced from reporter blocks and literal inputs.

Expressions are immutable. Each class carries a ``kind`` tag that the code
generator dispatches on.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Union

from .types import BinaryOperator, ComparisonOperator, LiteralType, LogicalOperator


@dataclass(frozen=True)
class Literal:
    """A constant value with its runtime kind."""
    value: Union[str, int, float, bool]
    data_type: LiteralType = LiteralType.STRING

    kind: ClassVar[str] = "literal"

    def __str__(self):
        return f"Literal({self.value!r}: {self.data_type})"


@dataclass(frozen=True)
class VariableRef:
    """
    Reference to a variable (or list) by id.

    ``name`` is the display name when the block carried one; the code
    generator resolves the id through the identifier registry.
    """
    id: str
    name: Optional[str] = None

    kind: ClassVar[str] = "variable"


@dataclass(frozen=True)
class BinaryOperation:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"

    kind: ClassVar[str] = "binary_operation"


@dataclass(frozen=True)
class Comparison:
    operator: ComparisonOperator
    left: "Expression"
    right: "Expression"

    kind: ClassVar[str] = "comparison"


@dataclass(frozen=True)
class LogicalOperation:
    operator: LogicalOperator
    left: "Expression"
    right: "Expression"

    kind: ClassVar[str] = "logical_operation"


@dataclass(frozen=True)
class LogicalNot:
    operand: "Expression"

    kind: ClassVar[str] = "logical_not"


@dataclass(frozen=True)
class ListItem:
    """Item of a list (by list id) at an index expression."""
    list: str
    index: "Expression"

    kind: ClassVar[str] = "list_item"


@dataclass(frozen=True)
class ListLength:
    list: str

    kind: ClassVar[str] = "list_length"


@dataclass(frozen=True)
class BlockExpression:
    """
    Fallback for reporter opcodes without a dedicated variant.

    Inputs are fully resolved; fields are kept raw. Rendering one is an error,
    but reconstruction always succeeds.
    """
    opcode: str
    inputs: Dict[str, "Expression"] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "block_expression"


Expression = Union[
    Literal,
    VariableRef,
    BinaryOperation,
    Comparison,
    LogicalOperation,
    LogicalNot,
    ListItem,
    ListLength,
    BlockExpression,
]


def empty_literal() -> Literal:
    """Value used for an absent input."""
    return Literal("", LiteralType.STRING)
