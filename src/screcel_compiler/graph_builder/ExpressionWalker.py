#!/usr/bin/env python3
"""
ExpressionWalker.py — Input tuples and reporter blocks to expression trees

Every value-carrying input of a block is turned into an ``Expression``.
Reporter references are followed recursively and evaluated as expressions,
never as statements. Reporter opcodes are recognized through an explicit
lookup table; anything not in the table becomes a ``BlockExpression`` so that
reconstruction always yields a well-formed tree and the decision about
unsupported operations is left to code generation.
"""

from typing import Any, Dict, Optional, Set, Tuple

from ..diagnostics import Diagnostics, codes
from ..ir.expressions import (
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
from ..ir.types import BinaryOperator, ComparisonOperator, LiteralType, LogicalOperator
from .BlockModel import (
    Block,
    BlockInput,
    LiteralInput,
    RawInput,
    ReferenceInput,
    ReporterInput,
    field_entry,
)
from .GraphDriver import BlockGraph

# ----------------------------------------------------------------------
# Reporter opcode table: opcode -> (builder, operator, operand inputs)
# ----------------------------------------------------------------------
REPORTER_TABLE: Dict[str, Tuple[str, Any, Tuple[str, ...]]] = {
    "operator_add": ("binary", BinaryOperator.ADD, ("NUM1", "NUM2")),
    "operator_subtract": ("binary", BinaryOperator.SUBTRACT, ("NUM1", "NUM2")),
    "operator_multiply": ("binary", BinaryOperator.MULTIPLY, ("NUM1", "NUM2")),
    "operator_divide": ("binary", BinaryOperator.DIVIDE, ("NUM1", "NUM2")),
    "operator_mod": ("binary", BinaryOperator.MOD, ("NUM1", "NUM2")),
    "operator_join": ("binary", BinaryOperator.JOIN, ("STRING1", "STRING2")),
    "operator_equals": ("comparison", ComparisonOperator.EQUALS, ("OPERAND1", "OPERAND2")),
    "operator_gt": ("comparison", ComparisonOperator.GT, ("OPERAND1", "OPERAND2")),
    "operator_lt": ("comparison", ComparisonOperator.LT, ("OPERAND1", "OPERAND2")),
    "operator_and": ("logical", LogicalOperator.AND, ("OPERAND1", "OPERAND2")),
    "operator_or": ("logical", LogicalOperator.OR, ("OPERAND1", "OPERAND2")),
    "operator_not": ("not", None, ("OPERAND",)),
    "data_variable": ("variable", None, ()),
    "data_itemoflist": ("list_item", None, ("INDEX",)),
    "data_lengthoflist": ("list_length", None, ()),
}


def _text_of(value: Any) -> str:
    """Textual form of a non-number, non-boolean literal payload."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_text_of(item) for item in value)
    return str(value)


def make_literal(value: Any) -> Literal:
    """Classify ``value`` by its runtime kind."""
    if isinstance(value, bool):
        return Literal(value, LiteralType.BOOLEAN)
    if isinstance(value, (int, float)):
        return Literal(value, LiteralType.NUMBER)
    return Literal(_text_of(value), LiteralType.STRING)


class ExpressionWalker:
    """
    Builds expression trees for one block graph.

    Example:
        walker = ExpressionWalker(graph)
        times = walker.build(block.inputs.get("TIMES"))
    """

    def __init__(self, graph: BlockGraph, diagnostics: Optional[Diagnostics] = None):
        self.graph = graph
        self.diagnostics = diagnostics or Diagnostics.collecting()
        self._active: Set[str] = set()  # reporters being expanded on the current path

    # ===================================================================
    # SECTION 1: Input tuples
    # ===================================================================

    def build(self, block_input: Optional[BlockInput]) -> Expression:
        """Convert one decoded input into an expression; never raises."""
        if block_input is None:
            return empty_literal()
        if isinstance(block_input, LiteralInput):
            return make_literal(block_input.value)
        if isinstance(block_input, ReferenceInput):
            return VariableRef(id=_text_of(block_input.target))
        if isinstance(block_input, ReporterInput):
            target = block_input.target
            block = self.graph.block(target) if isinstance(target, str) else None
            if block is None:
                return make_literal(target)
            return self.from_block(block)
        if isinstance(block_input, RawInput):
            return make_literal(block_input.value)
        return make_literal(block_input)

    def build_all(self, inputs: Dict[str, BlockInput]) -> Dict[str, Expression]:
        """Resolve every input of a block, keeping input order."""
        return {name: self.build(value) for name, value in inputs.items()}

    # ===================================================================
    # SECTION 2: Reporter blocks
    # ===================================================================

    def from_block(self, block: Block) -> Expression:
        """Evaluate a reporter block as an expression."""
        if block.id in self._active:
            self.diagnostics.report(codes.REPORTER_CYCLE, node=block.id,
                                    target=self.graph.name)
            return make_literal(block.id)

        self._active.add(block.id)
        try:
            entry = REPORTER_TABLE.get(block.opcode)
            if entry is None:
                return BlockExpression(
                    opcode=block.opcode,
                    inputs=self.build_all(block.inputs),
                    fields=dict(block.fields),
                )
            builder, operator, operands = entry
            handler = getattr(self, f"_expr_{builder}")
            return handler(block, operator, operands)
        finally:
            self._active.discard(block.id)

    def _operands(self, block: Block, names: Tuple[str, ...]):
        return [self.build(block.inputs.get(name)) for name in names]

    def _expr_binary(self, block, operator, operands) -> Expression:
        left, right = self._operands(block, operands)
        return BinaryOperation(operator, left, right)

    def _expr_comparison(self, block, operator, operands) -> Expression:
        left, right = self._operands(block, operands)
        return Comparison(operator, left, right)

    def _expr_logical(self, block, operator, operands) -> Expression:
        left, right = self._operands(block, operands)
        return LogicalOperation(operator, left, right)

    def _expr_not(self, block, operator, operands) -> Expression:
        (operand,) = self._operands(block, operands)
        return LogicalNot(operand)

    def _expr_variable(self, block, operator, operands) -> Expression:
        # VARIABLE field is [name, id]; the id falls back to the name
        name = field_entry(block.fields, "VARIABLE", 0)
        var_id = field_entry(block.fields, "VARIABLE", 1) or name or ""
        return VariableRef(id=var_id, name=name)

    def _expr_list_item(self, block, operator, operands) -> Expression:
        (index,) = self._operands(block, operands)
        return ListItem(list=field_entry(block.fields, "LIST", 1) or "", index=index)

    def _expr_list_length(self, block, operator, operands) -> Expression:
        return ListLength(list=field_entry(block.fields, "LIST", 1) or "")
