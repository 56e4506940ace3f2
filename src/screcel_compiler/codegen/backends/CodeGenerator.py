#!/usr/bin/env python3
"""
CodeGenerator.py — Generate JavaScript from reconstructed Scratch scripts

For every target of a project this module builds the block graph, unravels
it into nested instruction trees and renders those trees as one JavaScript
closure per target.

Architecture:
- Reconstruction: GraphBuilder + Unraveler per target
- Code Emitter: Indentation and line accumulation (CodeEmitter)
- Identifier Registry: Stable names for targets, variables, lists, scripts
- Expression Reconstructor: Expression tree -> JavaScript expression text
- Statement Processor: Instruction tree -> JavaScript statements
- Extensions: Plain opcodes rendered by CodeGeneratorExtender handlers

Rendering is all-or-nothing: the first unsupported construct raises and no
partial text is returned.
"""

import json
from typing import Dict, List, Optional

from ...config import CompilerConfig, IdentifierScope
from ...diagnostics import Diagnostics, UnsupportedOperation, codes
from ...extension.CodeGeneratorExtender import register_codegen_extensions
from ...graph_builder.GraphDriver import BlockGraph, GraphBuilder
from ...graph_builder.ProjectLoader import Project, Target
from ...graph_builder.Unraveler import Unraveler
from ...ir.core import Instruction, Unit
from ...ir.expressions import Expression
from ...ir.types import BinaryOperator, ComparisonOperator, LogicalOperator
from ..emitter import CodeEmitter
from ..identifiers import IdentifierRegistry

# Operator spellings; MOD and JOIN are rendered by dedicated templates
BINARY_OPERATORS = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
}
COMPARISON_OPERATORS = {
    ComparisonOperator.EQUALS: "==",
    ComparisonOperator.GT: ">",
    ComparisonOperator.LT: "<",
}
LOGICAL_OPERATORS = {
    LogicalOperator.AND: "&&",
    LogicalOperator.OR: "||",
}

# "other scripts in sprite" / "other scripts in stage"
STOP_OTHER_SCRIPTS = "other scripts"


def _json(value) -> str:
    return json.dumps(value, ensure_ascii=False)


class CodeGenerator:
    """
    Generates JavaScript for a whole project.

    Process:
    1. For each target: build its block graph and unravel it into Units
    2. Emit the target closure: declarations, one function per Unit,
       the trigger dispatcher and the returned handle
    3. Return the complete source text

    Example:
        code = CodeGenerator(project).generate()
    """

    def __init__(self, project: Project, config: Optional[CompilerConfig] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.project = project
        self.config = config or CompilerConfig()
        self.diagnostics = diagnostics or Diagnostics.collecting()

        self.out = CodeEmitter(self.config.indent_unit)
        self.program_identifiers = IdentifierRegistry(self.config.identifier_prefix)
        self.identifiers = self.program_identifiers  # registry used inside the current target

        # Reconstruction results, keyed by target name
        self.graphs: Dict[str, BlockGraph] = {}
        self.units: Dict[str, List[Unit]] = {}

        # Register code generation extensions
        register_codegen_extensions(self)

    # ===================================================================
    # SECTION 1: Reconstruction
    # ===================================================================

    def reconstruct(self, target: Target) -> List[Unit]:
        """Build the block graph of ``target`` and unravel it."""
        graph = GraphBuilder(target.blocks, target.name, self.diagnostics).build()
        units = Unraveler(graph, self.diagnostics).unravel()
        self.graphs[target.name] = graph
        self.units[target.name] = units
        return units

    # ===================================================================
    # SECTION 2: Main Code Generation Entry Point
    # ===================================================================

    def generate(self) -> str:
        """
        Generate the complete JavaScript source.

        Every call starts from fresh identifier registries and an empty
        emitter, so generating twice yields identical text.

        Raises:
            UnsupportedOperation: an opcode, expression or operator has no renderer
            MissingRequiredValue: a field or input needed for rendering is absent
        """
        self.out = CodeEmitter(self.config.indent_unit)
        self.program_identifiers = IdentifierRegistry(self.config.identifier_prefix)
        self.identifiers = self.program_identifiers

        self.out.write(self.config.header)
        for target in self.project.targets:
            self._process_target(target)

        return self.out.text

    def _process_target(self, target: Target):
        callable_name = self.program_identifiers.resolve(target.name)
        if self.config.identifier_scope is IdentifierScope.TARGET:
            self.identifiers = IdentifierRegistry(self.config.identifier_prefix)
        else:
            self.identifiers = self.program_identifiers

        units = self.reconstruct(target)

        self.out.write(f"// Target: {target.name}")
        self.out.write(f"function {callable_name}() {{")
        with self.out.scope():
            self._process_declarations(target)
            for unit in units:
                self._process_unit(unit)
            self._process_dispatcher(target, units)
            self.out.write(f"return {{ {self.config.dispatcher_name} }};")
        self.out.write("}")

    def _process_declarations(self, target: Target):
        for var_id, (name, initial) in target.variables.items():
            identifier = self.identifiers.resolve(var_id, name)
            self.out.write(f"let {identifier} = {_json(initial)}; // Variable: {name}")
        for list_id, (name, initial) in target.lists.items():
            identifier = self.identifiers.resolve(list_id, name)
            self.out.write(f"let {identifier} = {_json(initial)}; // List: {name}")

    def _process_unit(self, unit: Unit):
        self.out.write(f"function {self.identifiers.resolve(unit.id)}() {{")
        self._process_body(unit.instructions)
        self.out.write("}")

    def _process_dispatcher(self, target: Target, units: List[Unit]):
        """
        Emit the dispatcher that calls every script containing a trigger block.

        Triggers are visited in block-map order; a trigger outside every
        script is reported and skipped.
        """
        owner: Dict[str, str] = {}
        for unit in units:
            for node_id in unit.node_ids():
                owner[node_id] = unit.id

        self.out.write(f"function {self.config.dispatcher_name}() {{")
        with self.out.scope():
            for block_id, block in target.blocks.items():
                if block.opcode != self.config.entry_trigger:
                    continue
                unit_id = owner.get(block_id)
                if unit_id is None:
                    self.diagnostics.report(codes.ORPHAN_TRIGGER, node=block_id,
                                            target=target.name)
                    continue
                self.out.write(f"{self.identifiers.resolve(unit_id)}(); "
                               f"// Executing block: {block.opcode}")
        self.out.write("}")

    # ===================================================================
    # SECTION 3: Expression Reconstruction
    # ===================================================================

    def render_expression(self, expr: Expression) -> str:
        """Render an expression tree; raises UnsupportedOperation for unknown kinds."""
        kind = getattr(expr, "kind", type(expr).__name__)
        handler = getattr(self, f"_reconstruct_{kind}", None)
        if handler is None:
            raise UnsupportedOperation(codes.UNSUPPORTED_EXPR, op=kind)
        return handler(expr)

    def _reconstruct_literal(self, expr) -> str:
        return _json(expr.value)

    def _reconstruct_variable(self, expr) -> str:
        return self.identifiers.resolve(expr.id, expr.name)

    def _reconstruct_list_length(self, expr) -> str:
        return f"{self.identifiers.resolve(expr.list)}.length"

    def _reconstruct_list_item(self, expr) -> str:
        index = self.render_expression(expr.index)
        return f"{self.identifiers.resolve(expr.list)}[{index}]"

    def _reconstruct_binary_operation(self, expr) -> str:
        left = self.render_expression(expr.left)
        right = self.render_expression(expr.right)
        if expr.operator is BinaryOperator.MOD:
            # floored modulo on numbers: result takes the sign of the divisor
            left, right = f"Number({left})", f"Number({right})"
            return f"((({left} % {right}) + {right}) % {right})"
        if expr.operator is BinaryOperator.JOIN:
            return f"(String({left}) + String({right}))"
        symbol = BINARY_OPERATORS.get(expr.operator)
        if symbol is None:
            raise UnsupportedOperation(codes.UNSUPPORTED_OPERATOR, op=str(expr.operator))
        return f"({left} {symbol} {right})"

    def _reconstruct_comparison(self, expr) -> str:
        symbol = COMPARISON_OPERATORS.get(expr.operator)
        if symbol is None:
            raise UnsupportedOperation(codes.UNSUPPORTED_OPERATOR, op=str(expr.operator))
        return f"({self.render_expression(expr.left)} {symbol} {self.render_expression(expr.right)})"

    def _reconstruct_logical_operation(self, expr) -> str:
        symbol = LOGICAL_OPERATORS.get(expr.operator)
        if symbol is None:
            raise UnsupportedOperation(codes.UNSUPPORTED_OPERATOR, op=str(expr.operator))
        return f"({self.render_expression(expr.left)} {symbol} {self.render_expression(expr.right)})"

    def _reconstruct_logical_not(self, expr) -> str:
        return f"(!{self.render_expression(expr.operand)})"

    def _reconstruct_block_expression(self, expr) -> str:
        raise UnsupportedOperation(codes.UNSUPPORTED_EXPR, op=expr.opcode)

    # ===================================================================
    # SECTION 4: Statement Processing
    # ===================================================================

    def render_instruction(self, instruction: Instruction):
        """Emit the statements of one instruction at the current depth."""
        handler = getattr(self, f"_process_{instruction.kind}", None)
        if handler is None:
            raise UnsupportedOperation(codes.UNSUPPORTED_OPCODE, op=instruction.opcode)
        handler(instruction)

    def _process_body(self, instructions: List[Instruction]):
        with self.out.scope():
            for instruction in instructions:
                self.render_instruction(instruction)

    def _process_instruction(self, instruction):
        """Plain opcodes go through the extension registry."""
        handler = getattr(self, f"_generate_ext_{instruction.opcode}", None)
        if handler is None:
            raise UnsupportedOperation(codes.UNSUPPORTED_OPCODE, op=instruction.opcode)
        line = handler(instruction)
        if line:
            self.out.write(line)

    def _process_repeat(self, instruction):
        times = self.render_expression(instruction.times)
        # count is evaluated once, before the first iteration
        self.out.write(f"for (let i = 0, n = {times}; i < n; i++) {{")
        self._process_body(instruction.body)
        self.out.write("}")

    def _process_repeat_until(self, instruction):
        condition = self.render_expression(instruction.condition)
        self.out.write(f"while (!({condition})) {{")
        self._process_body(instruction.body)
        self.out.write("}")

    def _process_if(self, instruction):
        condition = self.render_expression(instruction.condition)
        self.out.write(f"if ({condition}) {{")
        self._process_body(instruction.then_branch)
        if instruction.else_branch is not None:
            self.out.write("} else {")
            self._process_body(instruction.else_branch)
        self.out.write("}")

    def _process_forever(self, instruction):
        self.out.write("while (true) {")
        self._process_body(instruction.body)
        self.out.write("}")

    def _process_wait_until(self, instruction):
        condition = self.render_expression(instruction.condition)
        self.out.write(f"while (!({condition})) {{}} // Wait until")

    def _process_stop(self, instruction):
        if instruction.stop_option.startswith(STOP_OTHER_SCRIPTS):
            # the current script keeps running
            self.out.write(f"// Stop: {instruction.stop_option}")
            return
        self.out.write(f"return; // Stop: {instruction.stop_option}")


def codegen_project(project: Project, config: Optional[CompilerConfig] = None,
                    diagnostics: Optional[Diagnostics] = None) -> str:
    """Generate JavaScript for ``project``."""
    return CodeGenerator(project, config, diagnostics).generate()
