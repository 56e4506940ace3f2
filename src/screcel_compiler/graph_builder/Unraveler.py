#!/usr/bin/env python3
"""
Unraveler.py — Block graph to nested instruction trees

Walks ``next`` chains starting at every top-level block and turns each chain
into a ``Unit``. Control blocks (loops, conditionals, wait, stop) get their
dedicated instruction types, and their bodies are resolved by nested chain
walks that share one traversal context with the top-level walk.

Traversal safety:
- every block id is visited at most once per pass, however many chains or
  bodies reference it
- a chain ends at a missing ``next``, a dangling pointer, or an already
  visited block, so cyclic links cannot loop forever

Malformed graph data never raises here; it degrades to shorter chains and
empty bodies.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from ..diagnostics import Diagnostics, codes
from ..ir.core import (
    ForeverInstruction,
    IfInstruction,
    Instruction,
    PlainInstruction,
    RepeatInstruction,
    RepeatUntilInstruction,
    StopInstruction,
    Unit,
    WaitUntilInstruction,
)
from .BlockModel import BODY_INPUTS, Block, body_target, field_entry
from .ExpressionWalker import ExpressionWalker
from .GraphDriver import BlockGraph, NodeId


@dataclass
class TraversalContext:
    """State shared by every chain walk of one reconstruction pass."""
    visited: Set[NodeId] = field(default_factory=set)

    def seen(self, node_id: NodeId) -> bool:
        return node_id in self.visited

    def mark(self, node_id: NodeId):
        self.visited.add(node_id)


class Unraveler:
    """
    Reconstructs the scripts of one block graph.

    Usage:
        units = Unraveler(graph).unravel()

    ``unravel`` creates a fresh traversal context on every call, so running it
    twice on the same graph yields the same units.
    """

    def __init__(self, graph: BlockGraph, diagnostics: Optional[Diagnostics] = None):
        self.graph = graph
        self.diagnostics = diagnostics or Diagnostics.collecting()
        self.expressions = ExpressionWalker(graph, self.diagnostics)

        # Control opcodes with a dedicated instruction type
        self._handlers: Dict[str, Callable[[Block, TraversalContext], Instruction]] = {
            "control_repeat": self._convert_repeat,
            "control_repeat_until": self._convert_repeat_until,
            "control_if": self._convert_if,
            "control_if_else": self._convert_if_else,
            "control_forever": self._convert_forever,
            "control_wait_until": self._convert_wait_until,
            "control_stop": self._convert_stop,
        }

    # ===================================================================
    # SECTION 1: Entry points
    # ===================================================================

    def unravel(self) -> List[Unit]:
        """
        Reconstruct every script, ordered like the top-level blocks in the block map.

        A top-level block already consumed by an earlier chain produces no unit;
        units without instructions are dropped.
        """
        context = TraversalContext()
        units: List[Unit] = []

        for entry_id in self.graph.top_level_ids():
            if context.seen(entry_id):
                self.diagnostics.report(codes.SKIPPED_ENTRY, node=entry_id,
                                        target=self.graph.name)
                continue

            entry = self.graph.block(entry_id)
            instructions = self._walk_chain(entry_id, context)
            if not instructions:
                continue
            units.append(Unit(
                id=entry_id,
                is_top_level=entry.top_level,
                instructions=instructions,
                x=entry.x,
                y=entry.y,
            ))

        return units

    def _walk_chain(self, start_id: Optional[NodeId], context: TraversalContext) -> List[Instruction]:
        """Convert the chain starting at ``start_id`` until it ends or meets a visited block."""
        instructions: List[Instruction] = []
        current = start_id

        while current is not None and not context.seen(current):
            block = self.graph.block(current)
            if block is None:
                break
            context.mark(current)
            instructions.append(self.convert_block(block, context))
            current = self.graph.next_of(current)

        return instructions

    # ===================================================================
    # SECTION 2: Block conversion
    # ===================================================================

    def convert_block(self, block: Block, context: TraversalContext) -> Instruction:
        """Convert one block into its instruction, resolving bodies through ``context``."""
        handler = self._handlers.get(block.opcode)
        if handler is not None:
            return handler(block, context)
        return PlainInstruction(
            node_id=block.id,
            opcode=block.opcode,
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _value_inputs(self, block: Block):
        """Resolve every input except body references."""
        return self.expressions.build_all(
            {name: value for name, value in block.inputs.items() if name not in BODY_INPUTS}
        )

    def _value(self, block: Block, name: str):
        return self.expressions.build(block.inputs.get(name))

    def _body(self, block: Block, name: str, context: TraversalContext) -> List[Instruction]:
        """
        Resolve a body input by walking the nested chain it points at.

        Absent input -> empty body. Malformed reference -> empty body and a warning.
        """
        if name not in block.inputs:
            return []
        target = body_target(block.inputs[name])
        if target is None:
            self.diagnostics.report(codes.MALFORMED_BODY, node=block.id, name=name,
                                    target=self.graph.name)
            return []
        return self._walk_chain(target, context)

    def _convert_repeat(self, block: Block, context: TraversalContext) -> Instruction:
        return RepeatInstruction(
            node_id=block.id,
            opcode=block.opcode,
            times=self._value(block, "TIMES"),
            body=self._body(block, "SUBSTACK", context),
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _convert_repeat_until(self, block: Block, context: TraversalContext) -> Instruction:
        return RepeatUntilInstruction(
            node_id=block.id,
            opcode=block.opcode,
            condition=self._value(block, "CONDITION"),
            body=self._body(block, "SUBSTACK", context),
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _convert_if(self, block: Block, context: TraversalContext) -> Instruction:
        return IfInstruction(
            node_id=block.id,
            opcode=block.opcode,
            condition=self._value(block, "CONDITION"),
            then_branch=self._body(block, "SUBSTACK", context),
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _convert_if_else(self, block: Block, context: TraversalContext) -> Instruction:
        # then-branch first: it claims blocks shared with the else-branch
        then_branch = self._body(block, "SUBSTACK", context)
        else_branch = self._body(block, "SUBSTACK2", context)
        return IfInstruction(
            node_id=block.id,
            opcode=block.opcode,
            condition=self._value(block, "CONDITION"),
            then_branch=then_branch,
            else_branch=else_branch,
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _convert_forever(self, block: Block, context: TraversalContext) -> Instruction:
        return ForeverInstruction(
            node_id=block.id,
            opcode=block.opcode,
            body=self._body(block, "SUBSTACK", context),
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _convert_wait_until(self, block: Block, context: TraversalContext) -> Instruction:
        return WaitUntilInstruction(
            node_id=block.id,
            opcode=block.opcode,
            condition=self._value(block, "CONDITION"),
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )

    def _convert_stop(self, block: Block, context: TraversalContext) -> Instruction:
        return StopInstruction(
            node_id=block.id,
            opcode=block.opcode,
            stop_option=field_entry(block.fields, "STOP_OPTION", 0) or "all",
            inputs=self._value_inputs(block),
            fields=dict(block.fields),
        )


def unravel_blocks(graph: BlockGraph, diagnostics: Optional[Diagnostics] = None) -> List[Unit]:
    """Reconstruct every script of ``graph``."""
    return Unraveler(graph, diagnostics).unravel()
