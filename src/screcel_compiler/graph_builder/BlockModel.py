#!/usr/bin/env python3
"""
BlockModel.py — Typed records for Scratch blocks

Scratch serializes every block of a target as a flat map from block id to a
record with an opcode, ``next``/``parent`` pointers, inputs and fields.
Inputs are small tagged tuples whose first element is a numeric discriminant:

    [1, literal]                literal (optionally a typed array [code, value])
    [2, id]                     entity reference, or body reference for SUBSTACK*
    [3, id, fallback]           reporter block whose evaluation yields a value

Decoding is tolerant: a malformed tuple becomes ``RawInput`` and is later
treated as a literal, never as an error.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional, Union


class InputKind(IntEnum):
    """Numeric discriminant of a serialized input tuple."""
    LITERAL = 1
    REFERENCE = 2
    REPORTER = 3


# Inputs holding the first block of a nested chain instead of a value
BODY_INPUTS = ("SUBSTACK", "SUBSTACK2")


@dataclass(frozen=True)
class LiteralInput:
    value: Any


@dataclass(frozen=True)
class ReferenceInput:
    target: Any


@dataclass(frozen=True)
class ReporterInput:
    target: Any
    fallback: Any = None


@dataclass(frozen=True)
class RawInput:
    """Input tuple with an unknown discriminant or shape."""
    value: Any


BlockInput = Union[LiteralInput, ReferenceInput, ReporterInput, RawInput]


def decode_input(raw: Any) -> BlockInput:
    """
    Decode one serialized input tuple into its variant.

    Examples:
        [1, [4, "10"]]          -> LiteralInput("10")
        [2, "substack_id"]      -> ReferenceInput("substack_id")
        [3, "b", [10, ""]]      -> ReporterInput("b", [10, ""])
        "garbage"               -> RawInput("garbage")
    """
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        return RawInput(raw)

    kind, payload = raw[0], raw[1]
    if isinstance(kind, bool) or not isinstance(kind, int):
        return RawInput(raw)

    if kind == InputKind.LITERAL:
        if isinstance(payload, (list, tuple)):
            if len(payload) < 2:
                return RawInput(payload)
            return LiteralInput(payload[1])
        return LiteralInput(payload)
    if kind == InputKind.REFERENCE:
        return ReferenceInput(payload)
    if kind == InputKind.REPORTER:
        fallback = raw[2] if len(raw) > 2 else None
        return ReporterInput(payload, fallback)
    return RawInput(raw)


def body_target(block_input: Optional[BlockInput]) -> Optional[str]:
    """Return the block id a body input points at, or None when it is unusable."""
    if isinstance(block_input, (ReferenceInput, ReporterInput)):
        if isinstance(block_input.target, str):
            return block_input.target
    return None


def field_entry(fields: Dict[str, Any], name: str, index: int) -> Optional[str]:
    """
    Return element ``index`` of a ``[name, id]`` field as text.

    Missing fields, non-list fields, short lists and None entries give None.
    """
    value = fields.get(name)
    if not isinstance(value, (list, tuple)) or len(value) <= index:
        return None
    item = value[index]
    if item is None:
        return None
    return str(item)


@dataclass
class Block:
    """
    One node of the block graph.

    Attributes:
        id: Key of the block in its target's block map
        opcode: Operation tag (e.g. ``control_repeat``)
        next: Id of the following block in the chain
        parent: Id of the enclosing/previous block
        inputs: Input name -> decoded input tuple
        fields: Field name -> raw field tuple
        shadow: Whether the block is a shadow (inline default) block
        top_level: Whether the block starts a script
        x, y: Workspace position of top-level blocks
    """
    id: str
    opcode: str
    next: Optional[str] = None
    parent: Optional[str] = None
    inputs: Dict[str, BlockInput] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)
    shadow: bool = False
    top_level: bool = False
    x: Optional[float] = None
    y: Optional[float] = None

    @classmethod
    def from_json(cls, block_id: str, data: Dict[str, Any]) -> "Block":
        """Build a Block from its serialized record, filling defaults for missing keys."""
        raw_inputs = data.get("inputs") or {}
        raw_fields = data.get("fields") or {}
        next_id = data.get("next")
        parent_id = data.get("parent")
        return cls(
            id=block_id,
            opcode=str(data.get("opcode", "")),
            next=next_id if isinstance(next_id, str) else None,
            parent=parent_id if isinstance(parent_id, str) else None,
            inputs={name: decode_input(value) for name, value in raw_inputs.items()},
            fields=dict(raw_fields),
            shadow=bool(data.get("shadow", False)),
            top_level=bool(data.get("topLevel", False)),
            x=data.get("x"),
            y=data.get("y"),
        )


def parse_blocks(raw_blocks: Dict[str, Any]) -> Dict[str, Block]:
    """
    Decode a target's block map, keeping its enumeration order.

    Scratch also stores top-level variable/list reporters as bare arrays
    (``[12, name, id, x, y]``); those are not blocks and are skipped.
    """
    blocks: Dict[str, Block] = {}
    for block_id, data in raw_blocks.items():
        if not isinstance(data, dict):
            continue
        blocks[block_id] = Block.from_json(block_id, data)
    return blocks
