"""
Core semantic classes for the screcel IR.

An unraveled Scratch script is a ``Unit``: an ordered list of instructions
where loop and branch bodies are nested lists instead of pointer chains.
Every instruction keeps the id, opcode, resolved inputs and raw fields of
the block it came from.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Sequence, Union

from .expressions import Expression


@dataclass(frozen=True)
class PlainInstruction:
    """A statement block with no control-flow meaning of its own."""
    node_id: str
    opcode: str
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "instruction"


@dataclass(frozen=True)
class RepeatInstruction:
    """Counted loop (``control_repeat``)."""
    node_id: str
    opcode: str
    times: Expression
    body: List["Instruction"] = field(default_factory=list)
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "repeat"


@dataclass(frozen=True)
class RepeatUntilInstruction:
    """Loop that runs while ``condition`` is false (``control_repeat_until``)."""
    node_id: str
    opcode: str
    condition: Expression
    body: List["Instruction"] = field(default_factory=list)
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "repeat_until"


@dataclass(frozen=True)
class IfInstruction:
    """
    Conditional (``control_if`` / ``control_if_else``).

    ``else_branch`` is None for a plain ``if``; an ``if_else`` with an empty
    else body has an empty list instead.
    """
    node_id: str
    opcode: str
    condition: Expression
    then_branch: List["Instruction"] = field(default_factory=list)
    else_branch: Optional[List["Instruction"]] = None
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "if"


@dataclass(frozen=True)
class ForeverInstruction:
    node_id: str
    opcode: str
    body: List["Instruction"] = field(default_factory=list)
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "forever"


@dataclass(frozen=True)
class WaitUntilInstruction:
    node_id: str
    opcode: str
    condition: Expression
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "wait_until"


@dataclass(frozen=True)
class StopInstruction:
    node_id: str
    opcode: str
    stop_option: str = "all"
    inputs: Dict[str, Expression] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = "stop"


Instruction = Union[
    PlainInstruction,
    RepeatInstruction,
    RepeatUntilInstruction,
    IfInstruction,
    ForeverInstruction,
    WaitUntilInstruction,
    StopInstruction,
]


def child_bodies(instruction: Instruction) -> List[List[Instruction]]:
    """Return the nested instruction lists of ``instruction`` in source order."""
    if isinstance(instruction, IfInstruction):
        bodies = [instruction.then_branch]
        if instruction.else_branch is not None:
            bodies.append(instruction.else_branch)
        return bodies
    body = getattr(instruction, "body", None)
    return [body] if body is not None else []


def walk_instructions(instructions: Sequence[Instruction]) -> Iterator[Instruction]:
    """Yield every instruction depth-first, including nested bodies."""
    for instruction in instructions:
        yield instruction
        for body in child_bodies(instruction):
            yield from walk_instructions(body)


@dataclass
class Unit:
    """
    One reconstructed script rooted at its entry block.

    Attributes:
        id: Id of the entry block
        is_top_level: Whether the entry block is flagged top-level
        instructions: Ordered instruction list
        x, y: Workspace position of the entry block, when known
    """
    id: str
    is_top_level: bool
    instructions: List[Instruction] = field(default_factory=list)
    x: Optional[float] = None
    y: Optional[float] = None

    def node_ids(self) -> List[str]:
        """Ids of every block placed in this unit, nested bodies included."""
        return [instr.node_id for instr in walk_instructions(self.instructions)]

    def __str__(self):
        return f"Unit({self.id}: {len(self.instructions)} instructions)"
