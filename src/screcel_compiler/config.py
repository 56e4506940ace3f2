"""
Compiler configuration.

A single dataclass carries every knob the pipeline reads, so the CLI and
tests configure the compiler the same way.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class IdentifierScope(Enum):
    """Lifetime of the identifier registry used during code generation."""
    PROGRAM = "program"     # one registry for every target
    TARGET = "target"       # fresh registry per target body


@dataclass
class CompilerConfig:
    """
    Settings for a compilation run.

    Attributes:
        identifier_scope: Whether identifiers are allocated per program or per target.
            With PROGRAM scope, ids that coincide across targets alias to one name.
        identifier_prefix: Prefix of every allocated identifier (``id_1_score``)
        entry_trigger: Opcode whose scripts the dispatcher invokes
        dispatcher_name: Name of the generated dispatcher function
        header: First line of the generated file
        indent_unit: Text written once per indentation level
        cache_dir: Directory holding cached ``projects-<id>.json`` documents
    """
    identifier_scope: IdentifierScope = IdentifierScope.PROGRAM
    identifier_prefix: str = "id"
    entry_trigger: str = "event_whenflagclicked"
    dispatcher_name: str = "flagClicked"
    header: str = "// Generated code for Scratch project"
    indent_unit: str = "    "
    cache_dir: Path = Path(".screcel") / "cache"

    def __post_init__(self):
        if isinstance(self.identifier_scope, str):
            self.identifier_scope = IdentifierScope(self.identifier_scope)
        if isinstance(self.cache_dir, str):
            self.cache_dir = Path(self.cache_dir)
