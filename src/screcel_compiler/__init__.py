"""
screcel: compile Scratch 3 block graphs into structured JavaScript.

Pipeline: project document -> block graph (networkx) -> nested instruction
trees -> JavaScript text.
"""

from .codegen.backends.CodeGenerator import CodeGenerator, codegen_project
from .config import CompilerConfig, IdentifierScope
from .diagnostics import (
    CompilerError,
    Diagnostics,
    InvalidProjectError,
    MissingRequiredValue,
    UnsupportedOperation,
)
from .graph_builder import load_project, parse_project

__version__ = "0.1.0"

__all__ = [
    "CodeGenerator",
    "codegen_project",
    "CompilerConfig",
    "IdentifierScope",
    "CompilerError",
    "Diagnostics",
    "InvalidProjectError",
    "MissingRequiredValue",
    "UnsupportedOperation",
    "load_project",
    "parse_project",
]
