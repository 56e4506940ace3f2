"""Opcode extensions for the code generator."""

from .CodeGeneratorExtender import (
    CodeGenExtension,
    register_codegen_extension,
    register_codegen_extensions,
    registered_opcodes,
)

__all__ = [
    "CodeGenExtension",
    "register_codegen_extension",
    "register_codegen_extensions",
    "registered_opcodes",
]
