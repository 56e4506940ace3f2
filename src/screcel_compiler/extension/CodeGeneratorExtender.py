#!/usr/bin/env python3
"""
CodeGeneratorExtender.py - Extensible code generation for plain opcodes

Plain (non-control) instructions are rendered by small extension classes
looked up by opcode, so new opcodes can be supported without modifying
CodeGenerator. Inherit from CodeGenExtension, implement
generate(instruction) -> Optional[str] and register the class with
register_codegen_extension(cls).

Example:
    @register_codegen_extension
    class ClearListCodeGen(CodeGenExtension):
        opcode = "data_deletealloflist"

        def generate(self, instruction):
            list_name = self._identifier(self._field_id(instruction, "LIST"))
            return f"{list_name}.length = 0; // Delete all of list"
"""

from __future__ import annotations
from typing import Dict, Optional, Type

from ..diagnostics import MissingRequiredValue
from ..graph_builder.BlockModel import field_entry
from ..ir.core import PlainInstruction
from ..ir.expressions import Expression


# ----------------------------------------------------------------------
# Base extension class
# ----------------------------------------------------------------------
class CodeGenExtension:
    """
    Base class for all code generation extensions.

    Sub-classes must:
      * set ``opcode`` (block opcode to handle)
      * implement ``generate(self, instruction)`` - return one line of code,
        or None when the opcode emits nothing
    """

    opcode: str = ""  # <-- override in subclass

    def __init__(self, generator):
        """
        ``generator`` is the CodeGenerator instance - gives access to
        render_expression and the active identifier registry.
        """
        self.generator = generator

    # Helper shortcuts
    def _render(self, expr: Expression) -> str:
        return self.generator.render_expression(expr)

    def _identifier(self, entity_id: str, hint: Optional[str] = None) -> str:
        return self.generator.identifiers.resolve(entity_id, hint)

    def _field_id(self, instruction: PlainInstruction, name: str) -> str:
        """Id half of a ``[name, id]`` field; raises when absent."""
        entity_id = field_entry(instruction.fields, name, 1)
        if entity_id is None:
            raise MissingRequiredValue(attr=f"field {name}", node=instruction.node_id)
        return entity_id

    def _input(self, instruction: PlainInstruction, name: str) -> Expression:
        """
        Value input ``name``; a block carrying exactly one input uses that one.

        Raises MissingRequiredValue when neither applies.
        """
        if name in instruction.inputs:
            return instruction.inputs[name]
        if len(instruction.inputs) == 1:
            return next(iter(instruction.inputs.values()))
        raise MissingRequiredValue(attr=f"input {name}", node=instruction.node_id)

    # Sub-classes implement this
    def generate(self, instruction: PlainInstruction) -> Optional[str]:
        """
        Generate code for this instruction.
        Returns the code line (without indentation - caller handles that).
        """
        raise NotImplementedError


# ----------------------------------------------------------------------
# Extension: variables
# ----------------------------------------------------------------------
class SetVariableCodeGen(CodeGenExtension):
    """x = value"""

    opcode = "data_setvariableto"

    def generate(self, instruction: PlainInstruction) -> str:
        variable = self._identifier(self._field_id(instruction, "VARIABLE"))
        value = self._render(self._input(instruction, "VALUE"))
        return f"{variable} = {value}; // Set variable"


class ChangeVariableCodeGen(CodeGenExtension):
    """x += Number(value)"""

    opcode = "data_changevariableby"

    def generate(self, instruction: PlainInstruction) -> str:
        variable = self._identifier(self._field_id(instruction, "VARIABLE"))
        value = self._render(self._input(instruction, "VALUE"))
        return f"{variable} += Number({value}); // Change variable"


# ----------------------------------------------------------------------
# Extension: lists
# ----------------------------------------------------------------------
class AddToListCodeGen(CodeGenExtension):

    opcode = "data_addtolist"

    def generate(self, instruction: PlainInstruction) -> str:
        list_name = self._identifier(self._field_id(instruction, "LIST"))
        item = self._render(self._input(instruction, "ITEM"))
        return f"{list_name}.push({item}); // Add to list"


# ----------------------------------------------------------------------
# Extension: events
# ----------------------------------------------------------------------
class FlagClickedCodeGen(CodeGenExtension):
    """Hat block; the dispatcher calls the enclosing script instead."""

    opcode = "event_whenflagclicked"

    def generate(self, instruction: PlainInstruction) -> None:
        return None


# ----------------------------------------------------------------------
# Registry & auto-wiring into CodeGenerator
# ----------------------------------------------------------------------
_CODEGEN_EXTENSION_REGISTRY: Dict[str, Type[CodeGenExtension]] = {}


def register_codegen_extension(cls: Type[CodeGenExtension]):
    """Register a CodeGenExtension subclass by its opcode."""
    opcode = cls.opcode
    if not opcode:
        raise ValueError(f"{cls.__name__}.opcode must be set")
    _CODEGEN_EXTENSION_REGISTRY[opcode] = cls
    return cls


def registered_opcodes():
    return list(_CODEGEN_EXTENSION_REGISTRY)


def register_codegen_extensions(generator) -> None:
    """
    Call this from CodeGenerator to inject extension handlers.

    Creates a method _generate_ext_<opcode> for each registered extension.
    """
    for opcode, ext_cls in _CODEGEN_EXTENSION_REGISTRY.items():
        method_name = f"_generate_ext_{opcode}"

        def make_handler(ext_cls=ext_cls):
            def handler(self, instruction: PlainInstruction) -> Optional[str]:
                ext = ext_cls(self)
                return ext.generate(instruction)
            return handler

        # Bind the generated handler into the generator instance
        setattr(generator, method_name, make_handler().__get__(generator, type(generator)))


# ----------------------------------------------------------------------
# Register built-in extensions
# ----------------------------------------------------------------------
register_codegen_extension(SetVariableCodeGen)
register_codegen_extension(ChangeVariableCodeGen)
register_codegen_extension(AddToListCodeGen)
register_codegen_extension(FlagClickedCodeGen)
