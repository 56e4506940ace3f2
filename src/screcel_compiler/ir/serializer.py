"""
XML serializer for reconstructed screcel scripts.

Dumps the units of every target as an XML document so the nested
instruction trees can be inspected (and diffed) independently of the
JavaScript that is generated from them.
"""

from pathlib import Path
from typing import Dict, List, Union

from lxml import etree

from .core import IfInstruction, Instruction, PlainInstruction, Unit
from .expressions import (
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
)

# Element tag per instruction kind
_INSTRUCTION_TAGS = {
    "instruction": "Block",
    "repeat": "Repeat",
    "repeat_until": "RepeatUntil",
    "if": "If",
    "forever": "Forever",
    "wait_until": "WaitUntil",
    "stop": "Stop",
}


class IRSerializer:
    """
    Serializes reconstructed units to XML.

    Example:
        serializer = IRSerializer()
        xml_str = serializer.serialize({"Sprite1": units})
    """

    def __init__(self, pretty_print: bool = True):
        self.pretty_print = pretty_print

    def serialize(self, programs: Dict[str, List[Unit]]) -> str:
        """
        Serialize the units of every target.

        Args:
            programs: Target name -> reconstructed units, in output order

        Returns:
            XML string
        """
        root = self._build_xml(programs)
        return etree.tostring(root, pretty_print=self.pretty_print, encoding="unicode")

    def serialize_to_file(self, programs: Dict[str, List[Unit]], filepath: Union[str, Path]) -> Path:
        path = Path(filepath)
        tree = etree.ElementTree(self._build_xml(programs))
        tree.write(str(path), pretty_print=self.pretty_print,
                   xml_declaration=True, encoding="UTF-8")
        return path

    def _build_xml(self, programs: Dict[str, List[Unit]]) -> etree._Element:
        root = etree.Element("Program")
        for target_name, units in programs.items():
            target_elem = etree.SubElement(root, "Target", name=target_name)
            for unit in units:
                self._add_unit(target_elem, unit)
        return root

    def _add_unit(self, parent, unit: Unit):
        script = etree.SubElement(parent, "Script", id=unit.id,
                                  topLevel="true" if unit.is_top_level else "false")
        if unit.x is not None:
            script.set("x", str(unit.x))
        if unit.y is not None:
            script.set("y", str(unit.y))
        self._add_instructions(script, unit.instructions)

    # ------------------------------------------------------------------
    # Instructions
    # ------------------------------------------------------------------

    def _add_instructions(self, parent, instructions: List[Instruction]):
        for instruction in instructions:
            self._add_instruction(parent, instruction)

    def _add_instruction(self, parent, instruction: Instruction):
        tag = _INSTRUCTION_TAGS.get(instruction.kind, "Block")
        elem = etree.SubElement(parent, tag, node=instruction.node_id,
                                opcode=instruction.opcode)
        kind = instruction.kind

        if isinstance(instruction, PlainInstruction):
            for name, value in instruction.inputs.items():
                input_elem = etree.SubElement(elem, "Input", name=name)
                self._add_expression(input_elem, value)
            for name, value in instruction.fields.items():
                field_elem = etree.SubElement(elem, "Field", name=name)
                field_elem.text = _field_text(value)
        elif kind == "repeat":
            self._add_expression(etree.SubElement(elem, "Times"), instruction.times)
            self._add_instructions(etree.SubElement(elem, "Body"), instruction.body)
        elif kind in ("repeat_until", "wait_until"):
            self._add_expression(etree.SubElement(elem, "Condition"), instruction.condition)
            if kind == "repeat_until":
                self._add_instructions(etree.SubElement(elem, "Body"), instruction.body)
        elif isinstance(instruction, IfInstruction):
            self._add_expression(etree.SubElement(elem, "Condition"), instruction.condition)
            self._add_instructions(etree.SubElement(elem, "Then"), instruction.then_branch)
            if instruction.else_branch is not None:
                self._add_instructions(etree.SubElement(elem, "Else"), instruction.else_branch)
        elif kind == "forever":
            self._add_instructions(etree.SubElement(elem, "Body"), instruction.body)
        elif kind == "stop":
            elem.set("option", instruction.stop_option)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _add_expression(self, parent, expr: Expression):
        if isinstance(expr, Literal):
            elem = etree.SubElement(parent, "const", type=str(expr.data_type))
            if isinstance(expr.value, bool):
                elem.text = "true" if expr.value else "false"
            else:
                elem.text = str(expr.value)
        elif isinstance(expr, VariableRef):
            elem = etree.SubElement(parent, "var", ref=expr.id)
            if expr.name is not None:
                elem.set("name", expr.name)
        elif isinstance(expr, (BinaryOperation, Comparison, LogicalOperation)):
            elem = etree.SubElement(parent, expr.kind, op=str(expr.operator))
            self._add_expression(etree.SubElement(elem, "lhs"), expr.left)
            self._add_expression(etree.SubElement(elem, "rhs"), expr.right)
        elif isinstance(expr, LogicalNot):
            elem = etree.SubElement(parent, "logical_not")
            self._add_expression(elem, expr.operand)
        elif isinstance(expr, ListItem):
            elem = etree.SubElement(parent, "list_item", list=expr.list)
            self._add_expression(etree.SubElement(elem, "index"), expr.index)
        elif isinstance(expr, ListLength):
            etree.SubElement(parent, "list_length", list=expr.list)
        elif isinstance(expr, BlockExpression):
            elem = etree.SubElement(parent, "block_expression", opcode=expr.opcode)
            for name, value in expr.inputs.items():
                self._add_expression(etree.SubElement(elem, "Input", name=name), value)


def _field_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else str(item) for item in value)
    return "" if value is None else str(value)
