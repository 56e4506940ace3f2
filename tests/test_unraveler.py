from collections import Counter

import pytest

from screcel_compiler.diagnostics import Diagnostics, codes
from screcel_compiler.graph_builder import unravel_blocks
from screcel_compiler.ir import (
    ForeverInstruction,
    IfInstruction,
    Literal,
    LiteralType,
    PlainInstruction,
    RepeatInstruction,
    RepeatUntilInstruction,
    StopInstruction,
    WaitUntilInstruction,
)

from helpers import SCENARIO_A, block, graph_of, lit, ref, reporter


def _unravel(raw_blocks, diagnostics=None):
    diagnostics = diagnostics or Diagnostics.collecting()
    return unravel_blocks(graph_of(raw_blocks, diagnostics=diagnostics), diagnostics)


def _all_ids(units):
    return [nid for unit in units for nid in unit.node_ids()]


def test_repeat_with_body():
    units = _unravel(SCENARIO_A)
    assert len(units) == 1
    unit = units[0]
    assert unit.id == "a" and unit.is_top_level
    (repeat,) = unit.instructions
    assert isinstance(repeat, RepeatInstruction)
    assert repeat.times == Literal(10, LiteralType.NUMBER)
    (inner,) = repeat.body
    assert isinstance(inner, PlainInstruction)
    assert inner.opcode == "data_addtolist"
    assert inner.inputs["ITEM"] == Literal("hi", LiteralType.STRING)
    assert inner.fields == {"LIST": ["myList", "list1"]}


def test_body_inputs_are_not_values():
    (unit,) = _unravel(SCENARIO_A)
    assert "SUBSTACK" not in unit.instructions[0].inputs
    assert "TIMES" in unit.instructions[0].inputs


def test_independent_scripts_keep_map_order():
    raw = {
        "s2": block("looks_say", top=True),
        "s1": block("looks_think", next="s1b", top=True),
        "s1b": block("looks_hide", parent="s1"),
    }
    units = _unravel(raw)
    assert [u.id for u in units] == ["s2", "s1"]
    assert units[1].node_ids() == ["s1", "s1b"]


def test_chain_ends_on_visited_block():
    raw = {
        "a": block("x", next="b", top=True),
        "b": block("y", next="a", parent="a"),
    }
    (unit,) = _unravel(raw)
    assert unit.node_ids() == ["a", "b"]


def test_self_loop_terminates():
    raw = {"a": block("x", next="a", top=True)}
    (unit,) = _unravel(raw)
    assert unit.node_ids() == ["a"]


def test_body_pointing_at_enclosing_block_is_empty():
    raw = {"a": block("control_forever", inputs={"SUBSTACK": ref("a")}, top=True)}
    (unit,) = _unravel(raw)
    assert isinstance(unit.instructions[0], ForeverInstruction)
    assert unit.instructions[0].body == []


def test_no_block_placed_twice():
    # both branches and the outer chain point at the same block
    raw = {
        "if": block("control_if_else", next="shared", top=True,
                    inputs={"CONDITION": lit(True), "SUBSTACK": ref("shared"), "SUBSTACK2": ref("shared")}),
        "shared": block("looks_say", parent="if"),
        "loose": block("control_repeat", top=True, inputs={"TIMES": lit(2), "SUBSTACK": ref("shared")}),
    }
    units = _unravel(raw)
    counts = Counter(_all_ids(units))
    assert all(n == 1 for n in counts.values())

    if_instr = units[0].instructions[0]
    assert [i.node_id for i in if_instr.then_branch] == ["shared"]
    assert if_instr.else_branch == []
    assert units[1].instructions[0].body == []


def test_dangling_next_ends_chain():
    raw = {"a": block("x", next="ghost", top=True)}
    (unit,) = _unravel(raw)
    assert unit.node_ids() == ["a"]


def test_absent_and_malformed_bodies():
    diagnostics = Diagnostics.collecting()
    raw = {
        "a": block("control_forever", next="b", top=True),
        "b": block("control_repeat", parent="a", inputs={"TIMES": lit(3), "SUBSTACK": lit("oops")}),
    }
    (unit,) = _unravel(raw, diagnostics)
    forever, repeat = unit.instructions
    assert forever.body == []
    assert repeat.body == []
    assert codes.MALFORMED_BODY.id in diagnostics.codes_emitted()


@pytest.mark.parametrize("substack", [[2], [2, 5], [3, None], "oops"])
def test_unusable_body_references_give_empty_bodies(substack):
    diagnostics = Diagnostics.collecting()
    raw = {"a": block("control_forever", inputs={"SUBSTACK": substack}, top=True)}
    (unit,) = _unravel(raw, diagnostics)
    assert unit.instructions[0].body == []
    assert diagnostics.codes_emitted() == [codes.MALFORMED_BODY.id]


def test_body_target_missing_from_graph_is_empty():
    raw = {"a": block("control_if", inputs={"CONDITION": lit(True), "SUBSTACK": ref("ghost")}, top=True)}
    (unit,) = _unravel(raw)
    assert unit.instructions[0].then_branch == []
    assert unit.instructions[0].else_branch is None


def test_entry_consumed_by_earlier_chain_is_skipped():
    diagnostics = Diagnostics.collecting()
    raw = {
        "a": block("x", next="b", top=True),
        "b": block("y", top=True),
    }
    units = _unravel(raw, diagnostics)
    assert [u.id for u in units] == ["a"]
    assert units[0].node_ids() == ["a", "b"]
    assert diagnostics.codes_emitted() == [codes.SKIPPED_ENTRY.id]


def test_control_conversions():
    raw = {
        "ru": block("control_repeat_until", next="wu", top=True,
                    inputs={"CONDITION": reporter("cond"), "SUBSTACK": ref("body")}),
        "body": block("looks_say", parent="ru"),
        "cond": block("operator_gt", parent="ru", inputs={"OPERAND1": lit(1), "OPERAND2": lit(2)}),
        "wu": block("control_wait_until", next="st", parent="ru", inputs={"CONDITION": lit(True, 4)}),
        "st": block("control_stop", parent="wu", fields={"STOP_OPTION": ["this script", None]}),
    }
    (unit,) = _unravel(raw)
    repeat_until, wait_until, stop = unit.instructions
    assert isinstance(repeat_until, RepeatUntilInstruction)
    assert [i.node_id for i in repeat_until.body] == ["body"]
    assert isinstance(wait_until, WaitUntilInstruction)
    assert wait_until.condition == Literal(True, LiteralType.BOOLEAN)
    assert isinstance(stop, StopInstruction)
    assert stop.stop_option == "this script"
    # reporter blocks are expressions, never instructions
    assert "cond" not in unit.node_ids()


def test_stop_option_defaults_to_all():
    raw = {"st": block("control_stop", fields={"STOP_OPTION": "broken"}, top=True)}
    (unit,) = _unravel(raw)
    assert unit.instructions[0].stop_option == "all"


def test_if_without_else_has_no_else_branch():
    raw = {
        "if": block("control_if", inputs={"CONDITION": lit(True), "SUBSTACK": ref("t")}, top=True),
        "t": block("looks_say", parent="if"),
    }
    (unit,) = _unravel(raw)
    instr = unit.instructions[0]
    assert isinstance(instr, IfInstruction)
    assert [i.node_id for i in instr.then_branch] == ["t"]
    assert instr.else_branch is None


def test_reconstruction_is_repeatable():
    graph = graph_of(SCENARIO_A)
    first = unravel_blocks(graph)
    second = unravel_blocks(graph)
    assert [u.node_ids() for u in first] == [u.node_ids() for u in second]


def test_empty_graph_has_no_units():
    assert _unravel({}) == []
