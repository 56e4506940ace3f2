"""Builders for raw Scratch block maps used across the test modules."""

from screcel_compiler.diagnostics import Diagnostics
from screcel_compiler.graph_builder import build_block_graph, parse_blocks, parse_project


def lit(value, code=4):
    """[1, [code, value]] literal input tuple."""
    return [1, [code, value]]


def ref(target):
    return [2, target]


def reporter(target, fallback=None):
    return [3, target, fallback if fallback is not None else [10, ""]]


def block(opcode, next=None, parent=None, inputs=None, fields=None, top=False, **extra):
    data = {
        "opcode": opcode,
        "next": next,
        "parent": parent,
        "inputs": inputs or {},
        "fields": fields or {},
        "shadow": False,
        "topLevel": top,
    }
    if top:
        data.setdefault("x", 0)
        data.setdefault("y", 0)
    data.update(extra)
    return data


def graph_of(raw_blocks, name="Sprite1", diagnostics=None):
    diagnostics = diagnostics or Diagnostics.collecting()
    return build_block_graph(parse_blocks(raw_blocks), name, diagnostics)


def project_of(*targets):
    """targets: (name, raw_blocks) or (name, raw_blocks, variables, lists)."""
    raw_targets = []
    for entry in targets:
        name, raw_blocks = entry[0], entry[1]
        variables = entry[2] if len(entry) > 2 else {}
        lists = entry[3] if len(entry) > 3 else {}
        raw_targets.append({
            "isStage": name == "Stage",
            "name": name,
            "variables": variables,
            "lists": lists,
            "blocks": raw_blocks,
        })
    return parse_project({"targets": raw_targets, "meta": {"semver": "3.0.0"}})


# Repeat 10 times: add "hi" to list1
SCENARIO_A = {
    "a": block("control_repeat", inputs={"TIMES": lit(10), "SUBSTACK": ref("b")}, top=True),
    "b": block("data_addtolist", parent="a", inputs={"ITEM": lit("hi")},
               fields={"LIST": ["myList", "list1"]}),
}
