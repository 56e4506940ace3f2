import pytest

from screcel_compiler import CodeGenerator, CompilerConfig, IdentifierScope, codegen_project
from screcel_compiler.diagnostics import (
    Diagnostics,
    MissingRequiredValue,
    UnsupportedOperation,
    codes,
)
from screcel_compiler.ir import (
    BinaryOperation,
    BinaryOperator,
    BlockExpression,
    Comparison,
    ComparisonOperator,
    ListItem,
    ListLength,
    Literal,
    LiteralType,
    LogicalNot,
    LogicalOperation,
    LogicalOperator,
    VariableRef,
)

from helpers import SCENARIO_A, block, lit, project_of, ref, reporter


def _num(value):
    return Literal(value, LiteralType.NUMBER)


def test_counted_loop_appending_to_list():
    project = project_of(("Sprite1", SCENARIO_A, {}, {"list1": ["myList", []]}))
    code = codegen_project(project)
    assert code == "\n".join([
        "// Generated code for Scratch project",
        "// Target: Sprite1",
        "function id_1_Sprite1() {",
        "    let id_2_myList = []; // List: myList",
        "    function id_3_a() {",
        "        for (let i = 0, n = 10; i < n; i++) {",
        '            id_2_myList.push("hi"); // Add to list',
        "        }",
        "    }",
        "    function flagClicked() {",
        "    }",
        "    return { flagClicked };",
        "}",
    ])


def test_set_variable_assignment():
    raw = {"s": block("data_setvariableto", inputs={"VARIABLE": lit(5)},
                      fields={"VARIABLE": ["score", "v1"]}, top=True)}
    code = codegen_project(project_of(("Sprite1", raw, {"v1": ["score", 0]})))
    assert "    let id_2_score = 0; // Variable: score" in code.splitlines()
    assert "        id_2_score = 5; // Set variable" in code.splitlines()


def test_change_variable_uses_number_coercion():
    raw = {"c": block("data_changevariableby", inputs={"VALUE": lit("2")},
                      fields={"VARIABLE": ["score", "v1"]}, top=True)}
    code = codegen_project(project_of(("Sprite1", raw, {"v1": ["score", 0]})))
    assert 'id_2_score += Number("2"); // Change variable' in code


def test_unsupported_opcode_aborts_generation():
    raw = {
        "hat": block("event_whenflagclicked", next="snd", top=True),
        "snd": block("sound_play", parent="hat"),
    }
    with pytest.raises(UnsupportedOperation, match="sound_play") as info:
        codegen_project(project_of(("Sprite1", raw)))
    assert info.value.code is codes.UNSUPPORTED_OPCODE
    assert info.value.context["op"] == "sound_play"


def test_missing_variable_field_is_fatal():
    raw = {"s": block("data_setvariableto", inputs={"VALUE": lit(1)}, top=True)}
    with pytest.raises(MissingRequiredValue) as info:
        codegen_project(project_of(("Sprite1", raw)))
    assert info.value.context["node"] == "s"


def test_missing_value_input_is_fatal():
    raw = {"s": block("data_addtolist", fields={"LIST": ["l", "l1"]}, top=True)}
    with pytest.raises(MissingRequiredValue):
        codegen_project(project_of(("Sprite1", raw)))


def test_structural_rendering():
    raw = {
        "hat": block("event_whenflagclicked", next="if", top=True),
        "if": block("control_if_else", parent="hat", next="ru",
                    inputs={"CONDITION": reporter("gt"), "SUBSTACK": ref("t"), "SUBSTACK2": ref("e")}),
        "gt": block("operator_gt", parent="if", inputs={"OPERAND1": lit(2), "OPERAND2": lit(1)}),
        "t": block("data_changevariableby", parent="if", inputs={"VALUE": lit(1)},
                   fields={"VARIABLE": ["n", "v"]}),
        "e": block("control_stop", parent="if", fields={"STOP_OPTION": ["all", None]}),
        "ru": block("control_repeat_until", parent="if", next="wu",
                    inputs={"CONDITION": lit(True), "SUBSTACK": ref("f")}),
        "f": block("control_forever", parent="ru"),
        "wu": block("control_wait_until", parent="ru", inputs={"CONDITION": lit(False)}),
    }
    code = codegen_project(project_of(("Sprite1", raw, {"v": ["n", 0]})))
    body = code.splitlines()[4:]
    assert body[:16] == [
        "    function id_3_hat() {",
        "        if ((2 > 1)) {",
        "            id_2_n += Number(1); // Change variable",
        "        } else {",
        "            return; // Stop: all",
        "        }",
        "        while (!(true)) {",
        "            while (true) {",
        "            }",
        "        }",
        "        while (!(false)) {} // Wait until",
        "    }",
        "    function flagClicked() {",
        "        id_3_hat(); // Executing block: event_whenflagclicked",
        "    }",
        "    return { flagClicked };",
    ]


def test_dispatcher_calls_enclosing_script_and_skips_orphans():
    diagnostics = Diagnostics.collecting()
    raw = {
        "first": block("control_wait_until", next="hat", inputs={"CONDITION": lit(True)}, top=True),
        "hat": block("event_whenflagclicked", parent="first"),
        "orphan": block("event_whenflagclicked"),
    }
    code = codegen_project(project_of(("Sprite1", raw)), diagnostics=diagnostics)
    assert "        id_2_first(); // Executing block: event_whenflagclicked" in code.splitlines()
    assert "orphan" not in code
    assert diagnostics.codes_emitted() == [codes.ORPHAN_TRIGGER.id]


def test_custom_dispatcher_name():
    raw = {"hat": block("event_whenflagclicked", top=True)}
    config = CompilerConfig(dispatcher_name="start")
    code = codegen_project(project_of(("Sprite1", raw)), config)
    assert "    function start() {" in code.splitlines()
    assert "        id_2_hat(); // Executing block: event_whenflagclicked" in code.splitlines()
    assert code.splitlines()[-2] == "    return { start };"


def _two_targets():
    return project_of(
        ("Stage", {}, {"v1": ["score", 0]}),
        ("Sprite1", {}, {"v2": ["lives", 3]}),
    )


def test_program_scope_shares_one_registry():
    code = codegen_project(_two_targets())
    assert "function id_1_Stage() {" in code
    assert "    let id_2_score = 0; // Variable: score" in code
    assert "function id_3_Sprite1() {" in code
    assert "    let id_4_lives = 3; // Variable: lives" in code


def test_target_scope_restarts_inside_each_target():
    config = CompilerConfig(identifier_scope=IdentifierScope.TARGET)
    code = codegen_project(_two_targets(), config)
    assert "function id_1_Stage() {" in code
    assert "function id_2_Sprite1() {" in code
    assert "    let id_1_score = 0; // Variable: score" in code
    assert "    let id_1_lives = 3; // Variable: lives" in code


def test_scope_accepts_string_value():
    assert CompilerConfig(identifier_scope="target").identifier_scope is IdentifierScope.TARGET


def test_generate_is_repeatable():
    generator = CodeGenerator(project_of(("Sprite1", SCENARIO_A, {}, {"list1": ["myList", []]})))
    assert generator.generate() == generator.generate()
    assert [u.id for u in generator.units["Sprite1"]] == ["a"]


# ----------------------------------------------------------------------
# Expression rendering
# ----------------------------------------------------------------------

def _render(expr):
    return CodeGenerator(project_of()).render_expression(expr)


@pytest.mark.parametrize("operator, expected", [
    (BinaryOperator.ADD, "(7 + 3)"),
    (BinaryOperator.SUBTRACT, "(7 - 3)"),
    (BinaryOperator.MULTIPLY, "(7 * 3)"),
    (BinaryOperator.DIVIDE, "(7 / 3)"),
    (BinaryOperator.MOD, "(((Number(7) % Number(3)) + Number(3)) % Number(3))"),
    (BinaryOperator.JOIN, "(String(7) + String(3))"),
])
def test_binary_operators(operator, expected):
    assert _render(BinaryOperation(operator, _num(7), _num(3))) == expected


def test_comparison_and_logic():
    gt = Comparison(ComparisonOperator.GT, _num(1), _num(2))
    eq = Comparison(ComparisonOperator.EQUALS, Literal("a"), Literal("b"))
    expr = LogicalNot(LogicalOperation(LogicalOperator.OR, gt, eq))
    assert _render(expr) == '(!((1 > 2) || ("a" == "b")))'
    assert _render(Comparison(ComparisonOperator.LT, _num(1), _num(2))) == "(1 < 2)"
    assert _render(LogicalOperation(LogicalOperator.AND, Literal(True, LiteralType.BOOLEAN),
                                    Literal(False, LiteralType.BOOLEAN))) == "(true && false)"


def test_literals_render_as_json():
    assert _render(Literal('say "hi"')) == '"say \\"hi\\""'
    assert _render(_num(2.5)) == "2.5"


def test_list_and_variable_references():
    generator = CodeGenerator(project_of())
    assert generator.render_expression(VariableRef("v1", "score")) == "id_1_score"
    assert generator.render_expression(ListLength("l1")) == "id_2_l1.length"
    assert generator.render_expression(ListItem("l1", _num(1))) == "id_2_l1[1]"
    assert generator.render_expression(VariableRef("v1")) == "id_1_score"


def test_block_expression_is_unsupported():
    with pytest.raises(UnsupportedOperation, match="sensing_answer") as info:
        _render(BlockExpression("sensing_answer"))
    assert info.value.code is codes.UNSUPPORTED_EXPR


def test_unknown_expression_kind_is_unsupported():
    with pytest.raises(UnsupportedOperation):
        _render(object())


def test_mod_coerces_string_operands():
    # Scratch stores numeric inputs as text; "+" on strings would concatenate
    raw = {
        "s": block("data_setvariableto", inputs={"VALUE": reporter("mod")},
                   fields={"VARIABLE": ["r", "v1"]}, top=True),
        "mod": block("operator_mod", parent="s", inputs={"NUM1": lit("-7"), "NUM2": lit("3")}),
    }
    code = codegen_project(project_of(("Sprite1", raw, {"v1": ["r", 0]})))
    assert ('id_2_r = (((Number("-7") % Number("3")) + Number("3")) % Number("3")); '
            '// Set variable') in code


def test_repeat_count_is_evaluated_once():
    raw = {
        "rep": block("control_repeat", top=True,
                     inputs={"TIMES": reporter("len"), "SUBSTACK": ref("add")}),
        "len": block("data_lengthoflist", parent="rep", fields={"LIST": ["items", "l1"]}),
        "add": block("data_addtolist", parent="rep", inputs={"ITEM": lit("x")},
                     fields={"LIST": ["items", "l1"]}),
    }
    code = codegen_project(project_of(("Sprite1", raw, {}, {"l1": ["items", []]})))
    assert "        for (let i = 0, n = id_2_items.length; i < n; i++) {" in code.splitlines()


@pytest.mark.parametrize("option, expected", [
    ("all", "return; // Stop: all"),
    ("this script", "return; // Stop: this script"),
    ("other scripts in sprite", "// Stop: other scripts in sprite"),
    ("other scripts in stage", "// Stop: other scripts in stage"),
])
def test_stop_options(option, expected):
    raw = {
        "st": block("control_stop", next="s", top=True, fields={"STOP_OPTION": [option, None]}),
        "s": block("data_setvariableto", parent="st", inputs={"VALUE": lit(1)},
                   fields={"VARIABLE": ["r", "v1"]}),
    }
    lines = codegen_project(project_of(("Sprite1", raw, {"v1": ["r", 0]}))).splitlines()
    assert "        " + expected in lines
    assert "        id_2_r = 1; // Set variable" in lines
