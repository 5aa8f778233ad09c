import copy

import pytest

from bcplkit.licm import LoopInvariantCodeMotionPass
from bcplkit.nodes import (
    Assignment,
    BinaryOp,
    CompoundStatement,
    ConditionalExpression,
    DeclarationStatement,
    EndcaseStatement,
    Expression,
    ForStatement,
    FunctionDeclaration,
    GetDirective,
    GlobalDeclaration,
    LetDeclaration,
    ManifestDeclaration,
    NumberLiteral,
    Program,
    RepeatLoopType,
    RepeatStatement,
    SwitchCase,
    SwitchonStatement,
    VariableAccess,
    VarInit,
    WhileStatement,
)
from bcplkit.tokens import TokenType


def _var(name):
    return VariableAccess(name)


def _plus(a, b):
    return BinaryOp(TokenType.OP_PLUS, a, b)


def _for(body, start=None, stop=None):
    return ForStatement(
        "I",
        start if start is not None else NumberLiteral(1),
        stop if stop is not None else NumberLiteral(10),
        None,
        body,
    )


def _program(stmt):
    return Program([FunctionDeclaration("START", [], None, stmt)])


def test_name():
    assert LoopInvariantCodeMotionPass({}).name == "Loop Invariant Code Motion Pass"


def test_non_loop_code_is_copied_unchanged():
    body = CompoundStatement(
        [
            WhileStatement(_var("X"), Assignment([_var("X")], [_plus(NumberLiteral(1), NumberLiteral(2))])),
        ]
    )
    program = _program(body)
    result = LoopInvariantCodeMotionPass({}).apply(program)
    assert result == program
    assert result is not program
    assert result.declarations[0].body_stmt is not body


def test_conditional_not_folded_outside_loops():
    expr = ConditionalExpression(NumberLiteral(-1), _var("A"), _var("B"))
    result = LoopInvariantCodeMotionPass({"A": 3}).visit(expr)
    assert result == expr


def test_invariant_expression_hoisted():
    loop = _for(Assignment([_var("X")], [_plus(_var("A"), _var("B"))]))
    result = LoopInvariantCodeMotionPass({}).apply(_program(CompoundStatement([loop])))
    outer = result.declarations[0].body_stmt.statements[0]
    assert isinstance(outer, CompoundStatement)
    hoisted, new_loop = outer.statements
    assert hoisted == DeclarationStatement(
        LetDeclaration([VarInit("_licm_temp_0", _plus(_var("A"), _var("B")))])
    )
    assert new_loop.body == Assignment([_var("X")], [_var("_licm_temp_0")])


def test_variant_expression_not_hoisted():
    loop = _for(Assignment([_var("X")], [_plus(_var("A"), _var("I"))]))
    result = LoopInvariantCodeMotionPass({}).visit(loop)
    assert isinstance(result, ForStatement)
    assert result == loop


def test_manifests_substituted_in_loop_bounds():
    loop = _for(Assignment([_var("X")], [_var("I")]), stop=_var("N"))
    result = LoopInvariantCodeMotionPass({"N": 10}).visit(loop)
    assert result.to_expr == NumberLiteral(10)


def test_manifests_read_at_apply_time():
    manifests = {}
    licm = LoopInvariantCodeMotionPass(manifests)
    manifests["N"] = 7
    loop = _for(Assignment([_var("X")], [_var("I")]), stop=_var("N"))
    result = licm.visit(loop)
    assert result.to_expr == NumberLiteral(7)


def test_global_manifest_and_get_dropped():
    program = Program(
        [
            GlobalDeclaration([("G", 1)]),
            ManifestDeclaration([("N", 5)]),
            GetDirective("LIBHDR"),
            LetDeclaration([VarInit("V", NumberLiteral(1))]),
        ]
    )
    result = LoopInvariantCodeMotionPass({}).apply(program)
    assert result.declarations == [LetDeclaration([VarInit("V", NumberLiteral(1))])]


def test_declaration_statement_dropped_from_compound():
    body = CompoundStatement(
        [DeclarationStatement(ManifestDeclaration([("N", 1)])), EndcaseStatement()]
    )
    result = LoopInvariantCodeMotionPass({}).visit(body)
    assert result == CompoundStatement([EndcaseStatement()])


def test_repeat_loop_type_preserved():
    stmt = RepeatStatement(Assignment([_var("X")], [_var("Y")]), _var("X"), RepeatLoopType.REPEAT_UNTIL)
    result = LoopInvariantCodeMotionPass({}).visit(stmt)
    assert result.loop_type is RepeatLoopType.REPEAT_UNTIL
    assert result == stmt


def test_switchon_cases_preserved():
    stmt = SwitchonStatement(
        _var("X"),
        [SwitchCase(1, "L1", EndcaseStatement())],
        Assignment([_var("Y")], [NumberLiteral(0)]),
    )
    result = LoopInvariantCodeMotionPass({}).visit(stmt)
    assert result == stmt
    assert result.cases[0] is not stmt.cases[0]


def test_input_not_mutated():
    loop = _for(Assignment([_var("X")], [_plus(_var("A"), _var("B"))]))
    program = _program(CompoundStatement([loop]))
    snapshot = copy.deepcopy(program)
    LoopInvariantCodeMotionPass({}).apply(program)
    assert program == snapshot


def test_unsupported_expression_raises():
    class Strange(Expression):
        pass

    with pytest.raises(TypeError):
        LoopInvariantCodeMotionPass({}).visit(Strange())


def test_unsupported_node_raises():
    with pytest.raises(TypeError):
        LoopInvariantCodeMotionPass({}).visit(object())


def test_none_gives_none():
    assert LoopInvariantCodeMotionPass({}).visit(None) is None