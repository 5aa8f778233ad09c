from bcplkit.nodes import (
    Assignment,
    BinaryOp,
    CompoundStatement,
    Declaration,
    DeclarationStatement,
    Expression,
    ForStatement,
    FunctionCall,
    FunctionDeclaration,
    LetDeclaration,
    NumberLiteral,
    Program,
    RepeatLoopType,
    RepeatStatement,
    Statement,
    SwitchCase,
    SwitchonStatement,
    TestStatement,
    VariableAccess,
    VarInit,
)
from bcplkit.tokens import TokenType


def _sum(a, b):
    return BinaryOp(TokenType.OP_PLUS, VariableAccess(a), NumberLiteral(b))


def test_structural_equality():
    assert _sum("x", 1) == _sum("x", 1)
    assert _sum("x", 1) != _sum("y", 1)


def test_clone_is_deep_and_equal():
    original = Assignment([VariableAccess("x")], [_sum("y", 2)])
    copied = original.clone()
    assert copied == original
    copied.rhs[0].right.value = 99
    assert original.rhs[0].right.value == 2


def test_program_clone_independent():
    prog = Program([FunctionDeclaration("f", ["a"], body_expr=VariableAccess("a"))])
    copied = prog.clone()
    copied.declarations[0].params.append("b")
    assert prog.declarations[0].params == ["a"]


def test_class_hierarchy():
    expr = _sum("x", 1)
    assert isinstance(expr, Expression)
    assert expr.left == VariableAccess("x")
    assert expr.right == NumberLiteral(1)
    decl = LetDeclaration()
    wrapped = DeclarationStatement(decl)
    assert isinstance(wrapped, Statement)
    assert wrapped.declaration is decl
    assert isinstance(decl, Declaration)
    assert not isinstance(decl, Statement)


def test_optional_defaults():
    test = TestStatement(NumberLiteral(0), CompoundStatement())
    assert test.else_statement is None
    repeat = RepeatStatement(CompoundStatement())
    assert repeat.condition is None
    assert repeat.loop_type is RepeatLoopType.REPEAT
    assert VarInit("x").init is None


def test_list_defaults_are_not_shared():
    a = CompoundStatement()
    b = CompoundStatement()
    a.statements.append(CompoundStatement())
    assert b.statements == []


def test_for_statement_fields():
    loop = ForStatement("i", NumberLiteral(1), NumberLiteral(10), None, CompoundStatement())
    assert loop.var_name == "i"
    assert loop.by_expr is None
    assert loop.to_expr == NumberLiteral(10)


def test_switchon_holds_cases():
    case = SwitchCase(3, "L3", CompoundStatement())
    sw = SwitchonStatement(VariableAccess("k"), [case])
    assert sw.cases[0].value == 3
    assert sw.default_case is None
    assert sw.clone().cases == [case]


def test_function_call_arguments():
    call = FunctionCall(VariableAccess("f"), [NumberLiteral(1), NumberLiteral(2)])
    assert [arg.value for arg in call.arguments] == [1, 2]
    assert FunctionCall(VariableAccess("g")).arguments == []