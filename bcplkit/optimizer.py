"""Tree-rewriting optimizer: constant folding, manifest substitution and simplification."""

from __future__ import annotations

from typing import Mapping

from bcplkit import loop_optimizer
from bcplkit.nodes import (
    Assignment,
    BinaryOp,
    CharLiteral,
    CompoundStatement,
    ConditionalExpression,
    Declaration,
    DeclarationStatement,
    EndcaseStatement,
    Expression,
    FinishStatement,
    FloatLiteral,
    ForStatement,
    FunctionCall,
    FunctionDeclaration,
    GetDirective,
    GlobalDeclaration,
    GotoStatement,
    IfStatement,
    LabeledStatement,
    LetDeclaration,
    ManifestDeclaration,
    NumberLiteral,
    Program,
    RepeatStatement,
    ResultisStatement,
    ReturnStatement,
    RoutineCall,
    Statement,
    StringLiteral,
    SwitchCase,
    SwitchonStatement,
    TestStatement,
    UnaryOp,
    Valof,
    VariableAccess,
    VarInit,
    VectorAccess,
    VectorConstructor,
    WhileStatement,
)
from bcplkit.tokens import TokenType

_INT64_MIN = -(1 << 63)
_TRUE = -1
_FALSE = 0


def _wrap64(value: int) -> int:
    """Reduce ``value`` to a signed 64-bit machine word."""
    return (value - _INT64_MIN) % (1 << 64) + _INT64_MIN


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _fold_integers(op: TokenType, left: int, right: int) -> int | None:
    if op is TokenType.OP_PLUS:
        return _wrap64(left + right)
    if op is TokenType.OP_MINUS:
        return _wrap64(left - right)
    if op is TokenType.OP_MULTIPLY:
        return _wrap64(left * right)
    if op is TokenType.OP_DIVIDE:
        return _wrap64(_truncating_div(left, right)) if right != 0 else None
    comparisons = {
        TokenType.OP_EQ: left == right,
        TokenType.OP_NE: left != right,
        TokenType.OP_LT: left < right,
        TokenType.OP_LE: left <= right,
        TokenType.OP_GT: left > right,
        TokenType.OP_GE: left >= right,
    }
    if op in comparisons:
        return _TRUE if comparisons[op] else _FALSE
    return None


def _fold_floats(op: TokenType, left: float, right: float) -> float | None:
    if op is TokenType.OP_FLOAT_PLUS:
        return left + right
    if op is TokenType.OP_FLOAT_MINUS:
        return left - right
    if op is TokenType.OP_FLOAT_MULTIPLY:
        return left * right
    if op is TokenType.OP_FLOAT_DIVIDE and right != 0.0:
        return left / right
    return None


class Optimizer:
    """Rebuilds AST nodes, folding constants and substituting manifest constants.

    ``visit`` never mutates its argument; it returns a fresh node, or None
    where a declaration is optimized away.
    """

    def __init__(self, manifests: Mapping[str, int] | None = None) -> None:
        self.manifests: dict[str, int] = dict(manifests) if manifests is not None else {}

    def visit(self, node):
        """Return the optimized form of any expression, statement, declaration or program."""
        if node is None:
            return None
        if isinstance(node, Expression):
            return self._expression(node)
        if isinstance(node, Statement):
            return self._statement(node)
        if isinstance(node, Declaration):
            return self._declaration(node)
        if isinstance(node, Program):
            return self._program(node)
        raise TypeError(f"Optimizer: Unsupported node {type(node).__name__}.")

    # --- top level and declarations ---

    def _program(self, node: Program) -> Program:
        optimized = (self._declaration(d) for d in node.declarations)
        return Program([d for d in optimized if d is not None])

    def _declaration(self, node: Declaration) -> Declaration | None:
        match node:
            case LetDeclaration(initializers=inits):
                return LetDeclaration(
                    [VarInit(i.name, self.visit(i.init) if i.init is not None else None) for i in inits]
                )
            case FunctionDeclaration(name=name, params=params, body_expr=expr, body_stmt=stmt):
                new_stmt = self.visit(stmt) if stmt is not None else None
                new_expr = self.visit(expr) if expr is not None else None
                return FunctionDeclaration(name, list(params), new_expr, new_stmt)
            case GlobalDeclaration() | ManifestDeclaration() | GetDirective():
                return None
        raise TypeError("Optimizer: Unsupported Declaration node.")

    # --- expressions ---

    def _expression(self, node: Expression) -> Expression:
        match node:
            case NumberLiteral() | FloatLiteral() | StringLiteral() | CharLiteral():
                return node.clone()
            case VariableAccess(name=name):
                if name in self.manifests:
                    return NumberLiteral(self.manifests[name])
                return VariableAccess(name)
            case UnaryOp(op=op, rhs=rhs):
                return UnaryOp(op, self.visit(rhs))
            case BinaryOp():
                return self._binary(node)
            case FunctionCall(function=function, arguments=args):
                new_function = self.visit(function)
                return FunctionCall(new_function, [self.visit(a) for a in args])
            case ConditionalExpression(condition=cond, true_expr=yes, false_expr=no):
                new_cond = self.visit(cond)
                if isinstance(new_cond, NumberLiteral):
                    return self.visit(yes) if new_cond.value != 0 else self.visit(no)
                return ConditionalExpression(new_cond, self.visit(yes), self.visit(no))
            case Valof(body=body):
                return Valof(self.visit(body))
            case VectorConstructor(size=size):
                return VectorConstructor(self.visit(size))
            case VectorAccess(vector=vector, index=index):
                return VectorAccess(self.visit(vector), self.visit(index))
        raise TypeError("Optimizer: Unsupported Expression node.")

    def _binary(self, node: BinaryOp) -> Expression:
        op = node.op
        left = self.visit(node.left)
        right = self.visit(node.right)

        if isinstance(left, NumberLiteral) and isinstance(right, NumberLiteral):
            folded = _fold_integers(op, left.value, right.value)
            if folded is not None:
                return NumberLiteral(folded)
        if isinstance(left, FloatLiteral) and isinstance(right, FloatLiteral):
            folded_float = _fold_floats(op, left.value, right.value)
            if folded_float is not None:
                return FloatLiteral(folded_float)

        if isinstance(right, NumberLiteral):
            value = right.value
            if op is TokenType.OP_MULTIPLY and value == 2:
                return BinaryOp(TokenType.OP_LSHIFT, left, NumberLiteral(1))
            if op is TokenType.OP_DIVIDE and value == 2:
                return BinaryOp(TokenType.OP_RSHIFT, left, NumberLiteral(1))
            if op in (TokenType.OP_PLUS, TokenType.OP_MINUS) and value == 0:
                return left
            if op in (TokenType.OP_MULTIPLY, TokenType.OP_DIVIDE) and value == 1:
                return left
            if op is TokenType.OP_MULTIPLY and value == 0:
                return NumberLiteral(0)
        if isinstance(left, NumberLiteral):
            if op is TokenType.OP_PLUS and left.value == 0:
                return right
            if op is TokenType.OP_MULTIPLY and left.value == 1:
                return right
        return BinaryOp(op, left, right)

    # --- statements ---

    def _statement(self, node: Statement) -> Statement | None:
        match node:
            case Assignment(lhs=lhs, rhs=rhs):
                new_lhs = [self.visit(e) for e in lhs]
                return Assignment(new_lhs, [self.visit(e) for e in rhs])
            case RoutineCall(call_expression=call):
                return RoutineCall(self.visit(call))
            case CompoundStatement(statements=items):
                rewritten = (self.visit(item) for item in items)
                return CompoundStatement([s for s in rewritten if s is not None])
            case IfStatement(condition=cond, then_statement=then):
                new_cond = self.visit(cond)
                if isinstance(new_cond, NumberLiteral):
                    return self.visit(then) if new_cond.value != 0 else CompoundStatement([])
                return IfStatement(new_cond, self.visit(then))
            case TestStatement(condition=cond, then_statement=then, else_statement=other):
                new_cond = self.visit(cond)
                if isinstance(new_cond, NumberLiteral):
                    if new_cond.value != 0:
                        return self.visit(then)
                    return self.visit(other) if other is not None else CompoundStatement([])
                new_then = self.visit(then)
                new_else = self.visit(other) if other is not None else None
                return TestStatement(new_cond, new_then, new_else)
            case WhileStatement(condition=cond, body=body):
                new_cond = self.visit(cond)
                return WhileStatement(new_cond, self.visit(body))
            case ForStatement():
                return loop_optimizer.process(node, self)
            case GotoStatement(label=label):
                return GotoStatement(self.visit(label))
            case LabeledStatement(name=name, statement=inner):
                return LabeledStatement(name, self.visit(inner))
            case ReturnStatement():
                return ReturnStatement()
            case FinishStatement():
                return FinishStatement()
            case ResultisStatement(value=value):
                return ResultisStatement(self.visit(value))
            case RepeatStatement(body=body, condition=cond, loop_type=loop_type):
                new_body = self.visit(body)
                new_cond = self.visit(cond) if cond is not None else None
                return RepeatStatement(new_body, new_cond, loop_type)
            case SwitchonStatement(expression=expr, cases=cases, default_case=default):
                new_expr = self.visit(expr)
                new_cases = [SwitchCase(c.value, c.label, self.visit(c.statement)) for c in cases]
                new_default = self.visit(default) if default is not None else None
                return SwitchonStatement(new_expr, new_cases, new_default)
            case EndcaseStatement():
                return EndcaseStatement()
            case DeclarationStatement(declaration=decl):
                optimized = self.visit(decl)
                return DeclarationStatement(optimized) if optimized is not None else None
        raise TypeError("Optimizer: Unsupported Statement node.")