"""Loop-invariant code motion for FOR loops."""

from __future__ import annotations

import itertools
from typing import Protocol

from bcplkit.nodes import (
    Assignment,
    BinaryOp,
    CharLiteral,
    CompoundStatement,
    DeclarationStatement,
    Expression,
    FloatLiteral,
    ForStatement,
    FunctionCall,
    IfStatement,
    LabeledStatement,
    LetDeclaration,
    NumberLiteral,
    RoutineCall,
    Statement,
    StringLiteral,
    TestStatement,
    UnaryOp,
    VariableAccess,
    VarInit,
    WhileStatement,
)

_SIDE_EFFECT_CALLS = frozenset({"WRITES", "WRITEN", "NEWLINE", "FINISH", "READN"})
_TEMP_PREFIX = "_licm_temp_"


class NodeOptimizer(Protocol):
    """Anything that rewrites a single AST node, returning a fresh node or None."""

    def visit(self, node): ...


def _modified_variables(body: Statement | None, loop_var: str) -> set[str]:
    """Names assigned anywhere in ``body``, plus the loop variable itself."""
    modified = {loop_var}

    def walk(node) -> None:
        match node:
            case Assignment(lhs=targets):
                modified.update(t.name for t in targets if isinstance(t, VariableAccess))
            case CompoundStatement(statements=items):
                for item in items:
                    walk(item)
            case IfStatement(then_statement=then):
                walk(then)
            case TestStatement(then_statement=then, else_statement=other):
                walk(then)
                walk(other)
            case WhileStatement(body=inner):
                walk(inner)
            case ForStatement(var_name=name, body=inner):
                modified.add(name)
                walk(inner)
            case LabeledStatement(statement=inner):
                walk(inner)

    walk(body)
    return modified


class _Hoister:
    """Rewrites a loop body, lifting invariant computations into temporaries."""

    def __init__(self, optimizer: NodeOptimizer, modified: set[str]) -> None:
        self._optimizer = optimizer
        self._modified = modified
        self._counter = itertools.count()
        self.hoisted: list[LetDeclaration] = []

    def is_invariant(self, expr: Expression | None) -> bool:
        match expr:
            case None:
                return True
            case NumberLiteral() | FloatLiteral() | StringLiteral() | CharLiteral():
                return True
            case VariableAccess(name=name):
                return name not in self._modified
            case UnaryOp(rhs=rhs):
                return self.is_invariant(rhs)
            case BinaryOp(left=left, right=right):
                return self.is_invariant(left) and self.is_invariant(right)
            case FunctionCall(function=function, arguments=args):
                if isinstance(function, VariableAccess) and function.name in _SIDE_EFFECT_CALLS:
                    return False
                return all(self.is_invariant(a) for a in args) and self.is_invariant(function)
        return False

    def _hoist_if_invariant(self, expr: Expression) -> Expression:
        if not self.is_invariant(expr) or isinstance(expr, (NumberLiteral, VariableAccess)):
            return expr
        name = f"{_TEMP_PREFIX}{next(self._counter)}"
        self.hoisted.append(LetDeclaration([VarInit(name, expr)]))
        return VariableAccess(name)

    def expression(self, node: Expression | None) -> Expression | None:
        match node:
            case None:
                return None
            case BinaryOp(op=op, left=left, right=right):
                new_left = self.expression(left)
                new_right = self.expression(right)
                return self._hoist_if_invariant(BinaryOp(op, new_left, new_right))
            case UnaryOp(op=op, rhs=rhs):
                return self._hoist_if_invariant(UnaryOp(op, self.expression(rhs)))
            case FunctionCall(function=function, arguments=args):
                new_args = [self.expression(a) for a in args]
                new_function = self.expression(function)
                return self._hoist_if_invariant(FunctionCall(new_function, new_args))
        return self._optimizer.visit(node)

    def statement(self, node: Statement | None) -> Statement | None:
        match node:
            case None:
                return None
            case Assignment(lhs=lhs, rhs=rhs):
                new_rhs = [self.expression(e) for e in rhs]
                new_lhs = [self._optimizer.visit(e) for e in lhs]
                return Assignment(new_lhs, new_rhs)
            case CompoundStatement(statements=items):
                rewritten = (self.statement(item) for item in items)
                return CompoundStatement([s for s in rewritten if s is not None])
            case IfStatement(condition=cond, then_statement=then):
                new_cond = self.expression(cond)
                return IfStatement(new_cond, self.statement(then))
            case TestStatement(condition=cond, then_statement=then, else_statement=other):
                new_cond = self.expression(cond)
                new_then = self.statement(then)
                new_else = self.statement(other) if other is not None else None
                return TestStatement(new_cond, new_then, new_else)
            case WhileStatement(condition=cond, body=body):
                new_cond = self.expression(cond)
                return WhileStatement(new_cond, self.statement(body))
            case ForStatement():
                return process(node, self._optimizer)
            case RoutineCall(call_expression=call):
                return RoutineCall(self.expression(call))
            case LabeledStatement(name=name, statement=inner):
                return LabeledStatement(name, self.statement(inner))
        return self._optimizer.visit(node)


def process(loop: ForStatement, optimizer: NodeOptimizer) -> Statement:
    """Optimize a FOR loop, hoisting loop-invariant expressions out of its body.

    Returns the rebuilt loop, or a compound statement holding the hoisted
    declarations followed by the rebuilt loop when anything was hoisted.
    """
    new_from = optimizer.visit(loop.from_expr)
    new_to = optimizer.visit(loop.to_expr)
    new_by = optimizer.visit(loop.by_expr) if loop.by_expr is not None else None

    hoister = _Hoister(optimizer, _modified_variables(loop.body, loop.var_name))
    new_body = hoister.statement(loop.body)

    new_loop = ForStatement(loop.var_name, new_from, new_to, new_by, new_body)
    if not hoister.hoisted:
        return new_loop
    return CompoundStatement(
        [*(DeclarationStatement(decl) for decl in hoister.hoisted), new_loop]
    )