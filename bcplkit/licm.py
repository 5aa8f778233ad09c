"""Optimization pass that hoists loop-invariant code out of FOR loops."""

from __future__ import annotations

from typing import MutableMapping

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
from bcplkit.optimizer import Optimizer


class LoopInvariantCodeMotionPass:
    """Copies a program, applying loop-invariant code motion to every FOR loop.

    All other nodes are rebuilt unchanged. Global and manifest declarations
    and GET directives are dropped from the result.
    """

    def __init__(self, manifests: MutableMapping[str, int] | None = None) -> None:
        self.manifests: MutableMapping[str, int] = manifests if manifests is not None else {}

    @property
    def name(self) -> str:
        return "Loop Invariant Code Motion Pass"

    def apply(self, program: Program) -> Program:
        return self.visit(program)

    def visit(self, node):
        """Return a rebuilt copy of ``node``, or None where it is dropped."""
        if node is None:
            return None
        if isinstance(node, Expression):
            return self._expression(node)
        if isinstance(node, Statement):
            return self._statement(node)
        if isinstance(node, Declaration):
            return self._declaration(node)
        if isinstance(node, Program):
            optimized = (self._declaration(d) for d in node.declarations)
            return Program([d for d in optimized if d is not None])
        raise TypeError(
            f"LoopInvariantCodeMotionPass: Unsupported node {type(node).__name__}."
        )

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
        raise TypeError("LoopInvariantCodeMotionPass: Unsupported Declaration node.")

    def _expression(self, node: Expression) -> Expression:
        match node:
            case NumberLiteral() | FloatLiteral() | StringLiteral() | CharLiteral():
                return node.clone()
            case VariableAccess(name=name):
                return VariableAccess(name)
            case UnaryOp(op=op, rhs=rhs):
                return UnaryOp(op, self.visit(rhs))
            case BinaryOp(op=op, left=left, right=right):
                new_left = self.visit(left)
                return BinaryOp(op, new_left, self.visit(right))
            case ConditionalExpression(condition=cond, true_expr=yes, false_expr=no):
                new_cond = self.visit(cond)
                return ConditionalExpression(new_cond, self.visit(yes), self.visit(no))
            case FunctionCall(function=function, arguments=args):
                new_function = self.visit(function)
                return FunctionCall(new_function, [self.visit(a) for a in args])
            case Valof(body=body):
                return Valof(self.visit(body))
            case VectorConstructor(size=size):
                return VectorConstructor(self.visit(size))
            case VectorAccess(vector=vector, index=index):
                return VectorAccess(self.visit(vector), self.visit(index))
        raise TypeError("LoopInvariantCodeMotionPass: Unsupported Expression node.")

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
                return IfStatement(new_cond, self.visit(then))
            case TestStatement(condition=cond, then_statement=then, else_statement=other):
                new_cond = self.visit(cond)
                new_then = self.visit(then)
                new_else = self.visit(other) if other is not None else None
                return TestStatement(new_cond, new_then, new_else)
            case WhileStatement(condition=cond, body=body):
                new_cond = self.visit(cond)
                return WhileStatement(new_cond, self.visit(body))
            case ForStatement():
                return loop_optimizer.process(node, Optimizer(self.manifests))
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
        raise TypeError("LoopInvariantCodeMotionPass: Unsupported Statement node.")