"""Abstract syntax tree nodes for BCPL programs."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union

from bcplkit.tokens import TokenType


class _Node:
    def clone(self):
        """Return a deep copy of this node and everything below it."""
        return copy.deepcopy(self)


class Expression(_Node):
    """Base class of expression nodes."""


class Statement(_Node):
    """Base class of statement nodes."""


class Declaration(_Node):
    """Base class of declaration nodes."""


@dataclass
class NumberLiteral(Expression):
    value: int


@dataclass
class FloatLiteral(Expression):
    value: float


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class CharLiteral(Expression):
    value: int


@dataclass
class VariableAccess(Expression):
    name: str


@dataclass
class UnaryOp(Expression):
    op: TokenType
    rhs: Expression


@dataclass
class BinaryOp(Expression):
    op: TokenType
    left: Expression
    right: Expression


@dataclass
class FunctionCall(Expression):
    function: Expression
    arguments: list[Expression] = field(default_factory=list)


@dataclass
class ConditionalExpression(Expression):
    condition: Expression
    true_expr: Expression
    false_expr: Expression


@dataclass
class Valof(Expression):
    body: Statement


@dataclass
class VectorConstructor(Expression):
    size: Expression


@dataclass
class VectorAccess(Expression):
    vector: Expression
    index: Expression


@dataclass
class Assignment(Statement):
    lhs: list[Expression]
    rhs: list[Expression]


@dataclass
class RoutineCall(Statement):
    call_expression: Expression


@dataclass
class CompoundStatement(Statement):
    statements: list[Union[Statement, Declaration]] = field(default_factory=list)


@dataclass
class IfStatement(Statement):
    condition: Expression
    then_statement: Statement


@dataclass
class TestStatement(Statement):
    condition: Expression
    then_statement: Statement
    else_statement: Statement | None = None


@dataclass
class WhileStatement(Statement):
    condition: Expression
    body: Statement


@dataclass
class ForStatement(Statement):
    var_name: str
    from_expr: Expression
    to_expr: Expression
    by_expr: Expression | None
    body: Statement


@dataclass
class GotoStatement(Statement):
    label: Expression


@dataclass
class LabeledStatement(Statement):
    name: str
    statement: Statement


@dataclass
class ReturnStatement(Statement):
    pass


@dataclass
class FinishStatement(Statement):
    pass


@dataclass
class ResultisStatement(Statement):
    value: Expression


class RepeatLoopType(Enum):
    """The three forms of a REPEAT loop."""

    REPEAT = auto()
    REPEAT_WHILE = auto()
    REPEAT_UNTIL = auto()


@dataclass
class RepeatStatement(Statement):
    body: Statement
    condition: Expression | None = None
    loop_type: RepeatLoopType = RepeatLoopType.REPEAT


@dataclass
class SwitchCase:
    value: int
    label: str
    statement: Statement


@dataclass
class SwitchonStatement(Statement):
    expression: Expression
    cases: list[SwitchCase] = field(default_factory=list)
    default_case: Statement | None = None


@dataclass
class EndcaseStatement(Statement):
    pass


@dataclass
class DeclarationStatement(Statement):
    declaration: Declaration


@dataclass
class VarInit:
    name: str
    init: Expression | None = None


@dataclass
class LetDeclaration(Declaration):
    initializers: list[VarInit] = field(default_factory=list)


@dataclass
class FunctionDeclaration(Declaration):
    name: str
    params: list[str] = field(default_factory=list)
    body_expr: Expression | None = None
    body_stmt: Statement | None = None


@dataclass
class GlobalDeclaration(Declaration):
    entries: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class ManifestDeclaration(Declaration):
    entries: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class GetDirective(Declaration):
    filename: str


@dataclass
class Program(_Node):
    declarations: list[Declaration] = field(default_factory=list)