"""Inlining of calls to small, non-recursive routines."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterator

from bcplkit.nodes import (
    CompoundStatement,
    Declaration,
    Expression,
    FunctionCall,
    FunctionDeclaration,
    LetDeclaration,
    Program,
    Statement,
    Valof,
    VariableAccess,
    VarInit,
)


def _children(node) -> Iterator[object]:
    for f in dataclasses.fields(node):
        value = getattr(node, f.name)
        items = value if isinstance(value, (list, tuple)) else (value,)
        for item in items:
            if dataclasses.is_dataclass(item) and not isinstance(item, type):
                yield item


def _walk(node) -> Iterator[object]:
    """Yield ``node`` and every dataclass node below it."""
    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(_children(current))


@dataclass(frozen=True)
class InlinableFunction:
    """A routine chosen for inlining, with the node count of its body."""

    declaration: FunctionDeclaration
    size: int


class FunctionInliningPass:
    """Replaces calls to small, non-recursive routines with a VALOF of their body."""

    MAX_BODY_NODES = 20

    def __init__(self) -> None:
        self.inlinable_functions: dict[str, InlinableFunction] = {}

    @property
    def name(self) -> str:
        return "Function Inlining Pass"

    def apply(self, program: Program) -> Program:
        self._find_inlinable_functions(program)
        return Program([self._declaration(d) for d in program.declarations])

    def _find_inlinable_functions(self, program: Program) -> None:
        self.inlinable_functions = {}
        for decl in program.declarations:
            if not isinstance(decl, FunctionDeclaration) or decl.body_stmt is None:
                continue
            size = sum(
                isinstance(node, (Expression, Statement, Declaration))
                for node in _walk(decl.body_stmt)
            )
            if size > self.MAX_BODY_NODES or self._is_recursive(decl):
                continue
            self.inlinable_functions[decl.name] = InlinableFunction(decl, size)

    @staticmethod
    def _is_recursive(decl: FunctionDeclaration) -> bool:
        return any(
            isinstance(node, FunctionCall)
            and isinstance(node.function, VariableAccess)
            and node.function.name == decl.name
            for node in _walk(decl.body_stmt)
        )

    def _declaration(self, node: Declaration) -> Declaration:
        if isinstance(node, FunctionDeclaration):
            return FunctionDeclaration(
                node.name,
                list(node.params),
                self._expression(node.body_expr) if node.body_expr is not None else None,
                self._statement(node.body_stmt) if node.body_stmt is not None else None,
            )
        return node.clone()

    def _expression(self, node: Expression) -> Expression:
        if isinstance(node, FunctionCall):
            return self._call(node)
        return node.clone()

    def _statement(self, node):
        if isinstance(node, CompoundStatement):
            return CompoundStatement([self._statement(s) for s in node.statements])
        return node.clone()

    def _call(self, node: FunctionCall) -> Expression:
        if not isinstance(node.function, VariableAccess):
            return node.clone()
        entry = self.inlinable_functions.get(node.function.name)
        if entry is None:
            return node.clone()
        decl = entry.declaration
        if len(decl.params) != len(node.arguments):
            return node.clone()
        bindings = LetDeclaration(
            [VarInit(param, arg.clone()) for param, arg in zip(decl.params, node.arguments)]
        )
        return Valof(CompoundStatement([bindings, decl.body_stmt.clone()]))