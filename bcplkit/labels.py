"""Scoped label generation, definition and fixup tracking for code generation."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

_log = logging.getLogger(__name__)


class LabelError(RuntimeError):
    """Raised on misuse of labels or scopes."""


class ScopeType(Enum):
    """BCPL constructs that open a label scope."""

    FUNCTION = auto()
    VALOF = auto()
    LOOP = auto()
    SWITCHON = auto()
    COMPOUND = auto()


@dataclass
class Scope:
    type: ScopeType
    end_label: str = ""
    resultis_label: str = ""
    repeat_label: str = ""
    endcase_label: str = ""
    local_labels: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Fixup:
    instruction_address: int
    label_name: str


class LabelManager:
    """Generates unique labels and tracks them across nested scopes."""

    def __init__(self) -> None:
        self._counter = 0
        self._scopes: list[Scope] = []
        self._global_labels: dict[str, int] = {}
        self._fixups: list[Fixup] = []
        self._lock = threading.Lock()

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        with self._lock:
            return len(self._scopes)

    def push_scope(self, scope_type: ScopeType) -> None:
        scope = Scope(scope_type)
        if scope_type is ScopeType.FUNCTION:
            scope.end_label = self.generate_label("return")
        elif scope_type is ScopeType.VALOF:
            scope.resultis_label = self.generate_label("resultis")
            scope.end_label = self.generate_label("valof_end")
        elif scope_type is ScopeType.LOOP:
            scope.end_label = self.generate_label("loop_end")
            scope.repeat_label = self.generate_label("repeat")
        elif scope_type is ScopeType.SWITCHON:
            scope.end_label = self.generate_label("switch_end")
            scope.endcase_label = self.generate_label("endcase")
        elif scope_type is ScopeType.COMPOUND:
            scope.end_label = self.generate_label("block_end")
        with self._lock:
            self._scopes.append(scope)

    def pop_scope(self) -> None:
        with self._lock:
            if not self._scopes:
                raise LabelError("Cannot pop from empty scope stack")
            self._scopes.pop()

    def generate_label(self, prefix: str) -> str:
        with self._lock:
            label = f"{prefix}_{self._counter}"
            self._counter += 1
            return label

    def define_label(self, label: str, position: int) -> None:
        with self._lock:
            if label in self._global_labels:
                raise LabelError(f"Label already defined globally: {label}")
            if not self._scopes:
                self._global_labels[label] = position
                return
            current = self._scopes[-1]
            if label in current.local_labels:
                raise LabelError(f"Label already defined in current scope: {label}")
            current.local_labels[label] = position

    def request_label_fixup(self, label: str, instruction_address: int) -> None:
        with self._lock:
            self._fixups.append(Fixup(instruction_address, label))

    def take_fixups(self) -> list[Fixup]:
        """Return all pending fixups and clear them."""
        with self._lock:
            fixups, self._fixups = self._fixups, []
            return fixups

    def _innermost(self, matches: Callable[[Scope], bool], message: str) -> Scope:
        with self._lock:
            for scope in reversed(self._scopes):
                if matches(scope):
                    return scope
        raise LabelError(message)

    def current_resultis_label(self) -> str:
        return self._innermost(
            lambda s: s.type is ScopeType.VALOF and bool(s.resultis_label),
            "No RESULTIS label available (not in VALOF)",
        ).resultis_label

    def current_repeat_label(self) -> str:
        return self._innermost(
            lambda s: s.type is ScopeType.LOOP and bool(s.repeat_label),
            "No REPEAT label available (not in loop)",
        ).repeat_label

    def current_endcase_label(self) -> str:
        return self._innermost(
            lambda s: s.type is ScopeType.SWITCHON and bool(s.endcase_label),
            "No ENDCASE label available (not in SWITCHON)",
        ).endcase_label

    def current_end_label(self) -> str:
        with self._lock:
            if not self._scopes:
                raise LabelError("No current scope")
            return self._scopes[-1].end_label

    def current_return_label(self) -> str:
        return self._innermost(
            lambda s: s.type is ScopeType.FUNCTION, "Not in a function scope"
        ).end_label

    def label_position(self, label: str) -> int | None:
        """Position of a global or visible local label, or None."""
        with self._lock:
            if label in self._global_labels:
                return self._global_labels[label]
            for scope in reversed(self._scopes):
                if label in scope.local_labels:
                    return scope.local_labels[label]
            return None

    def label_address(self, label: str) -> int:
        _log.debug("Requesting address for label: %s", label)
        position = self.label_position(label)
        if position is None:
            raise LabelError(f"Label not found: {label}")
        return position