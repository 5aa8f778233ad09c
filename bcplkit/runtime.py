"""Runtime services for compiled BCPL programs: symbols, streams and library."""

from __future__ import annotations

import math
import sys
from types import MappingProxyType
from typing import IO, Any, Iterable, Mapping


class SymbolNotFoundError(RuntimeError):
    """Raised when a symbol is looked up that was never registered."""


class FinishRequested(SystemExit):
    """Raised by FINISH and STOP to end the running program with a status."""


class JitRuntime:
    """Symbol table and current I/O channels for a running BCPL program."""

    def __init__(self, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.current_input: IO[str] = self._stdin
        self.current_output: IO[str] = self._stdout
        self._symbols: dict[str, Any] = {}

    # --- symbol table ---

    def register_symbol(self, name: str, address: Any) -> None:
        self._symbols[name] = address

    def symbol_address(self, name: str) -> Any:
        try:
            return self._symbols[name]
        except KeyError:
            raise SymbolNotFoundError(f"Symbol not found: {name}") from None

    def symbols(self) -> Mapping[str, Any]:
        """A read-only view of the symbol table."""
        return MappingProxyType(self._symbols)

    # --- streams ---

    def findinput(self, name: str) -> IO[str] | None:
        """Open ``name`` for reading; None when it cannot be opened."""
        try:
            return open(name, "r")
        except OSError:
            return None

    def findoutput(self, name: str) -> IO[str] | None:
        """Open ``name`` for writing; None when it cannot be opened."""
        try:
            return open(name, "w")
        except OSError:
            return None

    def selectinput(self, stream: IO[str] | None) -> None:
        if stream:
            self.current_input = stream

    def selectoutput(self, stream: IO[str] | None) -> None:
        if stream:
            self.current_output = stream

    def rdch(self) -> int:
        """Read one character code from the current input, -1 at end of input."""
        ch = self.current_input.read(1)
        return ord(ch) if ch else -1

    def wrch(self, ch: int) -> None:
        self.current_output.write(chr(ch))

    def endread(self) -> None:
        """Close the current input unless it is standard input, then revert to it."""
        if self.current_input is not None and self.current_input is not self._stdin:
            self.current_input.close()
            self.current_input = self._stdin

    def endwrite(self) -> None:
        """Close the current output unless it is standard output, then revert to it."""
        if self.current_output is not None and self.current_output is not self._stdout:
            self.current_output.close()
            self.current_output = self._stdout

    def writes(self, s: Iterable[int]) -> None:
        """Write character codes up to (not including) the first 0."""
        for code in s:
            if code == 0:
                break
            self.wrch(code)

    def writen(self, n: int) -> None:
        self.current_output.write(str(n))

    def newline(self) -> None:
        self.current_output.write("\n")

    # --- system ---

    def finish(self) -> None:
        raise FinishRequested(0)

    def stop(self, n: int) -> None:
        raise FinishRequested(n)

    def close(self) -> None:
        """Close every open file registered under a ``file_`` symbol."""
        for name, value in self._symbols.items():
            if value is self._stdin or value is self._stdout:
                continue
            if name.startswith("file_") and hasattr(value, "close"):
                value.close()

    def __enter__(self) -> JitRuntime:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def vec(size_in_words: int) -> list[int]:
    """A zero-filled vector of ``size_in_words`` words."""
    if size_in_words < 0:
        raise MemoryError("Failed to allocate vector")
    return [0] * size_in_words


def unpack_string(text: str) -> list[int]:
    """The UTF-8 bytes of ``text`` as word values, followed by a 0 terminator."""
    return [*text.encode("utf-8"), 0]


def to_float(n: int) -> float:
    return float(n)


def trunc(f: float) -> int:
    """Truncate toward zero."""
    return math.trunc(f)