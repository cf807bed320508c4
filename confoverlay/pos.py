"""Source positions for attributes, blocks and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Pos:
    line: int = 0
    column: int = 0
    byte: int = 0


@dataclass(frozen=True, slots=True)
class Range:
    """A span of source text.

    The all-zero ``Range()`` stands for "no source location". Content that
    was not read from a file, such as values set by overlays, carries it.
    """

    filename: str = ""
    start: Pos = field(default_factory=Pos)
    end: Pos = field(default_factory=Pos)

    @property
    def empty(self) -> bool:
        return self == Range()

    def __str__(self) -> str:
        if self.empty:
            return "<no location>"
        return f"{self.filename or '<input>'}:{self.start.line},{self.start.column}"


__all__ = ["Pos", "Range"]
