"""Diagnostic records returned alongside every decoding result."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable

from .pos import Range


class Severity(Enum):
    ERROR = auto()
    WARNING = auto()


class DiagnosticCode(Enum):
    INVALID_ARGUMENT_SYNTAX = auto()
    INVALID_IDENTIFIER_COMPONENT = auto()
    UNEXPECTED_ARGUMENT = auto()
    ATTRIBUTE_USED_AS_PREFIX = auto()
    MISSING_REQUIRED_ARGUMENT = auto()
    # raised by the document syntax and the model decoder
    SYNTAX_ERROR = auto()
    UNSUPPORTED_ARGUMENT = auto()
    UNSUPPORTED_BLOCK_TYPE = auto()
    MISSING_BLOCK_LABEL = auto()
    EXTRANEOUS_BLOCK_LABEL = auto()
    UNEXPECTED_BLOCK = auto()
    DUPLICATE_BLOCK = auto()
    MISSING_BLOCK = auto()
    UNSUITABLE_VALUE = auto()


@dataclass(slots=True)
class Diagnostic:
    severity: Severity
    summary: str
    detail: str = ""
    subject: Range | None = None
    code: DiagnosticCode | None = None

    @classmethod
    def error(cls, summary: str, detail: str = "", subject: Range | None = None, code: DiagnosticCode | None = None):
        return cls(Severity.ERROR, summary, detail, subject, code)

    @classmethod
    def warning(cls, summary: str, detail: str = "", subject: Range | None = None, code: DiagnosticCode | None = None):
        return cls(Severity.WARNING, summary, detail, subject, code)

    def __str__(self) -> str:
        prefix = "Error" if self.severity is Severity.ERROR else "Warning"
        message = f"{prefix}: {self.summary}"
        if self.detail:
            message += f"; {self.detail}"
        if self.subject is not None and not self.subject.empty:
            message = f"{self.subject}: {message}"
        return message


class Diagnostics(list[Diagnostic]):
    """An ordered collection of diagnostics.

    Operations that can fail return one of these next to their result instead
    of raising, so that a single call reports as many problems as possible.
    Callers decide whether to stop by checking ``has_errors()``.
    """

    def __init__(self, diags: Iterable[Diagnostic] = ()):
        super().__init__(diags)

    def has_errors(self) -> bool:
        return any(diag.severity is Severity.ERROR for diag in self)

    def errors(self) -> "Diagnostics":
        return Diagnostics(diag for diag in self if diag.severity is Severity.ERROR)

    def with_code(self, code: DiagnosticCode) -> "Diagnostics":
        return Diagnostics(diag for diag in self if diag.code is code)

    def __str__(self) -> str:
        return "\n".join(str(diag) for diag in self)


__all__ = ["Severity", "DiagnosticCode", "Diagnostic", "Diagnostics"]
