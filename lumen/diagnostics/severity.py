"""Severity levels and producer kinds for Lumen diagnostics."""

from enum import Enum


class DiagnosticSeverity(Enum):
    """Severity level of a diagnostic message."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def __str__(self) -> str:
        return self.value


class DiagnosticKind(Enum):
    """Which front-end stage produced a diagnostic."""

    LEX = "lex"
    SYNTAX = "syntax"

    def __str__(self) -> str:
        return self.value
