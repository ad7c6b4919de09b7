"""
Diagnostic records produced by the Lumen lexer and parser.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .location import SourceLocation
from .severity import DiagnosticKind, DiagnosticSeverity


@dataclass(frozen=True)
class Diagnostic:
    """A single positioned error, warning or note."""
    severity: DiagnosticSeverity
    message: str
    location: SourceLocation
    kind: DiagnosticKind
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Tuple[str, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def __str__(self) -> str:
        return f"{self.location.line}:{self.location.column}: {self.severity}: {self.message}"

    def render(self) -> str:
        """Long form with file name, code, help text and suggestions."""
        code = f"[{self.code}] " if self.code else ""
        result = f"{str(self.severity).upper()}: {code}{self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result
