"""Diagnostic collector shared by the lexer and parser of one parse run."""

import logging
from typing import List, Optional, Sequence

from .diagnostic import Diagnostic
from .location import SourceLocation
from .severity import DiagnosticKind, DiagnosticSeverity

logger = logging.getLogger(__name__)


class DiagnosticCollector:
    """
    Accumulates diagnostics from the lexer and parser.

    A diagnostic reported at the same offset and severity as the one
    recorded immediately before it is treated as a cascade and dropped.
    Diagnostics are returned sorted by source offset.
    """

    def __init__(self, max_diagnostics: Optional[int] = None) -> None:
        self._diagnostics: List[Diagnostic] = []
        self._last: Optional[Diagnostic] = None
        self.max_diagnostics = max_diagnostics
        self.dropped = 0

    def report(self, diagnostic: Diagnostic) -> bool:
        """Record a diagnostic. Returns False when it was deduplicated or capped."""
        last = self._last
        if (last is not None
                and last.location.offset == diagnostic.location.offset
                and last.severity == diagnostic.severity):
            logger.debug("dropping cascaded diagnostic at %s: %s",
                         diagnostic.location, diagnostic.message)
            return False

        if self.max_diagnostics is not None and len(self._diagnostics) >= self.max_diagnostics:
            self.dropped += 1
            return False

        self._diagnostics.append(diagnostic)
        self._last = diagnostic
        return True

    def error(
        self,
        message: str,
        location: SourceLocation,
        kind: DiagnosticKind,
        *,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Sequence[str] = (),
    ) -> bool:
        """Record an error diagnostic."""
        return self.report(Diagnostic(DiagnosticSeverity.ERROR, message, location, kind,
                                      code, help_text, tuple(suggestions)))

    def warning(
        self,
        message: str,
        location: SourceLocation,
        kind: DiagnosticKind,
        *,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Sequence[str] = (),
    ) -> bool:
        """Record a warning diagnostic."""
        return self.report(Diagnostic(DiagnosticSeverity.WARNING, message, location, kind,
                                      code, help_text, tuple(suggestions)))

    def has_errors(self) -> bool:
        """Return True if any error diagnostics have been recorded."""
        return any(d.is_error for d in self._diagnostics)

    def error_count(self) -> int:
        return sum(1 for d in self._diagnostics if d.is_error)

    def get_all(self) -> List[Diagnostic]:
        """Return all diagnostics ordered by source position."""
        return sorted(self._diagnostics, key=lambda d: d.location.offset)

    def format_all(self) -> str:
        """Format all diagnostics as ``line:column: severity: message`` lines."""
        return "\n".join(str(d) for d in self.get_all())

    def __len__(self) -> int:
        return len(self._diagnostics)
