"""
Lumen diagnostics package.

Shared sink for lexical and syntax errors. Has no dependencies on the
rest of the front-end.
"""

from .collector import DiagnosticCollector
from .diagnostic import Diagnostic
from .location import SourceLocation
from .severity import DiagnosticKind, DiagnosticSeverity

__all__ = [
    "SourceLocation",
    "DiagnosticSeverity",
    "DiagnosticKind",
    "Diagnostic",
    "DiagnosticCollector",
]
