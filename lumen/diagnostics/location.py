"""
Source positions shared by the lexer, parser and diagnostics.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and for the spans attached to AST nodes.
    """
    filename: str
    line: int       # 1-based
    column: int     # 1-based
    offset: int     # Character offset from start of buffer

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"

    def advanced_by(self, text: str) -> "SourceLocation":
        """Return the location just past ``text`` when it starts here."""
        newlines = text.count("\n")
        if newlines == 0:
            return SourceLocation(self.filename, self.line, self.column + len(text),
                                  self.offset + len(text))
        tail = text.rsplit("\n", 1)[1]
        return SourceLocation(self.filename, self.line + newlines, len(tail) + 1,
                              self.offset + len(text))
