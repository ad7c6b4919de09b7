"""
Error handling for the Lumen lexer.

Lexical problems are reported as diagnostics with source locations,
error codes and recovery suggestions.
"""

from typing import List, Optional, Sequence

from ..diagnostics import Diagnostic, DiagnosticKind, DiagnosticSeverity, SourceLocation


class LexerError(Exception):
    """
    Raised inside the lexer when scanning cannot continue at the current
    character. ``Lexer.tokenize`` records the diagnostic and skips ahead.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Sequence[str] = ()
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            severity=DiagnosticSeverity.ERROR,
            message=message,
            location=location,
            kind=DiagnosticKind.LEX,
            code=code,
            help_text=help_text,
            suggestions=tuple(suggestions)
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class ErrorRecovery:
    """
    Suggestions attached to lexical diagnostics.
    """

    @staticmethod
    def suggest_keyword_corrections(invalid_word: str) -> List[str]:
        """Keywords within two edits of ``invalid_word``, closest first (at most three)."""
        from .tokens import KEYWORDS

        word = invalid_word.lower()
        ranked = []
        for keyword in KEYWORDS:
            if len(keyword) <= 2:
                continue
            distance = ErrorRecovery._edit_distance(word, keyword)
            if 0 < distance <= 2:
                ranked.append((distance, keyword))

        ranked.sort()
        return [keyword for _, keyword in ranked[:3]]

    @staticmethod
    def suggest_operator_corrections(invalid_char: str) -> List[str]:
        """Suggest operators for a character that is not valid on its own."""
        corrections = {
            "&": ["&&"],
            "|": ["||"],
            "?": ["if (...) { ... } else { ... }"],
            "#": ["//"],
        }
        return corrections.get(invalid_char, [])

    @staticmethod
    def _edit_distance(source: str, target: str) -> int:
        """Levenshtein distance, keeping a single row of the table."""
        row = list(range(len(target) + 1))
        for i, a in enumerate(source, 1):
            diagonal, row[0] = row[0], i
            for j, b in enumerate(target, 1):
                above = row[j]
                row[j] = min(above + 1, row[j - 1] + 1, diagonal + (a != b))
                diagonal = above
        return row[-1]


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
    "L002": "Unterminated string literal",
    "L003": "Invalid numeric literal",
    "L004": "Unterminated block comment",
    "L005": "Invalid character literal",
    "L006": "Unknown escape sequence",
}


# Helper functions for creating common errors

def create_invalid_character_error(char: str, location: SourceLocation) -> LexerError:
    """Create an error for an invalid character."""
    suggestions = ErrorRecovery.suggest_operator_corrections(char)
    if suggestions:
        help_text = f"Did you mean {' or '.join(repr(s) for s in suggestions)}?"
    elif char.isprintable():
        help_text = f"The character '{char}' is not valid in Lumen source code."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    return LexerError(
        message=f"Invalid character: '{char}'",
        location=location,
        code="L001",
        help_text=help_text,
        suggestions=suggestions
    )


def create_unterminated_string_error(quote_type: str, location: SourceLocation) -> LexerError:
    """Create an error for an unterminated string or character literal."""
    what = "character" if quote_type == "'" else "string"
    return LexerError(
        message=f"Unterminated {what} literal",
        location=location,
        code="L002",
        help_text=f"{what.capitalize()} literals must be closed with a matching {quote_type} on the same line.",
        suggestions=[f"Add a closing {quote_type} quote", "Check for unescaped quotes in the literal"]
    )


def create_invalid_number_error(lexeme: str, location: SourceLocation, reason: str) -> LexerError:
    """Create an error for an invalid numeric literal."""
    return LexerError(
        message=f"Invalid numeric literal: '{lexeme}'",
        location=location,
        code="L003",
        help_text=reason,
        suggestions=["Floats need digits on both sides of a single '.'"]
    )


def create_unterminated_comment_error(location: SourceLocation) -> LexerError:
    """Create an error for a block comment that runs to the end of input."""
    return LexerError(
        message="Unterminated block comment",
        location=location,
        code="L004",
        help_text="Block comments opened with '/*' must be closed with '*/'.",
        suggestions=["Add '*/' where the comment should end"]
    )


def create_invalid_char_literal_error(reason: str, location: SourceLocation) -> LexerError:
    """Create an error for an empty or over-long character literal."""
    return LexerError(
        message=f"Invalid character literal: {reason}",
        location=location,
        code="L005",
        help_text="Character literals hold exactly one character or escape sequence.",
        suggestions=["Use a string literal for more than one character"]
    )
