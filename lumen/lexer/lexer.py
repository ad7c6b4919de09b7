"""
Lumen Lexer - turns source text into tokens.

Single pass over the buffer with maximal-munch operator matching.
Every lexical problem is reported to the shared DiagnosticCollector and
scanning carries on, so the token list always ends with EOF.
"""

import logging
from typing import List, Optional

from ..diagnostics import DiagnosticCollector, DiagnosticKind, SourceLocation
from .tokens import Token, TokenType, KEYWORDS, OPERATORS, MAX_OPERATOR_LENGTH
from .errors import (
    LexerError, create_invalid_character_error, create_unterminated_string_error,
    create_invalid_number_error, create_unterminated_comment_error,
    create_invalid_char_literal_error
)

logger = logging.getLogger(__name__)

ESCAPE_SEQUENCES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '0': '\0',
    '\\': '\\',
    '"': '"',
    "'": "'",
}


def _is_digit(char: str) -> bool:
    return '0' <= char <= '9'


class Lexer:
    """
    Lumen lexical analyzer.

    Converts source code text into a list of tokens. Lexical errors are
    recorded in ``collector`` and never stop the scan.
    """

    def __init__(self, source: str, filename: str = "<unknown>",
                 collector: Optional[DiagnosticCollector] = None,
                 warn_on_unknown_escape: bool = True):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
            collector: Diagnostic sink shared with the parser
            warn_on_unknown_escape: Report unknown escapes such as '\\q' as warnings
        """
        self.source = source
        self.filename = filename
        self.collector = collector if collector is not None else DiagnosticCollector()
        self.warn_on_unknown_escape = warn_on_unknown_escape
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.error_count = 0

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens ending with an EOF token
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []
        self.error_count = 0

        while self.pos < len(self.source):
            try:
                self._skip_whitespace_and_comments()

                if self.pos >= len(self.source):
                    break

                token = self._next_token()
                if token:
                    self.tokens.append(token)

            except LexerError as e:
                self._record(e)
                # Skip exactly the offending character
                self._advance()

        self.tokens.append(Token(TokenType.EOF, "", None, self._location()))

        logger.debug("%s: produced %d tokens, %d lexical errors",
                     self.filename, len(self.tokens), self.error_count)
        return self.tokens

    def _next_token(self) -> Optional[Token]:
        """Get the next token from the source."""
        start = self._location()
        current_char = self.source[self.pos]

        # Numbers
        if _is_digit(current_char):
            return self._tokenize_number(start)

        # Identifiers and keywords
        if self._is_identifier_start(current_char):
            return self._tokenize_identifier_or_keyword(start)

        # String and character literals
        if current_char == '"':
            return self._tokenize_string(start)
        if current_char == "'":
            return self._tokenize_character(start)

        # Operators and punctuation (longest first)
        for op_len in range(MAX_OPERATOR_LENGTH, 0, -1):
            potential_op = self.source[self.pos:self.pos + op_len]
            if len(potential_op) == op_len and potential_op in OPERATORS:
                self._advance_by(op_len)
                return Token(OPERATORS[potential_op], potential_op, None, start)

        raise create_invalid_character_error(current_char, start)

    def _tokenize_number(self, start: SourceLocation) -> Token:
        """Tokenize integer or float literals, recovering from malformed ones."""
        start_pos = self.pos
        self._consume_digits()
        int_part = self.source[start_pos:self.pos]

        if self._current() == '.' and _is_digit(self._peek()):
            self._advance()
            self._consume_digits()
            float_text = self.source[start_pos:self.pos]

            if self._current() == '.':
                # 1.2.3 - swallow the whole dotted run
                while self._current() == '.' or _is_digit(self._current()):
                    self._advance()
                lexeme = self.source[start_pos:self.pos]
                self._record(create_invalid_number_error(
                    lexeme, start, "A float literal may contain only one '.'"))
                return Token(TokenType.INVALID_NUMBER, lexeme, float(float_text), start)

            if self._is_identifier_start(self._current()):
                return self._tokenize_number_with_suffix(start_pos, start, float(float_text))

            return Token(TokenType.FLOAT, float_text, float(float_text), start)

        if self._current() == '.' and not self._is_identifier_start(self._peek()):
            # Trailing '.' with no fractional digits
            self._advance()
            lexeme = self.source[start_pos:self.pos]
            self._record(create_invalid_number_error(
                lexeme, start, "Expected digits after the decimal point"))
            return Token(TokenType.INVALID_NUMBER, lexeme, float(int_part), start)

        if self._is_identifier_start(self._current()):
            return self._tokenize_number_with_suffix(start_pos, start, int(int_part))

        return Token(TokenType.INTEGER, int_part, int(int_part), start)

    def _tokenize_number_with_suffix(self, start_pos: int, start: SourceLocation, value) -> Token:
        """Handle digits running straight into letters, e.g. ``12ab``."""
        while self._is_identifier_continue(self._current()):
            self._advance()
        lexeme = self.source[start_pos:self.pos]
        self._record(create_invalid_number_error(
            lexeme, start, "Identifiers cannot start with a digit"))
        return Token(TokenType.INVALID_NUMBER, lexeme, value, start)

    def _consume_digits(self):
        while _is_digit(self._current()):
            self._advance()

    def _tokenize_identifier_or_keyword(self, start: SourceLocation) -> Token:
        """Tokenize an identifier or keyword."""
        start_pos = self.pos

        # First character is already validated as identifier start
        self._advance()

        while self._is_identifier_continue(self._current()):
            self._advance()

        lexeme = self.source[start_pos:self.pos]

        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None

        # Handle boolean literals
        if token_type in (TokenType.TRUE, TokenType.FALSE):
            value = token_type == TokenType.TRUE

        return Token(token_type, lexeme, value, start)

    def _tokenize_string(self, start: SourceLocation) -> Token:
        """Tokenize a string literal."""
        start_pos = self.pos
        self._advance()  # Skip opening quote

        value_parts = []
        terminated = False

        while self.pos < len(self.source):
            char = self.source[self.pos]
            if char == '"':
                self._advance()
                terminated = True
                break
            if char == '\n':
                break
            if char == '\\' and self._peek() not in ('\n', '\0'):
                value_parts.append(self._handle_escape_sequence())
            else:
                value_parts.append(char)
                self._advance()

        lexeme = self.source[start_pos:self.pos]
        value = ''.join(value_parts)

        if not terminated:
            # The rest of the line has been consumed; resume on the next one
            self._record(create_unterminated_string_error('"', start))
            return Token(TokenType.UNTERMINATED_STRING, lexeme, value, start)

        return Token(TokenType.STRING, lexeme, value, start)

    def _tokenize_character(self, start: SourceLocation) -> Token:
        """Tokenize a character literal."""
        start_pos = self.pos
        self._advance()  # Skip opening quote

        chars = []
        terminated = False

        while self.pos < len(self.source):
            char = self.source[self.pos]
            if char == "'":
                self._advance()
                terminated = True
                break
            if char == '\n':
                break
            if char == '\\' and self._peek() not in ('\n', '\0'):
                chars.append(self._handle_escape_sequence())
            else:
                chars.append(char)
                self._advance()

        lexeme = self.source[start_pos:self.pos]

        if not terminated:
            self._record(create_unterminated_string_error("'", start))
            return Token(TokenType.UNTERMINATED_CHAR, lexeme, ''.join(chars)[:1], start)

        if not chars:
            self._record(create_invalid_char_literal_error("empty literal", start))
            return Token(TokenType.CHARACTER, lexeme, '', start)

        if len(chars) > 1:
            self._record(create_invalid_char_literal_error(
                f"{len(chars)} characters in '{lexeme}'", start))

        return Token(TokenType.CHARACTER, lexeme, chars[0], start)

    def _handle_escape_sequence(self) -> str:
        """Decode the escape at the current backslash and advance past it."""
        backslash_location = self._location()
        self._advance()  # Skip backslash
        escape_char = self.source[self.pos]
        self._advance()

        if escape_char in ESCAPE_SEQUENCES:
            return ESCAPE_SEQUENCES[escape_char]

        if self.warn_on_unknown_escape:
            self.collector.warning(
                f"Unknown escape sequence '\\{escape_char}'",
                backslash_location,
                DiagnosticKind.LEX,
                code="L006",
                help_text="The backslash and the character are kept as written.",
                suggestions=["Use '\\\\' for a literal backslash"]
            )
        return '\\' + escape_char

    def _is_identifier_start(self, char: str) -> bool:
        """Check if character can start an identifier."""
        return char.isascii() and (char.isalpha() or char == '_')

    def _is_identifier_continue(self, char: str) -> bool:
        """Check if character can continue an identifier."""
        return char.isascii() and (char.isalnum() or char == '_')

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and comments."""
        while self.pos < len(self.source):
            if self.source[self.pos].isspace():
                self._advance()
                continue

            # Skip line comments //
            if self.source.startswith('//', self.pos):
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
                continue

            # Skip block comments /* */
            if self.source.startswith('/*', self.pos):
                start = self._location()
                self._advance_by(2)
                while self.pos < len(self.source) and not self.source.startswith('*/', self.pos):
                    self._advance()
                if self.pos >= len(self.source):
                    raise create_unterminated_comment_error(start)
                self._advance_by(2)  # Skip closing */
                continue

            break

    def _record(self, error: LexerError):
        self.error_count += 1
        self.collector.report(error.diagnostic)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        """Advance position by multiple characters."""
        for _ in range(count):
            self._advance()

    def _current(self) -> str:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return '\0'

    def _peek(self, offset: int = 1) -> str:
        """Peek at character ahead without advancing."""
        peek_pos = self.pos + offset
        if peek_pos < len(self.source):
            return self.source[peek_pos]
        return '\0'

    def has_errors(self) -> bool:
        """Check if lexer encountered any errors."""
        return self.error_count > 0


def tokenize_string(source: str, filename: str = "<string>",
                    collector: Optional[DiagnosticCollector] = None) -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        collector: Optional diagnostic sink; lexical errors land here

    Returns:
        List of tokens ending with EOF
    """
    return Lexer(source, filename, collector).tokenize()


def tokenize_file(filepath: str,
                  collector: Optional[DiagnosticCollector] = None) -> List[Token]:
    """
    Convenience function to tokenize a UTF-8 source file.

    Raises:
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath, collector)
