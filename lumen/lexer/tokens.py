"""
Token definitions for the Lumen lexer.

This module defines all token types supported by Lumen:
- Keywords (type names, control flow, declarations, modules)
- Operators and punctuation
- Literals (integers, floats, strings, characters, booleans)
- Identifiers
- Recovery tokens emitted after lexical errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any

from ..diagnostics.location import SourceLocation


class TokenType(Enum):
    """
    Enumeration of all token types in Lumen.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input

    # ========================================================================
    # Literals
    # ========================================================================
    INTEGER = auto()                # 42
    FLOAT = auto()                  # 3.14
    STRING = auto()                 # "hello"
    CHARACTER = auto()              # 'a', '\n'
    TRUE = auto()                   # true
    FALSE = auto()                  # false

    # ========================================================================
    # Identifiers and Keywords
    # ========================================================================
    IDENTIFIER = auto()

    # Type keywords
    INT = auto()
    FLOAT_TYPE = auto()
    STRING_TYPE = auto()
    BOOL = auto()
    CHAR = auto()
    VOID = auto()
    DICT = auto()

    # Declaration keywords
    CONST = auto()
    FUNCTION = auto()
    CLASS = auto()
    EXTENDS = auto()
    IMPLEMENTS = auto()
    INTERFACE = auto()
    PUBLIC = auto()
    PRIVATE = auto()
    STATIC = auto()
    CONSTRUCTOR = auto()
    OBJECT = auto()
    ENUM = auto()

    # Control flow keywords
    IF = auto()
    ELSE = auto()
    SWITCH = auto()
    CASE = auto()
    DEFAULT = auto()
    BREAK = auto()
    CONTINUE = auto()
    WHILE = auto()
    DO = auto()
    FOR = auto()
    OF = auto()
    RETURN = auto()

    # Expression keywords
    NEW = auto()
    THIS = auto()
    SUPER = auto()

    # Module system keywords
    IMPORT = auto()
    EXPORT = auto()
    FROM = auto()

    # ========================================================================
    # Operators
    # ========================================================================

    # Arithmetic
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    MULTIPLY = auto()               # *
    DIVIDE = auto()                 # /
    MODULO = auto()                 # %
    INCREMENT = auto()              # ++
    DECREMENT = auto()              # --

    # Assignment
    ASSIGN = auto()                 # =
    PLUS_ASSIGN = auto()            # +=
    MINUS_ASSIGN = auto()           # -=
    MULTIPLY_ASSIGN = auto()        # *=
    DIVIDE_ASSIGN = auto()          # /=
    MODULO_ASSIGN = auto()          # %=

    # Comparison
    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=
    LESS_THAN = auto()              # <
    GREATER_THAN = auto()           # >
    LESS_EQUAL = auto()             # <=
    GREATER_EQUAL = auto()          # >=

    # Logical
    LOGICAL_AND = auto()            # &&
    LOGICAL_OR = auto()             # ||
    LOGICAL_NOT = auto()            # !

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACKET = auto()           # [
    RIGHT_BRACKET = auto()          # ]
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }

    SEMICOLON = auto()              # ;
    COMMA = auto()                  # ,
    DOT = auto()                    # .
    COLON = auto()                  # :
    FAT_ARROW = auto()              # =>

    # ========================================================================
    # Error and Recovery Tokens
    # ========================================================================
    UNTERMINATED_STRING = auto()    # "abc<newline>
    UNTERMINATED_CHAR = auto()      # 'a<newline>
    INVALID_NUMBER = auto()         # 12. or 1.2.3


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Lumen language.

    Contains the token type, lexeme (raw text), semantic value,
    and source location.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # Parsed value (int for INTEGER, str for STRING, ...)
    location: SourceLocation

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    @property
    def end_location(self) -> SourceLocation:
        """Location just past the last character of the lexeme."""
        return self.location.advanced_by(self.lexeme)

    @property
    def is_literal(self) -> bool:
        """Check if this token is a literal value."""
        return self.type in LITERAL_TYPES

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.lexeme in KEYWORDS and KEYWORDS[self.lexeme] == self.type

    @property
    def is_operator(self) -> bool:
        """Check if this token is an operator or punctuation."""
        return self.lexeme in OPERATORS and OPERATORS[self.lexeme] == self.type

    @property
    def is_identifier(self) -> bool:
        """Check if this token is an identifier."""
        return self.type == TokenType.IDENTIFIER

    @property
    def is_error(self) -> bool:
        """Check if the lexer produced this token while recovering from an error."""
        return self.type in ERROR_TYPES

    @property
    def category(self) -> "TokenCategory":
        return category_of(self.type)


LITERAL_TYPES = frozenset({
    TokenType.INTEGER, TokenType.FLOAT, TokenType.STRING,
    TokenType.CHARACTER, TokenType.TRUE, TokenType.FALSE,
    TokenType.UNTERMINATED_STRING, TokenType.UNTERMINATED_CHAR,
    TokenType.INVALID_NUMBER,
})

ERROR_TYPES = frozenset({
    TokenType.UNTERMINATED_STRING,
    TokenType.UNTERMINATED_CHAR,
    TokenType.INVALID_NUMBER,
})

# Type keywords usable in type annotations
PRIMITIVE_TYPES = frozenset({
    TokenType.INT, TokenType.FLOAT_TYPE, TokenType.STRING_TYPE,
    TokenType.BOOL, TokenType.CHAR, TokenType.VOID, TokenType.DICT,
})

KEYWORDS = {
    # Types
    "int": TokenType.INT,
    "float": TokenType.FLOAT_TYPE,
    "string": TokenType.STRING_TYPE,
    "bool": TokenType.BOOL,
    "char": TokenType.CHAR,
    "void": TokenType.VOID,
    "dict": TokenType.DICT,

    # Declarations
    "const": TokenType.CONST,
    "function": TokenType.FUNCTION,
    "class": TokenType.CLASS,
    "extends": TokenType.EXTENDS,
    "implements": TokenType.IMPLEMENTS,
    "interface": TokenType.INTERFACE,
    "public": TokenType.PUBLIC,
    "private": TokenType.PRIVATE,
    "static": TokenType.STATIC,
    "constructor": TokenType.CONSTRUCTOR,
    "object": TokenType.OBJECT,
    "enum": TokenType.ENUM,

    # Control flow
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "switch": TokenType.SWITCH,
    "case": TokenType.CASE,
    "default": TokenType.DEFAULT,
    "break": TokenType.BREAK,
    "continue": TokenType.CONTINUE,
    "while": TokenType.WHILE,
    "do": TokenType.DO,
    "for": TokenType.FOR,
    "of": TokenType.OF,
    "return": TokenType.RETURN,

    # Expressions
    "new": TokenType.NEW,
    "this": TokenType.THIS,
    "super": TokenType.SUPER,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,

    # Module system
    "import": TokenType.IMPORT,
    "export": TokenType.EXPORT,
    "from": TokenType.FROM,
}

# Longest lexemes are tried first by the lexer
OPERATORS = {
    # Arithmetic
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
    "++": TokenType.INCREMENT,
    "--": TokenType.DECREMENT,

    # Assignment
    "=": TokenType.ASSIGN,
    "+=": TokenType.PLUS_ASSIGN,
    "-=": TokenType.MINUS_ASSIGN,
    "*=": TokenType.MULTIPLY_ASSIGN,
    "/=": TokenType.DIVIDE_ASSIGN,
    "%=": TokenType.MODULO_ASSIGN,

    # Comparison
    "==": TokenType.EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "<": TokenType.LESS_THAN,
    ">": TokenType.GREATER_THAN,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,

    # Logical
    "&&": TokenType.LOGICAL_AND,
    "||": TokenType.LOGICAL_OR,
    "!": TokenType.LOGICAL_NOT,

    # Punctuation
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "[": TokenType.LEFT_BRACKET,
    "]": TokenType.RIGHT_BRACKET,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
    "=>": TokenType.FAT_ARROW,
}

MAX_OPERATOR_LENGTH = max(len(op) for op in OPERATORS)

# Display form of each token type, used in diagnostics
TOKEN_DISPLAY = {token_type: f"'{text}'" for text, token_type in {**KEYWORDS, **OPERATORS}.items()}
TOKEN_DISPLAY.update({
    TokenType.EOF: "end of input",
    TokenType.IDENTIFIER: "identifier",
    TokenType.INTEGER: "integer literal",
    TokenType.FLOAT: "float literal",
    TokenType.STRING: "string literal",
    TokenType.CHARACTER: "character literal",
    TokenType.UNTERMINATED_STRING: "string literal",
    TokenType.UNTERMINATED_CHAR: "character literal",
    TokenType.INVALID_NUMBER: "numeric literal",
})


def describe(token_type: TokenType) -> str:
    """Human readable name of a token type for error messages."""
    return TOKEN_DISPLAY.get(token_type, token_type.name)


class TokenCategory(Enum):
    """Coarse classification of token types."""
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    LITERAL = "literal"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    EOF = "eof"


_PUNCTUATION_TYPES = frozenset({
    TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACKET,
    TokenType.RIGHT_BRACKET, TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
    TokenType.SEMICOLON, TokenType.COMMA, TokenType.DOT, TokenType.COLON,
})

_KEYWORD_TYPES = frozenset(KEYWORDS.values()) - {TokenType.TRUE, TokenType.FALSE}


def category_of(token_type: TokenType) -> TokenCategory:
    """Return the category a token type belongs to."""
    if token_type == TokenType.EOF:
        return TokenCategory.EOF
    if token_type == TokenType.IDENTIFIER:
        return TokenCategory.IDENTIFIER
    if token_type in LITERAL_TYPES:
        return TokenCategory.LITERAL
    if token_type in _KEYWORD_TYPES:
        return TokenCategory.KEYWORD
    if token_type in _PUNCTUATION_TYPES:
        return TokenCategory.PUNCTUATION
    return TokenCategory.OPERATOR
