"""
Lumen Lexer Package

Lexical analyzer for the Lumen scripting language.

Key Features:
- Maximal-munch operator scanning
- Keyword table lookup for identifiers
- Best-effort recovery tokens after malformed literals
- Source location tracking on every token
"""

from .tokens import Token, TokenType, TokenCategory, SourceLocation
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "TokenCategory",
    "SourceLocation",
    "LexerError",
    "tokenize_string",
    "tokenize_file",
]
