"""
Lumen Front-End Package

Lexer and parser for the Lumen scripting language, a small C-family
language with classes, interfaces, objects and arrow functions.

Architecture:
    lumen/
    ├── diagnostics/     # Positioned errors and warnings, shared collector
    ├── lexer/           # Tokenization and lexical analysis
    ├── parser/          # Syntax analysis, AST and source printer
    └── config.py        # Options for a parse run

Usage:
    >>> import lumen
    >>> result = lumen.parse("int count = 10;")
    >>> result.ok
    True
"""

import logging
from typing import List, NamedTuple, Optional

__version__ = "0.1.0"
__license__ = "MIT"

from .config import FrontendOptions
from .diagnostics import Diagnostic, DiagnosticCollector, DiagnosticKind, DiagnosticSeverity, SourceLocation
from .lexer import Lexer, Token, TokenType
from .lexer.errors import ERROR_CODES
from .parser import Parser, Program, unparse
from .parser.errors import PARSER_ERROR_CODES

logger = logging.getLogger(__name__)


class ParseResult(NamedTuple):
    """Outcome of ``parse``: the tree (None for empty input) and every diagnostic, ordered by position."""
    program: Optional[Program]
    diagnostics: List[Diagnostic]

    @property
    def empty_input(self) -> bool:
        return self.program is None

    @property
    def ok(self) -> bool:
        """True when a program was produced without error diagnostics."""
        return self.program is not None and not any(d.is_error for d in self.diagnostics)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    def format_diagnostics(self) -> str:
        return "\n".join(str(d) for d in self.diagnostics)


def parse(source: Optional[str], filename: Optional[str] = None,
          options: Optional[FrontendOptions] = None) -> ParseResult:
    """
    Lex and parse a source string.

    Args:
        source: Lumen source text; None or "" is reported as empty input
        filename: Name used in diagnostics; defaults to ``options.filename``
        options: Front-end settings; defaults apply when omitted

    Returns:
        ParseResult with the Program and all lexical and syntax diagnostics
    """
    if options is None:
        options = FrontendOptions()
    if filename is None:
        filename = options.filename

    if not source:
        logger.debug("%s: empty input", filename)
        return ParseResult(None, [])

    collector = DiagnosticCollector(options.max_diagnostics)
    tokens = Lexer(source, filename, collector,
                   warn_on_unknown_escape=options.warn_on_unknown_escape).tokenize()
    program = Parser(tokens, collector,
                     warn_on_fallthrough=options.warn_on_fallthrough).parse()

    return ParseResult(program, collector.get_all())


def parse_file(path: str, options: Optional[FrontendOptions] = None) -> ParseResult:
    """
    Read a UTF-8 source file and parse it.

    Raises:
        IOError: If file cannot be read
    """
    with open(path, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse(source, path, options)


def explain(code: str) -> str:
    """
    Short description of a diagnostic code.

    >>> explain("P005")
    'Malformed lambda'

    Raises:
        ValueError: If ``code`` is not a lexer or parser code
    """
    try:
        return {**ERROR_CODES, **PARSER_ERROR_CODES}[code]
    except KeyError:
        raise ValueError(f"Unknown diagnostic code: {code!r}") from None


def tokenize(source: str, filename: str = "<input>",
             collector: Optional[DiagnosticCollector] = None) -> List[Token]:
    """Tokenize ``source``; lexical errors go to ``collector`` when given."""
    return Lexer(source, filename, collector).tokenize()


__all__ = [
    "parse",
    "parse_file",
    "tokenize",
    "explain",
    "unparse",
    "ParseResult",
    "FrontendOptions",
    "Program",
    "Token",
    "TokenType",
    "Lexer",
    "Parser",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "DiagnosticSeverity",
    "SourceLocation",
    "__version__",
]
