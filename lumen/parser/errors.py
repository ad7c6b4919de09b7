"""
Error handling for the Lumen parser.

Syntax errors are raised as ``ParseError`` inside the parser, recorded in
the shared DiagnosticCollector by the statement and declaration loops,
and followed by panic-mode synchronization.
"""

from typing import List, Optional, Sequence, Union

from ..diagnostics import Diagnostic, DiagnosticKind, DiagnosticSeverity, SourceLocation
from ..lexer.errors import ErrorRecovery
from ..lexer.tokens import Token, TokenType, describe


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Sequence[str] = ()
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            severity=DiagnosticSeverity.ERROR,
            message=message,
            location=location,
            kind=DiagnosticKind.SYNTAX,
            code=code,
            help_text=help_text,
            suggestions=tuple(suggestions)
        )
        self.token = token

    def __str__(self) -> str:
        return str(self.diagnostic)


class SyntaxErrorRecovery:
    """
    Utilities for error recovery in the parser.

    Provides the synchronization sets used by panic-mode recovery and the
    suggestions attached to syntax errors.
    """

    # Keywords that begin a statement; recovery stops before them
    STATEMENT_STARTS = frozenset({
        TokenType.IF,
        TokenType.SWITCH,
        TokenType.WHILE,
        TokenType.DO,
        TokenType.FOR,
        TokenType.RETURN,
        TokenType.BREAK,
        TokenType.CONTINUE,
        TokenType.CONST,
        TokenType.CASE,
        TokenType.DEFAULT,
    })

    # Keywords that begin a top-level declaration or class member
    DECLARATION_STARTS = frozenset({
        TokenType.IMPORT,
        TokenType.EXPORT,
        TokenType.CONST,
        TokenType.FUNCTION,
        TokenType.CLASS,
        TokenType.INTERFACE,
        TokenType.OBJECT,
        TokenType.ENUM,
        TokenType.PUBLIC,
        TokenType.PRIVATE,
        TokenType.STATIC,
        TokenType.CONSTRUCTOR,
        TokenType.INT,
        TokenType.FLOAT_TYPE,
        TokenType.STRING_TYPE,
        TokenType.BOOL,
        TokenType.CHAR,
        TokenType.VOID,
        TokenType.DICT,
    })

    SYNC_BEFORE = STATEMENT_STARTS | DECLARATION_STARTS | {TokenType.RIGHT_BRACE}

    @staticmethod
    def suggest_missing_token(expected: TokenType) -> List[str]:
        """Suggest what token might be missing."""
        token_suggestions = {
            TokenType.SEMICOLON: ["Add a semicolon ';' to end the statement"],
            TokenType.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
            TokenType.RIGHT_BRACKET: ["Add a closing bracket ']'"],
            TokenType.RIGHT_BRACE: ["Add a closing brace '}'"],
            TokenType.LEFT_BRACE: ["Add an opening brace '{' to start a block"],
            TokenType.COLON: ["Add a colon ':'"],
            TokenType.ASSIGN: ["Add an initializer with '='"],
            TokenType.FROM: ["Imports name their module with 'from \"path\"'"],
        }
        return token_suggestions.get(expected, [])

    @staticmethod
    def suggest_keyword_for(found: Token) -> List[str]:
        """Suggest a keyword when an identifier looks like a misspelled one."""
        if found.type != TokenType.IDENTIFIER:
            return []
        return [f"Did you mean '{keyword}'?"
                for keyword in ErrorRecovery.suggest_keyword_corrections(found.lexeme)]


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected token not found",
    "P003": "Invalid expression",
    "P004": "Invalid assignment target",
    "P005": "Malformed lambda",
    "P006": "Misplaced super call",
    "P007": "Interface method with a body",
    "P008": "Implicit switch fallthrough",
}


def _found(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return f"'{token.lexeme}'"


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: Union[TokenType, str], found: Token) -> ParseError:
    """Create an error for a token that cannot appear here."""
    expected_str = describe(expected) if isinstance(expected, TokenType) else expected
    suggestions = SyntaxErrorRecovery.suggest_keyword_for(found)

    return ParseError(
        message=f"Expected {expected_str}, found {_found(found)}",
        location=found.location,
        token=found,
        code="P001",
        help_text=f"The parser expected {expected_str} at this position.",
        suggestions=suggestions
    )


def create_missing_token_error(expected: TokenType, found: Token) -> ParseError:
    """Create an error for a required token that is absent."""
    expected_str = describe(expected)

    return ParseError(
        message=f"expected {expected_str}",
        location=found.location,
        token=found,
        code="P002",
        help_text=f"Found {_found(found)} where {expected_str} was required.",
        suggestions=SyntaxErrorRecovery.suggest_missing_token(expected)
    )


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a token that cannot start an expression."""
    return ParseError(
        message=f"Expected expression, found {_found(found)}",
        location=found.location,
        token=found,
        code="P003",
        help_text="Expressions start with a literal, a name, '(', '[', '{', 'new', 'this' or a prefix operator.",
        suggestions=SyntaxErrorRecovery.suggest_keyword_for(found)
    )


def create_invalid_assignment_error(operator: Token) -> ParseError:
    """Create an error for assigning to something that is not a place."""
    return ParseError(
        message=f"Invalid assignment target before '{operator.lexeme}'",
        location=operator.location,
        token=operator,
        code="P004",
        help_text="Only variables, indexed elements and members can be assigned.",
        suggestions=["Use '==' to compare values"] if operator.type == TokenType.ASSIGN else []
    )


def create_malformed_lambda_error(location: SourceLocation, token: Optional[Token] = None) -> ParseError:
    """Create an error for a '(' that starts neither a lambda nor a grouping."""
    return ParseError(
        message="Expected '=>' after lambda parameters; "
                "the parenthesized form is neither a lambda nor an expression",
        location=location,
        token=token,
        code="P005",
        help_text="Lambdas are written '(type name, ...) => body'.",
        suggestions=["Add '=>' followed by the lambda body"]
    )


def create_misplaced_super_error(token: Token) -> ParseError:
    """Create an error for a super(...) call outside a constructor's first statement."""
    return ParseError(
        message="'super(...)' is only allowed as the first statement of a constructor",
        location=token.location,
        token=token,
        code="P006",
        help_text="Use 'super.name' to reach members of the base class.",
        suggestions=["Move the call to the start of the constructor body"]
    )


def create_interface_body_error(token: Token, method_name: str) -> ParseError:
    """Create an error for an interface method that has a body."""
    return ParseError(
        message=f"Interface method '{method_name}' cannot have a body",
        location=token.location,
        token=token,
        code="P007",
        help_text="Interfaces declare signatures only; implement the method in a class.",
        suggestions=["End the signature with ';'"]
    )
