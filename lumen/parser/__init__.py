"""
Lumen Parser Package

Recursive-descent parser with Pratt expression parsing for the Lumen
scripting language. Produces ASTs with full source spans.

Key Features:
- Top-down operator precedence (Pratt parsing)
- Speculative lambda parsing with a single rewind point
- Panic-mode error recovery and synchronization
- Source printer for round-tripping trees back to text
"""

from .ast_nodes import *
from .parser import Parser, Precedence, parse_string, parse_file
from .printer import SourcePrinter, unparse
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "Precedence", "parse_string", "parse_file",

    # Printer
    "SourcePrinter", "unparse",

    # AST infrastructure
    "ASTNode", "ASTNodeType", "ASTVisitor", "SourceSpan", "AccessLevel", "walk",
    "Statement", "Declaration", "Expression", "TypeRef",

    # Declarations
    "Program", "VariableDecl", "ConstDecl", "FunctionDecl", "Parameter",
    "ClassDecl", "FieldMember", "MethodMember", "ConstructorDecl",
    "InterfaceDecl", "MethodSignature", "ObjectDecl", "ObjectField",
    "ImportDecl", "ExportDecl", "EnumDecl",

    # Statements
    "ExpressionStatement", "Block", "If", "Switch", "SwitchCase", "While",
    "DoWhile", "For", "ForEach", "Return", "Break", "Continue",

    # Expressions
    "Literal", "Identifier", "This", "Super", "Binary", "Unary", "Call",
    "Index", "MemberAccess", "Assignment", "ArrayLiteral", "Lambda", "New",
    "DictLiteral", "DictEntry",

    # Types
    "PrimitiveType", "NamedType", "ArrayType",

    # Error handling
    "ParseError",
]
