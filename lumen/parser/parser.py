"""
Lumen Pratt Parser Implementation

Recursive descent for declarations and statements, top-down operator
precedence (Pratt) parsing for expressions. Syntax errors are recorded
in the shared DiagnosticCollector and parsing resumes at the next
synchronization point, so ``parse`` always returns a Program.
"""

import dataclasses
import logging
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Union

from ..diagnostics import DiagnosticCollector, DiagnosticKind, SourceLocation
from ..lexer.tokens import Token, TokenType, PRIMITIVE_TYPES, LITERAL_TYPES
from .ast_nodes import (
    AccessLevel, ArrayLiteral, ArrayType, Assignment, Binary, Block, Break, Call,
    ClassDecl, ConstDecl, ConstructorDecl, Continue, Declaration, DictEntry,
    DictLiteral, DoWhile, EnumDecl, ExportDecl, Expression, ExpressionStatement,
    FieldMember, For, ForEach, FunctionDecl, Identifier, If, ImportDecl, Index, InterfaceDecl, Lambda,
    Literal, MemberAccess, MethodMember, MethodSignature, NamedType, New,
    ObjectDecl, ObjectField, Parameter, PrimitiveType, Program, Return,
    SourceSpan, Statement, Super, Switch, SwitchCase, This, TypeRef, Unary,
    VariableDecl, While,
)
from .errors import (
    ParseError, SyntaxErrorRecovery, create_unexpected_token_error,
    create_missing_token_error, create_invalid_expression_error,
    create_invalid_assignment_error, create_malformed_lambda_error,
    create_misplaced_super_error, create_interface_body_error,
)

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    """Operator precedence levels for Pratt parsing."""
    NONE = 0
    ASSIGNMENT = 1      # =, +=, -=, *=, /=, %=
    OR = 2              # ||
    AND = 3             # &&
    EQUALITY = 4        # ==, !=
    COMPARISON = 5      # <, >, <=, >=
    TERM = 6            # +, -
    FACTOR = 7          # *, /, %
    UNARY = 8           # !, -, ++, -- (prefix)
    CALL = 9            # calls, indexing, member access, postfix ++ --
    PRIMARY = 10


LITERAL_KINDS = {
    TokenType.INTEGER: "int",
    TokenType.FLOAT: "float",
    TokenType.STRING: "string",
    TokenType.CHARACTER: "char",
    TokenType.TRUE: "bool",
    TokenType.FALSE: "bool",
    TokenType.UNTERMINATED_STRING: "string",
    TokenType.UNTERMINATED_CHAR: "char",
}

ASSIGNABLE = (Identifier, Index, MemberAccess)

DECLARATION_KEYWORDS = frozenset({
    TokenType.IMPORT, TokenType.EXPORT, TokenType.CONST, TokenType.OBJECT,
    TokenType.CLASS, TokenType.INTERFACE, TokenType.FUNCTION, TokenType.ENUM,
})

TERMINATING_STATEMENTS = (Break, Return, Continue)

LINE_CONSUMING = frozenset({TokenType.UNTERMINATED_STRING, TokenType.UNTERMINATED_CHAR})


class Parser:
    """
    Lumen parser.

    Consumes the lexer's token list and produces a Program. Every syntax
    error lands in ``collector``; the parser never raises to its caller.
    """

    def __init__(self, tokens: List[Token],
                 collector: Optional[DiagnosticCollector] = None,
                 warn_on_fallthrough: bool = False):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: List of tokens from the lexer, normally ending with EOF
            collector: Diagnostic sink shared with the lexer
            warn_on_fallthrough: Warn when a non-empty switch case runs into the next one
        """
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            location = self.tokens[-1].end_location if self.tokens else SourceLocation("<unknown>", 1, 1, 0)
            self.tokens.append(Token(TokenType.EOF, "", None, location))
        self.current = 0
        self.collector = collector if collector is not None else DiagnosticCollector()
        self.warn_on_fallthrough = warn_on_fallthrough
        self.error_count = 0

        # Initialize parsing tables
        self._init_parsing_tables()

    def _init_parsing_tables(self):
        """Initialize operator precedence and parsing function tables."""

        # Prefix parsing functions (for tokens that can start expressions)
        self.prefix_parsers: Dict[TokenType, Callable[[], Expression]] = {
            TokenType.IDENTIFIER: self._parse_identifier,
            TokenType.THIS: self._parse_this,
            TokenType.SUPER: self._parse_super,
            TokenType.NEW: self._parse_new,

            # Unary operators
            TokenType.LOGICAL_NOT: self._parse_unary,
            TokenType.MINUS: self._parse_unary,
            TokenType.INCREMENT: self._parse_unary,
            TokenType.DECREMENT: self._parse_unary,

            # Grouping, lambdas, array and dict literals
            TokenType.LEFT_PAREN: self._parse_parenthesized,
            TokenType.LEFT_BRACKET: self._parse_array_literal,
            TokenType.LEFT_BRACE: self._parse_dict_literal,
        }
        for literal_type in LITERAL_TYPES:
            self.prefix_parsers[literal_type] = self._parse_literal

        # Infix parsing functions (binary operators and postfix operations)
        self.infix_parsers: Dict[TokenType, Callable[[Expression], Expression]] = {
            TokenType.ASSIGN: self._parse_assignment,
            TokenType.PLUS_ASSIGN: self._parse_assignment,
            TokenType.MINUS_ASSIGN: self._parse_assignment,
            TokenType.MULTIPLY_ASSIGN: self._parse_assignment,
            TokenType.DIVIDE_ASSIGN: self._parse_assignment,
            TokenType.MODULO_ASSIGN: self._parse_assignment,

            TokenType.LOGICAL_OR: self._parse_binary,
            TokenType.LOGICAL_AND: self._parse_binary,
            TokenType.EQUAL: self._parse_binary,
            TokenType.NOT_EQUAL: self._parse_binary,
            TokenType.LESS_THAN: self._parse_binary,
            TokenType.GREATER_THAN: self._parse_binary,
            TokenType.LESS_EQUAL: self._parse_binary,
            TokenType.GREATER_EQUAL: self._parse_binary,
            TokenType.PLUS: self._parse_binary,
            TokenType.MINUS: self._parse_binary,
            TokenType.MULTIPLY: self._parse_binary,
            TokenType.DIVIDE: self._parse_binary,
            TokenType.MODULO: self._parse_binary,

            TokenType.LEFT_PAREN: self._parse_call,
            TokenType.LEFT_BRACKET: self._parse_index,
            TokenType.DOT: self._parse_member_access,
            TokenType.INCREMENT: self._parse_postfix,
            TokenType.DECREMENT: self._parse_postfix,
        }

        # Operator precedence table
        self.precedences: Dict[TokenType, Precedence] = {
            # Assignment (right associative)
            TokenType.ASSIGN: Precedence.ASSIGNMENT,
            TokenType.PLUS_ASSIGN: Precedence.ASSIGNMENT,
            TokenType.MINUS_ASSIGN: Precedence.ASSIGNMENT,
            TokenType.MULTIPLY_ASSIGN: Precedence.ASSIGNMENT,
            TokenType.DIVIDE_ASSIGN: Precedence.ASSIGNMENT,
            TokenType.MODULO_ASSIGN: Precedence.ASSIGNMENT,

            TokenType.LOGICAL_OR: Precedence.OR,
            TokenType.LOGICAL_AND: Precedence.AND,

            TokenType.EQUAL: Precedence.EQUALITY,
            TokenType.NOT_EQUAL: Precedence.EQUALITY,

            TokenType.LESS_THAN: Precedence.COMPARISON,
            TokenType.GREATER_THAN: Precedence.COMPARISON,
            TokenType.LESS_EQUAL: Precedence.COMPARISON,
            TokenType.GREATER_EQUAL: Precedence.COMPARISON,

            TokenType.PLUS: Precedence.TERM,
            TokenType.MINUS: Precedence.TERM,

            TokenType.MULTIPLY: Precedence.FACTOR,
            TokenType.DIVIDE: Precedence.FACTOR,
            TokenType.MODULO: Precedence.FACTOR,

            # Postfix operations
            TokenType.LEFT_PAREN: Precedence.CALL,
            TokenType.LEFT_BRACKET: Precedence.CALL,
            TokenType.DOT: Precedence.CALL,
            TokenType.INCREMENT: Precedence.CALL,
            TokenType.DECREMENT: Precedence.CALL,
        }

    def parse(self) -> Program:
        """
        Parse the token stream into an AST.

        Returns:
            Program AST node representing the entire source unit
        """
        start = self._peek()
        declarations = []

        while not self._is_at_end():
            token = self._peek()

            if token.type in DECLARATION_KEYWORDS or self._is_type_start():
                item_start = self.current
                try:
                    declarations.append(self._parse_declaration())
                except ParseError as e:
                    self._error(e)
                    self._synchronize(item_start)
            elif token.type in SyntaxErrorRecovery.STATEMENT_STARTS or token.type == TokenType.LEFT_BRACE:
                # Statements are only valid inside function bodies
                self._error(create_unexpected_token_error("a declaration", token))
                self._parse_statement_recovering()
            else:
                self._skip_stray_tokens()

        program = Program(declarations, SourceSpan(start.location, self._peek().location))

        logger.debug("%s: parsed %d declarations, %d syntax errors",
                     start.location.filename, len(declarations), self.error_count)
        return program

    def _skip_stray_tokens(self):
        """Report a token that cannot start a declaration and skip to one that can."""
        self._error(create_unexpected_token_error("a declaration", self._peek()))
        self._advance()
        while not self._is_at_end():
            token_type = self._peek().type
            if (token_type in DECLARATION_KEYWORDS or self._is_type_start()
                    or token_type in SyntaxErrorRecovery.STATEMENT_STARTS
                    or token_type == TokenType.LEFT_BRACE):
                break
            self._advance()

    # ========================================================================
    # Declarations
    # ========================================================================

    def _parse_declaration(self) -> Declaration:
        """Parse a top-level declaration."""
        token_type = self._peek().type

        if token_type == TokenType.IMPORT:
            return self._parse_import()
        elif token_type == TokenType.EXPORT:
            return self._parse_export()
        elif token_type == TokenType.CONST:
            return self._parse_const_declaration()
        elif token_type == TokenType.OBJECT:
            return self._parse_object()
        elif token_type == TokenType.CLASS:
            return self._parse_class()
        elif token_type == TokenType.INTERFACE:
            return self._parse_interface()
        elif token_type == TokenType.FUNCTION:
            return self._parse_function()
        elif token_type == TokenType.ENUM:
            return self._parse_enum()
        elif self._is_type_start():
            return self._parse_variable_or_function()

        raise create_unexpected_token_error("a declaration", self._peek())

    def _parse_import(self) -> ImportDecl:
        """Parse ``import { a, b } from "path";`` or ``import name from "path";``."""
        start_token = self._consume(TokenType.IMPORT)

        names = []
        default_binding = None
        if self._match(TokenType.LEFT_BRACE):
            names = self._parse_name_list()
            self._consume(TokenType.RIGHT_BRACE)
        else:
            default_binding = self._consume(TokenType.IDENTIFIER).lexeme

        self._consume(TokenType.FROM)
        path_token = self._peek()
        if path_token.type not in (TokenType.STRING, TokenType.UNTERMINATED_STRING):
            raise create_unexpected_token_error("a module path string", path_token)
        self._advance()
        self._consume(TokenType.SEMICOLON)

        return ImportDecl(names, path_token.value, default_binding, self._span_from(start_token))

    def _parse_export(self) -> ExportDecl:
        """Parse ``export <declaration>`` or ``export { a, b };``."""
        start_token = self._consume(TokenType.EXPORT)

        if self._match(TokenType.LEFT_BRACE):
            names = self._parse_name_list()
            self._consume(TokenType.RIGHT_BRACE)
            self._consume(TokenType.SEMICOLON)
            return ExportDecl(None, names, self._span_from(start_token))

        if self._check(TokenType.EXPORT):
            raise create_unexpected_token_error("a declaration", self._peek())

        declaration = self._parse_declaration()
        return ExportDecl(declaration, [], self._span_from(start_token))

    def _parse_name_list(self) -> List[str]:
        names = [self._consume(TokenType.IDENTIFIER).lexeme]
        while self._match(TokenType.COMMA):
            names.append(self._consume(TokenType.IDENTIFIER).lexeme)
        return names

    def _parse_const_declaration(self) -> ConstDecl:
        """Parse ``const type NAME = expr;``."""
        start_token = self._consume(TokenType.CONST)
        type_annotation = self._parse_type()
        name = self._consume(TokenType.IDENTIFIER).lexeme

        # Constants always need an initializer
        self._consume(TokenType.ASSIGN)
        initializer = self._parse_expression()
        self._consume(TokenType.SEMICOLON)

        return ConstDecl(type_annotation, name, initializer, self._span_from(start_token))

    def _parse_variable_or_function(self) -> Union[VariableDecl, FunctionDecl]:
        """Parse ``type name (= expr)?;`` or ``type name(params) body``."""
        start_token = self._peek()
        type_annotation = self._parse_type()
        name = self._consume(TokenType.IDENTIFIER).lexeme

        if self._check(TokenType.LEFT_PAREN):
            return self._finish_function(start_token, name, type_annotation)
        return self._finish_variable(start_token, type_annotation, name)

    def _parse_local_variable(self) -> VariableDecl:
        start_token = self._peek()
        type_annotation = self._parse_type()
        name = self._consume(TokenType.IDENTIFIER).lexeme
        return self._finish_variable(start_token, type_annotation, name)

    def _finish_variable(self, start_token: Token, type_annotation: TypeRef, name: str) -> VariableDecl:
        initializer = None
        if self._match(TokenType.ASSIGN):
            initializer = self._parse_expression()
        self._consume(TokenType.SEMICOLON)
        return VariableDecl(type_annotation, name, initializer, self._span_from(start_token))

    def _parse_function(self) -> FunctionDecl:
        """Parse ``function name(params) (: type)? body``."""
        start_token = self._consume(TokenType.FUNCTION)
        name = self._consume(TokenType.IDENTIFIER).lexeme

        self._consume(TokenType.LEFT_PAREN)
        params = self._parse_parameter_list()
        self._consume(TokenType.RIGHT_PAREN)

        return_type = None
        if self._match(TokenType.COLON):
            return_type = self._parse_type()

        body = self._parse_function_body()
        return FunctionDecl(name, params, return_type, body, self._span_from(start_token))

    def _finish_function(self, start_token: Token, name: str, return_type: TypeRef,
                         terminated: bool = True) -> FunctionDecl:
        self._consume(TokenType.LEFT_PAREN)
        params = self._parse_parameter_list()
        self._consume(TokenType.RIGHT_PAREN)

        body = self._parse_function_body(terminated)
        return FunctionDecl(name, params, return_type, body, self._span_from(start_token))

    def _parse_function_body(self, terminated: bool = True) -> Union[Block, Expression]:
        """Parse a block body or an arrow body ``=> expr;``."""
        if self._match(TokenType.FAT_ARROW):
            body = self._parse_expression()
            if terminated:
                self._consume(TokenType.SEMICOLON)
            return body
        return self._parse_block()

    def _parse_parameter_list(self) -> List[Parameter]:
        """Parse typed parameters up to (not including) the closing ')'."""
        params = []

        if not self._check(TokenType.RIGHT_PAREN):
            params.append(self._parse_parameter())
            while self._match(TokenType.COMMA):
                params.append(self._parse_parameter())

        return params

    def _parse_parameter(self) -> Parameter:
        start_token = self._peek()
        type_annotation = self._parse_type()
        name = self._consume(TokenType.IDENTIFIER).lexeme
        return Parameter(name, type_annotation, self._span_from(start_token))

    def _parse_class(self) -> ClassDecl:
        """Parse a class with access sections, fields, methods and a constructor."""
        start_token = self._consume(TokenType.CLASS)
        name = self._consume(TokenType.IDENTIFIER).lexeme

        base = None
        if self._match(TokenType.EXTENDS):
            base = self._consume(TokenType.IDENTIFIER).lexeme

        interfaces = []
        if self._match(TokenType.IMPLEMENTS):
            interfaces = self._parse_name_list()

        self._consume(TokenType.LEFT_BRACE)

        members = []
        constructor = None
        section = AccessLevel.PUBLIC

        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            item_start = self.current
            try:
                # Section tag: 'public:' or 'private:'
                if self._check_access() and self._check_at(1, TokenType.COLON):
                    section = self._access_of(self._advance())
                    self._advance()
                    continue

                member = self._parse_class_member(section)
                if not isinstance(member, ConstructorDecl):
                    members.append(member)
                elif constructor is None:
                    constructor = member
                else:
                    self._error(ParseError(
                        f"Class '{name}' already has a constructor",
                        member.span.start,
                        code="P001",
                        help_text="A class declares at most one constructor."
                    ))
            except ParseError as e:
                self._error(e)
                self._synchronize(item_start)

        complete = self._close_body()
        return ClassDecl(name, base, interfaces, members, constructor,
                         incomplete=not complete, span=self._span_from(start_token))

    def _parse_class_member(self, section: AccessLevel) -> Union[FieldMember, MethodMember, ConstructorDecl]:
        """Parse one member with optional per-member access and 'static'."""
        start_token = self._peek()
        access = section
        if self._check_access():
            access = self._access_of(self._advance())
        is_static = self._match(TokenType.STATIC)

        if self._check(TokenType.CONSTRUCTOR):
            if is_static:
                raise create_unexpected_token_error("a field or method after 'static'", self._peek())
            return self._parse_constructor(start_token, access)

        if self._check(TokenType.CONST):
            declaration = self._parse_const_declaration()
            return FieldMember(declaration, access, is_static, self._span_from(start_token))

        if not self._is_type_start():
            raise create_unexpected_token_error("a class member", self._peek())

        declaration = self._parse_variable_or_function()
        if isinstance(declaration, FunctionDecl):
            return MethodMember(declaration, access, is_static, self._span_from(start_token))
        return FieldMember(declaration, access, is_static, self._span_from(start_token))

    def _parse_constructor(self, start_token: Token, access: AccessLevel) -> ConstructorDecl:
        """Parse ``constructor(params) { super(args); ... }``."""
        self._consume(TokenType.CONSTRUCTOR)
        self._consume(TokenType.LEFT_PAREN)
        params = self._parse_parameter_list()
        self._consume(TokenType.RIGHT_PAREN)

        brace = self._consume(TokenType.LEFT_BRACE)

        # super(...) may only open the body
        super_args = None
        if self._check(TokenType.SUPER) and self._check_at(1, TokenType.LEFT_PAREN):
            self._advance()
            self._advance()
            super_args = self._parse_arguments()
            self._consume(TokenType.SEMICOLON)

        statements = self._parse_block_contents()
        self._close_body()
        body = Block(statements, self._span_from(brace))

        return ConstructorDecl(params, super_args, body, access, self._span_from(start_token))

    def _parse_interface(self) -> InterfaceDecl:
        """Parse an interface of method signatures."""
        start_token = self._consume(TokenType.INTERFACE)
        name = self._consume(TokenType.IDENTIFIER).lexeme
        self._consume(TokenType.LEFT_BRACE)

        methods = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            item_start = self.current
            try:
                methods.append(self._parse_method_signature())
            except ParseError as e:
                self._error(e)
                self._synchronize(item_start)

        complete = self._close_body()
        return InterfaceDecl(name, methods, incomplete=not complete,
                             span=self._span_from(start_token))

    def _parse_method_signature(self) -> MethodSignature:
        start_token = self._peek()
        return_type = self._parse_type()
        name = self._consume(TokenType.IDENTIFIER).lexeme

        self._consume(TokenType.LEFT_PAREN)
        params = self._parse_parameter_list()
        self._consume(TokenType.RIGHT_PAREN)

        if self._check(TokenType.LEFT_BRACE) or self._check(TokenType.FAT_ARROW):
            # Report once and skip the body so the next signature parses cleanly
            self._error(create_interface_body_error(self._peek(), name))
            self._parse_function_body()
        else:
            self._consume(TokenType.SEMICOLON)

        return MethodSignature(name, params, return_type, self._span_from(start_token))

    def _parse_object(self) -> ObjectDecl:
        """Parse ``object name = { key: value, type method() body, ... };``."""
        start_token = self._consume(TokenType.OBJECT)
        name = self._consume(TokenType.IDENTIFIER).lexeme
        self._consume(TokenType.ASSIGN)
        self._consume(TokenType.LEFT_BRACE)

        fields = []
        methods = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            item_start = self.current
            try:
                entry_token = self._peek()
                if entry_token.type == TokenType.IDENTIFIER and self._check_at(1, TokenType.COLON):
                    self._advance()
                    self._advance()
                    value = self._parse_expression()
                    fields.append(ObjectField(entry_token.lexeme, value, self._span_from(entry_token)))
                elif self._is_type_start():
                    return_type = self._parse_type()
                    method_name = self._consume(TokenType.IDENTIFIER).lexeme
                    methods.append(self._finish_function(entry_token, method_name, return_type,
                                                         terminated=False))
                else:
                    raise create_unexpected_token_error("an object field or method", entry_token)

                if not self._check(TokenType.RIGHT_BRACE):
                    self._consume(TokenType.COMMA)
            except ParseError as e:
                self._error(e)
                self._synchronize(item_start)

        complete = self._close_body()
        if complete:
            self._consume(TokenType.SEMICOLON)
        return ObjectDecl(name, fields, methods, incomplete=not complete,
                          span=self._span_from(start_token))

    def _parse_enum(self) -> EnumDecl:
        """Parse ``enum Name { A, B, C }``. A trailing comma is allowed."""
        start_token = self._consume(TokenType.ENUM)
        name = self._consume(TokenType.IDENTIFIER).lexeme
        self._consume(TokenType.LEFT_BRACE)

        variants = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            item_start = self.current
            try:
                variants.append(self._consume(TokenType.IDENTIFIER).lexeme)
                if not self._check(TokenType.RIGHT_BRACE):
                    self._consume(TokenType.COMMA)
            except ParseError as e:
                self._error(e)
                self._synchronize(item_start)

        complete = self._close_body()
        return EnumDecl(name, variants, incomplete=not complete,
                        span=self._span_from(start_token))

    # ========================================================================
    # Types
    # ========================================================================

    def _parse_type(self) -> TypeRef:
        """Parse a type: a primitive keyword or a name, followed by any number of '[]'."""
        start_token = self._peek()

        if start_token.type in PRIMITIVE_TYPES:
            self._advance()
            type_ref = PrimitiveType(start_token.lexeme, self._span_from(start_token))
        elif start_token.type == TokenType.IDENTIFIER:
            self._advance()
            type_ref = NamedType(start_token.lexeme, self._span_from(start_token))
        else:
            raise create_unexpected_token_error("a type", start_token)

        while self._check(TokenType.LEFT_BRACKET) and self._check_at(1, TokenType.RIGHT_BRACKET):
            self._advance()
            self._advance()
            type_ref = ArrayType(type_ref, self._span_from(start_token))

        return type_ref

    def _is_type_start(self) -> bool:
        token_type = self._peek().type
        return token_type in PRIMITIVE_TYPES or token_type == TokenType.IDENTIFIER

    def _is_local_declaration(self) -> bool:
        """A statement declares a local when it starts with a primitive type, 'Name name' or 'Name[]'."""
        token_type = self._peek().type
        if token_type in PRIMITIVE_TYPES:
            return True
        if token_type != TokenType.IDENTIFIER:
            return False
        if self._check_at(1, TokenType.IDENTIFIER):
            return True
        return self._check_at(1, TokenType.LEFT_BRACKET) and self._check_at(2, TokenType.RIGHT_BRACKET)

    # ========================================================================
    # Statements
    # ========================================================================

    def _parse_block(self) -> Block:
        """Parse a block statement."""
        start_token = self._consume(TokenType.LEFT_BRACE)
        statements = self._parse_block_contents()
        self._close_body()
        return Block(statements, self._span_from(start_token))

    def _parse_block_contents(self) -> List[Statement]:
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._parse_statement_recovering()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def _parse_statement_recovering(self) -> Optional[Statement]:
        """Parse a statement, recording any syntax error and synchronizing past it."""
        item_start = self.current
        try:
            return self._parse_statement()
        except ParseError as e:
            self._error(e)
            self._synchronize(item_start)
            return None

    def _parse_statement(self) -> Statement:
        """Parse a statement."""
        token_type = self._peek().type

        if token_type == TokenType.IF:
            return self._parse_if_statement()
        elif token_type == TokenType.SWITCH:
            return self._parse_switch_statement()
        elif token_type == TokenType.WHILE:
            return self._parse_while_statement()
        elif token_type == TokenType.DO:
            return self._parse_do_while_statement()
        elif token_type == TokenType.FOR:
            return self._parse_for_statement()
        elif token_type == TokenType.RETURN:
            return self._parse_return_statement()
        elif token_type == TokenType.BREAK:
            start_token = self._advance()
            self._consume(TokenType.SEMICOLON)
            return Break(self._span_from(start_token))
        elif token_type == TokenType.CONTINUE:
            start_token = self._advance()
            self._consume(TokenType.SEMICOLON)
            return Continue(self._span_from(start_token))
        elif token_type == TokenType.LEFT_BRACE:
            return self._parse_block()
        elif token_type == TokenType.CONST:
            return self._parse_const_declaration()
        elif self._is_local_declaration():
            return self._parse_local_variable()

        return self._parse_expression_statement()

    def _parse_expression_statement(self) -> ExpressionStatement:
        start_token = self._peek()
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON)
        return ExpressionStatement(expr, self._span_from(start_token))

    def _parse_if_statement(self) -> If:
        """Parse an if statement. 'else' binds to the nearest 'if'."""
        start_token = self._consume(TokenType.IF)
        self._consume(TokenType.LEFT_PAREN)
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)

        then_branch = self._parse_statement()

        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()

        return If(condition, then_branch, else_branch, self._span_from(start_token))

    def _parse_switch_statement(self) -> Switch:
        """Parse a switch. Cases fall through until an explicit 'break'."""
        start_token = self._consume(TokenType.SWITCH)
        self._consume(TokenType.LEFT_PAREN)
        discriminant = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)
        self._consume(TokenType.LEFT_BRACE)

        cases = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            item_start = self.current
            try:
                cases.append(self._parse_switch_case())
            except ParseError as e:
                self._error(e)
                self._synchronize(item_start)

        self._close_body()

        if self.warn_on_fallthrough:
            self._check_fallthrough(cases)

        return Switch(discriminant, cases, self._span_from(start_token))

    def _parse_switch_case(self) -> SwitchCase:
        start_token = self._peek()
        if self._match(TokenType.CASE):
            value = self._parse_expression()
        elif self._match(TokenType.DEFAULT):
            value = None
        else:
            raise create_unexpected_token_error("'case' or 'default'", start_token)
        self._consume(TokenType.COLON)

        statements = []
        while (not self._check(TokenType.CASE) and not self._check(TokenType.DEFAULT)
               and not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end()):
            stmt = self._parse_statement_recovering()
            if stmt is not None:
                statements.append(stmt)

        return SwitchCase(value, statements, self._span_from(start_token))

    def _check_fallthrough(self, cases: List[SwitchCase]):
        for case, following in zip(cases, cases[1:]):
            if case.statements and not isinstance(case.statements[-1], TERMINATING_STATEMENTS):
                self.collector.warning(
                    "Case falls through into the next case",
                    following.span.start,
                    DiagnosticKind.SYNTAX,
                    code="P008",
                    help_text="Execution continues into the next case without a 'break'.",
                    suggestions=["Add 'break;' if the fallthrough is not intended"]
                )

    def _parse_while_statement(self) -> While:
        start_token = self._consume(TokenType.WHILE)
        self._consume(TokenType.LEFT_PAREN)
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)
        body = self._parse_statement()
        return While(condition, body, self._span_from(start_token))

    def _parse_do_while_statement(self) -> DoWhile:
        start_token = self._consume(TokenType.DO)
        body = self._parse_statement()
        self._consume(TokenType.WHILE)
        self._consume(TokenType.LEFT_PAREN)
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)
        self._consume(TokenType.SEMICOLON)
        return DoWhile(body, condition, self._span_from(start_token))

    def _parse_for_statement(self) -> Union[For, ForEach]:
        """Parse a three-clause for loop or a for-of loop."""
        start_token = self._consume(TokenType.FOR)
        self._consume(TokenType.LEFT_PAREN)

        if self._is_for_each_header():
            element_type = None
            if not self._check_at(1, TokenType.OF):
                element_type = self._parse_type()
            name = self._consume(TokenType.IDENTIFIER).lexeme
            self._consume(TokenType.OF)
            iterable = self._parse_expression()
            self._consume(TokenType.RIGHT_PAREN)
            body = self._parse_statement()
            return ForEach(element_type, name, iterable, body, self._span_from(start_token))

        init = None
        if self._match(TokenType.SEMICOLON):
            pass
        elif self._check(TokenType.CONST):
            init = self._parse_const_declaration()
        elif self._is_local_declaration():
            init = self._parse_local_variable()
        else:
            init = self._parse_expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._parse_expression()
        self._consume(TokenType.SEMICOLON)

        update = None
        if not self._check(TokenType.RIGHT_PAREN):
            update = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)

        body = self._parse_statement()
        return For(init, condition, update, body, self._span_from(start_token))

    def _is_for_each_header(self) -> bool:
        """Look ahead for ``type? name of``."""
        if not self._is_type_start():
            return False
        if self._check(TokenType.IDENTIFIER) and self._check_at(1, TokenType.OF):
            return True
        offset = 1
        while self._check_at(offset, TokenType.LEFT_BRACKET) and self._check_at(offset + 1, TokenType.RIGHT_BRACKET):
            offset += 2
        return self._check_at(offset, TokenType.IDENTIFIER) and self._check_at(offset + 1, TokenType.OF)

    def _parse_return_statement(self) -> Return:
        """Parse a return statement."""
        start_token = self._consume(TokenType.RETURN)

        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._parse_expression()

        self._consume(TokenType.SEMICOLON)
        return Return(value, self._span_from(start_token))

    # ========================================================================
    # Expressions
    # ========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression using Pratt parsing."""
        return self._parse_precedence(Precedence.ASSIGNMENT)

    def _parse_precedence(self, precedence: Precedence) -> Expression:
        """Parse expression with given minimum precedence."""
        prefix_parser = self.prefix_parsers.get(self._peek().type)
        if prefix_parser is None:
            raise create_invalid_expression_error(self._peek())

        left = prefix_parser()

        while precedence <= self._get_precedence(self._peek().type):
            # An unterminated literal already swallowed the rest of its line
            if self._previous().type in LINE_CONSUMING:
                break
            left = self.infix_parsers[self._peek().type](left)

        return left

    def _get_precedence(self, token_type: TokenType) -> Precedence:
        """Get precedence for a token type."""
        return self.precedences.get(token_type, Precedence.NONE)

    # Prefix parsers (tokens that can start expressions)

    def _parse_literal(self) -> Literal:
        token = self._advance()
        if token.type == TokenType.INVALID_NUMBER:
            kind = "float" if isinstance(token.value, float) else "int"
        else:
            kind = LITERAL_KINDS[token.type]
        return Literal(token.value, kind, token.lexeme, self._span_from(token))

    def _parse_identifier(self) -> Expression:
        """Parse an identifier, or a single-parameter lambda ``x => body``."""
        token = self._advance()

        if self._match(TokenType.FAT_ARROW):
            param = Parameter(token.lexeme, None, self._span_of(token))
            body = self._parse_lambda_body()
            return Lambda([param], body, self._span_from(token))

        return Identifier(token.lexeme, self._span_from(token))

    def _parse_this(self) -> This:
        token = self._advance()
        return This(self._span_from(token))

    def _parse_super(self) -> Super:
        """'super' is only valid as ``super.member``."""
        token = self._advance()
        if self._check(TokenType.LEFT_PAREN):
            raise create_misplaced_super_error(token)
        if not self._check(TokenType.DOT):
            raise create_unexpected_token_error(TokenType.DOT, self._peek())
        return Super(self._span_from(token))

    def _parse_new(self) -> New:
        start_token = self._advance()
        class_name = self._consume(TokenType.IDENTIFIER).lexeme
        self._consume(TokenType.LEFT_PAREN)
        args = self._parse_arguments()
        return New(class_name, args, self._span_from(start_token))

    def _parse_unary(self) -> Unary:
        """Parse prefix operation."""
        operator_token = self._advance()
        operand = self._parse_precedence(Precedence.UNARY)
        return Unary(operator_token.lexeme, operand, True, self._span_from(operator_token))

    def _parse_parenthesized(self) -> Expression:
        """
        Parse a '(' that starts either a lambda or a grouped expression.

        The lambda form is tried first without reporting anything. If no
        '=>' follows a parameter list the parser rewinds and reparses the
        same tokens as a grouped expression.
        """
        start_token = self._peek()
        saved = self.current

        params = self._try_lambda_parameters()
        if params is not None and self._match(TokenType.FAT_ARROW):
            body = self._parse_lambda_body()
            return Lambda(params, body, self._span_from(start_token))

        missing_arrow = self._peek()
        arrow_index = self.current
        logger.debug("rewinding speculative lambda at %s", start_token.location)
        self.current = saved

        try:
            return self._parse_grouping()
        except ParseError:
            if params is None:
                raise
            # Resume after the parameter list, not inside it
            self.current = arrow_index
            raise create_malformed_lambda_error(missing_arrow.location, missing_arrow)

    def _try_lambda_parameters(self) -> Optional[List[Parameter]]:
        """Match ``( (type? name (, type? name)*)? )`` without reporting errors."""
        self._advance()  # Consume (
        params = []

        if self._match(TokenType.RIGHT_PAREN):
            return params

        while True:
            start_token = self._peek()
            if self._check(TokenType.IDENTIFIER) and (self._check_at(1, TokenType.COMMA)
                                                      or self._check_at(1, TokenType.RIGHT_PAREN)):
                self._advance()
                params.append(Parameter(start_token.lexeme, None, self._span_from(start_token)))
            elif self._is_type_start():
                type_annotation = self._parse_type()
                if not self._check(TokenType.IDENTIFIER):
                    return None
                name = self._advance().lexeme
                params.append(Parameter(name, type_annotation, self._span_from(start_token)))
            else:
                return None

            if self._match(TokenType.RIGHT_PAREN):
                return params
            if not self._match(TokenType.COMMA):
                return None

    def _parse_lambda_body(self) -> Union[Block, Expression]:
        if self._check(TokenType.LEFT_BRACE):
            return self._parse_block()
        return self._parse_expression()

    def _parse_grouping(self) -> Expression:
        """Parse parenthesized expression. The returned node's span includes the parentheses."""
        lparen = self._advance()
        expr = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN)
        return dataclasses.replace(expr, span=self._span_from(lparen))

    def _parse_dict_literal(self) -> DictLiteral:
        """Parse ``{key: value, ...}``."""
        start_token = self._advance()  # Consume {

        pairs = []
        if not self._check(TokenType.RIGHT_BRACE):
            pairs.append(self._parse_dict_entry())
            while self._match(TokenType.COMMA):
                pairs.append(self._parse_dict_entry())

        self._consume(TokenType.RIGHT_BRACE)
        return DictLiteral(pairs, self._span_from(start_token))

    def _parse_dict_entry(self) -> DictEntry:
        start_token = self._peek()
        key = self._parse_expression()
        self._consume(TokenType.COLON)
        value = self._parse_expression()
        return DictEntry(key, value, self._span_from(start_token))

    def _parse_array_literal(self) -> ArrayLiteral:
        """Parse ``[a, b, c]``."""
        start_token = self._advance()  # Consume [

        elements = []
        if not self._check(TokenType.RIGHT_BRACKET):
            elements.append(self._parse_expression())
            while self._match(TokenType.COMMA):
                elements.append(self._parse_expression())

        self._consume(TokenType.RIGHT_BRACKET)
        return ArrayLiteral(elements, self._span_from(start_token))

    # Infix parsers (binary operators and postfix operations)

    def _parse_binary(self, left: Expression) -> Binary:
        """Parse left-associative binary operation."""
        operator_token = self._advance()
        precedence = self._get_precedence(operator_token.type)
        right = self._parse_precedence(Precedence(precedence + 1))
        return Binary(operator_token.lexeme, left, right, self._span_after(left))

    def _parse_assignment(self, left: Expression) -> Assignment:
        """Parse assignment operation (right associative)."""
        operator_token = self._advance()
        if not isinstance(left, ASSIGNABLE):
            raise create_invalid_assignment_error(operator_token)

        value = self._parse_precedence(Precedence.ASSIGNMENT)
        return Assignment(left, operator_token.lexeme, value, self._span_after(left))

    def _parse_call(self, callee: Expression) -> Call:
        self._advance()  # Consume (
        args = self._parse_arguments()
        return Call(callee, args, self._span_after(callee))

    def _parse_arguments(self) -> List[Expression]:
        """Parse call arguments and the closing ')'."""
        args = []
        if not self._check(TokenType.RIGHT_PAREN):
            args.append(self._parse_expression())
            while self._match(TokenType.COMMA):
                args.append(self._parse_expression())

        self._consume(TokenType.RIGHT_PAREN)
        return args

    def _parse_index(self, target: Expression) -> Index:
        self._advance()  # Consume [
        index = self._parse_expression()
        self._consume(TokenType.RIGHT_BRACKET)
        return Index(target, index, self._span_after(target))

    def _parse_member_access(self, target: Expression) -> MemberAccess:
        self._advance()  # Consume .
        name = self._consume(TokenType.IDENTIFIER).lexeme
        return MemberAccess(target, name, self._span_after(target))

    def _parse_postfix(self, operand: Expression) -> Unary:
        operator_token = self._advance()
        return Unary(operator_token.lexeme, operand, False, self._span_after(operand))

    # ========================================================================
    # Utility methods
    # ========================================================================

    def _match(self, token_type: TokenType) -> bool:
        """Check if current token matches type and consume if so."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._peek().type == token_type

    def _check_at(self, offset: int, token_type: TokenType) -> bool:
        return self._peek(offset).type == token_type

    def _check_access(self) -> bool:
        return self._check(TokenType.PUBLIC) or self._check(TokenType.PRIVATE)

    @staticmethod
    def _access_of(token: Token) -> AccessLevel:
        return AccessLevel.PRIVATE if token.type == TokenType.PRIVATE else AccessLevel.PUBLIC

    def _advance(self) -> Token:
        """Consume and return current token."""
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> Token:
        """Return a token ahead of the cursor without consuming. Clamps to EOF."""
        return self.tokens[min(self.current + offset, len(self.tokens) - 1)]

    def _previous(self) -> Token:
        """Return previous token."""
        return self.tokens[self.current - 1] if self.current > 0 else self.tokens[0]

    def _after_error_token(self) -> bool:
        return self.current > 0 and self._previous().is_error

    def _consume(self, token_type: TokenType) -> Token:
        """
        Consume token of expected type or raise error.

        Directly after a literal the lexer already reported as broken, a
        missing token is assumed present and nothing is reported.
        """
        if self._check(token_type):
            return self._advance()

        if self._after_error_token():
            return self._previous()

        raise create_missing_token_error(token_type, self._peek())

    def _close_body(self) -> bool:
        """Consume the '}' closing a body. Returns False when input ended first."""
        if self._match(TokenType.RIGHT_BRACE):
            return True
        if not self._after_error_token():
            self._error(create_missing_token_error(TokenType.RIGHT_BRACE, self._peek()))
        return False

    def _span_from(self, start_token: Token) -> SourceSpan:
        return SourceSpan(start_token.location, self._previous().end_location)

    def _span_after(self, node: Expression) -> SourceSpan:
        return SourceSpan(node.span.start, self._previous().end_location)

    @staticmethod
    def _span_of(token: Token) -> SourceSpan:
        return SourceSpan(token.location, token.end_location)

    def _error(self, error: ParseError):
        self.error_count += 1
        self.collector.report(error.diagnostic)

    def _synchronize(self, item_start: int):
        """
        Discard tokens until just past a ';', before a '}' closing the
        current body, before a statement or declaration keyword, or EOF.

        A failed item that consumed tokens keeps a synchronizing token it
        stopped on; one that failed on its first token always skips at
        least that token unless it is '}' or EOF. Braces the item opened
        and left unclosed are skipped through to their '}'.
        """
        skipped_from = self.current
        depth = 0
        for token in self.tokens[item_start:self.current]:
            if token.type == TokenType.LEFT_BRACE:
                depth += 1
            elif token.type == TokenType.RIGHT_BRACE and depth > 0:
                depth -= 1

        if depth == 0 and self.current > item_start and self._peek().type in SyntaxErrorRecovery.SYNC_BEFORE:
            return

        while not self._is_at_end():
            token = self._peek()

            if token.type == TokenType.RIGHT_BRACE:
                if depth == 0:
                    break
                depth -= 1
            elif token.type == TokenType.LEFT_BRACE:
                depth += 1

            self._advance()

            if depth > 0:
                continue
            if token.type == TokenType.SEMICOLON:
                break
            if self._peek().type in SyntaxErrorRecovery.SYNC_BEFORE:
                break

        logger.debug("synchronized after syntax error: skipped %d tokens from %s",
                     self.current - skipped_from, self.tokens[skipped_from].location)


def parse_string(source: str, filename: str = "<string>",
                 collector: Optional[DiagnosticCollector] = None) -> Program:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        collector: Optional diagnostic sink; lexical and syntax errors land here

    Returns:
        Program AST
    """
    from ..lexer import tokenize_string

    if collector is None:
        collector = DiagnosticCollector()
    tokens = tokenize_string(source, filename, collector)
    return Parser(tokens, collector).parse()


def parse_file(filepath: str, collector: Optional[DiagnosticCollector] = None) -> Program:
    """
    Convenience function to parse a UTF-8 source file.

    Raises:
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath, collector)
