"""
Abstract Syntax Tree node definitions for Lumen.

Every node is a dataclass carrying a ``span`` with its source extent.
Equality is structural and ignores spans, so two parses of equivalent
source compare equal. Nodes support the visitor pattern via ``accept``.
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Iterator, List, Optional, Union

from ..diagnostics.location import SourceLocation


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"

    # Declarations
    VARIABLE_DECL = "VariableDecl"
    CONST_DECL = "ConstDecl"
    FUNCTION_DECL = "FunctionDecl"
    CLASS_DECL = "ClassDecl"
    INTERFACE_DECL = "InterfaceDecl"
    OBJECT_DECL = "ObjectDecl"
    IMPORT_DECL = "ImportDecl"
    EXPORT_DECL = "ExportDecl"
    ENUM_DECL = "EnumDecl"

    # Declaration parts
    PARAMETER = "Parameter"
    FIELD_MEMBER = "FieldMember"
    METHOD_MEMBER = "MethodMember"
    CONSTRUCTOR = "Constructor"
    METHOD_SIGNATURE = "MethodSignature"
    OBJECT_FIELD = "ObjectField"
    DICT_ENTRY = "DictEntry"

    # Statements
    EXPRESSION_STMT = "ExpressionStatement"
    BLOCK = "Block"
    IF_STATEMENT = "If"
    SWITCH_STATEMENT = "Switch"
    SWITCH_CASE = "SwitchCase"
    WHILE_LOOP = "While"
    DO_WHILE_LOOP = "DoWhile"
    FOR_LOOP = "For"
    FOR_EACH_LOOP = "ForEach"
    RETURN_STATEMENT = "Return"
    BREAK_STATEMENT = "Break"
    CONTINUE_STATEMENT = "Continue"

    # Expressions
    LITERAL = "Literal"
    IDENTIFIER = "Identifier"
    THIS = "This"
    SUPER = "Super"
    BINARY_OP = "Binary"
    UNARY_OP = "Unary"
    CALL = "Call"
    INDEX_ACCESS = "Index"
    MEMBER_ACCESS = "MemberAccess"
    ASSIGNMENT = "Assignment"
    ARRAY_LITERAL = "ArrayLiteral"
    DICT_LITERAL = "DictLiteral"
    LAMBDA = "Lambda"
    NEW = "New"

    # Types
    PRIMITIVE_TYPE = "PrimitiveType"
    NAMED_TYPE = "NamedType"
    ARRAY_TYPE = "ArrayType"


class AccessLevel(Enum):
    """Access tag carried by every class member."""
    PUBLIC = "public"
    PRIVATE = "private"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source code: ``start`` up to just before ``end``."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"

    def text(self, source: str) -> str:
        """Slice of ``source`` covered by this span."""
        return source[self.start.offset:self.end.offset]


class ASTVisitor:
    """
    Base visitor. ``visit`` dispatches to ``visit_<ClassName>`` and falls
    back to ``generic_visit``, which visits every child.
    """

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: 'ASTNode') -> Any:
        for child in node.children():
            self.visit(child)
        return None


class ASTNode(ABC):
    """Base class for all AST nodes."""
    node_type: ClassVar[ASTNodeType]
    span: Optional[SourceSpan]

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    def children(self) -> List['ASTNode']:
        """Get all child nodes in field order."""
        result = []
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ASTNode):
                result.append(value)
            elif isinstance(value, list):
                result.extend(item for item in value if isinstance(item, ASTNode))
        return result

    def __str__(self) -> str:
        return f"{self.node_type.value}@{self.span}"


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yield ``node`` and all of its descendants, depth first."""
    yield node
    for child in node.children():
        yield from walk(child)


def _span():
    return field(default=None, compare=False, repr=False)


# ============================================================================
# Base categories
# ============================================================================

class Statement(ASTNode):
    """Base class for statements."""
    pass


class Declaration(Statement):
    """Base class for declarations. Variable and const declarations also appear in blocks."""
    pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


class TypeRef(ASTNode):
    """Base class for type annotations."""
    pass


# ============================================================================
# Types
# ============================================================================

@dataclass
class PrimitiveType(TypeRef):
    """int, float, string, bool, char or void."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PRIMITIVE_TYPE
    name: str
    span: Optional[SourceSpan] = _span()


@dataclass
class NamedType(TypeRef):
    """A class or interface name used as a type."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.NAMED_TYPE
    name: str
    span: Optional[SourceSpan] = _span()


@dataclass
class ArrayType(TypeRef):
    """Array of ``element_type`` (``int[]``)."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.ARRAY_TYPE
    element_type: TypeRef
    span: Optional[SourceSpan] = _span()


# ============================================================================
# Top-level node
# ============================================================================

@dataclass
class Program(ASTNode):
    """Root AST node representing a complete source unit."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM
    declarations: List[Declaration]
    span: Optional[SourceSpan] = _span()


# ============================================================================
# Declarations
# ============================================================================

@dataclass
class Parameter(ASTNode):
    """Function, method or lambda parameter. Only lambda parameters may be untyped."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PARAMETER
    name: str
    type_annotation: Optional[TypeRef]
    span: Optional[SourceSpan] = _span()


@dataclass
class VariableDecl(Declaration):
    """``int count = 10;``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE_DECL
    type_annotation: TypeRef
    name: str
    initializer: Optional[Expression]
    span: Optional[SourceSpan] = _span()


@dataclass
class ConstDecl(Declaration):
    """``const float PI = 3.14;``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CONST_DECL
    type_annotation: TypeRef
    name: str
    initializer: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class FunctionDecl(Declaration):
    """Function definition. ``body`` is a Block or, for ``=> expr;`` bodies, an Expression."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION_DECL
    name: str
    params: List[Parameter]
    return_type: Optional[TypeRef]
    body: Union['Block', Expression]
    span: Optional[SourceSpan] = _span()


@dataclass
class FieldMember(ASTNode):
    """A field inside a class body."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FIELD_MEMBER
    declaration: Union[VariableDecl, ConstDecl]
    access: AccessLevel
    is_static: bool = False
    span: Optional[SourceSpan] = _span()

    @property
    def name(self) -> str:
        return self.declaration.name


@dataclass
class MethodMember(ASTNode):
    """A method inside a class body."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.METHOD_MEMBER
    function: FunctionDecl
    access: AccessLevel
    is_static: bool = False
    span: Optional[SourceSpan] = _span()

    @property
    def name(self) -> str:
        return self.function.name


@dataclass
class ConstructorDecl(ASTNode):
    """Class constructor. ``super_args`` is set when the body opens with ``super(...)``."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CONSTRUCTOR
    params: List[Parameter]
    super_args: Optional[List[Expression]]
    body: 'Block'
    access: AccessLevel = AccessLevel.PUBLIC
    span: Optional[SourceSpan] = _span()


@dataclass
class ClassDecl(Declaration):
    """
    Class definition. ``members`` is flat; each member carries the access
    tag of the section it was declared in.
    """
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CLASS_DECL
    name: str
    base: Optional[str]
    interfaces: List[str]
    members: List[Union[FieldMember, MethodMember]]
    constructor: Optional[ConstructorDecl] = None
    incomplete: bool = False
    span: Optional[SourceSpan] = _span()

    def members_with_access(self, access: AccessLevel) -> List[Union[FieldMember, MethodMember]]:
        return [m for m in self.members if m.access == access]


@dataclass
class MethodSignature(ASTNode):
    """Interface method: name, parameters and return type, no body."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.METHOD_SIGNATURE
    name: str
    params: List[Parameter]
    return_type: Optional[TypeRef]
    span: Optional[SourceSpan] = _span()


@dataclass
class InterfaceDecl(Declaration):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.INTERFACE_DECL
    name: str
    methods: List[MethodSignature]
    incomplete: bool = False
    span: Optional[SourceSpan] = _span()


@dataclass
class ObjectField(ASTNode):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.OBJECT_FIELD
    name: str
    value: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class ObjectDecl(Declaration):
    """A single anonymous instance with field initializers and inline methods."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.OBJECT_DECL
    name: str
    fields: List[ObjectField]
    methods: List[FunctionDecl]
    incomplete: bool = False
    span: Optional[SourceSpan] = _span()


@dataclass
class ImportDecl(Declaration):
    """``import { a, b } from "path";`` or ``import name from "path";``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.IMPORT_DECL
    names: List[str]
    module_path: str
    default_binding: Optional[str] = None
    span: Optional[SourceSpan] = _span()


@dataclass
class ExportDecl(Declaration):
    """``export <declaration>`` or ``export { a, b };``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.EXPORT_DECL
    declaration: Optional[Declaration]
    names: List[str] = field(default_factory=list)
    span: Optional[SourceSpan] = _span()


@dataclass
class EnumDecl(Declaration):
    """``enum Color { Red, Green, Blue }``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.ENUM_DECL
    name: str
    variants: List[str]
    incomplete: bool = False
    span: Optional[SourceSpan] = _span()


# ============================================================================
# Statements
# ============================================================================

@dataclass
class ExpressionStatement(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.EXPRESSION_STMT
    expression: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class Block(Statement):
    """Braced statement list; the only lexical nesting construct."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BLOCK
    statements: List[Statement]
    span: Optional[SourceSpan] = _span()


@dataclass
class If(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.IF_STATEMENT
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None
    span: Optional[SourceSpan] = _span()


@dataclass
class SwitchCase(ASTNode):
    """One ``case value:`` or ``default:`` arm. ``value`` is None for default."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.SWITCH_CASE
    value: Optional[Expression]
    statements: List[Statement]
    span: Optional[SourceSpan] = _span()

    @property
    def is_default(self) -> bool:
        return self.value is None


@dataclass
class Switch(Statement):
    """Cases fall through to the next one until a ``break``."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.SWITCH_STATEMENT
    discriminant: Expression
    cases: List[SwitchCase]
    span: Optional[SourceSpan] = _span()


@dataclass
class While(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.WHILE_LOOP
    condition: Expression
    body: Statement
    span: Optional[SourceSpan] = _span()


@dataclass
class DoWhile(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.DO_WHILE_LOOP
    body: Statement
    condition: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class For(Statement):
    """Three-clause loop; every clause may be absent."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FOR_LOOP
    init: Optional[Statement]
    condition: Optional[Expression]
    update: Optional[Expression]
    body: Statement
    span: Optional[SourceSpan] = _span()


@dataclass
class ForEach(Statement):
    """``for (int x of xs)``; the element type may be omitted."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FOR_EACH_LOOP
    element_type: Optional[TypeRef]
    name: str
    iterable: Expression
    body: Statement
    span: Optional[SourceSpan] = _span()


@dataclass
class Return(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.RETURN_STATEMENT
    value: Optional[Expression] = None
    span: Optional[SourceSpan] = _span()


@dataclass
class Break(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BREAK_STATEMENT
    span: Optional[SourceSpan] = _span()


@dataclass
class Continue(Statement):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CONTINUE_STATEMENT
    span: Optional[SourceSpan] = _span()


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class Literal(Expression):
    """
    Literal value. ``kind`` is one of int, float, string, bool, char.
    ``raw`` keeps the source spelling and does not take part in equality.
    """
    node_type: ClassVar[ASTNodeType] = ASTNodeType.LITERAL
    value: Any
    kind: str
    raw: str = field(default="", compare=False)
    span: Optional[SourceSpan] = _span()


@dataclass
class Identifier(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.IDENTIFIER
    name: str
    span: Optional[SourceSpan] = _span()


@dataclass
class This(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.THIS
    span: Optional[SourceSpan] = _span()


@dataclass
class Super(Expression):
    """Only valid as the target of a member access (``super.area()``)."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.SUPER
    span: Optional[SourceSpan] = _span()


@dataclass
class Binary(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY_OP
    operator: str
    left: Expression
    right: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class Unary(Expression):
    """Prefix (``!x``, ``-x``, ``++x``) or postfix (``x++``) operation."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.UNARY_OP
    operator: str
    operand: Expression
    prefix: bool = True
    span: Optional[SourceSpan] = _span()


@dataclass
class Call(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL
    callee: Expression
    args: List[Expression]
    span: Optional[SourceSpan] = _span()


@dataclass
class Index(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.INDEX_ACCESS
    target: Expression
    index: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class MemberAccess(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.MEMBER_ACCESS
    target: Expression
    name: str
    span: Optional[SourceSpan] = _span()


@dataclass
class Assignment(Expression):
    """``target op value`` where op is one of = += -= *= /= %=."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.ASSIGNMENT
    target: Expression
    operator: str
    value: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class ArrayLiteral(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.ARRAY_LITERAL
    elements: List[Expression]
    span: Optional[SourceSpan] = _span()


@dataclass
class DictEntry(ASTNode):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.DICT_ENTRY
    key: Expression
    value: Expression
    span: Optional[SourceSpan] = _span()


@dataclass
class DictLiteral(Expression):
    """``{ key: value, ... }``; keys are arbitrary expressions."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.DICT_LITERAL
    pairs: List[DictEntry]
    span: Optional[SourceSpan] = _span()


@dataclass
class Lambda(Expression):
    """Arrow function. ``body`` is a Block or an Expression."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.LAMBDA
    params: List[Parameter]
    body: Union[Block, Expression]
    span: Optional[SourceSpan] = _span()


@dataclass
class New(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.NEW
    class_name: str
    args: List[Expression]
    span: Optional[SourceSpan] = _span()
