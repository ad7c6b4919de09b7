"""
Source printer for Lumen ASTs.

``unparse`` turns any node back into source text. Binary, unary and
assignment expressions are fully parenthesized, so reparsing the output
yields a structurally equal tree.
"""

from typing import List

from .ast_nodes import (
    ASTNode, ASTVisitor, AccessLevel, Block, ClassDecl, Expression,
    FieldMember, FunctionDecl, Parameter, Statement,
)

ESCAPES = {
    '\n': '\\n',
    '\t': '\\t',
    '\r': '\\r',
    '\0': '\\0',
    '\\': '\\\\',
}


def _quote(text: str, quote: str) -> str:
    parts = []
    i = 0
    while i < len(text):
        char = text[i]
        # Unknown escapes are stored verbatim as backslash plus character
        if char == '\\' and i + 1 < len(text) and text[i + 1] not in '\\ntr0"\'':
            parts.append(text[i:i + 2])
            i += 2
            continue
        if char == quote:
            parts.append('\\' + quote)
        else:
            parts.append(ESCAPES.get(char, char))
        i += 1
    return quote + ''.join(parts) + quote


class SourcePrinter(ASTVisitor):
    """Renders nodes as indented Lumen source."""

    def __init__(self, indent: str = "    "):
        self.indent_unit = indent
        self.level = 0

    def render(self, node: ASTNode) -> str:
        return self.visit(node)

    def generic_visit(self, node: ASTNode) -> str:
        raise TypeError(f"Cannot print node of type {type(node).__name__}")

    def _pad(self) -> str:
        return self.indent_unit * self.level

    def _lines(self, statements: List[Statement]) -> List[str]:
        self.level += 1
        try:
            return [self._pad() + self.visit(stmt) for stmt in statements]
        finally:
            self.level -= 1

    def _params(self, params: List[Parameter]) -> str:
        return ", ".join(self.visit(p) for p in params)

    def _args(self, args: List[Expression]) -> str:
        return ", ".join(self.visit(a) for a in args)

    def _unbraced(self, body: ASTNode) -> str:
        """Expression text that may not open with '{', which would reparse as a block."""
        text = self.visit(body)
        if not isinstance(body, Block) and text.startswith("{"):
            return f"({text})"
        return text

    def _function_tail(self, node: FunctionDecl) -> str:
        """Parameter list and body of a function."""
        if isinstance(node.body, Block):
            return f"({self._params(node.params)}) {self.visit(node.body)}"
        return f"({self._params(node.params)}) => {self._unbraced(node.body)};"

    # Program and declarations

    def visit_Program(self, node) -> str:
        return "\n".join(self.visit(d) for d in node.declarations) + "\n"

    def visit_VariableDecl(self, node) -> str:
        text = f"{self.visit(node.type_annotation)} {node.name}"
        if node.initializer is not None:
            text += f" = {self.visit(node.initializer)}"
        return text + ";"

    def visit_ConstDecl(self, node) -> str:
        return f"const {self.visit(node.type_annotation)} {node.name} = {self.visit(node.initializer)};"

    def visit_FunctionDecl(self, node) -> str:
        if node.return_type is None:
            # 'function' form without a declared return type
            if isinstance(node.body, Block):
                return f"function {node.name}({self._params(node.params)}) {self.visit(node.body)}"
            return f"function {node.name}({self._params(node.params)}) => {self._unbraced(node.body)};"
        return f"{self.visit(node.return_type)} {node.name}{self._function_tail(node)}"

    def visit_Parameter(self, node) -> str:
        if node.type_annotation is None:
            return node.name
        return f"{self.visit(node.type_annotation)} {node.name}"

    def visit_ClassDecl(self, node: ClassDecl) -> str:
        header = f"class {node.name}"
        if node.base:
            header += f" extends {node.base}"
        if node.interfaces:
            header += f" implements {', '.join(node.interfaces)}"

        self.level += 1
        body = []
        if node.constructor is not None:
            body.append(self._pad() + self.visit(node.constructor))
        body.extend(self._pad() + self.visit(m) for m in node.members)
        self.level -= 1

        if not body:
            return header + " {}"
        return header + " {\n" + "\n".join(body) + "\n" + self._pad() + "}"

    def _modifiers(self, access: AccessLevel, is_static: bool = False) -> str:
        return f"{access}{' static' if is_static else ''} "

    def visit_FieldMember(self, node: FieldMember) -> str:
        return self._modifiers(node.access, node.is_static) + self.visit(node.declaration)

    def visit_MethodMember(self, node) -> str:
        function = node.function
        if function.return_type is None:
            raise TypeError(f"Method '{function.name}' has no return type")
        return (self._modifiers(node.access, node.is_static)
                + f"{self.visit(function.return_type)} {function.name}{self._function_tail(function)}")

    def visit_ConstructorDecl(self, node) -> str:
        self.level += 1
        lines = []
        if node.super_args is not None:
            lines.append(self._pad() + f"super({self._args(node.super_args)});")
        self.level -= 1
        lines.extend(self._lines(node.body.statements))

        head = self._modifiers(node.access) + f"constructor({self._params(node.params)})"
        if not lines:
            return head + " {}"
        return head + " {\n" + "\n".join(lines) + "\n" + self._pad() + "}"

    def visit_InterfaceDecl(self, node) -> str:
        self.level += 1
        lines = [self._pad() + self.visit(m) for m in node.methods]
        self.level -= 1
        if not lines:
            return f"interface {node.name} {{}}"
        return f"interface {node.name} {{\n" + "\n".join(lines) + "\n" + self._pad() + "}"

    def visit_MethodSignature(self, node) -> str:
        return f"{self.visit(node.return_type)} {node.name}({self._params(node.params)});"

    def visit_ObjectDecl(self, node) -> str:
        self.level += 1
        entries = [self._pad() + self.visit(f) for f in node.fields]
        for method in node.methods:
            tail = self._function_tail(method)
            if not isinstance(method.body, Block):
                tail = tail[:-1]  # entries are separated by ',' rather than ';'
            entries.append(self._pad() + f"{self.visit(method.return_type)} {method.name}{tail}")
        self.level -= 1
        if not entries:
            return f"object {node.name} = {{}};"
        return f"object {node.name} = {{\n" + ",\n".join(entries) + "\n" + self._pad() + "};"

    def visit_ObjectField(self, node) -> str:
        return f"{node.name}: {self.visit(node.value)}"

    def visit_ImportDecl(self, node) -> str:
        if node.default_binding is not None:
            target = node.default_binding
        else:
            target = "{ " + ", ".join(node.names) + " }"
        path = _quote(node.module_path, '"')
        return f"import {target} from {path};"

    def visit_ExportDecl(self, node) -> str:
        if node.declaration is not None:
            return f"export {self.visit(node.declaration)}"
        return "export { " + ", ".join(node.names) + " };"

    def visit_EnumDecl(self, node) -> str:
        if not node.variants:
            return f"enum {node.name} {{}}"
        return f"enum {node.name} {{ " + ", ".join(node.variants) + " }"

    # Statements

    def visit_Block(self, node) -> str:
        if not node.statements:
            return "{}"
        return "{\n" + "\n".join(self._lines(node.statements)) + "\n" + self._pad() + "}"

    def visit_ExpressionStatement(self, node) -> str:
        return self._unbraced(node.expression) + ";"

    def visit_If(self, node) -> str:
        text = f"if ({self.visit(node.condition)}) {self.visit(node.then_branch)}"
        if node.else_branch is not None:
            text += f" else {self.visit(node.else_branch)}"
        return text

    def visit_Switch(self, node) -> str:
        self.level += 1
        lines = []
        for case in node.cases:
            lines.append(self._pad() + self.visit(case))
            lines.extend(self._lines(case.statements))
        self.level -= 1
        return f"switch ({self.visit(node.discriminant)}) {{\n" + "\n".join(lines) + "\n" + self._pad() + "}"

    def visit_SwitchCase(self, node) -> str:
        if node.value is None:
            return "default:"
        return f"case {self.visit(node.value)}:"

    def visit_While(self, node) -> str:
        return f"while ({self.visit(node.condition)}) {self.visit(node.body)}"

    def visit_DoWhile(self, node) -> str:
        return f"do {self.visit(node.body)} while ({self.visit(node.condition)});"

    def visit_For(self, node) -> str:
        init = self.visit(node.init) if node.init is not None else ";"
        condition = self.visit(node.condition) if node.condition is not None else ""
        update = self.visit(node.update) if node.update is not None else ""
        return f"for ({init} {condition}; {update}) {self.visit(node.body)}"

    def visit_ForEach(self, node) -> str:
        binding = node.name
        if node.element_type is not None:
            binding = f"{self.visit(node.element_type)} {node.name}"
        return f"for ({binding} of {self.visit(node.iterable)}) {self.visit(node.body)}"

    def visit_Return(self, node) -> str:
        if node.value is None:
            return "return;"
        return f"return {self.visit(node.value)};"

    def visit_Break(self, node) -> str:
        return "break;"

    def visit_Continue(self, node) -> str:
        return "continue;"

    # Expressions

    def visit_Literal(self, node) -> str:
        if node.kind == "string":
            return _quote(node.value, '"')
        if node.kind == "char":
            return _quote(node.value, "'")
        if node.kind == "bool":
            return "true" if node.value else "false"
        if node.kind == "float":
            return node.raw if node.raw and node.raw[-1].isdigit() else repr(float(node.value))
        return str(node.value)

    def visit_Identifier(self, node) -> str:
        return node.name

    def visit_This(self, node) -> str:
        return "this"

    def visit_Super(self, node) -> str:
        return "super"

    def visit_Binary(self, node) -> str:
        return f"({self.visit(node.left)} {node.operator} {self.visit(node.right)})"

    def visit_Unary(self, node) -> str:
        if node.prefix:
            return f"({node.operator}{self.visit(node.operand)})"
        return f"({self.visit(node.operand)}{node.operator})"

    def visit_Assignment(self, node) -> str:
        return f"({self.visit(node.target)} {node.operator} {self.visit(node.value)})"

    def visit_Call(self, node) -> str:
        return f"{self.visit(node.callee)}({self._args(node.args)})"

    def visit_Index(self, node) -> str:
        return f"{self.visit(node.target)}[{self.visit(node.index)}]"

    def visit_MemberAccess(self, node) -> str:
        return f"{self.visit(node.target)}.{node.name}"

    def visit_ArrayLiteral(self, node) -> str:
        return f"[{self._args(node.elements)}]"

    def visit_DictLiteral(self, node) -> str:
        if not node.pairs:
            return "{}"
        return "{ " + ", ".join(self.visit(p) for p in node.pairs) + " }"

    def visit_DictEntry(self, node) -> str:
        return f"{self.visit(node.key)}: {self.visit(node.value)}"

    def visit_Lambda(self, node) -> str:
        return f"(({self._params(node.params)}) => {self._unbraced(node.body)})"

    def visit_New(self, node) -> str:
        return f"new {node.class_name}({self._args(node.args)})"

    # Types

    def visit_PrimitiveType(self, node) -> str:
        return node.name

    def visit_NamedType(self, node) -> str:
        return node.name

    def visit_ArrayType(self, node) -> str:
        return f"{self.visit(node.element_type)}[]"


def unparse(node: ASTNode) -> str:
    """Render ``node`` as Lumen source text."""
    return SourcePrinter().render(node)
