"""
Test suite for AST infrastructure: equality, spans, traversal and visitors.
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import lumen
from lumen.parser import (
    ASTNodeType, ASTVisitor, Assignment, Binary, DictEntry, DictLiteral, FunctionDecl,
    Identifier, Index, Literal, MemberAccess, Parameter, PrimitiveType, Program, walk,
)


class IdentifierCollector(ASTVisitor):
    def __init__(self):
        self.names = []

    def visit_Identifier(self, node):
        self.names.append(node.name)


class TestASTNodes(unittest.TestCase):
    """Test cases for AST nodes."""

    def test_equality_ignores_spans(self):
        compact = lumen.parse("int x=1;").program
        spaced = lumen.parse("int   x =\n  1 ;").program

        self.assertEqual(compact, spaced)
        self.assertNotEqual(compact.declarations[0].span, spaced.declarations[0].span)

    def test_literal_raw_text_is_not_compared(self):
        self.assertEqual(Literal(1.5, "float", "1.50"), Literal(1.5, "float", "1.5"))
        self.assertNotEqual(Literal(1, "int"), Literal(1, "float"))

    def test_children_in_field_order(self):
        [func] = lumen.parse("int inc(int a) => a + 1;").program.declarations

        self.assertEqual(
            [type(c) for c in func.children()],
            [Parameter, PrimitiveType, Binary]
        )

    def test_walk(self):
        program = lumen.parse("int inc(int a) => a + 1;").program

        self.assertEqual(
            [type(n) for n in walk(program)],
            [Program, FunctionDecl, Parameter, PrimitiveType, PrimitiveType,
             Binary, Identifier, Literal]
        )

    def test_visitor_dispatch(self):
        """Test that unhandled nodes fall back to visiting their children."""
        program = lumen.parse("void f() { a = b + c(d); }").program
        collector = IdentifierCollector()
        program.accept(collector)

        self.assertEqual(collector.names, ["a", "b", "c", "d"])

    def test_node_type_and_str(self):
        source = "int x = a * 2;"
        decl = lumen.parse(source, "m.lm").program.declarations[0]

        self.assertEqual(decl.initializer.node_type, ASTNodeType.BINARY_OP)
        self.assertEqual(str(decl), "VariableDecl@m.lm:1:1-1:15")
        self.assertEqual(decl.initializer.span.text(source), "a * 2")

    def test_program_span_covers_source(self):
        source = "int a;\nint b;"
        program = lumen.parse(source).program

        self.assertEqual(program.span.start.offset, 0)
        self.assertEqual(program.span.end.offset, len(source))

    def test_parenthesized_operand_spans(self):
        """Test that spans built on a grouped operand start at its '('."""
        source = "int f() { y = (a + b) * c; z = (a).b; w = (g)[0]; }"
        program = lumen.parse(source).program

        def texts(node_type):
            return [n.span.text(source) for n in walk(program) if isinstance(n, node_type)]

        self.assertEqual(texts(Binary), ["(a + b) * c", "(a + b)"])
        self.assertEqual(texts(MemberAccess), ["(a).b"])
        self.assertEqual(texts(Index), ["(g)[0]"])
        self.assertEqual(texts(Assignment), ["y = (a + b) * c", "z = (a).b", "w = (g)[0]"])

    def test_grouping_does_not_change_equality(self):
        grouped = lumen.parse("int x = ((a)) + 1;").program
        plain = lumen.parse("int x = a + 1;").program
        self.assertEqual(grouped, plain)

    def test_dict_literal_children(self):
        source = 'dict d = { k: 1, "v": x };'
        literal = lumen.parse(source).program.declarations[0].initializer

        self.assertIsInstance(literal, DictLiteral)
        self.assertEqual([type(c) for c in literal.children()], [DictEntry, DictEntry])
        self.assertEqual(literal.node_type, ASTNodeType.DICT_LITERAL)
        self.assertEqual(literal.pairs[1].span.text(source), '"v": x')
        self.assertEqual(literal.span.text(source), '{ k: 1, "v": x }')


if __name__ == '__main__':
    unittest.main()
