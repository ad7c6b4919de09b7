"""
Test suite for Lumen expression parsing.

Tests cover:
- Operator precedence and associativity
- Postfix chains: calls, indexing, member access, ++/--
- Lambda forms and the speculative '(' rewind
- Expression-level syntax errors
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import lumen
from lumen.parser import (
    ArrayLiteral, Assignment, Binary, Block, Call, DictEntry, DictLiteral, Identifier,
    Index, Lambda, Literal, MemberAccess, New, Parameter, PrimitiveType, Return, Super,
    This, Unary,
)


def _wrap(text: str) -> str:
    return "void check() { " + text + "; }"


def parse_expression(text: str):
    """Parse ``text`` as the single expression statement of a function body."""
    result = lumen.parse(_wrap(text), "<test>")
    assert result.ok, result.format_diagnostics()
    return result.program.declarations[0].body.statements[0].expression


def diagnostics_for(text: str):
    return lumen.parse(_wrap(text), "<test>").diagnostics


def ident(name):
    return Identifier(name)


def lit(value, kind="int"):
    return Literal(value, kind)


class TestPrecedence(unittest.TestCase):
    """Test cases for operator precedence and associativity."""

    def test_factor_binds_tighter_than_term(self):
        self.assertEqual(
            parse_expression("1 + 2 * 3"),
            Binary("+", lit(1), Binary("*", lit(2), lit(3)))
        )

    def test_left_associative_subtraction(self):
        self.assertEqual(
            parse_expression("a - b - c"),
            Binary("-", Binary("-", ident("a"), ident("b")), ident("c"))
        )

    def test_left_associative_factor(self):
        self.assertEqual(
            parse_expression("a % b * c"),
            Binary("*", Binary("%", ident("a"), ident("b")), ident("c"))
        )

    def test_right_associative_assignment(self):
        self.assertEqual(
            parse_expression("a = b = c"),
            Assignment(ident("a"), "=", Assignment(ident("b"), "=", ident("c")))
        )

    def test_compound_assignment(self):
        self.assertEqual(
            parse_expression("total += price * 2"),
            Assignment(ident("total"), "+=", Binary("*", ident("price"), lit(2)))
        )

    def test_logical_operators(self):
        self.assertEqual(
            parse_expression("a || b && c"),
            Binary("||", ident("a"), Binary("&&", ident("b"), ident("c")))
        )

    def test_comparison_below_equality(self):
        self.assertEqual(
            parse_expression("a < b == c > d"),
            Binary("==", Binary("<", ident("a"), ident("b")),
                   Binary(">", ident("c"), ident("d")))
        )

    def test_unary_binds_tighter_than_equality(self):
        self.assertEqual(
            parse_expression("!a == b"),
            Binary("==", Unary("!", ident("a")), ident("b"))
        )

    def test_unary_minus_applies_to_member_access(self):
        self.assertEqual(
            parse_expression("-x.y"),
            Unary("-", MemberAccess(ident("x"), "y"))
        )

    def test_grouping_overrides_precedence(self):
        self.assertEqual(
            parse_expression("(a + b) * c"),
            Binary("*", Binary("+", ident("a"), ident("b")), ident("c"))
        )

    def test_parenthesized_identifier_is_grouping(self):
        self.assertEqual(parse_expression("(x) + 1"), Binary("+", ident("x"), lit(1)))


class TestPostfixAndPrimary(unittest.TestCase):
    """Test cases for postfix chains and primary expressions."""

    def test_call_index_member_chain(self):
        self.assertEqual(
            parse_expression("a.b(c)[0]"),
            Index(Call(MemberAccess(ident("a"), "b"), [ident("c")]), lit(0))
        )

    def test_prefix_and_postfix_increment(self):
        self.assertEqual(parse_expression("i++"), Unary("++", ident("i"), False))
        self.assertEqual(parse_expression("--i"), Unary("--", ident("i"), True))

    def test_new_expression(self):
        self.assertEqual(
            parse_expression("new Point(1, 2)"),
            New("Point", [lit(1), lit(2)])
        )

    def test_this_and_super_members(self):
        self.assertEqual(parse_expression("this.x"), MemberAccess(This(), "x"))
        self.assertEqual(
            parse_expression("super.area()"),
            Call(MemberAccess(Super(), "area"), [])
        )

    def test_array_literals(self):
        self.assertEqual(parse_expression("[1, 2, 3]"), ArrayLiteral([lit(1), lit(2), lit(3)]))
        self.assertEqual(parse_expression("[]"), ArrayLiteral([]))

    def test_dict_literals(self):
        self.assertEqual(
            parse_expression('d = { name: "lumen", 1 + 1: [] }'),
            Assignment(ident("d"), "=", DictLiteral([
                DictEntry(ident("name"), lit("lumen", "string")),
                DictEntry(Binary("+", lit(1), lit(1)), ArrayLiteral([])),
            ]))
        )
        self.assertEqual(parse_expression("f({})"), Call(ident("f"), [DictLiteral([])]))

    def test_nested_dict_literal(self):
        self.assertEqual(
            parse_expression("d = { outer: { inner: 1 } }"),
            Assignment(ident("d"), "=", DictLiteral([
                DictEntry(ident("outer"), DictLiteral([DictEntry(ident("inner"), lit(1))])),
            ]))
        )

    def test_literal_kinds(self):
        self.assertEqual(parse_expression('"hi"'), lit("hi", "string"))
        self.assertEqual(parse_expression("'c'"), lit("c", "char"))
        self.assertEqual(parse_expression("true"), lit(True, "bool"))
        self.assertEqual(parse_expression("2.5"), lit(2.5, "float"))

    def test_literal_keeps_raw_text(self):
        literal = parse_expression("1.50")
        self.assertEqual(literal.raw, "1.50")

    def test_expression_span(self):
        source = _wrap("alpha + beta")
        result = lumen.parse(source)
        expr = result.program.declarations[0].body.statements[0].expression

        self.assertEqual(expr.span.text(source), "alpha + beta")
        self.assertEqual(expr.right.span.text(source), "beta")


class TestLambdas(unittest.TestCase):
    """Test cases for lambda expressions."""

    def test_single_parameter_shorthand(self):
        self.assertEqual(
            parse_expression("x => x * 2"),
            Lambda([Parameter("x", None)], Binary("*", ident("x"), lit(2)))
        )

    def test_untyped_parameter_list(self):
        self.assertEqual(
            parse_expression("(x, y) => x + y"),
            Lambda([Parameter("x", None), Parameter("y", None)],
                   Binary("+", ident("x"), ident("y")))
        )

    def test_typed_parameters_with_block_body(self):
        self.assertEqual(
            parse_expression("(int x, string s) => { return x; }"),
            Lambda([Parameter("x", PrimitiveType("int")), Parameter("s", PrimitiveType("string"))],
                   Block([Return(ident("x"))]))
        )

    def test_empty_parameter_list(self):
        self.assertEqual(parse_expression("() => 0"), Lambda([], lit(0)))

    def test_lambda_as_argument(self):
        self.assertEqual(
            parse_expression("xs.map(x => x + 1)"),
            Call(MemberAccess(ident("xs"), "map"),
                 [Lambda([Parameter("x", None)], Binary("+", ident("x"), lit(1)))])
        )

    def test_dict_body_needs_parentheses(self):
        """Test that '{' after a lambda arrow opens a block, and '({' a dict."""
        self.assertEqual(
            parse_expression("g = x => ({ k: x })"),
            Assignment(ident("g"), "=", Lambda(
                [Parameter("x", None)],
                DictLiteral([DictEntry(ident("k"), ident("x"))])
            ))
        )
        self.assertIsInstance(parse_expression("g = x => { k; }").value.body, Block)

    def test_lambda_body_extends_over_assignment(self):
        self.assertEqual(
            parse_expression("f = x => y = x"),
            Assignment(ident("f"), "=",
                       Lambda([Parameter("x", None)], Assignment(ident("y"), "=", ident("x"))))
        )


class TestExpressionErrors(unittest.TestCase):
    """Test cases for expression-level syntax errors."""

    def _codes(self, text):
        return [d.code for d in diagnostics_for(text)]

    def test_missing_operand(self):
        diagnostics = diagnostics_for("1 + ")
        self.assertEqual([d.code for d in diagnostics], ["P003"])
        self.assertIn("Expected expression", diagnostics[0].message)

    def test_invalid_assignment_targets(self):
        self.assertEqual(self._codes("a + b = c"), ["P004"])
        self.assertEqual(self._codes("1 = 2"), ["P004"])
        self.assertEqual(self._codes("f() = 2"), ["P004"])

    def test_assignment_to_member_and_index_is_valid(self):
        self.assertEqual(self._codes("a.b = 1"), [])
        self.assertEqual(self._codes("a[0] = 1"), [])

    def test_malformed_lambda(self):
        """Test that a parameter list without '=>' that is not a grouping is reported."""
        diagnostics = diagnostics_for("(a, b)")
        self.assertEqual([d.code for d in diagnostics], ["P005"])

    def test_typed_parameters_without_arrow_report_once(self):
        """Test that recovery resumes after the parameter list, not inside it."""
        result = lumen.parse("int f() { x = (int a, int b); y(); }")

        self.assertEqual([d.code for d in result.diagnostics], ["P005"])
        self.assertEqual((result.diagnostics[0].line, result.diagnostics[0].column), (1, 29))
        statements = result.program.declarations[0].body.statements
        self.assertEqual(len(statements), 1)
        self.assertEqual(statements[0].expression, Call(ident("y"), []))

    def test_dict_errors(self):
        self.assertEqual(self._codes("d = { a 1 }"), ["P002"])
        self.assertEqual(self._codes("d = { a: 1,  }"), ["P003"])

    def test_super_call_outside_constructor(self):
        self.assertEqual(self._codes("super(1)"), ["P006"])

    def test_bare_super(self):
        diagnostics = diagnostics_for("super")
        self.assertEqual([d.code for d in diagnostics], ["P001"])
        self.assertEqual(diagnostics[0].message, "Expected '.', found ';'")

    def test_unclosed_call(self):
        diagnostics = diagnostics_for("f(1, 2")
        self.assertEqual([d.code for d in diagnostics], ["P002"])
        self.assertEqual(diagnostics[0].message, "expected ')'")

    def test_error_recovery_continues_with_next_statement(self):
        result = lumen.parse("void check() { 1 + ; int y = 2; }")

        self.assertEqual([d.code for d in result.diagnostics], ["P003"])
        body = result.program.declarations[0].body
        self.assertEqual(len(body.statements), 1)
        self.assertEqual(body.statements[0].name, "y")


if __name__ == '__main__':
    unittest.main()
