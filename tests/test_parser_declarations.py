"""
Test suite for Lumen top-level declarations.

Tests cover:
- Variables, constants and functions
- Classes with access sections, static members and constructors
- Interfaces, objects, imports and exports
- Enums and dict-typed variables
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import lumen
from lumen.parser import (
    AccessLevel, ArrayType, Assignment, Binary, Block, ClassDecl, ConstDecl,
    DictEntry, DictLiteral, EnumDecl, ExportDecl, ExpressionStatement, FieldMember, FunctionDecl, Identifier,
    ImportDecl, InterfaceDecl, Literal, MethodMember, NamedType, New,
    ObjectDecl, ObjectField, Parameter, PrimitiveType, Return, VariableDecl,
)


def parse_ok(source: str):
    result = lumen.parse(source, "<test>")
    assert result.ok, result.format_diagnostics()
    return result.program.declarations


def int_type():
    return PrimitiveType("int")


class TestVariablesAndFunctions(unittest.TestCase):
    """Test cases for variable, constant and function declarations."""

    def test_variable_declarations(self):
        count, origin, grid = parse_ok(
            "int count = 10;\n"
            "Point origin = new Point(0, 0);\n"
            "int[][] grid;"
        )

        self.assertEqual(count, VariableDecl(int_type(), "count", Literal(10, "int")))
        self.assertEqual(origin, VariableDecl(NamedType("Point"), "origin",
                                              New("Point", [Literal(0, "int"), Literal(0, "int")])))
        self.assertEqual(grid, VariableDecl(ArrayType(ArrayType(int_type())), "grid", None))

    def test_const_declaration(self):
        [decl] = parse_ok('const string NAME = "lumen";')
        self.assertEqual(decl, ConstDecl(PrimitiveType("string"), "NAME", Literal("lumen", "string")))

    def test_const_requires_initializer(self):
        result = lumen.parse("const int MAX;")

        self.assertEqual([d.code for d in result.diagnostics], ["P002"])
        self.assertEqual(result.diagnostics[0].message, "expected '='")

    def test_block_function(self):
        [decl] = parse_ok("int add(int a, int b) { return a + b; }")

        self.assertEqual(
            decl,
            FunctionDecl("add",
                         [Parameter("a", int_type()), Parameter("b", int_type())],
                         int_type(),
                         Block([Return(Binary("+", Identifier("a"), Identifier("b")))]))
        )

    def test_arrow_function(self):
        [decl] = parse_ok("int twice(int x) => x * 2;")

        self.assertEqual(decl.body, Binary("*", Identifier("x"), Literal(2, "int")))
        self.assertEqual(decl.return_type, int_type())

    def test_function_keyword_form(self):
        untyped, typed = parse_ok(
            "function greet(string name) { }\n"
            "function answer(): int => 42;"
        )

        self.assertIsNone(untyped.return_type)
        self.assertEqual(untyped.params, [Parameter("name", PrimitiveType("string"))])
        self.assertEqual(typed.return_type, int_type())
        self.assertEqual(typed.body, Literal(42, "int"))

    def test_class_typed_parameters(self):
        [decl] = parse_ok("void draw(Canvas c, Point[] ps) { }")
        self.assertEqual(decl.params[0].type_annotation, NamedType("Canvas"))
        self.assertEqual(decl.params[1].type_annotation, ArrayType(NamedType("Point")))

    def test_declaration_span(self):
        source = "int  x = 1 ;\nvoid f() { }"
        first, second = parse_ok(source)

        self.assertEqual(first.span.text(source), "int  x = 1 ;")
        self.assertEqual(second.span.start.line, 2)


class TestClasses(unittest.TestCase):
    """Test cases for class declarations."""

    SOURCE = (
        "class Rectangle extends Shape implements Drawable, Sized {\n"
        "    int id;\n"
        "public:\n"
        "    constructor(float w, float h) {\n"
        "        super(\"rect\");\n"
        "        width = w;\n"
        "        height = h;\n"
        "    }\n"
        "    float area() => width * height;\n"
        "    static int count = 0;\n"
        "private:\n"
        "    float width;\n"
        "    float height;\n"
        "    const int SIDES = 4;\n"
        "    public void reset() { width = 0; }\n"
        "}\n"
    )

    def setUp(self):
        [self.cls] = parse_ok(self.SOURCE)

    def test_header(self):
        self.assertIsInstance(self.cls, ClassDecl)
        self.assertEqual(self.cls.name, "Rectangle")
        self.assertEqual(self.cls.base, "Shape")
        self.assertEqual(self.cls.interfaces, ["Drawable", "Sized"])
        self.assertFalse(self.cls.incomplete)

    def test_member_order_and_access(self):
        """Test that sections set access and per-member modifiers override them."""
        summary = [(m.name, m.access, m.is_static) for m in self.cls.members]

        self.assertEqual(summary, [
            ("id", AccessLevel.PUBLIC, False),
            ("area", AccessLevel.PUBLIC, False),
            ("count", AccessLevel.PUBLIC, True),
            ("width", AccessLevel.PRIVATE, False),
            ("height", AccessLevel.PRIVATE, False),
            ("SIDES", AccessLevel.PRIVATE, False),
            ("reset", AccessLevel.PUBLIC, False),
        ])

    def test_member_kinds(self):
        kinds = [type(m) for m in self.cls.members]
        self.assertEqual(kinds, [FieldMember, MethodMember, FieldMember, FieldMember,
                                 FieldMember, FieldMember, MethodMember])
        self.assertIsInstance(self.cls.members[5].declaration, ConstDecl)

    def test_members_with_access(self):
        private = self.cls.members_with_access(AccessLevel.PRIVATE)
        self.assertEqual([m.name for m in private], ["width", "height", "SIDES"])

    def test_constructor(self):
        ctor = self.cls.constructor

        self.assertEqual(ctor.params, [Parameter("w", PrimitiveType("float")),
                                       Parameter("h", PrimitiveType("float"))])
        self.assertEqual(ctor.super_args, [Literal("rect", "string")])
        self.assertEqual(ctor.body.statements, [
            ExpressionStatement(Assignment(Identifier("width"), "=", Identifier("w"))),
            ExpressionStatement(Assignment(Identifier("height"), "=", Identifier("h"))),
        ])

    def test_empty_class(self):
        [cls] = parse_ok("class Empty {}")

        self.assertEqual(cls, ClassDecl("Empty", None, [], [], None))

    def test_constructor_without_super(self):
        [cls] = parse_ok("class Counter { constructor() { n = 0; } int n; }")
        self.assertIsNone(cls.constructor.super_args)
        self.assertEqual(len(cls.members), 1)

    def test_duplicate_constructor(self):
        result = lumen.parse("class A { constructor() { } constructor(int x) { } }")

        self.assertEqual([d.code for d in result.diagnostics], ["P001"])
        self.assertIn("already has a constructor", result.diagnostics[0].message)
        self.assertEqual(result.program.declarations[0].constructor.params, [])

    def test_static_constructor_is_rejected(self):
        result = lumen.parse("class A { static constructor() { } int x; }")

        self.assertEqual(len(result.errors), 1)
        self.assertEqual([m.name for m in result.program.declarations[0].members], ["x"])

    def test_super_call_after_first_statement(self):
        result = lumen.parse("class A extends B { constructor() { x = 1; super(); } }")
        self.assertEqual([d.code for d in result.diagnostics], ["P006"])


class TestInterfacesAndObjects(unittest.TestCase):
    """Test cases for interfaces and singleton objects."""

    def test_interface(self):
        [iface] = parse_ok("interface Drawable { void draw(Canvas c); int size(); }")

        self.assertIsInstance(iface, InterfaceDecl)
        self.assertEqual([m.name for m in iface.methods], ["draw", "size"])
        self.assertEqual(iface.methods[0].params, [Parameter("c", NamedType("Canvas"))])
        self.assertEqual(iface.methods[1].return_type, int_type())

    def test_interface_method_with_body(self):
        """Test that a body is reported once and every signature is kept."""
        result = lumen.parse(
            "interface Shape {\n"
            "    int sides() { return 4; }\n"
            "    string name();\n"
            "}"
        )

        self.assertEqual([d.code for d in result.diagnostics], ["P007"])
        self.assertEqual((result.diagnostics[0].line, result.diagnostics[0].column), (2, 17))
        iface = result.program.declarations[0]
        self.assertEqual([m.name for m in iface.methods], ["sides", "name"])

    def test_object(self):
        [obj] = parse_ok(
            "object Config = {\n"
            "    name: \"app\",\n"
            "    retries: 3,\n"
            "    int twice(int x) => x * 2,\n"
            "    void log(string m) { print(m); }\n"
            "};"
        )

        self.assertIsInstance(obj, ObjectDecl)
        self.assertEqual(obj.fields, [ObjectField("name", Literal("app", "string")),
                                      ObjectField("retries", Literal(3, "int"))])
        self.assertEqual([m.name for m in obj.methods], ["twice", "log"])
        self.assertEqual(obj.methods[0].body, Binary("*", Identifier("x"), Literal(2, "int")))
        self.assertFalse(obj.incomplete)

    def test_empty_object(self):
        [obj] = parse_ok("object Nothing = {};")
        self.assertEqual(obj, ObjectDecl("Nothing", [], []))

    def test_object_requires_commas(self):
        result = lumen.parse("object O = { a: 1 b: 2 };")
        self.assertEqual([d.code for d in result.diagnostics], ["P002"])


class TestEnumsAndDicts(unittest.TestCase):
    """Test cases for enum declarations and dict values."""

    def test_enum(self):
        [enum] = parse_ok("enum Color { Red, Green, Blue }")
        self.assertEqual(enum, EnumDecl("Color", ["Red", "Green", "Blue"]))
        self.assertFalse(enum.incomplete)

    def test_enum_trailing_comma_and_empty_enum(self):
        flags, never = parse_ok("enum Flag { On, Off, }\nenum Never {}")

        self.assertEqual(flags.variants, ["On", "Off"])
        self.assertEqual(never.variants, [])

    def test_export_enum(self):
        [decl] = parse_ok("export enum Mode { Fast }")
        self.assertEqual(decl.declaration, EnumDecl("Mode", ["Fast"]))

    def test_unclosed_enum(self):
        result = lumen.parse("enum Color { Red,")

        self.assertEqual([d.message for d in result.diagnostics], ["expected '}'"])
        self.assertTrue(result.program.declarations[0].incomplete)

    def test_dict_variable(self):
        [books] = parse_ok(
            "dict books = {\n"
            "    dune: { author: \"Frank Herbert\", year: 1965 },\n"
            "    \"lotr\": { author: \"Tolkien\", year: 1954 }\n"
            "};"
        )

        self.assertEqual(books.type_annotation, PrimitiveType("dict"))
        self.assertIsInstance(books.initializer, DictLiteral)
        self.assertEqual([p.key for p in books.initializer.pairs],
                         [Identifier("dune"), Literal("lotr", "string")])
        self.assertEqual(books.initializer.pairs[0].value.pairs[1],
                         DictEntry(Identifier("year"), Literal(1965, "int")))

    def test_dict_local_and_arrow_body(self):
        [func] = parse_ok("dict empty() => {};\n")
        self.assertEqual(func.body, DictLiteral([]))

        [func] = parse_ok("void f() { dict[] all = [{}]; }")
        local = func.body.statements[0]
        self.assertEqual(local.type_annotation, ArrayType(PrimitiveType("dict")))
        self.assertEqual(local.initializer.elements, [DictLiteral([])])


class TestModules(unittest.TestCase):
    """Test cases for imports and exports."""

    def test_named_and_default_imports(self):
        named, default = parse_ok(
            'import { log, warn } from "io";\n'
            'import fs from "std/fs";'
        )

        self.assertEqual(named, ImportDecl(["log", "warn"], "io"))
        self.assertEqual(default, ImportDecl([], "std/fs", "fs"))

    def test_import_requires_path_string(self):
        result = lumen.parse("import { a } from io;")
        self.assertEqual([d.code for d in result.diagnostics], ["P001"])

    def test_export_forms(self):
        decl, names = parse_ok("export int answer() => 42;\nexport { a, b };")

        self.assertEqual(decl, ExportDecl(FunctionDecl("answer", [], int_type(), Literal(42, "int"))))
        self.assertEqual(names, ExportDecl(None, ["a", "b"]))

    def test_export_class(self):
        [decl] = parse_ok("export class Box { }")
        self.assertIsInstance(decl.declaration, ClassDecl)

    def test_double_export(self):
        result = lumen.parse("export export int x;")
        self.assertEqual([d.code for d in result.diagnostics], ["P001"])


if __name__ == '__main__':
    unittest.main()
