"""Tests for parsing XDR source into the AST."""
import pytest

from xdrgen.internals.parser import parse_source, parse_header, merge_headers
from xdrgen.semantics.ast_builder import XdrSyntaxError
from xdrgen.semantics.ast import (
    ConstDef, TypedefDef, StructDef, EnumDef, UnionDef, ProgramDef,
    ScalarType, ScalarKind, OpaqueType, StringType, ArrayType, OptionalType,
    NamedType, IntLit, ConstRef, BinaryOp, Negate,
)


def names(spec):
    return [d.name for d in spec.definitions]


class TestDefinitions:
    def test_source_order_kept(self):
        spec = parse_source("""
            const MAX = 10;
            enum Color { RED, GREEN = 5 };
            typedef int Count;
            struct Point { int x; int y; };
            union Result switch (int status) { case 0: Point p; default: void; };
        """)
        assert names(spec) == ["MAX", "Color", "Count", "Point", "Result"]
        kinds = [type(d) for d in spec.definitions]
        assert kinds == [ConstDef, EnumDef, TypedefDef, StructDef, UnionDef]

    def test_constant_literals(self):
        spec = parse_source("const A = 0x1F; const B = 017; const C = -4; const D = 0;")
        assert [d.value.value for d in spec.definitions] == [31, 15, -4, 0]

    def test_invalid_octal_literal(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("const A = 09;")
        assert exc.value.code == "XE1005"

    def test_enum_variants(self):
        (enum,) = parse_source("enum E { A, B = 4, C, };").definitions
        assert [v.name for v in enum.variants] == ["A", "B", "C"]
        assert enum.variants[0].value is None
        assert enum.variants[1].value == IntLit(loc=enum.variants[1].value.loc, value=4)

    def test_scalar_types(self):
        (s,) = parse_source("""
            struct S {
                int a; unsigned int b; unsigned c; hyper d;
                unsigned hyper e; float f; double g; bool h;
            };
        """).definitions
        kinds = [f.ty.kind for f in s.fields]
        assert kinds == [
            ScalarKind.INT, ScalarKind.UINT, ScalarKind.UINT, ScalarKind.HYPER,
            ScalarKind.UHYPER, ScalarKind.FLOAT, ScalarKind.DOUBLE, ScalarKind.BOOL,
        ]

    def test_declaration_forms(self):
        (s,) = parse_source("""
            struct S {
                opaque a[4];
                opaque b<16>;
                opaque c<>;
                string d<MAXLEN>;
                string e<>;
                int f[3];
                int g<>;
                Point *h;
                struct Point i;
            };
        """).definitions
        ty = {f.name: f.ty for f in s.fields}
        assert isinstance(ty["a"], OpaqueType) and ty["a"].fixed
        assert isinstance(ty["b"], OpaqueType) and ty["b"].bound.value == 16
        assert ty["c"].bound is None
        assert isinstance(ty["d"], StringType) and ty["d"].bound == ConstRef(loc=ty["d"].bound.loc, name="MAXLEN")
        assert ty["e"].bound is None
        assert isinstance(ty["f"], ArrayType) and ty["f"].fixed
        assert isinstance(ty["g"], ArrayType) and not ty["g"].fixed
        assert isinstance(ty["h"], OptionalType) and ty["h"].inner.name == "Point"
        assert isinstance(ty["i"], NamedType) and ty["i"].name == "Point"

    def test_union_arms(self):
        (u,) = parse_source("""
            union U switch (Kind k) {
                case A:
                case B:
                    int x;
                case C:
                    void;
                default:
                    string msg<>;
            };
        """).definitions
        assert u.discriminant.name == "k"
        assert [len(a.cases) for a in u.arms] == [2, 1, 0]
        assert u.arms[1].field is None
        assert u.default_arm is u.arms[2]
        assert u.case_arms == u.arms[:2]

    def test_program_is_parsed(self):
        spec = parse_source("""
            program CALC {
                version CALC_V1 {
                    int ADD(Pair) = 1;
                    void PING(void) = 2;
                } = 1;
            } = 0x20000001;
        """)
        (prog,) = spec.definitions
        assert isinstance(prog, ProgramDef)
        assert prog.number.value == 0x20000001
        (version,) = prog.versions
        assert [p.name for p in version.procedures] == ["ADD", "PING"]

    def test_keywords_usable_as_identifiers(self):
        (s,) = parse_source("struct S { int version; int program; int default_value; };").definitions
        assert [f.name for f in s.fields] == ["version", "program", "default_value"]


class TestInlineBodies:
    def test_nested_struct_is_hoisted_before_parent(self):
        spec = parse_source("struct Outer { struct { int a; } inner; int b; };")
        assert names(spec) == ["Outer_inner", "Outer"]
        outer = spec.definitions[1]
        assert outer.fields[0].ty.name == "Outer_inner"

    def test_deeply_nested_bodies(self):
        spec = parse_source("struct A { struct { enum { X, Y } e; } b; };")
        assert names(spec) == ["A_b_e", "A_b", "A"]

    def test_typedef_of_inline_body_names_it(self):
        spec = parse_source("typedef struct { int a; } Pair;")
        (pair,) = spec.definitions
        assert isinstance(pair, StructDef)
        assert pair.name == "Pair"

    def test_inline_union_in_arm(self):
        spec = parse_source("""
            union U switch (int k) {
                case 1: enum { ON, OFF } state;
            };
        """)
        assert names(spec) == ["U_state", "U"]


class TestExtendedGrammar:
    def test_arithmetic_requires_extended(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("const A = 2 * 3;")
        assert exc.value.code == "XE1004"

    def test_arithmetic_parsed_when_extended(self):
        (c,) = parse_source("const A = (1 + 2) * -B;", extended=True).definitions
        assert isinstance(c.value, BinaryOp)
        assert c.value.op == "*"
        assert isinstance(c.value.right, Negate)

    def test_passthrough_requires_extended(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("%#include <rpc/rpc.h>\nconst A = 1;")
        assert exc.value.code == "XE1004"

    def test_passthrough_collected(self):
        spec = parse_source("%from mypkg import Clock\nconst A = 1;", extended=True)
        assert spec.passthrough == ["from mypkg import Clock"]


class TestSyntaxErrors:
    def test_unexpected_token(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("struct S { int a };")
        assert exc.value.code == "XE1001"
        assert (exc.value.span.line, exc.value.span.col) == (1, 18)
        assert "';'" in exc.value.expected
        assert str(exc.value).startswith("unexpected '}', expected ")
        assert "';'" in str(exc.value)

    def test_unexpected_character(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("const A = 1;\nconst B = @;")
        assert exc.value.code == "XE1002"
        assert (exc.value.span.line, exc.value.span.col) == (2, 11)
        assert str(exc.value) == "unexpected character '@'"

    def test_unexpected_end(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("struct S { int a;")
        assert exc.value.code == "XE1003"
        assert exc.value.span.line == 1
        assert "'}'" in exc.value.expected
        assert str(exc.value).startswith("unexpected end of input, expected ")
        assert "'}'" in str(exc.value)

    def test_message_lists_every_expected_token(self):
        with pytest.raises(XdrSyntaxError) as exc:
            parse_source("const A = 1")
        assert exc.value.code == "XE1003"
        assert str(exc.value) == "unexpected end of input, expected " + ", ".join(exc.value.expected)


class TestComments:
    def test_comment_above_definition(self):
        (s,) = parse_source("/* A point on the plane. */\nstruct P { int x; };").definitions
        assert s.doc == "A point on the plane."

    def test_trailing_member_comment(self):
        (s,) = parse_source("struct P {\n    int x; // horizontal\n    int y;\n};").definitions
        assert s.fields[0].doc == "horizontal"
        assert s.fields[1].doc is None

    def test_block_comment_gutter_stripped(self):
        source = "/*\n * Line one.\n * Line two.\n */\nconst A = 1;"
        (c,) = parse_source(source).definitions
        assert c.doc == "Line one.\nLine two."

    def test_detached_comment_ignored(self):
        (c,) = parse_source("// unrelated\n\nconst A = 1;").definitions
        assert c.doc is None


class TestHeaders:
    def test_header_definitions_marked_and_prepended(self):
        header = parse_header("struct Clock { hyper ticks; };", "clock.x")
        spec = merge_headers(parse_source("struct Event { Clock at; };"), [header])
        assert names(spec) == ["Clock", "Event"]
        assert spec.definitions[0].from_header == "clock.x"
        assert spec.definitions[1].from_header is None
