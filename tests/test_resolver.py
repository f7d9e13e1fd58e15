"""Tests for the semantic passes: names, constants, types, unions and cycles."""
import pytest

from xdrgen.semantics.ast import StructDef, UnionDef, TypedefDef, OptionalType
from xdrgen.semantics.passes.cycles import EdgeKind


def codes(reporter):
    return reporter.codes()


def by_name(resolved):
    return {d.name: d for d in resolved.definitions}


class TestNames:
    def test_duplicate_definition(self, analyze):
        resolved, r = analyze("const A = 1;\nstruct A { int x; };")
        assert resolved is None
        assert codes(r) == ["XE2001"]
        assert "test.x:1:7" in r.errors[0].message

    def test_enum_variant_shares_namespace(self, analyze):
        _, r = analyze("enum E { RED };\nconst RED = 2;")
        assert codes(r) == ["XE2001"]

    def test_builtin_redefinition(self, analyze):
        _, r = analyze("const TRUE = 1;")
        assert codes(r) == ["XE2001"]
        assert "builtin" in r.errors[0].message

    def test_undefined_type(self, analyze):
        _, r = analyze("struct S { Missing m; };")
        assert codes(r) == ["XE2002"]

    def test_constant_used_as_type(self, analyze):
        _, r = analyze("const N = 1;\nstruct S { N m; };")
        assert codes(r) == ["XE2003"]

    def test_errors_accumulate(self, analyze):
        _, r = analyze("struct S { A a; B b; };\nconst C = D;")
        assert sorted(codes(r)) == ["XE2002", "XE2002", "XE2010"]


class TestConstants:
    def test_forward_reference_and_variants(self, analyze):
        resolved, r = analyze("""
            const SIZE = LIMIT;
            const LIMIT = 0x10;
            enum E { A = 3, B, C = SIZE, D };
        """)
        assert not r.has_errors
        assert resolved.constants["SIZE"] == 16
        assert [resolved.constants[n] for n in "ABCD"] == [3, 4, 16, 17]

    def test_boolean_builtins(self, analyze):
        resolved, _ = analyze("const ON = TRUE;")
        assert resolved.constants["ON"] == 1

    def test_cycle_reported_once(self, analyze):
        _, r = analyze("const A = B;\nconst B = C;\nconst C = A;\nconst D = A;")
        assert codes(r) == ["XE2011"]
        assert "A -> B -> C -> A" in r.errors[0].message

    def test_type_used_as_constant(self, analyze):
        _, r = analyze("struct S { int x; };\nconst N = S;")
        assert codes(r) == ["XE2012"]

    def test_extended_arithmetic(self, analyze):
        resolved, _ = analyze("const A = 7;\nconst B = (A * 2 - 1) / 4;\nconst C = -A / 2;", extended=True)
        assert resolved.constants["B"] == 3
        assert resolved.constants["C"] == -3

    def test_division_by_zero(self, analyze):
        _, r = analyze("const A = 1 / 0;", extended=True)
        assert codes(r) == ["XE2013"]

    def test_enum_value_out_of_range(self, analyze):
        _, r = analyze("enum E { A = 0x7FFFFFFF, B };")
        assert codes(r) == ["XE2016"]


class TestTypes:
    def test_bounds_folded(self, analyze):
        resolved, _ = analyze("const N = 4;\nstruct S { opaque a[N]; string b<N>; int c<>; };")
        s = by_name(resolved)["S"]
        assert [f.ty.length for f in s.fields] == [4, 4, None]

    def test_negative_bound(self, analyze):
        _, r = analyze("const N = -1;\nstruct S { opaque a<N>; };")
        assert codes(r) == ["XE2014"]

    def test_undefined_bound_reported_once(self, analyze):
        _, r = analyze("struct S { int a<MISSING>; };")
        assert codes(r) == ["XE2010"]

    def test_quadruple_rejected(self, analyze):
        _, r = analyze("struct S { quadruple q; };")
        assert codes(r) == ["XE2020"]

    def test_fixed_string_rejected(self, analyze):
        _, r = analyze("struct S { string s[8]; };")
        assert codes(r) == ["XE2021"]

    def test_void_field_rejected(self, analyze):
        _, r = analyze("struct S { void; };")
        assert codes(r) == ["XE2022"]

    def test_duplicate_field(self, analyze):
        _, r = analyze("struct S { int a; hyper a; };")
        assert codes(r) == ["XE2023"]

    def test_every_reference_bound(self, analyze):
        resolved, _ = analyze("""
            typedef Point Corner;
            struct Point { int x; int y; };
            struct Box { Corner lo; Point hi; };
        """)
        box = by_name(resolved)["Box"]
        assert all(f.ty.target is not None for f in box.fields)
        assert box.fields[0].ty.target.name == "Corner"


class TestUnions:
    def test_case_values_resolved(self, analyze):
        resolved, r = analyze("""
            enum Kind { NONE, ONE, TWO };
            union U switch (Kind k) {
                case NONE: void;
                case ONE:
                case TWO: int n;
            };
        """)
        assert not r.has_errors
        u = by_name(resolved)["U"]
        assert [a.resolved_cases for a in u.arms] == [[0], [1, 2]]

    def test_typedef_discriminant(self, analyze):
        resolved, r = analyze("""
            typedef Kind Tag;
            enum Kind { A, B };
            union U switch (Tag t) { case A: int a; case B: void; };
        """)
        assert not r.has_errors

    def test_bad_discriminant_type(self, analyze):
        _, r = analyze("union U switch (hyper h) { case 1: void; };")
        assert codes(r) == ["XE2030"]

    def test_case_not_in_enum(self, analyze):
        _, r = analyze("""
            enum Kind { A };
            enum Other { Z };
            union U switch (Kind k) { case Z: void; default: void; };
        """)
        assert codes(r) == ["XE2031"]

    def test_bool_discriminant_takes_true_false(self, analyze):
        _, r = analyze("union U switch (bool b) { case 1: int x; };")
        assert codes(r) == ["XE2031"]
        resolved, r = analyze("union U switch (bool b) { case TRUE: int x; case FALSE: void; };")
        assert not r.has_errors

    def test_negative_case_on_unsigned(self, analyze):
        _, r = analyze("union U switch (unsigned int u) { case -1: void; };")
        assert codes(r) == ["XE2031"]

    def test_duplicate_case(self, analyze):
        _, r = analyze("const ONE = 1;\nunion U switch (int i) { case 1: int a; case ONE: int b; };")
        assert codes(r) == ["XE2033"]

    def test_two_defaults(self, analyze):
        _, r = analyze("union U switch (int i) { default: void; default: int x; };")
        assert codes(r) == ["XE2034"]

    def test_no_arms(self, analyze):
        _, r = analyze("union U switch (int i) { };")
        assert codes(r) == ["XE2035"]

    def test_unhandled_variant_warning(self, analyze):
        resolved, r = analyze("enum Kind { A, B, C };\nunion U switch (Kind k) { case A: void; };")
        assert resolved is not None
        assert codes(r) == ["XW2036"]
        assert "B, C" in r.warnings[0].message


class TestCycles:
    def test_self_reference_through_optional(self, analyze):
        resolved, r = analyze("struct Node { int value; Node *next; };")
        assert not r.has_errors
        node = by_name(resolved)["Node"]
        assert node.fields[1].ty.inner.indirect

    def test_infinite_cycle(self, analyze):
        _, r = analyze("struct A { B b; };\nstruct B { A a; };")
        assert codes(r) == ["XE2040"]
        assert "A -> B -> A" in r.errors[0].message

    def test_variable_array_needs_no_break(self, analyze):
        resolved, r = analyze("struct Tree { int v; Tree children<>; };")
        assert not r.has_errors
        tree = by_name(resolved)["Tree"]
        assert not tree.fields[1].ty.element.indirect
        (edge,) = resolved.graph["Tree"]
        assert edge.kind == EdgeKind.VARIABLE

    def test_optional_closest_to_back_edge_marked(self, analyze):
        resolved, r = analyze("""
            struct A { B *b; };
            struct B { C *c; };
            struct C { A *a; };
        """)
        assert not r.has_errors
        defs = by_name(resolved)
        assert defs["C"].fields[0].ty.inner.indirect
        assert not defs["A"].fields[0].ty.inner.indirect
        assert not defs["B"].fields[0].ty.inner.indirect

    def test_cycle_through_typedef(self, analyze):
        resolved, r = analyze("typedef Node *NodePtr;\nstruct Node { int v; NodePtr next; };")
        assert not r.has_errors
        ptr = by_name(resolved)["NodePtr"]
        assert isinstance(ptr, TypedefDef) and isinstance(ptr.ty, OptionalType)
        assert ptr.ty.inner.indirect


class TestOrdering:
    def test_embedded_types_come_first(self, analyze):
        resolved, _ = analyze("""
            struct Line { Point a; Point b; };
            struct Point { Coord x; Coord y; };
            typedef int Coord;
        """)
        order = [d.name for d in resolved.definitions]
        assert order.index("Coord") < order.index("Point") < order.index("Line")

    def test_order_is_a_permutation(self, analyze):
        source = """
            const N = 2;
            struct Wrapper { Inner items<N>; };
            struct Inner { Kind k; };
            enum Kind { X };
            union U switch (Kind k) { case X: Wrapper w; };
        """
        resolved, _ = analyze(source)
        assert sorted(d.name for d in resolved.definitions) == ["Inner", "Kind", "N", "U", "Wrapper"]
        order = [d.name for d in resolved.definitions]
        assert order.index("Wrapper") < order.index("U")
        assert order.index("Kind") < order.index("Inner")

    def test_struct_and_union_instances(self, analyze):
        resolved, _ = analyze("struct S { int a; };\nunion U switch (int d) { case 0: S s; };")
        defs = by_name(resolved)
        assert isinstance(defs["S"], StructDef)
        assert isinstance(defs["U"], UnionDef)
