"""Type specifier and declaration parsing.

Handles the `declaration` alternatives of the grammar (decl_* trees) and the
type specifiers inside them (t_* trees). Inline `struct`, `union` and `enum`
bodies are hoisted into their own top-level definitions and replaced by a
NamedType reference.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Tuple

from lark import Tree

from xdrgen.semantics.ast import (
    XdrType, ScalarType, ScalarKind, OpaqueType, StringType, ArrayType,
    OptionalType, NamedType, VoidType, Field,
)
from xdrgen.semantics.ast_builder.expressions import parse_const_expr
from xdrgen.semantics.ast_builder.utils.tree_navigation import first_name, name_of, first_tree_child
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder

_SCALARS = {
    "t_int": ScalarKind.INT,
    "t_uint": ScalarKind.UINT,
    "t_hyper": ScalarKind.HYPER,
    "t_uhyper": ScalarKind.UHYPER,
    "t_float": ScalarKind.FLOAT,
    "t_double": ScalarKind.DOUBLE,
    "t_quadruple": ScalarKind.QUADRUPLE,
    "t_bool": ScalarKind.BOOL,
}

_INLINE_BODIES = ("t_enum_inline", "t_struct_inline", "t_union_inline")


class TypeParser:
    def __init__(self, ast_builder: 'ASTBuilder'):
        self.ast_builder = ast_builder

    def parse_type_specifier(self, t: Tree, hoist_name: str) -> XdrType:
        """Parse a t_* tree.

        Args:
            t: The type specifier tree.
            hoist_name: Name given to an inline body if `t` is one.
        """
        span = span_of(t)
        if t.data in _SCALARS:
            return ScalarType(loc=span, kind=_SCALARS[t.data])
        if t.data == "t_named":
            return NamedType(loc=span, name=str(first_name(t.children)))
        if t.data in _INLINE_BODIES:
            body = first_tree_child(t)
            self.ast_builder.hoist(self.ast_builder.build_body(hoist_name, body, t))
            return NamedType(loc=span, name=hoist_name)
        raise NotImplementedError(f"unknown type specifier '{t.data}'")

    def parse_declaration(self, t: Tree, owner: str) -> Tuple[Field, Optional[Tree]]:
        """Parse a decl_* tree into a Field.

        Args:
            t: The declaration tree.
            owner: Name of the enclosing definition, used to name hoisted bodies.

        Returns:
            (field, inline_body). A `void` declaration yields an unnamed field
            of VoidType. `inline_body` is the
            t_*_inline tree of a plain declaration, left unhoisted so a
            `typedef struct {...} Name;` can become the definition itself.
        """
        span = span_of(t)
        if t.data == "decl_void":
            return Field(name="", ty=VoidType(loc=span), loc=span), None

        name_tok = name_of(t, "declaration")
        name = str(name_tok)
        hoist_name = f"{owner}_{name}"

        spec = t.children[0] if isinstance(t.children[0], Tree) else None
        bound = self._bound(t)

        if t.data == "decl_plain":
            assert spec is not None
            if spec.data in _INLINE_BODIES:
                return Field(name=name, ty=NamedType(loc=span_of(spec), name=hoist_name),
                             loc=span, name_span=span_of(name_tok)), spec
            ty: XdrType = self.parse_type_specifier(spec, hoist_name)
        elif t.data == "decl_fixed_array":
            ty = ArrayType(loc=span, element=self.parse_type_specifier(spec, hoist_name),
                           fixed=True, bound=bound)
        elif t.data == "decl_var_array":
            ty = ArrayType(loc=span, element=self.parse_type_specifier(spec, hoist_name),
                           fixed=False, bound=bound)
        elif t.data == "decl_optional":
            ty = OptionalType(loc=span, inner=self.parse_type_specifier(spec, hoist_name))
        elif t.data == "decl_fixed_opaque":
            ty = OpaqueType(loc=span, fixed=True, bound=bound)
        elif t.data in ("decl_var_opaque", "decl_bare_opaque"):
            ty = OpaqueType(loc=span, fixed=False, bound=bound)
        elif t.data in ("decl_string", "decl_bare_string"):
            ty = StringType(loc=span, bound=bound)
        elif t.data == "decl_fixed_string":
            ty = StringType(loc=span, bound=bound, fixed=True)
        else:
            raise NotImplementedError(f"unknown declaration '{t.data}'")

        return Field(name=name, ty=ty, loc=span, name_span=span_of(name_tok)), None

    def _bound(self, t: Tree):
        """The bound expression of a declaration, which follows its NAME."""
        seen_name = False
        for ch in t.children:
            if not isinstance(ch, Tree):
                seen_name = seen_name or getattr(ch, "type", None) == "NAME"
                continue
            if seen_name:
                return parse_const_expr(ch, self.ast_builder)
        return None
