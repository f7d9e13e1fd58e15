"""Union definition and arm parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional
from lark import Tree
from xdrgen.semantics.ast import UnionDef, UnionArm, VoidType
from xdrgen.semantics.ast_builder.expressions import parse_const_expr
from xdrgen.semantics.ast_builder.utils.tree_navigation import name_of, first_tree, trees
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder

_DECLARATIONS = (
    "decl_plain", "decl_fixed_array", "decl_var_array", "decl_fixed_opaque",
    "decl_var_opaque", "decl_bare_opaque", "decl_string", "decl_fixed_string",
    "decl_bare_string", "decl_optional", "decl_void",
)


def parse_uniondef(t: Tree, ast_builder: 'ASTBuilder') -> UnionDef:
    """Parse union_def: "union" NAME union_body ";" """
    assert t.data == "union_def"

    name_tok = name_of(t, "union")

    doc = ast_builder.docs.doc_for(span_of(t))
    body = first_tree(t.children, "union_body")
    union = build_union(str(name_tok), body, t, doc, ast_builder)
    union.name_span = span_of(name_tok)
    return union


def build_union(name: str, body: Tree, loc_tree: Tree, doc: Optional[str], ast_builder: 'ASTBuilder') -> UnionDef:
    """Build a UnionDef from union_body: "switch" "(" declaration ")" "{" union_arm+ "}" """
    assert body.data == "union_body"

    decl = _declaration(body)
    discriminant = ast_builder.declaration_field(decl, name)

    arms: List[UnionArm] = []
    for arm in trees(body.children):
        if arm.data in ("case_arm", "default_arm"):
            arms.append(parse_unionarm(arm, name, ast_builder))

    return UnionDef(
        name=name,
        discriminant=discriminant,
        arms=arms,
        loc=span_of(loc_tree),
        doc=doc,
    )


def parse_unionarm(t: Tree, owner: str, ast_builder: 'ASTBuilder') -> UnionArm:
    """Parse case_arm: case_label+ declaration ";" | default_arm: "default" ":" declaration ";" """
    cases = [parse_const_expr(trees(label.children)[0], ast_builder)
             for label in trees(t.children, "case_label")]

    field = ast_builder.declaration_field(_declaration(t), owner, t)
    if isinstance(field.ty, VoidType):
        field = None

    return UnionArm(
        cases=cases,
        field=field,
        is_default=t.data == "default_arm",
        loc=span_of(t),
    )


def _declaration(t: Tree) -> Tree:
    for ch in trees(t.children):
        if ch.data in _DECLARATIONS:
            return ch
    raise NotImplementedError(f"{t.data}: missing declaration")
