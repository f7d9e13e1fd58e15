"""Struct definition and field parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional
from lark import Tree
from xdrgen.semantics.ast import StructDef, Field
from xdrgen.semantics.ast_builder.utils.tree_navigation import name_of, first_tree, first_tree_child, trees
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder


def parse_structdef(t: Tree, ast_builder: 'ASTBuilder') -> StructDef:
    """Parse struct_def: "struct" NAME struct_body ";" """
    assert t.data == "struct_def"

    name_tok = name_of(t, "struct")

    doc = ast_builder.docs.doc_for(span_of(t))
    body = first_tree(t.children, "struct_body")
    struct = build_struct(str(name_tok), body, t, doc, ast_builder)
    struct.name_span = span_of(name_tok)
    return struct


def build_struct(name: str, body: Tree, loc_tree: Tree, doc: Optional[str], ast_builder: 'ASTBuilder') -> StructDef:
    """Build a StructDef from struct_body: "{" struct_member+ "}" """
    assert body.data == "struct_body"

    fields: List[Field] = []
    for member in trees(body.children, "struct_member"):
        fields.append(ast_builder.declaration_field(first_tree_child(member), name, member))

    return StructDef(
        name=name,
        fields=fields,
        loc=span_of(loc_tree),
        doc=doc,
    )
