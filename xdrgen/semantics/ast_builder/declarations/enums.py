"""Enum definition and variant parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional
from lark import Tree
from xdrgen.semantics.ast import EnumDef, EnumVariant
from xdrgen.semantics.ast_builder.expressions import parse_const_expr
from xdrgen.semantics.ast_builder.utils.tree_navigation import name_of, first_tree, trees
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder


def parse_enumdef(t: Tree, ast_builder: 'ASTBuilder') -> EnumDef:
    """Parse enum_def: "enum" NAME enum_body ";" """
    assert t.data == "enum_def"

    name_tok = name_of(t, "enum")

    doc = ast_builder.docs.doc_for(span_of(t))
    body = first_tree(t.children, "enum_body")
    enum = build_enum(str(name_tok), body, t, doc, ast_builder)
    enum.name_span = span_of(name_tok)
    return enum


def build_enum(name: str, body: Tree, loc_tree: Tree, doc: Optional[str], ast_builder: 'ASTBuilder') -> EnumDef:
    """Build an EnumDef from enum_body: "{" enum_variant ("," enum_variant)* "}" """
    assert body.data == "enum_body"

    variants: List[EnumVariant] = []
    for child in trees(body.children, "enum_variant"):
        variants.append(parse_enumvariant(child, ast_builder))

    return EnumDef(
        name=name,
        variants=variants,
        loc=span_of(loc_tree),
        doc=doc,
    )


def parse_enumvariant(t: Tree, ast_builder: 'ASTBuilder') -> EnumVariant:
    """Parse enum_variant: NAME ["=" const_expr]"""
    assert t.data == "enum_variant"

    name_tok = name_of(t, "variant")

    value_node = next(iter(trees(t.children)), None)
    value = parse_const_expr(value_node, ast_builder) if value_node is not None else None

    return EnumVariant(
        name=str(name_tok),
        value=value,
        loc=span_of(t),
        doc=ast_builder.docs.doc_for(span_of(t)),
    )
