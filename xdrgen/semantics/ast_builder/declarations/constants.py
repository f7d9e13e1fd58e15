"""Constant definition parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING
from lark import Tree
from xdrgen.semantics.ast import ConstDef
from xdrgen.semantics.ast_builder.expressions import parse_const_expr
from xdrgen.semantics.ast_builder.utils.tree_navigation import name_of, trees
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder


def parse_constdef(t: Tree, ast_builder: 'ASTBuilder') -> ConstDef:
    """Parse constant_def: "const" NAME "=" const_expr ";" """
    assert t.data == "constant_def"

    name_tok = name_of(t, "constant")
    value = parse_const_expr(trees(t.children)[0], ast_builder)

    return ConstDef(
        name=str(name_tok),
        value=value,
        loc=span_of(t),
        name_span=span_of(name_tok),
        doc=ast_builder.docs.doc_for(span_of(t)),
    )
