"""Typedef parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING
from lark import Tree
from xdrgen.semantics.ast import Definition, TypedefDef
from xdrgen.semantics.ast_builder.utils.tree_navigation import first_name, first_tree_child
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder


def parse_typedef(t: Tree, ast_builder: 'ASTBuilder') -> Definition:
    """Parse typedef_def: "typedef" declaration ";"

    `typedef struct {...} Name;` (and the enum and union forms) define `Name`
    directly instead of aliasing a hoisted body.
    """
    assert t.data == "typedef_def"
    doc = ast_builder.docs.doc_for(span_of(t))
    decl = first_tree_child(t)
    name_tok = first_name(decl.children)
    owner = str(name_tok) if name_tok is not None else ""

    field, inline = ast_builder.type_parser.parse_declaration(decl, owner)
    if inline is not None:
        definition = ast_builder.build_body(field.name, first_tree_child(inline), t, doc)
        definition.name_span = field.name_span
        return definition

    return TypedefDef(
        name=field.name,
        ty=field.ty,
        loc=span_of(t),
        name_span=field.name_span,
        doc=doc,
    )
