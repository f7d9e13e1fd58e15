"""Main ASTBuilder orchestrator for the XDR compiler.

This module contains the core ASTBuilder class that turns the Lark parse tree
into typed AST nodes. The builder delegates to specialized parsers:

- Type and declaration parsing: semantics.ast_builder.types
- Constant expressions: semantics.ast_builder.expressions
- Definition parsing: semantics.ast_builder.declarations
- Comment attachment: semantics.ast_builder.utils.comments

Inline `struct`, `union` and `enum` bodies nested inside a declaration are
hoisted into synthetic top-level definitions named `<Outer>_<field>` and
placed just before the definition that contains them.
"""
from __future__ import annotations
from typing import List, Optional

from lark import Tree, Token

from xdrgen.semantics.ast import Specification, Definition, Field
from xdrgen.semantics.ast_builder.utils.comments import CommentIndex
from xdrgen.semantics.ast_builder.utils.tree_navigation import first_tree_child
from xdrgen.internals.report import span_of
from xdrgen.internals import errors as er


class ASTBuilder:
    def __init__(self, extended: bool = False, comments: Optional[List[Token]] = None):
        """Initialize ASTBuilder.

        Args:
            extended: Accept arithmetic constant expressions.
            comments: COMMENT tokens collected by the lexer, used as doc strings.
        """
        self.extended = extended
        self.docs = CommentIndex(comments or [])
        self._type_parser = None
        self._hoisted: List[Definition] = []

    @property
    def type_parser(self):
        """Lazy-load TypeParser on first use."""
        if self._type_parser is None:
            from xdrgen.semantics.ast_builder.types.parser import TypeParser
            self._type_parser = TypeParser(self)
        return self._type_parser

    def build(self, tree: Tree) -> Specification:
        """Build the Specification from the parse tree, keeping source order."""
        assert isinstance(tree, Tree) and tree.data == "start"
        definitions: List[Definition] = []

        for node in tree.children:
            if not isinstance(node, Tree):
                continue
            self._hoisted = []
            definition = self._build_definition(node)
            definitions.extend(self._hoisted)
            definitions.append(definition)

        return Specification(loc=span_of(tree), definitions=definitions)

    def hoist(self, definition: Definition) -> None:
        self._hoisted.append(definition)

    def _build_definition(self, node: Tree) -> Definition:
        from xdrgen.semantics.ast_builder.declarations import (
            constants, typedefs, structs, enums, unions, programs,
        )

        if node.data == "constant_def":
            return constants.parse_constdef(node, self)
        if node.data == "typedef_def":
            return typedefs.parse_typedef(node, self)
        if node.data == "enum_def":
            return enums.parse_enumdef(node, self)
        if node.data == "struct_def":
            return structs.parse_structdef(node, self)
        if node.data == "union_def":
            return unions.parse_uniondef(node, self)
        if node.data == "program_def":
            return programs.parse_programdef(node, self)
        er.raise_internal_error("XE0004", node=node.data)

    def build_body(self, name: str, body: Tree, loc_tree: Tree, doc: Optional[str] = None) -> Definition:
        """Build a named definition from an enum_body, struct_body or union_body.

        Args:
            name: Name of the resulting definition.
            body: The *_body tree.
            loc_tree: Tree whose span the definition reports.
            doc: Doc string for the definition.
        """
        from xdrgen.semantics.ast_builder.declarations import structs, enums, unions

        if body.data == "enum_body":
            return enums.build_enum(name, body, loc_tree, doc, self)
        if body.data == "struct_body":
            return structs.build_struct(name, body, loc_tree, doc, self)
        if body.data == "union_body":
            return unions.build_union(name, body, loc_tree, doc, self)
        er.raise_internal_error("XE0004", node=body.data)

    def declaration_field(self, decl: Tree, owner: str, member: Optional[Tree] = None) -> Field:
        """Parse a declaration into a Field, hoisting any inline body it declares.

        Args:
            decl: The decl_* tree.
            owner: Enclosing definition name.
            member: Tree spanning the whole member (declaration plus `;`), for docs.
        """
        field, inline = self.type_parser.parse_declaration(decl, owner)
        field.doc = self.docs.doc_for(span_of(member if member is not None else decl))
        if inline is not None:
            self.hoist(self.build_body(f"{owner}_{field.name}", first_tree_child(inline), inline))
        return field
