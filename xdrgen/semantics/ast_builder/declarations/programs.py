"""RPC program definition parsing.

Programs are kept in the AST so a specification that declares them
compiles, but no code is generated for them.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, List
from lark import Tree
from xdrgen.semantics.ast import ProgramDef, ProgramVersion, Procedure, XdrType, VoidType
from xdrgen.semantics.ast_builder.expressions import parse_const_expr
from xdrgen.semantics.ast_builder.utils.tree_navigation import first_name, trees
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder


def parse_programdef(t: Tree, ast_builder: 'ASTBuilder') -> ProgramDef:
    """Parse program_def: "program" NAME "{" version_def+ "}" "=" const_expr ";" """
    assert t.data == "program_def"
    name_tok = first_name(t.children)
    doc = ast_builder.docs.doc_for(span_of(t))

    versions = [parse_version(v, ast_builder) for v in trees(t.children, "version_def")]
    number = parse_const_expr(trees(t.children)[-1], ast_builder)

    return ProgramDef(
        name=str(name_tok),
        versions=versions,
        number=number,
        loc=span_of(t),
        name_span=span_of(name_tok),
        doc=doc,
    )


def parse_version(t: Tree, ast_builder: 'ASTBuilder') -> ProgramVersion:
    """Parse version_def: "version" NAME "{" procedure_def+ "}" "=" const_expr ";" """
    name_tok = first_name(t.children)
    procedures = [parse_procedure(p, ast_builder) for p in trees(t.children, "procedure_def")]
    number = parse_const_expr(trees(t.children)[-1], ast_builder)
    return ProgramVersion(loc=span_of(t), name=str(name_tok), procedures=procedures, number=number)


def parse_procedure(t: Tree, ast_builder: 'ASTBuilder') -> Procedure:
    """Parse procedure_def: proc_type NAME "(" proc_type ("," proc_type)* ")" "=" const_expr ";" """
    name_tok = first_name(t.children)
    name = str(name_tok)
    types: List[XdrType] = [_proc_type(p, name, ast_builder) for p in trees(t.children, "proc_type")]
    number = parse_const_expr(trees(t.children)[-1], ast_builder)
    return Procedure(loc=span_of(t), name=name, result=types[0], args=types[1:], number=number)


def _proc_type(t: Tree, proc_name: str, ast_builder: 'ASTBuilder') -> XdrType:
    spec = next(iter(trees(t.children)), None)
    if spec is None:
        return VoidType(loc=span_of(t))
    return ast_builder.type_parser.parse_type_specifier(spec, f"{proc_name}_arg")
