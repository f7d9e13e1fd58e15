"""Constant expression parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING

from lark import Tree, Token

from xdrgen.semantics.ast import Expr, IntLit, ConstRef, BinaryOp, Negate
from xdrgen.semantics.ast_builder.exceptions import XdrSyntaxError
from xdrgen.internals.report import span_of

if TYPE_CHECKING:
    from xdrgen.semantics.ast_builder.builder import ASTBuilder

_BINARY_OPS = {"add": "+", "sub": "-", "mul": "*", "div": "/"}


def parse_int_literal(tok: Token) -> int:
    """Parse a decimal, hexadecimal (0x) or octal (leading 0) literal."""
    text = str(tok)
    if text[:2] in ("0x", "0X"):
        return int(text[2:], 16)
    if len(text) > 1 and text.startswith("0"):
        try:
            return int(text[1:], 8)
        except ValueError:
            raise XdrSyntaxError("XE1005", span_of(tok), literal=text) from None
    return int(text)


def parse_const_expr(node, ast_builder: 'ASTBuilder') -> Expr:
    """Parse a const_expr subtree.

    Literals, names and negated literals belong to the standard grammar.
    Arithmetic, parentheses and negated names need the extended grammar.
    """
    if not isinstance(node, Tree):
        raise NotImplementedError(f"unexpected token {node!r} in constant expression")

    span = span_of(node)

    if node.data == "int_lit":
        return IntLit(loc=span, value=parse_int_literal(node.children[0]))

    if node.data == "const_ref":
        return ConstRef(loc=span, name=str(node.children[0]))

    if node.data == "neg":
        operand = parse_const_expr(node.children[0], ast_builder)
        if isinstance(operand, IntLit):
            return IntLit(loc=span, value=-operand.value)
        _require_extended(ast_builder, span, "negated constant reference")
        return Negate(loc=span, operand=operand)

    if node.data == "paren":
        _require_extended(ast_builder, span, "parenthesized constant expression")
        return parse_const_expr(node.children[0], ast_builder)

    if node.data in _BINARY_OPS:
        _require_extended(ast_builder, span, "arithmetic constant expression")
        left = parse_const_expr(node.children[0], ast_builder)
        right = parse_const_expr(node.children[1], ast_builder)
        return BinaryOp(loc=span, op=_BINARY_OPS[node.data], left=left, right=right)

    raise NotImplementedError(f"unknown constant expression node '{node.data}'")


def _require_extended(ast_builder: 'ASTBuilder', span, construct: str) -> None:
    if not ast_builder.extended:
        raise XdrSyntaxError("XE1004", span, construct=construct)
