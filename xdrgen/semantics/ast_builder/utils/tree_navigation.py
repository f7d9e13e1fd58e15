"""Helpers for picking children out of Lark parse trees."""
from __future__ import annotations
from typing import Iterable, List, Optional
from lark import Tree, Token


def trees(children: Iterable[object], data: Optional[str] = None) -> List[Tree]:
    """Tree children in order, optionally only those tagged `data`."""
    return [c for c in children if isinstance(c, Tree) and (data is None or c.data == data)]


def first_tree(children: Iterable[object], data: str) -> Optional[Tree]:
    return next(iter(trees(children, data)), None)


def first_name(children: Iterable[object]) -> Optional[Token]:
    return next((c for c in children if isinstance(c, Token) and c.type == "NAME"), None)


def name_of(t: Tree, what: str) -> Token:
    """The NAME token directly under `t`; the grammar guarantees one for `what`."""
    tok = first_name(t.children)
    if tok is None:
        raise NotImplementedError(f"{t.data}: missing {what} NAME")
    return tok


def first_tree_child(t: Tree) -> Tree:
    found = trees(t.children)
    if not found:
        raise NotImplementedError(f"missing operand under '{t.data}'")
    return found[0]
