"""Attach source comments to the declarations they document."""
from __future__ import annotations
from typing import Dict, List, Optional, Set

from lark import Token

from xdrgen.internals.report import Span


def clean_comment(text: str) -> str:
    """Strip comment markers and the leading `*` gutter of block comments."""
    if text.startswith("//"):
        return text[2:].strip()
    body = text[2:-2] if text.startswith("/*") else text
    lines = []
    for line in body.splitlines():
        line = line.strip()
        if line.startswith("*"):
            line = line[1:].strip()
        lines.append(line)
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


class CommentIndex:
    """Lookup of collected COMMENT tokens by line.

    A comment documents a node when it trails the node's last line or ends on
    the line directly above the node's first line. Trailing comments win, and
    each comment is attached at most once.
    """

    def __init__(self, comments: List[Token]) -> None:
        self._by_start: Dict[int, Token] = {}
        self._by_end: Dict[int, Token] = {}
        for tok in comments:
            self._by_start.setdefault(tok.line, tok)
            self._by_end[tok.end_line] = tok
        self._used: Set[int] = set()

    def doc_for(self, span: Optional[Span]) -> Optional[str]:
        if span is None:
            return None
        trailing = self._by_start.get(span.end_line)
        if trailing is not None and trailing.column >= span.end_col and id(trailing) not in self._used:
            return self._take(trailing)
        above = self._by_end.get(span.line - 1)
        if above is not None and id(above) not in self._used:
            return self._take(above)
        return None

    def _take(self, tok: Token) -> Optional[str]:
        self._used.add(id(tok))
        text = clean_comment(str(tok))
        return text or None
