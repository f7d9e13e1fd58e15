"""Indentation-aware text writer for generated Python source."""
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List


class CodeWriter:
    def __init__(self, indent_width: int = 4) -> None:
        self.indent = 0
        self.indent_width = indent_width
        self.lines: List[str] = []

    def change(self, indentchange: int) -> None:
        self.indent += indentchange

    def pr(self, *parts: str) -> None:
        """Write one line at the current indentation."""
        text = "".join(parts)
        if not text:
            self.lines.append("")
            return
        pad = " " * (self.indent * self.indent_width)
        for line in text.split("\n"):
            self.lines.append(f"{pad}{line}" if line else "")

    def blank(self, count: int = 1) -> None:
        """Write `count` blank lines, collapsing runs."""
        trailing = 0
        for line in reversed(self.lines):
            if line:
                break
            trailing += 1
        for _ in range(max(0, count - trailing)):
            self.lines.append("")

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Write `header` and indent everything written inside the block."""
        self.pr(header)
        self.change(1)
        try:
            yield
        finally:
            self.change(-1)

    def getvalue(self) -> str:
        text = "\n".join(self.lines).rstrip("\n")
        return f"{text}\n"
