"""Diagnostics collected during one compilation and their terminal rendering."""
from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from lark import Token


class C:
    """ANSI color/style escape codes."""
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    RED = "\x1b[31m"
    YELLOW = "\x1b[33m"
    CYAN = "\x1b[36m"
    GRAY = "\x1b[90m"


@dataclass
class Span:
    line: int
    col: int
    end_line: int
    end_col: int


@dataclass
class Diagnostic:
    kind: str  # "error" | "warning"
    code: str
    message: str
    span: Optional[Span] = None
    filename: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    def location(self, default: str = "<input>") -> str:
        name = self.filename or default
        if self.span is None:
            return name
        return f"{name}:{self.span.line}:{self.span.col}"

    def __str__(self) -> str:
        loc = f"{self.span.line}:{self.span.col}: " if self.span else ""
        return f"{loc}{self.kind} [{self.code}]: {self.message}"


def span_of(node: Any) -> Optional[Span]:
    """Span of a lark Tree (through its meta) or Token, if it carries positions."""
    meta = getattr(node, "meta", None)
    if meta is not None and not getattr(meta, "empty", True):
        return Span(meta.line, meta.column, meta.end_line, meta.end_column)
    if isinstance(node, Token) and node.line is not None and node.column is not None:
        return Span(node.line, node.column, node.end_line or node.line, node.end_column or node.column)
    return None


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


class Reporter:
    """Accumulates diagnostics for a source file and the headers it pulls in."""

    def __init__(self, source: Optional[str] = None, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.items: List[Diagnostic] = []
        self.sources: Dict[str, str] = {}
        if source is not None:
            self.sources[filename] = source

    def add_source(self, filename: str, source: str) -> None:
        self.sources[filename] = source

    def _add(self, kind: str, code: str, msg: str, span: Optional[Span], filename: Optional[str]) -> None:
        self.items.append(Diagnostic(kind, code, msg, span, filename or self.filename))

    def error(self, code: str, msg: str, span: Optional[Span], filename: Optional[str] = None) -> None:
        self._add("error", code, msg, span, filename)

    def warn(self, code: str, msg: str, span: Optional[Span], filename: Optional[str] = None) -> None:
        self._add("warning", code, msg, span, filename)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.items if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.items if not d.is_error]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.items)

    @property
    def has_warnings(self) -> bool:
        return any(not d.is_error for d in self.items)

    def codes(self) -> List[str]:
        return [d.code for d in self.items]

    def summary(self) -> str:
        """One line such as "2 errors, 1 warning"; empty when nothing was reported."""
        parts = []
        if self.errors:
            parts.append(_plural(len(self.errors), "error"))
        if self.warnings:
            parts.append(_plural(len(self.warnings), "warning"))
        return ", ".join(parts)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _source_line(self, d: Diagnostic) -> str:
        source = self.sources.get(d.filename or self.filename)
        if source is None or d.span is None:
            return ""
        lines = source.splitlines()
        idx = d.span.line - 1
        return lines[idx] if 0 <= idx < len(lines) else ""

    def _head(self, d: Diagnostic, use_color: bool) -> str:
        loc = d.location(self.filename)
        message = d.message if d.message.endswith(".") else f"{d.message}."
        if not use_color:
            return f"{loc}: {d.kind} [{d.code}]: {message}"
        tint = C.RED if d.is_error else C.YELLOW
        kind = f"{C.BOLD}{tint}{d.kind}{C.RESET}"
        return f"{C.CYAN}{loc}{C.RESET}: {kind} [{C.DIM}{d.code}{C.RESET}]: {message}"

    def _render(self, d: Diagnostic, use_color: bool, use_unicode: bool) -> List[str]:
        head = self._head(d, use_color)
        if d.span is None:
            return [head]

        text = self._source_line(d)
        pad = " " * (max(1, d.span.col) - 1)

        if not use_unicode:
            return [head, f"  | {text}", f"  ` {pad}^"]

        if use_color:
            tint = C.RED if d.is_error else C.YELLOW

            def gray(s: str) -> str:
                return f"{C.GRAY}{s}{C.RESET}"

            def mark(s: str) -> str:
                return f"{tint}{s}{C.RESET}"
        else:
            def gray(s: str) -> str:
                return s

            mark = gray

        guide = "─" * (len(pad) + 2)
        return [
            f"{gray('  ╭──┤ ')}{head}",
            f"{gray('  │')}  {text}",
            f"{gray('  │')}  {mark(pad + '┯')}",
            f"{gray('  ╰' + guide)}{mark('╯')}",
        ]

    def format(self, use_color: bool = True, use_unicode: bool = True) -> str:
        """Render all diagnostics, each with its source line when a span is known."""
        out: List[str] = []
        for d in self.items:
            out.extend(self._render(d, use_color, use_unicode))
        return "\n".join(out)

    def print(self, stream=None, use_color: Optional[bool] = None, use_unicode: Optional[bool] = None) -> None:
        """Print diagnostics to `stream` (default: sys.stderr).

        Color and box-drawing characters are used on a TTY unless NO_COLOR,
        NO_UNICODE or TERM=dumb say otherwise.
        """
        stream = stream or sys.stderr
        fancy = bool(getattr(stream, "isatty", lambda: False)()) and os.getenv("TERM") != "dumb"
        if use_color is None:
            use_color = fancy and os.getenv("NO_COLOR") is None
        if use_unicode is None:
            use_unicode = fancy and os.getenv("NO_UNICODE") is None

        text = self.format(use_color=use_color, use_unicode=use_unicode)
        if text:
            print(text, file=stream)
