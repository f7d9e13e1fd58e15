"""Lark parser setup and AST construction."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, UnexpectedInput, UnexpectedCharacters, UnexpectedToken, UnexpectedEOF

from xdrgen.semantics.ast import Specification
from xdrgen.semantics.ast_builder import ASTBuilder, XdrSyntaxError
from xdrgen.internals.report import Span

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"

# Regex terminals shown by their role instead of their pattern
_TERMINAL_NAMES = {
    "NAME": "identifier",
    "NUMBER": "number",
    "$END": "end of input",
}


def make_parser(comments: List[Token], passthrough: List[Token]) -> Lark:
    """Build the LALR parser, collecting comments and `%` lines as they are lexed.

    The contextual lexer lets keywords of one construct (`version`, `default`,
    `program`) double as identifiers everywhere else.
    """
    kwargs = dict(
        parser="lalr",
        lexer="contextual",
        propagate_positions=True,
        maybe_placeholders=False,
        lexer_callbacks={
            "COMMENT": comments.append,
            "PASSTHROUGH": passthrough.append,
        },
    )
    return Lark.open(str(GRAMMAR_PATH), **kwargs)


def describe_terminal(parser: Lark, name: str) -> str:
    """Human-readable form of a terminal name ('SEMICOLON' -> "';'")."""
    if name in _TERMINAL_NAMES:
        return _TERMINAL_NAMES[name]
    try:
        term = parser.get_terminal(name)
    except KeyError:
        return name
    if term.pattern.type == "str":
        return repr(term.pattern.value)
    return name.lower()


def translate_parse_error(e: UnexpectedInput, parser: Lark) -> XdrSyntaxError:
    """Convert a Lark parse exception into a coded XdrSyntaxError."""
    line = getattr(e, "line", None) or 0
    col = getattr(e, "column", None) or 0
    span = Span(line, col, line, col + 1) if line > 0 else None
    names = getattr(e, "expected", None) or getattr(e, "allowed", None) or ()
    expected = sorted({describe_terminal(parser, t) for t in names})
    expected_text = ", ".join(expected) if expected else "a definition"

    if isinstance(e, UnexpectedCharacters):
        return XdrSyntaxError("XE1002", span, expected, char=e.char)

    if isinstance(e, UnexpectedEOF) or (isinstance(e, UnexpectedToken) and e.token.type == "$END"):
        return XdrSyntaxError("XE1003", span, expected, wanted=expected_text)

    if isinstance(e, UnexpectedToken):
        found = f"'{e.token}'"
        return XdrSyntaxError("XE1001", span, expected, found=found, wanted=expected_text)

    return XdrSyntaxError("XE1001", span, expected, found="input", wanted=expected_text)


def parse_source(src: str, extended: bool = False, dump_parse: bool = False) -> Specification:
    """Parse XDR source text into a Specification.

    Args:
        src: Source text.
        extended: Accept arithmetic constant expressions and `%` passthrough lines.
        dump_parse: Print the Lark parse tree.

    Returns:
        The unresolved Specification.

    Raises:
        XdrSyntaxError: On the first syntax error.
    """
    comments: List[Token] = []
    passthrough: List[Token] = []
    parser = make_parser(comments, passthrough)

    try:
        tree = parser.parse(src)
    except UnexpectedInput as e:
        raise translate_parse_error(e, parser) from None

    if dump_parse:
        print(tree.pretty())

    if passthrough and not extended:
        first = passthrough[0]
        raise XdrSyntaxError(
            "XE1004",
            Span(first.line, first.column, first.line, first.column + 1),
            construct="'%' passthrough line",
        )

    spec = ASTBuilder(extended=extended, comments=comments).build(tree)
    spec.passthrough = [str(tok)[1:] for tok in passthrough]
    return spec


def parse_header(src: str, filename: str, extended: bool = False) -> Specification:
    """Parse a header specification whose definitions are resolved but not emitted."""
    spec = parse_source(src, extended=extended)
    for definition in spec.definitions:
        definition.from_header = filename
    return spec


def merge_headers(spec: Specification, headers: Optional[List[Specification]]) -> Specification:
    """Prepend header definitions so the main specification can reference them."""
    if not headers:
        return spec
    definitions = [d for h in headers for d in h.definitions]
    return Specification(loc=spec.loc, definitions=definitions + spec.definitions,
                         passthrough=spec.passthrough)
