"""Custom exceptions for AST building errors."""
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from xdrgen.internals import errors as er

if TYPE_CHECKING:
    from xdrgen.internals.report import Span


class XdrSyntaxError(Exception):
    """Exception raised when the source does not match the XDR grammar.

    Parsing is fail-fast: the first syntax problem aborts the build and is
    reported as a single coded diagnostic.

    Attributes:
        code: Error catalogue code (XE1001-XE1005).
        span: Position of the offending token, if known.
        expected: Human-readable names of the tokens that would have been accepted.
        params: Format parameters for the catalogue message.
    """
    def __init__(self, code: str, span: Optional['Span'] = None,
                 expected: Optional[List[str]] = None, **params):
        self.code = code
        self.span = span
        self.expected = list(expected or [])
        self.params = params
        super().__init__(er.ERR[code].text.format(**params))

    @property
    def message(self) -> str:
        return str(self)
