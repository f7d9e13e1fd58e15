"""Turn syntax errors from the front end into reporter diagnostics."""
from __future__ import annotations

from typing import Optional

from xdrgen.internals import errors as er
from xdrgen.internals.report import Reporter
from xdrgen.semantics.ast_builder import XdrSyntaxError


def handle_parse_exception(exc: XdrSyntaxError, reporter: Reporter,
                           filename: Optional[str] = None) -> None:
    """Record `exc` as a single coded diagnostic.

    Header files pass their own `filename` so the location points into the
    header rather than the main source.
    """
    er.emit(reporter, er.ERR[exc.code], exc.span, filename=filename, **exc.params)
