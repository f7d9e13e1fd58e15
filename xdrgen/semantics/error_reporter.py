"""
Diagnostic emission for the semantic passes.

Each pass owns a `PassErrorReporter`. Besides shortening `er.emit(...)` calls
it tracks which file the definition being checked came from, so problems in
header files point into the header:

    with self.err.in_file(d.from_header):
        self.err.emit(er.ERR.XE2002, ty.loc, name=ty.name)
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from xdrgen.internals import errors as er
from xdrgen.internals.report import Reporter, Span


class PassErrorReporter:
    """Emitter bound to one reporter and the file currently being checked.

    `filename` is None while checking the main source.
    """

    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.filename: Optional[str] = None

    @contextmanager
    def in_file(self, filename: Optional[str]) -> Iterator[None]:
        """Attribute diagnostics emitted inside the block to `filename`."""
        saved = self.filename
        self.filename = filename
        try:
            yield
        finally:
            self.filename = saved

    def emit(self, error_msg: er.ErrorMessage, span: Optional[Span], **kwargs) -> None:
        er.emit(self.reporter, error_msg, span, filename=self.filename, **kwargs)
