"""Optional black formatting of generated modules.

black is an optional dependency (`pip install xdrgen[format]`); it is
imported only when formatting is requested.
"""
from __future__ import annotations


class FormattingError(Exception):
    pass


def format_source(source: str, line_length: int = 88) -> str:
    """Run black over generated source.

    Raises:
        FormattingError: black is not installed or rejected the source.
    """
    try:
        import black
    except ImportError as e:
        raise FormattingError("black is not installed; install xdrgen[format]") from e

    try:
        return black.format_str(source, mode=black.Mode(line_length=line_length))
    except black.InvalidInput as e:
        raise FormattingError(f"black rejected the generated source: {e}") from e
