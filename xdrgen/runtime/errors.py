"""Errors raised by generated encode and decode procedures."""
from __future__ import annotations
from typing import Optional


class XdrError(Exception):
    """Base class of every runtime codec error."""


class EncodeError(XdrError):
    """A value cannot be represented on the wire.

    Raised for out-of-range integers, fixed-length data of the wrong size,
    unknown enum values and union discriminants that select no arm.
    """


class DecodeError(XdrError):
    """The input is not a valid encoding.

    Raised for truncated input, trailing bytes, booleans other than 0 or 1,
    unknown enum values, unmatched union discriminants and invalid UTF-8.
    """


class BoundsError(XdrError):
    """A variable-length value exceeds its declared maximum."""

    def __init__(self, length: int, bound: int, what: Optional[str] = None):
        self.length = length
        self.bound = bound
        self.what = what or "value"
        super().__init__(f"{self.what} length {length} exceeds bound {bound}")
