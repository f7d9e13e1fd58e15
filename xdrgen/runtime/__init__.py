"""Runtime support imported by generated modules."""
from xdrgen.runtime.codec import Packer, Unpacker, encode, decode, padding
from xdrgen.runtime.errors import XdrError, EncodeError, DecodeError, BoundsError

__all__ = [
    'Packer',
    'Unpacker',
    'encode',
    'decode',
    'padding',
    'XdrError',
    'EncodeError',
    'DecodeError',
    'BoundsError',
]
