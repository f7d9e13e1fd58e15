"""XDR primitive codec (RFC 4506).

`Packer` appends big-endian items to a buffer and `Unpacker` reads them
back. Every item occupies a multiple of four bytes: opaque data and strings
are followed by `(4 - len % 4) % 4` zero bytes, and variable-length items are
preceded by their length as an unsigned int.

Element codecs passed to the array and optional methods take the packer
(or unpacker) as their first argument, so both generated `pack_<Name>`
functions and unbound methods such as `Packer.pack_int` can be used.
"""
from __future__ import annotations

import operator
import struct
import sys
from typing import Any, Callable, List, Optional, Type, TypeVar

from xdrgen.runtime.errors import EncodeError, DecodeError, BoundsError

T = TypeVar("T")

_INT = struct.Struct(">i")
_UINT = struct.Struct(">I")
_HYPER = struct.Struct(">q")
_UHYPER = struct.Struct(">Q")
_FLOAT = struct.Struct(">f")
_DOUBLE = struct.Struct(">d")

_RANGES = {
    "int": (-(1 << 31), (1 << 31) - 1),
    "unsigned int": (0, (1 << 32) - 1),
    "hyper": (-(1 << 63), (1 << 63) - 1),
    "unsigned hyper": (0, (1 << 64) - 1),
}


def padding(length: int) -> int:
    """Number of zero bytes that align `length` to four bytes."""
    return (4 - length % 4) % 4


class Packer:
    def __init__(self) -> None:
        self._buf = bytearray()

    def get_buffer(self) -> bytes:
        return bytes(self._buf)

    # --- scalars ---

    def _pack_integer(self, fmt: struct.Struct, kind: str, value: Any) -> None:
        try:
            n = operator.index(value)
        except TypeError:
            raise EncodeError(f"{kind} expects an integer, got {type(value).__name__}") from None
        lo, hi = _RANGES[kind]
        if not lo <= n <= hi:
            raise EncodeError(f"{n} is out of range for {kind}")
        self._buf += fmt.pack(n)

    def pack_int(self, value: int) -> None:
        self._pack_integer(_INT, "int", value)

    def pack_uint(self, value: int) -> None:
        self._pack_integer(_UINT, "unsigned int", value)

    def pack_hyper(self, value: int) -> None:
        self._pack_integer(_HYPER, "hyper", value)

    def pack_uhyper(self, value: int) -> None:
        self._pack_integer(_UHYPER, "unsigned hyper", value)

    def pack_float(self, value: float) -> None:
        try:
            self._buf += _FLOAT.pack(value)
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"cannot encode {value!r} as float: {e}") from None

    def pack_double(self, value: float) -> None:
        try:
            self._buf += _DOUBLE.pack(value)
        except struct.error as e:
            raise EncodeError(f"cannot encode {value!r} as double: {e}") from None

    def pack_bool(self, value: bool) -> None:
        self._buf += _INT.pack(1 if value else 0)

    def pack_enum(self, value: int, enum_cls: Type) -> None:
        """Encode an enum; `value` must be one of the values of `enum_cls`."""
        try:
            member = enum_cls(value)
        except ValueError:
            raise EncodeError(f"enum '{enum_cls.__name__}' - invalid value: {value!r}") from None
        self._buf += _INT.pack(int(member))

    # --- opaque data and strings ---

    @staticmethod
    def _as_bytes(data: Any, kind: str) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise EncodeError(f"{kind} expects bytes, got {type(data).__name__}")
        return bytes(data)

    def pack_fopaque(self, length: int, data: bytes) -> None:
        data = self._as_bytes(data, "fixed opaque")
        if len(data) != length:
            raise EncodeError(f"fixed opaque expects {length} bytes, got {len(data)}")
        self._buf += data
        self._buf += b"\0" * padding(length)

    def pack_opaque(self, data: bytes, bound: Optional[int] = None) -> None:
        data = self._as_bytes(data, "opaque")
        if bound is not None and len(data) > bound:
            raise BoundsError(len(data), bound, "opaque")
        self.pack_uint(len(data))
        self._buf += data
        self._buf += b"\0" * padding(len(data))

    def pack_string(self, value: str, bound: Optional[int] = None) -> None:
        """Encode a string as UTF-8; the bound applies to the encoded byte length."""
        if not isinstance(value, str):
            raise EncodeError(f"string expects str, got {type(value).__name__}")
        try:
            data = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodeError(f"cannot encode string as UTF-8: {e.reason}") from None
        if bound is not None and len(data) > bound:
            raise BoundsError(len(data), bound, "string")
        self.pack_uint(len(data))
        self._buf += data
        self._buf += b"\0" * padding(len(data))

    # --- arrays and optionals ---

    @staticmethod
    def _as_items(items: Any, kind: str) -> List[Any]:
        if isinstance(items, (str, bytes)) or not hasattr(items, "__len__"):
            raise EncodeError(f"{kind} expects a list, got {type(items).__name__}")
        return items

    def pack_farray(self, length: int, items: List[T], pack_item: Callable[["Packer", T], None]) -> None:
        items = self._as_items(items, "fixed array")
        if len(items) != length:
            raise EncodeError(f"fixed array expects {length} elements, got {len(items)}")
        for item in items:
            pack_item(self, item)

    def pack_array(self, items: List[T], pack_item: Callable[["Packer", T], None],
                   bound: Optional[int] = None) -> None:
        items = self._as_items(items, "array")
        if bound is not None and len(items) > bound:
            raise BoundsError(len(items), bound, "array")
        self.pack_uint(len(items))
        for item in items:
            pack_item(self, item)

    def pack_optional(self, value: Optional[T], pack_item: Callable[["Packer", T], None]) -> None:
        if value is None:
            self.pack_bool(False)
        else:
            self.pack_bool(True)
            pack_item(self, value)


class Unpacker:
    def __init__(self, data: bytes) -> None:
        self._buf = memoryview(bytes(data))
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def done(self) -> None:
        """Raise DecodeError unless the whole input has been consumed."""
        if self.remaining():
            raise DecodeError(f"{self.remaining()} trailing bytes after offset {self._pos}")

    def _read(self, n: int) -> bytes:
        if n > self.remaining():
            raise DecodeError(f"unexpected end of input at offset {self._pos}: "
                              f"need {n} bytes, {self.remaining()} left")
        data = self._buf[self._pos:self._pos + n].tobytes()
        self._pos += n
        return data

    def _unpack(self, fmt: struct.Struct):
        return fmt.unpack(self._read(fmt.size))[0]

    # --- scalars ---

    def unpack_int(self) -> int:
        return self._unpack(_INT)

    def unpack_uint(self) -> int:
        return self._unpack(_UINT)

    def unpack_hyper(self) -> int:
        return self._unpack(_HYPER)

    def unpack_uhyper(self) -> int:
        return self._unpack(_UHYPER)

    def unpack_float(self) -> float:
        return self._unpack(_FLOAT)

    def unpack_double(self) -> float:
        return self._unpack(_DOUBLE)

    def unpack_bool(self) -> bool:
        value = self._unpack(_INT)
        if value not in (0, 1):
            raise DecodeError(f"invalid bool value: {value}")
        return value == 1

    def unpack_enum(self, enum_cls: Type[T]) -> T:
        value = self._unpack(_INT)
        try:
            return enum_cls(value)
        except ValueError:
            raise DecodeError(f"enum '{enum_cls.__name__}' - invalid value: "
                              f"{value} (0x{value & 0xFFFFFFFF:X})") from None

    # --- opaque data and strings ---

    def unpack_fopaque(self, length: int) -> bytes:
        data = self._read(length)
        self._read(padding(length))
        return data

    def unpack_opaque(self, bound: Optional[int] = None) -> bytes:
        length = self.unpack_uint()
        if bound is not None and length > bound:
            raise BoundsError(length, bound, "opaque")
        return self.unpack_fopaque(length)

    def unpack_string(self, bound: Optional[int] = None) -> str:
        length = self.unpack_uint()
        if bound is not None and length > bound:
            raise BoundsError(length, bound, "string")
        data = self.unpack_fopaque(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid UTF-8 in string: {e.reason}") from None

    # --- arrays and optionals ---

    def unpack_farray(self, length: int, unpack_item: Callable[["Unpacker"], T]) -> List[T]:
        return [unpack_item(self) for _ in range(length)]

    def unpack_array(self, unpack_item: Callable[["Unpacker"], T], bound: Optional[int] = None) -> List[T]:
        length = self.unpack_uint()
        if bound is not None and length > bound:
            raise BoundsError(length, bound, "array")
        if length > self.remaining():
            # Every element occupies at least one byte on the wire
            raise DecodeError(f"invalid array len: {length} (0x{length:X}) "
                              f"with {self.remaining()} bytes left")
        return [unpack_item(self) for _ in range(length)]

    def unpack_optional(self, unpack_item: Callable[["Unpacker"], T]) -> Optional[T]:
        if self.unpack_bool():
            return unpack_item(self)
        return None


def encode(pack_fn: Callable[[Packer, T], None], value: T) -> bytes:
    """Encode `value` with a generated `pack_<Name>` function.

    Raises:
        EncodeError: If the value cannot be represented, including values
            nested deeper than the interpreter's recursion limit.
        BoundsError: If a variable-length item exceeds its bound.
    """
    packer = Packer()
    try:
        pack_fn(packer, value)
    except RecursionError:
        raise EncodeError(f"value nested too deeply to encode "
                          f"(recursion limit {sys.getrecursionlimit()})") from None
    return packer.get_buffer()


def decode(unpack_fn: Callable[[Unpacker], T], data: bytes) -> T:
    """Decode `data` with a generated `unpack_<Name>` function.

    Raises:
        DecodeError: If `data` is truncated, malformed, nested deeper than
            the interpreter's recursion limit or has trailing bytes.
        BoundsError: If a variable-length item exceeds its bound.
    """
    unpacker = Unpacker(data)
    try:
        value = unpack_fn(unpacker)
    except RecursionError:
        raise DecodeError(f"input nested too deeply at offset {unpacker.position} "
                          f"(recursion limit {sys.getrecursionlimit()})") from None
    unpacker.done()
    return value
