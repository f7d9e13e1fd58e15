"""Mapping of resolved XDR types to Python annotations and codec calls.

Generated procedures use two fixed parameter names: `packer` in
`pack_<Name>(packer, value)` and `unpacker` in `unpack_<Name>(unpacker)`.
The expressions produced here refer to those names.
"""
from __future__ import annotations
from typing import Set

from xdrgen.internals import errors as er
from xdrgen.semantics.ast import (
    XdrType, ScalarType, ScalarKind, OpaqueType, StringType, ArrayType,
    OptionalType, NamedType, VoidType, ConstRef,
)
from xdrgen.backend.naming import py_name, pack_fn, unpack_fn

# ScalarKind -> (annotation, codec method suffix)
SCALARS = {
    ScalarKind.INT: ("int", "int"),
    ScalarKind.UINT: ("int", "uint"),
    ScalarKind.HYPER: ("int", "hyper"),
    ScalarKind.UHYPER: ("int", "uhyper"),
    ScalarKind.FLOAT: ("float", "float"),
    ScalarKind.DOUBLE: ("float", "double"),
    ScalarKind.BOOL: ("bool", "bool"),
}


class TypeMapper:
    """Translate types for the code generator.

    Attributes:
        emitted: Names of definitions already written; references to any
            other generated definition are quoted forward references.
        external: Definitions resolved but not generated (header files and
            excluded names), expected to be imported by the preamble.
        const_names: Constants the generated module defines, so bounds that
            name them are emitted by name instead of by value.
    """

    def __init__(self, const_names: Set[str], external: Set[str]) -> None:
        self.emitted: Set[str] = set()
        self.external = external
        self.const_names = const_names

    # --- annotations ---

    def annotation(self, ty: XdrType) -> str:
        if isinstance(ty, ScalarType):
            return self._scalar(ty)[0]
        if isinstance(ty, OpaqueType):
            return "bytes"
        if isinstance(ty, StringType):
            return "str"
        if isinstance(ty, ArrayType):
            return f"List[{self.annotation(ty.element)}]"
        if isinstance(ty, OptionalType):
            return f"Optional[{self.annotation(ty.inner)}]"
        if isinstance(ty, NamedType):
            return self.ref(ty)
        if isinstance(ty, VoidType):
            return "None"
        er.raise_internal_error("XE0001", node=type(ty).__name__)

    def ref(self, ty: NamedType) -> str:
        """Class or alias name of a named type, quoted when not yet defined."""
        if ty.target is None:
            er.raise_internal_error("XE0003", name=ty.name)
        name = py_name(ty.target.name)
        if ty.target.name in self.external:
            return name
        if ty.indirect or ty.target.name not in self.emitted:
            return f'"{name}"'
        return name

    # --- encoding ---

    def pack(self, ty: XdrType, value: str) -> str:
        """Statement that encodes the expression `value` of type `ty`."""
        if isinstance(ty, ScalarType):
            return f"packer.pack_{self._scalar(ty)[1]}({value})"
        if isinstance(ty, OpaqueType):
            if ty.fixed:
                return f"packer.pack_fopaque({self.bound(ty)}, {value})"
            return f"packer.pack_opaque({value}, {self.bound(ty)})"
        if isinstance(ty, StringType):
            return f"packer.pack_string({value}, {self.bound(ty)})"
        if isinstance(ty, ArrayType):
            if ty.fixed:
                return f"packer.pack_farray({self.bound(ty)}, {value}, {self.packer_ref(ty.element)})"
            return f"packer.pack_array({value}, {self.packer_ref(ty.element)}, {self.bound(ty)})"
        if isinstance(ty, OptionalType):
            return f"packer.pack_optional({value}, {self.packer_ref(ty.inner)})"
        if isinstance(ty, NamedType):
            return f"{pack_fn(self._target_name(ty))}(packer, {value})"
        if isinstance(ty, VoidType):
            return "pass"
        er.raise_internal_error("XE0001", node=type(ty).__name__)

    def unpack(self, ty: XdrType) -> str:
        """Expression that decodes a value of type `ty`."""
        if isinstance(ty, ScalarType):
            return f"unpacker.unpack_{self._scalar(ty)[1]}()"
        if isinstance(ty, OpaqueType):
            if ty.fixed:
                return f"unpacker.unpack_fopaque({self.bound(ty)})"
            return f"unpacker.unpack_opaque({self.bound(ty)})"
        if isinstance(ty, StringType):
            return f"unpacker.unpack_string({self.bound(ty)})"
        if isinstance(ty, ArrayType):
            if ty.fixed:
                return f"unpacker.unpack_farray({self.bound(ty)}, {self.unpacker_ref(ty.element)})"
            return f"unpacker.unpack_array({self.unpacker_ref(ty.element)}, {self.bound(ty)})"
        if isinstance(ty, OptionalType):
            return f"unpacker.unpack_optional({self.unpacker_ref(ty.inner)})"
        if isinstance(ty, NamedType):
            return f"{unpack_fn(self._target_name(ty))}(unpacker)"
        if isinstance(ty, VoidType):
            return "None"
        er.raise_internal_error("XE0001", node=type(ty).__name__)

    def packer_ref(self, ty: XdrType) -> str:
        """Callable `(packer, value)` encoding an element of type `ty`."""
        if isinstance(ty, ScalarType):
            return f"xdr.Packer.pack_{self._scalar(ty)[1]}"
        if isinstance(ty, NamedType):
            return pack_fn(self._target_name(ty))
        return f"lambda packer, value: {self.pack(ty, 'value')}"

    def unpacker_ref(self, ty: XdrType) -> str:
        """Callable `(unpacker)` decoding an element of type `ty`."""
        if isinstance(ty, ScalarType):
            return f"xdr.Unpacker.unpack_{self._scalar(ty)[1]}"
        if isinstance(ty, NamedType):
            return unpack_fn(self._target_name(ty))
        return f"lambda unpacker: {self.unpack(ty)}"

    def bound(self, ty) -> str:
        """Length or maximum of an opaque, string or array type."""
        if isinstance(ty.bound, ConstRef) and ty.bound.name in self.const_names:
            return py_name(ty.bound.name)
        return "None" if ty.length is None else str(ty.length)

    # --- helpers ---

    def _scalar(self, ty: ScalarType):
        try:
            return SCALARS[ty.kind]
        except KeyError:
            er.raise_internal_error("XE0001", node=ty.kind.value)

    def _target_name(self, ty: NamedType) -> str:
        if ty.target is None:
            er.raise_internal_error("XE0003", name=ty.name)
        return ty.target.name
