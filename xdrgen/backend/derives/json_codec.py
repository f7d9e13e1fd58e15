"""JSON-compatible conversion of generated values.

Produces `to_json_<Name>` / `from_json_<Name>` for every definition, and
`to_json` / `from_json` methods on generated classes. The JSON shape:

- integers, floats, booleans and strings map to themselves
- opaque data is a lowercase hex string
- enum values are variant names
- structs are objects keyed by XDR field name
- unions are `{"<discriminant>": ..., "value": ...}`
"""
from __future__ import annotations
from typing import List

from xdrgen.semantics.ast import (
    Definition, XdrType, ScalarType, ScalarKind, OpaqueType, StringType,
    ArrayType, OptionalType, NamedType, VoidType, StructDef, EnumDef,
    UnionDef, UnionArm, TypedefDef,
)
from xdrgen.internals import errors as er
from xdrgen.backend.derives import Derive
from xdrgen.backend.emitter import CodeWriter
from xdrgen.backend.naming import py_name, payload_name


def to_json_fn(name: str) -> str:
    return f"to_json_{name}"


def from_json_fn(name: str) -> str:
    return f"from_json_{name}"


class JsonDerive(Derive):
    name = "json"

    def members(self, d: Definition) -> List[str]:
        if not isinstance(d, (StructDef, EnumDef, UnionDef)):
            return []
        cls = py_name(d.name)
        return [
            "def to_json(self) -> Any:\n"
            f"    return {to_json_fn(d.name)}(self)",
            "@classmethod\n"
            f'def from_json(cls, data: Any) -> "{cls}":\n'
            f"    return {from_json_fn(d.name)}(data)",
        ]

    def functions(self, d: Definition) -> List[str]:
        if isinstance(d, EnumDef):
            return self._enum(d)
        if isinstance(d, StructDef):
            return self._struct(d)
        if isinstance(d, UnionDef):
            return self._union(d)
        if isinstance(d, TypedefDef):
            return self._typedef(d)
        return []

    # --- per definition ---

    def _enum(self, d: EnumDef) -> List[str]:
        cls = py_name(d.name)
        return [
            f"def {to_json_fn(d.name)}(value: {cls}) -> Any:\n"
            "    return value.name",
            f"def {from_json_fn(d.name)}(data: Any) -> {cls}:\n"
            "    try:\n"
            f"        return {cls}[data]\n"
            "    except KeyError:\n"
            f"        raise ValueError(f\"enum '{d.name}' - unknown variant: {{data!r}}\") from None",
        ]

    def _struct(self, d: StructDef) -> List[str]:
        cls = py_name(d.name)
        to = CodeWriter()
        with to.block(f"def {to_json_fn(d.name)}(value: {cls}) -> Any:"):
            to.pr("return {")
            for f in d.fields:
                to.pr(f'    "{f.name}": {self.to_expr(f.ty, f"value.{py_name(f.name)}")},')
            to.pr("}")

        frm = CodeWriter()
        with frm.block(f"def {from_json_fn(d.name)}(data: Any) -> {cls}:"):
            frm.pr(f"return {cls}(")
            for f in d.fields:
                frm.pr(f'    {py_name(f.name)}={self.from_expr(f.ty, f"data[{f.name!r}]")},')
            frm.pr(")")
        return [to.getvalue().rstrip("\n"), frm.getvalue().rstrip("\n")]

    def _union(self, d: UnionDef) -> List[str]:
        cg = self.codegen
        cls = py_name(d.name)
        disc_key = d.discriminant.name
        disc = py_name(disc_key)
        payload = payload_name(disc_key)

        to = CodeWriter()
        with to.block(f"def {to_json_fn(d.name)}(value: {cls}) -> Any:"):
            to.pr("payload = None")

            def encode_arm(arm: UnionArm) -> List[str]:
                if arm.field is None:
                    return ["pass"]
                return [f"payload = {self.to_expr(arm.field.ty, f'value.{payload}')}"]

            cg.emit_dispatch(
                to, d, f"value.{disc}", encode_arm,
                [f"raise xdr.EncodeError(f\"union '{d.name}' - invalid case: {{value.{disc}!r}}\")"],
            )
            to.pr(f'return {{"{disc_key}": {self.to_expr(d.discriminant.ty, f"value.{disc}")}, "value": payload}}')

        frm = CodeWriter()
        with frm.block(f"def {from_json_fn(d.name)}(data: Any) -> {cls}:"):
            frm.pr(f"discriminant = {self.from_expr(d.discriminant.ty, f'data[{disc_key!r}]')}")

            def decode_arm(arm: UnionArm) -> List[str]:
                if arm.field is None:
                    return [f"return {cls}({disc}=discriminant)"]
                value = self.from_expr(arm.field.ty, 'data["value"]')
                return [f"return {cls}({disc}=discriminant, {payload}={value})"]

            cg.emit_dispatch(
                frm, d, "discriminant", decode_arm,
                [f"raise ValueError(f\"union '{d.name}' - invalid case: {{discriminant!r}}\")"],
            )
        return [to.getvalue().rstrip("\n"), frm.getvalue().rstrip("\n")]

    def _typedef(self, d: TypedefDef) -> List[str]:
        alias = py_name(d.name)
        return [
            f"def {to_json_fn(d.name)}(value: {alias}) -> Any:\n"
            f"    return {self.to_expr(d.ty, 'value')}",
            f"def {from_json_fn(d.name)}(data: Any) -> {alias}:\n"
            f"    return {self.from_expr(d.ty, 'data')}",
        ]

    # --- expressions ---

    def to_expr(self, ty: XdrType, value: str, depth: int = 0) -> str:
        """Expression converting `value` of type `ty` to its JSON form."""
        if isinstance(ty, (ScalarType, StringType)):
            return value
        if isinstance(ty, OpaqueType):
            return f"{value}.hex()"
        if isinstance(ty, ArrayType):
            item = f"item{depth or ''}"
            inner = self.to_expr(ty.element, item, depth + 1)
            if inner == item:
                return f"list({value})"
            return f"[{inner} for {item} in {value}]"
        if isinstance(ty, OptionalType):
            inner = self.to_expr(ty.inner, value, depth)
            if inner == value:
                return value
            return f"None if {value} is None else {inner}"
        if isinstance(ty, NamedType):
            return f"{to_json_fn(ty.target.name)}({value})"
        if isinstance(ty, VoidType):
            return "None"
        er.raise_internal_error("XE0001", node=type(ty).__name__)

    def from_expr(self, ty: XdrType, data: str, depth: int = 0) -> str:
        """Expression converting JSON `data` back to a value of type `ty`."""
        if isinstance(ty, ScalarType):
            if ty.kind in (ScalarKind.FLOAT, ScalarKind.DOUBLE):
                return f"float({data})"
            if ty.kind == ScalarKind.BOOL:
                return f"bool({data})"
            return f"int({data})"
        if isinstance(ty, StringType):
            return f"str({data})"
        if isinstance(ty, OpaqueType):
            return f"bytes.fromhex({data})"
        if isinstance(ty, ArrayType):
            item = f"item{depth or ''}"
            return f"[{self.from_expr(ty.element, item, depth + 1)} for {item} in {data}]"
        if isinstance(ty, OptionalType):
            return f"None if {data} is None else {self.from_expr(ty.inner, data, depth)}"
        if isinstance(ty, NamedType):
            return f"{from_json_fn(ty.target.name)}({data})"
        if isinstance(ty, VoidType):
            return "None"
        er.raise_internal_error("XE0001", node=type(ty).__name__)
