"""JSON Schema (draft-07) describing the JSON form produced by the json derive.

The schemas of every resolved definition, header definitions included, are
collected into one module-level `JSON_SCHEMA_DEFINITIONS` mapping. Each
generated definition gets a `json_schema_<Name>()` function returning a
self-contained document that references into it.
"""
from __future__ import annotations
import pprint
from typing import Any, Dict, List

from xdrgen.semantics.ast import (
    Definition, XdrType, ScalarType, ScalarKind, OpaqueType, StringType,
    ArrayType, OptionalType, NamedType, VoidType, StructDef, EnumDef,
    UnionDef, UnionArm, TypedefDef,
)
from xdrgen.semantics.passes.type_resolution import underlying
from xdrgen.internals import errors as er
from xdrgen.backend.derives import Derive
from xdrgen.backend.naming import py_name

DRAFT = "http://json-schema.org/draft-07/schema#"

INTEGER_RANGES = {
    ScalarKind.INT: (-(1 << 31), (1 << 31) - 1),
    ScalarKind.UINT: (0, (1 << 32) - 1),
    ScalarKind.HYPER: (-(1 << 63), (1 << 63) - 1),
    ScalarKind.UHYPER: (0, (1 << 64) - 1),
}


def schema_fn(name: str) -> str:
    return f"json_schema_{name}"


class JsonSchemaDerive(Derive):
    name = "schema"

    def imports(self) -> List[str]:
        return ["import copy"]

    def members(self, d: Definition) -> List[str]:
        if not isinstance(d, (StructDef, EnumDef, UnionDef)):
            return []
        return [
            "@classmethod\n"
            "def json_schema(cls) -> Any:\n"
            f"    return {schema_fn(d.name)}()"
        ]

    def functions(self, d: Definition) -> List[str]:
        if not isinstance(d, (StructDef, EnumDef, UnionDef, TypedefDef)):
            return []
        return [
            f"def {schema_fn(d.name)}() -> Any:\n"
            "    return {\n"
            f'        "$schema": "{DRAFT}",\n'
            '        "definitions": copy.deepcopy(JSON_SCHEMA_DEFINITIONS),\n'
            f'        "$ref": "#/definitions/{d.name}",\n'
            "    }"
        ]

    def epilogue(self) -> List[str]:
        definitions = self.definitions()
        return ["JSON_SCHEMA_DEFINITIONS = " + pprint.pformat(definitions, sort_dicts=False)]

    # --- schema construction ---

    def definitions(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for d in self.codegen.resolved.definitions:
            schema = self.definition_schema(d)
            if schema is not None:
                out[d.name] = schema
        return out

    def definition_schema(self, d: Definition):
        if isinstance(d, EnumDef):
            schema = {"type": "string", "enum": [py_name(v.name) for v in d.variants]}
        elif isinstance(d, StructDef):
            schema = {
                "type": "object",
                "properties": {f.name: self.type_schema(f.ty) for f in d.fields},
                "required": [f.name for f in d.fields],
                "additionalProperties": False,
            }
        elif isinstance(d, UnionDef):
            schema = {"oneOf": [self.arm_schema(d, arm) for arm in d.arms]}
        elif isinstance(d, TypedefDef):
            schema = self.type_schema(d.ty)
        else:
            return None
        if d.doc:
            schema = {"description": d.doc, **schema}
        return schema

    def arm_schema(self, d: UnionDef, arm: UnionArm) -> Dict[str, Any]:
        if arm.is_default:
            taken = [self.case_json(d, v) for a in d.case_arms for v in a.resolved_cases]
            disc = {"allOf": [self.type_schema(d.discriminant.ty), {"not": {"enum": taken}}]}
        else:
            cases = [self.case_json(d, v) for v in arm.resolved_cases]
            disc = {"const": cases[0]} if len(cases) == 1 else {"enum": cases}
        value = self.type_schema(arm.field.ty) if arm.field is not None else {"type": "null"}
        return {
            "type": "object",
            "properties": {d.discriminant.name: disc, "value": value},
            "required": [d.discriminant.name, "value"],
            "additionalProperties": False,
        }

    def case_json(self, d: UnionDef, value: int):
        """JSON form of a case value of the discriminant."""
        disc_ty = underlying(d.discriminant.ty)
        if isinstance(disc_ty, NamedType) and isinstance(disc_ty.target, EnumDef):
            variant = next(v for v in disc_ty.target.variants if v.resolved == value)
            return py_name(variant.name)
        if isinstance(disc_ty, ScalarType) and disc_ty.kind == ScalarKind.BOOL:
            return bool(value)
        return value

    def type_schema(self, ty: XdrType) -> Dict[str, Any]:
        if isinstance(ty, ScalarType):
            if ty.kind in INTEGER_RANGES:
                lo, hi = INTEGER_RANGES[ty.kind]
                return {"type": "integer", "minimum": lo, "maximum": hi}
            if ty.kind == ScalarKind.BOOL:
                return {"type": "boolean"}
            return {"type": "number"}
        if isinstance(ty, OpaqueType):
            schema = {"type": "string", "contentEncoding": "base16"}
            if ty.length is not None:
                schema["maxLength"] = 2 * ty.length
                if ty.fixed:
                    schema["minLength"] = 2 * ty.length
            return schema
        if isinstance(ty, StringType):
            schema = {"type": "string"}
            if ty.length is not None:
                schema["maxLength"] = ty.length
            return schema
        if isinstance(ty, ArrayType):
            schema = {"type": "array", "items": self.type_schema(ty.element)}
            if ty.length is not None:
                schema["maxItems"] = ty.length
                if ty.fixed:
                    schema["minItems"] = ty.length
            return schema
        if isinstance(ty, OptionalType):
            return {"anyOf": [{"type": "null"}, self.type_schema(ty.inner)]}
        if isinstance(ty, NamedType):
            return {"$ref": f"#/definitions/{ty.target.name}"}
        if isinstance(ty, VoidType):
            return {"type": "null"}
        er.raise_internal_error("XE0001", node=type(ty).__name__)
