"""
Python backend for the XDR compiler.

Emits one self-contained module: for every definition a type (an
`enum.IntEnum`, a dataclass or a type alias) plus a `pack_<Name>` and
`unpack_<Name>` procedure that read and write the exact XDR wire format
through the runtime codec.

API:
    from xdrgen.backend.codegen_python import PythonCodegen
    cg = PythonCodegen(resolved, config, source_name="proto.x")
    text = cg.generate()
"""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional, Set

from xdrgen.internals import errors as er
from xdrgen.semantics.ast import (
    Definition, ConstDef, TypedefDef, StructDef, EnumDef, UnionDef, UnionArm,
    ProgramDef, ScalarType, ScalarKind, NamedType,
)
from xdrgen.semantics.semantic_analyzer import ResolvedSpecification
from xdrgen.semantics.passes.type_resolution import underlying
from xdrgen.backend.emitter import CodeWriter
from xdrgen.backend.naming import py_name, pack_fn, unpack_fn, payload_name, docstring, comment
from xdrgen.backend.types import TypeMapper
from xdrgen.backend.derives import make_derives

if TYPE_CHECKING:
    from xdrgen.compiler.config import CompilerConfig


class PythonCodegen:
    """Generate the Python module for a resolved specification."""

    def __init__(self, resolved: ResolvedSpecification, config: 'CompilerConfig',
                 source_name: str = "<input>") -> None:
        self.resolved = resolved
        self.config = config
        self.source_name = source_name
        self.excluded: Set[str] = set(config.exclude)

        external = {d.name for d in resolved.definitions if not self.is_generated(d)}
        const_names = {d.name for d in resolved.definitions
                       if isinstance(d, ConstDef) and self.is_generated(d)}
        self.types = TypeMapper(const_names, external)
        self.derives = make_derives(config.derives, self)
        self.w = CodeWriter()

    def is_generated(self, d: Definition) -> bool:
        """Header, excluded and program definitions are resolved but not emitted."""
        return not (d.from_header or d.name in self.excluded or isinstance(d, ProgramDef))

    def generate(self) -> str:
        self._emit_header()
        for d in self.resolved.definitions:
            if not self.is_generated(d):
                continue
            self.w.blank(2)
            self._emit_definition(d)
            self.types.emitted.add(d.name)
        for derive in self.derives:
            epilogue = derive.epilogue()
            if epilogue:
                self.w.blank(2)
                for block in epilogue:
                    self.w.pr(block)
        return self.w.getvalue()

    # ------------------------------------------------------------------
    # Module header
    # ------------------------------------------------------------------

    def _emit_header(self) -> None:
        from xdrgen import __version__

        w = self.w
        w.pr("# GENERATED CODE")
        w.pr("#")
        w.pr(f"# Generated from {self.source_name} by xdrgen {__version__}.")
        w.pr("#")
        w.pr("# DO NOT EDIT")
        w.blank()
        w.pr("import enum")
        w.pr("from dataclasses import dataclass")
        w.pr("from typing import Any, List, Optional, Union")
        for derive in self.derives:
            for line in derive.imports():
                w.pr(line)
        w.blank()
        w.pr(f"import {self.config.runtime_module} as xdr")

        if self.config.preamble:
            w.blank()
            w.pr(self.config.preamble.rstrip("\n"))
        if self.resolved.passthrough:
            w.blank()
            for line in self.resolved.passthrough:
                w.pr(line)

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def _emit_definition(self, d: Definition) -> None:
        if isinstance(d, ConstDef):
            self._emit_const(d)
        elif isinstance(d, EnumDef):
            self._emit_enum(d)
        elif isinstance(d, StructDef):
            self._emit_struct(d)
        elif isinstance(d, UnionDef):
            self._emit_union(d)
        elif isinstance(d, TypedefDef):
            self._emit_typedef(d)
        else:
            er.raise_internal_error("XE0002", node=type(d).__name__)

    def _emit_const(self, d: ConstDef) -> None:
        if d.doc:
            self.w.pr(comment(d.doc))
        self.w.pr(f"{py_name(d.name)} = {d.resolved}")

    def _emit_enum(self, d: EnumDef) -> None:
        w = self.w
        cls = py_name(d.name)
        with w.block(f"class {cls}(enum.IntEnum):"):
            if d.doc:
                w.pr(docstring(d.doc))
            for v in d.variants:
                if v.doc:
                    w.pr(comment(v.doc))
                w.pr(f"{py_name(v.name)} = {v.resolved}")
            self._emit_class_tail(d)

        w.blank(2)
        with w.block(f"def {pack_fn(d.name)}(packer: xdr.Packer, value: {cls}) -> None:"):
            w.pr(f"packer.pack_enum(value, {cls})")
        w.blank(2)
        with w.block(f"def {unpack_fn(d.name)}(unpacker: xdr.Unpacker) -> {cls}:"):
            w.pr(f"return unpacker.unpack_enum({cls})")
        self._emit_derive_functions(d)

    def _emit_struct(self, d: StructDef) -> None:
        w = self.w
        cls = py_name(d.name)
        w.pr("@dataclass")
        with w.block(f"class {cls}:"):
            if d.doc:
                w.pr(docstring(d.doc))
            for f in d.fields:
                if f.doc:
                    w.pr(comment(f.doc))
                w.pr(f"{py_name(f.name)}: {self.types.annotation(f.ty)}")
            self._emit_class_tail(d)

        w.blank(2)
        with w.block(f"def {pack_fn(d.name)}(packer: xdr.Packer, value: {cls}) -> None:"):
            for f in d.fields:
                w.pr(self.types.pack(f.ty, f"value.{py_name(f.name)}"))
        w.blank(2)
        with w.block(f"def {unpack_fn(d.name)}(unpacker: xdr.Unpacker) -> {cls}:"):
            # Keyword arguments are evaluated left to right, in wire order
            w.pr(f"return {cls}(")
            for f in d.fields:
                w.pr(f"    {py_name(f.name)}={self.types.unpack(f.ty)},")
            w.pr(")")
        self._emit_derive_functions(d)

    def _emit_union(self, d: UnionDef) -> None:
        w = self.w
        cls = py_name(d.name)
        disc = py_name(d.discriminant.name)
        payload = payload_name(d.discriminant.name)

        w.pr("@dataclass")
        with w.block(f"class {cls}:"):
            if d.doc:
                w.pr(docstring(d.doc))
            if d.discriminant.doc:
                w.pr(comment(d.discriminant.doc))
            w.pr(f"{disc}: {self.types.annotation(d.discriminant.ty)}")
            w.pr(f"{payload}: {self.payload_annotation(d)} = None")
            self._emit_class_tail(d)

        # pack
        w.blank(2)
        with w.block(f"def {pack_fn(d.name)}(packer: xdr.Packer, value: {cls}) -> None:"):
            w.pr(self.types.pack(d.discriminant.ty, f"value.{disc}"))
            self.emit_dispatch(
                w, d, f"value.{disc}",
                lambda arm: [self.types.pack(arm.field.ty, f"value.{payload}") if arm.field else "pass"],
                [f"raise xdr.EncodeError(f\"union '{d.name}' - invalid case: {{value.{disc}!r}}\")"],
            )

        # unpack
        w.blank(2)
        with w.block(f"def {unpack_fn(d.name)}(unpacker: xdr.Unpacker) -> {cls}:"):
            w.pr(f"discriminant = {self.types.unpack(d.discriminant.ty)}")

            def decode_arm(arm: UnionArm) -> List[str]:
                value = self.types.unpack(arm.field.ty) if arm.field else "None"
                return [f"return {cls}({disc}=discriminant, {payload}={value})"]

            self.emit_dispatch(
                w, d, "discriminant", decode_arm,
                ["raise xdr.DecodeError(",
                 f"    f\"union '{d.name}' - invalid case: {{int(discriminant)}} \"",
                 "    f\"(0x{int(discriminant) & 0xFFFFFFFF:X})\"",
                 ")"],
            )
        self._emit_derive_functions(d)

    def _emit_typedef(self, d: TypedefDef) -> None:
        w = self.w
        alias = py_name(d.name)
        if d.doc:
            w.pr(comment(d.doc))
        w.pr(f"{alias} = {self.types.annotation(d.ty)}")

        w.blank(2)
        with w.block(f"def {pack_fn(d.name)}(packer: xdr.Packer, value: {alias}) -> None:"):
            w.pr(self.types.pack(d.ty, "value"))
        w.blank(2)
        with w.block(f"def {unpack_fn(d.name)}(unpacker: xdr.Unpacker) -> {alias}:"):
            w.pr(f"return {self.types.unpack(d.ty)}")
        self._emit_derive_functions(d)

    # ------------------------------------------------------------------
    # Shared pieces
    # ------------------------------------------------------------------

    def _emit_class_tail(self, d: Definition) -> None:
        """Write the XDR convenience methods and derive members into a class body."""
        w = self.w
        cls = py_name(d.name)
        w.blank()
        with w.block("def to_xdr(self) -> bytes:"):
            w.pr(f"return xdr.encode({pack_fn(d.name)}, self)")
        w.blank()
        w.pr("@classmethod")
        with w.block(f'def from_xdr(cls, data: bytes) -> "{cls}":'):
            w.pr(f"return xdr.decode({unpack_fn(d.name)}, data)")
        for derive in self.derives:
            for block in derive.members(d):
                w.blank()
                w.pr(block)

    def _emit_derive_functions(self, d: Definition) -> None:
        for derive in self.derives:
            for block in derive.functions(d):
                self.w.blank(2)
                self.w.pr(block)

    def payload_annotation(self, d: UnionDef) -> str:
        options: List[str] = []
        for arm in d.arms:
            if arm.field is not None:
                ann = self.types.annotation(arm.field.ty)
                if ann not in options:
                    options.append(ann)
        if not options:
            return "None"
        if len(options) == 1:
            return f"Optional[{options[0]}]"
        return f"Union[{', '.join(options)}, None]"

    def case_literal(self, d: UnionDef, value: int) -> str:
        """Source form of a case value: enum member, bool or integer literal."""
        disc_ty = underlying(d.discriminant.ty)
        if isinstance(disc_ty, NamedType) and isinstance(disc_ty.target, EnumDef):
            enum = disc_ty.target
            variant = next(v for v in enum.variants if v.resolved == value)
            return f"{py_name(enum.name)}.{py_name(variant.name)}"
        if isinstance(disc_ty, ScalarType) and disc_ty.kind == ScalarKind.BOOL:
            return "True" if value else "False"
        return str(value)

    def case_condition(self, d: UnionDef, subject: str, arm: UnionArm) -> str:
        literals = [self.case_literal(d, v) for v in arm.resolved_cases]
        if len(literals) == 1:
            return f"{subject} == {literals[0]}"
        return f"{subject} in ({', '.join(literals)})"

    def emit_dispatch(self, w: CodeWriter, d: UnionDef, subject: str, body, fallback: List[str],
                      default_body: Optional[object] = None) -> None:
        """Write an if/elif chain selecting the union arm for `subject`.

        Args:
            w: Writer receiving the chain.
            d: The union.
            subject: Expression holding the discriminant value.
            body: Callable mapping an arm to the lines of its branch.
            fallback: Lines for an unmatched discriminant when there is no default arm.
            default_body: Callable for the default arm; defaults to `body`.
        """
        default_body = default_body or body
        arms = [a for a in d.case_arms if a.resolved_cases]
        default = d.default_arm
        tail = default_body(default) if default is not None else fallback

        if not arms:
            for line in tail:
                w.pr(line)
            return

        for i, arm in enumerate(arms):
            keyword = "if" if i == 0 else "elif"
            with w.block(f"{keyword} {self.case_condition(d, subject, arm)}:"):
                for line in body(arm):
                    w.pr(line)
        with w.block("else:"):
            for line in tail:
                w.pr(line)
