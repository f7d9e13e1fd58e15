# semantics/passes/type_resolution.py
"""Type resolution: bind named types, fold bounds and validate unions.

After this pass every NamedType in a definition that reported no error has
its `target` set, and every opaque, string and array type carries its folded
`length` (None for an unbounded variable-length type).
"""
from __future__ import annotations
from typing import Dict, Optional, Set

from xdrgen.internals.report import Reporter, Span
from xdrgen.internals import errors as er
from xdrgen.semantics.ast import (
    Specification, Definition, TypedefDef, StructDef, UnionDef, UnionArm,
    EnumDef, XdrType, ScalarType, ScalarKind, OpaqueType, StringType, ArrayType,
    OptionalType, NamedType, VoidType, ConstRef,
)
from xdrgen.semantics.error_reporter import PassErrorReporter
from xdrgen.semantics.passes.collect import SymbolTable, SymbolKind
from xdrgen.semantics.passes.const_eval import ConstantEvaluator, INT32_MIN, INT32_MAX

UINT32_MAX = (1 << 32) - 1


def underlying(ty: XdrType) -> XdrType:
    """Follow typedef links to the type a name finally stands for."""
    seen: Set[int] = set()
    while isinstance(ty, NamedType) and isinstance(ty.target, TypedefDef) and id(ty) not in seen:
        seen.add(id(ty))
        ty = ty.target.ty
    return ty


def describe(ty: XdrType) -> str:
    """Short XDR-syntax description of a type for diagnostics."""
    if isinstance(ty, ScalarType):
        return ty.kind.value
    if isinstance(ty, NamedType):
        return ty.name
    if isinstance(ty, OpaqueType):
        return "opaque[]" if ty.fixed else "opaque<>"
    if isinstance(ty, StringType):
        return "string<>"
    if isinstance(ty, ArrayType):
        return f"{describe(ty.element)}{'[]' if ty.fixed else '<>'}"
    if isinstance(ty, OptionalType):
        return f"{describe(ty.inner)}*"
    if isinstance(ty, VoidType):
        return "void"
    return type(ty).__name__


class TypeResolver:
    def __init__(self, reporter: Reporter, symbols: SymbolTable, evaluator: ConstantEvaluator):
        self.reporter = reporter
        self.err = PassErrorReporter(reporter)
        self.symbols = symbols
        self.evaluator = evaluator

    def run(self, spec: Specification) -> None:
        # Bind every name first: union validation follows typedef chains
        for d in spec.definitions:
            self._set_file(d)
            if isinstance(d, TypedefDef):
                self._check_not_void(d.ty, d.loc)
                self.resolve_type(d.ty, d.name)
            elif isinstance(d, StructDef):
                self._resolve_struct(d)
            elif isinstance(d, UnionDef):
                self._resolve_union(d)

        for d in spec.definitions:
            if isinstance(d, UnionDef):
                self._set_file(d)
                self._validate_union(d)
        self._set_file(None)

    def _set_file(self, d: Optional[Definition]) -> None:
        filename = d.from_header if d is not None else None
        self.err.filename = filename
        self.evaluator.err.filename = filename

    # --- types ---

    def resolve_type(self, ty: XdrType, name: str) -> None:
        """Bind names and fold bounds inside `ty`, declared as `name`."""
        if isinstance(ty, ScalarType):
            if ty.kind == ScalarKind.QUADRUPLE:
                self.err.emit(er.ERR.XE2020, ty.loc, name=name)
        elif isinstance(ty, NamedType):
            self._bind(ty)
        elif isinstance(ty, OpaqueType):
            ty.length = self._fold_bound(ty.bound, name, ty.loc)
        elif isinstance(ty, StringType):
            if ty.fixed:
                self.err.emit(er.ERR.XE2021, ty.loc, name=name)
            ty.length = self._fold_bound(ty.bound, name, ty.loc)
        elif isinstance(ty, ArrayType):
            self.resolve_type(ty.element, name)
            ty.length = self._fold_bound(ty.bound, name, ty.loc)
        elif isinstance(ty, OptionalType):
            self.resolve_type(ty.inner, name)
        elif isinstance(ty, VoidType):
            pass
        else:
            er.raise_internal_error("XE0001", node=type(ty).__name__)

    def _bind(self, ty: NamedType) -> None:
        sym = self.symbols.lookup(ty.name)
        if sym is None:
            self.err.emit(er.ERR.XE2002, ty.loc, name=ty.name)
        elif sym.kind != SymbolKind.TYPE:
            self.err.emit(er.ERR.XE2003, ty.loc, name=ty.name)
        else:
            ty.target = sym.definition

    def _fold_bound(self, bound, name: str, span: Optional[Span]) -> Optional[int]:
        if bound is None:
            return None
        before = len(self.reporter.errors)
        value = self.evaluator.evaluate(bound)
        if value is None:
            if len(self.reporter.errors) == before:
                self.err.emit(er.ERR.XE2015, span, name=name)
            return None
        if value < 0:
            self.err.emit(er.ERR.XE2014, span, name=name, value=value)
            return None
        return value

    def _check_not_void(self, ty: XdrType, span: Optional[Span]) -> bool:
        if isinstance(ty, VoidType):
            self.err.emit(er.ERR.XE2022, span)
            return False
        return True

    # --- structs ---

    def _resolve_struct(self, d: StructDef) -> None:
        seen: Set[str] = set()
        for f in d.fields:
            if f.name and f.name in seen:
                self.err.emit(er.ERR.XE2023, f.name_span or f.loc, name=f.name, owner=d.name)
            seen.add(f.name)
            if self._check_not_void(f.ty, f.loc):
                self.resolve_type(f.ty, f.name)

    # --- unions ---

    def _resolve_union(self, d: UnionDef) -> None:
        disc = d.discriminant
        if self._check_not_void(disc.ty, disc.loc):
            self.resolve_type(disc.ty, disc.name)
        for arm in d.arms:
            if arm.field is not None:
                self.resolve_type(arm.field.ty, arm.field.name)

    def _validate_union(self, d: UnionDef) -> None:
        disc_ok = not isinstance(d.discriminant.ty, VoidType) and self._check_discriminant(d)

        defaults = [a for a in d.arms if a.is_default]
        if len(defaults) > 1:
            self.err.emit(er.ERR.XE2034, defaults[1].loc, name=d.name)
        if not d.arms:
            self.err.emit(er.ERR.XE2035, d.name_span or d.loc, name=d.name)

        if not disc_ok:
            return

        disc_ty = underlying(d.discriminant.ty)
        seen: Dict[int, UnionArm] = {}
        for arm in d.case_arms:
            arm.resolved_cases = []
            for case in arm.cases:
                value = self._case_value(d, disc_ty, case)
                if value is None:
                    continue
                if value in seen:
                    self.err.emit(er.ERR.XE2033, case.loc, value=value, name=d.name)
                    continue
                seen[value] = arm
                arm.resolved_cases.append(value)

        if isinstance(disc_ty, NamedType) and isinstance(disc_ty.target, EnumDef) and not defaults:
            missing = [v.name for v in disc_ty.target.variants
                       if v.resolved is not None and v.resolved not in seen]
            if missing:
                self.err.emit(er.ERR.XW2036, d.name_span or d.loc, name=d.name,
                              missing=", ".join(missing))

    def _check_discriminant(self, d: UnionDef) -> bool:
        ty = d.discriminant.ty
        if isinstance(ty, NamedType) and ty.target is None:
            return False  # Already reported as undefined
        base = underlying(ty)
        if isinstance(base, ScalarType) and base.kind in (ScalarKind.INT, ScalarKind.UINT, ScalarKind.BOOL):
            return True
        if isinstance(base, NamedType) and isinstance(base.target, EnumDef):
            return True
        if isinstance(base, NamedType) and base.target is None:
            return False
        self.err.emit(er.ERR.XE2030, d.discriminant.loc, name=d.name, got=describe(ty))
        return False

    def _case_value(self, d: UnionDef, disc_ty: XdrType, case) -> Optional[int]:
        """Fold one case label and check it against the discriminant type."""
        disc_name = describe(d.discriminant.ty)

        if isinstance(disc_ty, NamedType) and isinstance(disc_ty.target, EnumDef):
            enum = disc_ty.target
            if not (isinstance(case, ConstRef) and any(v.name == case.name for v in enum.variants)):
                self.err.emit(er.ERR.XE2031, case.loc, value=_label(case), disc=disc_name, name=d.name)
                return None
            return self.evaluator.evaluate(case)

        if isinstance(disc_ty, ScalarType) and disc_ty.kind == ScalarKind.BOOL:
            if not (isinstance(case, ConstRef) and case.name in ("TRUE", "FALSE")):
                self.err.emit(er.ERR.XE2031, case.loc, value=_label(case), disc=disc_name, name=d.name)
                return None
            return self.evaluator.evaluate(case)

        value = self.evaluator.evaluate(case)
        if value is None:
            return None
        if disc_ty.kind == ScalarKind.UINT:
            if value < 0:
                self.err.emit(er.ERR.XE2031, case.loc, value=value, disc=disc_name, name=d.name)
                return None
            if value > UINT32_MAX:
                self.err.emit(er.ERR.XE2016, case.loc, value=value, name=d.name,
                              width="a 32-bit unsigned integer")
                return None
        elif not INT32_MIN <= value <= INT32_MAX:
            self.err.emit(er.ERR.XE2016, case.loc, value=value, name=d.name,
                          width="a 32-bit signed integer")
            return None
        return value


def _label(case) -> str:
    if isinstance(case, ConstRef):
        return case.name
    return str(getattr(case, "value", case))
