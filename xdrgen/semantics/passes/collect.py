# semantics/passes/collect.py
"""Symbol collection: the first resolver pass.

Types, constants and enum variants share one namespace. The collector walks
the definitions in source order and records every name, reporting a
duplicate at the later definition.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from xdrgen.internals.report import Reporter, Span
from xdrgen.internals import errors as er
from xdrgen.semantics.ast import (
    Specification, Definition, ConstDef, TypedefDef, StructDef, EnumDef,
    EnumVariant, UnionDef,
)
from xdrgen.semantics.error_reporter import PassErrorReporter


class SymbolKind(str, Enum):
    TYPE = "type"
    CONSTANT = "constant"
    VARIANT = "enum variant"


@dataclass
class Symbol:
    name: str
    kind: SymbolKind
    definition: Optional[Definition] = None    # Owning EnumDef for variants; None for builtins
    variant: Optional[EnumVariant] = None
    span: Optional[Span] = None
    filename: Optional[str] = None
    value: Optional[int] = None                # Builtin constants only


@dataclass
class SymbolTable:
    """Registry of every name declared in the specification."""
    by_name: Dict[str, Symbol] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def lookup(self, name: str) -> Optional[Symbol]:
        return self.by_name.get(name)

    def add(self, sym: Symbol) -> None:
        self.by_name[sym.name] = sym
        self.order.append(sym.name)


BUILTIN_CONSTANTS = {"TRUE": 1, "FALSE": 0}


def format_location(reporter: Reporter, span: Optional[Span], filename: Optional[str] = None) -> str:
    """Format span information for error messages (e.g., "types.x:10:5")."""
    name = filename or reporter.filename
    if not span:
        return name
    return f"{name}:{span.line}:{span.col}"


class CollectorPass:
    """Collect type, constant and enum variant names into a SymbolTable.

    Program definitions are parsed but not part of the namespace.
    """

    def __init__(self, reporter: Reporter) -> None:
        self.r = reporter
        self.err = PassErrorReporter(reporter)
        self.symbols = SymbolTable()
        for name, value in BUILTIN_CONSTANTS.items():
            self.symbols.add(Symbol(name=name, kind=SymbolKind.CONSTANT, value=value))

    def run(self, spec: Specification) -> SymbolTable:
        for d in spec.definitions:
            self.err.filename = d.from_header
            if isinstance(d, ConstDef):
                self._declare(d.name, SymbolKind.CONSTANT, d, d.name_span or d.loc)
            elif isinstance(d, (TypedefDef, StructDef, UnionDef)):
                self._declare(d.name, SymbolKind.TYPE, d, d.name_span or d.loc)
            elif isinstance(d, EnumDef):
                self._declare(d.name, SymbolKind.TYPE, d, d.name_span or d.loc)
                for v in d.variants:
                    self._declare(v.name, SymbolKind.VARIANT, d, v.loc, variant=v)
        return self.symbols

    def _declare(self, name: str, kind: SymbolKind, d: Definition, span: Optional[Span],
                 variant: Optional[EnumVariant] = None) -> None:
        prev = self.symbols.lookup(name)
        if prev is not None:
            prev_loc = "builtin" if prev.definition is None else format_location(self.r, prev.span, prev.filename)
            self.err.emit(er.ERR.XE2001, span, name=name, prev_loc=prev_loc)
            return
        self.symbols.add(Symbol(name=name, kind=kind, definition=d, variant=variant,
                                span=span, filename=self.err.filename))
