# semantics/ast.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from xdrgen.internals.report import Span

# === Core node base ===

@dataclass
class Node:
    loc: Optional[Span]

# === Constant expressions ===

@dataclass
class Expr(Node):
    pass

@dataclass
class IntLit(Expr):
    value: int

@dataclass
class ConstRef(Expr):
    name: str                            # Constant or enum variant name

@dataclass
class BinaryOp(Expr):
    op: str                              # One of + - * /
    left: Expr
    right: Expr

@dataclass
class Negate(Expr):
    operand: Expr

# === Types ===

class ScalarKind(str, Enum):
    INT = "int"
    UINT = "unsigned int"
    HYPER = "hyper"
    UHYPER = "unsigned hyper"
    FLOAT = "float"
    DOUBLE = "double"
    QUADRUPLE = "quadruple"
    BOOL = "bool"

@dataclass
class XdrType(Node):
    pass

@dataclass
class ScalarType(XdrType):
    kind: ScalarKind

@dataclass
class OpaqueType(XdrType):
    """Fixed `opaque x[N]` or variable `opaque x<N>` / `opaque x<>`."""
    fixed: bool
    bound: Optional[Expr]                # None for an unbounded variable opaque
    length: Optional[int] = None         # Folded bound, set by the resolver

@dataclass
class StringType(XdrType):
    bound: Optional[Expr]
    length: Optional[int] = None
    fixed: bool = False                  # `string x[N]` parses but is rejected later

@dataclass
class ArrayType(XdrType):
    element: XdrType
    fixed: bool
    bound: Optional[Expr]
    length: Optional[int] = None

@dataclass
class OptionalType(XdrType):
    """`T *x`: encoded as a bool followed by the value when present."""
    inner: XdrType

@dataclass
class NamedType(XdrType):
    name: str
    # Bound by type resolution. Excluded from eq/repr since recursive types
    # make the link graph cyclic.
    target: Optional["Definition"] = field(default=None, compare=False, repr=False)
    indirect: bool = False               # Set when this link breaks a reference cycle

@dataclass
class VoidType(XdrType):
    pass

# === Declarations ===

@dataclass
class Field:
    name: str
    ty: XdrType
    loc: Optional[Span] = None
    name_span: Optional[Span] = None
    doc: Optional[str] = None

@dataclass
class Definition(Node):
    pass

@dataclass
class ConstDef(Definition):
    name: str
    value: Expr
    resolved: Optional[int] = None       # Folded value, set by constant evaluation
    name_span: Optional[Span] = None
    doc: Optional[str] = None
    from_header: Optional[str] = None    # Header file name; header definitions are not emitted

@dataclass
class TypedefDef(Definition):
    name: str
    ty: XdrType
    name_span: Optional[Span] = None
    doc: Optional[str] = None
    from_header: Optional[str] = None

@dataclass
class StructDef(Definition):
    name: str
    fields: List[Field]
    name_span: Optional[Span] = None
    doc: Optional[str] = None
    from_header: Optional[str] = None

@dataclass
class EnumVariant:
    name: str
    value: Optional[Expr]                # None means previous value + 1
    loc: Optional[Span] = None
    resolved: Optional[int] = None
    doc: Optional[str] = None

@dataclass
class EnumDef(Definition):
    name: str
    variants: List[EnumVariant]
    name_span: Optional[Span] = None
    doc: Optional[str] = None
    from_header: Optional[str] = None

@dataclass
class UnionArm:
    cases: List[Expr]                    # Empty for the default arm
    field: Optional[Field]               # None for a void arm
    is_default: bool = False
    loc: Optional[Span] = None
    resolved_cases: List[int] = field(default_factory=list)

@dataclass
class UnionDef(Definition):
    name: str
    discriminant: Field
    arms: List[UnionArm]
    name_span: Optional[Span] = None
    doc: Optional[str] = None
    from_header: Optional[str] = None

    @property
    def default_arm(self) -> Optional[UnionArm]:
        return next((a for a in self.arms if a.is_default), None)

    @property
    def case_arms(self) -> List[UnionArm]:
        return [a for a in self.arms if not a.is_default]

# === RPC programs (parsed, never generated) ===

@dataclass
class Procedure(Node):
    name: str
    result: XdrType
    args: List[XdrType]
    number: Expr

@dataclass
class ProgramVersion(Node):
    name: str
    procedures: List[Procedure]
    number: Expr

@dataclass
class ProgramDef(Definition):
    name: str
    versions: List[ProgramVersion]
    number: Expr
    name_span: Optional[Span] = None
    doc: Optional[str] = None
    from_header: Optional[str] = None

# === Compilation unit ===

@dataclass
class Specification(Node):
    definitions: List[Definition]
    passthrough: List[str] = field(default_factory=list)   # `%` lines, extended grammar only
