# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from xdrgen.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL   = "general"
    SYNTAX    = "syntax"
    NAME      = "name"
    CONSTANT  = "constant"
    TYPE      = "type"
    UNION     = "union"
    CYCLE     = "cycle"
    CONFIG    = "config"
    INTERNAL  = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)

def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], filename: Optional[str] = None, **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span, filename=filename)
    else:
        r.warn(em.code, text, span, filename=filename)

def raise_internal_error(code: str, **kwargs) -> None:
    """Raise a RuntimeError for internal compiler errors.

    Internal errors (XE0 codes) indicate compiler bugs, not problems in the
    specification being compiled. The resolver is expected to reject every
    construct that would trigger one.

    Raises:
        RuntimeError: Always raises with formatted error message
    """
    text = _fmt(code, **kwargs)
    raise RuntimeError(f"{code}: {text}")


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Internal errors (compiler bugs) - XE0xxx range
_add(ErrorMessage("XE0001", Severity.ERROR,
    "unknown type node '{node}'",
    Category.INTERNAL, "Found an unexpected type node (bug or unsupported construct)."))

_add(ErrorMessage("XE0002", Severity.ERROR,
    "unknown definition node '{node}'",
    Category.INTERNAL, "Found an unexpected definition node in the resolved specification."))

_add(ErrorMessage("XE0003", Severity.ERROR,
    "unresolved type reference '{name}' reached code generation",
    Category.INTERNAL, "The resolver should have rejected the reference."))

_add(ErrorMessage("XE0004", Severity.ERROR,
    "unknown parse tree node '{node}'",
    Category.INTERNAL, "The grammar produced a tree the AST builder does not handle."))

# Syntax errors - XE1xxx range (fail-fast)
_add(ErrorMessage("XE1001", Severity.ERROR,
    "unexpected {found}, expected {wanted}",
    Category.SYNTAX, "The parser met a token that cannot continue any declaration."))

_add(ErrorMessage("XE1002", Severity.ERROR,
    "unexpected character {char!r}",
    Category.SYNTAX, "The lexer met a character that starts no token."))

_add(ErrorMessage("XE1003", Severity.ERROR,
    "unexpected end of input, expected {wanted}",
    Category.SYNTAX, "The specification ends in the middle of a declaration."))

_add(ErrorMessage("XE1004", Severity.ERROR,
    "{construct} requires the extended grammar",
    Category.SYNTAX, "Arithmetic constant expressions and % passthrough lines are only "
    "accepted with --extended."))

_add(ErrorMessage("XE1005", Severity.ERROR,
    "invalid integer literal '{literal}'",
    Category.SYNTAX, "Octal literals may only contain the digits 0-7."))

# Name errors - XE20xx
_add(ErrorMessage("XE2001", Severity.ERROR,
    "'{name}' is already defined (previous definition at {prev_loc})",
    Category.NAME, "Types, constants and enum variants share one namespace."))

_add(ErrorMessage("XE2002", Severity.ERROR,
    "undefined type '{name}'",
    Category.NAME, "Every named type must be declared in the specification."))

_add(ErrorMessage("XE2003", Severity.ERROR,
    "'{name}' is a constant, not a type",
    Category.NAME, "A constant name was used where a type was expected."))

# Constant errors - XE201x
_add(ErrorMessage("XE2010", Severity.ERROR,
    "undefined constant '{name}'",
    Category.CONSTANT, "Constant expressions may only reference constants and enum variants."))

_add(ErrorMessage("XE2011", Severity.ERROR,
    "circular constant dependency: {chain}",
    Category.CONSTANT, "A constant cannot depend on itself, directly or indirectly."))

_add(ErrorMessage("XE2012", Severity.ERROR,
    "'{name}' is a type, not a constant",
    Category.CONSTANT, "A type name was used where a constant value was expected."))

_add(ErrorMessage("XE2013", Severity.ERROR,
    "division by zero in constant expression",
    Category.CONSTANT, "Constant folding divided by zero."))

_add(ErrorMessage("XE2014", Severity.ERROR,
    "bound of '{name}' must be non-negative, got {value}",
    Category.CONSTANT, "Array, opaque and string bounds fold to non-negative integers."))

_add(ErrorMessage("XE2015", Severity.ERROR,
    "bound of '{name}' is not a compile-time constant",
    Category.CONSTANT, "The bound expression could not be folded."))

_add(ErrorMessage("XE2016", Severity.ERROR,
    "value {value} of '{name}' does not fit in {width}",
    Category.CONSTANT, "Enum values and union case values are encoded as 32-bit integers."))

# Type errors - XE202x
_add(ErrorMessage("XE2020", Severity.ERROR,
    "'quadruple' is not supported (field '{name}')",
    Category.TYPE, "The runtime codec has no 128-bit floating point type."))

_add(ErrorMessage("XE2021", Severity.ERROR,
    "string '{name}' must be variable-length; use string {name}<N>",
    Category.TYPE, "XDR strings are always variable-length."))

_add(ErrorMessage("XE2022", Severity.ERROR,
    "'void' is only allowed as a union arm",
    Category.TYPE, "Struct fields, typedefs and discriminants must have a type."))

_add(ErrorMessage("XE2023", Severity.ERROR,
    "duplicate field '{name}' in '{owner}'",
    Category.TYPE, "Field names must be unique within a struct or union."))

# Union errors - XE203x
_add(ErrorMessage("XE2030", Severity.ERROR,
    "discriminant of union '{name}' must be int, unsigned int, enum or bool, got {got}",
    Category.UNION, "XDR unions switch on an integer, enum or boolean value."))

_add(ErrorMessage("XE2031", Severity.ERROR,
    "case {value} is not compatible with discriminant type {disc} of union '{name}'",
    Category.UNION, "Enum discriminants take variants of that enum; bool takes TRUE/FALSE; "
    "unsigned takes non-negative values."))

_add(ErrorMessage("XE2033", Severity.ERROR,
    "duplicate case value {value} in union '{name}'",
    Category.UNION, "Each discriminant value selects exactly one arm."))

_add(ErrorMessage("XE2034", Severity.ERROR,
    "union '{name}' has more than one default arm",
    Category.UNION, "At most one default arm is allowed."))

_add(ErrorMessage("XE2035", Severity.ERROR,
    "union '{name}' has no case arms and no default arm",
    Category.UNION, "A union needs at least one arm to select."))

_add(ErrorMessage("XW2036", Severity.WARNING,
    "union '{name}' has no default arm and does not handle {missing}",
    Category.UNION, "Decoding one of the unhandled variants fails at runtime."))

# Cycle errors - XE204x
_add(ErrorMessage("XE2040", Severity.ERROR,
    "recursive type has infinite size: {cycle}",
    Category.CYCLE, "Every reference cycle must pass through an optional (*) or "
    "variable-length (<>) declaration."))

# Configuration and I/O errors - XE3xxx
_add(ErrorMessage("XE3001", Severity.ERROR,
    "cannot read '{path}': {reason}",
    Category.CONFIG, "The specification or header file could not be read."))

_add(ErrorMessage("XE3002", Severity.ERROR,
    "invalid configuration: {reason}",
    Category.CONFIG, "The [tool.xdrgen] table or xdrgen.toml is malformed."))

_add(ErrorMessage("XE3003", Severity.ERROR,
    "cannot reformat generated code: {reason}",
    Category.CONFIG, "Reformatting needs the optional 'black' dependency."))

_add(ErrorMessage("XW3004", Severity.WARNING,
    "excluded definition '{name}' does not exist",
    Category.CONFIG, "A name listed in 'exclude' matches no definition."))
