# semantics/passes/const_eval.py
"""Compile-time constant expression evaluator.

Constants, enum variant values, bounds and union case labels are folded to
Python integers during resolution, so every value the generator emits is a
literal known at compile time.

Design:
- Memoized: results are stored on the ConstDef/EnumVariant nodes
- Evaluation stack for cycle detection, reported with the full chain
- A failed constant is reported once; dependents fail silently
- Division truncates toward zero

Allowed:
- Integer literals (decimal, hexadecimal, octal, negative)
- References to constants and enum variants, including TRUE and FALSE
- With the extended grammar: + - * / and unary minus
"""
from __future__ import annotations
from typing import List, Optional, Set

from xdrgen.internals.report import Reporter, Span
from xdrgen.internals import errors as er
from xdrgen.semantics.ast import (
    Expr, IntLit, ConstRef, BinaryOp, Negate, Specification, ConstDef,
    EnumDef, EnumVariant,
)
from xdrgen.semantics.error_reporter import PassErrorReporter
from xdrgen.semantics.passes.collect import SymbolTable, SymbolKind

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


class ConstantEvaluator:
    """Fold constant expressions to integers.

    Used by the constant pass for constant definitions and enum variants,
    and afterwards by type resolution for bounds and union case labels.
    """

    def __init__(self, reporter: Reporter, symbols: SymbolTable):
        """Initialize the evaluator.

        Args:
            reporter: Error reporter for diagnostics
            symbols: Table built by the collector pass
        """
        self.reporter = reporter
        self.err = PassErrorReporter(reporter)
        self.symbols = symbols
        self.evaluation_stack: List[str] = []  # For cycle detection
        self.failed: Set[str] = set()

    def run(self, spec: Specification) -> None:
        """Fold every constant definition and enum variant, in source order."""
        for d in spec.definitions:
            if isinstance(d, ConstDef):
                self._eval_constant(d)
            elif isinstance(d, EnumDef):
                for v in d.variants:
                    self._eval_variant(d, v)

    def evaluate(self, expr: Expr) -> Optional[int]:
        """Evaluate an expression to a compile-time integer.

        Returns:
            The folded value, or None if it could not be folded (the reason
            has been reported unless it stems from an already failed constant).

        Emits:
            XE2010: Undefined constant
            XE2012: Type used as a value
            XE2013: Division by zero
        """
        if isinstance(expr, IntLit):
            return expr.value

        if isinstance(expr, ConstRef):
            return self.value_of(expr.name, expr.loc)

        if isinstance(expr, Negate):
            operand = self.evaluate(expr.operand)
            return None if operand is None else -operand

        if isinstance(expr, BinaryOp):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            if left is None or right is None:
                return None
            if expr.op == "+":
                return left + right
            if expr.op == "-":
                return left - right
            if expr.op == "*":
                return left * right
            if expr.op == "/":
                if right == 0:
                    self.err.emit(er.ERR.XE2013, expr.loc)
                    return None
                quotient = abs(left) // abs(right)
                return quotient if (left < 0) == (right < 0) else -quotient

        raise NotImplementedError(f"unknown constant expression node '{type(expr).__name__}'")

    def value_of(self, name: str, span: Optional[Span]) -> Optional[int]:
        """Resolve a name used as a value."""
        sym = self.symbols.lookup(name)
        if sym is None:
            self.err.emit(er.ERR.XE2010, span, name=name)
            return None
        if sym.kind == SymbolKind.TYPE:
            self.err.emit(er.ERR.XE2012, span, name=name)
            return None
        if sym.value is not None:
            return sym.value
        if sym.kind == SymbolKind.CONSTANT:
            return self._eval_constant(sym.definition)
        return self._eval_variant(sym.definition, sym.variant)

    # --- memoized evaluation with cycle detection ---

    def _eval_constant(self, d: ConstDef) -> Optional[int]:
        if d.resolved is not None:
            return d.resolved
        if not self._enter(d.name, d.name_span or d.loc, d.from_header):
            return None
        try:
            with self.err.in_file(d.from_header):
                d.resolved = self.evaluate(d.value)
        finally:
            self.evaluation_stack.pop()
        if d.resolved is None:
            self.failed.add(d.name)
        return d.resolved

    def _eval_variant(self, enum: EnumDef, v: EnumVariant) -> Optional[int]:
        if v.resolved is not None:
            return v.resolved
        if not self._enter(v.name, v.loc, enum.from_header):
            return None
        try:
            with self.err.in_file(enum.from_header):
                if v.value is not None:
                    value = self.evaluate(v.value)
                else:
                    idx = enum.variants.index(v)
                    if idx == 0:
                        value = 0
                    else:
                        prev = self._eval_variant(enum, enum.variants[idx - 1])
                        value = None if prev is None else prev + 1
                if value is not None and not INT32_MIN <= value <= INT32_MAX:
                    self.err.emit(er.ERR.XE2016, v.loc, value=value, name=v.name,
                                  width="a 32-bit signed integer")
                    value = None
        finally:
            self.evaluation_stack.pop()
        v.resolved = value
        if value is None:
            self.failed.add(v.name)
        return value

    def _enter(self, name: str, span: Optional[Span], filename: Optional[str]) -> bool:
        """Push `name` on the evaluation stack; False if it cannot be evaluated."""
        if name in self.failed:
            return False
        if name in self.evaluation_stack:
            start = self.evaluation_stack.index(name)
            chain = " -> ".join(self.evaluation_stack[start:] + [name])
            with self.err.in_file(filename):
                self.err.emit(er.ERR.XE2011, span, chain=chain)
            # Every member of the cycle is reported through this one diagnostic
            self.failed.update(self.evaluation_stack[start:])
            return False
        self.evaluation_stack.append(name)
        return True
