# semantics/semantic_analyzer.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from xdrgen.internals.report import Reporter
from xdrgen.semantics.ast import Specification, Definition, ConstDef, EnumDef
from xdrgen.semantics.passes.collect import CollectorPass, SymbolTable
from xdrgen.semantics.passes.const_eval import ConstantEvaluator
from xdrgen.semantics.passes.type_resolution import TypeResolver
from xdrgen.semantics.passes.cycles import CycleBreaker, Edge, build_graph
from xdrgen.semantics.passes.ordering import generation_order


@dataclass
class ResolvedSpecification:
    """Output of semantic analysis, consumed by the code generator.

    Attributes:
        definitions: All definitions in generation order.
        symbols: Shared namespace of types, constants and enum variants.
        constants: Folded value of every constant and enum variant.
        graph: Reference graph with indirect links marked.
        passthrough: `%` lines to emit verbatim (extended grammar).
    """
    definitions: List[Definition]
    symbols: SymbolTable
    constants: Dict[str, int] = field(default_factory=dict)
    graph: Dict[str, List[Edge]] = field(default_factory=dict)
    passthrough: List[str] = field(default_factory=list)


class SemanticAnalyzer:
    """
    Semantic analysis coordinator that runs all resolver passes.

    Pass execution order:
      - Pass 0: Symbol collection (types, constants, enum variants)
      - Pass 1: Constant folding (constants and enum values, cycle detection)
      - Pass 2: Type resolution (name binding, bounds, union validation)
      - Pass 3: Cycle breaking (indirect links, infinite size detection)
      - Pass 4: Generation ordering

    All passes run even after errors so independent problems are reported
    together; the result is None if any error was reported.
    """

    def __init__(self, reporter: Reporter, filename: str = "<input>") -> None:
        self.reporter = reporter
        self.filename = filename
        self.symbols: Optional[SymbolTable] = None

    def check(self, spec: Specification) -> Optional[ResolvedSpecification]:
        """Entry point for semantic analysis. Runs all passes in sequence."""
        # Pass 0: collect names
        self.symbols = CollectorPass(self.reporter).run(spec)

        # Pass 1: fold constants and enum values
        evaluator = ConstantEvaluator(self.reporter, self.symbols)
        evaluator.run(spec)

        # Pass 2: bind types, fold bounds, validate unions
        TypeResolver(self.reporter, self.symbols, evaluator).run(spec)

        # Pass 3: break recursion through optional links
        graph = build_graph(spec.definitions)
        CycleBreaker(self.reporter).run(spec.definitions, graph)

        if self.reporter.has_errors:
            return None

        # Pass 4: order definitions for emission
        ordered = generation_order(spec.definitions, graph)

        return ResolvedSpecification(
            definitions=ordered,
            symbols=self.symbols,
            constants=self._constants(spec),
            graph=graph,
            passthrough=list(spec.passthrough),
        )

    def _constants(self, spec: Specification) -> Dict[str, int]:
        values: Dict[str, int] = {}
        for d in spec.definitions:
            if isinstance(d, ConstDef):
                values[d.name] = d.resolved
            elif isinstance(d, EnumDef):
                for v in d.variants:
                    values[v.name] = v.resolved
        return values
