# semantics/passes/cycles.py
"""Reference graph and recursion breaking.

Every NamedType inside a type definition is an edge of the reference graph:

- INLINE: the referenced value is embedded (plain field, fixed array
  element, union discriminant or arm, typedef target).
- OPTIONAL: reached through `T *x`.
- VARIABLE: reached through a variable-length array `T x<>`, which is
  already an indirection.

A cycle made only of INLINE edges describes a value of infinite size. Any
other cycle is made finite by marking one OPTIONAL edge on it indirect.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set

from xdrgen.internals.report import Reporter
from xdrgen.internals import errors as er
from xdrgen.semantics.ast import (
    Definition, TypedefDef, StructDef, UnionDef, XdrType, ArrayType,
    OptionalType, NamedType,
)
from xdrgen.semantics.error_reporter import PassErrorReporter


class EdgeKind(str, Enum):
    INLINE = "inline"
    OPTIONAL = "optional"
    VARIABLE = "variable"


@dataclass(eq=False)
class Edge:
    source: str
    target: str
    kind: EdgeKind
    ref: NamedType
    poisoned: bool = False            # Part of a reported infinite cycle

    @property
    def indirect(self) -> bool:
        return self.kind == EdgeKind.VARIABLE or self.ref.indirect

    @property
    def followed(self) -> bool:
        """Whether the edge still constrains layout (and thus ordering)."""
        return not self.indirect and not self.poisoned


def _walk(ty: XdrType, kind: EdgeKind, source: str, out: List[Edge]) -> None:
    if isinstance(ty, NamedType):
        if ty.target is not None:
            out.append(Edge(source, ty.target.name, kind, ty))
    elif isinstance(ty, ArrayType):
        _walk(ty.element, kind if ty.fixed else EdgeKind.VARIABLE, source, out)
    elif isinstance(ty, OptionalType):
        _walk(ty.inner, EdgeKind.OPTIONAL if kind == EdgeKind.INLINE else kind, source, out)


def build_graph(definitions: List[Definition]) -> Dict[str, List[Edge]]:
    """Map every definition name to its outgoing edges, in declaration order."""
    graph: Dict[str, List[Edge]] = {}
    for d in definitions:
        edges: List[Edge] = []
        if isinstance(d, TypedefDef):
            _walk(d.ty, EdgeKind.INLINE, d.name, edges)
        elif isinstance(d, StructDef):
            for f in d.fields:
                _walk(f.ty, EdgeKind.INLINE, d.name, edges)
        elif isinstance(d, UnionDef):
            _walk(d.discriminant.ty, EdgeKind.INLINE, d.name, edges)
            for arm in d.arms:
                if arm.field is not None:
                    _walk(arm.field.ty, EdgeKind.INLINE, d.name, edges)
        graph.setdefault(d.name, edges)
    return graph


class CycleBreaker:
    """Mark indirect links until the followed edges form a DAG.

    Runs a depth-first search in declaration order over the edges that are
    not yet indirect. On a back-edge, the OPTIONAL edge of that cycle closest
    to the back-edge (the back-edge itself when it is OPTIONAL) is marked
    indirect, and the search restarts. A cycle without an OPTIONAL edge is
    reported and its edges are excluded from further searches.
    """

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        self.err = PassErrorReporter(reporter)

    def run(self, definitions: List[Definition], graph: Dict[str, List[Edge]]) -> None:
        by_name = {d.name: d for d in definitions}
        order = [d.name for d in definitions if d.name in graph]

        while True:
            cycle = self._find_cycle(graph, order)
            if not cycle:
                return
            breaker = next((e for e in reversed(cycle) if e.kind == EdgeKind.OPTIONAL), None)
            if breaker is not None:
                breaker.ref.indirect = True
                continue

            names = " -> ".join([e.source for e in cycle] + [cycle[0].source])
            origin = by_name.get(cycle[0].source)
            span = getattr(origin, "name_span", None) or getattr(origin, "loc", None)
            with self.err.in_file(getattr(origin, "from_header", None)):
                self.err.emit(er.ERR.XE2040, span, cycle=names)
            for e in cycle:
                e.poisoned = True

    def _find_cycle(self, graph: Dict[str, List[Edge]], order: List[str]) -> List[Edge]:
        """Find a cycle of followed edges using DFS; the back-edge comes last."""
        visited: Set[str] = set()
        rec_stack: Set[str] = set()

        def dfs(node: str, path: List[Edge]) -> Optional[List[Edge]]:
            visited.add(node)
            rec_stack.add(node)

            for edge in graph.get(node, []):
                if not edge.followed:
                    continue
                if edge.target not in visited:
                    result = dfs(edge.target, path + [edge])
                    if result:
                        return result
                elif edge.target in rec_stack:
                    # Found cycle - the path portion starting at the target
                    full = path + [edge]
                    start = next(i for i, e in enumerate(full) if e.source == edge.target)
                    return full[start:]

            rec_stack.remove(node)
            return None

        for node in order:
            if node not in visited:
                result = dfs(node, [])
                if result:
                    return result

        return []  # No cycle found
