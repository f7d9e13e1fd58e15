# semantics/passes/ordering.py
"""Generation order: every definition after the definitions it embeds by value."""
from __future__ import annotations
from typing import Dict, List, Set

from xdrgen.semantics.ast import Definition
from xdrgen.semantics.passes.cycles import Edge


def generation_order(definitions: List[Definition], graph: Dict[str, List[Edge]]) -> List[Definition]:
    """Depth-first post-order over followed edges, visiting in source order.

    Indirect edges are skipped, so the order exists once cycles are broken.
    Definitions without edges (constants, enums, programs) keep their
    source position relative to their neighbours.
    """
    by_name: Dict[str, Definition] = {}
    for d in definitions:
        by_name.setdefault(d.name, d)

    visited: Set[str] = set()
    result: List[Definition] = []

    def visit(name: str) -> None:
        if name in visited:
            return
        visited.add(name)
        for edge in graph.get(name, []):
            if edge.followed:
                visit(edge.target)
        if name in by_name:
            result.append(by_name[name])

    for d in definitions:
        visit(d.name)

    # Duplicate names map to their first definition; append the others
    seen = {id(d) for d in result}
    result.extend(d for d in definitions if id(d) not in seen)
    return result
