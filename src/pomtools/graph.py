from __future__ import annotations

from collections.abc import Iterable

import networkx as nx

from pomtools.registry import ProjectRegistry


def build_graph(registry: ProjectRegistry) -> nx.DiGraph:
    """Build a directed graph where A -> B means A depends on B.

    Only in-tree modules take part; dependencies on artifacts outside the
    registry are dropped.
    """
    g = nx.DiGraph()
    for pom in registry:
        a = pom.identity
        g.add_node(a, version=pom.version, path=str(pom.path))
        for b in pom.dependency_identities():
            if b in registry and b != a:
                g.add_edge(a, b)
    return g


def reverse_dependencies(g: nx.DiGraph, identity: str) -> list[str]:
    """Return predecessors of identity (who depends on it directly)."""
    if identity not in g:
        return []
    return sorted(g.predecessors(identity))


def transitive_dependents(g: nx.DiGraph, identities: Iterable[str]) -> set[str]:
    """Return the given identities plus everything that transitively depends on them.

    Backs `reverse --transitive`, and gives the same set as the scan-based
    closure in `pomtools.closure.expand_dependents`.
    """
    out: set[str] = set()
    for identity in identities:
        if identity in g:
            out.add(identity)
            out |= nx.ancestors(g, identity)
    return out
