"""Shortest-route search over the live route graph.

Stateless: callers pass the graph and hold whatever lock guards it.
Weights are additive distances and must be non-negative, which the
store enforces on every write.
"""

from __future__ import annotations

import networkx as nx

from routemap.domain.routes import Route


def all_shortest_routes(graph: nx.DiGraph, source: str, target: str) -> list[Route]:
    """Return every minimal-weight path from *source* to *target*.

    A path from a node to itself is the single-element zero-weight route.
    An unreachable target yields an empty list. Routes are ordered
    lexicographically by path and all carry the same weight.
    """
    if source == target:
        return [Route(route=[source], weight=0.0)]

    try:
        paths = sorted(
            nx.all_shortest_paths(graph, source, target, weight="weight", method="dijkstra")
        )
    except nx.NetworkXNoPath:
        return []

    weight = float(nx.path_weight(graph, paths[0], weight="weight"))
    return [Route(route=path, weight=weight) for path in paths]
