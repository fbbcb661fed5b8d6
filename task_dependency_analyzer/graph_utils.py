"""
Graph utilities shared by the analyzer and the layout engine.
"""

from typing import Iterable, Optional

import networkx as nx

from .models import DependencyGraph


def to_digraph(graph: DependencyGraph, edge_types: Optional[Iterable[str]] = ('dependency',),
               include_dangling: bool = True) -> nx.DiGraph:
    """Build a networkx view of the graph.

    Nodes are added in graph order before any edge, so ``successors`` yields
    targets in edge insertion order. ``edge_types=None`` keeps every edge.
    With ``include_dangling`` false, edges touching unknown ids are dropped.
    """
    wanted = set(edge_types) if edge_types is not None else None
    G = nx.DiGraph()
    for node in graph.nodes:
        G.add_node(node.id, priority=node.priority, is_subtask=node.is_subtask)
    known = set(G.nodes)
    for edge in graph.edges:
        if wanted is not None and edge.type not in wanted:
            continue
        if not include_dangling and (edge.source not in known or edge.target not in known):
            continue
        G.add_edge(edge.source, edge.target, type=edge.type, weight=edge.weight)
    return G
