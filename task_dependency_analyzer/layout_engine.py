"""
Layout Engine
Maps task graph nodes to 2-D canvas coordinates for visualization
"""

import logging
import math
import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

import networkx as nx

from .graph_utils import to_digraph
from .models import DependencyEdge, DependencyGraph

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 1200
DEFAULT_HEIGHT = 800

TOP_MARGIN = 50
CANVAS_MARGIN = 50
FORCE_ITERATIONS = 50
REPULSION_STRENGTH = 1000
SPRING_STRENGTH = 0.01
DAMPING = 0.1
CIRCLE_RADIUS_RATIO = 0.4

LAYOUT_ALIASES = {
    'hierarchical': 'hierarchical',
    'tree': 'hierarchical',
    'force': 'force',
    'force-directed': 'force',
    'circular': 'circular',
}


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}


@dataclass
class VisualizationConfig:
    """Which layout to run and which nodes to keep before running it"""
    layout: str = 'hierarchical'
    filter_by_status: List[str] = field(default_factory=list)
    filter_by_priority: List[str] = field(default_factory=list)
    show_subtasks: bool = True


def apply_filters(graph: DependencyGraph, config: VisualizationConfig) -> DependencyGraph:
    """Return a new graph without the nodes the config filters out.

    Edges survive a status or priority filter only when both endpoints are
    kept; hiding subtasks removes subtask nodes and ``subtask`` edges.
    """
    nodes = list(graph.nodes)
    edges = list(graph.edges)

    for attribute, allowed in (('status', config.filter_by_status),
                               ('priority', config.filter_by_priority)):
        if allowed:
            nodes = [node for node in nodes if getattr(node, attribute) in allowed]
            node_ids = {node.id for node in nodes}
            edges = [edge for edge in edges if edge.source in node_ids and edge.target in node_ids]

    if not config.show_subtasks:
        nodes = [node for node in nodes if not node.is_subtask]
        edges = [edge for edge in edges if edge.type != 'subtask']

    return replace(graph, nodes=tuple(nodes), edges=tuple(edges))


def unresolved_edges(graph: DependencyGraph, positions: Dict[str, Position]) -> List[DependencyEdge]:
    """Edges with an endpoint that has no position, e.g. references to unknown tasks"""
    return [edge for edge in graph.edges
            if edge.source not in positions or edge.target not in positions]


class LayoutEngine:
    """Stateless layout algorithms: hierarchical, force-directed and circular.

    ``seed`` makes the force-directed layout reproducible; each call draws
    from a fresh generator so repeated calls with the same seed agree.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def layout(self, graph: DependencyGraph, width: float = DEFAULT_WIDTH, height: float = DEFAULT_HEIGHT,
               algorithm: str = 'hierarchical') -> Dict[str, Position]:
        name = LAYOUT_ALIASES.get((algorithm or '').lower())
        if name is None:
            logger.warning(f"Unknown layout '{algorithm}', falling back to hierarchical")
            name = 'hierarchical'

        if name == 'force':
            positions = self.force_layout(graph, width, height)
        elif name == 'circular':
            positions = self.circular_layout(graph, width, height)
        else:
            positions = self.hierarchical_layout(graph, width, height)

        skipped = unresolved_edges(graph, positions)
        if skipped:
            logger.debug(f"{len(skipped)} edges have no positioned endpoint and will not be drawn")
        return positions

    def layout_with_config(self, graph: DependencyGraph, config: VisualizationConfig,
                           width: float = DEFAULT_WIDTH, height: float = DEFAULT_HEIGHT) -> Dict[str, Position]:
        return self.layout(apply_filters(graph, config), width, height, config.layout)

    def hierarchical_layout(self, graph: DependencyGraph, width: float, height: float) -> Dict[str, Position]:
        """Top-down dependency flow: one row per level, evenly spaced columns"""
        if not graph.nodes:
            return {}

        levels = self.calculate_node_levels(graph)
        max_level = max(levels.values())

        nodes_by_level: Dict[int, List[str]] = {}
        for node_id in graph.node_ids():
            nodes_by_level.setdefault(levels[node_id], []).append(node_id)

        level_height = height / (max_level + 1)
        positions = {}
        for level in range(max_level + 1):
            nodes_at_level = nodes_by_level.get(level, [])
            node_width = width / (len(nodes_at_level) + 1)
            for index, node_id in enumerate(nodes_at_level):
                positions[node_id] = Position(
                    x=node_width * (index + 1),
                    y=level_height * level + TOP_MARGIN,
                )
        return positions

    def calculate_node_levels(self, graph: DependencyGraph) -> Dict[str, int]:
        """Level of every node along dependency edges, counted from the roots.

        Levels are longest distances over the condensation of the dependency
        graph: tasks in one cycle share a level, and every dependency that
        is not part of a cycle points to a strictly deeper level. Nodes with
        no incoming dependency (including cycles nothing leads into) sit at
        level 0.
        """
        G = to_digraph(graph, edge_types=('dependency',), include_dangling=False)
        C = nx.condensation(G)

        component_levels: Dict[int, int] = {}
        for component in nx.topological_sort(C):
            component_levels[component] = max(
                (component_levels[p] + 1 for p in C.predecessors(component)),
                default=0,
            )

        mapping = C.graph['mapping']
        return {node_id: component_levels[mapping[node_id]] for node_id in graph.node_ids()}

    def force_layout(self, graph: DependencyGraph, width: float, height: float,
                     rng: Optional[random.Random] = None) -> Dict[str, Position]:
        """Spring simulation: inverse-square repulsion between all pairs, Hooke attraction along edges"""
        rng = rng or random.Random(self.seed)
        node_ids = graph.node_ids()
        pos = {
            node_id: [rng.random() * (width - 2 * CANVAS_MARGIN) + CANVAS_MARGIN,
                      rng.random() * (height - 2 * CANVAS_MARGIN) + CANVAS_MARGIN]
            for node_id in node_ids
        }
        edges = [edge for edge in graph.edges if edge.source in pos and edge.target in pos]

        for _ in range(FORCE_ITERATIONS):
            forces = {node_id: [0.0, 0.0] for node_id in node_ids}

            for i in range(len(node_ids)):
                for j in range(i + 1, len(node_ids)):
                    a, b = node_ids[i], node_ids[j]
                    dx = pos[a][0] - pos[b][0]
                    dy = pos[a][1] - pos[b][1]
                    distance = math.hypot(dx, dy) or 1
                    force = REPULSION_STRENGTH / (distance * distance)
                    fx = dx / distance * force
                    fy = dy / distance * force
                    forces[a][0] += fx
                    forces[a][1] += fy
                    forces[b][0] -= fx
                    forces[b][1] -= fy

            for edge in edges:
                source, target = pos[edge.source], pos[edge.target]
                dx = target[0] - source[0]
                dy = target[1] - source[1]
                distance = math.hypot(dx, dy) or 1
                force = distance * SPRING_STRENGTH
                fx = dx / distance * force
                fy = dy / distance * force
                forces[edge.source][0] += fx
                forces[edge.source][1] += fy
                forces[edge.target][0] -= fx
                forces[edge.target][1] -= fy

            for node_id in node_ids:
                x = pos[node_id][0] + forces[node_id][0] * DAMPING
                y = pos[node_id][1] + forces[node_id][1] * DAMPING
                pos[node_id][0] = max(CANVAS_MARGIN, min(width - CANVAS_MARGIN, x))
                pos[node_id][1] = max(CANVAS_MARGIN, min(height - CANVAS_MARGIN, y))

        return {node_id: Position(x=xy[0], y=xy[1]) for node_id, xy in pos.items()}

    def circular_layout(self, graph: DependencyGraph, width: float, height: float) -> Dict[str, Position]:
        center_x = width / 2
        center_y = height / 2
        radius = min(width, height) * CIRCLE_RADIUS_RATIO
        count = len(graph.nodes)

        positions = {}
        for index, node in enumerate(graph.nodes):
            angle = 2 * math.pi * index / count
            positions[node.id] = Position(
                x=center_x + radius * math.cos(angle),
                y=center_y + radius * math.sin(angle),
            )
        return positions
