"""
Graph Analyzer
Structural facts over a task dependency graph: cycles, critical path,
orphan tasks and an aggregate complexity score
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import networkx as nx

from .cycle_detector import CycleDetector
from .graph_utils import to_digraph
from .models import DEFAULT_COMPLEXITY, DependencyGraph, GraphMetadata

logger = logging.getLogger(__name__)

CRITICAL_PATH_SEED_PRIORITIES = ('high', 'critical')
HIGH_COMPLEXITY_THRESHOLD = 7
LONG_CRITICAL_PATH = 5


@dataclass(frozen=True)
class AnalysisResult:
    cycles: Tuple[Tuple[str, ...], ...] = ()
    critical_path: Tuple[str, ...] = ()
    orphan_tasks: Tuple[str, ...] = ()
    complexity: float = 0.0


class GraphAnalyzer:
    """Pure analysis functions over the node and edge lists of a graph.

    Only ``dependency`` edges take part in cycle detection, the critical
    path and orphan detection; ``blocks`` and ``subtask`` edges are ignored
    there but still count towards the complexity score.
    """

    def analyze(self, graph: DependencyGraph) -> AnalysisResult:
        return AnalysisResult(
            cycles=tuple(self.detect_cycles(graph)),
            critical_path=tuple(self.find_critical_path(graph)),
            orphan_tasks=tuple(self.find_orphan_tasks(graph)),
            complexity=self.calculate_complexity(graph),
        )

    def compute_metadata(self, graph: DependencyGraph) -> GraphMetadata:
        result = self.analyze(graph)
        metadata = GraphMetadata(
            total_tasks=len(graph.nodes),
            total_dependencies=len(graph.edges_of_type('dependency')),
            critical_path=result.critical_path,
            cycles=result.cycles,
            orphan_tasks=result.orphan_tasks,
            complexity=result.complexity,
        )
        logger.info(
            f"Analysis: {metadata.total_tasks} tasks, {len(metadata.cycles)} cycles, "
            f"critical path length {len(metadata.critical_path)}, complexity {metadata.complexity}"
        )
        return metadata

    def detect_cycles(self, graph: DependencyGraph) -> List[Tuple[str, ...]]:
        return CycleDetector(graph).detect_cycles()

    def find_critical_path(self, graph: DependencyGraph) -> List[str]:
        """Longest dependency chain starting at a high or critical priority task.

        Each seed gets an exhaustive simple-path search, so the result is
        exact per seed but the cost is exponential on dense graphs. Ties keep
        the path found first (seeds in graph order, successors in edge order).
        """
        seeds = [node.id for node in graph.nodes if node.priority in CRITICAL_PATH_SEED_PRIORITIES]
        if not seeds:
            return []

        G = to_digraph(graph, edge_types=('dependency',))
        longest_path: List[str] = []
        for seed in seeds:
            path = self._longest_path_from(G, seed)
            if len(path) > len(longest_path):
                longest_path = path
        return longest_path

    @staticmethod
    def _longest_path_from(G: nx.DiGraph, start: str) -> List[str]:
        """Longest simple path from ``start``, walked with an explicit stack"""
        best = [start]
        path = [start]
        on_path = {start}
        stack = [iter(G.successors(start))]

        while stack:
            next_id = next(stack[-1], None)
            if next_id is None:
                stack.pop()
                on_path.discard(path.pop())
                continue
            if next_id in on_path:
                continue

            path.append(next_id)
            on_path.add(next_id)
            stack.append(iter(G.successors(next_id)))
            if len(path) > len(best):
                best = list(path)

        return best

    def exact_critical_path(self, graph: DependencyGraph) -> Dict:
        """Longest chain by dynamic programming over the condensation DAG.

        Strongly connected components are collapsed first; a component on
        the winning chain contributes all of its tasks (in graph order) and
        is reported under ``cyclic_groups`` instead of being cut short.
        Only chains that start at a high or critical priority task count.
        """
        G = to_digraph(graph, edge_types=('dependency',))
        seeds = {node.id for node in graph.nodes if node.priority in CRITICAL_PATH_SEED_PRIORITIES}
        if not seeds:
            return {'path': [], 'cyclic_groups': []}

        C = nx.condensation(G)
        order = {node_id: index for index, node_id in enumerate(G.nodes)}
        members = {
            c: sorted(C.nodes[c]['members'], key=lambda node_id: order[node_id])
            for c in C.nodes
        }

        best: Dict[int, int] = {}
        previous: Dict[int, Optional[int]] = {}
        for c in nx.topological_sort(C):
            size = len(members[c])
            score, parent = -1, None
            if any(node_id in seeds for node_id in members[c]):
                score = size
            for p in C.predecessors(c):
                if best.get(p, -1) >= 0 and best[p] + size > score:
                    score, parent = best[p] + size, p
            best[c] = score
            previous[c] = parent

        end = None
        for c in nx.topological_sort(C):
            if best[c] >= 0 and (end is None or best[c] > best[end]):
                end = c

        chain = []
        while end is not None:
            chain.append(end)
            end = previous[end]
        chain.reverse()

        path = [node_id for c in chain for node_id in members[c]]
        cyclic_groups = [
            members[c] for c in chain
            if len(members[c]) > 1 or G.has_edge(members[c][0], members[c][0])
        ]
        return {'path': path, 'cyclic_groups': cyclic_groups}

    def find_orphan_tasks(self, graph: DependencyGraph) -> List[str]:
        """Top-level tasks with no dependency edge in or out"""
        connected = set()
        for edge in graph.edges_of_type('dependency'):
            connected.add(edge.source)
            connected.add(edge.target)

        return [node.id for node in graph.nodes
                if not node.is_subtask and node.id not in connected]

    def calculate_complexity(self, graph: DependencyGraph) -> float:
        """Weighted mix of node count, edge count and mean task complexity, one decimal"""
        node_count = len(graph.nodes)
        if node_count == 0:
            return 0.0

        edge_count = len(graph.edges)
        avg_complexity = sum(node.complexity or DEFAULT_COMPLEXITY for node in graph.nodes) / node_count
        raw = node_count * 0.3 + edge_count * 0.5 + avg_complexity * 0.2
        # half-up rounding to one decimal
        return math.floor(raw * 10 + 0.5) / 10

    def analyze_dependencies(self, graph: DependencyGraph) -> Dict:
        """Report of dependency issues and recommendations for a graph"""
        metadata = self.compute_metadata(graph)
        detector = CycleDetector(graph)
        detector.detect_cycles()
        dangling = graph.dangling_edges()

        return {
            'summary': {
                'totalTasks': metadata.total_tasks,
                'totalDependencies': metadata.total_dependencies,
                'complexity': metadata.complexity,
            },
            'issues': {
                'cycles': {
                    'count': len(metadata.cycles),
                    'cycles': [list(cycle) for cycle in metadata.cycles],
                    'details': detector.cycle_analysis['cycle_details'],
                    'suggestions': detector.get_cycle_breaking_suggestions(),
                    'recommendation': 'Remove circular dependencies to prevent deadlocks',
                } if metadata.cycles else None,
                'orphanTasks': {
                    'count': len(metadata.orphan_tasks),
                    'tasks': list(metadata.orphan_tasks),
                    'recommendation': 'Review orphan tasks for proper integration into workflow',
                } if metadata.orphan_tasks else None,
                'highComplexity': {
                    'complexity': metadata.complexity,
                    'recommendation': 'Consider simplifying task dependencies to reduce complexity',
                } if metadata.complexity > HIGH_COMPLEXITY_THRESHOLD else None,
                'danglingReferences': {
                    'count': len(dangling),
                    'edges': [edge.to_dict() for edge in dangling],
                    'recommendation': 'Fix references to task ids that do not exist',
                } if dangling else None,
            },
            'insights': {
                'criticalPath': list(metadata.critical_path),
                'recommendations': self.generate_recommendations(graph, metadata),
            },
        }

    @staticmethod
    def generate_recommendations(graph: DependencyGraph, metadata: GraphMetadata) -> List[str]:
        recommendations = []

        if metadata.cycles:
            recommendations.append('Resolve circular dependencies to prevent task deadlocks')

        if metadata.orphan_tasks:
            recommendations.append('Review orphan tasks and integrate them into the main workflow')

        if metadata.complexity > HIGH_COMPLEXITY_THRESHOLD:
            recommendations.append('Consider simplifying task dependencies to reduce project complexity')

        blocked_high_priority = [
            node for node in graph.nodes
            if node.priority in CRITICAL_PATH_SEED_PRIORITIES and node.status == 'blocked'
        ]
        if blocked_high_priority:
            recommendations.append('Prioritize unblocking high-priority tasks to maintain project momentum')

        if len(metadata.critical_path) > LONG_CRITICAL_PATH:
            recommendations.append('Critical path is long - consider parallel execution or task breakdown')

        return recommendations
