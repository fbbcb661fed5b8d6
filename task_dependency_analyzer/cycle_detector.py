"""
Cycle Detector
Detects circular task dependencies and finds strongly connected components
"""

import logging
from typing import Dict, List, Optional, Tuple

import networkx as nx

from .graph_utils import to_digraph
from .models import DependencyGraph

logger = logging.getLogger(__name__)

Cycle = Tuple[str, ...]


class CycleDetector:
    """Detects cycles and strongly connected components over dependency edges"""

    def __init__(self, graph: DependencyGraph):
        self.graph = graph
        self.dependency_graph = to_digraph(graph, edge_types=('dependency',))
        self.cycles: List[Cycle] = []
        self.cycle_analysis: Dict = {}

    def detect_cycles(self) -> List[Cycle]:
        """Depth-first cycle search restricted to dependency edges.

        Every node is used as a seed in graph order unless an earlier search
        already explored it. Reaching a node that is still on the current
        path closes a cycle, reported as the path suffix starting at that
        node. The walk keeps its own stack of successor iterators so deep
        chains do not hit the interpreter's recursion limit.
        """
        G = self.dependency_graph
        cycles: List[Cycle] = []
        visited = set()
        on_path = set()

        for start in self.graph.node_ids():
            if start in visited:
                continue

            visited.add(start)
            on_path.add(start)
            path = [start]
            stack = [iter(G.successors(start))]

            while stack:
                next_id = next(stack[-1], None)
                if next_id is None:
                    stack.pop()
                    on_path.discard(path.pop())
                    continue

                if next_id in on_path:
                    cycles.append(tuple(path[path.index(next_id):]))
                elif next_id not in visited:
                    visited.add(next_id)
                    on_path.add(next_id)
                    path.append(next_id)
                    stack.append(iter(G.successors(next_id)))

        self.cycles = cycles
        self.cycle_analysis = self._analyze_cycles(cycles)
        if cycles:
            logger.info(f"Found {len(cycles)} cycles in task dependencies")
        return cycles

    def find_strongly_connected_components(self) -> List[List[str]]:
        """Groups of tasks that depend on each other, directly or transitively"""
        significant_sccs = []
        for scc in nx.strongly_connected_components(self.dependency_graph):
            if len(scc) > 1:
                significant_sccs.append(self._in_graph_order(scc))
            else:
                # Single-node components only count with a self-dependency
                node = next(iter(scc))
                if self.dependency_graph.has_edge(node, node):
                    significant_sccs.append([node])

        logger.debug(f"Found {len(significant_sccs)} strongly connected components")
        return significant_sccs

    def _in_graph_order(self, members) -> List[str]:
        order = {node_id: index for index, node_id in enumerate(self.dependency_graph.nodes)}
        return sorted(members, key=lambda node_id: order[node_id])

    def _analyze_cycles(self, cycles: List[Cycle]) -> Dict:
        """Analyze detected cycles for severity and impact"""
        analysis = {
            'total_cycles': len(cycles),
            'cycle_details': [],
            'severity_distribution': {'low': 0, 'medium': 0, 'high': 0, 'critical': 0},
            'affected_tasks': [],
        }

        affected = []
        for i, cycle in enumerate(cycles):
            severity = self._determine_cycle_severity(cycle)
            analysis['cycle_details'].append({
                'id': i,
                'cycle': list(cycle),
                'length': len(cycle),
                'severity': severity,
                'description': self._generate_cycle_description(cycle, severity),
            })
            analysis['severity_distribution'][severity] += 1
            affected.extend(node_id for node_id in cycle if node_id not in affected)

        analysis['affected_tasks'] = affected
        return analysis

    @staticmethod
    def _determine_cycle_severity(cycle: Cycle) -> str:
        """Severity by cycle length"""
        cycle_length = len(cycle)
        if cycle_length <= 2:
            return 'critical'
        elif cycle_length <= 3:
            return 'high'
        elif cycle_length <= 5:
            return 'medium'
        return 'low'

    @staticmethod
    def _generate_cycle_description(cycle: Cycle, severity: str) -> str:
        cycle_str = " → ".join(list(cycle) + [cycle[0]])

        severity_descriptions = {
            'critical': 'Tasks wait directly on each other and can never start',
            'high': 'Short dependency loop that blocks every task in it',
            'medium': 'Dependency loop that should be reviewed and broken',
            'low': 'Long dependency loop, likely an accidental back-reference',
        }

        return f"{severity_descriptions.get(severity, 'Circular dependency')}: {cycle_str}"

    def get_cycle_breaking_suggestions(self) -> List[Dict]:
        """Suggest which dependency to drop to break each detected cycle"""
        suggestions = []

        for cycle_info in self.cycle_analysis.get('cycle_details', []):
            breaking_point = self._find_cycle_breaking_point(cycle_info['cycle'])
            suggestions.append({
                'cycle_id': cycle_info['id'],
                'cycle': cycle_info['cycle'],
                'severity': cycle_info['severity'],
                'breaking_point': breaking_point,
                'recommended_action': self._get_recommended_action(cycle_info['severity']),
            })

        return suggestions

    def _find_cycle_breaking_point(self, cycle: List[str]) -> Optional[Dict]:
        """The lightest dependency in the loop, i.e. the one into the least urgent task"""
        candidates = []
        for i, current in enumerate(cycle):
            next_node = cycle[(i + 1) % len(cycle)]
            if self.dependency_graph.has_edge(current, next_node):
                weight = self.dependency_graph[current][next_node].get('weight') or 1
                candidates.append((weight, i, current, next_node))

        if not candidates:
            return None

        weight, _, source, target = min(candidates)
        return {
            'from': source,
            'to': target,
            'weight': weight,
            'suggestion': f"Remove the dependency of task {target} on task {source} or split one of them",
        }

    @staticmethod
    def _get_recommended_action(severity: str) -> str:
        actions = {
            'critical': 'Immediate action required - the tasks in this loop can never start',
            'high': 'High priority - resolve before scheduling the affected tasks',
            'medium': 'Medium priority - review the dependency chain in planning',
            'low': 'Low priority - verify the long chain is intentional',
        }
        return actions.get(severity, 'Review and assess impact')

    def get_analysis_summary(self) -> Dict:
        """Get a comprehensive summary of cycle analysis"""
        cycles = self.detect_cycles()
        sccs = self.find_strongly_connected_components()

        return {
            'is_dag': not cycles,
            'cycle_analysis': self.cycle_analysis,
            'strongly_connected_components': {
                'count': len(sccs),
                'components': sccs,
                'largest_component_size': max([len(scc) for scc in sccs]) if sccs else 0,
            },
            'recommendations': self.get_cycle_breaking_suggestions(),
        }

    def is_dag(self) -> bool:
        """Check if the dependency edges form a Directed Acyclic Graph (DAG)"""
        return nx.is_directed_acyclic_graph(self.dependency_graph)
