"""
Dependency Graph Builder
Turns raw task records (tasks, subtasks, dependencies, blockers) into a typed graph
"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import networkx as nx

from .graph_analyzer import GraphAnalyzer
from .graph_utils import to_digraph
from .models import (
    DEFAULT_ACTUAL_HOURS,
    DEFAULT_COMPLEXITY,
    DEFAULT_ESTIMATED_HOURS,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    DEFAULT_TITLE,
    TASK_PRIORITIES,
    TASK_STATUSES,
    DependencyEdge,
    DependencyGraph,
    TaskNode,
)
from .task_store import DEFAULT_TAG, load_project_tasks

logger = logging.getLogger(__name__)

PRIORITY_WEIGHT_BONUS = {'critical': 3, 'high': 2, 'medium': 1, 'low': 0}


class DependencyGraphBuilder:
    """Builds dependency graphs from task records"""

    def __init__(self, analyzer: Optional[GraphAnalyzer] = None):
        self.analyzer = analyzer or GraphAnalyzer()

    def build(self, tasks: Iterable[Any], analyze: bool = True) -> DependencyGraph:
        """Build a dependency graph from a sequence of raw task records.

        Malformed fields are defaulted and references to unknown ids are kept
        as dangling edges. With ``analyze`` the metadata (cycles, critical
        path, orphans, complexity) is computed before returning.
        """
        nodes: List[TaskNode] = []
        edges: List[DependencyEdge] = []
        seen_ids = set()

        for index, task in enumerate(tasks or []):
            if not isinstance(task, dict):
                logger.warning(f"Skipping task record #{index + 1}: expected an object, got {type(task).__name__}")
                continue

            node = self._create_task_node(task, fallback_id=str(index + 1))
            if node.id in seen_ids:
                logger.warning(f"Skipping duplicate task id {node.id}")
                continue
            seen_ids.add(node.id)
            nodes.append(node)

            for sub_index, subtask in enumerate(_as_list(task.get('subtasks'))):
                if not isinstance(subtask, dict):
                    logger.warning(f"Skipping subtask #{sub_index + 1} of task {node.id}: not an object")
                    continue
                child = self._create_task_node(subtask, fallback_id=str(sub_index + 1), parent_id=node.id)
                if child.id in seen_ids:
                    logger.warning(f"Skipping duplicate subtask id {child.id}")
                    continue
                seen_ids.add(child.id)
                nodes.append(child)
                edges.append(DependencyEdge(
                    source=node.id,
                    target=child.id,
                    type='subtask',
                    label='contains',
                ))

            weight = self.calculate_dependency_weight(node, _raw_complexity(task.get('complexity')))
            for dep_id in _as_list(task.get('dependencies')):
                edges.append(DependencyEdge(
                    source=str(dep_id),
                    target=node.id,
                    type='dependency',
                    weight=weight,
                    label='depends on',
                ))

            for blocker_id in _as_list(task.get('blockers')):
                edges.append(DependencyEdge(
                    source=str(blocker_id),
                    target=node.id,
                    type='blocks',
                    label='blocks',
                ))

        graph = DependencyGraph(nodes=tuple(nodes), edges=tuple(edges))

        dangling = graph.dangling_edges()
        if dangling:
            logger.warning(f"{len(dangling)} edges reference unknown task ids")

        if analyze:
            graph = graph.with_metadata(self.analyzer.compute_metadata(graph))

        logger.info(f"Built dependency graph with {len(nodes)} nodes and {len(edges)} edges")
        return graph

    def build_from_store(self, store: Dict[str, list], analyze: bool = True) -> DependencyGraph:
        return self.build(store.get('tasks', []), analyze=analyze)

    def build_from_project(self, project_root: Union[str, Path], tag: Optional[str] = None,
                           analyze: bool = True) -> DependencyGraph:
        """Build the graph from <project_root>/.taskmaster/tasks/tasks.json"""
        return self.build_from_store(load_project_tasks(project_root, tag=tag or DEFAULT_TAG), analyze=analyze)

    def _create_task_node(self, task: Dict, fallback_id: str, parent_id: Optional[str] = None) -> TaskNode:
        """Create a task node from a raw record, defaulting missing fields"""
        raw_id = task.get('id')
        local_id = fallback_id if raw_id is None or raw_id == '' else str(raw_id)
        node_id = f"{parent_id}.{local_id}" if parent_id is not None else local_id

        return TaskNode(
            id=node_id,
            title=str(task.get('title') or DEFAULT_TITLE),
            status=_choice(task.get('status'), TASK_STATUSES, DEFAULT_STATUS),
            priority=_choice(task.get('priority'), TASK_PRIORITIES, DEFAULT_PRIORITY),
            complexity=_complexity(task.get('complexity')),
            estimated_hours=_number(task.get('estimatedHours'), DEFAULT_ESTIMATED_HOURS),
            actual_hours=_number(task.get('actualHours'), DEFAULT_ACTUAL_HOURS),
            start_date=_optional_str(task.get('startDate')),
            end_date=_optional_str(task.get('endDate')),
            assignee=_optional_str(task.get('assignee')),
            tags=frozenset(str(tag) for tag in _as_list(task.get('tags'))),
            parent_id=parent_id,
            is_subtask=parent_id is not None,
        )

    @staticmethod
    def calculate_dependency_weight(node: TaskNode, complexity: Optional[float] = None) -> int:
        """Weight of an edge into ``node``: higher for urgent or complex dependents.

        ``complexity`` is the unrounded score from the task record when there
        is one, so a 7.5 still counts as above 7.
        """
        if complexity is None:
            complexity = node.complexity
        weight = 1 + PRIORITY_WEIGHT_BONUS.get(node.priority, 0)
        if complexity > 7:
            weight += 2
        elif complexity > 5:
            weight += 1
        return weight

    @staticmethod
    def get_graph_stats(graph: DependencyGraph) -> Dict:
        """Get statistics about the dependency graph"""
        G = to_digraph(graph, edge_types=None, include_dangling=False)
        node_count = G.number_of_nodes()
        return {
            'total_tasks': node_count,
            'total_edges': len(graph.edges),
            'total_dependencies': len(graph.edges_of_type('dependency')),
            'dangling_edges': len(graph.dangling_edges()),
            'is_connected': nx.is_weakly_connected(G) if node_count > 0 else False,
            'density': nx.density(G) if node_count > 1 else 0.0,
            'average_degree': sum(dict(G.degree()).values()) / node_count if node_count > 0 else 0,
        }


def _as_list(value: Any) -> list:
    if value is None or value == '' or isinstance(value, dict):
        return []
    if isinstance(value, (str, int, float)):
        return [value]
    try:
        return list(value)
    except TypeError:
        return []


def _choice(value: Any, allowed: tuple, default: str) -> str:
    if isinstance(value, str) and value.lower() in allowed:
        return value.lower()
    if value not in (None, ''):
        logger.debug(f"Unknown value {value!r}, defaulting to {default}")
    return default


def _raw_complexity(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        complexity = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(complexity) or complexity <= 0:
        return None
    return complexity


def _complexity(value: Any) -> int:
    complexity = _raw_complexity(value)
    if complexity is None:
        return DEFAULT_COMPLEXITY
    return max(1, min(int(math.floor(complexity + 0.5)), 10))


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value) if value not in (None, '') else default
    except (TypeError, ValueError):
        return default


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)
