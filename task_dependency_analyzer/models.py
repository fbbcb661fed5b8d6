"""
Task Graph Models
Immutable data structures for task nodes, dependency edges and the built graph
"""

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional, Tuple

TASK_STATUSES = ('pending', 'in-progress', 'done', 'blocked', 'deferred', 'cancelled')
TASK_PRIORITIES = ('low', 'medium', 'high', 'critical')
EDGE_TYPES = ('dependency', 'blocks', 'subtask')

DEFAULT_TITLE = 'Untitled Task'
DEFAULT_STATUS = 'pending'
DEFAULT_PRIORITY = 'medium'
DEFAULT_COMPLEXITY = 5
DEFAULT_ESTIMATED_HOURS = 8.0
DEFAULT_ACTUAL_HOURS = 0.0


@dataclass(frozen=True)
class TaskNode:
    """A task or subtask in the dependency graph"""
    id: str
    title: str = DEFAULT_TITLE
    status: str = DEFAULT_STATUS
    priority: str = DEFAULT_PRIORITY
    complexity: int = DEFAULT_COMPLEXITY
    estimated_hours: float = DEFAULT_ESTIMATED_HOURS
    actual_hours: float = DEFAULT_ACTUAL_HOURS
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    assignee: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    parent_id: Optional[str] = None
    is_subtask: bool = False

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'title': self.title,
            'status': self.status,
            'priority': self.priority,
            'complexity': self.complexity,
            'estimatedHours': self.estimated_hours,
            'actualHours': self.actual_hours,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'assignee': self.assignee,
            'tags': sorted(self.tags),
            'parentId': self.parent_id,
            'isSubtask': self.is_subtask,
        }


@dataclass(frozen=True)
class DependencyEdge:
    """A directed relation between two node ids (endpoints may not resolve)"""
    source: str
    target: str
    type: str
    weight: Optional[int] = None
    label: str = ''

    def to_dict(self) -> Dict:
        return {
            'source': self.source,
            'target': self.target,
            'type': self.type,
            'weight': self.weight,
            'label': self.label,
        }


@dataclass(frozen=True)
class GraphMetadata:
    total_tasks: int = 0
    total_dependencies: int = 0
    critical_path: Tuple[str, ...] = ()
    cycles: Tuple[Tuple[str, ...], ...] = ()
    orphan_tasks: Tuple[str, ...] = ()
    complexity: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'totalTasks': self.total_tasks,
            'totalDependencies': self.total_dependencies,
            'criticalPath': list(self.critical_path),
            'cycles': [list(cycle) for cycle in self.cycles],
            'orphanTasks': list(self.orphan_tasks),
            'complexity': self.complexity,
        }


@dataclass(frozen=True)
class DependencyGraph:
    """Nodes and edges of one task store, in input order.

    The graph is never mutated after construction. Analysis and filtering
    return new graphs via ``with_metadata`` / ``replace``.
    """
    nodes: Tuple[TaskNode, ...] = ()
    edges: Tuple[DependencyEdge, ...] = ()
    metadata: GraphMetadata = field(default_factory=GraphMetadata)

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Optional[TaskNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_of_type(self, edge_type: str) -> List[DependencyEdge]:
        return [edge for edge in self.edges if edge.type == edge_type]

    def dangling_edges(self) -> List[DependencyEdge]:
        """Edges whose source or target is not a node of this graph"""
        known = set(self.node_ids())
        return [edge for edge in self.edges
                if edge.source not in known or edge.target not in known]

    def with_metadata(self, metadata: GraphMetadata) -> 'DependencyGraph':
        return replace(self, metadata=metadata)

    def to_dict(self) -> Dict:
        return {
            'nodes': [node.to_dict() for node in self.nodes],
            'edges': [edge.to_dict() for edge in self.edges],
            'metadata': self.metadata.to_dict(),
        }
