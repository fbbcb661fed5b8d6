"""Tests for building typed dependency graphs from raw task records."""

from __future__ import annotations

import json
from pathlib import Path

from task_dependency_analyzer.graph_builder import DependencyGraphBuilder
from task_dependency_analyzer.models import TaskNode

from tests.builders import chain, make_task


def test_nodes_and_edges_follow_input_order(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1, subtasks=[{"id": 1, "title": "Schema"}, {"id": 2}]),
        make_task(2, dependencies=[1], blockers=[3]),
        make_task(3),
    ]

    graph = builder.build(tasks)

    assert graph.node_ids() == ["1", "1.1", "1.2", "2", "3"]
    assert [(e.source, e.target, e.type, e.label) for e in graph.edges] == [
        ("1", "1.1", "subtask", "contains"),
        ("1", "1.2", "subtask", "contains"),
        ("1", "2", "dependency", "depends on"),
        ("3", "2", "blocks", "blocks"),
    ]


def test_subtask_nodes_reference_parent(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task(7, subtasks=[{"id": 3, "title": "Child"}])])

    child = graph.get_node("7.3")
    assert child is not None
    assert child.is_subtask is True
    assert child.parent_id == "7"
    assert child.title == "Child"
    assert graph.get_node("7").is_subtask is False


def test_missing_fields_are_defaulted(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([{"id": 5}])

    assert graph.nodes == (
        TaskNode(id="5"),
    )
    node = graph.nodes[0]
    assert node.title == "Untitled Task"
    assert node.status == "pending"
    assert node.priority == "medium"
    assert node.complexity == 5
    assert node.estimated_hours == 8
    assert node.actual_hours == 0
    assert node.tags == frozenset()


def test_malformed_fields_are_defaulted(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([
        {
            "id": 1,
            "title": None,
            "status": "finished-ish",
            "priority": 3,
            "complexity": "hard",
            "estimatedHours": "lots",
            "tags": ["api", "api", "db"],
            "dependencies": None,
        },
    ])

    node = graph.nodes[0]
    assert node.title == "Untitled Task"
    assert node.status == "pending"
    assert node.priority == "medium"
    assert node.complexity == 5
    assert node.estimated_hours == 8
    assert node.tags == frozenset({"api", "db"})
    assert graph.edges == ()


def test_non_object_records_are_skipped(builder: DependencyGraphBuilder) -> None:
    graph = builder.build(["oops", make_task(1), 12])

    assert graph.node_ids() == ["1"]


def test_missing_id_uses_position(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task(1), {"title": "No id"}])

    assert graph.node_ids() == ["1", "2"]


def test_duplicate_ids_keep_first(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task(1, title="First"), make_task(1, title="Second")])

    assert graph.node_ids() == ["1"]
    assert graph.nodes[0].title == "First"


def test_dangling_references_are_kept(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task(1, dependencies=[99], blockers=["ghost"])])

    assert [(e.source, e.target) for e in graph.edges] == [("99", "1"), ("ghost", "1")]
    assert graph.dangling_edges() == list(graph.edges)


def test_dependency_weight(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1),
        make_task(2, dependencies=[1], priority="critical", complexity=8),
        make_task(3, dependencies=[1], priority="high", complexity=6),
        make_task(4, dependencies=[1], priority="low", complexity=2),
        make_task(5, dependencies=[1]),
    ]

    weights = {e.target: e.weight for e in builder.build(tasks).edges}

    assert weights == {"2": 6, "3": 4, "4": 1, "5": 2}


def test_fractional_complexity_rounds_and_weighs_unrounded(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1),
        make_task(2, dependencies=[1], complexity=7.5),
        make_task(3, dependencies=[1], complexity="7.5"),
        make_task(4, dependencies=[1], complexity=7.2),
        make_task(5, dependencies=[1], complexity=5.4),
        make_task(6, dependencies=[1], complexity=float("nan")),
    ]

    graph = builder.build(tasks)
    complexities = {node.id: node.complexity for node in graph.nodes}
    weights = {e.target: e.weight for e in graph.edges}

    assert complexities == {"1": 5, "2": 8, "3": 8, "4": 7, "5": 5, "6": 5}
    assert weights == {"2": 4, "3": 4, "4": 4, "5": 3, "6": 2}


def test_non_dependency_edges_have_no_weight(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task(1, blockers=[2], subtasks=[{"id": 1}]), make_task(2)])

    assert {e.type: e.weight for e in graph.edges} == {"subtask": None, "blocks": None}


def test_building_twice_is_identical(builder: DependencyGraphBuilder) -> None:
    tasks = chain(1, 2, 3) + [make_task(4, blockers=[1], subtasks=[{"id": 1}], tags=["x", "y"])]

    first = builder.build(tasks)
    second = DependencyGraphBuilder().build(tasks)

    assert first.nodes == second.nodes
    assert first.edges == second.edges
    assert first == second


def test_metadata_is_computed(builder: DependencyGraphBuilder) -> None:
    graph = builder.build(chain(1, 2, 3, priority="high") + [make_task(4)])

    assert graph.metadata.total_tasks == 4
    assert graph.metadata.total_dependencies == 2
    assert graph.metadata.critical_path == ("1", "2", "3")
    assert graph.metadata.orphan_tasks == ("4",)
    assert graph.metadata.cycles == ()


def test_empty_input(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([])

    assert graph.nodes == ()
    assert graph.edges == ()
    assert graph.metadata.complexity == 0
    assert graph.metadata.critical_path == ()


def test_build_from_project(tmp_path: Path, builder: DependencyGraphBuilder) -> None:
    store = tmp_path / ".taskmaster" / "tasks" / "tasks.json"
    store.parent.mkdir(parents=True)
    store.write_text(json.dumps({"master": {"tasks": chain(1, 2)}}), encoding="utf-8")

    graph = builder.build_from_project(tmp_path)

    assert graph.node_ids() == ["1", "2"]


def test_graph_stats(builder: DependencyGraphBuilder) -> None:
    graph = builder.build(chain(1, 2, 3) + [make_task(4, dependencies=[404])])

    stats = DependencyGraphBuilder.get_graph_stats(graph)

    assert stats["total_tasks"] == 4
    assert stats["total_dependencies"] == 3
    assert stats["dangling_edges"] == 1
    assert stats["is_connected"] is False
    assert stats["average_degree"] == 1.0
