"""Tests for circular dependency detection."""

from __future__ import annotations

from task_dependency_analyzer.cycle_detector import CycleDetector
from task_dependency_analyzer.graph_builder import DependencyGraphBuilder

from tests.builders import chain, make_task


def _assert_cycle_is_closed(graph, cycle) -> None:
    dependency_pairs = {(e.source, e.target) for e in graph.edges_of_type("dependency")}
    for i, node_id in enumerate(cycle):
        assert (node_id, cycle[(i + 1) % len(cycle)]) in dependency_pairs


def test_two_task_cycle(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task("A", dependencies=["B"]), make_task("B", dependencies=["A"])])

    cycles = CycleDetector(graph).detect_cycles()

    assert len(cycles) == 1
    assert set(cycles[0]) == {"A", "B"}
    _assert_cycle_is_closed(graph, cycles[0])


def test_disjoint_cycles_are_all_found(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1, dependencies=[3]),
        make_task(2, dependencies=[1]),
        make_task(3, dependencies=[2]),
        make_task(4),
        make_task(5, dependencies=[6]),
        make_task(6, dependencies=[5]),
    ]
    graph = builder.build(tasks)

    cycles = CycleDetector(graph).detect_cycles()

    assert sorted(sorted(cycle) for cycle in cycles) == [["1", "2", "3"], ["5", "6"]]
    for cycle in cycles:
        _assert_cycle_is_closed(graph, cycle)


def test_self_dependency(builder: DependencyGraphBuilder) -> None:
    graph = builder.build([make_task(1, dependencies=[1])])

    assert CycleDetector(graph).detect_cycles() == [("1",)]


def test_blocks_and_subtask_edges_do_not_form_cycles(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1, blockers=[2], subtasks=[{"id": 1}]),
        make_task(2, blockers=[1]),
    ]
    graph = builder.build(tasks)

    detector = CycleDetector(graph)
    assert detector.detect_cycles() == []
    assert detector.is_dag() is True


def test_deep_chain_does_not_recurse(builder: DependencyGraphBuilder) -> None:
    ids = list(range(1, 3001))
    graph = builder.build(chain(*ids) + [make_task(3001, dependencies=[3000])], analyze=False)
    tasks_with_back_edge = list(chain(*ids))
    tasks_with_back_edge[0] = make_task(1, dependencies=[3000])
    cyclic = builder.build(tasks_with_back_edge, analyze=False)

    assert CycleDetector(graph).detect_cycles() == []
    cycles = CycleDetector(cyclic).detect_cycles()
    assert len(cycles) == 1
    assert len(cycles[0]) == 3000


def test_strongly_connected_components(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1, dependencies=[2]),
        make_task(2, dependencies=[1]),
        make_task(3, dependencies=[3]),
        make_task(4, dependencies=[1]),
    ]
    graph = builder.build(tasks)

    components = CycleDetector(graph).find_strongly_connected_components()

    assert sorted(components) == [["1", "2"], ["3"]]


def test_analysis_summary_and_suggestions(builder: DependencyGraphBuilder) -> None:
    tasks = [
        make_task(1, dependencies=[2], priority="critical"),
        make_task(2, dependencies=[1], priority="low"),
    ]
    graph = builder.build(tasks)

    summary = CycleDetector(graph).get_analysis_summary()

    assert summary["is_dag"] is False
    details = summary["cycle_analysis"]["cycle_details"]
    assert details[0]["severity"] == "critical"
    assert details[0]["length"] == 2
    assert summary["strongly_connected_components"]["largest_component_size"] == 2

    suggestion = summary["recommendations"][0]
    # the edge into the low priority task is the cheapest one to drop
    assert suggestion["breaking_point"]["from"] == "1"
    assert suggestion["breaking_point"]["to"] == "2"


def test_empty_graph(builder: DependencyGraphBuilder) -> None:
    detector = CycleDetector(builder.build([]))

    assert detector.detect_cycles() == []
    assert detector.find_strongly_connected_components() == []
