"""
Command-line entry point: build, analyze and lay out a task store.

Usage:
    python -m task_dependency_analyzer tasks.json
    python -m task_dependency_analyzer --project-root . --layout circular
    python -m task_dependency_analyzer tasks.json --analyze
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import Config
from .graph_analyzer import GraphAnalyzer
from .graph_builder import DependencyGraphBuilder
from .layout_engine import LayoutEngine, VisualizationConfig, apply_filters, unresolved_edges
from .task_store import UnrecognizedTaskStoreFormat, find_task_store, load_task_store

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task_dependency_analyzer",
        description="Analyze task dependencies and compute graph layouts",
    )
    parser.add_argument("tasks_file", nargs="?", default=Config.TASKS_FILE,
                        help="path to tasks.json (default: <project-root>/.taskmaster/tasks/tasks.json)")
    parser.add_argument("--project-root", default=".", help="project directory holding .taskmaster/")
    parser.add_argument("--tag", default=Config.TAG, help="task list tag to read from a tagged store")
    parser.add_argument("--layout", default=Config.LAYOUT, help="hierarchical, force, circular or tree")
    parser.add_argument("--width", type=int, default=Config.CANVAS_WIDTH)
    parser.add_argument("--height", type=int, default=Config.CANVAS_HEIGHT)
    parser.add_argument("--seed", type=int, default=Config.SEED, help="seed for the force layout")
    parser.add_argument("--status", action="append", default=[], help="only keep tasks with this status")
    parser.add_argument("--priority", action="append", default=[], help="only keep tasks with this priority")
    parser.add_argument("--hide-subtasks", action="store_true")
    parser.add_argument("--analyze", action="store_true", help="print the dependency analysis report")
    parser.add_argument("--log-level", default=Config.LOG_LEVEL)
    return parser


def run(args: argparse.Namespace) -> dict:
    path = args.tasks_file or find_task_store(args.project_root)
    store = load_task_store(path, tag=args.tag)

    graph = DependencyGraphBuilder().build_from_store(store)
    if args.analyze:
        return GraphAnalyzer().analyze_dependencies(graph)

    config = VisualizationConfig(
        layout=args.layout,
        filter_by_status=args.status,
        filter_by_priority=args.priority,
        show_subtasks=not args.hide_subtasks,
    )
    visible = apply_filters(graph, config)
    positions = LayoutEngine(seed=args.seed).layout(visible, args.width, args.height, config.layout)

    result = visible.to_dict()
    result['layout'] = {
        'algorithm': config.layout,
        'width': args.width,
        'height': args.height,
        'positions': {node_id: position.to_dict() for node_id, position in positions.items()},
        'unresolvedEdges': [edge.to_dict() for edge in unresolved_edges(visible, positions)],
    }
    return result


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO), stream=sys.stderr)

    try:
        result = run(args)
    except UnrecognizedTaskStoreFormat as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0
