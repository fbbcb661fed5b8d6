"""
Task Dependency Analyzer
Builds task dependency graphs, analyzes cycles and critical paths, and computes layouts
"""

from .graph_builder import DependencyGraphBuilder
from .graph_analyzer import AnalysisResult, GraphAnalyzer
from .cycle_detector import CycleDetector
from .layout_engine import LayoutEngine, Position, VisualizationConfig, apply_filters
from .models import DependencyEdge, DependencyGraph, GraphMetadata, TaskNode
from .task_store import UnrecognizedTaskStoreFormat, load_task_store, normalize_task_store

__all__ = [
    'DependencyGraphBuilder', 'GraphAnalyzer', 'AnalysisResult', 'CycleDetector',
    'LayoutEngine', 'Position', 'VisualizationConfig', 'apply_filters',
    'TaskNode', 'DependencyEdge', 'DependencyGraph', 'GraphMetadata',
    'UnrecognizedTaskStoreFormat', 'load_task_store', 'normalize_task_store',
]
