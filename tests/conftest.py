"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from task_dependency_analyzer.graph_analyzer import GraphAnalyzer
from task_dependency_analyzer.graph_builder import DependencyGraphBuilder
from task_dependency_analyzer.layout_engine import LayoutEngine


@pytest.fixture
def builder() -> DependencyGraphBuilder:
    return DependencyGraphBuilder()


@pytest.fixture
def analyzer() -> GraphAnalyzer:
    return GraphAnalyzer()


@pytest.fixture
def engine() -> LayoutEngine:
    return LayoutEngine(seed=42)
