"""Shared fixtures for the relation graph engine tests."""
import pytest

from relgraph.core.config_manager import ConfigurationManager
from relgraph.graph_visualization import GraphModelBuilder, LayoutSolver, RelationRecord


@pytest.fixture
def config():
    """Default configuration without environment overrides"""
    return ConfigurationManager(load_env=False)


@pytest.fixture
def records():
    return [
        RelationRecord("A", "X", "win", ("Alice", "100m")),
        RelationRecord("A", "X", "win", ("Bob", "200m")),
        RelationRecord("B", "X", "loss", ("Carl", "100m")),
    ]


@pytest.fixture
def graph(records):
    return GraphModelBuilder().build(records)


@pytest.fixture
def solver(config, graph):
    solver = LayoutSolver(config.layout, config.radii)
    solver.set_graph(graph)
    return solver
