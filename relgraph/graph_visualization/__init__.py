"""
Graph Visualization Module

Decomposed components of the relation graph engine: record loading, graph
model building, filtering, force-directed layout, pointer interaction and
Plotly rendering.
"""

from .visualization_data_models import (
    NodeCategory,
    SimulationState,
    RelationRecord,
    Node,
    Edge,
    Graph,
    FilterParameters,
    ViewTransform,
    SimNodeView,
    SimEdgeView,
    LayoutSnapshot,
    GraphMetrics
)

from .record_loader import load_records_from_csv, records_from_rows
from .graph_model_builder import GraphModelBuilder, build_graph, calculate_metrics, to_networkx
from .filter_pipeline import (
    FilterOptions, filter_graph, compute_degrees, check_references, clamp_parameters
)
from .layout_solver import LayoutSolver
from .interaction_controller import InteractionController, GestureState
from .plotly_renderer import PlotlyGraphRenderer, write_html

__all__ = [
    # Data models
    "NodeCategory",
    "SimulationState",
    "RelationRecord",
    "Node",
    "Edge",
    "Graph",
    "FilterParameters",
    "ViewTransform",
    "SimNodeView",
    "SimEdgeView",
    "LayoutSnapshot",
    "GraphMetrics",

    # Core components
    "load_records_from_csv",
    "records_from_rows",
    "GraphModelBuilder",
    "build_graph",
    "calculate_metrics",
    "to_networkx",
    "FilterOptions",
    "filter_graph",
    "compute_degrees",
    "check_references",
    "clamp_parameters",
    "LayoutSolver",
    "InteractionController",
    "GestureState",
    "PlotlyGraphRenderer",
    "write_html"
]
