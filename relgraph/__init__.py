"""relgraph - relational graph visualization engine.

Converts flat relation records into a node/edge graph, filters it into a
visible subgraph and lays it out with an interactive force simulation.

Example:
    from relgraph import RelationGraphVisualizer

    viz = RelationGraphVisualizer()
    viz.load_csv("medals.csv")
    viz.update_filters(min_weight=2)
    viz.run_until_settled()
    viz.write_html("graph.html")
"""

from relgraph.interactive_graph_visualizer import RelationGraphVisualizer
from relgraph.graph_visualization import (
    FilterParameters,
    Graph,
    LayoutSnapshot,
    RelationRecord,
)

__version__ = "0.1.0"

__all__ = [
    'RelationGraphVisualizer',
    'FilterParameters',
    'Graph',
    'LayoutSnapshot',
    'RelationRecord',
]
