"""
Filter Pipeline

Pure derivation of the visible subgraph from the full graph and the
current filter parameters, plus helpers that keep UI controls in range.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..core.exceptions import InvalidFilterReference
from ..core.logging_config import get_logger
from .visualization_data_models import FilterParameters, Graph, NodeCategory

logger = get_logger("graph_visualization.filter_pipeline")


def filter_graph(graph: Graph, params: FilterParameters) -> Graph:
    """
    Derive the visible subgraph.

    Edge predicates (weight threshold, label, focus, secondary focus) are
    combined as a conjunction. Node pruning runs afterwards because it
    depends on the surviving edge set.

    Args:
        graph: Full graph
        params: Filter parameters

    Returns:
        New Graph preserving the relative node and edge order of ``graph``
    """
    edges = tuple(
        edge for edge in graph.edges
        if edge.weight >= params.min_weight
        and (params.label_filter is None or edge.label == params.label_filter)
        and (params.node_focus is None or edge.touches(params.node_focus))
        and (params.secondary_focus is None or edge.touches(params.secondary_focus))
    )

    if params.hide_disconnected:
        touched = set()
        for edge in edges:
            touched.add(edge.source_id)
            touched.add(edge.target_id)
        nodes = tuple(node for node in graph.nodes if node.id in touched)
    else:
        nodes = graph.nodes

    logger.debug(f"Filtered graph to {len(nodes)} nodes / {len(edges)} edges "
                 f"(from {graph.node_count} / {graph.edge_count})")
    return Graph(nodes=nodes, edges=edges)


def compute_degrees(graph: Graph) -> Dict[str, int]:
    """Degree of every node in ``graph``; parallel edges each count once"""
    degrees = {node.id: 0 for node in graph.nodes}
    for edge in graph.edges:
        degrees[edge.source_id] = degrees.get(edge.source_id, 0) + 1
        degrees[edge.target_id] = degrees.get(edge.target_id, 0) + 1
    return degrees


def check_references(graph: Graph, params: FilterParameters) -> List[InvalidFilterReference]:
    """Focus ids that do not name a node of ``graph``"""
    issues = []
    for parameter in ("node_focus", "secondary_focus"):
        node_id = getattr(params, parameter)
        if node_id is not None and not graph.has_node(node_id):
            issues.append(InvalidFilterReference(parameter=parameter, node_id=node_id))
    for issue in issues:
        logger.warning(str(issue))
    return issues


@dataclass(frozen=True)
class FilterOptions:
    """Choices offered by the filter controls for a given graph"""
    source_ids: Tuple[str, ...] = ()
    target_ids: Tuple[str, ...] = ()
    labels: Tuple[str, ...] = ()
    max_weight: int = 1

    @classmethod
    def from_graph(cls, graph: Graph) -> "FilterOptions":
        return cls(
            source_ids=tuple(sorted(n.id for n in graph.nodes if n.category == NodeCategory.SOURCE)),
            target_ids=tuple(sorted(n.id for n in graph.nodes if n.category == NodeCategory.TARGET)),
            labels=tuple(sorted({edge.label for edge in graph.edges})),
            max_weight=max([1] + [edge.weight for edge in graph.edges])
        )

    def to_dict(self):
        return {
            "source_ids": list(self.source_ids),
            "target_ids": list(self.target_ids),
            "labels": list(self.labels),
            "max_weight": self.max_weight
        }


def clamp_parameters(params: FilterParameters, options: FilterOptions) -> FilterParameters:
    """Keep ``min_weight`` within ``[1, options.max_weight]``"""
    clamped = max(1, min(options.max_weight, params.min_weight))
    if clamped != params.min_weight:
        logger.info(f"Clamped min_weight from {params.min_weight} to {clamped}")
        return params.with_changes(min_weight=clamped)
    return params
