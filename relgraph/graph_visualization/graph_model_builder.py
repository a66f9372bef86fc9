"""
Graph Model Builder

Aggregates flat relation records into unique nodes and weighted edges.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

import networkx as nx

from ..core.exceptions import EmptyInputError
from ..core.logging_config import get_logger
from .visualization_data_models import (
    Edge, Graph, GraphMetrics, Node, NodeCategory, RelationRecord
)

logger = get_logger("graph_visualization.graph_model_builder")


class GraphModelBuilder:
    """Build an immutable Graph from an ordered sequence of relation records"""

    def build(self, records: Sequence[RelationRecord]) -> Graph:
        """
        Aggregate records into a graph.

        Nodes are all distinct source ids (tagged SOURCE, in first-seen order)
        followed by all distinct target ids (tagged TARGET). Records sharing a
        (source, target, label) triple collapse into one edge whose weight is
        the record count and whose attributes concatenate the members' details.

        Args:
            records: Ordered relation records

        Returns:
            Graph with nodes and edges in first-appearance order

        Raises:
            EmptyInputError: If there are no records
        """
        records = list(records)
        if not records:
            raise EmptyInputError()

        source_ids: Dict[str, None] = {}
        target_ids: Dict[str, None] = {}
        groups: Dict[Tuple[str, str, str], List[RelationRecord]] = {}

        for record in records:
            source_ids.setdefault(record.source_id)
            target_ids.setdefault(record.target_id)
            groups.setdefault((record.source_id, record.target_id, record.label), []).append(record)

        nodes = [Node(id=node_id, category=NodeCategory.SOURCE) for node_id in source_ids]
        collisions = [node_id for node_id in target_ids if node_id in source_ids]
        if collisions:
            logger.warning(f"{len(collisions)} id(s) appear on both sides, keeping source category: "
                           f"{', '.join(collisions[:5])}")
        nodes.extend(
            Node(id=node_id, category=NodeCategory.TARGET)
            for node_id in target_ids if node_id not in source_ids
        )

        edges = [
            Edge(
                source_id=source_id,
                target_id=target_id,
                label=label,
                weight=len(members),
                attributes=tuple(detail for member in members for detail in member.details if detail)
            )
            for (source_id, target_id, label), members in groups.items()
        ]

        graph = Graph(nodes=tuple(nodes), edges=tuple(edges))
        logger.info(f"Built graph from {len(records)} records: {graph.node_count} nodes, {graph.edge_count} edges")
        return graph


def build_graph(records: Iterable[RelationRecord]) -> Graph:
    """Module-level shortcut for GraphModelBuilder().build"""
    return GraphModelBuilder().build(list(records))


def to_networkx(graph: Graph) -> nx.MultiGraph:
    """Create a NetworkX multigraph keyed by node id, one edge per Edge"""
    nx_graph = nx.MultiGraph()
    for node in graph.nodes:
        nx_graph.add_node(node.id, category=node.category.value)
    for edge in graph.edges:
        nx_graph.add_edge(edge.source_id, edge.target_id, key=edge.label,
                          label=edge.label, weight=edge.weight)
    return nx_graph


def calculate_metrics(graph: Graph) -> GraphMetrics:
    """Summary metrics used for status display"""
    nx_graph = to_networkx(graph)
    label_counts: Dict[str, int] = {}
    for edge in graph.edges:
        label_counts[edge.label] = label_counts.get(edge.label, 0) + 1

    simple = nx.Graph(nx_graph)
    return GraphMetrics(
        total_nodes=graph.node_count,
        total_edges=graph.edge_count,
        total_weight=sum(edge.weight for edge in graph.edges),
        label_counts=label_counts,
        graph_density=nx.density(simple) if simple.number_of_nodes() > 1 else 0.0,
        connected_components=nx.number_connected_components(simple) if simple.number_of_nodes() else 0,
        isolated_nodes=nx.number_of_isolates(simple)
    )
