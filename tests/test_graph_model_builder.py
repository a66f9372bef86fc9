"""
Graph Model Builder Tests

Aggregation of flat records into unique nodes and weighted edges.
"""

import pytest

from relgraph.core.exceptions import EmptyInputError
from relgraph.graph_visualization import (
    GraphModelBuilder, NodeCategory, RelationRecord, build_graph, calculate_metrics, to_networkx
)


class TestGraphModelBuilder:

    def test_nodes_sources_then_targets(self, graph):
        """Sources come first in first-seen order, then targets."""
        assert graph.node_ids == ("A", "B", "X")
        assert [n.category for n in graph.nodes] == [
            NodeCategory.SOURCE, NodeCategory.SOURCE, NodeCategory.TARGET
        ]

    def test_edges_aggregate_by_triple(self, graph):
        assert [e.key for e in graph.edges] == [("A", "X", "win"), ("B", "X", "loss")]
        assert [e.weight for e in graph.edges] == [2, 1]

    def test_weight_sum_equals_record_count(self, records, graph):
        assert sum(e.weight for e in graph.edges) == len(records)

    def test_attributes_concatenate_non_empty_details(self):
        graph = GraphModelBuilder().build([
            RelationRecord("A", "X", "win", ("Alice", "100m")),
            RelationRecord("A", "X", "win", ("Bob", "")),
        ])
        assert graph.edges[0].attributes == ("Alice", "100m", "Bob")

    def test_same_label_different_targets_are_separate_edges(self):
        graph = build_graph([
            RelationRecord("A", "X", "win"),
            RelationRecord("A", "Y", "win"),
        ])
        assert graph.edge_count == 2
        assert all(e.weight == 1 for e in graph.edges)

    def test_empty_input_raises(self):
        with pytest.raises(EmptyInputError):
            GraphModelBuilder().build([])

    def test_id_on_both_sides_keeps_source_category(self):
        graph = build_graph([
            RelationRecord("A", "B", "link"),
            RelationRecord("B", "C", "link"),
        ])
        assert graph.node_ids == ("A", "B", "C")
        assert graph.get_node("B").category == NodeCategory.SOURCE
        assert graph.get_node("C").category == NodeCategory.TARGET

    def test_every_edge_endpoint_is_a_node(self, graph):
        ids = set(graph.node_ids)
        for edge in graph.edges:
            assert edge.source_id in ids
            assert edge.target_id in ids


class TestGraphMetrics:

    def test_networkx_export(self, graph):
        nx_graph = to_networkx(graph)
        assert nx_graph.number_of_nodes() == 3
        assert nx_graph.number_of_edges() == 2
        assert nx_graph.nodes["X"]["category"] == "target"

    def test_calculate_metrics(self, graph):
        metrics = calculate_metrics(graph)
        assert metrics.total_nodes == 3
        assert metrics.total_edges == 2
        assert metrics.total_weight == 3
        assert metrics.label_counts == {"win": 1, "loss": 1}
        assert metrics.connected_components == 1
        assert metrics.isolated_nodes == 0

    def test_metrics_on_empty_graph(self):
        from relgraph.graph_visualization import Graph
        metrics = calculate_metrics(Graph())
        assert metrics.total_nodes == 0
        assert metrics.connected_components == 0
        assert metrics.graph_density == 0.0
