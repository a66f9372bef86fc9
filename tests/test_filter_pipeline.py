"""
Filter Pipeline Tests

Visible subgraph derivation, option discovery and parameter clamping.
"""

import pytest

from relgraph.core.exceptions import InvalidFilterParameters, InvalidFilterReference
from relgraph.graph_visualization import (
    FilterOptions, FilterParameters, check_references, clamp_parameters,
    compute_degrees, filter_graph
)


class TestFilterGraph:

    def test_default_parameters_keep_everything(self, graph):
        visible = filter_graph(graph, FilterParameters())
        assert visible == graph

    def test_min_weight(self, graph):
        visible = filter_graph(graph, FilterParameters(min_weight=2))
        assert [e.key for e in visible.edges] == [("A", "X", "win")]
        assert visible.node_ids == ("A", "X")

    def test_show_disconnected_keeps_all_nodes(self, graph):
        visible = filter_graph(graph, FilterParameters(min_weight=2, hide_disconnected=False))
        assert visible.node_ids == ("A", "B", "X")
        assert visible.edge_count == 1

    def test_label_filter_preserves_order(self, graph):
        visible = filter_graph(graph, FilterParameters(label_filter="loss"))
        assert visible.node_ids == ("B", "X")
        assert [e.label for e in visible.edges] == ["loss"]

    def test_focus(self, graph):
        visible = filter_graph(graph, FilterParameters(node_focus="A"))
        assert [e.key for e in visible.edges] == [("A", "X", "win")]

    def test_focus_on_shared_target(self, graph):
        visible = filter_graph(graph, FilterParameters(node_focus="X"))
        assert visible.edge_count == 2

    def test_secondary_focus_is_a_conjunction(self, graph):
        both = filter_graph(graph, FilterParameters(node_focus="A", secondary_focus="X"))
        assert both.edge_count == 1

        disjoint = filter_graph(graph, FilterParameters(node_focus="A", secondary_focus="B"))
        assert disjoint.edge_count == 0
        assert disjoint.node_count == 0

    def test_unknown_focus_yields_empty_edges(self, graph):
        params = FilterParameters(node_focus="Z")
        assert filter_graph(graph, params).edge_count == 0
        assert filter_graph(graph, params.with_changes(hide_disconnected=False)).node_count == 3

    def test_idempotent(self, graph):
        for params in (FilterParameters(), FilterParameters(min_weight=2),
                       FilterParameters(label_filter="win", hide_disconnected=False)):
            once = filter_graph(graph, params)
            assert filter_graph(once, params) == once

    def test_raising_min_weight_never_adds_edges(self, graph):
        previous = set(e.key for e in graph.edges)
        for weight in range(1, 5):
            keys = set(e.key for e in filter_graph(graph, FilterParameters(min_weight=weight)).edges)
            assert keys <= previous
            previous = keys

    def test_hidden_disconnected_nodes_have_edges(self, graph):
        visible = filter_graph(graph, FilterParameters(label_filter="win"))
        degrees = compute_degrees(visible)
        assert all(degree >= 1 for degree in degrees.values())


class TestFilterParameters:

    def test_min_weight_below_one_rejected(self):
        with pytest.raises(InvalidFilterParameters):
            FilterParameters(min_weight=0)

    def test_invalid_parameters_are_value_errors(self):
        with pytest.raises(ValueError):
            FilterParameters(min_weight=-3)

    def test_non_integer_weight_rejected(self):
        with pytest.raises(InvalidFilterParameters):
            FilterParameters(min_weight=1.5)
        with pytest.raises(InvalidFilterParameters):
            FilterParameters(min_weight=True)

    def test_with_changes(self):
        params = FilterParameters().with_changes(label_filter="win")
        assert params.label_filter == "win"
        assert params.min_weight == 1


class TestFilterHelpers:

    def test_compute_degrees(self, graph):
        assert compute_degrees(graph) == {"A": 1, "B": 1, "X": 2}

    def test_check_references(self, graph):
        issues = check_references(graph, FilterParameters(node_focus="Z", secondary_focus="A"))
        assert issues == [InvalidFilterReference(parameter="node_focus", node_id="Z")]
        assert "unknown node 'Z'" in str(issues[0])

    def test_options_from_graph(self, graph):
        options = FilterOptions.from_graph(graph)
        assert options.source_ids == ("A", "B")
        assert options.target_ids == ("X",)
        assert options.labels == ("loss", "win")
        assert options.max_weight == 2

    def test_clamp_parameters(self, graph):
        options = FilterOptions.from_graph(graph)
        assert clamp_parameters(FilterParameters(min_weight=5), options).min_weight == 2

        params = FilterParameters(min_weight=2)
        assert clamp_parameters(params, options) is params
