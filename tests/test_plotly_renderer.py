"""
Plotly Renderer Tests
"""

import pytest

from relgraph.graph_visualization import (
    LayoutSnapshot, NodeCategory, PlotlyGraphRenderer, SimEdgeView, SimulationState,
    ViewTransform, write_html
)


@pytest.fixture
def renderer(config):
    return PlotlyGraphRenderer(config.render, config.layout)


class TestStyling:

    def test_edge_width_grows_with_weight(self, renderer):
        assert renderer.edge_width(1) == pytest.approx(1.8)
        assert renderer.edge_width(2) == pytest.approx(2.1)
        assert renderer.edge_width(100) == 6.0

    def test_label_colors(self, renderer):
        assert renderer.edge_color("Gold Medal") == "#fdd10d"
        assert renderer.edge_color("Silver Medal") == "#C0C0C0"
        assert renderer.edge_color("Bronze Medal") == "#a45506"
        assert renderer.edge_color("unlisted") == "#000000"

    def test_node_styles(self, renderer):
        assert renderer.node_color(NodeCategory.SOURCE) == "#69b3a2"
        assert renderer.category_name(NodeCategory.TARGET) == "Discipline"

    def test_edge_tooltip_caps_attributes(self, renderer):
        edge = SimEdgeView("A", "X", 0, 0, 1, 1, "win", 15,
                           tuple(f"athlete {i}" for i in range(15)))
        tooltip = renderer.edge_tooltip(edge)
        assert "... 3 more" in tooltip
        assert "athlete 12" not in tooltip
        assert "Count: 15" in tooltip


class TestCreateFigure:

    def test_trace_layout(self, renderer, solver):
        solver.tick(10)
        fig = renderer.create_figure(solver.snapshot())
        # two edge widths, one hover trace, one trace per node category
        assert len(fig.data) == 5
        assert "Showing 3 nodes / 2 links" in fig.layout.title.text

        line_widths = sorted(t.line.width for t in fig.data if t.mode == "lines")
        assert line_widths == pytest.approx([1.8, 2.1])

    def test_node_size_scales_with_zoom(self, renderer, solver):
        fig = renderer.create_figure(solver.snapshot(), ViewTransform(scale=2.0))
        sources = next(t for t in fig.data if t.name == "Country")
        assert list(sources.marker.size) == [4 * solver.radius_of("A"), 4 * solver.radius_of("B")]
        assert list(sources.text) == ["A", "B"]

    def test_axes_follow_transform(self, renderer, solver):
        fig = renderer.create_figure(solver.snapshot(), ViewTransform(scale=2.0, translate_x=-100.0))
        assert tuple(fig.layout.xaxis.range) == (50.0, 450.0)
        assert tuple(fig.layout.yaxis.range) == (300.0, 0.0)

    def test_empty_snapshot(self, renderer):
        snapshot = LayoutSnapshot(nodes=(), edges=(), alpha=0.0,
                                  state=SimulationState.IDLE, tick_count=0)
        fig = renderer.create_figure(snapshot)
        assert len(fig.data) == 0
        assert "Showing 0 nodes / 0 links" in fig.layout.title.text

    def test_write_html(self, renderer, solver, tmp_path):
        path = write_html(renderer.create_figure(solver.snapshot()), tmp_path / "out" / "graph.html")
        assert path.exists()
        assert "plotly" in path.read_text(encoding="utf-8").lower()
