"""
Plotly Graph Renderer

Creates interactive Plotly figures from layout snapshots: edges colored by
label with weight-scaled width, nodes sized by collision radius, tooltips
and a legend for categories and labels.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import plotly.graph_objects as go

from ..core.config_manager import LayoutConfig, RenderConfig, get_config
from ..core.logging_config import get_logger
from .visualization_data_models import (
    LayoutSnapshot, NodeCategory, SimEdgeView, SimNodeView, ViewTransform
)

logger = get_logger("graph_visualization.plotly_renderer")

MAX_TOOLTIP_ATTRIBUTES = 12


class PlotlyGraphRenderer:
    """Create Plotly figures from solver output"""

    def __init__(self, render_config: Optional[RenderConfig] = None,
                 layout_config: Optional[LayoutConfig] = None):
        if render_config is None or layout_config is None:
            config = get_config()
            render_config = render_config or config.render
            layout_config = layout_config or config.layout
        self.config = render_config
        self.layout_config = layout_config

    def edge_width(self, weight: int) -> float:
        """Stroke width grows with weight, clamped to ``[base, edge_width_max]``"""
        width = self.config.edge_width_base + weight * self.config.edge_width_slope
        return max(self.config.edge_width_base, min(self.config.edge_width_max, width))

    def edge_color(self, label: str) -> str:
        return self.config.label_colors.get(label, self.config.default_edge_color)

    def node_color(self, category: NodeCategory) -> str:
        return self.config.node_colors.get(category.value, "#95a5a6")

    def category_name(self, category: NodeCategory) -> str:
        return self.config.category_names.get(category.value, category.value.title())

    def create_figure(self, snapshot: LayoutSnapshot,
                      transform: Optional[ViewTransform] = None) -> go.Figure:
        """
        Create an interactive Plotly graph visualization.

        Args:
            snapshot: Solver output for one tick
            transform: View transform applied as axis ranges

        Returns:
            Plotly Figure with edges drawn behind nodes
        """
        transform = transform or ViewTransform()
        fig = go.Figure()

        for trace in self._create_edge_traces(snapshot.edges):
            fig.add_trace(trace)
        hover_trace = self._create_edge_hover_trace(snapshot.edges)
        if hover_trace is not None:
            fig.add_trace(hover_trace)
        for trace in self._create_node_traces(snapshot.nodes, transform.scale):
            fig.add_trace(trace)

        width = self.layout_config.width
        height = max(self.layout_config.min_height, self.layout_config.height)
        x0, y0 = transform.screen_to_world(0.0, 0.0)
        x1, y1 = transform.screen_to_world(width, height)

        fig.update_layout(
            title=dict(
                text=f"{self.config.title} (Showing {snapshot.node_count} nodes / {snapshot.edge_count} links)",
                font=dict(size=16)
            ),
            width=width,
            height=height,
            showlegend=True,
            hovermode='closest',
            margin=dict(b=20, l=5, r=5, t=40),
            # Screen y grows downward
            xaxis=dict(range=[x0, x1], showgrid=False, zeroline=False, showticklabels=False),
            yaxis=dict(range=[y1, y0], showgrid=False, zeroline=False, showticklabels=False),
            plot_bgcolor='white'
        )
        return fig

    def _create_edge_traces(self, edges: Tuple[SimEdgeView, ...]) -> List[go.Scatter]:
        """One line trace per (label, width) so widths can differ"""
        groups: Dict[Tuple[str, float], List[SimEdgeView]] = {}
        for edge in edges:
            groups.setdefault((edge.label, self.edge_width(edge.weight)), []).append(edge)

        traces = []
        legend_shown = set()
        for (label, width), members in groups.items():
            xs: List[Optional[float]] = []
            ys: List[Optional[float]] = []
            for edge in members:
                xs.extend([edge.x1, edge.x2, None])
                ys.extend([edge.y1, edge.y2, None])
            traces.append(go.Scatter(
                x=xs, y=ys,
                mode='lines',
                line=dict(width=width, color=self.edge_color(label)),
                opacity=self.config.edge_opacity,
                hoverinfo='skip',
                name=label,
                legendgroup=label,
                showlegend=label not in legend_shown
            ))
            legend_shown.add(label)
        return traces

    def _create_edge_hover_trace(self, edges: Tuple[SimEdgeView, ...]) -> Optional[go.Scatter]:
        """Invisible midpoint markers carrying edge tooltips"""
        if not edges:
            return None
        return go.Scatter(
            x=[(edge.x1 + edge.x2) / 2 for edge in edges],
            y=[(edge.y1 + edge.y2) / 2 for edge in edges],
            mode='markers',
            marker=dict(size=8, opacity=0),
            hovertext=[self.edge_tooltip(edge) for edge in edges],
            hoverinfo='text',
            showlegend=False,
            name='edge details'
        )

    def _create_node_traces(self, nodes: Tuple[SimNodeView, ...], scale: float) -> List[go.Scatter]:
        traces = []
        for category in NodeCategory:
            members = [node for node in nodes if node.category == category]
            if not members:
                continue
            show_labels = category == NodeCategory.SOURCE
            traces.append(go.Scatter(
                x=[node.x for node in members],
                y=[node.y for node in members],
                mode='markers+text' if show_labels else 'markers',
                text=[node.id for node in members] if show_labels else None,
                textposition='top center',
                textfont=dict(size=12, color='#111827'),
                marker=dict(
                    size=[2 * node.radius * scale for node in members],
                    color=self.node_color(category),
                    line=dict(width=0.6, color='#111827')
                ),
                hovertext=[self.node_tooltip(node) for node in members],
                hoverinfo='text',
                name=self.category_name(category)
            ))
        return traces

    def node_tooltip(self, node: SimNodeView) -> str:
        return f"<b>{node.id}</b><br>{self.category_name(node.category)}<br>Links: {node.degree}"

    def edge_tooltip(self, edge: SimEdgeView) -> str:
        parts = []
        if edge.attributes:
            shown = list(edge.attributes[:MAX_TOOLTIP_ATTRIBUTES])
            if len(edge.attributes) > MAX_TOOLTIP_ATTRIBUTES:
                shown.append(f"... {len(edge.attributes) - MAX_TOOLTIP_ATTRIBUTES} more")
            parts.append(f"<b>{', '.join(shown)}</b>")
        parts.append(f"{edge.source_id} - {edge.target_id}")
        parts.append(f"Count: {edge.weight}")
        parts.append(edge.label)
        return "<br>".join(parts)


def write_html(fig: go.Figure, path: Union[str, Path]) -> Path:
    """Write a standalone HTML page for ``fig``"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(path), include_plotlyjs=True)
    logger.info(f"Wrote graph visualization to {path}")
    return path
