"""
Interactive Graph Visualizer - Main Interface

Ties the decomposed components together: the full graph and the filter
parameters each carry a generation counter, and the visible subgraph and
layout are rebuilt only when either generation changes.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import plotly.graph_objects as go

from .core.config_manager import ConfigurationManager, get_config
from .core.exceptions import EmptyInputError, InvalidFilterReference
from .core.logging_config import get_logger
from .graph_visualization import (
    FilterOptions, FilterParameters, Graph, GraphModelBuilder, InteractionController,
    LayoutSnapshot, LayoutSolver, PlotlyGraphRenderer, RelationRecord,
    calculate_metrics, check_references, clamp_parameters, filter_graph,
    load_records_from_csv, write_html
)

logger = get_logger("interactive_graph_visualizer")


class RelationGraphVisualizer:
    """
    Relation graph engine facade.

    Data flows one way: records -> full graph -> visible subgraph -> layout
    -> snapshots. Pointer input reaches the solver only through the
    interaction controller.
    """

    def __init__(self, config: Optional[ConfigurationManager] = None):
        self.config = config or get_config()
        self.builder = GraphModelBuilder()
        self.solver = LayoutSolver(self.config.layout, self.config.radii)
        self.controller = InteractionController(self.solver, self.config.view)
        self.renderer = PlotlyGraphRenderer(self.config.render, self.config.layout)

        self._graph: Optional[Graph] = None
        self._graph_generation = 0
        self._params = FilterParameters()
        self._params_generation = 0

        self._visible: Optional[Graph] = None
        self._derived_from = (-1, -1)
        self._reference_warnings: List[InvalidFilterReference] = []
        self.options = FilterOptions()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def load_records(self, records: Sequence[RelationRecord]) -> bool:
        """
        Build the full graph from records.

        Returns:
            False when there is no data to render
        """
        try:
            graph = self.builder.build(records)
        except EmptyInputError:
            logger.warning("No data: relation record sequence is empty")
            graph = None

        self._graph = graph
        self._graph_generation += 1
        self.options = FilterOptions.from_graph(graph) if graph is not None else FilterOptions()
        clamped = clamp_parameters(self._params, self.options)
        if clamped != self._params:
            self._set_params(clamped)
        logger.info(f"Graph generation {self._graph_generation} loaded")
        return graph is not None

    def load_csv(self, path: Union[str, Path]) -> bool:
        return self.load_records(load_records_from_csv(path, self.config.records))

    @property
    def graph(self) -> Optional[Graph]:
        return self._graph

    @property
    def filter_parameters(self) -> FilterParameters:
        return self._params

    def update_filters(self, **changes: Any) -> FilterParameters:
        """Apply UI filter changes; unchanged values do not bump the generation"""
        params = self._params.with_changes(**changes)
        if params != self._params:
            self._set_params(params)
        return self._params

    def reset_filters(self) -> FilterParameters:
        if self._params != FilterParameters():
            self._set_params(FilterParameters())
        return self._params

    def _set_params(self, params: FilterParameters) -> None:
        self._params = params
        self._params_generation += 1
        logger.debug(f"Filter generation {self._params_generation}: {params.to_dict()}")

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def visible_graph(self) -> Graph:
        """Visible subgraph, rederived only when the graph or filters changed"""
        generation = (self._graph_generation, self._params_generation)
        if generation != self._derived_from:
            self._rebuild(generation)
        return self._visible

    def _ensure_current(self) -> None:
        self.visible_graph

    def _rebuild(self, generation) -> None:
        if self._graph is None:
            visible = Graph()
            self._reference_warnings = []
        else:
            visible = filter_graph(self._graph, self._params)
            self._reference_warnings = check_references(self._graph, self._params)

        was_scheduled = self.solver.is_scheduled
        interval = self.solver.interval
        self.solver.stop()
        self.solver.set_graph(visible)

        self._visible = visible
        self._derived_from = generation
        logger.info(f"Visible subgraph rebuilt for generation {generation}: "
                    f"{visible.node_count} nodes / {visible.edge_count} edges")

        if was_scheduled:
            self._resume_scheduling(interval)

    def _resume_scheduling(self, interval: float) -> None:
        try:
            self.solver.start(interval)
        except RuntimeError:
            # Scheduling loop is no longer running; callers tick manually
            logger.info("No running event loop, layout restarted without scheduled ticks")

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self, iterations: int = 1) -> bool:
        self._ensure_current()
        return self.solver.tick(iterations)

    def run_until_settled(self, max_ticks: int = 1000) -> int:
        self._ensure_current()
        return self.solver.run_until_settled(max_ticks)

    def start(self, interval: Optional[float] = None) -> None:
        """Schedule ticks on the running asyncio loop"""
        self._ensure_current()
        self.solver.start(interval)

    def stop(self) -> None:
        self.solver.stop()

    def close(self) -> None:
        """Tear down: stop ticking and drop tick listeners"""
        self.solver.stop()
        self.solver.clear_listeners()
        self.controller.pointer_up()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def pointer_down(self, screen_x: float, screen_y: float, node_id: Optional[str] = None) -> Optional[str]:
        self._ensure_current()
        return self.controller.pointer_down(screen_x, screen_y, node_id)

    def pointer_move(self, screen_x: float, screen_y: float) -> None:
        self.controller.pointer_move(screen_x, screen_y)

    def pointer_up(self) -> None:
        self.controller.pointer_up()

    def wheel(self, delta_y: float, focal_x: float, focal_y: float) -> None:
        self.controller.wheel(delta_y, focal_x, focal_y)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def snapshot(self) -> LayoutSnapshot:
        self._ensure_current()
        return self.solver.snapshot()

    def status(self) -> Dict[str, Any]:
        """Visible counts and engine state for status display"""
        visible = self.visible_graph
        return {
            "has_data": self._graph is not None,
            "visible_nodes": visible.node_count,
            "visible_edges": visible.edge_count,
            "total_nodes": self._graph.node_count if self._graph else 0,
            "total_edges": self._graph.edge_count if self._graph else 0,
            "simulation_state": self.solver.state.value,
            "alpha": self.solver.alpha,
            "tick_count": self.solver.tick_count,
            "graph_generation": self._graph_generation,
            "filter_generation": self._params_generation,
            "filters": self._params.to_dict(),
            "options": self.options.to_dict(),
            "metrics": calculate_metrics(visible).to_dict(),
            "warnings": [str(warning) for warning in self._reference_warnings]
        }

    def status_line(self) -> str:
        visible = self.visible_graph
        return f"Showing {visible.node_count} nodes / {visible.edge_count} links"

    def create_figure(self) -> go.Figure:
        return self.renderer.create_figure(self.snapshot(), self.controller.transform)

    def write_html(self, path: Union[str, Path]) -> Path:
        return write_html(self.create_figure(), path)
