"""
Layout Solver

Iterative force-directed layout for the visible subgraph. Node state lives in
numpy arrays indexed by position; edges reference nodes by integer index so a
filter change only requires rebuilding the arrays.

Forces per tick (added to velocities, then integrated with a fixed decay):
- link: springs toward ``link_distance``; edge weight does not affect strength
- many-body: pairwise repulsion scaled by ``alpha / distance^2``
- collide: pushes apart overlapping radii plus padding, partially per tick
- center: pulls the centroid of free nodes toward the canvas center

Pinned nodes take part in every force computation but are held exactly at
their pin coordinate during integration.
"""

import asyncio
import math
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..core.config_manager import LayoutConfig, RadiusConfig, get_config, radius_rule
from ..core.logging_config import get_logger
from .filter_pipeline import compute_degrees
from .visualization_data_models import (
    Graph, LayoutSnapshot, NodeCategory, SimEdgeView, SimNodeView, SimulationState
)

logger = get_logger("graph_visualization.layout_solver")

TickListener = Callable[[LayoutSnapshot], None]

JIGGLE_SCALE = 1e-6


class LayoutSolver:
    """Force simulation with an Idle -> Running -> Cooling -> Settled lifecycle"""

    def __init__(self,
                 layout_config: Optional[LayoutConfig] = None,
                 radii: Optional[Dict[str, RadiusConfig]] = None):
        if layout_config is None or radii is None:
            config = get_config()
            layout_config = layout_config or config.layout
            radii = radii or config.radii
        self.config = layout_config
        self.radii = radii
        self.center = self.config.center

        self._rng = np.random.default_rng(self.config.seed)
        self.state = SimulationState.IDLE
        self.alpha = 0.0
        self.alpha_target = 0.0
        self.tick_count = 0

        self._graph = Graph()
        self._ids: List[str] = []
        self._index: Dict[str, int] = {}
        self._categories: List[NodeCategory] = []
        self._x = np.zeros(0)
        self._y = np.zeros(0)
        self._vx = np.zeros(0)
        self._vy = np.zeros(0)
        self._pin_x = np.zeros(0)
        self._pin_y = np.zeros(0)
        self._degree = np.zeros(0, dtype=int)
        self._radius = np.zeros(0)
        self._edge_src = np.zeros(0, dtype=int)
        self._edge_tgt = np.zeros(0, dtype=int)

        self._listeners: List[TickListener] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._interval = self.config.tick_interval
        self._scheduled = False

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def set_graph(self, graph: Graph) -> None:
        """
        Replace the simulated node set with the nodes and edges of ``graph``.

        Nodes that persist keep their position and pin; new nodes are seeded
        pseudo-randomly near the layout center. Energy restarts at
        ``alpha_start``.
        """
        previous = {
            node_id: (self._x[i], self._y[i], self._pin_x[i], self._pin_y[i])
            for i, node_id in enumerate(self._ids)
        }

        n = graph.node_count
        self._graph = graph
        self._ids = [node.id for node in graph.nodes]
        self._index = {node_id: i for i, node_id in enumerate(self._ids)}
        self._categories = [node.category for node in graph.nodes]

        cx, cy = self.center
        spread = self.config.seed_radius
        self._x = cx + self._rng.uniform(-spread, spread, n)
        self._y = cy + self._rng.uniform(-spread, spread, n)
        self._vx = np.zeros(n)
        self._vy = np.zeros(n)
        self._pin_x = np.full(n, np.nan)
        self._pin_y = np.full(n, np.nan)

        carried = 0
        for i, node_id in enumerate(self._ids):
            if node_id in previous:
                self._x[i], self._y[i], self._pin_x[i], self._pin_y[i] = previous[node_id]
                carried += 1

        degrees = compute_degrees(graph)
        self._degree = np.array([degrees.get(node_id, 0) for node_id in self._ids], dtype=int)
        self._radius = np.array([
            radius_rule(self.radii, category.value).radius_for(int(degree))
            for category, degree in zip(self._categories, self._degree)
        ], dtype=float)

        self._edge_src = np.array([self._index[e.source_id] for e in graph.edges], dtype=int)
        self._edge_tgt = np.array([self._index[e.target_id] for e in graph.edges], dtype=int)

        self.tick_count = 0
        if n == 0:
            self.alpha = 0.0
            self._set_state(SimulationState.IDLE)
        else:
            self.alpha = self.config.alpha_start
            self._set_state(SimulationState.RUNNING)
        logger.info(f"Layout restarted with {n} nodes / {graph.edge_count} edges "
                    f"({carried} positions carried over)")

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self, iterations: int = 1) -> bool:
        """
        Advance the simulation synchronously.

        Returns:
            True if at least one position update was issued
        """
        updated = False
        for _ in range(iterations):
            if self.state not in (SimulationState.RUNNING, SimulationState.COOLING):
                break
            self._step()
            updated = True
            self._notify()
        return updated

    def run_until_settled(self, max_ticks: int = 1000) -> int:
        """Tick until settled or ``max_ticks`` is reached; returns ticks run"""
        ticks = 0
        while ticks < max_ticks and self.tick():
            ticks += 1
        return ticks

    def _step(self) -> None:
        self._sanitize()
        self.alpha += (self.alpha_target - self.alpha) * self.config.alpha_decay

        self._apply_link_force()
        self._apply_many_body_force()
        self._apply_collide_force()
        self._apply_center_force()
        self._integrate()

        self.tick_count += 1
        self._update_state()

    def _sanitize(self) -> None:
        bad = 0
        for array in (self._x, self._y, self._vx, self._vy):
            mask = ~np.isfinite(array)
            if mask.any():
                bad += int(mask.sum())
                array[mask] = 0.0
        if bad:
            logger.warning(f"Replaced {bad} non-finite simulation value(s) with 0")

    def _jiggle(self, size) -> np.ndarray:
        return (self._rng.random(size) - 0.5) * JIGGLE_SCALE

    def _apply_link_force(self) -> None:
        if self._edge_src.size == 0:
            return
        src, tgt = self._edge_src, self._edge_tgt
        dx = self._x[tgt] + self._vx[tgt] - self._x[src] - self._vx[src]
        dy = self._y[tgt] + self._vy[tgt] - self._y[src] - self._vy[src]
        zero = (dx == 0) & (dy == 0)
        if zero.any():
            dx[zero] = self._jiggle(int(zero.sum()))
            dy[zero] = self._jiggle(int(zero.sum()))
        dist = np.sqrt(dx * dx + dy * dy)
        factor = (dist - self.config.link_distance) / dist * self.alpha * self.config.link_strength
        dx *= factor
        dy *= factor

        # Lower-degree endpoints move more
        deg_src = self._degree[src].astype(float)
        deg_tgt = self._degree[tgt].astype(float)
        bias = deg_src / (deg_src + deg_tgt)

        np.add.at(self._vx, tgt, -dx * bias)
        np.add.at(self._vy, tgt, -dy * bias)
        np.add.at(self._vx, src, dx * (1 - bias))
        np.add.at(self._vy, src, dy * (1 - bias))

    def _apply_many_body_force(self) -> None:
        if len(self._ids) < 2:
            return
        dx = self._x[np.newaxis, :] - self._x[:, np.newaxis]
        dy = self._y[np.newaxis, :] - self._y[:, np.newaxis]
        dist2 = np.maximum(dx * dx + dy * dy, self.config.min_repulsion_distance ** 2)
        weight = self.config.charge_strength * self.alpha / dist2
        np.fill_diagonal(weight, 0.0)
        self._vx += (dx * weight).sum(axis=1)
        self._vy += (dy * weight).sum(axis=1)

    def _apply_collide_force(self) -> None:
        n = len(self._ids)
        if n < 2:
            return
        px = self._x + self._vx
        py = self._y + self._vy
        dx = px[:, np.newaxis] - px[np.newaxis, :]
        dy = py[:, np.newaxis] - py[np.newaxis, :]
        radius = self._radius + self.config.collide_padding
        reach = radius[:, np.newaxis] + radius[np.newaxis, :]
        dist2 = dx * dx + dy * dy

        overlap = dist2 < reach * reach
        np.fill_diagonal(overlap, False)
        if not overlap.any():
            return

        coincident = overlap & (dist2 == 0)
        if coincident.any():
            # One jiggle per pair, mirrored so (j, i) separates opposite to (i, j)
            upper = np.triu(coincident, k=1)
            count = int(upper.sum())
            jx = np.zeros_like(dx)
            jy = np.zeros_like(dy)
            jx[upper] = self._jiggle(count)
            jy[upper] = self._jiggle(count)
            dx = np.where(coincident, jx - jx.T, dx)
            dy = np.where(coincident, jy - jy.T, dy)
            dist2 = dx * dx + dy * dy

        dist = np.sqrt(np.where(overlap, dist2, 1.0))
        factor = np.where(overlap, (reach - dist) / dist * self.config.collide_strength, 0.0)

        # Larger neighbours push harder: node i takes r_j^2 / (r_i^2 + r_j^2) of the correction
        r2 = radius * radius
        share = r2[np.newaxis, :] / (r2[:, np.newaxis] + r2[np.newaxis, :])
        self._vx += (dx * factor * share).sum(axis=1)
        self._vy += (dy * factor * share).sum(axis=1)

    def _apply_center_force(self) -> None:
        free = np.isnan(self._pin_x)
        if not free.any():
            return
        cx, cy = self.center
        shift_x = (self._x.mean() - cx) * self.config.center_strength
        shift_y = (self._y.mean() - cy) * self.config.center_strength
        self._x[free] -= shift_x
        self._y[free] -= shift_y

    def _integrate(self) -> None:
        pinned = ~np.isnan(self._pin_x)
        free = ~pinned
        decay = 1.0 - self.config.velocity_decay
        self._vx[free] *= decay
        self._vy[free] *= decay
        self._x[free] += self._vx[free]
        self._y[free] += self._vy[free]

        self._x[pinned] = self._pin_x[pinned]
        self._y[pinned] = self._pin_y[pinned]
        self._vx[pinned] = 0.0
        self._vy[pinned] = 0.0

    # ------------------------------------------------------------------
    # Energy and state
    # ------------------------------------------------------------------

    def _update_state(self) -> None:
        if not self._ids:
            self._set_state(SimulationState.IDLE)
        elif self.alpha < self.config.alpha_min and self.alpha_target < self.config.alpha_min:
            self._set_state(SimulationState.SETTLED)
        elif self.alpha < self.config.cooling_threshold:
            self._set_state(SimulationState.COOLING)
        else:
            self._set_state(SimulationState.RUNNING)

    def _set_state(self, state: SimulationState) -> None:
        if state != self.state:
            logger.debug(f"Simulation state {self.state.value} -> {state.value} "
                         f"(alpha={self.alpha:.4f}, tick={self.tick_count})")
            self.state = state

    def reheat(self, hold: bool = False) -> None:
        """
        Raise energy to at least ``reheat_alpha`` and resume ticking.

        Energy strictly increases only when it is below ``reheat_alpha``;
        a hotter simulation keeps its current energy.

        Args:
            hold: Keep energy near ``drag_alpha_target`` until ``release()``
        """
        if self.state == SimulationState.IDLE:
            logger.debug("Ignoring reheat while idle")
            return
        self.alpha = max(self.alpha, self.config.reheat_alpha)
        if hold:
            self.alpha_target = self.config.drag_alpha_target
        self._update_state()
        self._ensure_task()

    def release(self) -> None:
        """Let energy resume its natural decay toward zero"""
        self.alpha_target = 0.0

    # ------------------------------------------------------------------
    # Pins
    # ------------------------------------------------------------------

    def pin(self, node_id: str, x: float, y: float) -> bool:
        """Hold ``node_id`` at (x, y); returns False for unknown ids"""
        i = self._index.get(node_id)
        if i is None:
            return False
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning(f"Replaced non-finite pin target ({x}, {y}) for {node_id} with 0")
        x, y = _finite_or_zero(x), _finite_or_zero(y)
        self._pin_x[i] = x
        self._pin_y[i] = y
        self._x[i] = x
        self._y[i] = y
        self._vx[i] = 0.0
        self._vy[i] = 0.0
        return True

    def unpin(self, node_id: str) -> bool:
        i = self._index.get(node_id)
        if i is None:
            return False
        self._pin_x[i] = np.nan
        self._pin_y[i] = np.nan
        return True

    def is_pinned(self, node_id: str) -> bool:
        i = self._index.get(node_id)
        return i is not None and not np.isnan(self._pin_x[i])

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(self._ids)

    @property
    def graph(self) -> Graph:
        return self._graph

    def position_of(self, node_id: str) -> Optional[Tuple[float, float]]:
        i = self._index.get(node_id)
        if i is None:
            return None
        return (_finite_or_zero(self._x[i]), _finite_or_zero(self._y[i]))

    def radius_of(self, node_id: str) -> Optional[float]:
        i = self._index.get(node_id)
        return None if i is None else float(self._radius[i])

    def snapshot(self) -> LayoutSnapshot:
        """Positions, radii and resolved edge coordinates for rendering"""
        xs = [_finite_or_zero(v) for v in self._x]
        ys = [_finite_or_zero(v) for v in self._y]
        nodes = tuple(
            SimNodeView(
                id=node_id,
                category=self._categories[i],
                x=xs[i],
                y=ys[i],
                radius=float(self._radius[i]),
                degree=int(self._degree[i]),
                pinned=not np.isnan(self._pin_x[i])
            )
            for i, node_id in enumerate(self._ids)
        )
        edges = tuple(
            SimEdgeView(
                source_id=edge.source_id,
                target_id=edge.target_id,
                x1=xs[int(s)], y1=ys[int(s)],
                x2=xs[int(t)], y2=ys[int(t)],
                label=edge.label,
                weight=edge.weight,
                attributes=edge.attributes
            )
            for edge, s, t in zip(self._graph.edges, self._edge_src, self._edge_tgt)
        )
        return LayoutSnapshot(nodes=nodes, edges=edges, alpha=self.alpha,
                              state=self.state, tick_count=self.tick_count)

    # ------------------------------------------------------------------
    # Listeners and scheduling
    # ------------------------------------------------------------------

    def on_tick(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Tick listener failed: {e}")

    @property
    def is_scheduled(self) -> bool:
        """True while ticks are scheduled on a loop that is still open"""
        return self._scheduled and self._loop is not None and not self._loop.is_closed()

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, interval: Optional[float] = None) -> None:
        """Schedule ticks on the running asyncio loop until settled or stopped"""
        self._loop = asyncio.get_running_loop()
        self._interval = interval if interval is not None else self.config.tick_interval
        self._scheduled = True
        self._ensure_task()

    def _ensure_task(self) -> None:
        if not self._scheduled or self._loop is None or self._loop.is_closed():
            return
        if self._task is not None and not self._task.done():
            return
        if self.state in (SimulationState.RUNNING, SimulationState.COOLING):
            self._task = self._loop.create_task(self._run())

    async def _run(self) -> None:
        while self._scheduled and self.tick():
            await asyncio.sleep(self._interval)

    async def wait_settled(self) -> None:
        """Await the scheduled tick task, if any"""
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def stop(self) -> None:
        """Halt ticking immediately. Idempotent."""
        self._scheduled = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._loop = None
        self.alpha_target = 0.0
        if self.state != SimulationState.IDLE:
            logger.debug(f"Simulation stopped at tick {self.tick_count}")
            self._set_state(SimulationState.IDLE)


def _finite_or_zero(value) -> float:
    value = float(value)
    return value if math.isfinite(value) else 0.0
