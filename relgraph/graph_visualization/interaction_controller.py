"""
Interaction Controller

Translates pointer gestures into solver commands (pins, reheat) and view
transform updates. It never touches filter parameters or the graph model,
and the view transform never changes simulation coordinates.
"""

from enum import Enum
from typing import Optional, Tuple

from ..core.config_manager import ViewConfig, get_config
from ..core.logging_config import get_logger
from .layout_solver import LayoutSolver
from .visualization_data_models import ViewTransform

logger = get_logger("graph_visualization.interaction_controller")


class GestureState(Enum):
    """Pointer gesture in progress"""
    IDLE = "idle"
    DRAGGING_NODE = "dragging_node"
    PANNING = "panning"


class InteractionController:
    """Pointer, wheel and pinch handling for one solver"""

    def __init__(self, solver: LayoutSolver, view_config: Optional[ViewConfig] = None):
        self.solver = solver
        self.config = view_config or get_config().view
        self.transform = ViewTransform()
        self.gesture = GestureState.IDLE
        self.dragged_node: Optional[str] = None
        self._last_pointer: Optional[Tuple[float, float]] = None

    # ------------------------------------------------------------------
    # Coordinate conversion and hit testing
    # ------------------------------------------------------------------

    def screen_to_world(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        return self.transform.screen_to_world(screen_x, screen_y)

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return self.transform.world_to_screen(x, y)

    def node_at(self, screen_x: float, screen_y: float) -> Optional[str]:
        """Topmost node whose radius contains the screen point"""
        wx, wy = self.screen_to_world(screen_x, screen_y)
        for node_id in reversed(self.solver.node_ids):
            position = self.solver.position_of(node_id)
            radius = self.solver.radius_of(node_id)
            if position is None or radius is None:
                continue
            dx, dy = wx - position[0], wy - position[1]
            if dx * dx + dy * dy <= radius * radius:
                return node_id
        return None

    # ------------------------------------------------------------------
    # Pointer gestures
    # ------------------------------------------------------------------

    def pointer_down(self, screen_x: float, screen_y: float, node_id: Optional[str] = None) -> Optional[str]:
        """
        Start a node drag or a pan.

        Args:
            screen_x: Pointer x in screen space
            screen_y: Pointer y in screen space
            node_id: Node under the pointer, if already known by the caller

        Returns:
            The dragged node id, or None when a pan started
        """
        if self.gesture != GestureState.IDLE:
            self.pointer_up()

        if node_id is None:
            node_id = self.node_at(screen_x, screen_y)

        position = self.solver.position_of(node_id) if node_id is not None else None
        if position is None:
            self.gesture = GestureState.PANNING
            self._last_pointer = (screen_x, screen_y)
            return None

        self.solver.pin(node_id, *position)
        self.solver.reheat(hold=True)
        self.gesture = GestureState.DRAGGING_NODE
        self.dragged_node = node_id
        self._last_pointer = (screen_x, screen_y)
        logger.debug(f"Drag started on {node_id}")
        return node_id

    def pointer_move(self, screen_x: float, screen_y: float) -> None:
        if self.gesture == GestureState.DRAGGING_NODE and self.dragged_node is not None:
            world_x, world_y = self.screen_to_world(screen_x, screen_y)
            if not self.solver.pin(self.dragged_node, world_x, world_y):
                # Node left the visible subgraph mid-drag
                self._end_gesture()
                return
        elif self.gesture == GestureState.PANNING and self._last_pointer is not None:
            self.pan(screen_x - self._last_pointer[0], screen_y - self._last_pointer[1])
        self._last_pointer = (screen_x, screen_y)

    def pointer_up(self) -> None:
        if self.gesture == GestureState.DRAGGING_NODE and self.dragged_node is not None:
            self.solver.unpin(self.dragged_node)
            self.solver.release()
            logger.debug(f"Drag ended on {self.dragged_node}")
        self._end_gesture()

    def _end_gesture(self) -> None:
        self.gesture = GestureState.IDLE
        self.dragged_node = None
        self._last_pointer = None

    # ------------------------------------------------------------------
    # View transform
    # ------------------------------------------------------------------

    def pan(self, delta_x: float, delta_y: float) -> None:
        self.transform.translate_x += delta_x
        self.transform.translate_y += delta_y

    def wheel(self, delta_y: float, focal_x: float, focal_y: float) -> None:
        """Zoom in for negative ``delta_y``, out for positive"""
        self.zoom_by(2.0 ** (-delta_y * self.config.wheel_sensitivity), focal_x, focal_y)

    def pinch(self, factor: float, focal_x: float, focal_y: float) -> None:
        self.zoom_by(factor, focal_x, focal_y)

    def zoom_by(self, factor: float, focal_x: float, focal_y: float) -> None:
        """Scale around a screen-space focal point that stays fixed on screen"""
        if factor <= 0:
            return
        old_scale = self.transform.scale
        new_scale = max(self.config.min_scale, min(self.config.max_scale, old_scale * factor))
        if new_scale == old_scale:
            return
        world_x, world_y = self.screen_to_world(focal_x, focal_y)
        self.transform.scale = new_scale
        self.transform.translate_x = focal_x - world_x * new_scale
        self.transform.translate_y = focal_y - world_y * new_scale

    def reset_view(self) -> None:
        self.transform = ViewTransform()
