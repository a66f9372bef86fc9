"""
Graph Visualization Data Models

Data structures shared by the builder, filter pipeline, layout solver,
interaction controller and renderer.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..core.exceptions import InvalidFilterParameters


class NodeCategory(Enum):
    """Disjoint node partitions that edges connect"""
    SOURCE = "source"
    TARGET = "target"


class SimulationState(Enum):
    """Layout solver lifecycle states"""
    IDLE = "idle"
    RUNNING = "running"
    COOLING = "cooling"
    SETTLED = "settled"


@dataclass(frozen=True)
class RelationRecord:
    """One flat relation row: source -> target with a label and optional details"""
    source_id: str
    target_id: str
    label: str
    details: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Node:
    """Graph node"""
    id: str
    category: NodeCategory

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "category": self.category.value}


@dataclass(frozen=True)
class Edge:
    """Aggregated edge for one (source, target, label) triple"""
    source_id: str
    target_id: str
    label: str
    weight: int = 1
    attributes: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.source_id, self.target_id, self.label)

    def touches(self, node_id: str) -> bool:
        return self.source_id == node_id or self.target_id == node_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source_id,
            "target": self.target_id,
            "label": self.label,
            "weight": self.weight,
            "attributes": list(self.attributes)
        }


@dataclass(frozen=True)
class Graph:
    """Immutable node/edge model.

    Node and edge order is significant: it follows first appearance in the
    input records and is preserved by filtering.
    """
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(node.id for node in self.nodes)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges]
        }


@dataclass(frozen=True)
class FilterParameters:
    """UI-supplied filter state. The defaults are the reset state."""
    node_focus: Optional[str] = None
    secondary_focus: Optional[str] = None
    label_filter: Optional[str] = None
    min_weight: int = 1
    hide_disconnected: bool = True

    def __post_init__(self):
        if isinstance(self.min_weight, bool) or not isinstance(self.min_weight, int):
            raise InvalidFilterParameters("min_weight", self.min_weight, "min_weight must be an integer")
        if self.min_weight < 1:
            raise InvalidFilterParameters("min_weight", self.min_weight, "min_weight must be >= 1")

    def with_changes(self, **changes) -> "FilterParameters":
        """Return a copy with the given fields replaced"""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_focus": self.node_focus,
            "secondary_focus": self.secondary_focus,
            "label_filter": self.label_filter,
            "min_weight": self.min_weight,
            "hide_disconnected": self.hide_disconnected
        }


@dataclass
class ViewTransform:
    """Screen transform: screen = world * scale + translate"""
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def screen_to_world(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        return ((screen_x - self.translate_x) / self.scale,
                (screen_y - self.translate_y) / self.scale)

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return (x * self.scale + self.translate_x, y * self.scale + self.translate_y)


@dataclass(frozen=True)
class SimNodeView:
    """Per-tick read view of a simulated node"""
    id: str
    category: NodeCategory
    x: float
    y: float
    radius: float
    degree: int
    pinned: bool = False


@dataclass(frozen=True)
class SimEdgeView:
    """Per-tick read view of a simulated edge with resolved endpoint coordinates"""
    source_id: str
    target_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    label: str
    weight: int
    attributes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LayoutSnapshot:
    """Everything a renderer needs for one frame"""
    nodes: Tuple[SimNodeView, ...]
    edges: Tuple[SimEdgeView, ...]
    alpha: float
    state: SimulationState
    tick_count: int

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def position_of(self, node_id: str) -> Optional[Tuple[float, float]]:
        for node in self.nodes:
            if node.id == node_id:
                return (node.x, node.y)
        return None


@dataclass
class GraphMetrics:
    """Summary statistics for status display"""
    total_nodes: int
    total_edges: int
    total_weight: int
    label_counts: Dict[str, int] = field(default_factory=dict)
    graph_density: float = 0.0
    connected_components: int = 0
    isolated_nodes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "total_weight": self.total_weight,
            "label_counts": self.label_counts,
            "graph_density": self.graph_density,
            "connected_components": self.connected_components,
            "isolated_nodes": self.isolated_nodes
        }
