"""Pointer handling for the graph view: hit testing, panning and zoom."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from backend.app.config import InteractionConfig
from backend.app.graph.model import GraphSnapshot, LayoutNode

LOGGER = logging.getLogger(__name__)

ClickCallback = Callable[[LayoutNode], None]
HoverCallback = Callable[[Optional[LayoutNode]], None]


def _positive_factor(factor: float) -> float:
    if factor <= 0:
        raise ValueError(f"Zoom factor must be positive: {factor}")
    return factor


@dataclass
class Viewport:
    """Pan/zoom transform mapping graph space to screen pixels."""

    min_zoom: float
    max_zoom: float
    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def from_config(cls, config: InteractionConfig) -> "Viewport":
        return cls(min_zoom=config.min_zoom, max_zoom=config.max_zoom)

    def to_graph(self, sx: float, sy: float) -> Tuple[float, float]:
        """Invert the transform for a screen-space point."""

        return (sx - self.offset_x) / self.zoom, (sy - self.offset_y) / self.zoom

    def to_screen(self, x: float, y: float) -> Tuple[float, float]:
        """Apply the transform to a graph-space point."""

        return x * self.zoom + self.offset_x, y * self.zoom + self.offset_y

    def zoom_in(self, factor: float) -> float:
        """Multiply the zoom by ``factor``, clamped to the configured range.

        Raises:
            ValueError: If ``factor`` is not positive.
        """

        self.zoom = self._clamp(self.zoom * _positive_factor(factor))
        return self.zoom

    def zoom_out(self, factor: float) -> float:
        self.zoom = self._clamp(self.zoom / _positive_factor(factor))
        return self.zoom

    def _clamp(self, zoom: float) -> float:
        return min(max(zoom, self.min_zoom), self.max_zoom)

    def reset(self) -> None:
        self.zoom = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"zoom": self.zoom, "offset_x": self.offset_x, "offset_y": self.offset_y}


def hit_test(
    snapshot: GraphSnapshot,
    viewport: Viewport,
    sx: float,
    sy: float,
    radius: float,
) -> Optional[LayoutNode]:
    """Return the first node within ``radius`` graph units of a screen point.

    Args:
        snapshot: Node set to scan in order.
        viewport: Transform used to map the pointer into graph space.
        sx: Pointer x coordinate in screen pixels.
        sy: Pointer y coordinate in screen pixels.
        radius: Hit radius around each node centre.

    Returns:
        The first matching node, or ``None`` when nothing is under the pointer.
    """

    x, y = viewport.to_graph(sx, sy)
    for node in snapshot.nodes:
        if math.hypot(node.x - x, node.y - y) < radius:
            return node
    return None


class PointerMode(str, Enum):
    """Interaction states of the pointer controller."""

    IDLE = "idle"
    PANNING = "panning"


class InteractionController:
    """Translate raw pointer events into pan gestures and node callbacks.

    Node presses never start a pan. Hover callbacks fire once per transition
    between nodes (or between a node and empty space), never per event.
    """

    def __init__(
        self,
        viewport: Viewport,
        snapshot: GraphSnapshot,
        *,
        hit_radius: float,
        on_click: Optional[ClickCallback] = None,
        on_hover: Optional[HoverCallback] = None,
    ) -> None:
        self._viewport = viewport
        self._snapshot = snapshot
        self._hit_radius = hit_radius
        self._on_click = on_click
        self._on_hover = on_hover
        self._mode = PointerMode.IDLE
        self._drag_anchor: Tuple[float, float] = (0.0, 0.0)
        self._pressed_id: Optional[str] = None
        self._hovered_id: Optional[str] = None

    @property
    def mode(self) -> PointerMode:
        return self._mode

    @property
    def hovered_id(self) -> Optional[str]:
        return self._hovered_id

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def node_at(self, sx: float, sy: float) -> Optional[LayoutNode]:
        return hit_test(self._snapshot, self._viewport, sx, sy, self._hit_radius)

    def pointer_down(self, sx: float, sy: float) -> None:
        node = self.node_at(sx, sy)
        if node is not None:
            self._pressed_id = node.id
            return
        self._pressed_id = None
        self._mode = PointerMode.PANNING
        self._drag_anchor = (sx - self._viewport.offset_x, sy - self._viewport.offset_y)

    def pointer_move(self, sx: float, sy: float) -> None:
        if self._mode is PointerMode.PANNING:
            self._viewport.offset_x = sx - self._drag_anchor[0]
            self._viewport.offset_y = sy - self._drag_anchor[1]
            return
        node = self.node_at(sx, sy)
        self._set_hovered(node)

    def pointer_up(self, sx: float, sy: float) -> None:
        if self._mode is PointerMode.PANNING:
            self._mode = PointerMode.IDLE
            return
        pressed_id = self._pressed_id
        self._pressed_id = None
        if pressed_id is None:
            return
        node = self.node_at(sx, sy)
        if node is not None and node.id == pressed_id and self._on_click is not None:
            self._on_click(node)

    def pointer_leave(self) -> None:
        self._mode = PointerMode.IDLE
        self._pressed_id = None
        self._set_hovered(None)

    def replace_snapshot(self, snapshot: GraphSnapshot) -> None:
        """Point hit testing at a new node set and drop per-node state."""

        self._snapshot = snapshot
        self._mode = PointerMode.IDLE
        self._pressed_id = None
        self._set_hovered(None)

    def _set_hovered(self, node: Optional[LayoutNode]) -> None:
        node_id = node.id if node is not None else None
        if node_id == self._hovered_id:
            return
        self._hovered_id = node_id
        LOGGER.debug("Hover changed to %s", node_id)
        if self._on_hover is not None:
            self._on_hover(node)


__all__ = [
    "ClickCallback",
    "HoverCallback",
    "InteractionController",
    "PointerMode",
    "Viewport",
    "hit_test",
]
