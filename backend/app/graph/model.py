"""In-memory node/link snapshot driven by the force simulation."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from backend.app.contracts import GraphLinkSpec, GraphNodeSpec, NodeKind

LOGGER = logging.getLogger(__name__)


class DuplicateNodeError(ValueError):
    """Raised when a snapshot contains the same node identifier twice."""


@dataclass
class LayoutNode:
    """Simulated node state.

    Position and velocity are written only by the simulation step; the render
    pass and the input layer read ``x``/``y`` and never modify them.
    """

    spec: GraphNodeSpec
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def kind(self) -> NodeKind:
        return self.spec.kind

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


class GraphSnapshot:
    """Node/link set currently simulated and rendered.

    Snapshots are built wholesale and never merged with a predecessor. Links
    are kept even when an endpoint is missing; :meth:`resolve` returns
    ``None`` for them so every consumer skips them for that tick.
    """

    def __init__(self, nodes: Sequence[LayoutNode], links: Sequence[GraphLinkSpec]) -> None:
        index: Dict[str, LayoutNode] = {}
        for node in nodes:
            if node.id in index:
                raise DuplicateNodeError(f"Duplicate node identifier in graph snapshot: {node.id}")
            index[node.id] = node
        self._nodes: List[LayoutNode] = list(nodes)
        self._links: List[GraphLinkSpec] = list(links)
        self._index = index
        dangling = sum(1 for link in self._links if self.resolve(link) is None)
        if dangling:
            LOGGER.warning(
                "Graph snapshot contains %d link(s) with unresolved endpoints; they will be skipped",
                dangling,
            )

    @classmethod
    def build(
        cls,
        nodes: Iterable[GraphNodeSpec],
        links: Iterable[GraphLinkSpec],
        *,
        width: float,
        height: float,
        initial_radius: float,
    ) -> "GraphSnapshot":
        """Create a snapshot with nodes spread evenly on a circle.

        Args:
            nodes: Node specifications in display order.
            links: Link specifications referencing node identifiers.
            width: Canvas width used to locate the centre.
            height: Canvas height used to locate the centre.
            initial_radius: Radius of the starting circle.

        Returns:
            GraphSnapshot: Fresh snapshot with zero velocities.

        Raises:
            DuplicateNodeError: If two nodes share an identifier.
        """

        specs = list(nodes)
        centre_x = width / 2.0
        centre_y = height / 2.0
        count = len(specs)
        layout_nodes: List[LayoutNode] = []
        for index, spec in enumerate(specs):
            angle = 2 * math.pi * index / count
            layout_nodes.append(
                LayoutNode(
                    spec=spec,
                    x=centre_x + math.cos(angle) * initial_radius,
                    y=centre_y + math.sin(angle) * initial_radius,
                )
            )
        return cls(layout_nodes, list(links))

    @classmethod
    def empty(cls) -> "GraphSnapshot":
        return cls([], [])

    @property
    def nodes(self) -> List[LayoutNode]:
        return self._nodes

    @property
    def links(self) -> List[GraphLinkSpec]:
        return self._links

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    def node(self, node_id: str) -> Optional[LayoutNode]:
        """Return the node registered under ``node_id`` if present."""

        return self._index.get(node_id)

    def resolve(self, link: GraphLinkSpec) -> Optional[Tuple[LayoutNode, LayoutNode]]:
        """Return both link endpoints, or ``None`` if either is missing."""

        source = self._index.get(link.source_id)
        target = self._index.get(link.target_id)
        if source is None or target is None:
            return None
        return source, target

    def resolved_links(self) -> List[Tuple[GraphLinkSpec, LayoutNode, LayoutNode]]:
        """Return links whose endpoints both exist in the snapshot."""

        resolved: List[Tuple[GraphLinkSpec, LayoutNode, LayoutNode]] = []
        for link in self._links:
            endpoints = self.resolve(link)
            if endpoints is None:
                continue
            resolved.append((link, endpoints[0], endpoints[1]))
        return resolved

    def neighbours(self, node_id: str) -> List[LayoutNode]:
        """Return nodes linked to ``node_id`` in either direction, in node order."""

        linked: set[str] = set()
        for link, source, target in self.resolved_links():
            if source.id == node_id and target.id != node_id:
                linked.add(target.id)
            elif target.id == node_id and source.id != node_id:
                linked.add(source.id)
        return [node for node in self._nodes if node.id in linked]


__all__ = ["DuplicateNodeError", "GraphSnapshot", "LayoutNode"]
