"""Host-side callbacks receiving node clicks and hovers from the graph view."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from backend.app.contracts import GraphNodeSpec
from backend.app.graph.model import LayoutNode

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewEvent:
    """Callback invocation recorded for API clients."""

    type: str
    node_id: Optional[str]
    external_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"type": self.type, "node_id": self.node_id, "external_url": self.external_url}


class GraphViewHost:
    """Track the node-detail selection and the callbacks fired by the view.

    A click selects the node and, when it carries an external URL, records an
    ``open_url`` action. A hover over a node selects it for the detail panel;
    leaving a node keeps the current selection.
    """

    def __init__(self) -> None:
        self._selected: Optional[GraphNodeSpec] = None
        self._events: List[ViewEvent] = []

    @property
    def selected(self) -> Optional[GraphNodeSpec]:
        return self._selected

    def on_click(self, node: LayoutNode) -> None:
        self._selected = node.spec
        self._events.append(ViewEvent(type="click", node_id=node.id, external_url=node.spec.external_url))
        if node.spec.external_url:
            LOGGER.info("Opening external resource for node %s: %s", node.id, node.spec.external_url)
            self._events.append(ViewEvent(type="open_url", node_id=node.id, external_url=node.spec.external_url))

    def on_hover(self, node: Optional[LayoutNode]) -> None:
        if node is None:
            self._events.append(ViewEvent(type="hover", node_id=None))
            return
        self._selected = node.spec
        self._events.append(ViewEvent(type="hover", node_id=node.id))

    def clear_selection(self) -> None:
        self._selected = None

    def drain_events(self) -> List[ViewEvent]:
        """Return and forget the events recorded since the last drain."""

        events, self._events = self._events, []
        return events


__all__ = ["GraphViewHost", "ViewEvent"]
