"""Interactive knowledge graph view: layout, rendering and pointer handling."""

from .host import GraphViewHost, ViewEvent
from .interaction import InteractionController, PointerMode, Viewport, hit_test
from .model import DuplicateNodeError, GraphSnapshot, LayoutNode
from .render import GraphRenderer
from .session import GraphViewSession
from .simulation import ForceSimulation
from .source import SampleGraphSource, find_related_nodes
from .surface import DrawingSurface, PillowSurface
from .theme import Theme, ThemeContext

__all__ = [
    "DrawingSurface",
    "DuplicateNodeError",
    "ForceSimulation",
    "GraphRenderer",
    "GraphSnapshot",
    "GraphViewHost",
    "GraphViewSession",
    "InteractionController",
    "LayoutNode",
    "PillowSurface",
    "PointerMode",
    "SampleGraphSource",
    "Theme",
    "ThemeContext",
    "ViewEvent",
    "Viewport",
    "find_related_nodes",
    "hit_test",
]
