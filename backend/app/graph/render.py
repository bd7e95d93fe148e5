"""Full-frame render pass for the knowledge graph view."""
from __future__ import annotations

import logging
import math
from typing import Optional

from backend.app.config import RenderConfig
from backend.app.graph.interaction import Viewport
from backend.app.graph.model import GraphSnapshot, LayoutNode
from backend.app.graph.surface import DrawingSurface, to_rgba
from backend.app.graph.theme import Theme, ThemePalette, palette_for

LOGGER = logging.getLogger(__name__)

ARROW_ANGLE = math.pi / 6
NODE_OUTLINE_COLOR = "#ffffff"
LABEL_HEIGHT = 18.0
LABEL_TEXT_INSET = 3.0


class GraphRenderer:
    """Draw nodes, links, arrowheads and labels onto a drawing surface.

    The pan/zoom transform is applied to coordinates and to every size
    (radii, stroke widths, fonts), matching a scaled canvas context.
    """

    def __init__(self, settings: RenderConfig) -> None:
        self._settings = settings

    def draw(
        self,
        surface: Optional[DrawingSurface],
        snapshot: GraphSnapshot,
        viewport: Viewport,
        theme: Theme,
        hovered_id: Optional[str] = None,
    ) -> bool:
        """Redraw the whole scene.

        Args:
            surface: Target surface, or ``None`` when no context is available.
            snapshot: Node/link set providing current positions.
            viewport: Pan/zoom transform to apply.
            theme: Colour scheme for background, edges and labels.
            hovered_id: Identifier of the node under the pointer, if any.

        Returns:
            bool: ``True`` when a frame was drawn, ``False`` for a no-op.
        """

        if surface is None:
            LOGGER.debug("Render skipped: no drawing surface available")
            return False
        palette = palette_for(theme)
        surface.fill_background(palette.background)
        for _link, source, target in snapshot.resolved_links():
            self._draw_link(surface, viewport, palette, source, target)
        for node in snapshot.nodes:
            self._draw_node(surface, viewport, palette, node, hovered=node.id == hovered_id)
        return True

    def _draw_link(
        self,
        surface: DrawingSurface,
        viewport: Viewport,
        palette: ThemePalette,
        source: LayoutNode,
        target: LayoutNode,
    ) -> None:
        settings = self._settings
        zoom = viewport.zoom
        width = settings.edge_width * zoom
        surface.draw_line(
            viewport.to_screen(source.x, source.y),
            viewport.to_screen(target.x, target.y),
            palette.edge,
            width,
        )
        angle = math.atan2(target.y - source.y, target.x - source.x)
        tip_x = target.x - math.cos(angle) * settings.arrow_offset
        tip_y = target.y - math.sin(angle) * settings.arrow_offset
        tip = viewport.to_screen(tip_x, tip_y)
        for side in (-ARROW_ANGLE, ARROW_ANGLE):
            barb = viewport.to_screen(
                tip_x - settings.arrow_length * math.cos(angle + side),
                tip_y - settings.arrow_length * math.sin(angle + side),
            )
            surface.draw_line(tip, barb, palette.edge, width)

    def _draw_node(
        self,
        surface: DrawingSurface,
        viewport: Viewport,
        palette: ThemePalette,
        node: LayoutNode,
        *,
        hovered: bool,
    ) -> None:
        settings = self._settings
        zoom = viewport.zoom
        centre = viewport.to_screen(node.x, node.y)
        color = settings.color_for(node.kind)
        radius = settings.node_radius * (settings.hover_scale if hovered else 1.0)
        surface.draw_circle(
            centre,
            radius * zoom,
            fill=color,
            outline=NODE_OUTLINE_COLOR,
            width=settings.outline_width * zoom,
        )
        if hovered:
            red, green, blue, _ = to_rgba(color)
            halo = (red, green, blue, round(settings.halo_alpha * 255))
            surface.draw_circle(
                centre,
                settings.node_radius * settings.halo_scale * zoom,
                outline=halo,
                width=settings.edge_width * zoom,
            )

        # Label geometry is anchored to the unscaled radius, as on the canvas.
        font_size = settings.label_font_size * zoom
        text_width = surface.measure_text(node.name, font_size)
        padding = settings.label_padding * zoom
        top = node.y + settings.node_radius + settings.label_gap
        label_x, label_y = viewport.to_screen(node.x, top)
        surface.draw_rect(
            (label_x - text_width / 2 - padding, label_y),
            (text_width + 2 * padding, LABEL_HEIGHT * zoom),
            palette.label_backing,
        )
        text_anchor = viewport.to_screen(node.x, top + LABEL_TEXT_INSET)
        surface.draw_text(text_anchor, node.name, palette.label_text, font_size)


__all__ = ["GraphRenderer"]
