"""Raster drawing surfaces used by the render pass."""
from __future__ import annotations

import io
from typing import Callable, Dict, Optional, Tuple, Union

from typing_extensions import Protocol

from PIL import Image, ImageColor, ImageDraw, ImageFont


Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]
Point = Tuple[float, float]


class DrawingSurface(Protocol):
    """Immediate-mode 2D drawing context in screen coordinates."""

    @property
    def size(self) -> Tuple[int, int]:
        """Return ``(width, height)`` in pixels."""

    def fill_background(self, color: Color) -> None:
        """Clear the surface and fill it with ``color``."""

    def draw_line(self, start: Point, end: Point, color: Color, width: float) -> None:
        """Stroke a straight segment."""

    def draw_circle(
        self,
        centre: Point,
        radius: float,
        *,
        fill: Optional[Color] = None,
        outline: Optional[Color] = None,
        width: float = 1.0,
    ) -> None:
        """Draw a circle, optionally filled and/or stroked."""

    def draw_rect(self, top_left: Point, size: Tuple[float, float], fill: Color) -> None:
        """Fill an axis-aligned rectangle."""

    def measure_text(self, text: str, font_size: float) -> float:
        """Return the rendered width of ``text``."""

    def draw_text(self, anchor: Point, text: str, color: Color, font_size: float) -> None:
        """Draw ``text`` horizontally centred with its top edge at ``anchor``."""


SurfaceFactory = Callable[[int, int], Optional[DrawingSurface]]


def to_rgba(color: Color) -> Tuple[int, int, int, int]:
    """Normalise hex strings and RGB(A) tuples into an RGBA tuple."""

    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
    else:
        rgb = tuple(int(channel) for channel in color)
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return (rgb[0], rgb[1], rgb[2], rgb[3])


class PillowSurface:
    """Drawing surface backed by a Pillow RGBA image."""

    def __init__(self, width: int, height: int) -> None:
        self._image = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self._image, "RGBA")
        self._fonts: Dict[int, ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}

    @property
    def size(self) -> Tuple[int, int]:
        return self._image.size

    @property
    def image(self) -> Image.Image:
        return self._image

    def fill_background(self, color: Color) -> None:
        width, height = self._image.size
        self._draw.rectangle([0, 0, width, height], fill=to_rgba(color))

    def draw_line(self, start: Point, end: Point, color: Color, width: float) -> None:
        self._draw.line([start, end], fill=to_rgba(color), width=_stroke(width))

    def draw_circle(
        self,
        centre: Point,
        radius: float,
        *,
        fill: Optional[Color] = None,
        outline: Optional[Color] = None,
        width: float = 1.0,
    ) -> None:
        cx, cy = centre
        box = [cx - radius, cy - radius, cx + radius, cy + radius]
        self._draw.ellipse(
            box,
            fill=to_rgba(fill) if fill is not None else None,
            outline=to_rgba(outline) if outline is not None else None,
            width=_stroke(width),
        )

    def draw_rect(self, top_left: Point, size: Tuple[float, float], fill: Color) -> None:
        x, y = top_left
        width, height = size
        self._draw.rectangle([x, y, x + width, y + height], fill=to_rgba(fill))

    def measure_text(self, text: str, font_size: float) -> float:
        return float(self._draw.textlength(text, font=self._font(font_size)))

    def draw_text(self, anchor: Point, text: str, color: Color, font_size: float) -> None:
        self._draw.text(anchor, text, fill=to_rgba(color), font=self._font(font_size), anchor="mt")

    def to_png_bytes(self) -> bytes:
        """Encode the current frame as PNG."""

        buffer = io.BytesIO()
        self._image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _font(self, font_size: float) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        key = max(int(round(font_size)), 1)
        font = self._fonts.get(key)
        if font is None:
            font = ImageFont.load_default(size=key)
            self._fonts[key] = font
        return font


def _stroke(width: float) -> int:
    return max(int(round(width)), 1)


def pillow_surface_factory(width: int, height: int) -> Optional[DrawingSurface]:
    return PillowSurface(width, height)


__all__ = [
    "Color",
    "DrawingSurface",
    "PillowSurface",
    "Point",
    "SurfaceFactory",
    "pillow_surface_factory",
    "to_rgba",
]
