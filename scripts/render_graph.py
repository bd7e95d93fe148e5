#!/usr/bin/env python3
"""Render the sample knowledge graph to a PNG after a number of layout ticks."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from backend.app.config import ConfigError, load_config
from backend.app.graph import GraphViewSession, PillowSurface, SampleGraphSource, Theme

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the render utility.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query", help="Research topic used to generate the graph")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("graph.png"),
        help="Destination PNG path (default: graph.png)",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=300,
        help="Number of simulation ticks before rendering (default: 300)",
    )
    parser.add_argument(
        "--theme",
        choices=[theme.value for theme in Theme],
        default=None,
        help="Theme override (default: configured UI theme)",
    )
    parser.add_argument(
        "--zoom",
        type=float,
        default=1.0,
        help="Zoom applied before rendering, clamped to configured limits (default: 1.0)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Optional config.yaml override")
    return parser.parse_args(argv)


def render_graph(
    query: str,
    output: Path,
    *,
    ticks: int,
    theme: Optional[Theme] = None,
    zoom: float = 1.0,
    config_path: Optional[Path] = None,
) -> Path:
    """Generate, settle and render the graph for ``query``.

    Returns:
        Path: Location of the written PNG file.

    Raises:
        ValueError: If ``zoom`` is not positive or the query is blank.
    """

    if zoom <= 0:
        raise ValueError(f"Zoom must be greater than zero: {zoom}")
    config = load_config(config_path)
    session = GraphViewSession(config)
    session.load(SampleGraphSource().generate(query))
    for _ in range(max(ticks, 0)):
        session.tick()
    if zoom > 1.0:
        session.zoom_in(zoom)
    elif zoom < 1.0:
        session.zoom_out(1.0 / zoom)
    surface = session.render(theme=theme)
    if not isinstance(surface, PillowSurface):
        raise RuntimeError("No raster surface available for rendering")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(surface.to_png_bytes())
    LOGGER.info("Wrote %s (nodes=%d, ticks=%d)", output, len(session.snapshot.nodes), ticks)
    return output


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the render utility.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)
    theme = Theme(args.theme) if args.theme else None
    try:
        path = render_graph(
            args.query,
            args.output,
            ticks=args.ticks,
            theme=theme,
            zoom=args.zoom,
            config_path=args.config,
        )
    except (ConfigError, ValueError) as exc:
        print("Graph rendering failed:", exc, file=sys.stderr)
        return 1
    print("Graph rendered", f"path={path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
