"""Mounted graph view: snapshot ownership, recurring loops and teardown."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional

from typing_extensions import Literal

from backend.app.config import AppConfig
from backend.app.contracts import GraphPayload
from backend.app.graph.interaction import ClickCallback, HoverCallback, InteractionController, Viewport
from backend.app.graph.model import GraphSnapshot
from backend.app.graph.render import GraphRenderer
from backend.app.graph.simulation import ForceSimulation
from backend.app.graph.surface import DrawingSurface, SurfaceFactory, pillow_surface_factory
from backend.app.graph.theme import Theme, ThemeContext

LOGGER = logging.getLogger(__name__)

PointerKind = Literal["down", "move", "up", "leave"]


class GraphViewSession:
    """Own the current node/link set and drive its simulation and redraws.

    All work runs on a single asyncio event loop: the simulation task is the
    only writer of node positions, while the redraw task and pointer handlers
    read them. A frame may therefore lag the simulation by one tick.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        theme_context: Optional[ThemeContext] = None,
        surface_factory: SurfaceFactory = pillow_surface_factory,
        on_click: Optional[ClickCallback] = None,
        on_hover: Optional[HoverCallback] = None,
    ) -> None:
        self._config = config
        self._simulation = ForceSimulation(config.simulation)
        self._renderer = GraphRenderer(config.render)
        self._surface_factory = surface_factory
        self._theme_context = theme_context or ThemeContext(Theme(config.ui.default_theme))
        self._viewport = Viewport.from_config(config.interaction)
        self._payload = GraphPayload()
        self._snapshot = GraphSnapshot.empty()
        self._controller = InteractionController(
            self._viewport,
            self._snapshot,
            hit_radius=config.interaction.hit_radius,
            on_click=on_click,
            on_hover=on_hover,
        )
        self._tasks: List[asyncio.Task[None]] = []
        self._dirty: Optional[asyncio.Event] = None
        self._release_theme: Optional[Callable[[], None]] = None
        self._latest_frame: Optional[DrawingSurface] = None
        self._frame_count = 0

    @property
    def snapshot(self) -> GraphSnapshot:
        return self._snapshot

    @property
    def payload(self) -> GraphPayload:
        return self._payload

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def theme_context(self) -> ThemeContext:
        return self._theme_context

    @property
    def is_mounted(self) -> bool:
        return bool(self._tasks)

    @property
    def latest_frame(self) -> Optional[DrawingSurface]:
        return self._latest_frame

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def load(self, payload: GraphPayload) -> GraphSnapshot:
        """Replace the node/link set wholesale, discarding prior layout state.

        Raises:
            DuplicateNodeError: If the payload repeats a node identifier.
        """

        settings = self._config.simulation
        snapshot = GraphSnapshot.build(
            payload.nodes,
            payload.links,
            width=settings.width,
            height=settings.height,
            initial_radius=settings.initial_radius,
        )
        self._payload = payload
        self._snapshot = snapshot
        self._controller.replace_snapshot(snapshot)
        LOGGER.info(
            "Loaded graph snapshot (nodes=%d, links=%d)",
            len(snapshot.nodes),
            len(snapshot.links),
        )
        self.mark_dirty()
        return snapshot

    def tick(self) -> None:
        self._simulation.tick(self._snapshot)
        self.mark_dirty()

    def render(
        self,
        surface: Optional[DrawingSurface] = None,
        *,
        theme: Optional[Theme] = None,
    ) -> Optional[DrawingSurface]:
        """Draw the current frame.

        Args:
            surface: Explicit target; a new surface is created when omitted.
            theme: Theme override; defaults to the application theme.

        Returns:
            The drawn surface, or ``None`` when no surface was available.
        """

        target = surface
        if target is None:
            settings = self._config.simulation
            target = self._surface_factory(settings.width, settings.height)
        drawn = self._renderer.draw(
            target,
            self._snapshot,
            self._viewport,
            theme or self._theme_context.theme,
            self._controller.hovered_id,
        )
        if not drawn:
            return None
        self._latest_frame = target
        self._frame_count += 1
        return target

    def pointer(self, kind: PointerKind, x: float = 0.0, y: float = 0.0) -> None:
        """Dispatch a pointer event to the interaction controller."""

        if kind == "down":
            self._controller.pointer_down(x, y)
        elif kind == "move":
            self._controller.pointer_move(x, y)
        elif kind == "up":
            self._controller.pointer_up(x, y)
        elif kind == "leave":
            self._controller.pointer_leave()
        else:
            raise ValueError(f"Unsupported pointer event: {kind}")
        self.mark_dirty()

    def zoom_in(self, factor: Optional[float] = None) -> float:
        step = factor if factor is not None else self._config.interaction.zoom_step
        zoom = self._viewport.zoom_in(step)
        self.mark_dirty()
        return zoom

    def zoom_out(self, factor: Optional[float] = None) -> float:
        step = factor if factor is not None else self._config.interaction.zoom_step
        zoom = self._viewport.zoom_out(step)
        self.mark_dirty()
        return zoom

    def reset_view(self) -> None:
        self._viewport.reset()
        self.mark_dirty()

    def mark_dirty(self) -> None:
        if self._dirty is not None:
            self._dirty.set()

    async def mount(self) -> None:
        """Start the simulation and redraw loops and observe theme changes."""

        if self._tasks:
            return
        self._dirty = asyncio.Event()
        self._dirty.set()
        self._release_theme = self._theme_context.subscribe(self._on_theme_change)
        self._tasks = [
            asyncio.create_task(self._simulation_loop(), name="graph-simulation"),
            asyncio.create_task(self._redraw_loop(), name="graph-redraw"),
        ]
        LOGGER.info("Graph view mounted")

    async def unmount(self) -> None:
        """Cancel both loops and release the theme observer."""

        if not self._tasks:
            return
        tasks, self._tasks = self._tasks, []
        try:
            for task in tasks:
                task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, Exception):
                    LOGGER.error("Graph loop %s failed: %s", task.get_name(), result)
        finally:
            if self._release_theme is not None:
                self._release_theme()
                self._release_theme = None
            self._dirty = None
            LOGGER.info("Graph view unmounted")

    @asynccontextmanager
    async def mounted(self) -> AsyncIterator["GraphViewSession"]:
        """Scope both loops to the ``async with`` block."""

        await self.mount()
        try:
            yield self
        finally:
            await self.unmount()

    def _on_theme_change(self, theme: Theme) -> None:
        self.mark_dirty()

    async def _simulation_loop(self) -> None:
        interval = self._config.simulation.tick_interval_seconds
        while True:
            self.tick()
            await asyncio.sleep(interval)

    async def _redraw_loop(self) -> None:
        interval = self._config.render.redraw_interval_seconds
        dirty = self._dirty
        if dirty is None:
            return
        while True:
            await dirty.wait()
            dirty.clear()
            try:
                self.render()
            except Exception:  # noqa: BLE001 - a failed frame must not stop redraws
                LOGGER.exception("Graph frame render failed")
                dirty.set()
            await asyncio.sleep(interval)


__all__ = ["GraphViewSession", "PointerKind"]
