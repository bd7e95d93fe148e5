"""FastAPI application factory for the Radiant graph viewer backend."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field
from typing_extensions import Literal

from backend.app.config import AppConfig, load_config
from backend.app.contracts import GraphLinkSpec, GraphNodeSpec, GraphPayload
from backend.app.graph import (
    DuplicateNodeError,
    GraphViewHost,
    GraphViewSession,
    PillowSurface,
    SampleGraphSource,
    Theme,
    ThemeContext,
    find_related_nodes,
)

LOGGER = logging.getLogger(__name__)


class GenerateGraphRequest(BaseModel):
    """Request payload for generating a graph from a research topic."""

    query: str = Field(..., min_length=1, description="Research topic to build a graph for")


class PointerEventRequest(BaseModel):
    """Pointer event in canvas pixel coordinates."""

    type: Literal["down", "move", "up", "leave"]
    x: float = 0.0
    y: float = 0.0


class ThemeRequest(BaseModel):
    """Application theme update."""

    theme: Theme


class ViewportPayload(BaseModel):
    """Current pan/zoom transform."""

    zoom: float
    offset_x: float
    offset_y: float


class GraphNodePayload(BaseModel):
    """Node description including its current simulated position."""

    id: str
    name: str
    kind: str
    year: Optional[int] = None
    citation_count: Optional[int] = None
    external_url: Optional[str] = None
    x: float
    y: float


class GraphResponse(BaseModel):
    """Graph state consumed by the frontend."""

    nodes: List[GraphNodePayload]
    links: List[GraphLinkSpec]
    node_count: int
    link_count: int
    viewport: ViewportPayload


class ViewEventPayload(BaseModel):
    """Callback fired by the graph view while handling an event."""

    type: str
    node_id: Optional[str] = None
    external_url: Optional[str] = None


class PointerEventResponse(BaseModel):
    """Outcome of dispatching a pointer event."""

    events: List[ViewEventPayload]
    mode: str
    hovered_node_id: Optional[str] = None
    viewport: ViewportPayload


class SelectionResponse(BaseModel):
    """Node shown in the detail panel, if any."""

    node: Optional[GraphNodeSpec] = None


class UISettingsResponse(BaseModel):
    """Viewer constants served to the frontend."""

    canvas: Dict[str, object]
    interaction: Dict[str, object]
    render: Dict[str, object]
    theme: str


def create_app(
    config: AppConfig | None = None,
    source: Optional[SampleGraphSource] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Optional pre-loaded configuration. If omitted, the default
            configuration defined in config.yaml is used.
        source: Optional graph-generation collaborator. Defaults to the
            sample research graph.

    Returns:
        FastAPI: Configured FastAPI application.
    """

    resolved_config = config or load_config()
    app = FastAPI(title="Radiant Graph API", version=resolved_config.pipeline.version)
    app.state.app_config = resolved_config

    theme_context = ThemeContext(Theme(resolved_config.ui.default_theme))
    host = GraphViewHost()
    session = GraphViewSession(
        resolved_config,
        theme_context=theme_context,
        on_click=host.on_click,
        on_hover=host.on_hover,
    )
    app.state.theme_context = theme_context
    app.state.graph_host = host
    app.state.graph_session = session
    app.state.graph_source = source or SampleGraphSource()

    @app.on_event("startup")
    async def _mount_graph_view() -> None:
        await session.mount()

    @app.on_event("shutdown")
    async def _unmount_graph_view() -> None:
        await session.unmount()

    allowed_origins = resolved_config.ui.allowed_origins
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health", tags=["system"], summary="Service health probe")
    async def health() -> dict[str, str]:
        """Return service health information."""

        return {"status": "ok", "version": resolved_config.pipeline.version}

    @app.get("/api/ui/settings", tags=["ui"], summary="Graph viewer defaults")
    async def ui_settings() -> UISettingsResponse:
        """Return viewer constants sourced from the configuration file."""

        simulation = resolved_config.simulation
        interaction = resolved_config.interaction
        render = resolved_config.render
        return UISettingsResponse(
            canvas={"width": simulation.width, "height": simulation.height},
            interaction={
                "hit_radius": interaction.hit_radius,
                "zoom_step": interaction.zoom_step,
                "min_zoom": interaction.min_zoom,
                "max_zoom": interaction.max_zoom,
            },
            render={
                "node_radius": render.node_radius,
                "node_colors": dict(render.node_colors),
                "redraw_interval_seconds": render.redraw_interval_seconds,
                "tick_interval_seconds": simulation.tick_interval_seconds,
            },
            theme=theme_context.theme.value,
        )

    @app.put("/api/ui/theme", tags=["ui"], summary="Switch the application theme")
    async def set_theme(request: ThemeRequest) -> dict[str, str]:
        theme_context.set_theme(request.theme)
        return {"theme": theme_context.theme.value}

    @app.post("/api/graph/generate", tags=["graph"], summary="Generate a graph for a research topic")
    async def generate_graph(request: GenerateGraphRequest) -> GraphResponse:
        """Ask the graph source for a node/link set and replace the current graph."""

        graph_source = app.state.graph_source
        try:
            payload = graph_source.generate(request.query)
        except ValueError as exc:
            LOGGER.warning("Rejected graph generation request: %s", exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        _load_payload(session, host, payload)
        return _graph_response(session)

    @app.post("/api/graph/load", tags=["graph"], summary="Replace the graph with a supplied node/link set")
    async def load_graph(payload: GraphPayload) -> GraphResponse:
        _load_payload(session, host, payload)
        return _graph_response(session)

    @app.get("/api/graph", tags=["graph"], summary="Current graph state")
    async def graph_state() -> GraphResponse:
        return _graph_response(session)

    @app.get(
        "/api/graph/frame.png",
        tags=["graph"],
        summary="Render the current frame",
        response_class=Response,
    )
    async def graph_frame(theme: Optional[Theme] = Query(None)) -> Response:
        """Render a PNG of the current positions, viewport and hover state."""

        surface = session.render(theme=theme)
        if not isinstance(surface, PillowSurface):
            raise HTTPException(status_code=503, detail="Drawing surface unavailable")
        try:
            content = surface.to_png_bytes()
        except OSError as exc:
            LOGGER.exception("Failed to encode graph frame")
            raise HTTPException(status_code=500, detail="Unable to render graph frame") from exc
        return Response(content=content, media_type="image/png")

    @app.post("/api/graph/pointer", tags=["graph"], summary="Dispatch a pointer event")
    async def pointer_event(request: PointerEventRequest) -> PointerEventResponse:
        """Forward a pointer event and report the callbacks it fired."""

        host.drain_events()
        session.pointer(request.type, request.x, request.y)
        events = [ViewEventPayload(**event.to_dict()) for event in host.drain_events()]
        controller = session.controller
        return PointerEventResponse(
            events=events,
            mode=controller.mode.value,
            hovered_node_id=controller.hovered_id,
            viewport=ViewportPayload(**session.viewport.to_dict()),
        )

    @app.post("/api/graph/zoom-in", tags=["graph"], summary="Zoom in by a fixed factor")
    async def zoom_in(factor: Optional[float] = Query(None, gt=1.0)) -> ViewportPayload:
        session.zoom_in(factor)
        return ViewportPayload(**session.viewport.to_dict())

    @app.post("/api/graph/zoom-out", tags=["graph"], summary="Zoom out by a fixed factor")
    async def zoom_out(factor: Optional[float] = Query(None, gt=1.0)) -> ViewportPayload:
        session.zoom_out(factor)
        return ViewportPayload(**session.viewport.to_dict())

    @app.post("/api/graph/reset-view", tags=["graph"], summary="Reset zoom and pan")
    async def reset_view() -> ViewportPayload:
        session.reset_view()
        return ViewportPayload(**session.viewport.to_dict())

    @app.get("/api/graph/selection", tags=["graph"], summary="Node shown in the detail panel")
    async def selection() -> SelectionResponse:
        return SelectionResponse(node=host.selected)

    @app.get(
        "/api/graph/nodes/{node_id}/related",
        tags=["graph"],
        summary="Explore nodes directly linked to a node",
    )
    async def related_nodes(node_id: str, limit: int = Query(5, ge=1, le=50)) -> List[GraphNodeSpec]:
        payload = session.payload
        if not any(node.id == node_id for node in payload.nodes):
            raise HTTPException(status_code=404, detail=f"Unknown node: {node_id}")
        return find_related_nodes(payload, node_id, limit=limit)

    return app


def _load_payload(session: GraphViewSession, host: GraphViewHost, payload: GraphPayload) -> None:
    try:
        session.load(payload)
    except DuplicateNodeError as exc:
        LOGGER.warning("Rejected graph payload: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    host.clear_selection()
    host.drain_events()


def _graph_response(session: GraphViewSession) -> GraphResponse:
    snapshot = session.snapshot
    nodes = [
        GraphNodePayload(
            id=node.id,
            name=node.name,
            kind=node.kind.value,
            year=node.spec.year,
            citation_count=node.spec.citation_count,
            external_url=node.spec.external_url,
            x=node.x,
            y=node.y,
        )
        for node in snapshot.nodes
    ]
    return GraphResponse(
        nodes=nodes,
        links=list(snapshot.links),
        node_count=len(nodes),
        link_count=len(snapshot.links),
        viewport=ViewportPayload(**session.viewport.to_dict()),
    )
