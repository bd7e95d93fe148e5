"""Tests for hit testing, hover/click dispatch and the panning state machine."""

from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from backend.app.config import load_config
from backend.app.contracts import GraphNodeSpec, NodeKind
from backend.app.graph.interaction import InteractionController, PointerMode, Viewport, hit_test
from backend.app.graph.model import GraphSnapshot, LayoutNode

HIT_RADIUS = 25.0


def _node(node_id: str, x: float, y: float) -> LayoutNode:
    return LayoutNode(spec=GraphNodeSpec(id=node_id, name=node_id, kind=NodeKind.PAPER), x=x, y=y)


def _snapshot() -> GraphSnapshot:
    return GraphSnapshot([_node("left", 200.0, 300.0), _node("right", 600.0, 300.0)], [])


def _viewport() -> Viewport:
    return Viewport.from_config(load_config().interaction)


class _Recorder:
    def __init__(self) -> None:
        self.clicks: List[str] = []
        self.hovers: List[Optional[str]] = []

    def on_click(self, node: LayoutNode) -> None:
        self.clicks.append(node.id)

    def on_hover(self, node: Optional[LayoutNode]) -> None:
        self.hovers.append(node.id if node is not None else None)


def _controller(viewport: Optional[Viewport] = None) -> Tuple[InteractionController, _Recorder, Viewport]:
    recorder = _Recorder()
    view = viewport or _viewport()
    controller = InteractionController(
        view,
        _snapshot(),
        hit_radius=HIT_RADIUS,
        on_click=recorder.on_click,
        on_hover=recorder.on_hover,
    )
    return controller, recorder, view


def test_hit_test_resolves_node_under_transformed_pointer() -> None:
    viewport = _viewport()
    viewport.zoom = 2.0
    viewport.offset_x = 100.0
    viewport.offset_y = 50.0
    snapshot = _snapshot()

    sx, sy = viewport.to_screen(600.0, 300.0)
    assert (sx, sy) == (1300.0, 650.0)
    node = hit_test(snapshot, viewport, sx, sy, HIT_RADIUS)
    assert node is not None and node.id == "right"

    assert hit_test(snapshot, viewport, sx + 49.0, sy, HIT_RADIUS) is not None
    assert hit_test(snapshot, viewport, sx + 51.0, sy, HIT_RADIUS) is None
    assert hit_test(snapshot, viewport, 5.0, 5.0, HIT_RADIUS) is None


def test_hit_test_returns_first_match_in_node_order() -> None:
    snapshot = GraphSnapshot([_node("first", 100.0, 100.0), _node("second", 110.0, 100.0)], [])
    node = hit_test(snapshot, _viewport(), 105.0, 100.0, HIT_RADIUS)
    assert node is not None and node.id == "first"


def test_viewport_round_trip() -> None:
    viewport = _viewport()
    viewport.zoom = 1.5
    viewport.offset_x = -40.0
    viewport.offset_y = 12.0
    assert viewport.to_graph(*viewport.to_screen(321.0, 123.0)) == pytest.approx((321.0, 123.0))


def test_hover_fires_once_on_enter_and_once_on_leave() -> None:
    controller, recorder, _ = _controller()

    controller.pointer_move(600.0, 300.0)
    controller.pointer_move(605.0, 302.0)
    controller.pointer_move(610.0, 298.0)
    assert recorder.hovers == ["right"]
    assert controller.hovered_id == "right"

    controller.pointer_move(900.0, 300.0)
    controller.pointer_move(950.0, 320.0)
    assert recorder.hovers == ["right", None]
    assert controller.hovered_id is None


def test_hover_moves_directly_between_nodes() -> None:
    controller, recorder, _ = _controller()
    controller.pointer_move(200.0, 300.0)
    controller.pointer_move(600.0, 300.0)
    assert recorder.hovers == ["left", "right"]


def test_drag_on_empty_canvas_pans_by_exact_delta() -> None:
    controller, recorder, viewport = _controller()
    viewport.offset_x = 7.0
    viewport.offset_y = -3.0

    controller.pointer_down(400.0, 100.0)
    assert controller.mode is PointerMode.PANNING
    controller.pointer_move(420.0, 150.0)
    # Passing over the right node while panning must not hover it.
    controller.pointer_move(607.0, 297.0)
    controller.pointer_move(430.0, 140.0)
    controller.pointer_up(430.0, 140.0)

    assert controller.mode is PointerMode.IDLE
    assert (viewport.offset_x, viewport.offset_y) == (37.0, 37.0)
    assert recorder.hovers == []
    assert recorder.clicks == []


def test_press_on_node_never_starts_panning() -> None:
    controller, recorder, viewport = _controller()

    controller.pointer_down(600.0, 300.0)
    assert controller.mode is PointerMode.IDLE
    controller.pointer_move(610.0, 305.0)
    controller.pointer_up(610.0, 305.0)

    assert (viewport.offset_x, viewport.offset_y) == (0.0, 0.0)
    assert recorder.clicks == ["right"]


def test_click_requires_release_on_pressed_node() -> None:
    controller, recorder, _ = _controller()

    controller.pointer_down(600.0, 300.0)
    controller.pointer_up(200.0, 300.0)
    controller.pointer_up(600.0, 300.0)

    assert recorder.clicks == []


def test_click_after_pan_does_not_fire() -> None:
    controller, recorder, _ = _controller()
    controller.pointer_down(400.0, 100.0)
    controller.pointer_move(600.0, 300.0)
    controller.pointer_up(600.0, 300.0)
    assert recorder.clicks == []


def test_pointer_leave_exits_panning_and_clears_hover() -> None:
    controller, recorder, viewport = _controller()
    controller.pointer_move(200.0, 300.0)
    controller.pointer_leave()
    assert recorder.hovers == ["left", None]

    controller.pointer_down(400.0, 100.0)
    controller.pointer_leave()
    assert controller.mode is PointerMode.IDLE
    controller.pointer_move(420.0, 120.0)
    assert (viewport.offset_x, viewport.offset_y) == (0.0, 0.0)
    assert recorder.hovers == ["left", None]


def test_pointer_leave_without_hover_fires_nothing() -> None:
    controller, recorder, _ = _controller()
    controller.pointer_leave()
    assert recorder.hovers == []


def test_replace_snapshot_clears_hover_and_targets_new_nodes() -> None:
    controller, recorder, _ = _controller()
    controller.pointer_move(200.0, 300.0)

    controller.replace_snapshot(GraphSnapshot([_node("fresh", 900.0, 300.0)], []))
    assert recorder.hovers == ["left", None]
    assert controller.node_at(200.0, 300.0) is None
    node = controller.node_at(900.0, 300.0)
    assert node is not None and node.id == "fresh"


def test_zoom_in_twice_with_custom_factor_clamps_at_maximum() -> None:
    viewport = _viewport()
    viewport.zoom_in(1.5)
    assert viewport.zoom == pytest.approx(1.5)
    viewport.zoom_in(1.5)
    assert viewport.zoom == pytest.approx(2.25)
    viewport.zoom_in(1.5)
    assert viewport.zoom == 3.0


def test_zoom_out_clamps_at_minimum_and_reset_restores_identity() -> None:
    viewport = _viewport()
    viewport.offset_x = 30.0
    viewport.offset_y = 40.0
    for _ in range(20):
        viewport.zoom_out(1.2)
    assert viewport.zoom == 0.3
    viewport.reset()
    assert viewport.to_dict() == {"zoom": 1.0, "offset_x": 0.0, "offset_y": 0.0}


def test_zoom_stays_within_bounds_for_any_positive_factor() -> None:
    viewport = _viewport()
    assert viewport.zoom_in(0.1) == 0.3
    viewport.reset()
    assert viewport.zoom_out(0.1) == 3.0


@pytest.mark.parametrize("factor", [0.0, -1.5])
def test_zoom_rejects_non_positive_factor(factor: float) -> None:
    viewport = _viewport()
    with pytest.raises(ValueError):
        viewport.zoom_in(factor)
    with pytest.raises(ValueError):
        viewport.zoom_out(factor)
    assert viewport.zoom == 1.0
