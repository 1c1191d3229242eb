"""Tests for the pointer interaction state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

import pytest

from biasnet.config import AppConfig, CameraConfig, LayoutConfig, TooltipConfig
from biasnet.graph.builder import build_elements
from biasnet.ui.camera import Viewport
from biasnet.ui.interaction import InteractionController, SelectionCallbacks
from biasnet.ui.style import InteractionTag
from biasnet.ui.surface import HeadlessRenderSurface

TAGS = [tag.value for tag in InteractionTag]


@dataclass
class RecordingListener:
    events: List[Tuple[str, object]] = field(default_factory=list)

    def on_select_bias(self, bias_id: str) -> None:
        self.events.append(("select", bias_id))

    def on_clear_selection(self) -> None:
        self.events.append(("clear", None))

    def on_panel_state_change(self, should_open: bool) -> None:
        self.events.append(("panel", should_open))


def _build(
    camera: CameraConfig | None = None,
) -> Tuple[HeadlessRenderSurface, InteractionController, RecordingListener]:
    config = AppConfig(layout=LayoutConfig(iterations=40))
    surface = HeadlessRenderSurface.from_config(Viewport(800, 600), config)
    surface.replace_elements(
        build_elements(
            [
                {"id": "a", "name": "Anchoring", "funny_summary": "First number wins.", "related": ["b", "c"]},
                {"id": "b", "name": "Bandwagon", "funny_summary": "Everyone's doing it.", "related": ["a", "d"]},
                {"id": "c", "name": "Confirmation", "related": []},
                {"id": "d", "name": "Dunning", "related": []},
                {"id": "e", "name": "Endowment", "related": []},
            ]
        )
    )
    surface.run_layout()
    listener = RecordingListener()
    controller = InteractionController(
        surface,
        listener,
        camera=camera or config.camera,
        tooltip=TooltipConfig(),
    )
    controller.attach()
    return surface, controller, listener


def _tag_map(surface: HeadlessRenderSurface) -> dict:
    return {tag: surface.tagged(tag) for tag in TAGS if surface.tagged(tag)}


def test_node_tap_highlights_neighbourhood_and_dims_rest() -> None:
    surface, controller, listener = _build()

    surface.emit("tap", "a")

    assert surface.tagged("selected") == ["a"]
    assert surface.tagged("neighbor") == ["b", "c"]
    assert surface.tagged("edge-highlight") == ["e_1:a__b", "e_1:a__c"]
    assert surface.tagged("dimmed") == ["d", "e", "e_1:b__d"]
    assert controller.selected_id == "a"
    assert listener.events == [("select", "a"), ("panel", True)]


def test_tagging_is_exclusive_between_selections() -> None:
    surface, controller, _ = _build()

    surface.emit("tap", "a")
    surface.emit("tap", "d")

    assert surface.tagged("selected") == ["d"]
    assert surface.tagged("neighbor") == ["b"]
    assert surface.tagged("edge-highlight") == ["e_1:b__d"]
    assert surface.tagged("dimmed") == ["a", "c", "e", "e_1:a__b", "e_1:a__c"]
    assert controller.selected_id == "d"


def test_isolated_node_selection_dims_everything_else() -> None:
    surface, _, _ = _build()

    surface.emit("tap", "e")

    assert surface.tagged("selected") == ["e"]
    assert surface.tagged("neighbor") == []
    assert surface.tagged("edge-highlight") == []
    assert surface.tagged("dimmed") == ["a", "b", "c", "d", "e_1:a__b", "e_1:a__c", "e_1:b__d"]


def test_edge_tap_highlights_endpoints_and_closes_panel() -> None:
    surface, controller, listener = _build()
    surface.emit("tap", "a")
    listener.events.clear()

    surface.emit("tap", "e_1:b__d")

    assert surface.tagged("selected") == []
    assert surface.tagged("edge-highlight") == ["e_1:b__d"]
    assert surface.tagged("neighbor") == ["b", "d"]
    assert surface.tagged("dimmed") == ["a", "c", "e", "e_1:a__b", "e_1:a__c"]
    assert controller.selected_id is None
    assert controller.active_edge_id == "e_1:b__d"
    assert listener.events == [("panel", False)]


def test_background_tap_restores_neutral_state() -> None:
    surface, controller, listener = _build()
    surface.emit("tap", "a")
    listener.events.clear()

    surface.emit("tap", None)

    assert _tag_map(surface) == {}
    assert controller.selected_id is None
    assert listener.events == [("clear", None), ("panel", False)]


def test_full_reset_is_idempotent() -> None:
    surface, controller, _ = _build()
    surface.emit("tap", "a")

    controller.full_reset()
    controller.full_reset()

    assert _tag_map(surface) == {}


def test_hover_adds_tag_and_tooltip_then_removes_both() -> None:
    surface, controller, _ = _build()

    surface.emit("mouseover", "a")
    tooltip = controller.tooltips.get("a")

    assert surface.tags_of("a") == frozenset({"hovered"})
    assert tooltip is not None and tooltip.visible
    assert tooltip.title == "Anchoring"
    assert tooltip.body == "First number wins."
    assert tooltip.placement == "top"

    surface.emit("mouseout", "a")

    assert surface.tags_of("a") == frozenset()
    assert "a" not in controller.tooltips
    assert tooltip.destroyed


def test_tooltip_content_is_escaped() -> None:
    surface, controller, _ = _build()

    surface.emit("mouseover", "b")

    tooltip = controller.tooltips.get("b")
    assert tooltip is not None
    assert "Everyone&#x27;s doing it." in tooltip.content_html


def test_repeated_hover_replaces_tooltip() -> None:
    surface, controller, _ = _build()

    surface.emit("mouseover", "a")
    first = controller.tooltips.get("a")
    surface.emit("mouseover", "a")

    assert first is not None and first.destroyed
    assert len(controller.tooltips) == 1


def test_hovering_another_node_closes_missed_tooltip() -> None:
    surface, controller, _ = _build()

    surface.emit("mouseover", "a")
    stale = controller.tooltips.get("a")
    surface.emit("mouseover", "b")

    assert list(controller.tooltips) == ["b"]
    assert stale is not None and stale.destroyed
    assert surface.tagged("hovered") == ["b"]


def test_selection_reset_destroys_live_tooltips() -> None:
    surface, controller, _ = _build()
    surface.emit("mouseover", "c")
    tooltip = controller.tooltips.get("c")

    surface.emit("tap", "a")

    assert len(controller.tooltips) == 0
    assert tooltip is not None and tooltip.destroyed


def test_hovered_tag_coexists_with_selection_tags_until_reset() -> None:
    surface, controller, _ = _build()
    surface.emit("tap", "a")

    surface.emit("mouseover", "d")

    assert surface.tags_of("d") == frozenset({"hovered", "dimmed"})
    controller.full_reset()
    assert surface.tags_of("d") == frozenset()


def test_node_tap_animates_camera_with_clamped_zoom() -> None:
    surface, _, _ = _build()
    surface.animate_camera("a", zoom=3.0, duration_ms=0, easing="linear")

    surface.emit("tap", "c")
    assert surface.animating
    surface.advance(450)

    assert surface.camera.zoom == pytest.approx(1.2)
    assert surface.camera.project(surface.position_of("c")) == pytest.approx((400.0, 300.0))


def test_node_tap_raises_low_zoom_to_minimum() -> None:
    surface, _, _ = _build()
    surface.animate_camera("a", zoom=0.2, duration_ms=0, easing="linear")

    surface.emit("tap", "b")
    surface.advance(450)

    assert surface.camera.zoom == pytest.approx(0.8)


def test_focus_node_behaves_like_tap() -> None:
    surface, controller, listener = _build()

    assert controller.focus_node("c") is True

    assert surface.tagged("selected") == ["c"]
    assert surface.tagged("neighbor") == ["a"]
    assert surface.tagged("dimmed") == ["b", "d", "e", "e_1:a__b", "e_1:b__d"]
    assert listener.events == [("select", "c"), ("panel", True)]


def test_focus_unknown_node_is_a_no_op() -> None:
    surface, controller, listener = _build()
    surface.emit("tap", "a")
    listener.events.clear()
    before = _tag_map(surface)

    assert controller.focus_node("ghost") is False

    assert _tag_map(surface) == before
    assert controller.selected_id == "a"
    assert listener.events == []


def test_reapply_selection_does_not_notify() -> None:
    surface, controller, listener = _build()

    assert controller.reapply_selection("b") is True

    assert surface.tagged("selected") == ["b"]
    assert listener.events == []
    assert not surface.animating
    assert surface.camera.project(surface.position_of("b")) == pytest.approx((400.0, 300.0))


def test_missing_listener_callbacks_default_to_no_ops() -> None:
    config = AppConfig(layout=LayoutConfig(iterations=10))
    surface = HeadlessRenderSurface.from_config(Viewport(800, 600), config)
    surface.replace_elements(build_elements([{"id": "a"}, {"id": "b", "related": ["a"]}]))
    selected: List[str] = []
    controller = InteractionController(
        surface,
        SelectionCallbacks(on_select_bias=selected.append),
        camera=config.camera,
        tooltip=config.tooltip,
    )
    controller.attach()

    surface.emit("tap", "a")
    surface.emit("tap", "e_1:a__b")
    surface.emit("tap", None)

    assert selected == ["a"]


def test_detach_destroys_tooltips_and_stops_camera() -> None:
    surface, controller, _ = _build()
    surface.emit("mouseover", "a")
    surface.emit("tap", "c")
    assert surface.animating

    controller.detach()

    assert len(controller.tooltips) == 0
    assert not surface.animating
