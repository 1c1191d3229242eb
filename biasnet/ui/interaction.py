"""Pointer interaction state machine for the bias graph.

Gestures move the surface between a neutral rest state and one active
subgraph (a selected node or a highlighted edge). Every transition starts
with a full reset so that stale tags from the previous target never survive:

* pointer over a node: ``hovered`` tag plus a tooltip, removed on leave, one node at a time;
* node tap: ``selected`` node, ``edge-highlight`` incident edges,
  ``neighbor`` adjacent nodes, everything else ``dimmed``; camera focus;
* edge tap: ``edge-highlight`` edge, ``neighbor`` endpoints, rest ``dimmed``;
* background tap: back to neutral.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from typing_extensions import Protocol

from biasnet.config import CameraConfig, TooltipConfig
from biasnet.ui.camera import focus_zoom
from biasnet.ui.style import EDGE_TAGS, NODE_TAGS, InteractionTag
from biasnet.ui.surface import BACKGROUND, EDGE, NODE, RenderSurface
from biasnet.ui.tooltips import TooltipFactory, TooltipRegistry, create_tooltip

LOGGER = logging.getLogger(__name__)


class SelectionListener(Protocol):
    """Consumer notified about selection changes (typically a detail panel)."""

    def on_select_bias(self, bias_id: str) -> None: ...

    def on_clear_selection(self) -> None: ...

    def on_panel_state_change(self, should_open: bool) -> None: ...


def _ignore(*_args: object) -> None:
    return None


@dataclass
class SelectionCallbacks:
    """:class:`SelectionListener` built from plain callables; missing ones are no-ops."""

    on_select_bias: Callable[[str], None] = _ignore
    on_clear_selection: Callable[[], None] = _ignore
    on_panel_state_change: Callable[[bool], None] = _ignore


class InteractionController:
    """Applies interaction tags on a :class:`RenderSurface` in response to gestures."""

    def __init__(
        self,
        surface: RenderSurface,
        listener: Optional[SelectionListener] = None,
        *,
        camera: CameraConfig,
        tooltip: TooltipConfig,
        tooltip_factory: TooltipFactory = create_tooltip,
    ) -> None:
        self._surface = surface
        self._listener: SelectionListener = listener or SelectionCallbacks()
        self._camera = camera
        self._tooltip_config = tooltip
        self._tooltip_factory = tooltip_factory
        self._tooltips = TooltipRegistry()
        self._selected_id: Optional[str] = None
        self._active_edge_id: Optional[str] = None
        self._attached = False

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def active_edge_id(self) -> Optional[str]:
        return self._active_edge_id

    @property
    def tooltips(self) -> TooltipRegistry:
        return self._tooltips

    def attach(self) -> None:
        """Register pointer handlers on the surface. Safe to call once per surface."""

        if self._attached:
            return
        self._surface.on("mouseover", NODE, self._on_pointer_enter)
        self._surface.on("mouseout", NODE, self._on_pointer_leave)
        self._surface.on("tap", NODE, self._on_node_tap)
        self._surface.on("tap", EDGE, self._on_edge_tap)
        self._surface.on("tap", BACKGROUND, self._on_background_tap)
        self._attached = True

    def detach(self) -> None:
        """Destroy live tooltips and cancel camera motion before the surface goes away."""

        self._tooltips.close_all()
        if not self._surface.destroyed:
            self._surface.stop_animations()
        self._selected_id = None
        self._active_edge_id = None
        self._attached = False

    # -- gestures --------------------------------------------------------

    def pointer_enter_node(self, node_id: str) -> None:
        node = self._surface.elements.node(node_id)
        if node is None:
            return
        stale = [other for other in self._tooltips if other != node_id]
        if stale:
            self._surface.remove_tags(stale, InteractionTag.HOVERED)
            for other in stale:
                self._tooltips.close(other)
        self._surface.add_tags([node_id], InteractionTag.HOVERED)
        self._tooltips.open(self._tooltip_factory(node, self._tooltip_config))

    def pointer_leave_node(self, node_id: str) -> None:
        self._surface.remove_tags([node_id], InteractionTag.HOVERED)
        self._tooltips.close(node_id)

    def tap_node(self, node_id: str) -> bool:
        """Select ``node_id``, focus the camera on it and notify the listener."""

        if not self.highlight_node(node_id):
            return False
        self._animate_focus(node_id)
        LOGGER.debug("Node %s selected", node_id)
        self._listener.on_select_bias(node_id)
        self._listener.on_panel_state_change(True)
        return True

    def tap_edge(self, edge_id: str) -> bool:
        if not self.highlight_edge(edge_id):
            return False
        LOGGER.debug("Edge %s highlighted", edge_id)
        self._listener.on_panel_state_change(False)
        return True

    def tap_background(self) -> None:
        self.full_reset()
        LOGGER.debug("Selection cleared from background tap")
        self._listener.on_clear_selection()
        self._listener.on_panel_state_change(False)

    def focus_node(self, node_id: str) -> bool:
        """Programmatic equivalent of tapping ``node_id``; unknown ids are ignored."""

        return self.tap_node(node_id)

    def reapply_selection(self, node_id: str) -> bool:
        """Restore the selection tag set after a rebuild, without notifying anyone."""

        if not self.highlight_node(node_id):
            return False
        self._surface.center_on(node_id)
        return True

    # -- tag sets ----------------------------------------------------------

    def full_reset(self) -> None:
        """Clear every interaction tag and destroy every live tooltip."""

        self._tooltips.close_all()
        self._surface.remove_tags(self._surface.node_ids(), *NODE_TAGS)
        self._surface.remove_tags(self._surface.edge_ids(), *EDGE_TAGS)
        self._selected_id = None
        self._active_edge_id = None

    def highlight_node(self, node_id: str) -> bool:
        if not self._surface.has_node(node_id):
            return False
        self.full_reset()
        incident = self._surface.connected_edges(node_id)
        adjacent = self._surface.neighbors(node_id)
        self._surface.add_tags([node_id], InteractionTag.SELECTED)
        self._surface.add_tags(incident, InteractionTag.EDGE_HIGHLIGHT)
        self._surface.add_tags(adjacent, InteractionTag.NEIGHBOR)
        self._dim_rest(active_nodes=[node_id, *adjacent], active_edges=incident)
        self._selected_id = node_id
        return True

    def highlight_edge(self, edge_id: str) -> bool:
        if not self._surface.has_edge(edge_id):
            return False
        self.full_reset()
        endpoints = list(self._surface.edge_endpoints(edge_id))
        self._surface.add_tags([edge_id], InteractionTag.EDGE_HIGHLIGHT)
        self._surface.add_tags(endpoints, InteractionTag.NEIGHBOR)
        self._dim_rest(active_nodes=endpoints, active_edges=[edge_id])
        self._active_edge_id = edge_id
        return True

    def _dim_rest(self, *, active_nodes: List[str], active_edges: List[str]) -> None:
        keep_nodes = set(active_nodes)
        keep_edges = set(active_edges)
        self._surface.add_tags(
            [node_id for node_id in self._surface.node_ids() if node_id not in keep_nodes],
            InteractionTag.DIMMED,
        )
        self._surface.add_tags(
            [edge_id for edge_id in self._surface.edge_ids() if edge_id not in keep_edges],
            InteractionTag.DIMMED,
        )

    def _animate_focus(self, node_id: str) -> None:
        zoom = focus_zoom(self._surface.camera.zoom, self._camera.min_zoom, self._camera.max_zoom)
        self._surface.animate_camera(
            node_id,
            zoom=zoom,
            duration_ms=self._camera.duration_ms,
            easing=self._camera.easing,
        )

    # -- surface event adapters ------------------------------------------

    def _on_pointer_enter(self, target: Optional[str]) -> None:
        if target is not None:
            self.pointer_enter_node(target)

    def _on_pointer_leave(self, target: Optional[str]) -> None:
        if target is not None:
            self.pointer_leave_node(target)

    def _on_node_tap(self, target: Optional[str]) -> None:
        if target is not None:
            self.tap_node(target)

    def _on_edge_tap(self, target: Optional[str]) -> None:
        if target is not None:
            self.tap_edge(target)

    def _on_background_tap(self, _target: Optional[str]) -> None:
        self.tap_background()
