"""Render surface owning the graph canvas state for a mounted view."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from typing_extensions import Protocol, runtime_checkable

from biasnet.config import AppConfig, CameraConfig, LayoutConfig
from biasnet.graph.builder import GraphElements
from biasnet.graph.layout import EMPTY_BOUNDS, LayoutBounds, compute_force_layout
from biasnet.ui.camera import Camera, CameraAnimation, Viewport, centred_on, clamp, fit_camera
from biasnet.ui.style import Stylesheet, build_stylesheet

LOGGER = logging.getLogger(__name__)

EventHandler = Callable[[Optional[str]], None]

NODE = "node"
EDGE = "edge"
BACKGROUND = "background"


class SurfaceDestroyedError(RuntimeError):
    """Raised when a destroyed surface is used."""


@runtime_checkable
class RenderSurface(Protocol):
    """Operations the interaction and sync layers need from a canvas backend."""

    @property
    def destroyed(self) -> bool: ...

    @property
    def camera(self) -> Camera: ...

    @property
    def elements(self) -> GraphElements: ...

    def on(self, event: str, selector: str, handler: EventHandler) -> None: ...

    def replace_elements(self, elements: GraphElements) -> None: ...

    def run_layout(self) -> None: ...

    def has_node(self, node_id: str) -> bool: ...

    def has_edge(self, edge_id: str) -> bool: ...

    def node_ids(self) -> List[str]: ...

    def edge_ids(self) -> List[str]: ...

    def connected_edges(self, node_id: str) -> List[str]: ...

    def neighbors(self, node_id: str) -> List[str]: ...

    def edge_endpoints(self, edge_id: str) -> Tuple[str, str]: ...

    def add_tags(self, element_ids: Iterable[str], *tags: str) -> None: ...

    def remove_tags(self, element_ids: Iterable[str], *tags: str) -> None: ...

    def tags_of(self, element_id: str) -> FrozenSet[str]: ...

    def center_on(self, node_id: str) -> None: ...

    def animate_camera(self, node_id: str, *, zoom: float, duration_ms: int, easing: str) -> None: ...

    def stop_animations(self) -> None: ...

    def resize(self, width: float, height: float) -> None: ...

    def destroy(self) -> None: ...


SurfaceFactory = Callable[[Viewport, AppConfig], RenderSurface]


class HeadlessRenderSurface:
    """In-memory canvas model: elements, tags, positions, camera and handlers.

    It performs every state change a browser canvas would (element replace,
    force layout, fit, camera animation) without drawing, which makes the
    interaction layer fully exercisable in tests. Animations progress only
    through :meth:`advance`.
    """

    def __init__(
        self,
        viewport: Viewport,
        *,
        stylesheet: Stylesheet,
        layout: LayoutConfig,
        camera: CameraConfig,
    ) -> None:
        self._viewport = viewport
        self._stylesheet = stylesheet
        self._layout_config = layout
        self._camera_config = camera
        self._elements = GraphElements()
        self._incident: Dict[str, List[str]] = {}
        self._tags: Dict[str, Set[str]] = {}
        self._positions: Dict[str, Tuple[float, float]] = {}
        self._bounds: LayoutBounds = EMPTY_BOUNDS
        self._camera = Camera()
        self._animation: Optional[CameraAnimation] = None
        self._handlers: Dict[Tuple[str, str], List[EventHandler]] = defaultdict(list)
        self._destroyed = False
        self.layout_runs = 0

    @classmethod
    def from_config(cls, viewport: Viewport, config: AppConfig) -> "HeadlessRenderSurface":
        return cls(
            viewport,
            stylesheet=build_stylesheet(config.style),
            layout=config.layout,
            camera=config.camera,
        )

    # -- lifecycle -----------------------------------------------------

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        """Release all state. Calling it again is a no-op."""

        if self._destroyed:
            return
        self._animation = None
        self._handlers.clear()
        self._elements = GraphElements()
        self._incident.clear()
        self._tags.clear()
        self._positions.clear()
        self._destroyed = True
        LOGGER.debug("Render surface destroyed")

    def _ensure_alive(self) -> None:
        if self._destroyed:
            raise SurfaceDestroyedError("Render surface has been destroyed")

    # -- events --------------------------------------------------------

    def on(self, event: str, selector: str, handler: EventHandler) -> None:
        """Register ``handler`` for ``event`` on ``node``, ``edge`` or ``background`` targets."""

        self._ensure_alive()
        if selector not in (NODE, EDGE, BACKGROUND):
            raise ValueError(f"Unsupported event selector: {selector}")
        self._handlers[(event, selector)].append(handler)

    def emit(self, event: str, target: Optional[str] = None) -> None:
        """Dispatch a pointer event the way a canvas hit-test would."""

        self._ensure_alive()
        if target is not None and self.has_node(target):
            selector = NODE
        elif target is not None and self.has_edge(target):
            selector = EDGE
        else:
            selector, target = BACKGROUND, None
        for handler in list(self._handlers.get((event, selector), ())):
            handler(target)

    # -- elements ------------------------------------------------------

    @property
    def elements(self) -> GraphElements:
        return self._elements

    def replace_elements(self, elements: GraphElements) -> None:
        """Remove every element (and its tags) and load ``elements``."""

        self._ensure_alive()
        self._animation = None
        self._elements = elements
        self._tags = {}
        self._positions = {}
        self._incident = {node.id: [] for node in elements.nodes}
        for edge in elements.edges:
            self._incident[edge.source].append(edge.id)
            self._incident[edge.target].append(edge.id)
        LOGGER.info("Loaded %d nodes and %d edges onto surface", elements.node_count, elements.edge_count)

    def has_node(self, node_id: str) -> bool:
        return self._elements.node(node_id) is not None

    def has_edge(self, edge_id: str) -> bool:
        return self._elements.edge(edge_id) is not None

    def node_ids(self) -> List[str]:
        return [node.id for node in self._elements.nodes]

    def edge_ids(self) -> List[str]:
        return [edge.id for edge in self._elements.edges]

    def connected_edges(self, node_id: str) -> List[str]:
        return list(self._incident.get(node_id, ()))

    def neighbors(self, node_id: str) -> List[str]:
        result: List[str] = []
        for edge_id in self._incident.get(node_id, ()):
            source, target = self.edge_endpoints(edge_id)
            other = target if source == node_id else source
            if other != node_id and other not in result:
                result.append(other)
        return result

    def edge_endpoints(self, edge_id: str) -> Tuple[str, str]:
        edge = self._elements.edge(edge_id)
        if edge is None:
            raise KeyError(edge_id)
        return edge.endpoints

    # -- tags ----------------------------------------------------------

    def add_tags(self, element_ids: Iterable[str], *tags: str) -> None:
        self._ensure_alive()
        values = {str(getattr(tag, "value", tag)) for tag in tags}
        for element_id in element_ids:
            if self.has_node(element_id) or self.has_edge(element_id):
                self._tags.setdefault(element_id, set()).update(values)

    def remove_tags(self, element_ids: Iterable[str], *tags: str) -> None:
        self._ensure_alive()
        values = {str(getattr(tag, "value", tag)) for tag in tags}
        for element_id in element_ids:
            current = self._tags.get(element_id)
            if not current:
                continue
            current.difference_update(values)
            if not current:
                del self._tags[element_id]

    def tags_of(self, element_id: str) -> FrozenSet[str]:
        return frozenset(self._tags.get(element_id, ()))

    def tagged(self, tag: str) -> List[str]:
        """Return the ids of every element carrying ``tag`` in element order."""

        value = str(getattr(tag, "value", tag))
        ordered = self.node_ids() + self.edge_ids()
        return [element_id for element_id in ordered if value in self._tags.get(element_id, ())]

    def style_of(self, element_id: str) -> Dict[str, object]:
        """Resolve the effective style of an element from its category and tags."""

        node = self._elements.node(element_id)
        if node is not None:
            return self._stylesheet.resolve("node", self.tags_of(element_id), category=node.category)
        if self.has_edge(element_id):
            return self._stylesheet.resolve("edge", self.tags_of(element_id))
        raise KeyError(element_id)

    # -- layout and viewport ---------------------------------------------

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def positions(self) -> Dict[str, Tuple[float, float]]:
        return dict(self._positions)

    def position_of(self, node_id: str) -> Tuple[float, float]:
        return self._positions.get(node_id, (0.0, 0.0))

    def run_layout(self) -> None:
        """Run a full force-directed layout, then fit the camera if configured."""

        self._ensure_alive()
        result = compute_force_layout(self.node_ids(), self._elements.edge_pairs(), self._layout_config)
        self._positions = dict(result.positions)
        self._bounds = result.bounds
        self.layout_runs += 1
        if self._layout_config.fit:
            self.fit()
        LOGGER.info("Layout %s completed for %d nodes", self._layout_config.name, len(self._positions))

    def fit(self) -> None:
        self._ensure_alive()
        self._animation = None
        self._camera = fit_camera(
            self._bounds,
            self._viewport,
            self._layout_config.padding,
            min_zoom=self._camera_config.surface_min_zoom,
            max_zoom=self._camera_config.surface_max_zoom,
        )

    def resize(self, width: float, height: float) -> None:
        """Adopt a new viewport size and re-fit without re-running the layout."""

        self._ensure_alive()
        self._viewport = Viewport(width=float(width), height=float(height))
        self.fit()

    # -- camera --------------------------------------------------------

    @property
    def camera(self) -> Camera:
        return self._camera

    @property
    def animating(self) -> bool:
        return self._animation is not None

    def _clamp_zoom(self, zoom: float) -> float:
        return clamp(zoom, self._camera_config.surface_min_zoom, self._camera_config.surface_max_zoom)

    def center_on(self, node_id: str) -> None:
        self._ensure_alive()
        if not self.has_node(node_id):
            return
        self._animation = None
        self._camera = centred_on(self.position_of(node_id), self._camera.zoom, self._viewport)

    def animate_camera(self, node_id: str, *, zoom: float, duration_ms: int, easing: str) -> None:
        """Start moving the camera to centre ``node_id``; replaces any in-flight animation."""

        self._ensure_alive()
        if not self.has_node(node_id):
            return
        target = centred_on(self.position_of(node_id), self._clamp_zoom(zoom), self._viewport)
        self._animation = CameraAnimation(self._camera, target, duration_ms=duration_ms, easing=easing)
        if self._animation.done:
            self._camera = target
            self._animation = None

    def stop_animations(self) -> None:
        """Abandon the in-flight animation, leaving the camera where it is."""

        self._animation = None

    def advance(self, elapsed_ms: float) -> Camera:
        """Progress the in-flight animation by ``elapsed_ms`` milliseconds."""

        self._ensure_alive()
        if self._animation is not None:
            self._camera = self._animation.advance(elapsed_ms)
            if self._animation.done:
                self._animation = None
        return self._camera
