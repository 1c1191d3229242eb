"""Reconcile declarative view inputs with the imperative render surface."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from biasnet.categories import DEFAULT_PLACEHOLDERS
from biasnet.config import AppConfig
from biasnet.dataset import EntityLike
from biasnet.graph.builder import GraphElements, build_elements
from biasnet.ui.camera import Viewport
from biasnet.ui.interaction import InteractionController, SelectionListener
from biasnet.ui.surface import HeadlessRenderSurface, RenderSurface, SurfaceFactory

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphProps:
    """Inputs supplied by the consumer on every render."""

    entities: Sequence[EntityLike] = ()
    selected_id: Optional[str] = None


@dataclass(frozen=True)
class SyncSnapshot:
    """What the surface currently reflects."""

    entities: Sequence[EntityLike]
    elements: GraphElements
    selected_id: Optional[str]


@dataclass(frozen=True)
class ReplaceElements:
    elements: GraphElements


@dataclass(frozen=True)
class RunLayout:
    pass


@dataclass(frozen=True)
class ReapplySelection:
    node_id: str


@dataclass(frozen=True)
class ResetHighlights:
    pass


SyncCommand = Union[ReplaceElements, RunLayout, ReapplySelection, ResetHighlights]


def reconcile(
    previous: Optional[SyncSnapshot],
    props: GraphProps,
    *,
    active_selection: Optional[str] = None,
    placeholders: Sequence[str] = DEFAULT_PLACEHOLDERS,
) -> Tuple[SyncSnapshot, List[SyncCommand]]:
    """Compute the surface commands that bring it in line with ``props``.

    A new entity sequence (by reference or by content) produces a full
    replace and relayout, followed by a silent re-selection when the selected
    id survived. A change of ``selected_id`` alone re-highlights or resets,
    unless the surface already shows that selection (``active_selection``).
    Calling it again with the same props yields no commands.

    Args:
        previous: Snapshot produced by the last reconciliation, if any.
        props: Current consumer inputs.
        active_selection: Node currently selected on the surface.
        placeholders: Category values treated as undeclared.

    Returns:
        Tuple[SyncSnapshot, List[SyncCommand]]: The new snapshot and the
        commands to execute, in order.
    """

    elements = build_elements(props.entities, placeholders=placeholders)
    snapshot = SyncSnapshot(entities=props.entities, elements=elements, selected_id=props.selected_id)
    selected_present = props.selected_id is not None and elements.node(props.selected_id) is not None

    data_changed = (
        previous is None or props.entities is not previous.entities or elements != previous.elements
    )
    commands: List[SyncCommand] = []
    if data_changed:
        commands.append(ReplaceElements(elements))
        commands.append(RunLayout())
        if selected_present:
            commands.append(ReapplySelection(props.selected_id))  # type: ignore[arg-type]
        return snapshot, commands

    if props.selected_id == previous.selected_id or props.selected_id == active_selection:
        return snapshot, commands
    if selected_present:
        commands.append(ReapplySelection(props.selected_id))  # type: ignore[arg-type]
    else:
        commands.append(ResetHighlights())
    return snapshot, commands


def execute_commands(
    commands: Sequence[SyncCommand],
    surface: RenderSurface,
    controller: InteractionController,
) -> None:
    """Run reconciliation commands against a mounted surface."""

    for command in commands:
        if isinstance(command, ReplaceElements):
            controller.full_reset()
            surface.replace_elements(command.elements)
        elif isinstance(command, RunLayout):
            surface.run_layout()
        elif isinstance(command, ReapplySelection):
            controller.reapply_selection(command.node_id)
        elif isinstance(command, ResetHighlights):
            controller.full_reset()
        else:  # pragma: no cover - exhaustive over SyncCommand
            raise TypeError(f"Unknown sync command: {command!r}")


def _headless_factory(viewport: Viewport, config: AppConfig) -> RenderSurface:
    return HeadlessRenderSurface.from_config(viewport, config)


class BiasGraphView:
    """Mounted graph view: owns one surface and keeps it in sync with its props.

    Typical use::

        with BiasGraphView(listener) as view:
            view.update(entities, selected_id=None)
            view.focus_node("anchoring")
    """

    def __init__(
        self,
        listener: Optional[SelectionListener] = None,
        *,
        config: Optional[AppConfig] = None,
        surface_factory: SurfaceFactory = _headless_factory,
    ) -> None:
        self._listener = listener
        self._config = config or AppConfig()
        self._surface_factory = surface_factory
        self._props = GraphProps()
        self._snapshot: Optional[SyncSnapshot] = None
        self._surface: Optional[RenderSurface] = None
        self._controller: Optional[InteractionController] = None

    @property
    def mounted(self) -> bool:
        return self._surface is not None

    @property
    def surface(self) -> Optional[RenderSurface]:
        return self._surface

    @property
    def controller(self) -> Optional[InteractionController]:
        return self._controller

    @property
    def props(self) -> GraphProps:
        return self._props

    def mount(self, width: Optional[float] = None, height: Optional[float] = None) -> RenderSurface:
        """Create the surface, attach interaction handlers and apply the current props."""

        if self._surface is not None:
            raise RuntimeError("Graph view is already mounted")
        viewport = Viewport(
            width=float(width or self._config.viewport.width),
            height=float(height or self._config.viewport.height),
        )
        surface = self._surface_factory(viewport, self._config)
        controller: Optional[InteractionController] = None
        try:
            controller = InteractionController(
                surface,
                self._listener,
                camera=self._config.camera,
                tooltip=self._config.tooltip,
            )
            controller.attach()
            self._surface = surface
            self._controller = controller
            self._sync()
        except Exception:
            LOGGER.exception("Failed to mount graph view")
            self._release(surface, controller)
            raise
        return surface

    def update(self, entities: Sequence[EntityLike], selected_id: Optional[str] = None) -> None:
        """Record new props and reconcile them when mounted."""

        self._props = GraphProps(entities=entities, selected_id=selected_id)
        if self._surface is None:
            LOGGER.debug("Graph view not mounted; deferring update until mount")
            return
        self._sync()

    def focus_node(self, node_id: str) -> bool:
        """Select ``node_id`` as if it had been tapped. Returns False when absent."""

        if self._controller is None:
            return False
        return self._controller.focus_node(node_id)

    def resize(self, width: float, height: float) -> None:
        if self._surface is not None:
            self._surface.resize(width, height)

    def unmount(self) -> None:
        """Release the surface; always leaves the view unmounted."""

        surface, controller = self._surface, self._controller
        if surface is None:
            return
        self._release(surface, controller)

    def __enter__(self) -> "BiasGraphView":
        self.mount()
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.unmount()

    def _sync(self) -> None:
        surface, controller = self._surface, self._controller
        if surface is None or controller is None:
            raise RuntimeError("Graph view is not mounted")
        snapshot, commands = reconcile(
            self._snapshot,
            self._props,
            active_selection=controller.selected_id,
            placeholders=self._config.classifier.placeholder_categories,
        )
        execute_commands(commands, surface, controller)
        self._snapshot = snapshot

    def _release(self, surface: RenderSurface, controller: Optional[InteractionController]) -> None:
        self._surface = None
        self._controller = None
        self._snapshot = None
        try:
            if controller is not None:
                controller.detach()
        finally:
            surface.destroy()
            LOGGER.info("Graph view unmounted")
