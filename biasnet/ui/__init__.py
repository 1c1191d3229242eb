"""Interactive graph view: render surface, interaction state machine, and sync layer."""

from .interaction import InteractionController, SelectionCallbacks, SelectionListener
from .style import InteractionTag, Stylesheet, build_stylesheet
from .surface import HeadlessRenderSurface, RenderSurface, SurfaceDestroyedError
from .sync import BiasGraphView, GraphProps, reconcile

__all__ = [
    "BiasGraphView",
    "GraphProps",
    "HeadlessRenderSurface",
    "InteractionController",
    "InteractionTag",
    "RenderSurface",
    "SelectionCallbacks",
    "SelectionListener",
    "Stylesheet",
    "SurfaceDestroyedError",
    "build_stylesheet",
    "reconcile",
]
