"""Viewport camera model: zoom/pan, fit-to-viewport, and time-boxed animations."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from biasnet.graph.layout import LayoutBounds

Easing = Callable[[float], float]

EASINGS: Dict[str, Easing] = {
    "linear": lambda t: t,
    "ease-in": lambda t: t * t,
    "ease-out": lambda t: 1.0 - (1.0 - t) * (1.0 - t),
    "ease-in-out": lambda t: 0.5 - math.cos(math.pi * t) / 2.0,
}


@dataclass(frozen=True)
class Viewport:
    """Canvas size in CSS pixels."""

    width: float
    height: float

    @property
    def centre(self) -> Tuple[float, float]:
        return (self.width / 2.0, self.height / 2.0)


@dataclass(frozen=True)
class Camera:
    """Rendered position = model position * zoom + pan."""

    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def project(self, position: Tuple[float, float]) -> Tuple[float, float]:
        return (position[0] * self.zoom + self.pan_x, position[1] * self.zoom + self.pan_y)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def focus_zoom(current: float, min_zoom: float, max_zoom: float) -> float:
    """Zoom level used when focusing a node: the current zoom clamped to the bounds."""

    return clamp(current, min_zoom, max_zoom)


def centred_on(position: Tuple[float, float], zoom: float, viewport: Viewport) -> Camera:
    """Return the camera that shows ``position`` at the viewport centre."""

    centre_x, centre_y = viewport.centre
    return Camera(zoom=zoom, pan_x=centre_x - position[0] * zoom, pan_y=centre_y - position[1] * zoom)


def fit_camera(
    bounds: LayoutBounds,
    viewport: Viewport,
    padding: float,
    *,
    min_zoom: float,
    max_zoom: float,
) -> Camera:
    """Return the camera that fits ``bounds`` inside ``viewport`` minus ``padding``."""

    usable_width = max(viewport.width - 2 * padding, 1.0)
    usable_height = max(viewport.height - 2 * padding, 1.0)
    if bounds.width <= 0 and bounds.height <= 0:
        zoom = clamp(1.0, min_zoom, max_zoom)
    else:
        candidates = []
        if bounds.width > 0:
            candidates.append(usable_width / bounds.width)
        if bounds.height > 0:
            candidates.append(usable_height / bounds.height)
        zoom = clamp(min(candidates), min_zoom, max_zoom)
    return centred_on(bounds.centre, zoom, viewport)


class CameraAnimation:
    """Interpolates between two cameras over a fixed duration.

    The animation is advanced explicitly with :meth:`advance`; it never blocks
    and may be abandoned at any point by the owner.
    """

    def __init__(self, start: Camera, target: Camera, *, duration_ms: float, easing: str = "ease-in-out") -> None:
        self.start = start
        self.target = target
        self.duration_ms = max(float(duration_ms), 0.0)
        self._easing = EASINGS.get(easing, EASINGS["linear"])
        self.elapsed_ms = 0.0

    @property
    def done(self) -> bool:
        return self.elapsed_ms >= self.duration_ms

    def advance(self, elapsed_ms: float) -> Camera:
        """Move the animation forward and return the interpolated camera."""

        self.elapsed_ms = min(self.elapsed_ms + max(elapsed_ms, 0.0), self.duration_ms)
        return self.current()

    def current(self) -> Camera:
        if self.done:
            return self.target
        progress = self._easing(self.elapsed_ms / self.duration_ms)
        return Camera(
            zoom=_lerp(self.start.zoom, self.target.zoom, progress),
            pan_x=_lerp(self.start.pan_x, self.target.pan_x, progress),
            pan_y=_lerp(self.start.pan_y, self.target.pan_y, progress),
        )


def _lerp(start: float, end: float, progress: float) -> float:
    return start + (end - start) * progress
