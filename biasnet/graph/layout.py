"""Force-directed layout for the bias network."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from biasnet.config import LayoutConfig

LOGGER = logging.getLogger(__name__)

_SPRING_STRENGTH = 0.08
_GRAVITY_SCALE = 0.02
_MIN_DISTANCE = 1e-2


@dataclass(frozen=True)
class LayoutBounds:
    """Axis-aligned bounding box of laid-out node positions in model units."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def centre(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)


@dataclass(frozen=True)
class LayoutResult:
    """Container for layout coordinates and their bounding box."""

    positions: Dict[str, Tuple[float, float]]
    bounds: LayoutBounds


EMPTY_BOUNDS = LayoutBounds(0.0, 0.0, 0.0, 0.0)


def bounds_of(positions: Iterable[Tuple[float, float]]) -> LayoutBounds:
    """Return the bounding box of ``positions`` (zero-sized when empty)."""

    coords = list(positions)
    if not coords:
        return EMPTY_BOUNDS
    xs = [coord[0] for coord in coords]
    ys = [coord[1] for coord in coords]
    return LayoutBounds(min(xs), min(ys), max(xs), max(ys))


def compute_force_layout(
    node_ids: Sequence[str],
    edges: Iterable[Tuple[str, str]],
    config: LayoutConfig,
) -> LayoutResult:
    """Compute 2D positions with a repulsion/spring simulation.

    Every pair of nodes repels with a force proportional to
    ``config.node_repulsion / d**2`` (``d`` shortened by ``node_overlap`` so
    labels keep apart), edges pull their endpoints towards
    ``ideal_edge_length``, and a weak gravity keeps disconnected components
    from drifting away. Displacements are capped by a linearly cooling
    temperature. The run is deterministic for a given input order and
    ``config.seed``.

    Args:
        node_ids: Node identifiers in render order.
        edges: Undirected edges as ``(source, target)`` tuples.
        config: Layout parameters.

    Returns:
        LayoutResult: Positions in model units plus their bounding box.
    """

    count = len(node_ids)
    if count == 0:
        return LayoutResult(positions={}, bounds=EMPTY_BOUNDS)
    if count == 1:
        return LayoutResult(positions={node_ids[0]: (0.0, 0.0)}, bounds=EMPTY_BOUNDS)

    index = {node_id: position for position, node_id in enumerate(node_ids)}
    sources: List[int] = []
    targets: List[int] = []
    for source, target in edges:
        if source in index and target in index and source != target:
            sources.append(index[source])
            targets.append(index[target])
    src = np.asarray(sources, dtype=int)
    dst = np.asarray(targets, dtype=int)

    rng = np.random.default_rng(config.seed)
    spread = config.ideal_edge_length * np.sqrt(count)
    pos = rng.uniform(-spread / 2.0, spread / 2.0, size=(count, 2))

    initial_temperature = config.ideal_edge_length
    for step in range(config.iterations):
        delta = pos[:, np.newaxis, :] - pos[np.newaxis, :, :]
        distance = np.linalg.norm(delta, axis=2)
        np.fill_diagonal(distance, 1.0)
        distance = np.maximum(distance, _MIN_DISTANCE)
        effective = np.maximum(distance - config.node_overlap, 1.0)
        magnitude = config.node_repulsion / (effective**2)
        np.fill_diagonal(magnitude, 0.0)
        displacement = np.sum(delta / distance[:, :, np.newaxis] * magnitude[:, :, np.newaxis], axis=1)

        if src.size:
            spring = pos[dst] - pos[src]
            length = np.maximum(np.linalg.norm(spring, axis=1), _MIN_DISTANCE)
            pull = (_SPRING_STRENGTH * (length - config.ideal_edge_length) / length)[:, np.newaxis] * spring
            np.add.at(displacement, src, pull)
            np.add.at(displacement, dst, -pull)

        centroid = pos.mean(axis=0)
        displacement -= config.gravity * _GRAVITY_SCALE * (pos - centroid)

        temperature = initial_temperature * (1.0 - step / config.iterations)
        size = np.maximum(np.linalg.norm(displacement, axis=1), _MIN_DISTANCE)
        capped = np.minimum(size, temperature)
        pos += displacement / size[:, np.newaxis] * capped[:, np.newaxis]

    pos -= pos.mean(axis=0)
    positions: Dict[str, Tuple[float, float]] = {
        node_id: (float(pos[index[node_id], 0]), float(pos[index[node_id], 1])) for node_id in node_ids
    }
    LOGGER.debug("Force layout placed %d nodes and %d edges", count, int(src.size))
    return LayoutResult(positions=positions, bounds=bounds_of(positions.values()))
