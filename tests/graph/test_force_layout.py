"""Tests for the force-directed layout."""

from __future__ import annotations

import math
from typing import Dict, Tuple

from biasnet.config import LayoutConfig
from biasnet.graph.layout import EMPTY_BOUNDS, bounds_of, compute_force_layout


def _distance(positions: Dict[str, Tuple[float, float]], first: str, second: str) -> float:
    ax, ay = positions[first]
    bx, by = positions[second]
    return math.hypot(ax - bx, ay - by)


def test_layout_of_empty_graph_is_empty() -> None:
    result = compute_force_layout([], [], LayoutConfig())
    assert result.positions == {}
    assert result.bounds == EMPTY_BOUNDS


def test_layout_of_single_node_sits_at_origin() -> None:
    result = compute_force_layout(["solo"], [], LayoutConfig())
    assert result.positions == {"solo": (0.0, 0.0)}


def test_layout_places_every_node_with_finite_coordinates() -> None:
    node_ids = [f"n{index}" for index in range(12)]
    edges = [(node_ids[index], node_ids[index + 1]) for index in range(11)]

    result = compute_force_layout(node_ids, edges, LayoutConfig(iterations=120))

    assert set(result.positions) == set(node_ids)
    assert all(math.isfinite(x) and math.isfinite(y) for x, y in result.positions.values())
    assert result.bounds == bounds_of(result.positions.values())


def test_layout_is_deterministic_for_a_seed() -> None:
    node_ids = ["a", "b", "c", "d"]
    edges = [("a", "b"), ("b", "c")]
    config = LayoutConfig(iterations=80, seed=11)

    first = compute_force_layout(node_ids, edges, config)
    second = compute_force_layout(node_ids, edges, config)

    assert first.positions == second.positions


def test_layout_is_centred_on_origin() -> None:
    node_ids = ["a", "b", "c"]
    result = compute_force_layout(node_ids, [("a", "b")], LayoutConfig(iterations=60))

    mean_x = sum(x for x, _ in result.positions.values()) / len(node_ids)
    mean_y = sum(y for _, y in result.positions.values()) / len(node_ids)
    assert abs(mean_x) < 1e-6
    assert abs(mean_y) < 1e-6


def test_connected_nodes_end_up_closer_than_unrelated_ones() -> None:
    node_ids = ["a", "b", "c", "d", "e", "f"]
    edges = [("a", "b"), ("c", "d"), ("e", "f")]

    result = compute_force_layout(node_ids, edges, LayoutConfig(iterations=300))
    positions = result.positions

    linked = [_distance(positions, source, target) for source, target in edges]
    unlinked = [
        _distance(positions, first, second)
        for index, first in enumerate(node_ids)
        for second in node_ids[index + 1 :]
        if (first, second) not in edges
    ]
    assert sum(linked) / len(linked) < sum(unlinked) / len(unlinked)


def test_layout_ignores_edges_to_unknown_nodes() -> None:
    result = compute_force_layout(["a", "b"], [("a", "ghost"), ("a", "a")], LayoutConfig(iterations=20))
    assert set(result.positions) == {"a", "b"}
    assert _distance(result.positions, "a", "b") > 0
