"""Tests for category inference and the category catalogue."""

from __future__ import annotations

import pytest

from biasnet.categories import (
    CATEGORIES,
    DECISION_DESERT,
    MEMORY_JUNGLE,
    NEUTRAL_COLOR,
    REALITY_RIFT,
    SELF_EGO,
    SOCIAL_ARENA,
    category_color,
    category_legend,
    classify,
    infer_category,
    is_placeholder,
    lookup_category,
    slug_to_category,
)


@pytest.mark.parametrize(
    ("name", "identifier", "expected"),
    [
        ("Anchoring Bias", "anchoring-bias", DECISION_DESERT),
        ("Bandwagon Effect", "bandwagon-effect", SOCIAL_ARENA),
        ("Hindsight Bias", "hindsight-bias", MEMORY_JUNGLE),
        ("Dunning-Kruger Effect", "dunning-kruger", SELF_EGO),
        ("Placebo Effect", "placebo", REALITY_RIFT),
    ],
)
def test_infer_category_matches_keyword_lists(name: str, identifier: str, expected: str) -> None:
    assert infer_category(name, identifier) == expected


def test_infer_category_prefers_earlier_lists() -> None:
    """A name hitting both the social and decision lists resolves to Decision Desert."""

    assert infer_category("Social Risk Taking", "x") == DECISION_DESERT


def test_infer_category_matches_on_identifier() -> None:
    assert infer_category("Mystery Effect", "groupthink-2") == SOCIAL_ARENA


def test_infer_category_is_case_insensitive() -> None:
    assert infer_category("CONFIRMATION BIAS", None) == REALITY_RIFT


def test_infer_category_falls_back_to_default() -> None:
    assert infer_category("Zeigarnik Effect", "zeigarnik") == DECISION_DESERT
    assert infer_category(None, None) == DECISION_DESERT


def test_classify_keeps_meaningful_declared_category_verbatim() -> None:
    assert classify(SOCIAL_ARENA, "Anchoring Bias", "anchoring") == SOCIAL_ARENA
    assert classify("  Custom Zone ", "Anchoring Bias", "anchoring") == "  Custom Zone "


@pytest.mark.parametrize("declared", [None, "", "   ", "Cognitive Bias", "cognitive bias"])
def test_classify_infers_when_declared_is_placeholder(declared: object) -> None:
    assert classify(declared, "Bandwagon Effect", "bandwagon") == SOCIAL_ARENA  # type: ignore[arg-type]


def test_classify_honours_custom_placeholders() -> None:
    assert classify("Misc", "Hindsight Bias", "hindsight", placeholders=["misc"]) == MEMORY_JUNGLE
    assert classify("Misc", "Hindsight Bias", "hindsight", placeholders=[]) == "Misc"


def test_is_placeholder_ignores_surrounding_whitespace() -> None:
    assert is_placeholder("  COGNITIVE bias  ")
    assert not is_placeholder("Memory Jungle")


def test_lookup_category_returns_unknown_for_unrecognised_labels() -> None:
    info = lookup_category("Custom Zone")
    assert not info.is_known
    assert info.color == NEUTRAL_COLOR
    assert lookup_category(MEMORY_JUNGLE).is_known


def test_category_color_uses_catalogue_and_neutral_fallback() -> None:
    assert category_color(SELF_EGO) == "#2563eb"
    assert category_color(SOCIAL_ARENA) == "#16a34a"
    assert category_color(DECISION_DESERT) == "#f59e0b"
    assert category_color(MEMORY_JUNGLE) == "#ef4444"
    assert category_color(REALITY_RIFT) == "#9333ea"
    assert category_color("Something Else") == NEUTRAL_COLOR
    assert category_color(None) == NEUTRAL_COLOR


def test_slug_to_category_round_trips_catalogue() -> None:
    for category in CATEGORIES:
        assert slug_to_category(category.slug) == category.key
    assert slug_to_category(" Social-Arena ") == SOCIAL_ARENA
    assert slug_to_category("unknown-zone") is None
    assert slug_to_category(None) is None


def test_category_legend_lists_catalogue_in_order() -> None:
    legend = category_legend()
    assert [entry["key"] for entry in legend] == [category.key for category in CATEGORIES]
    assert all(set(entry) == {"key", "slug", "color"} for entry in legend)


def test_decision_keywords_win_over_social_keywords() -> None:
    assert classify("", "Anchoring and Conformity Effect", "anchoring-conformity") == DECISION_DESERT
