from __future__ import annotations

import pytest
from pydantic import ValidationError

from biasnet.contracts import BiasEntity


def test_bias_entity_accepts_full_record() -> None:
    entity = BiasEntity.model_validate(
        {
            "id": "groupthink",
            "name": "Groupthink",
            "category": "Social Arena",
            "funny_summary": "Twelve smart people, one terrible plan.",
            "related": ["bandwagon-effect"],
            "description": "Harmony over good decisions.",
            "year": 1972,
            "discoverer": "Irving Janis",
            "sources": [{"title": "Victims of Groupthink", "url": "https://example.org"}],
            "location": {"place": "New Haven", "coords": [41.3, -72.9]},
        }
    )

    assert entity.related == ("bandwagon-effect",)
    assert entity.year == 1972
    assert entity.sources[0].title == "Victims of Groupthink"
    assert entity.location is not None
    assert entity.location.coords == (41.3, -72.9)


def test_bias_entity_requires_identifier() -> None:
    with pytest.raises(ValidationError):
        BiasEntity.model_validate({"name": "Nameless"})
    with pytest.raises(ValidationError):
        BiasEntity.model_validate({"id": "   "})


def test_bias_entity_coerces_numeric_identifier() -> None:
    assert BiasEntity.model_validate({"id": 42}).id == "42"


def test_bias_entity_tolerates_malformed_related() -> None:
    assert BiasEntity.model_validate({"id": "a", "related": "b"}).related == ()
    assert BiasEntity.model_validate({"id": "a", "related": None}).related == ()
    entity = BiasEntity.model_validate({"id": "a", "related": ["b", None, {"id": "c"}, 7]})
    assert entity.related == ("b", "7")


def test_bias_entity_normalises_optional_text() -> None:
    entity = BiasEntity.model_validate({"id": "a", "name": None, "funny_summary": None, "category": None})
    assert entity.name == ""
    assert entity.funny_summary == ""
    assert entity.category == ""


def test_bias_entity_drops_unusable_detail_fields() -> None:
    entity = BiasEntity.model_validate(
        {
            "id": "a",
            "year": "unknown",
            "sources": "not a list",
            "location": {"place": "Nowhere", "coords": [1.0]},
            "unexpected": True,
        }
    )
    assert entity.year is None
    assert entity.sources == ()
    assert entity.location is not None
    assert entity.location.coords is None


def test_bias_entity_is_immutable() -> None:
    entity = BiasEntity(id="a")
    with pytest.raises(ValidationError):
        entity.name = "changed"  # type: ignore[misc]


def test_bias_entity_degrades_malformed_detail_fields() -> None:
    entity = BiasEntity.model_validate(
        {
            "id": "a",
            "discoverer": 1974,
            "name_origin": {"lang": "en"},
            "image": ["a.png"],
            "sources": [{"title": None}, {"title": 3, "url": "https://x"}, {"title": "Paper", "url": "https://y"}],
            "location": {"place": None, "coords": ["n/a", "n/a"]},
        }
    )

    assert entity.discoverer == "1974"
    assert entity.name_origin is None
    assert entity.image is None
    assert [(source.title, source.url) for source in entity.sources] == [("", ""), ("Paper", "https://y")]
    assert entity.location is not None
    assert entity.location.place == ""
    assert entity.location.coords is None


def test_bias_entity_rejects_boolean_coordinates() -> None:
    entity = BiasEntity.model_validate({"id": "a", "location": {"coords": [True, 2.0]}})
    assert entity.location is not None
    assert entity.location.coords is None


def test_bias_entity_strips_related_like_identifier() -> None:
    entity = BiasEntity.model_validate({"id": " a ", "related": [" b ", "  ", "c"]})
    assert entity.id == "a"
    assert entity.related == ("b", "c")
