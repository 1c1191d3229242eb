"""Immutable data contracts for bias entity records."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOGGER = logging.getLogger(__name__)


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class BiasSource(_FrozenBaseModel):
    """Reference material cited for a bias."""

    title: str = ""
    url: str = ""


class BiasLocation(_FrozenBaseModel):
    """Place associated with the discovery of a bias."""

    place: str = ""
    coords: Optional[Tuple[float, float]] = None


class BiasEntity(_FrozenBaseModel):
    """A single cognitive bias as shipped in the JSON data set.

    Only ``id`` is required. The remaining fields are coerced leniently so
    that a sloppy record still renders: ``related`` that is not a list becomes
    empty, ``None`` text becomes ``""``, numeric ids become strings.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""
    funny_summary: str = ""
    related: Tuple[str, ...] = ()
    description: str = ""
    year: Optional[int] = None
    discoverer: Optional[str] = None
    name_origin: Optional[str] = None
    image: Optional[str] = None
    sources: Tuple[BiasSource, ...] = ()
    location: Optional[BiasLocation] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("name", "category", "funny_summary", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("related", mode="before")
    @classmethod
    def _coerce_related(cls, value: Any) -> Tuple[str, ...]:
        """Normalise relation references the same way as ``id``, dropping unusable payloads."""

        if not isinstance(value, (list, tuple)):
            if value is not None:
                LOGGER.warning("Ignoring non-list related payload of type %s", type(value).__name__)
            return ()
        references = (
            str(item).strip()
            for item in value
            if item is not None and not isinstance(item, (bool, dict, list))
        )
        return tuple(reference for reference in references if reference)

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> Optional[int]:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None

    @field_validator("discoverer", "name_origin", "image", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        if _is_number(value):
            return str(value)
        return None

    @field_validator("sources", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> List[Dict[str, str]]:
        """Keep source entries whose title and url are text, treating missing values as empty."""

        if not isinstance(value, (list, tuple)):
            return []
        sources: List[Dict[str, str]] = []
        for item in value:
            if not isinstance(item, dict):
                continue
            title = item.get("title")
            url = item.get("url")
            if not all(part is None or isinstance(part, str) for part in (title, url)):
                LOGGER.debug("Dropping source with non-text fields: %r", item)
                continue
            sources.append({"title": title or "", "url": url or ""})
        return sources

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, value: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(value, dict):
            return None
        place = value.get("place")
        coords = value.get("coords")
        if not (isinstance(coords, (list, tuple)) and len(coords) == 2 and all(_is_number(part) for part in coords)):
            coords = None
        return {"place": place if isinstance(place, str) else "", "coords": coords}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
