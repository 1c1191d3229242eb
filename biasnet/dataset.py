"""Loading and upstream filtering of the bias data set."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from biasnet.categories import DEFAULT_PLACEHOLDERS, classify, slug_to_category
from biasnet.contracts import BiasEntity

LOGGER = logging.getLogger(__name__)

EntityLike = Union[BiasEntity, Mapping[str, Any]]


class DatasetError(RuntimeError):
    """Raised when the bias data set cannot be read."""


def coerce_entity(raw: EntityLike) -> Optional[BiasEntity]:
    """Return ``raw`` as a :class:`BiasEntity` or ``None`` when it is unusable."""

    if isinstance(raw, BiasEntity):
        return raw
    if not isinstance(raw, Mapping):
        LOGGER.warning("Skipping entity record of unexpected type %s", type(raw).__name__)
        return None
    try:
        return BiasEntity.model_validate(dict(raw))
    except ValidationError as exc:
        LOGGER.warning("Skipping invalid entity record %r: %s", raw.get("id"), exc.errors()[0]["msg"])
        return None


def coerce_entities(records: Iterable[EntityLike]) -> List[BiasEntity]:
    """Validate a batch of records, dropping the ones that cannot be used."""

    entities: List[BiasEntity] = []
    for record in records:
        entity = coerce_entity(record)
        if entity is not None:
            entities.append(entity)
    return entities


def read_records(path: Path) -> List[Any]:
    """Read the raw JSON list stored at ``path``.

    Raises:
        DatasetError: If the file is missing, not JSON, or not a JSON list.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        LOGGER.error("Bias data set missing at %s", path)
        raise DatasetError(f"Data set not found: {path}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        LOGGER.error("Invalid JSON in bias data set %s", path)
        raise DatasetError(f"Invalid JSON in data set: {path}") from exc
    if not isinstance(data, list):
        LOGGER.error("Bias data set root must be a list: %s", path)
        raise DatasetError("Data set root must be a list")
    return data


def load_entities(path: Path) -> List[BiasEntity]:
    """Load and validate the bias data set stored at ``path``."""

    records = read_records(path)
    entities = coerce_entities(records)
    LOGGER.info("Loaded %d bias entities from %s (%d skipped)", len(entities), path, len(records) - len(entities))
    return entities


def filter_by_category(
    entities: Sequence[BiasEntity],
    category: str,
    *,
    placeholders: Sequence[str] = DEFAULT_PLACEHOLDERS,
) -> List[BiasEntity]:
    """Return the entities that resolve to ``category``.

    ``category`` may be either a category key (``"Social Arena"``) or its slug
    (``"social-arena"``). Entities without a meaningful declared category are
    matched on their inferred category.
    """

    key = slug_to_category(category) or category
    return [
        entity
        for entity in entities
        if classify(entity.category, entity.name, entity.id, placeholders=placeholders) == key
    ]


def index_entities(entities: Iterable[BiasEntity]) -> Dict[str, BiasEntity]:
    """Map entity ids to entities, keeping the first occurrence of each id."""

    index: Dict[str, BiasEntity] = {}
    for entity in entities:
        index.setdefault(entity.id, entity)
    return index
