"""Bias categories, their accent colours, and keyword-based category inference."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

SELF_EGO = "Self & Ego"
SOCIAL_ARENA = "Social Arena"
DECISION_DESERT = "Decision Desert"
MEMORY_JUNGLE = "Memory Jungle"
REALITY_RIFT = "Reality Rift"

DEFAULT_CATEGORY = DECISION_DESERT
NEUTRAL_COLOR = "#64748b"
DEFAULT_PLACEHOLDERS: Tuple[str, ...] = ("cognitive bias",)


@dataclass(frozen=True)
class CategoryInfo:
    """Display metadata for a single category."""

    key: str
    slug: str
    color: str
    description: str

    @property
    def is_known(self) -> bool:
        return self is not UNKNOWN_CATEGORY


CATEGORIES: Tuple[CategoryInfo, ...] = (
    CategoryInfo(
        key=SELF_EGO,
        slug="self-ego",
        color="#2563eb",
        description="Biases rooted in self-perception, ego, confidence and self-evaluation.",
    ),
    CategoryInfo(
        key=SOCIAL_ARENA,
        slug="social-arena",
        color="#16a34a",
        description="Biases influenced by social dynamics such as conformity, authority, and groups.",
    ),
    CategoryInfo(
        key=DECISION_DESERT,
        slug="decision-desert",
        color="#f59e0b",
        description="Biases affecting judgment and decision-making under risk and uncertainty.",
    ),
    CategoryInfo(
        key=MEMORY_JUNGLE,
        slug="memory-jungle",
        color="#ef4444",
        description="Biases emerging from memory, recall, and the way past events are stored or retrieved.",
    ),
    CategoryInfo(
        key=REALITY_RIFT,
        slug="reality-rift",
        color="#9333ea",
        description="Biases that distort perception of reality, evidence, and beliefs.",
    ),
)

UNKNOWN_CATEGORY = CategoryInfo(
    key="",
    slug="unknown",
    color=NEUTRAL_COLOR,
    description="Category label not recognised; rendered with the neutral colour.",
)

_BY_KEY: Dict[str, CategoryInfo] = {category.key: category for category in CATEGORIES}
_BY_SLUG: Dict[str, CategoryInfo] = {category.slug: category for category in CATEGORIES}

CATEGORY_COLORS: Dict[str, str] = {category.key: category.color for category in CATEGORIES}

DECISION_KEYWORDS: Tuple[str, ...] = (
    "anchoring",
    "frame",
    "framing",
    "loss",
    "endowment",
    "sunk",
    "prospect",
    "planning",
    "status quo",
    "decoy",
    "zero-risk",
    "money illusion",
    "risk",
    "projection",
    "overconfidence",
    "pseudocertainty",
    "estimation",
    "base rate",
    "representativeness",
    "gambler",
    "optimism",
    "choice",
    "decision",
    "cost",
    "value",
    "certainty",
    "ambiguity",
)
SOCIAL_KEYWORDS: Tuple[str, ...] = (
    "bandwagon",
    "groupthink",
    "bystander",
    "herd",
    "authority",
    "false consensus",
    "in-group",
    "out-group",
    "cheerleader",
    "reciprocity",
    "conformity",
    "social",
)
MEMORY_KEYWORDS: Tuple[str, ...] = (
    "availability",
    "hindsight",
    "false memory",
    "recency",
    "primacy",
    "duration",
    "consistency",
    "mere-exposure",
    "spotlight",
    "memory",
    "negativity",
    "end-of-history",
    "context effect",
    "regression to the mean",
)
SELF_KEYWORDS: Tuple[str, ...] = (
    "dunning",
    "self-serving",
    "egocentric",
    "bias blind spot",
    "moral credential",
    "illusion of explanatory depth",
    "ikea effect",
    "overjustification",
)
REALITY_KEYWORDS: Tuple[str, ...] = (
    "confirmation",
    "belief bias",
    "cognitive dissonance",
    "curse of knowledge",
    "illusion",
    "placebo",
    "implicit",
    "illusory",
    "essentialism",
    "salience",
    "contrast",
    "normalization of deviance",
    "information bias",
    "attribute substitution",
)

# Evaluated in order; the first list with a hit decides the category.
KEYWORD_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (DECISION_DESERT, DECISION_KEYWORDS),
    (SOCIAL_ARENA, SOCIAL_KEYWORDS),
    (MEMORY_JUNGLE, MEMORY_KEYWORDS),
    (SELF_EGO, SELF_KEYWORDS),
    (REALITY_RIFT, REALITY_KEYWORDS),
)


def lookup_category(label: Optional[str]) -> CategoryInfo:
    """Return catalogue metadata for ``label`` or :data:`UNKNOWN_CATEGORY`."""

    if not label:
        return UNKNOWN_CATEGORY
    return _BY_KEY.get(label, UNKNOWN_CATEGORY)


def category_color(label: Optional[str]) -> str:
    """Return the accent colour for ``label``, falling back to the neutral colour."""

    return lookup_category(label).color


def slug_to_category(slug: Optional[str]) -> Optional[str]:
    """Translate a URL slug such as ``"social-arena"`` into its category key."""

    if not slug:
        return None
    found = _BY_SLUG.get(slug.strip().lower())
    return found.key if found else None


def category_legend() -> List[Dict[str, str]]:
    """Return legend entries (label and colour) in catalogue order."""

    return [{"key": category.key, "slug": category.slug, "color": category.color} for category in CATEGORIES]


def is_placeholder(declared: Optional[str], placeholders: Iterable[str] = DEFAULT_PLACEHOLDERS) -> bool:
    """Return whether ``declared`` is empty or a generic placeholder term."""

    cleaned = str(declared or "").strip()
    if not cleaned:
        return True
    lowered = cleaned.lower()
    return any(lowered == term.strip().lower() for term in placeholders)


def infer_category(name: Optional[str], identifier: Optional[str]) -> str:
    """Infer a category from the entity name and identifier.

    The haystack ``"<name> <id>"`` is lowercased and matched by substring
    against the keyword lists in :data:`KEYWORD_RULES`. Text matching no list
    lands in :data:`DEFAULT_CATEGORY`.
    """

    haystack = f"{name or ''} {identifier or ''}".lower()
    for category, keywords in KEYWORD_RULES:
        if any(keyword in haystack for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def classify(
    declared: Optional[str],
    name: Optional[str],
    identifier: Optional[str],
    *,
    placeholders: Sequence[str] = DEFAULT_PLACEHOLDERS,
) -> str:
    """Resolve the category label for an entity.

    Args:
        declared: Category supplied by the data set, possibly blank.
        name: Display name of the entity.
        identifier: Entity identifier.
        placeholders: Generic category values that carry no information.

    Returns:
        str: The declared category when meaningful (returned verbatim, without
        validating it against the catalogue), otherwise the inferred one.
    """

    if not is_placeholder(declared, placeholders):
        return str(declared)
    return infer_category(name, identifier)
