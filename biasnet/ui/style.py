"""Interaction tags and the tag-keyed stylesheet applied to graph elements."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from biasnet.categories import lookup_category
from biasnet.config import StyleConfig


class InteractionTag(str, Enum):
    """Ephemeral visual-state labels carried by nodes and edges."""

    HOVERED = "hovered"
    SELECTED = "selected"
    NEIGHBOR = "neighbor"
    EDGE_HIGHLIGHT = "edge-highlight"
    DIMMED = "dimmed"


NODE_TAGS: Tuple[InteractionTag, ...] = (
    InteractionTag.HOVERED,
    InteractionTag.SELECTED,
    InteractionTag.NEIGHBOR,
    InteractionTag.DIMMED,
)
EDGE_TAGS: Tuple[InteractionTag, ...] = (InteractionTag.EDGE_HIGHLIGHT, InteractionTag.DIMMED)

CATEGORY_COLOR = "data(color)"


@dataclass(frozen=True)
class StyleRule:
    """Style properties applied to elements matching ``selector``.

    Selectors follow the ``"<kind>"`` / ``"<kind>.<tag>"`` convention, e.g.
    ``"node"`` or ``"edge.edge-highlight"``.
    """

    selector: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return self.selector.split(".", 1)[0]

    @property
    def tag(self) -> str:
        parts = self.selector.split(".", 1)
        return parts[1] if len(parts) == 2 else ""

    def matches(self, kind: str, tags: FrozenSet[str]) -> bool:
        if self.kind != kind:
            return False
        return not self.tag or self.tag in tags


@dataclass(frozen=True)
class Stylesheet:
    """Ordered list of rules; later matching rules override earlier ones."""

    rules: Tuple[StyleRule, ...]

    def resolve(self, kind: str, tags: Iterable[str] = (), *, category: str = "") -> Dict[str, Any]:
        """Compute the effective style of an element.

        Args:
            kind: ``"node"`` or ``"edge"``.
            tags: Interaction tags currently carried by the element.
            category: Node category, used to resolve ``data(color)``.

        Returns:
            Dict[str, Any]: Flattened style properties.
        """

        active = frozenset(str(getattr(tag, "value", tag)) for tag in tags)
        resolved: Dict[str, Any] = {}
        for rule in self.rules:
            if rule.matches(kind, active):
                resolved.update(rule.properties)
        if resolved.get("background-color") == CATEGORY_COLOR:
            resolved["background-color"] = lookup_category(category).color
        return resolved

    def to_payload(self) -> List[Dict[str, Any]]:
        return [{"selector": rule.selector, "style": dict(rule.properties)} for rule in self.rules]


def build_stylesheet(config: StyleConfig) -> Stylesheet:
    """Build the graph stylesheet from configuration values."""

    transition = {
        "transition-duration": config.transition_ms,
        "transition-timing-function": config.transition_easing,
    }
    size_bump = config.active_border_width
    return Stylesheet(
        rules=(
            StyleRule(
                "node",
                {
                    "background-color": CATEGORY_COLOR,
                    "label": "data(label)",
                    "color": config.label_color,
                    "font-size": config.font_size_px,
                    "width": config.node_size,
                    "height": config.node_size,
                    "border-width": config.border_width,
                    "border-color": config.border_color,
                    "opacity": 1.0,
                    "transition-property": ("background-color", "width", "height", "border-width", "opacity"),
                    **transition,
                },
            ),
            StyleRule(
                "node.hovered",
                {"width": config.hovered_size, "height": config.hovered_size, "border-width": size_bump},
            ),
            StyleRule(
                "node.selected",
                {"width": config.selected_size, "height": config.selected_size, "border-width": size_bump},
            ),
            StyleRule("node.neighbor", {"opacity": config.neighbor_opacity}),
            StyleRule(
                "edge",
                {
                    "line-color": config.edge_color,
                    "width": config.edge_width,
                    "opacity": config.edge_opacity,
                    "transition-property": ("line-color", "width", "opacity"),
                    **transition,
                },
            ),
            StyleRule(
                "edge.edge-highlight",
                {
                    "line-color": config.edge_highlight_color,
                    "width": config.edge_highlight_width,
                    "opacity": config.edge_highlight_opacity,
                },
            ),
            StyleRule("node.dimmed", {"opacity": config.dimmed_node_opacity}),
            StyleRule("edge.dimmed", {"opacity": config.dimmed_edge_opacity}),
        )
    )
