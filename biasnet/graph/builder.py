"""Transform bias entity records into a deduplicated, undirected node/edge graph."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from biasnet.categories import DEFAULT_PLACEHOLDERS, classify, lookup_category
from biasnet.contracts import BiasEntity
from biasnet.dataset import EntityLike, coerce_entity

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphNode:
    """Node payload handed to the render surface."""

    id: str
    label: str
    category: str
    tooltip: str

    @property
    def color(self) -> str:
        return lookup_category(self.category).color


@dataclass(frozen=True)
class GraphEdge:
    """Undirected edge between two nodes; ``source`` sorts before ``target``."""

    id: str
    source: str
    target: str

    @property
    def endpoints(self) -> Tuple[str, str]:
        return (self.source, self.target)


@dataclass(frozen=True)
class GraphElements:
    """Complete element set for one render cycle."""

    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    _node_index: Dict[str, GraphNode] = field(default_factory=dict, init=False, repr=False, compare=False)
    _edge_index: Dict[str, GraphEdge] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._node_index.update((node.id, node) for node in self.nodes)
        self._edge_index.update((edge.id, edge) for edge in self.edges)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def node(self, node_id: str) -> Optional[GraphNode]:
        return self._node_index.get(node_id)

    def edge(self, edge_id: str) -> Optional[GraphEdge]:
        return self._edge_index.get(edge_id)

    def edge_pairs(self) -> List[Tuple[str, str]]:
        return [edge.endpoints for edge in self.edges]

    def to_payload(self) -> Dict[str, object]:
        """Serialise the element set into JSON-compatible primitives."""

        return {
            "nodes": [
                {
                    "id": node.id,
                    "label": node.label,
                    "category": node.category,
                    "color": node.color,
                    "tooltip": node.tooltip,
                }
                for node in self.nodes
            ],
            "edges": [{"id": edge.id, "source": edge.source, "target": edge.target} for edge in self.edges],
            "node_count": self.node_count,
            "edge_count": self.edge_count,
        }


def canonical_pair(first: str, second: str) -> Tuple[str, str]:
    """Return the endpoints of an undirected relation in sorted order."""

    return (first, second) if first < second else (second, first)


def edge_id_for(first: str, second: str) -> str:
    """Return the deterministic identifier of the edge joining two nodes.

    The lesser endpoint is length-prefixed so that ids containing the
    separator cannot collide: ``("a__b", "c")`` and ``("a", "b__c")`` map to
    ``e_4:a__b__c`` and ``e_1:a__b__c``.
    """

    lesser, greater = canonical_pair(first, second)
    return f"e_{len(lesser)}:{lesser}__{greater}"


def build_elements(
    entities: Iterable[EntityLike],
    *,
    placeholders: Sequence[str] = DEFAULT_PLACEHOLDERS,
) -> GraphElements:
    """Build nodes and deduplicated undirected edges from entity records.

    Args:
        entities: Bias records, either validated models or raw mappings.
        placeholders: Category values treated as "no category declared".

    Returns:
        GraphElements: One node per distinct entity id and one edge per
        unordered pair of related ids that are both present. Relations to
        unknown ids and to the entity itself are dropped.
    """

    records: List[BiasEntity] = []
    for raw in entities:
        entity = coerce_entity(raw)
        if entity is not None:
            records.append(entity)

    nodes: List[GraphNode] = []
    members: Set[str] = set()
    unique: List[BiasEntity] = []
    for entity in records:
        if entity.id in members:
            LOGGER.warning("Duplicate bias id %s ignored", entity.id)
            continue
        members.add(entity.id)
        unique.append(entity)
        nodes.append(
            GraphNode(
                id=entity.id,
                label=entity.name,
                category=classify(entity.category, entity.name, entity.id, placeholders=placeholders),
                tooltip=entity.funny_summary or "",
            )
        )

    seen: Set[Tuple[str, str]] = set()
    edges: List[GraphEdge] = []
    for entity in unique:
        for reference in entity.related:
            target = str(reference)
            if target not in members or target == entity.id:
                continue
            pair = canonical_pair(entity.id, target)
            if pair in seen:
                continue
            seen.add(pair)
            edges.append(GraphEdge(id=edge_id_for(*pair), source=pair[0], target=pair[1]))

    LOGGER.debug("Built graph with %d nodes and %d edges", len(nodes), len(edges))
    return GraphElements(nodes=tuple(nodes), edges=tuple(edges))
