"""Hover tooltips and the side-table tracking the live ones."""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

from biasnet.config import TooltipConfig
from biasnet.graph.builder import GraphNode

LOGGER = logging.getLogger(__name__)


@dataclass
class Tooltip:
    """A manually triggered tooltip anchored to a node."""

    node_id: str
    title: str
    body: str
    placement: str = "top"
    theme: str = "light-border"
    visible: bool = False
    destroyed: bool = False

    @property
    def content_html(self) -> str:
        return (
            f"<strong>{html.escape(self.title)}</strong>"
            f"<div class=\"text-slate-600\">{html.escape(self.body)}</div>"
        )

    def show(self) -> None:
        if not self.destroyed:
            self.visible = True

    def destroy(self) -> None:
        self.visible = False
        self.destroyed = True


TooltipFactory = Callable[[GraphNode, TooltipConfig], Tooltip]


def create_tooltip(node: GraphNode, config: TooltipConfig) -> Tooltip:
    """Build the tooltip showing a node's label and summary."""

    return Tooltip(
        node_id=node.id,
        title=node.label,
        body=node.tooltip or "",
        placement=config.placement,
        theme=config.theme,
    )


class TooltipRegistry:
    """Maps node ids to their live tooltip so teardown can reach every one."""

    def __init__(self) -> None:
        self._handles: Dict[str, Tooltip] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handles))

    def get(self, node_id: str) -> Optional[Tooltip]:
        return self._handles.get(node_id)

    def open(self, tooltip: Tooltip) -> Tooltip:
        """Register and show ``tooltip``, destroying any previous one for the same node."""

        self.close(tooltip.node_id)
        self._handles[tooltip.node_id] = tooltip
        tooltip.show()
        return tooltip

    def close(self, node_id: str) -> bool:
        tooltip = self._handles.pop(node_id, None)
        if tooltip is None:
            return False
        tooltip.destroy()
        return True

    def close_all(self) -> int:
        closed = 0
        for node_id in list(self._handles):
            if self.close(node_id):
                closed += 1
        if closed:
            LOGGER.debug("Destroyed %d live tooltips", closed)
        return closed
