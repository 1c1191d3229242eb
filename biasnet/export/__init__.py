"""Standalone HTML export of the bias network."""

from biasnet.export.viewer import (
    VISUALIZATION_NODE_LIMIT,
    build_viewer_payload,
    render_graph_html,
)

__all__ = [
    "VISUALIZATION_NODE_LIMIT",
    "build_viewer_payload",
    "render_graph_html",
]
