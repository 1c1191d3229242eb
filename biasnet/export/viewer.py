"""Render a self-contained interactive HTML page for the bias network."""

from __future__ import annotations

import html
import json
import logging
from typing import Dict, Final, List, Mapping, Optional, Tuple

from biasnet.categories import category_legend
from biasnet.config import CameraConfig, TooltipConfig
from biasnet.graph.builder import GraphElements
from biasnet.ui.style import Stylesheet

LOGGER = logging.getLogger(__name__)

VISUALIZATION_NODE_LIMIT: Final[int] = 200


def _escape_script_value(value: str) -> str:
    """Escape a JSON string so it is safe for inline ``<script>`` embedding.

    Args:
        value: Raw JSON string produced by ``json.dumps``.

    Returns:
        The escaped string that will not prematurely close the surrounding script
        tag and preserves line separator characters.
    """

    return (
        value.replace("</", "<\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _normalise_limit(value: object) -> int:
    try:
        candidate = int(value) if value is not None else VISUALIZATION_NODE_LIMIT  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return VISUALIZATION_NODE_LIMIT
    return candidate if candidate > 0 else VISUALIZATION_NODE_LIMIT


def build_viewer_payload(
    elements: GraphElements,
    positions: Mapping[str, Tuple[float, float]],
    *,
    stylesheet: Stylesheet,
    camera: CameraConfig,
    tooltip: TooltipConfig,
    padding: float = 30.0,
    selected_id: Optional[str] = None,
    visualization_limit: object = VISUALIZATION_NODE_LIMIT,
) -> Dict[str, object]:
    """Assemble the JSON payload consumed by the inline viewer script."""

    limit = _normalise_limit(visualization_limit)
    kept = elements.nodes[:limit]
    kept_ids = {node.id for node in kept}
    nodes: List[Dict[str, object]] = []
    for node in kept:
        x, y = positions.get(node.id, (0.0, 0.0))
        nodes.append(
            {
                "id": node.id,
                "label": node.label,
                "category": node.category,
                "color": node.color,
                "tooltip": node.tooltip,
                "x": round(float(x), 3),
                "y": round(float(y), 3),
            }
        )
    edges = [
        {"id": edge.id, "source": edge.source, "target": edge.target}
        for edge in elements.edges
        if edge.source in kept_ids and edge.target in kept_ids
    ]
    if len(kept) < elements.node_count:
        LOGGER.info("Viewer payload truncated to %d of %d nodes", len(kept), elements.node_count)
    return {
        "nodes": nodes,
        "edges": edges,
        "node_count": len(nodes),
        "edge_count": len(edges),
        "truncated": len(kept) < elements.node_count,
        "visualization_limit": limit,
        "styles": stylesheet.to_payload(),
        "camera": {
            "min_zoom": camera.min_zoom,
            "max_zoom": camera.max_zoom,
            "duration_ms": camera.duration_ms,
            "surface_min_zoom": camera.surface_min_zoom,
            "surface_max_zoom": camera.surface_max_zoom,
        },
        "tooltip": {"placement": tooltip.placement, "theme": tooltip.theme},
        "padding": padding,
        "selected_id": selected_id if selected_id in kept_ids else None,
        "legend": category_legend(),
    }


def render_graph_html(
    elements: GraphElements,
    positions: Mapping[str, Tuple[float, float]],
    *,
    stylesheet: Stylesheet,
    camera: CameraConfig,
    tooltip: TooltipConfig,
    title: str = "Cognitive Bias Network",
    padding: float = 30.0,
    selected_id: Optional[str] = None,
    visualization_limit: object = VISUALIZATION_NODE_LIMIT,
) -> str:
    """Render an interactive HTML page for a laid-out bias graph.

    The page draws the graph on a canvas and reproduces the hover, node tap,
    edge tap and background tap behaviour of the interactive view, including
    animated style transitions and a clamped camera focus.
    """

    payload_data = build_viewer_payload(
        elements,
        positions,
        stylesheet=stylesheet,
        camera=camera,
        tooltip=tooltip,
        padding=padding,
        selected_id=selected_id,
        visualization_limit=visualization_limit,
    )
    payload = _escape_script_value(json.dumps(payload_data, separators=(",", ":"), ensure_ascii=False))
    legend_items = "\n          ".join(
        f"<li><span class=\"swatch\" style=\"background:{html.escape(item['color'])}\"></span>"
        f"{html.escape(item['key'])}</li>"
        for item in payload_data["legend"]  # type: ignore[union-attr]
    )
    return (
        _HTML_TEMPLATE.replace("__TITLE__", html.escape(title))
        .replace("__LEGEND_ITEMS__", legend_items)
        .replace("__GRAPH_DATA__", payload)
    )


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta http-equiv="Content-Security-Policy" content="default-src 'none'; script-src 'unsafe-inline'; style-src 'unsafe-inline'; img-src data:;" />
    <title>__TITLE__</title>
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <style>
      body {
        margin: 0;
        font-family: "Inter", system-ui, -apple-system, "Segoe UI", sans-serif;
        color: #0f172a;
        background: #f8fafc;
        min-height: 100vh;
        display: flex;
        flex-direction: column;
      }
      header {
        padding: 1rem 1.5rem;
        border-bottom: 1px solid #e2e8f0;
        background: #ffffff;
      }
      header h1 {
        margin: 0;
        font-size: 1.25rem;
        font-weight: 600;
      }
      main {
        flex: 1;
        display: flex;
        gap: 1rem;
        padding: 1rem;
      }
      #graph {
        position: relative;
        flex: 1;
        min-height: 60vh;
        border: 1px solid #e2e8f0;
        border-radius: 0.75rem;
        background: #ffffff;
        overflow: hidden;
      }
      #graph canvas {
        display: block;
        width: 100%;
        height: 100%;
      }
      #tooltip {
        position: absolute;
        pointer-events: none;
        max-width: 240px;
        padding: 0.4rem 0.6rem;
        font-size: 0.8rem;
        background: #ffffff;
        border: 1px solid #cbd5e1;
        border-radius: 0.4rem;
        box-shadow: 0 4px 12px rgba(15, 23, 42, 0.12);
        transform: translate(-50%, -100%);
        display: none;
      }
      #tooltip .summary {
        color: #475569;
      }
      #selection {
        width: 320px;
        font-size: 0.875rem;
        border: 1px solid #e2e8f0;
        border-radius: 0.75rem;
        background: #ffffff;
        padding: 1rem;
      }
      footer {
        padding: 0.75rem 1.5rem;
        border-top: 1px solid #e2e8f0;
        font-size: 0.8rem;
        color: #64748b;
      }
      footer ul {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        list-style: none;
        margin: 0;
        padding: 0;
      }
      .swatch {
        display: inline-block;
        width: 0.5rem;
        height: 0.5rem;
        border-radius: 9999px;
        margin-right: 0.3rem;
      }
    </style>
  </head>
  <body>
    <header><h1>__TITLE__</h1></header>
    <main>
      <section id="graph"><div id="tooltip" role="tooltip"></div></section>
      <aside id="selection" aria-live="polite">Select a bias from the network to see details here.</aside>
    </main>
    <footer>
      <ul>
          __LEGEND_ITEMS__
      </ul>
    </footer>
    <script>
      const GRAPH_DATA = __GRAPH_DATA__;
    </script>
    <script>
      (function () {
        const data = GRAPH_DATA;
        const container = document.getElementById("graph");
        const tooltipEl = document.getElementById("tooltip");
        const selectionEl = document.getElementById("selection");
        const canvas = document.createElement("canvas");
        container.appendChild(canvas);
        const ctx = canvas.getContext("2d");
        const ratio = window.devicePixelRatio || 1;
        const NODE_TAGS = ["hovered", "selected", "neighbor", "dimmed"];
        const EDGE_TAGS = ["edge-highlight", "dimmed"];
        const NUMERIC = ["width", "height", "border-width", "opacity"];
        const EDGE_PICK_DISTANCE = 6;

        const nodes = data.nodes;
        const edges = data.edges;
        const nodeById = new Map(nodes.map((node) => [node.id, node]));
        const incident = new Map(nodes.map((node) => [node.id, []]));
        edges.forEach((edge) => {
          incident.get(edge.source).push(edge);
          incident.get(edge.target).push(edge);
        });

        const tags = new Map();
        const visuals = new Map();
        let camera = { zoom: 1, panX: 0, panY: 0 };
        let cameraAnimation = null;
        let hoveredId = null;
        let frameHandle = null;

        function easeInOut(t) {
          return 0.5 - Math.cos(Math.PI * t) / 2;
        }

        function clamp(value, lower, upper) {
          return Math.max(lower, Math.min(upper, value));
        }

        function tagsOf(id) {
          if (!tags.has(id)) {
            tags.set(id, new Set());
          }
          return tags.get(id);
        }

        function resolveStyle(kind, element) {
          const active = tags.get(element.id) || new Set();
          const style = {};
          data.styles.forEach((rule) => {
            const parts = rule.selector.split(".");
            if (parts[0] !== kind) {
              return;
            }
            if (parts.length > 1 && !active.has(parts[1])) {
              return;
            }
            Object.assign(style, rule.style);
          });
          if (style["background-color"] === "data(color)") {
            style["background-color"] = element.color;
          }
          return style;
        }

        function sampleVisual(visual, now) {
          const duration = visual.to["transition-duration"] || 0;
          const t = duration > 0 ? clamp((now - visual.start) / duration, 0, 1) : 1;
          const eased = easeInOut(t);
          const current = Object.assign({}, visual.to);
          NUMERIC.forEach((key) => {
            if (typeof visual.from[key] === "number" && typeof visual.to[key] === "number") {
              current[key] = visual.from[key] + (visual.to[key] - visual.from[key]) * eased;
            }
          });
          return current;
        }

        function restyle(kind, element, now) {
          const target = resolveStyle(kind, element);
          const visual = visuals.get(element.id);
          if (!visual) {
            visuals.set(element.id, { from: target, to: target, start: now });
            return;
          }
          visual.from = sampleVisual(visual, now);
          visual.to = target;
          visual.start = now;
        }

        function restyleAll() {
          const now = performance.now();
          nodes.forEach((node) => restyle("node", node, now));
          edges.forEach((edge) => restyle("edge", edge, now));
          requestFrame();
        }

        function viewportSize() {
          return { width: canvas.width / ratio, height: canvas.height / ratio };
        }

        function centredOn(node, zoom) {
          const size = viewportSize();
          return { zoom: zoom, panX: size.width / 2 - node.x * zoom, panY: size.height / 2 - node.y * zoom };
        }

        function fit() {
          cameraAnimation = null;
          if (!nodes.length) {
            return;
          }
          const xs = nodes.map((node) => node.x);
          const ys = nodes.map((node) => node.y);
          const minX = Math.min.apply(null, xs);
          const maxX = Math.max.apply(null, xs);
          const minY = Math.min.apply(null, ys);
          const maxY = Math.max.apply(null, ys);
          const size = viewportSize();
          const usableWidth = Math.max(size.width - 2 * data.padding, 1);
          const usableHeight = Math.max(size.height - 2 * data.padding, 1);
          const candidates = [];
          if (maxX > minX) candidates.push(usableWidth / (maxX - minX));
          if (maxY > minY) candidates.push(usableHeight / (maxY - minY));
          const zoom = clamp(
            candidates.length ? Math.min.apply(null, candidates) : 1,
            data.camera.surface_min_zoom,
            data.camera.surface_max_zoom
          );
          camera = centredOn({ x: (minX + maxX) / 2, y: (minY + maxY) / 2 }, zoom);
        }

        function animateTo(node) {
          const zoom = clamp(camera.zoom, data.camera.min_zoom, data.camera.max_zoom);
          cameraAnimation = {
            from: camera,
            to: centredOn(node, zoom),
            start: performance.now(),
            duration: data.camera.duration_ms,
          };
          requestFrame();
        }

        function stepCamera(now) {
          if (!cameraAnimation) {
            return false;
          }
          const animation = cameraAnimation;
          const t = animation.duration > 0 ? clamp((now - animation.start) / animation.duration, 0, 1) : 1;
          const eased = easeInOut(t);
          camera = {
            zoom: animation.from.zoom + (animation.to.zoom - animation.from.zoom) * eased,
            panX: animation.from.panX + (animation.to.panX - animation.from.panX) * eased,
            panY: animation.from.panY + (animation.to.panY - animation.from.panY) * eased,
          };
          if (t >= 1) {
            cameraAnimation = null;
            return false;
          }
          return true;
        }

        function project(node) {
          return { x: node.x * camera.zoom + camera.panX, y: node.y * camera.zoom + camera.panY };
        }

        function hideTooltip() {
          tooltipEl.style.display = "none";
          tooltipEl.textContent = "";
        }

        function showTooltip(node) {
          tooltipEl.textContent = "";
          const title = document.createElement("strong");
          title.textContent = node.label;
          const summary = document.createElement("div");
          summary.className = "summary";
          summary.textContent = node.tooltip || "";
          tooltipEl.appendChild(title);
          tooltipEl.appendChild(summary);
          positionTooltip(node);
          tooltipEl.style.display = "block";
        }

        function positionTooltip(node) {
          const point = project(node);
          const visual = visuals.get(node.id);
          const radius = visual ? visual.to.height / 2 : 13;
          tooltipEl.style.left = point.x + "px";
          tooltipEl.style.top = point.y - radius * camera.zoom - 6 + "px";
        }

        function fullReset() {
          hideTooltip();
          hoveredId = null;
          nodes.forEach((node) => NODE_TAGS.forEach((tag) => tagsOf(node.id).delete(tag)));
          edges.forEach((edge) => EDGE_TAGS.forEach((tag) => tagsOf(edge.id).delete(tag)));
        }

        function dimRest(activeNodes, activeEdges) {
          nodes.forEach((node) => {
            if (!activeNodes.has(node.id)) tagsOf(node.id).add("dimmed");
          });
          edges.forEach((edge) => {
            if (!activeEdges.has(edge.id)) tagsOf(edge.id).add("dimmed");
          });
        }

        function highlightNode(node) {
          fullReset();
          const activeNodes = new Set([node.id]);
          const activeEdges = new Set();
          tagsOf(node.id).add("selected");
          incident.get(node.id).forEach((edge) => {
            activeEdges.add(edge.id);
            tagsOf(edge.id).add("edge-highlight");
            const other = edge.source === node.id ? edge.target : edge.source;
            if (other !== node.id) {
              activeNodes.add(other);
              tagsOf(other).add("neighbor");
            }
          });
          dimRest(activeNodes, activeEdges);
          restyleAll();
        }

        function showSelection(node) {
          selectionEl.textContent = "";
          const heading = document.createElement("h2");
          heading.textContent = node.label;
          const category = document.createElement("p");
          category.textContent = node.category;
          const summary = document.createElement("p");
          summary.textContent = node.tooltip || "";
          selectionEl.appendChild(heading);
          selectionEl.appendChild(category);
          selectionEl.appendChild(summary);
        }

        function clearSelectionPanel() {
          selectionEl.textContent = "Select a bias from the network to see details here.";
        }

        function tapNode(node) {
          highlightNode(node);
          animateTo(node);
          showSelection(node);
        }

        function tapEdge(edge) {
          fullReset();
          tagsOf(edge.id).add("edge-highlight");
          tagsOf(edge.source).add("neighbor");
          tagsOf(edge.target).add("neighbor");
          dimRest(new Set([edge.source, edge.target]), new Set([edge.id]));
          restyleAll();
          clearSelectionPanel();
        }

        function tapBackground() {
          fullReset();
          restyleAll();
          clearSelectionPanel();
        }

        function pickNode(px, py) {
          for (let index = nodes.length - 1; index >= 0; index -= 1) {
            const node = nodes[index];
            const point = project(node);
            const visual = visuals.get(node.id);
            const radius = ((visual ? visual.to.width : 26) / 2) * camera.zoom;
            if (Math.hypot(px - point.x, py - point.y) <= radius) {
              return node;
            }
          }
          return null;
        }

        function distanceToSegment(px, py, a, b) {
          const dx = b.x - a.x;
          const dy = b.y - a.y;
          const lengthSq = dx * dx + dy * dy;
          const t = lengthSq ? clamp(((px - a.x) * dx + (py - a.y) * dy) / lengthSq, 0, 1) : 0;
          return Math.hypot(px - (a.x + t * dx), py - (a.y + t * dy));
        }

        function pickEdge(px, py) {
          for (const edge of edges) {
            const a = project(nodeById.get(edge.source));
            const b = project(nodeById.get(edge.target));
            if (distanceToSegment(px, py, a, b) <= EDGE_PICK_DISTANCE) {
              return edge;
            }
          }
          return null;
        }

        function localPoint(event) {
          const rect = canvas.getBoundingClientRect();
          return { x: event.clientX - rect.left, y: event.clientY - rect.top };
        }

        function draw(now) {
          const size = viewportSize();
          ctx.setTransform(ratio, 0, 0, ratio, 0, 0);
          ctx.clearRect(0, 0, size.width, size.height);
          let transitioning = false;
          edges.forEach((edge) => {
            const visual = visuals.get(edge.id);
            const style = sampleVisual(visual, now);
            transitioning = transitioning || now - visual.start < (visual.to["transition-duration"] || 0);
            const a = project(nodeById.get(edge.source));
            const b = project(nodeById.get(edge.target));
            ctx.globalAlpha = style.opacity;
            ctx.strokeStyle = style["line-color"];
            ctx.lineWidth = style.width;
            ctx.beginPath();
            ctx.moveTo(a.x, a.y);
            ctx.lineTo(b.x, b.y);
            ctx.stroke();
          });
          nodes.forEach((node) => {
            const visual = visuals.get(node.id);
            const style = sampleVisual(visual, now);
            transitioning = transitioning || now - visual.start < (visual.to["transition-duration"] || 0);
            const point = project(node);
            const radius = (style.width / 2) * camera.zoom;
            ctx.globalAlpha = style.opacity;
            ctx.fillStyle = style["background-color"];
            ctx.beginPath();
            ctx.arc(point.x, point.y, radius, 0, Math.PI * 2);
            ctx.fill();
            ctx.lineWidth = style["border-width"];
            ctx.strokeStyle = style["border-color"];
            ctx.stroke();
            ctx.fillStyle = style.color;
            ctx.font = style["font-size"] + "px sans-serif";
            ctx.textAlign = "center";
            ctx.textBaseline = "middle";
            ctx.fillText(node.label, point.x, point.y);
          });
          ctx.globalAlpha = 1;
          return transitioning;
        }

        function frame(now) {
          frameHandle = null;
          const moving = stepCamera(now);
          const transitioning = draw(now);
          if (hoveredId && nodeById.has(hoveredId)) {
            positionTooltip(nodeById.get(hoveredId));
          }
          if (moving || transitioning) {
            requestFrame();
          }
        }

        function requestFrame() {
          if (frameHandle === null) {
            frameHandle = window.requestAnimationFrame(frame);
          }
        }

        function resizeCanvas() {
          const rect = container.getBoundingClientRect();
          canvas.width = Math.max(rect.width, 1) * ratio;
          canvas.height = Math.max(rect.height, 1) * ratio;
          fit();
          requestFrame();
        }

        canvas.addEventListener("pointermove", (event) => {
          const point = localPoint(event);
          const node = pickNode(point.x, point.y);
          const nextId = node ? node.id : null;
          if (nextId === hoveredId) {
            return;
          }
          if (hoveredId) {
            tagsOf(hoveredId).delete("hovered");
            hideTooltip();
          }
          hoveredId = nextId;
          if (node) {
            tagsOf(node.id).add("hovered");
            showTooltip(node);
          }
          canvas.style.cursor = node ? "pointer" : "default";
          restyleAll();
        });

        canvas.addEventListener("pointerleave", () => {
          if (hoveredId) {
            tagsOf(hoveredId).delete("hovered");
            hoveredId = null;
            hideTooltip();
            restyleAll();
          }
        });

        canvas.addEventListener("click", (event) => {
          const point = localPoint(event);
          const node = pickNode(point.x, point.y);
          if (node) {
            tapNode(node);
            return;
          }
          const edge = pickEdge(point.x, point.y);
          if (edge) {
            tapEdge(edge);
            return;
          }
          tapBackground();
        });

        window.addEventListener("resize", resizeCanvas);
        window.addEventListener("pagehide", () => {
          if (frameHandle !== null) {
            window.cancelAnimationFrame(frameHandle);
            frameHandle = null;
          }
          cameraAnimation = null;
          hideTooltip();
        });

        resizeCanvas();
        restyleAll();
        if (data.selected_id && nodeById.has(data.selected_id)) {
          const selected = nodeById.get(data.selected_id);
          highlightNode(selected);
          camera = centredOn(selected, camera.zoom);
          showSelection(selected);
        }
      })();
    </script>
  </body>
</html>
"""
