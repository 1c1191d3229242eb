"""Export the bias network as a standalone interactive HTML page."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from biasnet.categories import slug_to_category
from biasnet.config import AppConfig, ConfigError, load_config
from biasnet.contracts import BiasEntity
from biasnet.dataset import DatasetError, filter_by_category, load_entities
from biasnet.export.viewer import render_graph_html
from biasnet.graph.builder import build_elements
from biasnet.graph.layout import compute_force_layout
from biasnet.ui.style import build_stylesheet

LOGGER = logging.getLogger(__name__)


def export_graph(
    entities: List[BiasEntity],
    config: AppConfig,
    *,
    selected_id: Optional[str] = None,
    title: Optional[str] = None,
) -> str:
    """Build, lay out and render ``entities`` into an HTML document."""

    elements = build_elements(entities, placeholders=config.classifier.placeholder_categories)
    layout = compute_force_layout([node.id for node in elements.nodes], elements.edge_pairs(), config.layout)
    return render_graph_html(
        elements,
        layout.positions,
        stylesheet=build_stylesheet(config.style),
        camera=config.camera,
        tooltip=config.tooltip,
        title=title or config.export.title,
        padding=config.layout.padding,
        selected_id=selected_id,
        visualization_limit=config.export.visualization_limit,
    )


def _build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("output", type=Path, help="Destination HTML file.")
    parser.add_argument(
        "--data",
        type=Path,
        help="Path to biases.json. Defaults to dataset.path from config.yaml.",
    )
    parser.add_argument("--category", help="Only include biases of this category (slug such as 'social-arena').")
    parser.add_argument("--selected", help="Bias id to preselect when the page opens.")
    parser.add_argument("--config", type=Path, help="Alternative config.yaml.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for command-line execution."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    args = _build_cli().parse_args(argv)
    try:
        config = load_config(args.config) if args.config else load_config()
    except ConfigError as exc:
        print(f"Unable to load configuration: {exc}", file=sys.stderr)
        return 1
    data_path: Path = args.data or config.resolve_dataset_path()
    try:
        entities = load_entities(data_path)
    except DatasetError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    title = None
    if args.category:
        category = slug_to_category(args.category)
        if category is None:
            print(f"Unknown category slug: {args.category}", file=sys.stderr)
            return 2
        entities = filter_by_category(
            entities, category, placeholders=config.classifier.placeholder_categories
        )
        title = f"{category} | {config.export.title}"

    document = export_graph(entities, config, selected_id=args.selected, title=title)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(document, encoding="utf-8")
    LOGGER.info("Wrote %d biases to %s", len(entities), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
