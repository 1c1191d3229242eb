"""Fill in missing or placeholder categories in the bias data set."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from biasnet.categories import infer_category, is_placeholder
from biasnet.config import ConfigError, load_config
from biasnet.dataset import DatasetError, read_records

LOGGER = logging.getLogger(__name__)


def update_categories(
    records: Sequence[Any],
    placeholders: Sequence[str],
) -> Tuple[List[Any], int]:
    """Return records with inferred categories and the number of records changed.

    Records whose category is meaningful are returned untouched; non-mapping
    records are passed through as they are.
    """

    updated: List[Any] = []
    changed = 0
    for record in records:
        if not isinstance(record, dict) or not is_placeholder(record.get("category"), placeholders):
            updated.append(record)
            continue
        inferred = infer_category(record.get("name"), record.get("id"))
        replacement: Dict[str, Any] = {**record, "category": inferred}
        updated.append(replacement)
        changed += 1
    return updated, changed


def _build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="Path to biases.json. Defaults to dataset.path from config.yaml.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the updated data set here instead of overwriting the input.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many records would change without writing anything.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for command-line execution."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    args = _build_cli().parse_args(argv)
    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Unable to load configuration: {exc}", file=sys.stderr)
        return 1
    path: Path = args.path or config.resolve_dataset_path()
    try:
        records = read_records(path)
    except DatasetError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    updated, changed = update_categories(records, config.classifier.placeholder_categories)
    if args.dry_run:
        print(f"{changed} of {len(records)} records would be updated")
        return 0
    target: Path = args.output or path
    target.write_text(json.dumps(updated, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    LOGGER.info("Updated categories for %d of %d records in %s", changed, len(records), target)
    return 0


if __name__ == "__main__":
    sys.exit(main())
