"""Tests for the category backfill utility."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts.update_categories import main, update_categories


@pytest.fixture()
def sample_dataset(tmp_path: Path) -> Path:
    """Create a small data set mixing declared and placeholder categories."""

    records = [
        {"id": "groupthink", "name": "Groupthink", "category": "Social Arena"},
        {"id": "hindsight-bias", "name": "Hindsight Bias", "category": "cognitive bias"},
        {"id": "sunk-cost", "name": "Sunk Cost Fallacy", "category": ""},
        {"id": "zeigarnik", "name": "Zeigarnik Effect"},
        "not a record",
    ]
    path = tmp_path / "biases.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def test_update_categories_fills_placeholders_only() -> None:
    records = [
        {"id": "groupthink", "name": "Groupthink", "category": "Social Arena"},
        {"id": "hindsight-bias", "name": "Hindsight Bias", "category": "Cognitive Bias"},
        {"id": "zeigarnik", "name": "Zeigarnik Effect", "category": None},
    ]

    updated, changed = update_categories(records, ["cognitive bias"])

    assert changed == 2
    assert [record["category"] for record in updated] == ["Social Arena", "Memory Jungle", "Decision Desert"]
    assert updated[0] is records[0]
    assert records[1]["category"] == "Cognitive Bias"


def test_update_categories_passes_non_records_through() -> None:
    updated, changed = update_categories([42, None], ["cognitive bias"])
    assert updated == [42, None]
    assert changed == 0


def test_main_rewrites_dataset_in_place(sample_dataset: Path) -> None:
    assert main([str(sample_dataset)]) == 0

    records = json.loads(sample_dataset.read_text(encoding="utf-8"))
    categories = [record["category"] for record in records if isinstance(record, dict)]
    assert categories == ["Social Arena", "Memory Jungle", "Decision Desert", "Decision Desert"]
    assert records[-1] == "not a record"


def test_main_writes_to_separate_output(sample_dataset: Path, tmp_path: Path) -> None:
    output = tmp_path / "updated.json"
    original = sample_dataset.read_text(encoding="utf-8")

    assert main([str(sample_dataset), "--output", str(output)]) == 0

    assert sample_dataset.read_text(encoding="utf-8") == original
    assert output.read_text(encoding="utf-8").endswith("]\n")


def test_main_dry_run_reports_without_writing(
    sample_dataset: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    original = sample_dataset.read_text(encoding="utf-8")

    assert main([str(sample_dataset), "--dry-run"]) == 0

    assert "3 of 5 records would be updated" in capsys.readouterr().out
    assert sample_dataset.read_text(encoding="utf-8") == original


def test_main_reports_missing_dataset(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "absent.json")]) == 1
    assert "not found" in capsys.readouterr().err
