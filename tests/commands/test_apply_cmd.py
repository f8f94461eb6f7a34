"""Tests for the apply command (JSON intent batches)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from quotectl.cli import cli

EDITS: list[dict[str, Any]] = [
    {"kind": "add_item", "item": {"id": "tmp-lot1", "type": "chapter", "designation": "Lot 1"}},
    {
        "kind": "add_item",
        "item": {
            "type": "work",
            "designation": "Béton",
            "parent_id": "tmp-lot1",
            "quantity": 2,
            "unit_price": 50,
        },
    },
    {"kind": "apply_discount", "mode": "percentage", "value": 10},
]


@pytest.mark.usefixtures("_isolated_workspace")
class TestApplyCommand:
    def test_apply_file(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        cli_runner.invoke(cli, ["new"])
        edits = workspace_root / "edits.json"
        edits.write_text(json.dumps(EDITS), encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "apply", "QT-0001", str(edits)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        assert data["applied"] == 3
        assert data["id_map"]["tmp-lot1"] == "ITM-0001"
        assert data["item_ids"] == ["ITM-0001", "ITM-0002", "ITM-0003"]
        assert data["totals"]["total_ht"] == "90.00"

    def test_apply_stdin(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        result = cli_runner.invoke(
            cli, ["-q", "apply", "QT-0001", "-"], input=json.dumps(EDITS[0])
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "ITM-0001"

    def test_all_or_nothing(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        batch = [EDITS[0], {"kind": "remove_item", "item_id": "ITM-0404"}]
        result = cli_runner.invoke(cli, ["apply", "QT-0001", "-"], input=json.dumps(batch))
        assert result.exit_code == 1
        assert "Intent 1 (remove_item)" in result.stderr
        shown = json.loads(cli_runner.invoke(cli, ["--json", "show", "QT-0001"]).stdout)
        assert shown["data"]["items"] == []

    def test_invalid_json(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        result = cli_runner.invoke(cli, ["apply", "QT-0001", "-"], input="[oops")
        assert result.exit_code == 1
        assert "Invalid JSON" in result.stderr

    def test_invalid_intent(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        result = cli_runner.invoke(
            cli, ["apply", "QT-0001", "-"], input=json.dumps([{"kind": "explode"}])
        )
        assert result.exit_code == 1
        assert "Invalid intent" in result.stderr
