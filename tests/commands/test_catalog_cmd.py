"""Tests for the catalog command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from quotectl.cli import cli

CATALOG = {
    "works": [{"id": "W-001", "name": "Dalle béton", "unit": "m2", "recommended_price": 95}],
    "labor": [{"id": "L-001", "name": "Maçon", "unit": "h", "unit_price": 60}],
}


@pytest.fixture
def with_catalog(workspace_root: Path) -> None:
    (workspace_root / "catalog.json").write_text(json.dumps(CATALOG), encoding="utf-8")
    (workspace_root / "quotectl.toml").write_text('[catalog]\npath = "catalog.json"\n')


@pytest.mark.usefixtures("_isolated_workspace")
class TestCatalogAdd:
    @pytest.mark.usefixtures("with_catalog")
    def test_add_work(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        result = cli_runner.invoke(cli, ["--json", "catalog", "add", "QT-0001", "W-001"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["op"] == "add_from_catalog"
        item = data["data"]["items"][0]
        assert item["designation"] == "Dalle béton"
        assert item["work_id"] == "W-001"

    @pytest.mark.usefixtures("with_catalog")
    def test_unknown_entry(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        result = cli_runner.invoke(cli, ["catalog", "add", "QT-0001", "W-404"])
        assert result.exit_code == 1
        assert "No catalog entry found with ID: W-404" in result.stderr

    def test_not_configured(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["new"])
        result = cli_runner.invoke(cli, ["catalog", "add", "QT-0001", "W-001"])
        assert result.exit_code == 1
        assert "No catalog configured" in result.stderr
