"""Tests for the root quotectl CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from quotectl import __version__
from quotectl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "quotectl" in result.output
    for name in ("new", "list", "show", "item", "discount", "catalog", "apply", "info"):
        assert name in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_missing_config_flag(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(tmp_path / "nope.toml"), "list"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


@pytest.mark.usefixtures("_isolated_workspace")
def test_config_flag_sets_currency(cli_runner: CliRunner, tmp_path: Path) -> None:
    cfg = tmp_path / "custom.toml"
    cfg.write_text('[quote]\ncurrency = "EUR"\n')
    cli_runner.invoke(cli, ["new"])
    result = cli_runner.invoke(cli, ["-c", str(cfg), "show", "QT-0001"])
    assert result.exit_code == 0, result.output
    assert "EUR" in result.stdout
