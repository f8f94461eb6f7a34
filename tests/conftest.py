"""Shared pytest fixtures for quotectl tests."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from quotectl.config.settings import QuoteSettings
from quotectl.infrastructure.database.engine import init_database
from quotectl.infrastructure.workspace import Workspace
from quotectl.services.mutation import MutationController


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's QUOTECTL_* environment out of the tests."""
    monkeypatch.delenv("QUOTECTL_CONFIG", raising=False)
    monkeypatch.delenv("QUOTECTL_WORKSPACE_ROOT", raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """Undo telemetry enabled by a `-v` invocation."""
    yield
    from quotectl.services.telemetry import disable_telemetry

    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """Initialized SQLite engine with all tables and counters created."""
    engine = init_database(tmp_path / ".quotectl" / "quotectl.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace directory.

    All workspace fixtures (workspace, _isolated_workspace) build on this.
    """
    return tmp_path


@pytest.fixture
def workspace(workspace_root: Path) -> Generator[Workspace]:
    """Workspace on a temp directory with an empty plugin manager."""
    from quotectl.plugins.manager import PluginManager

    settings = QuoteSettings.from_cli(workspace_root=workspace_root)
    ws = Workspace(settings)
    ws.init_plugins(PluginManager())
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(workspace_root)


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic temporary ids: tmp-1, tmp-2, ..."""
    counter = itertools.count(1)
    return lambda: f"tmp-{next(counter)}"


@pytest.fixture
def controller(id_factory: Callable[[], str]) -> MutationController:
    """Empty controller with default VAT rates and predictable ids."""
    return MutationController(id_factory=id_factory)
