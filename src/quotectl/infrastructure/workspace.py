"""Workspace — the single dependency injected into every service.

Owns the database engine, the quote repository, the optional catalog and
the plugin manager. Services see the repository and catalog only through
the collaborator protocols in :mod:`quotectl.domain.ports`. The engine is
created on first access so commands that never touch storage do not create
a database file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from quotectl.domain.ports import CatalogLookup, QuotePersistence
from quotectl.infrastructure.catalog import JsonCatalog
from quotectl.infrastructure.database.engine import init_database
from quotectl.infrastructure.database.repository import QuoteRepository

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from quotectl.config.settings import QuoteSettings
    from quotectl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Workspace:
    """Storage, catalog and plugins for one quotectl workspace.

    Constructed once at CLI startup from :class:`QuoteSettings` and stored
    on the click context. Services receive it via :class:`BaseService`.
    """

    def __init__(
        self,
        settings: QuoteSettings,
        *,
        repository: QuotePersistence | None = None,
        catalog: CatalogLookup | None = None,
    ) -> None:
        self._settings = settings
        self._engine: Engine | None = None
        self._repository = repository
        self._owns_repository = repository is None
        self._catalog = catalog
        self._plugins: PluginManager | None = None

    @property
    def root(self) -> Path:
        return self._settings.workspace_root

    @property
    def settings(self) -> QuoteSettings:
        return self._settings

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = init_database(self._settings.database_path)
            logger.debug("Opened database %s", self._settings.database_path)
        return self._engine

    @property
    def repository(self) -> QuotePersistence:
        if self._repository is None:
            self._repository = QuoteRepository(self.engine)
        return self._repository

    @property
    def catalog(self) -> CatalogLookup | None:
        """The injected catalog, else the configured one.

        None when nothing was injected and ``[catalog] path`` is empty.
        """
        if self._catalog is not None:
            return self._catalog
        path = self._settings.catalog_path
        return JsonCatalog(path) if path is not None else None

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager (None until :meth:`init_plugins`)."""
        return self._plugins

    def init_plugins(self, manager: PluginManager | None = None) -> PluginManager:
        """Attach *manager*, or discover entry-point plugins into a new one."""
        if manager is None:
            from quotectl.plugins.manager import PluginManager

            manager = PluginManager()
            manager.discover_and_load()
        self._plugins = manager
        return manager

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        if self._owns_repository:
            self._repository = None
