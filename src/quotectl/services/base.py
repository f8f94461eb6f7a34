"""BaseService — foundation for quotectl services.

Every service receives a :class:`Workspace` at construction time. The
workspace provides the repository, the catalog and the plugin manager.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from quotectl.infrastructure.workspace import Workspace
    from quotectl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def dispatch_hook(
    plugins: PluginManager | None,
    hook_name: str,
    payload: dict[str, Any],
    warnings: list[str],
) -> None:
    """Call a plugin hook. No-op without a plugin manager.

    Plugin failures are appended to *warnings*, never raised.
    """
    if plugins is None:
        return
    try:
        getattr(plugins.hook, hook_name)(**payload)
    except Exception:
        logger.debug("Plugin hook failed for %s", hook_name, exc_info=True)
        warnings.append(f"Plugin hook failed for {hook_name}")


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class QuoteService(BaseService):
            def show(self, quote_id: str) -> ServiceResult:
                meta, items = self._workspace.repository.load(quote_id)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any], warnings: list[str]) -> None:
        dispatch_hook(self._workspace.plugins, hook_name, payload, warnings)
