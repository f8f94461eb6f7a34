"""Extension layer — plugin system via pluggy.

Discovery: entry points in the ``quotectl.plugins`` group.
Plugin failures are reported as warnings, never errors.
"""

from quotectl.plugins.hookspecs import hookimpl
from quotectl.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
