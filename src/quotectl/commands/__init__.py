"""Subcommand modules for quotectl.

Provides register_commands() which uses deferred imports to keep
``quotectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from quotectl.commands.catalog import catalog
    from quotectl.commands.item import item

    cli.add_command(item)
    cli.add_command(catalog)

    # --- Standalone commands ---
    from quotectl.commands.apply import apply
    from quotectl.commands.discount import discount
    from quotectl.commands.info import info
    from quotectl.commands.list_cmd import list_cmd
    from quotectl.commands.new import new
    from quotectl.commands.show import show

    cli.add_command(new)
    cli.add_command(list_cmd)
    cli.add_command(show)
    cli.add_command(discount)
    cli.add_command(apply)
    cli.add_command(info)
