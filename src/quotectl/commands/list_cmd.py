"""Command: list stored quotes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from quotectl.commands._base import QuoteCommand

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.command(
    "list",
    cls=QuoteCommand,
    examples="""\
  quotectl list
  quotectl --json list
  quotectl -q list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List quotes, most recently modified first."""
    from quotectl.services.quote import QuoteService

    app.emit(QuoteService(app.workspace).list_quotes())
