"""Command group: add lines from the work/material/labor catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from quotectl.commands._base import QuoteGroup

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.group(
    cls=QuoteGroup,
    examples="""\
  quotectl catalog add QT-0001 W-001
  quotectl catalog add QT-0001 M-014 --parent ITM-0001""",
)
def catalog() -> None:
    """Use the catalog configured under [catalog] path."""


@catalog.command(
    examples="""\
  quotectl catalog add QT-0001 W-001
  quotectl catalog add QT-0001 L-002 --parent ITM-0003 --position 1""",
)
@click.argument("quote_id")
@click.argument("entry_id")
@click.option("--parent", "parent_id", default=None, help="Chapter/section to add under.")
@click.option("--position", type=int, default=None, help="1-based position (default: append).")
@click.pass_obj
def add(
    app: AppContext,
    quote_id: str,
    entry_id: str,
    parent_id: str | None,
    position: int | None,
) -> None:
    """Add a work, material or labor entry as a quote line."""
    from quotectl.services.quote import QuoteService

    app.emit(
        QuoteService(app.workspace).add_from_catalog(
            quote_id, entry_id, parent_id=parent_id, position=position
        )
    )
