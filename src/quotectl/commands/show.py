"""Command: display a quote with its item tree and totals."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from quotectl.commands._base import QuoteCommand

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.command(
    cls=QuoteCommand,
    examples="""\
  quotectl show QT-0001
  quotectl -v show QT-0001
  quotectl --json show QT-0001""",
)
@click.argument("quote_id")
@click.pass_obj
def show(app: AppContext, quote_id: str) -> None:
    """Show a quote: item tree, totals and VAT breakdown."""
    from quotectl.services.quote import QuoteService

    app.emit(QuoteService(app.workspace).show(quote_id))
