"""Command: show or change quote metadata and status."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import click

from quotectl.commands._base import QuoteCommand
from quotectl.domain.lifecycle import QuoteStatus

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.command(
    cls=QuoteCommand,
    examples="""\
  quotectl info QT-0001
  quotectl info QT-0001 --client "Atlas Immobilier" --validity 45
  quotectl info QT-0001 --status sent""",
)
@click.argument("quote_id")
@click.option("--client", "client_name", default=None, help="Client name.")
@click.option("--address", "client_address", default=None, help="Client address.")
@click.option("--project", "project_name", default=None, help="Project name.")
@click.option(
    "--issue-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Issue date (YYYY-MM-DD).",
)
@click.option("--validity", "validity_period", type=int, default=None, help="Validity in days.")
@click.option("--notes", default=None, help="Free-form notes.")
@click.option("--conditions", default=None, help="Payment and delivery conditions.")
@click.option(
    "--status",
    type=click.Choice([s.value for s in QuoteStatus]),
    default=None,
    help="New status (must be a valid transition).",
)
@click.pass_obj
def info(app: AppContext, quote_id: str, **options: Any) -> None:
    """Show a quote, or update its client, dates, notes or status."""
    from quotectl.services.quote import QuoteService

    changes: dict[str, Any] = {k: v for k, v in options.items() if v is not None}
    issue_date = changes.get("issue_date")
    if isinstance(issue_date, datetime):
        changes["issue_date"] = issue_date.date()

    service = QuoteService(app.workspace)
    if not changes:
        app.emit(service.show(quote_id))
        return
    app.emit(service.update_info(quote_id, changes))
