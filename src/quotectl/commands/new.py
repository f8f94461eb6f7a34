"""Command: create a new draft quote."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import click

from quotectl.commands._base import QuoteCommand

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.command(
    cls=QuoteCommand,
    examples="""\
  quotectl new --client "Atlas Immobilier" --project "Villa Anfa"
  quotectl new --client "ACME" --validity 15 --issue-date 2026-01-05
  quotectl -q new --client "ACME\"""",
)
@click.option("--client", "client_name", default="", help="Client name.")
@click.option("--address", "client_address", default="", help="Client address.")
@click.option("--project", "project_name", default="", help="Project name.")
@click.option(
    "--issue-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Issue date (YYYY-MM-DD, default today).",
)
@click.option("--validity", "validity_period", type=int, default=None, help="Validity in days.")
@click.option("--notes", default="", help="Free-form notes.")
@click.option("--conditions", default="", help="Payment and delivery conditions.")
@click.pass_obj
def new(
    app: AppContext,
    client_name: str,
    client_address: str,
    project_name: str,
    issue_date: Any,
    validity_period: int | None,
    notes: str,
    conditions: str,
) -> None:
    """Create an empty draft quote."""
    from quotectl.services.quote import QuoteService

    fields: dict[str, Any] = {
        "client_name": client_name,
        "client_address": client_address,
        "project_name": project_name,
        "notes": notes,
        "conditions": conditions,
    }
    if issue_date is not None:
        fields["issue_date"] = date(issue_date.year, issue_date.month, issue_date.day)
    if validity_period is not None:
        fields["validity_period"] = validity_period

    app.emit(QuoteService(app.workspace).create_quote(**fields))
