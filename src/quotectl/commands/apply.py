"""Command: apply a JSON file of intents to a quote, all-or-nothing."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click
from pydantic import ValidationError as PydanticValidationError

from quotectl.commands._base import QuoteCommand

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.command(
    cls=QuoteCommand,
    examples="""\
  quotectl apply QT-0001 edits.json
  cat edits.json | quotectl apply QT-0001 -

  edits.json:
  [
    {"kind": "add_item", "item": {"id": "tmp-lot1", "type": "chapter", "designation": "Lot 1"}},
    {"kind": "add_item", "item": {"type": "work", "designation": "Béton",
      "parent_id": "tmp-lot1", "quantity": 2, "unit_price": 50}},
    {"kind": "apply_discount", "mode": "percentage", "value": 10}
  ]""",
)
@click.argument("quote_id")
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def apply(app: AppContext, quote_id: str, file: IO[str]) -> None:
    """Apply every intent in FILE, or none of them."""
    from quotectl.domain.intents import parse_intents
    from quotectl.services.quote import QuoteService

    try:
        raw = json.load(file)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {file.name}: {exc}"
        raise click.ClickException(msg) from exc
    if not isinstance(raw, list):
        raw = [raw]
    try:
        intents = parse_intents(raw)
    except PydanticValidationError as exc:
        msg = f"Invalid intent in {file.name}: {exc.errors()[0]['msg']} at {exc.errors()[0]['loc']}"
        raise click.ClickException(msg) from exc

    app.emit(QuoteService(app.workspace).apply(quote_id, intents))
