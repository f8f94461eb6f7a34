"""Command group: add, update, remove and reorder quote items."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

import click

from quotectl.commands._base import DECIMAL, QuoteGroup
from quotectl.domain.types import ItemType

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext

_ADDABLE_TYPES = [t.value for t in ItemType if t != ItemType.DISCOUNT]


def _collect(
    *,
    designation: str | None,
    description: str | None,
    reference: str | None,
    unit: str | None,
    quantity: Decimal | None,
    unit_price: Decimal | None,
    discount: Decimal | None,
    vat: Decimal | None,
    extra: tuple[str, ...] = (),
) -> dict[str, Any]:
    fields: dict[str, Any] = {
        key: value
        for key, value in (
            ("designation", designation),
            ("description", description),
            ("reference", reference),
            ("unit", unit),
            ("quantity", quantity),
            ("unit_price", unit_price),
            ("discount_percentage", discount),
            ("vat_rate", vat),
        )
        if value is not None
    }
    for pair in extra:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise click.BadParameter(msg, param_hint="--set")
        fields[key.strip()] = value
    return fields


_item_options = [
    click.option("--designation", "-d", default=None, help="Label shown on the quote."),
    click.option("--description", default=None, help="Longer description."),
    click.option("--reference", default=None, help="Supplier or catalog reference."),
    click.option("--unit", default=None, help="Unit of measure (u, m2, h...)."),
    click.option("--quantity", "--qty", type=DECIMAL, default=None, help="Quantity (> 0)."),
    click.option("--unit-price", "--price", type=DECIMAL, default=None, help="Unit price HT."),
    click.option("--discount", type=DECIMAL, default=None, help="Line discount in percent."),
    click.option("--vat", type=DECIMAL, default=None, help="VAT rate in percent."),
]


def _with_item_options(func: Any) -> Any:
    for option in reversed(_item_options):
        func = option(func)
    return func


@click.group(
    cls=QuoteGroup,
    examples="""\
  quotectl item add QT-0001 --type chapter -d "Gros oeuvre"
  quotectl item add QT-0001 --type work -d "Béton" --parent ITM-0001 --qty 2 --price 50
  quotectl item update QT-0001 ITM-0002 --qty 3
  quotectl item move QT-0001 ITM-0004 1
  quotectl item remove QT-0001 ITM-0001""",
)
def item() -> None:
    """Edit the item tree of a quote."""


@item.command(
    examples="""\
  quotectl item add QT-0001 --type chapter -d "Lot 1"
  quotectl item add QT-0001 --type product -d "Carrelage" --parent ITM-0001 --qty 12.5 --unit m2 --price 180
  quotectl item add QT-0001 --type service -d "Pose" --vat 10 --position 1""",
)
@click.argument("quote_id")
@click.option(
    "--type", "item_type", type=click.Choice(_ADDABLE_TYPES), required=True, help="Item type."
)
@click.option("--parent", "parent_id", default=None, help="Parent chapter/section id.")
@click.option("--position", type=int, default=None, help="1-based position (default: append).")
@_with_item_options
@click.pass_obj
def add(
    app: AppContext,
    quote_id: str,
    item_type: str,
    parent_id: str | None,
    position: int | None,
    **options: Any,
) -> None:
    """Add a chapter, section or priced line."""
    from quotectl.domain.intents import AddItem
    from quotectl.services.quote import QuoteService

    fields = _collect(**options)
    fields["type"] = item_type
    fields["parent_id"] = parent_id
    intent = AddItem(item=fields, position=position)
    app.emit(QuoteService(app.workspace).apply(quote_id, [intent], op="add_item"))


@item.command(
    examples="""\
  quotectl item update QT-0001 ITM-0002 --qty 3 --price 45.5
  quotectl item update QT-0001 ITM-0001 -d "Lot 1 - Fondations"
  quotectl item update QT-0001 ITM-0007 --set discount_value=15""",
)
@click.argument("quote_id")
@click.argument("item_id")
@_with_item_options
@click.option("--set", "extra", multiple=True, help="Raw KEY=VALUE field change (repeatable).")
@click.pass_obj
def update(app: AppContext, quote_id: str, item_id: str, **options: Any) -> None:
    """Change fields of an item (discounts are re-resolved)."""
    from quotectl.domain.intents import UpdateItem
    from quotectl.services.quote import QuoteService

    changes = _collect(**options)
    if not changes:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)
    intent = UpdateItem(item_id=item_id, changes=changes)
    app.emit(QuoteService(app.workspace).apply(quote_id, [intent], op="update_item"))


@item.command(
    examples="""\
  quotectl item remove QT-0001 ITM-0003
  quotectl -q item remove QT-0001 ITM-0001""",
)
@click.argument("quote_id")
@click.argument("item_id")
@click.pass_obj
def remove(app: AppContext, quote_id: str, item_id: str) -> None:
    """Remove an item and everything under it."""
    from quotectl.domain.intents import RemoveItem
    from quotectl.services.quote import QuoteService

    intent = RemoveItem(item_id=item_id)
    app.emit(QuoteService(app.workspace).apply(quote_id, [intent], op="remove_item"))


@item.command(
    examples="""\
  quotectl item move QT-0001 ITM-0004 1
  quotectl item move QT-0001 ITM-0006 2 --parent ITM-0001""",
)
@click.argument("quote_id")
@click.argument("item_id")
@click.argument("position", type=int)
@click.option("--parent", "parent_id", default=None, help="Expected current parent.")
@click.pass_obj
def move(
    app: AppContext, quote_id: str, item_id: str, position: int, parent_id: str | None
) -> None:
    """Move an item to a new position among its siblings."""
    from quotectl.domain.intents import MoveItem
    from quotectl.services.quote import QuoteService

    if parent_id is None:
        intent = MoveItem(item_id=item_id, position=position)
    else:
        intent = MoveItem(item_id=item_id, position=position, parent_id=parent_id)
    app.emit(QuoteService(app.workspace).apply(quote_id, [intent], op="move_item"))
