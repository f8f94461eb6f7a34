"""Command: append a document discount."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import click

from quotectl.commands._base import DECIMAL, QuoteCommand

if TYPE_CHECKING:
    from quotectl.commands._context import AppContext


@click.command(
    cls=QuoteCommand,
    examples="""\
  quotectl discount QT-0001 --percent 10
  quotectl discount QT-0001 --amount 500 --vat 20
  quotectl discount QT-0001 --percent 5 -d "Remise fidélité\"""",
)
@click.argument("quote_id")
@click.option("--percent", type=DECIMAL, default=None, help="Percentage of the HT total.")
@click.option("--amount", type=DECIMAL, default=None, help="Fixed HT amount.")
@click.option("--vat", type=DECIMAL, default=None, help="VAT rate (default: prevailing rate).")
@click.option("--designation", "-d", default=None, help="Label for the discount line.")
@click.option("--parent", "parent_id", default=None, help="Chapter/section to place it under.")
@click.pass_obj
def discount(
    app: AppContext,
    quote_id: str,
    percent: Decimal | None,
    amount: Decimal | None,
    vat: Decimal | None,
    designation: str | None,
    parent_id: str | None,
) -> None:
    """Apply a percentage or fixed discount against the current HT total."""
    from quotectl.domain.intents import ApplyDiscount
    from quotectl.domain.types import DiscountMode
    from quotectl.services.quote import QuoteService

    if (percent is None) == (amount is None):
        click.echo("Specify exactly one of --percent or --amount.", err=True)
        raise SystemExit(1)
    if percent is not None:
        mode, value = DiscountMode.PERCENTAGE, percent
    else:
        assert amount is not None
        mode, value = DiscountMode.FIXED, amount

    intent = ApplyDiscount(
        mode=mode, value=value, vat_rate=vat, designation=designation, parent_id=parent_id
    )
    app.emit(QuoteService(app.workspace).apply(quote_id, [intent], op="apply_discount"))
