"""DiscountResolver — turn a discount request into a signed leaf item.

Two modes:
- Percentage: ``amount = reference_total * value / 100``, value in [0, 100].
- Fixed: ``amount = value``, never more than ``reference_total``.

``reference_total`` is the document HT total snapshotted when the discount
is created. It is stored on the item and reused when the discount is later
edited; the live document total is never consulted again.
"""

from __future__ import annotations

import re
from decimal import Decimal

from quotectl.domain.errors import ValidationError
from quotectl.domain.items import QuoteItem, build_item
from quotectl.domain.money import HUNDRED, ZERO, format_number, percent_of, with_rate
from quotectl.domain.types import DiscountMode, ItemType

DEFAULT_DESIGNATION = "Remise globale"

_PERCENT_SUFFIX = re.compile(r"\s*\([^()]*%\)\s*$")


def strip_percent_suffix(designation: str) -> str:
    """Drop a trailing ``" (10%)"`` label added for percentage discounts."""
    return _PERCENT_SUFFIX.sub("", designation)


class DiscountResolver:
    """Computes discount amounts and builds discount items."""

    def __init__(self, default_designation: str = DEFAULT_DESIGNATION) -> None:
        self.default_designation = default_designation

    @staticmethod
    def compute_amount(mode: DiscountMode, value: Decimal, reference_total: Decimal) -> Decimal:
        """Return the positive discount amount.

        Raises:
            ValidationError: If *value* or *reference_total* is out of range.
        """
        if reference_total < 0:
            raise ValidationError("reference_total", "document total must not be negative")
        if value < 0:
            raise ValidationError("value", "must be positive")
        if mode == DiscountMode.PERCENTAGE:
            if value > HUNDRED:
                raise ValidationError("value", "percentage cannot exceed 100")
            return percent_of(reference_total, value)
        if value > reference_total:
            raise ValidationError(
                "value",
                f"discount {format_number(value)} exceeds the document total "
                f"{format_number(reference_total)}",
            )
        return value

    def label(self, mode: DiscountMode, value: Decimal, designation: str | None = None) -> str:
        base = strip_percent_suffix(designation or "").strip() or self.default_designation
        if mode == DiscountMode.PERCENTAGE:
            return f"{base} ({format_number(value)}%)"
        return base

    def resolve(
        self,
        *,
        item_id: str,
        mode: DiscountMode,
        value: Decimal,
        reference_total: Decimal,
        vat_rate: Decimal,
        designation: str | None = None,
        description: str = "",
        parent_id: str | None = None,
        position: int = 0,
    ) -> QuoteItem:
        """Build the flat discount item for a request."""
        amount = self.compute_amount(mode, value, reference_total)
        total_ht = ZERO - amount
        return build_item(
            {
                "id": item_id,
                "type": ItemType.DISCOUNT,
                "parent_id": parent_id,
                "position": position,
                "designation": self.label(mode, value, designation),
                "description": description,
                "quantity": Decimal(1),
                "unit_price": total_ht,
                "vat_rate": vat_rate,
                "discount_mode": mode,
                "discount_value": value,
                "reference_total": reference_total,
                "total_ht": total_ht,
                "total_ttc": with_rate(total_ht, vat_rate),
            }
        )

    def re_resolve(
        self,
        item: QuoteItem,
        *,
        mode: DiscountMode | None = None,
        value: Decimal | None = None,
        vat_rate: Decimal | None = None,
        designation: str | None = None,
        description: str | None = None,
    ) -> QuoteItem:
        """Rebuild an existing discount against its stored reference total."""
        if item.type != ItemType.DISCOUNT:
            raise ValidationError("type", f"{item.id} is not a discount item")
        return self.resolve(
            item_id=item.id,
            mode=mode or item.discount_mode or DiscountMode.FIXED,
            value=value if value is not None else (item.discount_value or ZERO),
            reference_total=item.reference_total or ZERO,
            vat_rate=vat_rate if vat_rate is not None else item.vat_rate,
            designation=designation if designation is not None else item.designation,
            description=description if description is not None else item.description,
            parent_id=item.parent_id,
            position=item.position,
        )
