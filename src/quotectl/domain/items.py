"""QuoteItem — the node of the quote tree.

Items are frozen pydantic models. Every change produces a new instance via
:func:`revise_item`, which re-runs field validation (``model_copy`` alone
would not).

ID contract:
- Client-side ids carry the ``tmp-`` prefix until the persistence
  collaborator assigns a server id.
- Server ids are opaque; the engine never parses them.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from quotectl.domain.errors import ValidationError
from quotectl.domain.types import DiscountMode, ItemType, is_priced, is_structural

TEMP_ID_PREFIX = "tmp-"

# Never writable through an update intent.
PROTECTED_FIELDS: frozenset[str] = frozenset(
    {"id", "type", "parent_id", "position", "total_ht", "total_ttc", "reference_total"}
)

# Only meaningful on priced leaves.
PRICED_FIELDS: frozenset[str] = frozenset(
    {"quantity", "unit_price", "discount_percentage", "vat_rate", "unit", "work_id", "margin"}
)

# Fields a discount item accepts on update; a change re-resolves the amount.
DISCOUNT_FIELDS: frozenset[str] = frozenset(
    {"designation", "description", "vat_rate", "discount_mode", "discount_value"}
)


class QuoteItem(BaseModel):
    """One line of a quote: structural node, priced leaf, or discount."""

    model_config = {"frozen": True}

    id: str = Field(min_length=1)
    type: ItemType
    parent_id: str | None = None
    position: int = Field(default=0, ge=0)

    designation: str = ""
    description: str = ""
    reference: str | None = None
    unit: str = "u"

    quantity: Decimal = Field(default=Decimal(1), gt=0)
    unit_price: Decimal = Decimal(0)
    discount_percentage: Decimal = Field(default=Decimal(0), ge=0, le=100)
    vat_rate: Decimal = Field(default=Decimal(0), ge=0)
    work_id: str | None = None
    margin: Decimal | None = None

    discount_mode: DiscountMode | None = None
    discount_value: Decimal | None = None
    reference_total: Decimal | None = None

    # Derived for priced and structural items; authoritative on discounts.
    total_ht: Decimal = Decimal(0)
    total_ttc: Decimal = Decimal(0)

    @property
    def is_structural(self) -> bool:
        return is_structural(self.type)

    @property
    def is_priced(self) -> bool:
        return is_priced(self.type)

    @property
    def is_discount(self) -> bool:
        return self.type == ItemType.DISCOUNT

    @property
    def is_temporary(self) -> bool:
        return is_temporary_id(self.id)


def new_temp_id() -> str:
    """Generate a client-side temporary id."""
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex[:12]}"


def is_temporary_id(item_id: str) -> bool:
    return item_id.startswith(TEMP_ID_PREFIX)


def build_item(data: Mapping[str, Any]) -> QuoteItem:
    """Validate *data* into a :class:`QuoteItem`.

    Pydantic errors are translated to the domain :class:`ValidationError`
    so callers see the first failing field and a readable message.
    """
    try:
        return QuoteItem.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise _to_domain_error(exc) from exc


def revise_item(item: QuoteItem, changes: Mapping[str, Any]) -> QuoteItem:
    """Return a re-validated copy of *item* with *changes* merged in."""
    merged = item.model_dump()
    merged.update(changes)
    return build_item(merged)


def check_item_rules(item: QuoteItem, permitted_rates: Iterable[Decimal]) -> None:
    """Business rules that depend on configuration or item family.

    Raises:
        ValidationError: On the first rule the item breaks.
    """
    if not item.designation.strip():
        raise ValidationError("designation", "must not be empty")
    if item.is_structural:
        return
    rates = set(permitted_rates)
    if item.vat_rate not in rates:
        allowed = ", ".join(str(r) for r in sorted(rates))
        raise ValidationError("vat_rate", f"{item.vat_rate} is not a permitted rate ({allowed})")
    if item.is_priced and item.unit_price < 0:
        raise ValidationError("unit_price", "must not be negative")
    if item.is_discount and (item.total_ht > 0 or item.total_ttc > 0):
        raise ValidationError("total_ht", "discount totals must not be positive")


def _to_domain_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    loc = first.get("loc") or ("item",)
    field = ".".join(str(part) for part in loc)
    message = re.sub(r"^Value error, ", "", str(first.get("msg", "invalid value")))
    return ValidationError(field, message)
