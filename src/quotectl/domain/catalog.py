"""Catalog entries and their conversion into quote items.

The catalog (work library) is an external collaborator. Its entries are
validated here and mapped onto new leaf items:

- work     -> ``work`` item, recommended price, margin and ``work_id``
- material -> ``product`` item, carrying the material's own VAT rate
- labor    -> ``service`` item
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from quotectl.domain.types import CATALOG_ITEM_TYPES, CatalogKind


class WorkEntry(BaseModel):
    """A priced assembly of materials and labor."""

    model_config = {"frozen": True}

    kind: Literal["work"] = "work"
    id: str
    name: str
    reference: str | None = None
    description: str = ""
    unit: str = "u"
    recommended_price: Decimal = Field(ge=0)
    margin: Decimal = Decimal(0)


class MaterialEntry(BaseModel):
    """A supplied material with its own VAT rate."""

    model_config = {"frozen": True}

    kind: Literal["material"] = "material"
    id: str
    name: str
    reference: str | None = None
    description: str = ""
    unit: str = "u"
    unit_price: Decimal = Field(ge=0)
    vat_rate: Decimal = Field(ge=0)
    supplier: str | None = None


class LaborEntry(BaseModel):
    """Hourly (or per-unit) labor."""

    model_config = {"frozen": True}

    kind: Literal["labor"] = "labor"
    id: str
    name: str
    description: str = ""
    unit: str = "h"
    unit_price: Decimal = Field(ge=0)


CatalogEntry = Annotated[WorkEntry | MaterialEntry | LaborEntry, Field(discriminator="kind")]

_ENTRY_ADAPTER: TypeAdapter[CatalogEntry] = TypeAdapter(CatalogEntry)


def parse_entry(data: dict[str, Any]) -> CatalogEntry:
    return _ENTRY_ADAPTER.validate_python(data)


def entry_to_item_fields(
    entry: WorkEntry | MaterialEntry | LaborEntry,
    *,
    default_vat_rate: Decimal,
    parent_id: str | None = None,
) -> dict[str, Any]:
    """Field dict for an ``add_item`` intent built from a catalog entry.

    Quantity starts at 1 and no line discount is applied.
    """
    fields: dict[str, Any] = {
        "type": CATALOG_ITEM_TYPES[CatalogKind(entry.kind)],
        "parent_id": parent_id,
        "designation": entry.name,
        "description": entry.description,
        "unit": entry.unit,
        "quantity": Decimal(1),
        "discount_percentage": Decimal(0),
        "vat_rate": default_vat_rate,
    }
    if isinstance(entry, WorkEntry):
        fields.update(
            reference=entry.reference,
            unit_price=entry.recommended_price,
            margin=entry.margin,
            work_id=entry.id,
        )
    elif isinstance(entry, MaterialEntry):
        fields.update(
            reference=entry.reference,
            unit_price=entry.unit_price,
            vat_rate=entry.vat_rate,
        )
    else:
        fields["unit_price"] = entry.unit_price
    return fields
