"""Tests for catalog entries and their conversion into item fields."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from quotectl.domain.catalog import (
    LaborEntry,
    MaterialEntry,
    WorkEntry,
    entry_to_item_fields,
    parse_entry,
)
from quotectl.domain.types import ItemType


class TestParseEntry:
    def test_work(self) -> None:
        entry = parse_entry(
            {"kind": "work", "id": "W-1", "name": "Dalle", "recommended_price": "95.5"}
        )
        assert isinstance(entry, WorkEntry)
        assert entry.recommended_price == Decimal("95.5")

    def test_material(self) -> None:
        entry = parse_entry(
            {"kind": "material", "id": "M-1", "name": "Ciment", "unit_price": 80, "vat_rate": 10}
        )
        assert isinstance(entry, MaterialEntry)

    def test_labor_default_unit(self) -> None:
        entry = parse_entry({"kind": "labor", "id": "L-1", "name": "Maçon", "unit_price": 60})
        assert isinstance(entry, LaborEntry)
        assert entry.unit == "h"

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            parse_entry({"kind": "labor", "id": "L-1", "name": "x", "unit_price": -1})

    def test_unknown_kind(self) -> None:
        with pytest.raises(PydanticValidationError):
            parse_entry({"kind": "tool", "id": "T-1", "name": "x"})


class TestEntryToItemFields:
    def test_work_entry(self) -> None:
        entry = WorkEntry(
            id="W-1",
            name="Dalle béton",
            reference="REF-9",
            unit="m2",
            recommended_price=Decimal(95),
            margin=Decimal(15),
        )
        fields = entry_to_item_fields(entry, default_vat_rate=Decimal(20), parent_id="ch")
        assert fields["type"] == ItemType.WORK
        assert fields["designation"] == "Dalle béton"
        assert fields["unit_price"] == Decimal(95)
        assert fields["margin"] == Decimal(15)
        assert fields["work_id"] == "W-1"
        assert fields["vat_rate"] == Decimal(20)
        assert fields["quantity"] == Decimal(1)
        assert fields["discount_percentage"] == Decimal(0)
        assert fields["parent_id"] == "ch"

    def test_material_keeps_own_vat(self) -> None:
        entry = MaterialEntry(
            id="M-1", name="Ciment", unit_price=Decimal(80), vat_rate=Decimal(10)
        )
        fields = entry_to_item_fields(entry, default_vat_rate=Decimal(20))
        assert fields["type"] == ItemType.PRODUCT
        assert fields["vat_rate"] == Decimal(10)
        assert fields["unit_price"] == Decimal(80)
        assert "work_id" not in fields

    def test_labor_uses_default_vat(self) -> None:
        entry = LaborEntry(id="L-1", name="Maçon", unit_price=Decimal(60))
        fields = entry_to_item_fields(entry, default_vat_rate=Decimal(20))
        assert fields["type"] == ItemType.SERVICE
        assert fields["unit"] == "h"
        assert fields["vat_rate"] == Decimal(20)
        assert fields["parent_id"] is None
