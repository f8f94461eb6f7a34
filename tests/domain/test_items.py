"""Tests for QuoteItem construction, revision and business rules."""

from __future__ import annotations

from decimal import Decimal

import pytest

from quotectl.domain.errors import ValidationError
from quotectl.domain.items import (
    QuoteItem,
    build_item,
    check_item_rules,
    is_temporary_id,
    new_temp_id,
    revise_item,
)
from quotectl.domain.types import ItemType

RATES = [Decimal(0), Decimal(10), Decimal(20)]


def _work(**overrides: object) -> QuoteItem:
    data: dict[str, object] = {
        "id": "w1",
        "type": "work",
        "designation": "Béton",
        "quantity": 2,
        "unit_price": 50,
        "vat_rate": 20,
    }
    data.update(overrides)
    return build_item(data)


class TestBuildItem:
    def test_valid_work(self) -> None:
        item = _work()
        assert item.type == ItemType.WORK
        assert item.quantity == Decimal(2)
        assert item.is_priced
        assert not item.is_structural

    def test_frozen(self) -> None:
        item = _work()
        with pytest.raises(Exception):
            item.quantity = Decimal(3)  # type: ignore[misc]

    def test_zero_quantity_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _work(quantity=0)
        assert exc_info.value.field == "quantity"

    def test_negative_quantity_rejected(self) -> None:
        with pytest.raises(ValidationError, match="quantity"):
            _work(quantity=-1)

    def test_discount_percentage_bounds(self) -> None:
        assert _work(discount_percentage=100).discount_percentage == Decimal(100)
        with pytest.raises(ValidationError, match="discount_percentage"):
            _work(discount_percentage=101)
        with pytest.raises(ValidationError, match="discount_percentage"):
            _work(discount_percentage=-1)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _work(type="widget")
        assert exc_info.value.field == "type"

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError, match="id"):
            _work(id="")

    def test_string_decimals(self) -> None:
        item = _work(quantity="12.5", unit_price="180")
        assert item.quantity == Decimal("12.5")


class TestReviseItem:
    def test_returns_new_instance(self) -> None:
        item = _work()
        revised = revise_item(item, {"quantity": 3})
        assert revised.quantity == Decimal(3)
        assert item.quantity == Decimal(2)

    def test_revalidates(self) -> None:
        with pytest.raises(ValidationError, match="quantity"):
            revise_item(_work(), {"quantity": 0})


class TestCheckItemRules:
    def test_valid_priced_item(self) -> None:
        check_item_rules(_work(), RATES)

    def test_empty_designation(self) -> None:
        with pytest.raises(ValidationError, match="designation"):
            check_item_rules(_work(designation="   "), RATES)

    def test_vat_rate_not_permitted(self) -> None:
        with pytest.raises(ValidationError, match="not a permitted rate"):
            check_item_rules(_work(vat_rate=7), RATES)

    def test_negative_unit_price(self) -> None:
        with pytest.raises(ValidationError, match="unit_price"):
            check_item_rules(_work(unit_price=-5), RATES)

    def test_structural_items_skip_vat_check(self) -> None:
        chapter = build_item({"id": "c1", "type": "chapter", "designation": "Lot", "vat_rate": 7})
        check_item_rules(chapter, RATES)

    def test_discount_totals_must_not_be_positive(self) -> None:
        discount = build_item(
            {"id": "d1", "type": "discount", "designation": "Remise", "total_ht": 10}
        )
        with pytest.raises(ValidationError, match="must not be positive"):
            check_item_rules(discount, RATES)


class TestTemporaryIds:
    def test_new_temp_id(self) -> None:
        item_id = new_temp_id()
        assert is_temporary_id(item_id)
        assert new_temp_id() != item_id

    def test_server_id_is_not_temporary(self) -> None:
        assert not is_temporary_id("ITM-0001")
        assert _work(id="tmp-x").is_temporary
