"""Tests for the pure totals calculation."""

from __future__ import annotations

from decimal import Decimal

import pytest

from quotectl.domain.calculation import calculate, leaf_totals, prevailing_vat_rate
from quotectl.domain.errors import InvariantViolation
from quotectl.domain.items import QuoteItem, build_item


def _leaf(
    item_id: str,
    qty: object,
    price: object,
    vat: object,
    *,
    parent_id: str | None = None,
    discount: object = 0,
    item_type: str = "work",
) -> QuoteItem:
    return build_item(
        {
            "id": item_id,
            "type": item_type,
            "parent_id": parent_id,
            "designation": item_id,
            "quantity": qty,
            "unit_price": price,
            "vat_rate": vat,
            "discount_percentage": discount,
        }
    )


def _node(item_id: str, parent_id: str | None = None, item_type: str = "chapter") -> QuoteItem:
    return build_item(
        {"id": item_id, "type": item_type, "parent_id": parent_id, "designation": item_id}
    )


@pytest.fixture
def chapter_items() -> list[QuoteItem]:
    return [
        _node("ch"),
        _leaf("a", 2, 50, 20, parent_id="ch"),
        _leaf("b", 1, 30, 20, parent_id="ch"),
        _leaf("c", 5, 10, 0, parent_id="ch"),
    ]


class TestLeafTotals:
    def test_simple(self) -> None:
        totals = leaf_totals(_leaf("a", 2, 50, 20))
        assert totals.total_ht == Decimal(100)
        assert totals.total_ttc == Decimal(120)
        assert totals.total_vat == Decimal(20)

    def test_line_discount(self) -> None:
        totals = leaf_totals(_leaf("a", 4, 25, 10, discount=10))
        assert totals.total_ht == Decimal(90)
        assert totals.total_ttc == Decimal(99)

    def test_discount_leaf_passes_stored_totals(self) -> None:
        discount = build_item(
            {
                "id": "d",
                "type": "discount",
                "designation": "Remise",
                "total_ht": -100,
                "total_ttc": -120,
            }
        )
        totals = leaf_totals(discount)
        assert totals.total_ht == Decimal(-100)
        assert totals.total_ttc == Decimal(-120)


class TestCalculate:
    def test_chapter_totals(self, chapter_items: list[QuoteItem]) -> None:
        calcs = calculate(chapter_items)
        chapter = calcs.section_total("ch")
        assert chapter.total_ht == Decimal(180)
        assert chapter.total_ttc == Decimal(206)

    def test_document_totals_are_rounded(self, chapter_items: list[QuoteItem]) -> None:
        doc = calculate(chapter_items).document
        assert str(doc.total_ht) == "180.00"
        assert str(doc.total_vat) == "26.00"
        assert str(doc.total_ttc) == "206.00"

    def test_vat_breakdown_ascending(self, chapter_items: list[QuoteItem]) -> None:
        breakdown = calculate(chapter_items).vat_breakdown
        assert [(line.rate, line.base_ht, line.vat_amount) for line in breakdown] == [
            (Decimal(0), Decimal(50), Decimal(0)),
            (Decimal(20), Decimal(130), Decimal(26)),
        ]

    def test_breakdown_matches_document(self, chapter_items: list[QuoteItem]) -> None:
        calcs = calculate(chapter_items)
        assert sum(line.base_ht for line in calcs.vat_breakdown) == calcs.document.total_ht
        assert sum(line.vat_amount for line in calcs.vat_breakdown) == calcs.document.total_vat

    def test_nested_sections_not_double_counted(self) -> None:
        items = [
            _node("ch"),
            _node("sec", parent_id="ch", item_type="section"),
            _leaf("a", 1, 100, 20, parent_id="sec"),
            _leaf("b", 1, 50, 20, parent_id="ch"),
        ]
        calcs = calculate(items)
        assert calcs.section_total("sec").total_ht == Decimal(100)
        assert calcs.section_total("ch").total_ht == Decimal(150)
        assert calcs.document.total_ht == Decimal(150)

    def test_empty_structural_node_is_zero(self) -> None:
        calcs = calculate([_node("ch")])
        assert calcs.section_total("ch").total_ht == Decimal(0)
        assert calcs.document.total_ttc == Decimal(0)
        assert calcs.vat_breakdown == ()

    def test_discount_reduces_document(self) -> None:
        items = [
            _leaf("a", 10, 100, 20),
            build_item(
                {
                    "id": "d",
                    "type": "discount",
                    "designation": "Remise",
                    "vat_rate": 20,
                    "total_ht": -100,
                    "total_ttc": -120,
                }
            ),
        ]
        doc = calculate(items).document
        assert doc.total_ht == Decimal(900)
        assert doc.total_ttc == Decimal(1080)

    def test_columns(self, chapter_items: list[QuoteItem]) -> None:
        calcs = calculate(chapter_items)
        assert calcs.show_vat_column is True
        assert calcs.show_discount_column is False

        untaxed = calculate([_leaf("a", 1, 10, 0, discount=5)])
        assert untaxed.show_vat_column is False
        assert untaxed.show_discount_column is True

    def test_per_item_covers_every_item(self, chapter_items: list[QuoteItem]) -> None:
        calcs = calculate(chapter_items)
        assert set(calcs.per_item) == {"ch", "a", "b", "c"}
        assert set(calcs.per_section) == {"ch"}

    def test_deterministic(self, chapter_items: list[QuoteItem]) -> None:
        assert calculate(chapter_items) == calculate(list(reversed(chapter_items)))

    def test_cycle_detected(self) -> None:
        items = [_node("x", parent_id="y"), _node("y", parent_id="x")]
        with pytest.raises(InvariantViolation) as exc_info:
            calculate(items)
        assert exc_info.value.rule == "cycle"

    def test_full_precision_per_item(self) -> None:
        calcs = calculate([_leaf("a", 3, "0.333", 20)])
        assert calcs.per_item["a"].total_ht == Decimal("0.999")
        assert calcs.document.total_ht == Decimal("1.00")


class TestPrevailingVatRate:
    def test_largest_base_wins(self, chapter_items: list[QuoteItem]) -> None:
        assert prevailing_vat_rate(chapter_items, Decimal(10)) == Decimal(20)

    def test_default_without_priced_items(self) -> None:
        assert prevailing_vat_rate([_node("ch")], Decimal(14)) == Decimal(14)

    def test_tie_picks_higher_rate(self) -> None:
        items = [_leaf("a", 1, 100, 10), _leaf("b", 1, 100, 20)]
        assert prevailing_vat_rate(items, Decimal(0)) == Decimal(20)
