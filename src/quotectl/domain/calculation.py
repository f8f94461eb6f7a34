"""CalculationEngine — pure totals derivation for a flat item collection.

``calculate(items)`` is a deterministic function of the items alone:
no caching, no hidden state, a full O(n) pass on every call.

- Priced leaf: ``HT = qty * unit_price * (1 - line_discount/100)``,
  ``TTC = HT * (1 + vat/100)``.
- Discount leaf: stored signed totals pass through.
- Structural node: sum of its *direct* children.
- Document: sum over priced and discount leaves only, so nested
  sections are never double counted.
- VAT breakdown: leaves grouped by rate, ascending.

Per-item and per-section totals keep full precision. Document totals and
the VAT breakdown are the presentation boundary and are rounded to cents.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, Field

from quotectl.domain.errors import InvariantViolation
from quotectl.domain.items import QuoteItem
from quotectl.domain.money import HUNDRED, ONE, ZERO, percent_of, round_money, with_rate


class ItemTotals(BaseModel):
    """Unrounded HT/TTC pair for one item or section."""

    model_config = {"frozen": True}

    total_ht: Decimal = ZERO
    total_ttc: Decimal = ZERO

    @property
    def total_vat(self) -> Decimal:
        return self.total_ttc - self.total_ht


class DocumentTotals(BaseModel):
    """Rounded document-level totals."""

    model_config = {"frozen": True}

    total_ht: Decimal = ZERO
    total_vat: Decimal = ZERO
    total_ttc: Decimal = ZERO


class VatLine(BaseModel):
    """One VAT rate group: taxable base and tax amount, rounded."""

    model_config = {"frozen": True}

    rate: Decimal
    base_ht: Decimal
    vat_amount: Decimal


class Calculations(BaseModel):
    """Everything the presentation layer reads about quote amounts."""

    model_config = {"frozen": True}

    per_item: dict[str, ItemTotals] = Field(default_factory=dict)
    per_section: dict[str, ItemTotals] = Field(default_factory=dict)
    document: DocumentTotals = Field(default_factory=DocumentTotals)
    vat_breakdown: tuple[VatLine, ...] = ()
    show_vat_column: bool = False
    show_discount_column: bool = False

    def section_total(self, section_id: str) -> ItemTotals:
        return self.per_section.get(section_id, ItemTotals())


def leaf_totals(item: QuoteItem) -> ItemTotals:
    """Totals of a priced or discount leaf."""
    if item.is_discount:
        return ItemTotals(total_ht=item.total_ht, total_ttc=item.total_ttc)
    total_ht = item.quantity * item.unit_price * (ONE - item.discount_percentage / HUNDRED)
    return ItemTotals(total_ht=total_ht, total_ttc=with_rate(total_ht, item.vat_rate))


def calculate(items: Iterable[QuoteItem]) -> Calculations:
    """Derive per-item, per-section and document totals plus the VAT breakdown.

    Raises:
        InvariantViolation: If the parent links contain a cycle.
    """
    by_id: dict[str, QuoteItem] = {}
    children: dict[str, list[str]] = defaultdict(list)
    for item in items:
        by_id[item.id] = item
        if item.parent_id is not None:
            children[item.parent_id].append(item.id)

    per_item: dict[str, ItemTotals] = {}
    for item in by_id.values():
        if not item.is_structural:
            per_item[item.id] = leaf_totals(item)

    in_progress: set[str] = set()

    def structural_totals(item_id: str) -> ItemTotals:
        cached = per_item.get(item_id)
        if cached is not None:
            return cached
        if item_id in in_progress:
            raise InvariantViolation(f"Cycle through item {item_id}", rule="cycle", id=item_id)
        in_progress.add(item_id)
        total_ht = ZERO
        total_ttc = ZERO
        for child_id in children.get(item_id, ()):
            child = structural_totals(child_id)
            total_ht += child.total_ht
            total_ttc += child.total_ttc
        in_progress.discard(item_id)
        result = ItemTotals(total_ht=total_ht, total_ttc=total_ttc)
        per_item[item_id] = result
        return result

    per_section: dict[str, ItemTotals] = {}
    for item in by_id.values():
        if item.is_structural:
            per_section[item.id] = structural_totals(item.id)

    leaves = [item for item in by_id.values() if not item.is_structural]
    doc_ht = sum((per_item[leaf.id].total_ht for leaf in leaves), ZERO)
    doc_ttc = sum((per_item[leaf.id].total_ttc for leaf in leaves), ZERO)

    bases: dict[Decimal, Decimal] = defaultdict(lambda: ZERO)
    for leaf in leaves:
        bases[leaf.vat_rate] += per_item[leaf.id].total_ht
    breakdown = tuple(
        VatLine(
            rate=rate,
            base_ht=round_money(base),
            vat_amount=round_money(percent_of(base, rate)),
        )
        for rate, base in sorted(bases.items())
    )

    priced = [leaf for leaf in leaves if leaf.is_priced]
    return Calculations(
        per_item={item_id: per_item[item_id] for item_id in by_id},
        per_section=per_section,
        document=DocumentTotals(
            total_ht=round_money(doc_ht),
            total_vat=round_money(doc_ttc - doc_ht),
            total_ttc=round_money(doc_ttc),
        ),
        vat_breakdown=breakdown,
        show_vat_column=any(leaf.vat_rate > 0 for leaf in priced),
        show_discount_column=any(leaf.discount_percentage > 0 for leaf in priced),
    )


def prevailing_vat_rate(items: Iterable[QuoteItem], default: Decimal) -> Decimal:
    """Rate carrying the largest priced-leaf base; *default* when there is none.

    Ties resolve to the higher rate.
    """
    bases: dict[Decimal, Decimal] = defaultdict(lambda: ZERO)
    for item in items:
        if item.is_priced:
            bases[item.vat_rate] += leaf_totals(item).total_ht
    if not bases:
        return default
    return max(bases.items(), key=lambda pair: (pair[1], pair[0]))[0]
