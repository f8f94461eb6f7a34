"""Typed payload contracts for service results.

These models validate payload shapes before they leave the service layer
so the renderers and ``--json`` consumers can rely on the keys.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from quotectl.domain.money import round_money
from quotectl.domain.snapshot import QuoteSnapshot


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="json")


class QuoteSummary(BaseModel):
    """One row of ``list_quotes``."""

    model_config = ConfigDict(extra="allow")

    id: str
    number: str
    status: str
    client_name: str
    project_name: str
    issue_date: str
    total_ht: str
    total_ttc: str


class ListQuotesResultData(BaseModel):
    count: int
    items: list[QuoteSummary]


class ItemRow(BaseModel):
    """One item of a quote view, in tree order."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    parent_id: str | None
    position: int
    depth: int
    designation: str
    total_ht: str
    total_ttc: str


class VatRow(BaseModel):
    rate: str
    base_ht: str
    vat_amount: str


class QuoteViewData(BaseModel):
    """Payload contract for every operation that returns a quote."""

    model_config = ConfigDict(extra="allow")

    quote: dict[str, Any]
    items: list[ItemRow]
    totals: dict[str, str]
    vat_breakdown: list[VatRow]
    sections: dict[str, dict[str, str]]
    columns: dict[str, bool]
    revision: int
    dirty: bool


def snapshot_data(snapshot: QuoteSnapshot, **extra: Any) -> dict[str, Any]:
    """Render a snapshot as a :class:`QuoteViewData` payload.

    Section subtotals are rounded to cents; item totals keep full precision.
    """
    depth: dict[str, int] = {}
    items: list[dict[str, Any]] = []
    for item in snapshot.items:
        depth[item.id] = depth[item.parent_id] + 1 if item.parent_id in depth else 0
        items.append({**item.model_dump(mode="json"), "depth": depth[item.id]})

    calcs = snapshot.calculations
    data: dict[str, Any] = {
        "quote": snapshot.meta.model_dump(mode="json"),
        "items": items,
        "totals": calcs.document.model_dump(mode="json"),
        "vat_breakdown": [line.model_dump(mode="json") for line in calcs.vat_breakdown],
        "sections": {
            section_id: {
                "total_ht": str(round_money(totals.total_ht)),
                "total_ttc": str(round_money(totals.total_ttc)),
            }
            for section_id, totals in calcs.per_section.items()
        },
        "columns": {
            "vat": calcs.show_vat_column,
            "discount": calcs.show_discount_column,
        },
        "revision": snapshot.revision,
        "dirty": snapshot.dirty,
        **extra,
    }
    return dump_validated(QuoteViewData, data)
