"""Collaborator interfaces and the payloads that cross them.

The engine treats persistence and the catalog as black boxes. Anything
that satisfies these protocols can back the service layer; the shipped
implementations live in :mod:`quotectl.infrastructure`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from quotectl.domain.calculation import DocumentTotals
from quotectl.domain.catalog import LaborEntry, MaterialEntry, WorkEntry
from quotectl.domain.items import QuoteItem
from quotectl.domain.quote import QuoteMeta


class BulkSavePayload(BaseModel):
    """Everything needed to persist one quote in a single call."""

    model_config = {"frozen": True}

    quote: QuoteMeta
    items: list[QuoteItem] = Field(default_factory=list)
    totals: DocumentTotals = Field(default_factory=DocumentTotals)


class SavedQuote(BaseModel):
    """Persisted representation returned by ``bulk_save``.

    ``id_map`` maps every client-temporary item id to its server id.
    """

    model_config = {"frozen": True}

    quote: QuoteMeta
    items: list[QuoteItem] = Field(default_factory=list)
    id_map: dict[str, str] = Field(default_factory=dict)


@runtime_checkable
class QuotePersistence(Protocol):
    """Bulk save/load of a quote and its item tree."""

    def create(self, meta: QuoteMeta) -> QuoteMeta: ...

    def load(self, quote_id: str) -> tuple[QuoteMeta, list[QuoteItem]]: ...

    def list_quotes(self) -> list[dict[str, Any]]: ...

    def bulk_save(self, payload: BulkSavePayload) -> SavedQuote: ...


@runtime_checkable
class CatalogLookup(Protocol):
    """Read access to the work/material/labor library."""

    def get(self, entry_id: str) -> WorkEntry | MaterialEntry | LaborEntry: ...
