"""QuoteRepository — SQLite implementation of the persistence collaborator.

``bulk_save`` is one transaction: claim server ids for temporary items,
upsert the quote row, replace every item row. Hierarchy and positions are
written exactly as received; only ids change.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update

from quotectl.domain.errors import NotFoundError
from quotectl.domain.items import QuoteItem, build_item, is_temporary_id
from quotectl.domain.ports import BulkSavePayload, SavedQuote
from quotectl.domain.quote import QuoteMeta
from quotectl.infrastructure.database.counters import (
    ITEM_PREFIX,
    QUOTE_PREFIX,
    next_sequential_id,
)
from quotectl.infrastructure.database.schema import quote_items, quotes

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_DECIMAL_COLUMNS = (
    "quantity",
    "unit_price",
    "discount_percentage",
    "vat_rate",
    "margin",
    "discount_value",
    "reference_total",
    "total_ht",
    "total_ttc",
)

_META_COLUMNS = (
    "status",
    "client_name",
    "client_address",
    "project_name",
    "notes",
    "conditions",
)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class QuoteRepository:
    """Quote and item storage via SQLAlchemy Core."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(self, meta: QuoteMeta) -> QuoteMeta:
        """Insert an empty quote and return its metadata with ids assigned."""
        with self._engine.begin() as conn:
            return self._insert_quote(conn, meta)

    def load(self, quote_id: str) -> tuple[QuoteMeta, list[QuoteItem]]:
        """Return the quote metadata and its items (unordered).

        Raises:
            NotFoundError: If no quote has *quote_id*.
        """
        with self._engine.connect() as conn:
            row = conn.execute(select(quotes).where(quotes.c.id == quote_id)).first()
            if row is None:
                raise NotFoundError(quote_id, kind="quote")
            item_rows = conn.execute(
                select(quote_items).where(quote_items.c.quote_id == quote_id)
            ).fetchall()
        return _row_to_meta(row), [_row_to_item(r) for r in item_rows]

    def list_quotes(self) -> list[dict[str, Any]]:
        """Summary rows for every quote, newest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(
                    quotes.c.id,
                    quotes.c.number,
                    quotes.c.status,
                    quotes.c.client_name,
                    quotes.c.project_name,
                    quotes.c.issue_date,
                    quotes.c.total_ht,
                    quotes.c.total_ttc,
                    quotes.c.modified,
                ).order_by(quotes.c.modified.desc(), quotes.c.id.desc())
            ).fetchall()
        return [dict(r._mapping) for r in rows]

    def bulk_save(self, payload: BulkSavePayload) -> SavedQuote:
        """Persist the quote and its full item list atomically.

        Raises:
            NotFoundError: If the payload names a quote id that does not exist.
        """
        with self._engine.begin() as conn:
            meta = payload.quote
            if meta.quote_id is None:
                meta = self._insert_quote(conn, meta)
            else:
                self._update_quote(conn, meta)
            quote_id = meta.quote_id
            assert quote_id is not None

            id_map = {
                item.id: next_sequential_id(conn, ITEM_PREFIX)
                for item in payload.items
                if is_temporary_id(item.id)
            }
            saved = [_rekey(item, id_map) for item in payload.items]

            conn.execute(
                update(quotes)
                .where(quotes.c.id == quote_id)
                .values(
                    total_ht=str(payload.totals.total_ht),
                    total_vat=str(payload.totals.total_vat),
                    total_ttc=str(payload.totals.total_ttc),
                )
            )
            conn.execute(delete(quote_items).where(quote_items.c.quote_id == quote_id))
            if saved:
                conn.execute(insert(quote_items), [_item_to_row(i, quote_id) for i in saved])

        logger.debug("Saved quote %s with %d items", quote_id, len(saved))
        return SavedQuote(quote=meta, items=saved, id_map=id_map)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _insert_quote(conn: Connection, meta: QuoteMeta) -> QuoteMeta:
        quote_id = next_sequential_id(conn, QUOTE_PREFIX)
        meta = meta.model_copy(update={"quote_id": quote_id, "number": meta.number or quote_id})
        now = _now_iso()
        conn.execute(
            insert(quotes).values(
                id=quote_id,
                number=meta.number,
                issue_date=meta.issue_date.isoformat(),
                created=now,
                modified=now,
                **_meta_values(meta),
            )
        )
        return meta

    @staticmethod
    def _update_quote(conn: Connection, meta: QuoteMeta) -> None:
        result = conn.execute(
            update(quotes)
            .where(quotes.c.id == meta.quote_id)
            .values(
                issue_date=meta.issue_date.isoformat(),
                modified=_now_iso(),
                **_meta_values(meta),
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(str(meta.quote_id), kind="quote")


def _rekey(item: QuoteItem, id_map: dict[str, str]) -> QuoteItem:
    new_id = id_map.get(item.id, item.id)
    new_parent = id_map.get(item.parent_id, item.parent_id) if item.parent_id else None
    if new_id == item.id and new_parent == item.parent_id:
        return item
    return item.model_copy(update={"id": new_id, "parent_id": new_parent})


def _item_to_row(item: QuoteItem, quote_id: str) -> dict[str, Any]:
    row = item.model_dump(mode="python")
    row["quote_id"] = quote_id
    row["type"] = str(item.type)
    row["discount_mode"] = str(item.discount_mode) if item.discount_mode else None
    for col in _DECIMAL_COLUMNS:
        value = row[col]
        row[col] = str(value) if value is not None else None
    return row


def _row_to_item(row: Row[Any]) -> QuoteItem:
    data = dict(row._mapping)
    data.pop("quote_id", None)
    for col in _DECIMAL_COLUMNS:
        if data[col] is not None:
            data[col] = Decimal(data[col])
    return build_item(data)


def _row_to_meta(row: Row[Any]) -> QuoteMeta:
    return QuoteMeta(
        quote_id=row.id,
        number=row.number,
        status=row.status,
        client_name=row.client_name,
        client_address=row.client_address,
        project_name=row.project_name,
        issue_date=date.fromisoformat(row.issue_date),
        validity_period=row.validity_period,
        notes=row.notes,
        conditions=row.conditions,
    )


def _meta_values(meta: QuoteMeta) -> dict[str, Any]:
    values: dict[str, Any] = {col: str(getattr(meta, col)) for col in _META_COLUMNS}
    values["validity_period"] = meta.validity_period
    return values
