"""QuoteService — load, edit and persist quotes.

Pipeline for every edit: LOAD → DISPATCH (all-or-nothing) → SAVE → REKEY
→ RESPOND. Nothing is written unless every intent was accepted.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from quotectl.domain.catalog import entry_to_item_fields
from quotectl.domain.discounts import DiscountResolver
from quotectl.domain.errors import QuoteError, ValidationError
from quotectl.domain.intents import AddItem, Intent, UpdateQuoteInfo
from quotectl.domain.items import QuoteItem
from quotectl.domain.ports import BulkSavePayload
from quotectl.domain.quote import QuoteMeta
from quotectl.services.base import BaseService
from quotectl.services.contracts import ListQuotesResultData, dump_validated, snapshot_data
from quotectl.services.mutation import MutationController
from quotectl.services.result import ServiceError, ServiceResult, error_result
from quotectl.services.telemetry import trace_span, traced


class QuoteService(BaseService):
    """Quote lifecycle operations backed by the workspace repository."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def create_quote(self, **fields: Any) -> ServiceResult:
        """Create an empty draft quote."""
        op = "create_quote"
        fields.setdefault("validity_period", self._workspace.settings.quote.validity_days)
        try:
            meta = QuoteMeta.model_validate(fields)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ())) or "quote"
            return error_result(op, ValidationError(field, str(first.get("msg"))))

        meta = self._workspace.repository.create(meta)
        controller = self._controller([], meta)
        data = snapshot_data(controller.snapshot, id=meta.quote_id, number=meta.number)
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    def list_quotes(self) -> ServiceResult:
        rows = self._workspace.repository.list_quotes()
        data = dump_validated(ListQuotesResultData, {"count": len(rows), "items": rows})
        return ServiceResult(ok=True, op="list_quotes", data=data)

    @traced
    def show(self, quote_id: str) -> ServiceResult:
        op = "show_quote"
        try:
            controller = self._load(quote_id)
        except QuoteError as exc:
            return error_result(op, exc)
        return ServiceResult(ok=True, op=op, data=snapshot_data(controller.snapshot, id=quote_id))

    @traced
    def apply(
        self,
        quote_id: str,
        intents: Sequence[Intent | dict[str, Any]],
        *,
        op: str = "apply",
    ) -> ServiceResult:
        """Apply *intents* to a stored quote and save, all-or-nothing.

        On the first rejected intent nothing is saved and the failure is
        returned. Temporary ids in the response are replaced by server ids.
        """
        try:
            controller = self._load(quote_id)
        except QuoteError as exc:
            return error_result(op, exc)

        with trace_span("dispatch"):
            result = controller.dispatch_all(intents)
        if not result.ok:
            return result.model_copy(update={"op": op})

        warnings = list(result.warnings)
        id_map: dict[str, str] = {}
        snapshot = controller.snapshot
        if snapshot.dirty:
            with trace_span("save"):
                saved = self._workspace.repository.bulk_save(
                    BulkSavePayload(
                        quote=snapshot.meta,
                        items=list(snapshot.items),
                        totals=snapshot.calculations.document,
                    )
                )
            rekeyed = controller.apply_saved(saved.id_map, saved.quote)
            if not rekeyed.ok:
                return rekeyed.model_copy(update={"op": op})
            id_map = saved.id_map
            self._dispatch_event(
                "post_save", {"quote_id": quote_id, "id_map": id_map}, warnings
            )

        item_ids = [id_map.get(i, i) for i in result.data.get("item_ids", [])]
        data = snapshot_data(
            controller.snapshot,
            id=quote_id,
            applied=result.data.get("applied", 0),
            item_ids=item_ids,
            id_map=id_map,
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def add_from_catalog(
        self,
        quote_id: str,
        entry_id: str,
        *,
        parent_id: str | None = None,
        position: int | None = None,
    ) -> ServiceResult:
        """Append a leaf built from a catalog entry."""
        op = "add_from_catalog"
        catalog = self._workspace.catalog
        if catalog is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="CATALOG_NOT_CONFIGURED",
                    message="No catalog configured; set [catalog] path in quotectl.toml",
                ),
            )
        try:
            entry = catalog.get(entry_id)
        except QuoteError as exc:
            return error_result(op, exc)
        fields = entry_to_item_fields(
            entry,
            default_vat_rate=self._workspace.settings.vat.default_rate,
            parent_id=parent_id,
        )
        return self.apply(quote_id, [AddItem(item=fields, position=position)], op=op)

    def update_info(self, quote_id: str, changes: dict[str, Any]) -> ServiceResult:
        return self.apply(quote_id, [UpdateQuoteInfo(changes=changes)], op="update_quote_info")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, quote_id: str) -> MutationController:
        meta, items = self._workspace.repository.load(quote_id)
        return self._controller(items, meta)

    def _controller(self, items: list[QuoteItem], meta: QuoteMeta) -> MutationController:
        settings = self._workspace.settings
        return MutationController.from_items(
            items,
            meta,
            permitted_rates=settings.vat.permitted_rates,
            default_rate=settings.vat.default_rate,
            default_unit=settings.quote.default_unit,
            resolver=DiscountResolver(settings.discount.default_designation),
            plugins=self._workspace.plugins,
            history_limit=settings.editor.history_limit,
        )
