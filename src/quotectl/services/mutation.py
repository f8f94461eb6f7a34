"""MutationController — the single entry point for editing a quote.

Every edit is an intent. Dispatch runs one pipeline:

    VALIDATE → APPLY → REBUILD INDEX → RECOMPUTE → SNAPSHOT

Validation and application work on copy-on-write stores, so a rejected
intent never touches the current snapshot. Accepted intents push the
previous snapshot onto a bounded undo history.

State per mutation: ``idle → validating → (rejected | applying →
recomputing → idle)``.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal, DecimalException
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from quotectl.domain.calculation import calculate, prevailing_vat_rate
from quotectl.domain.catalog import LaborEntry, MaterialEntry, WorkEntry, entry_to_item_fields
from quotectl.domain.discounts import DiscountResolver
from quotectl.domain.errors import InvariantViolation, QuoteError, ValidationError
from quotectl.domain.intents import (
    AddItem,
    ApplyDiscount,
    Intent,
    MoveItem,
    RemoveItem,
    UpdateItem,
    UpdateQuoteInfo,
    parse_intent,
)
from quotectl.domain.items import (
    DISCOUNT_FIELDS,
    PRICED_FIELDS,
    PROTECTED_FIELDS,
    TEMP_ID_PREFIX,
    QuoteItem,
    build_item,
    check_item_rules,
    is_temporary_id,
    new_temp_id,
    revise_item,
)
from quotectl.domain.lifecycle import QUOTE_TRANSITIONS, is_valid_transition
from quotectl.domain.money import to_decimal
from quotectl.domain.positions import PositionSequencer, sibling_items
from quotectl.domain.quote import PROTECTED_QUOTE_FIELDS, QuoteMeta
from quotectl.domain.snapshot import QuoteSnapshot
from quotectl.domain.store import ItemStore
from quotectl.domain.types import DiscountMode, ItemType, can_have_children
from quotectl.infrastructure.graph.hierarchy import HierarchyIndex
from quotectl.services.base import dispatch_hook
from quotectl.services.result import ServiceError, ServiceResult, error_result
from quotectl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from quotectl.plugins.manager import PluginManager

log = structlog.get_logger(__name__)

DEFAULT_PERMITTED_RATES: tuple[Decimal, ...] = tuple(Decimal(r) for r in (0, 7, 10, 14, 20))
DEFAULT_VAT_RATE = Decimal(20)

type _Entry = WorkEntry | MaterialEntry | LaborEntry


class MutationState(StrEnum):
    """Where the controller is in the current (or last) mutation."""

    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    APPLYING = "applying"
    RECOMPUTING = "recomputing"


class _Plan:
    """The outcome of validating and applying one intent off to the side."""

    __slots__ = ("item_ids", "meta", "store")

    def __init__(self, store: ItemStore, meta: QuoteMeta, item_ids: list[str]) -> None:
        self.store = store
        self.meta = meta
        self.item_ids = item_ids


class MutationController:
    """Owns one quote's item tree and applies intents to it serially.

    Args:
        snapshot: Starting state. Its items must already satisfy every
            structural invariant; use :meth:`from_items` for raw data.
        permitted_rates: VAT rates an item may carry.
        default_rate: VAT rate for new leaves that do not name one.
        default_unit: Unit for new leaves that do not name one.
        resolver: Builds discount items.
        id_factory: Produces temporary ids for new items.
        plugins: Receives ``post_mutation`` after every accepted intent.
        history_limit: Number of snapshots kept for :meth:`undo`.
    """

    def __init__(
        self,
        snapshot: QuoteSnapshot | None = None,
        *,
        permitted_rates: Iterable[Decimal] = DEFAULT_PERMITTED_RATES,
        default_rate: Decimal = DEFAULT_VAT_RATE,
        default_unit: str = "u",
        resolver: DiscountResolver | None = None,
        id_factory: Callable[[], str] = new_temp_id,
        plugins: PluginManager | None = None,
        history_limit: int = 50,
    ) -> None:
        self._snapshot = snapshot or QuoteSnapshot()
        self._store = ItemStore(self._snapshot.items)
        self._permitted_rates = frozenset(permitted_rates)
        if default_rate not in self._permitted_rates:
            raise ValidationError("default_rate", f"{default_rate} is not a permitted rate")
        self._default_rate = default_rate
        self._default_unit = default_unit
        self._resolver = resolver or DiscountResolver()
        self._id_factory = id_factory
        self._plugins = plugins
        self._history: deque[QuoteSnapshot] = deque(maxlen=history_limit)
        self._state = MutationState.IDLE

    @classmethod
    def from_items(
        cls,
        items: Iterable[QuoteItem],
        meta: QuoteMeta | None = None,
        **kwargs: Any,
    ) -> MutationController:
        """Build a controller from loaded data.

        Positions are renumbered per scope, the hierarchy is validated and
        totals are computed. The resulting snapshot is clean.

        Raises:
            InvariantViolation: If the items form an invalid tree.
        """
        store = PositionSequencer.normalize(ItemStore(items))
        snapshot = _build_snapshot(store, meta or QuoteMeta(), revision=0, dirty=False)
        return cls(snapshot, **kwargs)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> QuoteSnapshot:
        """The current immutable snapshot."""
        return self._snapshot

    @property
    def state(self) -> MutationState:
        return self._state

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    @traced
    def dispatch(self, intent: Intent | dict[str, Any]) -> ServiceResult:
        """Validate and apply one intent, all-or-nothing.

        A dict is parsed into an intent first. Domain errors come back as a
        failed result; the snapshot is then exactly what it was before.
        """
        self._state = MutationState.VALIDATING
        if isinstance(intent, dict):
            try:
                intent = parse_intent(intent)
            except PydanticValidationError as exc:
                return self._reject(str(intent.get("kind", "dispatch")), _intent_error(exc))
        op = intent.kind
        warnings: list[str] = []

        try:
            with trace_span("apply"):
                plan = self._plan(intent, warnings)
            if plan.store is self._store and plan.meta is self._snapshot.meta:
                self._state = MutationState.IDLE
                return ServiceResult(
                    ok=True,
                    op=op,
                    data={"item_ids": plan.item_ids, "revision": self._snapshot.revision},
                    warnings=[*warnings, "No changes applied"],
                )
            self._state = MutationState.RECOMPUTING
            with trace_span("recompute"):
                snapshot = _build_snapshot(
                    plan.store, plan.meta, revision=self._snapshot.revision + 1, dirty=True
                )
        except QuoteError as exc:
            return self._reject(op, exc)
        except DecimalException:
            return self._reject(op, ValidationError("amount", "numeric value out of range"))

        self._commit(plan.store, snapshot)
        log.debug("mutation.applied", op=op, revision=snapshot.revision, item_ids=plan.item_ids)
        dispatch_hook(
            self._plugins,
            "post_mutation",
            {
                "quote_id": snapshot.meta.quote_id,
                "op": op,
                "revision": snapshot.revision,
                "item_ids": plan.item_ids,
            },
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"item_ids": plan.item_ids, "revision": snapshot.revision},
            warnings=warnings,
        )

    def dispatch_all(self, intents: Sequence[Intent | dict[str, Any]]) -> ServiceResult:
        """Apply a batch of intents as one unit.

        Stops at the first rejected intent and restores the snapshot held
        before the batch; the failure's detail carries the intent ``index``.
        The batch leaves a single undo entry.
        """
        start_store, start_snapshot = self._store, self._snapshot
        start_history = list(self._history)
        plugins, self._plugins = self._plugins, None
        try:
            result = self._dispatch_batch(intents)
        finally:
            self._plugins = plugins
        if not result.ok:
            self._store, self._snapshot = start_store, start_snapshot
            self._history = deque(start_history, maxlen=self._history.maxlen)
            return result
        if self._snapshot is start_snapshot:
            return result

        self._history = deque(start_history, maxlen=self._history.maxlen)
        self._history.append(start_snapshot)
        warnings = list(result.warnings)
        dispatch_hook(
            self._plugins,
            "post_mutation",
            {
                "quote_id": self._snapshot.meta.quote_id,
                "op": "apply",
                "revision": self._snapshot.revision,
                "item_ids": result.data["item_ids"],
            },
            warnings,
        )
        return result.model_copy(update={"warnings": warnings})

    def _dispatch_batch(self, intents: Sequence[Intent | dict[str, Any]]) -> ServiceResult:
        warnings: list[str] = []
        item_ids: list[str] = []
        for index, intent in enumerate(intents):
            result = self.dispatch(intent)
            if not result.ok:
                assert result.error is not None
                return ServiceResult(
                    ok=False,
                    op="apply",
                    warnings=warnings,
                    error=ServiceError(
                        code=result.error.code,
                        message=f"Intent {index} ({result.op}): {result.error.message}",
                        detail={**result.error.detail, "index": index, "op": result.op},
                    ),
                )
            warnings.extend(result.warnings)
            item_ids.extend(i for i in result.data.get("item_ids", []) if i not in item_ids)

        return ServiceResult(
            ok=True,
            op="apply",
            data={
                "applied": len(intents),
                "item_ids": item_ids,
                "revision": self._snapshot.revision,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Convenience wrappers (one per intent kind)
    # ------------------------------------------------------------------

    def add_item(self, item: dict[str, Any], *, position: int | None = None) -> ServiceResult:
        return self.dispatch({"kind": "add_item", "item": item, "position": position})

    def update_item(self, item_id: str, changes: dict[str, Any]) -> ServiceResult:
        return self.dispatch({"kind": "update_item", "item_id": item_id, "changes": changes})

    def remove_item(self, item_id: str) -> ServiceResult:
        return self.dispatch({"kind": "remove_item", "item_id": item_id})

    def move_item(self, item_id: str, position: int, **kwargs: Any) -> ServiceResult:
        """Reorder within the current parent. Pass ``parent_id`` to assert it."""
        return self.dispatch(
            {"kind": "move_item", "item_id": item_id, "position": position, **kwargs}
        )

    def apply_discount(
        self,
        mode: DiscountMode | str,
        value: Decimal | int | str,
        *,
        vat_rate: Decimal | int | str | None = None,
        designation: str | None = None,
        parent_id: str | None = None,
    ) -> ServiceResult:
        return self.dispatch(
            {
                "kind": "apply_discount",
                "mode": mode,
                "value": value,
                "vat_rate": vat_rate,
                "designation": designation,
                "parent_id": parent_id,
            }
        )

    def update_quote_info(self, changes: dict[str, Any]) -> ServiceResult:
        return self.dispatch({"kind": "update_quote_info", "changes": changes})

    def add_from_catalog(
        self,
        entry: _Entry,
        *,
        parent_id: str | None = None,
        position: int | None = None,
    ) -> ServiceResult:
        """Append a leaf built from a catalog entry."""
        fields = entry_to_item_fields(entry, default_vat_rate=self._default_rate, parent_id=parent_id)
        return self.dispatch(AddItem(item=fields, position=position))

    # ------------------------------------------------------------------
    # History and persistence hand-off
    # ------------------------------------------------------------------

    def undo(self) -> ServiceResult:
        """Restore the snapshot before the last accepted mutation.

        The revision keeps increasing; the restored state is dirty.
        """
        if not self._history:
            return ServiceResult(
                ok=False,
                op="undo",
                error=ServiceError(code="NOTHING_TO_UNDO", message="No mutation to undo"),
            )
        previous = self._history.pop()
        snapshot = previous.model_copy(
            update={"revision": self._snapshot.revision + 1, "dirty": True}
        )
        self._store = ItemStore(snapshot.items)
        self._snapshot = snapshot
        self._state = MutationState.IDLE
        log.debug("mutation.undone", revision=snapshot.revision)
        return ServiceResult(ok=True, op="undo", data={"revision": snapshot.revision})

    def apply_saved(self, id_map: dict[str, str], meta: QuoteMeta | None = None) -> ServiceResult:
        """Re-key temporary ids to server ids after a successful save.

        Hierarchy and positions are untouched. The snapshot becomes clean and
        the undo history is cleared because it refers to temporary ids.
        """
        try:
            store = self._store.rekey(id_map)
        except QuoteError as exc:
            return error_result("apply_saved", exc)
        snapshot = _build_snapshot(
            store,
            meta or self._snapshot.meta,
            revision=self._snapshot.revision,
            dirty=False,
        )
        self._store = store
        self._snapshot = snapshot
        self._history.clear()
        return ServiceResult(ok=True, op="apply_saved", data={"id_map": dict(id_map)})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reject(self, op: str, exc: QuoteError) -> ServiceResult:
        self._state = MutationState.REJECTED
        log.debug("mutation.rejected", op=op, code=exc.code, message=exc.message)
        return error_result(op, exc)

    def _commit(self, store: ItemStore, snapshot: QuoteSnapshot) -> None:
        self._history.append(self._snapshot)
        self._store = store
        self._snapshot = snapshot
        self._state = MutationState.IDLE

    def _applying(self) -> None:
        self._state = MutationState.APPLYING

    def _plan(self, intent: Intent, warnings: list[str]) -> _Plan:
        match intent:
            case AddItem():
                return self._plan_add(intent)
            case UpdateItem():
                return self._plan_update(intent, warnings)
            case RemoveItem():
                return self._plan_remove(intent)
            case MoveItem():
                return self._plan_move(intent)
            case ApplyDiscount():
                return self._plan_discount(intent)
            case UpdateQuoteInfo():
                return self._plan_quote_info(intent, warnings)
        msg = f"Unsupported intent: {intent!r}"
        raise ValidationError("kind", msg)

    # -- add ---------------------------------------------------------------

    def _plan_add(self, intent: AddItem) -> _Plan:
        data = dict(intent.item)
        if data.get("type") == ItemType.DISCOUNT:
            raise ValidationError("type", "discount items are created with apply_discount")
        if "id" in data and not is_temporary_id(str(data["id"])):
            raise ValidationError(
                "id", f"new items need a temporary id starting with {TEMP_ID_PREFIX!r}"
            )
        data.pop("position", None)
        for field in ("total_ht", "total_ttc", "reference_total"):
            data.pop(field, None)
        data.setdefault("id", self._id_factory())
        if data.get("type") not in (ItemType.CHAPTER, ItemType.SECTION):
            data.setdefault("vat_rate", self._default_rate)
            data.setdefault("unit", self._default_unit)

        item = build_item(data)
        check_item_rules(item, self._permitted_rates)
        self._check_parent(item.id, item.parent_id)
        order = [i.id for i in sibling_items(self._store, item.parent_id)]
        new_order = PositionSequencer.insert(order, item.id, intent.position)

        self._applying()
        store = PositionSequencer.resequence(self._store.add(item), new_order)
        return _Plan(store, self._snapshot.meta, [item.id])

    # -- update ------------------------------------------------------------

    def _plan_update(self, intent: UpdateItem, warnings: list[str]) -> _Plan:
        item = self._store.get(intent.item_id)
        changes = _filter_fields(item, intent.changes, warnings)

        if item.is_discount:
            revised = self._revise_discount(item, changes)
        else:
            revised = revise_item(item, changes)
        check_item_rules(revised, self._permitted_rates)

        if revised == item:
            return _Plan(self._store, self._snapshot.meta, [item.id])
        self._applying()
        return _Plan(self._store.replace(revised), self._snapshot.meta, [item.id])

    def _revise_discount(self, item: QuoteItem, changes: dict[str, Any]) -> QuoteItem:
        try:
            mode = DiscountMode(changes["discount_mode"]) if "discount_mode" in changes else None
        except ValueError:
            raise ValidationError(
                "discount_mode", f"must be one of {[m.value for m in DiscountMode]}"
            ) from None
        value = _decimal_field(changes, "discount_value")
        vat_rate = _decimal_field(changes, "vat_rate")
        return self._resolver.re_resolve(
            item,
            mode=mode,
            value=value,
            vat_rate=vat_rate,
            designation=changes.get("designation"),
            description=changes.get("description"),
        )

    # -- remove ------------------------------------------------------------

    def _plan_remove(self, intent: RemoveItem) -> _Plan:
        item = self._store.get(intent.item_id)
        index = HierarchyIndex(self._store)
        descendants = index.descendants(item.id)
        doomed = [item.id, *(i.id for i, _ in index.walk() if i.id in descendants)]

        self._applying()
        store = self._store.remove(doomed)
        store = PositionSequencer.resequence_scope(store, item.parent_id)
        return _Plan(store, self._snapshot.meta, doomed)

    # -- move --------------------------------------------------------------

    def _plan_move(self, intent: MoveItem) -> _Plan:
        item = self._store.get(intent.item_id)
        if "parent_id" in intent.model_fields_set and intent.parent_id != item.parent_id:
            index = HierarchyIndex(self._store)
            if index.would_create_cycle(item.id, intent.parent_id):
                raise InvariantViolation(
                    f"Moving {item.id} under {intent.parent_id} would create a cycle",
                    rule="cycle",
                    id=item.id,
                    parent_id=intent.parent_id,
                )
            raise InvariantViolation(
                f"Items can only be reordered within their parent ({item.parent_id or 'root'})",
                rule="cross_parent_move",
                id=item.id,
                parent_id=intent.parent_id,
            )

        order = [i.id for i in sibling_items(self._store, item.parent_id)]
        new_order = PositionSequencer.move(order, item.id, intent.position)
        if new_order == order:
            return _Plan(self._store, self._snapshot.meta, [item.id])

        self._applying()
        store = PositionSequencer.resequence(self._store, new_order)
        return _Plan(store, self._snapshot.meta, [item.id])

    # -- discount ----------------------------------------------------------

    def _plan_discount(self, intent: ApplyDiscount) -> _Plan:
        vat_rate = intent.vat_rate
        if vat_rate is None:
            vat_rate = prevailing_vat_rate(self._store, self._default_rate)
        self._check_parent(None, intent.parent_id)

        item = self._resolver.resolve(
            item_id=self._id_factory(),
            mode=intent.mode,
            value=intent.value,
            reference_total=self._snapshot.calculations.document.total_ht,
            vat_rate=vat_rate,
            designation=intent.designation,
            parent_id=intent.parent_id,
        )
        check_item_rules(item, self._permitted_rates)
        order = [i.id for i in sibling_items(self._store, item.parent_id)]
        new_order = PositionSequencer.insert(order, item.id)

        self._applying()
        store = PositionSequencer.resequence(self._store.add(item), new_order)
        return _Plan(store, self._snapshot.meta, [item.id])

    # -- quote info --------------------------------------------------------

    def _plan_quote_info(self, intent: UpdateQuoteInfo, warnings: list[str]) -> _Plan:
        meta = self._snapshot.meta
        changes: dict[str, Any] = {}
        for key, value in intent.changes.items():
            if key in PROTECTED_QUOTE_FIELDS:
                warnings.append(f"Cannot change immutable field: {key}")
            elif key not in QuoteMeta.model_fields:
                warnings.append(f"Unknown field ignored: {key}")
            else:
                changes[key] = value

        if "status" in changes and str(changes["status"]) != meta.status:
            current, target = str(meta.status), str(changes["status"])
            if not is_valid_transition(current, target):
                allowed = QUOTE_TRANSITIONS.get(current, [])
                raise ValidationError(
                    "status",
                    f"Invalid status transition: {current} -> {target}. Allowed: {allowed}",
                )

        merged = {**meta.model_dump(exclude={"expiry_date"}), **changes}
        try:
            updated = QuoteMeta.model_validate(merged)
        except PydanticValidationError as exc:
            raise _intent_error(exc) from exc
        if updated == meta:
            return _Plan(self._store, meta, [])
        self._applying()
        return _Plan(self._store, updated, [])

    # -- shared checks -----------------------------------------------------

    def _check_parent(self, item_id: str | None, parent_id: str | None) -> None:
        if parent_id is None:
            return
        parent = self._store.find(parent_id)
        if parent is None:
            raise InvariantViolation(
                f"Parent {parent_id} does not exist",
                rule="unknown_parent",
                id=item_id,
                parent_id=parent_id,
            )
        if not can_have_children(parent.type):
            raise InvariantViolation(
                f"Items cannot be placed under {parent.type} {parent.id}",
                rule="parent_not_structural",
                id=item_id,
                parent_id=parent_id,
            )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_snapshot(store: ItemStore, meta: QuoteMeta, *, revision: int, dirty: bool) -> QuoteSnapshot:
    """Validate the tree, compute totals and freeze everything into a snapshot."""
    index = HierarchyIndex.build(store)
    calcs = calculate(store)
    items: list[QuoteItem] = []
    for item in index.ordered():
        totals = calcs.per_item[item.id]
        if not item.is_discount and (
            item.total_ht != totals.total_ht or item.total_ttc != totals.total_ttc
        ):
            item = item.model_copy(
                update={"total_ht": totals.total_ht, "total_ttc": totals.total_ttc}
            )
        items.append(item)
    return QuoteSnapshot(
        meta=meta,
        items=tuple(items),
        calculations=calcs,
        revision=revision,
        dirty=dirty,
    )


def _filter_fields(item: QuoteItem, changes: dict[str, Any], warnings: list[str]) -> dict[str, Any]:
    """Drop fields an update may not touch on *item*, warning for each."""
    kept: dict[str, Any] = {}
    for key, value in changes.items():
        if key in PROTECTED_FIELDS:
            warnings.append(f"Cannot change immutable field: {key}")
        elif key not in QuoteItem.model_fields:
            warnings.append(f"Unknown field ignored: {key}")
        elif item.is_discount and key not in DISCOUNT_FIELDS:
            warnings.append(f"Field {key} does not apply to discount items")
        elif not item.is_discount and key in ("discount_mode", "discount_value"):
            warnings.append(f"Field {key} only applies to discount items")
        elif item.is_structural and key in PRICED_FIELDS:
            warnings.append(f"Field {key} does not apply to {item.type} items")
        else:
            kept[key] = value
    return kept


def _decimal_field(changes: dict[str, Any], field: str) -> Decimal | None:
    if field not in changes or changes[field] is None:
        return None
    try:
        return to_decimal(changes[field])
    except ValueError as exc:
        raise ValidationError(field, str(exc)) from exc


def _intent_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "intent"
    return ValidationError(field, str(first.get("msg", "invalid value")))
