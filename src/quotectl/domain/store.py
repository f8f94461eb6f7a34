"""ItemStore — immutable, keyed collection of quote items.

Every write returns a new store; the receiver is never modified. That
makes a mutation all-or-nothing by construction: a failed intent simply
drops the half-built store.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from quotectl.domain.errors import InvariantViolation, NotFoundError
from quotectl.domain.items import QuoteItem


class ItemStore:
    """Flat arena of items keyed by id, in insertion order."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[QuoteItem] = ()) -> None:
        self._items: dict[str, QuoteItem] = {}
        for item in items:
            if item.id in self._items:
                raise InvariantViolation(
                    f"Duplicate item id: {item.id}", rule="duplicate_id", id=item.id
                )
            self._items[item.id] = item

    @classmethod
    def _wrap(cls, items: dict[str, QuoteItem]) -> ItemStore:
        store = cls.__new__(cls)
        store._items = items
        return store

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, item_id: str) -> QuoteItem:
        """Return the item with *item_id*.

        Raises:
            NotFoundError: If no such item exists.
        """
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError(item_id) from None

    def find(self, item_id: str | None) -> QuoteItem | None:
        if item_id is None:
            return None
        return self._items.get(item_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[QuoteItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def ids(self) -> list[str]:
        return list(self._items)

    # ------------------------------------------------------------------
    # Copy-on-write updates
    # ------------------------------------------------------------------

    def add(self, item: QuoteItem) -> ItemStore:
        if item.id in self._items:
            raise InvariantViolation(
                f"Duplicate item id: {item.id}", rule="duplicate_id", id=item.id
            )
        items = dict(self._items)
        items[item.id] = item
        return self._wrap(items)

    def replace(self, item: QuoteItem) -> ItemStore:
        """Swap in a new version of an existing item."""
        return self.replace_many([item])

    def replace_many(self, items: Iterable[QuoteItem]) -> ItemStore:
        updated = dict(self._items)
        for item in items:
            if item.id not in updated:
                raise NotFoundError(item.id)
            updated[item.id] = item
        return self._wrap(updated)

    def remove(self, item_ids: Iterable[str]) -> ItemStore:
        doomed = set(item_ids)
        missing = doomed - self._items.keys()
        if missing:
            raise NotFoundError(sorted(missing)[0])
        return self._wrap({k: v for k, v in self._items.items() if k not in doomed})

    def rekey(self, mapping: Mapping[str, str]) -> ItemStore:
        """Rename ids per *mapping*, rewriting ``parent_id`` references too.

        Positions and insertion order are preserved.

        Raises:
            NotFoundError: If a source id is unknown.
            InvariantViolation: If a target id collides with a kept id.
        """
        for old in mapping:
            if old not in self._items:
                raise NotFoundError(old)
        kept = self._items.keys() - mapping.keys()
        targets = list(mapping.values())
        clashes = (set(targets) & kept) | {t for t in targets if targets.count(t) > 1}
        if clashes:
            clash = sorted(clashes)[0]
            raise InvariantViolation(f"Duplicate item id: {clash}", rule="duplicate_id", id=clash)

        rekeyed: dict[str, QuoteItem] = {}
        for item_id, item in self._items.items():
            new_id = mapping.get(item_id, item_id)
            new_parent = mapping.get(item.parent_id, item.parent_id) if item.parent_id else None
            if new_id != item_id or new_parent != item.parent_id:
                item = item.model_copy(update={"id": new_id, "parent_id": new_parent})
            rekeyed[new_id] = item
        return self._wrap(rekeyed)
