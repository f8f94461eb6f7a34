"""PositionSequencer: contiguous 1..N ordering within each parent scope.

All operations work on an ordered list of sibling ids and finish with a
full renumber of that scope, so a scope is never observed with gaps or
duplicates.
"""

from __future__ import annotations

from collections.abc import Sequence

from quotectl.domain.errors import ValidationError
from quotectl.domain.items import QuoteItem
from quotectl.domain.store import ItemStore


def sibling_items(store: ItemStore, parent_id: str | None) -> list[QuoteItem]:
    """Items directly under *parent_id* (``None`` = roots), in position order.

    Ties (e.g. unsequenced items at position 0) keep insertion order.
    """
    order = {item_id: idx for idx, item_id in enumerate(store.ids())}
    siblings = [item for item in store if item.parent_id == parent_id]
    return sorted(siblings, key=lambda item: (item.position, order[item.id]))


class PositionSequencer:
    """Stateless helpers that compute and apply sibling orderings."""

    @staticmethod
    def insert(order: Sequence[str], item_id: str, position: int | None = None) -> list[str]:
        """Place *item_id* into *order* at 1-based *position* (append if None).

        Raises:
            ValidationError: If *position* is outside ``1..len(order)+1``.
        """
        result = [i for i in order if i != item_id]
        if position is None:
            result.append(item_id)
            return result
        upper = len(result) + 1
        if not 1 <= position <= upper:
            raise ValidationError("position", f"must be between 1 and {upper}, got {position}")
        result.insert(position - 1, item_id)
        return result

    @staticmethod
    def move(order: Sequence[str], item_id: str, new_position: int) -> list[str]:
        """Move *item_id* to 1-based *new_position* among its siblings.

        Raises:
            ValidationError: If *new_position* is outside ``1..len(order)``.
        """
        if not 1 <= new_position <= len(order):
            raise ValidationError(
                "position", f"must be between 1 and {len(order)}, got {new_position}"
            )
        result = [i for i in order if i != item_id]
        result.insert(new_position - 1, item_id)
        return result

    @staticmethod
    def renumber(order: Sequence[str]) -> dict[str, int]:
        return {item_id: idx for idx, item_id in enumerate(order, start=1)}

    @classmethod
    def resequence(cls, store: ItemStore, order: Sequence[str]) -> ItemStore:
        """Write positions ``1..N`` for the ids in *order*.

        Only items whose position actually changes are replaced.
        """
        changed = [
            store.get(item_id).model_copy(update={"position": position})
            for item_id, position in cls.renumber(order).items()
            if store.get(item_id).position != position
        ]
        return store.replace_many(changed) if changed else store

    @classmethod
    def resequence_scope(cls, store: ItemStore, parent_id: str | None) -> ItemStore:
        """Close gaps in one scope, keeping the current relative order."""
        order = [item.id for item in sibling_items(store, parent_id)]
        return cls.resequence(store, order)

    @classmethod
    def normalize(cls, store: ItemStore) -> ItemStore:
        """Renumber every scope. Used on data loaded from outside the engine."""
        scopes = dict.fromkeys(item.parent_id for item in store)
        for parent_id in scopes:
            store = cls.resequence_scope(store, parent_id)
        return store
