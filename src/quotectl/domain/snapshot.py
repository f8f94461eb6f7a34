"""QuoteSnapshot: the immutable state handed to every consumer."""

from __future__ import annotations

from pydantic import BaseModel, Field

from quotectl.domain.calculation import Calculations
from quotectl.domain.errors import NotFoundError
from quotectl.domain.items import QuoteItem
from quotectl.domain.quote import QuoteMeta


class QuoteSnapshot(BaseModel):
    """Quote metadata, items in tree order, and their calculations.

    Attributes:
        items: Depth-first tree order (roots by position, each followed by
            its descendants). Derived totals are filled in.
        revision: Incremented by every accepted mutation.
        dirty: True when the snapshot holds changes not yet persisted.
    """

    model_config = {"frozen": True}

    meta: QuoteMeta = Field(default_factory=QuoteMeta)
    items: tuple[QuoteItem, ...] = ()
    calculations: Calculations = Field(default_factory=Calculations)
    revision: int = 0
    dirty: bool = False

    def item(self, item_id: str) -> QuoteItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise NotFoundError(item_id)

    def children(self, parent_id: str | None) -> list[QuoteItem]:
        """Direct children of *parent_id* (``None`` = roots), by position."""
        return sorted(
            (item for item in self.items if item.parent_id == parent_id),
            key=lambda item: item.position,
        )
