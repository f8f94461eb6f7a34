"""Mutation intents — the explicit, serializable vocabulary of edits.

Every change to a quote is one of these models. They carry no behavior;
the mutation controller interprets them. ``kind`` discriminates the union
so a JSON list of intents can be parsed in one call::

    intents = parse_intents([
        {"kind": "add_item", "item": {"type": "chapter", "designation": "Lot 1"}},
        {"kind": "apply_discount", "mode": "percentage", "value": 10},
    ])
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from quotectl.domain.types import DiscountMode


class AddItem(BaseModel):
    """Insert a new item; ``position`` None appends to the end of the scope."""

    model_config = {"frozen": True}

    kind: Literal["add_item"] = "add_item"
    item: dict[str, Any]
    position: int | None = None


class UpdateItem(BaseModel):
    """Patch fields of an existing item."""

    model_config = {"frozen": True}

    kind: Literal["update_item"] = "update_item"
    item_id: str
    changes: dict[str, Any]


class RemoveItem(BaseModel):
    """Delete an item and, for structural items, all descendants."""

    model_config = {"frozen": True}

    kind: Literal["remove_item"] = "remove_item"
    item_id: str


class MoveItem(BaseModel):
    """Reorder an item among its siblings (1-based target position).

    ``parent_id`` is optional; when given it must name the current parent.
    """

    model_config = {"frozen": True}

    kind: Literal["move_item"] = "move_item"
    item_id: str
    position: int
    parent_id: str | None = None


class ApplyDiscount(BaseModel):
    """Append a document discount computed against the current HT total."""

    model_config = {"frozen": True}

    kind: Literal["apply_discount"] = "apply_discount"
    mode: DiscountMode
    value: Decimal
    vat_rate: Decimal | None = None
    designation: str | None = None
    parent_id: str | None = None


class UpdateQuoteInfo(BaseModel):
    """Patch quote metadata (client, dates, notes, status...)."""

    model_config = {"frozen": True}

    kind: Literal["update_quote_info"] = "update_quote_info"
    changes: dict[str, Any]


Intent = Annotated[
    AddItem | UpdateItem | RemoveItem | MoveItem | ApplyDiscount | UpdateQuoteInfo,
    Field(discriminator="kind"),
]

_INTENT_ADAPTER: TypeAdapter[Intent] = TypeAdapter(Intent)
_INTENT_LIST_ADAPTER: TypeAdapter[list[Intent]] = TypeAdapter(list[Intent])


def parse_intent(data: dict[str, Any]) -> Intent:
    """Validate one intent dict.

    Raises:
        pydantic.ValidationError: If the payload matches no intent.
    """
    return _INTENT_ADAPTER.validate_python(data)


def parse_intents(data: list[dict[str, Any]]) -> list[Intent]:
    return _INTENT_LIST_ADAPTER.validate_python(data)
