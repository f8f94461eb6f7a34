"""Domain error taxonomy.

Three recoverable failure families. None of them is fatal: the mutation
controller catches every :class:`QuoteError`, leaves the prior snapshot in
place, and reports the failure as a ``ServiceResult`` error.
"""

from __future__ import annotations

from typing import Any


class QuoteError(Exception):
    """Base class for all engine errors."""

    code: str = "QUOTE_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail or {}


class ValidationError(QuoteError):
    """A field value is outside its domain (negative quantity, bad VAT rate...)."""

    code = "VALIDATION_FAILED"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}", detail={"field": field})
        self.field = field


class InvariantViolation(QuoteError):
    """The mutation would corrupt the tree structure (cycle, orphan, gaps)."""

    code = "INVARIANT_VIOLATION"

    def __init__(self, message: str, *, rule: str, **detail: Any) -> None:
        super().__init__(message, detail={"rule": rule, **detail})
        self.rule = rule


class NotFoundError(QuoteError):
    """A referenced id does not exist (stale edit, removed item)."""

    code = "NOT_FOUND"

    def __init__(self, item_id: str, *, kind: str = "item") -> None:
        super().__init__(f"No {kind} found with ID: {item_id}", detail={"id": item_id})
        self.item_id = item_id
