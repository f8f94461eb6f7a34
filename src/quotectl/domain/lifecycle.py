"""Quote status lifecycle.

Status changes are validated against a transition map; everything else
about a quote's metadata can change freely while it is being edited.
"""

from __future__ import annotations

from enum import StrEnum


class QuoteStatus(StrEnum):
    """Commercial status of a quote."""

    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


QUOTE_TRANSITIONS: dict[str, list[str]] = {
    "draft": ["sent", "cancelled"],
    "sent": ["accepted", "rejected", "expired", "cancelled"],
    "expired": ["sent"],  # re-sent with a new validity period
    "accepted": [],
    "rejected": [],
    "cancelled": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = QUOTE_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
