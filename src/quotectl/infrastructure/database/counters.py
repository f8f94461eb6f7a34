"""Atomic sequential ID generation for quotes and persisted items.

Uses the ``id_counters`` table inside the caller's transaction, so an id
is only consumed if the surrounding save commits. Minimum 4 digits,
grows naturally past 9999.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update

from quotectl.infrastructure.database.schema import id_counters

if TYPE_CHECKING:
    from sqlalchemy import Connection

QUOTE_PREFIX = "QT-"
ITEM_PREFIX = "ITM-"

_VALID_PREFIXES = frozenset({QUOTE_PREFIX, ITEM_PREFIX})


def next_sequential_id(conn: Connection, type_prefix: str) -> str:
    """Claim the next sequential ID for *type_prefix*.

    Args:
        conn: Active SQLAlchemy connection (caller owns the transaction).
        type_prefix: One of ``"QT-"`` or ``"ITM-"``.

    Returns:
        The new ID string (e.g. ``"QT-0001"`` or ``"ITM-0042"``).

    Raises:
        ValueError: If *type_prefix* is not a recognized sequential type.
    """
    if type_prefix not in _VALID_PREFIXES:
        msg = (
            f"Unknown sequential type prefix: {type_prefix!r}. "
            f"Expected one of {sorted(_VALID_PREFIXES)}"
        )
        raise ValueError(msg)

    row = conn.execute(
        select(id_counters.c.next_value).where(id_counters.c.type_prefix == type_prefix)
    ).one()

    current_value: int = row.next_value

    conn.execute(
        update(id_counters)
        .where(id_counters.c.type_prefix == type_prefix)
        .values(next_value=current_value + 1)
    )

    return f"{type_prefix}{current_value:04d}"
