"""SQLAlchemy Core table definitions for the quotectl database.

Monetary and quantity columns are TEXT holding ``Decimal`` strings so that
values round-trip exactly; SQLite REAL would reintroduce binary floats.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, Table, Text

metadata = MetaData()

quotes = Table(
    "quotes",
    metadata,
    Column("id", Text, primary_key=True),
    Column("number", Text, nullable=False, unique=True),
    Column("status", Text, nullable=False),
    Column("client_name", Text, nullable=False, default="", server_default=""),
    Column("client_address", Text, nullable=False, default="", server_default=""),
    Column("project_name", Text, nullable=False, default="", server_default=""),
    Column("issue_date", Text, nullable=False),
    Column("validity_period", Integer, nullable=False, default=30, server_default="30"),
    Column("notes", Text, nullable=False, default="", server_default=""),
    Column("conditions", Text, nullable=False, default="", server_default=""),
    # Rounded document totals, materialized on every save for listings
    Column("total_ht", Text, nullable=False, default="0", server_default="0"),
    Column("total_vat", Text, nullable=False, default="0", server_default="0"),
    Column("total_ttc", Text, nullable=False, default="0", server_default="0"),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

quote_items = Table(
    "quote_items",
    metadata,
    Column("id", Text, primary_key=True),
    Column("quote_id", Text, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False),
    Column("parent_id", Text),  # same-quote item id, NULL for roots
    Column("position", Integer, nullable=False),
    Column("type", Text, nullable=False),
    Column("designation", Text, nullable=False),
    Column("description", Text, nullable=False, default="", server_default=""),
    Column("reference", Text),
    Column("unit", Text, nullable=False),
    Column("quantity", Text, nullable=False),
    Column("unit_price", Text, nullable=False),
    Column("discount_percentage", Text, nullable=False),
    Column("vat_rate", Text, nullable=False),
    Column("work_id", Text),
    Column("margin", Text),
    Column("discount_mode", Text),
    Column("discount_value", Text),
    Column("reference_total", Text),
    Column("total_ht", Text, nullable=False),
    Column("total_ttc", Text, nullable=False),
)

Index("ix_quote_items_quote", quote_items.c.quote_id)
Index("ix_quotes_status", quotes.c.status)

id_counters = Table(
    "id_counters",
    metadata,
    Column("type_prefix", Text, primary_key=True),
    Column("next_value", Integer, nullable=False, default=1, server_default="1"),
)
