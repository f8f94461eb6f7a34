"""Tests for sequential ID generation."""

from __future__ import annotations

import pytest
from sqlalchemy.engine import Engine

from quotectl.infrastructure.database.counters import ITEM_PREFIX, QUOTE_PREFIX, next_sequential_id


class TestNextSequentialId:
    def test_first_quote_id(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            result = next_sequential_id(conn, QUOTE_PREFIX)
        assert result == "QT-0001"

    def test_first_item_id(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            result = next_sequential_id(conn, ITEM_PREFIX)
        assert result == "ITM-0001"

    def test_sequential(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            ids = [next_sequential_id(conn, ITEM_PREFIX) for _ in range(3)]
        assert ids == ["ITM-0001", "ITM-0002", "ITM-0003"]

    def test_prefixes_are_independent(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            next_sequential_id(conn, ITEM_PREFIX)
            next_sequential_id(conn, ITEM_PREFIX)
            result = next_sequential_id(conn, QUOTE_PREFIX)
        assert result == "QT-0001"

    def test_rolled_back_ids_are_reused(self, db_engine: Engine) -> None:
        with pytest.raises(RuntimeError), db_engine.begin() as conn:
            next_sequential_id(conn, QUOTE_PREFIX)
            raise RuntimeError("abort")
        with db_engine.begin() as conn:
            assert next_sequential_id(conn, QUOTE_PREFIX) == "QT-0001"

    def test_grows_past_four_digits(self, db_engine: Engine) -> None:
        from sqlalchemy import update

        from quotectl.infrastructure.database.schema import id_counters

        with db_engine.begin() as conn:
            conn.execute(
                update(id_counters)
                .where(id_counters.c.type_prefix == ITEM_PREFIX)
                .values(next_value=10000)
            )
            assert next_sequential_id(conn, ITEM_PREFIX) == "ITM-10000"

    def test_unknown_prefix(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn, pytest.raises(ValueError, match="Unknown sequential"):
            next_sequential_id(conn, "NOPE-")
