"""Tests for the Rich renderers."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from quotectl.output.console import create_console, get_output
from quotectl.output.renderers import item_table, money, render_quiet, render_result
from quotectl.services.contracts import snapshot_data
from quotectl.services.mutation import MutationController
from quotectl.services.result import ServiceError, ServiceResult


@pytest.fixture
def quote_view(controller: MutationController) -> dict[str, Any]:
    controller.add_item({"id": "tmp-lot", "type": "chapter", "designation": "Gros oeuvre"})
    controller.add_item(
        {
            "type": "work",
            "designation": "Fondations",
            "parent_id": "tmp-lot",
            "quantity": 2,
            "unit": "m3",
            "unit_price": "617.25",
        }
    )
    return snapshot_data(controller.snapshot)


def _table_text(data: dict[str, Any], **kwargs: Any) -> str:
    console = create_console()
    console.print(item_table(data, **kwargs))
    return get_output(console)


class TestMoney:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1234.5", "1,234.50"), (Decimal("0.005"), "0.01"), ("-12", "-12.00"), (0, "0.00")],
    )
    def test_formats_cents(self, value: Any, expected: str) -> None:
        assert money(value) == expected


class TestItemTable:
    def test_outline_and_indent(self, quote_view: dict[str, Any]) -> None:
        text = _table_text(quote_view)
        assert "Gros oeuvre" in text
        assert "Fondations" in text
        assert "1.1" in text
        assert "1,234.50" in text

    def test_vat_column_follows_flags(self, quote_view: dict[str, Any]) -> None:
        assert "VAT %" in _table_text(quote_view)
        hidden = {**quote_view, "columns": {"vat": False, "discount": False}}
        assert "VAT %" not in _table_text(hidden)
        assert "Disc. %" not in _table_text(hidden)

    def test_verbose_shows_ids(self, quote_view: dict[str, Any]) -> None:
        assert "tmp-lot" in _table_text(quote_view, verbose=True)
        assert "tmp-lot" not in _table_text(quote_view)


class TestRenderResult:
    def test_quote_view(self, quote_view: dict[str, Any]) -> None:
        out = render_result(ServiceResult(ok=True, op="show_quote", data=quote_view), currency="MAD")
        assert out.startswith("OK")
        assert "VAT breakdown" in out
        assert "1,481.40 MAD" in out

    def test_empty_quote(self, controller: MutationController) -> None:
        data = snapshot_data(controller.snapshot)
        out = render_result(ServiceResult(ok=True, op="show_quote", data=data))
        assert "(no items)" in out

    def test_quote_list(self) -> None:
        row = {
            "id": "QT-0001",
            "number": "QT-0001",
            "status": "draft",
            "client_name": "ACME",
            "project_name": "",
            "issue_date": "2026-01-01",
            "total_ttc": "1200",
        }
        out = render_result(
            ServiceResult(ok=True, op="list_quotes", data={"count": 1, "items": [row]})
        )
        assert "ACME" in out
        assert "1,200.00" in out

    def test_empty_list(self) -> None:
        out = render_result(ServiceResult(ok=True, op="list_quotes", data={"items": []}))
        assert "No quotes found." in out

    def test_generic(self) -> None:
        out = render_result(ServiceResult(ok=True, op="undo", data={"revision": 4}))
        assert "revision: 4" in out

    def test_error(self) -> None:
        result = ServiceResult(
            ok=False,
            op="remove_item",
            error=ServiceError(code="NOT_FOUND", message="No item found with ID: x", detail={"id": "x"}),
        )
        out = render_result(result)
        assert out.startswith("ERROR")
        assert "No item found with ID: x" in out
        assert "detail:" not in out
        assert "detail:" in render_result(result, verbose=True)


class TestRenderQuiet:
    def test_item_ids(self) -> None:
        result = ServiceResult(ok=True, op="apply", data={"item_ids": ["ITM-0001", "ITM-0002"]})
        assert render_quiet(result) == "ITM-0001\nITM-0002"

    def test_list_ids(self) -> None:
        result = ServiceResult(
            ok=True, op="list_quotes", data={"items": [{"id": "QT-0001"}, {"id": "QT-0002"}]}
        )
        assert render_quiet(result) == "QT-0001\nQT-0002"

    def test_no_ids(self) -> None:
        assert render_quiet(ServiceResult(ok=True, op="undo")) == "OK: undo"

    def test_error(self) -> None:
        result = ServiceResult(
            ok=False, op="apply", error=ServiceError(code="NOT_FOUND", message="gone")
        )
        assert render_quiet(result).startswith("ERROR: apply")
