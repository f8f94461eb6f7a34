"""Tests for payload contracts."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from quotectl.services.contracts import (
    ListQuotesResultData,
    QuoteViewData,
    dump_validated,
    snapshot_data,
)
from quotectl.services.mutation import MutationController


@pytest.fixture
def populated(controller: MutationController) -> MutationController:
    controller.add_item({"id": "tmp-lot", "type": "chapter", "designation": "Lot 1"})
    controller.add_item(
        {
            "type": "work",
            "designation": "Enduit",
            "parent_id": "tmp-lot",
            "quantity": 3,
            "unit_price": "33.335",
        }
    )
    return controller


class TestSnapshotData:
    def test_depth_in_tree_order(self, populated: MutationController) -> None:
        data = snapshot_data(populated.snapshot)
        assert [(i["id"], i["depth"]) for i in data["items"]] == [("tmp-lot", 0), ("tmp-1", 1)]

    def test_sections_rounded(self, populated: MutationController) -> None:
        data = snapshot_data(populated.snapshot)
        assert data["sections"]["tmp-lot"]["total_ht"] == "100.01"

    def test_columns_and_revision(self, populated: MutationController) -> None:
        data = snapshot_data(populated.snapshot)
        assert data["columns"] == {"vat": True, "discount": False}
        assert data["revision"] == 2
        assert data["dirty"] is True

    def test_extra_keys_kept(self, populated: MutationController) -> None:
        data = snapshot_data(populated.snapshot, id_map={"a": "b"})
        assert data["id_map"] == {"a": "b"}

    def test_empty_snapshot(self, controller: MutationController) -> None:
        data = snapshot_data(controller.snapshot)
        assert data["items"] == []
        assert data["vat_breakdown"] == []


class TestDumpValidated:
    def test_list_payload(self) -> None:
        row = {
            "id": "QT-0001",
            "number": "QT-0001",
            "status": "draft",
            "client_name": "",
            "project_name": "",
            "issue_date": "2026-01-01",
            "total_ht": "0",
            "total_ttc": "0",
        }
        out = dump_validated(ListQuotesResultData, {"count": 1, "items": [row]})
        assert out["items"][0]["id"] == "QT-0001"

    def test_missing_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            dump_validated(QuoteViewData, {"quote": {}})
