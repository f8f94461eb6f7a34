"""Tests for HierarchyIndex queries and structural validation."""

from __future__ import annotations

import pytest

from quotectl.domain.errors import InvariantViolation, NotFoundError
from quotectl.domain.items import QuoteItem, build_item
from quotectl.domain.store import ItemStore
from quotectl.infrastructure.graph.hierarchy import HierarchyIndex


def _item(
    item_id: str,
    position: int,
    parent_id: str | None = None,
    item_type: str = "work",
) -> QuoteItem:
    return build_item(
        {
            "id": item_id,
            "type": item_type,
            "designation": item_id,
            "position": position,
            "parent_id": parent_id,
        }
    )


@pytest.fixture
def tree() -> ItemStore:
    """Two chapters; the first holds a section with one leaf plus a direct leaf."""
    return ItemStore(
        [
            _item("ch2", 2, item_type="chapter"),
            _item("ch1", 1, item_type="chapter"),
            _item("sec", 1, "ch1", item_type="section"),
            _item("leaf1", 1, "sec"),
            _item("leaf2", 2, "ch1"),
            _item("leaf3", 1, "ch2"),
        ]
    )


class TestQueries:
    def test_roots_by_position(self, tree: ItemStore) -> None:
        index = HierarchyIndex(tree)
        assert [i.id for i in index.roots()] == ["ch1", "ch2"]

    def test_children(self, tree: ItemStore) -> None:
        index = HierarchyIndex(tree)
        assert [i.id for i in index.children("ch1")] == ["sec", "leaf2"]
        assert index.children("leaf1") == []
        assert index.has_children("sec")
        assert not index.has_children("leaf3")

    def test_parent_of(self, tree: ItemStore) -> None:
        index = HierarchyIndex(tree)
        parent = index.parent_of("leaf1")
        assert parent is not None
        assert parent.id == "sec"
        assert index.parent_of("ch1") is None

    def test_descendants_and_ancestors(self, tree: ItemStore) -> None:
        index = HierarchyIndex(tree)
        assert index.descendants("ch1") == {"sec", "leaf1", "leaf2"}
        assert index.ancestors("leaf1") == {"sec", "ch1"}
        assert index.depth("leaf1") == 2
        assert index.depth("ch2") == 0

    def test_unknown_id(self, tree: ItemStore) -> None:
        with pytest.raises(NotFoundError):
            HierarchyIndex(tree).descendants("ghost")

    def test_walk_depth_first(self, tree: ItemStore) -> None:
        walked = [(item.id, depth) for item, depth in HierarchyIndex(tree).walk()]
        assert walked == [
            ("ch1", 0),
            ("sec", 1),
            ("leaf1", 2),
            ("leaf2", 1),
            ("ch2", 0),
            ("leaf3", 1),
        ]

    def test_ordered(self, tree: ItemStore) -> None:
        ids = [i.id for i in HierarchyIndex(tree).ordered()]
        assert ids == ["ch1", "sec", "leaf1", "leaf2", "ch2", "leaf3"]

    def test_would_create_cycle(self, tree: ItemStore) -> None:
        index = HierarchyIndex(tree)
        assert index.would_create_cycle("ch1", "leaf1")
        assert index.would_create_cycle("ch1", "ch1")
        assert not index.would_create_cycle("leaf1", "ch2")
        assert not index.would_create_cycle("leaf1", None)

    def test_graph_nodes(self, tree: ItemStore) -> None:
        graph = HierarchyIndex(tree).graph
        assert graph.number_of_nodes() == 6
        assert graph.has_edge("ch1", "sec")


class TestValidate:
    def test_valid_tree(self, tree: ItemStore) -> None:
        HierarchyIndex.build(tree)

    def test_empty_store(self) -> None:
        assert HierarchyIndex.build(ItemStore()).roots() == []

    def test_unknown_parent(self) -> None:
        store = ItemStore([_item("orphan", 1, "ghost")])
        with pytest.raises(InvariantViolation) as exc_info:
            HierarchyIndex.build(store)
        assert exc_info.value.rule == "unknown_parent"
        assert exc_info.value.detail["parent_id"] == "ghost"

    def test_parent_must_be_structural(self) -> None:
        store = ItemStore([_item("w", 1), _item("child", 1, "w")])
        with pytest.raises(InvariantViolation) as exc_info:
            HierarchyIndex.build(store)
        assert exc_info.value.rule == "parent_not_structural"

    def test_cycle(self) -> None:
        store = ItemStore(
            [
                _item("a", 1, "b", item_type="chapter"),
                _item("b", 1, "a", item_type="section"),
            ]
        )
        with pytest.raises(InvariantViolation) as exc_info:
            HierarchyIndex.build(store)
        assert exc_info.value.rule == "cycle"
        assert exc_info.value.detail["ids"] == ["a", "b"]

    def test_gap_in_positions(self) -> None:
        store = ItemStore([_item("a", 1), _item("b", 3)])
        with pytest.raises(InvariantViolation) as exc_info:
            HierarchyIndex.build(store)
        assert exc_info.value.rule == "non_contiguous_positions"

    def test_duplicate_positions(self) -> None:
        store = ItemStore([_item("a", 1), _item("b", 1)])
        with pytest.raises(InvariantViolation, match="not contiguous"):
            HierarchyIndex.build(store)
