"""HierarchyIndex — derived parent/child views over an ItemStore.

Rebuilt from scratch after every mutation; trees hold at most a few
hundred items so a full rebuild is negligible. Edges point parent -> child
in a NetworkX ``DiGraph``; cycle and ancestry questions go to NetworkX.
"""

from __future__ import annotations

from collections.abc import Iterator

import networkx as nx

from quotectl.domain.errors import InvariantViolation, NotFoundError
from quotectl.domain.items import QuoteItem
from quotectl.domain.positions import sibling_items
from quotectl.domain.store import ItemStore
from quotectl.domain.types import can_have_children

type _Graph = nx.DiGraph


class HierarchyIndex:
    """Children-by-parent and root views with structural validation."""

    def __init__(self, store: ItemStore) -> None:
        self._store = store
        self._children: dict[str | None, list[QuoteItem]] = {}
        for parent_id in dict.fromkeys(item.parent_id for item in store):
            self._children[parent_id] = sibling_items(store, parent_id)

        g: _Graph = nx.DiGraph()
        for item in store:
            g.add_node(item.id, type=str(item.type))
        for item in store:
            if item.parent_id is not None and item.parent_id in store:
                g.add_edge(item.parent_id, item.id)
        self._graph = g

    @classmethod
    def build(cls, store: ItemStore) -> HierarchyIndex:
        """Build and validate an index.

        Raises:
            InvariantViolation: If the store breaks a structural invariant.
        """
        index = cls(store)
        index.validate()
        return index

    @property
    def graph(self) -> _Graph:
        return self._graph

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def roots(self) -> list[QuoteItem]:
        return list(self._children.get(None, []))

    def children(self, parent_id: str) -> list[QuoteItem]:
        return list(self._children.get(parent_id, []))

    def has_children(self, item_id: str) -> bool:
        return bool(self._children.get(item_id))

    def parent_of(self, item_id: str) -> QuoteItem | None:
        return self._store.find(self._store.get(item_id).parent_id)

    def descendants(self, item_id: str) -> set[str]:
        if item_id not in self._graph:
            raise NotFoundError(item_id)
        return set(nx.descendants(self._graph, item_id))

    def ancestors(self, item_id: str) -> set[str]:
        if item_id not in self._graph:
            raise NotFoundError(item_id)
        return set(nx.ancestors(self._graph, item_id))

    def depth(self, item_id: str) -> int:
        return len(self.ancestors(item_id))

    def would_create_cycle(self, item_id: str, new_parent_id: str | None) -> bool:
        """Whether re-parenting *item_id* under *new_parent_id* closes a loop."""
        if new_parent_id is None:
            return False
        return new_parent_id == item_id or new_parent_id in self.descendants(item_id)

    def walk(self) -> Iterator[tuple[QuoteItem, int]]:
        """Depth-first ``(item, depth)`` pairs in display order."""
        stack: list[tuple[QuoteItem, int]] = [(item, 0) for item in reversed(self.roots())]
        while stack:
            item, depth = stack.pop()
            yield item, depth
            for child in reversed(self._children.get(item.id, [])):
                stack.append((child, depth + 1))

    def ordered(self) -> list[QuoteItem]:
        return [item for item, _ in self.walk()]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check parent references, acyclicity and contiguous positions.

        Raises:
            InvariantViolation: On the first broken invariant.
        """
        for item in self._store:
            if item.parent_id is None:
                continue
            parent = self._store.find(item.parent_id)
            if parent is None:
                raise InvariantViolation(
                    f"Item {item.id} references unknown parent {item.parent_id}",
                    rule="unknown_parent",
                    id=item.id,
                    parent_id=item.parent_id,
                )
            if not can_have_children(parent.type):
                raise InvariantViolation(
                    f"Item {item.id} cannot be placed under {parent.type} {parent.id}",
                    rule="parent_not_structural",
                    id=item.id,
                    parent_id=parent.id,
                )

        try:
            cycle = nx.find_cycle(self._graph)
        except nx.NetworkXNoCycle:
            cycle = None
        if cycle:
            members = sorted({edge[0] for edge in cycle})
            raise InvariantViolation(
                f"Parent links form a cycle: {' -> '.join(members)}",
                rule="cycle",
                ids=members,
            )

        for parent_id, siblings in self._children.items():
            positions = [item.position for item in siblings]
            if positions != list(range(1, len(siblings) + 1)):
                raise InvariantViolation(
                    f"Positions under {parent_id or 'root'} are not contiguous: {positions}",
                    rule="non_contiguous_positions",
                    parent_id=parent_id,
                )
