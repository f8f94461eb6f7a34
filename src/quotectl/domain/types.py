"""Item types and classification enums.

Six item types split into three families: structural grouping nodes,
priced leaves, and signed discount pseudo-leaves.
"""

from __future__ import annotations

from enum import StrEnum


class ItemType(StrEnum):
    """Line item types in a quote tree."""

    CHAPTER = "chapter"
    SECTION = "section"
    WORK = "work"
    PRODUCT = "product"
    SERVICE = "service"
    DISCOUNT = "discount"


class DiscountMode(StrEnum):
    """How a document discount amount is derived."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CatalogKind(StrEnum):
    """Catalog entry kinds supplied by the library collaborator."""

    WORK = "work"
    MATERIAL = "material"
    LABOR = "labor"


STRUCTURAL_TYPES: frozenset[ItemType] = frozenset({ItemType.CHAPTER, ItemType.SECTION})
PRICED_TYPES: frozenset[ItemType] = frozenset({ItemType.WORK, ItemType.PRODUCT, ItemType.SERVICE})

# Catalog kind -> item type of the leaf it becomes.
CATALOG_ITEM_TYPES: dict[CatalogKind, ItemType] = {
    CatalogKind.WORK: ItemType.WORK,
    CatalogKind.MATERIAL: ItemType.PRODUCT,
    CatalogKind.LABOR: ItemType.SERVICE,
}


def is_structural(item_type: str) -> bool:
    """Chapters and sections group other items and carry no price."""
    return item_type in STRUCTURAL_TYPES


def is_priced(item_type: str) -> bool:
    return item_type in PRICED_TYPES


def can_have_children(item_type: str) -> bool:
    """Only structural items may be parents."""
    return is_structural(item_type)
