"""NetworkX-backed views over the item tree."""

from quotectl.infrastructure.graph.hierarchy import HierarchyIndex

__all__ = ["HierarchyIndex"]
