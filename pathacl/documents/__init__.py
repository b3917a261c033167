"""Safe construction of path-scoped JSON documents."""
from __future__ import annotations

from .moves import HierarchicalMove, HierarchicalMoveBuilder
from .subobject import at_path, is_safe_fragment, is_safe_key

__all__ = [
    "HierarchicalMove",
    "HierarchicalMoveBuilder",
    "at_path",
    "is_safe_fragment",
    "is_safe_key",
]
