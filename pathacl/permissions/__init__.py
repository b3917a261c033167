"""Hierarchical, time-bounded permission trees."""
from __future__ import annotations

from .address_map import AddressPermissionMap, PrincipalEntry, SwapIndex
from .engine import MAX_INSTANT, DefinedKeys, PermissionTree
from .tree import NodeArena, PermissionTreeNode

__all__ = [
    "AddressPermissionMap",
    "PrincipalEntry",
    "SwapIndex",
    "MAX_INSTANT",
    "DefinedKeys",
    "PermissionTree",
    "NodeArena",
    "PermissionTreeNode",
]
