"""Nodes of the permission tree and the arena that owns them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pathacl.permissions.address_map import AddressPermissionMap, SwapIndex

NodeHandle = int


@dataclass
class PermissionTreeNode:
    """A single path node.

    ``children`` maps a segment to the handle of the child node and
    ``child_keys`` enumerates exactly the segments present in ``children``.
    """

    exists: bool = False
    full_access: AddressPermissionMap = field(default_factory=AddressPermissionMap)
    fallback_access: AddressPermissionMap = field(default_factory=AddressPermissionMap)
    children: Dict[str, NodeHandle] = field(default_factory=dict)
    child_keys: SwapIndex[str] = field(default_factory=SwapIndex)

    def is_empty(self) -> bool:
        return not self.child_keys and not self.full_access and not self.fallback_access

    def access_map(self, fallback_only: bool) -> AddressPermissionMap:
        return self.fallback_access if fallback_only else self.full_access

    def link(self, segment: str, handle: NodeHandle) -> None:
        self.children[segment] = handle
        self.child_keys.add(segment)

    def unlink(self, segment: str) -> Optional[NodeHandle]:
        handle = self.children.pop(segment, None)
        self.child_keys.discard(segment)
        return handle


class NodeArena:
    """Owns tree nodes and hands out integer handles to them.

    Released slots are recycled by later allocations. Handles are plain
    values, so recursive algorithms pass them around instead of holding
    references into the structure.
    """

    def __init__(self) -> None:
        self._nodes: List[Optional[PermissionTreeNode]] = []
        self._free: List[NodeHandle] = []

    def allocate(self) -> NodeHandle:
        node = PermissionTreeNode()
        if self._free:
            handle = self._free.pop()
            self._nodes[handle] = node
            return handle
        self._nodes.append(node)
        return len(self._nodes) - 1

    def get(self, handle: NodeHandle) -> PermissionTreeNode:
        node = self._nodes[handle]
        if node is None:
            raise KeyError(f"node handle {handle} has been released")
        return node

    def release(self, handle: NodeHandle) -> None:
        node = self.get(handle)
        node.exists = False
        self._nodes[handle] = None
        self._free.append(handle)

    def __len__(self) -> int:
        return len(self._nodes) - len(self._free)


__all__ = ["NodeHandle", "PermissionTreeNode", "NodeArena"]
