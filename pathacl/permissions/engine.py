"""Permission tree algorithms.

A :class:`PermissionTree` stores, for one resource, which principals may act
on which sub-paths and until when. Every node holds two maps:

* *full access* applies to the node's own path and everything below it;
* *fallback access* applies to every strictly deeper path that has no
  explicit node of its own. An explicit child node shadows the fallback of
  its ancestors even when the child holds no live grants, until the child is
  pruned by a revoke, reset or expiry pass.

Grants are monotonic: a principal's expiration in a map can only be kept or
extended through :meth:`PermissionTree.grant`. Removal happens through
:meth:`~PermissionTree.revoke`, :meth:`~PermissionTree.revoke_subtree` and
:meth:`~PermissionTree.expire_subtree`, which are total over any path.
"""
from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence

from pathacl.permissions.tree import NodeArena, NodeHandle
from pathacl.utils.errors import GrantNotExtendingError, InvalidTimeError, ZeroExpirationError
from pathacl.utils.logging import get_logger

logger = get_logger(__name__)

MAX_INSTANT = 2**256 - 1

Path = Sequence[str]


class DefinedKeys(NamedTuple):
    """Keys defined directly at one node."""

    children: List[str]
    full_access: List[str]
    fallback_access: List[str]


class PermissionTree:
    """Path-scoped permissions of one resource, rooted at :attr:`root`."""

    def __init__(self) -> None:
        self._arena = NodeArena()
        self.root: NodeHandle = self._arena.allocate()

    @property
    def exists(self) -> bool:
        """Whether anything was ever granted in this tree."""

        return self._arena.get(self.root).exists

    def __len__(self) -> int:
        return len(self._arena)

    # -- queries -----------------------------------------------------------------
    def check(self, path: Path, principal: str, at_time: int) -> bool:
        """Return whether ``principal`` has access to ``path`` at ``at_time``."""

        if at_time == 0:
            raise InvalidTimeError()
        handle = self.root
        depth = 0
        while True:
            node = self._arena.get(handle)
            if node.full_access.expiration(principal) >= at_time:
                return True
            if depth == len(path):
                return False
            child = node.children.get(path[depth])
            if child is None:
                return node.fallback_access.expiration(principal) >= at_time
            handle = child
            depth += 1

    def node_exists(self, path: Path) -> bool:
        handle = self._lookup(path)
        return handle is not None and self._arena.get(handle).exists

    def is_empty(self, path: Path = ()) -> bool:
        """Return whether the node at ``path`` is absent or holds nothing."""

        handle = self._lookup(path)
        return handle is None or self._arena.get(handle).is_empty()

    def get_expiration(self, path: Path, principal: str, fallback_only: bool) -> int:
        handle = self._lookup(path)
        if handle is None:
            return 0
        return self._arena.get(handle).access_map(fallback_only).expiration(principal)

    def defined_keys(self, path: Path) -> DefinedKeys:
        handle = self._lookup(path)
        if handle is None:
            return DefinedKeys([], [], [])
        node = self._arena.get(handle)
        return DefinedKeys(
            children=node.child_keys.keys(),
            full_access=node.full_access.principals(),
            fallback_access=node.fallback_access.principals(),
        )

    # -- mutations ---------------------------------------------------------------
    def grant(self, path: Path, principal: str, expiration: int, fallback_only: bool) -> None:
        """Grant ``principal`` access at ``path`` until ``expiration``.

        Raises :class:`ZeroExpirationError` for a zero expiration and
        :class:`GrantNotExtendingError` if the principal already holds a
        longer grant in the same map. Nothing is materialized on failure.
        """

        if expiration == 0:
            raise ZeroExpirationError()
        current = self.get_expiration(path, principal, fallback_only)
        if expiration < current:
            raise GrantNotExtendingError(principal, current, expiration)
        handle = self._materialize(path)
        self._arena.get(handle).access_map(fallback_only).set(principal, expiration)

    def revoke(self, path: Path, principal: str, fallback_only: bool) -> None:
        """Remove ``principal``'s grant at ``path`` and prune emptied nodes."""

        handle = self._lookup(path)
        if handle is None:
            return
        self._arena.get(handle).access_map(fallback_only).remove(principal)
        self._prune_path(self.root, path, 0)

    def revoke_subtree(self, path: Path) -> None:
        """Clear every grant at and below ``path``.

        The node at ``path`` itself stays linked so the caller can populate it
        again as part of the same operation.
        """

        handle = self._lookup(path)
        if handle is not None:
            self._revoke_subtree(handle, delete_self=False)

    def expire_subtree(self, path: Path, at_time: int) -> None:
        """Drop grants that expired before ``at_time`` at and below ``path``."""

        handle = self._lookup(path)
        if handle is None:
            return
        self._expire(handle, at_time)
        self._prune_path(self.root, path, 0)

    # -- internals ---------------------------------------------------------------
    def _lookup(self, path: Path) -> Optional[NodeHandle]:
        handle = self.root
        for segment in path:
            child = self._arena.get(handle).children.get(segment)
            if child is None:
                return None
            handle = child
        return handle

    def _materialize(self, path: Path) -> NodeHandle:
        handle = self.root
        self._arena.get(handle).exists = True
        for segment in path:
            node = self._arena.get(handle)
            child = node.children.get(segment)
            if child is None:
                child = self._arena.allocate()
                self._arena.get(child).exists = True
                node.link(segment, child)
            handle = child
        return handle

    def _revoke_subtree(self, handle: NodeHandle, *, delete_self: bool) -> None:
        node = self._arena.get(handle)
        for segment in node.child_keys:
            self._revoke_subtree(node.children[segment], delete_self=True)
        node.children.clear()
        node.child_keys.clear()
        node.full_access.clear()
        node.fallback_access.clear()
        if delete_self:
            self._arena.release(handle)

    def _expire(self, handle: NodeHandle, at_time: int) -> None:
        node = self._arena.get(handle)
        for access in (node.full_access, node.fallback_access):
            for principal in reversed(access.principals()):
                if access.expiration(principal) < at_time:
                    access.remove(principal)
        # Reverse order: unlinking swaps the last key into the freed slot.
        for segment in reversed(node.child_keys.keys()):
            child = node.children[segment]
            self._expire(child, at_time)
            if self._arena.get(child).is_empty():
                self._unlink(handle, segment)

    def _prune_path(self, handle: NodeHandle, path: Path, depth: int) -> None:
        """Unlink empty nodes along ``path`` below ``handle``, deepest first."""

        if depth == len(path):
            return
        segment = path[depth]
        child = self._arena.get(handle).children.get(segment)
        if child is None:
            return
        self._prune_path(child, path, depth + 1)
        if self._arena.get(child).is_empty():
            self._unlink(handle, segment)

    def _unlink(self, parent: NodeHandle, segment: str) -> None:
        child = self._arena.get(parent).unlink(segment)
        if child is not None:
            self._arena.release(child)
            logger.debug("pruned permission node", extra={"path": segment})


__all__ = ["MAX_INSTANT", "DefinedKeys", "PermissionTree"]
