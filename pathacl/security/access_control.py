"""Access control facade over per-resource permission trees.

:class:`AccessControl` keeps one :class:`~pathacl.permissions.PermissionTree`
per ``(resource_id, owner)`` pair. A tree is created by the first grant and
dropped again as soon as its root holds nothing, after which queries behave
as if it never existed. Since ownership of a resource can change between
calls, the owner is part of the key and always passed in by the caller.

Mutations authorize the caller against the tree they are about to change:

* granting requires access that lasts at least until the new expiration;
* revoking someone else's grant, or resetting a subtree, requires unlimited
  full access;
* revoking one's own grant and expiring stale grants are always allowed.

The owner implicitly has access everywhere.
"""
from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from pathacl.core.config import LimitsSettings
from pathacl.permissions.engine import MAX_INSTANT, DefinedKeys, PermissionTree
from pathacl.security.events import (
    EventListener,
    GrantIssued,
    GrantRevoked,
    PermissionEvent,
    SubtreeExpired,
    SubtreeReset,
)
from pathacl.utils.errors import InvalidTimeError, PathTooLongError, UnauthorizedError
from pathacl.utils.logging import get_logger

logger = get_logger(__name__)

TreeKey = Tuple[int, str]


def _wall_clock() -> int:
    return int(time.time())


class AccessControl:
    """Authorize and apply permission changes for many resources."""

    def __init__(
        self,
        *,
        clock: Optional[Callable[[], int]] = None,
        limits: Optional[LimitsSettings] = None,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self._clock = clock or _wall_clock
        self.limits = limits or LimitsSettings()
        self._listeners: List[EventListener] = list(listeners)
        self._trees: Dict[TreeKey, PermissionTree] = {}
        self._locks: Dict[TreeKey, asyncio.Lock] = {}
        self._lock_users: Dict[TreeKey, int] = {}

    def now(self) -> int:
        return self._clock()

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    # -- queries -----------------------------------------------------------------
    def has_access(
        self,
        resource_id: int,
        owner: str,
        path: Sequence[str],
        principal: str,
        at_time: Optional[int] = None,
    ) -> bool:
        """Return whether ``principal`` may act on ``path`` at ``at_time``.

        ``at_time`` defaults to the current instant. The owner always has
        access.
        """

        path = self._validate_path(path)
        if principal == owner:
            return True
        if at_time is None:
            at_time = self.now()
        tree = self._trees.get((resource_id, owner))
        if tree is None:
            if at_time == 0:
                raise InvalidTimeError()
            return False
        return tree.check(path, principal, at_time)

    def node_exists(self, resource_id: int, owner: str, path: Sequence[str]) -> bool:
        tree = self._trees.get((resource_id, owner))
        return tree is not None and tree.node_exists(self._validate_path(path))

    def permission_exists(
        self,
        resource_id: int,
        owner: str,
        path: Sequence[str],
        principal: str,
        fallback_only: bool,
    ) -> bool:
        return self.get_expiration(resource_id, owner, path, principal, fallback_only) > 0

    def get_expiration(
        self,
        resource_id: int,
        owner: str,
        path: Sequence[str],
        principal: str,
        fallback_only: bool,
    ) -> int:
        tree = self._trees.get((resource_id, owner))
        if tree is None:
            return 0
        return tree.get_expiration(self._validate_path(path), principal, fallback_only)

    def defined_keys(self, resource_id: int, owner: str, path: Sequence[str]) -> DefinedKeys:
        tree = self._trees.get((resource_id, owner))
        if tree is None:
            return DefinedKeys([], [], [])
        return tree.defined_keys(self._validate_path(path))

    # -- mutations ---------------------------------------------------------------
    async def grant(
        self,
        resource_id: int,
        owner: str,
        path: Sequence[str],
        principal: str,
        expiration: int,
        fallback_only: bool = False,
        *,
        caller: str,
    ) -> None:
        path = self._validate_path(path)
        key = (resource_id, owner)
        async with self._key_lock(key):
            if not self.has_access(resource_id, owner, path, caller, expiration):
                raise UnauthorizedError(caller, "grant")
            tree = self._trees.get(key)
            if tree is None:
                tree = PermissionTree()
                tree.grant(path, principal, expiration, fallback_only)
                self._trees[key] = tree
            else:
                tree.grant(path, principal, expiration, fallback_only)
            logger.info(
                "granted access",
                extra={"resource_id": resource_id, "principal": principal, "path": list(path)},
            )
        self._emit(
            GrantIssued(
                resource_id,
                owner,
                path,
                principal=principal,
                expiration=expiration,
                fallback_only=fallback_only,
                caller=caller,
            )
        )

    async def revoke(
        self,
        resource_id: int,
        owner: str,
        path: Sequence[str],
        principal: str,
        fallback_only: bool = False,
        *,
        caller: str,
    ) -> None:
        path = self._validate_path(path)
        key = (resource_id, owner)
        async with self._key_lock(key):
            if caller != principal and not self.has_access(
                resource_id, owner, path, caller, MAX_INSTANT
            ):
                raise UnauthorizedError(caller, "revoke")
            tree = self._trees.get(key)
            if tree is not None:
                tree.revoke(path, principal, fallback_only)
                self._prune_root(key)
            logger.info(
                "revoked access",
                extra={"resource_id": resource_id, "principal": principal, "path": list(path)},
            )
        self._emit(
            GrantRevoked(
                resource_id, owner, path, principal=principal, fallback_only=fallback_only, caller=caller
            )
        )

    async def reset_subtree(
        self, resource_id: int, owner: str, path: Sequence[str], *, caller: str
    ) -> None:
        """Clear ``path`` and everything below it.

        A non-owner caller keeps unlimited full access at ``path`` afterwards.
        """

        path = self._validate_path(path)
        key = (resource_id, owner)
        async with self._key_lock(key):
            if not self.has_access(resource_id, owner, path, caller, MAX_INSTANT):
                raise UnauthorizedError(caller, "reset")
            tree = self._trees.get(key)
            if tree is not None:
                tree.revoke_subtree(path)
            if caller == owner:
                self._prune_root(key)
            else:
                if tree is None:
                    tree = self._trees[key] = PermissionTree()
                tree.grant(path, caller, MAX_INSTANT, False)
            logger.info("reset subtree", extra={"resource_id": resource_id, "path": list(path)})
        self._emit(SubtreeReset(resource_id, owner, path, caller=caller))

    async def expire_subtree(
        self, resource_id: int, owner: str, path: Sequence[str], *, caller: str = ""
    ) -> None:
        """Remove grants below ``path`` that expired before now.

        Anyone may run this; it only drops records that no longer grant
        anything. Pruning an emptied explicit node can unshadow an ancestor's
        fallback grant.
        """

        path = self._validate_path(path)
        key = (resource_id, owner)
        async with self._key_lock(key):
            at_time = self.now()
            tree = self._trees.get(key)
            if tree is not None:
                tree.expire_subtree(path, at_time)
                self._prune_root(key)
            logger.info("expired subtree", extra={"resource_id": resource_id, "path": list(path)})
        self._emit(SubtreeExpired(resource_id, owner, path, at_time=at_time, caller=caller))

    # -- internals ---------------------------------------------------------------
    def _validate_path(self, path: Sequence[str]) -> Tuple[str, ...]:
        path = tuple(path)
        if len(path) > self.limits.max_path_depth:
            raise PathTooLongError(
                f"path has {len(path)} segments, limit is {self.limits.max_path_depth}"
            )
        for segment in path:
            if len(segment) > self.limits.max_segment_length:
                raise PathTooLongError(
                    f"path segment exceeds {self.limits.max_segment_length} characters"
                )
        return path

    @asynccontextmanager
    async def _key_lock(self, key: TreeKey) -> AsyncIterator[None]:
        """Serialize mutations of one key.

        The lock is dropped once no task uses it and the key holds no tree,
        so untouched or pruned keys do not accumulate locks.
        """

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                if key not in self._trees:
                    del self._locks[key]

    def _prune_root(self, key: TreeKey) -> None:
        tree = self._trees.get(key)
        if tree is not None and tree.is_empty():
            del self._trees[key]
            logger.debug("dropped empty permission tree", extra={"resource_id": key[0], "owner": key[1]})

    def _emit(self, event: PermissionEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as exc:  # pragma: no cover - logging side effects only
                logger.exception("event listener failed", exc_info=exc)


__all__ = ["AccessControl", "TreeKey"]
