"""Unordered key collections with O(1) insertion and removal.

Keys are kept in a list for enumeration together with a companion mapping
from key to list index. Removing a key moves the last element into the freed
slot, so enumeration order is insertion order only until the first removal.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Hashable, Iterator, List, TypeVar

K = TypeVar("K", bound=Hashable)


class SwapIndex(Generic[K]):
    """Ordered set of keys supporting constant-time removal."""

    def __init__(self) -> None:
        self._keys: List[K] = []
        self._index: Dict[K, int] = {}

    def add(self, key: K) -> bool:
        """Add ``key``; return ``False`` if it was already present."""

        if key in self._index:
            return False
        self._index[key] = len(self._keys)
        self._keys.append(key)
        return True

    def discard(self, key: K) -> bool:
        """Remove ``key`` by swapping in the last element; return whether it was present."""

        position = self._index.pop(key, None)
        if position is None:
            return False
        last = self._keys.pop()
        if position < len(self._keys):
            self._keys[position] = last
            self._index[last] = position
        return True

    def clear(self) -> None:
        self._keys.clear()
        self._index.clear()

    def keys(self) -> List[K]:
        """Return a snapshot of the keys in enumeration order."""

        return list(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._keys))


@dataclass(frozen=True)
class PrincipalEntry:
    """Read-only view of one principal's grant in a map."""

    expiration: int
    exists: bool


_ABSENT = PrincipalEntry(expiration=0, exists=False)


class AddressPermissionMap:
    """Principal to expiration instant, enumerable in O(1)-maintained order."""

    def __init__(self) -> None:
        self._principals: SwapIndex[str] = SwapIndex()
        self._expirations: Dict[str, int] = {}

    def get(self, principal: str) -> PrincipalEntry:
        expiration = self._expirations.get(principal)
        if expiration is None:
            return _ABSENT
        return PrincipalEntry(expiration=expiration, exists=True)

    def expiration(self, principal: str) -> int:
        """Return the stored expiration, or ``0`` when the principal is absent."""

        return self._expirations.get(principal, 0)

    def set(self, principal: str, expiration: int) -> None:
        if expiration <= 0:
            raise ValueError("stored expirations must be positive")
        self._principals.add(principal)
        self._expirations[principal] = expiration

    def remove(self, principal: str) -> bool:
        if not self._principals.discard(principal):
            return False
        del self._expirations[principal]
        return True

    def clear(self) -> None:
        self._principals.clear()
        self._expirations.clear()

    def principals(self) -> List[str]:
        return self._principals.keys()

    def __contains__(self, principal: object) -> bool:
        return principal in self._principals

    def __len__(self) -> int:
        return len(self._principals)

    def __iter__(self) -> Iterator[str]:
        return iter(self._principals)

    def __repr__(self) -> str:
        return f"AddressPermissionMap({dict((p, self._expirations[p]) for p in self._principals)!r})"


__all__ = ["SwapIndex", "PrincipalEntry", "AddressPermissionMap"]
