"""Events emitted by the access control facade."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, ClassVar, Dict, Tuple


@dataclass(frozen=True)
class PermissionEvent:
    """Base class; ``action`` names the event in audit records."""

    action: ClassVar[str] = "permission"

    resource_id: int
    owner: str
    path: Tuple[str, ...]
    caller: str = field(default="", kw_only=True)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["path"] = list(self.path)
        return payload


@dataclass(frozen=True)
class GrantIssued(PermissionEvent):
    action: ClassVar[str] = "grant"

    principal: str
    expiration: int
    fallback_only: bool

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        # MAX_INSTANT exceeds the 64-bit range of most JSON readers.
        payload["expiration"] = str(self.expiration)
        return payload


@dataclass(frozen=True)
class GrantRevoked(PermissionEvent):
    action: ClassVar[str] = "revoke"

    principal: str
    fallback_only: bool


@dataclass(frozen=True)
class SubtreeReset(PermissionEvent):
    action: ClassVar[str] = "reset"


@dataclass(frozen=True)
class SubtreeExpired(PermissionEvent):
    action: ClassVar[str] = "expire"

    at_time: int


EventListener = Callable[[PermissionEvent], None]


__all__ = [
    "PermissionEvent",
    "GrantIssued",
    "GrantRevoked",
    "SubtreeReset",
    "SubtreeExpired",
    "EventListener",
]
