"""Authorization facade, events and audit trail."""
from __future__ import annotations

from .access_control import AccessControl
from .audit import AuditRecord, AuditSystem, AuditTrail
from .events import GrantIssued, GrantRevoked, PermissionEvent, SubtreeExpired, SubtreeReset

__all__ = [
    "AccessControl",
    "AuditRecord",
    "AuditSystem",
    "AuditTrail",
    "GrantIssued",
    "GrantRevoked",
    "PermissionEvent",
    "SubtreeExpired",
    "SubtreeReset",
]
