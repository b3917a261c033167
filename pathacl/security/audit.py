"""Audit logging of permission changes."""

from __future__ import annotations

import asyncio
import json
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from pathacl.security.events import PermissionEvent
from pathacl.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AuditRecord:
    timestamp: datetime
    action: str
    caller: str
    metadata: Dict[str, Any]


class AuditTrail:
    """Persist permission events as JSON lines.

    Instances are callable so they can be registered directly as an event
    listener on :class:`~pathacl.security.access_control.AccessControl`.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def __call__(self, event: PermissionEvent) -> None:
        self.record(event)

    def record(self, event: PermissionEvent) -> None:
        entry = {"timestamp": time.time(), "action": event.action, "event": event.to_dict()}
        with self._lock, self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry) + "\n")
        logger.info(
            "audit %s",
            event.action,
            extra={"resource_id": event.resource_id, "owner": event.owner, "caller": event.caller},
        )

    def read_recent(self, limit: int = 100) -> List[Dict[str, Any]]:
        with self._lock:
            if not self.path.exists():
                return []
            lines = self.path.read_text(encoding="utf-8").strip().splitlines()[-limit:]
        entries = []
        for line in lines:
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:  # pragma: no cover - handles manual file edits
                logger.warning("skipping malformed audit line", extra={"path": str(self.path)})
        return entries


class AuditSystem:
    """Query audit trails from asynchronous code."""

    def __init__(self, log_path: Path) -> None:
        self.trail = AuditTrail(log_path)

    async def recent_events(self, limit: int = 50) -> List[AuditRecord]:
        entries = await asyncio.to_thread(self.trail.read_recent, limit)
        records = []
        for entry in entries:
            metadata = dict(entry.get("event", {}))
            records.append(
                AuditRecord(
                    timestamp=datetime.fromtimestamp(entry.get("timestamp", 0)),
                    action=entry.get("action", "unknown"),
                    caller=metadata.pop("caller", "") or "unknown",
                    metadata=metadata,
                )
            )
        logger.debug("loaded audit events", extra={"count": len(records)})
        return records


__all__ = ["AuditRecord", "AuditTrail", "AuditSystem"]
