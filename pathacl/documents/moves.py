"""Build path-scoped documents on behalf of authorized callers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from pathacl.documents.subobject import at_path
from pathacl.security.access_control import AccessControl
from pathacl.utils.errors import UnauthorizedError
from pathacl.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class HierarchicalMove:
    """A document ready to be submitted for ``resource_id``."""

    resource_id: int
    owner: str
    path: Tuple[str, ...]
    document: str


class HierarchicalMoveBuilder:
    """Combine an access check with :func:`at_path`.

    The caller must have access to ``path`` at the current instant; the
    fragment then only ever lands inside that path.
    """

    def __init__(self, access_control: AccessControl) -> None:
        self._access = access_control

    def build(
        self,
        resource_id: int,
        owner: str,
        path: Sequence[str],
        fragment: str,
        *,
        caller: str,
    ) -> HierarchicalMove:
        path = tuple(path)
        if not self._access.has_access(resource_id, owner, path, caller):
            raise UnauthorizedError(caller, "send moves at " + "/".join(path))
        document = at_path(path, fragment)
        logger.debug(
            "built hierarchical move",
            extra={"resource_id": resource_id, "caller": caller, "path": list(path)},
        )
        return HierarchicalMove(resource_id=resource_id, owner=owner, path=path, document=document)


__all__ = ["HierarchicalMove", "HierarchicalMoveBuilder"]
