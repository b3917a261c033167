import json

import pytest

from pathacl.documents import HierarchicalMoveBuilder
from pathacl.security import AccessControl
from pathacl.utils.errors import UnauthorizedError, UnsafeFragmentError


@pytest.mark.asyncio
async def test_moves_require_current_access() -> None:
    now = {"value": 1_000}
    acl = AccessControl(clock=lambda: now["value"])
    await acl.grant(1, "alice", ["sub"], "relayer", 1_100, False, caller="alice")
    builder = HierarchicalMoveBuilder(acl)

    now["value"] = 1_050
    with pytest.raises(UnauthorizedError):
        builder.build(1, "alice", ["other"], "{}", caller="relayer")
    move = builder.build(1, "alice", ["sub"], '{"foo":42}', caller="relayer")
    assert move.document == '{"sub":{"foo":42}}'
    assert move.path == ("sub",)

    now["value"] = 1_150
    with pytest.raises(UnauthorizedError):
        builder.build(1, "alice", ["sub"], "{}", caller="relayer")


@pytest.mark.asyncio
async def test_owner_moves_and_injection_rejection() -> None:
    acl = AccessControl(clock=lambda: 10)
    builder = HierarchicalMoveBuilder(acl)
    move = builder.build(3, "alice", [], '{"x":[1]}', caller="alice")
    assert json.loads(move.document) == {"x": [1]}

    with pytest.raises(UnsafeFragmentError):
        builder.build(3, "alice", ["sub"], 'null},"other":{"foo":42', caller="alice")
