import json

import pytest

from pathacl.documents import at_path, is_safe_fragment, is_safe_key
from pathacl.utils.errors import UnsafeFragmentError, UnsafeKeyError

SUB_OBJECT = {
    "foo": "bar",
    "array": [1, 2, 3],
    "sub": {"ok": True},
    "null": None,
}


@pytest.mark.parametrize(
    "path, expected",
    [
        ([], SUB_OBJECT),
        (["x"], {"x": SUB_OBJECT}),
        (["x", "y", "z"], {"x": {"y": {"z": SUB_OBJECT}}}),
    ],
)
def test_fragment_lands_at_path(path, expected) -> None:
    assert json.loads(at_path(path, json.dumps(SUB_OBJECT))) == expected


def test_wrapping_is_compact() -> None:
    assert at_path([], "{}") == "{}"
    assert at_path(["x"], "{}") == '{"x":{}}'
    assert at_path(["a", "b"], '{"c":1}') == '{"a":{"b":{"c":1}}}'


@pytest.mark.parametrize(
    "fragment",
    [
        "{}",
        '{"abc": [1, 2, 3]}',
        '{"foo": "}}}\\"}}}"}',
        '{"nested": {"deeper": {"x": "{"}}}',
    ],
)
def test_accepts_valid_fragments(fragment: str) -> None:
    assert is_safe_fragment(fragment)
    assert json.loads(at_path([], fragment)) == json.loads(fragment)


@pytest.mark.parametrize(
    "fragment",
    [
        "",
        " {}",
        "{} ",
        "123",
        "null",
        "[1, 2, 3]",
        '{"foo}',
        '{"foo":{"bar":42}',
        '{"foo":{"bar":42}}}',
        '{},"other":{"injection":true}',
        '{"abc": "string\\\\"},"other":{"injection":true}',
        'null},"y":{"z":1',
    ],
)
def test_rejects_unsafe_fragments(fragment: str) -> None:
    assert not is_safe_fragment(fragment)
    with pytest.raises(UnsafeFragmentError):
        at_path(["x"], fragment)


@pytest.mark.parametrize("key", ["", "abc", "äöü", "a-b-c 1 2 3 & 4"])
def test_accepts_valid_keys(key: str) -> None:
    assert is_safe_key(key)
    assert json.loads(at_path([key], "{}")) == {key: {}}


@pytest.mark.parametrize("key", ['possible"injection', "escaping closing quote\\"])
def test_rejects_unsafe_keys(key: str) -> None:
    assert not is_safe_key(key)
    with pytest.raises(UnsafeKeyError) as info:
        at_path(["x", key, "y"], "{}")
    assert info.value.key == key


def test_fragment_is_checked_before_keys() -> None:
    with pytest.raises(UnsafeFragmentError):
        at_path(['bad"key'], "not an object")
