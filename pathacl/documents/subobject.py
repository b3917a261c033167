"""Embed untrusted JSON objects at a path inside a larger document.

The fragment is not parsed. :func:`is_safe_fragment` only tracks brace depth
and string literals, which is enough to guarantee that after wrapping with
:func:`at_path` the fragment either stays exactly at its nesting position or
the whole result fails to parse. Some valid JSON objects (for example with
surrounding whitespace) are rejected as well.
"""
from __future__ import annotations

from typing import Sequence

from pathacl.utils.errors import UnsafeFragmentError, UnsafeKeyError


def is_safe_fragment(fragment: str) -> bool:
    """Return whether ``fragment`` is a single brace-balanced object."""

    if not fragment or fragment[0] != "{":
        return False

    depth = 1
    in_string = False
    escaped = False
    last = len(fragment) - 1
    for index in range(1, len(fragment)):
        char = fragment[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0 and index != last:
                return False

    return depth == 0


def is_safe_key(segment: str) -> bool:
    """Return whether ``segment`` can be quoted verbatim as an object key."""

    return '"' not in segment and "\\" not in segment


def at_path(path: Sequence[str], fragment: str) -> str:
    """Wrap ``fragment`` so that it sits at ``path``.

    >>> at_path(["x", "y"], '{"z":1}')
    '{"x":{"y":{"z":1}}}'

    Raises :class:`UnsafeFragmentError` or :class:`UnsafeKeyError` instead of
    producing a document the fragment could escape from.
    """

    if not is_safe_fragment(fragment):
        raise UnsafeFragmentError()

    result = fragment
    for segment in reversed(path):
        if not is_safe_key(segment):
            raise UnsafeKeyError(segment)
        result = '{"' + segment + '":' + result + "}"
    return result


__all__ = ["is_safe_fragment", "is_safe_key", "at_path"]
