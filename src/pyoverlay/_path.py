"""Key path normalization and nested assignment.

A key is either a property-path string (``"a.b"``, ``"a[0].b"``,
``'a["b.c"]'``) or a sequence of segments. Both normalize to a tuple of
string segments which is the identity used for matching fragments.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Sequence
from typing import Any

from pyoverlay.exceptions import InvalidKeyError

KeyPath = tuple[str, ...]
"""Canonical form of a key: ordered string segments."""

# Property-path grammar: bare names between dots, bracketed numbers,
# quoted bracketed names, and empty segments between consecutive dots.
_PROP_NAME_RE = re.compile(
    r"""[^.\[\]]+"""
    r"""|\[(?:(-?\d+(?:\.\d+)?)|(["'])((?:(?!\2)[^\\]|\\.)*?)\2)\]"""
    r"""|(?=(?:\.|\[\])(?:\.|\[\]|$))"""
)
_ESCAPE_CHAR_RE = re.compile(r"\\(\\)?")
_INDEX_RE = re.compile(r"^(?:0|[1-9]\d*)$")

_MAX_MEMOIZED_PATHS = 500
# Largest number of padding slots a list may grow by for one index segment.
_MAX_LIST_GAP = 10_000


@functools.lru_cache(maxsize=_MAX_MEMOIZED_PATHS)
def _string_to_path(text: str) -> KeyPath:
    segments: list[str] = []
    if text.startswith("."):
        segments.append("")
    for match in _PROP_NAME_RE.finditer(text):
        number, quote, quoted = match.group(1), match.group(2), match.group(3)
        if quote:
            segments.append(_ESCAPE_CHAR_RE.sub(lambda m: m.group(1) or "", quoted))
        elif number is not None:
            segments.append(number)
        else:
            segments.append(match.group(0))
    return tuple(segments)


def to_path(key: Any) -> KeyPath:
    """Normalize *key* into its canonical key path.

    >>> to_path("db.port")
    ('db', 'port')
    >>> to_path(["db", "port"])
    ('db', 'port')
    >>> to_path("servers[0].host")
    ('servers', '0', 'host')

    Raises :class:`~pyoverlay.exceptions.InvalidKeyError` for keys that are
    neither strings, integers nor sequences.
    """
    if isinstance(key, str):
        return _string_to_path(key)
    if isinstance(key, bool):
        raise InvalidKeyError(key)
    if isinstance(key, int):
        return _string_to_path(str(key))
    if isinstance(key, Sequence) and not isinstance(key, (bytes, bytearray)):
        return tuple(str(segment) for segment in key)
    raise InvalidKeyError(key)


def keys_equal(a: Any, b: Any) -> bool:
    """Return ``True`` when *a* and *b* address the same key path."""
    return to_path(a) == to_path(b)


def is_index(segment: str) -> bool:
    """Return ``True`` when *segment* is a non-negative list index."""
    return bool(_INDEX_RE.match(segment))


def _fits_list(node: list[Any], segment: str) -> bool:
    return is_index(segment) and int(segment) - len(node) <= _MAX_LIST_GAP


def _lookup(node: dict[str, Any] | list[Any], segment: str) -> Any:
    if isinstance(node, list):
        index = int(segment)
        return node[index] if index < len(node) else None
    return node.get(segment)


def _assign(node: dict[str, Any] | list[Any], segment: str, value: Any) -> None:
    if isinstance(node, list):
        index = int(segment)
        if index >= len(node):
            node.extend([None] * (index + 1 - len(node)))
        node[index] = value
        return
    node[segment] = value


def set_in(target: dict[str, Any], path: KeyPath, value: Any) -> dict[str, Any]:
    """Assign *value* at *path* inside *target*, creating containers as needed.

    Intermediate containers are lists when the following segment is an
    index and dicts otherwise. Scalars in the way are replaced. A list that
    has to hold a non-index segment, or an index far past its end, is
    converted to a dict keyed by its stringified indexes. An empty path
    leaves *target* untouched.
    """
    if not path:
        return target

    node: dict[str, Any] | list[Any] = target
    for position, segment in enumerate(path[:-1]):
        following = path[position + 1]
        child = _lookup(node, segment)
        if isinstance(child, list) and not _fits_list(child, following):
            child = {str(i): item for i, item in enumerate(child)}
            _assign(node, segment, child)
        elif not isinstance(child, (dict, list)):
            child = [] if _fits_list([], following) else {}
            _assign(node, segment, child)
        node = child
    _assign(node, path[-1], value)
    return target
