from __future__ import annotations

import pytest

from pyoverlay import InvalidKeyError, keys_equal, to_path
from pyoverlay._path import is_index, set_in


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("a.b.c", ("a", "b", "c")),
        (["a", "b", "c"], ("a", "b", "c")),
        (("a", "b"), ("a", "b")),
        ("servers[0].host", ("servers", "0", "host")),
        ('a["b.c"].d', ("a", "b.c", "d")),
        ("a['x']", ("a", "x")),
        ("a..b", ("a", "", "b")),
        (".a", ("", "a")),
        ("a.", ("a", "")),
        ("", ()),
        (5, ("5",)),
        (["a", 1], ("a", "1")),
    ],
)
def test_to_path_normalizes_keys(key: object, expected: tuple[str, ...]) -> None:
    assert to_path(key) == expected


def test_sequence_segments_are_not_split() -> None:
    assert to_path(["a.b"]) == ("a.b",)
    assert not keys_equal(["a.b"], "a.b")


def test_quoted_segment_escapes_are_removed() -> None:
    assert to_path('a["b\\"c"]') == ("a", 'b"c')


@pytest.mark.parametrize("key", [None, 1.5, {"a": 1}, True, b"a.b"])
def test_to_path_rejects_unsupported_keys(key: object) -> None:
    with pytest.raises(InvalidKeyError):
        to_path(key)


def test_invalid_key_error_is_a_type_error() -> None:
    with pytest.raises(TypeError):
        to_path(None)


def test_keys_equal_compares_canonical_paths() -> None:
    assert keys_equal("a.b", ["a", "b"])
    assert keys_equal("a[0]", ("a", "0"))
    assert not keys_equal("a.b", "a.b.c")
    assert not keys_equal("a.b", "b.a")


@pytest.mark.parametrize(("segment", "expected"), [("0", True), ("12", True), ("01", False), ("-1", False), ("x", False)])
def test_is_index(segment: str, expected: bool) -> None:
    assert is_index(segment) is expected


def test_set_in_creates_nested_dicts() -> None:
    assert set_in({}, ("a", "b", "c"), 1) == {"a": {"b": {"c": 1}}}


def test_set_in_creates_lists_for_index_segments() -> None:
    assert set_in({}, ("servers", "1", "host"), "db") == {"servers": [None, {"host": "db"}]}


def test_set_in_keeps_siblings_and_replaces_scalars() -> None:
    target = {"a": {"x": 1}, "b": 3}
    set_in(target, ("a", "y"), 2)
    set_in(target, ("b", "c"), 4)
    assert target == {"a": {"x": 1, "y": 2}, "b": {"c": 4}}


def test_set_in_converts_list_for_named_segment() -> None:
    target = {"a": ["zero"]}
    set_in(target, ("a", "name"), "n")
    assert target == {"a": {"0": "zero", "name": "n"}}


def test_set_in_ignores_empty_path() -> None:
    target = {"a": 1}
    assert set_in(target, (), {"b": 2}) == {"a": 1}


def test_set_in_uses_dict_for_far_index() -> None:
    assert set_in({}, ("a", "100000000"), 1) == {"a": {"100000000": 1}}


def test_set_in_converts_list_for_far_index() -> None:
    target = {"a": ["zero"]}
    set_in(target, ("a", "500000", "x"), 1)
    assert target == {"a": {"0": "zero", "500000": {"x": 1}}}
