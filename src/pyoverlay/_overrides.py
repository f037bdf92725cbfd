"""Keyed collection of override fragments."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator
from typing import Any

from pyoverlay._path import KeyPath, to_path
from pyoverlay.models.fragment import Fragment


class OverrideSet:
    """Override fragments indexed by canonical key path.

    Holds at most one fragment per key as long as callers remove an
    existing entry before calling :meth:`add`. Iteration follows insertion
    order.
    """

    def __init__(self, fragments: Iterable[Fragment] = ()) -> None:
        self._fragments: dict[KeyPath, Fragment] = {}
        for fragment in fragments:
            self.remove(fragment.key)
            self.add(fragment)

    def find(self, key: Any) -> Fragment | None:
        return self._fragments.get(to_path(key))

    def exists(self, key: Any) -> bool:
        return to_path(key) in self._fragments

    def remove(self, key: Any) -> Fragment | None:
        """Remove the override at *key*, returning it. Missing keys are ignored."""
        return self._fragments.pop(to_path(key), None)

    def add(self, fragment: Fragment) -> None:
        self._fragments[fragment.key] = fragment

    def clear(self) -> None:
        self._fragments.clear()

    def snapshot(self) -> list[Fragment]:
        """Deep copy of the current overrides, in iteration order."""
        return copy.deepcopy(list(self._fragments.values()))

    def __contains__(self, key: object) -> bool:
        return self.exists(key)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(list(self._fragments.values()))

    def __len__(self) -> int:
        return len(self._fragments)
