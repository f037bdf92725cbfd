from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from pyoverlay import ChangeEvent, Disposable, Emitter, Fragment, to_path


class FakeStore:
    """In-memory stand-in for the store an overlay wraps."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._fragments: list[Fragment] = [Fragment(key=key, value=value) for key, value in (values or {}).items()]
        self._emitter = Emitter()
        self.closed = False
        self.get_calls: list[tuple[str, ...]] = []

    @property
    def fragments(self) -> list[Fragment]:
        return list(self._fragments)

    def get(self, key: Any) -> Fragment | None:
        path = to_path(key)
        self.get_calls.append(path)
        for fragment in self._fragments:
            if fragment.key == path:
                return fragment
        return None

    def on_change(self, callback: Callable[[ChangeEvent], object]) -> Disposable:
        return self._emitter.on("did-change", callback)

    async def close(self) -> None:
        self.closed = True

    def put(self, key: Any, value: Any) -> ChangeEvent:
        """Write a value and notify subscribers, as a real backing store would."""
        path = to_path(key)
        old = None
        new = Fragment(key=path, value=value)
        for index, fragment in enumerate(self._fragments):
            if fragment.key == path:
                old = fragment
                self._fragments[index] = new
                break
        else:
            self._fragments.append(new)
        event = ChangeEvent(old_fragment=old, new_fragment=new)
        self._emitter.emit("did-change", event)
        return event

    def remove(self, key: Any) -> ChangeEvent:
        path = to_path(key)
        old = None
        for index, fragment in enumerate(self._fragments):
            if fragment.key == path:
                old = self._fragments.pop(index)
                break
        event = ChangeEvent(old_fragment=old, new_fragment=None)
        self._emitter.emit("did-change", event)
        return event


@pytest.fixture
def store() -> FakeStore:
    return FakeStore({"db.port": 5432, "db.host": "localhost", "name": "app"})
