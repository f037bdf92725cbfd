"""Overlay store: local overrides layered over an underlying store.

Writes only ever touch the overlay's own override set; the wrapped store is
read on demand and never mutated. Reads merge both, with overrides winning
on identical keys. Change events from the wrapped store are re-emitted
unless the affected key is currently overridden.
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol

from pyoverlay._overrides import OverrideSet
from pyoverlay._path import KeyPath, set_in, to_path
from pyoverlay.config import OverlayOptions
from pyoverlay.events import Disposable, Emitter
from pyoverlay.models.fragment import ChangeEvent, Fragment

_logger = logging.getLogger(__name__)

DID_CHANGE = "did-change"

ChangeListener = Callable[[ChangeEvent], object]
Updater = Callable[[Any, Fragment | None], Any]


class SupportsDispose(Protocol):
    def dispose(self) -> None: ...


class UnderlyingStore(Protocol):
    """Contract of the store an overlay wraps."""

    @property
    def fragments(self) -> Sequence[Fragment]: ...

    def get(self, key: KeyPath) -> Fragment | None: ...

    def on_change(self, callback: ChangeListener) -> SupportsDispose: ...

    async def close(self) -> None: ...


class OverlayStore:
    """Store client whose local overrides shadow an underlying store.

    Usage::

        overlay = await create_overlay(store)
        overlay.set("db.port", 6000)
        overlay.value["db"]["port"]  # 6000
        overlay.delete("db.port")   # underlying value visible again
    """

    def __init__(self, store: UnderlyingStore, options: OverlayOptions | None = None) -> None:
        options = options or OverlayOptions()
        self._store = store
        self._emitter = Emitter(raise_listener_errors=options.raise_listener_errors)
        self._overrides = OverrideSet(options.overrides)
        store.on_change(self._on_store_change)

    @classmethod
    async def create(
        cls,
        store: UnderlyingStore | Awaitable[UnderlyingStore],
        options: OverlayOptions | Mapping[str, Any] | None = None,
    ) -> OverlayStore:
        """Resolve *store* if it is pending and wrap it."""
        try:
            resolved_options = OverlayOptions.from_options(options)
        except Exception:
            # A pending store we will never await must not leak as an un-awaited coroutine.
            if inspect.iscoroutine(store):
                store.close()
            raise
        if inspect.isawaitable(store):
            store = await store
        overlay = cls(store, resolved_options)
        _logger.debug("Overlay created with %d initial overrides", len(overlay._overrides))
        return overlay

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> OverlayStore:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying store. Overrides and listeners are kept."""
        await self._store.close()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def store(self) -> UnderlyingStore:
        """The wrapped store."""
        return self._store

    @property
    def overrides(self) -> list[Fragment]:
        """Deep copy of the current overrides."""
        return self._overrides.snapshot()

    @property
    def fragments(self) -> list[Fragment]:
        """Overrides first, then underlying fragments that are not overridden."""
        fragments = self.overrides
        for fragment in self._store.fragments:
            if not self._overrides.exists(fragment.key):
                fragments.append(fragment)
        return fragments

    @property
    def value(self) -> dict[str, Any]:
        """Nested structure built from all visible fragments.

        Shorter key paths are applied first so a deeper fragment is never
        clobbered by an ancestor.
        """
        result: dict[str, Any] = {}
        for fragment in sorted(self.fragments, key=lambda f: len(f.key)):
            set_in(result, fragment.key, copy.deepcopy(fragment.value))
        return result

    def on_change(self, callback: ChangeListener) -> Disposable:
        """Call *callback* with a :class:`ChangeEvent` after each change."""
        return self._emitter.on(DID_CHANGE, callback)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: Any) -> Fragment | None:
        path = to_path(key)
        override = self._overrides.find(path)
        if override is not None:
            return copy.deepcopy(override)
        for fragment in self._store.fragments:
            if to_path(fragment.key) == path:
                return fragment
        return None

    def has(self, key: Any) -> bool:
        return self.get(key) is not None

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, key: Any, value: Any) -> OverlayStore:
        """Override the value at *key*."""
        path = to_path(key)
        old_fragment = self.get(path)
        new_fragment = Fragment.create_override(path, value)

        self._overrides.remove(path)
        self._overrides.add(new_fragment)

        self._emitter.emit(DID_CHANGE, ChangeEvent(old_fragment=old_fragment, new_fragment=new_fragment))
        return self

    def update(self, key: Any, updater: Updater) -> OverlayStore:
        """Override *key* with ``updater(value, fragment)``.

        The updater receives copies of the currently visible fragment and
        its value (``None`` when nothing is visible). If it raises, nothing
        is changed.
        """
        fragment = copy.deepcopy(self.get(key))
        value = fragment.value if fragment is not None else None
        return self.set(key, updater(value, fragment))

    def delete(self, key: Any) -> None:
        """Drop the override at *key*, exposing the underlying value again."""
        path = to_path(key)
        old_fragment = self.get(path)
        new_fragment = self._store.get(path)
        self._overrides.remove(path)
        self._emitter.emit(DID_CHANGE, ChangeEvent(old_fragment=old_fragment, new_fragment=new_fragment))

    def clear(self) -> None:
        """Drop every override, notifying once per removed override."""
        events = [
            ChangeEvent(old_fragment=copy.deepcopy(override), new_fragment=self._store.get(override.key))
            for override in self._overrides
        ]
        self._overrides.clear()
        for event in events:
            self._emitter.emit(DID_CHANGE, event)

    # ------------------------------------------------------------------
    # Underlying store events
    # ------------------------------------------------------------------

    def _on_store_change(self, event: ChangeEvent) -> None:
        fragment = event.new_fragment if event.new_fragment is not None else event.old_fragment
        if fragment is not None and self._overrides.exists(fragment.key):
            _logger.debug("Ignoring underlying change to overridden key %s", ".".join(to_path(fragment.key)))
            return
        self._emitter.emit(DID_CHANGE, event)


async def create_overlay(
    store: UnderlyingStore | Awaitable[UnderlyingStore],
    options: OverlayOptions | Mapping[str, Any] | None = None,
) -> OverlayStore:
    """Wrap *store* (or the store it resolves to) in an :class:`OverlayStore`."""
    return await OverlayStore.create(store, options)
