"""Synchronous publish/subscribe fan-out for change notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

Listener = Callable[[Any], object]


class Disposable:
    """Handle returned by a subscription.

    :meth:`dispose` runs the teardown action once; further calls are no-ops.
    """

    __slots__ = ("_action", "_disposed")

    def __init__(self, action: Callable[[], None] | None = None) -> None:
        self._action = action
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        action, self._action = self._action, None
        if action is not None:
            action()

    def __enter__(self) -> Disposable:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()


class Emitter:
    """Ordered listener lists keyed by event name.

    Listeners run synchronously in subscription order. A failing listener
    does not prevent the remaining ones from running: the failure is logged,
    or re-raised after all listeners ran when ``raise_listener_errors`` is
    set.
    """

    def __init__(self, *, raise_listener_errors: bool = False) -> None:
        self._raise_listener_errors = raise_listener_errors
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event_name: str, callback: Listener) -> Disposable:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._listeners.setdefault(event_name, []).append(callback)
        return Disposable(lambda: self._off(event_name, callback))

    def _off(self, event_name: str, callback: Listener) -> None:
        listeners = self._listeners.get(event_name)
        if not listeners:
            return
        # Identity match so the same callable subscribed twice is removed once.
        for index, listener in enumerate(listeners):
            if listener is callback:
                del listeners[index]
                break
        if not listeners:
            del self._listeners[event_name]

    def emit(self, event_name: str, payload: Any = None) -> None:
        # Iterate a snapshot: listeners may dispose subscriptions while running.
        listeners = tuple(self._listeners.get(event_name, ()))
        first_error: Exception | None = None
        for listener in listeners:
            try:
                listener(payload)
            except Exception as err:
                _logger.debug("%s listener failed", event_name, exc_info=True)
                if first_error is None:
                    first_error = err
        if first_error is not None and self._raise_listener_errors:
            raise first_error

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, ()))
