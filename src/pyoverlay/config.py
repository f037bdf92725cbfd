"""Overlay construction options."""

from __future__ import annotations

import dataclasses
import json
import os
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from pyoverlay.exceptions import InvalidKeyError, OverlayConfigError
from pyoverlay.models.fragment import Fragment

ENV_OVERRIDES = "PYOVERLAY_OVERRIDES"
ENV_RAISE_LISTENER_ERRORS = "PYOVERLAY_RAISE_LISTENER_ERRORS"


_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})


def _parse_flag(raw: str | None, *, default: bool = False) -> bool:
    """Read a boolean environment flag; unrecognized text keeps *default*."""
    flag = (raw or "").strip().lower()
    if flag in _TRUTHY:
        return True
    if flag in _FALSY:
        return False
    return default


def coerce_override(entry: Fragment | Mapping[str, Any]) -> Fragment:
    """Turn an initial override entry into an override :class:`Fragment`.

    Accepts fragments (re-flagged as overrides when needed) and mappings
    with ``key`` and ``value`` items.
    """
    if isinstance(entry, Fragment):
        if entry.override:
            return entry
        return entry.model_copy(update={"override": True})
    if isinstance(entry, Mapping):
        if "key" not in entry:
            raise OverlayConfigError(f"Override entry has no key: {entry!r}")
        try:
            return Fragment.create_override(entry["key"], entry.get("value"))
        except (InvalidKeyError, ValidationError) as err:
            raise OverlayConfigError(f"Invalid override entry {entry!r}: {err}") from err
    raise OverlayConfigError(f"Unsupported override entry: {entry!r}")


@dataclasses.dataclass(frozen=True)
class OverlayOptions:
    """Options accepted when creating an overlay.

    Parameters
    ----------
    overrides : tuple of Fragment
        Initial overrides. When two entries share a key the later one wins.
    raise_listener_errors : bool
        Re-raise the first exception raised by a change listener once all
        listeners have been invoked. By default listener failures are only
        logged at debug level.
    """

    overrides: tuple[Fragment, ...] = ()
    raise_listener_errors: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", tuple(coerce_override(entry) for entry in self.overrides))

    @classmethod
    def from_mapping(cls, values: Mapping[Any, Any], **kwargs: Any) -> OverlayOptions:
        """Create options whose overrides are the ``{key: value}`` items of *values*."""
        overrides = tuple(Fragment.create_override(key, value) for key, value in values.items())
        return cls(overrides=overrides, **kwargs)

    @classmethod
    def from_options(cls, options: OverlayOptions | Mapping[str, Any] | None) -> OverlayOptions:
        """Normalize the ``options`` argument accepted by the overlay factory."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            unknown = set(options) - {field.name for field in dataclasses.fields(cls)}
            if unknown:
                raise OverlayConfigError(f"Unknown overlay options: {', '.join(sorted(unknown))}")
            kwargs = dict(options)
            overrides: Iterable[Any] = kwargs.pop("overrides", None) or ()
            return cls(overrides=tuple(overrides), **kwargs)
        raise OverlayConfigError(f"Unsupported overlay options: {options!r}")

    @classmethod
    def from_env(cls, **overrides: Any) -> OverlayOptions:
        """Create options from environment variables.

        Reads ``PYOVERLAY_OVERRIDES`` (a JSON object mapping keys to values)
        and ``PYOVERLAY_RAISE_LISTENER_ERRORS``. Explicit keyword arguments
        take precedence over environment values.

        Raises
        ------
        OverlayConfigError
            If ``PYOVERLAY_OVERRIDES`` is not a JSON object.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        raw_overrides = env.get(ENV_OVERRIDES)
        if raw_overrides is not None and "overrides" not in overrides:
            try:
                parsed = json.loads(raw_overrides)
            except json.JSONDecodeError as err:
                raise OverlayConfigError(f"{ENV_OVERRIDES} is not valid JSON: {err}") from err
            if not isinstance(parsed, dict):
                raise OverlayConfigError(f"{ENV_OVERRIDES} must be a JSON object")
            config_kwargs["overrides"] = tuple(Fragment.create_override(key, value) for key, value in parsed.items())

        if "raise_listener_errors" not in overrides:
            config_kwargs["raise_listener_errors"] = _parse_flag(env.get(ENV_RAISE_LISTENER_ERRORS))

        config_kwargs.update(overrides)
        if "overrides" in config_kwargs:
            config_kwargs["overrides"] = tuple(config_kwargs["overrides"])

        return cls(**config_kwargs)
