"""Custom exception hierarchy for pyoverlay."""

from __future__ import annotations


class OverlayError(Exception):
    """Base exception for all pyoverlay errors."""


class OverlayConfigError(OverlayError):
    """Invalid overlay options or environment configuration."""


class InvalidKeyError(OverlayError, TypeError):
    """A key could not be normalized into a key path.

    Keys are either property-path strings (``"a.b[0]"``), integers, or
    sequences of segments. Anything else is rejected.
    """

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Unsupported key type {type(key).__name__}: {key!r}")
