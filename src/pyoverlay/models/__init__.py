"""Data models for overlay content and change notifications."""

from pyoverlay.models.fragment import ChangeEvent, ChangeKind, Fragment, NormalizedKey

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "Fragment",
    "NormalizedKey",
]
