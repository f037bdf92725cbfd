"""Fragment and change-event models.

A :class:`Fragment` is one addressable ``(key, value)`` unit of store
content. Fragments are immutable: a changed value is a new fragment.
A :class:`ChangeEvent` describes one transition between two fragments at
the same key, where either side may be missing.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict

from pyoverlay._path import KeyPath, to_path

NormalizedKey = Annotated[KeyPath, BeforeValidator(to_path)]
"""Annotated key type that coerces strings and sequences to a key path."""


class Fragment(BaseModel):
    """A single ``(key, value)`` unit of store content."""

    model_config = ConfigDict(frozen=True)

    key: NormalizedKey
    value: Any = None
    override: bool = False
    """``True`` only for fragments held by an overlay."""

    @classmethod
    def create_override(cls, key: Any, value: Any) -> Fragment:
        return cls(key=key, value=value, override=True)


class ChangeKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class ChangeEvent(BaseModel):
    """A change at one key.

    ``old_fragment`` is ``None`` for creations and ``new_fragment`` is
    ``None`` for deletions.
    """

    model_config = ConfigDict(frozen=True)

    old_fragment: Fragment | None = None
    new_fragment: Fragment | None = None

    @property
    def key(self) -> KeyPath | None:
        """Key of the affected fragment, preferring the new side."""
        if self.new_fragment is not None:
            return self.new_fragment.key
        if self.old_fragment is not None:
            return self.old_fragment.key
        return None

    @property
    def kind(self) -> ChangeKind:
        if self.old_fragment is None:
            return ChangeKind.CREATED
        if self.new_fragment is None:
            return ChangeKind.DELETED
        return ChangeKind.UPDATED
