"""pyoverlay - Async override layer over an existing key-value store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyoverlay")
except PackageNotFoundError:
    __version__ = "0+local"
from pyoverlay._path import KeyPath, keys_equal, to_path
from pyoverlay.config import OverlayOptions
from pyoverlay.events import Disposable, Emitter
from pyoverlay.exceptions import InvalidKeyError, OverlayConfigError, OverlayError
from pyoverlay.models import ChangeEvent, ChangeKind, Fragment
from pyoverlay.store import OverlayStore, UnderlyingStore, create_overlay

__all__ = [
    "__version__",
    "ChangeEvent",
    "ChangeKind",
    "Disposable",
    "Emitter",
    "Fragment",
    "InvalidKeyError",
    "KeyPath",
    "OverlayConfigError",
    "OverlayError",
    "OverlayOptions",
    "OverlayStore",
    "UnderlyingStore",
    "create_overlay",
    "keys_equal",
    "to_path",
]
