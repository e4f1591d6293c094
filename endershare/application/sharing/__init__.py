"""Sharing application services."""

from .commands import ShareCommandHandler
from .debounce import DebounceCoordinator
from .lifecycle import ShareLifecycle
from .restoration import RestorationQueue, deserialize_items, serialize_items
from .service import ShareService

__all__ = [
    "ShareCommandHandler",
    "DebounceCoordinator",
    "ShareLifecycle",
    "RestorationQueue",
    "ShareService",
    "serialize_items",
    "deserialize_items",
]
