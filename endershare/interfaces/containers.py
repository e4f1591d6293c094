"""Container protocol.

The host environment owns the real container implementation; the sharing
core only needs a fixed-size slot array it can read, write and clear.
"""

from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Container(Protocol):
    """Fixed-size mutable slot array. Empty slots read as ``None``."""

    @property
    def size(self) -> int:
        ...

    def get_item(self, slot: int) -> Optional[Any]:
        ...

    def set_item(self, slot: int, item: Optional[Any]) -> None:
        ...

    def get_contents(self) -> List[Optional[Any]]:
        """Return a copy of every slot, in order."""
        ...

    def set_contents(self, items: Sequence[Optional[Any]]) -> None:
        """Replace the leading slots with ``items``; remaining slots are left as is."""
        ...

    def clear(self) -> None:
        ...
