"""Slot layout of private and shared containers.

A shared container holds the first participant's private slots at
[0, 27) and the second participant's at [27, 54).
"""

from typing import Any, List, Optional, Sequence, Tuple

PRIVATE_SLOTS = 27
SHARED_SLOTS = PRIVATE_SLOTS * 2
SHARED_CONTAINER_TITLE = "Shared Ender Chest"


def merge_private_contents(
    first: Sequence[Optional[Any]],
    second: Sequence[Optional[Any]],
) -> List[Optional[Any]]:
    """Lay two private slot arrays side by side in a shared slot array.

    Slots beyond the private size are ignored.
    """
    merged: List[Optional[Any]] = [None] * SHARED_SLOTS
    for slot, item in enumerate(first[:PRIVATE_SLOTS]):
        merged[slot] = item
    for slot, item in enumerate(second[:PRIVATE_SLOTS]):
        merged[PRIVATE_SLOTS + slot] = item
    return merged


def split_shared_contents(
    contents: Sequence[Optional[Any]],
) -> Tuple[List[Optional[Any]], List[Optional[Any]]]:
    """Split a shared slot array at slot 27 into two private slot arrays."""
    padded = list(contents[:SHARED_SLOTS]) + [None] * (SHARED_SLOTS - len(contents))
    return padded[:PRIVATE_SLOTS], padded[PRIVATE_SLOTS:SHARED_SLOTS]


def count_items(contents: Sequence[Optional[Any]]) -> int:
    return sum(1 for item in contents if item is not None)
