"""Offset translation through edit batches.

Every tracker in this package moves coordinates with :func:`translate_offset`
and nothing else, so the boundary rules live in exactly one place:

* an edit whose replaced span *strictly* surrounds the offset destroys it;
* an edit whose span ends at or before the offset shifts it by the edit's
  length delta (so text inserted exactly at the offset pushes it along);
* an edit starting after the offset leaves it alone.

All edits of a batch are expressed against the same pre-batch snapshot, may
arrive in any order and never overlap.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple


class EditLike(Protocol):
    range_offset: int
    range_length: int
    text: str


def _surrounds(edit: EditLike, offset: int) -> bool:
    return edit.range_offset < offset < edit.range_offset + edit.range_length


def is_offset_destroyed(offset: int, changes: Iterable[EditLike]) -> bool:
    return any(_surrounds(edit, offset) for edit in changes)


def translate_offset(offset: int, changes: Iterable[EditLike]) -> Optional[int]:
    """Return ``offset`` moved through ``changes``, or ``None`` if it was lost."""

    changes = tuple(changes)
    if is_offset_destroyed(offset, changes):
        return None

    diff = sum(
        len(edit.text) - edit.range_length
        for edit in changes
        if edit.range_offset + edit.range_length <= offset
    )
    return offset + diff


def translate_offsets(
    offsets: Iterable[int], changes: Iterable[EditLike]
) -> Dict[int, Optional[int]]:
    changes = tuple(changes)
    return {offset: translate_offset(offset, changes) for offset in offsets}


def changed_spans(changes: Sequence[EditLike]) -> List[Tuple[int, int]]:
    """Post-batch ``(start, end)`` of each change's inserted text.

    Results follow the order of ``changes``.
    """

    order = sorted(
        range(len(changes)),
        key=lambda index: (
            changes[index].range_offset,
            changes[index].range_offset + changes[index].range_length,
        ),
    )
    spans: List[Tuple[int, int]] = [(0, 0)] * len(changes)
    diff = 0
    for index in order:
        edit = changes[index]
        start = edit.range_offset + diff
        spans[index] = (start, start + len(edit.text))
        diff += len(edit.text) - edit.range_length
    return spans


__all__ = [
    "EditLike",
    "changed_spans",
    "is_offset_destroyed",
    "translate_offset",
    "translate_offsets",
]
