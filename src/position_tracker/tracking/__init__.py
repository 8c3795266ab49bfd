"""Offset, position and range trackers that follow document edits."""

from .offsets import (
    EditLike,
    changed_spans,
    is_offset_destroyed,
    translate_offset,
    translate_offsets,
)
from .positions import DocumentPositionTracker, PositionCallback, PositionSubscription
from .ranges import DocumentRangeTracker, RangeCallback, RangeSubscription
from .single_document import SingleDocumentOffsetTracker, SingleDocumentPositionTracker

__all__ = [
    "DocumentPositionTracker",
    "DocumentRangeTracker",
    "EditLike",
    "PositionCallback",
    "PositionSubscription",
    "RangeCallback",
    "RangeSubscription",
    "SingleDocumentOffsetTracker",
    "SingleDocumentPositionTracker",
    "changed_spans",
    "is_offset_destroyed",
    "translate_offset",
    "translate_offsets",
]
