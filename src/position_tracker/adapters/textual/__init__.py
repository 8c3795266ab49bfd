"""Textual adapter for the tracking engine."""

from .controller import TextualTrackingAdapter, TextualUIHooks, TrackingSnapshot

__all__ = ["TextualTrackingAdapter", "TextualUIHooks", "TrackingSnapshot"]
