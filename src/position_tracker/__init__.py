"""Keeps offsets, positions and ranges valid while documents are edited."""

__all__ = [
    "adapters",
    "features",
    "host",
    "runtime",
    "tracking",
]

__version__ = "0.1.0"
