"""Editor features built on the tracking engine."""

from .coverage import CoverageData, ReloadCoverageTracker

__all__ = ["CoverageData", "ReloadCoverageTracker"]
