"""Runtime services: telemetry and settings."""

from .settings import TrackerSettings

__all__ = ["TrackerSettings"]
