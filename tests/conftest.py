from __future__ import annotations

from position_tracker.runtime import telemetry


def pytest_configure(config) -> None:
    telemetry.configure(level="ERROR")
