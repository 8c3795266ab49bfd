"""Environment-driven settings for optional tracking features."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .telemetry import env, env_flag

DEFAULT_IGNORED_PREFIXES: Tuple[str, ...] = ("#", "@", "//")
DEFAULT_IGNORED_LINES: Tuple[str, ...] = ("{", "}", "/")


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = env(name)
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(slots=True)
class TrackerSettings:
    """Knobs for the reload-coverage tracker.

    ``coverage_ignored_prefixes`` lists line prefixes (after stripping) that
    never count as modified code, and ``coverage_ignored_lines`` lists whole
    lines that never do. ``coverage_skip_whitespace`` ignores edits that only
    insert or delete whitespace.
    """

    coverage_ignored_prefixes: Tuple[str, ...] = DEFAULT_IGNORED_PREFIXES
    coverage_ignored_lines: Tuple[str, ...] = DEFAULT_IGNORED_LINES
    coverage_skip_whitespace: bool = True

    @classmethod
    def from_env(cls) -> "TrackerSettings":
        return cls(
            coverage_ignored_prefixes=_env_list("COVERAGE_IGNORED_PREFIXES", DEFAULT_IGNORED_PREFIXES),
            coverage_ignored_lines=_env_list("COVERAGE_IGNORED_LINES", DEFAULT_IGNORED_LINES),
            coverage_skip_whitespace=env_flag("COVERAGE_SKIP_WHITESPACE", True),
        )

    def is_ignored_line(self, text: str) -> bool:
        stripped = text.strip()
        if not stripped or stripped in self.coverage_ignored_lines:
            return True
        return any(stripped.startswith(prefix) for prefix in self.coverage_ignored_prefixes)


__all__ = ["DEFAULT_IGNORED_LINES", "DEFAULT_IGNORED_PREFIXES", "TrackerSettings"]
