from __future__ import annotations

from ...core.levels import get_level_code


class MinimumLevelSwitch:
    """Level switch enabling every level at or above a minimum severity.

    Severity codes are cumulative bitmasks, so a level is enabled when all of
    its bits are contained in the minimum's mask. The minimum can be changed
    at runtime with :meth:`set_minimum`.
    """

    name = "minimum-level"

    def __init__(self, minimum: int | str = 15) -> None:
        self._mask = self._coerce(minimum)

    @staticmethod
    def _coerce(minimum: int | str) -> int:
        if isinstance(minimum, str):
            return get_level_code(minimum)
        if minimum < 0:
            raise ValueError(f"Level code must be non-negative, got {minimum}")
        return minimum

    @property
    def minimum(self) -> int:
        return self._mask

    def set_minimum(self, minimum: int | str) -> None:
        self._mask = self._coerce(minimum)

    def is_enabled(self, level: int) -> bool:
        if not isinstance(level, int) or level < 0:
            return False
        return (level & self._mask) == level


PLUGIN_METADATA = {
    "name": "minimum-level",
    "version": "1.0.0",
    "plugin_type": "filter",
    "entry_point": "betterstack_sink.plugins.filters.level:MinimumLevelSwitch",
    "description": "Enable events at or above a minimum severity code.",
    "author": "betterstack-sink",
    "api_version": "1.0",
}
