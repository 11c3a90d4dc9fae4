from __future__ import annotations

from .level import MinimumLevelSwitch

__all__ = ["MinimumLevelSwitch"]
