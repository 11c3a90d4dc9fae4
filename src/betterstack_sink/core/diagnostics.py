"""
Best-effort internal diagnostics channel.

Sinks report non-fatal conditions (suppressed delivery failures, durable mode
being unavailable) through :func:`warn`. Output is a single JSON line on
stderr. Nothing in this module ever raises to the caller.
"""

from __future__ import annotations

import os
import sys
import time
from typing import Any

import orjson

_PREFIX = "[betterstack-sink]"

# Cached on first access; tests reset it to None.
_internal_logging_enabled: bool | None = None


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        raw = os.getenv("BETTERSTACK_INTERNAL_LOGGING")
        if raw is None:
            _internal_logging_enabled = True
        else:
            _internal_logging_enabled = raw.strip().lower() not in (
                "0",
                "false",
                "no",
                "off",
            )
    return _internal_logging_enabled


def _render(level: str, component: str, message: str, fields: dict[str, Any]) -> str:
    payload = {
        "ts": time.time(),
        "level": level,
        "component": component,
        "message": message,
        **fields,
    }
    data = orjson.dumps(payload, default=str)
    return f"{_PREFIX} {data.decode('utf-8')}\n"


def _write(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _is_enabled():
        return
    try:
        stream = sys.stderr
        if stream is None:
            return
        stream.write(_render(level, component, message, fields))
        stream.flush()
    except Exception:
        return


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a warning-level diagnostic line."""
    _write("WARNING", component, message, fields)

