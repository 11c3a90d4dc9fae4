"""
Log events consumed by the sink.

The host logging framework owns event creation; the sink only reads them.
:func:`event_from_record` adapts records from the standard :mod:`logging`
module so the sink can sit behind a plain ``logging.Handler``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol, runtime_checkable

from .levels import from_stdlib_level


@dataclass(frozen=True)
class LogEvent:
    """A structured log event as produced by the host framework."""

    level: int
    message_template: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: BaseException | None = None


@runtime_checkable
class LevelSwitch(Protocol):
    """Capability deciding whether events at a level should be shipped."""

    def is_enabled(self, level: int) -> bool:  # pragma: no cover - protocol
        ...


# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


def event_from_record(record: logging.LogRecord) -> LogEvent:
    """Build a :class:`LogEvent` from a stdlib ``LogRecord``.

    ``extra`` attributes become event properties, ``exc_info`` becomes the
    event error and the logger name is kept under ``logger``.
    """
    properties: dict[str, Any] = {"logger": record.name}
    for key, value in vars(record).items():
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
            properties[key] = value

    error: BaseException | None = None
    if record.exc_info and record.exc_info[1] is not None:
        error = record.exc_info[1]

    return LogEvent(
        level=from_stdlib_level(record.levelno),
        message_template=str(record.msg),
        properties=properties,
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        error=error,
    )
