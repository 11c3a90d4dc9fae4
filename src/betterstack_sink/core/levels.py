"""Severity codes understood by the sink and their Better Stack names.

Codes follow the structured-log convention: each level is a cumulative
bitmask of the levels above it, so ``warning`` (7) includes ``error`` (3)
and ``critical`` (1). Codes absent from the table have no wire name.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Final, Mapping

LEVEL_MAPPING: Final[Mapping[int, str]] = MappingProxyType(
    {
        0: "none",
        1: "critical",
        3: "error",
        7: "warning",
        15: "info",
        31: "debug",
        63: "trace",
    }
)

_LEVEL_CODES: Final[Mapping[str, int]] = MappingProxyType(
    {name: code for code, name in LEVEL_MAPPING.items()}
)

_ALIASES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "warn": "warning",
        "fatal": "critical",
        "information": "info",
        "verbose": "trace",
    }
)


def map_level(level: int) -> str | None:
    """Return the wire name for ``level``, or ``None`` for unknown codes."""
    try:
        return LEVEL_MAPPING.get(level)
    except TypeError:
        # Unhashable input is just another unknown code.
        return None


def get_level_code(name: str) -> int:
    """Look up a code by wire name (case-insensitive).

    Raises:
        ValueError: If the name is not a known level.
    """
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return _LEVEL_CODES[key]
    except KeyError:
        raise ValueError(f"Unknown level '{name}'") from None


def from_stdlib_level(levelno: int) -> int:
    """Translate a :mod:`logging` level number to a sink severity code."""
    if levelno >= logging.CRITICAL:
        return 1
    if levelno >= logging.ERROR:
        return 3
    if levelno >= logging.WARNING:
        return 7
    if levelno >= logging.INFO:
        return 15
    if levelno >= logging.DEBUG:
        return 31
    return 63
