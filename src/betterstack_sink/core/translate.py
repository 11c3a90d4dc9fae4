"""
Translation of log events into Better Stack ingestion records.

Everything here is pure: no I/O and the same event always yields the same
record.
"""

from __future__ import annotations

import dataclasses
import traceback
from typing import Any, Iterable, Mapping

import orjson

from .events import LogEvent
from .levels import map_level

PLATFORM = "browser"
HOST = "localhost"
DEFAULT_APPNAME = "unknown"
# Structured-data id Better Stack reads exception details from.
DIAGNOSTICS_SD_ID = "logtail@11993"


def get_appname(properties: Mapping[str, Any]) -> Any:
    if "appname" in properties:
        return properties["appname"]
    return DEFAULT_APPNAME


def _exception_detail(error: Any) -> str | None:
    if not isinstance(error, BaseException):
        return None
    tb = error.__traceback__
    if tb is None:
        return None
    detail = "".join(traceback.format_exception(type(error), error, tb))
    return detail or None


def to_outbound_record(event: LogEvent) -> dict[str, Any]:
    """Map one event to the ingestion service's record shape."""
    properties = dict(event.properties)
    diagnostics: dict[str, str] = {}
    detail = _exception_detail(event.error)
    if detail:
        diagnostics["ExceptionDetail"] = detail

    return {
        "level": map_level(event.level),
        "message": event.message_template,
        "properties": properties,
        "dt": event.timestamp,
        "platform": PLATFORM,
        "osplatform": PLATFORM,
        "syslog": {
            "appname": get_appname(properties),
            "host": HOST,
            "hostname": HOST,
            DIAGNOSTICS_SD_ID: diagnostics,
        },
    }


# orjson handles signed 64-bit and unsigned 64-bit integers.
_INT_MIN = -(2**63)
_INT_MAX = 2**64 - 1


def _clean_str(value: str) -> str:
    # Lone surrogates (e.g. undecodable bytes from os.fsdecode) are not UTF-8.
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return value.encode("utf-8", "surrogatepass").decode("utf-8", "replace")
    return value


def _clean_key(key: Any) -> str:
    if isinstance(key, str):
        return _clean_str(key)
    return _clean_str(str(key))


def _sanitize(obj: Any) -> Any:
    """Rewrite values orjson rejects outright into JSON-safe equivalents."""
    if isinstance(obj, str):
        return _clean_str(obj)
    if isinstance(obj, bool) or obj is None or isinstance(obj, float):
        return obj
    if isinstance(obj, int):
        if _INT_MIN <= obj <= _INT_MAX:
            return obj
        return str(obj)
    if isinstance(obj, Mapping):
        return {_clean_key(k): _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_sanitize(item) for item in obj]
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _sanitize(dataclasses.asdict(obj))
    return obj


def _default(obj: Any) -> Any:
    if isinstance(obj, (Mapping, set, frozenset)):
        return _sanitize(obj)
    return _clean_str(str(obj))


def _dumps(obj: Any) -> bytes:
    return orjson.dumps(obj, default=_default, option=orjson.OPT_NON_STR_KEYS)


def serialize_batch(records: Iterable[Mapping[str, Any]]) -> str:
    """Render records as the JSON array text posted to the endpoint.

    Values orjson cannot encode natively (integers beyond 64 bits, strings
    holding lone surrogates, keys of unsupported types) are rendered as
    strings instead of failing the whole batch.
    """
    batch = list(records)
    try:
        data = _dumps(batch)
    except orjson.JSONEncodeError:
        data = _dumps(_sanitize(batch))
    return data.decode("utf-8")


__all__ = [
    "DEFAULT_APPNAME",
    "DIAGNOSTICS_SD_ID",
    "get_appname",
    "serialize_batch",
    "to_outbound_record",
]
