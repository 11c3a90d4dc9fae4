from __future__ import annotations

import dataclasses
import json
import os
from datetime import datetime, timezone

import pytest

from betterstack_sink.core.translate import (
    DIAGNOSTICS_SD_ID,
    serialize_batch,
    to_outbound_record,
)

from ..helpers import make_event, raised


@pytest.mark.parametrize(
    ("code", "name"),
    [
        (0, "none"),
        (1, "critical"),
        (3, "error"),
        (7, "warning"),
        (15, "info"),
        (31, "debug"),
        (63, "trace"),
    ],
)
def test_known_level_codes_map_to_names(code: int, name: str) -> None:
    assert to_outbound_record(make_event(level=code))["level"] == name


@pytest.mark.parametrize("code", [2, 4, 8, 14, 64, -1])
def test_unknown_level_code_maps_to_none(code: int) -> None:
    record = to_outbound_record(make_event(level=code))
    assert record["level"] is None


def test_record_shape() -> None:
    event = make_event(properties={"name": "world", "appname": "svc-a"})
    record = to_outbound_record(event)

    assert record["message"] == "Hello {name}"
    assert record["properties"] == {"name": "world", "appname": "svc-a"}
    assert record["dt"] == event.timestamp
    assert record["platform"] == "browser"
    assert record["osplatform"] == "browser"
    assert record["syslog"] == {
        "appname": "svc-a",
        "host": "localhost",
        "hostname": "localhost",
        DIAGNOSTICS_SD_ID: {},
    }


def test_missing_appname_defaults_to_unknown() -> None:
    record = to_outbound_record(make_event(properties={"user": "bob"}))
    assert record["syslog"]["appname"] == "unknown"


def test_appname_present_but_falsy_is_kept() -> None:
    record = to_outbound_record(make_event(properties={"appname": ""}))
    assert record["syslog"]["appname"] == ""


def test_error_with_traceback_adds_exception_detail() -> None:
    error = raised(ValueError("bad input"))
    record = to_outbound_record(make_event(level=3, error=error))

    detail = record["syslog"][DIAGNOSTICS_SD_ID]["ExceptionDetail"]
    assert "ValueError: bad input" in detail
    assert "Traceback" in detail


def test_error_without_traceback_leaves_diagnostics_empty() -> None:
    record = to_outbound_record(make_event(level=3, error=ValueError("never raised")))
    assert record["syslog"][DIAGNOSTICS_SD_ID] == {}


def test_no_error_leaves_diagnostics_empty() -> None:
    record = to_outbound_record(make_event())
    assert record["syslog"][DIAGNOSTICS_SD_ID] == {}


def test_non_exception_error_is_ignored() -> None:
    record = to_outbound_record(make_event(error="boom"))  # type: ignore[arg-type]
    assert record["syslog"][DIAGNOSTICS_SD_ID] == {}


def test_translation_does_not_share_properties_with_event() -> None:
    props = {"appname": "svc-a"}
    record = to_outbound_record(make_event(properties=props))
    record["properties"]["extra"] = 1
    assert props == {"appname": "svc-a"}


def test_serialize_batch_renders_json_array() -> None:
    records = [
        to_outbound_record(make_event(level=15)),
        to_outbound_record(make_event(level=99)),
    ]
    payload = json.loads(serialize_batch(records))

    assert isinstance(payload, list)
    assert [item["level"] for item in payload] == ["info", None]
    assert payload[0]["dt"] == "2024-05-01T12:00:00+00:00"
    assert payload[0]["syslog"]["logtail@11993"] == {}


def test_serialize_batch_falls_back_to_str_for_unknown_values() -> None:
    class Opaque:
        def __str__(self) -> str:
            return "opaque-value"

    record = to_outbound_record(
        make_event(
            properties={
                "obj": Opaque(),
                "tags": {"b"},
                "when": datetime(2024, 1, 1, tzinfo=timezone.utc),
                1: "numeric-key",
            }
        )
    )
    payload = json.loads(serialize_batch([record]))

    props = payload[0]["properties"]
    assert props["obj"] == "opaque-value"
    assert props["tags"] == ["b"]
    assert props["when"] == "2024-01-01T00:00:00+00:00"
    assert props["1"] == "numeric-key"


def test_serialize_batch_stringifies_integers_beyond_64_bits() -> None:
    record = to_outbound_record(
        make_event(properties={"big": 2**70, "small": -(2**70), "edge": 2**64 - 1})
    )
    props = json.loads(serialize_batch([record]))[0]["properties"]

    assert props == {
        "big": str(2**70),
        "small": str(-(2**70)),
        "edge": 2**64 - 1,
    }


def test_serialize_batch_replaces_lone_surrogates() -> None:
    path = os.fsdecode(b"/tmp/\xff.log")
    record = to_outbound_record(
        make_event(message="opened \ud800", properties={"path": path, path: 1})
    )
    item = json.loads(serialize_batch([record]))[0]

    assert item["message"].startswith("opened ")
    assert "\ufffd" in item["message"]
    assert item["properties"]["path"].startswith("/tmp/")
    assert item["properties"]["path"].endswith(".log")
    assert len(item["properties"]) == 2


def test_serialize_batch_stringifies_unsupported_keys() -> None:
    record = to_outbound_record(make_event(properties={"grid": {(1, 2): "cell"}}))
    props = json.loads(serialize_batch([record]))[0]["properties"]

    assert props == {"grid": {"(1, 2)": "cell"}}


def test_serialize_batch_keeps_good_events_next_to_bad_ones() -> None:
    records = [
        to_outbound_record(make_event(message="fine")),
        to_outbound_record(make_event(properties={"id": 2**64})),
    ]
    payload = json.loads(serialize_batch(records))

    assert [item["message"] for item in payload] == ["fine", "Hello {name}"]
    assert payload[1]["properties"]["id"] == str(2**64)


@dataclasses.dataclass
class _Counter:
    name: str
    total: int


def test_serialize_batch_sanitizes_inside_dataclasses() -> None:
    record = to_outbound_record(
        make_event(properties={"counter": _Counter(name="bytes", total=2**80)})
    )
    props = json.loads(serialize_batch([record]))[0]["properties"]

    assert props["counter"] == {"name": "bytes", "total": str(2**80)}
