from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from betterstack_sink.core.events import LogEvent


class RecordingHandler:
    """``httpx.MockTransport`` handler replaying scripted outcomes.

    Outcomes are consumed in order; once exhausted every request gets a 202.
    Exceptions in the script are raised instead of returning a response.
    """

    def __init__(self, outcomes: list[Any] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else httpx.Response(202)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def make_event(
    level: int = 15,
    message: str = "Hello {name}",
    *,
    properties: dict[str, Any] | None = None,
    error: BaseException | None = None,
) -> LogEvent:
    return LogEvent(
        level=level,
        message_template=message,
        properties=properties if properties is not None else {"name": "world"},
        timestamp=datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
        error=error,
    )


def raised(exc: BaseException) -> BaseException:
    """Return ``exc`` after raising it once so it carries a traceback."""
    try:
        raise exc
    except BaseException as caught:
        return caught
