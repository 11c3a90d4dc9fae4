from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from ...core.events import LogEvent
from .betterstack import BetterStackSink
from .durable_queue import (
    STORAGE_PREFIX,
    DurableQueue,
    FileStorage,
    MemoryStorage,
    StorageBackend,
)
from .http_client import DeliveryClient


@runtime_checkable
class BaseSink(Protocol):
    """Contract a host logging framework drives.

    ``emit`` receives every event of one batch, ``flush`` drains anything
    buffered and ``str(sink)`` identifies the sink in host diagnostics.
    """

    async def emit(self, _events: Iterable[LogEvent]) -> None:  # noqa: D401
        """Deliver a batch of events to the sink destination."""
        ...

    async def flush(self) -> None:
        ...


__all__ = [
    "STORAGE_PREFIX",
    "BaseSink",
    "BetterStackSink",
    "DeliveryClient",
    "DurableQueue",
    "FileStorage",
    "MemoryStorage",
    "StorageBackend",
]
