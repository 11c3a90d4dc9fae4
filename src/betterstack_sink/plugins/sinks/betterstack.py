"""
Better Stack sink.

Filters, translates and ships each ``emit`` call as one JSON batch to the
Better Stack ingestion endpoint. In durable mode every batch is stored before
it is sent and removed once acknowledged; batches left behind by a previous
run are replayed when a new sink is created.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import httpx

from ...core import diagnostics
from ...core.errors import UnsupportedEnvironmentError
from ...core.events import LevelSwitch, LogEvent
from ...core.settings import (
    BetterStackSettings,
    BetterStackSinkConfig,
    parse_sink_config,
)
from ...core.translate import serialize_batch, to_outbound_record
from .durable_queue import (
    DurableQueue,
    FileStorage,
    StorageBackend,
    default_storage_dir,
)
from .http_client import DeliveryClient

__all__ = ["BetterStackSink"]

_COMPONENT = "betterstack-sink"

ReplayOutcomes = dict[str, BaseException | None]


class BetterStackSink:
    """Ship log event batches to Better Stack.

    Delivery failures are reported through diagnostics and swallowed unless
    ``suppress_errors`` is exactly ``False``, in which case the original
    exception propagates to the caller.
    """

    name = "betterstack"

    def __init__(
        self,
        config: BetterStackSinkConfig | dict[str, Any] | None = None,
        *,
        level_switch: LevelSwitch | None = None,
        storage: StorageBackend | None = None,
        client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_sink_config(config, **kwargs)
        self._config = cfg
        self._level_switch = level_switch
        self._suppress_errors = cfg.suppress
        self._delivery = DeliveryClient(
            endpoint=cfg.endpoint, token=cfg.token, client=client
        )
        self._queue = self._resolve_queue(cfg, storage)
        self._replay_task: asyncio.Task[ReplayOutcomes] | None = None
        # Set once the replay has enumerated storage, so batches written by
        # this instance are never mistaken for leftovers.
        self._replay_listed = asyncio.Event()
        if self._queue is not None:
            # Runs detached; the constructor never waits for it.
            self._schedule_replay()

    @classmethod
    def from_settings(
        cls,
        settings: BetterStackSettings | None = None,
        *,
        level_switch: LevelSwitch | None = None,
        storage: StorageBackend | None = None,
        client: httpx.AsyncClient | None = None,
        **overrides: Any,
    ) -> BetterStackSink:
        settings = settings or BetterStackSettings()
        return cls(
            settings.to_sink_config(**overrides),
            level_switch=level_switch,
            storage=storage,
            client=client,
        )

    @property
    def ingestion_uri(self) -> str:
        return self._delivery.endpoint

    @property
    def suppress_errors(self) -> bool:
        return self._suppress_errors

    @property
    def durable(self) -> bool:
        return self._queue is not None

    def __str__(self) -> str:
        return "BetterStackSink"

    @staticmethod
    def _resolve_queue(
        cfg: BetterStackSinkConfig, storage: StorageBackend | None
    ) -> DurableQueue | None:
        if not cfg.durable_requested:
            return None
        if storage is None:
            file_storage = FileStorage(cfg.storage_dir or default_storage_dir())
            try:
                file_storage.ensure_writable()
            except UnsupportedEnvironmentError as exc:
                diagnostics.warn(
                    _COMPONENT,
                    "'durable' was set to true, but the storage directory is unusable",
                    reason=exc.message,
                    **exc.context,
                )
                return None
            storage = file_storage
        return DurableQueue(storage)

    async def start(self) -> None:
        self._schedule_replay()

    async def stop(self) -> None:
        task = self._replay_task
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)
        await self._delivery.aclose()

    async def flush(self) -> None:
        # Nothing is buffered beyond the batch owned by each emit call.
        return None

    async def emit(self, events: Iterable[LogEvent]) -> None:
        self._schedule_replay()
        switch = self._level_switch
        if switch is not None:
            filtered = [e for e in events if switch.is_enabled(e.level)]
        else:
            filtered = list(events)

        if not filtered:
            return None

        await self._send_to_server(filtered)
        return None

    async def _send_to_server(self, events: list[LogEvent]) -> None:
        queue = self._queue
        storage_key: str | None = None
        try:
            body = serialize_batch(to_outbound_record(e) for e in events)
            if queue is not None:
                await self._replay_listed.wait()
                storage_key = queue.generate_key()
                await queue.put(storage_key, body)

            await self._delivery.send(body)

            if queue is not None and storage_key is not None:
                await queue.remove(storage_key)
        except Exception as exc:
            if not self._suppress_errors:
                raise
            # A stored copy stays put for the next replay.
            self._log_suppressed_error(exc, storage_key=storage_key)

    def _schedule_replay(self) -> asyncio.Task[ReplayOutcomes] | None:
        if self._queue is None or self._replay_task is not None:
            return self._replay_task
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Created outside a loop; start()/emit() will pick it up.
            return None
        self._replay_task = loop.create_task(
            self._replay(), name="betterstack-sink-replay"
        )
        return self._replay_task

    async def wait_for_replay(self) -> ReplayOutcomes:
        """Wait for the startup replay and return each key's outcome.

        A key maps to ``None`` when it was delivered or its failure was
        suppressed, and to the raised exception otherwise.
        """
        task = self._schedule_replay()
        if task is None:
            return {}
        return await task

    async def _replay(self) -> ReplayOutcomes:
        queue = self._queue
        if queue is None:
            self._replay_listed.set()
            return {}
        try:
            pending = await queue.list_pending()
        except Exception as exc:
            if not self._suppress_errors:
                raise
            self._log_suppressed_error(exc)
            return {}
        finally:
            self._replay_listed.set()

        tasks = {
            key: asyncio.create_task(self._replay_entry(queue, key, body))
            for key, body in pending
        }
        results = await asyncio.gather(*tasks.values(), return_exceptions=True)
        return {
            key: result if isinstance(result, BaseException) else None
            for key, result in zip(tasks, results)
        }

    async def _replay_entry(self, queue: DurableQueue, key: str, body: str) -> None:
        try:
            acked_key = await self._delivery.send(body, done=lambda _response: key)
            await queue.remove(acked_key)
        except Exception as exc:
            if not self._suppress_errors:
                raise
            self._log_suppressed_error(exc, storage_key=key)

    def _log_suppressed_error(
        self, exc: BaseException, *, storage_key: str | None = None
    ) -> None:
        fields: dict[str, Any] = {
            "error": str(exc),
            "error_type": type(exc).__name__,
            "endpoint": self._delivery.endpoint,
        }
        if storage_key is not None:
            fields["storage_key"] = storage_key
        diagnostics.warn(
            _COMPONENT, "Suppressed error when logging to Better Stack", **fields
        )


# Plugin metadata for discovery
PLUGIN_METADATA = {
    "name": "betterstack",
    "version": "1.0.0",
    "plugin_type": "sink",
    "entry_point": "betterstack_sink.plugins.sinks.betterstack:BetterStackSink",
    "description": "Ships log batches to Better Stack with optional durable replay.",
    "author": "betterstack-sink",
    "api_version": "1.0",
}
