"""
Durable storage of batches awaiting acknowledgement.

A batch is written under a unique namespaced key right before it is sent and
removed once the ingestion service accepts it. Whatever is still stored when
a new sink starts is replayed.
"""

from __future__ import annotations

import asyncio
import os
import random
import tempfile
import time
from pathlib import Path
from typing import Protocol, runtime_checkable

from ...core.errors import UnsupportedEnvironmentError

STORAGE_PREFIX = "structured-log-betterstack-sink"

_BATCH_SUFFIX = ".batch"
_CACHE_DIRNAME = "betterstack-sink"


def default_storage_dir() -> Path:
    """Per-user cache directory used when durable mode names no storage.

    Honours $XDG_CACHE_HOME and falls back to ``~/.cache``.
    """
    cache_home = os.environ.get("XDG_CACHE_HOME")
    if cache_home:
        return Path(cache_home).expanduser() / _CACHE_DIRNAME
    return Path("~/.cache").expanduser() / _CACHE_DIRNAME


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal key-value store holding text payloads."""

    def keys(self) -> list[str]:  # pragma: no cover - protocol
        ...

    def get_item(self, key: str) -> str | None:  # pragma: no cover - protocol
        ...

    def set_item(self, key: str, value: str) -> None:  # pragma: no cover
        ...

    def remove_item(self, key: str) -> None:  # pragma: no cover - protocol
        ...


class MemoryStorage:
    """Process-local storage. Contents do not survive a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def keys(self) -> list[str]:
        return list(self._items)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """Directory-backed storage, one file per key.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written batch behind under a real key.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)

    def ensure_writable(self) -> None:
        """Check the directory can be created and written.

        Raises:
            UnsupportedEnvironmentError: If the directory is unusable.
        """
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise UnsupportedEnvironmentError(
                f"storage directory '{self._dir}' cannot be created",
                directory=str(self._dir),
                error=str(exc),
            ) from exc
        if not self._dir.is_dir() or not os.access(self._dir, os.W_OK | os.X_OK):
            raise UnsupportedEnvironmentError(
                f"storage directory '{self._dir}' is not writable",
                directory=str(self._dir),
            )

    def _path(self, key: str) -> Path:
        if not key or os.sep in key or (os.altsep and os.altsep in key):
            raise ValueError(f"Invalid storage key '{key}'")
        return self._dir / f"{key}{_BATCH_SUFFIX}"

    def keys(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        return [
            entry.name[: -len(_BATCH_SUFFIX)]
            for entry in self._dir.iterdir()
            if entry.is_file() and entry.name.endswith(_BATCH_SUFFIX)
        ]

    def get_item(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        target = self._path(key)
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=self._dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_name, target)
        except BaseException:
            try:
                os.unlink(temp_name)
            except OSError:
                pass
            raise

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class DurableQueue:
    """Namespaced view over a :class:`StorageBackend`.

    Storage calls are offloaded with ``asyncio.to_thread`` so file-backed
    stores never block the event loop.
    """

    def __init__(self, storage: StorageBackend, *, prefix: str = STORAGE_PREFIX) -> None:
        self._storage = storage
        self._prefix = prefix

    def generate_key(self) -> str:
        millis = int(time.time() * 1000)
        return f"{self._prefix}-{millis}-{random.randint(1, 1_000_000)}"

    async def put(self, key: str, payload: str) -> None:
        await asyncio.to_thread(self._storage.set_item, key, payload)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._storage.remove_item, key)

    async def list_pending(self) -> list[tuple[str, str]]:
        """Return ``(key, payload)`` for every batch in this namespace."""

        def _collect() -> list[tuple[str, str]]:
            pending: list[tuple[str, str]] = []
            for key in self._storage.keys():
                if not key.startswith(self._prefix):
                    continue
                body = self._storage.get_item(key)
                if body is None:
                    # Removed between listing and reading.
                    continue
                pending.append((key, body))
            return pending

        return await asyncio.to_thread(_collect)


__all__ = [
    "STORAGE_PREFIX",
    "DurableQueue",
    "FileStorage",
    "MemoryStorage",
    "StorageBackend",
    "default_storage_dir",
]
