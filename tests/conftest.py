from __future__ import annotations

from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import pytest


@pytest.fixture
def captured_warnings() -> Generator[list[dict[str, Any]], None, None]:
    """Collect diagnostics warnings instead of writing them to stderr."""
    warnings: list[dict[str, Any]] = []

    def _warn(component: str, message: str, **fields: Any) -> None:
        warnings.append({"component": component, "message": message, **fields})

    with patch("betterstack_sink.core.diagnostics.warn", side_effect=_warn):
        yield warnings


@pytest.fixture(autouse=True)
def _isolated_cache_home(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep the default durable storage directory out of the real home."""
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path_factory.mktemp("cache")))
