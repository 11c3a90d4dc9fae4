"""
betterstack_sink - ship structured log events to Better Stack.

Events are filtered by level, translated into Better Stack records and posted
as one batch per ``emit`` call. Durable mode stores each batch until the
ingestion service acknowledges it and replays leftovers on the next start.
"""

from ._version import __version__
from .core.errors import (
    BetterStackSinkError,
    ConfigurationError,
    DeliveryError,
    UnsupportedEnvironmentError,
)
from .core.events import LevelSwitch, LogEvent, event_from_record
from .core.levels import LEVEL_MAPPING
from .core.settings import BetterStackSettings, BetterStackSinkConfig
from .core.translate import serialize_batch, to_outbound_record
from .plugins.filters import MinimumLevelSwitch
from .plugins.sinks import (
    BetterStackSink,
    DeliveryClient,
    DurableQueue,
    FileStorage,
    MemoryStorage,
    StorageBackend,
)

__all__ = [
    "__version__",
    # Sink
    "BetterStackSink",
    "BetterStackSinkConfig",
    "BetterStackSettings",
    # Events and filtering
    "LogEvent",
    "LevelSwitch",
    "MinimumLevelSwitch",
    "LEVEL_MAPPING",
    "event_from_record",
    # Building blocks
    "DeliveryClient",
    "DurableQueue",
    "FileStorage",
    "MemoryStorage",
    "StorageBackend",
    "serialize_batch",
    "to_outbound_record",
    # Errors
    "BetterStackSinkError",
    "ConfigurationError",
    "DeliveryError",
    "UnsupportedEnvironmentError",
]
