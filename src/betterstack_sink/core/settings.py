"""
Configuration models for the Better Stack sink.

``BetterStackSinkConfig`` is the immutable constructor-time configuration.
``BetterStackSettings`` loads the same values from ``BETTERSTACK_*``
environment variables using pydantic-settings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_INGESTION_URI = "https://in.logs.betterstack.com"


class BetterStackSinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    token: str
    # Only a non-empty string overrides the default endpoint.
    ingestion_uri: Any = None
    # Anything other than exactly ``False`` keeps suppression on.
    suppress_errors: Any = True
    durable: Any = False
    storage_dir: str | None = None

    @field_validator("token", mode="before")
    @classmethod
    def _require_token(cls, value: Any) -> Any:
        if not value:
            raise ValueError("'token' parameter is required.")
        return value

    @property
    def endpoint(self) -> str:
        if self.ingestion_uri and isinstance(self.ingestion_uri, str):
            return self.ingestion_uri
        return DEFAULT_INGESTION_URI

    @property
    def suppress(self) -> bool:
        return self.suppress_errors is not False

    @property
    def durable_requested(self) -> bool:
        return bool(self.durable)


class BetterStackSettings(BaseSettings):
    """Environment-backed settings (``BETTERSTACK_TOKEN`` and friends)."""

    token: str = Field(default="", description="Better Stack source token")
    ingestion_uri: str | None = Field(
        default=None, description="Override for the ingestion endpoint"
    )
    suppress_errors: bool = Field(
        default=True, description="Swallow delivery failures after reporting them"
    )
    durable: bool = Field(
        default=False, description="Persist batches until acknowledged"
    )
    storage_dir: str | None = Field(
        default=None, description="Durable batch directory, defaults to the user cache"
    )

    model_config = SettingsConfigDict(
        env_prefix="BETTERSTACK_",
        extra="ignore",
        case_sensitive=False,
    )

    def to_sink_config(self, **overrides: Any) -> BetterStackSinkConfig:
        values: dict[str, Any] = self.model_dump()
        values.update(overrides)
        return parse_sink_config(values)


def parse_sink_config(
    config: BetterStackSinkConfig | dict[str, Any] | None = None, **kwargs: Any
) -> BetterStackSinkConfig:
    """Coerce a model, dict or keyword arguments into a sink config.

    Raises:
        ConfigurationError: If nothing was supplied or validation fails.
    """
    if isinstance(config, BetterStackSinkConfig):
        if not kwargs:
            return config
        config = config.model_dump()
    if config is None and not kwargs:
        raise ConfigurationError("'config' parameter is required.")
    values: dict[str, Any] = dict(config or {})
    values.update(kwargs)
    try:
        return BetterStackSinkConfig.model_validate(values)
    except ValidationError as exc:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()))
        if field == "token" and first.get("type") in ("missing", "value_error"):
            message = "'token' parameter is required."
        else:
            message = f"Invalid sink configuration: {first.get('msg', str(exc))}"
        raise ConfigurationError(message, field=field or None) from exc


__all__ = [
    "DEFAULT_INGESTION_URI",
    "BetterStackSettings",
    "BetterStackSinkConfig",
    "parse_sink_config",
]
