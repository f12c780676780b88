"""Configuration management for the key-value client."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HTTPConfig(BaseModel):
    """HTTP endpoint configuration."""

    host: str = Field(default="127.0.0.1", description="Store node host")
    http_port: int = Field(default=8098, ge=1, le=65535, description="HTTP port")
    ssl_enabled: bool = Field(default=False, description="Use https for the root URI")
    prefix: str = Field(default="/riak", description="Key/value resource prefix")
    mapred: str = Field(default="/mapred", description="Map-reduce endpoint path")
    basic_auth: str | None = Field(
        default=None, description="Basic auth credentials as 'user:pass'"
    )
    timeout_seconds: float = Field(default=30.0, gt=0, description="Request timeout")


class ClientConfig(BaseModel):
    """Client identity configuration."""

    client_id: int | str | None = Field(
        default=None, description="Client identifier sent with every request"
    )
    return_body: bool = Field(default=False, description="Ask the store to return bodies on put")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="kv_client", description="Service name for tracing")
    environment: str = Field(default="development", description="Deployment environment")


class Config(BaseSettings):
    """Main configuration for the key-value client."""

    model_config = SettingsConfigDict(
        env_prefix="KV_CLIENT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    http: HTTPConfig = Field(default_factory=HTTPConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
