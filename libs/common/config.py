"""Configuration management for ModelBoard services.

This module centralizes environment-driven configuration for the dashboard
service and its helper scripts. It builds on ``pydantic-settings`` so
configuration can be provided via environment variables, ``.env`` files, or
defaults.

Highlights
- Strongly-typed settings with sensible defaults
- One place to discover commonly used environment variables
- Small service-specific subclasses to keep concerns clear

Usage
- Inject the appropriate config in your service entrypoint:
  ``config = DashboardConfig()``
- Or select dynamically: ``config = get_config("dashboard")``
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UPSTREAM_URL = "https://www.a4f.co/api/get-display-models?plan=free"
DEFAULT_CACHE_CONTROL = "public, s-maxage=30, stale-while-revalidate=60"


class BaseConfig(BaseSettings):
    """Base configuration class for all services.

    Field names double as environment variable names (case-insensitive), so
    ``mb_log_level`` is read from ``MB_LOG_LEVEL``.

    Notes
    - Add new shared settings here so downstream services inherit them.
    - Prefer a typed field over reading ``os.environ`` directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    mb_env: str = Field(default="local")

    # Upstream listing
    mb_upstream_url: str = Field(default=DEFAULT_UPSTREAM_URL)

    # Observability
    mb_tracing_enabled: bool = Field(default=False)
    mb_otel_exporter: str = Field(default="http://localhost:4318/v1/traces")
    mb_otel_service_name: str = Field(default="modelboard")

    # Logging
    mb_log_level: str = Field(default="INFO")
    mb_log_format: str = Field(default="json")


class DashboardConfig(BaseConfig):
    """Configuration for the dashboard service.

    Extends ``BaseConfig`` with the HTTP bind address, the cache hint sent on
    listing responses and the background refresh loop.
    """

    mb_dashboard_host: str = Field(default="0.0.0.0")
    mb_dashboard_port: int = Field(default=9010)
    mb_cache_control: str = Field(default=DEFAULT_CACHE_CONTROL)
    mb_poll_enabled: bool = Field(default=True)
    mb_poll_interval_seconds: float = Field(default=60.0, gt=0)


def get_config(service_name: str) -> BaseConfig:
    """Get configuration for a specific service.

    Parameters
    - service_name: ``dashboard`` or any other name for the shared base.

    Returns
    - A concrete ``BaseConfig`` subclass pre-wired to read the right env vars.
    """
    config_map = {
        "dashboard": DashboardConfig,
    }

    config_class = config_map.get(service_name, BaseConfig)
    return config_class()
