# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Server configuration using pydantic-settings."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from ..core.config import CoreSettings

logger = logging.getLogger(__name__)


def get_package_version() -> str:
    """Get the package version from installed metadata.

    Returns the version from pyproject.toml when installed,
    or a dev fallback when running from source without install.
    """
    try:
        return version("meilisearch-mcp")
    except PackageNotFoundError:
        return "0.0.0-dev"


class ServerSettings(CoreSettings):
    """Configuration for the HTTP MCP server.

    Inherits core settings (Meilisearch, AI provider, logging) and adds the
    HTTP and session settings.

    Settings can be configured via environment variables with MCP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="Host to bind to")
    port: int = Field(default=4995, description="Port to bind to")
    endpoint: str = Field(default="/mcp", description="Path of the MCP endpoint")

    # Sessions
    session_timeout: float = Field(
        default=3600.0,
        description="Idle time in seconds after which a session is evicted (default: 1 hour)",
    )
    session_cleanup_interval: float | None = Field(
        default=None,
        description="Seconds between idle sweeps (default: session_timeout / 60)",
    )

    # CORS settings
    allowed_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins. ['*'] allows any origin.",
    )

    # Server name for MCP
    server_name: str = Field(default="meilisearch", description="MCP server name")
    server_version: str = Field(default_factory=get_package_version, description="Server version")

    @model_validator(mode="after")
    def validate_server_settings(self) -> ServerSettings:
        """Reject settings that would make the server unusable."""
        if not self.endpoint.startswith("/"):
            raise ValueError(f"MCP_ENDPOINT must start with '/', got {self.endpoint!r}")
        if self.session_timeout <= 0:
            raise ValueError("MCP_SESSION_TIMEOUT must be positive")
        if self.session_cleanup_interval is not None and self.session_cleanup_interval <= 0:
            raise ValueError("MCP_SESSION_CLEANUP_INTERVAL must be positive")
        if self.endpoint == "/health":
            raise ValueError("MCP_ENDPOINT cannot be /health")
        return self

    @property
    def sweep_interval(self) -> float:
        """Seconds between idle-session sweeps."""
        if self.session_cleanup_interval is not None:
            return self.session_cleanup_interval
        return self.session_timeout / 60

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


# Global settings instance - lazy loaded
_settings: ServerSettings | None = None


def get_settings() -> ServerSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = ServerSettings()
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    global _settings
    _settings = None
