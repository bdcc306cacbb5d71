"""Core configuration - centralized config for the meilisearch_mcp package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from meilisearch_mcp.core.config import get_config
    config = get_config()

    host = config.meilisearch_host
    provider = config.ai_provider_name
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    """Core configuration settings.

    Settings are read from environment variables (or a ``.env`` file) once at
    process start. Field names can also be passed directly to the constructor,
    which is what the tests do.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # MEILISEARCH SETTINGS
    # ==========================================================================

    meilisearch_host: str = Field(
        default="http://localhost:7700",
        description="URL of the Meilisearch instance",
        validation_alias="MEILISEARCH_HOST",
    )
    meilisearch_api_key: str = Field(
        default="",
        description="API key sent as a Bearer token to Meilisearch",
        validation_alias="MEILISEARCH_API_KEY",
    )
    meilisearch_timeout: float = Field(
        default=5.0,
        description="Timeout for Meilisearch REST calls in seconds",
        validation_alias="MEILISEARCH_TIMEOUT",
    )

    # ==========================================================================
    # AI PROVIDER SETTINGS
    # ==========================================================================

    ai_provider_name: str = Field(
        default="openai",
        description="AI provider: openai, openrouter, huggingface, ollama, callback, or any OpenRouter vendor prefix",
        validation_alias="AI_PROVIDER_NAME",
    )
    ai_provider_api_key: str = Field(
        default="",
        description="API key for the AI provider",
        validation_alias="AI_PROVIDER_API_KEY",
    )
    llm_model: str = Field(
        default="gpt-3.5-turbo",
        description="Model identifier used for tool routing and summaries",
        validation_alias="LLM_MODEL",
    )
    ai_provider_base_url: str | None = Field(
        default=None,
        description="Override for the provider URL (Ollama host, callback URL, self-hosted gateway)",
        validation_alias="AI_PROVIDER_BASE_URL",
    )
    ai_provider_timeout: float = Field(
        default=60.0,
        description="Timeout for language-model calls in seconds",
        validation_alias="AI_PROVIDER_TIMEOUT",
    )
    summary_chunk_size: int = Field(
        default=4000,
        gt=0,
        description="Maximum characters per chunk when summarizing long results",
        validation_alias="SUMMARY_CHUNK_SIZE",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="MCP_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="MCP_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="MCP_LOG_FILE",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
