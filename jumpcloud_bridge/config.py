"""
Configuration module for the JumpCloud bridge.

This module provides environment variable configuration and settings management
using Pydantic Settings for type-safe configuration.
"""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "https://console.jumpcloud.com/api"


class BridgeSettings(BaseSettings):
    """
    Configuration settings for the JumpCloud bridge.

    All settings are loaded from environment variables with validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Required environment variables
    jumpcloud_api_key: str = Field(
        ...,
        description="JumpCloud administrator API key, sent as x-api-key"
    )

    # Environment variables with defaults
    jumpcloud_org_id: Optional[str] = Field(
        None,
        description="Organization ID for multi-tenant admins, sent as x-org-id"
    )

    jumpcloud_base_url: str = Field(
        DEFAULT_BASE_URL,
        description="JumpCloud API root; v2 endpoints live under <root>/v2"
    )

    bridge_bearer_token: Optional[str] = Field(
        None,
        description="Bearer token callers must present to the bridge HTTP API"
    )

    log_level: str = Field(
        "INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Pagination and filtering
    page_size: int = Field(
        100,
        ge=1,
        le=100,
        description="Records requested per page from list endpoints"
    )

    page_delay: float = Field(
        0.1,
        ge=0,
        description="Seconds to wait between consecutive full pages"
    )

    filter_batch_size: int = Field(
        100,
        ge=1,
        description="Maximum IDs or emails packed into a single $in filter"
    )

    request_timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Timeout in seconds for outbound requests (unset waits indefinitely)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator("jumpcloud_base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Validate the API root is an HTTP(S) URL and strip any trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("JUMPCLOUD_BASE_URL must be an HTTP or HTTPS URL")
        return v.rstrip("/")

    @field_validator("jumpcloud_api_key")
    @classmethod
    def validate_api_key(cls, v):
        """Validate the API key is not empty."""
        if not v or not v.strip():
            raise ValueError("jumpcloud_api_key cannot be empty")
        return v.strip()

    @field_validator("jumpcloud_org_id", "bridge_bearer_token")
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank optional values as unset."""
        if v is not None and not v.strip():
            return None
        return v


# Global settings instance
settings: Optional[BridgeSettings] = None


def get_settings() -> BridgeSettings:
    """
    Get the global settings instance, creating it if necessary.

    Returns:
        BridgeSettings: The global settings instance

    Raises:
        pydantic.ValidationError: If required environment variables are missing or invalid
    """
    global settings
    if settings is None:
        settings = BridgeSettings()
    return settings


def reload_settings() -> BridgeSettings:
    """
    Force reload settings from environment variables.

    This is useful for testing or when environment variables change.

    Returns:
        BridgeSettings: New settings instance
    """
    global settings
    settings = BridgeSettings()
    return settings
