# -*- coding: utf-8 -*-
"""
Client configuration using Pydantic BaseSettings.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__
from .errors import ErrorCode, ShotAPIValidationError

DEFAULT_BASE_URL = "https://shotapi.dev"
SCREENSHOT_ENDPOINT = "/api/v1/screenshot"


class Settings(BaseSettings):
    """
    Environment-backed defaults for every client.

    Values are read from SHOTAPI_* environment variables or a .env file.
    Explicit constructor arguments always win over these.
    """

    # Credentials
    API_KEY: str = ""

    # Endpoint
    BASE_URL: str = DEFAULT_BASE_URL

    # Timeouts (in milliseconds, per attempt)
    TIMEOUT: int = 30000

    # Retry
    RETRIES: int = 2

    # Concurrency
    MAX_CONCURRENT: int = 5
    # Pause between batch chunks (milliseconds)
    BATCH_PACING_MS: int = 100

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SHOTAPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class ShotAPIConfig(BaseModel):
    """Resolved, immutable parameters of a single client instance."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., min_length=1)
    base_url: str = DEFAULT_BASE_URL
    timeout: int = Field(default=30000, gt=0, description="Per-attempt timeout in milliseconds")
    retries: int = Field(default=2, ge=0)
    max_concurrent: int = Field(default=5, ge=1)
    batch_pacing_ms: int = Field(default=100, ge=0)
    user_agent: str = f"shotapi-python/{__version__}"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def endpoint(self) -> str:
        """Full screenshot endpoint URL."""
        return f"{self.base_url}{SCREENSHOT_ENDPOINT}"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


def resolve_config(
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
        retries: int | None = None,
        max_concurrent: int | None = None,
        source: Settings | None = None,
) -> ShotAPIConfig:
    """
    Merge explicit arguments with environment settings.

    Raises:
        ShotAPIValidationError: if no API key is available from either source.
    """
    source = source or settings
    key = api_key or source.API_KEY
    if not key:
        raise ShotAPIValidationError("API key is required", ErrorCode.MISSING_API_KEY)

    return ShotAPIConfig(
        api_key=key,
        base_url=base_url or source.BASE_URL,
        # A zero timeout means "use the default", as does None
        timeout=timeout or source.TIMEOUT,
        retries=retries if retries is not None else source.RETRIES,
        max_concurrent=max_concurrent if max_concurrent is not None else source.MAX_CONCURRENT,
        batch_pacing_ms=source.BATCH_PACING_MS,
    )


# Global settings instance
settings = Settings()
