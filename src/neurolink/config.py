"""Application settings.

Settings are resolved once from the process environment and then passed
explicitly into the objects that need them; nothing below re-reads the
environment per request.
"""

import os
from collections.abc import Mapping
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from .llm.errors import ConfigurationError
from .llm.models import GenerationConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Configuration values for the chat orchestrator and its hosts."""

    model_config = ConfigDict(frozen=True)

    google_api_key: SecretStr | None = Field(default=None, description="Gemini API credential")
    gemini_api_version: str | None = Field(default=None, description="Pinned API version, e.g. 'v1'")
    primary_model: str = "gemini-2.5-flash"
    fallback_model: str = "gemini-2.5-flash-lite"

    transport: Literal["direct", "proxy"] = "direct"
    proxy_url: str = "http://localhost:8000"

    history_limit: int = Field(default=20, ge=1, le=100)
    request_timeout: float = Field(default=5.0, gt=0)
    retry_timeout: float = Field(default=7.0, gt=0)
    backoff_seconds: float = Field(default=0.25, ge=0)

    max_output_tokens: int = Field(default=120, ge=1)
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    top_k: int = Field(default=64, ge=1)

    allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, v):
        """Parse comma-separated origins into a list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("transport", mode="before")
    @classmethod
    def _normalize_transport(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"log level must be one of: {', '.join(LOG_LEVELS)}")
        return v.upper()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Environment variables:
            GOOGLE_API_KEY / GEMINI_API_KEY: Gemini credential
            GEMINI_API_VERSION: API version to pin (default: SDK default)
            GEMINI_MODEL: Primary model (default: gemini-2.5-flash)
            GEMINI_FALLBACK_MODEL: Lighter fallback model (default: gemini-2.5-flash-lite)
            NEUROLINK_TRANSPORT: 'direct' or 'proxy' (default: direct)
            NEUROLINK_PROXY_URL: Neurolink service URL for the proxy transport
            NEUROLINK_HISTORY_LIMIT: History window size (default: 20)
            NEUROLINK_REQUEST_TIMEOUT / NEUROLINK_RETRY_TIMEOUT: Seconds per attempt
            NEUROLINK_BACKOFF_SECONDS: Pause before follow-up attempts
            NEUROLINK_MAX_OUTPUT_TOKENS, NEUROLINK_TEMPERATURE,
            NEUROLINK_TOP_P, NEUROLINK_TOP_K: Sampling parameters
            NEUROLINK_ALLOWED_ORIGINS: Comma-separated CORS origins
            NEUROLINK_LOG_LEVEL: Logging level (default: INFO)

        Raises:
            ConfigurationError: If a value is present but invalid
        """
        env = os.environ if environ is None else environ
        mapping = {
            "google_api_key": env.get("GOOGLE_API_KEY") or env.get("GEMINI_API_KEY"),
            "gemini_api_version": env.get("GEMINI_API_VERSION"),
            "primary_model": env.get("GEMINI_MODEL"),
            "fallback_model": env.get("GEMINI_FALLBACK_MODEL"),
            "transport": env.get("NEUROLINK_TRANSPORT"),
            "proxy_url": env.get("NEUROLINK_PROXY_URL"),
            "history_limit": env.get("NEUROLINK_HISTORY_LIMIT"),
            "request_timeout": env.get("NEUROLINK_REQUEST_TIMEOUT"),
            "retry_timeout": env.get("NEUROLINK_RETRY_TIMEOUT"),
            "backoff_seconds": env.get("NEUROLINK_BACKOFF_SECONDS"),
            "max_output_tokens": env.get("NEUROLINK_MAX_OUTPUT_TOKENS"),
            "temperature": env.get("NEUROLINK_TEMPERATURE"),
            "top_p": env.get("NEUROLINK_TOP_P"),
            "top_k": env.get("NEUROLINK_TOP_K"),
            "allowed_origins": env.get("NEUROLINK_ALLOWED_ORIGINS"),
            "log_level": env.get("NEUROLINK_LOG_LEVEL"),
        }
        values = {key: value for key, value in mapping.items() if value not in (None, "")}
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def require_api_key(self) -> str:
        """Return the configured Google API key, raising if it is missing."""
        key = self.google_api_key.get_secret_value() if self.google_api_key else ""
        if not key.strip():
            raise ConfigurationError(
                "GOOGLE_API_KEY is not configured. Set GOOGLE_API_KEY in your "
                "environment (for example, .env) and restart."
            )
        return key

    @property
    def has_api_key(self) -> bool:
        return bool(self.google_api_key and self.google_api_key.get_secret_value().strip())

    def generation_config(self) -> GenerationConfig:
        return GenerationConfig(
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
            top_p=self.top_p,
            top_k=self.top_k,
        )


@lru_cache
def get_settings() -> Settings:
    """Provide a cached Settings instance read from the environment."""
    return Settings.from_env()
