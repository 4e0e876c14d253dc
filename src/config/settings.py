"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")

    # Server
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Realtime backend
    backend_url: str | None = Field(
        default=None,
        description="Base URL of the realtime voice backend, e.g. https://api.example.com",
    )
    auth_key: str | None = Field(
        default=None,
        description="Long-lived backend key. Only ever sent upstream.",
    )
    backend_auth_header: str = Field(
        default="X-Luna-Key",
        description="Header carrying 'Bearer <credential>' on upstream calls.",
    )
    realtime_model: str = Field(default="lunav1")
    realtime_voice: str = Field(default="base")
    upstream_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every upstream HTTP call.",
    )

    # Plivo (Voice)
    plivo_auth_id: str | None = Field(default=None)
    plivo_auth_token: str | None = Field(default=None)
    plivo_from_number: str | None = Field(default=None, description="E.164, e.g. +1415...")
    public_base_url: str | None = Field(
        default=None,
        description="Public base URL for Plivo answer callbacks (e.g. https://<ngrok>.ngrok-free.app).",
    )

    @field_validator("backend_url", "public_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @field_validator("auth_key")
    @classmethod
    def empty_key_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
