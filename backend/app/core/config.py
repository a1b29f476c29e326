from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    debug: bool = Field(False, alias="TOURMAP_DEBUG")

    reverse_geocoding: bool = Field(True, alias="TOURMAP_REVERSE_GEOCODING")
    geocoder_provider: Literal["google", "nominatim"] = Field(
        "nominatim", alias="TOURMAP_GEOCODER_PROVIDER"
    )
    geocoder_user_agent: str = Field(
        "tourmap-geocoder", alias="TOURMAP_GEOCODER_USER_AGENT"
    )
    geocoder_domain: str | None = Field(None, alias="TOURMAP_GEOCODER_DOMAIN")
    geocoder_api_key: str | None = Field(None, alias="TOURMAP_GEOCODER_API_KEY")
    geocoder_timeout: float = Field(10.0, alias="TOURMAP_GEOCODER_TIMEOUT")
    geocoder_language: str | None = Field(None, alias="TOURMAP_GEOCODER_LANGUAGE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("geocoder_provider", mode="before")
    def _normalize_provider(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("geocoder_domain", "geocoder_language", mode="before")
    def _blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str):
            return value.strip() or None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]
