"""Configuration management for StreamIt."""

from pydantic import PositiveInt, field_validator
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OMDb catalog
    omdb_api_key: str = "thewdb"
    omdb_base_url: str = "https://www.omdbapi.com/"
    catalog_timeout: PositiveInt = 10  # Seconds per catalog request
    catalog_requests_per_minute: PositiveInt = 120
    search_limit: PositiveInt = 10

    # Providers, in display order. Empty means the full built-in table.
    enabled_providers: list[str] = []

    # What to show when the page is opened without an ?id=
    # "error" shows the missing identifier message, "prompt" shows the id form.
    missing_id_behavior: Literal["error", "prompt"] = "prompt"

    # Watch sessions (one per browser cookie)
    session_ttl: PositiveInt = 6 * 60 * 60
    max_sessions: PositiveInt = 1024

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    # App settings
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
