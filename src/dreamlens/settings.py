from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .i18n import LANG_EN


class Settings(BaseSettings):
    """Runtime settings, read from ``DREAMLENS_*`` environment variables or ``.env``."""

    language: str = LANG_EN

    # Upstream calls
    request_timeout: float = Field(default=120.0, gt=0)
    connect_timeout: float = Field(default=10.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_backoff: float = Field(default=1.0, ge=0)
    retry_max_wait: float = Field(default=10.0, ge=0)

    # Provider selection
    provider_cache_ttl: float = Field(default=60.0, ge=0)

    # Two-stage pipeline
    symbol_concurrency: int = Field(default=5, ge=1)
    stage1_max_output_tokens: int = Field(default=8192, gt=0)
    symbol_max_output_tokens: int = Field(default=4000, gt=0)
    symbol_temperature: float = Field(default=0.5, ge=0.0, le=2.0)

    # Images
    gemini_image_model: str = "gemini-2.0-flash-exp"
    image_size: str = "1024x1024"

    # Configuration store
    supabase_url: str = ""
    supabase_key: str = ""
    providers_file: str = ""

    model_config = SettingsConfigDict(
        env_prefix="DREAMLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
