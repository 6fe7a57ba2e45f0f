"""
Settings
========

Environment-driven configuration (prefix ``BOOKSTORE_``, optional ``.env``).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BookstoreSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOKSTORE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field("bookstore", description="Title shown in the OpenAPI docs")
    host: str = Field("0.0.0.0", description="Bind address for uvicorn")
    port: int = Field(8000, ge=1, le=65535, description="Bind port for uvicorn")
    log_level: str = Field("INFO", description="Level for the bookstore loggers")
    currency: str = Field("EUR", min_length=3, max_length=3, description="ISO 4217 code")
    seed_sample_data: bool = Field(True, description="Load sample books on startup")


@lru_cache
def get_settings() -> BookstoreSettings:
    return BookstoreSettings()
