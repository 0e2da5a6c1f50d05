"""
Application settings.

``Settings`` reads its values from ``BOOKS_API_*`` environment variables
and, when present, a ``.env`` file in the working directory. List values
such as ``BOOKS_API_CORS_ORIGINS`` are given as JSON, e.g.
``'["http://localhost:5173"]'``.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the books API."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKS_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    project_name: str = "Books REST API"
    api_version: str = "1.0.0"
    environment: Literal["development", "production", "test"] = "development"

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    log_level: str = "INFO"
    log_file: Optional[str] = None

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Start with the three sample books.
    seed_data: bool = True
    # Reject a PATCH that would make (title, author) collide with another book.
    merge_checks_duplicates: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
