"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SitePlan application settings.

    Every field can be set through an environment variable of the same name
    (case-insensitive) or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    expose_docs: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///data/db/siteplan.db"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=list)

    # WordPress export
    export_author: str = Field(default="admin", min_length=1)
    export_language: str = Field(default="en-US", min_length=2)
    export_description: str = "Exported from Content Entry System"
    export_generator: str = "Content Entry System WordPress Exporter"
    # used for sites that have neither a production nor a dev URL
    default_site_url: str = "https://example.com"

    @field_validator("default_site_url")
    @classmethod
    def validate_default_site_url(cls, v: str) -> str:
        _ = cls
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("default_site_url must be an http(s) URL")
        return v
