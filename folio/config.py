"""Application settings."""

from __future__ import annotations

import json
from functools import cached_property
from typing import Annotated, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_list(value: str | list[str] | None) -> list[str]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in raw.split(",") if item.strip()]
    return []


class Settings(BaseSettings):
    """Central configuration entrypoint for the API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    app_version: str = "1.0.0"

    # Observability
    log_level: str = "INFO"
    log_json: bool = True
    metrics_username: str = "prometheus"
    metrics_password: str | None = None

    # Database
    database_url: str = Field(
        default="sqlite:///./folio.db",
        validation_alias=AliasChoices("DATABASE_URL"),
    )
    async_database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ASYNC_DATABASE_URL"),
    )
    db_echo: bool = Field(
        default=False,
        validation_alias=AliasChoices("DB_ECHO", "SQL_ECHO"),
    )

    # Security
    secret_key: str = Field(
        default="dev-secret-change-me-before-deploying",
        validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET"),
    )
    admin_username: str = "admin"
    admin_password: str | None = None

    # CORS
    cors_allow_origins: Annotated[list[str], NoDecode] = ["*"]
    cors_allow_methods: Annotated[list[str], NoDecode] = [
        "GET",
        "POST",
        "PUT",
        "DELETE",
        "OPTIONS",
    ]
    cors_allow_headers: Annotated[list[str], NoDecode] = [
        "Content-Type",
        "Authorization",
    ]
    cors_max_age: int | None = 86400
    cors_allow_credentials: bool = False

    # Request limits
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    login_rate_limit: str = "5/minute"
    max_request_body_bytes: int = 1024 * 1024
    max_upload_request_bytes: int = 16 * 1024 * 1024

    # Storage
    storage_backend: Literal["local", "s3"] = "local"
    upload_dir: str = "./uploads"
    upload_url_prefix: str = "/uploads"
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_prefix: str = "uploads"

    @field_validator(
        "cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before"
    )
    @classmethod
    def parse_list(cls, value: str | list[str] | None) -> list[str]:
        """Accept JSON lists or comma-separated strings from the environment."""
        return _split_list(value)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @cached_property
    def resolved_async_database_url(self) -> str:
        """Return the async SQLAlchemy URL derived from the sync configuration."""
        if self.async_database_url:
            return self.async_database_url
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
        return self.database_url


settings = Settings()
