"""Environment-driven settings.

Uses Pydantic Settings to read connection parameters and the log level from
``ROW_MAP_*`` environment variables or a ``.env`` file.

Usage:
    settings = get_settings()
    session = Session.from_config(settings.connection_config())
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from row_map.core.connection import ConnectionConfig


class Settings(BaseSettings):
    # Database
    driver: str = Field("sqlite")
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str = Field(":memory:")
    extra: dict[str, Any] = {}

    # Application
    log_level: str = Field("WARNING")

    model_config = SettingsConfigDict(
        env_prefix="ROW_MAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def connection_config(self) -> ConnectionConfig:
        """Build the ConnectionConfig described by these settings."""
        return ConnectionConfig(
            driver=self.driver,
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            extra=self.extra,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
