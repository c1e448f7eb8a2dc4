from __future__ import annotations

import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the durable record storage.

    Reads from environment variables (or .env via pydantic-settings):
      - DATABASE_URL: SQLAlchemy URL. Local SQLite by default; PostgreSQL URLs
        (postgresql://...) are accepted and switched to the asyncpg driver.
      - SQL_ECHO: echo SQL statements for debugging.
    """

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./school_records.db",
        description="SQLAlchemy database URL for the record store.",
    )

    SQL_ECHO: bool = Field(
        default=False, description="Echo SQL statements for debugging (default False)"
    )

    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def async_database_url(self) -> str:
        """
        Normalize DATABASE_URL to an async driver URL, required for AsyncEngine.
        """
        url = self.DATABASE_URL
        if url.startswith("sqlite"):
            return re.sub(r"^sqlite(\+\w+)?://", "sqlite+aiosqlite://", url)
        if url.startswith("postgresql+asyncpg://"):
            return url
        return re.sub(r"^postgres(ql)?(\+\w+)?://", "postgresql+asyncpg://", url)

    @property
    def sync_database_url(self) -> str:
        """
        Provide a sync URL variant for Alembic offline mode.
        """
        url = self.DATABASE_URL
        if url.startswith("sqlite"):
            return re.sub(r"^sqlite\+\w+://", "sqlite://", url)
        return re.sub(r"^postgres(ql)?\+\w+://", "postgresql://", url)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return a settings object populated from the environment."""
    return Settings()
