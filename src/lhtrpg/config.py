"""Configuration management for the LHTRPG rules engine using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_REFERENCE_DIR = Path(__file__).parent / "data" / "reference"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="LHTRPG_",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug mode (echoes SQL)")

    # Document store
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/lhtrpg.db",
        description="Database connection URL",
    )

    # Reference tables
    reference_dir: Path | None = Field(
        default=None,
        description="Directory holding races.yaml and classes.yaml (package data if unset)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")

    @property
    def reference_tables_dir(self) -> Path:
        """Get the directory the race/class tables are loaded from."""
        return self.reference_dir or PACKAGE_REFERENCE_DIR


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
