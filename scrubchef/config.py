from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the redaction engine and CLI.

    Values are loaded from ``SCRUBCHEF_*`` environment variables by default and
    may be overridden via CLI flags by the application entrypoint.
    """

    # Canonical map
    context_radius: PositiveInt = 20
    max_contexts: PositiveInt = 3

    # Pipeline selection for the CLI
    # Note: when no pipeline file is configured the named built-in recipe runs.
    pipeline_file: Path | None = None
    default_recipe: str = "PII Scrubber"

    # I/O
    encoding: str = "utf-8"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_prefix="SCRUBCHEF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
