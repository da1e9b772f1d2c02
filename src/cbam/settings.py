"""Service settings loaded from the environment or a ``.env`` file."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Settings for the validation service (``CBAM_`` prefixed variables)."""

    app_name: str = "CBAM Compliance Engine"
    env: str = "development"
    log_level: str = "INFO"

    # Empty means the bundled data/schedules/cbam_default.yaml.
    schedule_path: str = ""

    model_config = SettingsConfigDict(
        env_prefix="CBAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply the process-wide logging format at ``level`` (settings default)."""

    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)


__all__ = ["LOG_FORMAT", "Settings", "configure_logging", "get_settings"]
