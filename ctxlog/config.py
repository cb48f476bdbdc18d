"""Startup configuration using pydantic-settings.

Loads settings from environment variables (``CTXLOG_`` prefix) and a .env
file.

Priority: explicit arguments > environment variables > .env > defaults
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from ctxlog.logger import Logger, new
from ctxlog.writer import console_writer, default_writer


class LogSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CTXLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "info"
    skip_frame_count: int | None = None  # None or negative: default depth
    format: Literal["json", "console"] = "json"


def get_log_settings() -> LogSettings:
    """Create and return a LogSettings instance."""
    return LogSettings()


def new_from_settings(settings: LogSettings | None = None) -> Logger:
    """Build the root logger from settings (environment when omitted)."""
    settings = settings or get_log_settings()
    factory = console_writer if settings.format == "console" else default_writer
    return new(settings.level, settings.skip_frame_count, factory)
