"""Structured, context-enriched logging over structlog.

Key components:
- logger: Logger (leveled emission, field builders) and the constructors
  new / new_pretty / new_with_custom_writer
- writer: structlog writer construction, caller annotation and renderers
- fields: typed lookups into the ambient request context
- config: LogSettings loaded from the environment
"""

from ctxlog.config import LogSettings, get_log_settings, new_from_settings
from ctxlog.fields import get_int, get_str
from ctxlog.logger import Logger, LoggerInterface, new, new_pretty, new_with_custom_writer
from ctxlog.writer import (
    DEFAULT_SKIP_FRAME_COUNT,
    WriterConfig,
    WriterFactory,
    console_writer,
    default_writer,
)

__all__ = [
    "DEFAULT_SKIP_FRAME_COUNT",
    "LogSettings",
    "Logger",
    "LoggerInterface",
    "WriterConfig",
    "WriterFactory",
    "console_writer",
    "default_writer",
    "get_int",
    "get_log_settings",
    "get_str",
    "new",
    "new_from_settings",
    "new_pretty",
    "new_with_custom_writer",
]
