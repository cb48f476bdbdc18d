"""Writer construction on top of structlog.

A writer is a structlog filtering bound logger printing to one stream. The
verbosity threshold is baked into its wrapper class when it is built, so every
logger bound from it shares the same threshold without touching structlog's
process-wide configuration.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from types import FrameType
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

DEFAULT_SKIP_FRAME_COUNT = 3

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Frames from these modules are never reported as the call site.
_INTERNAL_MODULES = ("ctxlog.logger", "ctxlog.writer")

# Short level labels; each fits the console's six-character tag.
_LEVEL_LABELS = {"warning": "warn", "critical": "fatal"}


def resolve_level(level: str | int | None) -> int:
    """Map a level name or stdlib level number to a threshold.

    Anything other than debug, info, warn/warning or error falls back to INFO.
    """
    if isinstance(level, str):
        return _LEVELS.get(level.strip().lower(), logging.INFO)
    if isinstance(level, int) and not isinstance(level, bool) and level in _LEVELS.values():
        return level
    return logging.INFO


def resolve_skip_frame_count(skip_frame_count: int | None) -> int:
    """Use the given depth unless it is missing or negative."""
    if skip_frame_count is None or skip_frame_count < 0:
        return DEFAULT_SKIP_FRAME_COUNT
    return skip_frame_count


def label_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Report ``warning`` as ``warn`` and ``critical`` as ``fatal``."""
    level = event_dict.get("level")
    if level in _LEVEL_LABELS:
        event_dict["level"] = _LEVEL_LABELS[level]
    return event_dict


def _is_internal(frame: FrameType) -> bool:
    module = frame.f_globals.get("__name__", "")
    return module.startswith("structlog") or module in _INTERNAL_MODULES


class CallerAnnotator:
    """Processor adding ``caller`` (``path:line``) to each record.

    Depth 1 is the frame that called into the logger, depth 0 the logger
    method itself. Each further unit walks one frame outwards.
    """

    def __init__(self, skip_frame_count: int = DEFAULT_SKIP_FRAME_COUNT, key: str = "caller"):
        self.skip_frame_count = skip_frame_count
        self.key = key

    def find_frame(self) -> FrameType:
        frame = sys._getframe(1)
        facade = None
        while frame.f_back is not None and _is_internal(frame):
            facade = frame
            frame = frame.f_back

        if self.skip_frame_count == 0:
            return facade or frame

        for _ in range(self.skip_frame_count - 1):
            if frame.f_back is None:
                break
            frame = frame.f_back
        return frame

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        frame = self.find_frame()
        event_dict[self.key] = f"{frame.f_code.co_filename}:{frame.f_lineno}"
        return event_dict


class ConsoleLineRenderer:
    """Render a record as one human-oriented line.

    ``2024-01-20T10:15:30Z | INFO  | /app/x.py:12 > message method:GET``

    Level tag and field values are upper-cased, field names are suffixed with
    a colon and sorted.
    """

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        fields = dict(event_dict)
        timestamp = fields.pop("timestamp", None)
        level = fields.pop("level", method_name)
        level = _LEVEL_LABELS.get(level, level)
        caller = fields.pop("caller", None)
        message = fields.pop("message", fields.pop("event", ""))

        parts: list[str] = []
        if timestamp:
            parts.append(str(timestamp))
        parts.append(("| %-6s|" % level).upper())
        if caller:
            parts.append(f"{caller} >")
        if message:
            parts.append(str(message))
        parts.extend(f"{name}:{str(fields[name]).upper()}" for name in sorted(fields))
        return " ".join(parts)


@dataclass(frozen=True)
class WriterConfig:
    """Processor chain (ending in a renderer) and the stream it prints to."""

    processors: Sequence[Processor] = field(default_factory=tuple)
    stream: TextIO | None = None


WriterFactory = Callable[[int], WriterConfig]


def default_writer(skip_frame_count: int) -> WriterConfig:
    """One JSON object per line with timestamp, level, caller and message."""
    return WriterConfig(
        processors=(
            structlog.processors.add_log_level,
            label_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            CallerAnnotator(skip_frame_count),
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        )
    )


def console_writer(skip_frame_count: int) -> WriterConfig:
    """Human-readable lines with RFC 3339 timestamps."""
    return WriterConfig(
        processors=(
            structlog.processors.add_log_level,
            label_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%dT%H:%M:%SZ", utc=True, key="timestamp"),
            CallerAnnotator(skip_frame_count),
            structlog.processors.EventRenamer("message"),
            ConsoleLineRenderer(),
        )
    )


def build_writer(config: WriterConfig, level: int, stream: TextIO | None = None) -> Any:
    """Bind a fresh, empty-context writer filtered at ``level``."""
    output = stream or config.stream or sys.stdout
    return structlog.wrap_logger(
        structlog.PrintLogger(output),
        processors=list(config.processors),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        cache_logger_on_first_use=False,
    ).bind()
