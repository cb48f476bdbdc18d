"""Leveled, context-enriched logger over a structlog writer.

Usage:
    from ctxlog import new

    log = new("info")
    log.apply_request(ctx).apply_response(ctx).infof("handled %s", path)

Every builder method returns a new Logger; the logger it was called on keeps
its fields unchanged.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import Any, NoReturn, Protocol, TextIO

import structlog

from ctxlog.fields import (
    CONTEXT_FIELDS,
    REQUEST_FIELDS,
    RESPONSE_INT_FIELDS,
    RESPONSE_STR_FIELDS,
    ambient_context,
    collect,
)
from ctxlog.writer import (
    WriterFactory,
    build_writer,
    console_writer,
    default_writer,
    resolve_level,
    resolve_skip_frame_count,
)

SEVERITY_WARN = 400
SEVERITY_ERROR = 500
SEVERITY_FATAL = 800


def format_message(message: str, args: tuple[Any, ...]) -> str:
    """Apply printf-style ``args`` to ``message``.

    A mismatched format never raises: the raw message is kept and the
    arguments are appended as their repr.
    """
    if not args:
        return message
    try:
        return message % args
    except (TypeError, ValueError):
        return f"{message} {args!r}"


class LoggerInterface(Protocol):
    """The public surface application code should depend on."""

    def apply_context(self, ctx: Mapping[str, Any] | None = None) -> LoggerInterface: ...
    def apply_request(self, ctx: Mapping[str, Any] | None = None) -> LoggerInterface: ...
    def apply_response(self, ctx: Mapping[str, Any] | None = None) -> LoggerInterface: ...
    def err(self, error: BaseException | None) -> LoggerInterface: ...
    def debugf(self, message: str, *args: Any) -> None: ...
    def infof(self, message: str, *args: Any) -> None: ...
    def warnf(self, message: str, *args: Any) -> None: ...
    def errorf(self, message: str, *args: Any) -> None: ...
    def fatalf(self, message: str, *args: Any) -> NoReturn: ...


class Logger:
    """Holds one structlog bound logger and never rebinds it."""

    __slots__ = ("_writer",)

    def __init__(self, writer: Any):
        self._writer = writer

    @property
    def writer(self) -> Any:
        return self._writer

    @property
    def fields(self) -> dict[str, Any]:
        """Copy of the fields carried by this logger."""
        return dict(structlog.get_context(self._writer))

    def _with(self, **fields: Any) -> Logger:
        return Logger(self._writer.bind(**fields))

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def err(self, error: BaseException | None) -> Logger:
        """Attach ``error`` (the error's text). ``None`` attaches nothing."""
        if error is None:
            return self._with()
        return self._with(error=str(error))

    def apply_request(self, ctx: Mapping[str, Any] | None = None) -> Logger:
        """Attach method, req_uri, req_header, req_body and time when present.

        Args:
            ctx: Ambient values for the current request. Defaults to
                structlog's context-local store.
        """
        source = ambient_context() if ctx is None else ctx
        return self._with(**collect(source, REQUEST_FIELDS))

    def apply_response(self, ctx: Mapping[str, Any] | None = None) -> Logger:
        """Attach resp_header, resp_body and status_code when present."""
        source = ambient_context() if ctx is None else ctx
        return self._with(**collect(source, RESPONSE_STR_FIELDS, RESPONSE_INT_FIELDS))

    def apply_context(self, ctx: Mapping[str, Any] | None = None) -> Logger:
        """Attach tag, document_id, req_id and x_req_id when present."""
        source = ambient_context() if ctx is None else ctx
        return self._with(**collect(source, CONTEXT_FIELDS))

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def debugf(self, message: str, *args: Any) -> None:
        if self._writer.is_enabled_for(logging.DEBUG):
            self._writer.debug(format_message(message, args))

    def infof(self, message: str, *args: Any) -> None:
        if self._writer.is_enabled_for(logging.INFO):
            self._writer.info(format_message(message, args))

    def warnf(self, message: str, *args: Any) -> None:
        if self._writer.is_enabled_for(logging.WARNING):
            self._writer.warning(format_message(message, args), severity=SEVERITY_WARN)

    def errorf(self, message: str, *args: Any) -> None:
        if self._writer.is_enabled_for(logging.ERROR):
            self._writer.error(format_message(message, args), severity=SEVERITY_ERROR)

    def fatalf(self, message: str, *args: Any) -> NoReturn:
        """Log at fatal level, then exit the process with status 1.

        The exit happens even if writing the record fails.
        """
        try:
            self._writer.critical(format_message(message, args), severity=SEVERITY_FATAL)
        finally:
            sys.exit(1)


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------


def new(
    level: str | int | None = "info",
    skip_frame_count: int | None = None,
    writer_factory: WriterFactory | None = None,
    *,
    stream: TextIO | None = None,
) -> Logger:
    """Build the root logger.

    Args:
        level: debug, info, warn or error (name or stdlib number). Anything
            else means info.
        skip_frame_count: Caller depth for the ``caller`` field. ``None`` or
            negative means the default of 3.
        writer_factory: Called with the resolved depth; returns the
            WriterConfig to use. Defaults to JSON lines.
        stream: Output stream, overriding the one in the WriterConfig.
            Standard output when neither is set.

    Returns:
        Logger with no fields attached.
    """
    threshold = resolve_level(level)
    depth = resolve_skip_frame_count(skip_frame_count)
    config = (writer_factory or default_writer)(depth)
    return Logger(build_writer(config, threshold, stream))


def new_with_custom_writer(
    level: str | int | None,
    skip_frame_count: int | None,
    writer_factory: WriterFactory,
) -> Logger:
    return new(level, skip_frame_count, writer_factory)


def new_pretty(level: str | int | None = "info", skip_frame_count: int | None = None) -> Logger:
    """Root logger writing console lines instead of JSON."""
    return new(level, skip_frame_count, console_writer)
