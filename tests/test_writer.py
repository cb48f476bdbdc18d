"""Tests for writer construction, caller annotation and renderers."""

from __future__ import annotations

import json
import logging
import sys

import structlog

from ctxlog.writer import (
    DEFAULT_SKIP_FRAME_COUNT,
    CallerAnnotator,
    ConsoleLineRenderer,
    WriterConfig,
    build_writer,
    console_writer,
    default_writer,
    label_level,
    resolve_level,
    resolve_skip_frame_count,
)


class TestResolveLevel:
    """Level names and numbers to thresholds."""

    def test_names(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("info") == logging.INFO
        assert resolve_level("warn") == logging.WARNING
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level("error") == logging.ERROR

    def test_case_and_whitespace(self):
        assert resolve_level(" DEBUG ") == logging.DEBUG
        assert resolve_level("Warn") == logging.WARNING

    def test_stdlib_numbers(self):
        assert resolve_level(logging.ERROR) == logging.ERROR
        assert resolve_level(logging.DEBUG) == logging.DEBUG

    def test_unknown_defaults_to_info(self):
        assert resolve_level("verbose") == logging.INFO
        assert resolve_level("fatal") == logging.INFO
        assert resolve_level(None) == logging.INFO
        assert resolve_level(12) == logging.INFO
        assert resolve_level(logging.CRITICAL) == logging.INFO



class TestLabelLevel:
    """Short level labels in rendered records."""

    def test_renames_warning_and_critical(self):
        assert label_level(None, "warning", {"level": "warning"}) == {"level": "warn"}
        assert label_level(None, "critical", {"level": "critical"}) == {"level": "fatal"}

    def test_other_levels_untouched(self):
        for level in ("debug", "info", "error"):
            assert label_level(None, level, {"level": level}) == {"level": level}

    def test_missing_level(self):
        assert label_level(None, "info", {"event": "x"}) == {"event": "x"}

class TestResolveSkipFrameCount:
    def test_default(self):
        assert DEFAULT_SKIP_FRAME_COUNT == 3
        assert resolve_skip_frame_count(None) == 3

    def test_non_negative_used_as_is(self):
        for value in (0, 1, 3, 7, 100):
            assert resolve_skip_frame_count(value) == value

    def test_negative_uses_default(self):
        for value in (-1, -3, -100):
            assert resolve_skip_frame_count(value) == DEFAULT_SKIP_FRAME_COUNT


class TestCallerAnnotator:
    """Frame walking for the caller field."""

    def test_direct_caller(self):
        annotator = CallerAnnotator(1)
        line = sys._getframe().f_lineno + 1
        event = annotator(None, "info", {})
        assert event["caller"] == f"{__file__}:{line}"

    def test_walks_outwards(self):
        annotator = CallerAnnotator(2)

        def helper():
            return annotator(None, "info", {})

        line = sys._getframe().f_lineno + 1
        event = helper()
        assert event["caller"] == f"{__file__}:{line}"

    def test_depth_beyond_stack_stops_at_outermost(self):
        event = CallerAnnotator(10_000)(None, "info", {})
        assert ":" in event["caller"]

    def test_custom_key(self):
        event = CallerAnnotator(1, key="src")(None, "info", {})
        assert "src" in event
        assert "caller" not in event


class TestConsoleLineRenderer:
    """Console line layout."""

    def test_layout(self):
        line = ConsoleLineRenderer()(
            None,
            "info",
            {
                "timestamp": "2024-01-20T10:15:30Z",
                "level": "info",
                "caller": "/app/x.py:12",
                "message": "handled",
                "method": "get",
                "req_uri": "/x",
            },
        )
        assert line == "2024-01-20T10:15:30Z | INFO  | /app/x.py:12 > handled method:GET req_uri:/X"

    def test_fields_sorted_and_upper_cased(self):
        line = ConsoleLineRenderer()(
            None, "warning", {"level": "warning", "message": "slow", "tag": "db", "severity": 400}
        )
        assert line == "| WARN  | slow severity:400 tag:DB"

    def test_message_case_is_kept(self):
        line = ConsoleLineRenderer()(None, "info", {"level": "info", "message": "Mixed Case"})
        assert line.endswith("Mixed Case")

    def test_critical_shown_as_fatal(self):
        line = ConsoleLineRenderer()(None, "critical", {"level": "critical", "message": "down"})
        assert line == "| FATAL | down"

    def test_falls_back_to_event_key(self):
        line = ConsoleLineRenderer()(None, "debug", {"event": "raw"})
        assert line == "| DEBUG | raw"


class TestWriterFactories:
    def test_default_writer_ends_in_json(self):
        config = default_writer(2)
        assert isinstance(config.processors[-1], structlog.processors.JSONRenderer)
        annotators = [p for p in config.processors if isinstance(p, CallerAnnotator)]
        assert annotators[0].skip_frame_count == 2

    def test_console_writer_ends_in_console_renderer(self):
        config = console_writer(5)
        assert isinstance(config.processors[-1], ConsoleLineRenderer)
        annotators = [p for p in config.processors if isinstance(p, CallerAnnotator)]
        assert annotators[0].skip_frame_count == 5

    def test_stream_defaults_to_none(self):
        assert default_writer(3).stream is None


class TestBuildWriter:
    """Filtering bound loggers built without global config."""

    def test_threshold_drops_lower_levels(self, stream):
        config = WriterConfig(processors=(structlog.processors.JSONRenderer(),))
        writer = build_writer(config, logging.WARNING, stream)
        writer.info("dropped")
        writer.warning("kept")
        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0]) == {"event": "kept"}

    def test_config_stream_used(self, stream):
        config = WriterConfig(processors=(structlog.processors.JSONRenderer(),), stream=stream)
        build_writer(config, logging.INFO).info("hello")
        assert json.loads(stream.getvalue()) == {"event": "hello"}

    def test_explicit_stream_wins(self, stream):
        import io

        other = io.StringIO()
        config = WriterConfig(processors=(structlog.processors.JSONRenderer(),), stream=other)
        build_writer(config, logging.INFO, stream).info("hello")
        assert other.getvalue() == ""
        assert "hello" in stream.getvalue()

    def test_stdout_by_default(self, capsys):
        config = WriterConfig(processors=(structlog.processors.JSONRenderer(),))
        build_writer(config, logging.INFO).info("to stdout")
        assert json.loads(capsys.readouterr().out) == {"event": "to stdout"}

    def test_starts_with_empty_context(self, stream):
        writer = build_writer(default_writer(1), logging.INFO, stream)
        assert structlog.get_context(writer) == {}

    def test_does_not_touch_global_config(self, stream):
        before = structlog.get_config()["processors"]
        build_writer(default_writer(1), logging.DEBUG, stream)
        assert structlog.get_config()["processors"] == before
