"""Shared test fixtures."""

from __future__ import annotations

import io

import pytest
import structlog


@pytest.fixture(autouse=True)
def _clean_contextvars():
    """Keep structlog's context-local store empty between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()
