"""Typed lookups into the ambient request context.

The ambient context is any string-keyed mapping owned by the caller. Values
that are missing, of the wrong type, or (for strings) empty are reported as
absent so the corresponding log field is simply left out.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

# (context key, log field name) pairs, in attachment order.
REQUEST_FIELDS: tuple[tuple[str, str], ...] = (
    ("Method", "method"),
    ("RequestURI", "req_uri"),
    ("ReqHeader", "req_header"),
    ("ReqBody", "req_body"),
    ("Time", "time"),
)

RESPONSE_STR_FIELDS: tuple[tuple[str, str], ...] = (
    ("RespHeader", "resp_header"),
    ("RespBody", "resp_body"),
)

RESPONSE_INT_FIELDS: tuple[tuple[str, str], ...] = (
    ("StatusCode", "status_code"),
)

CONTEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("Tag", "tag"),
    ("DocumentId", "document_id"),
    ("ReqId", "req_id"),
    ("XReqId", "x_req_id"),
)


def get_str(ctx: Mapping[str, Any], key: str) -> tuple[str, bool]:
    """Return ``(value, True)`` if ``ctx[key]`` is a non-empty string."""
    value = ctx.get(key)
    if isinstance(value, str) and value != "":
        return value, True
    return "", False


def get_int(ctx: Mapping[str, Any], key: str) -> tuple[int, bool]:
    """Return ``(value, True)`` if ``ctx[key]`` is an int. Zero is present.

    ``bool`` is a subclass of ``int`` in Python but is not treated as one.
    """
    value = ctx.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value, True
    return 0, False


def ambient_context() -> dict[str, Any]:
    """Snapshot of structlog's context-local values for the current task."""
    return structlog.contextvars.get_contextvars()


def collect(
    ctx: Mapping[str, Any],
    str_fields: tuple[tuple[str, str], ...] = (),
    int_fields: tuple[tuple[str, str], ...] = (),
) -> dict[str, Any]:
    """Build the field dict for every present key, string keys first."""
    found: dict[str, Any] = {}
    for key, name in str_fields:
        value, ok = get_str(ctx, key)
        if ok:
            found[name] = value
    for key, name in int_fields:
        value, ok = get_int(ctx, key)
        if ok:
            found[name] = value
    return found
