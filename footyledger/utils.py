"""Utility functions for the application."""

from __future__ import annotations

import datetime
import math
from typing import Any

from flask import current_app, request

from .constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .core.ids import normalize_id
from .errors import ValidationError


def get_json_body() -> dict[str, Any]:
    """Return the JSON object of the request, or an empty dict."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def parse_pagination() -> tuple[int, int, int]:
    """Read ``page`` and ``limit`` from the query string.

    ``page`` is at least 1 and ``limit`` is clamped to the configured
    maximum. Returns ``(page, limit, skip)``.
    """
    default_size = current_app.config.get("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)
    max_size = current_app.config.get("MAX_PAGE_SIZE", MAX_PAGE_SIZE)
    page = max(_parse_int(request.args.get("page"), 1), 1)
    limit = min(max(_parse_int(request.args.get("limit"), default_size), 1), max_size)
    return page, limit, (page - 1) * limit


def page_envelope(items: list[Any], page: int, limit: int, total: int) -> dict[str, Any]:
    """Wrap one page of results with its paging metadata."""
    return {
        "items": items,
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def parse_sort(value: str | None) -> list[tuple[str, bool]] | None:
    """Turn ``"-date,homeScore"`` into ``[("date", True), ("homeScore", False)]``."""
    if not value:
        return None
    keys = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        descending = part.startswith("-")
        field = part.lstrip("-+")
        if field:
            keys.append((field, descending))
    return keys or None


def parse_fields(value: str | None) -> list[str] | None:
    """Turn ``"homeTeamId, awayTeamId"`` into a projection list."""
    if not value:
        return None
    fields = [f.strip() for f in value.split(",") if f.strip()]
    return fields or None


def _serialize_value(value: Any) -> Any:
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if hasattr(value, "id") and hasattr(value, "collection"):
        # DocumentReference
        return normalize_id(value)
    return value


def serialize_document(doc: dict[str, Any]) -> dict[str, Any]:
    """Make a stored document JSON friendly.

    References become plain ids and timestamps ISO 8601 strings.
    """
    return {k: _serialize_value(v) for k, v in doc.items()}


def validate_form(form) -> None:
    """Validate a JSON-backed form, raising on the first invalid field."""
    if form.validate():
        return
    field, messages = next(iter(form.errors.items()))
    raise ValidationError(field, "invalid", messages[0] if messages else None)
