"""Identifier handling.

Owner, team and tournament references were historically written either as
plain string ids or as Firestore ``DocumentReference`` objects. Everything
that compares identifiers goes through ``normalize_id`` first.
"""

from __future__ import annotations

import re
from typing import Any

# Firestore document id limits.
MAX_ID_BYTES = 1500
_RESERVED_ID = re.compile(r"^__.*__$")


def is_valid_id(value: Any) -> bool:
    """Return True if ``value`` can be used as a document id."""
    if not isinstance(value, str) or not value:
        return False
    if len(value.encode("utf-8")) > MAX_ID_BYTES:
        return False
    if "/" in value or value in (".", ".."):
        return False
    return not _RESERVED_ID.match(value)


def normalize_id(value: Any) -> str | None:
    """Return the canonical string form of an id or document reference."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    ref_id = getattr(value, "id", None)
    if isinstance(ref_id, str):
        return ref_id
    return str(value)
