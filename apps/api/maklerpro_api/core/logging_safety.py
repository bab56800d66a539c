"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any
from urllib.parse import urlsplit, urlunsplit


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for user and chat identifiers."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_log_url(value: str | None) -> str:
    """Drop query string and fragment; render and storage URLs may carry signed tokens."""
    if not value:
        return "url-missing"

    parts = urlsplit(value)
    if not parts.scheme or not parts.netloc:
        return "url-invalid"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
