"""Text and date helpers shared by the metadata and sitemap builders."""

from __future__ import annotations

import datetime as _dt
import re
from typing import Any

from .config import SITE_URL
from .entities import decode_entities

__all__ = [
    "TRUNCATION_MARKER",
    "excerpt",
    "strip_markup",
    "truncate",
    "parse_datetime",
    "to_date",
    "absolute_url",
]

TRUNCATION_MARKER = " [...]"

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def strip_markup(text: str | None) -> str:
    """Drop tags, decode entities and collapse whitespace."""

    if not text:
        return ""
    cleaned = _TAG_RE.sub(" ", text)
    cleaned = decode_entities(cleaned)
    return _WS_RE.sub(" ", cleaned).strip()


def excerpt(content: str | None, max_words: int = 20) -> str:
    """Return the first ``max_words`` words of ``content`` as plain text.

    A trailing ``" [...]"`` is added only when words were cut off.
    """

    text = strip_markup(content)
    if not text:
        return ""
    words = text.split(" ")
    if max_words < 0:
        max_words = 0
    kept = " ".join(words[:max_words])
    if len(words) > max_words:
        return kept + TRUNCATION_MARKER
    return kept


def truncate(text: str, limit: int = 50, ellipsis: str = "...") -> str:
    """Shorten ``text`` so the result, ellipsis included, fits in ``limit``."""

    if len(text) <= limit:
        return text
    cut = max(limit - len(ellipsis), 0)
    return text[:cut].rstrip() + ellipsis


def parse_datetime(value: Any) -> _dt.datetime | None:
    """Parse WordPress GraphQL timestamps (``2024-01-05T10:00:00``) to naive UTC."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, _dt.datetime):
        dt = value
    elif isinstance(value, _dt.date):
        return _dt.datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = _dt.datetime.fromisoformat(text)
        except ValueError:
            try:
                return _dt.datetime.strptime(text[:10], "%Y-%m-%d")
            except ValueError:
                return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return dt


def to_date(value: Any) -> _dt.date | None:
    dt = parse_datetime(value)
    return dt.date() if dt is not None else None


def absolute_url(path: str, base: str = SITE_URL) -> str:
    """Join a site-relative path onto ``base``; absolute URLs pass through."""

    if path.startswith(("http://", "https://")):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return base.rstrip("/") + path
