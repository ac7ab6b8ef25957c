"""Normalization helpers for upstream game fields.

Every helper degrades a malformed value to ``None`` (or drops it) instead of
raising, so a single bad field never sinks a whole record.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from metadata.types import Platform

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_YEAR_RE = re.compile(r"^\d{4}$")
_EPOCH_RE = re.compile(r"^\d{10}$")
_DOTTED_DATE_RE = re.compile(r"^(\d{4})\.(\d{2})\.(\d{2})$")
_SEARCH_TERM_JUNK_RE = re.compile(r"[^A-Za-z0-9' ]")
_QUERY_SUFFIXES = ("_base", "_game")

_PLATFORM_LABELS = {
    "windows": Platform.WINDOWS,
    "linux": Platform.LINUX,
    "mac": Platform.MAC,
    "osx": Platform.MAC,
}


def normalize_query(title: Any) -> str:
    """Turn a library folder style title into a search query.

    ``"Witcher 3_game"`` becomes ``"Witcher 3"``.
    """
    text = str(title or "").strip()
    for suffix in _QUERY_SUFFIXES:
        if text.endswith(suffix):
            text = text[: -len(suffix)]
    text = text.replace("_", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_search_term(title: Any) -> str:
    text = str(title or "").replace(":", " ").replace("-", " ")
    text = _SEARCH_TERM_JUNK_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def map_platforms(labels: Iterable[Any] | None) -> frozenset[Platform]:
    if not labels:
        return frozenset()
    platforms = set()
    for label in labels:
        platform = _PLATFORM_LABELS.get(str(label or "").strip().lower())
        if platform is not None:
            platforms.add(platform)
    return frozenset(platforms)


def parse_release_date(value: Any) -> datetime | None:
    """Parse the catalog's release date: ``yyyy``, epoch seconds, or ``yyyy.MM.dd``."""
    if value is None:
        return None
    text = str(value).strip()
    try:
        if _YEAR_RE.match(text):
            return datetime(int(text), 1, 1, tzinfo=timezone.utc)
        if _EPOCH_RE.match(text):
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        match = _DOTTED_DATE_RE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return datetime(year, month, day, tzinfo=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.debug("Unparseable release date %r", value)
    return None


def parse_iso_instant(value: Any) -> datetime | None:
    if not value:
        return None
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable instant %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def fix_url(url: Any) -> str | None:
    """Complete protocol-relative URLs with https; reject anything without a host."""
    if not isinstance(url, str):
        return None
    text = url.strip()
    if not text:
        return None
    if text.startswith("//"):
        text = f"https:{text}"
    try:
        parsed = urlparse(text)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc or " " in text:
        return None
    return text


def expand_url_format(url_format: Any, formatter: str) -> str | None:
    if not isinstance(url_format, str):
        return None
    url = url_format.replace("{formatter}", formatter).replace("{ext}", "jpg")
    return fix_url(url)


def url_set(urls: Iterable[Any] | None) -> frozenset[str] | None:
    if not urls:
        return None
    fixed = {url for url in (fix_url(u) for u in urls) if url}
    return frozenset(fixed) or None


def name_set(names: Iterable[Any] | None) -> frozenset[str] | None:
    if not names:
        return None
    cleaned = {_WHITESPACE_RE.sub(" ", str(n)).strip() for n in names if n is not None}
    cleaned.discard("")
    return frozenset(cleaned) or None


def normalize_rating(value: Any, scale: float = 5) -> float | None:
    """Bring an upstream rating onto the common 0-10 scale.

    ``scale`` is the upstream maximum: 5 for star ratings, 50 for GOG's
    catalog, which reports stars in tenths (``47`` for 4.7).
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    if rating < 0:
        return None
    return round(min(rating * 10 / scale, 10.0), 2)


def html_to_text(html: Any) -> str | None:
    if not isinstance(html, str) or not html.strip():
        return None
    text = BeautifulSoup(html, "html.parser").get_text("\n", strip=True)
    return text or None
