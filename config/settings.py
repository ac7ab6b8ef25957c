"""Application settings constants."""

from __future__ import annotations

import os


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


GOG_CATALOG_URL = os.getenv("GOG_CATALOG_URL", "https://catalog.gog.com/v1/catalog")
GOG_GAMESDB_URL = os.getenv("GOG_GAMESDB_URL", "https://gamesdb.gog.com/wishlist/wishlisted_games")
GOG_PRODUCT_URL = os.getenv("GOG_PRODUCT_URL", "https://api.gog.com/v2/games")
GOG_USER_AGENT = os.getenv(
    "GOG_USER_AGENT",
    "GogMetadata/1.0 (+https://github.com/gog-metadata/gog-metadata)",
)
GOG_TIMEOUT_SECONDS = _env_float("GOG_TIMEOUT_SECONDS", 10.0)

# Shared by every call to the GOG hosts.
GOG_MAX_CONCURRENT_CALLS = _env_int("GOG_MAX_CONCURRENT_CALLS", 8)
GOG_MAX_WAIT_SECONDS = _env_float("GOG_MAX_WAIT_SECONDS", 600.0)

# Per-period permits; search and product detail are limited separately.
GOG_SEARCH_LIMIT_FOR_PERIOD = _env_int("GOG_SEARCH_LIMIT_FOR_PERIOD", 4)
GOG_SEARCH_REFRESH_PERIOD_SECONDS = _env_float("GOG_SEARCH_REFRESH_PERIOD_SECONDS", 1.0)
GOG_DETAIL_LIMIT_FOR_PERIOD = _env_int("GOG_DETAIL_LIMIT_FOR_PERIOD", 2)
GOG_DETAIL_REFRESH_PERIOD_SECONDS = _env_float("GOG_DETAIL_REFRESH_PERIOD_SECONDS", 1.0)
GOG_RATE_LIMIT_TIMEOUT_SECONDS = _env_float("GOG_RATE_LIMIT_TIMEOUT_SECONDS", 600.0)

GOG_RETRY_ATTEMPTS = _env_int("GOG_RETRY_ATTEMPTS", 3)
GOG_RETRY_WAIT_SECONDS = _env_float("GOG_RETRY_WAIT_SECONDS", 2.0)

GOG_CACHE_CAPACITY = _env_int("GOG_CACHE_CAPACITY", 100)
GOG_MIN_FUZZY_SCORE = _env_int("GOG_MIN_FUZZY_SCORE", 60)
GOG_ID_MATCH_MIN_SCORE = _env_int("GOG_ID_MATCH_MIN_SCORE", 90)
