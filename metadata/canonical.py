import logging
import threading
from dataclasses import replace

from config import settings
from engine.search_scoring import (
    best_title_match,
    deduplicate,
    rank_candidates,
    score_candidates,
)
from metadata.canonical_cache import LRUCache
from metadata.merge import fill_missing, with_id
from metadata.normalize import normalize_query
from metadata.providers.base import CatalogSource
from metadata.providers.gog import GogCatalogAdapter, GogGamesDbAdapter, GogProductAdapter
from metadata.services.resilience import Bulkhead, build_guard

logger = logging.getLogger(__name__)


def _section(config):
    if not isinstance(config, dict):
        return {}
    return config.get("gog_metadata") or {}


def _int_option(config, key, default):
    value = _section(config).get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool_option(config, key, default):
    value = _section(config).get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def default_guards():
    """Search and detail guards for the GOG hosts, sharing one bulkhead."""
    bulkhead = Bulkhead(
        "gog-api",
        max_concurrent_calls=settings.GOG_MAX_CONCURRENT_CALLS,
        max_wait_seconds=settings.GOG_MAX_WAIT_SECONDS,
    )
    search_guard = build_guard(
        "gog-search",
        bulkhead=bulkhead,
        limit_for_period=settings.GOG_SEARCH_LIMIT_FOR_PERIOD,
        refresh_period_seconds=settings.GOG_SEARCH_REFRESH_PERIOD_SECONDS,
        timeout_seconds=settings.GOG_RATE_LIMIT_TIMEOUT_SECONDS,
        max_attempts=settings.GOG_RETRY_ATTEMPTS,
        wait_seconds=settings.GOG_RETRY_WAIT_SECONDS,
    )
    detail_guard = build_guard(
        "gog-detail",
        bulkhead=bulkhead,
        limit_for_period=settings.GOG_DETAIL_LIMIT_FOR_PERIOD,
        refresh_period_seconds=settings.GOG_DETAIL_REFRESH_PERIOD_SECONDS,
        timeout_seconds=settings.GOG_RATE_LIMIT_TIMEOUT_SECONDS,
        max_attempts=settings.GOG_RETRY_ATTEMPTS,
        wait_seconds=settings.GOG_RETRY_WAIT_SECONDS,
    )
    return search_guard, detail_guard


def default_sources(search_guard, *, client=None):
    return [
        CatalogSource("gog_catalog", GogCatalogAdapter(client), priority=1, guard=search_guard, shares_detail_ids=True),
        CatalogSource("gog_gamesdb", GogGamesDbAdapter(client), priority=0, guard=search_guard),
    ]


class GameMetadataResolver:
    """Resolve game titles and GOG ids into canonical metadata records.

    ``fetch_by_title`` and ``fetch_by_id`` never raise: upstream failures are
    logged and the affected source or step simply contributes nothing.
    """

    def __init__(self, *, config=None, sources=None, detail_adapter=None, detail_guard=None, client=None):
        config = config or {}
        if sources is None or detail_guard is None:
            search_guard, default_detail_guard = default_guards()
            if sources is None:
                sources = default_sources(search_guard, client=client)
            if detail_guard is None:
                detail_guard = default_detail_guard
        self.sources = list(sources)
        self.detail_adapter = detail_adapter if detail_adapter is not None else GogProductAdapter(client)
        self.detail_guard = detail_guard

        capacity = _int_option(config, "cache_capacity", settings.GOG_CACHE_CAPACITY)
        self.min_score = _int_option(config, "min_score", settings.GOG_MIN_FUZZY_SCORE)
        self.id_match_min_score = _int_option(config, "id_match_min_score", settings.GOG_ID_MATCH_MIN_SCORE)
        self.prefer_source_priority = _bool_option(config, "prefer_source_priority", False)

        self.raw_cache = LRUCache(capacity)
        self.resolved_cache = LRUCache(capacity)

        self._metrics_lock = threading.Lock()
        self._metrics = {
            "title_requests": 0,
            "id_requests": 0,
            "resolved_cache_hits": 0,
            "source_failures": 0,
            "detail_failures": 0,
            "descriptions_backfilled": 0,
        }

    def _inc_metric(self, key, amount=1):
        with self._metrics_lock:
            self._metrics[key] = int(self._metrics.get(key, 0)) + int(amount)

    def get_metrics(self):
        with self._metrics_lock:
            return dict(self._metrics)

    def fetch_by_title(self, title, platform_filter=None, max_results=10):
        self._inc_metric("title_requests")
        try:
            return self._fetch_by_title(title, platform_filter, max_results)
        except Exception:
            logger.exception("[RESOLVE] title lookup failed title=%r", title)
            return []

    def fetch_by_id(self, id):
        self._inc_metric("id_requests")
        try:
            return self._fetch_by_id(str(id or "").strip())
        except Exception:
            logger.exception("[RESOLVE] id lookup failed id=%r", id)
            return None

    def _fetch_by_title(self, title, platform_filter, max_results):
        query = normalize_query(title)
        if not query or int(max_results or 0) < 1:
            return []
        wanted = frozenset(platform_filter or ())

        candidates = []
        for source in self.sources:
            candidates.extend(self._search_source(source, query))
        if not candidates:
            logger.info("[RESOLVE] query=%r candidates=0", query)
            return []

        if wanted:
            candidates = [c for c in candidates if c.metadata.platforms & wanted]
        scored = score_candidates(candidates, query, min_score=self.min_score)
        ranked = rank_candidates(scored, query, prefer_source_priority=self.prefer_source_priority)
        kept = deduplicate(ranked)[: int(max_results)]

        results = []
        for candidate in kept:
            metadata = candidate.metadata
            if not metadata.has_description:
                metadata = self._backfill_description(metadata)
            self.resolved_cache.put(metadata.id, metadata)
            results.append(metadata)
        top = results[0].title if results else "-"
        logger.info("[RESOLVE] query=%r candidates=%s results=%s top=%r", query, len(candidates), len(results), top)
        return results

    def _search_source(self, source, query):
        try:
            found = source.search(query)
        except Exception as exc:
            self._inc_metric("source_failures")
            logger.warning("[RESOLVE] source=%s search failed query=%r error=%s", source.name, query, exc)
            return []
        tagged = []
        for candidate in found or []:
            candidate = replace(candidate, source=source.name, priority=source.priority)
            self.raw_cache.put(candidate.source_id, candidate)
            tagged.append(candidate)
        logger.debug("[RESOLVE] source=%s query=%r candidates=%s", source.name, query, len(tagged))
        return tagged

    def _fetch_detail(self, id):
        try:
            return self.detail_guard.execute(lambda: self.detail_adapter.fetch_detail(id))
        except Exception as exc:
            self._inc_metric("detail_failures")
            logger.warning("[RESOLVE] detail fetch failed id=%s error=%s", id, exc)
            return None

    def _backfill_description(self, metadata):
        detail = self._fetch_detail(metadata.id)
        if detail is None or not detail.description:
            return metadata
        self._inc_metric("descriptions_backfilled")
        return replace(metadata, description=detail.description)

    def _fetch_by_id(self, id):
        if not id:
            return None
        cached = self.resolved_cache.get(id)
        if cached is not None:
            self._inc_metric("resolved_cache_hits")
            return cached

        raw = self.raw_cache.get(id)
        detail = self._fetch_detail(id)
        if raw is None and detail is not None and detail.title:
            raw = self._find_by_title(id, detail.title)
        if raw is None:
            logger.info("[RESOLVE] id=%s unresolved", id)
            return None

        metadata = with_id(raw.metadata, id)
        if detail is not None:
            # Other id spaces may name a different product; trust only its description.
            only = None if self._shares_detail_ids(raw.source) else ("description",)
            metadata = fill_missing(metadata, detail.as_metadata(id), only=only)
        self.resolved_cache.put(id, metadata)
        return metadata

    def _shares_detail_ids(self, source_name):
        return any(s.shares_detail_ids and s.name == source_name for s in self.sources)

    def _find_by_title(self, id, title):
        results = []
        for source in self.sources:
            if source.shares_detail_ids:
                results.extend(self._search_source(source, title))
        match = next((c for c in results if c.source_id == id), None)
        if match is None:
            match = best_title_match(title, results, min_score=self.id_match_min_score)
        if match is not None:
            self.raw_cache.put(id, match)
        return match


_RESOLVER = None
_RESOLVER_LOCK = threading.Lock()


def get_game_metadata_resolver():
    global _RESOLVER
    if _RESOLVER is not None:
        return _RESOLVER
    with _RESOLVER_LOCK:
        if _RESOLVER is None:
            _RESOLVER = GameMetadataResolver()
    return _RESOLVER
