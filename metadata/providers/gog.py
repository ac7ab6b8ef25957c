import logging
from collections import Counter
from dataclasses import replace
from urllib.parse import quote

from app.gog.client import get_gog_client
from config.settings import GOG_CATALOG_URL, GOG_GAMESDB_URL, GOG_PRODUCT_URL
from metadata.errors import NotFound, ParseError
from metadata.normalize import (
    clean_search_term,
    expand_url_format,
    fix_url,
    html_to_text,
    map_platforms,
    name_set,
    normalize_rating,
    parse_iso_instant,
    parse_release_date,
    url_set,
)
from metadata.taxonomy import map_labels
from metadata.types import CanonicalMetadata, Platform, RawCandidate, RawDetail

logger = logging.getLogger(__name__)

_SEARCH_LIMIT = 50
# Catalog reviewsRating is stars in tenths: 47 means 4.7 of 5.
_CATALOG_RATING_SCALE = 50


def _names(entries):
    if not isinstance(entries, list):
        return []
    names = []
    for entry in entries:
        name = entry.get("name") if isinstance(entry, dict) else entry
        if isinstance(name, dict):
            # GamesDB localizes names: {"*": "Shooter", "en-US": "Shooter"}
            name = name.get("en-US") or name.get("*")
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return names


def _item_list(payload, key):
    items = payload.get(key, [])
    if items is None:
        return []
    if not isinstance(items, list):
        raise ParseError(f"expected '{key}' to be a list")
    return items


def _identity(item):
    if not isinstance(item, dict):
        return None, None
    item_id = item.get("id")
    title = item.get("title")
    if item_id is None or not isinstance(title, str) or not title.strip():
        return None, None
    return str(item_id).strip(), title.strip()


class GogCatalogAdapter:
    """Search the GOG store catalog. Its ids are product ids."""

    name = "gog_catalog"

    def __init__(self, client=None, *, url=GOG_CATALOG_URL):
        self._client = client
        self.url = url

    @property
    def client(self):
        return self._client or get_gog_client()

    def search_by_title(self, title):
        params = {
            "limit": str(_SEARCH_LIMIT),
            "order": "desc:score",
            "productType": "in:game,pack",
            "page": "1",
            "query": clean_search_term(title),
        }
        try:
            payload = self.client.get_json(self.url, params=params)
        except NotFound:
            return []
        candidates = []
        for item in _item_list(payload, "products"):
            candidate = self.to_candidate(item)
            if candidate is not None:
                candidates.append(candidate)
            else:
                logger.debug("[GOG] catalog item skipped: %r", item)
        return candidates

    def to_candidate(self, item):
        item_id, title = _identity(item)
        if item_id is None:
            return None
        labels = _names(item.get("genres")) + _names(item.get("tags")) + _names(item.get("features"))
        genres, themes, features = map_labels(labels)
        screenshots = item.get("screenshots")
        if isinstance(screenshots, list):
            screenshots = [s.replace("{formatter}", "1600") for s in screenshots if isinstance(s, str)]
        cover = fix_url(item.get("coverVertical"))
        header = fix_url(item.get("galaxyBackgroundImage"))
        metadata = CanonicalMetadata(
            id=item_id,
            title=title,
            platforms=map_platforms(item.get("operatingSystems")),
            cover_urls=frozenset({cover}) if cover else None,
            header_urls=frozenset({header}) if header else None,
            screenshot_urls=url_set(screenshots if isinstance(screenshots, list) else None),
            release=parse_release_date(item.get("releaseDate")),
            user_rating=normalize_rating(item.get("reviewsRating"), scale=_CATALOG_RATING_SCALE),
            developed_by=name_set(_names(item.get("developers"))),
            published_by=name_set(_names(item.get("publishers"))),
            genres=genres,
            themes=themes,
            features=features,
        )
        return RawCandidate(source=self.name, source_id=item_id, metadata=metadata)


class GogGamesDbAdapter:
    """Search GOG's GamesDB, which also knows games not sold on the store."""

    name = "gog_gamesdb"

    def __init__(self, client=None, *, url=GOG_GAMESDB_URL):
        self._client = client
        self.url = url

    @property
    def client(self):
        return self._client or get_gog_client()

    def search_by_title(self, title):
        params = {
            "title": title,
            "sort": "relevance",
            "limit": str(_SEARCH_LIMIT),
            "show_only_unreleased": "0",
        }
        try:
            payload = self.client.get_json(self.url, params=params)
        except NotFound:
            return []
        items = [item for item in _item_list(payload, "items") if _identity(item)[0] is not None]
        title_counts = Counter(_identity(item)[1] for item in items)
        candidates = []
        for item in items:
            candidate = self.to_candidate(item)
            slug = item.get("slug")
            # Several GamesDB entries may share a title; the slug tells them apart.
            if slug and title_counts[candidate.title] > 1:
                metadata = replace(candidate.metadata, title=f"{candidate.title} ({slug})")
                candidate = replace(candidate, metadata=metadata)
            candidates.append(candidate)
        return candidates

    def to_candidate(self, item):
        item_id, title = _identity(item)
        labels = _names(item.get("genres")) + _names(item.get("themes")) + _names(item.get("game_modes"))
        genres, themes, features = map_labels(labels)

        cover = expand_url_format(
            _url_format(item.get("vertical_cover")) or _url_format(item.get("cover")),
            "_glx_vertical_cover",
        )
        header = expand_url_format(
            _url_format(item.get("background")) or _url_format(item.get("horizontal_artwork")),
            "_1600",
        )
        screenshots = item.get("screenshots")
        screenshot_urls = None
        if isinstance(screenshots, list):
            expanded = {expand_url_format(_url_format(s), "_1600") for s in screenshots}
            expanded.discard(None)
            screenshot_urls = frozenset(expanded) or None

        summary = item.get("summary")
        description = None
        if isinstance(summary, dict):
            description = summary.get("en-US") or summary.get("*")

        metadata = CanonicalMetadata(
            id=item_id,
            title=title,
            platforms=frozenset({Platform.WINDOWS}),
            description=description if isinstance(description, str) and description.strip() else None,
            cover_urls=frozenset({cover}) if cover else None,
            header_urls=frozenset({header}) if header else None,
            screenshot_urls=screenshot_urls,
            release=parse_iso_instant(item.get("first_release_date")),
            developed_by=name_set(_names(item.get("developers"))),
            published_by=name_set(_names(item.get("publishers"))),
            genres=genres,
            themes=themes,
            features=features,
        )
        return RawCandidate(source=self.name, source_id=item_id, metadata=metadata)


def _url_format(image):
    if isinstance(image, dict):
        return image.get("url_format")
    return None


class GogProductAdapter:
    """Fetch product details from the v2 games API."""

    name = "gog_product"

    def __init__(self, client=None, *, url=GOG_PRODUCT_URL):
        self._client = client
        self.url = url.rstrip("/")

    @property
    def client(self):
        return self._client or get_gog_client()

    def fetch_detail(self, id):
        product_id = str(id or "").strip()
        if not product_id:
            return None
        try:
            payload = self.client.get_json(f"{self.url}/{quote(product_id, safe='')}")
        except NotFound:
            logger.info("[GOG] product=%s not found", product_id)
            return None
        return self.to_detail(product_id, payload)

    def to_detail(self, product_id, payload):
        embedded = payload.get("_embedded")
        if embedded is not None and not isinstance(embedded, dict):
            raise ParseError("expected '_embedded' to be an object")
        embedded = embedded or {}
        product = embedded.get("product") if isinstance(embedded.get("product"), dict) else {}

        title = product.get("title") or payload.get("title")
        description = payload.get("description")
        if isinstance(description, dict):
            description = description.get("full") or description.get("lead")

        publisher = embedded.get("publisher")
        publishers = _names([publisher]) if isinstance(publisher, dict) else _names(payload.get("publishers"))
        developers = _names(embedded.get("developers")) or _names(payload.get("developers"))

        os_labels = []
        for entry in embedded.get("supportedOperatingSystems") or []:
            if isinstance(entry, dict) and isinstance(entry.get("operatingSystem"), dict):
                os_labels.append(entry["operatingSystem"].get("name"))
        genres, themes, features = map_labels(_names(embedded.get("tags")) + _names(embedded.get("features")))

        links = payload.get("_links") if isinstance(payload.get("_links"), dict) else {}
        background = links.get("galaxyBackgroundImage")
        header = fix_url(background.get("href")) if isinstance(background, dict) else None

        return RawDetail(
            id=product_id,
            title=title.strip() if isinstance(title, str) and title.strip() else None,
            description=html_to_text(description),
            platforms=map_platforms(os_labels),
            release=parse_iso_instant(product.get("globalReleaseDate")),
            developed_by=name_set(developers),
            published_by=name_set(publishers),
            header_urls=frozenset({header}) if header else None,
            genres=genres,
            themes=themes,
            features=features,
        )
