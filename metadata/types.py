"""Structured metadata types for game resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from metadata.taxonomy import GameFeature, Genre, Theme


class Platform(str, Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    MAC = "mac"


@dataclass(frozen=True)
class CanonicalMetadata:
    """Source-agnostic game record.

    Instances are never mutated; merges build a new value with
    ``dataclasses.replace`` (see ``metadata.merge``).
    """

    id: str
    title: str
    platforms: frozenset[Platform] = frozenset()
    description: str | None = None
    cover_urls: frozenset[str] | None = None
    header_urls: frozenset[str] | None = None
    screenshot_urls: frozenset[str] | None = None
    release: datetime | None = None
    user_rating: float | None = None
    developed_by: frozenset[str] | None = None
    published_by: frozenset[str] | None = None
    genres: frozenset[Genre] = frozenset()
    themes: frozenset[Theme] = frozenset()
    features: frozenset[GameFeature] = frozenset()

    @property
    def release_year(self) -> int | None:
        return self.release.year if self.release is not None else None

    @property
    def has_description(self) -> bool:
        return bool(self.description and self.description.strip())


@dataclass(frozen=True)
class RawCandidate:
    """One search hit from a catalog source, tagged for ranking."""

    source: str
    source_id: str
    metadata: CanonicalMetadata
    priority: int = 0
    score: int = 0

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def has_description(self) -> bool:
        return self.metadata.has_description

    @property
    def release_year(self) -> int | None:
        return self.metadata.release_year


@dataclass(frozen=True)
class RawDetail:
    """Product detail payload reduced to the fields resolution consumes."""

    id: str
    title: str | None = None
    description: str | None = None
    platforms: frozenset[Platform] = frozenset()
    release: datetime | None = None
    developed_by: frozenset[str] | None = None
    published_by: frozenset[str] | None = None
    header_urls: frozenset[str] | None = None
    genres: frozenset[Genre] = frozenset()
    themes: frozenset[Theme] = frozenset()
    features: frozenset[GameFeature] = frozenset()

    def as_metadata(self, canonical_id: str | None = None) -> CanonicalMetadata:
        return CanonicalMetadata(
            id=canonical_id or self.id,
            title=self.title or "",
            platforms=self.platforms,
            description=self.description,
            header_urls=self.header_urls,
            release=self.release,
            developed_by=self.developed_by,
            published_by=self.published_by,
            genres=self.genres,
            themes=self.themes,
            features=self.features,
        )


__all__ = ["CanonicalMetadata", "Platform", "RawCandidate", "RawDetail"]
