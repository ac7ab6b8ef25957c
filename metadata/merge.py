"""Fill-only merge of canonical game records."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any

from metadata.types import CanonicalMetadata

_LOG = logging.getLogger(__name__)

IMAGE_FIELDS = ("cover_urls", "header_urls")
_IDENTITY_FIELDS = ("id",)


def fill_missing(
    base: CanonicalMetadata,
    other: CanonicalMetadata | None,
    *,
    only: tuple[str, ...] | None = None,
) -> CanonicalMetadata:
    """Return ``base`` with its empty fields taken from ``other``.

    Populated fields of ``base`` are never touched and ``id`` is never
    replaced. ``only`` restricts the candidate fields. When nothing changes
    the original instance is returned.
    """
    if other is None or other is base:
        return base
    names = only if only is not None else tuple(f.name for f in fields(CanonicalMetadata))
    updates: dict[str, Any] = {}
    for name in names:
        if name in _IDENTITY_FIELDS:
            continue
        current = getattr(base, name)
        incoming = getattr(other, name)
        if _has_value(current) or not _has_value(incoming):
            continue
        updates[name] = incoming
    if not updates:
        return base
    _LOG.debug("metadata_fill id=%s fields=%s", base.id, ",".join(sorted(updates)))
    return replace(base, **updates)


def fill_images(base: CanonicalMetadata, other: CanonicalMetadata | None) -> CanonicalMetadata:
    return fill_missing(base, other, only=IMAGE_FIELDS)


def with_id(metadata: CanonicalMetadata, canonical_id: str) -> CanonicalMetadata:
    if metadata.id == canonical_id:
        return metadata
    return replace(metadata, id=canonical_id)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (set, frozenset, list, tuple, dict)):
        return len(value) > 0
    return True
