import logging
import re
from dataclasses import replace

from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process

from metadata.merge import fill_images

logger = logging.getLogger(__name__)

_DEDUP_JUNK_RE = re.compile(r"[^a-z0-9]")


def fuzzy_score(query, title):
    """Order- and substring-tolerant similarity on a 0-100 scale."""
    if not query or not title:
        return 0
    return int(round(fuzz.WRatio(str(query), str(title), processor=default_process)))


def is_exact_match(query, title):
    return str(title or "").strip().casefold() == str(query or "").strip().casefold()


def score_candidates(candidates, query, *, min_score=60):
    """Attach fuzzy scores and drop candidates scoring below ``min_score``."""
    scored = []
    for candidate in candidates:
        score = fuzzy_score(query, candidate.title)
        if score < min_score:
            logger.debug("[RANK] dropped title=%r score=%s", candidate.title, score)
            continue
        scored.append(replace(candidate, score=score))
    return scored


def rank_key(candidate, query, *, prefer_source_priority=False):
    exact = is_exact_match(query, candidate.title)
    if prefer_source_priority:
        return (exact, candidate.score, candidate.priority, candidate.has_description)
    return (exact, candidate.score, candidate.has_description, candidate.priority)


def rank_candidates(candidates, query, *, prefer_source_priority=False):
    """Sort best first: exact title, fuzzy score, has description, source priority.

    The sort is stable, so full ties keep their input order.
    """
    return sorted(
        candidates,
        key=lambda c: rank_key(c, query, prefer_source_priority=prefer_source_priority),
        reverse=True,
    )


def dedup_key(candidate):
    title = _DEDUP_JUNK_RE.sub("", str(candidate.title or "").lower())
    return f"{title}_{candidate.release_year}"


def deduplicate(ranked):
    """Keep the first candidate per dedup key.

    Later duplicates may only fill the kept candidate's empty cover and
    header images.
    """
    kept = {}
    for candidate in ranked:
        key = dedup_key(candidate)
        existing = kept.get(key)
        if existing is None:
            kept[key] = candidate
            continue
        merged = fill_images(existing.metadata, candidate.metadata)
        if merged is not existing.metadata:
            logger.debug("[RANK] dedup key=%s filled images from source=%s", key, candidate.source)
            kept[key] = replace(existing, metadata=merged)
    return list(kept.values())


def best_title_match(title, candidates, *, min_score=90):
    """Return the candidate whose title best matches ``title`` or None below ``min_score``."""
    if not title or not candidates:
        return None
    match = process.extractOne(
        str(title),
        [c.title for c in candidates],
        scorer=fuzz.WRatio,
        processor=default_process,
        score_cutoff=min_score,
    )
    if match is None:
        return None
    _choice, score, index = match
    logger.debug("[RANK] best title match=%r score=%.1f", candidates[index].title, score)
    return candidates[index]
