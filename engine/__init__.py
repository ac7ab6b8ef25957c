from .search_scoring import (
    best_title_match,
    deduplicate,
    dedup_key,
    fuzzy_score,
    rank_candidates,
    score_candidates,
)

__all__ = [
    "best_title_match",
    "dedup_key",
    "deduplicate",
    "fuzzy_score",
    "rank_candidates",
    "score_candidates",
]
