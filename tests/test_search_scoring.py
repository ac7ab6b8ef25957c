from __future__ import annotations

from engine.search_scoring import (
    best_title_match,
    dedup_key,
    deduplicate,
    fuzzy_score,
    is_exact_match,
    rank_candidates,
    score_candidates,
)


def test_fuzzy_score_tolerates_subtitles_and_rejects_unrelated_titles() -> None:
    assert fuzzy_score("Witcher 3", "The Witcher 3: Wild Hunt") >= 60
    assert fuzzy_score("Witcher 3", "Gwent") < 60
    assert fuzzy_score("Portal 2", "portal 2") == 100
    assert fuzzy_score("", "Portal 2") == 0


def test_score_candidates_drops_low_scores(make_candidate) -> None:
    candidates = [
        make_candidate("1", "The Witcher 3: Wild Hunt"),
        make_candidate("2", "Gwent"),
    ]

    scored = score_candidates(candidates, "Witcher 3", min_score=60)

    assert [c.source_id for c in scored] == ["1"]
    assert scored[0].score >= 60


def test_exact_match_outranks_higher_priority(make_candidate) -> None:
    candidates = [
        make_candidate("1", "Portal 2: Soundtrack", priority=1, score=95),
        make_candidate("2", "PORTAL 2", priority=0, score=95),
    ]

    ranked = rank_candidates(candidates, "Portal 2")

    assert is_exact_match("Portal 2", " portal 2 ")
    assert [c.source_id for c in ranked] == ["2", "1"]


def test_description_outranks_source_priority_by_default(make_candidate) -> None:
    candidates = [
        make_candidate("hi", "Fallout", priority=1, score=90),
        make_candidate("lo", "Fallout", priority=0, score=90, description="Wasteland"),
    ]

    assert [c.source_id for c in rank_candidates(candidates, "Fallout 1")] == ["lo", "hi"]
    assert [c.source_id for c in rank_candidates(candidates, "Fallout 1", prefer_source_priority=True)] == ["hi", "lo"]


def test_source_priority_breaks_remaining_ties(make_candidate) -> None:
    candidates = [
        make_candidate("lo", "Quake", priority=0, score=88),
        make_candidate("hi", "Quake", priority=1, score=88),
    ]

    assert [c.source_id for c in rank_candidates(candidates, "Quake II")] == ["hi", "lo"]


def test_full_ties_keep_input_order_across_runs(make_candidate) -> None:
    candidates = [make_candidate(str(i), "Doom", priority=1, score=80) for i in range(5)]

    first = [c.source_id for c in rank_candidates(candidates, "Doom II")]
    second = [c.source_id for c in rank_candidates(list(candidates), "Doom II")]

    assert first == ["0", "1", "2", "3", "4"]
    assert first == second


def test_dedup_key_strips_punctuation_and_keeps_year_bucket(make_candidate) -> None:
    assert dedup_key(make_candidate("1", "Fallout 2: A Post-Nuclear RPG", year=1998)) == "fallout2apostnuclearrpg_1998"
    assert dedup_key(make_candidate("2", "Fallout 2")) == "fallout2_None"
    assert dedup_key(make_candidate("3", "FALLOUT-2", year=1998)) == dedup_key(make_candidate("4", "Fallout 2", year=1998))


def test_dedup_fills_only_empty_images(make_candidate) -> None:
    primary = make_candidate("1", "Fallout 2", year=1998, cover="https://img/primary-cover.jpg", priority=1)
    duplicate = make_candidate(
        "2",
        "Fallout 2",
        year=1998,
        cover="https://img/dup-cover.jpg",
        header="https://img/dup-header.jpg",
        description="From the duplicate",
    )

    kept = deduplicate([primary, duplicate])

    assert len(kept) == 1
    record = kept[0].metadata
    assert record.id == "1"
    assert record.cover_urls == frozenset({"https://img/primary-cover.jpg"})
    assert record.header_urls == frozenset({"https://img/dup-header.jpg"})
    assert record.description is None
    assert kept[0].priority == 1


def test_dedup_separates_years_and_missing_year(make_candidate) -> None:
    candidates = [
        make_candidate("1", "Prey", year=2006),
        make_candidate("2", "Prey", year=2017),
        make_candidate("3", "Prey"),
    ]

    assert [c.source_id for c in deduplicate(candidates)] == ["1", "2", "3"]


def test_fallout_duplicates_with_default_ordering(make_candidate) -> None:
    catalog = make_candidate("cat", "Fallout 2", priority=1, year=1998, score=100)
    gamesdb = make_candidate(
        "gdb", "Fallout 2", priority=0, year=1998, score=100, cover="https://img/cover.jpg", description="Sequel"
    )

    kept = deduplicate(rank_candidates([catalog, gamesdb], "Fallout 2"))

    assert len(kept) == 1
    assert kept[0].source_id == "gdb"
    assert kept[0].metadata.description == "Sequel"


def test_fallout_duplicates_with_source_priority_first(make_candidate) -> None:
    catalog = make_candidate("cat", "Fallout 2", priority=1, year=1998, score=100)
    gamesdb = make_candidate(
        "gdb", "Fallout 2", priority=0, year=1998, score=100, cover="https://img/cover.jpg", description="Sequel"
    )

    kept = deduplicate(rank_candidates([gamesdb, catalog], "Fallout 2", prefer_source_priority=True))

    assert len(kept) == 1
    assert kept[0].source_id == "cat"
    assert kept[0].metadata.cover_urls == frozenset({"https://img/cover.jpg"})
    assert kept[0].metadata.description is None


def test_best_title_match_requires_threshold(make_candidate) -> None:
    candidates = [make_candidate("1", "Half-Life"), make_candidate("2", "Portal 2")]

    assert best_title_match("Portal 2", candidates, min_score=90).source_id == "2"
    assert best_title_match("Portal 2", candidates[:1], min_score=90) is None
    assert best_title_match("Portal 2", [], min_score=90) is None
