import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from metadata.types import CanonicalMetadata, Platform, RawCandidate  # noqa: E402


class PassthroughGuard:
    """Stands in for a ResilienceGuard; counts calls and runs them directly."""

    def __init__(self):
        self.calls = 0

    def execute(self, operation):
        self.calls += 1
        return operation()


def build_candidate(
    source_id,
    title,
    *,
    source="fake",
    priority=0,
    score=0,
    year=None,
    description=None,
    cover=None,
    header=None,
    platforms=(Platform.WINDOWS,),
):
    metadata = CanonicalMetadata(
        id=source_id,
        title=title,
        platforms=frozenset(platforms),
        description=description,
        cover_urls=frozenset({cover}) if cover else None,
        header_urls=frozenset({header}) if header else None,
        release=datetime(year, 1, 1, tzinfo=timezone.utc) if year else None,
    )
    return RawCandidate(source=source, source_id=source_id, metadata=metadata, priority=priority, score=score)


@pytest.fixture
def make_candidate():
    return build_candidate


@pytest.fixture
def passthrough_guard():
    return PassthroughGuard()
