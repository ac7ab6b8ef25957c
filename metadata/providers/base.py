from dataclasses import dataclass
from typing import Any, Protocol

from metadata.types import RawCandidate, RawDetail


class CatalogSearchAdapter(Protocol):
    name: str

    def search_by_title(self, title: str) -> list[RawCandidate]:
        raise NotImplementedError


class CatalogDetailAdapter(Protocol):
    name: str

    def fetch_detail(self, id: str) -> RawDetail | None:
        raise NotImplementedError


@dataclass(frozen=True)
class CatalogSource:
    """A search adapter bound to its tie-break priority and resilience guard.

    ``shares_detail_ids`` marks sources whose ids are accepted by the detail
    adapter; only those are searched when resolving an id by title.
    """

    name: str
    adapter: CatalogSearchAdapter
    priority: int
    guard: Any
    shares_detail_ids: bool = False

    def search(self, title: str) -> list[RawCandidate]:
        return self.guard.execute(lambda: self.adapter.search_by_title(title))
