from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .categories import RequestStatus
from .errors import CatalogError, ErrorKind

Movie = Dict[str, Any]


@dataclass(frozen=True)
class ListPage:
    """One page of a paginated catalog listing (category or search)."""
    page: int
    results: List[Movie]
    total_pages: int
    total_results: int

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ListPage":
        try:
            return cls(
                page=int(payload.get("page") or 1),
                results=list(payload.get("results") or []),
                total_pages=int(payload.get("total_pages") or 0),
                total_results=int(payload.get("total_results") or 0),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise CatalogError(ErrorKind.UNKNOWN, "Malformed response from catalog API.") from e

    @classmethod
    def empty(cls) -> "ListPage":
        return cls(page=1, results=[], total_pages=0, total_results=0)


@dataclass
class PaginatedListState:
    items: List[Movie] = field(default_factory=list)
    status: RequestStatus = RequestStatus.IDLE
    current_page: int = 0
    total_pages: int = 0

    @property
    def has_more(self) -> bool:
        return self.current_page < self.total_pages

    def reset(self) -> None:
        self.items = []
        self.status = RequestStatus.IDLE
        self.current_page = 0
        self.total_pages = 0
