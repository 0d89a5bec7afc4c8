"""
Search request and result models.
"""

from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from apimap.schemas.route_index import RouteKind, RouteRecord


class KindFilter(str, Enum):
    """Which record kinds a search or listing considers."""

    ALL = "all"
    CONTROLLER = "controller"
    ENDPOINT = "endpoint"

    def accepts(self, kind: RouteKind) -> bool:
        if self is KindFilter.ALL:
            return True
        return self.value == kind.value


class SearchMode(str, Enum):
    """Fuzzy scoring or case-insensitive regular expression matching."""

    FUZZY = "fuzzy"
    LITERAL = "literal"


class MatchField(str, Enum):
    """Record field a search hit was scored on."""

    PATH = "path"
    CONTROLLER = "controller"
    ACTION = "action"
    METHOD = "method"


class SearchResult(BaseModel):
    """A ranked route with the score and field that produced it."""

    model_config = ConfigDict(frozen=True)

    route: RouteRecord
    score: int = Field(..., gt=0)
    matched_on: MatchField
    matched_value: str = ""
    rank: int = Field(..., ge=1, description="1-indexed position after ranking")


class SearchOutcome(BaseModel):
    """
    Result of one search.

    ``results`` holds what survived result shaping; ``total_matches`` counts
    every record that scored above zero, so callers can tell when more exist.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    mode: SearchMode = SearchMode.FUZZY
    kind: KindFilter = KindFilter.ALL
    method: Optional[str] = None
    results: Tuple[SearchResult, ...] = ()
    total_matches: int = Field(0, ge=0)

    @property
    def shown(self) -> int:
        """Number of results returned after shaping"""
        return len(self.results)

    @property
    def has_more(self) -> bool:
        """True if shaping dropped some matches"""
        return self.total_matches > self.shown

    @property
    def routes(self) -> Tuple[RouteRecord, ...]:
        return tuple(r.route for r in self.results)
