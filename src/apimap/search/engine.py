"""
Route search engine.

Filters an in-memory route collection, scores each record with the matching
primitives (fuzzy) or a case-insensitive regular expression (literal), ranks
the hits and shapes the result list.
"""

import re
from typing import Iterable, List, NamedTuple, Optional, Pattern, Sequence, Tuple
from loguru import logger

from apimap.config import Settings, settings as default_settings
from apimap.exceptions import InvalidPatternError
from apimap.schemas.route_index import RouteIndex, RouteRecord
from apimap.schemas.search import (
    KindFilter,
    MatchField,
    SearchMode,
    SearchOutcome,
    SearchResult,
)
from apimap.search.matching import match_controller, match_path, match_word


# Score given to every record when the query is empty
BASE_SCORE = 100

# Literal mode: first matching field wins, in this order
LITERAL_FIELD_SCORES = (
    (MatchField.PATH, 1000),
    (MatchField.METHOD, 900),
    (MatchField.CONTROLLER, 800),
    (MatchField.ACTION, 700),
)


class _Hit(NamedTuple):
    route: RouteRecord
    score: int
    matched_on: MatchField
    matched_value: str


def parse_kind_filter(value: Optional[str]) -> KindFilter:
    """
    Parse a user-supplied kind filter.

    Args:
        value: "c"/"controller", "e"/"endpoint", or empty for all

    Returns:
        Matching KindFilter

    Raises:
        ValueError: Unrecognized value
    """
    if not value:
        return KindFilter.ALL

    normalized = value.strip().lower()
    if normalized in ("c", "controller", "controllers"):
        return KindFilter.CONTROLLER
    if normalized in ("e", "endpoint", "endpoints"):
        return KindFilter.ENDPOINT
    if normalized in ("a", "all"):
        return KindFilter.ALL

    raise ValueError(
        f"Invalid type filter: {value}. Use 'c'/'controller' or 'e'/'endpoint'"
    )


def filter_routes(
    routes: Iterable[RouteRecord],
    kind: KindFilter = KindFilter.ALL,
    method: Optional[str] = None
) -> List[RouteRecord]:
    """
    Filter by kind, then by HTTP method.

    Method comparison is case-insensitive; records without a method are
    dropped whenever a method filter is given.
    """
    wanted_method = method.strip().upper() if method else None

    filtered = []
    for route in routes:
        if not kind.accepts(route.kind):
            continue
        if wanted_method and route.method_name != wanted_method:
            continue
        filtered.append(route)

    return filtered


def compile_literal(query: str) -> Pattern[str]:
    """
    Compile a literal-mode query as a case-insensitive regular expression.

    Raises:
        InvalidPatternError: The query is not a valid regular expression
    """
    try:
        return re.compile(query, re.IGNORECASE)
    except re.error as e:
        raise InvalidPatternError(query, str(e)) from e


def _score_fuzzy(route: RouteRecord, query: str, kind: KindFilter) -> Optional[_Hit]:
    controller = route.symbols.controller
    candidates = [
        (match_path(route.path, query), MatchField.PATH, route.path),
        (match_controller(controller, query), MatchField.CONTROLLER, controller),
    ]

    if kind is KindFilter.ENDPOINT:
        action = route.symbols.action
        method = route.method_name
        candidates.append(
            (match_word(action, query) if action else 0, MatchField.ACTION, action or "")
        )
        candidates.append(
            (match_word(method, query) if method else 0, MatchField.METHOD, method or "")
        )

    best = max(score for score, _, _ in candidates)
    if best <= 0:
        return None

    # Priority order on ties: path, controller, action, method
    for score, field, value in candidates:
        if score == best:
            return _Hit(route, score, field, value)
    return None


def _score_literal(route: RouteRecord, regex: Pattern[str]) -> Optional[_Hit]:
    values = {
        MatchField.PATH: route.path,
        MatchField.METHOD: route.method_name,
        MatchField.CONTROLLER: route.symbols.controller,
        MatchField.ACTION: route.symbols.action,
    }

    for field, score in LITERAL_FIELD_SCORES:
        value = values[field]
        if value is not None and regex.search(value):
            return _Hit(route, score, field, value)

    return None


def rank_hits(hits: Iterable[_Hit]) -> List[_Hit]:
    """Stable sort by score descending, ties broken by path ascending."""
    return sorted(hits, key=lambda hit: (-hit.score, hit.route.path))


def shape_hits(
    ranked: Sequence[_Hit],
    limit: Optional[int],
    cutoff_ratio: float,
    max_results: int
) -> List[_Hit]:
    """
    Trim a ranked list.

    An explicit limit keeps the top N. Otherwise only hits scoring above
    ``cutoff_ratio`` of the top score are kept, at most ``max_results``.
    """
    if limit is not None:
        return list(ranked[:limit])

    if not ranked:
        return []

    top_score = max(hit.score for hit in ranked)
    threshold = top_score * cutoff_ratio
    return [hit for hit in ranked if hit.score > threshold][:max_results]


class SearchEngine:
    """
    Search over an immutable snapshot of route records.

    Features:
    - Kind and HTTP method filtering
    - Fuzzy scoring over path, controller, action and method
    - Literal (regular expression) matching with per-field tiers
    - Adaptive result cutoff when no explicit limit is given
    """

    def __init__(self, routes: Iterable[RouteRecord], settings: Optional[Settings] = None):
        """
        Initialize search engine.

        Args:
            routes: Route records to search
            settings: Settings override (defaults to global settings)
        """
        self.routes: Tuple[RouteRecord, ...] = tuple(routes)
        self.settings = settings or default_settings

        logger.debug(f"Created search engine over {len(self.routes)} routes")

    @classmethod
    def from_index(cls, index: RouteIndex, settings: Optional[Settings] = None) -> "SearchEngine":
        """Create an engine over every route in an index"""
        return cls(index.routes, settings)

    def search(
        self,
        query: Optional[str] = None,
        kind: KindFilter = KindFilter.ALL,
        method: Optional[str] = None,
        mode: SearchMode = SearchMode.FUZZY,
        limit: Optional[int] = None
    ) -> SearchOutcome:
        """
        Search routes.

        Args:
            query: Search pattern; empty matches everything with a base score
            kind: Record kind filter
            method: HTTP method filter (forces kind to ENDPOINT)
            mode: Fuzzy scoring or literal regular expression
            limit: Maximum results; None applies the adaptive cutoff

        Returns:
            SearchOutcome with shown results and total match count

        Raises:
            InvalidPatternError: Literal mode with a malformed pattern
            ValueError: limit below 1
        """
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be greater than 0, got {limit}")

        query = query or ""
        if not query.strip():
            query = ""

        regex = None
        if query and mode is SearchMode.LITERAL:
            regex = compile_literal(query)

        if method:
            kind = KindFilter.ENDPOINT

        hits = []
        for route in filter_routes(self.routes, kind, method):
            if not query:
                hit = _Hit(route, BASE_SCORE, MatchField.PATH, route.path)
            elif regex is not None:
                hit = _score_literal(route, regex)
            else:
                hit = _score_fuzzy(route, query, kind)

            if hit is not None and hit.score > 0:
                hits.append(hit)

        ranked = rank_hits(hits)
        shaped = shape_hits(
            ranked,
            limit,
            self.settings.adaptive_cutoff_ratio,
            self.settings.adaptive_max_results
        )

        results = tuple(
            SearchResult(
                route=hit.route,
                score=hit.score,
                matched_on=hit.matched_on,
                matched_value=hit.matched_value,
                rank=position
            )
            for position, hit in enumerate(shaped, start=1)
        )

        logger.debug(
            f"Search '{query}' ({mode.value}, {kind.value}): "
            f"{len(results)} shown of {len(ranked)} matches"
        )

        return SearchOutcome(
            query=query,
            mode=mode,
            kind=kind,
            method=method.upper() if method else None,
            results=results,
            total_matches=len(ranked)
        )

    def list_routes(
        self,
        method: Optional[str] = None,
        path: Optional[str] = None,
        kind: KindFilter = KindFilter.ALL
    ) -> List[RouteRecord]:
        """Unranked listing; see list_routes"""
        return list_routes(self.routes, method=method, path=path, kind=kind)


def list_routes(
    routes: Iterable[RouteRecord],
    method: Optional[str] = None,
    path: Optional[str] = None,
    kind: KindFilter = KindFilter.ALL
) -> List[RouteRecord]:
    """
    List routes matching simple filters, without ranking.

    Args:
        routes: Route records
        method: HTTP method, case-insensitive equality
        path: Case-insensitive substring of the route path
        kind: Record kind filter

    Returns:
        Matching records sorted by path, then method (records without a
        method first)
    """
    selected = filter_routes(routes, kind, method)

    if path:
        needle = path.lower()
        selected = [r for r in selected if needle in r.path.lower()]

    return sorted(selected, key=lambda r: (r.path, r.method_name or ""))
