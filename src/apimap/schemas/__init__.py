"""Schemas package exports"""

from apimap.schemas.route_index import (
    SCHEMA_VERSION,
    RouteKind,
    HttpMethod,
    ProjectInfo,
    SourceLocation,
    RouteSymbols,
    RouteRecord,
    RouteIndex,
)
from apimap.schemas.search import (
    KindFilter,
    SearchMode,
    MatchField,
    SearchResult,
    SearchOutcome,
)

__all__ = [
    "SCHEMA_VERSION",
    "RouteKind",
    "HttpMethod",
    "ProjectInfo",
    "SourceLocation",
    "RouteSymbols",
    "RouteRecord",
    "RouteIndex",
    "KindFilter",
    "SearchMode",
    "MatchField",
    "SearchResult",
    "SearchOutcome",
]
