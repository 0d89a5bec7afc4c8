"""
Route matching and search components.
"""

from apimap.search.matching import (
    edit_distance,
    word_similarity,
    match_word,
    match_path,
    match_controller,
)
from apimap.search.engine import (
    SearchEngine,
    list_routes,
    parse_kind_filter,
)

__all__ = [
    "edit_distance",
    "word_similarity",
    "match_word",
    "match_path",
    "match_controller",
    "SearchEngine",
    "list_routes",
    "parse_kind_filter",
]
