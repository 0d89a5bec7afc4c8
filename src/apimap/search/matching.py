"""
Fuzzy matching primitives for route search.

Pure scoring functions of ``(target, pattern)``. Every function returns a
non-negative integer where 0 means "no match"; comparisons are
case-insensitive.

Word scoring is used for controller, action and method names. Path scoring is
tiered and biased toward path endings: ``user`` at the end of ``/api/v1/user``
outranks ``users`` in the middle of ``/api/users/orders``.
"""

import re
from typing import List


# Word tiers
WORD_EXACT_SCORE = 1000
WORD_FUZZY_THRESHOLD = 0.5
WORD_FUZZY_SCALE = 800
WORD_SUBSTRING_SCORE = 300
WORD_SUBSEQUENCE_SCORE = 100

# Path tiers
PATH_EXACT_SCORE = 10000
PATH_SUFFIX_BASE = 5000
PATH_SUFFIX_LENGTH_BONUS = 10
PATH_WINDOW_THRESHOLD = 0.65
PATH_WINDOW_SEGMENT_SCALE = 100
PATH_WINDOW_POSITION_BONUS = 10
PATH_WINDOW_END_BONUS = 200
PATH_FALLBACK_THRESHOLD = 0.6
PATH_FALLBACK_SCALE = 50
PATH_FALLBACK_LAST_BONUS = 150
PATH_FALLBACK_PENULTIMATE_BONUS = 75
PATH_FALLBACK_POSITION_BONUS = 5
PATH_SUBSEQUENCE_PER_CHAR = 5

# Tier ceilings keep every tier strictly below the one above it
PATH_SUFFIX_CEILING = PATH_EXACT_SCORE - 1
PATH_LOWER_TIER_CEILING = PATH_SUFFIX_BASE - 1

CONTROLLER_SUFFIX = "controller"

_SEGMENT_SPLIT = re.compile(r"[/\\]")


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two strings."""
    if len(a) < len(b):
        a, b = b, a

    if not b:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, c1 in enumerate(a):
        current_row = [i + 1]
        for j, c2 in enumerate(b):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def word_similarity(a: str, b: str) -> float:
    """
    Normalized edit-distance similarity in ``[0, 1]``.

    ``1 - distance / max(len(a), len(b))``, case-insensitive and symmetric.
    Two empty strings are identical (1.0).
    """
    a, b = a.lower(), b.lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - edit_distance(a, b) / longest


def is_subsequence(target: str, pattern: str) -> bool:
    """True if every pattern character appears in target, in order."""
    remaining = iter(target)
    return all(ch in remaining for ch in pattern)


def split_segments(path: str) -> List[str]:
    """Split a path on ``/`` and ``\\``, dropping empty segments."""
    return [segment for segment in _SEGMENT_SPLIT.split(path) if segment]


def match_word(target: str, pattern: str) -> int:
    """
    Score a word-like identifier against a pattern.

    Tiers: exact (1000), edit-distance similarity above 0.5 (scaled, 400-799),
    substring (300), subsequence (100).

    Args:
        target: Identifier being searched (controller, action, method)
        pattern: User query

    Returns:
        Match score, 0 for no match
    """
    if not target or not pattern:
        return 0

    target, pattern = target.lower(), pattern.lower()

    if target == pattern:
        return WORD_EXACT_SCORE

    similarity = word_similarity(target, pattern)
    if similarity > WORD_FUZZY_THRESHOLD:
        return int(similarity * WORD_FUZZY_SCALE)

    if pattern in target:
        return WORD_SUBSTRING_SCORE

    if is_subsequence(target, pattern):
        return WORD_SUBSEQUENCE_SCORE

    return 0


def _window_score(target_segments: List[str], pattern_segments: List[str]) -> int:
    """Best valid segment-window alignment, 0 if no window is valid."""
    width = len(pattern_segments)
    if width == 0 or len(target_segments) < width:
        return 0

    last_index = len(target_segments) - 1
    best = 0

    for offset in range(len(target_segments) - width + 1):
        score = 0
        for i, pattern_segment in enumerate(pattern_segments):
            position = offset + i
            similarity = word_similarity(target_segments[position], pattern_segment)
            if similarity < PATH_WINDOW_THRESHOLD:
                score = 0
                break
            score += int(similarity * PATH_WINDOW_SEGMENT_SCALE)
            score += PATH_WINDOW_POSITION_BONUS * (position + 1)
        else:
            if offset + width - 1 == last_index:
                score += PATH_WINDOW_END_BONUS

        best = max(best, score)

    return best


def _fallback_score(target_segments: List[str], pattern_segments: List[str]) -> int:
    """Best single-segment match for the pattern's last segment."""
    if not pattern_segments or not target_segments:
        return 0

    needle = pattern_segments[-1]
    last_index = len(target_segments) - 1
    best = 0

    for position, segment in enumerate(target_segments):
        similarity = word_similarity(segment, needle)
        if similarity <= PATH_FALLBACK_THRESHOLD:
            continue

        score = int(similarity * PATH_FALLBACK_SCALE)
        if position == last_index:
            score += PATH_FALLBACK_LAST_BONUS
        elif position == last_index - 1:
            score += PATH_FALLBACK_PENULTIMATE_BONUS
        else:
            score += PATH_FALLBACK_POSITION_BONUS * position

        best = max(best, score)

    return best


def match_path(target: str, pattern: str) -> int:
    """
    Score a route path against a pattern.

    Tiers, first qualifying wins:

    1. exact match (10000)
    2. pattern is a suffix of target (5000 + 10 per pattern char)
    3. segment-window alignment, every aligned pair similarity >= 0.65,
       later segments and windows ending on the last segment score higher
    4. the pattern's last segment against single target segments (> 0.6),
       favouring the last and second-to-last target segments
    5. pattern is a character subsequence of target (5 per pattern char)

    Args:
        target: Route path (e.g., "/api/users/{id}")
        pattern: User query (e.g., "users/id")

    Returns:
        Match score, 0 for no match
    """
    if not target or not pattern:
        return 0

    target, pattern = target.lower(), pattern.lower()

    if target == pattern:
        return PATH_EXACT_SCORE

    if target.endswith(pattern):
        score = PATH_SUFFIX_BASE + PATH_SUFFIX_LENGTH_BONUS * len(pattern)
        return min(score, PATH_SUFFIX_CEILING)

    target_segments = split_segments(target)
    pattern_segments = split_segments(pattern)

    score = _window_score(target_segments, pattern_segments)
    if score:
        return min(score, PATH_LOWER_TIER_CEILING)

    score = _fallback_score(target_segments, pattern_segments)
    if score:
        return min(score, PATH_LOWER_TIER_CEILING)

    if is_subsequence(target, pattern):
        return min(PATH_SUBSEQUENCE_PER_CHAR * len(pattern), PATH_LOWER_TIER_CEILING)

    return 0


def strip_controller_suffix(name: str) -> str:
    """Drop a trailing "Controller" (any case) from a class name."""
    if len(name) > len(CONTROLLER_SUFFIX) and name.lower().endswith(CONTROLLER_SUFFIX):
        return name[:-len(CONTROLLER_SUFFIX)]
    return name


def match_controller(name: str, pattern: str) -> int:
    """
    Score a controller name, also trying it without the "Controller" suffix.

    Args:
        name: Controller class name (e.g., "SettingsController")
        pattern: User query

    Returns:
        Best of the full-name and short-name word scores
    """
    return max(
        match_word(name, pattern),
        match_word(strip_controller_suffix(name), pattern),
    )
