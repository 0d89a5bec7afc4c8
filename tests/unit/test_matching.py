"""
Unit tests for fuzzy matching primitives.
"""

import pytest

from apimap.search.matching import (
    PATH_EXACT_SCORE,
    WORD_EXACT_SCORE,
    edit_distance,
    is_subsequence,
    match_controller,
    match_path,
    match_word,
    split_segments,
    strip_controller_suffix,
    word_similarity,
)


class TestEditDistance:
    """Tests for Levenshtein distance."""

    @pytest.mark.parametrize("a,b,expected", [
        ("", "", 0),
        ("abc", "", 3),
        ("kitten", "sitting", 3),
        ("user", "users", 1),
        ("flaw", "lawn", 2),
    ])
    def test_known_distances(self, a, b, expected):
        """Test distances for well-known pairs."""
        assert edit_distance(a, b) == expected
        assert edit_distance(b, a) == expected


class TestWordSimilarity:
    """Tests for normalized word similarity."""

    @pytest.mark.parametrize("a,b", [
        ("settings", "setting"),
        ("GetById", "getbyid"),
        ("orders", "users"),
        ("", "abc"),
        ("x", "yz"),
    ])
    def test_symmetric(self, a, b):
        """Test similarity(a, b) == similarity(b, a)."""
        assert word_similarity(a, b) == word_similarity(b, a)

    def test_identical_and_case_insensitive(self):
        """Test identical words score 1.0 regardless of case."""
        assert word_similarity("Users", "uSERS") == 1.0

    def test_empty_strings(self):
        """Test two empty strings are identical."""
        assert word_similarity("", "") == 1.0

    def test_range(self):
        """Test values stay within [0, 1]."""
        assert word_similarity("abc", "xyz") == 0.0
        assert word_similarity("user", "users") == pytest.approx(0.8)


class TestHelpers:
    """Tests for segment splitting and subsequence checks."""

    def test_split_segments_drops_empty(self):
        """Test leading, trailing and doubled separators are ignored."""
        assert split_segments("/api//users/{id}/") == ["api", "users", "{id}"]

    def test_split_segments_backslash(self):
        """Test backslash works as a separator."""
        assert split_segments("api\\users") == ["api", "users"]

    def test_is_subsequence(self):
        """Test in-order character matching."""
        assert is_subsequence("/api/settings", "aset")
        assert not is_subsequence("/api/settings", "tesa")
        assert is_subsequence("anything", "")

    def test_strip_controller_suffix(self):
        """Test the Controller suffix is removed but bare names are kept."""
        assert strip_controller_suffix("SettingsController") == "Settings"
        assert strip_controller_suffix("Settings") == "Settings"
        assert strip_controller_suffix("Controller") == "Controller"


class TestMatchWord:
    """Tests for word scoring tiers."""

    def test_exact(self):
        """Test exact match, case-insensitive."""
        assert match_word("GetById", "getbyid") == WORD_EXACT_SCORE

    def test_similarity_tier(self):
        """Test close words score by similarity."""
        assert match_word("Update", "updat") == int((1 - 1 / 6) * 800)

    def test_substring_tier(self):
        """Test a short substring falls to the substring tier."""
        assert match_word("GetAllSettingsAsync", "sett") == 300

    def test_subsequence_tier(self):
        """Test scattered characters fall to the subsequence tier."""
        assert match_word("GetAllSettingsAsync", "gasa") == 100

    def test_no_match(self):
        """Test unrelated words score zero."""
        assert match_word("Delete", "xyz") == 0

    def test_empty_inputs(self):
        """Test empty target or pattern scores zero."""
        assert match_word("", "abc") == 0
        assert match_word("abc", "") == 0

    def test_exact_beats_non_exact(self):
        """Test an exact target always outranks near misses."""
        assert match_word("users", "users") > match_word("user", "users")
        assert match_word("users", "users") > match_word("usersx", "users")


class TestMatchPath:
    """Tests for path scoring tiers."""

    def test_exact(self):
        """Test exact path match."""
        assert match_path("/api/Users", "/api/users") == PATH_EXACT_SCORE

    def test_suffix(self):
        """Test suffix tier rewards pattern length."""
        assert match_path("/api/v1/user", "user") == 5000 + 40

    def test_settings_segment_beats_unrelated_path(self):
        """Test a matching middle segment outranks an unrelated path."""
        settings = match_path("/api/settings/{id}", "settings")
        reports = match_path("/api/reports", "settings")

        assert settings == 120
        assert reports == 0
        assert settings > reports

    def test_suffix_beats_mid_path_plural(self):
        """Test 'user' prefers a path ending in user over a mid-path 'users'."""
        suffix = match_path("/api/v1/user", "user")
        mid_path = match_path("/api/users/orders", "user")

        assert mid_path == 100
        assert suffix > mid_path

    def test_window_end_bonus(self):
        """Test a window ending on the last segment gets the end bonus."""
        ending = match_path("/api/users/orders", "users/ordrs")
        # users (100 + 20) + ordrs vs orders (int(5/6*100) + 30) + 200
        assert ending == 120 + 83 + 30 + 200

    def test_fallback_last_segment(self):
        """Test the pattern's last segment alone can still match."""
        score = match_path("/api/orders", "zzz/ordr")
        # similarity 4/6 on the last segment
        assert score == int((4 / 6) * 50) + 150

    def test_subsequence(self):
        """Test subsequence tier."""
        assert match_path("/api/settings", "apst") == 20

    def test_no_match(self):
        """Test unrelated patterns score zero."""
        assert match_path("/api/settings", "zzz") == 0

    def test_empty_inputs(self):
        """Test empty target or pattern scores zero."""
        assert match_path("", "users") == 0
        assert match_path("/api/users", "") == 0

    @pytest.mark.parametrize("other", [
        "/api/users/",
        "/v2/api/users",
        "/api/user",
        "/api/users/{id}",
    ])
    def test_exact_beats_non_exact(self, other):
        """Test exact paths outrank every other tier."""
        assert match_path("/api/users", "/api/users") > match_path(other, "/api/users")

    def test_pure(self):
        """Test repeated calls give identical scores."""
        first = [match_path("/api/settings/{id}", p) for p in ("settings", "id", "x")]
        match_path("/other", "other")
        second = [match_path("/api/settings/{id}", p) for p in ("settings", "id", "x")]
        assert first == second


class TestMatchController:
    """Tests for controller-name scoring."""

    def test_short_name_exact(self):
        """Test the name without suffix matches exactly."""
        assert match_controller("SettingsController", "settings") == WORD_EXACT_SCORE

    def test_full_name_exact(self):
        """Test the full class name matches exactly."""
        assert match_controller("SettingsController", "settingscontroller") == WORD_EXACT_SCORE

    def test_takes_best_variant(self):
        """Test the score is the max of both variants."""
        name = "UsersController"
        assert match_controller(name, "user") == max(
            match_word(name, "user"), match_word("Users", "user")
        )
