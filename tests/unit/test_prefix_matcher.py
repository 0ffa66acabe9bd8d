"""
Unit tests for the prefix matcher.
"""

import pytest

from src.tokenization.errors import InvalidOffset
from src.tokenization.prefix_matcher import PrefixMatcher


@pytest.fixture
def matcher():
    return PrefixMatcher(["f", "foo", "baz"])


class TestPrefixMatcher:
    """Test suite for longest-prefix lookups."""

    @pytest.mark.parametrize("text, offset, expected", [
        ("", 0, ""),
        ("", 1, ""),
        ("none", 0, ""),
        ("false", 0, "f"),
        ("false", 1, ""),
        ("bar", 0, ""),
        ("barbaz", 3, "baz"),
        ("fofoo", 0, "f"),
        ("fofoo", 1, ""),
        ("fofoo", 2, "foo"),
        ("bazbaz", 0, "baz"),
        ("baz_baz", 4, "baz"),
        ("baz_baz_", 4, "baz"),
    ])
    def test_find_longest_prefix(self, matcher, text, offset, expected):
        assert matcher.find_longest_prefix(text, offset) == expected

    def test_offset_past_end(self, matcher):
        """Offsets at or past the end yield the empty string."""
        assert matcher.find_longest_prefix("foo", 3) == ""
        assert matcher.find_longest_prefix("foo", 10) == ""

    def test_negative_offset(self, matcher):
        with pytest.raises(InvalidOffset):
            matcher.find_longest_prefix("foo", -1)

    def test_longest_wins_over_shorter(self):
        matcher = PrefixMatcher(["a", "ab", "abc"])
        assert matcher.find_longest_prefix("abcd") == "abc"
        assert matcher.find_longest_prefix("abd") == "ab"

    def test_partial_path_falls_back(self):
        """A walk that dies past the last terminal returns that terminal."""
        matcher = PrefixMatcher(["ab", "abcde"])
        assert matcher.find_longest_prefix("abcdx") == "ab"

    def test_duplicates_are_noops(self):
        matcher = PrefixMatcher(["foo", "foo", "bar"])
        assert len(matcher) == 2
        assert "foo" in matcher
        assert "fo" not in matcher

    def test_astral_code_points(self):
        """Characters outside the BMP are matched atomically."""
        matcher = PrefixMatcher(["\U0001F4A9", "\U0001F4A9x"])

        assert matcher.find_longest_prefix("\U0001F4A9x!") == "\U0001F4A9x"
        assert matcher.find_longest_prefix("a\U0001F4A9", 1) == "\U0001F4A9"
        # a lone surrogate is its own code point and does not match
        assert matcher.find_longest_prefix("\ud83d") == ""

    def test_empty_matcher(self):
        matcher = PrefixMatcher([])
        assert len(matcher) == 0
        assert matcher.find_longest_prefix("anything") == ""
