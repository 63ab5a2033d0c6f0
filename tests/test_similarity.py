"""
Unit tests for similarity primitives.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from credential_verify.match.similarity import (
    contains_match,
    degrees_equivalent,
    degrees_match,
    edit_similarity,
    email_similarity,
    institutions_match,
    names_match,
    token_overlap_ratio,
    tokens_overlap,
)


class TestEditSimilarity:
    """Test cases for Levenshtein similarity."""

    def test_identical_and_empty(self):
        assert edit_similarity("farhana rahman", "farhana rahman") == 1.0
        assert edit_similarity("", "") == 0.0
        assert edit_similarity(None, None) == 0.0
        assert edit_similarity("abc", "") == 0.0

    def test_partial(self):
        assert edit_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_symmetric_and_bounded(self):
        pairs = [("farhana", "farhan"), ("john smith", "farhana rahman"), ("a", "bcdef")]
        for text1, text2 in pairs:
            assert edit_similarity(text1, text2) == edit_similarity(text2, text1)
            assert 0.0 <= edit_similarity(text1, text2) <= 1.0


class TestTokenChecks:
    """Test cases for token overlap and containment."""

    def test_tokens_overlap_requires_two_significant_tokens(self):
        assert tokens_overlap("dhaka medical hospital", "dhaka medical", 3)
        assert not tokens_overlap("of dhaka", "of dhaka", 3)
        assert not tokens_overlap("", "", 3)

    def test_tokens_overlap_min_length(self):
        # "ali" has three characters: significant for names (> 2), not for institutions (> 3)
        assert tokens_overlap("ali hasan", "hasan ali", 2)
        assert not tokens_overlap("ali hasan", "hasan ali", 3)

    def test_contains_match(self):
        assert contains_match("dhaka", "of dhaka")
        assert contains_match("of dhaka", "dhaka")
        assert not contains_match("", "dhaka")
        assert not contains_match("", "")
        assert not contains_match(None, "dhaka")

    def test_token_overlap_ratio(self):
        assert token_overlap_ratio("child psychiatry", "child adolescent psychiatry") == pytest.approx(2 / 3)
        assert token_overlap_ratio("psychiatry", "psychiatry") == 1.0
        assert token_overlap_ratio("", "psychiatry") == 0.0
        assert token_overlap_ratio(None, None) == 0.0


class TestDegreeEquivalence:
    """Test cases for the degree abbreviation table."""

    def test_phd_psychology_matches_doctor_of_psychology(self):
        assert degrees_equivalent("phd psychology", "doctor of psychology")
        assert degrees_match("phd psychology", "doctor of psychology")

    def test_generic_groups(self):
        assert degrees_equivalent("msc clinical psychology", "master of science")
        assert not degrees_equivalent("bsc", "msc")

    def test_empty_degrees(self):
        assert not degrees_equivalent("", "")
        assert not degrees_match("", "")
        assert not degrees_match(None, "phd")

    def test_custom_table(self):
        table = [("mphil", "master of philosophy")]
        assert degrees_equivalent("mphil psychology", "master of philosophy", table)
        assert not degrees_equivalent("phd psychology", "doctor of psychology", table)


class TestEmailSimilarity:
    """Test cases for contact email similarity."""

    def test_exact_case_insensitive(self):
        assert email_similarity("Farhana@Example.com", "farhana@example.com") == 1.0

    def test_same_domain(self):
        assert email_similarity("farhana@example.com", "farhan@example.com") == pytest.approx(0.7 * 6 / 7)

    def test_different_domain(self):
        assert email_similarity("farhana@example.com", "farhana@other.org") == 0.0

    def test_missing(self):
        assert email_similarity("", "farhana@example.com") == 0.0
        assert email_similarity(None, None) == 0.0


class TestFieldMatches:
    """Test cases for composite name and institution checks."""

    def test_names_match(self):
        assert names_match("farhana rahman", "farhana rahman")
        assert names_match("farhana rahman", "rahman farhana")
        assert names_match("farhana", "farhana rahman")
        assert not names_match("john smith", "farhana rahman")
        assert not names_match("", "")

    def test_institutions_match(self):
        assert institutions_match("of dhaka", "dhaka")
        assert institutions_match("dhaka medical", "medical of dhaka")
        assert not institutions_match("jahangirnagar", "of dhaka")
        assert not institutions_match(None, "dhaka")


if __name__ == "__main__":
    pytest.main([__file__])
