"""
Tests for hard filters and pronounceability
===========================================
"""

import pytest

from brandfinder.models import SearchControls
from brandfinder.utils import WordValidator, top_rejected_reasons
from brandfinder.utils.word_validator import count_syllables, pronounceability_score


@pytest.fixture
def validator(lexicon):
    return WordValidator(min_length=4, max_length=10, lexicon=lexicon)


class TestPronounceability:
    """Tests for the 0-100 pronounceability score."""

    def test_smooth_word(self):
        assert pronounceability_score("terra") == 86

    def test_consonant_soup(self):
        assert pronounceability_score("xqzrtk") == 10

    @pytest.mark.parametrize('word,expected', [
        ("tempola", 58 + 18 + 10),
        ("tempstola", 58 + 18 - 18 + 10),
        ("terrra", 58 + 18 - 12 + 10),
        ("lazzo", 58 + 18 - 8 + 10),
        ("verna", 58 + 18 - 6 + 10),
        ("mint", 58 + 9 + 3),
        ("abacadabra", 58 + 18 - 6),
        ("strength", 58 - 16 - 18 + 3),
    ])
    def test_score_components(self, word, expected):
        """Baseline 58 plus vowel band, penalties and syllable bonus."""
        assert pronounceability_score(word) == expected

    def test_empty(self):
        assert pronounceability_score("") == 0

    def test_syllables(self):
        assert count_syllables("terraleaf") == 3
        assert count_syllables("mint") == 1


class TestHardFilters:
    """Tests for WordValidator.evaluate reasons."""

    def test_clean_name_accepted(self, validator):
        decision = validator.evaluate("terraleaf")
        assert decision.accepted
        assert decision.reasons == ()

    def test_too_short(self, validator):
        assert 'too_short' in validator.evaluate("eco").reasons

    def test_too_long(self, validator):
        assert 'too_long' in validator.evaluate("terraleafgrove").reasons

    def test_max_length_override(self, validator):
        assert 'too_long' not in validator.evaluate("terraleafgrove", max_length=14).reasons

    def test_hyphen_and_numbers(self, validator):
        assert 'contains_hyphen' in validator.evaluate("eco-leaf").reasons
        assert 'contains_number' in validator.evaluate("leaf42").reasons

    def test_hyphen_allowed_by_control(self, validator):
        controls = SearchControls(allow_hyphen=True)
        assert 'contains_hyphen' not in validator.evaluate("eco-leaf", controls).reasons

    def test_trademark_fragment(self, validator):
        assert 'trademark_like_fragment' in validator.evaluate("metaleaf").reasons

    def test_awkward_cluster_and_repeats(self, validator):
        reasons = validator.evaluate("leafzzz").reasons
        assert 'awkward_cluster' in reasons
        assert 'repeated_letters' in reasons

    def test_unpronounceable(self, validator):
        assert 'low_pronounceability' in validator.evaluate("strngth").reasons

    def test_blocklist(self, validator):
        controls = SearchControls(blocklist=["leaf"])
        assert 'blocked_term:leaf' in validator.evaluate("terraleaf", controls).reasons

    def test_allowlist(self, validator):
        controls = SearchControls(allowlist=["bloom"])
        assert 'missing_allowlist_root' in validator.evaluate("terraleaf", controls).reasons
        assert validator.evaluate("terrabloom", controls).accepted

    def test_is_valid(self, validator):
        assert validator.is_valid("terraleaf")
        assert not validator.is_valid("xq")


class TestRejectedReasons:
    """Tests for the rejection histogram."""

    def test_counts_descending(self):
        reasons = ['too_long', 'too_short', 'too_long', 'awkward_cluster', 'too_long', 'too_short']
        assert top_rejected_reasons(reasons) == [('too_long', 3), ('too_short', 2), ('awkward_cluster', 1)]

    def test_limit(self):
        assert len(top_rejected_reasons(list('abcdefgh'), limit=6)) == 6
