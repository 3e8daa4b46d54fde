"""
Tests for deterministic candidate generation
============================================
"""

import re

import pytest

from brandfinder.generators import CandidateGenerator, GenerationOptions
from brandfinder.models import SearchControls, SearchRequest

KNOWN_STRATEGIES = {
    'two_word_compound', 'semantic_compound', 'wordplay_blend', 'emotive_modifier', 'action_noun',
    'root_suffix', 'prefix_root', 'vibe_compound', 'portmanteau', 'soft_connector_blend',
    'real_word_twist', 'vowel_swap', 'letter_omission', 'mood_pairing', 'generic_affix_relaxation',
}


@pytest.fixture
def generator(lexicon):
    return CandidateGenerator(lexicon)


@pytest.fixture
def request_():
    return SearchRequest(keyword="eco, green", industry="Sustainability", vibe="Minimal",
                         max_length=10, controls=SearchControls(seed="fixed-seed"))


class TestDeterminism:
    """Same inputs must give the same pool."""

    def test_same_seed_same_pool(self, generator, request_):
        options = GenerationOptions(pool_size=300)
        first = [c.name for c in generator.generate(request_, options).candidates]
        second = [c.name for c in generator.generate(request_, options).candidates]
        assert first == second

    def test_salt_changes_pool(self, generator, request_):
        a = [c.name for c in generator.generate(request_, GenerationOptions(pool_size=300, seed_salt="a")).candidates]
        b = [c.name for c in generator.generate(request_, GenerationOptions(pool_size=300, seed_salt="b")).candidates]
        assert a != b

    def test_seed_string_contains_context(self, request_):
        seed = CandidateGenerator.seed_string(request_, "real_words", 10, "stage")
        assert seed == "fixed-seed:real_words:10:stage"


class TestPoolShape:
    """Uniqueness and bounds of the generated pool."""

    @pytest.fixture
    def result(self, generator, request_):
        return generator.generate(request_, GenerationOptions(pool_size=400, min_length=4))

    def test_names_unique(self, result):
        names = [c.name for c in result.candidates]
        assert len(names) == len(set(names))

    def test_lengths_within_bounds(self, result):
        assert result.candidates
        assert all(4 <= len(c.name) <= 10 for c in result.candidates)

    def test_names_are_clean(self, result):
        assert all(re.fullmatch(r'[a-z0-9]+', c.name) for c in result.candidates)

    def test_pool_size_cap(self, result):
        assert len(result.candidates) <= 400

    def test_strategies_known(self, result):
        assert {c.strategy for c in result.candidates} <= KNOWN_STRATEGIES

    def test_keyword_hits_are_keyword_tokens(self, result):
        for candidate in result.candidates:
            assert set(candidate.keyword_hits) <= {"eco", "green"}
            assert all(hit in candidate.name for hit in candidate.keyword_hits)

    def test_keyword_tokens_reported(self, result):
        assert result.keyword_tokens == ("eco", "green")


class TestOptions:
    """Relaxation knobs passed through options."""

    def test_longer_max_length_allows_longer_names(self, generator, request_):
        result = generator.generate(request_, GenerationOptions(pool_size=300, max_length=14))
        assert all(len(c.name) <= 14 for c in result.candidates)

    def test_pool_size_clamped_low(self, generator, request_):
        result = generator.generate(request_, GenerationOptions(pool_size=5))
        assert len(result.candidates) <= 240

    def test_generic_affix_strategy_appears(self, generator, request_):
        result = generator.generate(request_, GenerationOptions(pool_size=600, allow_generic_affix=True,
                                                                max_length=14))
        assert any(c.strategy == 'generic_affix_relaxation' for c in result.candidates)
