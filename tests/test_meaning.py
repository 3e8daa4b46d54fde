"""
Tests for concept selection and name explanations
=================================================
"""

import pytest

from brandfinder.models import Candidate
from brandfinder.scoring import MeaningEngine, dedupe_by_meaning_diversity
from brandfinder.scoring.meaning import levenshtein, root_signature


@pytest.fixture
def engine(lexicon):
    return MeaningEngine(lexicon)


class TestSelectConcepts:
    """Tests for morpheme selection."""

    def test_keywords_selected(self, engine):
        fragments = [e.fragment for e in engine.select_concepts("eco, green", "Sustainability", "Minimal")]
        assert "eco" in fragments
        assert "green" in fragments

    def test_limit_respected(self, engine):
        assert len(engine.select_concepts("eco, green", "Sustainability", "Minimal", limit=5)) <= 5

    def test_deterministic(self, engine):
        a = engine.select_concepts("health", "Health & Wellness", "Luxury")
        b = engine.select_concepts("health", "Health & Wellness", "Luxury")
        assert a == b

    def test_expanded_fills_from_store(self, engine):
        concepts = engine.select_concepts("zzqq", None, None, limit=10, expanded=True)
        assert len(concepts) == 10


class TestExplain:
    """Tests for meaning explanations."""

    def test_two_fragments(self, engine, lexicon):
        concepts = (lexicon.morpheme("eco"), lexicon.morpheme("verde"))
        explanation = engine.explain("ecoverde", ("eco", "verde"), concepts)
        assert [f.fragment for f in explanation.fragments] == ["eco", "verde"]
        assert explanation.one_liner.startswith("eco + verde signals")
        assert "eco (" in explanation.breakdown
        assert 0 <= explanation.meaning_score <= 100

    def test_matches_raise_score(self, engine, lexicon):
        concepts = (lexicon.morpheme("eco"), lexicon.morpheme("verde"))
        with_meaning = engine.explain("ecoverde", ("eco", "verde"), concepts)
        without = engine.explain("ecoverde")
        assert with_meaning.meaning_score > without.meaning_score

    def test_no_fragments(self, engine):
        explanation = engine.explain("zorvik")
        assert explanation.fragments == ()
        assert explanation.one_liner == "zorvik keeps a clean, pronounceable brand shape."


class TestDiversity:
    """Tests for near-duplicate removal."""

    def test_levenshtein(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("", "abc") == 3
        assert levenshtein("same", "same") == 0

    def test_root_signature_order_free(self):
        assert root_signature(["leaf", "eco"]) == root_signature(["eco", "leaf"])

    def test_dedupe(self):
        items = [
            Candidate("ecoleaf", "x", ("eco", "leaf")),
            Candidate("leafeco", "x", ("leaf", "eco")),
            Candidate("ecoleag", "x", ("other",)),
            Candidate("terrabloom", "x", ("terra", "bloom")),
        ]
        assert [c.name for c in dedupe_by_meaning_diversity(items)] == ["ecoleaf", "terrabloom"]
