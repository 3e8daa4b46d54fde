"""
Tests for run diagnostics
=========================
"""

from brandfinder.checkers import DomainResult
from brandfinder.models import Candidate, NearMissOption, RelaxationStep, SearchControls
from brandfinder.search.summary import (
    build_explanation,
    build_suggestions,
    checking_progress,
    collect_near_misses,
)


class TestSuggestions:
    """Tests for the ordered suggestion list."""

    def test_none_when_target_met(self):
        assert build_suggestions(SearchControls(), [], 5, 5, 3) == []

    def test_default_order(self):
        suggestions = build_suggestions(SearchControls(), [], 1, 5, 0)
        assert suggestions == ['increase_length', 'two_word_mode', 'allow_suffix', 'switch_tld',
                               'show_any_available']

    def test_retry_on_provider_errors(self):
        assert build_suggestions(SearchControls(), [], 1, 5, 2)[-1] == 'retry'

    def test_skips_what_the_ladder_applied(self):
        steps = [RelaxationStep('length_plus1', 'x', True), RelaxationStep('two_word', 'y', True)]
        suggestions = build_suggestions(SearchControls(), steps, 0, 5, 0)
        assert 'increase_length' not in suggestions
        assert 'two_word_mode' not in suggestions

    def test_unapplied_rung_still_suggested(self):
        steps = [RelaxationStep('two_word', 'y', False)]
        assert 'two_word_mode' in build_suggestions(SearchControls(), steps, 0, 5, 0)

    def test_skips_what_the_caller_set(self):
        controls = SearchControls(allow_vibe_suffix=True, show_any_available=True)
        suggestions = build_suggestions(controls, [], 0, 5, 0)
        assert 'allow_suffix' not in suggestions
        assert 'show_any_available' not in suggestions

    def test_at_most_six(self):
        assert len(build_suggestions(SearchControls(), [], 0, 5, 9)) == 6


class TestExplanation:
    """Tests for the human-readable run explanation."""

    def test_full_result(self):
        assert build_explanation(5, 5, 40, 0) == \
            "Found 5/5 available .com domains with quality filters applied."

    def test_reduced_result(self):
        text = build_explanation(2, 5, 120, 0)
        assert text.startswith("Found 2/5 available .com domains after checking 120 unique domains.")
        assert "We refuse to show low-scoring names." in text
        assert "degraded" not in text

    def test_degraded_note(self):
        assert build_explanation(0, 5, 10, 4).endswith("Some provider responses were degraded.")


class TestNearMisses:
    """Tests for grouping alternate-TLD results."""

    def test_groups_in_tld_order(self):
        shortlist = [Candidate("ecoleaf", "x"), Candidate("greenmint", "x")]
        results = [
            DomainResult("ecoleaf.ai", True, "fake"),
            DomainResult("ecoleaf.io", True, "fake"),
            DomainResult("greenmint.io", False, "fake"),
            DomainResult("greenmint.co", None, "fake", error="timeout"),
        ]
        options = collect_near_misses(shortlist, results, ("io", "ai", "co"), 6)
        assert options == [NearMissOption("ecoleaf", ("io", "ai"))]

    def test_limit(self):
        shortlist = [Candidate(f"name{i}", "x") for i in range(5)]
        results = [DomainResult(f"name{i}.io", True, "fake") for i in range(5)]
        assert len(collect_near_misses(shortlist, results, ("io",), 2)) == 2


def test_checking_progress():
    assert checking_progress(40, 700, 2, 5) == "Checking 40/700... Found 2/5"
