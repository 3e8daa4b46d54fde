"""
Tests for the relaxation ladder
===============================
"""

from brandfinder.models import SearchControls, SearchRequest
from brandfinder.search import LADDER, EffectiveSettings, StageDelta, iter_stages


def stages_for(**controls):
    max_length = controls.pop('max_length', 10)
    request = SearchRequest(keyword="eco", max_length=max_length, controls=SearchControls(**controls))
    return list(iter_stages(request))


class TestLadderOrder:
    """Tests for rung order and limits."""

    def test_full_ladder(self):
        ids = [stage.rung.id for stage in stages_for()]
        assert ids == ['baseline', 'position_anywhere', 'length_plus1', 'length_plus2',
                       'two_word', 'allow_suffix', 'generic_affix', 'keyword_partial']
        assert len(LADDER) == 8

    def test_max_attempts_truncates(self):
        request = SearchRequest(keyword="eco")
        assert len(list(iter_stages(request, max_attempts=3))) == 3

    def test_max_attempts_floor_of_one(self):
        request = SearchRequest(keyword="eco")
        assert len(list(iter_stages(request, max_attempts=0))) == 1


class TestCumulativeDeltas:
    """Stage N runs with rungs 1..N applied."""

    def test_later_stages_keep_earlier_deltas(self):
        stages = stages_for(keyword_position='prefix')
        two_word = stages[4].settings
        assert two_word.keyword_position == 'anywhere'
        assert two_word.max_length == 12
        assert two_word.two_word

    def test_last_stage_everything_relaxed(self):
        final = stages_for()[-1].settings
        assert final.keyword_mode == 'partial'
        assert final.allow_suffix and final.allow_generic_affix and final.two_word

    def test_baseline_matches_request(self):
        baseline = stages_for(keyword_position='suffix', max_length=8)[0].settings
        assert baseline.keyword_position == 'suffix'
        assert baseline.max_length == 8


class TestAppliedFlag:
    """A rung is applied only when it changes an effective setting."""

    def test_baseline_never_applied(self):
        assert not stages_for()[0].applied

    def test_position_already_anywhere(self):
        assert not stages_for(keyword_position='anywhere')[1].applied
        assert stages_for(keyword_position='prefix')[1].applied

    def test_two_word_already_set(self):
        assert not stages_for(prefer_two_word_brands=True)[4].applied

    def test_keyword_none_never_tightened(self):
        final = stages_for(must_include_keyword='none')[-1]
        assert final.settings.keyword_mode == 'none'
        assert not final.applied

    def test_length_capped(self):
        stages = stages_for(max_length=24)
        assert not stages[2].applied
        assert stages[2].settings.max_length == 24

    def test_step_record(self):
        step = stages_for(keyword_position='prefix')[1].step
        assert step.id == 'position_anywhere'
        assert step.label == 'Keyword position relaxed to anywhere'
        assert step.applied


def test_length_delta_takes_max():
    settings = EffectiveSettings(keyword_position='anywhere', keyword_mode='exact', base_max_length=10)
    settings = settings.apply(StageDelta(max_length_delta=2)).apply(StageDelta(max_length_delta=1))
    assert settings.max_length == 12
