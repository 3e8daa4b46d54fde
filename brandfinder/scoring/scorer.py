"""Candidate scoring - composite brandability with a pluggable strategy."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import ScoringSettings
from ..lexicon import Lexicon, MorphemeEntry, load_lexicon
from ..models import Candidate, ScoredCandidate, SearchControls
from ..utils.word_validator import count_syllables, pronounceability_score
from .meaning import MeaningEngine

VISUAL_PENALTY = re.compile(r'(.)\1\1|[bcdfghjklmnpqrstvwxyz]{5,}|xxx|kkk|qzx|xq|rnm|mrn')
HARSH_CLUSTER = re.compile(r'[xzq]{2,}')

SMOOTH_LETTERS = ('l', 'm', 'n', 'r', 'v', 's')
FUTURISTIC_MARKS = ('x', 'z', 'v', 'q', 'neo', 'nova', 'flux', 'nex')
PLAYFUL_MARKS = ('b', 'p', 'k', 'z', 'joy', 'pop', 'spark')
TRUST_TERMS = ('clear', 'safe', 'true', 'secure', 'solid', 'trust', 'anchor')

EMOTIVE_STRATEGIES = ('vibe_compound', 'emotive_modifier', 'mood_pairing')
COMPOUND_STRATEGIES = ('semantic_compound', 'action_noun', 'two_word_compound')


def count_matches(name: str, terms: Iterable[str]) -> int:
    """Number of distinct terms that occur in ``name``."""
    return sum(1 for term in terms if term and term in name)


def satisfies_keyword_constraint(name: str, keyword_tokens: Sequence[str], mode: str,
                                 synonyms: Sequence[str] = ()) -> bool:
    """Hard keyword gate applied before scoring."""
    if mode == 'none' or not keyword_tokens:
        return True

    if mode == 'exact':
        return any(token in name for token in keyword_tokens)

    for token in keyword_tokens:
        short = token if len(token) <= 2 else token[:max(2, len(token) - 2)]
        if short in name:
            return True
    return any(synonym and synonym in name for synonym in synonyms)


@dataclass(frozen=True)
class ScoringContext:
    """Request-level inputs every score depends on."""
    keyword_tokens: Tuple[str, ...]
    controls: SearchControls
    industry: Optional[str] = None
    vibe: Optional[str] = None
    concepts: Tuple[MorphemeEntry, ...] = ()
    keyword_position: Optional[str] = None

    @property
    def position(self) -> str:
        return self.keyword_position or self.controls.keyword_position

    @property
    def vibe_key(self) -> str:
        return (self.vibe or '').strip().lower()


class ScoringStrategy(ABC):
    """Turns one candidate into a scored candidate."""

    name = 'abstract'

    @abstractmethod
    def score(self, candidate: Candidate, context: ScoringContext) -> ScoredCandidate:
        ...


class BrandabilityStrategy(ScoringStrategy):
    """Additive heuristic model: length, sound, relevance, style and vibe."""

    name = 'brandability'

    def __init__(self, lexicon: Optional[Lexicon] = None, settings: Optional[ScoringSettings] = None):
        self.lexicon = lexicon or load_lexicon()
        self.settings = settings or ScoringSettings()
        self.meaning = MeaningEngine(self.lexicon)

    def quality_band(self, score: float) -> str:
        if score >= self.settings.high_band:
            return 'high'
        if score >= self.settings.medium_band:
            return 'medium'
        return 'low'

    def _position_score(self, name: str, context: ScoringContext) -> float:
        tokens = context.keyword_tokens
        if not tokens or context.position == 'anywhere':
            return 0.0
        hit = next((token for token in tokens if token in name), None)
        if hit is None:
            return -2.0
        if context.position == 'prefix':
            return 2.0 if name.startswith(hit) else -2.0
        return 2.0 if name.endswith(hit) else -2.0

    def _style_score(self, name: str, style: str) -> float:
        score = 0.0
        if style == 'real_words':
            score += 1.0 if re.search(r'[aeiou].*[aeiou]', name) else -0.8
            if re.search(r'(ing|er|ly|ion|ment)$', name):
                score += 0.7
            if re.search(r'(base|flow|point|lane|house|path)$', name):
                score += 0.6
        else:
            if re.search(r'[aeiou][a-z]{2,}[aeiou]', name):
                score += 1.1
            if re.search(r'(ly|ify|io|ora|beam|pulse)$', name):
                score += 0.8
        return score

    def _vibe_letter_score(self, name: str, vibe: str) -> float:
        if vibe == 'luxury':
            ending = 0.8 if re.search(r'(a|o|e)$', name) else 0.0
            return count_matches(name, SMOOTH_LETTERS) * 0.35 + ending
        if vibe == 'futuristic':
            return count_matches(name, FUTURISTIC_MARKS) * 0.65
        if vibe == 'playful':
            return count_matches(name, PLAYFUL_MARKS) * 0.5
        if vibe == 'trustworthy':
            sharp = -1.1 if HARSH_CLUSTER.search(name) else 0.0
            return count_matches(name, TRUST_TERMS) * 0.7 + sharp
        if vibe == 'minimal':
            if len(name) <= 8:
                brevity = 1.2
            elif len(name) <= 10:
                brevity = 0.6
            else:
                brevity = -0.6
            clutter = -0.9 if HARSH_CLUSTER.search(name) or re.search(r'(ify|labs|works)$', name) else 0.0
            return brevity + clutter
        return 0.0

    @staticmethod
    def _strategy_bonus(strategy: str) -> float:
        if strategy in EMOTIVE_STRATEGIES:
            return 0.9
        if strategy in COMPOUND_STRATEGIES:
            return 0.55
        return 0.0

    def score(self, candidate: Candidate, context: ScoringContext) -> ScoredCandidate:
        name = candidate.name
        controls = context.controls
        vibe = context.vibe_key
        industry = self.lexicon.industry_lexicon(context.industry)
        meaning = self.meaning.explain(name, candidate.roots, context.concepts)

        syllables = count_syllables(name)
        ideal = 10 if controls.style == 'real_words' else 9
        length = max(0, 14 - abs(ideal - len(name)))
        pron_score = pronounceability_score(name)
        pronounceability = (pron_score - 60) / 12

        if 2 <= syllables <= 3:
            memorability = 3.2
        elif syllables in (1, 4):
            memorability = 1.5
        else:
            memorability = -1.2
        memorability += 1.0 if len(name) <= 11 else -0.8

        relevance = (count_matches(name, industry.roots) * 4
                     + count_matches(name, context.keyword_tokens) * 3.4
                     + count_matches(name, self.lexicon.vibe_terms(vibe)) * 1.9)

        visual = -2.1 if VISUAL_PENALTY.search(name) else 0.0
        generic_hits = count_matches(name, self.lexicon.generic_penalty_terms)
        if vibe == 'luxury' and 'lux' in name:
            generic = max(0, generic_hits - 1) * -1.1
        else:
            generic = generic_hits * -1.45
        off_topic = count_matches(name, industry.off_topic_roots) * -4.6
        penalties = visual + generic + off_topic

        position = self._position_score(name, context)
        style = self._style_score(name, controls.style) + self._vibe_letter_score(name, vibe)
        bonus = self._strategy_bonus(candidate.strategy)
        meaning_boost = meaning.meaning_score / 18 if controls.meaning_first else 0.0

        total = round(length + pronounceability + memorability + relevance + meaning_boost
                      + penalties + position + style + bonus, 2)

        hint = next((t for t in context.keyword_tokens if t in name), 'brand root')
        vibe_label = vibe.capitalize() if vibe else 'Balanced'

        return ScoredCandidate(
            name=name,
            strategy=candidate.strategy,
            roots=candidate.roots,
            keyword_hits=candidate.keyword_hits,
            score=total,
            score_breakdown={
                'length': round(length, 2),
                'pronounceability': round(pronounceability, 2),
                'memorability': round(memorability, 2),
                'relevance': round(relevance, 2),
                'penalties': round(penalties, 2),
                'keyword_position': round(position, 2),
                'style': round(style, 2),
                'meaning': meaning.meaning_score,
                'syllables': syllables,
            },
            quality_band=self.quality_band(total),
            meaning_score=meaning.meaning_score,
            meaning_breakdown=meaning.breakdown,
            why_it_works=meaning.one_liner,
            why_tag=f"{vibe_label} vibe | {max(1, syllables)} syllables | keyword hint: {hint}",
            pronounceability_score=pron_score,
            brandable_score=round(max(1.0, min(10.0, total / 2.6)), 1),
        )


class BrandScorer:
    """Binds a scoring strategy to one request's context."""

    def __init__(self, context: ScoringContext, strategy: Optional[ScoringStrategy] = None,
                 lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or load_lexicon()
        self.context = context
        self.strategy = strategy or BrandabilityStrategy(self.lexicon)

    def keyword_synonyms(self) -> Tuple[str, ...]:
        synonyms = []
        for token in self.context.keyword_tokens:
            synonyms.extend(self.lexicon.synonyms_for(token))
        return tuple(dict.fromkeys(synonyms))

    def passes_keyword_gate(self, name: str, mode: Optional[str] = None) -> bool:
        mode = mode or self.context.controls.must_include_keyword
        return satisfies_keyword_constraint(name, self.context.keyword_tokens, mode,
                                            self.keyword_synonyms() if mode == 'partial' else ())

    def score(self, candidate: Candidate) -> ScoredCandidate:
        return self.strategy.score(candidate, self.context)

    def score_name(self, name: str, strategy: str = 'manual') -> ScoredCandidate:
        tokens = self.context.keyword_tokens
        candidate = Candidate(name=name.lower(), strategy=strategy,
                              keyword_hits=tuple(t for t in tokens if t in name.lower()))
        return self.score(candidate)

    def score_batch(self, candidates: Iterable[Candidate]) -> List[ScoredCandidate]:
        return [self.score(candidate) for candidate in candidates]

    @staticmethod
    def sort_ranked(scored: Iterable[ScoredCandidate]) -> List[ScoredCandidate]:
        """Score descending, name ascending."""
        return sorted(scored, key=lambda s: (-s.score, s.name))

    def rank(self, candidates: Iterable[Candidate], keyword_mode: Optional[str] = None) -> List[ScoredCandidate]:
        """Apply the keyword gate, score the survivors and sort them."""
        gated = [c for c in candidates if self.passes_keyword_gate(c.name, keyword_mode)]
        return self.sort_ranked(self.score_batch(gated))
