"""Request, candidate and result records shared across the pipeline."""

import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple

KEYWORD_MODES = ('exact', 'partial', 'none')
KEYWORD_POSITIONS = ('prefix', 'suffix', 'anywhere')
STYLES = ('real_words', 'brandable_blends')

_LIST_ENTRY = re.compile(r'[^a-z0-9-]')


def _normalise_terms(values) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = re.split(r'[\s,]+', values)
    seen = {}
    for value in values:
        term = _LIST_ENTRY.sub('', str(value).lower())
        if term and term not in seen:
            seen[term] = None
    return tuple(seen)


def _check_choice(name: str, value: str, choices: Tuple[str, ...]) -> str:
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {value!r}")
    return value


@dataclass(frozen=True)
class Candidate:
    """A generated, not yet scored name."""
    name: str
    strategy: str
    roots: Tuple[str, ...] = ()
    keyword_hits: Tuple[str, ...] = ()


@dataclass
class ScoredCandidate:
    """A candidate plus its composite score and explanations."""
    name: str
    strategy: str
    roots: Tuple[str, ...]
    keyword_hits: Tuple[str, ...]
    score: float
    score_breakdown: Dict[str, float]
    quality_band: str
    meaning_score: float
    meaning_breakdown: str
    why_it_works: str
    why_tag: str
    pronounceability_score: int
    brandable_score: float

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['roots'] = list(self.roots)
        data['keyword_hits'] = list(self.keyword_hits)
        return data


@dataclass(frozen=True)
class SearchControls:
    """Caller-tunable knobs for one search."""
    seed: Optional[str] = None
    must_include_keyword: str = 'exact'
    keyword_position: str = 'anywhere'
    style: str = 'real_words'
    blocklist: Tuple[str, ...] = ()
    allowlist: Tuple[str, ...] = ()
    allow_hyphen: bool = False
    allow_numbers: bool = False
    meaning_first: bool = False
    prefer_two_word_brands: bool = False
    allow_vibe_suffix: bool = False
    show_any_available: bool = False

    def __post_init__(self):
        _check_choice('must_include_keyword', self.must_include_keyword, KEYWORD_MODES)
        _check_choice('keyword_position', self.keyword_position, KEYWORD_POSITIONS)
        _check_choice('style', self.style, STYLES)
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, 'blocklist', _normalise_terms(self.blocklist))
        object.__setattr__(self, 'allowlist', _normalise_terms(self.allowlist))
        seed = (self.seed or '').strip() or None
        object.__setattr__(self, 'seed', seed)


@dataclass(frozen=True)
class SearchRequest:
    """Everything needed to run one search."""
    keyword: str
    industry: Optional[str] = None
    vibe: Optional[str] = None
    max_length: int = 10
    target_count: int = 5
    controls: SearchControls = field(default_factory=SearchControls)


@dataclass(frozen=True)
class RelaxationStep:
    """One rung of the relaxation ladder as executed."""
    id: str
    label: str
    applied: bool


@dataclass(frozen=True)
class NearMissOption:
    """A strong name whose primary extension is taken but an alternate is free."""
    name: str
    available_tlds: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'available_tlds': list(self.available_tlds)}


@dataclass
class RunSummary:
    """Diagnostics for one search run."""
    found: int
    target: int
    attempts: int
    max_attempts: int
    generated_candidates: int
    passed_filters: int
    checked_availability: int
    provider_errors: int
    availability_hit_rate: float
    quality_threshold: float
    relaxations_applied: List[str] = field(default_factory=list)
    relaxation_steps: List[RelaxationStep] = field(default_factory=list)
    top_rejected_reasons: List[Tuple[str, int]] = field(default_factory=list)
    checking_progress: str = ''
    suggestions: List[str] = field(default_factory=list)
    near_misses: List[NearMissOption] = field(default_factory=list)
    explanation: str = ''
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['top_rejected_reasons'] = [
            {'reason': reason, 'count': count} for reason, count in self.top_rejected_reasons
        ]
        data['near_misses'] = [option.to_dict() for option in self.near_misses]
        return data


@dataclass
class RunResult:
    """Final picks and diagnostics. Never persisted."""
    picks: List[ScoredCandidate]
    summary: RunSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            'picks': [pick.to_dict() for pick in self.picks],
            'summary': self.summary.to_dict(),
        }
