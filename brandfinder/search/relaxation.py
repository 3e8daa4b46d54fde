"""The relaxation ladder: ordered setting deltas folded over one accumulator."""

from dataclasses import dataclass, replace
from typing import Iterator, Optional, Tuple

from ..models import RelaxationStep, SearchRequest

MIN_MAX_LENGTH = 5
MAX_MAX_LENGTH = 24


@dataclass(frozen=True)
class StageDelta:
    """Settings a rung forces on. ``None`` leaves the current value alone."""
    keyword_position: Optional[str] = None
    keyword_mode: Optional[str] = None
    max_length_delta: Optional[int] = None
    two_word: Optional[bool] = None
    allow_suffix: Optional[bool] = None
    allow_generic_affix: Optional[bool] = None


@dataclass(frozen=True)
class Rung:
    id: str
    label: str
    delta: StageDelta


LADDER: Tuple[Rung, ...] = (
    Rung('baseline', 'Strict controls', StageDelta()),
    Rung('position_anywhere', 'Keyword position relaxed to anywhere',
         StageDelta(keyword_position='anywhere')),
    Rung('length_plus1', 'Maximum length increased by 1 character', StageDelta(max_length_delta=1)),
    Rung('length_plus2', 'Maximum length increased by 2 characters', StageDelta(max_length_delta=2)),
    Rung('two_word', 'Two-word brand mode enabled', StageDelta(two_word=True)),
    Rung('allow_suffix', 'Tasteful suffix mode enabled', StageDelta(allow_suffix=True)),
    Rung('generic_affix', 'Generic affix fallback enabled', StageDelta(allow_generic_affix=True)),
    Rung('keyword_partial', 'Keyword inclusion relaxed to partial or synonym',
         StageDelta(keyword_mode='partial')),
)


@dataclass(frozen=True)
class EffectiveSettings:
    """What generation and filtering actually run with at a given stage."""
    keyword_position: str
    keyword_mode: str
    base_max_length: int
    max_length_delta: int = 0
    two_word: bool = False
    allow_suffix: bool = False
    allow_generic_affix: bool = False

    @property
    def max_length(self) -> int:
        return min(MAX_MAX_LENGTH, self.base_max_length + self.max_length_delta)

    @classmethod
    def from_request(cls, request: SearchRequest) -> "EffectiveSettings":
        controls = request.controls
        return cls(
            keyword_position=controls.keyword_position,
            keyword_mode=controls.must_include_keyword,
            base_max_length=max(MIN_MAX_LENGTH, min(request.max_length or 10, MAX_MAX_LENGTH)),
            two_word=controls.prefer_two_word_brands,
            allow_suffix=controls.allow_vibe_suffix,
        )

    def effective(self) -> tuple:
        return (self.keyword_position, self.keyword_mode, self.max_length,
                self.two_word, self.allow_suffix, self.allow_generic_affix)

    def apply(self, delta: StageDelta) -> "EffectiveSettings":
        changes = {}
        if delta.keyword_position is not None:
            changes['keyword_position'] = delta.keyword_position
        if delta.keyword_mode is not None and self.keyword_mode == 'exact':
            # Only ever loosens: a caller's "none" stays "none"
            changes['keyword_mode'] = delta.keyword_mode
        if delta.max_length_delta is not None:
            changes['max_length_delta'] = max(self.max_length_delta, delta.max_length_delta)
        if delta.two_word is not None:
            changes['two_word'] = delta.two_word
        if delta.allow_suffix is not None:
            changes['allow_suffix'] = delta.allow_suffix
        if delta.allow_generic_affix is not None:
            changes['allow_generic_affix'] = delta.allow_generic_affix
        return replace(self, **changes)


@dataclass(frozen=True)
class Stage:
    index: int
    rung: Rung
    settings: EffectiveSettings
    applied: bool

    @property
    def step(self) -> RelaxationStep:
        return RelaxationStep(id=self.rung.id, label=self.rung.label, applied=self.applied)


def iter_stages(request: SearchRequest, max_attempts: Optional[int] = None,
                ladder: Tuple[Rung, ...] = LADDER) -> Iterator[Stage]:
    """Yield stages in order with all earlier deltas already applied.

    A rung counts as applied only if it changed an effective setting.
    """
    limit = len(ladder) if max_attempts is None else max(1, min(max_attempts, len(ladder)))
    settings = EffectiveSettings.from_request(request)
    for index, rung in enumerate(ladder[:limit]):
        relaxed = settings.apply(rung.delta)
        yield Stage(index=index, rung=rung, settings=relaxed,
                    applied=relaxed.effective() != settings.effective())
        settings = relaxed
