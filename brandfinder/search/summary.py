"""Post-run diagnostics: suggestions, near-misses and the explanation text."""

from typing import Dict, Iterable, List, Sequence

from ..checkers.availability_service import DomainResult
from ..models import NearMissOption, RelaxationStep, ScoredCandidate, SearchControls

MAX_SUGGESTIONS = 6

# Suggestion tag -> ladder rung that makes it redundant
_RUNG_FOR_SUGGESTION = {
    'increase_length': ('length_plus1', 'length_plus2'),
    'two_word_mode': ('two_word',),
    'allow_suffix': ('allow_suffix',),
}


def build_suggestions(controls: SearchControls, steps: Iterable[RelaxationStep],
                      found: int, target: int, provider_errors: int) -> List[str]:
    """Actionable knobs the run did not already turn, most useful first."""
    if found >= target:
        return []

    applied = {step.id for step in steps if step.applied}

    def untouched(tag: str) -> bool:
        return not applied.intersection(_RUNG_FOR_SUGGESTION.get(tag, ()))

    suggestions = []
    if untouched('increase_length'):
        suggestions.append('increase_length')
    if not controls.prefer_two_word_brands and untouched('two_word_mode'):
        suggestions.append('two_word_mode')
    if not controls.allow_vibe_suffix and untouched('allow_suffix'):
        suggestions.append('allow_suffix')
    suggestions.append('switch_tld')
    if not controls.show_any_available:
        suggestions.append('show_any_available')
    if provider_errors > 0:
        suggestions.append('retry')

    return list(dict.fromkeys(suggestions))[:MAX_SUGGESTIONS]


def collect_near_misses(shortlist: Sequence[ScoredCandidate], results: Iterable[DomainResult],
                        tlds: Sequence[str], limit: int) -> List[NearMissOption]:
    """Group available alternate-TLD results by name, best names first."""
    free: Dict[str, set] = {}
    for result in results:
        if not result.is_available:
            continue
        name, _, tld = result.domain.partition('.')
        if name and tld:
            free.setdefault(name, set()).add(tld)

    options = []
    for candidate in shortlist:
        available = free.get(candidate.name)
        if not available:
            continue
        options.append(NearMissOption(
            name=candidate.name,
            available_tlds=tuple(tld for tld in tlds if tld in available),
        ))
        if len(options) >= limit:
            break
    return options


def build_explanation(found: int, target: int, checked_unique: int, provider_errors: int,
                      primary_tld: str = 'com') -> str:
    if found >= target:
        return f"Found {found}/{target} available .{primary_tld} domains with quality filters applied."

    parts = [
        f"Found {found}/{target} available .{primary_tld} domains after checking "
        f"{checked_unique} unique domains. We refuse to show low-scoring names.",
        f".{primary_tld} scarcity at this length is common. "
        "Try +2 characters, two-word mode, or allow a suffix.",
    ]
    if provider_errors > 0:
        parts.append("Some provider responses were degraded.")
    return ' '.join(parts)


def checking_progress(checked: int, generated: int, found: int, target: int) -> str:
    return f"Checking {checked}/{max(generated, checked)}... Found {found}/{target}"
