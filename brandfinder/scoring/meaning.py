"""Concept selection and name explanations built on the morpheme store."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..lexicon import Lexicon, MorphemeEntry, load_lexicon, normalise_fragment, unique
from ..utils.word_validator import pronounceability_score

T = TypeVar('T')

MIN_CONCEPTS = 3
MAX_CONCEPTS = 16
MIN_CONCEPT_SCORE = 0.9
MAX_FRAGMENTS = 4


@dataclass(frozen=True)
class MeaningExplanation:
    fragments: Tuple[MorphemeEntry, ...]
    breakdown: str
    one_liner: str
    meaning_score: int


def match_score(fragment: str, token: str) -> float:
    if fragment == token:
        return 1.0
    if fragment.startswith(token) or token.startswith(fragment):
        return 0.82
    if token in fragment or fragment in token:
        return 0.68
    return 0.0


def _unique_entries(entries: Iterable[MorphemeEntry]) -> List[MorphemeEntry]:
    seen = set()
    result = []
    for entry in entries:
        if entry.fragment not in seen:
            seen.add(entry.fragment)
            result.append(entry)
    return result


class MeaningEngine:
    """Picks relevant morphemes for a request and explains generated names."""

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or load_lexicon()

    def _expansion_tokens(self, tokens: Sequence[str]) -> Tuple[str, ...]:
        expanded = list(tokens)
        for token in tokens:
            expanded.extend(self.lexicon.synonyms_for(token))
        return unique(expanded)

    def select_concepts(self, keyword: str, industry: Optional[str] = None, vibe: Optional[str] = None,
                        limit: int = 8, expanded: bool = False) -> Tuple[MorphemeEntry, ...]:
        """Score every morpheme against the request and keep the best ``limit``."""
        lex = self.lexicon
        tokens = lex.parse_keyword_tokens(keyword)
        expansion = self._expansion_tokens(tokens)
        limit = max(MIN_CONCEPTS, min(limit or 8, MAX_CONCEPTS))
        industry_hints = set(lex.industry_hint_words(industry))
        vibe_hints = set(lex.vibe_hint_words(vibe))

        scored = []
        for entry in lex.morphemes:
            score = entry.weight * 0.5
            score += sum(match_score(entry.fragment, token) for token in expansion)
            if entry.fragment in tokens:
                score += 1.4
            if entry.fragment in industry_hints:
                score += 0.85
            if entry.fragment in vibe_hints:
                score += 0.75
            if score >= MIN_CONCEPT_SCORE:
                scored.append((score, entry))

        scored.sort(key=lambda item: (-item[0], item[1].fragment))
        selected = _unique_entries(entry for _, entry in scored)[:limit]
        if len(selected) >= MIN_CONCEPTS:
            return tuple(selected)

        for hint in (*lex.industry_hint_words(industry), *lex.vibe_hint_words(vibe)):
            entry = lex.morpheme(hint)
            if entry:
                selected.append(entry)
            if len(selected) >= limit:
                break

        if expanded and len(selected) < limit:
            for entry in lex.morphemes:
                selected.append(entry)
                if len(selected) >= limit:
                    break

        return tuple(_unique_entries(selected)[:limit])

    def find_fragments(self, name: str, roots: Iterable[str],
                       concepts: Sequence[MorphemeEntry]) -> List[MorphemeEntry]:
        by_fragment = {entry.fragment: entry for entry in concepts}
        by_roots = [by_fragment[r] for r in (normalise_fragment(root) for root in roots) if r in by_fragment]
        by_scan = [entry for entry in concepts if entry.fragment in name]
        return _unique_entries([*by_roots, *by_scan])[:MAX_FRAGMENTS]

    def explain(self, name: str, roots: Iterable[str] = (),
                concepts: Sequence[MorphemeEntry] = ()) -> MeaningExplanation:
        """Recover the fragments in ``name`` and rate how well they explain it."""
        name = normalise_fragment(name)
        matched = self.find_fragments(name, roots, concepts)

        coverage = sum(len(entry.fragment) for entry in matched)
        ratio = max(0.0, min(1.0, coverage / max(len(name), 1)))
        dictionary = 1 if any(e.fragment in self.lexicon.dictionary_words for e in matched) else 0
        pronounceability = pronounceability_score(name) / 100
        if len(matched) >= 2:
            power = 1.0
        elif matched:
            power = 0.55
        else:
            power = 0.2

        meaning_score = round(max(0.0, min(100.0,
                                           ratio * 38 + dictionary * 14 + pronounceability * 24 + power * 24)))

        parts = [f"{entry.fragment} ({entry.meaning})" for entry in matched[:3]]
        if not parts:
            parts = [f"{name[:4]} (distinctive brand cue)"]
        breakdown = f"{' + '.join(parts)} -> {name}"

        if len(matched) >= 2:
            lead, second = matched[0], matched[1]
            one_liner = (f"{lead.fragment} + {second.fragment} signals "
                         f"{lead.short_meaning} with {second.short_meaning}.")
        elif matched:
            one_liner = f"{matched[0].fragment} gives a clear {matched[0].short_meaning} cue."
        else:
            one_liner = f"{name} keeps a clean, pronounceable brand shape."

        return MeaningExplanation(
            fragments=tuple(matched),
            breakdown=breakdown,
            one_liner=one_liner,
            meaning_score=meaning_score,
        )


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def root_signature(roots: Iterable[str]) -> str:
    cleaned = sorted(r for r in (normalise_fragment(root) for root in roots) if r)
    return '|'.join(cleaned[:3])


def dedupe_by_meaning_diversity(items: Iterable[T]) -> List[T]:
    """Drop items that repeat a root signature or sit one edit away from a kept name.

    Items need ``name`` and ``roots`` attributes. Order is preserved.
    """
    kept: List[T] = []
    signatures = set()

    for item in items:
        name = normalise_fragment(item.name)
        signature = root_signature(item.roots)
        if signature and signature in signatures:
            continue

        too_close = any(
            other[:1] == name[:1] and levenshtein(other, name) <= 1
            for other in (normalise_fragment(k.name) for k in kept)
        )
        if too_close:
            continue

        kept.append(item)
        if signature:
            signatures.add(signature)

    return kept
