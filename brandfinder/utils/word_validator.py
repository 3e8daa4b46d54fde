"""Hard filters and pronounceability scoring for candidate names."""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..lexicon import Lexicon, load_lexicon
from ..models import SearchControls

# Clusters that never read well in a brand name
HARD_BANNED_CLUSTERS = ('qzx', 'xq', 'jjj', 'zzz', 'vvv', 'kkk', 'wq')

# Substrings that would embarrass a brand; kept short of common English words
OFFENSIVE_PATTERNS = (
    'fuck', 'shit', 'bitch', 'cunt', 'dick', 'cock', 'porn', 'xxx', 'nazi', 'slut', 'whore',
)

VOWELS = set('aeiouy')

_SANITISE = re.compile(r'[^a-z0-9-]')
_ONLY_LETTERS = re.compile(r'[^a-z]')
_VOWEL_GROUP = re.compile(r'[aeiouy]+')
_REPEATED = re.compile(r'(.)\1\1')
_LONG_CONSONANT_RUN = re.compile(r'[bcdfghjklmnpqrstvwxyz]{5,}')
_CONSONANT_RUN_4 = re.compile(r'[bcdfghjklmnpqrstvwxyz]{4,}')
_VISUAL_AMBIGUITY = re.compile(r'(rnm|mrn|vv|lll|iii)')
_RARE_CLUSTER = re.compile(r'[qzx]{2,}')
_SOFT_AMBIGUITY = re.compile(r'(rn|vv|lll|iii)')


def sanitise(raw: str) -> str:
    return _SANITISE.sub('', str(raw).lower())


def count_syllables(word: str) -> int:
    """Syllable estimate: number of vowel groups (``y`` counts as a vowel)."""
    return len(_VOWEL_GROUP.findall(word.lower()))


def vowel_ratio(word: str) -> float:
    letters = _ONLY_LETTERS.sub('', word.lower())
    if not letters:
        return 0.0
    return sum(1 for c in letters if c in VOWELS) / len(letters)


def pronounceability_score(word: str) -> int:
    """Score ease of pronunciation from 0-100."""
    word = re.sub(r'[^a-z0-9]', '', word.lower())
    if not word:
        return 0

    score = 58
    ratio = sum(1 for c in word if c in VOWELS) / len(word)
    if 0.28 <= ratio <= 0.62:
        score += 18
    elif 0.22 <= ratio <= 0.7:
        score += 9
    else:
        score -= 16

    if _CONSONANT_RUN_4.search(word):
        score -= 18
    if _REPEATED.search(word):
        score -= 12
    if _RARE_CLUSTER.search(word):
        score -= 8
    if _SOFT_AMBIGUITY.search(word):
        score -= 6

    syllables = count_syllables(word)
    if 2 <= syllables <= 3:
        score += 10
    elif syllables in (1, 4):
        score += 3
    else:
        score -= 6

    return max(0, min(100, round(score)))


@dataclass(frozen=True)
class FilterDecision:
    accepted: bool
    reasons: Tuple[str, ...] = ()


class WordValidator:
    """Validates candidate names for domain suitability."""

    def __init__(self, min_length: int = 4, max_length: int = 10, lexicon: Optional[Lexicon] = None):
        self.min_length = min_length
        self.max_length = max_length
        self.lexicon = lexicon or load_lexicon()

    def is_valid(self, word: str, controls: Optional[SearchControls] = None) -> bool:
        """Check if word passes all validation criteria."""
        return self.evaluate(word, controls).accepted

    def evaluate(self, raw: str, controls: Optional[SearchControls] = None,
                 max_length: Optional[int] = None) -> FilterDecision:
        """Run every hard filter and collect the reasons a name fails."""
        controls = controls or SearchControls()
        max_length = max_length or self.max_length
        name = sanitise(raw)
        reasons: List[str] = []

        if not name or len(name) < self.min_length:
            reasons.append('too_short')
        if len(name) > max_length:
            reasons.append('too_long')
        if not controls.allow_hyphen and '-' in name:
            reasons.append('contains_hyphen')
        if not controls.allow_numbers and re.search(r'\d', name):
            reasons.append('contains_number')

        if any(cluster in name for cluster in HARD_BANNED_CLUSTERS):
            reasons.append('awkward_cluster')
        if _VISUAL_AMBIGUITY.search(name):
            reasons.append('visual_ambiguity')
        if _REPEATED.search(name):
            reasons.append('repeated_letters')
        if not self.is_pronounceable(name, controls.style):
            reasons.append('low_pronounceability')
        if any(fragment in name for fragment in self.lexicon.trademark_fragments):
            reasons.append('trademark_like_fragment')
        if self._contains_offensive(name):
            reasons.append('offensive_fragment')

        for blocked in controls.blocklist:
            if blocked and blocked in name:
                reasons.append(f'blocked_term:{blocked}')
                break

        if controls.allowlist and not any(allowed in name for allowed in controls.allowlist if allowed):
            reasons.append('missing_allowlist_root')

        return FilterDecision(accepted=not reasons, reasons=tuple(reasons))

    def _contains_offensive(self, word: str) -> bool:
        return any(pattern in word for pattern in OFFENSIVE_PATTERNS)

    def has_reasonable_vowel_ratio(self, name: str, style: str = 'real_words') -> bool:
        letters = _ONLY_LETTERS.sub('', name)
        if not letters:
            return False

        ratio = vowel_ratio(letters)
        if len(letters) <= 7:
            minimum = 0.18
        elif len(letters) <= 10:
            minimum = 0.20
        else:
            minimum = 0.24
        if style == 'brandable_blends':
            minimum = max(0.16, minimum - 0.03)
        return minimum <= ratio <= 0.75

    def is_pronounceable(self, name: str, style: str = 'real_words') -> bool:
        """Vowel ratio, consonant runs and syllable count within bounds."""
        if not self.has_reasonable_vowel_ratio(name, style):
            return False
        if _LONG_CONSONANT_RUN.search(name):
            return False
        syllables = count_syllables(name)
        upper = 5 if style == 'brandable_blends' else 4
        return 1 <= syllables <= upper


def top_rejected_reasons(reasons: Iterable[str], limit: int = 6) -> List[Tuple[str, int]]:
    """Most frequent rejection reasons, ties in first-seen order."""
    return Counter(reasons).most_common(limit)
