"""Word-level operations used to compose candidate names."""

import math
import re
from typing import Iterable

VOWELS = 'aeiou'
CONSONANTS = set('bcdfghjklmnpqrstvwxyz')

UGLY_COLLISION = re.compile(r'(xxx|kkk|qzx|xq|aaae|iiia|ooo|vvv)|(rnm|mrn)')
_NON_NAME = re.compile(r'[^a-z0-9]')
_TRIPLED = re.compile(r'([a-z])\1{2,}')
_CVC = re.compile(r'([bcdfghjklmnpqrstvwxyz])[aeiou]([bcdfghjklmnpqrstvwxyz])')


def clean_name(raw: str) -> str:
    return _NON_NAME.sub('', raw.lower())


def is_consonant(char: str) -> bool:
    return char in CONSONANTS


def merge_readable(first: str, second: str) -> str:
    """Join two fragments so the seam stays pronounceable.

    A letter shared across the boundary is dropped once; two consonants
    meeting at the seam get a linking ``a``.
    """
    if not first:
        return second
    if not second:
        return first

    left, right = first.lower(), second.lower()
    if left[-1] == right[0]:
        right = right[1:]
    if not right:
        return left

    if is_consonant(left[-1]) and is_consonant(right[0]):
        return f"{left}a{right}"
    return left + right


def blend(first: str, second: str) -> str:
    """Portmanteau: the front ~58% of one word onto the back ~58% of the other."""
    left = first[:max(2, math.ceil(len(first) * 0.58))]
    right = second[max(0, math.floor(len(second) * 0.42)):]
    return merge_readable(left, right)


def wordplay_blend(first: str, second: str) -> str:
    if not first:
        return second
    if not second:
        return first

    left = first if len(first) <= 4 else first[:max(3, len(first) - 1)]
    right = second if len(second) <= 4 else second[1:]
    joint = merge_readable(left, right)

    if len(joint) >= 5 and not re.search(r'[aeiouy]', joint[-2:]):
        return f"{joint}o"
    return joint


def soft_connector(first: str, second: str, connector: str) -> str:
    """Glue two roots with a single vowel, trimming the head of the second."""
    cut = min(2, max(1, len(second) - 3))
    return f"{first}{connector}{second[cut:]}"


def real_word_twist(base: str) -> str:
    word = clean_name(base)
    if len(word) <= 3:
        return word
    if word.endswith('t'):
        return f"{word}ry"
    if word.endswith('s'):
        return f"{word}io"
    if word.endswith('n'):
        return f"{word}ly"
    return f"{word}ry"


def swap_vowel(word: str) -> str:
    """Replace the first interior vowel with the first different vowel."""
    chars = list(word)
    for i in range(1, len(chars) - 1):
        if chars[i] in VOWELS:
            chars[i] = next(v for v in VOWELS if v != chars[i])
            return ''.join(chars)
    return word


def omit_letter(word: str) -> str:
    if len(word) <= 4:
        return word
    cut = len(word) // 2 + (-1 if len(word) > 7 else 0)
    return word[:cut] + word[cut + 1:]


def compact(name: str, target_length: int, filler_words: Iterable[str] = ()) -> str:
    """Shrink ``name`` towards ``target_length``.

    Strips a trailing filler word, collapses tripled letters, then removes
    the vowel from consonant-vowel-consonant runs one at a time. Anything
    still too long is truncated.
    """
    if len(name) <= target_length:
        return name

    compacted = name
    fillers = [w for w in filler_words if w]
    if fillers:
        compacted = re.sub(f"({'|'.join(map(re.escape, fillers))})$", '', compacted)
    compacted = _TRIPLED.sub(r'\1', compacted)

    while len(compacted) > target_length and len(compacted) > 4:
        reduced = _CVC.sub(r'\1\2', compacted, count=1)
        if reduced == compacted:
            break
        compacted = reduced

    return compacted[:target_length]


def has_ugly_collision(name: str) -> bool:
    return UGLY_COLLISION.search(name) is not None


def place_keyword(base: str, keyword: str, position: str, coin: float) -> str:
    """Attach ``keyword`` at the requested side; ``anywhere`` uses ``coin``."""
    if not keyword:
        return base
    if position == 'prefix':
        return merge_readable(keyword, base)
    if position == 'suffix':
        return merge_readable(base, keyword)
    return merge_readable(keyword, base) if coin > 0.5 else merge_readable(base, keyword)
