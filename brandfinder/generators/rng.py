"""Seeded pseudo-random source for reproducible generation."""

from typing import Sequence, TypeVar

T = TypeVar('T')

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash over the UTF-8 bytes of ``text``."""
    value = _FNV_OFFSET
    for byte in text.encode('utf-8'):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK32
    return value


class SeededRandom:
    """xorshift32 generator seeded from a string.

    Instances are independent; nothing here touches the ``random`` module's
    global state, so concurrent runs never interfere.
    """

    def __init__(self, seed: str):
        self.seed = seed
        # xorshift never leaves the all-zero state
        self._state = fnv1a_32(seed) or 0x9E3779B9

    def next_uint32(self) -> int:
        x = self._state
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        self._state = x & _MASK32
        return self._state

    def random(self) -> float:
        """Float in [0, 1)."""
        return self.next_uint32() / 4294967296.0

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("choice from an empty sequence")
        return items[int(self.random() * len(items))]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        total = sum(weights)
        if not items or total <= 0:
            raise IndexError("weighted choice needs positive weights")
        pick = self.random() * total
        for item, weight in zip(items, weights):
            pick -= weight
            if pick < 0:
                return item
        return items[-1]
