"""
RNG Stream - the single seeded source of randomness for a match.

Every randomness-consuming operation (shuffles, random targets, bounce
picks, choice fallbacks) draws from the match's stream in resolution
order. Nothing reads wall-clock time.
"""

from __future__ import annotations
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class RngStream:
    """Seeded deterministic generator with a call counter."""

    def __init__(self, seed: int):
        self.seed = seed
        self.calls = 0
        self._random = random.Random(seed)

    def next_float(self) -> float:
        self.calls += 1
        return self._random.random()

    def next_int(self, low: int, high: int) -> int:
        """Inclusive integer in [low, high]."""
        if high < low:
            raise ValueError(f"Empty range [{low}, {high}]")
        self.calls += 1
        return self._random.randint(low, high)

    def pick(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot pick from an empty sequence")
        return items[self.next_int(0, len(items) - 1)]

    def shuffle(self, items: list[T]) -> list[T]:
        """Shuffle in place (Fisher-Yates from the end) and return the list."""
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(0, i)
            items[i], items[j] = items[j], items[i]
        return items

    def __repr__(self) -> str:
        return f"RngStream(seed={self.seed}, calls={self.calls})"
