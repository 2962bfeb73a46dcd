# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Pluggable random source and the roll helpers built on it.

Every probabilistic function in the project takes an ``rng`` argument that
satisfies :class:`RandomSource`.  ``random.Random`` already does, so a seeded
instance gives deterministic replay and tests can substitute a scripted
source.
"""

from __future__ import annotations

import random
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float:
        """Next uniform float in [0, 1)."""
        ...

    def randint(self, a: int, b: int) -> int:
        """Next uniform int in [a, b], both ends inclusive."""
        ...


def make_rng(seed: int | None = None) -> random.Random:
    """Return a seeded ``random.Random``; a fresh seed is drawn when omitted."""
    if seed is None:
        seed = random.randint(0, 2**31 - 1)
    return random.Random(seed)


def roll_d100(rng: RandomSource) -> int:
    """Roll an integer in [1, 100]."""
    return rng.randint(1, 100)


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    """Uniformly pick one element of a non-empty sequence."""
    return items[rng.randint(0, len(items) - 1)]


def sample_distinct(rng: RandomSource, items: Sequence[T], k: int) -> list[T]:
    """Pick *k* distinct elements, in draw order."""
    pool = list(items)
    chosen = []
    for _ in range(min(k, len(pool))):
        chosen.append(pool.pop(rng.randint(0, len(pool) - 1)))
    return chosen


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))
