"""Random number sources for combat resolution.

Two implementations share one interface:
  SeededRNG   - linear congruential generator; identical seeds give identical
                streams on every run and every platform.
  EntropyRNG  - backed by the operating system's entropy pool; used for
                ordinary PvE fights where replay is not needed.

LCG parameters (Numerical Recipes):
  state = (state * 1664525 + 1013904223) mod 2**32
  value = state / 2**32
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from typing import Protocol

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32


class RandomSource(Protocol):
    """Anything that can produce the next float in [0, 1)."""

    def next(self) -> float: ...

    def next_float(self, minimum: float, maximum: float) -> float: ...

    def next_int(self, minimum: int, maximum: int) -> int: ...


class _RangeHelpers(ABC):
    @abstractmethod
    def next(self) -> float:
        """Next value in [0, 1)."""

    def next_float(self, minimum: float, maximum: float) -> float:
        """Uniform float in [minimum, maximum)."""
        return minimum + self.next() * (maximum - minimum)

    def next_int(self, minimum: int, maximum: int) -> int:
        """Uniform integer in [minimum, maximum] (both inclusive)."""
        return math.floor(self.next_float(minimum, maximum + 1))


class SeededRNG(_RangeHelpers):
    """Deterministic LCG. Not suitable for anything security related."""

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._state = seed % LCG_MODULUS

    @property
    def seed(self) -> int:
        return self._seed

    def next(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS


class EntropyRNG(_RangeHelpers):
    """Non-reproducible source drawing from os.urandom via SystemRandom."""

    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def next(self) -> float:
        return self._rng.random()


def create_rng(seed: int | None = None) -> RandomSource:
    """Return a SeededRNG when a seed is given, otherwise an EntropyRNG."""
    if seed is None:
        return EntropyRNG()
    return SeededRNG(seed)
