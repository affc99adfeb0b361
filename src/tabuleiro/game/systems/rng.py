"""Randomness source for dice rolling.

Both roll systems draw one ``randint(1, faces)`` per die, left to right, so a
seeded source replays a sequence of rolls exactly.
"""

from random import Random
from typing import Protocol, runtime_checkable

from tabuleiro.config import get_settings


@runtime_checkable
class RandomnessSource(Protocol):
    """Uniform integer generator consumed by the rollers."""

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        ...


class SeededRandom:
    """Wrapper around random.Random; a fixed seed gives a reproducible roll sequence."""

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._random = Random(seed)

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)


def default_source() -> SeededRandom:
    """Create a randomness source seeded from settings (unseeded when not configured)."""
    return SeededRandom(get_settings().rng_seed)
