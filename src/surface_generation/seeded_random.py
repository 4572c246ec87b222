"""Deterministic random streams for surface generation.

The noise permutation table of a body surface is drawn from a
``SeededRandom`` built from a seed that is itself a pure function of the
body's identifying coordinates. Nothing here touches global random state,
so two generators built from the same seed always produce the same sequence
on every platform.
"""

import math
from typing import MutableSequence, TypeVar

T = TypeVar("T")

# Linear congruential constants; the modulus keeps every intermediate
# product well inside exact integer (and double) range.
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

SEED_MODULUS = 2147483647


def derive_seed(seed_x: float, seed_y: float, body_index: int,
                satellite_index: int = 0) -> int:
    """Build the surface seed of a body from its identifying coordinates.

    Args:
        seed_x: X coordinate of the originating star
        seed_y: Y coordinate of the originating star
        body_index: Index of the body in its system
        satellite_index: 0 for a planet, 1.. for its satellites

    Returns:
        Non-negative 31-bit seed
    """
    x = math.floor(seed_x * 1000) % 10000
    y = math.floor(seed_y * 1000) % 10000
    m = int(satellite_index) % 1000
    return (x * 31 + y * 17 + int(body_index) * 7 + m * 13) % SEED_MODULUS


class SeededRandom:
    """Reproducible float stream in [0, 1) driven by a 32-bit seed."""

    def __init__(self, seed: int):
        self.seed = int(seed) & 0xFFFFFFFF
        self._state = self.seed

    def next(self) -> float:
        """Advance the stream and return the next value in [0, 1)."""
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Shuffle ``items`` in place (Fisher-Yates) and return it."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items
