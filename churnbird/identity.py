"""Seeded random source for series identities and values."""
import string
from typing import List

import numpy as np

LETTERS = string.ascii_lowercase
MAX_STRING_LENGTH = 31
SEED_MASK = 0xFFFFFFFFFFFFFFFF


class IdentityGenerator:
    """
    Owns the single random stream behind a population.

    Every draw made while building or mutating a population goes through one
    instance, so the whole history is reproducible from the seed and the order
    of calls. Not thread-safe: callers hold the population lock.
    """

    def __init__(self, seed: int):
        self.seed = seed
        # numpy only takes non-negative seeds; negative int64 seeds wrap
        self.rng = np.random.default_rng(seed & SEED_MASK)

    def integer(self, bound: int) -> int:
        """Uniform integer in [0, bound)."""
        return int(self.rng.integers(bound))

    def integer_between(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]."""
        return int(self.rng.integers(low, high, endpoint=True))

    def letter(self, count: int = len(LETTERS)) -> str:
        """One of the first `count` lowercase letters."""
        return LETTERS[self.integer(count)]

    def string(self) -> str:
        """Random lowercase string, length uniform in [1, 31]."""
        length = self.integer(MAX_STRING_LENGTH) + 1
        indices = self.rng.integers(len(LETTERS), size=length)
        return "".join(LETTERS[i] for i in indices)

    def normals(self, count: int) -> List[float]:
        """`count` standard-normal draws in order."""
        return self.rng.standard_normal(count).tolist()
