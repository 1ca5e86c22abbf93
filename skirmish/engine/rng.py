from typing import Protocol, Sequence, TypeVar

import numpy as np

T = TypeVar("T")

class RandomSource(Protocol):
    """Anything that can pick an index in [0, n)."""

    def index(self, n: int) -> int: ...

class DRNG:
    """Deterministic Random Number Generator wrapper."""

    def __init__(self, seed: int):
        self.seed = seed
        self.g = np.random.Generator(np.random.PCG64(seed))

    def index(self, n: int) -> int:
        """Return a uniformly random integer in [0, n)."""
        if n <= 0:
            raise ValueError(f"cannot pick from {n} options")
        return int(self.g.integers(0, n))

def pick(rng: RandomSource, options: Sequence[T]) -> T:
    """Choose one element of a non-empty sequence uniformly."""
    return options[rng.index(len(options))]
