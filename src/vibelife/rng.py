from __future__ import annotations

import math
import random
from typing import Optional


def entropy_seed() -> int:
    return random.SystemRandom().getrandbits(63)


class DeterministicRng:
    def __init__(self, seed: Optional[int] = None):
        self._seed = entropy_seed() if seed is None else int(seed)
        self._random = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_centered(self, width: float) -> float:
        """Uniform value in [-width / 2, width / 2)."""
        return (self._random.random() - 0.5) * width

    def next_angle(self) -> float:
        return self._random.random() * 2.0 * math.pi
