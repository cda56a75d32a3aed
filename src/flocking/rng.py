from __future__ import annotations

import math
import random
from typing import Optional

from pygame.math import Vector2

from .vector import from_angle


class FlockRng:
    """Random source for flock construction.

    ``seed=None`` draws from OS entropy, so runs are not reproducible;
    pass an integer seed for deterministic replay.
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_range(self, low: float, high: float) -> float:
        # Half-open [low, high), unlike random.uniform
        return low + (high - low) * self._random.random()

    def next_int(self, max_value: int) -> int:
        if max_value <= 0:
            return 0
        return self._random.randrange(max_value)

    def next_unit_circle(self) -> Vector2:
        return from_angle(self.next_range(0.0, 2.0 * math.pi))
