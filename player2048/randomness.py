from collections import deque
from typing import Optional, Tuple

import numpy as np

from player2048 import config


class ReplayRandom:
    def __init__(self, seed: Optional[int] = None):
        self._pending = deque()
        self._rng = np.random.default_rng(seed)

    def reseed(self, seed: Optional[int] = None) -> None:
        """Drop pending values and start a fresh generator (OS entropy if no seed)."""
        self._pending.clear()
        self._rng = np.random.default_rng(seed)

    def reserve(self, count: int) -> None:
        """Make sure at least `count` values are pending."""
        missing = count - len(self._pending)
        if missing > 0:
            values = self._rng.integers(0, config.RAW_RANDOM_LIMIT, size=missing)
            self._pending.extend(int(v) for v in values)

    def draw(self) -> int:
        """Pop the next raw value, refilling first if the queue is empty."""
        self.reserve(1)
        return self._pending.popleft()

    def pending(self) -> int:
        return len(self._pending)

    def snapshot(self) -> Tuple[int, ...]:
        return tuple(self._pending)

    def restore(self, snapshot: Tuple[int, ...]) -> None:
        self._pending = deque(snapshot)
