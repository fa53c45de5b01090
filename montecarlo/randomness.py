"""Injectable random source for trial functions.

Trial functions receive randomness through a `RandomSource` instead of a
process-wide generator, so runs are reproducible from a seed.

NumPy `Generator` objects are not safe to share between threads. A
`RandomSource` serialises draws with a lock, which makes one instance safe to
hand to every worker of a run. For contention-free streams, `spawn()` derives
independent children (one per branch or per worker).
"""

from __future__ import annotations

import threading

import numpy as np


class RandomSource:
    def __init__(self, seed: int | np.random.SeedSequence | None = None) -> None:
        if isinstance(seed, np.random.SeedSequence):
            self._seed_seq = seed
        else:
            self._seed_seq = np.random.SeedSequence(seed)
        self._rng = np.random.default_rng(self._seed_seq)
        self._lock = threading.Lock()

    def uniform(self, low: float, high: float) -> float:
        """A float in [low, high)."""
        with self._lock:
            u = self._rng.random()
        return float(low + u * (high - low))

    def normal(self, mean: float, std: float) -> float:
        with self._lock:
            z = self._rng.standard_normal()
        return float(z * std + mean)

    def spawn(self, n: int) -> list["RandomSource"]:
        with self._lock:
            children = self._seed_seq.spawn(n)
        return [RandomSource(child) for child in children]
