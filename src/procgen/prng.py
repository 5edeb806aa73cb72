"""
Seeded randomness shared by the planner and the content generators.
"""

import numpy as np
from typing import Optional, Sequence, TypeVar


T = TypeVar("T")


class SceneRandom:
    """
    Thin wrapper around a numpy Generator.

    A scene owns exactly one instance; every draw goes through it in a fixed
    order so a scene is reproducible from its seed.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self.rng.random())

    def uniform(self, low: float, high: float) -> float:
        return float(self.rng.uniform(low, high))

    def choice(self, options: Sequence[T]) -> T:
        """Pick one element of a non-empty sequence."""
        return options[int(self.rng.integers(len(options)))]


    def normal(self) -> float:
        """Standard normal draw."""
        return float(self.rng.standard_normal())
