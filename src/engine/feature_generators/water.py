"""
Water generator.

Creates the reflective water strokes drawn beneath each mountain.
"""

import numpy as np
from .base import FeatureGenerator


class WaterGenerator(FeatureGenerator):
    """
    Generates a water surface as clusters of wavy horizontal strokes.
    """

    def generate(
        self,
        x: float, y: float,
        seed: float,
        height: float = 2.0,
        length: float = 800.0,
        clusters: int = 10,
        **options
    ) -> str:
        """Render water centred on (x, y)."""

        waves = []
        yk = 0.0

        for _ in range(clusters):
            xk = (self.rng.random() - 0.5) * (length / 8)
            yk += self.rng.random() * 5
            lk = length / 4 + self.rng.random() * (length / 4)

            js = np.arange(-lk, lk, 5.0)
            waves.append(np.column_stack([
                js + xk,
                np.sin(js * 0.2) * height * self.noise(js * 0.1) - 20 + yk,
            ]))

        canv = ""
        for wave in waves[1:]:
            alpha = 0.3 + self.rng.random() * 0.3
            canv += self.stroke(wave + [x, y], col=f"rgba(100,100,100,{alpha:.3f})", wid=1)

        return canv
