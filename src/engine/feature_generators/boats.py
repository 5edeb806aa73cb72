"""
Boat generator.

Small fishing boats scattered over the water, with a punting pole.
"""

import numpy as np
from .base import FeatureGenerator, poly


class BoatGenerator(FeatureGenerator):
    """
    Generates a boat hull.

    Hull depth follows sqrt(sin) along its length; `sca` scales the whole
    boat and `fli` mirrors it horizontally.
    """

    def generate(
        self,
        x: float, y: float,
        seed: float,
        length: float = 120.0,
        sca: float = 1.0,
        fli: bool = False,
        **options
    ) -> str:
        """Render a boat with its bow at (x, y)."""

        direction = -1 if fli else 1
        xs = np.arange(0.0, length * sca, 5 * sca)
        with np.errstate(invalid="ignore"):
            profile = np.power(np.sin(xs / length * np.pi), 0.5)

        upper = np.column_stack([xs * direction, profile * 7 * sca])
        lower = np.column_stack([xs * direction, profile * 10 * sca])
        hull = np.vstack([upper, lower[::-1]])

        canv = self._pole(x + 20 * sca * direction, y, sca, direction)
        canv += poly(hull, xof=x, yof=y, fil="white")
        canv += self.stroke(
            hull + [x, y],
            wid=1,
            fun=lambda t: np.sin(t * np.pi * 2),
            col="rgba(100,100,100,0.4)"
        )
        return canv

    def _pole(self, x: float, y: float, sca: float, direction: int) -> str:
        lean = (10 + self.rng.random() * 10) * sca * -direction
        pole = np.array([[0.0, 5 * sca], [lean, -60 * sca]])
        return poly(pole, xof=x, yof=y, stroke_color="rgba(100,100,100,0.6)", wid=1)
