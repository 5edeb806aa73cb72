"""
Noise functions for landscape generation.

Layered value noise over a seeded lattice table, evaluated with numpy so
the same call works for a single coordinate or a whole array of them:
- PerlinNoise: octave-summed lattice noise in [0, 1)
- scaled_cosine interpolant
"""

import numpy as np
from typing import Optional, Union


ArrayLike = Union[float, np.ndarray]

PERLIN_YWRAPB = 4
PERLIN_YWRAP = 1 << PERLIN_YWRAPB
PERLIN_ZWRAPB = 8
PERLIN_ZWRAP = 1 << PERLIN_ZWRAPB
PERLIN_SIZE = 4095


def scaled_cosine(t: np.ndarray) -> np.ndarray:
    """Cosine interpolation weight, 0 at t=0 and 1 at t=1."""
    return 0.5 * (1.0 - np.cos(t * np.pi))


class PerlinNoise:
    """
    Seeded, continuous noise field.

    Values are deterministic for a given seed and lie in [0, 1).
    Negative coordinates are mirrored, so noise(-x) == noise(x).
    """

    def __init__(self, seed: Optional[int] = None, octaves: int = 4, falloff: float = 0.5):
        self.octaves = octaves
        self.falloff = falloff
        self.seed = seed
        self.table = None
        self.noise_seed(seed)

    def noise_seed(self, seed: Optional[int]):
        """Refill the lattice table from a seed (None draws fresh entropy)."""
        self.seed = seed
        rng = np.random.default_rng(seed)
        self.table = rng.random(PERLIN_SIZE + 1)

    def noise_detail(self, octaves: int, falloff: float):
        """Configure octave count and per-octave amplitude falloff."""
        if octaves > 0:
            self.octaves = octaves
        if falloff > 0:
            self.falloff = falloff

    def __call__(self, x: ArrayLike, y: ArrayLike = 0.0, z: ArrayLike = 0.0) -> ArrayLike:
        return self.noise(x, y, z)

    def noise(self, x: ArrayLike, y: ArrayLike = 0.0, z: ArrayLike = 0.0) -> ArrayLike:
        """
        Evaluate the noise field.

        Args:
            x, y, z: Coordinates (scalars or broadcastable arrays)

        Returns:
            float for scalar input, otherwise an array of the broadcast shape
        """

        scalar = np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0
        x, y, z = np.broadcast_arrays(
            np.abs(np.asarray(x, dtype=np.float64)),
            np.abs(np.asarray(y, dtype=np.float64)),
            np.abs(np.asarray(z, dtype=np.float64)),
        )

        xi = np.floor(x).astype(np.int64)
        yi = np.floor(y).astype(np.int64)
        zi = np.floor(z).astype(np.int64)
        xf = x - xi
        yf = y - yi
        zf = z - zi

        table = self.table
        result = np.zeros(x.shape, dtype=np.float64)
        ampl = 0.5

        for _ in range(self.octaves):
            of = xi + (yi << PERLIN_YWRAPB) + (zi << PERLIN_ZWRAPB)
            rxf = scaled_cosine(xf)
            ryf = scaled_cosine(yf)

            n1 = table[of & PERLIN_SIZE]
            n1 = n1 + rxf * (table[(of + 1) & PERLIN_SIZE] - n1)
            n2 = table[(of + PERLIN_YWRAP) & PERLIN_SIZE]
            n2 = n2 + rxf * (table[(of + PERLIN_YWRAP + 1) & PERLIN_SIZE] - n2)
            n1 = n1 + ryf * (n2 - n1)

            of = of + PERLIN_ZWRAP
            n2 = table[of & PERLIN_SIZE]
            n2 = n2 + rxf * (table[(of + 1) & PERLIN_SIZE] - n2)
            n3 = table[(of + PERLIN_YWRAP) & PERLIN_SIZE]
            n3 = n3 + rxf * (table[(of + PERLIN_YWRAP + 1) & PERLIN_SIZE] - n3)
            n2 = n2 + ryf * (n3 - n2)

            n1 = n1 + scaled_cosine(zf) * (n2 - n1)
            result += n1 * ampl
            ampl *= self.falloff

            # Next octave doubles the lattice frequency
            xi = xi << 1
            xf = xf * 2
            yi = yi << 1
            yf = yf * 2
            zi = zi << 1
            zf = zf * 2

            carry = xf >= 1.0
            xi = xi + carry
            xf = xf - carry
            carry = yf >= 1.0
            yi = yi + carry
            yf = yf - carry
            carry = zf >= 1.0
            zi = zi + carry
            zf = zf - carry

        if scalar:
            return float(result)
        return result
