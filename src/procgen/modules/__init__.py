"""
Landscape generation modules.

- noise: seeded lattice noise evaluated on scalars or numpy arrays
"""

from . import noise
from .noise import PerlinNoise

__all__ = ["noise", "PerlinNoise"]
