"""
Procedural primitives for landscape generation.

This module provides:
- Seeded, continuous noise fields usable on scalars and numpy arrays
- Scene-wide seeded randomness
- Parameter specifications for planner and scene tuning
"""

from .modules.noise import PerlinNoise
from .prng import SceneRandom
from .grammar import ParameterSpec, PLANNER_PARAMETERS, SCENE_PARAMETERS

__all__ = [
    "PerlinNoise",
    "SceneRandom",
    "ParameterSpec",
    "PLANNER_PARAMETERS",
    "SCENE_PARAMETERS",
]
