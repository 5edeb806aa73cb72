"""
Feature generators for landscape content.

Each generator turns a placement into an SVG fragment.
"""

from .base import FeatureGenerator, poly
from .mountains import MountainGenerator, FlatMountainGenerator, DistantMountainGenerator
from .water import WaterGenerator
from .boats import BoatGenerator

__all__ = [
    "FeatureGenerator", "poly", "MountainGenerator", "FlatMountainGenerator",
    "DistantMountainGenerator", "WaterGenerator", "BoatGenerator"
]
