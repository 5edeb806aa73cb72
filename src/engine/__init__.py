"""
Infinite landscape scene engine.

Plans feature placements over unbounded horizontal spans, turns them into
draw-ordered SVG chunks and serves the window visible to a viewport.
"""

from .planner import (
    FeatureKind, PlacementDecision, PlannerConfig,
    OccupancyRecord, PlanningFields, MountPlanner
)
from .chunk_store import Chunk, ChunkStore, sanitize_payload, has_invalid_numbers
from .scene_manager import SceneConfig, SceneManager, SceneState, Viewport

__all__ = [
    "FeatureKind", "PlacementDecision", "PlannerConfig",
    "OccupancyRecord", "PlanningFields", "MountPlanner",
    "Chunk", "ChunkStore", "sanitize_payload", "has_invalid_numbers",
    "SceneConfig", "SceneManager", "SceneState", "Viewport",
]
