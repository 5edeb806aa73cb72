"""
Scene manager for the infinite scrolling landscape.

Owns the scene state (occupancy record, chunk store, loaded span and
viewport), grows the loaded span lazily in either direction as the
viewport moves, evicts far content and composes the visible draw list.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..procgen import PerlinNoise, SceneRandom, SCENE_PARAMETERS
from .planner import FeatureKind, MountPlanner, OccupancyRecord, PlacementDecision, PlannerConfig
from .chunk_store import Chunk, ChunkStore
from .feature_generators import (
    FeatureGenerator, MountainGenerator, FlatMountainGenerator,
    DistantMountainGenerator, WaterGenerator, BoatGenerator
)

log = logging.getLogger(__name__)

_DEFAULTS = SCENE_PARAMETERS.defaults()


@dataclass(slots=True)
class SceneConfig:
    """Viewport and chunking constants. See SCENE_PARAMETERS for ranges."""

    window_width: int = _DEFAULTS["window_width"]
    window_height: int = _DEFAULTS["window_height"]
    chunk_width: int = _DEFAULTS["chunk_width"]
    evict_multiplier: int = _DEFAULTS["evict_multiplier"]
    render_margin: float = _DEFAULTS["render_margin"]
    zoom: float = _DEFAULTS["zoom"]
    reflection_offset: float = _DEFAULTS["reflection_offset"]
    nan_sentinel: float = _DEFAULTS["nan_sentinel"]

    @classmethod
    def from_overrides(cls, **overrides) -> "SceneConfig":
        """Build a config, clamping overrides into their allowed ranges."""
        return cls(**SCENE_PARAMETERS.extract_params(overrides))


@dataclass(slots=True)
class Viewport:
    cursor_x: float
    width: float
    height: float

    @property
    def min(self) -> float:
        return self.cursor_x

    @property
    def max(self) -> float:
        return self.cursor_x + self.width


@dataclass(slots=True)
class SceneState:
    occupancy: OccupancyRecord
    chunks: ChunkStore
    viewport: Viewport
    loaded_min: float = 0.0
    loaded_max: float = 0.0
    canvas: str = ""


class SceneManager:
    """
    Infinite landscape scene with lazy bidirectional loading.

    All operations are synchronous and run to completion; callers sharing
    a manager across threads must serialise access to it as a whole.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        config: Optional[SceneConfig] = None,
        planner_config: Optional[PlannerConfig] = None,
        noise: Optional[Callable] = None
    ):
        self.config = config or SceneConfig()
        self.planner_config = planner_config or PlannerConfig()

        if self.config.window_width < 0 or self.config.window_height < 0:
            raise ValueError(
                f"Viewport size must be non-negative, got "
                f"{self.config.window_width}x{self.config.window_height}"
            )

        self._custom_noise = noise
        self.reseed(seed)

    def reseed(self, seed: Optional[int]):
        """Discard the whole scene and start a new session from `seed`."""

        self.seed = seed
        self.noise = self._custom_noise or PerlinNoise(seed)
        self.rng = SceneRandom(seed)
        self.planner = MountPlanner(self.noise, self.rng, self.planner_config)

        # Initialize feature generators
        self.generators: Dict[str, FeatureGenerator] = {
            "mountain": MountainGenerator(self.noise, self.rng),
            "water": WaterGenerator(self.noise, self.rng),
            "flatmount": FlatMountainGenerator(self.noise, self.rng),
            "distmount": DistantMountainGenerator(self.noise, self.rng),
            "boat": BoatGenerator(self.noise, self.rng),
        }

        self._builders: Dict[FeatureKind, Callable[[PlacementDecision, int], List[Chunk]]] = {
            FeatureKind.MOUNT: self._build_mount,
            FeatureKind.FLAT_MOUNT: self._build_flat_mount,
            FeatureKind.DIST_MOUNT: self._build_dist_mount,
            FeatureKind.BOAT: self._build_boat,
        }
        missing = set(FeatureKind) - set(self._builders)
        if missing:
            raise ValueError(f"No chunk builder for kinds: {sorted(k.value for k in missing)}")

        self.state = SceneState(
            occupancy=OccupancyRecord(self.planner_config.xstep),
            chunks=ChunkStore(self.config.nan_sentinel),
            viewport=Viewport(0.0, self.config.window_width, self.config.window_height),
        )

    # Viewport contract

    def needs_update(self) -> bool:
        """True unless the cursor still has planned margin on both sides."""
        state = self.state
        vp = state.viewport
        return not (state.loaded_min < vp.cursor_x < state.loaded_max - vp.width)

    def scroll(self, delta: float) -> bool:
        """
        Move the viewport and regenerate if it crossed a margin.

        Returns:
            Whether the load/evict/compose pipeline ran
        """
        self.state.viewport.cursor_x += delta
        if self.needs_update():
            self.update()
            return True
        return False

    def set_cursor(self, x: float):
        """Move the viewport without loading, evicting or composing."""
        self.state.viewport.cursor_x = x

    def update(self):
        """Run load -> evict -> compose for the current viewport."""
        vp = self.state.viewport
        self.load(vp.min, vp.max)
        self.evict()
        self.compose()

    # Pipeline stages

    def load(self, view_min: float, view_max: float) -> int:
        """
        Extend the loaded span one chunk width at a time until the range
        [view_min, view_max] has a full chunk of margin on both sides.

        Returns:
            Number of spans planned
        """

        state = self.state
        cw = self.config.chunk_width
        planned = 0

        while view_max > state.loaded_max - cw or view_min < state.loaded_min + cw:
            if view_max > state.loaded_max - cw:
                span = (state.loaded_max, state.loaded_max + cw)
                state.loaded_max += cw
            else:
                span = (state.loaded_min - cw, state.loaded_min)
                state.loaded_min -= cw

            log.debug("generating span [%s, %s)", *span)
            plan = self.planner.plan(span[0], span[1], state.occupancy)

            for index, decision in enumerate(plan):
                state.chunks.extend(self._materialize(decision, index))
            planned += 1

        return planned

    def evict(self) -> int:
        """Drop chunks more than evict_multiplier chunk widths outside the viewport."""
        vp = self.state.viewport
        max_distance = self.config.evict_multiplier * self.config.chunk_width
        return self.state.chunks.evict(vp.min, vp.max, max_distance)

    def compose(self) -> str:
        """Rebuild the render buffer from chunks near the viewport."""
        vp = self.state.viewport
        self.state.canvas = self.state.chunks.compose(vp.min, vp.max, self.config.render_margin)
        return self.state.canvas

    # Chunk materialization

    def _materialize(self, decision: PlacementDecision, index: int) -> List[Chunk]:
        builder = self._builders.get(decision.kind)
        if builder is None:
            log.warning("no chunk builder for placement kind %r, skipped", decision.kind)
            return []

        try:
            return builder(decision, index)
        except Exception:
            log.exception("generator failed for %s at x=%.1f, skipped", decision.kind.value, decision.x)
            return []

    def _build_mount(self, d: PlacementDecision, index: int) -> List[Chunk]:
        mountain = self.generators["mountain"].generate(d.x, d.y, index * 2 * self.rng.random())
        water = self.generators["water"].generate(d.x, d.y, index * 2)
        # Reflection sorts beneath everything else
        return [
            Chunk(d.kind, d.x, d.y, mountain),
            Chunk(d.kind, d.x, d.y - self.config.reflection_offset, water),
        ]

    def _build_flat_mount(self, d: PlacementDecision, index: int) -> List[Chunk]:
        payload = self.generators["flatmount"].generate(
            d.x, d.y, 2 * self.rng.random() * math.pi,
            width=self.rng.uniform(600, 1000),
            height=100,
            cho=self.rng.uniform(0.5, 0.7),
        )
        return [Chunk(d.kind, d.x, d.y, payload)]

    def _build_dist_mount(self, d: PlacementDecision, index: int) -> List[Chunk]:
        payload = self.generators["distmount"].generate(
            d.x, d.y, self.rng.random() * 100,
            height=150,
            length=self.rng.choice([500, 1000, 1500]),
        )
        return [Chunk(d.kind, d.x, d.y, payload)]

    def _build_boat(self, d: PlacementDecision, index: int) -> List[Chunk]:
        payload = self.generators["boat"].generate(
            d.x, d.y, self.rng.random(),
            sca=d.y / 800,
            fli=self.rng.choice([True, False]),
        )
        return [Chunk(d.kind, d.x, d.y, payload)]

    # Output

    def view_box(self) -> str:
        """SVG viewBox for the current viewport: 'x 0 width/zoom height/zoom'."""
        vp = self.state.viewport
        zoom = self.config.zoom
        return f"{vp.cursor_x:.12g} 0 {vp.width / zoom:.12g} {vp.height / zoom:.12g}"

    def svg(self) -> str:
        """Full SVG document wrapping the render buffer."""
        vp = self.state.viewport
        return (
            f"<svg id='SVG' xmlns='http://www.w3.org/2000/svg' "
            f"width='{vp.width:.12g}' height='{vp.height:.12g}' "
            f"style='mix-blend-mode:multiply;' viewBox='{self.view_box()}'>"
            f"<g id='G' transform='translate(0,0)'>{self.state.canvas}</g></svg>"
        )

    # Read-only accessors

    @property
    def canvas(self) -> str:
        return self.state.canvas

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        return tuple(self.state.chunks)

    @property
    def loaded_span(self) -> Tuple[float, float]:
        return self.state.loaded_min, self.state.loaded_max

    @property
    def viewport(self) -> Viewport:
        vp = self.state.viewport
        return Viewport(vp.cursor_x, vp.width, vp.height)

    @property
    def occupancy(self) -> Dict[int, int]:
        return dict(self.state.occupancy.items())

    def stats(self) -> Dict:
        """Summary of the scene for diagnostics."""

        per_kind = {kind.value: 0 for kind in FeatureKind}
        for chunk in self.state.chunks:
            per_kind[chunk.kind.value] += 1

        vp = self.state.viewport
        return {
            "seed": self.seed,
            "cursor_x": vp.cursor_x,
            "loaded_span": [self.state.loaded_min, self.state.loaded_max],
            "chunk_count": len(self.state.chunks),
            "chunks_by_kind": per_kind,
            "occupied_buckets": sum(1 for _, count in self.state.occupancy.items() if count > 0),
            "tracked_buckets": len(self.state.occupancy),
            "canvas_length": len(self.state.canvas),
            "view_box": self.view_box(),
        }
