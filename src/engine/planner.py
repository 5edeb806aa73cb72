"""
Placement planner for landscape features.

Decides where mountains, distant ridges, filler hills and boats go for a
horizontal span that has not been planned yet. Uses noise-derived fields
for peak detection and a sparse occupancy record to find empty stretches.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Union

import numpy as np

from ..procgen import SceneRandom, PLANNER_PARAMETERS

log = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

# Vertical placement of the non-peak features
RIDGE_BASE_Y = 280.0
RIDGE_Y_SPREAD = 50.0
FILLER_BASE_Y = 700.0
FILLER_ROW_GAP = 50.0
CRAFT_BASE_Y = 300.0
CRAFT_Y_SPREAD = 390.0


class NoiseEvaluator(Protocol):
    def __call__(self, x: ArrayLike, y: ArrayLike = 0.0, z: ArrayLike = 0.0) -> ArrayLike: ...


class FeatureKind(str, Enum):
    """Closed set of feature kinds the planner can emit."""

    MOUNT = "mount"
    DIST_MOUNT = "distmount"
    FLAT_MOUNT = "flatmount"
    BOAT = "boat"


@dataclass(slots=True, frozen=True)
class PlacementDecision:
    kind: FeatureKind
    x: float
    y: float
    intensity: float


_DEFAULTS = PLANNER_PARAMETERS.defaults()


@dataclass(slots=True)
class PlannerConfig:
    """Planner constants. See PLANNER_PARAMETERS for ranges."""

    xstep: int = _DEFAULTS["xstep"]
    sample_frequency: float = _DEFAULTS["sample_frequency"]
    peak_threshold: float = _DEFAULTS["peak_threshold"]
    locmax_radius: int = _DEFAULTS["locmax_radius"]
    candidate_step: int = _DEFAULTS["candidate_step"]
    envelope_height: float = _DEFAULTS["envelope_height"]
    peak_y_offset: float = _DEFAULTS["peak_y_offset"]
    jitter: float = _DEFAULTS["jitter"]
    min_distance: float = _DEFAULTS["min_distance"]
    footprint: float = _DEFAULTS["footprint"]
    ridge_interval: int = _DEFAULTS["ridge_interval"]
    filler_probability: float = _DEFAULTS["filler_probability"]
    filler_jitter: float = _DEFAULTS["filler_jitter"]
    filler_max_count: int = _DEFAULTS["filler_max_count"]
    craft_probability: float = _DEFAULTS["craft_probability"]
    craft_spacing: float = _DEFAULTS["craft_spacing"]

    @classmethod
    def from_overrides(cls, **overrides) -> "PlannerConfig":
        """Build a config, clamping overrides into their allowed ranges."""
        return cls(**PLANNER_PARAMETERS.extract_params(overrides))


class OccupancyRecord:
    """
    Sparse bucketed coverage counter.

    Buckets are floor(x / step). Counts only ever grow, and only around
    accepted mountains. Memory tracks visited buckets, not distance travelled.
    """

    def __init__(self, step: float = _DEFAULTS["xstep"]):
        self.step = step
        self._counts: Dict[int, int] = {}

    def bucket(self, x: float) -> int:
        return math.floor(x / self.step)

    def ensure(self, positions: Iterable[float]):
        """Register buckets for the given positions with a zero count."""
        for x in positions:
            self._counts.setdefault(self.bucket(x), 0)

    def count(self, x: float) -> int:
        return self._counts.get(self.bucket(x), 0)

    def mark(self, x: float, radius: float):
        """Increment every bucket within the footprint around x."""
        start = math.floor((x - radius) / self.step)
        stop = math.ceil((x + radius) / self.step)
        for k in range(start, stop):
            self._counts[k] = self._counts.get(k, 0) + 1

    def items(self):
        return self._counts.items()

    def __len__(self) -> int:
        return len(self._counts)


class PlanningFields:
    """
    Helper fields derived from a single seeded noise evaluator.

    The peak field accepts a vertical coordinate but only samples the
    horizontal one; locating maxima along y is therefore degenerate.
    """

    ENVELOPE_FREQUENCY = 0.01
    PEAK_FLOOR = 0.55

    def __init__(self, noise: NoiseEvaluator, sample_frequency: float = _DEFAULTS["sample_frequency"]):
        self.noise = noise
        self.sample_frequency = sample_frequency

    @staticmethod
    def _out(value):
        return float(value) if np.ndim(value) == 0 else value

    def peak(self, x: ArrayLike, y: ArrayLike = 0.0) -> ArrayLike:
        x, _ = np.broadcast_arrays(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))
        value = np.maximum(self.noise(x * self.sample_frequency) - self.PEAK_FLOOR, 0.0) * 2.0
        return self._out(value)

    def falloff(self, x: ArrayLike) -> ArrayLike:
        x = np.asarray(x, dtype=np.float64)
        return self._out(1.0 - np.asarray(self.noise(x * self.sample_frequency)))

    def secondary_peak(self, x: ArrayLike, y: ArrayLike = 0.0) -> ArrayLike:
        x, _ = np.broadcast_arrays(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))
        value = np.maximum(self.noise(x * self.sample_frequency * 2, 2.0) - self.PEAK_FLOOR, 0.0) * 2.0
        return self._out(value)

    def envelope(self, x: ArrayLike) -> ArrayLike:
        x = np.asarray(x, dtype=np.float64)
        return self._out(np.asarray(self.noise(x * self.ENVELOPE_FREQUENCY, math.pi)))

    def sample(self, x: float) -> Dict[str, float]:
        """All four fields at one horizontal position."""
        return {
            "peak": self.peak(x),
            "falloff": self.falloff(x),
            "secondary_peak": self.secondary_peak(x),
            "envelope": self.envelope(x),
        }


class MountPlanner:
    """
    Plans feature placements for one span at a time.

    Holds no state between calls; the occupancy record handed to plan()
    is the only thing it mutates.
    """

    def __init__(
        self,
        noise: NoiseEvaluator,
        rng: SceneRandom,
        config: Optional[PlannerConfig] = None
    ):
        self.rng = rng
        self.config = config or PlannerConfig()
        self.fields = PlanningFields(noise, self.config.sample_frequency)

    def plan(
        self,
        span_min: float,
        span_max: float,
        occupancy: OccupancyRecord
    ) -> List[PlacementDecision]:
        """
        Plan the features of a new span.

        Args:
            span_min: Left edge of the span (inclusive)
            span_max: Right edge of the span (exclusive)
            occupancy: Shared occupancy record, updated in place

        Returns:
            Accepted decisions, mountains and ridges first, then filler
            hills, then boats
        """

        if not span_max > span_min:
            return []

        cfg = self.config
        positions = []
        x = span_min
        while x < span_max:
            positions.append(x)
            x += cfg.xstep

        occupancy.ensure(positions)
        accepted: List[PlacementDecision] = []

        for x in positions:
            self._place_peaks(x, occupancy, accepted)
            self._place_ridge(x, accepted)

        self._fill_gaps(positions, occupancy, accepted)
        self._scatter_craft(positions, accepted)

        log.debug("planned span [%s, %s): %d decisions", span_min, span_max, len(accepted))
        return accepted

    def _place_peaks(self, x: float, occupancy: OccupancyRecord, accepted: List[PlacementDecision]):
        cfg = self.config
        top = self.fields.envelope(x) * cfg.envelope_height
        if top <= 0:
            return

        heights = np.arange(0.0, top, cfg.candidate_step)
        maxima = self._local_maxima(x, heights)
        intensities = self.fields.peak(np.full(heights.shape, x), heights)

        for y, intensity in zip(heights[maxima], intensities[maxima]):
            xof = x + 2 * (self.rng.random() - 0.5) * cfg.jitter
            decision = PlacementDecision(FeatureKind.MOUNT, xof, float(y) + cfg.peak_y_offset, float(intensity))
            if self._try_add(accepted, decision, cfg.min_distance):
                occupancy.mark(xof, cfg.footprint)

    def _local_maxima(self, x: float, heights: np.ndarray) -> np.ndarray:
        """Mask of heights where (x, y) tops its square neighbourhood and the threshold."""
        cfg = self.config
        r = cfg.locmax_radius
        z0 = self.fields.peak(np.full(heights.shape, x), heights)
        mask = z0 > cfg.peak_threshold
        if r > 0 and mask.any():
            offsets = np.arange(-r, r, dtype=np.float64)
            xs = x + offsets[None, :, None]
            ys = heights[:, None, None] + offsets[None, None, :]
            neighbourhood = self.fields.peak(xs, ys).reshape(len(heights), -1)
            mask &= neighbourhood.max(axis=1) <= z0
        return mask

    def _place_ridge(self, x: float, accepted: List[PlacementDecision]):
        cfg = self.config
        if abs(x) % cfg.ridge_interval < max(1, cfg.xstep - 1):
            decision = PlacementDecision(
                FeatureKind.DIST_MOUNT,
                x,
                RIDGE_BASE_Y - self.rng.random() * RIDGE_Y_SPREAD,
                self.fields.peak(x, 0.0),
            )
            self._try_add(accepted, decision, cfg.min_distance)

    def _fill_gaps(self, positions: List[float], occupancy: OccupancyRecord, accepted: List[PlacementDecision]):
        cfg = self.config
        for x in positions:
            if occupancy.count(x) != 0:
                continue
            if self.rng.random() >= cfg.filler_probability:
                continue
            j = 0
            while j < cfg.filler_max_count * self.rng.random():
                decision = PlacementDecision(
                    FeatureKind.FLAT_MOUNT,
                    x + 2 * (self.rng.random() - 0.5) * cfg.filler_jitter,
                    FILLER_BASE_Y - j * FILLER_ROW_GAP,
                    self.fields.peak(x, float(j)),
                )
                self._try_add(accepted, decision, cfg.min_distance)
                j += 1

    def _scatter_craft(self, positions: List[float], accepted: List[PlacementDecision]):
        cfg = self.config
        for x in positions:
            if self.rng.random() < cfg.craft_probability:
                decision = PlacementDecision(
                    FeatureKind.BOAT,
                    x,
                    CRAFT_BASE_Y + self.rng.random() * CRAFT_Y_SPREAD,
                    0.0,
                )
                self._try_add(accepted, decision, cfg.craft_spacing)

    @staticmethod
    def _try_add(accepted: List[PlacementDecision], decision: PlacementDecision, min_distance: float) -> bool:
        """Accept decision unless it sits closer than min_distance to one already accepted in this call."""
        for other in accepted:
            if abs(other.x - decision.x) < min_distance:
                return False
        accepted.append(decision)
        return True
