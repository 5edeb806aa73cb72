"""
Tests for the placement planner and occupancy record.

Run with: pytest test_planner.py -v
"""

import math
import itertools

import numpy as np
import pytest

from src.procgen import PerlinNoise, SceneRandom
from src.engine import (
    FeatureKind, MountPlanner, OccupancyRecord, PlannerConfig, PlanningFields
)


class FlatNoise:
    """Constant field: the peak field is zero everywhere."""

    def __call__(self, x, y=0.0, z=0.0):
        x, _, _ = np.broadcast_arrays(
            np.asarray(x, dtype=float), np.asarray(y, dtype=float), np.asarray(z, dtype=float)
        )
        return np.zeros_like(x) + 0.5


class SinglePeakNoise:
    """Peak field with one sharp maximum at x = 1000; envelope fixed at 0.5."""

    def __call__(self, x, y=0.0, z=0.0):
        x = np.asarray(x, dtype=float)
        if np.all(np.asarray(y) == math.pi):
            return np.zeros_like(x) + 0.5
        return 0.95 - np.abs(x - 30.0)


def quiet_config(**overrides):
    """No filler hills and no boats, so only peaks and ridges remain."""
    return PlannerConfig.from_overrides(filler_probability=0.0, craft_probability=0.0, **overrides)


def test_flat_noise_places_only_distant_ridges():
    """With a zero peak field, ridges land on every 1000-unit mark."""
    planner = MountPlanner(FlatNoise(), SceneRandom(0), quiet_config())
    occupancy = OccupancyRecord()

    plan = planner.plan(0, 5000, occupancy)

    assert [d.kind for d in plan] == [FeatureKind.DIST_MOUNT] * 5
    assert [d.x for d in plan] == [0, 1000, 2000, 3000, 4000]
    assert all(230.0 < d.y <= 280.0 for d in plan)
    # No mountain was accepted, so nothing is marked
    assert all(count == 0 for _, count in occupancy.items())


def test_empty_span_is_a_no_op():
    planner = MountPlanner(PerlinNoise(1), SceneRandom(1))
    occupancy = OccupancyRecord()

    assert planner.plan(10, 10, occupancy) == []
    assert planner.plan(10, 5, occupancy) == []
    assert len(occupancy) == 0


def test_single_peak_places_mounts():
    """A local maximum yields mounts near it, each marking its footprint."""
    planner = MountPlanner(SinglePeakNoise(), SceneRandom(4), quiet_config())
    occupancy = OccupancyRecord()

    plan = planner.plan(900, 1100, occupancy)
    mounts = [d for d in plan if d.kind == FeatureKind.MOUNT]

    assert 1 <= len(mounts) <= 8
    for m in mounts:
        assert 500.0 <= m.x <= 1500.0
        assert (m.y - 300.0) in {0.0, 30.0, 60.0, 90.0, 120.0, 150.0, 180.0, 210.0}
        assert m.intensity == pytest.approx(0.8)
        assert m.intensity > planner.config.peak_threshold
        assert occupancy.count(m.x) >= 1
        assert occupancy.count(m.x - 199.0) >= 1
        assert occupancy.count(m.x + 199.0) >= 1


def test_decisions_respect_minimum_spacing():
    """No two decisions of one call sit closer than the minimum distance."""
    planner = MountPlanner(PerlinNoise(21), SceneRandom(21))
    occupancy = OccupancyRecord()

    for start in range(0, 4096, 512):
        plan = planner.plan(start, start + 512, occupancy)
        for a, b in itertools.combinations(plan, 2):
            assert abs(a.x - b.x) >= planner.config.min_distance


def test_boats_keep_their_spacing():
    planner = MountPlanner(PerlinNoise(8), SceneRandom(8))
    plan = planner.plan(0, 2048, OccupancyRecord())

    for i, d in enumerate(plan):
        if d.kind != FeatureKind.BOAT:
            continue
        assert 300.0 <= d.y < 690.0
        for other in plan[:i]:
            assert abs(other.x - d.x) >= planner.config.craft_spacing


def test_occupancy_only_grows():
    planner = MountPlanner(PerlinNoise(9), SceneRandom(9))
    occupancy = OccupancyRecord()

    planner.plan(0, 512, occupancy)
    before = dict(occupancy.items())
    planner.plan(-512, 0, occupancy)
    planner.plan(200, 700, occupancy)

    after = dict(occupancy.items())
    for bucket, count in before.items():
        assert after[bucket] >= count


def test_occupancy_footprint():
    """mark() covers floor((x - r) / step) up to, not including, (x + r) / step."""
    occupancy = OccupancyRecord(step=5)
    occupancy.mark(1000.0, 200.0)

    assert occupancy.count(800.0) == 1
    assert occupancy.count(1199.0) == 1
    assert occupancy.count(1200.0) == 0
    assert occupancy.count(799.0) == 0
    assert len(occupancy) == 80

    occupancy.mark(1002.0, 200.0)
    assert occupancy.count(1200.0) == 1
    assert occupancy.count(1000.0) == 2


def test_occupancy_ensure_registers_zero_buckets():
    occupancy = OccupancyRecord(step=5)
    occupancy.ensure([0, 5, 7, -1])

    assert dict(occupancy.items()) == {0: 0, 1: 0, -1: 0}
    assert len(occupancy) == 3


def test_planning_fields():
    fields = PlanningFields(PerlinNoise(2))
    sample = fields.sample(125.0)

    assert set(sample) == {"peak", "falloff", "secondary_peak", "envelope"}
    assert all(isinstance(v, float) for v in sample.values())
    assert 0.0 <= sample["peak"] <= 0.9
    assert sample["falloff"] == pytest.approx(1.0 - fields.noise(125.0 * 0.03))
    # Peak field ignores the vertical coordinate
    assert fields.peak(125.0, 0.0) == fields.peak(125.0, 77.0)
    assert fields.peak(np.arange(4.0), np.arange(4.0)).shape == (4,)


def test_planner_config_clamps_overrides():
    config = PlannerConfig.from_overrides(xstep=0, craft_probability=5.0, jitter=None)

    assert config.xstep == 1
    assert isinstance(config.xstep, int)
    assert config.craft_probability == 1.0
    assert config.jitter == 500.0


def test_parameter_spec_validation():
    from src.procgen import PLANNER_PARAMETERS, SCENE_PARAMETERS

    assert PLANNER_PARAMETERS.validate(PLANNER_PARAMETERS.defaults())
    assert SCENE_PARAMETERS.validate(SCENE_PARAMETERS.defaults())
    assert not PLANNER_PARAMETERS.validate({**PLANNER_PARAMETERS.defaults(), "xstep": 0})
    assert not PLANNER_PARAMETERS.validate({"xstep": 5})
    assert "craft_spacing" in PLANNER_PARAMETERS.get_param_names()


def test_gap_fill_places_flat_mounts_in_empty_stretches():
    """Filler hills only grow from positions no mountain footprint covers."""
    config = PlannerConfig.from_overrides(
        filler_probability=1.0, filler_jitter=0.0, craft_probability=0.0
    )
    planner = MountPlanner(SinglePeakNoise(), SceneRandom(6), config)
    occupancy = OccupancyRecord()

    plan = planner.plan(0, 2000, occupancy)
    mounts = [d for d in plan if d.kind == FeatureKind.MOUNT]
    fillers = [d for d in plan if d.kind == FeatureKind.FLAT_MOUNT]

    assert mounts
    assert fillers
    for f in fillers:
        assert occupancy.count(f.x) == 0
        assert f.y in {700.0, 650.0, 600.0, 550.0}
        for m in mounts:
            assert abs(f.x - m.x) >= config.footprint
    # Mountains sit within [500, 1500], so [0, 300) is always open ground
    assert any(f.x < 300 for f in fillers)
