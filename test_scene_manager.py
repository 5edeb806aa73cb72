"""
Tests for the scene manager: lazy loading, eviction and composition.

Run with: pytest test_scene_manager.py -v
"""

import logging

import numpy as np
import pytest

from src.engine import (
    FeatureKind, PlacementDecision, PlannerConfig, SceneConfig, SceneManager,
    has_invalid_numbers
)


class FlatNoise:
    def __call__(self, x, y=0.0, z=0.0):
        x, _, _ = np.broadcast_arrays(
            np.asarray(x, dtype=float), np.asarray(y, dtype=float), np.asarray(z, dtype=float)
        )
        return np.zeros_like(x) + 0.5


@pytest.fixture
def scene():
    manager = SceneManager(seed=1, config=SceneConfig(window_width=3000, chunk_width=512))
    manager.update()
    return manager


def test_initial_update_covers_viewport(scene):
    lo, hi = scene.loaded_span

    assert lo <= 0 - 512
    assert hi >= 3000 + 512
    assert not scene.needs_update()
    assert len(scene.chunks) > 0
    assert scene.canvas


def test_scroll_far_right_loads_and_evicts(scene):
    assert scene.scroll(10000) is True

    lo, hi = scene.loaded_span
    assert hi >= 13000
    assert lo <= 0
    for chunk in scene.chunks:
        assert 10000 - 5120 <= chunk.x <= 13000 + 5120


def test_small_scroll_does_not_regenerate(scene):
    canvas = scene.canvas
    span = scene.loaded_span

    assert scene.scroll(10) is False
    assert scene.canvas == canvas
    assert scene.loaded_span == span
    assert scene.viewport.cursor_x == 10


def test_loaded_span_only_grows(scene):
    lo, hi = scene.loaded_span

    for delta in [700, -2500, 4000, -100, -6000]:
        scene.scroll(delta)
        new_lo, new_hi = scene.loaded_span
        assert new_lo <= lo
        assert new_hi >= hi
        lo, hi = new_lo, new_hi

        vp = scene.viewport
        assert lo < vp.cursor_x < hi - vp.width


def test_chunks_stay_draw_ordered(scene):
    scene.scroll(3000)
    scene.scroll(-8000)

    ys = [c.y for c in scene.chunks]
    assert ys == sorted(ys)


def test_same_seed_same_scene():
    def run(seed):
        manager = SceneManager(seed=seed)
        manager.update()
        manager.scroll(2000)
        manager.scroll(-4500)
        return manager

    a, b = run(3), run(3)
    assert a.canvas == b.canvas
    assert [(c.kind, c.x, c.y) for c in a.chunks] == [(c.kind, c.x, c.y) for c in b.chunks]
    assert a.occupancy == b.occupancy


def test_set_cursor_does_not_update(scene):
    span = scene.loaded_span
    canvas = scene.canvas
    count = len(scene.chunks)

    scene.set_cursor(8000)

    assert scene.viewport.cursor_x == 8000
    assert scene.loaded_span == span
    assert scene.canvas == canvas
    assert len(scene.chunks) == count
    assert scene.needs_update()

    scene.update()
    assert not scene.needs_update()


def test_mount_chunks_carry_reflections(scene):
    mounts = [c for c in scene.chunks if c.kind == FeatureKind.MOUNT]
    peaks = [c for c in mounts if c.y >= 0]
    reflections = [c for c in mounts if c.y < 0]

    assert len(peaks) == len(reflections)
    assert sorted(c.x for c in peaks) == sorted(c.x for c in reflections)


def test_no_invalid_numbers_anywhere(scene):
    scene.scroll(6000)

    assert not has_invalid_numbers(scene.canvas)
    assert not any(has_invalid_numbers(c.payload) for c in scene.chunks)


def test_generator_failure_is_isolated(caplog):
    """A failing generator skips its own decision only."""
    manager = SceneManager(
        seed=2,
        planner_config=PlannerConfig(filler_probability=0.0, craft_probability=1.0),
        noise=FlatNoise(),
    )

    def boom(*args, **kwargs):
        raise RuntimeError("broken boat")

    manager.generators["boat"].generate = boom

    with caplog.at_level(logging.ERROR):
        manager.update()

    kinds = {c.kind for c in manager.chunks}
    assert FeatureKind.BOAT not in kinds
    assert FeatureKind.DIST_MOUNT in kinds
    assert "generator failed for boat" in caplog.text


def test_unknown_kind_is_skipped(scene, caplog):
    scene._builders.pop(FeatureKind.BOAT)
    decision = PlacementDecision(FeatureKind.BOAT, 0.0, 400.0, 0.0)

    with caplog.at_level(logging.WARNING):
        assert scene._materialize(decision, 0) == []

    assert "no chunk builder" in caplog.text


def test_svg_and_view_box(scene):
    assert scene.view_box() == f"0 0 {3000 / 1.142:.12g} {800 / 1.142:.12g}"

    svg = scene.svg()
    assert svg.startswith("<svg")
    assert "mix-blend-mode:multiply" in svg
    assert scene.canvas in svg

    scene.set_cursor(250.5)
    assert scene.view_box().startswith("250.5 0 ")


def test_reseed_discards_scene(scene):
    scene.reseed(5)

    assert scene.seed == 5
    assert scene.loaded_span == (0.0, 0.0)
    assert len(scene.chunks) == 0
    assert scene.canvas == ""
    assert scene.needs_update()


def test_stats(scene):
    stats = scene.stats()

    assert stats["seed"] == 1
    assert stats["chunk_count"] == len(scene.chunks)
    assert sum(stats["chunks_by_kind"].values()) == stats["chunk_count"]
    assert set(stats["chunks_by_kind"]) == {k.value for k in FeatureKind}
    assert stats["occupied_buckets"] <= stats["tracked_buckets"]
    assert stats["canvas_length"] == len(scene.canvas)


def test_negative_window_rejected():
    with pytest.raises(ValueError):
        SceneManager(config=SceneConfig(window_width=-1))


def test_scene_config_clamps_overrides():
    config = SceneConfig.from_overrides(chunk_width=4, zoom=None)

    assert config.chunk_width == 16
    assert config.zoom == 1.142
