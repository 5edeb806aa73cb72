"""
Tests for offline frame export.

Run with: pytest test_export.py -v
"""

import json
from pathlib import Path

import pytest

from src.export import ScrollExporter, main


def test_export_writes_frames_and_manifest(tmp_path):
    exporter = ScrollExporter(tmp_path / "out", seed=2, width=800, height=300, chunk_width=256)
    manifest_path = Path(exporter.export(frames=5, step=300))

    assert manifest_path.exists()
    manifest = json.loads(manifest_path.read_text())

    assert manifest["seed"] == 2
    assert manifest["settings"]["step"] == 300
    assert len(manifest["frames"]) == 5
    assert [f["cursor_x"] for f in manifest["frames"]] == [0, 300, 600, 900, 1200]
    assert manifest["frames"][0]["updated"] is False
    assert manifest["regenerations"] == sum(f["updated"] for f in manifest["frames"])

    for frame in manifest["frames"]:
        svg = (tmp_path / "out" / frame["file"]).read_text()
        assert svg.startswith("<svg")

    assert sorted(p.name for p in (tmp_path / "out").glob("*.svg")) == [
        f"frame_{i:04d}.svg" for i in range(5)
    ]


def test_export_is_deterministic(tmp_path):
    ScrollExporter(tmp_path / "a", seed=4, width=600, height=300).export(frames=3, step=700)
    ScrollExporter(tmp_path / "b", seed=4, width=600, height=300).export(frames=3, step=700)

    for i in range(3):
        name = f"frame_{i:04d}.svg"
        assert (tmp_path / "a" / name).read_text() == (tmp_path / "b" / name).read_text()


def test_export_rejects_negative_frames(tmp_path):
    with pytest.raises(ValueError):
        ScrollExporter(tmp_path).export(frames=-1)


def test_cli(tmp_path):
    main(["--output", str(tmp_path), "--frames", "2", "--width", "500", "--height", "200", "--log-level", "warning"])

    assert (tmp_path / "manifest.json").exists()
    assert (tmp_path / "frame_0001.svg").exists()
