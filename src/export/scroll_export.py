"""
Offline exporter for scrolling landscape animations.

Drives a scene through a fixed scroll sequence and writes:
1. One SVG document per frame
2. A JSON manifest with the settings and per-frame scene summary
"""

import json
import argparse
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

from tqdm import tqdm

from ..engine import SceneConfig, SceneManager

log = logging.getLogger(__name__)


class ScrollExporter:
    """
    Renders a sequence of viewport frames to disk.

    Every frame is the scene as a viewer would see it after scrolling
    `step` units from the previous one, so replaying the files gives the
    same animation as the live server for the same seed.
    """

    def __init__(
        self,
        output_dir: str,
        seed: int = 42,
        width: int = 3000,
        height: int = 800,
        chunk_width: int = 512,
        start_x: float = 0.0
    ):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.seed = seed
        self.start_x = start_x
        self.config = SceneConfig.from_overrides(
            window_width=width, window_height=height, chunk_width=chunk_width
        )
        self.scene = SceneManager(seed=seed, config=self.config)

    def export(self, frames: int, step: float = 10.0) -> str:
        """
        Export an animation.

        Args:
            frames: Number of frames to write
            step: Scroll distance between consecutive frames

        Returns:
            Path to the written manifest
        """

        if frames < 0:
            raise ValueError(f"frames must be non-negative, got {frames}")

        scene = self.scene
        scene.set_cursor(self.start_x)
        scene.update()

        records: List[Dict[str, Any]] = []
        regenerations = 0

        with tqdm(total=frames, desc="Exporting frames") as pbar:
            for i in range(frames):
                updated = False
                if i > 0:
                    updated = scene.scroll(step)
                    regenerations += int(updated)

                frame_path = self.output_dir / f"frame_{i:04d}.svg"
                frame_path.write_text(scene.svg(), encoding="utf-8")

                records.append({
                    "index": i,
                    "file": frame_path.name,
                    "cursor_x": scene.viewport.cursor_x,
                    "chunk_count": len(scene.chunks),
                    "updated": updated,
                })
                pbar.update(1)

        manifest = {
            "seed": self.seed,
            "settings": {
                "frames": frames,
                "step": step,
                "start_x": self.start_x,
                "window_width": self.config.window_width,
                "window_height": self.config.window_height,
                "chunk_width": self.config.chunk_width,
            },
            "regenerations": regenerations,
            "frames": records,
        }

        manifest_path = self.output_dir / "manifest.json"
        with open(manifest_path, "w") as f:
            json.dump(manifest, f, indent=2)

        log.info("exported %d frames to %s (%d regenerations)", frames, self.output_dir, regenerations)
        return str(manifest_path)


def main(argv: Optional[List[str]] = None):
    """CLI entry point for frame export."""

    parser = argparse.ArgumentParser(description="Export a scrolling landscape as SVG frames")
    parser.add_argument("--output", type=str, required=True, help="Output directory")
    parser.add_argument("--frames", type=int, default=100, help="Number of frames to export")
    parser.add_argument("--step", type=float, default=10.0, help="Scroll distance per frame")
    parser.add_argument("--seed", type=int, default=42, help="Scene seed")
    parser.add_argument("--width", type=int, default=3000, help="Viewport width")
    parser.add_argument("--height", type=int, default=800, help="Viewport height")
    parser.add_argument("--chunk-width", type=int, default=512, help="Width of one planned span")
    parser.add_argument("--start-x", type=float, default=0.0, help="Initial cursor position")
    parser.add_argument("--log-level", default="info", help="Logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    exporter = ScrollExporter(
        output_dir=args.output,
        seed=args.seed,
        width=args.width,
        height=args.height,
        chunk_width=args.chunk_width,
        start_x=args.start_x
    )

    manifest_path = exporter.export(frames=args.frames, step=args.step)

    print(f"\nExport complete!")
    print(f"Manifest saved to: {manifest_path}")


if __name__ == "__main__":
    main()
