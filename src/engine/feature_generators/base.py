"""
Base feature generator and common SVG drawing utilities.
"""

import numpy as np
from typing import Callable, Optional, Sequence, Union
from abc import ABC, abstractmethod

from ...procgen import SceneRandom


Points = Union[np.ndarray, Sequence[Sequence[float]]]


def poly(
    points: Points,
    xof: float = 0.0,
    yof: float = 0.0,
    fil: str = "rgba(0,0,0,0)",
    stroke_color: Optional[str] = None,
    wid: float = 0
) -> str:
    """Render a list of points as an SVG polyline."""

    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    str_col = fil if stroke_color is None else stroke_color

    coords = "".join(f" {px + xof:.1f},{py + yof:.1f}" for px, py in pts)
    return (
        f"<polyline points='{coords}' "
        f"style='fill:{fil};stroke:{str_col};stroke-width:{wid}'/>"
    )


class FeatureGenerator(ABC):
    """
    Base class for all feature generators.

    Generators draw from the scene's noise field and random stream and
    return an SVG fragment positioned at (x, y).
    """

    BLOB_RESOLUTION = 20

    def __init__(self, noise: Callable, rng: SceneRandom):
        self.noise = noise
        self.rng = rng

    @abstractmethod
    def generate(self, x: float, y: float, seed: float, **options) -> str:
        """Render this feature at (x, y)."""
        pass

    def stroke(
        self,
        points: Points,
        wid: float = 2.0,
        col: str = "rgba(200,200,200,0.9)",
        noi: float = 0.5,
        out: float = 1.0,
        fun: Optional[Callable[[np.ndarray], np.ndarray]] = None
    ) -> str:
        """
        Brush stroke along a path.

        Builds a closed outline whose half-width follows fun(t) along the
        path, modulated by noise.

        Args:
            points: Path points, shape (n, 2)
            wid: Maximum half-width
            col: Fill and outline colour
            noi: Share of the width driven by noise (0-1)
            out: Outline width
            fun: Width profile over t in [0, 1)
        """

        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        n = len(pts)
        if n == 0:
            return ""

        if fun is None:
            fun = lambda t: np.sin(t * np.pi)

        n0 = self.rng.random() * 10
        idx = np.arange(1, n - 1)

        w = wid * fun(idx / n)
        w = w * (1 - noi) + w * noi * np.asarray(self.noise(idx * 0.5, n0))

        prev = pts[idx] - pts[idx - 1]
        nxt = pts[idx] - pts[idx + 1]
        a1 = np.arctan2(prev[:, 1], prev[:, 0])
        a2 = np.arctan2(nxt[:, 1], nxt[:, 0])
        a = (a1 + a2) / 2
        a = np.where(a < a2, a + np.pi, a)

        offset = np.column_stack([w * np.cos(a), w * np.sin(a)])
        side0 = pts[idx] + offset
        side1 = pts[idx] - offset

        outline = np.vstack([pts[:1], side0, pts[-1:], side1[::-1], pts[:1]])
        return poly(outline, fil=col, stroke_color=col, wid=out)

    def blob(
        self,
        x: float, y: float,
        length: float = 20.0,
        wid: float = 5.0,
        ang: float = 0.0,
        col: str = "rgba(200,200,200,0.9)",
        noi: float = 0.5,
        fun: Optional[Callable[[np.ndarray], np.ndarray]] = None
    ) -> str:
        """
        Ink blob (leaf, tree clump) centred on (x, y).

        Args:
            length: Extent along the blob's axis
            wid: Maximum width across the axis
            ang: Rotation in radians
            col: Fill and outline colour
            noi: Share of the radius driven by noise (0-1)
            fun: Half-width profile over p in [0, 2]; the two halves of the
                outline come from p <= 1 and p > 1
        """

        if fun is None:
            def fun(p):
                with np.errstate(invalid="ignore"):
                    return np.where(
                        p <= 1,
                        np.sqrt(np.maximum(np.sin(p * np.pi), 0.0)),
                        -np.sqrt(np.maximum(np.sin((p + 1) * np.pi), 0.0)),
                    )

        p = np.arange(self.BLOB_RESOLUTION + 1) / self.BLOB_RESOLUTION * 2
        xo = length / 2 - np.abs(p - 1) * length
        yo = fun(p) * wid / 2
        angles = np.arctan2(yo, xo) + ang
        radii = np.hypot(xo, yo)

        n0 = self.rng.random() * 10
        ns = loop_noise(np.asarray(self.noise(np.arange(len(p)) * 0.05, n0), dtype=np.float64))
        radii = radii * (ns * noi + (1 - noi))

        outline = np.column_stack([x + np.cos(angles) * radii, y + np.sin(angles) * radii])
        return poly(outline, fil=col, stroke_color=col, wid=0)


def loop_noise(values: np.ndarray) -> np.ndarray:
    """Tilt a noise run so its ends meet, then rescale it to [0, 1]."""

    n = len(values)
    if n < 2:
        return values
    tilted = values + (values[-1] - values[0]) * (n - 1 - np.arange(n)) / (n - 1)
    span = tilted.max() - tilted.min()
    if span == 0:
        return np.zeros_like(tilted)
    return (tilted - tilted.min()) / span
