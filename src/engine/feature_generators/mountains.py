"""
Mountain generators.

Creates the large landscape features: layered mountains, flat-topped
filler hills and far-away ridge bands.
"""

import numpy as np
from typing import List, Optional, Tuple
from .base import FeatureGenerator, poly


class MountainGenerator(FeatureGenerator):
    """
    Generates a layered mountain.

    Stacks cosine silhouettes shaped by noise, shrinking toward the top,
    then draws a white backing, an outline stroke, texture strokes and
    clumps of trees along the rim and over the upper slopes.
    """

    LAYERS = 10
    RESOLUTION = 50

    def generate(
        self,
        x: float, y: float,
        seed: float,
        height: Optional[float] = None,
        width: Optional[float] = None,
        texture: int = 80,
        vegetation: bool = True,
        **options
    ) -> str:
        """Render a mountain with its foot at (x, y)."""

        hei = height if height is not None else self.rng.uniform(100, 500)
        wid = width if width is not None else self.rng.uniform(400, 600)

        layers = self._layers(y, seed, hei, wid)
        rim, top = self._vegetate(layers, x, y, seed, hei) if vegetation else ("", "")

        canv = rim
        canv += poly(
            np.vstack([layers[0], [[0.0, self.LAYERS * 4.0]]]),
            xof=x, yof=y, fil="white", stroke_color="none"
        )
        canv += self.stroke(layers[0] + [x, y], col="rgba(100,100,100,0.3)", noi=1, wid=3)
        canv += self._texture(layers, x, y, texture)
        canv += top
        return canv

    def _layers(self, yoff: float, seed: float, hei: float, wid: float) -> List[np.ndarray]:
        t = (np.arange(self.RESOLUTION) / self.RESOLUTION - 0.5) * np.pi
        layers = []
        hoff = 0.0

        for j in range(self.LAYERS):
            hoff += self.rng.random() * yoff / 100
            ridge = np.cos(t) * self.noise(t + 10, j * 0.15, seed)
            p = 1 - j / self.LAYERS
            layers.append(np.column_stack([t / np.pi * wid * p, -ridge * hei * p + hoff]))

        return layers

    def _vegetate(
        self, layers: List[np.ndarray], xoff: float, yoff: float, seed: float, hei: float
    ) -> Tuple[str, str]:
        """
        Tree clumps along the ridge line and over the upper slopes.

        Returns:
            Tuple of (rim, top) markup; the rim is drawn behind the white
            backing, the top layer over the texture
        """

        grid = np.stack(layers)
        heights = np.abs(grid[..., 1]) / hei
        cols = np.arange(grid.shape[1])
        rows = np.arange(grid.shape[0])

        rim_ns = np.asarray(self.noise(cols * 0.1, seed))
        rim_mask = (rim_ns ** 3 < 0.1) & (heights[0] > 0.2)

        top_ns = np.asarray(self.noise(rows[:, None] * 0.1, cols[None, :] * 0.1, seed + 2))
        top_mask = (top_ns ** 3 < 0.1) & (heights > 0.5)

        rim = ""
        for px, py in grid[0][rim_mask]:
            rim += self._tree(px + xoff, py + yoff - 5, self._leaf_color(px, py), clusters=2)

        top = ""
        for px, py in grid[top_mask]:
            top += self._tree(px + xoff, py + yoff, self._leaf_color(px, py))

        return rim, top

    def _leaf_color(self, px: float, py: float) -> str:
        alpha = float(self.noise(0.01 * px, 0.01 * py)) * 0.15 + 0.5
        return f"rgba(100,100,100,{alpha:.3f})"

    def _tree(
        self, x: float, y: float, col: str,
        clusters: int = 5, hei: float = 16.0, wid: float = 8.0
    ) -> str:
        """Clump of upright blobs scattered around (x, y)."""

        def profile(p):
            with np.errstate(invalid="ignore"):
                return np.where(
                    p <= 1,
                    np.sqrt(np.maximum(np.sin(p * np.pi) * p, 0.0)),
                    -np.sqrt(np.maximum(np.sin((p - 2) * np.pi * (p - 2)), 0.0)),
                )

        canv = ""
        for _ in range(clusters):
            canv += self.blob(
                x + self.rng.normal() * clusters * 4,
                y + self.rng.normal() * clusters * 4,
                length=self.rng.uniform(hei * 0.5, hei * 1.25),
                wid=self.rng.uniform(wid * 0.5, wid * 1.25),
                ang=np.pi / 2,
                col=col,
                fun=profile,
            )
        return canv

    def _texture(self, layers: List[np.ndarray], xoff: float, yoff: float, count: int) -> str:
        """Short shading strokes scattered over the inner layers."""

        canv = ""
        resolution = len(layers[0])

        for _ in range(count):
            row = 1 + int(self.rng.random() * (len(layers) - 1))
            start = int(self.rng.random() * resolution)
            length = int(resolution * (0.1 + self.rng.random() * 0.2))
            segment = layers[row][start:start + length]
            if len(segment) < 3:
                continue

            alpha = 0.1 + self.rng.random() * 0.15
            canv += self.stroke(
                segment + [xoff, yoff],
                col=f"rgba(100,100,100,{alpha:.3f})",
                wid=1.5
            )

        return canv


class FlatMountainGenerator(FeatureGenerator):
    """
    Generates a flat-topped hill.

    Same layering as a mountain but wider, flatter and cut off at a
    plateau height controlled by `cho`.
    """

    LAYERS = 5
    RESOLUTION = 50
    CUT_HEIGHT = 100.0

    def generate(
        self,
        x: float, y: float,
        seed: float,
        height: Optional[float] = None,
        width: Optional[float] = None,
        cho: float = 0.5,
        **options
    ) -> str:
        """Render a flat hill with its foot at (x, y)."""

        hei = height if height is not None else self.rng.uniform(40, 440)
        wid = width if width is not None else self.rng.uniform(400, 600)

        t = (np.arange(self.RESOLUTION) / self.RESOLUTION - 0.5) * np.pi
        layers = []
        hoff = 0.0

        for j in range(self.LAYERS):
            hoff += self.rng.random() * y / 100
            ridge = (np.cos(t * 2) + 1) * self.noise(t + 10, j * 0.1, seed)
            p = 1 - (j / self.LAYERS) * 0.6
            nx = t / np.pi * wid * p
            ny = -ridge * hei * p + hoff
            # Plateau: nothing rises above the cut line
            ny = np.maximum(ny, -self.CUT_HEIGHT * cho + hoff)
            layers.append(np.column_stack([nx, ny]))

        canv = poly(
            np.vstack([layers[0], [[0.0, self.LAYERS * 4.0]]]),
            xof=x, yof=y, fil="white", stroke_color="none"
        )
        canv += self.stroke(layers[0] + [x, y], col="rgba(100,100,100,0.3)", noi=1, wid=3)

        for layer in layers[1:]:
            alpha = 0.05 + self.rng.random() * 0.1
            canv += self.stroke(layer + [x, y], col=f"rgba(100,100,100,{alpha:.3f})", wid=1)

        return canv


class DistantMountainGenerator(FeatureGenerator):
    """
    Generates a band of distant ridges.

    Segments are filled with grey tones picked from the noise field; the
    ridge profile is enveloped by sqrt(sin); rounding at the band ends can
    leave invalid values, which the chunk store sanitizes.
    """

    SPAN = 10
    SEGMENT = 5

    def generate(
        self,
        x: float, y: float,
        seed: float,
        height: float = 300.0,
        length: float = 2000.0,
        **options
    ) -> str:
        """Render a ridge band starting at (x, y)."""

        span = self.SPAN
        seg = self.SEGMENT
        steps = length / span
        canv = ""

        i = 0
        while i < steps / seg:
            top_k = i * seg + np.arange(seg + 1)
            bottom_k = i * seg + np.arange(0, seg / 2 + 1) * 2

            with np.errstate(invalid="ignore"):
                top = np.column_stack([
                    x + top_k * span,
                    y - height * self.noise(top_k * 0.05, seed)
                    * np.power(np.sin(np.pi * top_k / steps), 0.5),
                ])
            bottom = np.column_stack([
                x + bottom_k * span,
                y + 24 * self.noise(bottom_k * 0.05, 2, seed) * np.sin(np.pi * bottom_k / steps),
            ])

            outline = np.vstack([bottom[::-1], top])
            col = self._color(outline[-1], y)
            canv += poly(outline, fil=col, stroke_color=col, wid=1)
            i += 1

        return canv

    def _color(self, point: np.ndarray, yoff: float) -> str:
        px, py = np.nan_to_num(point)
        c = int(self.noise(px * 0.02, py * 0.02, yoff) * 55 + 200)
        return f"rgb({c},{c},{c})"
