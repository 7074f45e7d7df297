# src/phasekit/render/surface.py
"""
Drawing surfaces for the static and dynamic layers.

`RasterSurface` is an in-memory RGBA image (float32, straight alpha, values in
[0, 1]) with the two compositing modes the renderers need:

  source-over     paint on top of existing content
  destination-in  keep existing content scaled by the source alpha

Shapes are anti-aliased by pixel coverage. Colours are RGBA tuples in [0, 1].
"""
from __future__ import annotations

from typing import Literal, Protocol, Sequence

import numpy as np
from matplotlib.path import Path

__all__ = ["Surface", "RasterSurface", "Color", "Composite"]

Color = tuple[float, float, float, float]
Composite = Literal["source-over", "destination-in"]


class Surface(Protocol):
    width: int
    height: int

    def clear(self, color: Color | None = None) -> None: ...
    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color, *, composite: Composite = "source-over") -> None: ...
    def draw_line(self, x0: float, y0: float, x1: float, y1: float, color: Color, width: float = 1.0) -> None: ...
    def draw_segments(self, x0, y0, x1, y1, colors, widths) -> None: ...
    def draw_polyline(self, points, color: Color, width: float = 1.0) -> None: ...
    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None: ...
    def stroke_circle(self, cx: float, cy: float, radius: float, color: Color, width: float = 1.0) -> None: ...
    def fill_polygon(self, points, color: Color) -> None: ...


class RasterSurface:
    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.float32)

    # ---------------------------------------------------------------- basics
    def clear(self, color: Color | None = None) -> None:
        if color is None:
            self.pixels.fill(0.0)
        else:
            self.pixels[...] = np.asarray(color, dtype=np.float32)

    def copy(self) -> "RasterSurface":
        out = RasterSurface(self.width, self.height)
        out.pixels[...] = self.pixels
        return out

    def composite_over(self, other: "RasterSurface") -> None:
        """Source-over another surface of the same size onto this one."""
        if (other.width, other.height) != (self.width, self.height):
            raise ValueError("Surfaces must have the same size")
        src = other.pixels
        src_a = src[..., 3]
        dst = self.pixels
        dst_a = dst[..., 3]
        keep = dst_a * (1.0 - src_a)
        out_a = src_a + keep
        safe = np.where(out_a > 0, out_a, 1.0)
        rgb = (src[..., :3] * src_a[..., None] + dst[..., :3] * keep[..., None]) / safe[..., None]
        dst[..., :3] = np.where(out_a[..., None] > 0, rgb, dst[..., :3])
        dst[..., 3] = out_a

    def to_rgba8(self) -> np.ndarray:
        return np.round(np.clip(self.pixels, 0.0, 1.0) * 255.0).astype(np.uint8)

    def _bbox(self, x0: float, y0: float, x1: float, y1: float):
        i0 = max(int(np.floor(y0)), 0)
        i1 = min(int(np.ceil(y1)) + 1, self.height)
        j0 = max(int(np.floor(x0)), 0)
        j1 = min(int(np.ceil(x1)) + 1, self.width)
        if i0 >= i1 or j0 >= j1:
            return None
        return i0, i1, j0, j1

    def _blend(self, i0: int, i1: int, j0: int, j1: int, coverage: np.ndarray, color: Color) -> None:
        """Source-over of `color` scaled by `coverage` into the given block."""
        r, g, b, a = (float(c) for c in color)
        src_a = (coverage * a).astype(np.float32)
        if not np.any(src_a > 0):
            return
        dst = self.pixels[i0:i1, j0:j1]
        dst_a = dst[..., 3]
        out_a = src_a + dst_a * (1.0 - src_a)
        safe = np.where(out_a > 0, out_a, 1.0)
        keep = dst_a * (1.0 - src_a)
        src_rgb = np.array([r, g, b], dtype=np.float32)
        rgb = (src_rgb * src_a[..., None] + dst[..., :3] * keep[..., None]) / safe[..., None]
        dst[..., :3] = np.where(out_a[..., None] > 0, rgb, dst[..., :3])
        dst[..., 3] = out_a

    # ---------------------------------------------------------------- shapes
    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color, *, composite: Composite = "source-over") -> None:
        box = self._bbox(x, y, x + w - 1, y + h - 1)
        if box is None:
            return
        i0, i1, j0, j1 = box
        if composite == "destination-in":
            self.pixels[i0:i1, j0:j1, 3] *= np.float32(color[3])
        elif composite == "source-over":
            self._blend(i0, i1, j0, j1, np.ones((i1 - i0, j1 - j0), dtype=np.float32), color)
        else:
            raise ValueError(f"Unsupported composite mode '{composite}'")

    def draw_line(self, x0: float, y0: float, x1: float, y1: float, color: Color, width: float = 1.0) -> None:
        half = 0.5 * width
        pad = half + 1.0
        box = self._bbox(min(x0, x1) - pad, min(y0, y1) - pad, max(x0, x1) + pad, max(y0, y1) + pad)
        if box is None:
            return
        i0, i1, j0, j1 = box
        py, px = np.mgrid[i0:i1, j0:j1].astype(np.float32) + 0.5
        dx, dy = x1 - x0, y1 - y0
        length2 = dx * dx + dy * dy
        if length2 > 0:
            t = np.clip(((px - x0) * dx + (py - y0) * dy) / length2, 0.0, 1.0)
        else:
            t = np.zeros_like(px)
        dist = np.hypot(px - (x0 + t * dx), py - (y0 + t * dy))
        coverage = np.clip(half + 0.5 - dist, 0.0, 1.0)
        self._blend(i0, i1, j0, j1, coverage, color)

    def draw_segments(self, x0, y0, x1, y1, colors, widths) -> None:
        """Draw a batch of segments; `colors` is (n, 4), `widths` is (n,)."""
        x0 = np.asarray(x0, dtype=float)
        colors = np.asarray(colors, dtype=float)
        widths = np.broadcast_to(np.asarray(widths, dtype=float), x0.shape)
        for k in range(x0.size):
            self.draw_line(x0[k], y0[k], x1[k], y1[k], tuple(colors[k]), widths[k])

    def draw_polyline(self, points, color: Color, width: float = 1.0) -> None:
        pts = np.asarray(points, dtype=float)
        for (xa, ya), (xb, yb) in zip(pts[:-1], pts[1:]):
            self.draw_line(xa, ya, xb, yb, color, width)

    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        box = self._bbox(cx - radius - 1, cy - radius - 1, cx + radius + 1, cy + radius + 1)
        if box is None:
            return
        i0, i1, j0, j1 = box
        py, px = np.mgrid[i0:i1, j0:j1].astype(np.float32) + 0.5
        dist = np.hypot(px - cx, py - cy)
        coverage = np.clip(radius + 0.5 - dist, 0.0, 1.0)
        self._blend(i0, i1, j0, j1, coverage, color)

    def stroke_circle(self, cx: float, cy: float, radius: float, color: Color, width: float = 1.0) -> None:
        pad = radius + width + 1
        box = self._bbox(cx - pad, cy - pad, cx + pad, cy + pad)
        if box is None:
            return
        i0, i1, j0, j1 = box
        py, px = np.mgrid[i0:i1, j0:j1].astype(np.float32) + 0.5
        dist = np.abs(np.hypot(px - cx, py - cy) - radius)
        coverage = np.clip(0.5 * width + 0.5 - dist, 0.0, 1.0)
        self._blend(i0, i1, j0, j1, coverage, color)

    def fill_polygon(self, points: Sequence[Sequence[float]], color: Color) -> None:
        pts = np.asarray(points, dtype=float)
        box = self._bbox(pts[:, 0].min(), pts[:, 1].min(), pts[:, 0].max(), pts[:, 1].max())
        if box is None:
            return
        i0, i1, j0, j1 = box
        py, px = np.mgrid[i0:i1, j0:j1] + 0.5
        inside = Path(pts).contains_points(np.column_stack([px.ravel(), py.ravel()]))
        coverage = inside.reshape(px.shape).astype(np.float32)
        self._blend(i0, i1, j0, j1, coverage, color)
