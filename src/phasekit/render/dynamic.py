# src/phasekit/render/dynamic.py
"""
Per-frame trail layer.

Old content is faded by a destination-in fill so trails decay geometrically;
each visible particle then adds one segment from its committed to its pending
position. Colour, opacity and width follow the particle's instantaneous speed.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .theme import Theme

if TYPE_CHECKING:
    from phasekit.config import EngineConfig
    from phasekit.runtime.particles import ParticleManager, ParticlePool
    from phasekit.runtime.transform import Transform
    from .surface import Surface

__all__ = ["DynamicRenderer", "segment_style"]


def segment_style(
    dx: np.ndarray,
    dy: np.ndarray,
    base,
    bright,
    gain: float,
    width_base: float,
    width_gain: float,
):
    """
    Continuous speed styling for trail segments.

    intensity = min(|delta| * gain, 1) interpolates base -> bright colour and
    sets opacity 0.8 + 0.2 * intensity and width width_base + width_gain * intensity.
    Returns (colors (n, 4), widths (n,), intensity (n,)).
    """
    intensity = np.minimum(np.hypot(dx, dy) * gain, 1.0)
    base = np.asarray(base[:3], dtype=float)
    bright = np.asarray(bright[:3], dtype=float)
    rgb = base + intensity[:, None] * (bright - base)
    # quantize channels to 8 bits like a CSS colour string
    rgb = np.round(rgb * 255.0) / 255.0
    alpha = 0.8 + 0.2 * intensity
    colors = np.column_stack([rgb, alpha])
    widths = width_base + width_gain * intensity
    return colors, widths, intensity


class DynamicRenderer:
    SEEDED_WIDTH = (1.0, 0.5)
    FIELD_WIDTH = (0.8, 0.4)

    def __init__(self, config: "EngineConfig", theme: Theme):
        self.config = config
        self.theme = theme

    def fade(self, surface: "Surface") -> None:
        t = self.theme
        surface.fill_rect(
            0, 0, surface.width, surface.height,
            (*t.fade_color[:3], t.fade_alpha),
            composite="destination-in",
        )

    def paint(self, surface: "Surface", transform: "Transform", particles: "ParticleManager") -> None:
        t = self.theme
        self.fade(surface)
        self._segments(surface, transform, particles.seeded, t.seeded_base, t.seeded_bright, self.SEEDED_WIDTH)
        self._dots(surface, transform, particles.seeded)
        self._segments(surface, transform, particles.field, t.field_base, t.field_bright, self.FIELD_WIDTH)

    def _visible(self, transform: "Transform", pool: "ParticlePool") -> np.ndarray:
        return np.asarray(transform.viewport.contains(pool.x, pool.y), dtype=bool)

    def _segments(self, surface, transform, pool, base, bright, width) -> None:
        if len(pool) == 0:
            return
        vis = self._visible(transform, pool)
        if not vis.any():
            return
        x, y = pool.x[vis], pool.y[vis]
        nx, ny = pool.next_x[vis], pool.next_y[vis]
        colors, widths, _ = segment_style(
            nx - x, ny - y, base, bright, self.config.intensity_gain, *width
        )
        x0, y0 = transform.data_to_pixel(x, y)
        x1, y1 = transform.data_to_pixel(nx, ny)
        surface.draw_segments(x0, y0, x1, y1, colors, widths)

    def _dots(self, surface, transform, pool) -> None:
        if len(pool) == 0:
            return
        vis = self._visible(transform, pool)
        px, py = transform.data_to_pixel(pool.x[vis], pool.y[vis])
        for cx, cy in zip(px, py):
            surface.fill_circle(float(cx), float(cy), self.config.seed_dot_radius, self.theme.seeded_dot)
