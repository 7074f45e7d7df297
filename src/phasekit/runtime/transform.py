# src/phasekit/runtime/transform.py
"""
Data-space <-> pixel-space mapping for a phase-portrait plot.

A `Transform` is an immutable snapshot of one viewport drawn into one pixel
rectangle. Data y grows upward, pixel y grows downward. Both directions accept
scalars or numpy arrays.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from phasekit.errors import ViewportError

__all__ = ["Viewport", "Transform"]


@dataclass(frozen=True)
class Viewport:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def __post_init__(self) -> None:
        bounds = (self.x_min, self.x_max, self.y_min, self.y_max)
        if not all(math.isfinite(float(b)) for b in bounds):
            raise ViewportError(f"Viewport bounds must be finite, got {bounds}")
        if not self.x_min < self.x_max:
            raise ViewportError(f"Viewport requires x_min < x_max (got {self.x_min} >= {self.x_max})")
        if not self.y_min < self.y_max:
            raise ViewportError(f"Viewport requires y_min < y_max (got {self.y_min} >= {self.y_max})")
        # Normalize to plain floats so equality/hash are stable.
        object.__setattr__(self, "x_min", float(self.x_min))
        object.__setattr__(self, "x_max", float(self.x_max))
        object.__setattr__(self, "y_min", float(self.y_min))
        object.__setattr__(self, "y_max", float(self.y_max))

    @classmethod
    def from_mapping(cls, data) -> "Viewport":
        return cls(data["x_min"], data["x_max"], data["y_min"], data["y_max"])

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def contains(self, x, y):
        """Inclusive containment test; vectorized over numpy arrays."""
        inside = (x >= self.x_min) & (x <= self.x_max) & (y >= self.y_min) & (y <= self.y_max)
        if np.ndim(inside) == 0:
            return bool(inside)
        return inside

    def extended(self, fraction: float) -> "Viewport":
        """Return the viewport grown by `fraction` of its range on every side."""
        dx = self.width * fraction
        dy = self.height * fraction
        return Viewport(self.x_min - dx, self.x_max + dx, self.y_min - dy, self.y_max + dy)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x_min, self.x_max, self.y_min, self.y_max)


@dataclass(frozen=True)
class Transform:
    """
    Linear map between `viewport` and the pixel rectangle
    [left, left + plot_width] x [top, top + plot_height].
    """
    viewport: Viewport
    plot_width: float
    plot_height: float
    left: float = 0.0
    top: float = 0.0

    def __post_init__(self) -> None:
        if not (self.plot_width > 0 and self.plot_height > 0):
            raise ViewportError(
                f"Plot area must have positive size, got {self.plot_width}x{self.plot_height}"
            )

    def data_to_pixel(self, x, y):
        vp = self.viewport
        px = self.left + (x - vp.x_min) / vp.width * self.plot_width
        py = self.top + self.plot_height - (y - vp.y_min) / vp.height * self.plot_height
        return px, py

    def pixel_to_data(self, px, py):
        vp = self.viewport
        x = vp.x_min + (px - self.left) / self.plot_width * vp.width
        y = vp.y_max - (py - self.top) / self.plot_height * vp.height
        return x, y

    def contains_pixel(self, px, py) -> bool:
        return bool(
            self.left <= px <= self.left + self.plot_width
            and self.top <= py <= self.top + self.plot_height
        )

    def with_viewport(self, viewport: Viewport) -> "Transform":
        return Transform(viewport, self.plot_width, self.plot_height, self.left, self.top)

    def with_size(self, plot_width: float, plot_height: float) -> "Transform":
        return Transform(self.viewport, plot_width, plot_height, self.left, self.top)
