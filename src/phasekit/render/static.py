# src/phasekit/render/static.py
"""
Background layer: grid, direction arrows, nullclines and equilibrium markers.

Redrawn from scratch whenever the viewport, the parameters, the field or a
visibility toggle changes; never per frame.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping

import numpy as np

from .theme import Theme

if TYPE_CHECKING:
    from phasekit.analysis.equilibria import Equilibrium
    from phasekit.config import EngineConfig
    from phasekit.fields.base import VectorField
    from phasekit.runtime.transform import Transform
    from .surface import Surface

__all__ = ["StaticRenderer"]

NULLCLINE_WIDTH = 3.0
EQUILIBRIUM_RING_WIDTH = 2.0
EQUILIBRIUM_INNER_RADIUS = 2.5


class StaticRenderer:
    def __init__(self, config: "EngineConfig", theme: Theme):
        self.config = config
        self.theme = theme

    def draw(
        self,
        surface: "Surface",
        transform: "Transform",
        field: "VectorField",
        params: Mapping[str, float],
        *,
        equilibria: Iterable["Equilibrium"] = (),
        show_grid: bool = True,
        show_field: bool = True,
        show_nullclines: bool = True,
    ) -> None:
        surface.clear()
        if show_grid:
            self.draw_grid(surface, transform)
        if show_field:
            self.draw_arrows(surface, transform, field, params)
        if show_nullclines:
            self.draw_nullclines(surface, transform, field, params)
        self.draw_equilibria(surface, transform, equilibria)

    def draw_grid(self, surface: "Surface", transform: "Transform") -> None:
        vp = transform.viewport
        n = self.config.grid_divisions
        color = self.theme.grid
        for i in range(n + 1):
            x = vp.x_min + i * vp.width / n
            (x0, y0), (x1, y1) = transform.data_to_pixel(x, vp.y_max), transform.data_to_pixel(x, vp.y_min)
            surface.draw_line(x0, y0, x1, y1, color, 1.0)
        for j in range(n + 1):
            y = vp.y_min + j * vp.height / n
            (x0, y0), (x1, y1) = transform.data_to_pixel(vp.x_min, y), transform.data_to_pixel(vp.x_max, y)
            surface.draw_line(x0, y0, x1, y1, color, 1.0)

    def draw_arrows(self, surface: "Surface", transform: "Transform", field: "VectorField", params) -> None:
        """Unit-direction arrows of constant pixel length on the interior lattice."""
        vp = transform.viewport
        steps = self.config.arrow_grid
        idx = np.arange(1, steps)
        xs = vp.x_min + idx * vp.width / steps
        ys = vp.y_min + idx * vp.height / steps
        X, Y = np.meshgrid(xs, ys, indexing="ij")
        with np.errstate(all="ignore"):
            U, V = field.evaluate(X, Y, params)
            U = np.broadcast_to(np.asarray(U, dtype=float), X.shape)
            V = np.broadcast_to(np.asarray(V, dtype=float), X.shape)
            mag = np.hypot(U, V)
        ok = np.isfinite(mag) & (mag > 0)

        length = self.config.arrow_length
        head_len, head_half = self.config.arrow_head
        color = self.theme.arrow
        px, py = transform.data_to_pixel(X, Y)
        for k in zip(*np.nonzero(ok)):
            sx, sy = float(px[k]), float(py[k])
            if not transform.contains_pixel(sx, sy):
                continue
            ux, uy = U[k] / mag[k], -V[k] / mag[k]
            ex, ey = sx + ux * length, sy + uy * length
            surface.draw_line(sx, sy, ex, ey, color, 1.0)
            # head: triangle (0,0) (-L,-H) (-L,H) rotated onto the shaft
            nx, ny = -uy, ux
            surface.fill_polygon(
                [
                    (ex, ey),
                    (ex - head_len * ux - head_half * nx, ey - head_len * uy - head_half * ny),
                    (ex - head_len * ux + head_half * nx, ey - head_len * uy + head_half * ny),
                ],
                color,
            )

    def draw_nullclines(self, surface: "Surface", transform: "Transform", field: "VectorField", params) -> None:
        for piece in field.nullclines(params, transform.viewport):
            color = self.theme.x_nullcline if piece.kind == "x" else self.theme.y_nullcline
            px, py = transform.data_to_pixel(piece.points[:, 0], piece.points[:, 1])
            surface.draw_polyline(np.column_stack([px, py]), color, NULLCLINE_WIDTH)

    def draw_equilibria(self, surface: "Surface", transform: "Transform", equilibria: Iterable["Equilibrium"]) -> None:
        radius = self.config.equilibrium_radius
        for eq in equilibria:
            if not transform.viewport.contains(eq.x, eq.y):
                continue
            cx, cy = transform.data_to_pixel(eq.x, eq.y)
            fill, ring = self.theme.equilibrium_colors(eq.classification)
            surface.fill_circle(cx, cy, radius, fill)
            surface.stroke_circle(cx, cy, radius, ring, EQUILIBRIUM_RING_WIDTH)
            surface.fill_circle(cx, cy, EQUILIBRIUM_INNER_RADIUS, self.theme.equilibrium_inner)
