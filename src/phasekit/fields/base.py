# src/phasekit/fields/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal, Mapping, Sequence

import contourpy
import numpy as np

from phasekit.runtime.transform import Viewport

__all__ = ["VectorField", "Nullcline", "clip_polyline", "line_in_viewport"]

NullclineKind = Literal["x", "y"]


@dataclass(frozen=True)
class Nullcline:
    """
    One connected nullcline piece in data space.

    kind == "x": the curve where dx/dt = 0; kind == "y": where dy/dt = 0.
    points has shape (n, 2).
    """
    points: np.ndarray
    kind: NullclineKind


def clip_polyline(xs: np.ndarray, ys: np.ndarray, viewport: Viewport, kind: NullclineKind) -> list[Nullcline]:
    """Split a sampled curve into the runs that lie inside the viewport."""
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    keep = np.isfinite(xs) & np.isfinite(ys) & viewport.contains(xs, ys)
    pieces: list[Nullcline] = []
    start = None
    for i, flag in enumerate(keep):
        if flag and start is None:
            start = i
        elif not flag and start is not None:
            if i - start >= 2:
                pieces.append(Nullcline(np.column_stack([xs[start:i], ys[start:i]]), kind))
            start = None
    if start is not None and len(xs) - start >= 2:
        pieces.append(Nullcline(np.column_stack([xs[start:], ys[start:]]), kind))
    return pieces


def line_in_viewport(a: float, b: float, c: float, viewport: Viewport, *, eps: float = 1e-6) -> np.ndarray | None:
    """
    Segment of the line a*x + b*y = c inside the viewport, found by
    intersecting it with the four viewport edges. Returns a (2, 2) array or None.
    """
    vp = viewport
    hits: list[tuple[float, float]] = []
    if abs(b) > eps:
        for x in (vp.x_min, vp.x_max):
            y = (c - a * x) / b
            if vp.y_min <= y <= vp.y_max:
                hits.append((x, y))
    if abs(a) > eps:
        for y in (vp.y_min, vp.y_max):
            x = (c - b * y) / a
            if vp.x_min <= x <= vp.x_max:
                hits.append((x, y))
    unique: list[tuple[float, float]] = []
    for p in hits:
        if all(abs(p[0] - q[0]) > eps or abs(p[1] - q[1]) > eps for q in unique):
            unique.append(p)
    if len(unique) < 2:
        return None
    return np.array(unique[:2], dtype=float)


class VectorField:
    """
    Planar autonomous vector field (dx/dt, dy/dt) = f(x, y; params).

    Subclasses implement `evaluate`; they may override `jacobian`,
    `equilibria` and `nullclines` with closed forms. The defaults are
    numerical. `evaluate` must accept numpy arrays and broadcast.
    """
    name: ClassVar[str] = "field"
    title: ClassVar[str] = "Vector field"
    labels: ClassVar[tuple[str, str]] = ("x", "y")
    defaults: ClassVar[Mapping[str, float]] = {}
    nonnegative: ClassVar[bool] = False
    default_viewport: ClassVar[Viewport] = Viewport(-5.0, 5.0, -5.0, 5.0)

    # -- evaluation -------------------------------------------------------
    def evaluate(self, x, y, params: Mapping[str, float]):
        raise NotImplementedError

    def is_valid(self) -> bool:
        return True

    def error(self) -> str:
        return ""

    def resolve_params(self, params: Mapping[str, float] | None = None) -> dict[str, float]:
        """Merge `params` over the defaults; unknown names raise KeyError."""
        merged = {k: float(v) for k, v in self.defaults.items()}
        if params:
            for key, val in params.items():
                if key not in merged:
                    raise KeyError(f"Unknown param '{key}' for {self.name}; available: {sorted(merged)}")
                merged[key] = float(val)
        return merged

    def project(self, x, y):
        """Map an integrated state back into the model's domain."""
        if self.nonnegative:
            return np.maximum(x, 0.0), np.maximum(y, 0.0)
        return x, y

    # -- analysis ---------------------------------------------------------
    def jacobian(self, x: float, y: float, params: Mapping[str, float]) -> np.ndarray:
        """Central-difference Jacobian [[fx_x, fx_y], [fy_x, fy_y]]."""
        hx = 1e-6 * max(1.0, abs(x))
        hy = 1e-6 * max(1.0, abs(y))
        with np.errstate(all="ignore"):
            fxp, gxp = self.evaluate(x + hx, y, params)
            fxm, gxm = self.evaluate(x - hx, y, params)
            fyp, gyp = self.evaluate(x, y + hy, params)
            fym, gym = self.evaluate(x, y - hy, params)
        return np.array(
            [
                [(fxp - fxm) / (2 * hx), (fyp - fym) / (2 * hy)],
                [(gxp - gxm) / (2 * hx), (gyp - gym) / (2 * hy)],
            ],
            dtype=float,
        )

    def equilibria(self, params: Mapping[str, float], viewport: Viewport) -> list[tuple[float, float]]:
        from phasekit.analysis.equilibria import find_equilibria

        return find_equilibria(self, params, viewport)

    def nullclines(self, params: Mapping[str, float], viewport: Viewport) -> list[Nullcline]:
        return self._contour_nullclines(params, viewport)

    def period_reference(self, params: Mapping[str, float]) -> float | None:
        """x value of the Poincare section used for period detection, if any."""
        return None

    # -- helpers ----------------------------------------------------------
    def _contour_nullclines(
        self,
        params: Mapping[str, float],
        viewport: Viewport,
        *,
        kinds: Sequence[NullclineKind] = ("x", "y"),
        grid: int = 120,
    ) -> list[Nullcline]:
        xs = np.linspace(viewport.x_min, viewport.x_max, grid)
        ys = np.linspace(viewport.y_min, viewport.y_max, grid)
        X, Y = np.meshgrid(xs, ys, indexing="xy")
        with np.errstate(all="ignore"):
            U, V = self.evaluate(X, Y, params)
        U = np.broadcast_to(np.asarray(U, dtype=float), X.shape)
        V = np.broadcast_to(np.asarray(V, dtype=float), X.shape)
        out: list[Nullcline] = []
        for kind, Z in (("x", U), ("y", V)):
            if kind not in kinds:
                continue
            Z = np.ma.masked_invalid(Z)
            if Z.count() == 0 or np.ma.ptp(Z) == 0:
                continue
            gen = contourpy.contour_generator(x=X, y=Y, z=Z)
            for line in gen.lines(0.0):
                if len(line) >= 2:
                    out.append(Nullcline(np.asarray(line, dtype=float), kind))
        return out
