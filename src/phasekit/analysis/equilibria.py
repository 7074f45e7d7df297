# src/phasekit/analysis/equilibria.py
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

import numpy as np

from phasekit.runtime.transform import Viewport
from .stability import Stability, classify, invariants

if TYPE_CHECKING:
    from phasekit.fields.base import VectorField

__all__ = ["Equilibrium", "find_equilibria", "analyze"]


@dataclass(frozen=True)
class Equilibrium:
    x: float
    y: float
    classification: Stability = Stability.NONE
    trace: float = float("nan")
    det: float = float("nan")
    discriminant: float = float("nan")

    @property
    def label(self) -> str:
        return self.classification.value


def _newton(field: "VectorField", params, x: float, y: float, *, tol: float, max_iter: int):
    """Damped Newton iteration on f(x, y) = 0. Returns (x, y) or None."""
    with np.errstate(all="ignore"):
        fx, fy = (float(v) for v in field.evaluate(np.float64(x), np.float64(y), params))
        res = np.hypot(fx, fy)
        for _ in range(max_iter):
            if not np.isfinite(res):
                return None
            if res < tol:
                return x, y
            J = field.jacobian(x, y, params)
            if not np.all(np.isfinite(J)) or abs(np.linalg.det(J)) < 1e-14:
                return None
            dx, dy = np.linalg.solve(J, [-fx, -fy])
            lam = 1.0
            for _ in range(10):
                xn, yn = x + lam * dx, y + lam * dy
                fxn, fyn = (float(v) for v in field.evaluate(np.float64(xn), np.float64(yn), params))
                rn = np.hypot(fxn, fyn)
                if np.isfinite(rn) and rn < res:
                    break
                lam *= 0.5
            else:
                return None
            x, y, fx, fy, res = xn, yn, fxn, fyn, rn
    return (x, y) if res < tol else None


def find_equilibria(
    field: "VectorField",
    params: Mapping[str, float],
    viewport: Viewport,
    *,
    grid: int = 50,
    tol: float = 1e-9,
    max_iter: int = 50,
    max_seeds: int = 200,
) -> list[tuple[float, float]]:
    """
    Locate zeros of the field inside the viewport numerically.

    The viewport is sampled on a (grid+1)^2 lattice; every cell whose corners
    bracket zero in both components seeds a damped Newton refinement.
    Converged points are deduplicated.
    """
    xs = np.linspace(viewport.x_min, viewport.x_max, grid + 1)
    ys = np.linspace(viewport.y_min, viewport.y_max, grid + 1)
    X, Y = np.meshgrid(xs, ys, indexing="xy")
    with np.errstate(all="ignore"):
        U, V = field.evaluate(X, Y, params)
    U = np.broadcast_to(np.asarray(U, dtype=float), X.shape)
    V = np.broadcast_to(np.asarray(V, dtype=float), X.shape)

    def _brackets(Z):
        corners = np.stack([Z[:-1, :-1], Z[:-1, 1:], Z[1:, :-1], Z[1:, 1:]])
        finite = np.all(np.isfinite(corners), axis=0)
        return finite & (corners.min(axis=0) <= 0.0) & (corners.max(axis=0) >= 0.0)

    cells = np.argwhere(_brackets(U) & _brackets(V))
    if len(cells) == 0:
        return []
    cx = 0.5 * (xs[cells[:, 1]] + xs[cells[:, 1] + 1])
    cy = 0.5 * (ys[cells[:, 0]] + ys[cells[:, 0] + 1])
    if len(cells) > max_seeds:
        with np.errstate(all="ignore"):
            cu, cv = field.evaluate(cx, cy, params)
        order = np.argsort(np.hypot(cu, cv))[:max_seeds]
        cx, cy = cx[order], cy[order]

    scale = max(viewport.width, viewport.height)
    pad = 1e-9 * scale
    dedupe = 1e-6 * scale
    found: list[tuple[float, float]] = []
    for x0, y0 in zip(cx, cy):
        pt = _newton(field, params, float(x0), float(y0), tol=tol, max_iter=max_iter)
        if pt is None:
            continue
        x, y = pt
        if not (viewport.x_min - pad <= x <= viewport.x_max + pad and viewport.y_min - pad <= y <= viewport.y_max + pad):
            continue
        if all(abs(x - fx) > dedupe or abs(y - fy) > dedupe for fx, fy in found):
            found.append((x, y))
    return found


def analyze(
    field: "VectorField",
    params: Mapping[str, float],
    viewport: Viewport,
    *,
    eps: float = 1e-6,
) -> list[Equilibrium]:
    """Equilibria of `field` inside `viewport`, each with its stability label."""
    out: list[Equilibrium] = []
    for x, y in field.equilibria(params, viewport):
        if not viewport.contains(x, y):
            continue
        with np.errstate(all="ignore"):
            J = field.jacobian(x, y, params)
        label = classify(J, eps=eps)
        if label is Stability.NONE:
            out.append(Equilibrium(float(x), float(y), label))
        else:
            tr, det, disc = invariants(J)
            out.append(Equilibrium(float(x), float(y), label, tr, det, disc))
    return out
