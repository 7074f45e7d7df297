# src/phasekit/analysis/stability.py
from __future__ import annotations

from enum import Enum
from typing import NamedTuple

import numpy as np

__all__ = ["Stability", "LinearInvariants", "invariants", "classify"]


class Stability(str, Enum):
    STABLE_NODE = "stable node"
    UNSTABLE_NODE = "unstable node"
    SADDLE = "saddle"
    STABLE_SPIRAL = "stable spiral"
    UNSTABLE_SPIRAL = "unstable spiral"
    CENTER = "center"
    DEGENERATE = "degenerate"
    NON_HYPERBOLIC = "non-hyperbolic"
    NONE = "none"

    def __str__(self) -> str:
        return self.value

    @property
    def is_stable(self) -> bool:
        return self in (Stability.STABLE_NODE, Stability.STABLE_SPIRAL)


class LinearInvariants(NamedTuple):
    trace: float
    det: float
    discriminant: float


def invariants(jacobian) -> LinearInvariants:
    J = np.asarray(jacobian, dtype=float)
    if J.shape != (2, 2):
        raise ValueError(f"Expected a 2x2 Jacobian, got shape {J.shape}")
    trace = float(J[0, 0] + J[1, 1])
    det = float(J[0, 0] * J[1, 1] - J[0, 1] * J[1, 0])
    return LinearInvariants(trace, det, trace * trace - 4.0 * det)


def classify(jacobian, eps: float = 1e-6) -> Stability:
    """
    Classify an equilibrium from its 2x2 Jacobian.

    Order of the checks:
      - any non-finite entry            -> none
      - |det| < eps                     -> degenerate
      - det < 0                         -> saddle
      - det > 0, disc >= -eps           -> node (stable/unstable by trace),
                                           non-hyperbolic when |trace| <= eps
      - det > 0, disc < -eps            -> spiral (stable/unstable by trace),
                                           center when |trace| <= eps
    """
    J = np.asarray(jacobian, dtype=float)
    if not np.all(np.isfinite(J)):
        return Stability.NONE
    trace, det, disc = invariants(J)

    if abs(det) < eps:
        return Stability.DEGENERATE
    if det < 0:
        return Stability.SADDLE
    if disc >= -eps:
        if trace < -eps:
            return Stability.STABLE_NODE
        if trace > eps:
            return Stability.UNSTABLE_NODE
        return Stability.NON_HYPERBOLIC
    if trace < -eps:
        return Stability.STABLE_SPIRAL
    if trace > eps:
        return Stability.UNSTABLE_SPIRAL
    return Stability.CENTER
