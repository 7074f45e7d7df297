# src/phasekit/steppers/ode/rk2_midpoint.py
"""
RK2 (explicit midpoint) particle stepper.

    k1 = f(p)
    k2 = f(p + dt/2 * k1)
    p' = p + dt * k2
"""
from __future__ import annotations

import numpy as np

from ..base import StepperMeta, hold_nonfinite

__all__ = ["RK2Spec"]


class RK2Spec:
    def __init__(self, meta: StepperMeta | None = None):
        if meta is None:
            meta = StepperMeta(
                name="rk2",
                family="runge-kutta",
                order=2,
                aliases=("midpoint", "rk2_midpoint"),
            )
        self.meta = meta

    def step(self, field, x, y, dt, params):
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if dt == 0:
            return x, y
        half = 0.5 * dt
        with np.errstate(all="ignore"):
            k1x, k1y = field.evaluate(x, y, params)
            k2x, k2y = field.evaluate(x + half * k1x, y + half * k1y, params)
            x_next = x + dt * k2x
            y_next = y + dt * k2y
        return hold_nonfinite(x, y, x_next, y_next)


# Auto-register on module import
def _auto_register():
    from ..registry import register
    spec = RK2Spec()
    register(spec)

_auto_register()
