# src/phasekit/steppers/ode/euler.py
"""
Explicit Euler particle stepper: p' = p + dt * f(p).
"""
from __future__ import annotations

import numpy as np

from ..base import StepperMeta, hold_nonfinite

__all__ = ["EulerSpec"]


class EulerSpec:
    def __init__(self, meta: StepperMeta | None = None):
        if meta is None:
            meta = StepperMeta(
                name="euler",
                family="runge-kutta",
                order=1,
                aliases=("fwd_euler", "forward_euler"),
            )
        self.meta = meta

    def step(self, field, x, y, dt, params):
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if dt == 0:
            return x, y
        with np.errstate(all="ignore"):
            dx, dy = field.evaluate(x, y, params)
            x_next = x + dt * dx
            y_next = y + dt * dy
        return hold_nonfinite(x, y, x_next, y_next)


# Auto-register on module import
def _auto_register():
    from ..registry import register
    spec = EulerSpec()
    register(spec)

_auto_register()
