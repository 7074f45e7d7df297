# src/phasekit/steppers/ode/rk4.py
"""
RK4 (Runge-Kutta 4th order, explicit, fixed-step) particle stepper.

Advances a whole particle arena at once: x and y are arrays of equal shape and
every stage is a single vectorized field evaluation.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Mapping

import numpy as np

from ..base import StepperMeta, hold_nonfinite

if TYPE_CHECKING:
    from phasekit.fields.base import VectorField

__all__ = ["RK4Spec", "rk4_step"]


def rk4_step(field: "VectorField", x, y, dt: float, params: Mapping[str, float]):
    """
    One classic RK4 step of the autonomous field.

        k1 = f(p)
        k2 = f(p + dt/2 * k1)
        k3 = f(p + dt/2 * k2)
        k4 = f(p + dt * k3)
        p' = p + dt/6 * (k1 + 2*k2 + 2*k3 + k4)

    Pure: the inputs are not modified. Particles whose result is not finite
    keep their current position. dt == 0 returns the input unchanged.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if dt == 0:
        return x, y
    half = 0.5 * dt
    with np.errstate(all="ignore"):
        k1x, k1y = field.evaluate(x, y, params)
        k2x, k2y = field.evaluate(x + half * k1x, y + half * k1y, params)
        k3x, k3y = field.evaluate(x + half * k2x, y + half * k2y, params)
        k4x, k4y = field.evaluate(x + dt * k3x, y + dt * k3y, params)
        x_next = x + (dt / 6.0) * (k1x + 2.0 * k2x + 2.0 * k3x + k4x)
        y_next = y + (dt / 6.0) * (k1y + 2.0 * k2y + 2.0 * k3y + k4y)
    return hold_nonfinite(x, y, x_next, y_next)


class RK4Spec:
    """
    Classic 4th-order Runge-Kutta stepper (explicit, fixed-step).
    """

    def __init__(self, meta: StepperMeta | None = None):
        if meta is None:
            meta = StepperMeta(
                name="rk4",
                family="runge-kutta",
                order=4,
                aliases=("rk4_classic", "classical_rk4"),
            )
        self.meta = meta

    def step(self, field, x, y, dt, params):
        return rk4_step(field, x, y, dt, params)


# Auto-register on module import
def _auto_register():
    from ..registry import register
    spec = RK4Spec()
    register(spec)

_auto_register()
