# src/phasekit/steppers/__init__.py
from .base import StepperMeta, StepperSpec, hold_nonfinite
from .registry import register, get_stepper, registry, steppers

# Import concrete steppers to trigger auto-registration
from .ode import euler, rk2_midpoint, rk4
from .ode.rk4 import rk4_step

__all__ = [
    "StepperMeta", "StepperSpec", "hold_nonfinite",
    "register", "get_stepper", "registry", "steppers",
    "rk4_step",
]
