# src/phasekit/steppers/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Protocol

import numpy as np

if TYPE_CHECKING:
    from phasekit.fields.base import VectorField

__all__ = ["StepperMeta", "StepperSpec", "hold_nonfinite"]


@dataclass(frozen=True)
class StepperMeta:
    """
    Public metadata for a fixed-step particle stepper.
    """
    name: str
    family: str = ""
    order: int = 1
    aliases: tuple[str, ...] = ()


class StepperSpec(Protocol):
    """
    Interface of a registered stepper.
    Implementations MUST:
      - expose `meta: StepperMeta`
      - provide `step(field, x, y, dt, params) -> (x_next, y_next)`, pure and
        vectorized over particle arrays
    """

    meta: StepperMeta

    def step(
        self,
        field: "VectorField",
        x: np.ndarray,
        y: np.ndarray,
        dt: float,
        params: Mapping[str, float],
    ) -> tuple[np.ndarray, np.ndarray]: ...


def hold_nonfinite(x, y, x_next, y_next):
    """Replace non-finite proposals by the current position, per particle."""
    bad = ~(np.isfinite(x_next) & np.isfinite(y_next))
    if np.ndim(bad) == 0:
        if bad:
            return x, y
        return x_next, y_next
    if bad.any():
        x_next = np.where(bad, x, x_next)
        y_next = np.where(bad, y, y_next)
    return x_next, y_next
