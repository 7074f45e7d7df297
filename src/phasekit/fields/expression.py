# src/phasekit/fields/expression.py
"""
Vector field backed by an external equation evaluator.

The evaluator turns two user-entered equation strings into a callable field
and reports whether they are valid. It is supplied by the caller; this module
only adapts it to the `VectorField` interface and provides the safe fallback.
"""
from __future__ import annotations

from typing import Callable, Mapping, Protocol
import warnings

import numpy as np

from .base import VectorField
from .models import CircularField

__all__ = ["ExpressionSystem", "ExpressionField"]


class ExpressionSystem(Protocol):
    """Interface expected from the equation evaluator collaborator."""

    def is_valid_system(self) -> bool: ...
    def get_error(self) -> str: ...
    def evaluate_field(self, x: float, y: float) -> tuple[float, float]: ...


_FALLBACK = CircularField()


class ExpressionField(VectorField):
    """
    Generic calculator field: dx/dt, dy/dt given as equation strings.

    When the evaluator reports an invalid system (or cannot be constructed at
    all) the field evaluates the circular fallback `x' = y, y' = -x` and
    `error()` returns the evaluator's message unchanged.
    """
    name = "calculator"
    title = "Dynamical Systems Calculator"
    labels = ("x", "y")
    defaults = {}

    def __init__(
        self,
        x_equation: str,
        y_equation: str,
        factory: Callable[[str, str], ExpressionSystem],
    ):
        self.x_equation = x_equation
        self.y_equation = y_equation
        self.system: ExpressionSystem | None = None
        self._error = ""
        try:
            system = factory(x_equation, y_equation)
        except Exception as exc:
            self._error = f"Unexpected error: {exc}"
        else:
            self.system = system
            if not system.is_valid_system():
                self._error = system.get_error()
        if self._error:
            warnings.warn(
                f"Invalid system ({x_equation!r}, {y_equation!r}): {self._error}; using circular fallback field.",
                RuntimeWarning,
                stacklevel=2,
            )

    def is_valid(self) -> bool:
        return self.system is not None and not self._error

    def error(self) -> str:
        return self._error

    def evaluate(self, x, y, params: Mapping[str, float]):
        if not self.is_valid():
            return _FALLBACK.evaluate(x, y, params)
        if np.ndim(x) == 0 and np.ndim(y) == 0:
            return self._evaluate_point(float(x), float(y))
        xb, yb = np.broadcast_arrays(np.asarray(x, dtype=float), np.asarray(y, dtype=float))
        U = np.empty(xb.shape, dtype=float)
        V = np.empty(xb.shape, dtype=float)
        for idx in np.ndindex(xb.shape):
            U[idx], V[idx] = self._evaluate_point(float(xb[idx]), float(yb[idx]))
        return U, V

    def _evaluate_point(self, x: float, y: float) -> tuple[float, float]:
        # A point the evaluator cannot handle (domain error, overflow) becomes
        # non-finite; the integrator then holds the particle in place.
        try:
            vx, vy = self.system.evaluate_field(x, y)
            return float(vx), float(vy)
        except (ArithmeticError, ValueError, TypeError):
            return float("nan"), float("nan")
