# src/phasekit/analysis/__init__.py
from __future__ import annotations

from .stability import Stability, LinearInvariants, invariants, classify
from .equilibria import Equilibrium, find_equilibria, analyze
from .period import PeriodDetector
from .timeseries import InsulinGlucoseResponse, insulin_glucose_response, glucose_input

__all__ = [
    "Stability", "LinearInvariants", "invariants", "classify",
    "Equilibrium", "find_equilibria", "analyze",
    "PeriodDetector",
    "InsulinGlucoseResponse", "insulin_glucose_response", "glucose_input",
]
