# src/phasekit/analysis/timeseries.py
"""
Time course of the glucose-insulin feedback model with delays.

    G' = m(t) + alpha / (1 + exp(k I(t - sigma) - c)) - s I G
    I' = q B f(G(t - tau)) - gamma I,      f(G) = G^2 / (1 + G^2)

Integrated with forward Euler over 20 hours. Delays are given in minutes and
rounded to whole steps. Outputs are rescaled to mmol/L (x5) and pmol/L (x6).
"""
from __future__ import annotations

from collections import deque
from typing import Literal, Mapping, NamedTuple

import numpy as np

from phasekit.fields.models import InsulinGlucose

__all__ = ["InsulinGlucoseResponse", "insulin_glucose_response", "glucose_input", "MEAL_TIMES", "CHALLENGE_TIME"]

InputMode = Literal["baseline", "meals", "challenge"]

MEAL_TIMES = (6.0, 10.0, 16.0)
MEAL_HALF_WIDTH = 0.25
MEAL_SIZE = 0.8
CHALLENGE_TIME = 5.0
GLUCOSE_SCALE = 5.0
INSULIN_SCALE = 6.0


class InsulinGlucoseResponse(NamedTuple):
    time: np.ndarray
    glucose: np.ndarray
    insulin: np.ndarray
    mode: str


def glucose_input(t: float, m: float, mode: InputMode) -> float:
    """Effective glucose production m(t) for the chosen input mode."""
    if mode == "baseline":
        return m
    if mode == "challenge":
        return m + float(np.exp(-((t - CHALLENGE_TIME) ** 2)))
    if mode == "meals":
        surge = 0.0
        for mt in MEAL_TIMES:
            if abs(t - mt) < MEAL_HALF_WIDTH:
                surge += MEAL_SIZE * float(np.exp(-(((t - mt) * 4.0) ** 2)))
        return m + surge
    raise ValueError(f"Unknown input mode '{mode}'; expected baseline, meals or challenge")


def insulin_glucose_response(
    params: Mapping[str, float] | None = None,
    mode: InputMode = "baseline",
    *,
    tau: float = 0.0,
    sigma: float = 0.0,
    dt: float = 0.1,
    t_max: float = 20.0,
    g0: float = 1.0,
    i0: float = 0.5,
) -> InsulinGlucoseResponse:
    """
    Simulate the delayed model and return the sampled time course.

    `tau` delays glucose sensing by the pancreas, `sigma` delays the insulin
    effect on liver glucose output; both in minutes while `dt` and `t_max`
    are in hours. The state is clamped at zero after every step.
    """
    if tau < 0 or sigma < 0:
        raise ValueError("delays must be non-negative")
    if dt <= 0:
        raise ValueError("dt must be positive")
    if mode not in ("baseline", "meals", "challenge"):
        raise ValueError(f"Unknown input mode '{mode}'; expected baseline, meals or challenge")
    p = InsulinGlucose().resolve_params(params)

    tau_steps = int(round(tau / 60.0 / dt))
    sigma_steps = int(round(sigma / 60.0 / dt))
    G, I = float(g0), float(i0)
    g_hist: deque[float] = deque([G] * (tau_steps + 1), maxlen=tau_steps + 1)
    i_hist: deque[float] = deque([I] * (sigma_steps + 1), maxlen=sigma_steps + 1)

    n = int(round(t_max / dt))
    time = np.empty(n + 1)
    glucose = np.empty(n + 1)
    insulin = np.empty(n + 1)
    for i in range(n + 1):
        t = i * dt
        time[i] = t
        glucose[i] = G * GLUCOSE_SCALE
        insulin[i] = I * INSULIN_SCALE

        g_tau = g_hist[0]
        i_sigma = i_hist[0]
        hill = g_tau * g_tau / (1.0 + g_tau * g_tau)
        liver = p["alpha"] / (1.0 + np.exp(p["k"] * i_sigma - p["c"]))
        dG = glucose_input(t, p["m"], mode) + liver - p["s"] * I * G
        dI = p["q"] * p["B"] * hill - p["gamma"] * I

        G = max(0.0, G + dG * dt)
        I = max(0.0, I + dI * dt)
        g_hist.append(G)
        i_hist.append(I)

    return InsulinGlucoseResponse(time, glucose, insulin, mode)
