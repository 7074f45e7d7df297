# src/phasekit/fields/models.py
"""
Closed-form planar models from mathematical biology.

Each model evaluates elementwise on numpy arrays, carries its analytic
Jacobian, and where the algebra allows it, closed-form equilibria and
parametric nullclines.
"""
from __future__ import annotations

import math
from typing import Mapping

import numpy as np

from phasekit.runtime.transform import Viewport
from .base import VectorField, Nullcline, clip_polyline, line_in_viewport

__all__ = [
    "HigginsSelkov",
    "HollingTanner",
    "LotkaVolterra",
    "GeneralizedLotkaVolterra",
    "InsulinGlucose",
    "LinearSystem",
    "CircularField",
]

_EPS = 1e-6


def _lines_to_nullclines(lines, viewport: Viewport, kind) -> list[Nullcline]:
    out = []
    for a, b, c in lines:
        seg = line_in_viewport(a, b, c, viewport)
        if seg is not None:
            out.append(Nullcline(seg, kind))
    return out


class HigginsSelkov(VectorField):
    """
    Higgins-Sel'kov glycolytic oscillator.

        dF/dt = v - c F A^2
        dA/dt = c F A^2 - k A

    F is fructose-6-phosphate, A is ADP.
    """
    name = "glycolysis"
    title = "Higgins-Sel'kov Glycolysis Model"
    labels = ("F6P Concentration (F)", "ADP Concentration (A)")
    defaults = {"v": 1.0, "c": 1.0, "k": 1.0}
    nonnegative = True
    default_viewport = Viewport(0.0, 3.0, 0.0, 3.0)

    def evaluate(self, x, y, params):
        v, c, k = params["v"], params["c"], params["k"]
        flux = c * x * y * y
        return v - flux, flux - k * y

    def jacobian(self, x, y, params):
        c, k = params["c"], params["k"]
        return np.array(
            [
                [-c * y * y, -2.0 * c * x * y],
                [c * y * y, 2.0 * c * x * y - k],
            ],
            dtype=float,
        )

    def equilibria(self, params, viewport):
        v, c, k = params["v"], params["c"], params["k"]
        # c F A^2 = v and c F A = k  =>  F* = k^2 / (c v), A* = v / k
        if v > 0 and c > 0 and k > 0:
            return [((k * k) / (c * v), v / k)]
        return []

    def nullclines(self, params, viewport):
        v, c, k = params["v"], params["c"], params["k"]
        if c <= 0:
            return self._contour_nullclines(params, viewport)
        f_lo = max(viewport.x_min, 1e-3)
        if f_lo >= viewport.x_max:
            return []
        fs = np.linspace(f_lo, viewport.x_max, 240)
        with np.errstate(all="ignore"):
            a_f = np.sqrt(v / (c * fs))
            a_a = k / (c * fs)
        return clip_polyline(fs, a_f, viewport, "x") + clip_polyline(fs, a_a, viewport, "y")

    def period_reference(self, params):
        v, c, k = params["v"], params["c"], params["k"]
        if v > 0 and c > 0 and k > 0:
            return (k * k) / (c * v)
        return None


class HollingTanner(VectorField):
    """
    Holling-Tanner predator-prey model (S predators, T prey).

        dS/dt = alpha S (1 - S / (q T))
        dT/dt = beta T (1 - T / m) - c S T / (h + T)
    """
    name = "holling-tanner"
    title = "Holling-Tanner Predator-Prey Model"
    labels = ("Shark Population (S)", "Tuna Population (T)")
    defaults = {"alpha": 1.0, "beta": 1.0, "c": 1.0, "h": 1.0, "m": 2.0, "q": 2.0}
    nonnegative = True
    default_viewport = Viewport(0.0, 3.0, 0.0, 3.0)

    def evaluate(self, x, y, params):
        alpha, beta, c, h, m, q = (params[n] for n in ("alpha", "beta", "c", "h", "m", "q"))
        # T = 0 is singular; keep it a float division so it yields inf/nan, not ZeroDivisionError
        y = np.asarray(y, dtype=float)
        ds = alpha * x * (1.0 - x / (q * y))
        dt = beta * y * (1.0 - y / m) - (c * x * y) / (h + y)
        return ds, dt

    def jacobian(self, x, y, params):
        alpha, beta, c, h, m, q = (params[n] for n in ("alpha", "beta", "c", "h", "m", "q"))
        with np.errstate(all="ignore"):
            qy = np.float64(q) * y
            return np.array(
                [
                    [alpha - 2.0 * alpha * x / qy, alpha * x * x / (qy * y)],
                    [-c * y / (h + y), beta - 2.0 * beta * y / m - c * x * h / (h + y) ** 2],
                ],
                dtype=float,
            )

    def equilibria(self, params, viewport):
        alpha, beta, c, h, m, q = (params[n] for n in ("alpha", "beta", "c", "h", "m", "q"))
        points = [(0.0, 0.0)]
        if m > 0:
            points.append((0.0, m))
        if min(alpha, beta, c, h, m, q) <= 0:
            return points
        # S = qT on the predator nullcline; substitute into the prey nullcline:
        # (beta/m) T^2 + (c q - beta (1 - h/m)) T - beta h = 0
        a = beta / m
        b = c * q - beta * (1.0 - h / m)
        cc = -beta * h
        disc = b * b - 4.0 * a * cc
        if disc < 0:
            return points
        root = math.sqrt(disc)
        t1 = (-b + root) / (2.0 * a)
        t2 = (-b - root) / (2.0 * a)
        t_eq = t1 if t1 > 0 else (t2 if t2 > 0 else None)
        if t_eq is not None:
            points.append((q * t_eq, t_eq))
        return points

    def nullclines(self, params, viewport):
        beta, c, h, m, q = (params[n] for n in ("beta", "c", "h", "m", "q"))
        ts = np.linspace(max(viewport.y_min, 0.0), viewport.y_max, 300)
        # T = 0 is singular for both equations
        t_pos = ts[ts > 0]
        out = []
        if q > 0:
            out += clip_polyline(q * t_pos, t_pos, viewport, "x")
        if c > 0 and m > 0:
            s = beta * (1.0 - t_pos / m) * (h + t_pos) / c
            out += clip_polyline(s, t_pos, viewport, "y")
        return out


class LotkaVolterra(VectorField):
    """
    Shark-tuna Lotka-Volterra interaction.

        dS/dt = -delta S + p S T
        dT/dt =  beta T - q S T
    """
    name = "shark-tuna"
    title = "Shark-Tuna Lotka-Volterra Model"
    labels = ("Sharks (S)", "Tuna (T)")
    defaults = {"p": 0.03, "q": 0.04, "beta": 0.6, "delta": 0.4}
    nonnegative = True
    default_viewport = Viewport(0.0, 50.0, 0.0, 50.0)

    def evaluate(self, x, y, params):
        p, q, beta, delta = params["p"], params["q"], params["beta"], params["delta"]
        return -delta * x + p * x * y, beta * y - q * x * y

    def jacobian(self, x, y, params):
        p, q, beta, delta = params["p"], params["q"], params["beta"], params["delta"]
        return np.array([[-delta + p * y, p * x], [-q * y, beta - q * x]], dtype=float)

    def equilibria(self, params, viewport):
        p, q, beta, delta = params["p"], params["q"], params["beta"], params["delta"]
        points = [(0.0, 0.0)]
        if p > 0 and q > 0:
            points.append((beta / q, delta / p))
        return points

    def nullclines(self, params, viewport):
        p, q, beta, delta = params["p"], params["q"], params["beta"], params["delta"]
        lines_x = [(0.0, p, delta)] if abs(p) > _EPS else []   # T = delta / p
        lines_y = [(q, 0.0, beta)] if abs(q) > _EPS else []    # S = beta / q
        return _lines_to_nullclines(lines_x, viewport, "x") + _lines_to_nullclines(lines_y, viewport, "y")


class GeneralizedLotkaVolterra(VectorField):
    """
    Two-species generalized Lotka-Volterra system.

        dP/dt = alpha P - gamma P^2 + u P Q
        dQ/dt = beta Q  - delta Q^2 + v P Q

    Every nullcline is a straight line a P + b Q = c.
    """
    name = "generalized-lv"
    title = "Generalized Lotka-Volterra Model"
    labels = ("P", "Q")
    defaults = {"alpha": 1.5, "beta": -2.0, "gamma": 0.0, "delta": 0.5, "u": -1.0, "v": 1.0}
    default_viewport = Viewport(0.0, 5.0, 0.0, 5.0)

    # name -> (params, viewport)
    PRESETS: dict[str, tuple[dict[str, float], Viewport]] = {
        "Default": (
            {"alpha": 1.5, "beta": -2.0, "gamma": 0.0, "delta": 0.5, "u": -1.0, "v": 1.0},
            Viewport(0.0, 5.0, 0.0, 5.0),
        ),
        "Predator-Prey": (
            {"alpha": -0.3, "beta": 0.4, "gamma": 0.0, "delta": 0.0, "u": 0.03, "v": -0.04},
            Viewport(0.0, 20.0, 0.0, 20.0),
        ),
        "Competition": (
            {"alpha": 0.9, "beta": 1.8, "gamma": 0.1, "delta": 0.5, "u": -0.8, "v": -0.9},
            Viewport(0.0, 5.0, 0.0, 5.0),
        ),
        "Cooperation": (
            {"alpha": 0.2, "beta": 1.0, "gamma": 0.1, "delta": 0.7, "u": 0.1, "v": 0.3},
            Viewport(0.0, 10.0, 0.0, 10.0),
        ),
    }

    def evaluate(self, x, y, params):
        alpha, beta, gamma, delta, u, v = (params[n] for n in ("alpha", "beta", "gamma", "delta", "u", "v"))
        return (
            alpha * x - gamma * x * x + u * x * y,
            beta * y - delta * y * y + v * x * y,
        )

    def jacobian(self, x, y, params):
        alpha, beta, gamma, delta, u, v = (params[n] for n in ("alpha", "beta", "gamma", "delta", "u", "v"))
        return np.array(
            [
                [alpha - 2.0 * gamma * x + u * y, u * x],
                [v * y, beta - 2.0 * delta * y + v * x],
            ],
            dtype=float,
        )

    @staticmethod
    def _nullcline_lines(params):
        alpha, beta, gamma, delta, u, v = (params[n] for n in ("alpha", "beta", "gamma", "delta", "u", "v"))
        p_lines = [(1.0, 0.0, 0.0), (-gamma, u, -alpha)]
        q_lines = [(0.0, 1.0, 0.0), (v, -delta, -beta)]
        return p_lines, q_lines

    def equilibria(self, params, viewport):
        p_lines, q_lines = self._nullcline_lines(params)
        points: list[tuple[float, float]] = []
        for a1, b1, c1 in p_lines:
            if abs(a1) < _EPS and abs(b1) < _EPS:
                continue
            for a2, b2, c2 in q_lines:
                if abs(a2) < _EPS and abs(b2) < _EPS:
                    continue
                det = a1 * b2 - a2 * b1
                if abs(det) < _EPS:
                    continue
                p = (c1 * b2 - c2 * b1) / det
                q = (a1 * c2 - a2 * c1) / det
                if p < -_EPS or q < -_EPS:
                    continue
                p, q = max(p, 0.0), max(q, 0.0)
                if all(abs(p - e[0]) >= _EPS or abs(q - e[1]) >= _EPS for e in points):
                    points.append((p, q))
        return points

    def nullclines(self, params, viewport):
        p_lines, q_lines = self._nullcline_lines(params)
        return _lines_to_nullclines(p_lines, viewport, "x") + _lines_to_nullclines(q_lines, viewport, "y")


class InsulinGlucose(VectorField):
    """
    Glucose-insulin regulation without delays.

        dG/dt = m + alpha / (1 + exp(k I - c)) - s I G
        dI/dt = q B G^2 / (1 + G^2) - gamma I
    """
    name = "insulin-glucose"
    title = "Insulin-Glucose Regulation"
    labels = ("Glucose (G)", "Insulin (I)")
    defaults = {"m": 0.5, "s": 1.0, "q": 1.0, "B": 1.0, "gamma": 1.0, "alpha": 0.0, "k": 1.0, "c": 1.0}
    nonnegative = True
    default_viewport = Viewport(0.0, 3.0, 0.0, 3.0)

    def evaluate(self, x, y, params):
        m, s, q, B, gamma, alpha, k, c = (params[n] for n in ("m", "s", "q", "B", "gamma", "alpha", "k", "c"))
        liver = alpha / (1.0 + np.exp(k * y - c))
        hill = x * x / (1.0 + x * x)
        return m + liver - s * y * x, q * B * hill - gamma * y

    def jacobian(self, x, y, params):
        s, q, B, gamma, alpha, k, c = (params[n] for n in ("s", "q", "B", "gamma", "alpha", "k", "c"))
        e = math.exp(min(k * y - c, 700.0))
        return np.array(
            [
                [-s * y, -alpha * k * e / (1.0 + e) ** 2 - s * x],
                [q * B * 2.0 * x / (1.0 + x * x) ** 2, -gamma],
            ],
            dtype=float,
        )

    def nullclines(self, params, viewport):
        q, B, gamma = params["q"], params["B"], params["gamma"]
        out = self._contour_nullclines(params, viewport, kinds=("x",))
        if gamma > 0:
            gs = np.linspace(viewport.x_min, viewport.x_max, 300)
            out += clip_polyline(gs, q * B * gs * gs / ((1.0 + gs * gs) * gamma), viewport, "y")
        else:
            out += self._contour_nullclines(params, viewport, kinds=("y",))
        return out


class LinearSystem(VectorField):
    """Linear planar system dx/dt = a x + b y, dy/dt = c x + d y."""
    name = "linear"
    title = "Linear System"
    defaults = {"a": 0.0, "b": 1.0, "c": -1.0, "d": 0.0}

    def evaluate(self, x, y, params):
        return params["a"] * x + params["b"] * y, params["c"] * x + params["d"] * y

    def jacobian(self, x, y, params):
        return np.array([[params["a"], params["b"]], [params["c"], params["d"]]], dtype=float)

    def equilibria(self, params, viewport):
        return [(0.0, 0.0)]

    def nullclines(self, params, viewport):
        a, b, c, d = params["a"], params["b"], params["c"], params["d"]
        out = []
        if abs(a) > _EPS or abs(b) > _EPS:
            out += _lines_to_nullclines([(a, b, 0.0)], viewport, "x")
        if abs(c) > _EPS or abs(d) > _EPS:
            out += _lines_to_nullclines([(c, d, 0.0)], viewport, "y")
        return out


class CircularField(LinearSystem):
    """Rotation field dx/dt = y, dy/dt = -x; the fallback for invalid systems."""
    name = "circular"
    title = "Circular Field"
    defaults = {}

    def evaluate(self, x, y, params):
        return y, -x

    def jacobian(self, x, y, params):
        return np.array([[0.0, 1.0], [-1.0, 0.0]])

    def nullclines(self, params, viewport):
        return super().nullclines({"a": 0.0, "b": 1.0, "c": -1.0, "d": 0.0}, viewport)
