# tests/unit/test_expression_field.py
from __future__ import annotations

import math

import numpy as np
import pytest

from phasekit.fields import ExpressionField


class _FakeSystem:
    """Tiny evaluator understanding a handful of fixed equation strings."""

    _TABLE = {
        "y": lambda x, y: y,
        "-x": lambda x, y: -x,
        "1/x": lambda x, y: 1.0 / x,
        "x*y": lambda x, y: x * y,
    }

    def __init__(self, x_eq, y_eq):
        self.x_eq, self.y_eq = x_eq, y_eq
        self._valid = x_eq in self._TABLE and y_eq in self._TABLE

    def is_valid_system(self):
        return self._valid

    def get_error(self):
        return "" if self._valid else f"Cannot parse equation '{self.x_eq}'"

    def evaluate_field(self, x, y):
        return self._TABLE[self.x_eq](x, y), self._TABLE[self.y_eq](x, y)


def test_valid_system_evaluates_through_evaluator():
    field = ExpressionField("x*y", "-x", _FakeSystem)
    assert field.is_valid()
    assert field.error() == ""
    assert field.evaluate(2.0, 3.0, {}) == (6.0, -2.0)
    u, v = field.evaluate(np.array([[1.0, 2.0]]), np.array([[3.0, 4.0]]), {})
    assert u.shape == (1, 2)
    np.testing.assert_allclose(u, [[3.0, 8.0]])
    np.testing.assert_allclose(v, [[-1.0, -2.0]])


def test_invalid_system_falls_back_to_circular_field():
    with pytest.warns(RuntimeWarning, match="circular fallback"):
        field = ExpressionField("x +* y", "-x", _FakeSystem)
    assert not field.is_valid()
    assert field.error() == "Cannot parse equation 'x +* y'"
    u, v = field.evaluate(np.array([1.0, 0.0]), np.array([0.0, 1.0]), {})
    np.testing.assert_allclose(u, [0.0, 1.0])
    np.testing.assert_allclose(v, [-1.0, 0.0])


def test_factory_exception_becomes_unexpected_error():
    def broken(x_eq, y_eq):
        raise RuntimeError("boom")

    with pytest.warns(RuntimeWarning):
        field = ExpressionField("y", "-x", broken)
    assert not field.is_valid()
    assert field.error() == "Unexpected error: boom"
    assert field.evaluate(0.0, 2.0, {}) == (2.0, -0.0)


def test_point_level_domain_error_is_nan():
    field = ExpressionField("1/x", "y", _FakeSystem)
    u, v = field.evaluate(np.array([0.0, 2.0]), np.array([1.0, 1.0]), {})
    assert math.isnan(u[0]) and math.isnan(v[0])
    assert u[1] == pytest.approx(0.5)
    assert v[1] == pytest.approx(1.0)
