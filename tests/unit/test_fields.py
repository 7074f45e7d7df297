# tests/unit/test_fields.py
from __future__ import annotations

import math

import numpy as np
import pytest

from phasekit.analysis import Stability, analyze
from phasekit.errors import UnknownModelError
from phasekit.fields import (
    CircularField,
    GeneralizedLotkaVolterra,
    HigginsSelkov,
    HollingTanner,
    InsulinGlucose,
    LinearSystem,
    LotkaVolterra,
    get_model,
    list_models,
)
from phasekit.runtime.transform import Viewport


def _assert_rest_point(field, params, point, atol=1e-9):
    u, v = field.evaluate(point[0], point[1], params)
    assert abs(float(u)) < atol
    assert abs(float(v)) < atol


def test_registry_lists_closed_form_models():
    names = list_models()
    for name in ("glycolysis", "holling-tanner", "shark-tuna", "generalized-lv", "insulin-glucose", "linear", "circular"):
        assert name in names
    assert isinstance(get_model("glycolysis"), HigginsSelkov)


def test_unknown_model_lists_available():
    with pytest.raises(UnknownModelError) as err:
        get_model("lorenz")
    assert "lorenz" in str(err.value)
    assert "glycolysis" in str(err.value)
    with pytest.raises(KeyError):
        get_model("lorenz")


def test_unknown_param_raises_keyerror():
    field = HigginsSelkov()
    with pytest.raises(KeyError, match="Unknown param 'zeta'"):
        field.resolve_params({"zeta": 1.0})
    assert field.resolve_params({"v": 2}) == {"v": 2.0, "c": 1.0, "k": 1.0}


def test_higgins_selkov_unit_params_rest_at_one_one():
    field = HigginsSelkov()
    params = field.resolve_params({"v": 1.0, "c": 1.0, "k": 1.0})
    assert field.equilibria(params, field.default_viewport) == [(1.0, 1.0)]
    _assert_rest_point(field, params, (1.0, 1.0))
    found = analyze(field, params, field.default_viewport)
    assert len(found) == 1
    assert found[0].classification is Stability.CENTER
    assert field.period_reference(params) == pytest.approx(1.0)


def test_higgins_selkov_general_equilibrium():
    field = HigginsSelkov()
    params = field.resolve_params({"v": 1.2, "c": 0.8, "k": 1.5})
    (x, y), = field.equilibria(params, Viewport(0.0, 10.0, 0.0, 10.0))
    assert x == pytest.approx(1.5 ** 2 / (0.8 * 1.2))
    assert y == pytest.approx(1.2 / 1.5)
    _assert_rest_point(field, params, (x, y))


def test_holling_tanner_coexistence_point():
    field = HollingTanner()
    params = field.resolve_params()
    points = field.equilibria(params, field.default_viewport)
    assert (0.0, 0.0) in points
    assert (0.0, 2.0) in points
    inner = [p for p in points if p[0] > 0]
    assert len(inner) == 1
    s, t = inner[0]
    t_expected = (-1.5 + math.sqrt(4.25)) / 1.0
    assert t == pytest.approx(t_expected)
    assert s == pytest.approx(2.0 * t_expected)
    _assert_rest_point(field, params, (s, t))


def test_holling_tanner_prey_axis_is_finite_off_axis():
    field = HollingTanner()
    params = field.resolve_params()
    with np.errstate(all="ignore"):
        u, _ = field.evaluate(np.array([1.0]), np.array([0.0]), params)
    assert not np.isfinite(u).all()


def test_shark_tuna_equilibria():
    field = LotkaVolterra()
    params = field.resolve_params()
    points = field.equilibria(params, field.default_viewport)
    assert points[0] == (0.0, 0.0)
    np.testing.assert_allclose(points[1], (15.0, 40.0 / 3.0))
    _assert_rest_point(field, params, points[1])
    labels = {(round(e.x, 6), round(e.y, 6)): e.classification for e in analyze(field, params, field.default_viewport)}
    assert labels[(0.0, 0.0)] is Stability.SADDLE
    assert labels[(15.0, round(40.0 / 3.0, 6))] is Stability.CENTER


def test_generalized_lv_default_points():
    field = GeneralizedLotkaVolterra()
    params = field.resolve_params()
    points = field.equilibria(params, field.default_viewport)
    assert (0.0, 0.0) in points
    assert any(p == pytest.approx((2.75, 1.5)) for p in points)
    for p in points:
        _assert_rest_point(field, params, p)
        assert p[0] >= 0 and p[1] >= 0


@pytest.mark.parametrize("preset", sorted(GeneralizedLotkaVolterra.PRESETS))
def test_generalized_lv_presets_have_rest_points(preset):
    field = GeneralizedLotkaVolterra()
    values, viewport = GeneralizedLotkaVolterra.PRESETS[preset]
    params = field.resolve_params(values)
    for p in field.equilibria(params, viewport):
        _assert_rest_point(field, params, p, atol=1e-8)


def test_insulin_glucose_numerical_equilibrium():
    field = InsulinGlucose()
    params = field.resolve_params()
    _assert_rest_point(field, params, (1.0, 0.5))
    points = field.equilibria(params, field.default_viewport)
    assert len(points) == 1
    np.testing.assert_allclose(points[0], (1.0, 0.5), atol=1e-6)


def test_linear_system_default_is_rotation():
    field = LinearSystem()
    params = field.resolve_params()
    u, v = field.evaluate(np.array([1.0, 0.0]), np.array([0.0, 1.0]), params)
    np.testing.assert_allclose(u, [0.0, 1.0])
    np.testing.assert_allclose(v, [-1.0, 0.0])
    u2, v2 = CircularField().evaluate(np.array([1.0, 0.0]), np.array([0.0, 1.0]), {})
    np.testing.assert_allclose(u2, u)
    np.testing.assert_allclose(v2, v)


def test_numerical_jacobian_matches_closed_form():
    field = HollingTanner()
    params = field.resolve_params()
    closed = field.jacobian(1.1, 0.6, params)
    numeric = super(HollingTanner, field).jacobian(1.1, 0.6, params)
    np.testing.assert_allclose(numeric, closed, rtol=1e-5, atol=1e-7)


def test_project_clamps_population_models_only():
    x, y = HigginsSelkov().project(np.array([-0.5, 1.0]), np.array([2.0, -1e-3]))
    np.testing.assert_array_equal(x, [0.0, 1.0])
    np.testing.assert_array_equal(y, [2.0, 0.0])
    x, y = LinearSystem().project(np.array([-0.5]), np.array([-2.0]))
    np.testing.assert_array_equal(x, [-0.5])
    np.testing.assert_array_equal(y, [-2.0])


@pytest.mark.parametrize(
    "field",
    [HigginsSelkov(), HollingTanner(), LotkaVolterra(), GeneralizedLotkaVolterra(), InsulinGlucose(), LinearSystem()],
    ids=lambda f: f.name,
)
def test_nullclines_lie_on_zero_sets(field):
    params = field.resolve_params()
    viewport = field.default_viewport
    pieces = field.nullclines(params, viewport)
    assert pieces
    scale = max(viewport.width, viewport.height)
    for piece in pieces:
        pts = piece.points
        assert pts.shape[1] == 2 and len(pts) >= 2
        assert np.all(viewport.extended(1e-9).contains(pts[:, 0], pts[:, 1]))
        u, v = field.evaluate(pts[:, 0], pts[:, 1], params)
        comp = u if piece.kind == "x" else v
        # contour lines are linear interpolations on a grid
        assert np.max(np.abs(comp)) < 0.05 * scale
