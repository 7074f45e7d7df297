# tests/unit/test_particles.py
from __future__ import annotations

import numpy as np
import pytest

from phasekit.config import EngineConfig
from phasekit.runtime.particles import ParticleManager, ParticlePool
from phasekit.runtime.transform import Viewport
from phasekit.steppers import get_stepper


def test_seeded_pool_is_capped():
    mgr = ParticleManager(EngineConfig())
    accepted = [mgr.seed(0.01 * i, 0.0) for i in range(150)]
    assert sum(accepted) == 100
    assert accepted[:100] == [True] * 100
    assert not any(accepted[100:])
    assert len(mgr.seeded) == 100
    # the first hundred are kept, in order
    np.testing.assert_allclose(mgr.seeded.x[-1], 0.99)


def test_ids_are_unique_and_monotonic():
    mgr = ParticleManager(EngineConfig(field_grid_size=3))
    mgr.seed(0.0, 0.0)
    mgr.regenerate_field(Viewport(0.0, 1.0, 0.0, 1.0))
    mgr.seed(1.0, 1.0)
    ids = np.concatenate([mgr.seeded.ids, mgr.field.ids])
    assert len(set(ids.tolist())) == len(ids)
    assert mgr.seeded.ids.tolist() == [0, 10]


def test_field_grid_cell_centres_over_extended_viewport():
    cfg = EngineConfig(field_grid_size=10, field_extension=0.4)
    mgr = ParticleManager(cfg)
    mgr.regenerate_field(Viewport(0.0, 10.0, 0.0, 5.0))
    assert len(mgr.field) == 100
    # extended viewport: x in [-4, 14], y in [-2, 7]
    xs = np.unique(np.round(mgr.field.x, 9))
    ys = np.unique(np.round(mgr.field.y, 9))
    np.testing.assert_allclose(xs, -4.0 + (np.arange(10) + 0.5) * 1.8)
    np.testing.assert_allclose(ys, -2.0 + (np.arange(10) + 0.5) * 0.9)
    np.testing.assert_array_equal(mgr.field.age, 0)


def test_advance_idle_moves_only_seeded(constant_field):
    mgr = ParticleManager(EngineConfig(field_grid_size=2))
    params = constant_field.resolve_params()
    mgr.seed(1.0, 1.0)
    mgr.regenerate_field(Viewport(0.0, 1.0, 0.0, 1.0))
    before = mgr.field.y.copy()
    mgr.advance(constant_field, params, 0.1, False, get_stepper("rk4"), Viewport(0.0, 1.0, 0.0, 1.0))
    mgr.commit()
    np.testing.assert_allclose(mgr.seeded.y, [1.1])
    np.testing.assert_array_equal(mgr.field.y, before)
    assert mgr.cycle_time == 0.0


def test_field_pool_regenerates_after_cycle(constant_field):
    cfg = EngineConfig(field_grid_size=4, field_cycle=0.25)
    mgr = ParticleManager(cfg)
    vp = Viewport(-1.0, 1.0, -1.0, 1.0)
    params = constant_field.resolve_params()
    stepper = get_stepper("rk4")
    mgr.regenerate_field(vp)
    first_ids = mgr.field.ids.copy()
    start_y = mgr.field.y.copy()
    for _ in range(2):
        mgr.advance(constant_field, params, 0.1, True, stepper, vp)
        mgr.commit()
    np.testing.assert_allclose(mgr.field.y, start_y + 0.2)
    mgr.advance(constant_field, params, 0.1, True, stepper, vp)
    mgr.commit()
    assert len(mgr.field) == 16
    assert not set(first_ids.tolist()) & set(mgr.field.ids.tolist())
    np.testing.assert_allclose(mgr.field.y, start_y)
    assert mgr.cycle_time == 0.0


def test_pool_commit_is_two_phase(constant_field):
    pool = ParticlePool(4)
    pool.add(0.0, 0.0, 1)
    pool.add(1.0, 2.0, 2)
    pool.compute_next(get_stepper("euler"), constant_field, constant_field.resolve_params(), 0.5)
    np.testing.assert_allclose(pool.y, [0.0, 2.0])
    np.testing.assert_allclose(pool.next_y, [0.5, 2.5])
    pool.commit()
    np.testing.assert_allclose(pool.y, [0.5, 2.5])
    np.testing.assert_array_equal(pool.age, [1, 1])


def test_compute_next_projects_into_domain():
    from phasekit.fields import HigginsSelkov

    field = HigginsSelkov()
    pool = ParticlePool(1)
    pool.add(0.0, 1e-3, 0)
    # v = 0 and k large drive A negative without the projection
    params = field.resolve_params({"v": 0.0, "k": 5.0})
    pool.compute_next(get_stepper("euler"), field, params, 1.0)
    assert pool.next_x[0] >= 0.0 and pool.next_y[0] >= 0.0


def test_pool_replace_rejects_overflow():
    pool = ParticlePool(2)
    with pytest.raises(ValueError):
        pool.replace([0.0, 1.0, 2.0], [0.0, 1.0, 2.0], [1, 2, 3])


def test_reset_clears_everything():
    mgr = ParticleManager(EngineConfig())
    mgr.seed(0.0, 0.0)
    mgr.regenerate_field(Viewport(0.0, 1.0, 0.0, 1.0))
    mgr.cycle_time = 3.0
    mgr.reset()
    assert len(mgr.seeded) == 0 and len(mgr.field) == 0
    assert mgr.cycle_time == 0.0


def test_nonnegative_field_grid_stops_at_the_axes():
    mgr = ParticleManager(EngineConfig(field_grid_size=10, field_extension=0.4))
    mgr.regenerate_field(Viewport(0.0, 10.0, 0.0, 5.0), nonnegative=True)
    xs = np.unique(np.round(mgr.field.x, 9))
    ys = np.unique(np.round(mgr.field.y, 9))
    # x in [0, 14], y in [0, 7]
    np.testing.assert_allclose(xs, (np.arange(10) + 0.5) * 1.4)
    np.testing.assert_allclose(ys, (np.arange(10) + 0.5) * 0.7)


def test_nonnegative_model_field_pool_stays_off_the_axes():
    from phasekit.fields import HigginsSelkov

    field = HigginsSelkov()
    params = field.resolve_params()
    vp = Viewport(0.0, 3.0, 0.0, 3.0)
    mgr = ParticleManager(EngineConfig(field_grid_size=8, field_cycle=100.0))
    mgr.regenerate_field(vp, nonnegative=field.nonnegative)
    mgr.advance(field, params, 0.016, True, get_stepper("rk4"), vp)
    mgr.commit()
    # nothing was snapped onto a boundary line
    assert (mgr.field.x > 0.0).all() and (mgr.field.y > 0.0).all()
