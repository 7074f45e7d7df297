# tests/unit/test_render.py
from __future__ import annotations

import numpy as np
import pytest

from phasekit.analysis import Equilibrium, Stability, analyze
from phasekit.config import EngineConfig
from phasekit.errors import ConfigError
from phasekit.fields import HigginsSelkov, LinearSystem
from phasekit.render.dynamic import DynamicRenderer, segment_style
from phasekit.render.static import StaticRenderer
from phasekit.render.surface import RasterSurface
from phasekit.render.theme import THEMES, get_theme, particle_cycler
from phasekit.runtime.particles import ParticleManager
from phasekit.runtime.transform import Transform, Viewport


def _setup(width=120, height=90, viewport=Viewport(0.0, 3.0, 0.0, 3.0)):
    return RasterSurface(width, height), Transform(viewport, width, height)


def test_static_draw_is_idempotent():
    field = HigginsSelkov()
    params = field.resolve_params()
    surface, transform = _setup()
    renderer = StaticRenderer(EngineConfig(), get_theme("light"))
    eqs = analyze(field, params, transform.viewport)
    renderer.draw(surface, transform, field, params, equilibria=eqs)
    first = surface.pixels.copy()
    assert first[..., 3].any()
    renderer.draw(surface, transform, field, params, equilibria=eqs)
    np.testing.assert_array_equal(surface.pixels, first)


def test_static_layers_can_be_hidden():
    field = LinearSystem()
    params = field.resolve_params()
    surface, transform = _setup(viewport=Viewport(-2.0, 2.0, -2.0, 2.0))
    renderer = StaticRenderer(EngineConfig(), get_theme("dark"))
    renderer.draw(surface, transform, field, params, show_grid=False, show_field=False, show_nullclines=False)
    assert not surface.pixels.any()


def test_equilibrium_marker_uses_stability_colour():
    surface, transform = _setup(viewport=Viewport(-1.0, 1.0, -1.0, 1.0))
    theme = get_theme("light")
    renderer = StaticRenderer(EngineConfig(), theme)
    eq = Equilibrium(0.0, 0.0, Stability.STABLE_NODE)
    renderer.draw_equilibria(surface, transform, [eq, Equilibrium(5.0, 5.0, Stability.SADDLE)])
    cx, cy = transform.data_to_pixel(0.0, 0.0)
    # between the white centre and the ring
    px = surface.pixels[int(cy), int(cx) + 3]
    fill, _ = theme.equilibrium_colors("stable node")
    np.testing.assert_allclose(px[:3], fill[:3], atol=1e-6)
    # off-viewport marker skipped: corners untouched
    assert surface.pixels[0, -1, 3] == 0.0


def test_theme_lookup():
    assert get_theme("light").fade_alpha == pytest.approx(0.91)
    assert get_theme("dark").fade_alpha == pytest.approx(0.85)
    assert get_theme(THEMES["dark"]) is THEMES["dark"]
    with pytest.raises(ConfigError):
        get_theme("sepia")
    fill, ring = THEMES["light"].equilibrium_colors("center")
    assert (fill, ring) == THEMES["light"].equilibrium["default"]
    colors = [c["color"] for c in particle_cycler("light")]
    assert len(colors) == 4


def test_segment_style_saturates():
    colors, widths, intensity = segment_style(
        np.array([0.0, 0.01, 1.0]), np.array([0.0, 0.0, 0.0]),
        (0.0, 0.0, 0.0, 1.0), (1.0, 1.0, 1.0, 1.0), 50.0, 1.0, 0.5,
    )
    np.testing.assert_allclose(intensity, [0.0, 0.5, 1.0])
    np.testing.assert_allclose(widths, [1.0, 1.25, 1.5])
    np.testing.assert_allclose(colors[:, 3], [0.8, 0.9, 1.0])
    np.testing.assert_allclose(colors[2, :3], [1.0, 1.0, 1.0])


def test_dynamic_paint_skips_particles_outside_viewport(constant_field):
    cfg = EngineConfig()
    surface, transform = _setup(viewport=Viewport(0.0, 1.0, 0.0, 1.0))
    renderer = DynamicRenderer(cfg, get_theme("light"))
    particles = ParticleManager(cfg)
    particles.seed(5.0, 5.0)
    particles.advance(constant_field, constant_field.resolve_params(), 0.1, False, _rk4(), transform.viewport)
    renderer.paint(surface, transform, particles)
    assert not surface.pixels.any()

    particles.seed(0.5, 0.5)
    particles.advance(constant_field, constant_field.resolve_params(), 0.1, False, _rk4(), transform.viewport)
    renderer.paint(surface, transform, particles)
    assert surface.pixels[..., 3].any()


def _rk4():
    from phasekit.steppers import get_stepper

    return get_stepper("rk4")
