# tests/conftest.py
from __future__ import annotations

import matplotlib

matplotlib.use("Agg", force=True)

import numpy as np
import pytest

from phasekit.config import EngineConfig
from phasekit.fields import LinearSystem, VectorField
from phasekit.runtime.engine import PhasePortraitEngine
from phasekit.runtime.scheduler import ManualScheduler
from phasekit.runtime.transform import Viewport


class ConstantField(VectorField):
    """dx/dt = a, dy/dt = b everywhere."""
    name = "constant"
    defaults = {"a": 0.0, "b": 1.0}

    def evaluate(self, x, y, params):
        x = np.asarray(x, dtype=float)
        return np.full_like(x, params["a"]), np.full_like(x, params["b"])


class SingularField(VectorField):
    """Blows up on the line x = 0."""
    name = "singular"

    def evaluate(self, x, y, params):
        x = np.asarray(x, dtype=float)
        return 1.0 / x, np.zeros_like(x)


@pytest.fixture
def constant_field():
    return ConstantField()


@pytest.fixture
def singular_field():
    return SingularField()


@pytest.fixture
def make_engine():
    """Build a headless engine on a small surface driven by a ManualScheduler."""
    def _make(field=None, *, params=None, viewport=None, config=None, width=80, height=60, speed=1.0):
        field = field if field is not None else LinearSystem()
        scheduler = ManualScheduler()
        engine = PhasePortraitEngine(
            field,
            params=params,
            viewport=viewport if viewport is not None else Viewport(-2.0, 2.0, -2.0, 2.0),
            width=width,
            height=height,
            config=config or EngineConfig(),
            speed=speed,
            scheduler=scheduler,
        )
        return engine, scheduler

    return _make
