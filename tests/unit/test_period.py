# tests/unit/test_period.py
from __future__ import annotations

import math

import pytest

from phasekit.analysis import PeriodDetector


def test_period_of_sampled_sine():
    det = PeriodDetector(0.0)
    dt = 0.01
    for i in range(2000):
        t = i * dt
        det.update(t, math.sin(2.0 * math.pi * t / 3.0))
    assert det.period == pytest.approx(3.0, abs=2 * dt)


def test_only_upward_crossings_count():
    det = PeriodDetector(1.0)
    assert det.update(0.0, 2.0) is False
    assert det.update(1.0, 0.0) is False     # downward
    assert det.update(2.0, 1.0) is True      # reaches the reference from below
    assert det.update(3.0, 1.5) is False
    assert det.period is None
    det.update(4.0, 0.5)
    det.update(5.0, 1.2)
    assert det.period == pytest.approx(3.0)


def test_keeps_only_recent_crossings_and_resets():
    det = PeriodDetector(0.0, max_crossings=3)
    for k in range(10):
        det.update(2.0 * k, -1.0)
        det.update(2.0 * k + 1.0, 1.0)
    assert len(det.crossings) == 3
    assert list(det.crossings) == [15.0, 17.0, 19.0]
    det.reset()
    assert det.period is None
    assert det.update(0.0, 5.0) is False


def test_rejects_too_small_window():
    with pytest.raises(ValueError):
        PeriodDetector(0.0, max_crossings=1)
