# src/phasekit/analysis/period.py
from __future__ import annotations

from collections import deque

__all__ = ["PeriodDetector"]


class PeriodDetector:
    """
    Poincare-section period estimate for a single trajectory.

    Records the times at which x crosses `reference` upward. The period is the
    spacing of the two most recent crossings; only the last `max_crossings`
    crossing times are kept.
    """

    def __init__(self, reference: float, max_crossings: int = 10):
        if max_crossings < 2:
            raise ValueError("max_crossings must be >= 2")
        self.reference = float(reference)
        self.crossings: deque[float] = deque(maxlen=int(max_crossings))
        self._last_x: float | None = None

    def reset(self) -> None:
        self.crossings.clear()
        self._last_x = None

    def update(self, t: float, x: float) -> bool:
        """Feed one sample; returns True when it completes an upward crossing."""
        prev = self._last_x
        self._last_x = float(x)
        if prev is None:
            return False
        if prev < self.reference <= x:
            self.crossings.append(float(t))
            return True
        return False

    @property
    def period(self) -> float | None:
        if len(self.crossings) < 2:
            return None
        return self.crossings[-1] - self.crossings[-2]
