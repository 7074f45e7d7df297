# src/phasekit/runtime/interaction.py
from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import PhasePortraitEngine

__all__ = ["InteractionAdapter"]


class InteractionAdapter:
    """
    Turns pointer presses on the plot into seeded particles.

    Presses outside the plot rectangle, or that map outside the viewport, are
    ignored. Accepted presses make sure the animation loop is running.
    """

    def __init__(self, engine: "PhasePortraitEngine"):
        self.engine = engine

    def to_data(self, px: float, py: float) -> tuple[float, float] | None:
        transform = self.engine.transform
        if not (math.isfinite(px) and math.isfinite(py)) or not transform.contains_pixel(px, py):
            return None
        x, y = transform.pixel_to_data(px, py)
        if not self.engine.viewport.contains(x, y):
            return None
        return float(x), float(y)

    def on_pointer_down(self, px: float, py: float) -> bool:
        """Returns True when a particle was seeded."""
        point = self.to_data(px, py)
        if point is None:
            return False
        return self.engine.seed(*point)
