# src/phasekit/runtime/particles.py
"""
Particle pools for the animated phase portrait.

Particles live in fixed-capacity struct-of-arrays arenas. A frame is a
two-phase update: `compute_next` fills the pending positions from one snapshot
of the committed ones, the renderer draws committed -> pending, and `commit`
moves every particle at once.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

import numpy as np

from .transform import Viewport

if TYPE_CHECKING:
    from phasekit.config import EngineConfig
    from phasekit.fields.base import VectorField
    from phasekit.steppers.base import StepperSpec

__all__ = ["ParticlePool", "ParticleManager"]


class ParticlePool:
    """
    Fixed-capacity arena of particles `{x, y, next_x, next_y, age, id}`.

    The public arrays are views of the live prefix of the arena; they are
    invalidated by any call that changes the pool size.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self.capacity = int(capacity)
        self._x = np.zeros(self.capacity)
        self._y = np.zeros(self.capacity)
        self._nx = np.zeros(self.capacity)
        self._ny = np.zeros(self.capacity)
        self._age = np.zeros(self.capacity, dtype=np.int64)
        self._id = np.zeros(self.capacity, dtype=np.int64)
        self._n = 0

    def __len__(self) -> int:
        return self._n

    @property
    def full(self) -> bool:
        return self._n >= self.capacity

    @property
    def x(self) -> np.ndarray:
        return self._x[: self._n]

    @property
    def y(self) -> np.ndarray:
        return self._y[: self._n]

    @property
    def next_x(self) -> np.ndarray:
        return self._nx[: self._n]

    @property
    def next_y(self) -> np.ndarray:
        return self._ny[: self._n]

    @property
    def age(self) -> np.ndarray:
        return self._age[: self._n]

    @property
    def ids(self) -> np.ndarray:
        return self._id[: self._n]

    def add(self, x: float, y: float, pid: int) -> bool:
        """Append one particle with its pending position equal to its position."""
        if self.full:
            return False
        i = self._n
        self._x[i] = self._nx[i] = x
        self._y[i] = self._ny[i] = y
        self._age[i] = 0
        self._id[i] = pid
        self._n += 1
        return True

    def replace(self, xs, ys, ids) -> None:
        """Discard every particle and load a new population."""
        xs = np.asarray(xs, dtype=float).ravel()
        ys = np.asarray(ys, dtype=float).ravel()
        n = len(xs)
        if n > self.capacity:
            raise ValueError(f"{n} particles exceed pool capacity {self.capacity}")
        self._x[:n] = self._nx[:n] = xs
        self._y[:n] = self._ny[:n] = ys
        self._age[:n] = 0
        self._id[:n] = ids
        self._n = n

    def clear(self) -> None:
        self._n = 0

    def hold(self) -> None:
        """Set pending positions equal to the committed ones."""
        n = self._n
        self._nx[:n] = self._x[:n]
        self._ny[:n] = self._y[:n]

    def compute_next(self, stepper: "StepperSpec", field: "VectorField", params, dt: float) -> None:
        n = self._n
        if n == 0:
            return
        nx, ny = stepper.step(field, self._x[:n], self._y[:n], dt, params)
        nx, ny = field.project(nx, ny)
        self._nx[:n] = nx
        self._ny[:n] = ny

    def commit(self) -> None:
        n = self._n
        self._x[:n] = self._nx[:n]
        self._y[:n] = self._ny[:n]
        self._age[:n] += 1


class ParticleManager:
    """
    Owns the seeded pool (user clicks, capped, persistent until reset) and the
    field pool (grid over the extended viewport, integrated only while running,
    regenerated every `field_cycle` simulated time units).
    """

    def __init__(self, config: "EngineConfig"):
        self.config = config
        self.seeded = ParticlePool(config.max_seeded)
        self.field = ParticlePool(config.field_grid_size ** 2)
        self.cycle_time = 0.0
        self._next_id = 0

    def _take_ids(self, n: int) -> np.ndarray:
        ids = np.arange(self._next_id, self._next_id + n, dtype=np.int64)
        self._next_id += n
        return ids

    def seed(self, x: float, y: float) -> bool:
        """Add a seeded particle; returns False (and drops it) at the cap."""
        if self.seeded.full:
            return False
        return self.seeded.add(float(x), float(y), int(self._take_ids(1)[0]))

    def regenerate_field(self, viewport: Viewport, *, nonnegative: bool = False) -> None:
        """
        Refill the field pool on cell centres of the extended viewport.

        With `nonnegative` the extension stops at the axes, so no particle
        starts outside the first quadrant of a population model.
        """
        n = self.config.field_grid_size
        ext = viewport.extended(self.config.field_extension)
        x_lo, x_hi, y_lo, y_hi = ext.x_min, ext.x_max, ext.y_min, ext.y_max
        if nonnegative:
            if x_hi > 0.0:
                x_lo = max(x_lo, 0.0)
            if y_hi > 0.0:
                y_lo = max(y_lo, 0.0)
        cells = (np.arange(n) + 0.5) / n
        xs = x_lo + cells * (x_hi - x_lo)
        ys = y_lo + cells * (y_hi - y_lo)
        X, Y = np.meshgrid(xs, ys, indexing="ij")
        self.field.replace(X.ravel(), Y.ravel(), self._take_ids(n * n))
        self.cycle_time = 0.0

    def clear_field(self) -> None:
        self.field.clear()
        self.cycle_time = 0.0

    def advance(
        self,
        field: "VectorField",
        params: Mapping[str, float],
        dt: float,
        running: bool,
        stepper: "StepperSpec",
        viewport: Viewport,
    ) -> None:
        """
        Compute pending positions for one frame.

        Seeded particles always move. Field particles move only while running;
        once the cycle time reaches `field_cycle` the field pool is regenerated
        instead and its new particles are held for this frame.
        """
        self.seeded.compute_next(stepper, field, params, dt)
        if not running or len(self.field) == 0:
            self.field.hold()
            return
        self.cycle_time += dt
        if self.cycle_time >= self.config.field_cycle:
            self.regenerate_field(viewport, nonnegative=field.nonnegative)
        else:
            self.field.compute_next(stepper, field, params, dt)

    def commit(self) -> None:
        self.seeded.commit()
        self.field.commit()

    def reset(self) -> None:
        self.seeded.clear()
        self.field.clear()
        self.cycle_time = 0.0
