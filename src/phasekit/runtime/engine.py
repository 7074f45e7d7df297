# src/phasekit/runtime/engine.py
"""
Phase-portrait animation engine.

One engine instance owns a vector field, a parameter snapshot struct, the two
particle pools, the static and dynamic surfaces and the frame scheduler handle.
Exactly one frame callback is in flight at a time; pause and reset cancel it
before touching any state.

States:

    Idle     no field particles; the loop runs only while seeded particles exist
    Running  field particles are integrated and cycled as well

    start   Idle -> Running   (field pool generated, loop ensured)
    pause   Running -> Idle   (field pool cleared, seeded particles keep moving)
    reset   any -> Idle       (both pools cleared, time zeroed, layers redrawn)
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Hashable, Mapping, Optional
import math

import numpy as np

from phasekit.analysis.equilibria import Equilibrium, analyze
from phasekit.analysis.period import PeriodDetector
from phasekit.config import EngineConfig
from phasekit.errors import PhasekitError
from phasekit.render.dynamic import DynamicRenderer
from phasekit.render.static import StaticRenderer
from phasekit.render.surface import RasterSurface
from phasekit.render.theme import Theme, get_theme
from phasekit.steppers import get_stepper
from .particles import ParticleManager
from .scheduler import FrameScheduler, ManualScheduler
from .transform import Transform, Viewport

if TYPE_CHECKING:
    from phasekit.config import ToolPreset
    from phasekit.fields.base import VectorField

__all__ = ["EngineState", "FrameSnapshot", "PhasePortraitEngine"]


@dataclass(frozen=True)
class FrameSnapshot:
    """Immutable view of the engine state read once at the start of a frame."""
    params: Mapping[str, float]
    viewport: Viewport
    speed: float
    running: bool


@dataclass
class EngineState:
    """Mutable user-facing state, written only by engine setters."""
    params: dict[str, float]
    viewport: Viewport
    speed: float = 1.0
    show_grid: bool = True
    show_field: bool = True
    show_nullclines: bool = True
    running: bool = False

    def snapshot(self) -> FrameSnapshot:
        return FrameSnapshot(
            params=MappingProxyType(dict(self.params)),
            viewport=self.viewport,
            speed=self.speed,
            running=self.running,
        )


class PhasePortraitEngine:
    def __init__(
        self,
        field: "VectorField",
        *,
        params: Mapping[str, float] | None = None,
        viewport: Viewport | Mapping[str, float] | None = None,
        width: int = 600,
        height: int = 600,
        margins: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0),
        config: EngineConfig | None = None,
        theme: str | Theme = "light",
        speed: float = 1.0,
        scheduler: FrameScheduler | None = None,
    ):
        self.config = config or EngineConfig()
        self.field = field
        self.theme = get_theme(theme)
        self.scheduler: FrameScheduler = scheduler if scheduler is not None else ManualScheduler()
        self.stepper = get_stepper(self.config.stepper)
        self._check_speed(speed)

        vp = self._as_viewport(viewport) if viewport is not None else field.default_viewport
        self.state = EngineState(params=field.resolve_params(params), viewport=vp, speed=float(speed))

        self.margins = tuple(float(m) for m in margins)
        self.static_surface = RasterSurface(width, height)
        self.dynamic_surface = RasterSurface(width, height)
        self.transform = self._make_transform(vp, width, height)

        self.particles = ParticleManager(self.config)
        self.static_renderer = StaticRenderer(self.config, self.theme)
        self.dynamic_renderer = DynamicRenderer(self.config, self.theme)

        self.time = 0.0
        self.frame_count = 0
        self.history: deque[tuple[float, float, float]] = deque(maxlen=self.config.history_length)
        self.period_detector: Optional[PeriodDetector] = None
        self._equilibria: list[Equilibrium] = []

        self._handle: Hashable | None = None
        self._in_frame = False
        self._redraw_pending = False
        self._disposed = False

        self._reset_period_detector()
        self.redraw_static()

    @classmethod
    def from_preset(
        cls,
        preset: "ToolPreset",
        *,
        factory=None,
        scheduler: FrameScheduler | None = None,
        width: int = 600,
        height: int = 600,
    ) -> "PhasePortraitEngine":
        field = preset.make_field(factory)
        return cls(
            field,
            params=preset.params or None,
            viewport=preset.resolved_viewport(field),
            width=width,
            height=height,
            config=preset.engine,
            theme=preset.theme,
            speed=preset.speed,
            scheduler=scheduler,
        )

    # ------------------------------------------------------------ properties
    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def params(self) -> Mapping[str, float]:
        return MappingProxyType(self.state.params)

    @property
    def viewport(self) -> Viewport:
        return self.state.viewport

    @property
    def speed(self) -> float:
        return self.state.speed

    @property
    def loop_active(self) -> bool:
        return self._handle is not None

    @property
    def equilibria(self) -> list[Equilibrium]:
        return list(self._equilibria)

    @property
    def period(self) -> float | None:
        return self.period_detector.period if self.period_detector is not None else None

    def history_array(self) -> np.ndarray:
        """(n, 3) array of (t, x, y) samples of the first seeded particle."""
        if not self.history:
            return np.empty((0, 3))
        return np.array(self.history, dtype=float)

    def is_valid_system(self) -> bool:
        return self.field.is_valid()

    def error_message(self) -> str:
        return self.field.error()

    # ------------------------------------------------------------ lifecycle
    def start(self) -> None:
        self._check_alive()
        if self.state.running:
            return
        self.state.running = True
        self.particles.regenerate_field(self.state.viewport, nonnegative=self.field.nonnegative)
        self._ensure_loop()

    def pause(self) -> None:
        self._check_alive()
        self._cancel()
        self.state.running = False
        self.particles.clear_field()
        if len(self.particles.seeded) > 0:
            self._ensure_loop()

    def toggle(self) -> bool:
        """Start when idle, pause when running; returns the new running flag."""
        if self.state.running:
            self.pause()
        else:
            self.start()
        return self.state.running

    def reset(self) -> None:
        self._check_alive()
        self._cancel()
        self.state.running = False
        self.particles.reset()
        self.time = 0.0
        self.frame_count = 0
        self.history.clear()
        if self.period_detector is not None:
            self.period_detector.reset()
        self.dynamic_surface.clear()
        self.redraw_static()

    def dispose(self) -> None:
        self._cancel()
        self.state.running = False
        self.particles.reset()
        self._disposed = True

    # ------------------------------------------------------------ setters
    def set_viewport(self, viewport: Viewport | Mapping[str, float]) -> None:
        vp = self._as_viewport(viewport)
        self.state.viewport = vp
        self.transform = self.transform.with_viewport(vp)
        if self.state.running and not self._in_frame:
            self.particles.regenerate_field(vp, nonnegative=self.field.nonnegative)
        self.redraw_static()

    def set_params(self, params: Mapping[str, float]) -> None:
        """Update some parameters; unknown names raise KeyError."""
        self.state.params = self.field.resolve_params({**self.state.params, **params})
        self._reset_period_detector()
        self.redraw_static()

    def set_speed(self, speed: float) -> None:
        self._check_speed(speed)
        self.state.speed = float(speed)
        self.redraw_static()

    def set_show_grid(self, show: bool) -> None:
        self.state.show_grid = bool(show)
        self.redraw_static()

    def set_show_field(self, show: bool) -> None:
        self.state.show_field = bool(show)
        self.redraw_static()

    def set_show_nullclines(self, show: bool) -> None:
        self.state.show_nullclines = bool(show)
        self.redraw_static()

    def set_field(self, field: "VectorField", params: Mapping[str, float] | None = None) -> None:
        """Swap the vector field; particles keep their positions."""
        self.field = field
        self.state.params = field.resolve_params(params)
        self.history.clear()
        self._reset_period_detector()
        self.redraw_static()

    def set_theme(self, theme: str | Theme) -> None:
        self.theme = get_theme(theme)
        self.static_renderer.theme = self.theme
        self.dynamic_renderer.theme = self.theme
        self.redraw_static()

    def resize(self, width: int, height: int) -> None:
        """Rebuild both surfaces and the transform; trails are discarded."""
        self.static_surface = RasterSurface(width, height)
        self.dynamic_surface = RasterSurface(width, height)
        self.transform = self._make_transform(self.state.viewport, width, height)
        self.redraw_static()

    # ------------------------------------------------------------ interaction
    def seed(self, x: float, y: float) -> bool:
        """Add a seeded particle at a data point inside the viewport."""
        self._check_alive()
        if not (math.isfinite(x) and math.isfinite(y)) or not self.state.viewport.contains(x, y):
            return False
        if not self.particles.seed(x, y):
            return False
        self._ensure_loop()
        return True

    def on_pointer_down(self, px: float, py: float) -> bool:
        from .interaction import InteractionAdapter

        return InteractionAdapter(self).on_pointer_down(px, py)

    # ------------------------------------------------------------ drawing
    def redraw_static(self) -> None:
        """Recompute equilibria and repaint the static layer (deferred mid-frame)."""
        if self._in_frame:
            self._redraw_pending = True
            return
        self._redraw_pending = False
        st = self.state
        self._equilibria = analyze(self.field, st.params, st.viewport, eps=self.config.stability_eps)
        self.static_renderer.draw(
            self.static_surface,
            self.transform,
            self.field,
            st.params,
            equilibria=self._equilibria,
            show_grid=st.show_grid,
            show_field=st.show_field,
            show_nullclines=st.show_nullclines,
        )

    def composite(self) -> RasterSurface:
        """Background, static layer and dynamic layer flattened into one image."""
        out = RasterSurface(self.static_surface.width, self.static_surface.height)
        out.clear(self.theme.background)
        out.composite_over(self.static_surface)
        out.composite_over(self.dynamic_surface)
        return out

    # ------------------------------------------------------------ frame loop
    def _frame(self) -> None:
        self._handle = None
        if self._disposed:
            return
        if len(self.particles.seeded) == 0 and not self.state.running:
            return
        snap = self.state.snapshot()
        transform = self.transform
        # at speed 0 nothing moves but the trails still fade
        dt = self.config.base_step * snap.speed
        self._in_frame = True
        try:
            self.particles.advance(self.field, snap.params, dt, snap.running, self.stepper, snap.viewport)
            self.dynamic_renderer.paint(self.dynamic_surface, transform, self.particles)
            self.particles.commit()
            self.time += dt
            self.frame_count += 1
            if dt > 0:
                self._record()
        finally:
            self._in_frame = False
        if self._redraw_pending:
            self.redraw_static()
        self._ensure_loop()

    def _record(self) -> None:
        seeded = self.particles.seeded
        if len(seeded) == 0:
            return
        x, y = float(seeded.x[0]), float(seeded.y[0])
        self.history.append((self.time, x, y))
        if self.period_detector is not None:
            self.period_detector.update(self.time, x)

    # ------------------------------------------------------------ helpers
    def _ensure_loop(self) -> None:
        if self._handle is None and not self._disposed:
            self._handle = self.scheduler.request_frame(self._frame)

    def _cancel(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel_frame(self._handle)
            self._handle = None

    def _check_alive(self) -> None:
        if self._disposed:
            raise PhasekitError("Engine has been disposed")

    def _reset_period_detector(self) -> None:
        ref = self.field.period_reference(self.state.params)
        if ref is None or not math.isfinite(ref):
            self.period_detector = None
        else:
            self.period_detector = PeriodDetector(ref, self.config.max_crossings)

    def _make_transform(self, viewport: Viewport, width: int, height: int) -> Transform:
        left, top, right, bottom = self.margins
        return Transform(viewport, width - left - right, height - top - bottom, left, top)

    @staticmethod
    def _as_viewport(viewport: Any) -> Viewport:
        if isinstance(viewport, Viewport):
            return viewport
        return Viewport.from_mapping(viewport)

    @staticmethod
    def _check_speed(speed: float) -> None:
        if not math.isfinite(speed) or speed < 0:
            raise ValueError(f"speed must be a finite number >= 0, got {speed!r}")
