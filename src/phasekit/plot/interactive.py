# src/phasekit/plot/interactive.py
"""
Matplotlib host for a phase-portrait engine.

The static and dynamic layers are shown as two stacked `imshow` images over the
viewport; frames are driven by canvas timers. Mouse clicks seed particles.

Keys:
    space   start / pause
    r       reset
    n       toggle nullclines
    f       toggle direction field
    g       toggle grid
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import matplotlib.pyplot as plt

from phasekit.config import ToolPreset, load_preset
from phasekit.runtime.engine import PhasePortraitEngine
from ._scheduler import TimerScheduler

__all__ = ["PortraitHandle", "interactive"]


@dataclass
class PortraitHandle:
    figure: Any
    ax: Any
    engine: PhasePortraitEngine
    scheduler: TimerScheduler
    static_image: Any
    dynamic_image: Any
    _cid_click: int | None = None
    _cid_keypress: int | None = None

    def refresh(self) -> None:
        """Push both surfaces into the images and request a redraw."""
        vp = self.engine.viewport
        extent = (vp.x_min, vp.x_max, vp.y_min, vp.y_max)
        self.static_image.set_data(self.engine.static_surface.to_rgba8())
        self.dynamic_image.set_data(self.engine.dynamic_surface.to_rgba8())
        self.static_image.set_extent(extent)
        self.dynamic_image.set_extent(extent)
        self.ax.set_xlim(vp.x_min, vp.x_max)
        self.ax.set_ylim(vp.y_min, vp.y_max)
        self.ax.set_facecolor(self.engine.theme.background)
        self.figure.canvas.draw_idle()

    def click(self, x: float, y: float) -> bool:
        """Seed at a data point through the engine's pointer path."""
        px, py = self.engine.transform.data_to_pixel(x, y)
        seeded = self.engine.on_pointer_down(float(px), float(py))
        if seeded:
            self.refresh()
        return seeded

    def key(self, key: str) -> None:
        key = (key or "").lower()
        eng = self.engine
        st = eng.state
        if key == " ":
            eng.toggle()
        elif key == "r":
            eng.reset()
        elif key == "n":
            eng.set_show_nullclines(not st.show_nullclines)
        elif key == "f":
            eng.set_show_field(not st.show_field)
        elif key == "g":
            eng.set_show_grid(not st.show_grid)
        else:
            return
        self.refresh()

    def close(self) -> None:
        self.scheduler.cancel_all()
        self.engine.dispose()
        canvas = self.figure.canvas
        for cid in (self._cid_click, self._cid_keypress):
            if cid is not None:
                canvas.mpl_disconnect(cid)
        self._cid_click = self._cid_keypress = None


def interactive(
    preset: str | ToolPreset,
    *,
    factory: Callable[[str, str], Any] | None = None,
    ax=None,
    width: int = 600,
    height: int = 600,
    interval_ms: int = 16,
    start: bool = False,
) -> PortraitHandle:
    """Open a preset in a matplotlib figure and wire its pointer and key handlers."""
    if isinstance(preset, str):
        preset = load_preset(preset)
    if ax is None:
        fig, ax = plt.subplots(figsize=(width / 100.0, height / 100.0))
    else:
        fig = ax.figure
    canvas = fig.canvas

    holder: dict[str, PortraitHandle] = {}
    scheduler = TimerScheduler(
        canvas,
        interval_ms=interval_ms,
        after_frame=lambda: holder["h"].refresh() if "h" in holder else None,
    )
    engine = PhasePortraitEngine.from_preset(
        preset, factory=factory, scheduler=scheduler, width=width, height=height
    )
    vp = engine.viewport
    extent = (vp.x_min, vp.x_max, vp.y_min, vp.y_max)
    static_image = ax.imshow(
        engine.static_surface.to_rgba8(), extent=extent, origin="upper",
        interpolation="nearest", aspect="auto", zorder=1,
    )
    dynamic_image = ax.imshow(
        engine.dynamic_surface.to_rgba8(), extent=extent, origin="upper",
        interpolation="nearest", aspect="auto", zorder=2,
    )
    ax.set_xlabel(engine.field.labels[0])
    ax.set_ylabel(engine.field.labels[1])
    ax.set_title(preset.title or engine.field.title)

    handle = PortraitHandle(
        figure=fig,
        ax=ax,
        engine=engine,
        scheduler=scheduler,
        static_image=static_image,
        dynamic_image=dynamic_image,
    )
    holder["h"] = handle

    def _on_click(event):
        if event.inaxes is not ax:
            return
        if event.xdata is None or event.ydata is None:
            return
        handle.click(event.xdata, event.ydata)

    def _on_key(event):
        handle.key(event.key)

    handle._cid_click = canvas.mpl_connect("button_press_event", _on_click)
    handle._cid_keypress = canvas.mpl_connect("key_press_event", _on_key)
    if start:
        engine.start()
    handle.refresh()
    return handle
