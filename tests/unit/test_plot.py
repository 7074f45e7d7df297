# tests/unit/test_plot.py
from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg", force=True)

import matplotlib.image as mpimg
import matplotlib.pyplot as plt

from phasekit.plot import TimerScheduler, export_frame, interactive


class _FakeTimer:
    def __init__(self):
        self.single_shot = False
        self.callbacks = []
        self.started = False
        self.stopped = False

    def add_callback(self, func, *args):
        self.callbacks.append((func, args))

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def fire(self):
        for func, args in self.callbacks:
            func(*args)


class _FakeCanvas:
    def __init__(self):
        self.timers = []

    def new_timer(self, interval=None):
        timer = _FakeTimer()
        self.timers.append(timer)
        return timer


def test_timer_scheduler_fires_once_and_cancels():
    canvas = _FakeCanvas()
    ran, after = [], []
    sched = TimerScheduler(canvas, after_frame=lambda: after.append(1))
    sched.request_frame(lambda: ran.append("a"))
    h2 = sched.request_frame(lambda: ran.append("b"))
    assert all(t.single_shot and t.started for t in canvas.timers)
    sched.cancel_frame(h2)
    assert canvas.timers[1].stopped
    for t in canvas.timers:
        t.fire()
    canvas.timers[0].fire()
    assert ran == ["a"]
    assert after == [1]


def test_export_frame_defaults_to_png(tmp_path: Path, make_engine):
    engine, sched = make_engine(width=40, height=30)
    engine.seed(1.0, 0.0)
    sched.tick(3)
    out = export_frame(engine, tmp_path / "sub" / "frame")
    assert out == tmp_path / "sub" / "frame.png"
    img = mpimg.imread(out)
    assert img.shape == (30, 40, 4)


def test_interactive_handle_keys_and_clicks():
    handle = interactive("glycolysis", width=100, height=100)
    try:
        engine = handle.engine
        assert handle.ax.get_xlim() == (0.0, 3.0)
        assert handle.click(1.5, 1.5)
        assert len(engine.particles.seeded) == 1
        assert not handle.click(10.0, 10.0)
        handle.key(" ")
        assert engine.running
        handle.key(" ")
        assert not engine.running
        handle.key("g")
        assert not engine.state.show_grid
        handle.key("N")
        assert not engine.state.show_nullclines
        handle.key("f")
        assert not engine.state.show_field
        handle.key("r")
        assert len(engine.particles.seeded) == 0
        handle.key("q")
    finally:
        handle.close()
        plt.close(handle.figure)
    assert engine._disposed
