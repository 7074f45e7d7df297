# src/phasekit/plot/_scheduler.py
from __future__ import annotations

from typing import Callable

__all__ = ["TimerScheduler"]


class TimerScheduler:
    """
    Frame scheduler backed by single-shot matplotlib canvas timers.

    `after_frame` runs after every frame callback (the host uses it to push
    the surfaces into its images).
    """

    def __init__(self, canvas, *, interval_ms: int = 16, after_frame: Callable[[], None] | None = None):
        self.canvas = canvas
        self.interval_ms = int(interval_ms)
        self.after_frame = after_frame
        self._timers: dict[int, object] = {}
        self._next = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._next += 1
        handle = self._next
        timer = self.canvas.new_timer(interval=self.interval_ms)
        timer.single_shot = True
        timer.add_callback(self._fire, handle, callback)
        self._timers[handle] = timer
        timer.start()
        return handle

    def cancel_frame(self, handle) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.stop()

    def cancel_all(self) -> None:
        for handle in list(self._timers):
            self.cancel_frame(handle)

    def _fire(self, handle: int, callback: Callable[[], None]) -> None:
        if self._timers.pop(handle, None) is None:
            return
        callback()
        if self.after_frame is not None:
            self.after_frame()
