# src/phasekit/runtime/scheduler.py
from __future__ import annotations

from typing import Callable, Hashable, Protocol

__all__ = ["FrameScheduler", "ManualScheduler"]

FrameCallback = Callable[[], None]


class FrameScheduler(Protocol):
    """
    Source of display frames.

    `request_frame` arranges for `callback` to run once on the next frame and
    returns a handle; `cancel_frame` revokes a pending request synchronously.
    """

    def request_frame(self, callback: FrameCallback) -> Hashable: ...
    def cancel_frame(self, handle: Hashable) -> None: ...


class ManualScheduler:
    """
    Headless scheduler: frames run only when `tick()` is called.

    Callbacks requested during a tick are queued for the next tick.
    """

    def __init__(self) -> None:
        self._pending: dict[int, FrameCallback] = {}
        self._next = 0
        self.frames = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        self._next += 1
        self._pending[self._next] = callback
        return self._next

    def cancel_frame(self, handle) -> None:
        self._pending.pop(handle, None)

    def tick(self, n: int = 1) -> int:
        """Run up to `n` frames; returns how many actually ran callbacks."""
        ran = 0
        for _ in range(n):
            if not self._pending:
                break
            due, self._pending = self._pending, {}
            for cb in due.values():
                cb()
            self.frames += 1
            ran += 1
        return ran
