# src/phasekit/plot/__init__.py
from __future__ import annotations

from ._scheduler import TimerScheduler
from ._export import export_frame, show
from .interactive import PortraitHandle, interactive

__all__ = ["TimerScheduler", "export_frame", "show", "PortraitHandle", "interactive"]
