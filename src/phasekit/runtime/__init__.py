# src/phasekit/runtime/__init__.py
from .transform import Viewport, Transform

__all__ = ["Viewport", "Transform"]
