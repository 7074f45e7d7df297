# src/phasekit/render/__init__.py
from __future__ import annotations

from .surface import Surface, RasterSurface
from .theme import Theme, THEMES, get_theme, particle_cycler
from .static import StaticRenderer
from .dynamic import DynamicRenderer, segment_style

__all__ = [
    "Surface", "RasterSurface",
    "Theme", "THEMES", "get_theme", "particle_cycler",
    "StaticRenderer",
    "DynamicRenderer", "segment_style",
]
