# src/phasekit/render/theme.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from cycler import cycler
from matplotlib.colors import to_rgba

from phasekit.errors import ConfigError

__all__ = ["Theme", "THEMES", "get_theme", "rgb255", "particle_cycler"]

Color = tuple[float, float, float, float]


def rgb255(r: float, g: float, b: float, a: float = 1.0) -> Color:
    return (r / 255.0, g / 255.0, b / 255.0, float(a))


@dataclass(frozen=True)
class Theme:
    """
    Colour tokens for one theme. All colours are RGBA tuples in [0, 1].

    `fade_alpha` is the alpha of the destination-in fill applied to the
    dynamic layer once per frame; lower values shorten trails.
    """
    name: str
    background: Color
    fade_color: Color
    fade_alpha: float
    grid: Color
    arrow: Color
    x_nullcline: Color
    y_nullcline: Color
    seeded_base: Color
    seeded_bright: Color
    seeded_dot: Color
    field_base: Color
    field_bright: Color
    equilibrium_inner: Color = (1.0, 1.0, 1.0, 1.0)
    # stability label -> (fill, ring)
    equilibrium: Mapping[str, tuple[Color, Color]] = field(default_factory=dict)

    def equilibrium_colors(self, label: str) -> tuple[Color, Color]:
        return self.equilibrium.get(str(label), self.equilibrium["default"])


_AMBER = (to_rgba("#f59e0b"), to_rgba("#d97706"))
_GREEN = (to_rgba("#22c55e"), to_rgba("#15803d"))
_RED = (to_rgba("#ef4444"), to_rgba("#b91c1c"))

_EQUILIBRIUM_COLORS: Dict[str, tuple[Color, Color]] = {
    "default": _AMBER,
    "stable node": _GREEN,
    "stable spiral": _GREEN,
    "unstable node": _RED,
    "unstable spiral": _RED,
    "saddle": _AMBER,
}

THEMES: Dict[str, Theme] = {
    "light": Theme(
        name="light",
        background=(1.0, 1.0, 1.0, 1.0),
        fade_color=(1.0, 1.0, 1.0, 0.91),
        fade_alpha=0.91,
        grid=(0.0, 0.0, 0.0, 0.2),
        arrow=rgb255(107, 114, 128, 0.7),
        x_nullcline=to_rgba("#3b82f6"),
        y_nullcline=to_rgba("#dc2626"),
        seeded_base=rgb255(180, 30, 30),
        seeded_bright=rgb255(240, 50, 50),
        seeded_dot=rgb255(200, 20, 20, 0.9),
        field_base=rgb255(40, 100, 180),
        field_bright=rgb255(80, 160, 240),
        equilibrium=_EQUILIBRIUM_COLORS,
    ),
    "dark": Theme(
        name="dark",
        background=to_rgba("#111827"),
        fade_color=(0.0, 0.0, 0.0, 0.85),
        fade_alpha=0.85,
        grid=(1.0, 1.0, 1.0, 0.2),
        arrow=rgb255(156, 163, 175, 0.7),
        x_nullcline=to_rgba("#60a5fa"),
        y_nullcline=to_rgba("#f87171"),
        seeded_base=rgb255(200, 80, 80),
        seeded_bright=rgb255(255, 140, 140),
        seeded_dot=rgb255(255, 100, 100, 0.9),
        field_base=rgb255(80, 140, 200),
        field_bright=rgb255(160, 230, 255),
        equilibrium=_EQUILIBRIUM_COLORS,
    ),
}


def get_theme(name: str | Theme) -> Theme:
    if isinstance(name, Theme):
        return name
    try:
        return THEMES[name]
    except KeyError:
        raise ConfigError(f"Unknown theme '{name}'. Available: {sorted(THEMES)}") from None


def particle_cycler(theme: str | Theme):
    """Colour cycle for per-trajectory artists in the interactive host."""
    t = get_theme(theme)
    return cycler(color=[t.seeded_bright, t.field_bright, t.seeded_base, t.field_base])
