# src/phasekit/plot/_export.py
from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.image as mpimg
import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from phasekit.runtime.engine import PhasePortraitEngine

def export_frame(engine: "PhasePortraitEngine", path: str | Path) -> Path:
    """
    Flatten background, static and dynamic layers and write them to <path>.
    A missing suffix defaults to ".png". Returns the written path.
    """
    target = Path(path)
    if not target.suffix:
        target = target.with_suffix(".png")
    target.parent.mkdir(parents=True, exist_ok=True)
    mpimg.imsave(target, engine.composite().to_rgba8())
    return target

def show() -> None:
    plt.show()

__all__ = ["export_frame", "show"]
