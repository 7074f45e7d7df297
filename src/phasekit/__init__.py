# src/phasekit/__init__.py
from __future__ import annotations

from .errors import (
    PhasekitError, ConfigError, ViewportError, PresetNotFoundError, UnknownModelError,
)
from .runtime.transform import Viewport, Transform
from .fields import VectorField, ExpressionField, get_model, list_models
from .analysis import Stability, Equilibrium, classify, analyze, find_equilibria, PeriodDetector
from .steppers import get_stepper, rk4_step
from .config import EngineConfig, ToolPreset, load_preset, list_presets
from .runtime.scheduler import FrameScheduler, ManualScheduler
from .runtime.engine import PhasePortraitEngine
from .runtime.interaction import InteractionAdapter

__all__ = [
    # Errors
    "PhasekitError", "ConfigError", "ViewportError", "PresetNotFoundError", "UnknownModelError",
    # Geometry
    "Viewport", "Transform",
    # Fields and analysis
    "VectorField", "ExpressionField", "get_model", "list_models",
    "Stability", "Equilibrium", "classify", "analyze", "find_equilibria", "PeriodDetector",
    # Integration
    "get_stepper", "rk4_step",
    # Configuration
    "EngineConfig", "ToolPreset", "load_preset", "list_presets",
    # Engine
    "FrameScheduler", "ManualScheduler", "PhasePortraitEngine", "InteractionAdapter",
]
