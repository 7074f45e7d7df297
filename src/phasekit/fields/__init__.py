# src/phasekit/fields/__init__.py
from __future__ import annotations

from typing import Dict

from phasekit.errors import UnknownModelError
from .base import VectorField, Nullcline, clip_polyline, line_in_viewport
from .models import (
    HigginsSelkov,
    HollingTanner,
    LotkaVolterra,
    GeneralizedLotkaVolterra,
    InsulinGlucose,
    LinearSystem,
    CircularField,
)
from .expression import ExpressionField, ExpressionSystem

__all__ = [
    "VectorField", "Nullcline", "clip_polyline", "line_in_viewport",
    "HigginsSelkov", "HollingTanner", "LotkaVolterra", "GeneralizedLotkaVolterra",
    "InsulinGlucose", "LinearSystem", "CircularField",
    "ExpressionField", "ExpressionSystem",
    "get_model", "list_models",
]

# name -> field class (closed-form models only; ExpressionField needs an evaluator)
_MODELS: Dict[str, type[VectorField]] = {
    cls.name: cls
    for cls in (
        HigginsSelkov,
        HollingTanner,
        LotkaVolterra,
        GeneralizedLotkaVolterra,
        InsulinGlucose,
        LinearSystem,
        CircularField,
    )
}


def get_model(name: str) -> VectorField:
    """Instantiate a registered closed-form model by name."""
    try:
        return _MODELS[name]()
    except KeyError:
        raise UnknownModelError(name, sorted(_MODELS)) from None


def list_models() -> list[str]:
    return sorted(_MODELS)
