# src/phasekit/steppers/registry.py
from __future__ import annotations
from typing import Dict

from .base import StepperMeta, StepperSpec

__all__ = ["register", "get_stepper", "registry", "steppers"]

# canonical name or alias -> spec instance
_registry: Dict[str, StepperSpec] = {}


def _check_spec(spec: StepperSpec) -> None:
    meta = getattr(spec, "meta", None)
    if not isinstance(meta, StepperMeta):
        raise TypeError(f"{type(spec).__name__} has no StepperMeta 'meta' attribute")
    if not meta.name:
        raise ValueError("Stepper meta.name must be a non-empty string")
    if meta.order < 1:
        raise ValueError(f"Stepper '{meta.name}' has order {meta.order}; must be >= 1")
    if not callable(getattr(spec, "step", None)):
        raise TypeError(f"Stepper '{meta.name}' must provide a callable step(field, x, y, dt, params)")


def register(spec: StepperSpec) -> None:
    """
    Register a particle stepper under its meta.name and every alias.

    The spec must carry a StepperMeta and a callable `step`. A name or alias
    may be registered twice only for the same spec instance.
    """
    _check_spec(spec)
    names = (spec.meta.name, *spec.meta.aliases)
    for key in names:
        other = _registry.get(key)
        if other is not None and other is not spec:
            raise ValueError(f"Stepper name '{key}' is already taken by '{other.meta.name}'")
    for key in names:
        _registry[key] = spec


def get_stepper(name: str) -> StepperSpec:
    try:
        return _registry[name]
    except KeyError:
        raise KeyError(f"Unknown stepper '{name}'; available: {sorted(_registry)}") from None


def registry() -> Dict[str, StepperSpec]:
    """Copy of the lookup table, aliases included."""
    return dict(_registry)


def steppers() -> list[StepperSpec]:
    """Registered steppers, one per canonical name, highest order first."""
    unique = {spec.meta.name: spec for spec in _registry.values()}
    return sorted(unique.values(), key=lambda s: (-s.meta.order, s.meta.name))
