# src/phasekit/errors.py
from __future__ import annotations
from typing import List

__all__ = [
    "PhasekitError",
    "ConfigError",
    "ViewportError",
    "PresetNotFoundError",
    "UnknownModelError",
]

class PhasekitError(Exception):
    """Base error for the phasekit package."""


class ConfigError(PhasekitError):
    """Raised when a preset or engine configuration is malformed or invalid."""
    def __init__(self, message: str):
        super().__init__(message)


class ViewportError(PhasekitError, ValueError):
    """Raised when a viewport or plot rectangle is empty or non-finite."""
    def __init__(self, message: str):
        super().__init__(message)


class PresetNotFoundError(PhasekitError):
    """Raised when a preset name or URI cannot be resolved to an existing file."""
    def __init__(self, uri: str, candidates: List[str]):
        self.uri = uri
        self.candidates = candidates
        msg = f"Preset not found: {uri}\n"
        if candidates:
            msg += "Searched locations:\n"
            for c in candidates:
                msg += f"  - {c}\n"
        super().__init__(msg)


class UnknownModelError(PhasekitError, KeyError):
    """Raised when a model name is not registered."""
    def __init__(self, name: str, available: List[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown model '{name}'. Available: {', '.join(available)}")

    def __str__(self) -> str:
        return self.args[0]
