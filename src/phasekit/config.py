# src/phasekit/config.py
"""
Engine tuning constants and tool presets.

A preset is a small TOML document describing one phase-portrait tool:

    [tool]
    model = "glycolysis"
    title = "Glycolysis (Higgins-Sel'kov)"
    speed = 1.0
    theme = "light"

    [params]
    v = 1.0

    [viewport]
    x_min = 0.0
    x_max = 3.0
    y_min = 0.0
    y_max = 3.0

    [engine]            # any EngineConfig field
    base_step = 0.05

    [equations]         # calculator only
    x = "y"
    y = "-x"

Presets are addressed by name ("glycolysis"), by "builtin://glycolysis",
by a filesystem path, or inline as "inline: <toml text>".
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
import tomllib
import warnings

from phasekit.errors import ConfigError, PresetNotFoundError, UnknownModelError
from phasekit.runtime.transform import Viewport

__all__ = [
    "EngineConfig",
    "ToolPreset",
    "load_preset",
    "list_presets",
    "parse_preset",
    "resolve_preset",
]

BUILTIN_SCHEME = "builtin://"
INLINE_PREFIX = "inline:"
CALCULATOR_MODEL = "calculator"


@dataclass(frozen=True)
class EngineConfig:
    """
    Tuning constants of the animation engine.

    max_seeded        cap on user-seeded particles; extra seeds are dropped
    field_grid_size   field particles per axis (pool size is its square)
    field_extension   fraction of the viewport range added on each side for
                      field particle placement
    field_cycle       simulated time between field pool regenerations
    base_step         integration step per frame at speed 1
    stepper           registered stepper name
    arrow_grid        direction arrows lattice size (borders skipped)
    arrow_length      arrow shaft length in pixels
    arrow_head        (length, half-width) of the arrowhead in pixels
    grid_divisions    background grid divisions per axis
    equilibrium_radius  marker radius in pixels
    seed_dot_radius   radius of the dot drawn at each seeded particle
    intensity_gain    speed-to-intensity factor for trail styling
    history_length    samples kept of the first seeded trajectory
    max_crossings     section crossings kept for period detection
    stability_eps     tolerance of the stability classification
    """
    max_seeded: int = 100
    field_grid_size: int = 10
    field_extension: float = 0.40
    field_cycle: float = 30.0
    base_step: float = 0.016
    stepper: str = "rk4"
    arrow_grid: int = 15
    arrow_length: float = 18.0
    arrow_head: tuple[float, float] = (6.0, 2.0)
    grid_divisions: int = 10
    equilibrium_radius: float = 6.0
    seed_dot_radius: float = 1.5
    intensity_gain: float = 50.0
    history_length: int = 500
    max_crossings: int = 10
    stability_eps: float = 1e-6

    def __post_init__(self) -> None:
        positive_ints = ("max_seeded", "field_grid_size", "arrow_grid", "grid_divisions", "history_length")
        for name in positive_ints:
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int) or val < 1:
                raise ConfigError(f"[engine].{name} must be a positive integer, got {val!r}")
        if self.max_crossings < 2:
            raise ConfigError(f"[engine].max_crossings must be >= 2, got {self.max_crossings!r}")
        for name in ("field_cycle", "base_step", "arrow_length", "equilibrium_radius",
                     "seed_dot_radius", "intensity_gain", "stability_eps"):
            val = getattr(self, name)
            if not isinstance(val, (int, float)) or isinstance(val, bool) or not val > 0:
                raise ConfigError(f"[engine].{name} must be a positive number, got {val!r}")
        if not isinstance(self.field_extension, (int, float)) or self.field_extension < 0:
            raise ConfigError(f"[engine].field_extension must be >= 0, got {self.field_extension!r}")
        head = tuple(self.arrow_head)
        if len(head) != 2 or not all(isinstance(v, (int, float)) and v > 0 for v in head):
            raise ConfigError(f"[engine].arrow_head must be two positive numbers, got {self.arrow_head!r}")
        object.__setattr__(self, "arrow_head", (float(head[0]), float(head[1])))
        from phasekit.steppers import registry

        if self.stepper not in registry():
            raise ConfigError(
                f"[engine].stepper '{self.stepper}' is not registered; available: {sorted(registry())}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"[engine] has unknown keys: {unknown}; allowed: {sorted(known)}")
        kwargs = dict(data)
        if "arrow_head" in kwargs:
            kwargs["arrow_head"] = tuple(kwargs["arrow_head"])
        return cls(**kwargs)

    def with_overrides(self, **changes: Any) -> "EngineConfig":
        return replace(self, **changes)


@dataclass(frozen=True)
class ToolPreset:
    name: str
    model: str
    title: str = ""
    params: Mapping[str, float] = field(default_factory=dict)
    viewport: Optional[Viewport] = None
    engine: EngineConfig = field(default_factory=EngineConfig)
    speed: float = 1.0
    theme: str = "light"
    equations: Optional[tuple[str, str]] = None
    source: str = ""

    def make_field(self, factory: Callable[[str, str], Any] | None = None):
        """
        Instantiate the preset's vector field.

        The calculator needs an equation evaluator `factory`; without one it
        falls back to the circular field.
        """
        from phasekit.fields import CircularField, ExpressionField, get_model

        if self.model == CALCULATOR_MODEL:
            x_eq, y_eq = self.equations or ("y", "-x")
            if factory is None:
                warnings.warn(
                    f"Preset '{self.name}' needs an equation evaluator; using circular fallback field.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                return CircularField()
            return ExpressionField(x_eq, y_eq, factory)
        return get_model(self.model)

    def resolved_viewport(self, field_obj=None) -> Viewport:
        if self.viewport is not None:
            return self.viewport
        if field_obj is None:
            field_obj = self.make_field()
        return field_obj.default_viewport


# ---- parsing ----------------------------------------------------------------

def _table(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    val = data.get(key, {})
    if not isinstance(val, dict):
        raise ConfigError(f"[{key}] must be a table")
    return val


def _number(table: str, key: str, val: Any) -> float:
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ConfigError(f"[{table}].{key} must be a number, got {val!r}")
    return float(val)


def parse_preset(data: Mapping[str, Any], *, name: str = "", source: str = "") -> ToolPreset:
    """Validate a decoded preset document table by table."""
    unknown = sorted(set(data) - {"tool", "params", "viewport", "engine", "equations"})
    if unknown:
        raise ConfigError(f"Unknown preset tables: {unknown}")

    tool = _table(data, "tool")
    model = tool.get("model")
    if not isinstance(model, str) or not model:
        raise ConfigError("[tool].model must be a non-empty string")
    extra = sorted(set(tool) - {"model", "title", "speed", "theme"})
    if extra:
        raise ConfigError(f"[tool] has unknown keys: {extra}")
    title = tool.get("title", "")
    if not isinstance(title, str):
        raise ConfigError("[tool].title must be a string")
    speed = _number("tool", "speed", tool.get("speed", 1.0))
    if speed < 0:
        raise ConfigError(f"[tool].speed must be >= 0, got {speed}")
    theme = tool.get("theme", "light")
    from phasekit.render.theme import THEMES

    if theme not in THEMES:
        raise ConfigError(f"[tool].theme '{theme}' is unknown; available: {sorted(THEMES)}")

    params = {k: _number("params", k, v) for k, v in _table(data, "params").items()}
    equations = None
    if model == CALCULATOR_MODEL:
        if params:
            raise ConfigError("[params] is not supported for the calculator model")
        eqs = _table(data, "equations")
        x_eq, y_eq = eqs.get("x"), eqs.get("y")
        if not isinstance(x_eq, str) or not isinstance(y_eq, str):
            raise ConfigError("[equations] requires string entries 'x' and 'y'")
        equations = (x_eq, y_eq)
    else:
        if "equations" in data:
            raise ConfigError("[equations] is only valid for the calculator model")
        from phasekit.fields import get_model

        try:
            get_model(model).resolve_params(params)
        except UnknownModelError as exc:
            raise ConfigError(f"[tool].model: {exc}") from None
        except KeyError as exc:
            raise ConfigError(f"[params]: {exc.args[0]}") from None

    viewport = None
    vp = _table(data, "viewport")
    if vp:
        missing = sorted({"x_min", "x_max", "y_min", "y_max"} - set(vp))
        if missing:
            raise ConfigError(f"[viewport] is missing keys: {missing}")
        try:
            viewport = Viewport(*(_number("viewport", k, vp[k]) for k in ("x_min", "x_max", "y_min", "y_max")))
        except ValueError as exc:
            raise ConfigError(f"[viewport]: {exc}") from None

    engine = EngineConfig.from_mapping(_table(data, "engine"))

    return ToolPreset(
        name=name or model,
        model=model,
        title=title,
        params=params,
        viewport=viewport,
        engine=engine,
        speed=speed,
        theme=theme,
        equations=equations,
        source=source,
    )


# ---- resolution -------------------------------------------------------------

def _builtin_dir():
    return resources.files("phasekit.presets")


def list_presets() -> list[str]:
    """Names of the presets shipped with the package."""
    return sorted(
        entry.name[: -len(".toml")]
        for entry in _builtin_dir().iterdir()
        if entry.name.endswith(".toml")
    )


def resolve_preset(uri: str) -> Traversable | Path:
    """
    Resolve a preset reference to a file.

    Search order for bare names: built-in presets, then the path as given,
    then the path with a ".toml" suffix.
    """
    uri = uri.strip()
    candidates: list[str] = []
    if uri.startswith(BUILTIN_SCHEME):
        name = uri[len(BUILTIN_SCHEME):]
        entry = _builtin_dir() / f"{name}.toml"
        if entry.is_file():
            return entry
        raise PresetNotFoundError(uri, [f"{BUILTIN_SCHEME}{n}" for n in list_presets()])

    if "/" not in uri and "\\" not in uri and not uri.endswith(".toml"):
        entry = _builtin_dir() / f"{uri}.toml"
        candidates.append(f"{BUILTIN_SCHEME}{uri}")
        if entry.is_file():
            return entry

    path = Path(uri).expanduser()
    for cand in (path, path.with_name(path.name + ".toml")):
        candidates.append(str(cand.resolve()))
        if cand.is_file():
            return cand.resolve()
    raise PresetNotFoundError(uri, candidates)


def load_preset(ref: str) -> ToolPreset:
    """Load and validate a preset by name, builtin:// URI, path or inline text."""
    if ref.lstrip().startswith(INLINE_PREFIX):
        text = ref.lstrip()[len(INLINE_PREFIX):]
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse inline preset: {exc}") from None
        return parse_preset(data, source="inline")

    target = resolve_preset(ref)
    try:
        data = tomllib.loads(target.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse preset {target}: {exc}") from None
    stem = Path(str(target)).stem
    return parse_preset(data, name=stem, source=str(target))
