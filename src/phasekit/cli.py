# src/phasekit/cli.py
from __future__ import annotations

import argparse
import sys
from typing import Mapping, Sequence

from phasekit.analysis import analyze, insulin_glucose_response
from phasekit.config import list_presets, load_preset
from phasekit.errors import ConfigError, PhasekitError, PresetNotFoundError
from phasekit.fields import list_models
from phasekit.runtime.engine import PhasePortraitEngine
from phasekit.runtime.scheduler import ManualScheduler
from phasekit.steppers import steppers

__all__ = ["main"]


def _parse_params(items: Sequence[str] | None) -> dict[str, float]:
    out: dict[str, float] = {}
    for item in items or ():
        key, sep, val = item.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"Invalid --param '{item}'; expected NAME=VALUE")
        try:
            out[key.strip()] = float(val)
        except ValueError:
            raise ConfigError(f"Invalid --param '{item}'; value is not a number") from None
    return out


def _parse_point(text: str) -> tuple[float, float]:
    parts = text.split(",")
    if len(parts) != 2:
        raise ConfigError(f"Invalid --seed '{text}'; expected X,Y")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise ConfigError(f"Invalid --seed '{text}'; coordinates must be numbers") from None


def _parse_size(text: str) -> tuple[int, int]:
    w, sep, h = text.lower().partition("x")
    try:
        if not sep:
            raise ValueError
        return int(w), int(h)
    except ValueError:
        raise ConfigError(f"Invalid --size '{text}'; expected WIDTHxHEIGHT") from None


def _merged_params(preset, overrides: Mapping[str, float]) -> dict[str, float]:
    field = preset.make_field()
    try:
        return field.resolve_params({**preset.params, **overrides})
    except KeyError as exc:
        raise ConfigError(exc.args[0]) from None


# ---- commands ---------------------------------------------------------------

def _cmd_presets_list(args) -> int:
    for name in list_presets():
        preset = load_preset(name)
        print(f"{name:<18} model={preset.model:<16} {preset.title}")
    return 0


def _cmd_presets_show(args) -> int:
    preset = load_preset(args.preset)
    print(f"name:     {preset.name}")
    print(f"model:    {preset.model}")
    print(f"title:    {preset.title}")
    print(f"source:   {preset.source}")
    if preset.viewport is not None:
        print("viewport: x=[{}, {}] y=[{}, {}]".format(*preset.viewport.as_tuple()))
    for key, val in preset.params.items():
        print(f"param:    {key} = {val:g}")
    if preset.equations is not None:
        print(f"dx/dt:    {preset.equations[0]}")
        print(f"dy/dt:    {preset.equations[1]}")
    print(f"speed:    {preset.speed:g}")
    print(f"stepper:  {preset.engine.stepper} (base_step={preset.engine.base_step:g})")
    return 0


def _cmd_models_list(args) -> int:
    for name in list_models():
        print(name)
    return 0


def _cmd_steppers_list(args) -> int:
    for spec in steppers():
        aliases = ", ".join(spec.meta.aliases)
        print(f"{spec.meta.name:<8} order={spec.meta.order} family={spec.meta.family} aliases=[{aliases}]")
    return 0


def _cmd_equilibria(args) -> int:
    preset = load_preset(args.preset)
    field = preset.make_field()
    params = _merged_params(preset, _parse_params(args.param))
    viewport = preset.resolved_viewport(field)
    found = analyze(field, params, viewport, eps=preset.engine.stability_eps)
    if not found:
        print("No equilibria in viewport")
        return 0
    for eq in found:
        print(f"({eq.x:.6g}, {eq.y:.6g})  {eq.classification}  trace={eq.trace:.4g} det={eq.det:.4g}")
    return 0


def _cmd_render(args) -> int:
    from phasekit.plot import export_frame

    preset = load_preset(args.preset)
    width, height = _parse_size(args.size)
    scheduler = ManualScheduler()
    engine = PhasePortraitEngine.from_preset(preset, scheduler=scheduler, width=width, height=height)
    overrides = _parse_params(args.param)
    if overrides:
        try:
            engine.set_params(overrides)
        except KeyError as exc:
            raise ConfigError(exc.args[0]) from None
    if args.theme:
        engine.set_theme(args.theme)
    for text in args.seed or ():
        x, y = _parse_point(text)
        if not engine.seed(x, y):
            print(f"warning: seed ({x:g}, {y:g}) ignored", file=sys.stderr)
    if args.start:
        engine.start()
    scheduler.tick(args.frames)
    out = export_frame(engine, args.out)
    print(f"Wrote {out} ({scheduler.frames} frames, t={engine.time:.4g})")
    return 0


def _cmd_timeseries(args) -> int:
    try:
        resp = insulin_glucose_response(
            _parse_params(args.param) or None,
            args.mode,
            tau=args.tau,
            sigma=args.sigma,
        )
    except KeyError as exc:
        raise ConfigError(exc.args[0]) from None
    print("t,glucose,insulin")
    for t, g, i in list(zip(resp.time, resp.glucose, resp.insulin))[:: max(1, args.every)]:
        print(f"{t:.2f},{g:.6g},{i:.6g}")
    return 0


def _cmd_show(args) -> int:
    from phasekit.plot import interactive, show

    interactive(args.preset, start=args.start)
    show()
    return 0


# ---- parser -----------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phasekit", description="Phase-portrait simulation tools")
    sub = parser.add_subparsers(dest="command", required=True)

    presets = sub.add_parser("presets", help="Built-in tool presets")
    presets_sub = presets.add_subparsers(dest="presets_cmd", required=True)
    p = presets_sub.add_parser("list", help="List built-in presets")
    p.set_defaults(func=_cmd_presets_list)
    p = presets_sub.add_parser("show", help="Print a resolved preset")
    p.add_argument("preset")
    p.set_defaults(func=_cmd_presets_show)

    models = sub.add_parser("models", help="Registered vector fields")
    models_sub = models.add_subparsers(dest="models_cmd", required=True)
    p = models_sub.add_parser("list")
    p.set_defaults(func=_cmd_models_list)

    steppers_p = sub.add_parser("steppers", help="Registered steppers")
    steppers_sub = steppers_p.add_subparsers(dest="steppers_cmd", required=True)
    p = steppers_sub.add_parser("list")
    p.set_defaults(func=_cmd_steppers_list)

    p = sub.add_parser("equilibria", help="List equilibria and their stability")
    p.add_argument("preset")
    p.add_argument("--param", action="append", metavar="NAME=VALUE")
    p.set_defaults(func=_cmd_equilibria)

    p = sub.add_parser("render", help="Run frames headless and write a PNG")
    p.add_argument("preset")
    p.add_argument("--frames", type=int, default=200)
    p.add_argument("--seed", action="append", metavar="X,Y")
    p.add_argument("--param", action="append", metavar="NAME=VALUE")
    p.add_argument("--start", action="store_true", help="also animate the field particles")
    p.add_argument("--theme", choices=("light", "dark"))
    p.add_argument("--size", default="600x600", metavar="WxH")
    p.add_argument("--out", required=True)
    p.set_defaults(func=_cmd_render)

    p = sub.add_parser("timeseries", help="Glucose-insulin time course (CSV)")
    p.add_argument("--mode", choices=("baseline", "meals", "challenge"), default="baseline")
    p.add_argument("--tau", type=float, default=0.0, help="glucose sensing delay (minutes)")
    p.add_argument("--sigma", type=float, default=0.0, help="insulin action delay (minutes)")
    p.add_argument("--param", action="append", metavar="NAME=VALUE")
    p.add_argument("--every", type=int, default=1, help="print every n-th sample")
    p.set_defaults(func=_cmd_timeseries)

    p = sub.add_parser("show", help="Open a preset in an interactive window")
    p.add_argument("preset")
    p.add_argument("--start", action="store_true")
    p.set_defaults(func=_cmd_show)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except PresetNotFoundError as exc:
        print(str(exc).rstrip(), file=sys.stderr)
        return 1
    except (PhasekitError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
