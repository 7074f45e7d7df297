# tests/unit/test_config.py
from __future__ import annotations

from pathlib import Path

import pytest

from phasekit.config import EngineConfig, list_presets, load_preset, parse_preset, resolve_preset
from phasekit.errors import ConfigError, PresetNotFoundError
from phasekit.fields import CircularField, ExpressionField, HigginsSelkov
from phasekit.runtime.transform import Viewport


def test_engine_defaults():
    cfg = EngineConfig()
    assert cfg.max_seeded == 100
    assert cfg.field_grid_size == 10
    assert cfg.field_extension == pytest.approx(0.4)
    assert cfg.field_cycle == pytest.approx(30.0)
    assert cfg.base_step == pytest.approx(0.016)
    assert cfg.stepper == "rk4"
    assert cfg.arrow_grid == 15
    assert cfg.arrow_head == (6.0, 2.0)


@pytest.mark.parametrize(
    "overrides, field_name",
    [
        ({"max_seeded": 0}, "max_seeded"),
        ({"field_grid_size": 2.5}, "field_grid_size"),
        ({"base_step": -0.1}, "base_step"),
        ({"field_extension": -1.0}, "field_extension"),
        ({"arrow_head": (6.0,)}, "arrow_head"),
        ({"stepper": "leapfrog"}, "stepper"),
        ({"max_crossings": 1}, "max_crossings"),
    ],
)
def test_engine_validation(overrides, field_name):
    with pytest.raises(ConfigError, match=rf"\[engine\]\.{field_name}"):
        EngineConfig(**overrides)


def test_engine_from_mapping_rejects_unknown_keys():
    with pytest.raises(ConfigError, match="unknown keys"):
        EngineConfig.from_mapping({"warp": 9})
    cfg = EngineConfig.from_mapping({"arrow_head": [4, 1], "stepper": "midpoint"})
    assert cfg.arrow_head == (4.0, 1.0)
    assert cfg.with_overrides(base_step=0.5).base_step == 0.5


def test_builtin_presets_listed_and_loadable():
    names = list_presets()
    assert names == sorted(
        ["calculator", "generalized-lv", "glycolysis", "holling-tanner", "insulin-glucose", "shark-tuna"]
    )
    for name in names:
        preset = load_preset(name)
        assert preset.name == name
        assert preset.source


def test_builtin_uri_and_bare_name_agree():
    a = load_preset("builtin://glycolysis")
    b = load_preset("glycolysis")
    assert a == b
    assert a.model == "glycolysis"
    assert a.params == {"v": 1.0, "c": 1.0, "k": 1.0}
    assert a.viewport == Viewport(0.0, 3.0, 0.0, 3.0)
    assert a.engine.base_step == pytest.approx(0.05)
    assert isinstance(a.make_field(), HigginsSelkov)


def test_missing_preset_lists_candidates(tmp_path: Path):
    with pytest.raises(PresetNotFoundError) as err:
        load_preset(str(tmp_path / "nowhere"))
    msg = str(err.value)
    assert msg.startswith("Preset not found:")
    assert "nowhere.toml" in msg
    with pytest.raises(PresetNotFoundError):
        resolve_preset("builtin://lorenz")


def test_path_without_suffix(tmp_path: Path):
    path = tmp_path / "mine.toml"
    path.write_text('[tool]\nmodel = "linear"\n\n[params]\na = -1.0\n', encoding="utf-8")
    preset = load_preset(str(tmp_path / "mine"))
    assert preset.name == "mine"
    assert preset.params == {"a": -1.0}
    assert preset.viewport is None
    assert preset.resolved_viewport() == Viewport(-5.0, 5.0, -5.0, 5.0)


def test_inline_preset():
    preset = load_preset('inline: [tool]\nmodel = "shark-tuna"\nspeed = 2\n')
    assert preset.source == "inline"
    assert preset.speed == 2.0
    with pytest.raises(ConfigError, match="inline"):
        load_preset("inline: [tool")


@pytest.mark.parametrize(
    "doc, message",
    [
        ({"tool": {}}, r"\[tool\]\.model"),
        ({"tool": {"model": "lorenz"}}, r"\[tool\]\.model"),
        ({"tool": {"model": "glycolysis"}, "params": {"zeta": 1.0}}, r"\[params\]"),
        ({"tool": {"model": "glycolysis"}, "params": {"v": "fast"}}, r"\[params\]\.v"),
        ({"tool": {"model": "glycolysis", "speed": -1}}, r"\[tool\]\.speed"),
        ({"tool": {"model": "glycolysis", "theme": "sepia"}}, r"\[tool\]\.theme"),
        ({"tool": {"model": "glycolysis"}, "viewport": {"x_min": 0}}, r"\[viewport\]"),
        ({"tool": {"model": "glycolysis"}, "viewport": {"x_min": 1, "x_max": 0, "y_min": 0, "y_max": 1}}, r"\[viewport\]"),
        ({"tool": {"model": "glycolysis"}, "equations": {"x": "y", "y": "x"}}, r"\[equations\]"),
        ({"tool": {"model": "calculator"}}, r"\[equations\]"),
        ({"tool": {"model": "glycolysis"}, "extras": {}}, "Unknown preset tables"),
    ],
)
def test_parse_errors_name_the_table(doc, message):
    with pytest.raises(ConfigError, match=message):
        parse_preset(doc)


def test_calculator_needs_evaluator():
    preset = load_preset("calculator")
    assert preset.equations == ("y", "-x")
    with pytest.warns(RuntimeWarning, match="equation evaluator"):
        field = preset.make_field()
    assert isinstance(field, CircularField)

    class Rotation:
        def __init__(self, x_eq, y_eq):
            pass

        def is_valid_system(self):
            return True

        def get_error(self):
            return ""

        def evaluate_field(self, x, y):
            return y, -x

    field = preset.make_field(Rotation)
    assert isinstance(field, ExpressionField)
    assert field.evaluate(1.0, 0.0, {}) == (0.0, -1.0)
