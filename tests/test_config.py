from __future__ import annotations

import pytest

from pagediag.config import EngineConfig, ScoringConfig, TouchTargetConfig


def test_defaults() -> None:
    config = EngineConfig()
    assert config.touch_target.min_size == 44.0
    assert config.collision.min_spacing == 8.0
    assert config.readability.min_font_size == 16.0
    assert config.scoring.mobile_pass_threshold == 70
    assert config.scoring.responsive_baseline == 70
    assert config.to_dict()["contrast"]["min_ratio_aa"] == 4.5


def test_load_toml_file(tmp_path) -> None:
    path = tmp_path / "pagediag.toml"
    path.write_text(
        "[touch_target]\nmin_size = 48\n\n[scoring]\nmobile_pass_threshold = 80\n",
        encoding="utf-8",
    )
    config = EngineConfig.load(path)
    assert config.touch_target.min_size == 48.0
    assert config.touch_target.critical_size == 32.0
    assert config.scoring.mobile_pass_threshold == 80
    assert config.collision.min_spacing == 8.0


def test_load_without_path_uses_cwd(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert EngineConfig.load() == EngineConfig()
    (tmp_path / "pagediag.toml").write_text("[collision]\nmin_spacing = 12\n", encoding="utf-8")
    assert EngineConfig.load().collision.min_spacing == 12.0


def test_explicit_missing_path_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        EngineConfig.load(tmp_path / "nope.toml")


def test_unknown_key_raises_with_path(tmp_path) -> None:
    path = tmp_path / "pagediag.toml"
    path.write_text("[touch_target]\nminimum = 48\n", encoding="utf-8")
    with pytest.raises(ValueError) as exc_info:
        EngineConfig.load(path)
    assert str(path) in str(exc_info.value)
    assert "minimum" in str(exc_info.value)


def test_unknown_section_and_bad_types_raise() -> None:
    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"colour": {}})
    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"touch_target": {"min_size": "big"}})
    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"scoring": {"viewport_penalty": 2.5}})
    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"touch_target": {"include_hidden": 1}})


def test_invalid_toml_raises_value_error(tmp_path) -> None:
    path = tmp_path / "pagediag.toml"
    path.write_text("[touch_target\n", encoding="utf-8")
    with pytest.raises(ValueError):
        EngineConfig.load(path)


def test_with_overrides_replaces_sections() -> None:
    config = EngineConfig().with_overrides(scoring=ScoringConfig(viewport_penalty=30))
    assert config.scoring.viewport_penalty == 30
    assert config.touch_target == TouchTargetConfig()
