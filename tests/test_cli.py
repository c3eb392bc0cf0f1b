from __future__ import annotations

import json

import pytest

from pagediag.cli import main


def _write_snapshot(tmp_path, elements: list) -> str:
    path = tmp_path / "snapshot.json"
    payload = {"viewport": {"width": 1280, "height": 800}, "elements": elements}
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _button(selector: str, x: float, size: float) -> dict:
    return {"selector": selector, "tagName": "button", "rect": {"x": x, "y": 0, "width": size, "height": size}}


def test_inspect_writes_json_report(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    path = _write_snapshot(tmp_path, [_button("button.icon", 0, 30)])
    assert main(["inspect", path]) == 0
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["scores"]["mobile_ux"]["overall_score"] == 85
    assert "[pass] mobile-ux: 85" in captured.err


def test_inspect_markdown_to_file(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    path = _write_snapshot(tmp_path, [_button("button.icon", 0, 30)])
    out = tmp_path / "report.md"
    assert main(["inspect", path, "--format", "markdown", "--out", str(out), "--parallel"]) == 0
    assert out.read_text(encoding="utf-8").startswith("# Page diagnostics")
    assert f"[ok] wrote {out}" in capsys.readouterr().err


def test_fail_on_threshold_exits_one(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    path = _write_snapshot(tmp_path, [_button(f"button.b{i}", i * 100, 20) for i in range(3)])
    assert main(["inspect", path]) == 0
    with pytest.raises(SystemExit) as exc_info:
        main(["inspect", path, "--fail-on-threshold"])
    assert exc_info.value.code == 1


def test_viewport_width_override(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    element = {
        "selector": "div.hero",
        "tagName": "div",
        "rect": {"x": 0, "y": 0, "width": 600, "height": 200},
        "declaredStyle": [{"property": "width", "value": "600px"}],
    }
    path = _write_snapshot(tmp_path, [element])
    assert main(["inspect", path, "--viewport-width", "375"]) == 0
    payload = json.loads(capsys.readouterr().out)
    findings = payload["analyzers"]["responsive-width"]["findings"]
    assert [f["severity"] for f in findings] == ["critical"]


def test_input_errors_exit_two(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["inspect", str(tmp_path / "missing.json")]) == 2
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"tagName": "div", "rect": {"width": -3, "height": 1}}]), encoding="utf-8")
    assert main(["inspect", str(bad)]) == 2
    assert "[error]" in capsys.readouterr().err


def test_config_command_prints_effective_config(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pagediag.toml").write_text("[readability]\nmin_font_size = 14\n", encoding="utf-8")
    assert main(["config"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["readability"]["min_font_size"] == 14.0
    assert payload["touch_target"]["min_size"] == 44.0


def test_bad_config_exits_two(tmp_path, capsys) -> None:
    cfg = tmp_path / "custom.toml"
    cfg.write_text("[nope]\n", encoding="utf-8")
    assert main(["config", "--config", str(cfg)]) == 2
    assert "nope" in capsys.readouterr().err
