from __future__ import annotations

import json
import warnings

import pytest

from pagediag import DiagnosticWarning, PreconditionViolation
from pagediag.snapshot import load_snapshot, load_snapshot_file
from pagediag.types import Declaration, Rect, Viewport


def _payload() -> dict:
    return {
        "viewport": {"width": 375, "height": 667, "metaContent": "width=device-width, initial-scale=1"},
        "elements": [
            {
                "selector": "button#buy.cta",
                "tagName": "BUTTON",
                "rect": {"x": 10, "y": 20, "width": 30, "height": 30},
                "computedStyle": {"color": "#fff", "backgroundColor": "#0055aa", "fontSize": "16px"},
                "declaredStyle": [{"property": "Width", "value": "30px", "sourceSelector": ".cta"}],
                "inlineStyle": "padding: 2px; margin-left: 4px",
                "hasText": True,
                "elementId": "buy",
                "classList": ["cta"],
                "text": "Buy now",
            }
        ],
        "stylesheets": [
            {"selectorText": ".cta", "declarations": [{"property": "width", "value": "30px"}]},
            {"selectorText": "main", "declarations": {"max-width": "1200px"}},
        ],
    }


def test_load_snapshot_maps_camel_case_fields() -> None:
    snapshot = load_snapshot(_payload())
    assert snapshot.viewport.width == 375
    assert snapshot.viewport.meta_checked
    element = snapshot.elements[0]
    assert element.tag_name == "button"
    assert element.rect == Rect(10, 20, 30, 30)
    assert element.computed_style.background_color == "#0055aa"
    assert element.declared_style[0].property == "width"
    assert element.declared_style[0].source_selector == ".cta"
    assert [d.property for d in element.inline_style] == ["padding", "margin-left"]
    assert element.is_visible
    assert element.class_list == ("cta",)
    assert snapshot.stylesheets[1].first_value("max-width") == "1200px"


def test_bare_element_list_uses_default_viewport() -> None:
    snapshot = load_snapshot([{"tagName": "a", "rect": {"width": 10, "height": 10}}])
    assert snapshot.viewport == Viewport()
    assert not snapshot.viewport.meta_checked
    assert snapshot.elements[0].selector == "a"


def test_explicit_missing_meta_is_checked() -> None:
    snapshot = load_snapshot({"viewport": {"width": 390, "height": 844, "metaContent": None}})
    assert snapshot.viewport.meta_checked
    assert snapshot.viewport.meta_content is None


def test_negative_width_is_a_precondition_violation() -> None:
    with pytest.raises(PreconditionViolation):
        load_snapshot([{"tagName": "div", "rect": {"x": 0, "y": 0, "width": -1, "height": 10}}])
    with pytest.raises(PreconditionViolation):
        Rect(0, 0, 10, -5)


def test_structural_errors_raise() -> None:
    with pytest.raises(PreconditionViolation):
        load_snapshot([{"tagName": "div"}])
    with pytest.raises(PreconditionViolation):
        load_snapshot([{"rect": {"width": 1, "height": 1}}])
    with pytest.raises(PreconditionViolation):
        load_snapshot([{"tagName": "div", "rect": {"width": "wide", "height": 1}}])
    with pytest.raises(PreconditionViolation):
        load_snapshot({"elements": {"not": "a list"}})
    with pytest.raises(PreconditionViolation):
        load_snapshot({"viewport": {"width": 0, "height": 800}})


def test_malformed_inline_fragment_warns_and_is_dropped() -> None:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        snapshot = load_snapshot(
            [{"tagName": "p", "rect": {"width": 10, "height": 10}, "inlineStyle": "color: red; garbage"}]
        )
    assert [d.property for d in snapshot.elements[0].inline_style] == ["color"]
    assert any(isinstance(w.message, DiagnosticWarning) for w in caught)


def test_load_snapshot_file(tmp_path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(_payload()), encoding="utf-8")
    assert len(load_snapshot_file(path).elements) == 1

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(PreconditionViolation):
        load_snapshot_file(bad)


def test_important_suffix_is_split_from_value() -> None:
    snapshot = load_snapshot(
        [
            {
                "tagName": "div",
                "rect": {"width": 10, "height": 10},
                "inlineStyle": "width: 1400px !important; color: red",
                "declaredStyle": [{"property": "max-width", "value": "none ! important"}],
            }
        ]
    )
    element = snapshot.elements[0]
    width, color = element.inline_style
    assert (width.value, width.important) == ("1400px", True)
    assert (color.value, color.important) == ("red", False)
    assert element.declared_style[0].value == "none"
    assert element.declared_style[0].important
    assert Declaration("width", "50%").important is False
