from __future__ import annotations

import pytest

from pagediag.css import AmbiguousSelector, resolve_declared, selector_matches, unit_of
from pagediag.responsive import OverflowDetector, ResponsiveWidthClassifier, classify_width
from pagediag.snapshot import load_snapshot
from pagediag.types import Declaration, ElementFact, Rect, Snapshot, StylesheetRule, Viewport


def _box(selector: str, width: float, *, declared: dict | None = None, tag: str = "div", **kwargs) -> ElementFact:
    decls = tuple(Declaration(k, v, selector) for k, v in (declared or {}).items())
    return ElementFact(selector=selector, tag_name=tag, rect=Rect(0, 0, width, 100), declared_style=decls, **kwargs)


def _rule(selector: str, **props: str) -> StylesheetRule:
    return StylesheetRule(
        selector_text=selector,
        declarations=tuple(Declaration(k.replace("_", "-"), v, selector) for k, v in props.items()),
    )


@pytest.mark.parametrize(
    ("width", "max_width", "min_width", "rendered", "reason", "severity"),
    [
        ("100%", "1200px", None, 1200, "fluid-capped", None),
        ("1400px", None, None, 1400, "exceeds-viewport", "critical"),
        ("1100px", None, None, 1100, "large-fixed", "high"),
        ("500px", None, None, 500, "fixed", "moderate"),
        ("200px", None, None, 200, "small-fixed", None),
        (None, None, None, 900, "intrinsic", None),
        ("calc(100% - 20px)", None, None, 1260, "relative", None),
        ("inherit", None, None, 1260, "relative", None),
        ("40rem", None, None, 640, "relative-font", None),
        ("fit-content", None, None, 1400, "overflows", "moderate"),
        ("100%", None, "1200px", 1260, "fixed-min-width", "high"),
        (None, None, "300px", 900, "fixed-min-width", "high"),
        ("100%", None, "200px", 1260, "relative", None),
        ("100%", None, "20rem", 1260, "relative", None),
        ("500px", None, "1200px", 500, "fixed", "moderate"),
    ],
)
def test_classify_width(width, max_width, min_width, rendered, reason, severity) -> None:
    result = classify_width(width, max_width, rendered, 1280, min_width=min_width)
    assert result.reason == reason
    assert result.severity == severity
    assert result.responsive is (severity is None)


def test_scroll_region_is_exempt_from_viewport_rule() -> None:
    result = classify_width("1400px", None, 1400, 1280, scroll_exempt=True)
    assert result.responsive
    assert result.reason == "scroll-region"


def test_capped_width_is_not_flagged_as_exceeding_viewport() -> None:
    result = classify_width("1400px", "1200px", 1400, 1280)
    assert result.reason == "large-fixed"


def test_fluid_capped_container_is_responsive() -> None:
    element = _box("main.wrap", 1200, declared={"width": "100%", "max-width": "1200px"})
    result = ResponsiveWidthClassifier().analyze(Snapshot(elements=(element,)))
    assert result.findings == ()
    assert result.stats["reasons"] == {"fluid-capped": 1}


def test_fixed_width_wider_than_viewport_is_critical() -> None:
    element = _box("div.hero", 1400, declared={"width": "1400px"})
    result = ResponsiveWidthClassifier().analyze(Snapshot(elements=(element,), viewport=Viewport(width=1280)))
    assert len(result.findings) == 1
    finding = result.findings[0]
    assert finding.severity == "critical"
    assert finding.metrics["reason"] == "exceeds-viewport"
    assert "max-width: 100%" in finding.recommendation


def test_inline_style_wins_over_declared() -> None:
    element = _box(
        "div.panel",
        600,
        declared={"width": "600px"},
        inline_style=(Declaration("width", "50%", "inline"),),
    )
    assert resolve_declared(element, "width") == "50%"


def test_first_matching_stylesheet_rule_wins() -> None:
    element = _box("div.card", 1400, element_id="promo", class_list=("card",))
    rules = (
        _rule("p.card", width="10%"),
        _rule(".card", width="1400px"),
        _rule("div#promo", width="50%"),
    )
    assert resolve_declared(element, "width", rules) == "1400px"
    result = ResponsiveWidthClassifier().analyze(Snapshot(elements=(element,), stylesheets=rules))
    assert [f.severity for f in result.findings] == ["critical"]


def test_stylesheets_ignored_when_declared_style_present() -> None:
    element = _box("div.card", 300, declared={"color": "red"}, class_list=("card",))
    assert resolve_declared(element, "width", (_rule(".card", width="900px"),)) is None


def test_ambiguous_selector_skips_element() -> None:
    element = _box("div.card", 900, class_list=("card",))
    rules = (_rule("section > .card", width="900px"),)
    with pytest.raises(AmbiguousSelector):
        resolve_declared(element, "width", rules)
    result = ResponsiveWidthClassifier().analyze(Snapshot(elements=(element,), stylesheets=rules))
    assert result.skipped == 1
    assert result.evaluated == 0


def test_selector_matching() -> None:
    element = _box("button#go.primary", 80, tag="button", element_id="go", class_list=("btn", "primary"))
    assert selector_matches("button", element)
    assert selector_matches(".btn.primary", element)
    assert selector_matches("a, #go", element)
    assert selector_matches("*", element)
    assert not selector_matches("button.secondary", element)
    with pytest.raises(AmbiguousSelector):
        selector_matches("button:hover", element)


def test_unit_of() -> None:
    assert unit_of("12px") == "px"
    assert unit_of("0") == "px"
    assert unit_of("50%") == "%"
    assert unit_of("1.5rem") == "rem"
    assert unit_of("auto") == "auto"
    assert unit_of("calc(100vw - 2rem)") == "vw"
    assert unit_of("none") is None
    assert unit_of(None) is None


def test_unit_usage_prevalence() -> None:
    snapshot = Snapshot(
        elements=(
            _box("div.a", 500, declared={"width": "100%", "font-size": "1rem"}),
            _box("div.b", 500, declared={"width": "500px", "font-size": "16px"}),
        )
    )
    usage = ResponsiveWidthClassifier().unit_usage(snapshot)
    assert usage["total"] == 4
    assert usage["units"]["px"] == 2
    assert usage["units"]["%"] == 1
    assert usage["units"]["rem"] == 1
    assert usage["responsive_unit_prevalence"] == 50


def test_overflow_detector() -> None:
    snapshot = Snapshot(
        elements=(
            _box("div.wide", 1300),
            _box("div.slight", 1285),
            _box("table.data", 2000, tag="table", is_in_scrollable_ancestor=True),
        ),
        viewport=Viewport(width=1280),
    )
    result = OverflowDetector().analyze(snapshot)
    assert [f.selectors[0] for f in result.findings] == ["div.wide"]
    assert result.findings[0].severity == "critical"
    assert result.findings[0].metrics["overflow_px"] == 20
    assert result.stats["scroll_exempt"] == 1


def test_important_flag_does_not_hide_pixel_widths() -> None:
    snapshot = load_snapshot(
        {
            "viewport": {"width": 1280, "height": 800},
            "elements": [
                {
                    "selector": "div.banner",
                    "tagName": "div",
                    "rect": {"width": 1400, "height": 100},
                    "inlineStyle": "width: 1400px !important",
                },
                {
                    "selector": "div.sidebar",
                    "tagName": "div",
                    "rect": {"width": 500, "height": 100},
                    "inlineStyle": "width: 500px!IMPORTANT",
                },
            ],
        }
    )
    result = ResponsiveWidthClassifier().analyze(snapshot)
    assert [f.severity for f in result.findings] == ["critical", "moderate"]
    assert [f.metrics["reason"] for f in result.findings] == ["exceeds-viewport", "fixed"]
    assert result.findings[0].metrics["declared_width"] == "1400px"


def test_fixed_min_width_is_flagged() -> None:
    element = _box("div.table-wrap", 1200, declared={"width": "100%", "min-width": "1200px"})
    result = ResponsiveWidthClassifier().analyze(Snapshot(elements=(element,)))
    assert len(result.findings) == 1
    finding = result.findings[0]
    assert finding.severity == "high"
    assert finding.metrics["reason"] == "fixed-min-width"
    assert finding.recommendation == '"min-width: 1200px" prevents element from shrinking on small screens'
    assert "min-width (1200px)" in finding.message


def test_scroll_region_ignores_min_width() -> None:
    result = classify_width("1400px", None, 1400, 1280, min_width="1400px", scroll_exempt=True)
    assert result.reason == "scroll-region"


def test_unit_prevalence_is_not_rounded() -> None:
    snapshot = Snapshot(
        elements=(
            _box("div.a", 500, declared={"width": "100%"}),
            _box("div.b", 500, declared={"width": "500px", "font-size": "16px"}),
        )
    )
    usage = ResponsiveWidthClassifier().unit_usage(snapshot)
    assert usage["responsive_unit_prevalence"] == pytest.approx(100 / 3)
