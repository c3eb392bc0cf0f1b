from __future__ import annotations

from pagediag.config import TouchTargetConfig
from pagediag.touch_targets import TouchTargetAnalyzer, is_interactive, suggested_padding_css
from pagediag.types import ElementFact, Rect, Snapshot


def _target(selector: str, width: float, height: float, tag: str = "button", x: float = 0, **kwargs) -> ElementFact:
    return ElementFact(selector=selector, tag_name=tag, rect=Rect(x, 0, width, height), **kwargs)


def test_44_by_44_meets_minimum() -> None:
    m = TouchTargetAnalyzer().measure(_target("button.ok", 44, 44))
    assert m.meets_wcag
    assert m.severity is None
    assert m.gap.width == 0 and m.gap.height == 0
    assert m.suggested_css == ""


def test_one_pixel_short_reports_gap() -> None:
    m = TouchTargetAnalyzer().measure(_target("button.narrow", 43, 44))
    assert not m.meets_wcag
    assert m.gap.width == 1
    assert m.gap.height == 0
    assert m.severity == "high"


def test_30px_button_is_critical() -> None:
    result = TouchTargetAnalyzer().analyze(Snapshot(elements=(_target("button.icon", 30, 30),)))
    assert len(result.findings) == 1
    finding = result.findings[0]
    assert finding.severity == "critical"
    assert finding.metrics["gap_width"] == 14
    assert finding.metrics["gap_height"] == 14
    assert "padding-left: 7px;" in finding.metrics["suggested_css"]
    assert result.stats["wcag_compliance"] is False


def test_non_button_targets_are_moderate() -> None:
    m = TouchTargetAnalyzer().measure(_target("span.toggle", 40, 40, tag="span", has_click_handler=True))
    assert m.severity == "moderate"
    m = TouchTargetAnalyzer().measure(_target("div.tab", 40, 40, tag="div", role="button"))
    assert m.severity == "high"


def test_findings_are_sorted_by_severity() -> None:
    snapshot = Snapshot(
        elements=(
            _target("span.chip", 40, 40, tag="span", has_click_handler=True),
            _target("a.more", 40, 40, tag="a", x=100),
            _target("button.close", 20, 20, x=200),
        )
    )
    result = TouchTargetAnalyzer().analyze(snapshot)
    assert [f.severity for f in result.findings] == ["critical", "high", "moderate"]
    assert result.stats["critical"] == 1
    assert result.stats["high"] == 1


def test_interactive_detection() -> None:
    assert is_interactive(_target("a", 10, 10, tag="a"))
    assert is_interactive(_target("input.text", 10, 10, tag="input", input_type="text"))
    assert not is_interactive(_target("input.csrf", 0, 0, tag="input", input_type="hidden"))
    assert is_interactive(_target("div.focus", 10, 10, tag="div", tab_index=0))
    assert not is_interactive(_target("div.skip", 10, 10, tag="div", tab_index=-1))
    assert not is_interactive(_target("div.plain", 10, 10, tag="div"))


def test_hidden_targets_are_ignored_unless_configured() -> None:
    snapshot = Snapshot(elements=(_target("button.menu", 20, 20, is_visible=False),))
    assert TouchTargetAnalyzer().analyze(snapshot).findings == ()
    included = TouchTargetAnalyzer(TouchTargetConfig(include_hidden=True)).analyze(snapshot)
    assert len(included.findings) == 1


def test_custom_minimum_size() -> None:
    analyzer = TouchTargetAnalyzer(TouchTargetConfig(min_size=48.0))
    m = analyzer.measure(_target("button.ok", 44, 44))
    assert not m.meets_wcag
    assert m.gap.width == 4


def test_suggested_padding_css() -> None:
    css = suggested_padding_css(30, 40, 44)
    assert "padding-left: 7px;" in css
    assert "padding-top: 2px;" in css
    assert css.endswith("min-width: 44px; min-height: 44px;")
