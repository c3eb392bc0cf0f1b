# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import math
from dataclasses import dataclass

from .config import TouchTargetConfig
from .types import CATEGORY_TOUCH_TARGET, AnalyzerResult, ElementFact, Finding, Snapshot, severity_rank

INTERACTIVE_TAGS = {"a", "button", "input", "select", "textarea"}
INTERACTIVE_ROLES = {
    "button",
    "link",
    "checkbox",
    "radio",
    "switch",
    "tab",
    "menuitem",
    "menuitemcheckbox",
    "menuitemradio",
    "option",
    "slider",
    "spinbutton",
    "combobox",
    "textbox",
    "searchbox",
}
BUTTON_LIKE_TAGS = {"button", "a"}
BUTTON_LIKE_ROLES = {"button", "link"}


def _role(element: ElementFact) -> str:
    return str(element.role or "").strip().lower()


def is_interactive(element: ElementFact) -> bool:
    tag = element.tag_name
    if tag == "input":
        return str(element.input_type or "").strip().lower() != "hidden"
    if tag in INTERACTIVE_TAGS:
        return True
    if _role(element) in INTERACTIVE_ROLES:
        return True
    if element.has_click_handler:
        return True
    return element.tab_index is not None and element.tab_index >= 0


@dataclass(frozen=True)
class TouchGap:
    width: float
    height: float


@dataclass(frozen=True)
class TouchTargetMeasurement:
    width: float
    height: float
    meets_wcag: bool
    severity: str | None
    gap: TouchGap
    suggested_css: str


def suggested_padding_css(width: float, height: float, min_size: float) -> str:
    suggestions: list[str] = []
    if width < min_size:
        pad = math.ceil((min_size - width) / 2)
        suggestions.append(f"padding-left: {pad}px;")
        suggestions.append(f"padding-right: {pad}px;")
    if height < min_size:
        pad = math.ceil((min_size - height) / 2)
        suggestions.append(f"padding-top: {pad}px;")
        suggestions.append(f"padding-bottom: {pad}px;")
    suggestions.append(f"min-width: {min_size:g}px;")
    suggestions.append(f"min-height: {min_size:g}px;")
    return " ".join(suggestions)


class TouchTargetAnalyzer:
    category = CATEGORY_TOUCH_TARGET

    def __init__(self, config: TouchTargetConfig | None = None) -> None:
        self.config = config or TouchTargetConfig()

    def measure(self, element: ElementFact) -> TouchTargetMeasurement:
        cfg = self.config
        width = element.rect.width
        height = element.rect.height
        meets = width >= cfg.min_size and height >= cfg.min_size
        severity = None
        if not meets:
            if width < cfg.critical_size or height < cfg.critical_size:
                severity = "critical"
            elif element.tag_name in BUTTON_LIKE_TAGS or _role(element) in BUTTON_LIKE_ROLES:
                severity = "high"
            else:
                severity = "moderate"
        gap = TouchGap(width=max(0.0, cfg.min_size - width), height=max(0.0, cfg.min_size - height))
        return TouchTargetMeasurement(
            width=width,
            height=height,
            meets_wcag=meets,
            severity=severity,
            gap=gap,
            suggested_css="" if meets else suggested_padding_css(width, height, cfg.min_size),
        )

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        cfg = self.config
        findings: list[Finding] = []
        evaluated = 0
        for element in snapshot.elements:
            if not is_interactive(element):
                continue
            if not cfg.include_hidden and not element.is_visible:
                continue
            evaluated += 1
            m = self.measure(element)
            if m.severity is None:
                continue
            w, h = round(m.width), round(m.height)
            findings.append(
                Finding(
                    category=self.category,
                    severity=m.severity,
                    selectors=(element.selector,),
                    metrics={
                        "width": w,
                        "height": h,
                        "min_size": cfg.min_size,
                        "gap_width": m.gap.width,
                        "gap_height": m.gap.height,
                        "suggested_css": m.suggested_css,
                    },
                    message=f"Touch target {element.label} is {w}x{h}px, below {cfg.min_size:g}x{cfg.min_size:g}px.",
                    recommendation=(
                        f"Increase size to at least {cfg.min_size:g}x{cfg.min_size:g}px "
                        f"(current {w}x{h}px): {m.suggested_css}"
                    ),
                )
            )
        findings.sort(key=lambda f: -severity_rank(f.severity))
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=evaluated,
            skipped=0,
            stats={
                "targets": evaluated,
                "failing": len(findings),
                "critical": sum(1 for f in findings if f.severity == "critical"),
                "high": sum(1 for f in findings if f.severity == "high"),
                "wcag_compliance": not findings,
            },
        )
