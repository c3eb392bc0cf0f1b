# SPDX-License-Identifier: AGPL-3.0-only
"""Declared-width classification, responsive unit usage and viewport overflow."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .config import ResponsiveConfig
from .contrast import NON_RENDERED_TAGS
from .css import CSS_WIDE_KEYWORDS, AmbiguousSelector, parse_px, resolve_declared, split_length, unit_of
from .types import (
    CATEGORY_OVERFLOW,
    CATEGORY_RESPONSIVE_WIDTH,
    AnalyzerResult,
    ElementFact,
    Finding,
    Snapshot,
)

UNIT_KEYS = ("px", "%", "rem", "em", "vw", "vh", "fr", "auto")

_FIXES = {
    "exceeds-viewport": 'Replace "width: {width}" with "max-width: 100%; width: auto;"',
    "large-fixed": 'Replace "width: {width}" with "max-width: {width}; width: 100%;"',
    "fixed": 'Consider replacing "width: {width}" with flexible units or max-width',
    "overflows": 'Add "max-width: 100%;" so "width: {width}" cannot overflow the viewport',
    "fixed-min-width": '"min-width: {min_width}" prevents element from shrinking on small screens',
}


@dataclass(frozen=True)
class WidthClassification:
    responsive: bool
    reason: str
    severity: str | None = None


def _has_cap(max_width: str | None) -> bool:
    return max_width is not None and max_width.strip().lower() != "none"


def classify_width(
    width: str | None,
    max_width: str | None,
    rendered_width: float,
    viewport_width: float,
    *,
    min_width: str | None = None,
    scroll_exempt: bool = False,
    config: ResponsiveConfig | None = None,
) -> WidthClassification:
    """Classify one declared width; rules are evaluated in order and the first hit wins.

    A width that passes is still non-responsive when a pixel ``min-width`` of
    at least ``small_fixed_px`` keeps the element from shrinking.
    """
    cfg = config or ResponsiveConfig()
    result = _classify_declared_width(width, max_width, rendered_width, viewport_width, scroll_exempt, cfg)
    if not result.responsive or result.reason == "scroll-region":
        return result
    min_px = parse_px(min_width)
    if min_px is not None and min_px >= cfg.small_fixed_px:
        return WidthClassification(False, "fixed-min-width", "high")
    return result


def _classify_declared_width(
    width: str | None,
    max_width: str | None,
    rendered_width: float,
    viewport_width: float,
    scroll_exempt: bool,
    cfg: ResponsiveConfig,
) -> WidthClassification:
    text = None if width is None else width.strip().lower()
    capped = _has_cap(max_width)

    if capped and text in ("100%", "auto"):
        return WidthClassification(True, "fluid-capped")
    if text is not None and (
        text in CSS_WIDE_KEYWORDS or any(unit in text for unit in ("%", "vw", "vh"))
    ):
        return WidthClassification(True, "relative")
    if not text:
        return WidthClassification(True, "intrinsic")

    px = parse_px(text)
    if px is not None:
        if px < cfg.small_fixed_px:
            return WidthClassification(True, "small-fixed")
        if rendered_width > viewport_width and not capped:
            if scroll_exempt:
                return WidthClassification(True, "scroll-region")
            return WidthClassification(False, "exceeds-viewport", "critical")
        if px > cfg.large_fixed_px:
            return WidthClassification(False, "large-fixed", "high")
        return WidthClassification(False, "fixed", "moderate")

    parts = split_length(text)
    if parts is not None and parts[1] in ("rem", "em"):
        return WidthClassification(True, "relative-font")

    if rendered_width <= viewport_width or scroll_exempt:
        return WidthClassification(True, "fits-viewport")
    return WidthClassification(False, "overflows", "moderate")


def _in_scope(element: ElementFact) -> bool:
    return element.is_visible and element.tag_name not in NON_RENDERED_TAGS


class ResponsiveWidthClassifier:
    category = CATEGORY_RESPONSIVE_WIDTH

    def __init__(self, config: ResponsiveConfig | None = None) -> None:
        self.config = config or ResponsiveConfig()

    def unit_usage(self, snapshot: Snapshot) -> dict[str, Any]:
        units = {key: 0 for key in UNIT_KEYS}
        for element in snapshot.elements:
            if not _in_scope(element):
                continue
            for prop in ("width", "font-size"):
                try:
                    value = resolve_declared(element, prop, snapshot.stylesheets)
                except AmbiguousSelector:
                    continue
                unit = unit_of(value)
                if unit in units:
                    units[unit] += 1
        total = sum(units.values())
        responsive = total - units["px"]
        prevalence = responsive / total * 100 if total else 0.0
        return {
            "units": units,
            "total": total,
            "responsive_unit_prevalence": prevalence,
        }

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        cfg = self.config
        viewport_width = snapshot.viewport.width
        findings: list[Finding] = []
        reasons: dict[str, int] = {}
        evaluated = skipped = 0
        for element in snapshot.elements:
            if not _in_scope(element):
                continue
            try:
                width = resolve_declared(element, "width", snapshot.stylesheets)
                max_width = resolve_declared(element, "max-width", snapshot.stylesheets)
                min_width = resolve_declared(element, "min-width", snapshot.stylesheets)
            except AmbiguousSelector:
                skipped += 1
                continue
            evaluated += 1
            result = classify_width(
                width,
                max_width,
                element.rect.width,
                viewport_width,
                min_width=min_width,
                scroll_exempt=element.is_in_scrollable_ancestor,
                config=cfg,
            )
            reasons[result.reason] = reasons.get(result.reason, 0) + 1
            if result.responsive:
                continue
            if result.reason == "fixed-min-width":
                declared = f"a fixed min-width ({min_width})"
            else:
                declared = f"a fixed width ({width})"
            findings.append(
                Finding(
                    category=self.category,
                    severity=result.severity or "moderate",
                    selectors=(element.selector,),
                    metrics={
                        "declared_width": width or "",
                        "declared_max_width": max_width or "",
                        "declared_min_width": min_width or "",
                        "rendered_width_px": round(element.rect.width, 2),
                        "viewport_width_px": viewport_width,
                        "reason": result.reason,
                    },
                    message=(
                        f"{element.selector} declares {declared} rendered at "
                        f"{element.rect.width:g}px on a {viewport_width:g}px viewport."
                    ),
                    recommendation=_FIXES[result.reason].format(width=width, min_width=min_width),
                )
            )
        stats: dict[str, Any] = {
            "responsive": evaluated - len(findings),
            "non_responsive": len(findings),
            "reasons": dict(sorted(reasons.items())),
        }
        stats.update(self.unit_usage(snapshot))
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=evaluated,
            skipped=skipped,
            stats=stats,
        )


class OverflowDetector:
    """Elements wider than the viewport outside intentional horizontal scroll regions."""

    category = CATEGORY_OVERFLOW

    def __init__(self, config: ResponsiveConfig | None = None) -> None:
        self.config = config or ResponsiveConfig()

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        cfg = self.config
        viewport_width = snapshot.viewport.width
        findings: list[Finding] = []
        evaluated = exempt = 0
        for element in snapshot.elements:
            if not _in_scope(element):
                continue
            evaluated += 1
            if element.rect.width <= viewport_width + cfg.overflow_tolerance_px:
                continue
            if element.is_in_scrollable_ancestor:
                exempt += 1
                continue
            overflow = element.rect.width - viewport_width
            findings.append(
                Finding(
                    category=self.category,
                    severity="critical",
                    selectors=(element.selector,),
                    metrics={
                        "rendered_width_px": round(element.rect.width, 2),
                        "viewport_width_px": viewport_width,
                        "overflow_px": round(overflow, 2),
                    },
                    message=f"{element.selector} overflows the viewport by {overflow:.0f}px.",
                    recommendation='Add "max-width: 100%;" and "box-sizing: border-box;" to prevent horizontal overflow.',
                )
            )
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=evaluated,
            skipped=0,
            stats={"overflowing": len(findings), "scroll_exempt": exempt},
        )
