# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

from dataclasses import dataclass

from .config import ResponsiveConfig
from .types import CATEGORY_LAYOUT, AnalyzerResult, ElementFact, Finding, Snapshot

CONTAINER_TAGS = {"div", "section", "article", "main", "aside", "header", "footer", "nav", "ul", "ol", "form", "table"}

PATTERN_FLEX_WRAP = "flex-wrap"
PATTERN_GRID_FLEXIBLE = "grid-flexible"

_FLEXIBLE_TRACK_TOKENS = ("fr", "minmax(", "auto-fit", "auto-fill")


@dataclass(frozen=True)
class LayoutVerdict:
    layout_type: str
    pattern: str | None = None
    severity: str | None = None
    suggestion: str = ""


def classify_layout(element: ElementFact, config: ResponsiveConfig | None = None) -> LayoutVerdict:
    cfg = config or ResponsiveConfig()
    style = element.computed_style
    display = str(style.display or "").strip().lower()

    if "flex" in display:
        wrap = str(style.flex_wrap or "nowrap").strip().lower()
        if wrap in ("wrap", "wrap-reverse"):
            return LayoutVerdict("flex", pattern=PATTERN_FLEX_WRAP)
        if element.child_count > cfg.flex_nowrap_max_children:
            return LayoutVerdict(
                "flex",
                severity="moderate",
                suggestion='Add "flex-wrap: wrap;" to allow items to wrap on small screens',
            )
        return LayoutVerdict("flex")
    if "grid" in display:
        columns = str(style.grid_template_columns or "").strip().lower()
        if any(token in columns for token in _FLEXIBLE_TRACK_TOKENS):
            return LayoutVerdict("grid", pattern=PATTERN_GRID_FLEXIBLE)
        if columns and columns != "none":
            return LayoutVerdict(
                "grid",
                severity="moderate",
                suggestion='Use "fr" units or "minmax()" for responsive grid columns',
            )
        return LayoutVerdict("grid")
    if display == "table" or element.tag_name == "table":
        return LayoutVerdict(
            "table",
            severity="minor",
            suggestion="Consider using flexbox or grid for better mobile responsiveness",
        )
    if display == "inline-block":
        if element.child_count > cfg.inline_block_max_children:
            return LayoutVerdict(
                "inline-block",
                severity="minor",
                suggestion="Consider using flexbox for a more flexible layout",
            )
        return LayoutVerdict("inline-block")
    return LayoutVerdict("block")


class LayoutAnalyzer:
    """Detects responsive layout patterns and layouts that will not adapt to small screens."""

    category = CATEGORY_LAYOUT

    def __init__(self, config: ResponsiveConfig | None = None) -> None:
        self.config = config or ResponsiveConfig()

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        cfg = self.config
        findings: list[Finding] = []
        types: dict[str, int] = {}
        patterns: dict[str, int] = {}
        evaluated = 0
        for element in snapshot.elements:
            if not element.is_visible or element.tag_name not in CONTAINER_TAGS:
                continue
            if element.rect.width < cfg.layout_min_width_px:
                continue
            evaluated += 1
            verdict = classify_layout(element, cfg)
            types[verdict.layout_type] = types.get(verdict.layout_type, 0) + 1
            if verdict.pattern:
                patterns[verdict.pattern] = patterns.get(verdict.pattern, 0) + 1
            if verdict.severity is None:
                continue
            findings.append(
                Finding(
                    category=self.category,
                    severity=verdict.severity,
                    selectors=(element.selector,),
                    metrics={
                        "layout_type": verdict.layout_type,
                        "display": element.computed_style.display or "",
                        "child_count": element.child_count,
                    },
                    message=f"{element.selector} uses a {verdict.layout_type} layout that will not adapt to small screens.",
                    recommendation=verdict.suggestion,
                )
            )
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=evaluated,
            skipped=0,
            stats={
                "layout_types": dict(sorted(types.items())),
                "patterns": dict(sorted(patterns.items())),
                "pattern_count": sum(patterns.values()),
                "non_responsive": len(findings),
            },
        )
