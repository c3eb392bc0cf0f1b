# SPDX-License-Identifier: AGPL-3.0-only
"""Composite scores and ranked recommendations.

The mobile-UX score subtracts from 100. The responsive-design score starts at
70, adds capped bonuses and then subtracts.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from .config import EngineConfig, ScoringConfig
from .types import (
    CATEGORY_COLLISION,
    CATEGORY_CONTRAST,
    CATEGORY_LAYOUT,
    CATEGORY_OVERFLOW,
    CATEGORY_READABILITY,
    CATEGORY_RESPONSIVE_WIDTH,
    CATEGORY_TOUCH_TARGET,
    CATEGORY_VIEWPORT,
    AnalyzerResult,
    Finding,
    Recommendation,
    ScoreReport,
    category_rank,
    severity_rank,
)

MOBILE_UX = "mobile-ux"
RESPONSIVE_DESIGN = "responsive-design"

MOBILE_UX_CATEGORIES = (CATEGORY_VIEWPORT, CATEGORY_TOUCH_TARGET, CATEGORY_COLLISION, CATEGORY_READABILITY)
RESPONSIVE_DESIGN_CATEGORIES = (CATEGORY_RESPONSIVE_WIDTH, CATEGORY_OVERFLOW, CATEGORY_LAYOUT)

_ISSUES = {
    CATEGORY_VIEWPORT: "viewport meta configuration problem(s)",
    CATEGORY_CONTRAST: "text element(s) with insufficient color contrast",
    CATEGORY_TOUCH_TARGET: "interactive element(s) below the minimum touch target size",
    CATEGORY_COLLISION: "interactive element(s) placed too close together",
    CATEGORY_READABILITY: "text element(s) with a font size below the readable minimum",
    CATEGORY_RESPONSIVE_WIDTH: "element(s) with fixed, non-responsive widths",
    CATEGORY_OVERFLOW: "element(s) causing horizontal overflow",
    CATEGORY_LAYOUT: "layout(s) not optimized for small screens",
}


def fix_texts(config: EngineConfig | None = None) -> dict[str, str]:
    """Per-category fix advice, quoting the configured thresholds."""
    cfg = config or EngineConfig()
    touch = cfg.touch_target.min_size
    return {
        CATEGORY_VIEWPORT: 'Add <meta name="viewport" content="width=device-width, initial-scale=1"> to <head>',
        CATEGORY_CONTRAST: (
            "Darken text or lighten backgrounds to reach WCAG AA contrast "
            f"({cfg.contrast.min_ratio_aa:g}:1, {cfg.contrast.large_text_min_aa:g}:1 for large text)"
        ),
        CATEGORY_TOUCH_TARGET: (
            f"Increase touch target size to at least {touch:g}x{touch:g}px using padding or min-width/min-height"
        ),
        CATEGORY_COLLISION: (
            f"Add at least {cfg.collision.min_spacing:g}px spacing between buttons, links, "
            "and other interactive elements"
        ),
        CATEGORY_READABILITY: (
            f"Increase font-size to at least {cfg.readability.min_font_size:g}px for better mobile readability"
        ),
        CATEGORY_RESPONSIVE_WIDTH: "Convert fixed widths to max-width with width: 100% or use relative units",
        CATEGORY_OVERFLOW: "Add max-width: 100% and box-sizing: border-box",
        CATEGORY_LAYOUT: "Add flex-wrap: wrap or use fr/minmax() grid tracks instead of fixed layouts",
    }


def clamp_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def _worst(findings: Iterable[Finding]) -> str:
    return max((f.severity for f in findings), key=severity_rank)


def _affected(findings: Iterable[Finding]) -> int:
    seen: set[str] = set()
    for f in findings:
        seen.update(f.selectors)
    return len(seen)


def build_recommendations(
    results: Mapping[str, AnalyzerResult], config: EngineConfig | None = None
) -> list[Recommendation]:
    """One entry per category with findings, most severe first, then in report category order."""
    fixes = fix_texts(config)
    out: list[Recommendation] = []
    for category, result in results.items():
        if not result.findings:
            continue
        affected = _affected(result.findings)
        out.append(
            Recommendation(
                category=category,
                severity=_worst(result.findings),
                issue=f"{affected} {_ISSUES.get(category, 'element(s) with issues')}",
                fix=fixes.get(category, "Review the affected elements"),
                affected_count=affected,
            )
        )
    out.sort(key=lambda r: (-severity_rank(r.severity), category_rank(r.category)))
    return out


def _by_severity(result: AnalyzerResult | None, critical: int, high: int, other: int) -> int:
    if result is None:
        return 0
    total = 0
    for f in result.findings:
        if f.severity == "critical":
            total += critical
        elif f.severity == "high":
            total += high
        else:
            total += other
    return total


def _count(results: Mapping[str, AnalyzerResult], category: str) -> int:
    result = results.get(category)
    return len(result.findings) if result is not None else 0


def _subset(results: Mapping[str, AnalyzerResult], categories: tuple[str, ...]) -> dict[str, AnalyzerResult]:
    return {c: results[c] for c in categories if c in results}


def mobile_ux_score(
    results: Mapping[str, AnalyzerResult],
    config: ScoringConfig | None = None,
    *,
    engine_config: EngineConfig | None = None,
) -> ScoreReport:
    """Subtractive score from a baseline of 100; mobile-friendly at 70 and above."""
    cfg = config or ScoringConfig()
    scoped = _subset(results, MOBILE_UX_CATEGORIES)
    viewport = scoped.get(CATEGORY_VIEWPORT)
    deductions = {
        CATEGORY_TOUCH_TARGET: _by_severity(
            scoped.get(CATEGORY_TOUCH_TARGET),
            cfg.touch_critical_penalty,
            cfg.touch_high_penalty,
            cfg.touch_other_penalty,
        ),
        CATEGORY_READABILITY: cfg.readability_penalty * _count(scoped, CATEGORY_READABILITY),
        CATEGORY_COLLISION: cfg.collision_penalty * _count(scoped, CATEGORY_COLLISION),
        CATEGORY_VIEWPORT: cfg.viewport_penalty
        if viewport is not None and viewport.count("critical") > 0
        else 0,
    }
    score = cfg.mobile_baseline - sum(deductions.values())
    return ScoreReport(
        name=MOBILE_UX,
        findings={c: r.findings for c, r in scoped.items()},
        subscores={c: clamp_score(100 - d) for c, d in deductions.items()},
        overall_score=clamp_score(score),
        pass_threshold=cfg.mobile_pass_threshold,
        recommendations=build_recommendations(scoped, engine_config),
        adjustments={"baseline": cfg.mobile_baseline, "deductions": deductions, "bonuses": {}},
    )


def unit_bonus(prevalence: float, config: ScoringConfig | None = None) -> int:
    cfg = config or ScoringConfig()
    if prevalence < cfg.unit_bonus_min_prevalence:
        return 0
    return min(cfg.unit_bonus_max, int(round(cfg.unit_bonus_max * prevalence / 100.0)))


def pattern_bonus(pattern_count: int, config: ScoringConfig | None = None) -> int:
    cfg = config or ScoringConfig()
    return min(cfg.pattern_bonus_max, cfg.pattern_bonus * max(0, pattern_count))


def responsive_design_score(
    results: Mapping[str, AnalyzerResult],
    config: ScoringConfig | None = None,
    *,
    engine_config: EngineConfig | None = None,
) -> ScoreReport:
    """Additive score: baseline 70 plus capped bonuses, minus penalties; responsive at 60 and above."""
    cfg = config or ScoringConfig()
    scoped = _subset(results, RESPONSIVE_DESIGN_CATEGORIES)
    widths = scoped.get(CATEGORY_RESPONSIVE_WIDTH)
    layouts = scoped.get(CATEGORY_LAYOUT)

    prevalence = float(widths.stats.get("responsive_unit_prevalence", 0)) if widths else 0.0
    patterns = int(layouts.stats.get("pattern_count", 0)) if layouts else 0
    bonuses = {
        "responsive_units": unit_bonus(prevalence, cfg),
        "layout_patterns": pattern_bonus(patterns, cfg),
    }
    deductions = {
        CATEGORY_RESPONSIVE_WIDTH: _by_severity(
            widths,
            cfg.width_critical_penalty,
            cfg.width_high_penalty,
            cfg.width_other_penalty,
        ),
        CATEGORY_LAYOUT: cfg.layout_penalty * _count(scoped, CATEGORY_LAYOUT),
        CATEGORY_OVERFLOW: cfg.overflow_penalty * _count(scoped, CATEGORY_OVERFLOW),
    }
    score = cfg.responsive_baseline + sum(bonuses.values()) - sum(deductions.values())
    adjustments: dict[str, Any] = {
        "baseline": cfg.responsive_baseline,
        "bonuses": bonuses,
        "deductions": deductions,
        "responsive_unit_prevalence": round(prevalence, 1),
        "layout_pattern_count": patterns,
    }
    return ScoreReport(
        name=RESPONSIVE_DESIGN,
        findings={c: r.findings for c, r in scoped.items()},
        subscores={c: clamp_score(100 - d) for c, d in deductions.items()},
        overall_score=clamp_score(score),
        pass_threshold=cfg.responsive_pass_threshold,
        recommendations=build_recommendations(scoped, engine_config),
        adjustments=adjustments,
    )
