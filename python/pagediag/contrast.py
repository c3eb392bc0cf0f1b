# SPDX-License-Identifier: AGPL-3.0-only
"""WCAG 2.1 text contrast analysis (SC 1.4.3 minimum, SC 1.4.6 enhanced)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .colors import ColorParseError, RGBA, contrast_ratio, parse_color, resolve_background
from .config import ContrastConfig
from .css import parse_font_weight, parse_px
from .types import CATEGORY_CONTRAST, AnalyzerResult, ElementFact, Finding, Snapshot

NON_RENDERED_TAGS = {"script", "style", "noscript", "meta", "link", "template", "head", "title"}

SUGGESTION_STEP = 50
SUGGESTION_TARGET_RATIO = 4.5


@dataclass(frozen=True)
class ContrastMeasurement:
    ratio: float
    required: float
    is_large_text: bool
    passes_aa: bool
    passes_aaa: bool
    foreground: RGBA
    background: RGBA


@dataclass(frozen=True)
class ColorSuggestion:
    action: str
    color: str
    ratio: float


def is_large_text(font_size_px: float, font_weight: int, config: ContrastConfig | None = None) -> bool:
    cfg = config or ContrastConfig()
    return font_size_px >= cfg.large_text_px or (
        font_size_px >= cfg.large_bold_text_px and font_weight >= cfg.bold_weight
    )


def severity_for_ratio(ratio: float, required: float, config: ContrastConfig | None = None) -> str | None:
    cfg = config or ContrastConfig()
    if ratio >= required:
        return None
    if ratio < cfg.critical_ratio:
        return "critical"
    if ratio < cfg.high_ratio:
        return "high"
    return "moderate"


def suggest_colors(foreground: RGBA | str, background: RGBA | str) -> list[ColorSuggestion]:
    """Darker/lighter foreground candidates that reach 4.5:1 against ``background``."""
    fg = parse_color(foreground) if isinstance(foreground, str) else foreground
    bg = parse_color(background) if isinstance(background, str) else background
    out: list[ColorSuggestion] = []
    for action, delta in (("Darken text", -SUGGESTION_STEP), ("Lighten text", SUGGESTION_STEP)):
        candidate = fg.shifted(delta)
        ratio = contrast_ratio(candidate, bg)
        if ratio >= SUGGESTION_TARGET_RATIO:
            out.append(ColorSuggestion(action=action, color=candidate.to_css(), ratio=round(ratio, 2)))
    return out


class ContrastAnalyzer:
    category = CATEGORY_CONTRAST

    def __init__(self, config: ContrastConfig | None = None) -> None:
        self.config = config or ContrastConfig()

    def measure(
        self,
        foreground: str,
        backgrounds: list[str | None] | tuple[str | None, ...],
        font_size_px: float,
        font_weight: int = 400,
    ) -> ContrastMeasurement | None:
        """Contrast of one text run; None when the foreground is fully transparent.

        ``backgrounds`` is ordered innermost first. Raises ColorParseError for
        colors that cannot be parsed.
        """
        cfg = self.config
        fg = parse_color(foreground)
        if fg.is_transparent:
            return None
        bg = resolve_background(backgrounds)
        if not fg.is_opaque:
            fg = fg.over(bg)
        ratio = contrast_ratio(fg, bg)
        large = is_large_text(font_size_px, font_weight, cfg)
        required = cfg.large_text_min_aa if large else cfg.min_ratio_aa
        required_aaa = cfg.large_text_min_aaa if large else cfg.min_ratio_aaa
        return ContrastMeasurement(
            ratio=ratio,
            required=required,
            is_large_text=large,
            passes_aa=ratio >= required,
            passes_aaa=ratio >= required_aaa,
            foreground=fg,
            background=bg,
        )

    def _finding(self, element: ElementFact, m: ContrastMeasurement, severity: str, font_size: float) -> Finding:
        suggestions = suggest_colors(m.foreground, m.background)
        if suggestions:
            hint = f"{suggestions[0].action} to {suggestions[0].color} ({suggestions[0].ratio}:1)"
        else:
            hint = "Adjust the text or background color"
        metrics: dict[str, Any] = {
            "ratio": round(m.ratio, 2),
            "required": m.required,
            "font_size_px": font_size,
            "is_large_text": m.is_large_text,
            "passes_aa": m.passes_aa,
            "passes_aaa": m.passes_aaa,
            "foreground": m.foreground.to_css(),
            "background": m.background.to_css(),
        }
        return Finding(
            category=self.category,
            severity=severity,
            selectors=(element.selector,),
            metrics=metrics,
            message=f"Text contrast {m.ratio:.2f}:1 is below the required {m.required:.1f}:1.",
            recommendation=f"{hint} to reach at least {m.required:.1f}:1.",
        )

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        findings: list[Finding] = []
        evaluated = skipped = 0
        stats = {"total": 0, "passed": 0, "failed_aa": 0, "failed_aaa": 0, "critical": 0}
        for element in snapshot.elements:
            if not element.has_text or not element.is_visible or element.tag_name in NON_RENDERED_TAGS:
                continue
            style = element.computed_style
            font_size = parse_px(style.font_size)
            if font_size is None:
                skipped += 1
                continue
            try:
                m = self.measure(
                    style.color,
                    (style.background_color,) + tuple(element.ancestor_backgrounds),
                    font_size,
                    parse_font_weight(style.font_weight),
                )
            except ColorParseError:
                skipped += 1
                continue
            if m is None:
                skipped += 1
                continue
            evaluated += 1
            stats["total"] += 1
            if m.passes_aa:
                stats["passed"] += 1
            else:
                stats["failed_aa"] += 1
            if not m.passes_aaa:
                stats["failed_aaa"] += 1
            severity = severity_for_ratio(m.ratio, m.required, self.config)
            if severity is None:
                continue
            if severity == "critical":
                stats["critical"] += 1
            findings.append(self._finding(element, m, severity, font_size))
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=evaluated,
            skipped=skipped,
            stats=stats,
        )
