# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

from .config import ReadabilityConfig
from .contrast import NON_RENDERED_TAGS
from .css import parse_px
from .types import CATEGORY_READABILITY, AnalyzerResult, Finding, Snapshot


class ReadabilityAnalyzer:
    category = CATEGORY_READABILITY

    def __init__(self, config: ReadabilityConfig | None = None) -> None:
        self.config = config or ReadabilityConfig()

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        cfg = self.config
        findings: list[Finding] = []
        evaluated = skipped = 0
        for element in snapshot.elements:
            if not element.has_text or not element.is_visible or element.tag_name in NON_RENDERED_TAGS:
                continue
            font_size = parse_px(element.computed_style.font_size)
            if font_size is None or font_size <= 0:
                skipped += 1
                continue
            evaluated += 1
            if font_size >= cfg.min_font_size:
                continue
            findings.append(
                Finding(
                    category=self.category,
                    severity="high" if font_size < cfg.high_font_size else "moderate",
                    selectors=(element.selector,),
                    metrics={"font_size_px": round(font_size, 2), "min_font_size": cfg.min_font_size},
                    message=f"Text in {element.label} is {font_size:g}px, below {cfg.min_font_size:g}px.",
                    recommendation=(
                        f"Increase font-size to at least {cfg.min_font_size:g}px for mobile readability: "
                        f"font-size: {cfg.min_font_size:g}px; /* was {round(font_size)}px */"
                    ),
                )
            )
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=evaluated,
            skipped=skipped,
            stats={"text_elements": evaluated, "undersized": len(findings)},
        )
