# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import re
from dataclasses import dataclass

from .types import CATEGORY_VIEWPORT, AnalyzerResult, Finding, Snapshot

RECOMMENDED_META = '<meta name="viewport" content="width=device-width, initial-scale=1">'

_RE_INITIAL_SCALE = re.compile(r"initial-scale\s*=\s*1(?:\.0*)?(?![\d.])")
_RE_MAX_SCALE_ONE = re.compile(r"maximum-scale\s*=\s*1(?:\.0*)?(?![\d.])")


@dataclass(frozen=True)
class ViewportMetaCheck:
    present: bool
    content: str
    has_width_device: bool
    has_initial_scale: bool
    allows_zoom: bool

    @property
    def is_valid(self) -> bool:
        return self.present and self.has_width_device and self.has_initial_scale

    @property
    def issues(self) -> list[str]:
        if not self.present:
            return ["Missing viewport meta tag"]
        out: list[str] = []
        if not self.has_width_device:
            out.append('Missing "width=device-width"')
        if not self.has_initial_scale:
            out.append('Missing "initial-scale=1"')
        if not self.allows_zoom:
            out.append("Should allow user scaling (remove user-scalable=no / maximum-scale=1)")
        return out


def check_viewport_meta(content: str | None) -> ViewportMetaCheck:
    if content is None:
        return ViewportMetaCheck(False, "", False, False, True)
    text = re.sub(r"\s+", "", str(content).lower())
    return ViewportMetaCheck(
        present=True,
        content=str(content),
        has_width_device="width=device-width" in text,
        has_initial_scale=bool(_RE_INITIAL_SCALE.search(text)),
        allows_zoom="user-scalable=no" not in text
        and "user-scalable=0" not in text
        and not _RE_MAX_SCALE_ONE.search(text),
    )


class ViewportMetaAnalyzer:
    category = CATEGORY_VIEWPORT

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        viewport = snapshot.viewport
        if not viewport.meta_checked:
            return AnalyzerResult(category=self.category, stats={"checked": False})
        check = check_viewport_meta(viewport.meta_content)
        findings: list[Finding] = []
        metrics = {
            "present": check.present,
            "content": check.content,
            "has_width_device": check.has_width_device,
            "has_initial_scale": check.has_initial_scale,
            "allows_zoom": check.allows_zoom,
        }
        if not check.is_valid:
            issue = "Missing viewport meta tag" if not check.present else "Invalid viewport meta tag"
            findings.append(
                Finding(
                    category=self.category,
                    severity="critical",
                    selectors=('meta[name="viewport"]',),
                    metrics=metrics,
                    message=f"{issue}: {', '.join(check.issues)}.",
                    recommendation=f"Add {RECOMMENDED_META} to <head>.",
                )
            )
        elif not check.allows_zoom:
            findings.append(
                Finding(
                    category=self.category,
                    severity="minor",
                    selectors=('meta[name="viewport"]',),
                    metrics=metrics,
                    message="Viewport meta tag disables user zoom.",
                    recommendation="Remove user-scalable=no and maximum-scale=1 so users can zoom.",
                )
            )
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=1,
            skipped=0,
            stats={"checked": True, "valid": check.is_valid, "issues": check.issues},
        )
