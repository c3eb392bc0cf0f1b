# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import math

from .config import CollisionConfig
from .touch_targets import is_interactive
from .types import CATEGORY_COLLISION, AnalyzerResult, Finding, Rect, Snapshot


def edge_gaps(a: Rect, b: Rect) -> tuple[float, float]:
    horizontal = max(0.0, max(a.left, b.left) - min(a.right, b.right))
    vertical = max(0.0, max(a.top, b.top) - min(a.bottom, b.bottom))
    return horizontal, vertical


def edge_distance(a: Rect, b: Rect) -> float:
    horizontal, vertical = edge_gaps(a, b)
    return math.sqrt(horizontal ** 2 + vertical ** 2)


class CollisionDetector:
    """Pairwise spacing check over every unordered pair of visible interactive elements."""

    category = CATEGORY_COLLISION

    def __init__(self, config: CollisionConfig | None = None) -> None:
        self.config = config or CollisionConfig()

    def analyze(self, snapshot: Snapshot) -> AnalyzerResult:
        cfg = self.config
        targets = [e for e in snapshot.elements if e.is_visible and is_interactive(e)]
        findings: list[Finding] = []
        pairs = 0
        for i, first in enumerate(targets):
            for second in targets[i + 1 :]:
                pairs += 1
                distance = edge_distance(first.rect, second.rect)
                if distance >= cfg.min_spacing:
                    continue
                horizontal, vertical = edge_gaps(first.rect, second.rect)
                findings.append(
                    Finding(
                        category=self.category,
                        severity="high" if distance < cfg.high_distance else "moderate",
                        selectors=(first.selector, second.selector),
                        metrics={
                            "distance_px": round(distance, 2),
                            "gap_x_px": round(horizontal, 2),
                            "gap_y_px": round(vertical, 2),
                            "min_spacing": cfg.min_spacing,
                        },
                        message=(
                            f"{first.label} and {second.label} are {distance:.0f}px apart "
                            f"(minimum {cfg.min_spacing:g}px)."
                        ),
                        recommendation=(
                            f"Add at least {cfg.min_spacing:g}px spacing between interactive "
                            "elements to prevent mis-taps."
                        ),
                    )
                )
        return AnalyzerResult(
            category=self.category,
            findings=findings,
            evaluated=len(targets),
            skipped=0,
            stats={"targets": len(targets), "pairs": pairs, "collisions": len(findings)},
        )
