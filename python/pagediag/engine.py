# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .collisions import CollisionDetector
from .config import EngineConfig
from .contrast import ContrastAnalyzer
from .layout import LayoutAnalyzer
from .readability import ReadabilityAnalyzer
from .responsive import OverflowDetector, ResponsiveWidthClassifier
from .scoring import build_recommendations, mobile_ux_score, responsive_design_score
from .touch_targets import TouchTargetAnalyzer
from .types import AnalyzerResult, DiagnosticReport, Finding, Snapshot
from .viewport import ViewportMetaAnalyzer


class DiagnosticWarning(UserWarning):
    """Soft data-quality problems found while analyzing a snapshot."""


class DiagnosticGateError(ValueError):
    def __init__(self, message: str, report: DiagnosticReport) -> None:
        super().__init__(message)
        self.report = report


def _count_by_key(findings: tuple[Finding, ...], key: str) -> dict[str, int]:
    out: dict[str, int] = {}
    for f in findings:
        val = str(getattr(f, key) or "")
        if not val:
            continue
        out[val] = out.get(val, 0) + 1
    return out


class DiagnosticEngine:
    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        parallel: bool = False,
        max_workers: int | None = None,
        mode: str | None = None,
    ) -> None:
        normalized_mode = None if mode is None else str(mode).strip().lower()
        if normalized_mode not in {None, "", "warn", "raise"}:
            raise ValueError(f"Unsupported diagnostic mode {mode!r}. Expected None, 'warn', or 'raise'.")
        self.config = config or EngineConfig()
        self.parallel = bool(parallel)
        self.max_workers = max_workers
        self.mode = normalized_mode or None
        cfg = self.config
        # Result order follows this tuple regardless of how the analyzers are scheduled.
        self.analyzers = (
            ViewportMetaAnalyzer(),
            ContrastAnalyzer(cfg.contrast),
            TouchTargetAnalyzer(cfg.touch_target),
            CollisionDetector(cfg.collision),
            ReadabilityAnalyzer(cfg.readability),
            ResponsiveWidthClassifier(cfg.responsive),
            OverflowDetector(cfg.responsive),
            LayoutAnalyzer(cfg.responsive),
        )

    def run_analyzers(self, snapshot: Snapshot) -> dict[str, AnalyzerResult]:
        if self.parallel:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(a.analyze, snapshot) for a in self.analyzers]
                results = [f.result() for f in futures]
        else:
            results = [a.analyze(snapshot) for a in self.analyzers]
        return {r.category: r for r in results}

    def inspect(self, snapshot: Snapshot) -> DiagnosticReport:
        results = self.run_analyzers(snapshot)
        scoring = self.config.scoring
        mobile = mobile_ux_score(results, scoring, engine_config=self.config)
        responsive = responsive_design_score(results, scoring, engine_config=self.config)

        findings: list[Finding] = []
        for result in results.values():
            findings.extend(result.findings)
        all_findings = tuple(findings)
        observability: dict[str, Any] = {
            "element_count": len(snapshot.elements),
            "finding_count": len(all_findings),
            "category_counts": _count_by_key(all_findings, "category"),
            "severity_counts": _count_by_key(all_findings, "severity"),
            "evaluated_counts": {k: v.evaluated for k, v in results.items()},
            "skipped_total": sum(v.skipped for v in results.values()),
        }
        report = DiagnosticReport(
            mobile_ux=mobile,
            responsive_design=responsive,
            results=results,
            recommendations=build_recommendations(results, self.config),
            observability=observability,
        )

        if self.mode == "warn":
            for category, result in results.items():
                if result.skipped:
                    warnings.warn(
                        f"{category}: skipped {result.skipped} element(s) with unusable style data",
                        DiagnosticWarning,
                        stacklevel=2,
                    )
        if self.mode == "raise" and not report.ok:
            failing = [r.name for r in (mobile, responsive) if not r.passed]
            raise DiagnosticGateError(f"Score below pass threshold: {', '.join(failing)}", report)
        return report


def inspect_snapshot(snapshot: Snapshot, config: EngineConfig | None = None, **kwargs: Any) -> DiagnosticReport:
    return DiagnosticEngine(config, **kwargs).inspect(snapshot)
