# SPDX-License-Identifier: AGPL-3.0-only
"""Page diagnostic scoring engine.

Analyzes a captured snapshot of a rendered page (element geometry, computed and
declared styles, viewport) for mobile usability and responsive design problems,
and folds the findings into a mobile-UX score, a responsive-design score and a
ranked list of recommendations.
"""
__version__ = "0.1.0"

from .config import (
    CollisionConfig,
    ContrastConfig,
    EngineConfig,
    ReadabilityConfig,
    ResponsiveConfig,
    ScoringConfig,
    TouchTargetConfig,
)
from .engine import DiagnosticEngine, DiagnosticGateError, DiagnosticWarning, inspect_snapshot
from .report import report_to_json, report_to_markdown
from .snapshot import load_snapshot, load_snapshot_file
from .types import (
    AnalyzerResult,
    ComputedStyle,
    Declaration,
    DiagnosticReport,
    ElementFact,
    Finding,
    PreconditionViolation,
    Rect,
    Recommendation,
    ScoreReport,
    Snapshot,
    StylesheetRule,
    Viewport,
)

__all__ = [
    "AnalyzerResult",
    "CollisionConfig",
    "ComputedStyle",
    "ContrastConfig",
    "Declaration",
    "DiagnosticEngine",
    "DiagnosticGateError",
    "DiagnosticReport",
    "DiagnosticWarning",
    "ElementFact",
    "EngineConfig",
    "Finding",
    "PreconditionViolation",
    "ReadabilityConfig",
    "Rect",
    "Recommendation",
    "ResponsiveConfig",
    "ScoreReport",
    "ScoringConfig",
    "Snapshot",
    "StylesheetRule",
    "TouchTargetConfig",
    "Viewport",
    "inspect_snapshot",
    "load_snapshot",
    "load_snapshot_file",
    "report_to_json",
    "report_to_markdown",
]
