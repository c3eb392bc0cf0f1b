# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


CATEGORY_CONTRAST = "contrast"
CATEGORY_TOUCH_TARGET = "touch-target"
CATEGORY_COLLISION = "collision"
CATEGORY_READABILITY = "readability"
CATEGORY_RESPONSIVE_WIDTH = "responsive-width"
CATEGORY_VIEWPORT = "viewport"
CATEGORY_LAYOUT = "layout"
CATEGORY_OVERFLOW = "overflow"

# Fixed report order; also the tie-breaker when recommendations share a severity.
CATEGORIES = (
    CATEGORY_VIEWPORT,
    CATEGORY_CONTRAST,
    CATEGORY_TOUCH_TARGET,
    CATEGORY_COLLISION,
    CATEGORY_READABILITY,
    CATEGORY_RESPONSIVE_WIDTH,
    CATEGORY_OVERFLOW,
    CATEGORY_LAYOUT,
)

SEVERITIES = ("critical", "high", "moderate", "minor")

_RE_IMPORTANT = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)


class PreconditionViolation(ValueError):
    """Raised for malformed input that indicates a caller bug, never for page data quality."""


def severity_rank(v: str) -> int:
    return {
        "critical": 4,
        "high": 3,
        "moderate": 2,
        "minor": 1,
    }.get(str(v or "").strip(), 0)


def category_rank(v: str) -> int:
    try:
        return CATEGORIES.index(v)
    except ValueError:
        return len(CATEGORIES)


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise PreconditionViolation(
                f"Rect width/height must be non-negative (got {self.width!r}x{self.height!r})"
            )

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class ComputedStyle:
    color: str | None = None
    background_color: str | None = None
    font_size: str | None = None
    font_weight: str | None = None
    display: str | None = None
    overflow_x: str | None = None
    position: str | None = None
    flex_wrap: str | None = None
    grid_template_columns: str | None = None


@dataclass(frozen=True)
class Declaration:
    property: str
    value: str
    source_selector: str = ""
    important: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "property", str(self.property).strip().lower())
        value = str(self.value).strip()
        m = _RE_IMPORTANT.search(value)
        if m:
            value = value[: m.start()].rstrip()
            object.__setattr__(self, "important", True)
        object.__setattr__(self, "value", value)


@dataclass(frozen=True)
class StylesheetRule:
    selector_text: str
    declarations: tuple[Declaration, ...] = ()

    def first_value(self, prop: str) -> str | None:
        for decl in self.declarations:
            if decl.property == prop:
                return decl.value
        return None


@dataclass(frozen=True)
class ElementFact:
    selector: str
    tag_name: str
    rect: Rect
    computed_style: ComputedStyle = field(default_factory=ComputedStyle)
    declared_style: tuple[Declaration, ...] = ()
    has_text: bool = False
    is_visible: bool = True
    ancestor_backgrounds: tuple[str, ...] = ()
    is_in_scrollable_ancestor: bool = False
    element_id: str | None = None
    class_list: tuple[str, ...] = ()
    inline_style: tuple[Declaration, ...] = ()
    role: str | None = None
    tab_index: int | None = None
    input_type: str | None = None
    has_click_handler: bool = False
    child_count: int = 0
    text: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag_name", str(self.tag_name).strip().lower())

    @property
    def label(self) -> str:
        return self.text or f"<{self.tag_name}>"


@dataclass(frozen=True)
class Viewport:
    width: float = 1280
    height: float = 800
    meta_checked: bool = False
    meta_content: str | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PreconditionViolation(
                f"Viewport dimensions must be positive (got {self.width!r}x{self.height!r})"
            )


@dataclass(frozen=True)
class Snapshot:
    elements: tuple[ElementFact, ...] = ()
    viewport: Viewport = field(default_factory=Viewport)
    stylesheets: tuple[StylesheetRule, ...] = ()


@dataclass(frozen=True)
class Finding:
    category: str
    severity: str
    selectors: tuple[str, ...]
    metrics: Mapping[str, Any]
    message: str
    recommendation: str

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise PreconditionViolation(f"Unknown severity {self.severity!r}")
        object.__setattr__(self, "selectors", tuple(self.selectors))
        object.__setattr__(self, "metrics", _freeze(self.metrics))

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity,
            "selectors": list(self.selectors),
            "metrics": dict(self.metrics),
            "message": self.message,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class AnalyzerResult:
    category: str
    findings: tuple[Finding, ...] = ()
    evaluated: int = 0
    skipped: int = 0
    stats: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "findings", tuple(self.findings))
        object.__setattr__(self, "stats", _freeze(self.stats))

    def count(self, severity: str | None = None) -> int:
        if severity is None:
            return len(self.findings)
        return sum(1 for f in self.findings if f.severity == severity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "evaluated": self.evaluated,
            "skipped": self.skipped,
            "stats": dict(self.stats),
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class Recommendation:
    category: str
    severity: str
    issue: str
    fix: str
    affected_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity,
            "issue": self.issue,
            "fix": self.fix,
            "affected_count": self.affected_count,
        }


@dataclass(frozen=True)
class ScoreReport:
    name: str
    findings: Mapping[str, tuple[Finding, ...]]
    subscores: Mapping[str, int]
    overall_score: int
    pass_threshold: int
    recommendations: tuple[Recommendation, ...] = ()
    adjustments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "findings", _freeze({k: tuple(v) for k, v in self.findings.items()})
        )
        object.__setattr__(self, "subscores", _freeze(self.subscores))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        object.__setattr__(self, "adjustments", _freeze(self.adjustments))

    @property
    def passed(self) -> bool:
        return self.overall_score >= self.pass_threshold

    @property
    def finding_count(self) -> int:
        return sum(len(v) for v in self.findings.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "overall_score": self.overall_score,
            "pass_threshold": self.pass_threshold,
            "passed": self.passed,
            "subscores": dict(self.subscores),
            "adjustments": dict(self.adjustments),
            "findings": {k: [f.to_dict() for f in v] for k, v in self.findings.items()},
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class DiagnosticReport:
    mobile_ux: ScoreReport
    responsive_design: ScoreReport
    results: Mapping[str, AnalyzerResult]
    recommendations: tuple[Recommendation, ...] = ()
    observability: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", _freeze(self.results))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        object.__setattr__(self, "observability", _freeze(self.observability))

    @property
    def findings(self) -> tuple[Finding, ...]:
        out: list[Finding] = []
        for category in CATEGORIES:
            result = self.results.get(category)
            if result is not None:
                out.extend(result.findings)
        return tuple(out)

    @property
    def skipped(self) -> dict[str, int]:
        return {k: v.skipped for k, v in self.results.items()}

    @property
    def ok(self) -> bool:
        return self.mobile_ux.passed and self.responsive_design.passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": "pagediag.report.v1",
            "ok": self.ok,
            "scores": {
                "mobile_ux": self.mobile_ux.to_dict(),
                "responsive_design": self.responsive_design.to_dict(),
            },
            "analyzers": {k: v.to_dict() for k, v in self.results.items()},
            "recommendations": [r.to_dict() for r in self.recommendations],
            "skipped": self.skipped,
            "observability": dict(self.observability),
        }
