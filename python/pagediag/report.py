# SPDX-License-Identifier: AGPL-3.0-only
"""Serializers for DiagnosticReport: machine-readable JSON and a Markdown summary."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .types import CATEGORIES, DiagnosticReport, Finding


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "items"):
        return dict(obj.items())
    return str(obj)


def report_to_json(report: DiagnosticReport, indent: int | None = 2) -> str:
    return json.dumps(report.to_dict(), ensure_ascii=True, indent=indent, default=_json_default)


def write_report_json(path: str | Path, report: DiagnosticReport) -> None:
    Path(path).write_text(report_to_json(report) + "\n", encoding="utf-8")


def _md_cell(value: Any) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def _finding_line(f: Finding) -> str:
    targets = ", ".join(f"`{s}`" for s in f.selectors)
    return f"- **{f.severity}** {targets}: {f.message}"


def report_to_markdown(report: DiagnosticReport) -> str:
    lines: list[str] = ["# Page diagnostics", ""]
    lines.append("| Score | Value | Threshold | Status |")
    lines.append("| --- | ---: | ---: | --- |")
    for score in (report.mobile_ux, report.responsive_design):
        status = "pass" if score.passed else "fail"
        lines.append(f"| {score.name} | {score.overall_score} | {score.pass_threshold} | {status} |")
    lines.append("")

    lines.append("## Recommendations")
    lines.append("")
    if report.recommendations:
        for idx, rec in enumerate(report.recommendations, start=1):
            lines.append(f"{idx}. **{rec.severity}** ({rec.category}) {rec.issue}. {rec.fix}.")
    else:
        lines.append("No issues found.")
    lines.append("")

    lines.append("## Findings")
    lines.append("")
    any_findings = False
    for category in CATEGORIES:
        result = report.results.get(category)
        if result is None or not result.findings:
            continue
        any_findings = True
        lines.append(f"### {category} ({len(result.findings)})")
        lines.append("")
        for finding in result.findings:
            lines.append(_finding_line(finding))
            if finding.recommendation:
                lines.append(f"  - Fix: {_md_cell(finding.recommendation)}")
        lines.append("")
    if not any_findings:
        lines.append("None.")
        lines.append("")

    skipped = {k: v for k, v in report.skipped.items() if v}
    if skipped:
        lines.append("## Skipped")
        lines.append("")
        for category, count in skipped.items():
            lines.append(f"- {category}: {count} element(s) with unusable style data")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
