# SPDX-License-Identifier: AGPL-3.0-only
"""Command line entry point: ``pagediag inspect`` and ``pagediag config``."""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from . import __version__
from .config import EngineConfig
from .engine import DiagnosticEngine
from .report import report_to_json, report_to_markdown
from .snapshot import load_snapshot_file

EXIT_OK = 0
EXIT_THRESHOLD = 1
EXIT_INPUT_ERROR = 2


def _load_config(args) -> EngineConfig:
    return EngineConfig.load(Path(args.config) if args.config else None)


def _write_output(text: str, out: str | None) -> None:
    if not out or out == "-":
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    Path(out).write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    sys.stderr.write(f"[ok] wrote {out}\n")


def cmd_inspect(args):
    """CLI handler for scoring one captured snapshot."""
    config = _load_config(args)
    snapshot = load_snapshot_file(args.snapshot)
    if args.viewport_width is not None:
        snapshot = replace(snapshot, viewport=replace(snapshot.viewport, width=float(args.viewport_width)))

    report = DiagnosticEngine(config, parallel=args.parallel).inspect(snapshot)
    if args.format == "markdown":
        _write_output(report_to_markdown(report), args.out)
    else:
        _write_output(report_to_json(report), args.out)

    for score in (report.mobile_ux, report.responsive_design):
        status = "pass" if score.passed else "fail"
        sys.stderr.write(f"[{status}] {score.name}: {score.overall_score} (threshold {score.pass_threshold})\n")
    skipped = report.observability.get("skipped_total", 0)
    if skipped:
        sys.stderr.write(f"[warn] skipped {skipped} element(s) with unusable style data\n")

    if args.fail_on_threshold and not report.ok:
        raise SystemExit(EXIT_THRESHOLD)


def cmd_config(args):
    """CLI handler that prints the effective configuration."""
    config = _load_config(args)
    sys.stdout.write(json.dumps(config.to_dict(), ensure_ascii=True, indent=2) + "\n")


def _build_parser():
    """Construct and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(prog="pagediag")
    parser.add_argument("--version", action="version", version="pagediag " + __version__)
    sub = parser.add_subparsers(dest="command", required=True)

    p_inspect = sub.add_parser("inspect", help="Score a captured page snapshot (JSON)")
    p_inspect.add_argument("snapshot", help="Path to the snapshot JSON file")
    p_inspect.add_argument("--config", help="Path to pagediag.toml (default: ./pagediag.toml if present)")
    p_inspect.add_argument("--format", choices=["json", "markdown"], default="json")
    p_inspect.add_argument("--out", help="Write the report to this path ('-' for stdout)")
    p_inspect.add_argument("--viewport-width", type=float, help="Override the snapshot viewport width in px")
    p_inspect.add_argument("--parallel", action="store_true", help="Run analyzers on a thread pool")
    p_inspect.add_argument(
        "--fail-on-threshold",
        action="store_true",
        help="Exit with status 1 when either score is below its pass threshold",
    )
    p_inspect.set_defaults(func=cmd_inspect)

    p_config = sub.add_parser("config", help="Print the effective configuration as JSON")
    p_config.add_argument("--config", help="Path to pagediag.toml (default: ./pagediag.toml if present)")
    p_config.set_defaults(func=cmd_config)
    return parser


def main(argv=None):
    """Execute CLI command dispatch and standardized error handling."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (OSError, ValueError) as exc:
        sys.stderr.write(f"[error] {exc}\n")
        return EXIT_INPUT_ERROR
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
