# SPDX-License-Identifier: AGPL-3.0-only
"""Conversion of extractor JSON payloads into frozen snapshot records.

Payload keys follow the extractor's camelCase naming. Structural problems (a
missing rect, a non-numeric width) are caller bugs and raise
PreconditionViolation; suspicious style text is dropped with a warning.
"""
from __future__ import annotations

import json
import warnings
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .engine import DiagnosticWarning
from .types import (
    ComputedStyle,
    Declaration,
    ElementFact,
    PreconditionViolation,
    Rect,
    Snapshot,
    StylesheetRule,
    Viewport,
)

_COMPUTED_KEYS = {
    "color": "color",
    "backgroundColor": "background_color",
    "fontSize": "font_size",
    "fontWeight": "font_weight",
    "display": "display",
    "overflowX": "overflow_x",
    "position": "position",
    "flexWrap": "flex_wrap",
    "gridTemplateColumns": "grid_template_columns",
}


def _warn(msg: str) -> None:
    warnings.warn(msg, DiagnosticWarning, stacklevel=3)


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PreconditionViolation(f"{where} must be a number, got {value!r}")
    return float(value)


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_style_text(fragment: str) -> tuple[Declaration, ...]:
    out: list[Declaration] = []
    for part in str(fragment).split(";"):
        chunk = part.strip()
        if not chunk:
            continue
        name, sep, value = chunk.partition(":")
        if not sep or not name.strip():
            _warn(f"Ignoring malformed style fragment: {chunk!r}")
            continue
        if not value.strip():
            continue
        out.append(Declaration(property=name, value=value, source_selector="inline"))
    return tuple(out)


def _declarations(raw: Any, where: str, default_source: str = "") -> tuple[Declaration, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(
            Declaration(d.property, d.value, default_source or d.source_selector, d.important)
            for d in parse_style_text(raw)
        )
    if isinstance(raw, Mapping):
        return tuple(
            Declaration(property=k, value=str(v), source_selector=default_source)
            for k, v in raw.items()
            if v is not None and str(v).strip()
        )
    if isinstance(raw, (list, tuple)):
        out: list[Declaration] = []
        for idx, item in enumerate(raw):
            if not isinstance(item, Mapping) or "property" not in item or "value" not in item:
                raise PreconditionViolation(f"{where}[{idx}] must be an object with property and value")
            out.append(
                Declaration(
                    property=item["property"],
                    value=str(item["value"]),
                    source_selector=str(item.get("sourceSelector") or default_source),
                    important=bool(item.get("important", False)),
                )
            )
        return tuple(out)
    raise PreconditionViolation(f"{where} has unsupported type {type(raw).__name__}")


def _rect(raw: Any, where: str) -> Rect:
    if not isinstance(raw, Mapping):
        raise PreconditionViolation(f"{where}.rect is required")
    return Rect(
        x=_number(raw.get("x", 0), f"{where}.rect.x"),
        y=_number(raw.get("y", 0), f"{where}.rect.y"),
        width=_number(raw.get("width"), f"{where}.rect.width"),
        height=_number(raw.get("height"), f"{where}.rect.height"),
    )


def _computed(raw: Any) -> ComputedStyle:
    if not isinstance(raw, Mapping):
        return ComputedStyle()
    return ComputedStyle(**{attr: _opt_str(raw.get(key)) for key, attr in _COMPUTED_KEYS.items()})


def element_from_dict(raw: Mapping[str, Any], index: int = 0) -> ElementFact:
    where = f"elements[{index}]"
    if not isinstance(raw, Mapping):
        raise PreconditionViolation(f"{where} must be an object")
    tag = _opt_str(raw.get("tagName"))
    if tag is None:
        raise PreconditionViolation(f"{where}.tagName is required")
    tab_index = raw.get("tabIndex")
    if tab_index is not None:
        tab_index = int(_number(tab_index, f"{where}.tabIndex"))
    classes = raw.get("classList") or ()
    if isinstance(classes, str):
        classes = classes.split()
    return ElementFact(
        selector=_opt_str(raw.get("selector")) or tag.lower(),
        tag_name=tag,
        rect=_rect(raw.get("rect"), where),
        computed_style=_computed(raw.get("computedStyle")),
        declared_style=_declarations(raw.get("declaredStyle"), f"{where}.declaredStyle"),
        has_text=bool(raw.get("hasText", False)),
        is_visible=bool(raw.get("isVisible", True)),
        ancestor_backgrounds=tuple(str(c) for c in raw.get("ancestorBackgrounds") or () if c is not None),
        is_in_scrollable_ancestor=bool(raw.get("isInScrollableAncestor", False)),
        element_id=_opt_str(raw.get("elementId")),
        class_list=tuple(str(c) for c in classes),
        inline_style=_declarations(raw.get("inlineStyle"), f"{where}.inlineStyle", "inline"),
        role=_opt_str(raw.get("role")),
        tab_index=tab_index,
        input_type=_opt_str(raw.get("inputType")),
        has_click_handler=bool(raw.get("hasClickHandler", False)),
        child_count=int(_number(raw.get("childCount", 0), f"{where}.childCount")),
        text=str(raw.get("text") or "")[:50],
    )


def viewport_from_dict(raw: Mapping[str, Any] | None) -> Viewport:
    if raw is None:
        return Viewport()
    if not isinstance(raw, Mapping):
        raise PreconditionViolation("viewport must be an object")
    checked = raw.get("metaChecked")
    if checked is None:
        checked = "metaContent" in raw
    return Viewport(
        width=_number(raw.get("width", 1280), "viewport.width"),
        height=_number(raw.get("height", 800), "viewport.height"),
        meta_checked=bool(checked),
        meta_content=None if raw.get("metaContent") is None else str(raw.get("metaContent")),
    )


def stylesheets_from_list(raw: Any) -> tuple[StylesheetRule, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise PreconditionViolation("stylesheets must be a list")
    rules: list[StylesheetRule] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, Mapping) or not _opt_str(item.get("selectorText")):
            raise PreconditionViolation(f"stylesheets[{idx}].selectorText is required")
        selector = str(item["selectorText"]).strip()
        rules.append(
            StylesheetRule(
                selector_text=selector,
                declarations=_declarations(item.get("declarations"), f"stylesheets[{idx}].declarations", selector),
            )
        )
    return tuple(rules)


def load_snapshot(payload: Mapping[str, Any] | list[Any]) -> Snapshot:
    """Build a Snapshot from a payload dict, or from a bare element list."""
    if isinstance(payload, (list, tuple)):
        payload = {"elements": payload}
    if not isinstance(payload, Mapping):
        raise PreconditionViolation("snapshot payload must be an object or a list of elements")
    elements = payload.get("elements") or []
    if not isinstance(elements, (list, tuple)):
        raise PreconditionViolation("elements must be a list")
    return Snapshot(
        elements=tuple(element_from_dict(e, i) for i, e in enumerate(elements)),
        viewport=viewport_from_dict(payload.get("viewport")),
        stylesheets=stylesheets_from_list(payload.get("stylesheets")),
    )


def load_snapshot_file(path: str | Path) -> Snapshot:
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PreconditionViolation(f"{p}: invalid JSON: {exc}")
    return load_snapshot(payload)
