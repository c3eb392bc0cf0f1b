# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import re

from .types import Declaration, ElementFact, StylesheetRule


_RE_LENGTH = re.compile(r"^(-?\d+(?:\.\d+)?|-?\.\d+)([a-z%]*)$")
_RE_COMPOUND = re.compile(r"^([a-z][a-z0-9-]*|\*)?((?:[.#][a-z_][a-z0-9_-]*)*)$", re.IGNORECASE)
_RE_PART = re.compile(r"([.#])([a-z_][a-z0-9_-]*)", re.IGNORECASE)

_FONT_WEIGHT_KEYWORDS = {"normal": 400, "bold": 700, "lighter": 300, "bolder": 700}

RESPONSIVE_UNITS = ("%", "rem", "em", "vw", "vh", "fr")
CSS_WIDE_KEYWORDS = {"auto", "unset", "initial", "inherit", "revert"}


class AmbiguousSelector(ValueError):
    pass


def split_length(value: str | None) -> tuple[float, str] | None:
    """Split ``"12.5px"`` into ``(12.5, "px")``; None for anything that is not a plain length."""
    if value is None:
        return None
    m = _RE_LENGTH.match(str(value).strip().lower())
    if not m:
        return None
    return float(m.group(1)), m.group(2)


def parse_px(value: str | None) -> float | None:
    parts = split_length(value)
    if parts is None:
        return None
    number, unit = parts
    if unit not in ("px", ""):
        return None
    return number


def parse_font_weight(value: str | None) -> int:
    text = str(value or "").strip().lower()
    if not text:
        return 400
    if text in _FONT_WEIGHT_KEYWORDS:
        return _FONT_WEIGHT_KEYWORDS[text]
    try:
        return int(float(text))
    except ValueError:
        return 400


def unit_of(value: str | None) -> str | None:
    """Classify a declared value by unit: px, %, rem, em, vw, vh, fr, auto or None."""
    text = str(value or "").strip().lower()
    if not text:
        return None
    if text == "auto":
        return "auto"
    parts = split_length(text)
    if parts is not None:
        unit = parts[1]
        if unit in ("px", "") or unit in RESPONSIVE_UNITS:
            return unit or "px"
        return None
    # calc()/min()/clamp() and friends: classify by the first unit that appears
    for unit in ("%", "vw", "vh", "rem", "em", "px"):
        if unit in text:
            return unit
    return None


def first_declared(declarations: tuple[Declaration, ...], prop: str) -> str | None:
    for decl in declarations:
        if decl.property == prop:
            return decl.value
    return None


def _compound_matches(compound: str, element: ElementFact) -> bool:
    m = _RE_COMPOUND.match(compound)
    if not m or not compound:
        raise AmbiguousSelector(compound)
    tag, rest = m.group(1), m.group(2)
    if tag and tag != "*" and tag.lower() != element.tag_name:
        return False
    for kind, name in _RE_PART.findall(rest):
        if kind == "#" and name != (element.element_id or ""):
            return False
        if kind == "." and name not in element.class_list:
            return False
    return True


def selector_matches(selector_text: str, element: ElementFact) -> bool:
    """Match simple selectors (type, #id, .class, compounds, comma lists).

    Combinators, attribute selectors and pseudo-classes cannot be decided from an
    element fact alone and raise AmbiguousSelector.
    """
    for part in str(selector_text).split(","):
        compound = part.strip()
        if _compound_matches(compound, element):
            return True
    return False


def resolve_declared(
    element: ElementFact,
    prop: str,
    stylesheets: tuple[StylesheetRule, ...] = (),
) -> str | None:
    """Author-intent value for ``prop``: inline style, then the first matching rule.

    This is first-declared-wins, not cascade resolution: specificity and
    ``!important`` are ignored. The stylesheet index is consulted only for
    elements whose extractor supplied no matched declarations.
    """
    value = first_declared(element.inline_style, prop)
    if value is not None:
        return value
    if element.declared_style:
        return first_declared(element.declared_style, prop)
    for rule in stylesheets:
        declared = rule.first_value(prop)
        if declared is None:
            continue
        if selector_matches(rule.selector_text, element):
            return declared
    return None
