# SPDX-License-Identifier: AGPL-3.0-only
"""CSS color parsing, alpha compositing and WCAG luminance helpers."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


_RE_FUNC = re.compile(r"^(rgba?)\(\s*(.*?)\s*\)$", re.IGNORECASE)
_RE_HEX = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)

NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "maroon": (128, 0, 0),
    "navy": (0, 0, 128),
    "teal": (0, 128, 128),
    "olive": (128, 128, 0),
    "lime": (0, 255, 0),
    "aqua": (0, 255, 255),
    "cyan": (0, 255, 255),
    "fuchsia": (255, 0, 255),
    "magenta": (255, 0, 255),
    "lightgray": (211, 211, 211),
    "lightgrey": (211, 211, 211),
    "darkgray": (169, 169, 169),
    "darkgrey": (169, 169, 169),
    "dimgray": (105, 105, 105),
    "whitesmoke": (245, 245, 245),
}


class ColorParseError(ValueError):
    pass


@dataclass(frozen=True)
class RGBA:
    r: float
    g: float
    b: float
    a: float = 1.0

    @property
    def is_opaque(self) -> bool:
        return self.a >= 1.0

    @property
    def is_transparent(self) -> bool:
        return self.a <= 0.0

    def over(self, backdrop: "RGBA") -> "RGBA":
        """Source-over composite of this color on top of ``backdrop``."""
        a = self.a + backdrop.a * (1.0 - self.a)
        if a <= 0.0:
            return RGBA(0.0, 0.0, 0.0, 0.0)

        def ch(top: float, bottom: float) -> float:
            return (top * self.a + bottom * backdrop.a * (1.0 - self.a)) / a

        return RGBA(ch(self.r, backdrop.r), ch(self.g, backdrop.g), ch(self.b, backdrop.b), min(1.0, a))

    def shifted(self, delta: int) -> "RGBA":
        return RGBA(
            max(0.0, min(255.0, self.r + delta)),
            max(0.0, min(255.0, self.g + delta)),
            max(0.0, min(255.0, self.b + delta)),
            self.a,
        )

    def to_css(self) -> str:
        rgb = ", ".join(str(int(round(c))) for c in (self.r, self.g, self.b))
        if self.is_opaque:
            return f"rgb({rgb})"
        return f"rgba({rgb}, {round(self.a, 3):g})"


WHITE = RGBA(255.0, 255.0, 255.0, 1.0)


def _channel(token: str) -> float:
    text = token.strip()
    if text.endswith("%"):
        value = float(text[:-1]) * 255.0 / 100.0
    else:
        value = float(text)
    return max(0.0, min(255.0, value))


def _alpha(token: str) -> float:
    text = token.strip()
    if text.endswith("%"):
        value = float(text[:-1]) / 100.0
    else:
        value = float(text)
    return max(0.0, min(1.0, value))


def parse_color(value: str | None) -> RGBA:
    """Parse a CSS color string into an RGBA with 0-255 channels and 0-1 alpha."""
    if value is None:
        raise ColorParseError("color value is missing")
    text = str(value).strip().lower()
    if not text:
        raise ColorParseError("color value is empty")
    if text == "transparent":
        return RGBA(0.0, 0.0, 0.0, 0.0)
    if text in NAMED_COLORS:
        r, g, b = NAMED_COLORS[text]
        return RGBA(float(r), float(g), float(b), 1.0)

    m = _RE_HEX.match(text)
    if m:
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
        return RGBA(float(r), float(g), float(b), a)

    m = _RE_FUNC.match(text)
    if m:
        body = m.group(2)
        alpha_token = None
        if "/" in body:
            body, _, alpha_token = body.partition("/")
        parts = [p for p in re.split(r"[\s,]+", body.strip()) if p]
        if alpha_token is None and len(parts) == 4:
            alpha_token = parts.pop()
        if len(parts) != 3:
            raise ColorParseError(f"unsupported color syntax: {value!r}")
        try:
            r, g, b = (_channel(p) for p in parts)
            a = 1.0 if alpha_token is None else _alpha(alpha_token)
        except ValueError:
            raise ColorParseError(f"unsupported color syntax: {value!r}")
        return RGBA(r, g, b, a)

    raise ColorParseError(f"unsupported color syntax: {value!r}")


def resolve_background(layers: Iterable[str | None]) -> RGBA:
    """Composite background layers ordered innermost first.

    Walks outward until an opaque layer is found; opaque white stands in for the
    canvas when none is. Missing (None) layers are treated as transparent, while
    unparseable layers raise ColorParseError.
    """
    stack: list[RGBA] = []
    base = WHITE
    for raw in layers:
        if raw is None:
            continue
        color = parse_color(raw)
        if color.is_opaque:
            base = color
            break
        if not color.is_transparent:
            stack.append(color)
    for color in reversed(stack):
        base = color.over(base)
    return RGBA(base.r, base.g, base.b, 1.0)


def _linearize(channel: float) -> float:
    c = channel / 255.0
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(color: RGBA) -> float:
    return (
        0.2126 * _linearize(color.r)
        + 0.7152 * _linearize(color.g)
        + 0.0722 * _linearize(color.b)
    )


def contrast_ratio(foreground: RGBA | str, background: RGBA | str) -> float:
    fg = parse_color(foreground) if isinstance(foreground, str) else foreground
    bg = parse_color(background) if isinstance(background, str) else background
    if not bg.is_opaque:
        bg = bg.over(WHITE)
    if not fg.is_opaque:
        fg = fg.over(bg)
    l1 = relative_luminance(fg)
    l2 = relative_luminance(bg)
    ratio = (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)
    return max(1.0, min(21.0, ratio))
