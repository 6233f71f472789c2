from __future__ import annotations

import math
from typing import Sequence

from ..model import ThemeColor
from .xmlquery import XmlNode

DEFAULT_ARGB = "FF000000"

# Legacy palette addressed by ``indexed``; 64 is the system foreground and 65
# the system background.
INDEXED_COLORS: tuple[str, ...] = (
    "FF000000", "FFFFFFFF", "FFFF0000", "FF00FF00", "FF0000FF", "FFFFFF00",
    "FFFF00FF", "FF00FFFF", "FF000000", "FFFFFFFF", "FFFF0000", "FF00FF00",
    "FF0000FF", "FFFFFF00", "FFFF00FF", "FF00FFFF", "FF800000", "FF008000",
    "FF000080", "FF808000", "FF800080", "FF008080", "FFC0C0C0", "FF808080",
    "FF9999FF", "FF993366", "FFFFFFCC", "FFCCFFFF", "FF660066", "FFFF8080",
    "FF0066CC", "FFCCCCFF", "FF000080", "FFFF00FF", "FFFFFF00", "FF00FFFF",
    "FF800080", "FF800000", "FF008080", "FF0000FF", "FF00CCFF", "FFCCFFFF",
    "FFCCFFCC", "FFFFFF99", "FF99CCFF", "FFFF99CC", "FFCC99FF", "FFFFCC99",
    "FF3366FF", "FF33CCCC", "FF99CC00", "FFFFCC00", "FFFF9900", "FFFF6600",
    "FF666699", "FF969696", "FF003366", "FF339966", "FF003300", "FF333300",
    "FF993300", "FF993366", "FF333399", "FF333333", "FF000000", "FFFFFFFF",
)

# Drawing scheme colors name text/background roles by their own aliases.
SCHEME_ALIASES = {
    "tx1": "dk1",
    "bg1": "lt1",
    "tx2": "dk2",
    "bg2": "lt2",
}


def _round(value: float) -> int:
    return min(255, max(0, math.floor(value + 0.5)))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return f"#{_round(r):02X}{_round(g):02X}{_round(b):02X}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    value = hex_color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return 0, 0, 0
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return 0, 0, 0


def argb_to_hex(argb: str) -> str:
    """Flatten an ARGB value onto black by premultiplying its alpha."""
    value = argb.lstrip("#")
    if len(value) == 6:
        value = "FF" + value
    if len(value) != 8:
        value = DEFAULT_ARGB
    try:
        alpha = int(value[0:2], 16) / 255
        r, g, b = (int(value[i:i + 2], 16) for i in (2, 4, 6))
    except ValueError:
        return "#000000"
    return rgb_to_hex(r * alpha, g * alpha, b * alpha)


def apply_cell_tint(hex_color: str, tint: float) -> str:
    r, g, b = hex_to_rgb(hex_color)
    if tint < 0:
        factor = 1.0 + tint
        return rgb_to_hex(r * factor, g * factor, b * factor)
    if tint > 0:
        return rgb_to_hex(
            r * (1.0 - tint) + 255 * tint,
            g * (1.0 - tint) + 255 * tint,
            b * (1.0 - tint) + 255 * tint,
        )
    return rgb_to_hex(r, g, b)


def _theme_by_id(themes: Sequence[ThemeColor], theme_id: int) -> ThemeColor | None:
    for theme in themes:
        if theme.id == theme_id:
            return theme
    return None


def _theme_by_name(themes: Sequence[ThemeColor], name: str) -> ThemeColor | None:
    name = SCHEME_ALIASES.get(name, name)
    for theme in themes:
        if theme.name == name:
            return theme
    return None


def _to_int(raw: str, default: int = 0) -> int:
    try:
        return int(raw)
    except ValueError:
        return default


def _to_float(raw: str, default: float = 0.0) -> float:
    try:
        return float(raw)
    except ValueError:
        return default


def resolve_color(descriptor: XmlNode | None, themes: Sequence[ThemeColor]) -> str:
    """Resolve a spreadsheet ``color`` element to ``#RRGGBB``."""
    if descriptor is None or not descriptor:
        return argb_to_hex(DEFAULT_ARGB)

    if descriptor.attr("indexed"):
        idx = _to_int(descriptor.attr("indexed"), -1)
        if 0 <= idx < len(INDEXED_COLORS):
            return argb_to_hex(INDEXED_COLORS[idx])
        return argb_to_hex(DEFAULT_ARGB)

    if descriptor.attr("rgb"):
        return argb_to_hex(descriptor.attr("rgb"))

    if descriptor.attr("theme") or descriptor.attr("tint"):
        theme = _theme_by_id(themes, _to_int(descriptor.attr("theme", "0")))
        base = argb_to_hex(theme.argb if theme and theme.argb else DEFAULT_ARGB)
        return apply_cell_tint(base, _to_float(descriptor.attr("tint", "0")))

    return argb_to_hex(DEFAULT_ARGB)


def drawing_color(node: XmlNode, themes: Sequence[ThemeColor]) -> str:
    """Resolve the first DrawingML color under ``node``; ``""`` when none.

    Scheme colors take ``shade``/``tint`` children on the 0..100000 scale.
    """
    if not node:
        return ""

    srgb = node.find("a:srgbClr")
    if srgb:
        return f"#{srgb.attr('val').upper()}"

    scheme = node.find("a:schemeClr")
    if scheme:
        theme = _theme_by_name(themes, scheme.attr("val"))
        if theme is None or not theme.argb:
            return ""
        r, g, b = hex_to_rgb(argb_to_hex(theme.argb))
        shade = scheme.find("a:shade").attr("val")
        tint = scheme.find("a:tint").attr("val")
        if shade:
            f = 1 - _to_float(shade) / 100000
            r, g, b = _round(r * f), _round(g * f), _round(b * f)
        if tint:
            f = _to_float(tint) / 100000
            r = _round(r * (1 - f) + 255 * f)
            g = _round(g * (1 - f) + 255 * f)
            b = _round(b * (1 - f) + 255 * f)
        return rgb_to_hex(r, g, b)

    scrgb = node.find("a:scrgbClr")
    if scrgb:
        def to255(raw: str) -> float:
            value = _to_float(raw)
            return value * 255 if value <= 1 else value

        return rgb_to_hex(to255(scrgb.attr("r", "0")), to255(scrgb.attr("g", "0")), to255(scrgb.attr("b", "0")))

    return ""
