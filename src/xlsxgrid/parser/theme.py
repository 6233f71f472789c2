from __future__ import annotations

from ..model import ThemeColor
from .xmlquery import parse_xml

# Slot ids follow the order cell ``theme`` attributes index them by.
THEME_SLOTS: tuple[str, ...] = (
    "lt1",
    "dk1",
    "lt2",
    "dk2",
    "accent1",
    "accent2",
    "accent3",
    "accent4",
    "accent5",
    "accent6",
    "hlink",
    "folHlink",
)


def parse_theme(xml: str | bytes | None) -> list[ThemeColor]:
    root = parse_xml(xml)
    themes: list[ThemeColor] = []
    for scheme in root.find("a:themeElements").find_all("a:clrScheme"):
        for slot_id, slot_name in enumerate(THEME_SLOTS):
            elem = scheme.find(f"a:{slot_name}")
            if not elem:
                continue
            sys_clr = elem.find("a:sysClr")
            srgb_clr = elem.find("a:srgbClr")
            rgb = sys_clr.attr("lastClr") if sys_clr else srgb_clr.attr("val")
            themes.append(ThemeColor(id=slot_id, name=slot_name, argb=f"#FF{rgb.upper()}" if rgb else ""))
    return themes
