from __future__ import annotations

import logging
from typing import Sequence

from ..model import (
    Alignment,
    Border,
    BorderEdge,
    CellFormat,
    CellStyle,
    FillRecord,
    FontRecord,
    StyleSheet,
    ThemeColor,
)
from .colors import resolve_color
from .xmlquery import XmlNode, parse_xml

logger = logging.getLogger(__name__)

SHORT_DATE_NUMFMT_ID = 14
BORDER_SIDES = ("left", "right", "top", "bottom", "diagonal")


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


def _flag(node: XmlNode) -> bool:
    # <b/> means on; <b val="0"/> switches it off
    if not node:
        return False
    return node.attr("val", "1") not in {"0", "false"}


def parse_styles(xml: str | bytes | None, themes: Sequence[ThemeColor]) -> StyleSheet:
    root = parse_xml(xml)
    style_sheet = StyleSheet()
    if not root:
        return style_sheet

    for font in root.find("fonts").children("font"):
        style_sheet.fonts.append(_parse_font(font, themes))

    for fill in root.find("fills").children("fill"):
        pattern = fill.find("patternFill")
        style_sheet.fills.append(
            FillRecord(
                pattern_type=pattern.attr("patternType"),
                fg_color=resolve_color(pattern.find("fgColor"), themes),
                bg_color=resolve_color(pattern.find("bgColor"), themes),
            )
        )

    for border in root.find("borders").children("border"):
        style_sheet.borders.append(_parse_border(border, themes))

    for num_fmt in root.find("numFmts").children("numFmt"):
        raw_id = num_fmt.attr("numFmtId")
        if not raw_id:
            continue
        style_sheet.num_formats[_to_int(raw_id)] = num_fmt.attr("formatCode")

    for xf in root.find("cellXfs").children("xf"):
        alignment = xf.find("alignment")
        style_sheet.cell_formats.append(
            CellFormat(
                num_fmt_id=_to_int(xf.attr("numFmtId", "0")),
                font_id=_to_int(xf.attr("fontId", "0")),
                fill_id=_to_int(xf.attr("fillId", "0")),
                border_id=_to_int(xf.attr("borderId", "0")),
                xf_id=_to_int(xf.attr("xfId", "0")),
                alignment=Alignment(
                    horizontal=alignment.attr("horizontal"),
                    vertical=alignment.attr("vertical", "bottom"),
                    wrap_text=alignment.attr("wrapText", "0") in {"1", "true"},
                )
                if alignment
                else None,
            )
        )

    logger.debug(
        "Parsed styles: %d fonts, %d fills, %d borders, %d cell formats",
        len(style_sheet.fonts),
        len(style_sheet.fills),
        len(style_sheet.borders),
        len(style_sheet.cell_formats),
    )
    return style_sheet


def _parse_font(font: XmlNode, themes: Sequence[ThemeColor]) -> FontRecord:
    underline = font.find("u")
    return FontRecord(
        name=font.find("name").attr("val"),
        size=_to_float(font.find("sz").attr("val", "0")),
        color=resolve_color(font.find("color"), themes),
        family=_to_int(font.find("family").attr("val", "0")),
        bold=_flag(font.find("b")),
        italic=_flag(font.find("i")),
        underline=bool(underline) and underline.attr("val", "single") != "none",
    )


def _parse_border(border: XmlNode, themes: Sequence[ThemeColor]) -> Border:
    result = Border()
    for side in BORDER_SIDES:
        elem = border.find(side)
        if not elem:
            continue
        setattr(
            result,
            side,
            BorderEdge(style=elem.attr("style"), color=resolve_color(elem.find("color"), themes)),
        )
    return result


def resolve_cell_style(style_sheet: StyleSheet, index: int | None) -> CellStyle | None:
    """Resolve a cell's ``s`` attribute through its cell format record."""
    if index is None or index < 0 or not style_sheet.cell_formats:
        return None
    if index >= len(style_sheet.cell_formats):
        logger.warning("Cell format index %d out of range (%d records)", index, len(style_sheet.cell_formats))
        return None

    xf = style_sheet.cell_formats[index]
    font = _pick(style_sheet.fonts, xf.font_id, FontRecord)
    fill = _pick(style_sheet.fills, xf.fill_id, FillRecord)
    border = _pick(style_sheet.borders, xf.border_id, Border)
    alignment = xf.alignment or Alignment()

    return CellStyle(
        font_name=font.name,
        font_size=font.size,
        font_color=font.color,
        bold=font.bold,
        italic=font.italic,
        underline=font.underline,
        bg_color=fill.bg_color,
        fg_color=fill.fg_color,
        pattern_type=fill.pattern_type,
        horizontal=alignment.horizontal,
        vertical=alignment.vertical,
        wrap_text=alignment.wrap_text,
        border=border,
        num_fmt_id=xf.num_fmt_id,
    )


def _pick(records: list, idx: int, factory):
    if 0 <= idx < len(records):
        return records[idx]
    return factory()


def is_date_format(style_sheet: StyleSheet, index: int | None) -> bool:
    if index is None or not (0 <= index < len(style_sheet.cell_formats)):
        return False
    return style_sheet.cell_formats[index].num_fmt_id == SHORT_DATE_NUMFMT_ID
