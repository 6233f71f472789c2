from __future__ import annotations

from xlsxgrid.model import ThemeColor
from xlsxgrid.parser.colors import (
    INDEXED_COLORS,
    apply_cell_tint,
    argb_to_hex,
    drawing_color,
    resolve_color,
)
from xlsxgrid.parser.theme import parse_theme
from xlsxgrid.parser.xmlquery import parse_xml

from tests.helpers import DRAWING_NS, THEME_XML

THEMES = parse_theme(THEME_XML)


def _color(attrs: str):
    return parse_xml(f"<color {attrs}/>")


def _fill(inner: str):
    return parse_xml(f'<a:solidFill xmlns:a="{DRAWING_NS}">{inner}</a:solidFill>')


def test_indexed_palette() -> None:
    assert len(INDEXED_COLORS) == 66
    assert resolve_color(_color('indexed="2"'), THEMES) == "#FF0000"
    assert resolve_color(_color('indexed="1"'), THEMES) == "#FFFFFF"
    assert resolve_color(_color('indexed="64"'), THEMES) == "#000000"
    assert resolve_color(_color('indexed="99"'), THEMES) == "#000000"


def test_argb_alpha_is_premultiplied() -> None:
    assert argb_to_hex("FFFF0000") == "#FF0000"
    assert argb_to_hex("80FF0000") == "#800000"
    assert argb_to_hex("00FFFFFF") == "#000000"
    assert argb_to_hex("00ff00") == "#00FF00"


def test_cell_tint() -> None:
    assert apply_cell_tint("#000000", 0.5) == "#808080"
    assert apply_cell_tint("#FFFFFF", -0.5) == "#808080"
    assert apply_cell_tint("#4472C4", 0) == "#4472C4"


def test_theme_color_with_tint() -> None:
    assert resolve_color(_color('theme="1"'), THEMES) == "#000000"
    assert resolve_color(_color('theme="0"'), THEMES) == "#FFFFFF"
    assert resolve_color(_color('theme="4" tint="0.5"'), THEMES) == "#A2B9E2"


def test_missing_descriptor_is_black() -> None:
    assert resolve_color(None, THEMES) == "#000000"
    assert resolve_color(parse_xml(None), THEMES) == "#000000"
    assert resolve_color(_color('auto="1"'), THEMES) == "#000000"


def test_drawing_srgb_color() -> None:
    assert drawing_color(_fill('<a:srgbClr val="ff0000"/>'), THEMES) == "#FF0000"


def test_drawing_scheme_color_shade_and_tint() -> None:
    assert drawing_color(_fill('<a:schemeClr val="accent1"/>'), THEMES) == "#4472C4"
    shaded = _fill('<a:schemeClr val="accent1"><a:shade val="50000"/></a:schemeClr>')
    assert drawing_color(shaded, THEMES) == "#223962"
    tinted = _fill('<a:schemeClr val="dk1"><a:tint val="50000"/></a:schemeClr>')
    assert drawing_color(tinted, THEMES) == "#808080"


def test_drawing_scheme_aliases() -> None:
    assert drawing_color(_fill('<a:schemeClr val="tx1"/>'), THEMES) == "#000000"
    assert drawing_color(_fill('<a:schemeClr val="bg1"/>'), THEMES) == "#FFFFFF"
    assert drawing_color(_fill('<a:schemeClr val="tx2"/>'), THEMES) == "#44546A"


def test_drawing_color_unresolved() -> None:
    assert drawing_color(parse_xml(None), THEMES) == ""
    assert drawing_color(_fill('<a:schemeClr val="accent1"/>'), []) == ""
    assert drawing_color(_fill('<a:prstClr val="black"/>'), THEMES) == ""


def test_theme_slot_ordering() -> None:
    assert [theme.name for theme in THEMES] == [
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
    ]
    assert [theme.id for theme in THEMES] == list(range(12))
    assert THEMES[1] == ThemeColor(id=1, name="dk1", argb="#FF000000")
    assert THEMES[4].argb == "#FF4472C4"


def test_theme_missing_part() -> None:
    assert parse_theme(None) == []
