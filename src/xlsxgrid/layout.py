from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable

from PIL import ImageFont

from .model import AnchorPosition, Drawing, WorkSheet
from .parser.utils import parse_range, rowcol_to_ref

logger = logging.getLogger(__name__)

EMU_PER_PIXEL = 9525
POINTS_TO_PIXELS = 96.0 / 72.0
ROW_HEADER_WIDTH = 56
COL_HEADER_HEIGHT = 24
COLUMN_PADDING_PX = 5
FALLBACK_DIGIT_WIDTH = 7.0
DIGIT_SAMPLE = "0" * 100

DigitMeasurer = Callable[[str, float], "float | None"]


def emu_to_px(value: int) -> int:
    return math.floor(value / EMU_PER_PIXEL)


def points_to_px(points: float) -> int:
    return math.floor(points * POINTS_TO_PIXELS + 0.5)


def column_width_to_px(width: float, digit_width: float) -> int:
    return math.floor(width * digit_width + COLUMN_PADDING_PX)


def pillow_digit_width(font_name: str, font_size: float) -> float | None:
    """Average advance of the ``0`` glyph, or ``None`` if the font is not installed."""
    size_px = max(1, round(font_size * POINTS_TO_PIXELS))
    candidates = [f"{font_name}.ttf", f"{font_name.replace(' ', '')}.ttf", f"{font_name.lower().replace(' ', '')}.ttf"]
    for candidate in candidates:
        try:
            font = ImageFont.truetype(candidate, size_px)
        except OSError:
            continue
        return font.getlength(DIGIT_SAMPLE) / len(DIGIT_SAMPLE)
    return None


class DigitWidthCache:
    """Append-only memo of average digit advances keyed by ``(font, size)``."""

    def __init__(self, measure: DigitMeasurer | None = None, fallback: float = FALLBACK_DIGIT_WIDTH) -> None:
        self._measure = measure or pillow_digit_width
        self._fallback = fallback
        self._widths: dict[tuple[str, float], float] = {}

    def __len__(self) -> int:
        return len(self._widths)

    def width(self, font_name: str, font_size: float) -> float:
        key = (font_name, font_size)
        cached = self._widths.get(key)
        if cached is not None:
            return cached
        measured = self._measure(font_name, font_size) if font_name and font_size > 0 else None
        if not measured:
            logger.debug("No glyph metrics for %s %spt, using %spx digits", font_name, font_size, self._fallback)
            measured = self._fallback
        self._widths[key] = measured
        return measured


_shared_digit_widths: DigitWidthCache | None = None


def shared_digit_widths() -> DigitWidthCache:
    global _shared_digit_widths
    if _shared_digit_widths is None:
        _shared_digit_widths = DigitWidthCache()
    return _shared_digit_widths


@dataclass(slots=True)
class MergeSpan:
    ref: str
    rowspan: int
    colspan: int


@dataclass(slots=True)
class DrawingBox:
    drawing: Drawing
    left: int
    top: int
    width: int
    height: int


@dataclass(slots=True)
class SheetLayout:
    """Pixel geometry of one sheet; lists are indexed by 0-based row/column."""

    sheet: WorkSheet
    col_widths: list[int] = field(default_factory=list)
    row_heights: list[int] = field(default_factory=list)
    merges: dict[str, MergeSpan] = field(default_factory=dict)
    covered: set[str] = field(default_factory=set)
    drawings: list[DrawingBox] = field(default_factory=list)

    @property
    def grid_width(self) -> int:
        return sum(self.col_widths)

    @property
    def grid_height(self) -> int:
        return sum(self.row_heights)

    @property
    def total_width(self) -> int:
        return ROW_HEADER_WIDTH + self.grid_width

    @property
    def total_height(self) -> int:
        return COL_HEADER_HEIGHT + self.grid_height

    def visible_cols(self) -> list[int]:
        return [idx + 1 for idx, width in enumerate(self.col_widths) if width > 0]

    def visible_rows(self) -> list[int]:
        return [idx + 1 for idx, height in enumerate(self.row_heights) if height > 0]


class _Geometry:
    def __init__(self, sheet: WorkSheet, digit_width: float) -> None:
        self.sheet = sheet
        self.digit_width = digit_width
        self.row_map = {row.r: row for row in sheet.row_styles}

    def column_px(self, col: int) -> int:
        width = self.sheet.default_col_width
        hidden = False
        for style in self.sheet.column_styles:
            if style.min <= col <= style.max:
                width = style.width
                hidden = style.hidden or style.collapsed
        if hidden:
            return 0
        return column_width_to_px(width, self.digit_width)

    def row_px(self, row: int) -> int:
        style = self.row_map.get(row)
        if style is None:
            if self.sheet.zero_height:
                return 0
            return points_to_px(self.sheet.default_row_height)
        if style.hidden or style.collapsed:
            return 0
        return points_to_px(style.height)


def layout_sheet(sheet: WorkSheet, digit_widths: DigitWidthCache | None = None) -> SheetLayout:
    cache = digit_widths if digit_widths is not None else shared_digit_widths()
    geometry = _Geometry(sheet, cache.width(sheet.default_font_name, sheet.default_font_size))

    n_rows = len(sheet.data)
    n_cols = max((len(cells) for cells in sheet.data), default=0)
    layout = SheetLayout(
        sheet=sheet,
        col_widths=[geometry.column_px(col) for col in range(1, n_cols + 1)],
        row_heights=[geometry.row_px(row) for row in range(1, n_rows + 1)],
    )

    for drawing in sheet.drawings:
        layout.drawings.append(_place_drawing(drawing, layout, geometry))

    # overlays never get clipped: grow the grid until every box fits
    if layout.drawings:
        right = max(box.left + box.width for box in layout.drawings)
        bottom = max(box.top + box.height for box in layout.drawings)
        col_step = max(1, column_width_to_px(sheet.default_col_width, geometry.digit_width))
        row_step = max(1, points_to_px(sheet.default_row_height))
        layout.col_widths.extend([col_step] * _steps(right - layout.total_width, col_step))
        layout.row_heights.extend([row_step] * _steps(bottom - layout.total_height, row_step))

    _layout_merges(layout)
    return layout


def _steps(missing: int, step: int) -> int:
    return math.ceil(missing / step) if missing > 0 else 0


def _x_at(layout: SheetLayout, geometry: _Geometry, col: int) -> int:
    while len(layout.col_widths) < col:
        layout.col_widths.append(geometry.column_px(len(layout.col_widths) + 1))
    return sum(layout.col_widths[:col])


def _y_at(layout: SheetLayout, geometry: _Geometry, row: int) -> int:
    while len(layout.row_heights) < row:
        layout.row_heights.append(geometry.row_px(len(layout.row_heights) + 1))
    return sum(layout.row_heights[:row])


def _anchor_point(layout: SheetLayout, geometry: _Geometry, pos: AnchorPosition) -> tuple[int, int]:
    x = _x_at(layout, geometry, pos.col) + emu_to_px(pos.col_off)
    y = _y_at(layout, geometry, pos.row) + emu_to_px(pos.row_off)
    return x, y


def _place_drawing(drawing: Drawing, layout: SheetLayout, geometry: _Geometry) -> DrawingBox:
    if drawing.anchor_type == "absolute" and drawing.abs_emu is not None:
        x, y = emu_to_px(drawing.abs_emu.x), emu_to_px(drawing.abs_emu.y)
    else:
        x, y = _anchor_point(layout, geometry, drawing.position.from_)

    if drawing.size_emu is not None:
        width, height = emu_to_px(drawing.size_emu.cx), emu_to_px(drawing.size_emu.cy)
    else:
        x2, y2 = _anchor_point(layout, geometry, drawing.position.to)
        width, height = max(0, x2 - x), max(0, y2 - y)

    return DrawingBox(
        drawing=drawing,
        left=ROW_HEADER_WIDTH + x,
        top=COL_HEADER_HEIGHT + y,
        width=width,
        height=height,
    )


def _layout_merges(layout: SheetLayout) -> None:
    visible_rows = layout.visible_rows()
    visible_cols = layout.visible_cols()
    for ref in layout.sheet.merge_cells:
        rng = parse_range(ref)
        m_rows = [r for r in visible_rows if rng.start_row <= r <= rng.end_row]
        m_cols = [c for c in visible_cols if rng.start_col <= c <= rng.end_col]
        if not m_rows or not m_cols:
            continue

        anchor = rowcol_to_ref(m_rows[0], m_cols[0])
        layout.merges[anchor] = MergeSpan(ref=rng.ref, rowspan=len(m_rows), colspan=len(m_cols))
        for row in m_rows:
            for col in m_cols:
                coord = rowcol_to_ref(row, col)
                if coord != anchor:
                    layout.covered.add(coord)
