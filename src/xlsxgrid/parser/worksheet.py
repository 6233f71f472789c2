from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..model import CellData, ColumnStyle, Drawing, DrawingFile, RowStyle, StyleSheet
from .styles import is_date_format, resolve_cell_style
from .utils import expand_range, infer_dimension, parse_cell_ref
from .xmlquery import XmlNode, parse_xml

logger = logging.getLogger(__name__)

DATE_EPOCH = datetime(1899, 12, 30)
DEFAULT_BASE_COL_WIDTH = 8
# A base width of 8 digits is shown as 8.43 characters for the default font.
BASE_COL_WIDTH_PADDING = 0.43
DEFAULT_ROW_HEIGHT = 15.0

NUMERIC_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?\s*$")


@dataclass(slots=True)
class WorksheetContent:
    dimension: str = ""
    data: list[list[CellData | None]] = field(default_factory=list)
    column_styles: list[ColumnStyle] = field(default_factory=list)
    row_styles: list[RowStyle] = field(default_factory=list)
    merge_cells: list[str] = field(default_factory=list)
    drawings: list[Drawing] = field(default_factory=list)
    missing_drawing: str = ""
    default_col_width: float = DEFAULT_BASE_COL_WIDTH + BASE_COL_WIDTH_PADDING
    default_row_height: float = DEFAULT_ROW_HEIGHT
    zero_height: bool = False


def looks_numeric(value: str) -> bool:
    # an empty value counts as numeric, like Number("") in a browser host
    return value.strip() == "" or bool(NUMERIC_RE.match(value))


def serial_to_date(serial: float) -> str:
    return (DATE_EPOCH + timedelta(days=serial)).strftime("%Y-%m-%d")


def _is_true(raw: str) -> bool:
    return raw in {"1", "true"}


def _to_float(raw: str, default: float) -> float:
    try:
        return float(raw)
    except ValueError:
        return default


def parse_worksheet(
    xml: str | bytes,
    rels_xml: str | bytes | None,
    style_sheet: StyleSheet,
    shared_strings: list[str],
    drawing_files: list[DrawingFile] | None,
    *,
    dense: bool = False,
    skip_hidden_rows: bool = False,
) -> WorksheetContent:
    root = parse_xml(xml)
    content = WorksheetContent()
    sheet_data = root.find("sheetData")
    rows = sheet_data.children("row")

    dimension = root.find("dimension")
    if dimension:
        content.dimension = dimension.attr("ref")
    elif sheet_data:
        content.dimension = infer_dimension(cell.attr("r") for row in rows for cell in row.children("c") if cell.attr("r"))

    if content.dimension:
        content.data = expand_range(content.dimension, _placeholder() if dense else None, from_origin=True)

    _parse_sheet_format(root.find("sheetFormatPr"), content)
    _parse_columns(root.find("cols"), content)

    for row in rows:
        row_number = int(_to_float(row.attr("r", "0"), 0))
        hidden = _is_true(row.attr("hidden"))
        collapsed = _is_true(row.attr("collapsed"))
        if row_number < 1:
            continue
        if skip_hidden_rows and (hidden or collapsed):
            logger.debug("Skipping hidden row %d", row_number)
            continue

        cells = row.children("c")
        for cell_elem in cells:
            cell = _decode_cell(cell_elem, style_sheet, shared_strings)
            _place_cell(content.data, cell, dense)

        if not skip_hidden_rows or cells:
            content.row_styles.append(
                RowStyle(
                    r=row_number,
                    height=_to_float(row.attr("ht"), content.default_row_height),
                    hidden=hidden,
                    collapsed=collapsed,
                )
            )

    for merge in root.find("mergeCells").children("mergeCell"):
        ref = merge.attr("ref")
        if ref:
            content.merge_cells.append(ref)

    if skip_hidden_rows and content.zero_height and content.default_row_height == 0:
        content.data = [row for row in content.data if _has_populated_cell(row)]

    if drawing_files is not None:
        _attach_drawings(content, parse_xml(rels_xml), drawing_files)
    return content


def _placeholder() -> CellData:
    return CellData(ref="", value="", formula="")


def _has_populated_cell(row: list[CellData | None]) -> bool:
    return any(cell is not None and cell.ref for cell in row)


def _parse_sheet_format(sheet_format: XmlNode, content: WorksheetContent) -> None:
    if not sheet_format:
        return
    base_col_width = _to_float(sheet_format.attr("baseColWidth"), DEFAULT_BASE_COL_WIDTH)
    content.default_col_width = _to_float(
        sheet_format.attr("defaultColWidth"),
        base_col_width + BASE_COL_WIDTH_PADDING,
    )
    content.default_row_height = _to_float(sheet_format.attr("defaultRowHeight"), DEFAULT_ROW_HEIGHT)
    content.zero_height = _is_true(sheet_format.attr("zeroHeight"))


def _parse_columns(cols: XmlNode, content: WorksheetContent) -> None:
    for col in cols.children("col"):
        content.column_styles.append(
            ColumnStyle(
                min=int(_to_float(col.attr("min", "1"), 1)),
                max=int(_to_float(col.attr("max", "1"), 1)),
                width=_to_float(col.attr("width"), content.default_col_width),
                hidden=_is_true(col.attr("hidden")),
                collapsed=_is_true(col.attr("collapsed")),
            )
        )


def _decode_cell(cell_elem: XmlNode, style_sheet: StyleSheet, shared_strings: list[str]) -> CellData:
    ref = cell_elem.attr("r")
    # validates the reference before anything else is decoded
    parse_cell_ref(ref)

    raw_style = cell_elem.attr("s")
    style_index = int(raw_style) if raw_style.isdigit() else None
    cell_type = cell_elem.attr("t")
    formula = "".join(f.text for f in cell_elem.children("f"))
    raw_value = "".join(v.text for v in cell_elem.children("v"))

    if cell_type == "s":
        try:
            idx = int(raw_value)
        except ValueError:
            idx = -1
        value = shared_strings[idx] if 0 <= idx < len(shared_strings) else ""
    elif cell_type == "inlineStr":
        inline = cell_elem.find("is")
        direct = inline.children("t")
        value = direct[0].text if direct else "".join(run.find("t").text for run in inline.children("r"))
    elif cell_type == "b":
        value = "TRUE" if raw_value == "1" else ("FALSE" if raw_value else "")
    elif raw_value and NUMERIC_RE.match(raw_value) and is_date_format(style_sheet, style_index):
        value = serial_to_date(float(raw_value))
    else:
        value = raw_value

    style = resolve_cell_style(style_sheet, style_index)
    if style is not None and style.horizontal == "":
        style.horizontal = "right" if looks_numeric(value) else "left"

    return CellData(ref=ref, value=value, formula=formula, style=style)


def _place_cell(grid: list[list[CellData | None]], cell: CellData, dense: bool) -> None:
    row, col = parse_cell_ref(cell.ref)
    width = max((len(cells) for cells in grid), default=0)
    while len(grid) < row:
        grid.append([_placeholder() for _ in range(width)] if dense else [None] * width)

    cells = grid[row - 1]
    if len(cells) < col:
        if dense:
            # keep the grid rectangular so every address stays present
            for other in grid:
                other.extend(_placeholder() for _ in range(col - len(other)))
        else:
            cells.extend([None] * (col - len(cells)))
    cells[col - 1] = cell


def _attach_drawings(content: WorksheetContent, rels: XmlNode, drawing_files: list[DrawingFile]) -> None:
    for rel in rels.children("Relationship"):
        if not rel.attr("Type").endswith("/drawing"):
            continue
        file_name = posixpath.basename(rel.attr("Target"))
        for drawing_file in drawing_files:
            if drawing_file.src == file_name:
                content.drawings = drawing_file.drawings
                return
        logger.warning("Worksheet references missing drawing part %s", file_name)
        content.missing_drawing = file_name
        return
