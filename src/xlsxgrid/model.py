from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

DrawingType = Literal["image", "shape", "connector", "textbox", "group", "unknown"]
AnchorType = Literal["twoCell", "oneCell", "absolute"]


@dataclass(slots=True)
class ParseOptions:
    dense: bool = False
    styles: bool = False
    drawings: bool = False
    skip_hidden_rows: bool = False


@dataclass(slots=True)
class RangeRef:
    ref: str
    start_row: int
    start_col: int
    end_row: int
    end_col: int


@dataclass(slots=True)
class ThemeColor:
    id: int
    name: str
    argb: str


@dataclass(slots=True)
class BorderEdge:
    style: str = ""
    color: str = ""


@dataclass(slots=True)
class Border:
    left: BorderEdge = field(default_factory=BorderEdge)
    right: BorderEdge = field(default_factory=BorderEdge)
    top: BorderEdge = field(default_factory=BorderEdge)
    bottom: BorderEdge = field(default_factory=BorderEdge)
    diagonal: BorderEdge = field(default_factory=BorderEdge)


@dataclass(slots=True)
class FontRecord:
    name: str = ""
    size: float = 0.0
    color: str = ""
    family: int = 0
    bold: bool = False
    italic: bool = False
    underline: bool = False


@dataclass(slots=True)
class FillRecord:
    pattern_type: str = ""
    fg_color: str = ""
    bg_color: str = ""


@dataclass(slots=True)
class Alignment:
    horizontal: str = ""
    vertical: str = "bottom"
    wrap_text: bool = False


@dataclass(slots=True)
class CellFormat:
    num_fmt_id: int = 0
    font_id: int = 0
    fill_id: int = 0
    border_id: int = 0
    xf_id: int = 0
    alignment: Alignment | None = None


@dataclass(slots=True)
class StyleSheet:
    fonts: list[FontRecord] = field(default_factory=list)
    fills: list[FillRecord] = field(default_factory=list)
    borders: list[Border] = field(default_factory=list)
    cell_formats: list[CellFormat] = field(default_factory=list)
    num_formats: dict[int, str] = field(default_factory=dict)


@dataclass(slots=True)
class CellStyle:
    font_name: str
    font_size: float
    font_color: str
    bold: bool
    italic: bool
    underline: bool
    bg_color: str
    fg_color: str
    pattern_type: str
    horizontal: str
    vertical: str
    wrap_text: bool
    border: Border
    num_fmt_id: int = 0


@dataclass(slots=True)
class CellData:
    ref: str = ""
    value: str = ""
    formula: str = ""
    style: CellStyle | None = None


@dataclass(slots=True)
class ColumnStyle:
    min: int
    max: int
    width: float
    hidden: bool = False
    collapsed: bool = False


@dataclass(slots=True)
class RowStyle:
    r: int
    height: float
    hidden: bool = False
    collapsed: bool = False


@dataclass(slots=True)
class AnchorPosition:
    col: int = 0
    col_off: int = 0
    row: int = 0
    row_off: int = 0


@dataclass(slots=True)
class DrawingPosition:
    from_: AnchorPosition
    to: AnchorPosition


@dataclass(slots=True)
class EmuSize:
    cx: int
    cy: int


@dataclass(slots=True)
class EmuPoint:
    x: int
    y: int


@dataclass(slots=True)
class ImageProperties:
    embed_id: str = ""


@dataclass(slots=True)
class TextboxProperties:
    text: str = ""
    font_pt: float | None = None
    bold: bool = False
    italic: bool = False
    text_color: str = ""
    text_align: Literal["left", "center", "right"] = "left"
    fill_color: str = ""
    line_color: str = ""
    line_width: int = 0


@dataclass(slots=True)
class ShapeProperties:
    fill_color: str = ""
    shape_type: str = "custom"
    line_color: str = ""
    line_width: int = 0


@dataclass(slots=True)
class ConnectorProperties:
    line_color: str = ""
    line_width: int = 0
    flip_h: bool = False
    flip_v: bool = False


@dataclass(slots=True)
class GroupProperties:
    pass


@dataclass(slots=True)
class UnknownProperties:
    pass


DrawingProperties = Union[
    ImageProperties,
    TextboxProperties,
    ShapeProperties,
    ConnectorProperties,
    GroupProperties,
    UnknownProperties,
]


@dataclass(slots=True)
class Drawing:
    id: str
    name: str
    title: str
    description: str
    type: DrawingType
    anchor_type: AnchorType
    position: DrawingPosition
    properties: DrawingProperties
    size_emu: EmuSize | None = None
    abs_emu: EmuPoint | None = None
    base64: str = ""
    media_name: str = ""


@dataclass(slots=True)
class MediaFile:
    name: str
    base64: str


@dataclass(slots=True)
class DrawingFile:
    src: str
    drawings: list[Drawing] = field(default_factory=list)


@dataclass(slots=True)
class WorkSheet:
    id: int
    name: str
    state: str = "visible"
    path: str = ""
    dimension: str = ""
    data: list[list[CellData | None]] = field(default_factory=list)
    column_styles: list[ColumnStyle] = field(default_factory=list)
    row_styles: list[RowStyle] = field(default_factory=list)
    merge_cells: list[str] = field(default_factory=list)
    default_col_width: float = 8.43
    default_row_height: float = 15.0
    zero_height: bool = False
    drawings: list[Drawing] = field(default_factory=list)
    default_font_name: str = "Calibri"
    default_font_size: float = 11.0

    def cell(self, ref: str) -> CellData | None:
        from .parser.utils import parse_cell_ref

        row, col = parse_cell_ref(ref)
        if row > len(self.data):
            return None
        cells = self.data[row - 1]
        if col > len(cells):
            return None
        return cells[col - 1]


@dataclass(slots=True)
class Workbook:
    options: ParseOptions = field(default_factory=ParseOptions)
    sheets: list[WorkSheet] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
