from __future__ import annotations

import mimetypes
from html import escape as html_escape

from .layout import (
    COL_HEADER_HEIGHT,
    ROW_HEADER_WIDTH,
    DigitWidthCache,
    DrawingBox,
    SheetLayout,
    emu_to_px,
    layout_sheet,
)
from .model import (
    BorderEdge,
    CellData,
    CellStyle,
    ConnectorProperties,
    ImageProperties,
    ShapeProperties,
    TextboxProperties,
    Workbook,
    WorkSheet,
)
from .parser.utils import index_to_col, rowcol_to_ref

BORDER_STYLES = {
    "thin": "1px solid",
    "hair": "1px solid",
    "medium": "2px solid",
    "thick": "3px solid",
    "double": "3px double",
    "dashed": "1px dashed",
    "mediumDashed": "2px dashed",
    "dashDot": "1px dashed",
    "mediumDashDot": "2px dashed",
    "dashDotDot": "1px dashed",
    "mediumDashDotDot": "2px dashed",
    "slantDashDot": "2px dashed",
    "dotted": "1px dotted",
}

HORIZONTAL_ALIGN = {
    "left": "left",
    "right": "right",
    "center": "center",
    "centerContinuous": "center",
    "justify": "justify",
    "distributed": "justify",
    "fill": "left",
}

VERTICAL_ALIGN = {
    "top": "top",
    "center": "middle",
    "bottom": "bottom",
    "justify": "middle",
    "distributed": "middle",
}

ROUNDED_SHAPES = {"ellipse": "50%", "roundRect": "8px", "flowChartTerminator": "50%"}


def render_sheet_html(sheet: WorkSheet, digit_widths: DigitWidthCache | None = None) -> str:
    layout = layout_sheet(sheet, digit_widths)
    out: list[str] = []
    out.append(
        f'<div class="xl-sheet" data-sheet="{html_escape(sheet.name)}" '
        f'style="position:relative;width:{layout.total_width}px;height:{layout.total_height}px;">'
    )
    out.extend(_table_html(layout))
    out.extend(_overlay_html(layout))
    out.append("</div>")
    return "\n".join(out)


def render_workbook_html(
    workbook: Workbook,
    index: int = 0,
    digit_widths: DigitWidthCache | None = None,
) -> str:
    if not 0 <= index < len(workbook.sheets):
        raise IndexError(f"Sheet index {index} out of range (workbook has {len(workbook.sheets)} sheets)")
    return render_sheet_html(workbook.sheets[index], digit_widths)


def render_workbook_document(
    workbook: Workbook,
    title: str = "Workbook",
    digit_widths: DigitWidthCache | None = None,
    sheet_indices: list[int] | None = None,
) -> str:
    indices = sheet_indices if sheet_indices is not None else list(range(len(workbook.sheets)))

    parts: list[str] = []
    parts.append("<!doctype html>")
    parts.append('<html lang="en">')
    parts.append("<head>")
    parts.append('<meta charset="utf-8">')
    parts.append(f"<title>{html_escape(title)}</title>")
    parts.append(_html_css())
    parts.append("</head>")
    parts.append("<body>")
    parts.append('<main class="page">')
    parts.append(f"<h1>{html_escape(title)}</h1>")

    for idx in indices:
        sheet = workbook.sheets[idx]
        parts.append('<section class="sheet">')
        parts.append(f"<h2>{html_escape(sheet.name)} [{html_escape(sheet.state)}]</h2>")
        parts.append('<div class="xl-wrap">')
        parts.append(render_workbook_html(workbook, idx, digit_widths))
        parts.append("</div>")
        parts.append("</section>")

    if workbook.warnings:
        parts.append("<section>")
        parts.append("<h2>Warnings</h2>")
        parts.append("<ul>")
        for warning in workbook.warnings:
            parts.append(f"<li>{html_escape(warning)}</li>")
        parts.append("</ul>")
        parts.append("</section>")

    parts.append("</main>")
    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts) + "\n"


def _table_html(layout: SheetLayout) -> list[str]:
    sheet = layout.sheet
    visible_cols = layout.visible_cols()
    visible_rows = layout.visible_rows()

    out: list[str] = []
    out.append(f'<table class="xl" style="width:{ROW_HEADER_WIDTH + layout.grid_width}px;">')
    out.append("<colgroup>")
    out.append(f'<col style="width:{ROW_HEADER_WIDTH}px">')
    for col in visible_cols:
        out.append(f'<col style="width:{layout.col_widths[col - 1]}px">')
    out.append("</colgroup>")
    out.append("<thead>")
    out.append(f'<tr style="height:{COL_HEADER_HEIGHT}px">')
    out.append('<th class="xl-corner"></th>')
    for col in visible_cols:
        out.append(f'<th class="xl-col" data-col="{col}">{index_to_col(col)}</th>')
    out.append("</tr>")
    out.append("</thead>")
    out.append("<tbody>")

    for row in visible_rows:
        out.append(f'<tr style="height:{layout.row_heights[row - 1]}px">')
        out.append(f'<th class="xl-row" data-row="{row}">{row}</th>')
        for col in visible_cols:
            ref = rowcol_to_ref(row, col)
            if ref in layout.covered:
                continue

            attrs = [f'data-ref="{ref}"']
            span = layout.merges.get(ref)
            if span is not None:
                if span.rowspan > 1:
                    attrs.append(f'rowspan="{span.rowspan}"')
                if span.colspan > 1:
                    attrs.append(f'colspan="{span.colspan}"')
                attrs.append(f'data-merge="{html_escape(span.ref)}"')

            cell = _cell_at(sheet, row, col)
            style_css = cell_style_css(cell.style) if cell is not None and cell.style is not None else ""
            if style_css:
                attrs.append(f'style="{html_escape(style_css)}"')
            if cell is not None and cell.formula:
                attrs.append(f'data-formula="{html_escape(cell.formula)}"')

            text = html_escape(cell.value) if cell is not None else ""
            out.append(f"<td {' '.join(attrs)}>{text}</td>")
        out.append("</tr>")

    out.append("</tbody>")
    out.append("</table>")
    return out


def _cell_at(sheet: WorkSheet, row: int, col: int) -> CellData | None:
    if row > len(sheet.data):
        return None
    cells = sheet.data[row - 1]
    if col > len(cells):
        return None
    return cells[col - 1]


def cell_style_css(style: CellStyle) -> str:
    pieces: list[str] = []
    if style.font_name:
        pieces.append(f"font-family:'{style.font_name}'")
    if style.font_size:
        pieces.append(f"font-size:{style.font_size:g}pt")
    if style.font_color:
        pieces.append(f"color:{style.font_color}")
    if style.bold:
        pieces.append("font-weight:bold")
    if style.italic:
        pieces.append("font-style:italic")
    if style.underline:
        pieces.append("text-decoration:underline")
    if style.pattern_type and style.pattern_type != "none" and style.fg_color:
        pieces.append(f"background-color:{style.fg_color}")

    horizontal = HORIZONTAL_ALIGN.get(style.horizontal)
    if horizontal:
        pieces.append(f"text-align:{horizontal}")
    pieces.append(f"vertical-align:{VERTICAL_ALIGN.get(style.vertical, 'bottom')}")
    pieces.append("white-space:pre-wrap" if style.wrap_text else "white-space:pre")

    for side in ("top", "right", "bottom", "left"):
        edge_css = _border_css(getattr(style.border, side))
        if edge_css:
            pieces.append(f"border-{side}:{edge_css}")
    return ";".join(pieces) + ";"


def _border_css(edge: BorderEdge) -> str:
    stroke = BORDER_STYLES.get(edge.style)
    if stroke is None:
        return ""
    return f"{stroke} {edge.color or '#000000'}"


def _overlay_html(layout: SheetLayout) -> list[str]:
    lines: list[str] = []
    lines.append(
        '<div class="xl-drawings" style="position:absolute;left:0;top:0;'
        f'width:{layout.total_width}px;height:{layout.total_height}px;">'
    )
    for z, box in enumerate(layout.drawings, start=10):
        lines.append(_drawing_html(box, z))
    lines.append("</div>")
    return lines


def _box_style(box: DrawingBox, z_index: int) -> str:
    return (
        f"position:absolute;left:{box.left}px;top:{box.top}px;"
        f"width:{box.width}px;height:{box.height}px;z-index:{z_index};"
    )


def _line_px(width_emu: int) -> int:
    return max(1, emu_to_px(width_emu))


def _drawing_html(box: DrawingBox, z_index: int) -> str:
    drawing = box.drawing
    props = drawing.properties
    attrs = (
        f'class="xl-drawing xl-{drawing.type}" data-drawing-id="{html_escape(drawing.id)}" '
        f'data-anchor="{drawing.anchor_type}"'
    )
    style = _box_style(box, z_index)
    label = html_escape(drawing.description or drawing.title or drawing.name)

    if isinstance(props, ImageProperties):
        if not drawing.base64:
            return f'<div {attrs} style="{style}"></div>'
        mime = mimetypes.guess_type(drawing.media_name)[0] or "application/octet-stream"
        return (
            f'<div {attrs} style="{style}">'
            f'<img src="data:{mime};base64,{drawing.base64}" alt="{label}" '
            'style="width:100%;height:100%;">'
            "</div>"
        )

    if isinstance(props, TextboxProperties):
        pieces = [style, "white-space:pre-wrap;", f"text-align:{props.text_align};"]
        if props.font_pt:
            pieces.append(f"font-size:{props.font_pt:g}pt;")
        if props.bold:
            pieces.append("font-weight:bold;")
        if props.italic:
            pieces.append("font-style:italic;")
        if props.text_color:
            pieces.append(f"color:{props.text_color};")
        pieces.append(_fill_and_line(props.fill_color, props.line_color, props.line_width))
        return f'<div {attrs} style="{"".join(pieces)}">{html_escape(props.text)}</div>'

    if isinstance(props, ShapeProperties):
        pieces = [style, _fill_and_line(props.fill_color, props.line_color, props.line_width)]
        radius = ROUNDED_SHAPES.get(props.shape_type)
        if radius:
            pieces.append(f"border-radius:{radius};")
        return f'<div {attrs} data-shape="{html_escape(props.shape_type)}" style="{"".join(pieces)}"></div>'

    if isinstance(props, ConnectorProperties):
        x1, x2 = (box.width, 0) if props.flip_h else (0, box.width)
        y1, y2 = (box.height, 0) if props.flip_v else (0, box.height)
        stroke = props.line_color or "#000000"
        return (
            f'<div {attrs} style="{style}">'
            f'<svg width="{box.width}" height="{box.height}" viewBox="0 0 {box.width} {box.height}">'
            f'<line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" '
            f'stroke="{stroke}" stroke-width="{_line_px(props.line_width)}" />'
            "</svg>"
            "</div>"
        )

    return f'<div {attrs} style="{style}"></div>'


def _fill_and_line(fill_color: str, line_color: str, line_width: int) -> str:
    pieces = [f"background:{fill_color};" if fill_color else "background:transparent;"]
    if line_color:
        pieces.append(f"border:{_line_px(line_width)}px solid {line_color};")
    return "".join(pieces)


def _html_css() -> str:
    return """<style>
* { box-sizing: border-box; }
body { margin: 0; background: #fff; color: #111827; font: 14px/1.5 -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; }
.page { max-width: 99vw; margin: 0 auto; padding: 18px 14px 80px; }
h1 { margin: 0 0 12px; font-size: 24px; }
h2 { margin: 28px 0 10px; font-size: 18px; }
.xl-wrap { border: 1px solid #d0d7de; overflow: auto; }
.xl-sheet { position: relative; }
table.xl { border-collapse: collapse; table-layout: fixed; font: 11pt/1.2 Calibri, sans-serif; }
table.xl td { border: 1px solid #e5e7eb; padding: 0 2px; overflow: hidden; vertical-align: bottom; }
table.xl th { background: #edf2f7; border: 1px solid #bcc6d4; color: #374151; font: 11px/1.2 'SF Mono', Menlo, Consolas, monospace; text-align: center; }
.xl-drawings { position: absolute; left: 0; top: 0; pointer-events: none; }
.xl-drawing { position: absolute; overflow: hidden; }
.xl-drawing svg { overflow: visible; }
</style>"""
