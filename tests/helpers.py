from __future__ import annotations

import io
from zipfile import ZIP_DEFLATED, ZipFile

SPREADSHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
OFFICE_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
SHEET_DRAWING_NS = "http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing"
DRAWING_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"

WORKSHEET_REL = f"{OFFICE_REL_NS}/worksheet"
DRAWING_REL = f"{OFFICE_REL_NS}/drawing"
IMAGE_REL = f"{OFFICE_REL_NS}/image"

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d4944415478da63f8ffff3f0005fe02fea7d6a4f50000000049454e44ae426082"
)


def worksheet_xml(body: str, *, dimension: str | None = None, head: str = "", tail: str = "") -> str:
    dim = f'<dimension ref="{dimension}"/>' if dimension else ""
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{SPREADSHEET_NS}" xmlns:r="{OFFICE_REL_NS}">'
        f"{dim}{head}<sheetData>{body}</sheetData>{tail}</worksheet>"
    )


def shared_strings_xml(*items: str) -> str:
    body = "".join(f"<si><t>{item}</t></si>" for item in items)
    return f'<sst xmlns="{SPREADSHEET_NS}" count="{len(items)}" uniqueCount="{len(items)}">{body}</sst>'


def rels_xml(*rels: tuple[str, str, str]) -> str:
    body = "".join(f'<Relationship Id="{rid}" Type="{rtype}" Target="{target}"/>' for rid, rtype, target in rels)
    return f'<Relationships xmlns="{PACKAGE_REL_NS}">{body}</Relationships>'


def drawing_xml(*anchors: str) -> str:
    return (
        f'<xdr:wsDr xmlns:xdr="{SHEET_DRAWING_NS}" xmlns:a="{DRAWING_NS}" xmlns:r="{OFFICE_REL_NS}">'
        f"{''.join(anchors)}</xdr:wsDr>"
    )


def anchor_position(tag: str, col: int, row: int, col_off: int = 0, row_off: int = 0) -> str:
    return (
        f"<xdr:{tag}><xdr:col>{col}</xdr:col><xdr:colOff>{col_off}</xdr:colOff>"
        f"<xdr:row>{row}</xdr:row><xdr:rowOff>{row_off}</xdr:rowOff></xdr:{tag}>"
    )


def picture_xml(object_id: int = 2, name: str = "Picture 1", embed: str = "rId1", descr: str = "") -> str:
    return (
        f'<xdr:pic><xdr:nvPicPr><xdr:cNvPr id="{object_id}" name="{name}" descr="{descr}"/></xdr:nvPicPr>'
        f'<xdr:blipFill><a:blip r:embed="{embed}"/></xdr:blipFill>'
        '<xdr:spPr><a:prstGeom prst="rect"/></xdr:spPr></xdr:pic>'
    )


def build_xlsx(
    sheets: list[tuple[str, str]],
    *,
    shared_strings: str | None = None,
    styles: str | None = None,
    theme: str | None = None,
    extra_parts: dict[str, str | bytes] | None = None,
    sheet_rels: dict[int, str] | None = None,
    workbook_rels: bool = True,
) -> bytes:
    """Build a minimal in-memory package; ``sheets`` holds ``(name, worksheet_xml)`` pairs."""
    sheet_entries = "".join(
        f'<sheet name="{name}" sheetId="{idx}" r:id="rId{idx}"/>' for idx, (name, _) in enumerate(sheets, start=1)
    )
    workbook = (
        f'<workbook xmlns="{SPREADSHEET_NS}" xmlns:r="{OFFICE_REL_NS}">'
        f"<sheets>{sheet_entries}</sheets></workbook>"
    )

    buffer = io.BytesIO()
    with ZipFile(buffer, "w", ZIP_DEFLATED) as zf:
        zf.writestr("xl/workbook.xml", workbook)
        if workbook_rels:
            zf.writestr(
                "xl/_rels/workbook.xml.rels",
                rels_xml(
                    *(
                        (f"rId{idx}", WORKSHEET_REL, f"worksheets/sheet{idx}.xml")
                        for idx in range(1, len(sheets) + 1)
                    )
                ),
            )
        for idx, (_, xml) in enumerate(sheets, start=1):
            zf.writestr(f"xl/worksheets/sheet{idx}.xml", xml)
        for idx, xml in (sheet_rels or {}).items():
            zf.writestr(f"xl/worksheets/_rels/sheet{idx}.xml.rels", xml)
        if shared_strings is not None:
            zf.writestr("xl/sharedStrings.xml", shared_strings)
        if styles is not None:
            zf.writestr("xl/styles.xml", styles)
        if theme is not None:
            zf.writestr("xl/theme/theme1.xml", theme)
        for path, payload in (extra_parts or {}).items():
            zf.writestr(path, payload)
    return buffer.getvalue()


def fixed_digit_width(font_name: str, font_size: float) -> float:
    return 7.0


THEME_XML = (
    f'<a:theme xmlns:a="{DRAWING_NS}" name="Office Theme"><a:themeElements><a:clrScheme name="Office">'
    '<a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>'
    '<a:lt1><a:sysClr val="window" lastClr="FFFFFF"/></a:lt1>'
    '<a:dk2><a:srgbClr val="44546A"/></a:dk2>'
    '<a:lt2><a:srgbClr val="E7E6E6"/></a:lt2>'
    '<a:accent1><a:srgbClr val="4472C4"/></a:accent1>'
    '<a:accent2><a:srgbClr val="ED7D31"/></a:accent2>'
    '<a:accent3><a:srgbClr val="A5A5A5"/></a:accent3>'
    '<a:accent4><a:srgbClr val="FFC000"/></a:accent4>'
    '<a:accent5><a:srgbClr val="5B9BD5"/></a:accent5>'
    '<a:accent6><a:srgbClr val="70AD47"/></a:accent6>'
    '<a:hlink><a:srgbClr val="0563C1"/></a:hlink>'
    '<a:folHlink><a:srgbClr val="954F72"/></a:folHlink>'
    "</a:clrScheme></a:themeElements></a:theme>"
)

STYLES_XML = (
    f'<styleSheet xmlns="{SPREADSHEET_NS}">'
    '<fonts count="3">'
    '<font><sz val="11"/><color theme="1"/><name val="Calibri"/><family val="2"/></font>'
    '<font><b/><i/><u/><sz val="14"/><color rgb="FFFF0000"/><name val="Arial"/></font>'
    '<font><sz val="10"/><color theme="4" tint="0.5"/><name val="Calibri"/></font>'
    "</fonts>"
    '<fills count="3">'
    '<fill><patternFill patternType="none"/></fill>'
    '<fill><patternFill patternType="gray125"/></fill>'
    '<fill><patternFill patternType="solid"><fgColor indexed="5"/><bgColor indexed="64"/></patternFill></fill>'
    "</fills>"
    '<borders count="2">'
    "<border><left/><right/><top/><bottom/><diagonal/></border>"
    '<border><left style="thin"><color indexed="64"/></left><right/><top/>'
    '<bottom style="medium"><color rgb="FF0000FF"/></bottom><diagonal/></border>'
    "</borders>"
    '<cellXfs count="5">'
    '<xf numFmtId="0" fontId="0" fillId="0" borderId="0" xfId="0"/>'
    '<xf numFmtId="14" fontId="0" fillId="0" borderId="0" xfId="0" applyNumberFormat="1"/>'
    '<xf numFmtId="0" fontId="1" fillId="2" borderId="1" xfId="0">'
    '<alignment horizontal="center" vertical="center" wrapText="1"/></xf>'
    '<xf numFmtId="0" fontId="2" fillId="0" borderId="0" xfId="0"/>'
    '<xf numFmtId="0" fontId="9" fillId="9" borderId="9" xfId="0"/>'
    "</cellXfs>"
    "</styleSheet>"
)


def make_drawing(
    anchor_type: str = "twoCell",
    start: tuple[int, int] = (0, 0),
    end: tuple[int, int] | None = None,
    *,
    size: tuple[int, int] | None = None,
    offset: tuple[int, int] | None = None,
    properties=None,
    drawing_type: str | None = None,
    base64: str = "",
    media_name: str = "",
):
    """Build a ``Drawing`` from ``(col, row)`` pairs and EMU sizes."""
    from xlsxgrid.model import (
        AnchorPosition,
        Drawing,
        DrawingPosition,
        EmuPoint,
        EmuSize,
        ImageProperties,
    )

    props = properties if properties is not None else ImageProperties(embed_id="rId1")
    from_pos = AnchorPosition(col=start[0], row=start[1])
    to_pos = AnchorPosition(col=end[0], row=end[1]) if end is not None else AnchorPosition(col=start[0], row=start[1])
    kind = drawing_type or {
        "ImageProperties": "image",
        "TextboxProperties": "textbox",
        "ShapeProperties": "shape",
        "ConnectorProperties": "connector",
        "GroupProperties": "group",
    }.get(type(props).__name__, "unknown")
    return Drawing(
        id="1",
        name="Object 1",
        title="",
        description="",
        type=kind,
        anchor_type=anchor_type,
        position=DrawingPosition(from_=from_pos, to=to_pos),
        properties=props,
        size_emu=EmuSize(cx=size[0], cy=size[1]) if size is not None else None,
        abs_emu=EmuPoint(x=offset[0], y=offset[1]) if offset is not None else None,
        base64=base64,
        media_name=media_name,
    )


def without_parts(payload: bytes, *names: str) -> bytes:
    buffer = io.BytesIO()
    with ZipFile(io.BytesIO(payload)) as src, ZipFile(buffer, "w", ZIP_DEFLATED) as dst:
        for info in src.infolist():
            if info.filename not in names:
                dst.writestr(info, src.read(info.filename))
    return buffer.getvalue()


def build_sample_workbook() -> bytes:
    """Two sheets with styles, a hidden row, a merge, a picture and a textbox."""
    summary = worksheet_xml(
        '<row r="1"><c r="A1" s="2" t="s"><v>0</v></c><c r="B1" t="s"><v>1</v></c></row>'
        '<row r="2"><c r="A2" t="inlineStr"><is><t>Widget</t></is></c>'
        '<c r="B2" s="1"><v>45000</v></c><c r="C2" s="0"><f>B2+1</f><v>45001</v></c></row>'
        '<row r="3" hidden="1"><c r="A3" t="inlineStr"><is><t>secret</t></is></c></row>'
        '<row r="4"><c r="A4" t="s"><v>2</v></c></row>',
        dimension="A1:C4",
        head='<sheetFormatPr defaultRowHeight="15"/><cols><col min="2" max="2" width="12" customWidth="1"/></cols>',
        tail='<mergeCells count="1"><mergeCell ref="A4:C4"/></mergeCells><drawing r:id="rId1"/>',
    )
    notes = worksheet_xml('<row r="2"><c r="B2" t="inlineStr"><is><t>n</t></is></c></row>', dimension="B2")

    picture_anchor = (
        "<xdr:oneCellAnchor>"
        f"{anchor_position('from', 3, 0)}"
        '<xdr:ext cx="914400" cy="914400"/>'
        f"{picture_xml(object_id=2, name='Picture 1', descr='Logo')}"
        "<xdr:clientData/></xdr:oneCellAnchor>"
    )
    textbox_anchor = (
        "<xdr:twoCellAnchor>"
        f"{anchor_position('from', 0, 5)}{anchor_position('to', 2, 7)}"
        '<xdr:sp><xdr:nvSpPr><xdr:cNvPr id="3" name="TextBox 2"/></xdr:nvSpPr>'
        '<xdr:spPr><a:prstGeom prst="rect"/><a:solidFill><a:schemeClr val="accent1"/></a:solidFill></xdr:spPr>'
        '<xdr:txBody><a:bodyPr/><a:p><a:r><a:rPr sz="1200"/><a:t>Remember</a:t></a:r></a:p></xdr:txBody>'
        "</xdr:sp><xdr:clientData/></xdr:twoCellAnchor>"
    )

    return build_xlsx(
        [("Summary", summary), ("Notes", notes)],
        shared_strings=shared_strings_xml("Name", "Date", "Total"),
        styles=STYLES_XML,
        theme=THEME_XML,
        sheet_rels={1: rels_xml(("rId1", DRAWING_REL, "../drawings/drawing1.xml"))},
        extra_parts={
            "xl/drawings/drawing1.xml": drawing_xml(picture_anchor, textbox_anchor),
            "xl/drawings/_rels/drawing1.xml.rels": rels_xml(("rId1", IMAGE_REL, "../media/image1.png")),
            "xl/media/image1.png": PNG_BYTES,
        },
    )
