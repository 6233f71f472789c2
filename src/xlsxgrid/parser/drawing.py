from __future__ import annotations

import logging
import posixpath
from typing import Sequence

from ..model import (
    AnchorPosition,
    AnchorType,
    ConnectorProperties,
    Drawing,
    DrawingPosition,
    DrawingProperties,
    DrawingType,
    EmuPoint,
    EmuSize,
    GroupProperties,
    ImageProperties,
    MediaFile,
    ShapeProperties,
    TextboxProperties,
    ThemeColor,
    UnknownProperties,
)
from .colors import drawing_color
from .xmlquery import XmlNode, parse_xml

logger = logging.getLogger(__name__)

ANCHOR_TYPES: dict[str, AnchorType] = {
    "twoCellAnchor": "twoCell",
    "oneCellAnchor": "oneCell",
    "absoluteAnchor": "absolute",
}

# Checked in this order; the first child present decides the object type.
OBJECT_TYPES: tuple[tuple[str, DrawingType], ...] = (
    ("pic", "image"),
    ("sp", "shape"),
    ("cxnSp", "connector"),
    ("grpSp", "group"),
)

TEXT_ALIGN = {"ctr": "center", "r": "right"}


def _to_int(raw: str, default: int = 0) -> int:
    try:
        return int(raw)
    except ValueError:
        return default


def parse_drawing(
    xml: str | bytes,
    rels_xml: str | bytes | None,
    media: Sequence[MediaFile],
    themes: Sequence[ThemeColor] = (),
) -> list[Drawing]:
    root = parse_xml(xml)
    rel_map = _load_relationship_map(parse_xml(rels_xml))
    media_map = {m.name: m for m in media}

    drawings: list[Drawing] = []
    for anchor in root.children():
        anchor_type = ANCHOR_TYPES.get(anchor.tag)
        if anchor_type is None:
            continue
        drawings.append(_parse_anchor(anchor, anchor_type, rel_map, media_map, themes))
    return drawings


def _load_relationship_map(rels: XmlNode) -> dict[str, str]:
    rel_map: dict[str, str] = {}
    for rel in rels.children("Relationship"):
        rel_id = rel.attr("Id")
        if rel_id:
            rel_map[rel_id] = rel.attr("Target")
    return rel_map


def _classify(anchor: XmlNode) -> tuple[DrawingType, XmlNode]:
    for tag, drawing_type in OBJECT_TYPES:
        container = anchor.child(tag)
        if not container:
            continue
        if drawing_type == "shape" and container.find("xdr:txBody"):
            return "textbox", container
        return drawing_type, container

    txbx = anchor.find("xdr:txbx")
    if txbx:
        return "textbox", txbx
    return "unknown", XmlNode(None)


def _parse_position(elem: XmlNode) -> AnchorPosition:
    return AnchorPosition(
        col=_to_int(elem.find("xdr:col").text.strip() or "0"),
        col_off=_to_int(elem.find("xdr:colOff").text.strip() or "0"),
        row=_to_int(elem.find("xdr:row").text.strip() or "0"),
        row_off=_to_int(elem.find("xdr:rowOff").text.strip() or "0"),
    )


def _parse_anchor(
    anchor: XmlNode,
    anchor_type: AnchorType,
    rel_map: dict[str, str],
    media_map: dict[str, MediaFile],
    themes: Sequence[ThemeColor],
) -> Drawing:
    drawing_type, container = _classify(anchor)

    c_nv_pr = anchor.find("xdr:cNvPr")

    from_elem = anchor.child("xdr:from")
    to_elem = anchor.child("xdr:to")
    from_pos = _parse_position(from_elem)
    to_pos = _parse_position(to_elem if to_elem else from_elem)

    size_emu: EmuSize | None = None
    abs_emu: EmuPoint | None = None
    ext = anchor.child("xdr:ext")
    if anchor_type in {"oneCell", "absolute"} and ext:
        size_emu = EmuSize(cx=_to_int(ext.attr("cx", "0")), cy=_to_int(ext.attr("cy", "0")))
    pos = anchor.child("xdr:pos")
    if anchor_type == "absolute" and pos:
        abs_emu = EmuPoint(x=_to_int(pos.attr("x", "0")), y=_to_int(pos.attr("y", "0")))

    # an explicit shape transform beats both the anchor extent and from/to
    xfrm_ext = container.find("a:xfrm").find("a:ext")
    if xfrm_ext:
        cx = _to_int(xfrm_ext.attr("cx", "0"))
        cy = _to_int(xfrm_ext.attr("cy", "0"))
        if cx > 0 or cy > 0:
            size_emu = EmuSize(cx=cx, cy=cy)

    base64_payload = ""
    media_name = ""
    embed_id = anchor.find("a:blip").attr("r:embed")
    if embed_id:
        target = rel_map.get(embed_id, "")
        media_name = posixpath.basename(target) if target else ""
        media_file = media_map.get(media_name)
        if media_file is not None:
            base64_payload = media_file.base64
        else:
            logger.debug("Unresolved image relationship %s (target %r)", embed_id, target)

    if drawing_type == "unknown":
        logger.debug("Unrecognised drawing object in %s anchor", anchor_type)

    return Drawing(
        id=c_nv_pr.attr("id"),
        name=c_nv_pr.attr("name"),
        title=c_nv_pr.attr("title"),
        description=c_nv_pr.attr("descr"),
        type=drawing_type,
        anchor_type=anchor_type,
        position=DrawingPosition(from_=from_pos, to=to_pos),
        properties=extract_properties(drawing_type, container, themes),
        size_emu=size_emu,
        abs_emu=abs_emu,
        base64=base64_payload,
        media_name=media_name,
    )


def _shape_styles(sp: XmlNode, themes: Sequence[ThemeColor]) -> tuple[str, str, int]:
    sp_pr = sp.find("xdr:spPr")
    fill_color = drawing_color(sp_pr.child("a:solidFill"), themes)
    line = sp_pr.find("a:ln")
    line_color = drawing_color(line.find("a:solidFill"), themes)
    line_width = _to_int(line.attr("w", "0"))

    style = sp.find("xdr:style")
    if not fill_color:
        fill_color = drawing_color(style.find("a:fillRef"), themes)
    if not line_color:
        line_color = drawing_color(style.find("a:lnRef"), themes)
    return fill_color, line_color, line_width


def extract_properties(
    drawing_type: DrawingType,
    container: XmlNode,
    themes: Sequence[ThemeColor],
) -> DrawingProperties:
    if not container:
        return UnknownProperties()

    if drawing_type == "image":
        return ImageProperties(embed_id=container.find("a:blip").attr("r:embed"))

    if drawing_type == "textbox":
        text = "\n".join(t.text for t in container.find_all("a:t"))
        r_pr = container.find("a:rPr")
        sz = r_pr.attr("sz")
        text_color = drawing_color(r_pr.find("a:solidFill"), themes)
        if not text_color:
            text_color = drawing_color(container.find("xdr:style").find("a:fontRef"), themes)
        fill_color, line_color, line_width = _shape_styles(container, themes)
        return TextboxProperties(
            text=text,
            font_pt=_to_int(sz) / 100 if sz else None,
            bold=r_pr.attr("b") in {"1", "true"},
            italic=r_pr.attr("i") in {"1", "true"},
            text_color=text_color,
            text_align=TEXT_ALIGN.get(container.find("a:pPr").attr("algn"), "left"),
            fill_color=fill_color,
            line_color=line_color,
            line_width=line_width,
        )

    if drawing_type == "shape":
        fill_color, line_color, line_width = _shape_styles(container, themes)
        return ShapeProperties(
            fill_color=fill_color,
            shape_type=container.find("a:prstGeom").attr("prst") or "custom",
            line_color=line_color,
            line_width=line_width,
        )

    if drawing_type == "connector":
        line = container.find("a:ln")
        xfrm = container.find("a:xfrm")
        return ConnectorProperties(
            line_color=drawing_color(line.find("a:solidFill"), themes),
            line_width=_to_int(line.attr("w", "0")),
            flip_h=xfrm.attr("flipH") in {"1", "true"},
            flip_v=xfrm.attr("flipV") in {"1", "true"},
        )

    if drawing_type == "group":
        return GroupProperties()

    return UnknownProperties()
