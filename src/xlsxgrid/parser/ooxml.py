from __future__ import annotations

import base64
import logging
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import PackageError
from ..model import (
    DrawingFile,
    MediaFile,
    ParseOptions,
    StyleSheet,
    ThemeColor,
    Workbook,
    WorkSheet,
)
from .drawing import parse_drawing
from .package import PartReader, ZipPartReader
from .shared_strings import parse_shared_strings
from .styles import parse_styles
from .theme import parse_theme
from .utils import rels_path_for, resolve_target
from .worksheet import parse_worksheet
from .xmlquery import parse_xml

logger = logging.getLogger(__name__)

WORKBOOK_PATH = "xl/workbook.xml"
WORKBOOK_RELS_PATH = "xl/_rels/workbook.xml.rels"
SHARED_STRINGS_PATH = "xl/sharedStrings.xml"
THEME_PATH = "xl/theme/theme1.xml"
STYLES_PATH = "xl/styles.xml"
MEDIA_PREFIX = "xl/media/"

DRAWING_RE = re.compile(r"^xl/drawings/[^/]+\.xml$")
WORKSHEET_RE = re.compile(r"^xl/worksheets/sheet(\d+)\.xml$")


@dataclass(slots=True)
class _SheetRef:
    index: int
    sheet_id: int
    name: str
    state: str
    path: str


class XlsxWorkbookParser:
    """Decode a spreadsheet package part by part.

    Catalogs are read once, in dependency order: workbook, shared strings,
    theme, styles, media, drawings, then every worksheet.
    """

    def __init__(self, reader: PartReader, options: ParseOptions | None = None) -> None:
        self.reader = reader
        self.options = options or ParseOptions()
        self._names = reader.names()

    def parse(self) -> Workbook:
        workbook_xml = self.reader.read_text(WORKBOOK_PATH)
        if workbook_xml is None:
            raise PackageError(f"Missing workbook part: {WORKBOOK_PATH}")

        workbook = Workbook(options=self.options)
        sheet_refs = self._parse_sheet_refs(workbook_xml)
        for ref in sheet_refs:
            workbook.sheets.append(WorkSheet(id=ref.sheet_id, name=ref.name, state=ref.state, path=ref.path))

        shared_strings = parse_shared_strings(self.reader.read_text(SHARED_STRINGS_PATH))

        themes: list[ThemeColor] = []
        style_sheet = StyleSheet()
        if self.options.styles:
            themes = parse_theme(self.reader.read_text(THEME_PATH))
            if not themes:
                logger.debug("No theme colors found in %s", THEME_PATH)
            style_sheet = parse_styles(self.reader.read_text(STYLES_PATH), themes)

        drawing_files: list[DrawingFile] | None = None
        if self.options.drawings:
            media = self._load_media()
            drawing_files = self._parse_drawings(media, themes)

        for ref, sheet in zip(sheet_refs, workbook.sheets):
            self._parse_sheet(ref, sheet, style_sheet, shared_strings, drawing_files, workbook.warnings)

        logger.debug("Decoded %d sheets", len(workbook.sheets))
        return workbook

    def _load_relationships(self, path: str) -> dict[str, tuple[str, str]]:
        rels: dict[str, tuple[str, str]] = {}
        for rel in parse_xml(self.reader.read_text(path)).children("Relationship"):
            rel_id = rel.attr("Id")
            target = rel.attr("Target")
            if rel_id and target:
                rels[rel_id] = (rel.attr("Type"), target)
        return rels

    def _parse_sheet_refs(self, workbook_xml: str) -> list[_SheetRef]:
        root = parse_xml(workbook_xml)
        wb_rels = self._load_relationships(WORKBOOK_RELS_PATH)
        fallback_paths = sorted(
            (name for name in self._names if WORKSHEET_RE.match(name)),
            key=lambda name: int(WORKSHEET_RE.match(name).group(1)),
        )

        sheet_refs: list[_SheetRef] = []
        for idx, sheet in enumerate(root.find("sheets").children("sheet")):
            rel = wb_rels.get(sheet.attr("r:id"))
            if rel is not None:
                path = resolve_target(WORKBOOK_PATH, rel[1])
            elif idx < len(fallback_paths):
                path = fallback_paths[idx]
            else:
                path = ""
            try:
                sheet_id = int(sheet.attr("sheetId", "0"))
            except ValueError:
                sheet_id = 0
            sheet_refs.append(
                _SheetRef(
                    index=idx,
                    sheet_id=sheet_id,
                    name=sheet.attr("name"),
                    state=sheet.attr("state", "visible"),
                    path=path,
                )
            )
        return sheet_refs

    def _load_media(self) -> list[MediaFile]:
        media: list[MediaFile] = []
        for path in self._names:
            if not path.startswith(MEDIA_PREFIX) or path.endswith("/"):
                continue
            payload = self.reader.read_bytes(path)
            if payload is None:
                continue
            media.append(MediaFile(name=posixpath.basename(path), base64=base64.b64encode(payload).decode("ascii")))
        return media

    def _parse_drawings(self, media: list[MediaFile], themes: list[ThemeColor]) -> list[DrawingFile]:
        drawing_files: list[DrawingFile] = []
        for path in self._names:
            if not DRAWING_RE.match(path):
                continue
            xml = self.reader.read_text(path)
            if xml is None:
                continue
            rels_xml = self.reader.read_text(rels_path_for(path))
            drawing_files.append(
                DrawingFile(
                    src=posixpath.basename(path),
                    drawings=parse_drawing(xml, rels_xml, media, themes),
                )
            )
        return drawing_files

    def _parse_sheet(
        self,
        ref: _SheetRef,
        sheet: WorkSheet,
        style_sheet: StyleSheet,
        shared_strings: list[str],
        drawing_files: list[DrawingFile] | None,
        warnings: list[str],
    ) -> None:
        xml = self.reader.read_text(ref.path) if ref.path else None
        if xml is None:
            warnings.append(f"Missing worksheet part for sheet {ref.name!r}: {ref.path or '(unresolved)'}")
            logger.warning("Missing worksheet part for sheet %r", ref.name)
            return

        content = parse_worksheet(
            xml,
            self.reader.read_text(rels_path_for(ref.path)),
            style_sheet,
            shared_strings,
            drawing_files,
            dense=self.options.dense,
            skip_hidden_rows=self.options.skip_hidden_rows,
        )
        sheet.dimension = content.dimension
        sheet.data = content.data
        sheet.column_styles = content.column_styles
        sheet.row_styles = content.row_styles
        sheet.merge_cells = content.merge_cells
        sheet.default_col_width = content.default_col_width
        sheet.default_row_height = content.default_row_height
        sheet.zero_height = content.zero_height
        sheet.drawings = content.drawings
        if style_sheet.fonts:
            default_font = style_sheet.fonts[0]
            sheet.default_font_name = default_font.name or sheet.default_font_name
            sheet.default_font_size = default_font.size or sheet.default_font_size
        if content.missing_drawing:
            warnings.append(f"Missing drawing part for sheet {ref.name!r}: {content.missing_drawing}")


def read_xlsx(
    source: bytes | str | Path | PartReader,
    options: ParseOptions | None = None,
) -> Workbook:
    if isinstance(source, (bytes, bytearray, str, Path)):
        with ZipPartReader(source) as reader:
            return XlsxWorkbookParser(reader, options).parse()
    return XlsxWorkbookParser(source, options).parse()
