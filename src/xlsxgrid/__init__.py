from .api import convert_sheet_to_html, convert_xlsx_to_html, read_xlsx
from .exceptions import PackageError, ReferenceFormatError, XlsxGridError
from .layout import DigitWidthCache, layout_sheet
from .model import CellData, Drawing, ParseOptions, Workbook, WorkSheet
from .render_html import render_sheet_html, render_workbook_document, render_workbook_html

__all__ = [
    "CellData",
    "DigitWidthCache",
    "Drawing",
    "PackageError",
    "ParseOptions",
    "ReferenceFormatError",
    "Workbook",
    "WorkSheet",
    "XlsxGridError",
    "convert_sheet_to_html",
    "convert_xlsx_to_html",
    "layout_sheet",
    "read_xlsx",
    "render_sheet_html",
    "render_workbook_document",
    "render_workbook_html",
]
