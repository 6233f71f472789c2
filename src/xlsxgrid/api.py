from __future__ import annotations

from pathlib import Path

from .layout import DigitWidthCache
from .model import ParseOptions, Workbook
from .parser.ooxml import read_xlsx as _read_xlsx
from .parser.package import PartReader
from .render_html import render_workbook_document, render_workbook_html


def read_xlsx(
    source: bytes | str | Path | PartReader,
    *,
    options: ParseOptions | None = None,
) -> Workbook:
    return _read_xlsx(source, options or ParseOptions())


def convert_xlsx_to_html(
    source: bytes | str | Path | PartReader,
    *,
    options: ParseOptions | None = None,
    sheet: int | None = None,
    digit_widths: DigitWidthCache | None = None,
) -> str:
    """Decode ``source`` and render it as a standalone HTML document.

    Styles and drawings are decoded unless ``options`` says otherwise. When
    ``sheet`` is given only that sheet (0-based) is rendered.
    """
    opts = options or ParseOptions(styles=True, drawings=True)
    workbook = _read_xlsx(source, opts)
    title = Path(source).name if isinstance(source, (str, Path)) else "Workbook"
    indices = None if sheet is None else [sheet]
    if sheet is not None and not 0 <= sheet < len(workbook.sheets):
        raise IndexError(f"Sheet index {sheet} out of range (workbook has {len(workbook.sheets)} sheets)")
    return render_workbook_document(workbook, title=title, digit_widths=digit_widths, sheet_indices=indices)


def convert_sheet_to_html(
    source: bytes | str | Path | PartReader,
    index: int = 0,
    *,
    options: ParseOptions | None = None,
    digit_widths: DigitWidthCache | None = None,
) -> str:
    opts = options or ParseOptions(styles=True, drawings=True)
    return render_workbook_html(_read_xlsx(source, opts), index, digit_widths)
