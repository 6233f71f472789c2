from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .api import convert_xlsx_to_html
from .exceptions import XlsxGridError
from .model import ParseOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render .xlsx worksheets as positioned HTML")
    parser.add_argument("input", type=Path, help="Input .xlsx file")
    parser.add_argument("-o", "--output", type=Path, help="Output path (default: stdout)")
    parser.add_argument("--sheet", type=int, default=None, metavar="N", help="Render only sheet N (0-based)")
    parser.add_argument("--dense", action="store_true", help="Fill empty grid slots with placeholder cells")
    parser.add_argument(
        "--styles",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Decode theme and cell styles",
    )
    parser.add_argument(
        "--drawings",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Decode drawings and embedded media",
    )
    parser.add_argument("--skip-hidden-rows", action="store_true", help="Drop hidden and collapsed rows")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(debug: bool) -> None:
    logger = logging.getLogger("xlsxgrid")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.ERROR)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.debug)

    options = ParseOptions(
        dense=args.dense,
        styles=args.styles,
        drawings=args.drawings,
        skip_hidden_rows=args.skip_hidden_rows,
    )
    try:
        html = convert_xlsx_to_html(args.input, options=options, sheet=args.sheet)
    except (XlsxGridError, IndexError, OSError) as exc:
        print(f"{args.input}: {exc}", file=sys.stderr)
        return 1

    if args.output is None:
        sys.stdout.write(html)
    else:
        args.output.write_text(html, encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
