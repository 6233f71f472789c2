from __future__ import annotations

import logging

import pytest

from xlsxgrid.cli import build_parser, main


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("xlsxgrid")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def test_defaults() -> None:
    args = build_parser().parse_args(["book.xlsx"])

    assert args.styles and args.drawings
    assert not args.dense and not args.skip_hidden_rows
    assert args.sheet is None
    assert args.output is None


def test_negated_flags() -> None:
    args = build_parser().parse_args(["book.xlsx", "--no-styles", "--no-drawings", "--sheet", "1"])
    assert not args.styles and not args.drawings
    assert args.sheet == 1


def test_writes_output_file(sample_file, tmp_path) -> None:
    out = tmp_path / "out.html"
    assert main([str(sample_file), "-o", str(out)]) == 0

    html = out.read_text(encoding="utf-8")
    assert '<table class="xl"' in html
    assert "data:image/png;base64," in html


def test_writes_stdout(sample_file, capsys) -> None:
    assert main([str(sample_file), "--sheet", "1", "--no-drawings"]) == 0

    captured = capsys.readouterr()
    assert 'data-sheet="Notes"' in captured.out
    assert 'data-sheet="Summary"' not in captured.out


def test_no_drawings_flag(sample_file, capsys) -> None:
    assert main([str(sample_file), "--no-drawings"]) == 0
    assert "<img" not in capsys.readouterr().out


def test_errors_exit_non_zero(tmp_path, sample_file, capsys) -> None:
    bogus = tmp_path / "bogus.xlsx"
    bogus.write_bytes(b"nope")

    assert main([str(bogus)]) == 1
    assert main([str(sample_file), "--sheet", "9"]) == 1
    assert "out of range" in capsys.readouterr().err


def test_debug_flag_sets_package_level(sample_file, capsys) -> None:
    main([str(sample_file), "--debug"])
    logger = logging.getLogger("xlsxgrid")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
