from __future__ import annotations

from pathlib import Path

import pytest

from xlsxgrid.layout import DigitWidthCache

from tests.helpers import build_sample_workbook, fixed_digit_width


@pytest.fixture
def digit_widths() -> DigitWidthCache:
    return DigitWidthCache(fixed_digit_width)


@pytest.fixture(scope="session")
def sample_bytes() -> bytes:
    return build_sample_workbook()


@pytest.fixture(scope="session")
def sample_file(tmp_path_factory, sample_bytes) -> Path:
    path = tmp_path_factory.mktemp("workbooks") / "sample.xlsx"
    path.write_bytes(sample_bytes)
    return path
