from __future__ import annotations

import copy
import posixpath
import re
from typing import Iterable, TypeVar

from ..exceptions import ReferenceFormatError
from ..model import RangeRef

T = TypeVar("T")

CELL_RE = re.compile(r"^\$?([A-Z]+)\$?(\d+)$")
RANGE_RE = re.compile(r"^\$?([A-Z]+)\$?(\d+):\$?([A-Z]+)\$?(\d+)$")


def col_to_index(col: str) -> int:
    if not col or not col.isalpha():
        raise ReferenceFormatError(f"Invalid column letters: {col!r}")
    value = 0
    for char in col.upper():
        value = value * 26 + (ord(char) - 64)
    return value


def index_to_col(index: int) -> str:
    if index < 1:
        raise ValueError("Column index must be >= 1")
    result: list[str] = []
    value = index
    while value > 0:
        value, rem = divmod(value - 1, 26)
        result.append(chr(65 + rem))
    return "".join(reversed(result))


def parse_cell_ref(ref: str) -> tuple[int, int]:
    """Return the 1-based ``(row, col)`` of an A1-style reference."""
    match = CELL_RE.match(ref.strip())
    if not match or int(match.group(2)) < 1:
        raise ReferenceFormatError(f"Invalid cell reference: {ref!r}")
    return int(match.group(2)), col_to_index(match.group(1))


def rowcol_to_ref(row: int, col: int) -> str:
    if row < 1 or col < 1:
        raise ValueError("row/col must be >= 1")
    return f"{index_to_col(col)}{row}"


def parse_range(ref: str) -> RangeRef:
    normalized = ref.strip().replace("$", "")
    range_match = RANGE_RE.match(normalized)
    if range_match:
        sc = col_to_index(range_match.group(1))
        sr = int(range_match.group(2))
        ec = col_to_index(range_match.group(3))
        er = int(range_match.group(4))
        if sr < 1 or er < 1:
            raise ReferenceFormatError(f"Invalid range reference: {ref!r}")
        return RangeRef(
            ref=normalized,
            start_row=min(sr, er),
            start_col=min(sc, ec),
            end_row=max(sr, er),
            end_col=max(sc, ec),
        )

    try:
        row, col = parse_cell_ref(normalized)
    except ReferenceFormatError:
        raise ReferenceFormatError(f"Invalid range reference: {ref!r}") from None
    return RangeRef(ref=normalized, start_row=row, start_col=col, end_row=row, end_col=col)


def range_span(ref: str) -> tuple[str, int, int]:
    """Return ``(origin, rowspan, colspan)`` for a merge range."""
    rng = parse_range(ref)
    origin = rowcol_to_ref(rng.start_row, rng.start_col)
    return origin, rng.end_row - rng.start_row + 1, rng.end_col - rng.start_col + 1


def expand_range(
    range_ref: str,
    fill_value: T | None = None,
    *,
    from_origin: bool = False,
) -> list[list[T | None]]:
    """Allocate a ``rows x cols`` grid for a range.

    With ``fill_value`` every slot holds its own copy of it; otherwise slots
    are ``None``. ``from_origin`` anchors the grid at A1 whatever the stated
    top-left cell is, which is how worksheet used ranges are addressed.
    """
    rng = parse_range(range_ref)
    first_row = 1 if from_origin else rng.start_row
    first_col = 1 if from_origin else rng.start_col
    rows = rng.end_row - first_row + 1
    cols = rng.end_col - first_col + 1

    grid: list[list[T | None]] = []
    for _ in range(rows):
        if fill_value is None:
            grid.append([None] * cols)
        else:
            grid.append([copy.copy(fill_value) for _ in range(cols)])
    return grid


def infer_dimension(cell_refs: Iterable[str]) -> str:
    min_row = min_col = max_row = max_col = 0
    seen = False
    for ref in cell_refs:
        row, col = parse_cell_ref(ref)
        if not seen:
            min_row = max_row = row
            min_col = max_col = col
            seen = True
            continue
        min_row = min(min_row, row)
        max_row = max(max_row, row)
        min_col = min(min_col, col)
        max_col = max(max_col, col)

    if not seen:
        return ""
    return f"{index_to_col(min_col)}{min_row}:{index_to_col(max_col)}{max_row}"


def iter_cells_in_range(rng: RangeRef) -> Iterable[tuple[int, int]]:
    for row in range(rng.start_row, rng.end_row + 1):
        for col in range(rng.start_col, rng.end_col + 1):
            yield row, col


def resolve_target(base_path: str, target: str) -> str:
    if target.startswith("/"):
        return target[1:]
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(base_path), target))
    if joined.startswith("/"):
        joined = joined[1:]
    return joined


def rels_path_for(part_path: str) -> str:
    if "/" not in part_path:
        return f"_rels/{part_path}.rels"
    prefix, file_name = part_path.rsplit("/", 1)
    return f"{prefix}/_rels/{file_name}.rels"
