"""
Table Slicer - keep only the rows between two marker keys.

Keys are regular expressions searched (not fully matched) against the row
label. The first row matching the start key is the top boundary; the first row
at or below it matching the end key is the bottom boundary. Both boundaries are
inclusive.

Known limitation: when the end key also names a row of a later section (for
example a "Total" row that closes several sub-tables), the first match wins and
the slice may stop earlier than intended. Pick a more specific key instead.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple, Union

from .errors import BoundaryNotFound
from .row_splitter import CellMatrix


MarkerKey = Union[str, "re.Pattern[str]"]


def compile_key(key: MarkerKey) -> "re.Pattern[str]":
    if isinstance(key, re.Pattern):
        return key
    return re.compile(str(key))


def key_text(key: MarkerKey) -> str:
    return key.pattern if isinstance(key, re.Pattern) else str(key)


def drop_empty_rows(matrix: CellMatrix) -> CellMatrix:
    rows = tuple(r for r in matrix.rows if any(str(c).strip() for c in r))
    return CellMatrix(rows=rows, n_values=matrix.n_values)


def _first_match(matrix: CellMatrix, pattern: "re.Pattern[str]", start: int = 0) -> Optional[int]:
    for i in range(start, len(matrix.rows)):
        if pattern.search(matrix.rows[i][0]):
            return i
    return None


def find_bounds(matrix: CellMatrix, start_key: MarkerKey, end_key: MarkerKey) -> Tuple[int, int]:
    """Return inclusive (start, end) row indexes or raise BoundaryNotFound."""
    top = _first_match(matrix, compile_key(start_key))
    if top is None:
        raise BoundaryNotFound("start", key_text(start_key))
    bottom = _first_match(matrix, compile_key(end_key), start=top)
    if bottom is None:
        raise BoundaryNotFound("end", key_text(end_key))
    return top, bottom


def slice_table(matrix: CellMatrix, start_key: MarkerKey, end_key: MarkerKey) -> CellMatrix:
    """Drop fully-empty rows, then keep rows from start_key through end_key."""
    cleaned = drop_empty_rows(matrix)
    top, bottom = find_bounds(cleaned, start_key, end_key)
    return CellMatrix(rows=cleaned.rows[top: bottom + 1], n_values=cleaned.n_values)
