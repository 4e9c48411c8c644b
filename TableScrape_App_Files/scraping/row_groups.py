"""
Row-Group Assembler - recover the section hierarchy of a sliced table.

Survey tables interleave section header rows ("Residence", "Region") with data
rows. A header-only row is one whose value cells are all empty or missing
markers, or whose label matches one of the marker keys. Its label becomes the
row group of itself and every following row until the next header-only row.

Header-only rows without values are dropped after the fill; marker rows that
carry values (a closing "Total" row) stay, grouped under their own label.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .cell_values import DEFAULT_MISSING_MARKERS, CellValue, is_missing, is_missing_raw, parse_cell
from .row_splitter import CellMatrix, compile_value_pattern
from .table_slicer import MarkerKey, compile_key


@dataclass(frozen=True)
class GroupedRow:
    row_group: str
    row_label: str
    values: Tuple[CellValue, ...]


@dataclass(frozen=True)
class MalformedRow:
    """A value cell that did not parse as any expected token type."""
    row_label: str
    column: int
    raw: str

    def as_dict(self) -> dict:
        return {"kind": "MalformedRow", "row_label": self.row_label, "column": self.column, "raw": self.raw}


def is_header_only(
    row: Sequence[str],
    marker_keys: Sequence[MarkerKey] = (),
    missing_markers: Iterable[str] = DEFAULT_MISSING_MARKERS,
) -> bool:
    markers = tuple(missing_markers)
    if all(is_missing_raw(c, markers) for c in row[1:]):
        return True
    label = str(row[0] or "")
    return any(compile_key(k).search(label) for k in marker_keys)


def assemble_groups(
    matrix: CellMatrix,
    marker_keys: Sequence[MarkerKey] = (),
    value_pattern: Union[str, "re.Pattern[str]", None] = None,
    missing_markers: Iterable[str] = DEFAULT_MISSING_MARKERS,
) -> Tuple[List[GroupedRow], List[MalformedRow]]:
    """
    Tag every data row of a sliced matrix with its row group.

    Returns (rows, issues). Each returned row has a non-empty row group and at
    least one non-missing value; rows whose values were all malformed are
    dropped and reported through issues along with every other malformed cell.
    """
    value_re = compile_value_pattern(value_pattern)
    markers = tuple(missing_markers)

    out: List[GroupedRow] = []
    issues: List[MalformedRow] = []
    group: Optional[str] = None

    for row in matrix.rows:
        label = str(row[0] or "").strip()
        raw_values = row[1:]
        header_only = is_header_only(row, marker_keys, markers)
        if header_only:
            group = label or group
            if all(is_missing_raw(c, markers) for c in raw_values):
                continue

        values: List[CellValue] = []
        for col, raw in enumerate(raw_values):
            cell, malformed = parse_cell(raw, value_re, markers)
            if malformed:
                issues.append(MalformedRow(row_label=label, column=col, raw=str(raw)))
            values.append(cell)

        if group is None or all(is_missing(v) for v in values):
            continue
        out.append(GroupedRow(row_group=group, row_label=label, values=tuple(values)))

    return out, issues
