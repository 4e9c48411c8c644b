"""
Row Splitter - raw page lines -> rectangular cell matrix

Each line of scraped text is cut once, at the first whitespace that precedes a
value-looking token. Everything before the cut is the row label; everything
after is split on single spaces into a fixed number of value columns.

Example (3 value columns):

    "Male 96.7 70.6 1,477"  ->  ["Male", "96.7", "70.6", "1477"]
    "Sex"                   ->  ["Sex", "", "", ""]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union


# Percentages 0.0-100.0 (optionally parenthesized), bare integers (denominators),
# "*" for suppressed estimates, and explicit missing markers.
DEFAULT_VALUE_PATTERN = r"\(?(?:100\.0|\d{1,2}\.\d)\)?|\d+|\*|na|NA|-|–|—"

_WS_RE = re.compile(r"\s+")
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")
_DECIMAL_COMMA_RE = re.compile(r"(?<=\d),(?=\d{1,2}(?!\d))")


@dataclass(frozen=True)
class CellMatrix:
    """Rows of [label, v1..vn]; every row has exactly 1 + n_values cells."""
    rows: Tuple[Tuple[str, ...], ...]
    n_values: int

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def labels(self) -> List[str]:
        return [r[0] for r in self.rows]


def compile_value_pattern(pattern: Union[str, "re.Pattern[str]", None]) -> "re.Pattern[str]":
    if pattern is None:
        return re.compile(DEFAULT_VALUE_PATTERN)
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(str(pattern))


def normalize_whitespace(line: str) -> str:
    s = str(line or "").replace(" ", " ")
    return _WS_RE.sub(" ", s).strip()


def normalize_numbers(line: str, decimal_comma: bool = False) -> str:
    """
    Make number formatting deterministic before splitting.

    "1,477" is always a thousands separator and is removed. With decimal_comma
    (francophone reports) "96,7" becomes "96.7".
    """
    s = _THOUSANDS_RE.sub("", str(line or ""))
    if decimal_comma:
        s = _DECIMAL_COMMA_RE.sub(".", s)
    return s


def _split_point_re(value_re: "re.Pattern[str]") -> "re.Pattern[str]":
    return re.compile(r" (?=(?:" + value_re.pattern + r")(?: |$))", value_re.flags)


def _fit_values(tokens: List[str], n_values: int) -> List[str]:
    if n_values <= 0:
        return []
    if len(tokens) > n_values:
        # Extra tokens stay in the last cell; it fails value parsing later.
        tokens = tokens[: n_values - 1] + [" ".join(tokens[n_values - 1:])]
    return tokens + [""] * (n_values - len(tokens))


def split_line(
    line: str,
    n_values: int,
    value_pattern: Union[str, "re.Pattern[str]", None] = None,
    *,
    decimal_comma: bool = False,
    _split_re: Optional["re.Pattern[str]"] = None,
) -> List[str]:
    """Split one raw line into [label, v1..vn]."""
    value_re = compile_value_pattern(value_pattern)
    split_re = _split_re or _split_point_re(value_re)

    s = normalize_numbers(normalize_whitespace(line), decimal_comma=decimal_comma)
    if not s:
        return [""] * (1 + max(0, n_values))

    # The leading token is always label text, even when it looks numeric ("0" living children).
    parts = split_re.split(s, maxsplit=1)
    label = parts[0]
    rest = parts[1] if len(parts) > 1 else ""

    tokens = rest.split(" ") if rest else []
    return [label] + _fit_values(tokens, n_values)


def split_rows(
    lines: Iterable[str],
    n_values: int,
    value_pattern: Union[str, "re.Pattern[str]", None] = None,
    *,
    decimal_comma: bool = False,
) -> CellMatrix:
    """Split every line of a page (or pages) into a CellMatrix."""
    value_re = compile_value_pattern(value_pattern)
    split_re = _split_point_re(value_re)
    rows = [
        tuple(split_line(ln, n_values, value_re, decimal_comma=decimal_comma, _split_re=split_re))
        for ln in lines
    ]
    return CellMatrix(rows=tuple(rows), n_values=int(n_values))


def matrix_from_rows(rows: Sequence[Sequence[str]], n_values: int) -> CellMatrix:
    """Build a CellMatrix from already split rows, padding or folding to width."""
    out = []
    for r in rows:
        cells = [str(c or "") for c in r]
        label = cells[0] if cells else ""
        out.append(tuple([label] + _fit_values(cells[1:], n_values)))
    return CellMatrix(rows=tuple(out), n_values=int(n_values))
