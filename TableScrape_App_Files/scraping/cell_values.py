"""
Tagged cell values.

Raw cells coming out of the row splitter are strings. They are decided exactly
once, when rows are grouped, into one of:

    Missing          empty cell or an explicit missing marker ("na", "-", ...)
    Text(text)       a value-looking token that is not a number ("*" = suppressed)
    Number(value)    a number, parentheses stripped ("(45.2)" -> 45.2)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union


DEFAULT_MISSING_MARKERS = ("na", "NA", "-", "–", "—")

_NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")


class _MissingType:
    _instance: Optional["_MissingType"] = None

    def __new__(cls) -> "_MissingType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Missing"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_MissingType, ())


Missing = _MissingType
MISSING = _MissingType()


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Number:
    value: float


CellValue = Union[_MissingType, Text, Number]


def is_missing(cell: CellValue) -> bool:
    return cell is MISSING


def is_missing_raw(raw: str, missing_markers: Iterable[str] = DEFAULT_MISSING_MARKERS) -> bool:
    """True for an empty raw cell or an explicit missing marker."""
    s = str(raw or "").strip()
    return not s or s in set(missing_markers)


def _strip_parens(s: str) -> str:
    if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
        return s[1:-1].strip()
    return s


def parse_cell(
    raw: str,
    value_pattern: "re.Pattern[str]",
    missing_markers: Iterable[str] = DEFAULT_MISSING_MARKERS,
) -> Tuple[CellValue, bool]:
    """
    Decide the tagged value of one raw cell.

    Returns (value, malformed). A malformed cell is one that is neither empty,
    a missing marker, nor a full match of the value pattern; it comes back as
    MISSING so the row survives.
    """
    s = str(raw or "").strip()
    if is_missing_raw(s, missing_markers):
        return MISSING, False
    if not value_pattern.fullmatch(s):
        return MISSING, True
    inner = _strip_parens(s)
    if _NUMBER_RE.match(inner):
        return Number(float(inner)), False
    return Text(s), False


def to_python(cell: CellValue) -> Union[None, float, str]:
    if isinstance(cell, Number):
        return cell.value
    if isinstance(cell, Text):
        return cell.text
    return None
