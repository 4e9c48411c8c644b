"""
Reshaper - wide table -> long records -> tidy records with denominators.

    to_wide_frame        grouped rows + composed headers -> wide DataFrame
    to_long              wide -> one row per (subject, indicator)
    union_tables         concatenate long tables from many (document, table) pairs
    resolve_denominators attach each substantive value's denominator (left join)
    split_source_id      "DHS_Kenya_2014" -> ("DHS", "Kenya", 2014)
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .cell_values import to_python
from .header_composer import DEFAULT_SEP, HeaderSpec
from .row_groups import GroupedRow


ID_COLUMNS = ["row_group", "row_label"]
LONG_COLUMNS = ["source", "table_id", "row_group", "row_label", "indicator", "denominator_group", "value"]
TIDY_COLUMNS = LONG_COLUMNS + ["denominator_value"]
DENOM_KEY = ["source", "table_id", "row_group", "row_label", "denominator_group"]
SOURCE_PART_COLUMNS = ["survey_type", "country", "year"]

DEFAULT_DENOM_PATTERN = r"^denom"


def to_wide_frame(rows: Sequence[GroupedRow], headers: Sequence[str]) -> pd.DataFrame:
    records = []
    for r in rows:
        rec = {"row_group": r.row_group, "row_label": r.row_label}
        for h, v in zip(headers, r.values):
            rec[h] = to_python(v)
        records.append(rec)
    return pd.DataFrame(records, columns=ID_COLUMNS + list(headers))


def to_long(wide: pd.DataFrame, source: str, table_id: str, spec: HeaderSpec) -> pd.DataFrame:
    """
    Melt a wide table to one row per (row_group, row_label, header).

    indicator and denominator_group come from the (child, parent) pair each
    header was composed from, never from re-splitting the header text.
    """
    pair_of = dict(zip(spec.compose(), spec.pairs()))
    long = wide.melt(id_vars=ID_COLUMNS, var_name="header", value_name="value")
    try:
        pairs = [pair_of[h] for h in long["header"]]
    except KeyError as e:
        raise ValueError(f"column {e.args[0]!r} is not composed by the header spec") from None
    long["indicator"] = [p[0] for p in pairs]
    long["denominator_group"] = [p[1] for p in pairs]
    long["source"] = str(source)
    long["table_id"] = str(table_id)
    return long[LONG_COLUMNS].reset_index(drop=True)


def to_wide(long: pd.DataFrame, sep: str = DEFAULT_SEP) -> pd.DataFrame:
    """
    Pivot a long table back to one row per (row_group, row_label).

    Repeated keys (a table reprinted across pages) keep the first non-missing value.
    """
    index = [c for c in ("source", "table_id") if c in long.columns] + ID_COLUMNS
    df = long.copy()
    df["header"] = df["indicator"].astype(str) + sep + df["denominator_group"].astype(str)
    wide = df.groupby(index + ["header"], sort=False)["value"].first().unstack("header").reset_index()
    wide.columns.name = None
    return wide


def empty_long() -> pd.DataFrame:
    return pd.DataFrame(columns=LONG_COLUMNS)


def union_tables(frames: Iterable[pd.DataFrame]) -> pd.DataFrame:
    frames = [f for f in frames if f is not None and len(f.columns)]
    if not frames:
        return empty_long()
    return pd.concat([f[LONG_COLUMNS] for f in frames], ignore_index=True)


def resolve_denominators(long: pd.DataFrame, denom_pattern: Optional[str] = None) -> pd.DataFrame:
    """
    Split denominator series off the long table and join them back onto the
    substantive rows by (source, table_id, row_group, row_label, denominator_group).

    Every substantive row appears exactly once; rows without a denominator get NaN.
    """
    pattern = denom_pattern or DEFAULT_DENOM_PATTERN
    is_denom = long["indicator"].astype(str).str.contains(pattern, case=False, regex=True).astype(bool)

    substantive = long.loc[~is_denom, LONG_COLUMNS]
    denoms = (
        long.loc[is_denom, DENOM_KEY + ["value"]]
        .drop_duplicates(subset=DENOM_KEY, keep="first")
        .rename(columns={"value": "denominator_value"})
        .assign(denominator_value=lambda d: pd.to_numeric(d["denominator_value"], errors="coerce"))
    )

    tidy = substantive.merge(denoms, on=DENOM_KEY, how="left")
    return tidy[TIDY_COLUMNS].reset_index(drop=True)


def split_source_id(source: str, sep: str = "_") -> Tuple[str, str, Optional[int]]:
    """
    Decompose a source identifier of the form <survey>_<country...>_<year>.

    Multi-word countries keep their parts: "DHS_Burkina_Faso_2010" -> ("DHS", "Burkina Faso", 2010).
    """
    parts = [p for p in str(source or "").strip().split(sep) if p]
    if len(parts) < 3:
        raise ValueError(f"source id {source!r} is not <survey>{sep}<country>{sep}<year>")
    year_s = parts[-1]
    year = int(year_s) if year_s.isdigit() else None
    return parts[0], " ".join(parts[1:-1]), year


def add_source_parts(tidy: pd.DataFrame, sep: str = "_") -> pd.DataFrame:
    out = tidy.copy()
    parts: List[Tuple[str, str, Optional[int]]] = [split_source_id(s, sep) for s in out["source"]]
    out["survey_type"] = [p[0] for p in parts]
    out["country"] = [p[1] for p in parts]
    out["year"] = pd.array([p[2] for p in parts], dtype="Int64")
    return out
