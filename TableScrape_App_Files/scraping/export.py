"""
Export tidy records and the batch failure report.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pandas as pd


RECORDS_SHEET = "records"


def write_records(df: pd.DataFrame, path: Path) -> Path:
    """Write records as .csv or .xlsx (openpyxl engine)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = p.suffix.lower()
    if suffix == ".csv":
        df.to_csv(p, index=False)
    elif suffix == ".xlsx":
        with pd.ExcelWriter(p, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=RECORDS_SHEET, index=False)
    else:
        raise ValueError(f"Unsupported output format {p.suffix!r} (use .csv or .xlsx)")
    return p


def failure_report(result) -> Dict[str, Any]:
    return {
        "succeeded": [{"source": s, "table_id": t} for s, t in result.succeeded],
        "failures": [f.as_dict() for f in result.failures],
        "issues": list(result.issues),
    }


def write_failure_report(result, path: Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        json.dump(failure_report(result), f, indent=2)
    return p
