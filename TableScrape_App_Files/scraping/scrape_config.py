"""
Table catalogue - which tables to scrape from which reports, and how.

Schema v1 (JSON):

    {
      "version": 1,
      "pdf_root": "reports",                 # optional, relative to this file
      "defaults": {"decimal_comma": false},  # merged into every table
      "tables": [
        {
          "source": "DHS_Kenya_2014",
          "pdf": "KE_2014_DHS.pdf",
          "pages": [34],
          "table_id": "3.1",
          "start_key": "^Sex",
          "end_key": "^Total",
          "header": {"mode": "shared", "children": ["pct", "denom"], "parents": ["women", "men"]},
          "value_pattern": null,
          "n_values": 4
        }
      ]
    }

Loading is strict: a bad catalogue is a configuration bug and raises.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .cell_values import DEFAULT_MISSING_MARKERS
from .header_composer import HeaderSpec, check_column_count
from .row_splitter import DEFAULT_VALUE_PATTERN


_APP_ROOT = Path(__file__).resolve().parents[1]  # TableScrape_App_Files/
_REPO_ROOT = _APP_ROOT.parent  # repo root (holds user_inputs/)
DEFAULT_CATALOGUE_PATH = _REPO_ROOT / "user_inputs" / "scrape_tables.json"


@dataclass(frozen=True)
class TableConfig:
    source: str
    pdf: str
    pages: Tuple[int, ...]
    table_id: str
    start_key: str
    end_key: str
    header: HeaderSpec
    n_values: int
    value_pattern: str = DEFAULT_VALUE_PATTERN
    decimal_comma: bool = False
    missing_markers: Tuple[str, ...] = field(default=DEFAULT_MISSING_MARKERS)

    @property
    def headers(self) -> List[str]:
        return self.header.compose()

    @property
    def marker_keys(self) -> Tuple[str, str]:
        return self.start_key, self.end_key

    @property
    def ident(self) -> Tuple[str, str]:
        return self.source, self.table_id


def _req_str(entry: Dict[str, Any], key: str, where: str) -> str:
    v = entry.get(key)
    if v is None or not str(v).strip():
        raise ValueError(f"{where}: `{key}` is required")
    return str(v)


def _pages(v: Any, where: str) -> Tuple[int, ...]:
    if isinstance(v, bool):
        raise ValueError(f"{where}: `pages` must be an integer or a list of integers")
    if isinstance(v, int):
        v = [v]
    if not isinstance(v, list) or not v:
        raise ValueError(f"{where}: `pages` must be an integer or a non-empty list of integers")
    try:
        pages = tuple(int(p) for p in v)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{where}: `pages` must contain integers") from exc
    if any(p < 1 for p in pages):
        raise ValueError(f"{where}: `pages` are 1-indexed")
    return pages


def _regex(v: str, key: str, where: str) -> str:
    try:
        re.compile(v)
    except re.error as exc:
        raise ValueError(f"{where}: `{key}` is not a valid regular expression: {exc}") from exc
    return v


def table_config_from_dict(
    entry: Dict[str, Any],
    *,
    defaults: Optional[Dict[str, Any]] = None,
    base_dir: Optional[Path] = None,
    where: str = "table",
) -> TableConfig:
    if not isinstance(entry, dict):
        raise ValueError(f"{where}: must be a JSON object")
    data: Dict[str, Any] = dict(defaults or {})
    data.update({k: v for k, v in entry.items() if v is not None})

    source = _req_str(data, "source", where)
    table_id = _req_str(data, "table_id", where)
    where = f"{where} ({source} {table_id})"

    pdf = _req_str(data, "pdf", where)
    if base_dir is not None and not Path(pdf).is_absolute():
        pdf = str(Path(base_dir) / pdf)

    header = HeaderSpec.from_dict(data.get("header"))
    n_headers = len(header)
    n_values = int(data.get("n_values") or n_headers)
    check_column_count(header.compose(), n_values, table_id)

    markers = data.get("missing_markers")
    if markers is None:
        markers = list(DEFAULT_MISSING_MARKERS)
    if not isinstance(markers, list):
        raise ValueError(f"{where}: `missing_markers` must be a list of strings")

    return TableConfig(
        source=source,
        pdf=pdf,
        pages=_pages(data.get("pages"), where),
        table_id=table_id,
        start_key=_regex(_req_str(data, "start_key", where), "start_key", where),
        end_key=_regex(_req_str(data, "end_key", where), "end_key", where),
        header=header,
        n_values=n_values,
        value_pattern=_regex(str(data.get("value_pattern") or DEFAULT_VALUE_PATTERN), "value_pattern", where),
        decimal_comma=bool(data.get("decimal_comma", False)),
        missing_markers=tuple(str(m) for m in markers),
    )


def load_catalogue_dict(data: Dict[str, Any], *, base_dir: Optional[Path] = None) -> List[TableConfig]:
    if not isinstance(data, dict):
        raise ValueError("Table catalogue must be a JSON object.")
    if int(data.get("version") or 0) != 1:
        raise ValueError("Table catalogue must declare `version: 1`.")
    tables = data.get("tables")
    if not isinstance(tables, list) or not tables:
        raise ValueError("Table catalogue must include a non-empty `tables` list.")
    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ValueError("Table catalogue `defaults` must be an object.")

    pdf_root = data.get("pdf_root")
    if pdf_root:
        base_dir = Path(pdf_root) if Path(pdf_root).is_absolute() or base_dir is None else Path(base_dir) / pdf_root

    out = [
        table_config_from_dict(t, defaults=defaults, base_dir=base_dir, where=f"tables[{i}]")
        for i, t in enumerate(tables)
    ]
    seen = set()
    for cfg in out:
        if cfg.ident in seen:
            raise ValueError(f"Duplicate table in catalogue: {cfg.source} {cfg.table_id}")
        seen.add(cfg.ident)
    return out


def load_catalogue(path: Path = DEFAULT_CATALOGUE_PATH, *, pdf_root: Optional[Path] = None) -> List[TableConfig]:
    """
    Load a table catalogue (schema v1).

    Relative pdf paths resolve against pdf_root when given, else against the
    catalogue's own `pdf_root`, else against the catalogue's directory.
    """
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if pdf_root is not None and isinstance(data, dict):
        data = dict(data)
        data["pdf_root"] = str(Path(pdf_root).resolve())
    return load_catalogue_dict(data, base_dir=p.resolve().parent)
