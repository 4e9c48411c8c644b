"""
Batch Processor - scrape pipeline orchestrator

Runs, for each configured (document, pages, table):
1. Page text extraction
2. Row splitting
3. Table slicing on the marker keys
4. Row-group assembly
5. Header composition and reshape to long form

then unions every table and resolves denominators into tidy records.

A failing table (extraction error, marker key not found) is recorded and the
batch continues. Header/column mismatches are configuration errors and are
raised before any PDF is opened.
"""

from __future__ import annotations

import os
import traceback
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .errors import ScrapeError
from .header_composer import check_column_count
from .page_text import FitzPageTextExtractor, PageTextExtractor
from .reshaper import resolve_denominators, to_long, to_wide_frame, union_tables
from .row_groups import assemble_groups
from .row_splitter import split_rows
from .scrape_config import TableConfig
from .table_slicer import slice_table


@dataclass(frozen=True)
class TableFailure:
    source: str
    table_id: str
    kind: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"source": self.source, "table_id": self.table_id, "kind": self.kind, "message": self.message}


@dataclass
class TableResult:
    config: TableConfig
    long: pd.DataFrame
    issues: List[Dict] = field(default_factory=list)
    n_rows: int = 0


@dataclass
class BatchResult:
    records: pd.DataFrame
    long: pd.DataFrame
    succeeded: List[Tuple[str, str]] = field(default_factory=list)
    failures: List[TableFailure] = field(default_factory=list)
    issues: List[Dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def failed_ids(self) -> List[Tuple[str, str]]:
        return [(f.source, f.table_id) for f in self.failures]


def validate_configs(configs: Sequence[TableConfig]) -> None:
    """Raise ColumnMismatch for the first table whose header does not fit its columns."""
    for cfg in configs:
        check_column_count(cfg.headers, cfg.n_values, cfg.table_id)


class TableScraper:
    """
    Scrape configured survey tables into tidy records.

    Args:
        extractor: page-text extractor (default: PyMuPDF)
        denom_pattern: regex marking denominator indicators
            (default: SURVEY_DENOM_PATTERN or "^denom")
        verbose: print progress
    """

    def __init__(
        self,
        extractor: Optional[PageTextExtractor] = None,
        denom_pattern: Optional[str] = None,
        verbose: bool = False,
    ):
        self.extractor = extractor if extractor is not None else FitzPageTextExtractor()
        self.denom_pattern = denom_pattern or (os.environ.get("SURVEY_DENOM_PATTERN") or "").strip() or None
        self.verbose = bool(verbose)

    def scrape_table(self, cfg: TableConfig) -> TableResult:
        """Scrape one table. Raises ScrapeError subclasses on failure."""
        if self.verbose:
            print(f"Scraping {cfg.source} table {cfg.table_id} (pages {','.join(str(p) for p in cfg.pages)})...")

        try:
            lines = self.extractor.extract_lines(cfg.pdf, list(cfg.pages))
            if self.verbose:
                print(f"  - Extracted {len(lines)} lines")

            headers = cfg.headers
            check_column_count(headers, cfg.n_values, cfg.table_id)

            matrix = split_rows(lines, cfg.n_values, cfg.value_pattern, decimal_comma=cfg.decimal_comma)
            sliced = slice_table(matrix, cfg.start_key, cfg.end_key)
            if self.verbose:
                print(f"  - Sliced {len(sliced)} of {len(matrix)} rows")

            rows, issues = assemble_groups(sliced, cfg.marker_keys, cfg.value_pattern, cfg.missing_markers)
            if self.verbose:
                print(f"  - Assembled {len(rows)} data rows ({len(issues)} malformed cells)")
        except ScrapeError as e:
            raise e.with_table(cfg.source, cfg.table_id)

        wide = to_wide_frame(rows, headers)
        long = to_long(wide, cfg.source, cfg.table_id, cfg.header)
        tagged = [dict(i.as_dict(), source=cfg.source, table_id=cfg.table_id) for i in issues]
        return TableResult(config=cfg, long=long, issues=tagged, n_rows=len(rows))

    def run_batch(self, configs: Sequence[TableConfig]) -> BatchResult:
        """
        Scrape every table; failures are recorded per table and never stop the batch.

        Returns:
            BatchResult with tidy records, the unioned long table, and the
            succeeded / failed table ids.
        """
        validate_configs(configs)

        frames: List[pd.DataFrame] = []
        succeeded: List[Tuple[str, str]] = []
        failures: List[TableFailure] = []
        issues: List[Dict] = []

        for cfg in configs:
            try:
                res = self.scrape_table(cfg)
            except ScrapeError as e:
                print(f"Failed to scrape {cfg.source} table {cfg.table_id}: {e.kind}: {e.message}")
                failures.append(TableFailure(cfg.source, cfg.table_id, e.kind, e.message))
                continue
            except Exception as e:
                print(f"Error scraping {cfg.source} table {cfg.table_id}: {e}")
                if self.verbose:
                    traceback.print_exc()
                failures.append(TableFailure(cfg.source, cfg.table_id, type(e).__name__, str(e)))
                continue
            frames.append(res.long)
            succeeded.append(cfg.ident)
            issues.extend(res.issues)

        long = union_tables(frames)
        records = resolve_denominators(long, self.denom_pattern)

        if self.verbose:
            print(
                f"\nCompleted: {len(succeeded)} tables scraped, {len(failures)} failed, "
                f"{len(records)} tidy records"
            )

        return BatchResult(
            records=records,
            long=long,
            succeeded=succeeded,
            failures=failures,
            issues=issues,
        )


def scrape_batch(
    configs: Sequence[TableConfig],
    extractor: Optional[PageTextExtractor] = None,
    verbose: bool = False,
) -> BatchResult:
    return TableScraper(extractor=extractor, verbose=verbose).run_batch(configs)
