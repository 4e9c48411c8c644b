"""
Error kinds raised while scraping a survey table.

ExtractionFailure and BoundaryNotFound are per-table failures: the batch driver
records them and moves on. ColumnMismatch and HeaderSpecError are configuration
errors and are raised to the caller before any extraction happens.
"""

from __future__ import annotations

from typing import Optional


class ScrapeError(Exception):
    """Base class for per-table scrape failures."""

    kind = "ScrapeError"

    def __init__(self, message: str, source: Optional[str] = None, table_id: Optional[str] = None):
        self.message = message
        self.source = source
        self.table_id = table_id
        super().__init__(
            f"{message} (Source: {source}, Table: {table_id})"
            if source or table_id
            else message
        )

    def with_table(self, source: str, table_id: str) -> "ScrapeError":
        """Return the same error tagged with the table it happened in."""
        self.source = source
        self.table_id = table_id
        self.args = (f"{self.message} (Source: {source}, Table: {table_id})",)
        return self


class ExtractionFailure(ScrapeError):
    """
    The page-text extractor could not produce lines for a page.

    Covers missing files, corrupt PDFs, out-of-range pages and timeouts.
    """

    kind = "ExtractionFailure"

    def __init__(self, message: str, pdf_path: Optional[str] = None, page: Optional[int] = None, **kw):
        self.pdf_path = pdf_path
        self.page = page
        super().__init__(message, **kw)


class BoundaryNotFound(ScrapeError):
    """A start or end marker key matched no row of the cell matrix."""

    kind = "BoundaryNotFound"

    def __init__(self, which: str, key: str, **kw):
        self.which = which
        self.key = key
        super().__init__(f"{which} key {key!r} did not match any row", **kw)


class ColumnMismatch(ValueError):
    """Composed header count differs from the number of split value columns."""

    kind = "ColumnMismatch"

    def __init__(self, n_headers: int, n_values: int, table_id: Optional[str] = None):
        self.n_headers = n_headers
        self.n_values = n_values
        self.table_id = table_id
        where = f" for table {table_id}" if table_id else ""
        super().__init__(f"header spec yields {n_headers} columns but {n_values} value columns are split{where}")


class HeaderSpecError(ValueError):
    """A header spec is structurally invalid (bad mode, ragged parents, empty labels)."""

    kind = "HeaderSpecError"
