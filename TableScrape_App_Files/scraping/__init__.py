"""
Survey Table Scraping Pipeline

Turns whitespace-delimited tables scraped from PDF survey reports into tidy,
long-form records with their denominators attached.

Modules:
- page_text: PDF page -> text lines (PyMuPDF)
- row_splitter: text lines -> label/value cell matrix
- table_slicer: keep rows between start and end marker keys
- row_groups: forward-fill section headers into row groups
- cell_values: tagged Missing / Text / Number cell values
- header_composer: flatten two-level parent/child headers
- reshaper: wide -> long, union, denominator join, source id split
- scrape_config: JSON table catalogue
- batch_processor: per-table pipeline and batch driver
- export: CSV / Excel records and failure report
"""

__version__ = "1.0.0"
__all__ = [
    "page_text",
    "row_splitter",
    "table_slicer",
    "row_groups",
    "cell_values",
    "header_composer",
    "reshaper",
    "scrape_config",
    "batch_processor",
    "export",
]
