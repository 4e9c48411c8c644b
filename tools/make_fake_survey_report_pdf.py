"""
Create a small fake survey report PDF with two whitespace-aligned tables.

The layout mimics household survey reports: a title, a two-level header
(Women / Men over indicator columns), section header rows without values, and a
closing Total row. It matches the tables listed in user_inputs/scrape_tables.json.
"""

from __future__ import annotations

import argparse
from pathlib import Path

import fitz  # PyMuPDF


FONT = "helv"
FONT_SIZE = 9.0
LINE_H = 14.0
LABEL_X = 56.0
COL_X0 = 230.0
COL_W = 62.0

LITERACY_PAGE = [
    ["Table 3.1 Literacy"],
    ["Percentage of women and men age 15-49 who are literate, by background characteristics"],
    ["", "Women", "", "Men", ""],
    ["Background characteristic", "Literate", "Number", "Literate", "Number"],
    ["Residence"],
    ["Urban", "92.4", "1,204", "95.1", "1,010"],
    ["Rural", "71.3", "2,310", "80.2", "1,987"],
    ["Region"],
    ["Coast", "78.0", "640", "84.9", "590"],
    ["Highlands", "85.2", "1,880", "(88.4)", "1,422"],
    ["Lakeside", "*", "12", "80.1", "975"],
    ["Total", "80.7", "3,514", "86.2", "2,997"],
    [],
    ["Note: Figures in parentheses are based on 25-49 unweighted cases."],
]

FAMILY_PLANNING_PAGE = [
    ["Table 3.2 Contraceptive use"],
    ["", "Women", "", "", "Men", ""],
    ["", "Any", "Modern", "Number", "Any", "Number"],
    ["Age"],
    ["15-19", "20.1", "18.4", "1,002", "3.2", "880"],
    ["20-24", "45.6", "41.0", "950", "10.4", "812"],
    ["Total", "38.7", "35.0", "1,952", "6.9", "1,692"],
]


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _write_rows(page: fitz.Page, rows: list[list[str]], *, y0: float = 72.0) -> float:
    y = y0
    for row in rows:
        if row:
            if row[0]:
                page.insert_text((LABEL_X, y), row[0], fontname=FONT, fontsize=FONT_SIZE)
            for i, cell in enumerate(row[1:]):
                if cell:
                    page.insert_text((COL_X0 + i * COL_W, y), cell, fontname=FONT, fontsize=FONT_SIZE)
        y += LINE_H
    return y


def build_report(out_path: Path) -> Path:
    """Write the fake two-page report and return its path."""
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    doc = fitz.open()
    for rows in (LITERACY_PAGE, FAMILY_PLANNING_PAGE):
        page = doc.new_page(width=612, height=792)
        _write_rows(page, rows)
    doc.save(str(out))
    doc.close()
    return out


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a fake survey report PDF with two tables.")
    parser.add_argument(
        "--out",
        type=str,
        default="reports/Fake_DHS_Testland_2024.pdf",
        help="Output PDF path (relative to repo root by default).",
    )
    args = parser.parse_args(argv)

    out = Path(args.out)
    if not out.is_absolute():
        out = _repo_root() / out
    build_report(out)
    print(f"Wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
