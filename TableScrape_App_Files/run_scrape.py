#!/usr/bin/env python3
"""
Survey Table Scraping Pipeline - CLI Entry Point

Reads a table catalogue (JSON, schema v1), scrapes every listed table from its
PDF report, and writes one tidy record table:

    source, table_id, row_group, row_label, indicator, denominator_group,
    value, denominator_value

Usage:
    python run_scrape.py <catalogue.json> [options]

Options:
    --output FILE       Records output, .csv or .xlsx (default: tidy_records.csv)
    --failures FILE     JSON report of succeeded/failed tables and malformed cells
    --pdf-root DIR      Resolve relative pdf paths against DIR
    --only SOURCE       Only scrape tables of this source (repeatable)
    --split-source      Add survey_type, country, year columns
    --timeout SEC       Per-table extraction timeout (0 = no subprocess)
    --verbose           Verbose output

Exit codes:
    0  every table scraped
    1  configuration error
    2  some tables failed (see --failures)

Examples:
    python run_scrape.py user_inputs/scrape_tables.json --output out/records.xlsx
    python run_scrape.py catalogue.json --only DHS_Kenya_2014 --failures out/failures.json -v
"""

import argparse
import sys
from pathlib import Path

from scraping.batch_processor import TableScraper
from scraping.errors import ColumnMismatch, HeaderSpecError
from scraping.export import write_failure_report, write_records
from scraping.page_text import FitzPageTextExtractor
from scraping.reshaper import add_source_parts
from scraping.scrape_config import DEFAULT_CATALOGUE_PATH, load_catalogue


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Survey Table Scraping Pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument('catalogue', type=str, nargs='?', default=str(DEFAULT_CATALOGUE_PATH),
                        help='Table catalogue JSON (default: user_inputs/scrape_tables.json)')
    parser.add_argument('--output', type=str, default='tidy_records.csv',
                        help='Records output file, .csv or .xlsx (default: tidy_records.csv)')
    parser.add_argument('--failures', type=str,
                        help='Write a JSON failure report to this path')
    parser.add_argument('--pdf-root', type=str,
                        help='Directory relative pdf paths are resolved against')
    parser.add_argument('--only', type=str, action='append', default=[],
                        help='Only scrape tables of this source (repeatable)')
    parser.add_argument('--split-source', action='store_true',
                        help='Add survey_type, country and year columns')
    parser.add_argument('--timeout', type=int,
                        help='Extraction timeout in seconds (default: SURVEY_PAGE_TIMEOUT_SEC or 0)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args(argv)

    if Path(args.output).suffix.lower() not in ('.csv', '.xlsx'):
        print(f"Error: Output must be a .csv or .xlsx file: {args.output}")
        return 1

    catalogue_path = Path(args.catalogue)
    if not catalogue_path.exists():
        print(f"Error: Catalogue not found: {catalogue_path}")
        return 1

    try:
        configs = load_catalogue(catalogue_path, pdf_root=Path(args.pdf_root) if args.pdf_root else None)
    except (ValueError, ColumnMismatch, HeaderSpecError) as e:
        print(f"Error: Invalid catalogue {catalogue_path.name}: {e}")
        return 1

    if args.only:
        wanted = set(args.only)
        configs = [c for c in configs if c.source in wanted]
        if not configs:
            print(f"Error: No tables for source(s): {', '.join(sorted(wanted))}")
            return 1

    if args.verbose:
        print("Survey Table Scraping Pipeline")
        print(f"Catalogue: {catalogue_path}")
        print(f"Output: {args.output}")
        print(f"Scraping {len(configs)} table(s)...\n")

    scraper = TableScraper(extractor=FitzPageTextExtractor(timeout_sec=args.timeout), verbose=args.verbose)
    result = scraper.run_batch(configs)

    records = result.records
    if args.split_source:
        try:
            records = add_source_parts(records)
        except ValueError as e:
            print(f"Error: {e}")
            return 1

    out_path = write_records(records, Path(args.output))
    if args.failures:
        write_failure_report(result, Path(args.failures))

    if args.verbose:
        print(f"\n{'='*60}")
        print(f"Records: {len(records)} -> {out_path}")
        if args.failures:
            print(f"Failure report: {args.failures}")
        print('='*60)

    if result.failures:
        print(f"{len(result.failures)} table(s) failed:")
        for f in result.failures:
            print(f"  {f.source} {f.table_id}: {f.kind}: {f.message}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
