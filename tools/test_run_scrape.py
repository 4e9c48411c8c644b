import json
import sys
import tempfile
import unittest
from pathlib import Path

import pandas as pd


REPO_ROOT = Path(__file__).resolve().parents[1]
APP_DIR = REPO_ROOT / "TableScrape_App_Files"
for p in (APP_DIR, Path(__file__).resolve().parent):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

import run_scrape  # noqa: E402
from make_fake_survey_report_pdf import build_report  # noqa: E402
from scraping.reshaper import TIDY_COLUMNS  # noqa: E402


CATALOGUE = REPO_ROOT / "user_inputs" / "scrape_tables.json"


class TestRunScrape(unittest.TestCase):
    def test_scrapes_fake_report_end_to_end(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            build_report(Path(td) / "Fake_DHS_Testland_2024.pdf")
            out = Path(td) / "records.csv"
            failures = Path(td) / "failures.json"

            code = run_scrape.main([
                str(CATALOGUE),
                "--pdf-root", td,
                "--output", str(out),
                "--failures", str(failures),
                "--split-source",
            ])
            self.assertEqual(code, 0)

            df = pd.read_csv(out, dtype={"table_id": str, "row_label": str})
            self.assertEqual(list(df.columns), TIDY_COLUMNS + ["survey_type", "country", "year"])
            self.assertEqual(len(df[df["table_id"] == "3.1"]), 6 * 2)
            self.assertEqual(len(df[df["table_id"] == "3.2"]), 3 * 3)
            self.assertEqual(set(df["country"]), {"Testland"})

            urban = df[(df["row_label"] == "Urban") & (df["denominator_group"] == "women")].iloc[0]
            self.assertEqual(urban["row_group"], "Residence")
            self.assertAlmostEqual(float(urban["value"]), 92.4)
            self.assertEqual(float(urban["denominator_value"]), 1204.0)

            teens_men = df[(df["row_label"] == "15-19") & (df["denominator_group"] == "men")]
            self.assertEqual(list(teens_men["indicator"]), ["any_method"])
            self.assertEqual(float(teens_men["denominator_value"].iloc[0]), 880.0)

            fp = df[df["table_id"] == "3.2"]
            self.assertEqual(set(fp["indicator"]), {"any_method", "modern_method"})
            self.assertFalse(fp["denominator_value"].isna().any())

            report = json.loads(failures.read_text(encoding="utf-8"))
            self.assertEqual(report["failures"], [])
            self.assertEqual(len(report["succeeded"]), 2)

    def test_failed_table_sets_exit_code(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            build_report(Path(td) / "Fake_DHS_Testland_2024.pdf")
            data = json.loads(CATALOGUE.read_text(encoding="utf-8"))
            data["pdf_root"] = td
            data["tables"][0]["start_key"] = "^Province$"
            cat = Path(td) / "cat.json"
            cat.write_text(json.dumps(data), encoding="utf-8")
            out = Path(td) / "records.xlsx"

            code = run_scrape.main([str(cat), "--output", str(out)])
            self.assertEqual(code, 2)
            df = pd.read_excel(out, sheet_name="records")
            self.assertEqual(set(df["table_id"].astype(str)), {"3.2"})

    def test_bad_catalogue(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            data = json.loads(CATALOGUE.read_text(encoding="utf-8"))
            data["tables"][1]["n_values"] = 4
            cat = Path(td) / "cat.json"
            cat.write_text(json.dumps(data), encoding="utf-8")
            self.assertEqual(run_scrape.main([str(cat), "--output", str(Path(td) / "r.csv")]), 1)
            self.assertEqual(run_scrape.main([str(Path(td) / "nope.json")]), 1)


if __name__ == "__main__":
    unittest.main()
