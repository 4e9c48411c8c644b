import json
import sys
import tempfile
import unittest
from pathlib import Path


# Allow `import scraping.*` when running from repo root.
APP_ROOT = Path(__file__).resolve().parents[1]
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))


from scraping.errors import ColumnMismatch, HeaderSpecError  # noqa: E402
from scraping.row_splitter import DEFAULT_VALUE_PATTERN  # noqa: E402
from scraping.scrape_config import DEFAULT_CATALOGUE_PATH, load_catalogue, load_catalogue_dict  # noqa: E402


def _table(**kw) -> dict:
    t = {
        "source": "DHS_Kenya_2014",
        "pdf": "KE_2014.pdf",
        "pages": 34,
        "table_id": "3.1",
        "start_key": "^Sex$",
        "end_key": "^Total",
        "header": {"mode": "shared", "children": ["pct", "denom"], "parents": ["women", "men"]},
    }
    t.update(kw)
    return t


def _catalogue(*tables, **kw) -> dict:
    data = {"version": 1, "tables": list(tables)}
    data.update(kw)
    return data


class TestScrapeConfig(unittest.TestCase):
    def test_loads_table_with_defaults(self) -> None:
        cfgs = load_catalogue_dict(
            _catalogue(_table(), defaults={"decimal_comma": True}),
            base_dir=Path("/data/reports"),
        )
        self.assertEqual(len(cfgs), 1)
        cfg = cfgs[0]
        self.assertEqual(cfg.pages, (34,))
        self.assertEqual(cfg.n_values, 4)
        self.assertEqual(cfg.headers, ["pct_women", "denom_women", "pct_men", "denom_men"])
        self.assertEqual(cfg.value_pattern, DEFAULT_VALUE_PATTERN)
        self.assertTrue(cfg.decimal_comma)
        self.assertEqual(Path(cfg.pdf), Path("/data/reports") / "KE_2014.pdf")
        self.assertEqual(cfg.ident, ("DHS_Kenya_2014", "3.1"))

    def test_table_overrides_default(self) -> None:
        cfgs = load_catalogue_dict(
            _catalogue(_table(decimal_comma=False, value_pattern=r"\d+"), defaults={"decimal_comma": True})
        )
        self.assertFalse(cfgs[0].decimal_comma)
        self.assertEqual(cfgs[0].value_pattern, r"\d+")

    def test_explicit_n_values_must_match_header(self) -> None:
        with self.assertRaises(ColumnMismatch):
            load_catalogue_dict(_catalogue(_table(n_values=5)))

    def test_header_mode_is_required(self) -> None:
        with self.assertRaises(HeaderSpecError):
            load_catalogue_dict(_catalogue(_table(header={"children": ["a"], "parents": ["x"]})))

    def test_structural_errors(self) -> None:
        bad = [
            {"version": 2, "tables": [_table()]},
            {"version": 1, "tables": []},
            _catalogue(_table(source="")),
            _catalogue(_table(pages=[])),
            _catalogue(_table(pages=[0])),
            _catalogue(_table(start_key="(")),
            _catalogue(_table(), _table()),
        ]
        for data in bad:
            with self.assertRaises(ValueError, msg=json.dumps(data)):
                load_catalogue_dict(data)

    def test_load_from_file_resolves_pdf_root(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "user_inputs" / "cat.json"
            path.parent.mkdir()
            path.write_text(json.dumps(_catalogue(_table(), pdf_root="../reports")), encoding="utf-8")
            cfg = load_catalogue(path)[0]
            self.assertEqual(Path(cfg.pdf).resolve(), (Path(td) / "reports" / "KE_2014.pdf").resolve())

            cfg = load_catalogue(path, pdf_root=Path(td) / "elsewhere")[0]
            self.assertEqual(Path(cfg.pdf).resolve(), (Path(td) / "elsewhere" / "KE_2014.pdf").resolve())

    def test_shipped_catalogue_loads(self) -> None:
        cfgs = load_catalogue(DEFAULT_CATALOGUE_PATH)
        self.assertEqual([c.table_id for c in cfgs], ["3.1", "3.2"])
        self.assertEqual(cfgs[1].headers, ["any_method|women", "modern_method|women", "denom|women", "any_method|men", "denom|men"])


if __name__ == "__main__":
    unittest.main()
