import sys
import unittest
from pathlib import Path


# Allow `import scraping.*` when running from repo root.
APP_ROOT = Path(__file__).resolve().parents[1]
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))


from scraping.errors import ColumnMismatch, HeaderSpecError  # noqa: E402
from scraping.header_composer import HeaderSpec, ParallelChild, SharedChild, check_column_count  # noqa: E402


class TestHeaderComposer(unittest.TestCase):
    def test_shared_child(self) -> None:
        spec = HeaderSpec.shared(["a", "b"], ["x", "y"])
        self.assertEqual(spec.compose(), ["a_x", "b_x", "a_y", "b_y"])
        self.assertEqual(len(spec), 4)

    def test_parallel_child(self) -> None:
        spec = HeaderSpec.parallel([["a", "b"], ["c"]], ["x", "y"])
        self.assertEqual(spec.compose(), ["a_x", "b_x", "c_y"])
        self.assertEqual(len(spec), 3)

    def test_counts(self) -> None:
        kids = ["pct", "denom", "other"]
        parents = ["women", "men", "total", "urban"]
        self.assertEqual(len(HeaderSpec.shared(kids, parents).compose()), len(kids) * len(parents))
        lists = [["a"], ["a", "b", "c"], ["d", "e"]]
        self.assertEqual(len(HeaderSpec.parallel(lists, ["p", "q", "r"]).compose()), 6)

    def test_custom_separator(self) -> None:
        spec = HeaderSpec.shared(["pct"], ["women"], sep="|")
        self.assertEqual(spec.compose(), ["pct|women"])
        self.assertEqual(spec.pairs(), [("pct", "women")])

    def test_from_dict_is_explicit_about_mode(self) -> None:
        spec = HeaderSpec.from_dict({"mode": "parallel", "children": [["a"], ["b"]], "parents": ["x", "y"]})
        self.assertIsInstance(spec.children, ParallelChild)
        spec = HeaderSpec.from_dict({"mode": "shared", "children": ["a"], "parents": ["x", "y"]})
        self.assertIsInstance(spec.children, SharedChild)
        with self.assertRaises(HeaderSpecError):
            HeaderSpec.from_dict({"children": ["a"], "parents": ["x"]})

    def test_invalid_specs(self) -> None:
        with self.assertRaises(HeaderSpecError):
            HeaderSpec.parallel([["a"]], ["x", "y"])
        with self.assertRaises(HeaderSpecError):
            HeaderSpec.shared([], ["x"])
        with self.assertRaises(HeaderSpecError):
            HeaderSpec.shared("ab", ["x"])
        with self.assertRaises(HeaderSpecError):
            HeaderSpec.shared(["a"], ["x"], sep="")

    def test_labels_must_not_contain_separator(self) -> None:
        with self.assertRaises(HeaderSpecError) as ctx:
            HeaderSpec.shared(["any_method", "denom"], ["women"])
        self.assertIn("any_method", str(ctx.exception))
        with self.assertRaises(HeaderSpecError):
            HeaderSpec.parallel([["pct"], ["pct"]], ["women", "all_men"])
        spec = HeaderSpec.shared(["any_method", "denom"], ["women"], sep="|")
        self.assertEqual(spec.compose(), ["any_method|women", "denom|women"])
        self.assertEqual(spec.pairs(), [("any_method", "women"), ("denom", "women")])

    def test_column_count_mismatch(self) -> None:
        headers = HeaderSpec.shared(["a", "b"], ["x", "y"]).compose()
        check_column_count(headers, 4)
        with self.assertRaises(ColumnMismatch) as ctx:
            check_column_count(headers, 3, "2.1")
        self.assertEqual((ctx.exception.n_headers, ctx.exception.n_values), (4, 3))


if __name__ == "__main__":
    unittest.main()
