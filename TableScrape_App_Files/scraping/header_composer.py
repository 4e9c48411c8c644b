"""
Header Composer - flatten a two-level (parent/child) table header.

Survey tables often have a header like:

              Women              Men
        pct     denom      pct     denom

Two composition modes are supported, chosen explicitly in the header spec:

    SharedChild(["pct", "denom"]), parents ["women", "men"]
        -> pct_women, denom_women, pct_men, denom_men

    ParallelChild([["pct", "denom"], ["pct"]]), parents ["women", "men"]
        -> pct_women, denom_women, pct_men

Labels must not contain the separator, so every composed name maps back to
exactly one (child, parent) pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Union

from .errors import ColumnMismatch, HeaderSpecError


DEFAULT_SEP = "_"


@dataclass(frozen=True)
class SharedChild:
    labels: Tuple[str, ...]


@dataclass(frozen=True)
class ParallelChild:
    label_lists: Tuple[Tuple[str, ...], ...]


Children = Union[SharedChild, ParallelChild]


def _clean_labels(labels: Sequence[Any], what: str) -> Tuple[str, ...]:
    if isinstance(labels, str) or not isinstance(labels, (list, tuple)):
        raise HeaderSpecError(f"{what} must be a list of strings")
    out = tuple(str(x).strip() for x in labels)
    if not out or any(not x for x in out):
        raise HeaderSpecError(f"{what} must be a non-empty list of non-empty strings")
    return out


@dataclass(frozen=True)
class HeaderSpec:
    children: Children
    parents: Tuple[str, ...]
    sep: str = DEFAULT_SEP

    def __post_init__(self) -> None:
        if not self.sep:
            raise HeaderSpecError("header separator must not be empty")
        if not self.parents:
            raise HeaderSpecError("header spec needs at least one parent label")
        if isinstance(self.children, ParallelChild):
            if len(self.children.label_lists) != len(self.parents):
                raise HeaderSpecError(
                    f"parallel header spec has {len(self.children.label_lists)} child lists "
                    f"for {len(self.parents)} parents"
                )
        elif not isinstance(self.children, SharedChild):
            raise HeaderSpecError(f"unknown child label mode: {type(self.children).__name__}")
        clashing = sorted({lbl for pair in self.pairs() for lbl in pair if self.sep in lbl})
        if clashing:
            raise HeaderSpecError(
                f"header labels must not contain the separator {self.sep!r}: {', '.join(clashing)}"
            )

    @classmethod
    def shared(cls, children: Sequence[str], parents: Sequence[str], sep: str = DEFAULT_SEP) -> "HeaderSpec":
        return cls(SharedChild(_clean_labels(children, "children")), _clean_labels(parents, "parents"), sep)

    @classmethod
    def parallel(
        cls, children: Sequence[Sequence[str]], parents: Sequence[str], sep: str = DEFAULT_SEP
    ) -> "HeaderSpec":
        if isinstance(children, str) or not isinstance(children, (list, tuple)):
            raise HeaderSpecError("parallel children must be a list of label lists")
        lists = tuple(_clean_labels(c, f"children[{i}]") for i, c in enumerate(children))
        return cls(ParallelChild(lists), _clean_labels(parents, "parents"), sep)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeaderSpec":
        """
        Build from a catalogue entry:
            {"mode": "shared" | "parallel", "children": [...], "parents": [...], "sep": "_"}
        """
        if not isinstance(data, dict):
            raise HeaderSpecError("header must be a JSON object")
        mode = str(data.get("mode") or "").strip().lower()
        sep = str(data.get("sep") or DEFAULT_SEP)
        if mode == "shared":
            return cls.shared(data.get("children"), data.get("parents"), sep)
        if mode == "parallel":
            return cls.parallel(data.get("children"), data.get("parents"), sep)
        raise HeaderSpecError(f"header mode must be 'shared' or 'parallel', got {data.get('mode')!r}")

    def pairs(self) -> List[Tuple[str, str]]:
        """(child, parent) for every composed column, in column order."""
        if isinstance(self.children, SharedChild):
            return [(c, p) for p in self.parents for c in self.children.labels]
        return [(c, p) for p, kids in zip(self.parents, self.children.label_lists) for c in kids]

    def compose(self) -> List[str]:
        return [f"{c}{self.sep}{p}" for c, p in self.pairs()]

    def __len__(self) -> int:
        return len(self.pairs())


def compose_headers(spec: HeaderSpec) -> List[str]:
    return spec.compose()


def check_column_count(headers: Sequence[str], n_values: int, table_id: str = "") -> None:
    if len(headers) != int(n_values):
        raise ColumnMismatch(len(headers), int(n_values), table_id or None)
