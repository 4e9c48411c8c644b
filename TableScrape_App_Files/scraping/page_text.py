"""
Page Text - PDF page -> ordered text lines (PyMuPDF)

Words are read with their bounding boxes, grouped into visual lines by vertical
centre, and joined left-to-right with single spaces. This keeps table rows on
one line even when the PDF stores each column as its own text block.

Extraction can optionally run in a spawned subprocess with a hard timeout
(SURVEY_PAGE_TIMEOUT_SEC), so one pathological page cannot stall a batch.
"""

from __future__ import annotations

import multiprocessing
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Union

from .errors import ExtractionFailure


Pages = Union[int, Sequence[int]]


def _env_int(key: str, default: int) -> int:
    try:
        return int(float(str(os.environ.get(key, str(default)) or str(default)).strip()))
    except Exception:
        return int(default)


def page_list(pages: Pages) -> List[int]:
    if isinstance(pages, int):
        return [pages]
    return [int(p) for p in pages]


class PageTextExtractor(Protocol):
    def extract_lines(self, pdf_path: Union[str, Path], pages: Pages) -> List[str]: ...


def group_words_into_lines(words: List[Dict], y_tolerance: float = 2.0) -> List[List[Dict]]:
    """
    Group word boxes into lines based on y-position.

    Args:
        words: dicts with text, x0, y0, x1, y1
        y_tolerance: Max centre distance (points) to be considered the same line

    Returns:
        Lines of words, top to bottom, each sorted left to right
    """
    if not words:
        return []

    centred = [
        dict(
            w,
            cx=w.get("cx", (float(w["x0"]) + float(w["x1"])) / 2.0),
            cy=w.get("cy", (float(w["y0"]) + float(w["y1"])) / 2.0),
        )
        for w in words
    ]
    ordered = sorted(centred, key=lambda w: (w["cy"], w["cx"]))

    lines: List[List[Dict]] = []
    current = [ordered[0]]
    line_y = ordered[0]["cy"]
    line_h = max(1.0, float(ordered[0]["y1"]) - float(ordered[0]["y0"]))

    for w in ordered[1:]:
        h = max(1.0, float(w["y1"]) - float(w["y0"]))
        tol = max(float(y_tolerance), 0.35 * max(line_h, h))
        if abs(w["cy"] - line_y) <= tol:
            current.append(w)
            line_h = (line_h * (len(current) - 1) + h) / float(len(current))
        else:
            lines.append(sorted(current, key=lambda t: t["cx"]))
            current = [w]
            line_y = w["cy"]
            line_h = h

    lines.append(sorted(current, key=lambda t: t["cx"]))
    return lines


def line_text(line: List[Dict]) -> str:
    return " ".join(str(w.get("text", "")) for w in line if str(w.get("text", "")).strip())


def read_pdf_lines(pdf_path: Union[str, Path], pages: Pages, y_tolerance: float = 2.0) -> List[str]:
    """Extract text lines from 1-indexed pages of a PDF, in page order."""
    import fitz  # PyMuPDF

    p = Path(pdf_path)
    if not p.exists():
        raise ExtractionFailure(f"PDF not found: {p}", pdf_path=str(p))

    try:
        doc = fitz.open(str(p))
    except Exception as e:
        raise ExtractionFailure(f"Cannot open PDF {p.name}: {e}", pdf_path=str(p)) from e

    out: List[str] = []
    try:
        for page_no in page_list(pages):
            if page_no < 1 or page_no > len(doc):
                raise ExtractionFailure(
                    f"Page {page_no} out of range (document has {len(doc)} pages)",
                    pdf_path=str(p),
                    page=page_no,
                )
            try:
                raw_words = doc[page_no - 1].get_text("words")
            except Exception as e:
                raise ExtractionFailure(f"Cannot read page {page_no}: {e}", pdf_path=str(p), page=page_no) from e
            words = [
                {"x0": w[0], "y0": w[1], "x1": w[2], "y1": w[3], "text": w[4]}
                for w in raw_words
                if str(w[4]).strip()
            ]
            out.extend(line_text(ln) for ln in group_words_into_lines(words, y_tolerance=y_tolerance))
    finally:
        doc.close()
    return out


def _extract_worker(pdf_path_str: str, pages: List[int], y_tolerance: float, out_q) -> None:
    try:
        out_q.put(("ok", read_pdf_lines(pdf_path_str, pages, y_tolerance=y_tolerance)))
    except Exception as e:
        out_q.put(("err", f"{type(e).__name__}: {e}"))


class FitzPageTextExtractor:
    """
    Page-text extractor backed by PyMuPDF.

    timeout_sec > 0 runs each extraction in a spawned process and gives up after
    that many seconds. Defaults to SURVEY_PAGE_TIMEOUT_SEC (0 = in-process).
    """

    def __init__(self, timeout_sec: Optional[int] = None, y_tolerance: float = 2.0):
        if timeout_sec is None:
            timeout_sec = _env_int("SURVEY_PAGE_TIMEOUT_SEC", 0)
        self.timeout_sec = max(0, int(timeout_sec))
        self.y_tolerance = float(y_tolerance)

    def extract_lines(self, pdf_path: Union[str, Path], pages: Pages) -> List[str]:
        if not self.timeout_sec:
            return read_pdf_lines(pdf_path, pages, y_tolerance=self.y_tolerance)

        ctx = multiprocessing.get_context("spawn")
        q = ctx.Queue(maxsize=1)
        proc = ctx.Process(
            target=_extract_worker,
            args=(str(pdf_path), page_list(pages), self.y_tolerance, q),
            daemon=True,
        )
        proc.start()
        try:
            status, payload = q.get(timeout=float(self.timeout_sec))
        except Exception:
            status, payload = ("timeout", None)
        finally:
            proc.join(timeout=5)
            if proc.is_alive():
                proc.terminate()
                proc.join(timeout=5)

        if status == "ok" and isinstance(payload, list):
            return payload
        if status == "timeout":
            raise ExtractionFailure(
                f"Timeout: exceeded {self.timeout_sec}s extracting pages {page_list(pages)}",
                pdf_path=str(pdf_path),
            )
        raise ExtractionFailure(str(payload), pdf_path=str(pdf_path))


class StaticPageTextExtractor:
    """
    In-memory extractor: {pdf_path_or_source: {page_number: [lines]}}.

    Useful for tests and for re-running a batch from text dumped earlier.
    """

    def __init__(self, pages_by_doc: Mapping[str, Mapping[int, Sequence[str]]]):
        self.pages_by_doc = {str(k): {int(p): list(v) for p, v in pages.items()} for k, pages in pages_by_doc.items()}

    def extract_lines(self, pdf_path: Union[str, Path], pages: Pages) -> List[str]:
        doc = self.pages_by_doc.get(str(pdf_path))
        if doc is None:
            raise ExtractionFailure(f"No text for document {pdf_path}", pdf_path=str(pdf_path))
        out: List[str] = []
        for page_no in page_list(pages):
            if page_no not in doc:
                raise ExtractionFailure(f"Page {page_no} not available", pdf_path=str(pdf_path), page=page_no)
            out.extend(doc[page_no])
        return out
