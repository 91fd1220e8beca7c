"""PDF text helpers used to find stamp UUIDs inside companion files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from pdfminer.high_level import extract_pages
from pdfminer.layout import LTTextContainer

try:  # pragma: no cover - optional dependency
    import fitz  # type: ignore

    HAVE_PYMUPDF = True
except Exception:  # pragma: no cover - optional dependency
    HAVE_PYMUPDF = False

logger = logging.getLogger(__name__)

Pages = List[List[str]]


def configure_pdfminer_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.ERROR
    for name in (
        "pdfminer",
        "pdfminer.pdfinterp",
        "pdfminer.pdfdocument",
        "pdfminer.converter",
        "pdfminer.pdfpage",
    ):
        logging.getLogger(name).setLevel(level)


def split_lines(text: str) -> List[str]:
    cleaned = (text or "").replace("\r", "\n")
    return [ln.strip() for ln in cleaned.splitlines() if ln.strip()]


def pages_with_pdfminer(path: Path) -> Pages:
    pages: Pages = []
    for layout in extract_pages(str(path)):
        lines: List[str] = []
        for element in layout:
            if isinstance(element, LTTextContainer):
                lines.extend(split_lines(element.get_text()))
        pages.append(lines)
    return pages


def pages_with_pymupdf(path: Path) -> Pages:
    if not HAVE_PYMUPDF:
        return []
    doc = fitz.open(path)
    try:
        return [split_lines(page.get_text("text")) for page in doc]
    finally:
        doc.close()


def pdf_text_pages(path: Path) -> Pages:
    """Return the text lines of every page, or [] when nothing can be read."""
    try:
        pages = pages_with_pdfminer(path)
    except Exception as exc:
        logger.debug("pdfminer failed on %s: %s", path.name, exc)
        pages = []
    if any(pages):
        return pages
    try:
        fallback = pages_with_pymupdf(path)
    except Exception as exc:
        logger.warning("Could not read text from %s: %s", path.name, exc)
        return pages
    return fallback or pages
