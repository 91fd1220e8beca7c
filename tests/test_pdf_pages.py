import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "apps" / "workers-py" / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from pdfminer.layout import LTTextContainer  # noqa: E402

from cfdiscan.domain import pdf as domain_pdf  # noqa: E402


class FakeTextBox(LTTextContainer):
    def __init__(self, text):
        super().__init__()
        self._text = text

    def get_text(self):
        return self._text


class DummyPage:
    def __init__(self, text):
        self._text = text

    def get_text(self, mode):
        assert mode == "text"
        return self._text


class DummyDoc:
    def __init__(self, pages):
        self._pages = pages
        self.closed = False

    def __iter__(self):
        return iter(self._pages)

    def close(self):
        self.closed = True


def test_split_lines_drops_blank_lines():
    assert domain_pdf.split_lines("a\r\n\n  b  \r") == ["a", "b"]
    assert domain_pdf.split_lines("") == []


def test_pdfminer_pages_collect_text_boxes(monkeypatch, tmp_path):
    pages = [[FakeTextBox("Folio fiscal\nF47AC10B-58CC-4372-A567-0E02B2C3D479\n"), object()], []]
    monkeypatch.setattr(domain_pdf, "extract_pages", lambda path: iter(pages))
    result = domain_pdf.pdf_text_pages(tmp_path / "a.pdf")
    assert result == [["Folio fiscal", "F47AC10B-58CC-4372-A567-0E02B2C3D479"], []]


def test_falls_back_to_pymupdf_when_pdfminer_fails(monkeypatch, tmp_path):
    def boom(path):
        raise ValueError("broken xref")

    doc = DummyDoc([DummyPage("uno\ndos"), DummyPage("tres")])
    monkeypatch.setattr(domain_pdf, "extract_pages", boom)
    monkeypatch.setattr(domain_pdf, "HAVE_PYMUPDF", True)
    monkeypatch.setattr(domain_pdf, "fitz", type("F", (), {"open": staticmethod(lambda p: doc)}), raising=False)
    assert domain_pdf.pdf_text_pages(tmp_path / "a.pdf") == [["uno", "dos"], ["tres"]]
    assert doc.closed


def test_unreadable_pdf_yields_no_pages(monkeypatch, tmp_path):
    def boom(path):
        raise ValueError("not a pdf")

    monkeypatch.setattr(domain_pdf, "extract_pages", boom)
    monkeypatch.setattr(domain_pdf, "HAVE_PYMUPDF", False)
    assert domain_pdf.pdf_text_pages(tmp_path / "a.pdf") == []


def test_pymupdf_errors_are_not_fatal(monkeypatch, tmp_path):
    def boom(path):
        raise RuntimeError("cannot open")

    monkeypatch.setattr(domain_pdf, "extract_pages", lambda path: iter([]))
    monkeypatch.setattr(domain_pdf, "HAVE_PYMUPDF", True)
    monkeypatch.setattr(domain_pdf, "fitz", type("F", (), {"open": staticmethod(boom)}), raising=False)
    assert domain_pdf.pdf_text_pages(tmp_path / "a.pdf") == []


def test_configure_pdfminer_logging_levels():
    import logging

    domain_pdf.configure_pdfminer_logging(False)
    assert logging.getLogger("pdfminer").level == logging.ERROR
    domain_pdf.configure_pdfminer_logging(True)
    assert logging.getLogger("pdfminer.pdfpage").level == logging.DEBUG
