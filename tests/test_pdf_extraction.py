"""
PDF fragment extraction and format dispatch.
"""

import pytest

from app.core.document_extractor import detect_format, extract_document
from app.core.errors import CorruptDocument, UnsupportedFormat
from app.core.layout import FlatLayout, GeometricLayout, line_text
from app.core.line_grouping import group_fragments_into_lines
from app.core.pdf_extractor import FontTable, extract_pdf_fragments


def test_fragments_in_reading_order(resume_pdf, resume_pdf_lines):
    extraction = extract_pdf_fragments(resume_pdf)

    assert extraction.page_count == 1
    lines = group_fragments_into_lines(extraction.fragments)
    assert [line_text(line) for line in lines] == [text for text, _, _, _ in resume_pdf_lines]

    first = extraction.fragments[0]
    assert first.font_name == "Helvetica-Bold"
    assert first.height == pytest.approx(16)
    assert first.x == pytest.approx(72)
    assert first.end_of_line is True
    assert extraction.fragments[1].font_name == "Helvetica"
    # PDF space: y grows upward
    assert extraction.fragments[0].y > extraction.fragments[1].y


def test_single_run_row(pdf_builder):
    extraction = extract_pdf_fragments(pdf_builder([("Skills", "F2", 11, 700)]))
    [fragment] = extraction.fragments
    assert fragment.text == "Skills"
    assert fragment.end_of_line is True


def test_empty_page(empty_pdf):
    extraction = extract_pdf_fragments(empty_pdf)
    assert extraction.page_count == 1
    assert extraction.fragments == []


def test_corrupt_pdf():
    with pytest.raises(CorruptDocument) as excinfo:
        extract_pdf_fragments(b"this is not a pdf")
    assert excinfo.value.format == "pdf"


def test_font_table_strips_subset_prefix():
    fonts = FontTable()
    assert fonts.resolve("ABCDEF+Helvetica-Bold") == "Helvetica-Bold"
    assert fonts.resolve("Times-Roman") == "Times-Roman"
    assert fonts.resolve("ABCDEF+") == "ABCDEF+"
    assert fonts.resolve(None) == ""
    assert len(fonts) == 4


class TestDispatch:

    @pytest.mark.parametrize("filename,content_type,fmt", [
        ("resume.pdf", "", "pdf"),
        ("", "application/pdf", "pdf"),
        ("RESUME.DOCX", "", "docx"),
        ("resume.doc", "", "doc"),
        ("resume.txt", "", "text"),
        ("notes.md", "", "text"),
        ("upload", "text/plain; charset=utf-8", "text"),
    ])
    def test_detect_format(self, filename, content_type, fmt):
        assert detect_format(filename, content_type) == fmt

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormat) as excinfo:
            detect_format("photo.png", "image/png")
        assert excinfo.value.content_type == "image/png"

    def test_pdf_gives_geometric_layout(self, resume_pdf):
        document = extract_document(resume_pdf, "pdf")
        assert isinstance(document.layout, GeometricLayout)
        assert document.parser == "pdf"
        assert document.text.splitlines()[0] == "Jane Doe"
        assert document.layout.char_width > 0
        regrouped = group_fragments_into_lines(
            [f for line in document.layout.lines for f in line], document.layout.char_width
        )
        assert regrouped == document.layout.lines

    def test_text_gives_flat_layout(self):
        document = extract_document("Jane Doe\nEXPERIENCE".encode(), "text")
        assert isinstance(document.layout, FlatLayout)
        assert document.text == "Jane Doe\nEXPERIENCE"
        assert document.page_count == 0
