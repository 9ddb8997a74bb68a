"""
Format detection and dispatch to the per-format fragment extractors.

PDFs yield a geometric layout (visual lines of positioned fragments); Word and
plain-text documents yield a flat layout. Everything here is synchronous and
CPU/IO bound; callers on the event loop should run it in a worker thread.
"""

import logging
from typing import List, Literal

from app.config import get_settings
from app.core.docx_extractor import extract_docx_text
from app.core.errors import UnsupportedFormat
from app.core.layout import ExtractedDocument, FlatLayout, GeometricLayout, Line, line_text
from app.core.line_grouping import group_fragments_into_lines, typical_char_width
from app.core.pdf_extractor import extract_pdf_fragments

logger = logging.getLogger(__name__)

DocumentFormat = Literal["pdf", "docx", "doc", "text"]

DOCX_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
DOC_CONTENT_TYPES = {"application/msword"}
TEXT_CONTENT_TYPES = {"text/plain", "text/markdown"}


def detect_format(filename: str = "", content_type: str = "") -> DocumentFormat:
    """
    Decide which decoder handles an upload from its name and MIME type.

    Raises:
        UnsupportedFormat: neither the extension nor the content type is known
    """
    name = (filename or "").lower()
    ctype = (content_type or "").lower().split(";")[0].strip()

    if name.endswith(".pdf") or ctype == "application/pdf":
        return "pdf"
    if name.endswith(".docx") or ctype in DOCX_CONTENT_TYPES:
        return "docx"
    if name.endswith(".doc") or ctype in DOC_CONTENT_TYPES:
        return "doc"
    if name.endswith((".txt", ".md")) or ctype in TEXT_CONTENT_TYPES:
        return "text"
    raise UnsupportedFormat(filename=filename, content_type=content_type)


def lines_to_text(lines: List[Line]) -> str:
    return "\n".join(line_text(line) for line in lines)


def extract_document(data: bytes, fmt: DocumentFormat) -> ExtractedDocument:
    """
    Decode raw bytes into a layout.

    Args:
        data: Uploaded document bytes
        fmt: Result of detect_format

    Returns:
        ExtractedDocument with a GeometricLayout (pdf) or FlatLayout (docx/doc/text)

    Raises:
        CorruptDocument: the decoder rejected the bytes
    """
    if fmt == "pdf":
        extraction = extract_pdf_fragments(data, y_tolerance=get_settings().pdf_line_y_tolerance)
        char_width = typical_char_width(extraction.fragments)
        lines = group_fragments_into_lines(extraction.fragments, char_width)
        logger.info("PDF: %d fragments -> %d lines over %d pages",
                    len(extraction.fragments), len(lines), extraction.page_count)
        return ExtractedDocument(
            layout=GeometricLayout(
                lines=lines,
                text=lines_to_text(lines),
                page_count=extraction.page_count,
                char_width=char_width,
            ),
            parser="pdf",
            page_count=extraction.page_count,
        )

    if fmt in ("docx", "doc"):
        # legacy .doc uploads are usually DOCX under the old extension; python-docx rejects true binary .doc
        text = extract_docx_text(data)
        return ExtractedDocument(layout=FlatLayout(text=text), parser="docx", page_count=0)

    text = data.decode("utf-8", errors="replace")
    return ExtractedDocument(layout=FlatLayout(text=text), parser="text", page_count=0)
