import logging
import re
from io import BytesIO
from typing import Iterator, List, Union

from docx import Document
from docx.oxml.table import CT_Tbl
from docx.oxml.text.paragraph import CT_P
from docx.table import Table
from docx.text.paragraph import Paragraph

from app.core.errors import CorruptDocument
from app.core.text_normalization import repair_hyphenation

logger = logging.getLogger(__name__)

HEADING_STYLE_RE = re.compile(r"^(heading|title)\b", re.IGNORECASE)
LIST_STYLE_RE = re.compile(r"\blist\b", re.IGNORECASE)


def _iter_block_items(document) -> Iterator[Union[Paragraph, Table]]:
    """Yield body paragraphs and tables in document order."""
    for child in document.element.body.iterchildren():
        if isinstance(child, CT_P):
            yield Paragraph(child, document)
        elif isinstance(child, CT_Tbl):
            yield Table(child, document)


def _style_name(paragraph: Paragraph) -> str:
    try:
        return paragraph.style.name or ""
    except (AttributeError, KeyError):
        return ""


def _is_list_paragraph(paragraph: Paragraph) -> bool:
    if LIST_STYLE_RE.search(_style_name(paragraph)):
        return True
    ppr = paragraph._p.pPr
    return ppr is not None and ppr.numPr is not None


def _table_lines(table: Table) -> List[str]:
    """
    Flatten a table row by row.

    Two-cell rows are usually "label | content" in ATS templates and become
    "label: content"; wider rows are joined with " | ".
    """
    rows: List[str] = []
    for row in table.rows:
        cells: List[str] = []
        for cell in row.cells:
            text = " ".join(cell.text.split())
            # merged cells repeat across the grid
            if text and (not cells or cells[-1] != text):
                cells.append(text)
        if not cells:
            continue
        if len(cells) == 2:
            rows.append(f"{cells[0]}: {cells[1]}")
        else:
            rows.append(" | ".join(cells))
    return rows


def extract_docx_lines(docx_bytes: bytes) -> List[str]:
    """
    Deterministically extract structured lines from a DOCX.

    Heading-styled paragraphs are uppercased and surrounded by blank lines, list
    paragraphs get a "• " prefix, and tables are flattened in place.

    Raises:
        CorruptDocument: the bytes are not a readable Word document
    """
    try:
        doc = Document(BytesIO(docx_bytes))
    except Exception as exc:
        logger.warning("DOCX decode failed: %s", exc)
        raise CorruptDocument("docx", str(exc)) from exc

    out: List[str] = []
    for block in _iter_block_items(doc):
        if isinstance(block, Table):
            table_lines = _table_lines(block)
            if table_lines:
                out.extend(["", *table_lines, ""])
            continue

        text = (block.text or "").strip()
        if not text:
            out.append("")
            continue
        if HEADING_STYLE_RE.match(_style_name(block)):
            out.extend(["", text.upper(), ""])
        elif _is_list_paragraph(block):
            out.append("• " + text)
        else:
            out.extend(text.split("\n"))
    return out


def cleanup_docx_text(lines: List[str]) -> str:
    """Collapse whitespace, repair hyphenation and keep at most one blank line in a row."""
    cleaned: List[str] = []
    for line in lines:
        line = repair_hyphenation(" ".join(line.split()))
        if not line and (not cleaned or not cleaned[-1]):
            continue
        cleaned.append(line)
    return "\n".join(cleaned).strip()


def extract_docx_text(docx_bytes: bytes) -> str:
    return cleanup_docx_text(extract_docx_lines(docx_bytes))
