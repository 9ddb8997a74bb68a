"""
Positioned text fragment extraction from PDFs.

Characters are read with pdfplumber, clustered into visual rows by vertical
position, and then walked left to right to build text runs ("fragments"):
a new fragment starts whenever the font or size changes or the horizontal gap
opens into a column jump. Word gaps inside a run become single spaces. The last
fragment of every row carries end_of_line=True.

Fragments deliberately keep font-change splits (a bold first letter, a ligature
glyph from another font); the line reconstructor repairs those afterwards.
"""

import logging
import re
from dataclasses import dataclass, replace
from io import BytesIO
from typing import Any, Dict, List, Optional

import pdfplumber

from app.core.errors import CorruptDocument
from app.core.layout import TextFragment
from app.core.text_normalization import normalize_fragment_text

logger = logging.getLogger(__name__)

# silence noisy PDF logging
logging.getLogger("pdfminer").setLevel(logging.ERROR)

SUBSET_PREFIX_RE = re.compile(r"^[A-Z]{6}\+")

# gap (as a fraction of font size) that counts as a word space inside a run
SPACE_GAP_RATIO = 0.2
# gap (as a fraction of font size) that ends the run entirely (tab stops, columns)
COLUMN_GAP_RATIO = 1.0
# characters whose size differs by more than this start a new run
SIZE_CHANGE_TOLERANCE = 1.0


@dataclass
class PdfExtraction:
    fragments: List[TextFragment]
    page_count: int


class FontTable:
    """
    Document-wide table mapping raw font identifiers to display names.

    Embedded subset fonts carry a six-letter tag ("ABCDEF+Helvetica-Bold");
    the display name drops it. Identifiers that don't resolve to a usable name
    are returned unchanged.
    """

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}

    def resolve(self, raw: Optional[str]) -> str:
        raw = raw or ""
        if raw not in self._names:
            display = SUBSET_PREFIX_RE.sub("", raw).strip()
            if not display or display.lower() == "unknown":
                display = raw
            self._names[raw] = display
        return self._names[raw]

    def __len__(self) -> int:
        return len(self._names)


def _cluster_chars_into_rows(
    chars: List[Dict[str, Any]],
    y_tolerance: float = 3.0,
) -> List[List[Dict[str, Any]]]:
    """
    Group characters into visual rows by clustering on their top coordinate.

    Args:
        chars: Characters of one page, sorted by (rounded top, x0)
        y_tolerance: Vertical distance threshold for the same row (PDF units)
    """
    if not chars:
        return []

    rows = []
    current_row = [chars[0]]
    current_top = chars[0]["top"]

    for char in chars[1:]:
        if abs(char["top"] - current_top) < y_tolerance:
            current_row.append(char)
        else:
            rows.append(current_row)
            current_row = [char]
            current_top = char["top"]

    if current_row:
        rows.append(current_row)

    return rows


def _make_fragment(
    run: List[Dict[str, Any]],
    text: str,
    page_height: float,
    fonts: FontTable,
) -> TextFragment:
    first = run[0]
    return TextFragment(
        text=normalize_fragment_text(text),
        x=float(first["x0"]),
        y=float(page_height - first["bottom"]),
        width=float(max(c["x1"] for c in run) - first["x0"]),
        height=float(first["size"]),
        font_name=fonts.resolve(first.get("fontname")),
        end_of_line=False,
    )


def _row_to_fragments(
    row: List[Dict[str, Any]],
    page_height: float,
    fonts: FontTable,
) -> List[TextFragment]:
    """Walk one row of characters left to right and cut it into text runs."""
    row = sorted(row, key=lambda c: c["x0"])
    fragments: List[TextFragment] = []
    run = [row[0]]
    text = row[0]["text"]

    for prev, cur in zip(row, row[1:]):
        gap = cur["x0"] - prev["x1"]
        size = cur["size"] or prev["size"] or 1.0
        font_changed = cur.get("fontname") != prev.get("fontname")
        size_changed = abs(cur["size"] - prev["size"]) > SIZE_CHANGE_TOLERANCE

        if font_changed or size_changed or gap > COLUMN_GAP_RATIO * size:
            # keep the word boundary on the left run so a later merge doesn't glue words
            if gap > SPACE_GAP_RATIO * size and gap <= COLUMN_GAP_RATIO * size:
                text += " "
            fragments.append(_make_fragment(run, text, page_height, fonts))
            run = [cur]
            text = cur["text"]
            continue

        if gap > SPACE_GAP_RATIO * size:
            text += " "
        run.append(cur)
        text += cur["text"]

    fragments.append(_make_fragment(run, text, page_height, fonts))
    fragments[-1] = replace(fragments[-1], end_of_line=True)
    return fragments


def extract_pdf_fragments(pdf_bytes: bytes, y_tolerance: float = 3.0) -> PdfExtraction:
    """
    Decode a PDF into positioned text fragments in reading order.

    Args:
        pdf_bytes: Raw document bytes
        y_tolerance: Vertical tolerance for clustering characters into rows

    Returns:
        PdfExtraction with fragments (top-to-bottom, left-to-right, page by page)
        and the page count

    Raises:
        CorruptDocument: pdfplumber/pdfminer rejected the byte stream
    """
    fonts = FontTable()
    fragments: List[TextFragment] = []

    try:
        with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
            page_count = len(pdf.pages)
            for page in pdf.pages:
                chars = [
                    c for c in page.chars
                    if c.get("text", "").strip() and c.get("upright", True)
                ]
                # Sort by y position (top to bottom), then x position (left to right)
                chars.sort(key=lambda c: (round(c["top"] / 2, 0), c["x0"]))
                for row in _cluster_chars_into_rows(chars, y_tolerance):
                    fragments.extend(_row_to_fragments(row, page.height, fonts))
    except Exception as exc:
        logger.warning("PDF decode failed: %s", exc)
        raise CorruptDocument("pdf", str(exc)) from exc

    logger.debug("Extracted %d fragments from %d pages (%d fonts)", len(fragments), page_count, len(fonts))
    return PdfExtraction(fragments=fragments, page_count=page_count)
