"""
Intermediate document representations shared by the parsing stages.

A document enters the pipeline as either a geometric layout (positioned text
fragments grouped into visual lines, from PDFs) or a flat layout (plain text,
from DOCX/TXT/OCR). Both are sectionized into the same SectionBlock shape.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union


SectionId = Literal[
    "profile",
    "summary",
    "objective",
    "experience",
    "education",
    "skills",
    "projects",
    "certificates",
    "awards",
    "volunteer",
    "languages",
    "other",
]

SECTION_IDS = (
    "profile",
    "summary",
    "objective",
    "experience",
    "education",
    "skills",
    "projects",
    "certificates",
    "awards",
    "volunteer",
    "languages",
    "other",
)

ParserName = Literal["pdf", "docx", "text", "ocr"]


@dataclass(frozen=True)
class TextFragment:
    """One positioned run of glyphs as emitted by the PDF renderer."""
    text: str
    x: float
    y: float  # PDF user space: grows upward, so earlier lines have larger y
    width: float
    height: float
    font_name: str
    end_of_line: bool = False

    @property
    def right(self) -> float:
        """Horizontal end of the fragment."""
        return self.x + self.width


Line = List[TextFragment]


def line_text(line: Line) -> str:
    """Return the visible text of a line, fragments joined by single spaces."""
    return " ".join(" ".join(fragment.text for fragment in line).split())


@dataclass
class SectionBlock:
    """A labeled region of the resume (experience, education, ...)."""
    id: SectionId
    heading: str
    lines: List[str] = field(default_factory=list)
    raw_lines: Optional[List[Line]] = None


@dataclass(frozen=True)
class GeometricLayout:
    lines: List[Line]
    text: str
    page_count: int
    char_width: float = 0.0
    kind: Literal["geometric"] = "geometric"


@dataclass(frozen=True)
class FlatLayout:
    text: str
    kind: Literal["flat"] = "flat"


Layout = Union[GeometricLayout, FlatLayout]


@dataclass(frozen=True)
class ExtractedDocument:
    """Output of the fragment extractor for one uploaded document."""
    layout: Layout
    parser: ParserName
    page_count: int = 0

    @property
    def text(self) -> str:
        return self.layout.text
