"""
Section segmentation.

Two interchangeable strategies produce the same List[SectionBlock]:

- text mode (DOCX/TXT/OCR): every line is classified as heading or content
  using a canonical heading pattern library plus typographic heuristics
- geometry mode (PDF): single-fragment lines are section titles when they are
  bold all-caps, or short capitalized keyword phrases

Both start inside an implicit "profile" section and merge repeated section ids.
Heading lines are consumed as section labels; every other non-blank line lands
in exactly one section.
"""

import logging
import re
from typing import List, Optional, Tuple

from app.core.layout import Layout, Line, SectionBlock, SectionId, line_text
from app.core.text_normalization import (
    despace_if_needed,
    has_letter_and_is_all_uppercase,
    has_only_letters_spaces_ampersands,
    is_bold_fragment,
    normalize_bullets,
    title_case,
)

logger = logging.getLogger(__name__)


SECTION_PATTERNS: List[Tuple[SectionId, re.Pattern]] = [
    ("profile", re.compile(r"^(contact|profile|personal\s+info|contact\s+info)$", re.IGNORECASE)),
    ("objective", re.compile(r"^(objective|career\s+objective)$", re.IGNORECASE)),
    ("summary", re.compile(r"^(professional\s+)?summary$", re.IGNORECASE)),
    ("summary", re.compile(r"^(about\s+me|profile\s+summary|career\s+summary|executive\s+summary)$", re.IGNORECASE)),
    ("experience", re.compile(
        r"^(experience|employment|work\s+history|professional\s+experience|work\s+experience|career\s+history)$",
        re.IGNORECASE,
    )),
    ("education", re.compile(r"^(education|academics|educational\s+background|academic\s+background)$", re.IGNORECASE)),
    ("skills", re.compile(
        r"^(skills|technologies|tech\s+skills|core\s+competencies|technical\s+skills|key\s+skills|competencies|expertise)$",
        re.IGNORECASE,
    )),
    ("projects", re.compile(r"^(projects|portfolio|key\s+projects|relevant\s+projects)$", re.IGNORECASE)),
    ("certificates", re.compile(r"^(certifications?|licenses?|professional\s+certifications?|credentials)$", re.IGNORECASE)),
    ("awards", re.compile(r"^(awards|honors?|achievements|recognition|accomplishments)$", re.IGNORECASE)),
    ("volunteer", re.compile(r"^(volunteer|community|volunteer\s+work|community\s+service)$", re.IGNORECASE)),
    ("languages", re.compile(r"^(languages?|language\s+skills)$", re.IGNORECASE)),
]

HEADING_STYLE_RE = re.compile(r"^[A-Z][A-Z\s/&-]{2,}$")
LEADING_NUMBERING_RE = re.compile(r"^[\d.\-\s]+")
LINE_SPLIT_RE = re.compile("\r?\n|\u2028|\u2029")
STANDALONE_KEYWORD_RE = re.compile(
    r"^(SUMMARY|EXPERIENCE|EDUCATION|SKILLS|PROJECTS|CONTACT|PROFILE|OBJECTIVE|AWARDS|CERTIFICATIONS|LANGUAGES|VOLUNTEER)$",
    re.IGNORECASE,
)
# Lines carrying these are content (dates, contact details, bullets, "Title, Company", "Label: value"), never style-only headings
CONTENT_MARKERS_RE = re.compile(r"[\d,@|•*()]|:\s*\S|https?://|\.\s|\.$")

# Inside these sections title-cased and all-caps lines are entry headers (job titles, schools, companies)
ENTRY_SECTIONS = {"experience", "education", "projects", "volunteer", "certificates", "awards"}

# Geometry-mode section title keyword roots
SECTION_TITLE_PRIMARY_KEYWORDS = ["experience", "education", "project", "skill"]
SECTION_TITLE_SECONDARY_KEYWORDS = ["job", "course", "extracurricular", "objective", "summary", "award", "honor"]
SECTION_TITLE_KEYWORDS = SECTION_TITLE_PRIMARY_KEYWORDS + SECTION_TITLE_SECONDARY_KEYWORDS

PROFILE_HEADING = "Profile"


# ============================================================================
# Heading classification
# ============================================================================

def match_section_pattern(text: str) -> Optional[Tuple[SectionId, str]]:
    """Map heading text to (section id, title-cased label) via the pattern library."""
    candidate = text.strip().rstrip(":").strip()
    for section_id, pattern in SECTION_PATTERNS:
        if pattern.match(candidate):
            return section_id, title_case(candidate)
    return None


def is_likely_heading(line: str) -> bool:
    """Typographic heading heuristics for flat text (all caps, title case, underlines)."""
    if len(line) > 50 or len(line) <= 3:
        return False

    letters = re.sub(r"[^A-Za-z]", "", line)
    if letters:
        upper_ratio = len(re.sub(r"[^A-Z]", "", line)) / len(letters)
        if upper_ratio > 0.6:
            return True

    words = line.split()
    title_cased = [w for w in words if w[:1] == w[:1].upper() and w[1:] == w[1:].lower()]
    if len(words) >= 2 and len(title_cased) >= len(words) * 0.8:
        return True

    if line == line.upper() and 3 < len(line) < 30:
        return True

    if re.match(r"^[A-Z\s]+:?$", line) or "___" in line or "===" in line:
        return True

    return len(words) == 1 and bool(STANDALONE_KEYWORD_RE.match(line))


def identify_heading(
    line: str,
    current_section: str = "profile",
    after_blank: bool = True,
) -> Optional[Tuple[SectionId, str]]:
    """
    Classify one flat-text line as a section heading.

    Pattern-library matches are headings anywhere. Style-only headings (no
    pattern match) open an "other" section, but only for heading-shaped lines
    that follow a blank line outside entry sections. Inside entry sections
    title-cased lines are job titles and schools; without the blank line they
    are list items ("AWS" in a one-per-line skills list) or a headline.

    Returns:
        (section id, label) or None for content lines
    """
    normalized = despace_if_needed(LEADING_NUMBERING_RE.sub("", line)).strip()
    if not normalized:
        return None

    matched = match_section_pattern(normalized)
    if matched:
        return matched

    if current_section in ENTRY_SECTIONS or not after_blank:
        return None
    if CONTENT_MARKERS_RE.search(normalized):
        return None
    if HEADING_STYLE_RE.match(normalized) or is_likely_heading(normalized):
        return "other", title_case(normalized.rstrip(":"))
    return None


# ============================================================================
# Text mode
# ============================================================================

def _finish_section(section: SectionBlock, sections: List[SectionBlock]) -> None:
    while section.lines and not section.lines[-1]:
        section.lines.pop()
    if any(section.lines):
        sections.append(section)


def sectionize_text(raw_text: str) -> List[SectionBlock]:
    """
    Segment flat text into sections.

    Bullet glyph variants are normalized, blank-line runs collapse to one blank
    line, and leading/trailing blanks of each section are dropped. The first two
    non-blank lines (name, headline) are never style-only headings.
    """
    lines: List[str] = []
    for raw in LINE_SPLIT_RE.split(raw_text or ""):
        line = normalize_bullets(raw).strip()
        if not line and lines and not lines[-1]:
            continue
        lines.append(line)

    sections: List[SectionBlock] = []
    current = SectionBlock(id="profile", heading=PROFILE_HEADING)
    content_seen = 0
    after_blank = False

    for line in lines:
        if not line:
            if current.lines:
                current.lines.append("")
            after_blank = True
            continue

        if content_seen >= 2:
            heading = identify_heading(line, current.id, after_blank)
        else:
            heading = match_section_pattern(LEADING_NUMBERING_RE.sub("", line))
        content_seen += 1
        after_blank = False

        if heading:
            _finish_section(current, sections)
            current = SectionBlock(id=heading[0], heading=heading[1])
            continue
        current.lines.append(line)

    _finish_section(current, sections)
    merged = merge_duplicate_sections(sections)
    logger.debug("Text sectionizer: %s", [(s.id, len(s.lines)) for s in merged])
    return merged


# ============================================================================
# Geometry mode
# ============================================================================

def is_section_title(line: Line, index: int) -> bool:
    """
    Geometry-mode title test for a single visual line.

    Never the first two lines. A one-fragment line qualifies when it is bold and
    all-caps, or when it is at most two words (ignoring "&") of letters/spaces,
    starts with a capital and contains a section keyword root.
    """
    if index < 2 or len(line) != 1:
        return False

    fragment = line[0]
    text = despace_if_needed(fragment.text).strip()
    if not text:
        return False

    if is_bold_fragment(fragment) and has_letter_and_is_all_uppercase(text):
        return True

    words = [w for w in text.split(" ") if w and w != "&"]
    return (
        len(words) <= 2
        and has_only_letters_spaces_ampersands(text)
        and text[0].isupper()
        and any(keyword in text.lower() for keyword in SECTION_TITLE_KEYWORDS)
    )


def sectionize_lines(lines: List[Line]) -> List[SectionBlock]:
    """Segment reconstructed PDF lines into sections, keeping the raw lines for subsection division."""
    grouped: List[Tuple[str, List[Line]]] = []
    heading = "profile"
    section_lines: List[Line] = []

    for index, line in enumerate(lines):
        if is_section_title(line, index):
            grouped.append((heading, section_lines))
            heading = despace_if_needed(line[0].text).strip().lower()
            section_lines = []
        else:
            section_lines.append(line)
    grouped.append((heading, section_lines))

    sections: List[SectionBlock] = []
    for heading_text, raw_lines in grouped:
        if not raw_lines:
            continue
        matched = match_section_pattern(heading_text)
        section_id, label = matched if matched else ("other", title_case(heading_text))
        text_lines = [text for text in (line_text(line) for line in raw_lines) if text]
        sections.append(SectionBlock(id=section_id, heading=label, lines=text_lines, raw_lines=list(raw_lines)))

    merged = merge_duplicate_sections(sections)
    logger.debug("Geometry sectionizer: %s", [(s.id, len(s.lines)) for s in merged])
    return merged


# ============================================================================
# Shared
# ============================================================================

def merge_duplicate_sections(sections: List[SectionBlock]) -> List[SectionBlock]:
    """
    Merge blocks sharing a section id into the first one seen.

    Later lines are appended after a blank separator line; the first heading
    label and first-seen order are kept. The input blocks are not modified.
    """
    merged: List[SectionBlock] = []
    by_id = {}
    for section in sections:
        existing = by_id.get(section.id)
        if existing is None:
            copy = SectionBlock(
                id=section.id,
                heading=section.heading,
                lines=list(section.lines),
                raw_lines=list(section.raw_lines) if section.raw_lines is not None else None,
            )
            by_id[section.id] = copy
            merged.append(copy)
            continue
        existing.lines.extend(["", *section.lines])
        if section.raw_lines is not None:
            existing.raw_lines = (existing.raw_lines or []) + list(section.raw_lines)
    return merged


def sectionize_layout(layout: Layout) -> List[SectionBlock]:
    if layout.kind == "geometric":
        return sectionize_lines(layout.lines)
    return sectionize_text(layout.text)
