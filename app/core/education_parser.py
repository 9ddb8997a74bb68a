"""
Education parsing module for extracting education entries from resume sections.

Each entry (one school / one degree) is resolved by feature scoring over its
leading info lines: institution and degree are separated by keyword lists that
penalize each other, GPA is captured from a decimal score, and dates come from
the shared date-range matcher. Remaining lines become courses / details.
"""

import logging
import re
from typing import List, Optional, Tuple

from app.core.dates import match_date_range, parse_date_range
from app.core.feature_scoring import FeatureSet, pick_best_line
from app.core.layout import SectionBlock
from app.core.schemas import EducationEntry
from app.core.subsections import split_text_subsections, subsection_texts
from app.core.text_normalization import is_bullet_line, split_highlights

logger = logging.getLogger(__name__)


# ===== INSTITUTION KEYWORDS =====
# Case-sensitive: "school" inside a sentence is not an institution name

SCHOOL_KEYWORDS = ["College", "University", "Institute", "School", "Academy", "Magnet", "Polytechnic"]

# ===== DEGREE KEYWORDS (Strong Signal) =====

DEGREE_KEYWORDS = ["Associate", "Bachelor", "Master", "Doctor", "PhD", "Ph.", "MBA", "BSc", "MSc"]

# Abbreviations matched case-insensitively on word boundaries
DEGREE_ABBREVIATIONS = {
    "b.s.",
    "b.a.",
    "b.e.",
    "b.sc.",
    "m.s.",
    "m.a.",
    "m.b.a.",
    "m.eng.",
    "ph.d.",
    "diploma",
    "doctorate",
}

GPA_RE = re.compile(r"(?<![\d.])[0-4]\.\d{1,2}(?![\d.])")
IN_AREA_RE = re.compile(r"\bin\s+(.+)$", re.IGNORECASE)
OF_AREA_RE = re.compile(r"\bof\s+(.+)$", re.IGNORECASE)
LEADING_ABBREVIATION_RE = re.compile(r"^(?:(?:[A-Za-z]{1,4}\.){2,}|BSc|MSc|MBA|PhD|BS|BA|MS|MA)\s+")
PART_SEPARATOR_RE = re.compile(r"\s*(?:,|\||\s[–—-]\s|\sat\s)\s*")

INFO_LINE_COUNT = 3
EDUCATION_THRESHOLD = 3
HEADER_MAX_LENGTH = 80


def has_school_keyword(text: str) -> bool:
    """
    Check if text names an educational institution.

    Args:
        text: Text to check

    Returns:
        True if an institution keyword is present
    """
    return any(keyword in text for keyword in SCHOOL_KEYWORDS)


def has_degree_keyword(text: str) -> bool:
    """
    Check if text contains degree keywords.
    This is a STRONG signal that a line is the degree, not the institution.

    Args:
        text: Text to check

    Returns:
        True if a degree keyword or abbreviation is found
    """
    if any(keyword in text for keyword in DEGREE_KEYWORDS):
        return True
    text_lower = text.lower()
    return any(
        re.search(r"(?<![a-z])" + re.escape(abbreviation) + r"(?![a-z])", text_lower)
        for abbreviation in DEGREE_ABBREVIATIONS
    )


# ===== FEATURE SETS =====

SCHOOL_FEATURE_SETS = [
    FeatureSet(test=has_school_keyword, weight=4),
    FeatureSet(test=has_degree_keyword, weight=-3),
    FeatureSet(test=lambda line: re.search(r"\d", line), weight=-2),
]

DEGREE_FEATURE_SETS = [
    FeatureSet(test=has_degree_keyword, weight=4),
    FeatureSet(test=has_school_keyword, weight=-3),
    FeatureSet(test=lambda line: re.search(r"\d", line), weight=-2),
]

GPA_FEATURE_SETS = [
    FeatureSet(test=lambda line: GPA_RE.search(line), weight=4, captures=True),
    FeatureSet(test=lambda line: "gpa" in line.lower(), weight=2),
    FeatureSet(test=lambda line: re.search(r"letter", line, re.IGNORECASE), weight=1),
    FeatureSet(test=lambda line: re.search(r"[,;]", line), weight=-2),
]


# ===== LINE SPLITTING =====

def split_combined_education_line(line: str) -> List[str]:
    """
    Separate degree and institution written on one line.

    Examples:
        "B.S. Computer Science, State University" -> ["B.S. Computer Science", "State University"]
        "University of Texas, Austin, TX | M.S. Physics" -> ["University of Texas, Austin, TX", "M.S. Physics"]
        "State University" -> ["State University"]
    """
    if not (has_school_keyword(line) and has_degree_keyword(line)):
        return [line]
    parts = [part for part in PART_SEPARATOR_RE.split(line) if part]
    if len(parts) < 2:
        return [line]

    first_is_degree = has_degree_keyword(parts[0]) and not has_school_keyword(parts[0])
    switch = has_school_keyword if first_is_degree else has_degree_keyword
    for index in range(1, len(parts)):
        if switch(parts[index]):
            return [", ".join(parts[:index]), ", ".join(parts[index:])]
    return [line]


def split_info_lines(lines: List[str]) -> Tuple[List[str], int]:
    info: List[str] = []
    consumed = 0
    for line in lines[:INFO_LINE_COUNT]:
        if is_bullet_line(line):
            break
        info.extend(split_combined_education_line(line))
        consumed += 1
    return info, consumed


def is_education_entry_header(line: str, current: List[str]) -> bool:
    """An institution / degree line opens a new entry once the current one has its dates."""
    if len(line) > HEADER_MAX_LENGTH or is_bullet_line(line):
        return False
    if not ("," in line or has_degree_keyword(line) or has_school_keyword(line)):
        return False
    return any(match_date_range(prev) or is_bullet_line(prev) for prev in current)


def split_education_subsections(section: SectionBlock) -> List[List[str]]:
    if section.raw_lines:
        return subsection_texts(section.raw_lines)
    return split_text_subsections(section.lines, is_education_entry_header)


# ===== FIELDS =====

def extract_area(degree_line: Optional[str]) -> Optional[str]:
    """
    Field of study from the degree line.

    Examples:
        "Bachelor of Science in Computer Science" -> "Computer Science"
        "Master of Business Administration" -> "Business Administration"
        "B.S. Computer Science" -> "Computer Science"
    """
    if not degree_line:
        return None
    text = re.split(r"[,|(]|\s[–—-]\s|\d", degree_line)[0].strip()
    # "in" names the field when both are present ("Bachelor of Science in X")
    m = IN_AREA_RE.search(text) or OF_AREA_RE.search(text)
    if m:
        area = m.group(1)
    else:
        stripped = LEADING_ABBREVIATION_RE.sub("", text)
        area = stripped if stripped != text else ""
    area = area.strip(" .")
    return area or None


def parse_education_entry(lines: List[str]) -> EducationEntry:
    info, consumed = split_info_lines(lines)

    school = pick_best_line(info, SCHOOL_FEATURE_SETS, threshold=EDUCATION_THRESHOLD)
    degree = pick_best_line(info, DEGREE_FEATURE_SETS, threshold=EDUCATION_THRESHOLD)
    gpa = pick_best_line(info, GPA_FEATURE_SETS, threshold=EDUCATION_THRESHOLD, prefer_capture=True)
    dates = parse_date_range(" ".join(info))
    courses = split_highlights(lines[consumed:])

    return EducationEntry(
        institution=school.line if school else None,
        study_type=degree.line if degree else None,
        area=extract_area(degree.line if degree else None),
        start_date=dates["start_date"],
        end_date=dates["end_date"],
        score=gpa.value if gpa else None,
        courses=courses or None,
    )


def extract_education(section: Optional[SectionBlock]) -> List[EducationEntry]:
    if section is None:
        return []
    entries = [parse_education_entry(lines) for lines in split_education_subsections(section)]
    entries = [entry for entry in entries if entry.institution or entry.study_type or entry.area]
    logger.debug("Education: %d entries", len(entries))
    return entries
