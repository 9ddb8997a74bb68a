"""
Work experience extraction.

Every subsection (one job) is read the same way regardless of source format:
the leading info lines (up to three, stopping at the first bullet) are scored
for a date range, a job title and a company; the rest becomes an optional
one-line summary plus bullet highlights.
"""

import logging
import re
from typing import List, Optional

from app.core.dates import match_date_range, parse_date
from app.core.feature_scoring import FeatureSet, pick_best_line
from app.core.layout import SectionBlock
from app.core.schemas import WorkEntry
from app.core.subsections import split_text_subsections, subsection_texts
from app.core.text_normalization import detect_location, detect_url, is_bullet_line, split_highlights

logger = logging.getLogger(__name__)


# ===== JOB TITLE KEYWORDS =====

JOB_TITLE_KEYWORDS = [
    "Accountant",
    "Administrator",
    "Advisor",
    "Agent",
    "Analyst",
    "Architect",
    "Assistant",
    "Associate",
    "Auditor",
    "Consultant",
    "Coordinator",
    "Designer",
    "Developer",
    "Director",
    "Engineer",
    "Intern",
    "Lead",
    "Manager",
    "Officer",
    "Operations",
    "Producer",
    "Recruiter",
    "Representative",
    "Researcher",
    "Sales",
    "Scientist",
    "Specialist",
    "Supervisor",
    "Teacher",
    "Technician",
    "Volunteer",
]

JOB_TITLE_RE = re.compile(r"\b(?:" + "|".join(JOB_TITLE_KEYWORDS) + r")\b", re.IGNORECASE)
# "Software EngineerVizient, Inc | Dec 2019 - Sep 2025" (title glued to company, dates after a pipe)
GLUED_TITLE_COMPANY_RE = re.compile(
    r"^(?P<title>[A-Za-z\s]*?\b(?:" + "|".join(JOB_TITLE_KEYWORDS) + r"))"
    r"(?P<company>[A-Z][A-Za-z\s,&.]+?)\s*\|\s*(?P<dates>.+)$"
)
# "Software Engineer, Acme Corp" / "Software Engineer at Acme Corp"
TITLE_COMPANY_RE = re.compile(r"^(?P<title>[^,|@\d]+?)(?:\s*,\s*|\s+at\s+|\s+@\s+)(?P<company>[^\d|]+)$")

INFO_LINE_COUNT = 3
MAX_HIGHLIGHTS = 8
HEADER_MAX_LENGTH = 90


def _date_range_raw(line: str) -> Optional[str]:
    m = match_date_range(line)
    return m.raw if m else None


DATE_FEATURE_SETS = [
    FeatureSet(test=_date_range_raw, weight=5, captures=True),
    FeatureSet(test=lambda line: re.search(r"(present|current)", line, re.IGNORECASE), weight=2),
    FeatureSet(test=lambda line: re.search(r"\d{4}", line), weight=1),
]

JOB_TITLE_FEATURE_SETS = [
    FeatureSet(test=lambda line: JOB_TITLE_RE.search(line), weight=4),
    FeatureSet(test=lambda line: re.search(r"\d", line), weight=-3),
    FeatureSet(test=lambda line: len(line.split()) > 8, weight=-2),
]


def build_company_feature_sets(title_line: Optional[str] = None, date_line: Optional[str] = None) -> List[FeatureSet]:
    features = [
        FeatureSet(test=lambda line: "," in line, weight=2),
        FeatureSet(test=lambda line: re.fullmatch(r"[A-Z][A-Za-z0-9&.,'\s]+", line), weight=3),
        FeatureSet(test=lambda line: "company" in line.lower(), weight=1),
        # "Austin, TX" on its own line is the job location
        FeatureSet(test=lambda line: detect_location(line) == line, weight=-5),
        FeatureSet(test=lambda line: re.search(r"\d", line), weight=-2),
    ]
    if title_line:
        features.append(FeatureSet(test=lambda line: title_line in line, weight=-4))
    if date_line:
        features.append(FeatureSet(test=lambda line: date_line in line, weight=-4))
    return features


# ===== LINE SPLITTING =====

def split_combined_job_line(line: str) -> List[str]:
    """
    Break a line carrying several info fields into its parts.

    Examples:
        "Software EngineerVizient, Inc | Dec 2019 - Sep 2025"
            -> ["Software Engineer", "Vizient, Inc", "Dec 2019 - Sep 2025"]
        "Acme Corp | Austin, TX | 2018 - 2020" -> ["Acme Corp", "Austin, TX", "2018 - 2020"]
        "Software Engineer, Acme Corp" -> ["Software Engineer", "Acme Corp"]
        "Software Engineer at Acme Corp" -> ["Software Engineer", "Acme Corp"]
    """
    m = GLUED_TITLE_COMPANY_RE.match(line)
    if m and JOB_TITLE_RE.search(m.group(1)):
        return [part.strip() for part in m.groups() if part.strip()]

    if "|" in line:
        parts = [part.strip() for part in line.split("|") if part.strip()]
        if len(parts) > 1:
            return parts

    m = TITLE_COMPANY_RE.match(line)
    if m and JOB_TITLE_RE.search(m.group("title")) and not JOB_TITLE_RE.search(m.group("company")):
        return [m.group("title").strip(), m.group("company").strip()]

    return [line]


def split_info_lines(lines: List[str]):
    """
    Return (info, consumed): the leading non-bullet lines (at most three) split
    into their parts, and how many physical lines they used.
    """
    info: List[str] = []
    consumed = 0
    for line in lines[:INFO_LINE_COUNT]:
        if is_bullet_line(line):
            break
        info.extend(split_combined_job_line(line))
        consumed += 1
    return info, consumed


def is_work_entry_header(line: str, current: List[str]) -> bool:
    """A role line opens a new job once the current one already has its dates or bullets."""
    if len(line) > HEADER_MAX_LENGTH or is_bullet_line(line) or not JOB_TITLE_RE.search(line):
        return False
    return any(match_date_range(prev) or is_bullet_line(prev) for prev in current)


def split_work_subsections(section: SectionBlock) -> List[List[str]]:
    if section.raw_lines:
        return subsection_texts(section.raw_lines)
    return split_text_subsections(section.lines, is_work_entry_header)


# ===== FIELDS =====

def gather_highlights(lines: List[str]):
    """Return (summary, highlights) for the lines after the info block."""
    if not lines:
        return None, None
    bullets = split_highlights([line for line in lines if is_bullet_line(line)])
    freeform = [line.strip() for line in lines if not is_bullet_line(line)]
    summary = freeform[0] if freeform else None
    highlights = bullets[:MAX_HIGHLIGHTS] if bullets else freeform[1:]
    return summary, highlights or None


def _dates_from_range(text: Optional[str]):
    m = match_date_range(text) if text else None
    if not m:
        return None, None
    return parse_date(m.start_text), (None if m.is_open_ended else parse_date(m.end_text))


def parse_work_entry(lines: List[str]) -> WorkEntry:
    info, consumed = split_info_lines(lines)

    date = pick_best_line(info, DATE_FEATURE_SETS, threshold=3, prefer_capture=True)
    title = pick_best_line(info, JOB_TITLE_FEATURE_SETS, threshold=2)
    company = pick_best_line(
        info,
        build_company_feature_sets(title.line if title else None, date.line if date else None),
        threshold=1,
    )
    start_date, end_date = _dates_from_range(date.value if date else None)

    location = next((found for found in map(detect_location, info + lines) if found), None)
    url = detect_url(" ".join(info)) or detect_url(" ".join(lines))
    summary, highlights = gather_highlights(lines[consumed:])

    return WorkEntry(
        name=company.line if company else None,
        position=title.line if title else None,
        start_date=start_date,
        end_date=end_date,
        location=location,
        url=url,
        summary=summary,
        highlights=highlights,
    )


def extract_work(section: Optional[SectionBlock]) -> List[WorkEntry]:
    if section is None:
        return []
    entries = [parse_work_entry(lines) for lines in split_work_subsections(section)]
    entries = [entry for entry in entries if entry.name or entry.position or entry.highlights]
    logger.debug("Work: %d entries", len(entries))
    return entries
