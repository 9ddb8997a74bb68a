"""
Extractors for the list-like resume sections: projects, certificates,
languages and skills.

These sections carry little structure, so each extractor is a short pass over
the section lines: token splitting for skills and languages, block
splitting for certificates, and feature scoring for project names.
"""

import logging
import re
from typing import Dict, List, Optional

from app.core.dates import find_date
from app.core.feature_scoring import FeatureSet, pick_best_line
from app.core.layout import SectionBlock
from app.core.schemas import Certificate, Language, Project, Skill
from app.core.subsections import split_text_subsections, subsection_texts
from app.core.text_normalization import detect_url, is_bullet_line, split_highlights, tokenize

logger = logging.getLogger(__name__)


# ===== PROJECTS =====

PROJECT_KEYWORD_RE = re.compile(r"project|app|system|platform|tool", re.IGNORECASE)
PROJECT_INFO_LINE_COUNT = 3
PROJECT_HEADER_MAX_LENGTH = 80
MAX_PROJECT_HIGHLIGHTS = 6

PROJECT_NAME_FEATURE_SETS = [
    FeatureSet(test=lambda line: re.match(r"[A-Z]", line), weight=2),
    FeatureSet(test=lambda line: len(line) <= 60, weight=1),
    FeatureSet(test=lambda line: PROJECT_KEYWORD_RE.search(line), weight=2),
    FeatureSet(test=lambda line: re.search(r"\d", line), weight=-2),
]


def is_project_header(line: str, current: List[str]) -> bool:
    if len(line) > PROJECT_HEADER_MAX_LENGTH or is_bullet_line(line):
        return False
    return bool(PROJECT_KEYWORD_RE.search(line))


def split_project_subsections(section: SectionBlock) -> List[List[str]]:
    if section.raw_lines:
        return subsection_texts(section.raw_lines)
    return split_text_subsections(section.lines, is_project_header)


def parse_project(lines: List[str]) -> Project:
    info = [line.strip() for line in lines[:PROJECT_INFO_LINE_COUNT] if line.strip()]
    name = pick_best_line(info, PROJECT_NAME_FEATURE_SETS, threshold=1)
    name_line = name.line if name else None

    highlights = split_highlights([line for line in lines if is_bullet_line(line)])[:MAX_PROJECT_HIGHLIGHTS]
    fallback = next(
        (line.strip() for line in lines if line.strip() and not is_bullet_line(line) and line.strip() != name_line),
        None,
    )

    return Project(
        name=name_line,
        description=highlights[0] if highlights else fallback,
        highlights=highlights or None,
        url=detect_url(" ".join(lines)),
    )


def extract_projects(section: Optional[SectionBlock]) -> List[Project]:
    if section is None:
        return []
    projects = [parse_project(lines) for lines in split_project_subsections(section)]
    projects = [project for project in projects if project.name or project.description or project.highlights]
    logger.debug("Projects: %d entries", len(projects))
    return projects


# ===== CERTIFICATES =====

ISSUER_HINT_RE = re.compile(r"(issued|provider|organization)", re.IGNORECASE)
ISSUER_PREFIX_RE = re.compile(r"^[\s:.\-]*(?:by\s+)?", re.IGNORECASE)


def _issuer_from_line(line: str) -> Optional[str]:
    """'Issued by: Amazon Web Services' -> 'Amazon Web Services'"""
    stripped = ISSUER_HINT_RE.sub("", line, count=1)
    stripped = ISSUER_PREFIX_RE.sub("", stripped)
    return stripped.strip() or None


def parse_certificate(lines: List[str]) -> Certificate:
    header = lines[0].strip()
    description = " ".join(lines[1:])
    issuer_line = next((line for line in lines if ISSUER_HINT_RE.search(line)), None)
    date_line = next((line for line in lines if re.search(r"\d{4}", line)), None)

    return Certificate(
        name=header or None,
        issuer=_issuer_from_line(issuer_line) if issuer_line else None,
        date=find_date(date_line),
        url=detect_url(description) or detect_url(header),
    )


def split_certificate_blocks(section: SectionBlock) -> List[List[str]]:
    if section.raw_lines:
        return subsection_texts(section.raw_lines)

    blocks: List[List[str]] = []
    buffer: List[str] = []
    for line in section.lines + [""]:
        if line.strip():
            buffer.append(line)
            continue
        if buffer:
            blocks.append(buffer)
        buffer = []
    return blocks


def extract_certificates(section: Optional[SectionBlock]) -> List[Certificate]:
    """
    One certificate per block; the first line is its name.

    Blocks are geometric subsections for PDF sections and blank-line separated
    runs otherwise.
    """
    if section is None:
        return []

    entries = [parse_certificate(block) for block in split_certificate_blocks(section)]
    entries = [entry for entry in entries if entry.name]
    logger.debug("Certificates: %d entries", len(entries))
    return entries


# ===== LANGUAGES =====

FLUENCY_LEVELS = [
    (re.compile(r"\bnative\b", re.IGNORECASE), "Native"),
    (re.compile(r"\bfluent\b", re.IGNORECASE), "Fluent"),
    (re.compile(r"\bprofessional\b", re.IGNORECASE), "Professional"),
    (re.compile(r"\b(?:conversational|intermediate)\b", re.IGNORECASE), "Intermediate"),
    (re.compile(r"\b(?:basic|elementary)\b", re.IGNORECASE), "Basic"),
]

LANGUAGE_SPLIT_RE = re.compile(r"[-:()]")


def infer_fluency(token: str) -> Optional[str]:
    for pattern, level in FLUENCY_LEVELS:
        if pattern.search(token):
            return level
    return None


def _strip_fluency_words(value: str) -> str:
    for pattern, _ in FLUENCY_LEVELS:
        value = pattern.sub("", value)
    return " ".join(value.split())


def extract_languages(section: Optional[SectionBlock]) -> List[Language]:
    """
    Examples:
        "English (Native), Spanish - Fluent" -> English/Native, Spanish/Fluent
        "French conversational" -> French/Intermediate
    """
    if section is None:
        return []

    languages: Dict[str, Language] = {}
    for line in section.lines:
        for token in tokenize(line):
            parts = LANGUAGE_SPLIT_RE.split(token)
            name = parts[0].strip()
            rest = next((part.strip() for part in parts[1:] if part.strip()), None)
            fluency = rest or infer_fluency(token)
            if fluency and not rest:
                name = _strip_fluency_words(name)
            if name and name.lower() not in languages:
                languages[name.lower()] = Language(language=name, fluency=fluency)

    return list(languages.values())


# ===== SKILLS =====

SKILL_NUMBERING_RE = re.compile(r"^[\d.\-]+")
# "Languages: Python" / "Tools & Platforms: Docker"
SKILL_LABEL_RE = re.compile(r"^[A-Za-z][A-Za-z &/+-]{0,30}:\s*")


def normalize_skill(value: str) -> str:
    value = SKILL_NUMBERING_RE.sub("", value).strip()
    return SKILL_LABEL_RE.sub("", value).strip()


def extract_skills(section: Optional[SectionBlock]) -> List[Skill]:
    if section is None:
        return []

    seen = set()
    skills: List[Skill] = []
    for line in section.lines:
        for token in tokenize(line):
            name = normalize_skill(token)
            if name and name.lower() not in seen:
                seen.add(name.lower())
                skills.append(Skill(name=name))

    logger.debug("Skills: %d entries", len(skills))
    return skills
