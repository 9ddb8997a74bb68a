"""
Assemble a StructuredResume from sectioned text.

Each section id is handed to its extractor; sections without an extractor
(awards, volunteer, other, ...) only contribute to the basics candidate window
through the raw text.
"""

import logging
from typing import List, Tuple

from app.core.basics_parser import BasicsExtraction, extract_basics
from app.core.education_parser import extract_education
from app.core.layout import SectionBlock
from app.core.schemas import StructuredResume
from app.core.section_parsers import extract_certificates, extract_languages, extract_projects, extract_skills
from app.core.work_parser import extract_work

logger = logging.getLogger(__name__)


def build_resume(sections: List[SectionBlock], raw_text: str) -> Tuple[StructuredResume, BasicsExtraction]:
    """
    Run every field extractor over its section.

    Returns:
        (resume, basics_extraction); the extraction keeps the scoring evidence
        the confidence scores are computed from.
    """
    by_id = {}
    for section in sections:
        # first occurrence wins if duplicates slipped through
        by_id.setdefault(section.id, section)

    basics = extract_basics(sections, raw_text)
    resume = StructuredResume(
        basics=basics.basics,
        work=extract_work(by_id.get("experience")),
        education=extract_education(by_id.get("education")),
        skills=extract_skills(by_id.get("skills")),
        projects=extract_projects(by_id.get("projects")),
        certificates=extract_certificates(by_id.get("certificates")),
        languages=extract_languages(by_id.get("languages")),
    )

    logger.info(
        "Built resume: %d work, %d education, %d skills, %d projects, %d certificates, %d languages",
        len(resume.work),
        len(resume.education),
        len(resume.skills),
        len(resume.projects),
        len(resume.certificates),
        len(resume.languages),
    )
    return resume, basics
