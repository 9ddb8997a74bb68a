"""
Optional semantic section corrector.

Section labels from the heuristic segmenter can be re-checked by an external
similarity collaborator. The pipeline never depends on one: with the default
NullClassifier the output is identical to running without a classifier.

EmbeddingClassifier adapts any async embedding provider
(`embed(texts) -> vectors`) by comparing text against reference sentences for
each label.
"""

import logging
import re
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from app.config import get_settings
from app.core.layout import SECTION_IDS, SectionBlock

logger = logging.getLogger(__name__)

EmbedFn = Callable[[List[str]], Awaitable[List[List[float]]]]


SECTION_REFERENCES: Dict[str, List[str]] = {
    "experience": [
        "Worked as software engineer at Google",
        "Registered nurse at Memorial Hospital",
        "Senior accountant at Deloitte",
        "Marketing manager for consumer products",
        "Elementary school teacher for 5 years",
        "Sales representative for pharmaceutical company",
        "Project manager at construction firm",
        "Operations manager at manufacturing plant",
        "Customer service representative",
        "Professional experience and employment history",
    ],
    "education": [
        "Bachelor of Science in Computer Science",
        "Master of Business Administration",
        "Bachelor of Arts in English Literature",
        "Associate Degree in Nursing",
        "Doctor of Medicine from Harvard",
        "Master of Fine Arts in Graphic Design",
        "High school diploma and trade school",
        "Educational background and academic qualifications",
    ],
    "skills": [
        "Programming languages: Python, JavaScript",
        "Patient care and medical procedures",
        "Financial analysis and accounting",
        "Marketing strategy and brand management",
        "Project planning and team leadership",
        "Communication and presentation skills",
        "Microsoft Office and data analysis",
        "Technical skills and professional competencies",
    ],
    "projects": [
        "Built a web application using React",
        "Led cost reduction initiative saving $100K",
        "Developed marketing campaign increasing sales",
        "Managed construction project worth $2M",
        "Organized community fundraising event",
        "Personal projects and portfolio work",
    ],
    "certificates": [
        "AWS Certified Solutions Architect",
        "Registered Nurse (RN) License",
        "Certified Public Accountant (CPA)",
        "Project Management Professional (PMP)",
        "First Aid and CPR Certification",
        "Industry certifications and professional licenses",
    ],
    "name": [
        "John Smith",
        "Mary Johnson",
        "Michael Brown",
        "Sarah Davis",
        "David Wilson",
        "Jennifer Garcia",
        "Christopher Miller",
        "Lisa Anderson",
    ],
}

SECTION_HEADINGS: Dict[str, str] = {
    "profile": "Profile",
    "objective": "Objective",
    "summary": "Professional Summary",
    "experience": "Professional Experience",
    "education": "Education",
    "skills": "Skills",
    "projects": "Projects",
    "certificates": "Certifications",
    "awards": "Awards",
    "volunteer": "Volunteer Experience",
    "languages": "Languages",
    "other": "Other",
}

NAME_CANDIDATE_RE = re.compile(r"\b[A-Z][a-zA-Z]+(?:[ \t]+[A-Z]\.?)?[ \t]+[A-Z][a-zA-Z]+\b")
MIN_CLASSIFIABLE_LENGTH = 20
MAX_NAME_CANDIDATES = 50


class SemanticClassifier(Protocol):
    async def classify(self, text: str) -> Tuple[str, float]:
        """Best label for text and its confidence in [0, 1]."""
        ...

    async def label_confidence(self, text: str, label: str) -> float:
        """Confidence that text belongs to an already assigned label."""
        ...


class NullClassifier:
    """Classifier that never has an opinion; keeps every heuristic label."""

    async def classify(self, text: str) -> Tuple[str, float]:
        return "other", 0.0

    async def label_confidence(self, text: str, label: str) -> float:
        return 1.0


def _normalize(vectors: np.ndarray) -> np.ndarray:
    return vectors / (np.linalg.norm(vectors, axis=-1, keepdims=True) + 1e-9)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    return float(_normalize(np.asarray(a, dtype=float)) @ _normalize(np.asarray(b, dtype=float)))


class EmbeddingClassifier:
    """
    Reference-sentence classifier over an injected embedding provider.

    A label's confidence blends the average and the best similarity to its
    references (0.3 * avg + 0.7 * max). Reference vectors are embedded once per
    classifier instance.
    """

    def __init__(self, embed: EmbedFn, references: Optional[Dict[str, List[str]]] = None):
        self._embed = embed
        self._references = references or SECTION_REFERENCES
        self._reference_vectors: Optional[Dict[str, np.ndarray]] = None

    async def _vectors(self) -> Dict[str, np.ndarray]:
        if self._reference_vectors is None:
            vectors = {}
            for label, sentences in self._references.items():
                if sentences:
                    # one normalized row per reference sentence
                    vectors[label] = _normalize(np.asarray(await self._embed(list(sentences)), dtype=float))
            self._reference_vectors = vectors
        return self._reference_vectors

    @staticmethod
    def _blend(vector: Sequence[float], references: np.ndarray) -> float:
        sims = references @ _normalize(np.asarray(vector, dtype=float))
        return float(0.3 * sims.mean() + 0.7 * sims.max())

    async def classify(self, text: str) -> Tuple[str, float]:
        if len(text.strip()) < MIN_CLASSIFIABLE_LENGTH and not NAME_CANDIDATE_RE.fullmatch(text.strip()):
            return "other", 0.0
        [vector] = await self._embed([text])
        best_label, best_confidence = "other", 0.0
        for label, references in (await self._vectors()).items():
            confidence = self._blend(vector, references)
            if confidence > best_confidence:
                best_label, best_confidence = label, confidence
        return best_label, best_confidence

    async def label_confidence(self, text: str, label: str) -> float:
        references = (await self._vectors()).get(label)
        if references is None:
            # nothing to validate against
            return 1.0
        if len(text.strip()) < MIN_CLASSIFIABLE_LENGTH:
            return 0.0
        [vector] = await self._embed([text])
        return self._blend(vector, references)


async def enhance_section_detection(
    sections: List[SectionBlock],
    classifier: SemanticClassifier,
) -> Tuple[List[SectionBlock], bool]:
    """
    Re-label weak or unknown sections using the classifier.

    "other" sections, and sections whose own label scores below the validation
    threshold, take the classifier's label when it is a different known section
    id above the override threshold. Only id and heading change; lines are kept.

    Returns:
        (sections, changed) where changed is True if any label was replaced
    """
    settings = get_settings()
    enhanced: List[SectionBlock] = []
    changed = False

    for section in sections:
        text = " ".join(line for line in section.lines if line)
        try:
            if section.id != "other":
                confidence = await classifier.label_confidence(text, section.id)
                if confidence >= settings.semantic_validation_threshold:
                    enhanced.append(section)
                    continue
            label, confidence = await classifier.classify(text)
        except Exception as exc:
            logger.warning("Semantic classifier failed on section %r: %s", section.heading, exc)
            enhanced.append(section)
            continue

        if (
            confidence > settings.semantic_override_threshold
            and label in SECTION_IDS
            and label not in ("other", section.id)
        ):
            logger.info("Relabelled section %r: %s -> %s (%.2f)", section.heading, section.id, label, confidence)
            enhanced.append(SectionBlock(
                id=label,
                heading=SECTION_HEADINGS[label],
                lines=section.lines,
                raw_lines=section.raw_lines,
            ))
            changed = True
        else:
            enhanced.append(section)

    return enhanced, changed


async def find_name_semantically(text: str, classifier: SemanticClassifier) -> Optional[str]:
    """Last-resort name detection over "First [M.] Last" candidates in the document."""
    candidates: List[str] = []
    for match in NAME_CANDIDATE_RE.finditer(text or ""):
        candidate = " ".join(match.group(0).split())
        if candidate not in candidates:
            candidates.append(candidate)
        if len(candidates) >= MAX_NAME_CANDIDATES:
            break

    threshold = get_settings().semantic_override_threshold
    best: Optional[str] = None
    best_confidence = 0.0
    for candidate in candidates:
        try:
            label, confidence = await classifier.classify(candidate)
        except Exception as exc:
            logger.warning("Semantic classifier failed on name candidate: %s", exc)
            return None
        if label == "name" and confidence >= threshold and confidence > best_confidence:
            best, best_confidence = candidate, confidence

    if best:
        logger.info("Name resolved semantically (%.2f)", best_confidence)
    return best
