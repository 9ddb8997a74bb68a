"""
Confidence scoring for the basics fields.

Per-field confidence tracking allows downstream consumers to understand extraction certainty
and make intelligent decisions about whether to prompt the candidate for clarification.

Confidence Scale:
  1.0   = Exact match (regex, known value)
  0.9   = Very high confidence (minor normalization needed)
  0.8   = High confidence (inferred but validated)
  0.7   = Medium-high confidence (heuristic with good signals)
  0.6   = Medium confidence (multiple signals, some uncertainty)
  0.5   = Low-medium confidence (ambiguous but extractable)
  <0.5  = Low confidence (should prompt for clarification)
"""

import re
from typing import Dict, List, Optional, Tuple

from app.core.basics_parser import BASICS_THRESHOLD, EMAIL_RE, PHONE_RE, BasicsExtraction
from app.core.feature_scoring import ScoredCandidate
from app.core.schemas import FieldConfidence, Location, StructuredResume

CORE_FIELDS = ["name", "email", "phone"]


class ConfidenceCalculator:
    """Central place for all extraction confidence logic."""

    @staticmethod
    def email(email_value: Optional[str], evidence_count: int = 1) -> Tuple[float, str]:
        """
        Calculate confidence for email extraction.

        Email is high confidence if:
          - Matches standard RFC5322 regex (simplified)
          - Found exactly once in resume

        Lower confidence if:
          - Several distinct addresses appear (ambiguity)
        """
        if not email_value:
            return 0.0, "no_email_found"

        email_pattern = r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$"
        if not re.match(email_pattern, email_value, re.IGNORECASE):
            return 0.4, "invalid_email_format"

        if evidence_count <= 1:
            return 1.0, "regex_exact_single"
        elif evidence_count <= 3:
            return 0.85, "regex_exact_multiple_occurrences"
        else:
            return 0.6, "too_many_email_candidates"

    @staticmethod
    def phone(phone_value: Optional[str], evidence_count: int = 1) -> Tuple[float, str]:
        """
        Calculate confidence for phone extraction.

        Phone is high confidence if:
          - Matches standard patterns (US or international)
          - Found exactly once
        """
        if not phone_value:
            return 0.0, "no_phone_found"

        digits_only = re.sub(r"\D", "", phone_value)
        if len(digits_only) < 7:
            return 0.3, "too_few_digits"

        if evidence_count <= 1:
            return 1.0, "regex_exact_single"
        elif evidence_count <= 2:
            return 0.85, "regex_exact_multiple"
        else:
            return 0.6, "ambiguous_multiple_phones"

    @staticmethod
    def full_name(
        name_value: Optional[str],
        method: Optional[str] = "feature_score",
        near_email: bool = False,
        is_top_of_resume: bool = False,
        has_middle_initial: bool = False,
    ) -> Tuple[float, List[str]]:
        """
        Calculate confidence for full name extraction.

        Factors:
          + Found near email (strong signal)
          + At top of resume (strong signal)
          + Has middle initial (good signal, less ambiguous)
          - Recovered by a fallback scan rather than scoring
          - Single word (no last name)
        """
        if not name_value:
            return 0.0, ["no_name_found"]

        if len(name_value) > 60:
            return 0.2, ["name_too_long"]

        if " " not in name_value:
            return 0.2, ["no_space_in_name"]

        reasons = [f"resolved_by_{method}"]
        confidence = {"feature_score": 0.5, "pattern_scan": 0.45, "semantic": 0.6}.get(method or "", 0.4)

        if near_email:
            confidence += 0.25
            reasons.append("near_email")

        if is_top_of_resume:
            confidence += 0.25
            reasons.append("at_resume_top")

        if has_middle_initial:
            confidence += 0.05
            reasons.append("has_middle_initial")

        return max(0.0, min(1.0, confidence)), reasons

    @staticmethod
    def location(location_value: Optional[Location]) -> Tuple[float, str]:
        """
        Calculate confidence for location extraction.

        High confidence for "City, ST"; lower for a remote marker or a city
        without region.
        """
        if location_value is None or not location_value.city:
            return 0.0, "no_location_found"
        if location_value.city == "Remote":
            return 0.8, "remote_marker"
        if location_value.region:
            return 0.95, "city_region_pattern"
        return 0.6, "city_only"

    @staticmethod
    def url(url_value: Optional[str]) -> Tuple[float, str]:
        """
        Calculate confidence for URL extraction.
        """
        if not url_value:
            return 0.0, "no_url_found"

        if not url_value.lower().startswith(("http://", "https://")):
            return 0.7, "missing_protocol"

        if url_value.count(".") >= 1:
            return 0.9, "url_valid"
        return 0.5, "url_questionable"

    @staticmethod
    def calculate_overall_parse_quality(field_confidences: Dict[str, float]) -> str:
        """
        Determine overall parse quality based on per-field confidences.

        Quality tiers:
          "high"   : Core fields (name, email, phone) average >= 0.85
          "medium" : Core fields average >= 0.65
          "low"    : Otherwise
        """
        core_confidences = [field_confidences.get(field, 0.0) for field in CORE_FIELDS]

        avg_core = sum(core_confidences) / len(core_confidences) if core_confidences else 0.0

        if avg_core >= 0.85:
            return "high"
        elif avg_core >= 0.65:
            return "medium"
        else:
            return "low"


def _distinct_matches(pattern: re.Pattern, text: str) -> int:
    found = {re.sub(r"\W", "", m.group(0)).lower() for m in pattern.finditer(text or "")}
    return len(found)


def _field(
    field_name: str,
    confidence: float,
    method: str,
    candidate: Optional[ScoredCandidate],
    reasons: List[str],
) -> FieldConfidence:
    return FieldConfidence(
        field_name=field_name,
        confidence=round(confidence, 2),
        extraction_method=method,
        score=candidate.score if candidate else None,
        threshold=BASICS_THRESHOLD if candidate else None,
        reasons=reasons,
        required=field_name in CORE_FIELDS,
    )


def build_confidence_scores(extraction: BasicsExtraction, raw_text: str) -> Dict[str, FieldConfidence]:
    """Confidence entry for every basics field the scorer considers."""
    basics = extraction.basics
    candidates = extraction.candidates
    scores: Dict[str, FieldConfidence] = {}

    confidence, reason = ConfidenceCalculator.email(basics.email, _distinct_matches(EMAIL_RE, raw_text))
    scores["email"] = _field("email", confidence, "feature_score", candidates.get("email"), [reason])

    confidence, reason = ConfidenceCalculator.phone(basics.phone, _distinct_matches(PHONE_RE, raw_text))
    scores["phone"] = _field("phone", confidence, "feature_score", candidates.get("phone"), [reason])

    name_candidate = candidates.get("name")
    email_candidate = candidates.get("email")
    name_index = name_candidate.index if name_candidate else -1
    if name_index < 0 and basics.name in extraction.candidate_lines:
        name_index = extraction.candidate_lines.index(basics.name)
    confidence, reasons = ConfidenceCalculator.full_name(
        basics.name,
        method=extraction.name_method,
        near_email=bool(email_candidate and name_index >= 0 and abs(email_candidate.index - name_index) <= 3),
        is_top_of_resume=0 <= name_index < 5,
        has_middle_initial=bool(basics.name and re.search(r"\s[A-Z]\.?\s", basics.name)),
    )
    scores["name"] = _field(
        "name",
        confidence,
        extraction.name_method or "unresolved",
        name_candidate if extraction.name_method == "feature_score" else None,
        reasons,
    )

    confidence, reason = ConfidenceCalculator.location(basics.location)
    scores["location"] = _field("location", confidence, "feature_score", candidates.get("location"), [reason])

    confidence, reason = ConfidenceCalculator.url(basics.url)
    scores["url"] = _field("url", confidence, "feature_score", candidates.get("url"), [reason])

    return scores


def parse_quality(scores: Dict[str, FieldConfidence]) -> str:
    return ConfidenceCalculator.calculate_overall_parse_quality(
        {name: entry.confidence for name, entry in scores.items()}
    )


def collect_warnings(resume: StructuredResume) -> List[str]:
    warnings = []
    if not resume.basics.name:
        warnings.append("Could not confidently extract candidate name.")
    if not resume.basics.email:
        warnings.append("No email address found.")
    if not resume.basics.phone:
        warnings.append("No phone number found.")
    if not resume.work and not resume.education:
        warnings.append("No work experience or education entries were recognized.")
    return warnings
