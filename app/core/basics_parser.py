"""
Contact basics extraction: name, headline, email, phone, location, url, profiles.

Each field is resolved by feature scoring over a candidate window (top of the
document, the profile section, and contact-looking lines further down). Email,
phone, location and url are resolved first; the name search then penalizes the
lines they claimed. If scoring cannot produce a plausible name, a strict
"First [M.] Last" scan over the whole text is the fallback.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.core.feature_scoring import FeatureSet, ScoredCandidate, penalize_match, pick_best_line
from app.core.layout import SectionBlock
from app.core.schemas import Basics, Location, Profile
from app.core.text_normalization import detect_location, detect_url, sentence_case, tokenize

logger = logging.getLogger(__name__)


EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_RE = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?(?:\(?\d{3}\)?|\d{3})[-.\s]?\d{3}[-.\s]?\d{4}")
WWW_RE = re.compile(r"www\.[^\s]+", re.IGNORECASE)
REMOTE_RE = re.compile(r"^(?:location:\s*)?remote\b", re.IGNORECASE)

# Labelled contact lines common in ATS templates ("Email: ...", "Phone: ...")
ATS_CONTACT_PATTERNS = {
    "email": re.compile(r"(?:email|e-mail):\s*([A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,})", re.IGNORECASE),
    "phone": re.compile(
        r"(?:phone|tel|mobile|cell):\s*((?:\+?\d{1,3}[-.\s]?)?(?:\(?\d{3}\)?|\d{3})[-.\s]?\d{3}[-.\s]?\d{4})",
        re.IGNORECASE,
    ),
    "location": re.compile(r"(?:location|address|city|residence):\s*([^|\n]+)", re.IGNORECASE),
    "linkedin": re.compile(r"linkedin:\s*((?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+)", re.IGNORECASE),
}

SOCIAL_PATTERNS = {
    "linkedin": re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/([\w-]+)", re.IGNORECASE),
    "github": re.compile(r"(?:https?://)?(?:www\.)?github\.com/([\w-]+)", re.IGNORECASE),
    "twitter": re.compile(r"(?:https?://)?(?:www\.)?twitter\.com/([\w-]+)", re.IGNORECASE),
    "dribbble": re.compile(r"(?:https?://)?(?:www\.)?dribbble\.com/([\w-]+)", re.IGNORECASE),
    "behance": re.compile(r"(?:https?://)?(?:www\.)?behance\.net/([\w-]+)", re.IGNORECASE),
}

TITLE_HINT_RE = re.compile(r"(engineer|developer|designer|manager|consultant|analyst|specialist)", re.IGNORECASE)

HEADER_WORDS_RE = re.compile(
    r"^(SKILLS|EDUCATION|EXPERIENCE|WORK|CONTACT|PROFILE|SUMMARY|OBJECTIVE|PHONE|EMAIL|LINKEDIN|WEBSITE)$",
    re.IGNORECASE,
)

NON_NAME_PATTERNS = [
    HEADER_WORDS_RE,
    re.compile(r"^\d+"),
    re.compile(r"@"),
    re.compile(r"https?://"),
    re.compile(r"^[A-Z]{3,}$"),  # a single all-caps word is a heading
]

STRONG_NAME_PATTERNS = [
    re.compile(r"^[A-Z][a-z]+ [A-Z]\. [A-Z][a-z]+$"),  # Timothy M. Barani
    re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$"),  # John Smith
    re.compile(r"^[A-Z][A-Z]+ [A-Z]\. [A-Z][A-Z]+$"),  # TIMOTHY M. BARANI
]

TOP_LINE_COUNT = 30
LABEL_WINDOW = 6
BASICS_THRESHOLD = 3


# ===== FEATURE SETS =====

EMAIL_FEATURE_SETS = [
    FeatureSet(test=lambda line: EMAIL_RE.search(line), weight=6, captures=True),
    FeatureSet(test=lambda line: " " in line, weight=-2),
]

PHONE_FEATURE_SETS = [
    FeatureSet(test=lambda line: PHONE_RE.search(line), weight=6, captures=True),
    # well-formatted numbers
    FeatureSet(test=lambda line: re.search(r"\(\d{3}\)|\d{3}-\d{3}-\d{4}|\d{3}\.\d{3}\.\d{4}|\+\d[\s.-]", line), weight=4),
    # ID, certificate and account numbers
    FeatureSet(test=lambda line: re.search(r"\d{12,}", line), weight=-10),
    FeatureSet(test=lambda line: re.search(r"\d{11}", line) and not re.search(r"[-.()\s]", line), weight=-6),
    FeatureSet(test=lambda line: "@" in line, weight=-2),
    FeatureSet(
        test=lambda line: re.search(r"certification|license|training|course|program|certificate|credential|id\b", line, re.IGNORECASE),
        weight=-5,
    ),
]

LOCATION_FEATURE_SETS = [
    FeatureSet(test=detect_location, weight=5, captures=True),
    FeatureSet(test=lambda line: REMOTE_RE.match(line), weight=5),
    FeatureSet(test=lambda line: "," in line, weight=2),
    FeatureSet(test=lambda line: re.search(r"@|http", line, re.IGNORECASE), weight=-3),
    FeatureSet(test=lambda line: re.search(r"\.(NET|com|org|edu|gov)\b|www\.", line, re.IGNORECASE), weight=-5),
    FeatureSet(test=lambda line: re.search(r"skills|technologies|languages|frameworks|tools", line, re.IGNORECASE), weight=-4),
]

URL_FEATURE_SETS = [
    FeatureSet(test=detect_url, weight=5, captures=True),
    FeatureSet(test=lambda line: WWW_RE.search(line), weight=3, captures=True),
    FeatureSet(test=lambda line: re.search(r"(linkedin|github|portfolio|resume)", line, re.IGNORECASE), weight=2),
    FeatureSet(test=lambda line: "@" in line, weight=-3),
]


def build_name_feature_sets(
    email_line: Optional[str] = None,
    phone_line: Optional[str] = None,
    location_line: Optional[str] = None,
    url_line: Optional[str] = None,
) -> List[FeatureSet]:
    features = [
        FeatureSet(test=lambda line: re.fullmatch(r"[A-Za-z][A-Za-z\s.'-]{1,60}", line), weight=4),
        FeatureSet(test=lambda line: len(line.split()) <= 4, weight=2),
        FeatureSet(test=lambda line: "objective" in line.lower(), weight=-3),
        FeatureSet(test=lambda line: re.search(r"\d", line), weight=-4),
        FeatureSet(test=lambda line: "," in line, weight=-4),
    ]
    if email_line:
        features.append(penalize_match(email_line, -5))
    if phone_line:
        features.append(penalize_match(phone_line, -5))
    if location_line:
        features.append(penalize_match(location_line, -4))
    if url_line:
        features.append(penalize_match(url_line, -4))
    return features


def _disallow_name(line: str) -> bool:
    return bool(re.search(r"[\d@]", line) or HEADER_WORDS_RE.match(line.strip()))


# ===== CANDIDATES =====

def _non_blank_lines(raw_text: str) -> List[str]:
    return [line.strip() for line in (raw_text or "").splitlines() if line.strip()]


def _looks_like_contact(line: str) -> bool:
    return bool(
        EMAIL_RE.search(line)
        or PHONE_RE.search(line)
        or re.search(r"https?://", line)
        or STRONG_NAME_PATTERNS[0].match(line)
        or any(pattern.search(line) for pattern in ATS_CONTACT_PATTERNS.values())
    )


def gather_contact_lines(profile: Optional[SectionBlock], raw_text: str) -> List[str]:
    """
    Candidate window for contact fields, in priority order and deduplicated:
    the first 30 non-blank lines, then profile-section lines, then any later
    line that looks like contact information.
    """
    lines = _non_blank_lines(raw_text)
    candidates: List[str] = []
    seen = set()

    def add(line: str) -> None:
        if line and line not in seen:
            candidates.append(line)
            seen.add(line)

    for line in lines[:TOP_LINE_COUNT]:
        add(line)
    if profile is not None:
        for line in profile.lines:
            add(line.strip())
    for line in lines[TOP_LINE_COUNT:]:
        if line not in seen and _looks_like_contact(line):
            add(line)
    return candidates


# ===== NAME =====

def is_plausible_name(candidate: Optional[str]) -> bool:
    if not candidate or len(candidate) < 2 or len(candidate) > 50:
        return False
    return not any(pattern.search(candidate) for pattern in NON_NAME_PATTERNS)


def find_name_in_full_text(
    raw_text: str,
    email_line: Optional[str] = None,
    phone_line: Optional[str] = None,
) -> Optional[str]:
    """Strict "First [M.] Last" scan over every line of the document."""
    for line in _non_blank_lines(raw_text):
        if HEADER_WORDS_RE.match(line):
            continue
        if email_line and email_line in line:
            continue
        if phone_line and phone_line in line:
            continue
        if "@" in line or re.search(r"\d{3}", line):
            continue
        if any(pattern.match(line) for pattern in STRONG_NAME_PATTERNS):
            return line
    return None


# ===== DERIVED FIELDS =====

def infer_label(lines: List[str], *claimed: Optional[str]) -> Optional[str]:
    """Headline: the first of the top lines naming a role, skipping lines claimed by other fields."""
    for line in lines[:LABEL_WINDOW]:
        if any(value and value in line for value in claimed):
            continue
        if TITLE_HINT_RE.search(line):
            return sentence_case(line)
    return None


def infer_profiles(lines: List[str]) -> List[Profile]:
    profiles: List[Profile] = []
    seen = set()
    for line in lines:
        for network, pattern in SOCIAL_PATTERNS.items():
            m = pattern.search(line)
            if not m:
                continue
            url = m.group(0) if m.group(0).lower().startswith("http") else f"https://{m.group(0)}"
            if url not in seen:
                profiles.append(Profile(network=network, username=m.group(1), url=url))
                seen.add(url)

        if re.search(r"mailto:", line, re.IGNORECASE):
            m = EMAIL_RE.search(line)
            if m and m.group(0) not in seen:
                profiles.append(Profile(network="email", url=m.group(0)))
                seen.add(m.group(0))
    return profiles


def normalize_location(line: Optional[str]) -> Optional[Location]:
    """Split a location line into city / region; "Remote" becomes the city."""
    if not line:
        return None
    if re.search(r"\bremote\b", line, re.IGNORECASE):
        return Location(city="Remote")
    detected = detect_location(line)
    if not detected:
        return None
    city, _, region = detected.partition(",")
    region = re.sub(r"\s*\d{5}$", "", region.strip())
    return Location(city=city.strip(), region=region or None)


def find_first_link(lines: List[str]) -> Optional[str]:
    for line in lines:
        for token in tokenize(line):
            if token.startswith("http"):
                return token
    return None


# ===== EXTRACTION =====

@dataclass
class BasicsExtraction:
    """Resolved basics plus the scoring evidence behind each field."""
    basics: Basics
    candidates: Dict[str, Optional[ScoredCandidate]] = field(default_factory=dict)
    name_method: Optional[str] = None  # feature_score | pattern_scan | semantic
    candidate_lines: List[str] = field(default_factory=list)


def extract_basics(sections: List[SectionBlock], raw_text: str) -> BasicsExtraction:
    """
    Resolve the basics block from the sectioned document and its raw text.

    Absent fields stay None; nothing is guessed.
    """
    by_id = {section.id: section for section in sections}
    summary_section = by_id.get("summary") or by_id.get("objective")
    lines = gather_contact_lines(by_id.get("profile"), raw_text)

    email = pick_best_line(lines, EMAIL_FEATURE_SETS, threshold=BASICS_THRESHOLD, prefer_capture=True)
    phone = pick_best_line(lines, PHONE_FEATURE_SETS, threshold=BASICS_THRESHOLD, prefer_capture=True)
    location = pick_best_line(lines, LOCATION_FEATURE_SETS, threshold=BASICS_THRESHOLD, prefer_capture=True)
    url = pick_best_line(lines, URL_FEATURE_SETS, threshold=BASICS_THRESHOLD, prefer_capture=True)

    email_line = email.line if email else None
    phone_line = phone.line if phone else None
    name_features = build_name_feature_sets(
        email_line=email_line,
        phone_line=phone_line,
        location_line=location.line if location else None,
        url_line=url.line if url else None,
    )
    name = pick_best_line(lines, name_features, threshold=BASICS_THRESHOLD, disallow=_disallow_name)
    name_value: Optional[str] = name.line if name else None
    name_method: Optional[str] = "feature_score" if name_value else None

    if name_value and not is_plausible_name(name_value):
        logger.info("Scored name candidate %r rejected, trying full-text scan", name_value)
        name, name_value, name_method = None, None, None

    if not name_value:
        scanned = find_name_in_full_text(raw_text, email_line, phone_line)
        if is_plausible_name(scanned):
            name_value, name_method = scanned, "pattern_scan"

    url_value = (url.value if url else None) or detect_url(" ".join(lines)) or find_first_link(lines)
    profiles = infer_profiles(lines)
    summary_lines = [line for line in (summary_section.lines if summary_section else []) if line]

    basics = Basics(
        name=name_value,
        label=infer_label(lines, name_value, email_line, phone_line),
        email=email.value if email else None,
        phone=phone.value if phone else None,
        url=url_value,
        summary=" ".join(summary_lines) or None,
        location=normalize_location(location.line if location else None),
        profiles=profiles or None,
    )
    logger.debug("Basics resolved: %s", basics.model_dump(exclude_none=True))

    return BasicsExtraction(
        basics=basics,
        candidates={"name": name, "email": email, "phone": phone, "location": location, "url": url},
        name_method=name_method,
        candidate_lines=lines,
    )
