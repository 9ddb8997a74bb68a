"""
Text normalization utilities shared by the sectionizer and field extractors.

Covers the small, deterministic helpers the parsing stages lean on:
- character-class predicates used by heading/subsection heuristics
- bullet glyph handling and highlight splitting
- location / URL detection
- hyphenation and spacing repair for PDF/DOCX extraction artifacts
"""

import re
from typing import List, Optional

from app.core.layout import TextFragment


# ============================================================================
# Bullets
# ============================================================================

BULLET_POINTS = [
    "\u22c5",
    "\u2219",
    "\U0001f784",
    "\u2022",
    "\u2981",
    "\u26ab\ufe0e",
    "\u25cf",
    "\u2b24",
    "\u26ac",
    "\u25cb",
]

BULLET_LINE_RE = re.compile(r"^\s*([-*•]|\d+\.)")
BULLET_PREFIX_RE = re.compile(r"^[-*•\d.\s]+")
TOKEN_SPLIT_RE = re.compile(r"[,;•]")


def starts_with_bullet(text: str) -> bool:
    t = text.strip()
    return any(t.startswith(bullet) for bullet in BULLET_POINTS)


def is_bullet_line(line: str) -> bool:
    """True for lines that open with a list marker (-, *, a bullet glyph, or '1.')."""
    return bool(BULLET_LINE_RE.match(line.strip())) or starts_with_bullet(line)


def normalize_bullets(line: str) -> str:
    """Map every bullet glyph variant to '•' so downstream splitting sees one marker."""
    for bullet in BULLET_POINTS:
        if bullet != "•" and bullet in line:
            line = line.replace(bullet, "•")
    return line


def split_highlights(block: List[str]) -> List[str]:
    """
    Split bullet lines into individual highlight strings.

    A line may carry several bullets ("• Built X • Built Y"); each becomes its own
    entry with the leading marker stripped.
    """
    out: List[str] = []
    for line in block:
        for entry in normalize_bullets(line).split("•"):
            cleaned = BULLET_PREFIX_RE.sub("", entry).strip()
            if cleaned:
                out.append(cleaned)
    return out


def tokenize(line: str) -> List[str]:
    """Split a comma / semicolon / bullet delimited line into trimmed tokens."""
    return [token.strip() for token in TOKEN_SPLIT_RE.split(normalize_bullets(line)) if token.strip()]


# ============================================================================
# Character-class predicates
# ============================================================================

def has_letter(text: str) -> bool:
    return bool(re.search(r"[a-zA-Z]", text))


def has_only_letters_spaces_ampersands(text: str) -> bool:
    return bool(re.fullmatch(r"[A-Za-z\s&]+", text))


def has_letter_and_is_all_uppercase(text: str) -> bool:
    return has_letter(text) and text.upper() == text


def is_bold_fragment(fragment: Optional[TextFragment]) -> bool:
    if fragment is None or not fragment.font_name:
        return False
    return "bold" in fragment.font_name.lower()


# ============================================================================
# Location / URL detection
# ============================================================================

LOCATION_RE = re.compile(r"([A-Z][A-Za-z'.\s]+,\s*[A-Z]{2})(?:\s*\d{5})?")
URL_RE = re.compile(r"(https?://[^\s)]+)", re.IGNORECASE)


def detect_location(text: Optional[str]) -> Optional[str]:
    """Find a 'City, ST' pattern (optionally followed by a ZIP) in text."""
    if not text:
        return None
    m = LOCATION_RE.search(text)
    return m.group(0).strip() if m else None


def detect_url(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    m = URL_RE.search(text)
    return m.group(0) if m else None


# ============================================================================
# Spacing / hyphenation repair
# ============================================================================

SPACED_CHARS_RE = re.compile(r"^(?:[A-Za-z0-9@.()\-\+]\s+){2,}[A-Za-z0-9@.()\-\+]+$")
SOFT_HYPHEN_RUN_RE = re.compile("-\u00ad\u2010")
LINEBREAK_HYPHEN_RE = re.compile(r"([a-z])-\n([a-z])")
LOPSIDED_HYPHEN_RE = re.compile(r"(\w) -(\w)|(\w)- (\w)")


def normalize_fragment_text(text: str) -> str:
    """Clean glyph-level artifacts in a single PDF text run."""
    text = SOFT_HYPHEN_RUN_RE.sub("-", text)
    return text.replace("\u00ad", "")


def repair_hyphenation(text: str) -> str:
    """
    Rejoin hyphenated words broken by extraction.

    Examples:
        "manage-\\nment" -> "management"
        "full -stack"    -> "full-stack"
        "self- taught"   -> "self-taught"
        "2019 - 2020"    -> "2019 - 2020" (spaced both sides: left alone)
    """
    if not text:
        return text
    text = LINEBREAK_HYPHEN_RE.sub(r"\1\2", text)
    return LOPSIDED_HYPHEN_RE.sub(
        lambda m: f"{m.group(1)}-{m.group(2)}" if m.group(1) else f"{m.group(3)}-{m.group(4)}",
        text,
    )


def despace_if_needed(text: str) -> str:
    """
    Fix PDFs that extract text with spaces between characters.

    Examples:
      'E X P E R I E N C E' -> 'EXPERIENCE'
      'J O H N   D O E' -> 'JOHN DOE'   (preserves word boundary)
    """
    t = text.strip()
    if not t:
        return t

    # Only apply when the line is mostly single characters separated by spaces
    if SPACED_CHARS_RE.match(t):
        parts = re.split(r"\s{2,}", t)
        parts = ["".join(p.split()) for p in parts]
        return " ".join([p for p in parts if p])

    return t


def title_case(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in value.lower().split())


def sentence_case(value: str) -> str:
    lower = value.lower()
    return lower[:1].upper() + lower[1:]
