"""
Date and date-range helpers.

Resume dates come in many shapes ("Jan 2020", "January, 2020", "01/2020",
"2020-01", "2016"). Everything resolvable is normalized to "YYYY-MM"; anything
else is left unresolved rather than guessed. Open-ended ranges ("- Present")
resolve to no end date.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


DATE_FORMATS = [
    "%b %Y",   # Jan 2020
    "%B %Y",   # January 2020
    "%b, %Y",  # Jan, 2020
    "%B, %Y",  # January, 2020
    "%Y",      # 2020
    "%m/%Y",   # 01/2020
    "%m/%y",   # 01/20
    "%Y-%m",   # 2020-01
]

MONTH = (
    r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
YEAR = r"\b(?:19|20)\d{2}\b"
NUMERIC_MONTH_YEAR = rf"\b(?:0?[1-9]|1[0-2])[/.-](?:{YEAR}|\d{{2}}\b)"
ISO_MONTH = rf"{YEAR}-(?:0[1-9]|1[0-2])\b"

# "to" only as a whole word: "Jan 2019 Toronto" is not a range
DATE_RANGE_RE = re.compile(
    rf"({ISO_MONTH}|{MONTH}\b\.?[\s,]*(?:{YEAR})?|{NUMERIC_MONTH_YEAR}|{YEAR})"
    rf"\s*(?:\bto\b|[-–—])\s*"
    rf"(\b(?:present|current)\b|{ISO_MONTH}|{MONTH}\b\.?[\s,]*{YEAR}|{NUMERIC_MONTH_YEAR}|{YEAR})?",
    re.IGNORECASE,
)
OPEN_ENDED_RE = re.compile(r"present|current", re.IGNORECASE)
SINGLE_DATE_RE = re.compile(rf"{MONTH}\.?[\s,]*{YEAR}|\b\d{{1,2}}/{YEAR}|{YEAR}", re.IGNORECASE)
NUMERIC_SEPARATOR_RE = re.compile(r"^(\d{1,2})[.-](\d{2,4})$")


@dataclass(frozen=True)
class DateRangeMatch:
    raw: str
    start_text: str
    end_text: str
    index: int

    @property
    def is_open_ended(self) -> bool:
        return bool(OPEN_ENDED_RE.search(self.end_text))


def parse_date(value: Optional[str]) -> Optional[str]:
    """
    Normalize a single date expression to "YYYY-MM".

    Returns None for open-ended markers ("Present", "Current") and for anything
    that does not match one of DATE_FORMATS exactly.
    """
    if not value:
        return None
    text = " ".join(value.strip().strip(".,").split())
    if not text or OPEN_ENDED_RE.fullmatch(text):
        return None

    text = re.sub(r"\bSept\b", "Sep", text, flags=re.IGNORECASE)
    text = re.sub(r"\s*,\s*", ", ", text)
    text = NUMERIC_SEPARATOR_RE.sub(r"\1/\2", text)

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.strftime("%Y-%m")
    return None


def match_date_range(text: str) -> Optional[DateRangeMatch]:
    """
    Find the first "start - end" date range in text.

    A missing end ("Jan 2020 -") is treated as open-ended, like "Present".
    """
    if not text:
        return None
    m = DATE_RANGE_RE.search(text)
    if not m:
        return None
    return DateRangeMatch(
        raw=m.group(0).strip(),
        start_text=(m.group(1) or "").strip(),
        end_text=(m.group(2) or "present").strip(),
        index=m.start(),
    )


def parse_date_range(text: str) -> Dict[str, Optional[str]]:
    """Return {"start_date": ..., "end_date": ...} for the first range in text."""
    match = match_date_range(text)
    if not match:
        return {"start_date": None, "end_date": None}
    return {
        "start_date": parse_date(match.start_text),
        "end_date": None if match.is_open_ended else parse_date(match.end_text),
    }


def find_date(text: Optional[str]) -> Optional[str]:
    """Normalize the first date expression found anywhere in text ("Issued Jan 2021" -> "2021-01")."""
    if not text:
        return None
    m = SINGLE_DATE_RE.search(text)
    if not m:
        return None
    return parse_date(m.group(0).replace(".", ""))
