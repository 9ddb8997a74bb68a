"""
Subsection division: splitting one section into entries (one job, one degree).

Geometry mode looks at the vertical rhythm of the section's raw lines: the most
common line-to-line gap is the normal pitch and a noticeably larger gap opens a
new entry. Tightly spaced single-column PDFs have no such gap, so a second pass
splits wherever a regular line is followed by a bold one.

Text mode has no geometry and uses per-section header predicates instead.
"""

from collections import Counter
from typing import Callable, Iterable, List, Optional

from app.config import get_settings
from app.core.layout import Line, line_text
from app.core.text_normalization import is_bold_fragment, starts_with_bullet

SplitPredicate = Callable[[Line, Line], bool]


def _first_y(line: Line) -> float:
    return line[0].y if line else 0.0


def modal_line_gap(lines: List[Line]) -> int:
    """Most frequent rounded gap between consecutive lines (first to reach the max count wins)."""
    counts: Counter = Counter()
    best_gap = 0
    best_count = 0
    for prev, cur in zip(lines, lines[1:]):
        gap = round(_first_y(prev) - _first_y(cur))
        counts[gap] += 1
        if counts[gap] > best_count:
            best_gap = gap
            best_count = counts[gap]
    return best_gap


def split_by_line_gap(lines: List[Line], multiplier: float) -> SplitPredicate:
    threshold = modal_line_gap(lines) * multiplier

    def is_new_subsection(line: Line, prev: Line) -> bool:
        return round(_first_y(prev) - _first_y(line)) > threshold

    return is_new_subsection


def split_by_bold_transition(line: Line, prev: Line) -> bool:
    if not line or not prev:
        return False
    first = line[0]
    return (
        not is_bold_fragment(prev[0])
        and is_bold_fragment(first)
        and not starts_with_bullet(first.text)
    )


def create_subsections(lines: List[Line], predicate: SplitPredicate) -> List[List[Line]]:
    groups: List[List[Line]] = []
    current: List[Line] = []
    for index, line in enumerate(lines):
        if index > 0 and predicate(line, lines[index - 1]):
            groups.append(current)
            current = []
        current.append(line)
    if current:
        groups.append(current)
    return groups


def divide_section_into_subsections(
    lines: List[Line],
    multiplier: Optional[float] = None,
) -> List[List[Line]]:
    """
    Partition a section's raw lines into entries.

    The groups are contiguous, disjoint and concatenate back to `lines`.

    Args:
        lines: Raw geometric lines of one section
        multiplier: Gap multiple of the modal pitch that opens an entry
            (defaults to settings.subsection_gap_multiplier)
    """
    if not lines:
        return []
    if multiplier is None:
        multiplier = get_settings().subsection_gap_multiplier

    subsections = create_subsections(lines, split_by_line_gap(lines, multiplier))
    if len(subsections) == 1:
        subsections = create_subsections(lines, split_by_bold_transition)
    return subsections


def subsection_texts(lines: List[Line], multiplier: Optional[float] = None) -> List[List[str]]:
    """Geometric subsections rendered as non-blank text lines."""
    groups = []
    for group in divide_section_into_subsections(lines, multiplier):
        texts = [text for text in (line_text(line) for line in group) if text]
        if texts:
            groups.append(texts)
    return groups


def split_text_subsections(
    lines: Iterable[str],
    is_header: Callable[[str, List[str]], bool],
) -> List[List[str]]:
    """
    Split flat section lines into entries.

    A blank line always closes the current entry. A line for which
    is_header(line, current_entry) holds closes a non-empty entry and opens the
    next one.
    """
    groups: List[List[str]] = []
    current: List[str] = []

    for raw in lines:
        line = raw.strip()
        if not line:
            if current:
                groups.append(current)
            current = []
            continue
        if current and is_header(line, current):
            groups.append(current)
            current = []
        current.append(line)

    if current:
        groups.append(current)
    return groups
