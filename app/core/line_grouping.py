"""
Line reconstruction from positioned PDF text fragments.

PDF renderers often emit one visual word as several adjacent fragments (font
switches mid-word, kerning runs, ligatures). This module groups fragments into
visual lines at end-of-line markers and then merges fragments whose horizontal
gap is no wider than the document's typical character width.

Deterministic and idempotent for a fixed character width: once merged, every
remaining gap is wider than that width, so a second pass is a no-op. Merged
fragments span the gaps they absorbed, so the width must come from the raw
fragments and be passed back in when re-grouping.
"""

from collections import Counter
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from app.core.layout import Line, TextFragment
from app.core.text_normalization import BULLET_POINTS


SPACE_AFTER_CHARS = [":", ",", "|", ".", *BULLET_POINTS]
SPACE_BEFORE_CHARS = ["|", *BULLET_POINTS]


def split_fragments_at_line_ends(fragments: Iterable[TextFragment]) -> List[Line]:
    """
    Group fragments into lines terminated by end_of_line fragments.

    Blank fragments are dropped unless they carry the end-of-line flag, in which
    case they still close the current line. Empty lines are discarded.
    """
    lines: List[Line] = []
    current: Line = []

    for fragment in fragments:
        if fragment.end_of_line:
            if fragment.text.strip():
                current.append(fragment)
            lines.append(current)
            current = []
        elif fragment.text.strip():
            current.append(fragment)

    if current:
        lines.append(current)

    return [line for line in lines if line]


def typical_char_width(fragments: Sequence[TextFragment]) -> float:
    """
    Approximate the body font's per-character pitch.

    Only fragments sharing the most frequent (height, font) pair contribute, so
    large headings or small footers don't skew the estimate.

    Returns:
        sum(width) / sum(len(text)) over those fragments, or 0.0 if none
    """
    filtered = [f for f in fragments if f.text.strip()]
    if not filtered:
        return 0.0

    counts: Counter = Counter()
    common: Tuple[float, str] = (filtered[0].height, filtered[0].font_name)
    best_count = 0
    for fragment in filtered:
        key = (fragment.height, fragment.font_name)
        counts[key] += 1
        # first pair to reach a new maximum wins ties
        if counts[key] > best_count:
            best_count = counts[key]
            common = key

    width_sum = 0.0
    char_count = 0
    for fragment in filtered:
        if (fragment.height, fragment.font_name) == common:
            width_sum += fragment.width
            char_count += len(fragment.text)

    return width_sum / char_count if char_count else 0.0


def should_add_space(left: str, right: str) -> bool:
    """Insert a space at a merge junction only across punctuation/bullet boundaries."""
    if not left or not right:
        return False
    left_char = left[-1]
    right_char = right[0]
    if left_char in SPACE_AFTER_CHARS and right_char != " ":
        return True
    if left_char != " " and right_char in SPACE_BEFORE_CHARS:
        return True
    return False


def merge_adjacent_fragments(line: Line, char_width: float) -> Line:
    """
    Merge fragments separated by a gap <= char_width, scanning right to left.

    The surviving (left) fragment absorbs the right one's text and its width is
    extended to the right fragment's far edge.
    """
    merged = list(line)
    for index in range(len(merged) - 1, 0, -1):
        current = merged[index]
        left = merged[index - 1]
        distance = current.x - left.right
        if distance > char_width:
            continue
        separator = " " if should_add_space(left.text, current.text) else ""
        merged[index - 1] = replace(
            left,
            text=left.text + separator + current.text,
            width=current.right - left.x,
            end_of_line=left.end_of_line or current.end_of_line,
        )
        del merged[index]
    return merged


def group_fragments_into_lines(fragments: Sequence[TextFragment], char_width: Optional[float] = None) -> List[Line]:
    """
    Full line reconstruction: split at line ends, then repair intra-word splits.

    Args:
        fragments: Fragments in extraction order
        char_width: Merge threshold; estimated from the fragments when omitted

    Returns:
        Visual lines in reading order, each with a reduced fragment count
    """
    lines = split_fragments_at_line_ends(fragments)
    if char_width is None:
        char_width = typical_char_width([fragment for line in lines for fragment in line])
    return [merge_adjacent_fragments(line, char_width) for line in lines]
