"""
Feature-scored line selection.

Field extraction is expressed as data: each target field owns a list of
FeatureSets (predicate + signed weight). Every candidate line is scored by
summing the weights of the predicates it satisfies; the best line wins only if
it clears the caller's threshold. Nothing here ever invents a value: below the
threshold the field is simply unresolved.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

FeatureTest = Callable[[str], Any]


@dataclass(frozen=True)
class FeatureSet:
    """A weighted predicate over a candidate line.

    `test` may return a bool, a string, a number, a regex match, a sequence or
    None. When `captures` is set, a match records the matched substring (or the
    whole line for boolean results) as the candidate's captured value.
    """
    test: FeatureTest
    weight: float
    captures: bool = False


@dataclass
class ScoredCandidate:
    line: str
    score: float
    index: int = -1
    captured: Optional[str] = None

    @property
    def value(self) -> str:
        """Captured substring when present, else the whole line."""
        return self.captured if self.captured is not None else self.line


def _matched(result: Any) -> bool:
    if result is None or result is False:
        return False
    if result is True:
        return True
    if isinstance(result, re.Match):
        return True
    if isinstance(result, (list, tuple)):
        return len(result) > 0
    if isinstance(result, str):
        return bool(result)
    if isinstance(result, (int, float)):
        return True
    return bool(result)


def _capture_value(result: Any, line: str) -> Optional[str]:
    if isinstance(result, re.Match):
        return result.group(0) or line
    if isinstance(result, (list, tuple)) and result and isinstance(result[0], str):
        return result[0]
    if isinstance(result, str):
        return result
    return line


def score_line(line: str, feature_sets: List[FeatureSet]) -> ScoredCandidate:
    """Score one line against every feature set."""
    score = 0.0
    captured: Optional[str] = None
    for feature in feature_sets:
        result = feature.test(line)
        if not _matched(result):
            continue
        score += feature.weight
        if feature.captures:
            captured = _capture_value(result, line)
    return ScoredCandidate(line=line, score=score, captured=captured)


def pick_best_line(
    lines: List[str],
    feature_sets: List[FeatureSet],
    threshold: float = 0,
    prefer_capture: bool = False,
    allow_empty: bool = False,
    disallow: Optional[Callable[[str], bool]] = None,
) -> Optional[ScoredCandidate]:
    """
    Pick the highest scoring candidate line.

    Selection rules:
      - strictly higher score replaces the current best
      - on a tie, the first candidate that produced a capture is preferred
      - with prefer_capture, a capturing candidate replaces a non-capturing best
        regardless of score
    The selected candidate is returned only if its score >= threshold, so the
    threshold never changes *which* line is selected, only whether it resolves.

    Args:
        lines: Candidate lines (trimmed before scoring)
        feature_sets: Predicates and weights for the target field
        threshold: Minimum winning score for the field to resolve
        prefer_capture: Favor candidates with a captured value
        allow_empty: Score blank lines instead of skipping them
        disallow: Lines for which this returns True are never candidates

    Returns:
        The winning ScoredCandidate, or None when the field is unresolved
    """
    best: Optional[ScoredCandidate] = None

    for i, raw in enumerate(lines):
        line = raw.strip()
        if not line and not allow_empty:
            continue
        if disallow is not None and disallow(line):
            continue
        scored = score_line(line, feature_sets)
        scored.index = i

        if best is None or scored.score > best.score:
            best = scored
        elif scored.captured is not None and best.captured is None:
            if prefer_capture or scored.score == best.score:
                best = scored

    if best is not None and best.score >= threshold:
        return best
    if best is not None:
        logger.debug("Best candidate %r scored %.1f, below threshold %.1f", best.line, best.score, threshold)
    return None


def penalize_match(value: Optional[str], penalty: float) -> FeatureSet:
    """Feature that fires on lines containing `value` (e.g. a line already claimed by another field)."""
    return FeatureSet(test=lambda line: bool(value) and value in line, weight=penalty)
