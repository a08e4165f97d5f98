import re
from typing import Sequence

BASE_CONFIDENCE = 0.8
MIN_CONFIDENCE = 0.7
MAX_CONFIDENCE = 0.95
SYNTHESIZED_FLOOR = 0.85
HIGH_QUALITY_SCORE = 0.5

_list_marker_re = re.compile(r"^\s*(?:[-*+•]|\d+\.)\s+", re.MULTILINE)


def clamp(value: float, lo: float = MIN_CONFIDENCE, hi: float = MAX_CONFIDENCE) -> float:
    return min(hi, max(lo, value))


def looks_synthesized(text: str) -> bool:
    """
    Heuristic: long, not a raw table/chapter excerpt, and carrying markdown
    list or emphasis markers. Long extractive answers that happen to contain
    bullets will also pass.
    """
    if len(text) <= 200:
        return False
    if "Table 3." in text or "Chapter" in text or text.startswith("Table"):
        return False
    return "•" in text or "*" in text or bool(_list_marker_re.search(text))


def score_confidence(
    scores: Sequence[float],
    answer_text: str,
    reported: float | None = None,
) -> float:
    confidence = BASE_CONFIDENCE

    if scores:
        max_score = max(scores)
        avg_score = sum(scores) / len(scores)
        high_quality = sum(1 for s in scores if s > HIGH_QUALITY_SCORE)
        confidence = clamp(
            max_score * 0.6 + avg_score * 0.3 + min(high_quality / 5, 0.1)
        )
    elif reported is not None:
        confidence = clamp(reported)

    if looks_synthesized(answer_text or ""):
        confidence = min(MAX_CONFIDENCE, max(confidence, SYNTHESIZED_FLOOR))

    return confidence
