"""
Keyword pre-filter for call transcripts.

Fast, local regex scan against the pattern catalog. Each pattern contributes
its weight at most once, however often it occurs in the transcript.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List

from mindshield.core.patterns import SCAM_PATTERNS, ScamPattern
from mindshield.core.risk_level import clamp_score

# Applied to the raw weight sum. Calibrated so that a few high-weight hits
# land in the caution band (35-69) and several categories push into danger.
SCORE_SCALING_FACTOR = 1.5


@dataclass(frozen=True)
class KeywordFilterResult:
    """Outcome of the keyword scan for one transcript."""
    matched_phrases: List[str] = field(default_factory=list)
    preliminary_score: int = 0
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def run_keyword_filter(
    transcript: str,
    patterns: Iterable[ScamPattern] = SCAM_PATTERNS
) -> KeywordFilterResult:
    """
    Scan a transcript for scam keywords.

    Args:
        transcript: Full call transcript, may be empty
        patterns: Catalog to scan with (defaults to the built-in catalog)

    Returns:
        KeywordFilterResult: matched phrases in catalog order, the scaled
        preliminary score and the distinct categories that matched
    """
    matched_phrases: List[str] = []
    categories: List[str] = []
    raw_score = 0

    if transcript:
        for entry in patterns:
            match = entry.matcher.search(transcript)
            if match is None:
                continue
            matched_phrases.append(match.group(0))
            if entry.category not in categories:
                categories.append(entry.category)
            raw_score += entry.weight

    return KeywordFilterResult(
        matched_phrases=matched_phrases,
        preliminary_score=clamp_score(raw_score * SCORE_SCALING_FACTOR),
        categories=categories,
    )
