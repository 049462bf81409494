"""
Scam analysis engine for call transcripts.

The pipeline:
  1. Keyword pre-filter  -- fast, local regex scan.
  2. Risk classifier     -- deeper semantic understanding.
  3. Score blending      -- 30% keyword, 70% classifier.
  4. Risk level mapping  -- green / yellow / red via fixed thresholds.

If the classifier call fails for any reason the engine degrades to
keyword-only results with a templated summary.
"""

import asyncio
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional

from config.settings import settings
from mindshield.core.classifier import (
    ClassifierError, ClassifierPayload, GeminiRiskClassifier, RiskClassifier, coerce_payload
)
from mindshield.core.keyword_filter import KeywordFilterResult, run_keyword_filter
from mindshield.core.logging import get_logger
from mindshield.core.metrics import MetricsCollector
from mindshield.core.risk_level import RiskLevel, clamp_score, get_risk_level

logger = get_logger(__name__)

# Blend weights for the keyword pre-filter and the classifier score.
KEYWORD_WEIGHT = 0.3
CLASSIFIER_WEIGHT = 0.7

# Fallback summary bands, aligned with the yellow and red thresholds.
STRONG_INDICATOR_MIN = 70
CAUTION_MIN = 35

NO_INDICATORS_SUMMARY = "No scam indicators were detected in this call based on keyword analysis."


@dataclass(frozen=True)
class ScamAnalysisResult:
    """
    Final risk assessment for one transcript.

    ``risk_level`` is derived from ``risk_score``; passing a level that
    disagrees with the score is a programming error.
    """
    risk_score: int
    risk_level: RiskLevel
    scam_categories: List[str] = field(default_factory=list)
    scam_tactics: List[str] = field(default_factory=list)
    summary: str = ""
    degraded: bool = False

    def __post_init__(self):
        if not 0 <= self.risk_score <= 100:
            raise ValueError(f"risk_score out of range: {self.risk_score}")
        if RiskLevel(self.risk_level) is not get_risk_level(self.risk_score):
            raise ValueError(
                f"risk_level {self.risk_level!r} is inconsistent with risk_score {self.risk_score}"
            )

    @classmethod
    def from_score(
        cls,
        risk_score: int,
        scam_categories: List[str],
        scam_tactics: List[str],
        summary: str,
        degraded: bool = False
    ) -> "ScamAnalysisResult":
        return cls(
            risk_score=risk_score,
            risk_level=get_risk_level(risk_score),
            scam_categories=scam_categories,
            scam_tactics=scam_tactics,
            summary=summary,
            degraded=degraded,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        return data


def combine_scores(
    keyword_score: int,
    classifier_score: int,
    keyword_weight: float = KEYWORD_WEIGHT,
    classifier_weight: float = CLASSIFIER_WEIGHT
) -> int:
    """Blend the keyword and classifier scores into a 0-100 score."""
    return clamp_score(keyword_score * keyword_weight + classifier_score * classifier_weight)


def merge_categories(*category_lists: Iterable[str]) -> List[str]:
    """Order-preserving union of category lists."""
    merged: List[str] = []
    for categories in category_lists:
        for category in categories:
            if category not in merged:
                merged.append(category)
    return merged


def build_fallback_summary(categories: List[str], score: int) -> str:
    """Human-readable summary when only keyword analysis is available."""
    if not categories:
        return NO_INDICATORS_SUMMARY

    category_list = ", ".join(categories)

    if score >= STRONG_INDICATOR_MIN:
        return (
            f"This call shows strong scam indicators in the following areas: {category_list}. "
            "Exercise extreme caution -- do not share personal information or send money."
        )

    if score >= CAUTION_MIN:
        return (
            f"This call contains some suspicious language related to: {category_list}. "
            "Please review the details carefully before taking any action."
        )

    return (
        f"Minor keyword matches were found related to: {category_list}. "
        "The call is likely safe, but stay alert."
    )


class ScamAnalysisEngine:
    """
    Combines the keyword pre-filter with a semantic risk classifier.

    The engine keeps no per-call state, so a single instance can serve
    concurrent analyses.
    """

    def __init__(
        self,
        classifier: Optional[RiskClassifier] = None,
        keyword_weight: float = KEYWORD_WEIGHT,
        classifier_weight: float = CLASSIFIER_WEIGHT,
        timeout: Optional[float] = None
    ):
        self.classifier = classifier if classifier is not None else GeminiRiskClassifier()
        self.keyword_weight = keyword_weight
        self.classifier_weight = classifier_weight
        # Applies to any classifier, not only ones that enforce their own limit.
        self.timeout = timeout if timeout is not None else settings.classifier.timeout_seconds

    async def analyze_transcript(self, transcript: str) -> ScamAnalysisResult:
        """
        Analyze a phone-call transcript for scam indicators.

        Args:
            transcript: Full transcript text of the call

        Returns:
            ScamAnalysisResult: combined assessment, or keyword-only results
            when the classifier is unavailable
        """
        keyword_result = run_keyword_filter(transcript)
        payload = await self._classify(transcript)

        if payload is not None:
            result = self._combine(keyword_result, payload)
        else:
            result = self._fallback(keyword_result)

        MetricsCollector.record_scam_analysis(result.risk_level.value, result.degraded)
        logger.info(
            "Transcript analyzed",
            extra={
                "risk_score": result.risk_score,
                "risk_level": result.risk_level.value,
                "keyword_score": keyword_result.preliminary_score,
                "degraded": result.degraded,
            }
        )
        return result

    async def _classify(self, transcript: str) -> Optional[ClassifierPayload]:
        try:
            reply = await asyncio.wait_for(self.classifier.classify(transcript), timeout=self.timeout)
            return coerce_payload(reply)
        except asyncio.TimeoutError:
            logger.warning(
                f"Risk classifier did not answer within {self.timeout} seconds, "
                "falling back to keyword-only results",
                extra={"error_type": "ClassifierTimeoutError"}
            )
        except ClassifierError as e:
            logger.warning(
                f"Risk classifier failed, falling back to keyword-only results: {e}",
                extra={"error_type": type(e).__name__, "status_code": e.status_code}
            )
        except Exception as e:
            logger.warning(
                f"Unexpected risk classifier error, falling back to keyword-only results: {e}",
                exc_info=True
            )
        return None

    def _combine(
        self,
        keyword_result: KeywordFilterResult,
        payload: ClassifierPayload
    ) -> ScamAnalysisResult:
        combined_score = combine_scores(
            keyword_result.preliminary_score,
            payload.risk_score,
            self.keyword_weight,
            self.classifier_weight,
        )
        return ScamAnalysisResult.from_score(
            combined_score,
            scam_categories=merge_categories(keyword_result.categories, payload.scam_categories),
            scam_tactics=list(payload.scam_tactics),
            summary=payload.summary,
        )

    def _fallback(self, keyword_result: KeywordFilterResult) -> ScamAnalysisResult:
        score = keyword_result.preliminary_score
        return ScamAnalysisResult.from_score(
            score,
            scam_categories=list(keyword_result.categories),
            scam_tactics=list(keyword_result.matched_phrases),
            summary=build_fallback_summary(keyword_result.categories, score),
            degraded=True,
        )


_default_engine: Optional[ScamAnalysisEngine] = None


def get_analysis_engine() -> ScamAnalysisEngine:
    """Return the process-wide engine, creating it on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ScamAnalysisEngine()
    return _default_engine


async def analyze_transcript(transcript: str) -> ScamAnalysisResult:
    """Analyze a transcript with the default engine."""
    return await get_analysis_engine().analyze_transcript(transcript)
