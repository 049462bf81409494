"""
Tests for the scam analysis engine.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, Mock

from mindshield.core.classifier import (
    ClassifierPayload, ClassifierPayloadError, ClassifierProtocolError,
    ClassifierNetworkError, ClassifierTimeoutError, ClassifierUnavailableError
)
from mindshield.core.risk_level import RiskLevel
from mindshield.core.scam_analysis import (
    ScamAnalysisEngine, ScamAnalysisResult, build_fallback_summary,
    combine_scores, merge_categories, NO_INDICATORS_SUMMARY
)

SCAM_TRANSCRIPT = "This is the IRS. Pay with a gift card immediately or you will be arrested."
BENIGN_TRANSCRIPT = "Hi, confirming your dentist appointment Friday at 9am."


def classifier_returning(payload):
    classifier = Mock()
    classifier.classify = AsyncMock(return_value=payload)
    return classifier


def classifier_raising(error):
    classifier = Mock()
    classifier.classify = AsyncMock(side_effect=error)
    return classifier


class TestCombineScores:
    """Test cases for score blending."""

    def test_boundary_lands_on_yellow(self):
        # 20 * 0.3 + 90 * 0.7 evaluates to 68.99999999999999 in floating point
        score = combine_scores(20, 90)
        assert score == 69

    def test_weights(self):
        assert combine_scores(0, 100) == 70
        assert combine_scores(100, 0) == 30
        assert combine_scores(100, 100) == 100
        assert combine_scores(0, 0) == 0

    def test_custom_weights(self):
        assert combine_scores(40, 80, keyword_weight=0.5, classifier_weight=0.5) == 60


class TestMergeCategories:
    def test_union_preserves_order(self):
        assert merge_categories(["A", "B"], ["B", "C"]) == ["A", "B", "C"]

    def test_empty(self):
        assert merge_categories([], []) == []


class TestFallbackSummary:
    """Test cases for the keyword-only summary."""

    def test_no_categories(self):
        assert build_fallback_summary([], 0) == NO_INDICATORS_SUMMARY

    def test_strong_indicators(self):
        summary = build_fallback_summary(["Financial Fraud", "Identity Theft"], 70)
        assert summary.startswith(
            "This call shows strong scam indicators in the following areas: "
            "Financial Fraud, Identity Theft."
        )

    def test_caution(self):
        summary = build_fallback_summary(["Urgency/Pressure"], 35)
        assert summary.startswith("This call contains some suspicious language related to: Urgency/Pressure.")

    def test_minor(self):
        summary = build_fallback_summary(["Urgency/Pressure"], 15)
        assert summary == (
            "Minor keyword matches were found related to: Urgency/Pressure. "
            "The call is likely safe, but stay alert."
        )


class TestScamAnalysisResult:
    """Test cases for result invariants."""

    def test_from_score_derives_level(self):
        result = ScamAnalysisResult.from_score(69, [], [], "summary")
        assert result.risk_level is RiskLevel.YELLOW

    def test_inconsistent_level_rejected(self):
        with pytest.raises(ValueError):
            ScamAnalysisResult(risk_score=80, risk_level=RiskLevel.GREEN)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            ScamAnalysisResult(risk_score=101, risk_level=RiskLevel.RED)

    def test_to_dict(self):
        data = ScamAnalysisResult.from_score(10, ["A"], ["t"], "s").to_dict()
        assert data == {
            "risk_score": 10,
            "risk_level": "green",
            "scam_categories": ["A"],
            "scam_tactics": ["t"],
            "summary": "s",
            "degraded": False,
        }


class TestScamAnalysisEngine:
    """Test cases for ScamAnalysisEngine.analyze_transcript."""

    @pytest.mark.asyncio
    async def test_combined_result(self):
        classifier = classifier_returning(ClassifierPayload(
            risk_score=94,
            scam_categories=["Government Impersonation", "Debt Collection Scam"],
            scam_tactics=["Fear/Threats"],
            summary="Classic IRS impersonation scam."
        ))
        engine = ScamAnalysisEngine(classifier=classifier)

        result = await engine.analyze_transcript(SCAM_TRANSCRIPT)

        # 80 * 0.3 + 94 * 0.7 = 24 + 65.8 = 89.8 -> 90
        assert result.risk_score == 90
        assert result.risk_level is RiskLevel.RED
        assert result.scam_categories == [
            "Government Impersonation",
            "Financial Fraud",
            "Urgency/Pressure",
            "Threats/Intimidation",
            "Debt Collection Scam",
        ]
        assert result.scam_tactics == ["Fear/Threats"]
        assert result.summary == "Classic IRS impersonation scam."
        assert result.degraded is False
        classifier.classify.assert_awaited_once_with(SCAM_TRANSCRIPT)

    @pytest.mark.asyncio
    async def test_classifier_score_dominates_keywords(self):
        classifier = classifier_returning(ClassifierPayload(
            risk_score=92, scam_categories=[], scam_tactics=[], summary="Suspicious."
        ))
        engine = ScamAnalysisEngine(classifier=classifier)

        # "urgent" -> 10 * 1.5 = 15; 15 * 0.3 + 92 * 0.7 = 68.9 -> 69
        result = await engine.analyze_transcript("This is urgent.")
        assert result.risk_score == 69
        assert result.risk_level is RiskLevel.YELLOW

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ClassifierNetworkError("connection refused"),
        ClassifierTimeoutError("timed out"),
        ClassifierProtocolError("Classifier API error (HTTP 500)", status_code=500),
        ClassifierPayloadError("Classifier response is missing a summary string"),
        ClassifierUnavailableError("Risk classifier is not configured"),
        RuntimeError("unexpected"),
    ])
    async def test_fallback_on_classifier_failure(self, error):
        engine = ScamAnalysisEngine(classifier=classifier_raising(error))

        result = await engine.analyze_transcript(SCAM_TRANSCRIPT)

        assert result.degraded is True
        assert result.risk_score == 80
        assert result.risk_level is RiskLevel.RED
        assert set(result.scam_categories) == {
            "Government Impersonation",
            "Financial Fraud",
            "Threats/Intimidation",
            "Urgency/Pressure",
        }
        assert result.scam_tactics == ["IRS", "gift card", "immediately", "arrested"]
        assert result.summary.startswith("This call shows strong scam indicators")

    @pytest.mark.asyncio
    async def test_benign_call_fallback(self):
        engine = ScamAnalysisEngine(classifier=classifier_raising(ClassifierNetworkError("down")))

        result = await engine.analyze_transcript(BENIGN_TRANSCRIPT)

        assert result.risk_score == 0
        assert result.risk_level is RiskLevel.GREEN
        assert result.scam_categories == []
        assert result.summary == NO_INDICATORS_SUMMARY

    @pytest.mark.asyncio
    async def test_empty_transcript(self):
        classifier = classifier_returning(ClassifierPayload(
            risk_score=0, scam_categories=[], scam_tactics=[], summary="Nothing was said."
        ))
        result = await ScamAnalysisEngine(classifier=classifier).analyze_transcript("")

        assert result.risk_score == 0
        assert result.risk_level is RiskLevel.GREEN

    @pytest.mark.asyncio
    async def test_concurrent_analyses_are_independent(self):
        engine = ScamAnalysisEngine(classifier=classifier_raising(ClassifierNetworkError("down")))

        scam, benign = await asyncio.gather(
            engine.analyze_transcript(SCAM_TRANSCRIPT),
            engine.analyze_transcript(BENIGN_TRANSCRIPT),
        )

        assert scam.risk_score == 80
        assert benign.risk_score == 0

    @pytest.mark.asyncio
    async def test_deterministic_with_same_classifier_output(self):
        payload = ClassifierPayload(risk_score=40, scam_categories=["A"], scam_tactics=[], summary="s")
        engine = ScamAnalysisEngine(classifier=classifier_returning(payload))

        first = await engine.analyze_transcript(SCAM_TRANSCRIPT)
        second = await engine.analyze_transcript(SCAM_TRANSCRIPT)
        assert first == second

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [
        {"risk_score": 90},
        ClassifierPayload(risk_score="90", scam_categories=[], scam_tactics=[], summary="s"),
        ClassifierPayload(risk_score=90, scam_categories=None, scam_tactics=[], summary="s"),
        ClassifierPayload(risk_score=90, scam_categories=[], scam_tactics=[], summary=None),
        ClassifierPayload(risk_score=float("nan"), scam_categories=[], scam_tactics=[], summary="s"),
        "risk_score: 90",
        None,
    ])
    async def test_fallback_on_malformed_classifier_reply(self, reply):
        engine = ScamAnalysisEngine(classifier=classifier_returning(reply))

        result = await engine.analyze_transcript(SCAM_TRANSCRIPT)

        assert result.degraded is True
        assert result.risk_score == 80
        assert result.summary.startswith("This call shows strong scam indicators")

    @pytest.mark.asyncio
    async def test_mapping_reply_is_validated_and_clamped(self):
        engine = ScamAnalysisEngine(classifier=classifier_returning({
            "risk_score": 140.2,
            "scam_categories": ["Tech Support Scam"],
            "scam_tactics": ["Remote Access"],
            "summary": "Fake support agent.",
        }))

        result = await engine.analyze_transcript(BENIGN_TRANSCRIPT)

        # 0 * 0.3 + 100 * 0.7
        assert result.risk_score == 70
        assert result.scam_categories == ["Tech Support Scam"]
        assert result.degraded is False

    @pytest.mark.asyncio
    async def test_hanging_classifier_times_out_to_fallback(self):
        async def never_answers(transcript):
            await asyncio.Event().wait()

        classifier = Mock()
        classifier.classify = never_answers
        engine = ScamAnalysisEngine(classifier=classifier, timeout=0.05)

        result = await asyncio.wait_for(engine.analyze_transcript(SCAM_TRANSCRIPT), timeout=5)

        assert result.degraded is True
        assert result.risk_score == 80

    def test_timeout_defaults_to_classifier_setting(self):
        from config.settings import settings

        engine = ScamAnalysisEngine(classifier=classifier_raising(ClassifierNetworkError("down")))
        assert engine.timeout == settings.classifier.timeout_seconds
