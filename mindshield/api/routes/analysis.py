"""
Transcript analysis endpoints.
"""

from fastapi import APIRouter, Depends

from mindshield.api.dependencies import get_engine
from mindshield.core.auth import verify_api_key
from mindshield.core.keyword_filter import run_keyword_filter
from mindshield.core.logging import get_logger
from mindshield.core.scam_analysis import ScamAnalysisEngine
from mindshield.schemas import KeywordFilterResponse, ScamAnalysisResponse, TranscriptRequest

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/analysis", response_model=ScamAnalysisResponse)
async def analyze(
    request_data: TranscriptRequest,
    engine: ScamAnalysisEngine = Depends(get_engine)
):
    """
    Run the full scam analysis on a transcript.

    Falls back to keyword-only results (``degraded`` is true) when the risk
    classifier is unavailable.
    """
    result = await engine.analyze_transcript(request_data.transcript)
    return ScamAnalysisResponse.from_result(result)


@router.post("/analysis/keywords", response_model=KeywordFilterResponse)
async def analyze_keywords(request_data: TranscriptRequest):
    """Run only the local keyword pre-filter."""
    result = run_keyword_filter(request_data.transcript)
    return KeywordFilterResponse(**result.to_dict())
