"""
Call history endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from mindshield.api.dependencies import get_pipeline
from mindshield.core.auth import verify_api_key
from mindshield.core.logging import get_logger
from mindshield.core.risk_level import RiskLevel
from mindshield.database.connection import get_db
from mindshield.database.utils import CallRecordRepository
from mindshield.schemas import CallRecordResponse, DeleteResponse
from mindshield.services.recording_pipeline import MissingTranscriptError, RecordingPipeline

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])


def _not_found(call_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Call {call_id} not found"
    )


@router.get("/calls", response_model=List[CallRecordResponse])
async def list_calls(risk_level: Optional[RiskLevel] = None, db: Session = Depends(get_db)):
    """List analysed calls, newest first, optionally filtered by risk level."""
    repo = CallRecordRepository(db)
    records = repo.get_all_call_records(risk_level.value if risk_level else None)
    return [CallRecordResponse.from_record(record) for record in records]


@router.get("/calls/high-risk", response_model=List[CallRecordResponse])
async def list_high_risk_calls(db: Session = Depends(get_db)):
    """Red calls that have not been dismissed."""
    records = CallRecordRepository(db).get_undismissed_high_risk_calls()
    return [CallRecordResponse.from_record(record) for record in records]


@router.get("/calls/pending", response_model=List[CallRecordResponse])
async def list_pending_calls(db: Session = Depends(get_db)):
    records = CallRecordRepository(db).get_pending_calls()
    return [CallRecordResponse.from_record(record) for record in records]


@router.get("/calls/{call_id}", response_model=CallRecordResponse)
async def get_call(call_id: str, db: Session = Depends(get_db)):
    record = CallRecordRepository(db).get_call_record_by_id(call_id)
    if record is None:
        raise _not_found(call_id)
    return CallRecordResponse.from_record(record)


@router.post("/calls/{call_id}/dismiss", response_model=CallRecordResponse)
async def dismiss_call(call_id: str, db: Session = Depends(get_db)):
    """Hide a call from the high-risk alert list."""
    record = CallRecordRepository(db).dismiss_call(call_id)
    if record is None:
        raise _not_found(call_id)
    return CallRecordResponse.from_record(record)


@router.post("/calls/{call_id}/reanalyze", response_model=CallRecordResponse)
async def reanalyze_call(call_id: str, pipeline: RecordingPipeline = Depends(get_pipeline)):
    """Rerun scam analysis on the stored transcript of a call."""
    try:
        record = await pipeline.reanalyze_call(call_id)
    except MissingTranscriptError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if record is None:
        raise _not_found(call_id)
    return CallRecordResponse.from_record(record)


@router.delete("/calls", response_model=DeleteResponse)
async def delete_all_calls(db: Session = Depends(get_db)):
    """Delete all call history and the flagged number database."""
    repo = CallRecordRepository(db)
    deleted_calls = repo.delete_all_call_records()
    deleted_numbers = repo.delete_all_flagged_numbers()
    logger.warning(
        "All call data cleared",
        extra={"deleted_calls": deleted_calls, "deleted_flagged_numbers": deleted_numbers}
    )
    return DeleteResponse(deleted_calls=deleted_calls, deleted_flagged_numbers=deleted_numbers)
